from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from tradejournal.core.config import settings

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()

def init_db() -> None:
    # register the mapped tables before create_all
    from tradejournal.models import portfolio, trade  # noqa: F401

    Base.metadata.create_all(bind=engine)
