import os
import tempfile
from datetime import date

import pytest

_TMP = tempfile.mkdtemp(prefix="tradejournal-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'journal.db')}"
os.environ["NOTES_DB_PATH"] = os.path.join(_TMP, "notes.db")

from tradejournal.journal.trades import make_trade  # noqa: E402

@pytest.fixture
def trade_factory():
    def _make(net_pl=None, **kw):
        kw.setdefault("date", date(2024, 1, 15))
        kw.setdefault("ticker", "spy")
        kw.setdefault("strategy", "Iron Condor")
        if net_pl is not None:
            kw["net_pl"] = net_pl
        return make_trade(**kw)
    return _make

@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from tradejournal.db.database import Base, engine, init_db
    from tradejournal.main import app
    from tradejournal.services.journal import journal
    from tradejournal.storage.db import get_conn

    init_db()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with get_conn() as conn:
        conn.execute("DELETE FROM journal_notes")
        conn.commit()
    journal.reload()

    with TestClient(app) as c:
        yield c
