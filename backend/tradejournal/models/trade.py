from sqlalchemy import Column, Date, DateTime, Float, Integer, String, Text
from tradejournal.db.database import Base

class Trade(Base):
    __tablename__ = "trades"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, index=True, nullable=False)
    ticker = Column(String, index=True, nullable=False)
    strategy = Column(String, index=True, nullable=False)
    option_type = Column(String)
    strike = Column(Float)
    expiration = Column(Date)
    quantity = Column(Integer, nullable=False, default=1)
    entry_price = Column(Float)
    exit_price = Column(Float)
    premium = Column(Float, nullable=False, default=0.0)
    fees = Column(Float, nullable=False)
    net_pl = Column(Float, nullable=False)
    outcome = Column(String, nullable=False)
    delta = Column(Float)
    gamma = Column(Float)
    theta = Column(Float)
    vega = Column(Float)
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))
