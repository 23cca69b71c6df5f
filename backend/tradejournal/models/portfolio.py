from sqlalchemy import Column, DateTime, Float, Integer, String
from tradejournal.db.database import Base

SETTINGS_ID = "main"

class PortfolioSettings(Base):
    __tablename__ = "portfolio_settings"

    id = Column(String, primary_key=True, default=SETTINGS_ID)
    starting_capital = Column(Float, nullable=False, default=0.0)
    current_balance = Column(Float, nullable=False, default=0.0)
    adjustments = Column(Float, nullable=False, default=0.0)
    last_updated = Column(DateTime(timezone=True))

class PortfolioHistory(Base):
    __tablename__ = "portfolio_history"

    id = Column(Integer, primary_key=True, index=True)
    at = Column(DateTime(timezone=True), index=True, nullable=False)
    balance = Column(Float, nullable=False)
    reason = Column(String, nullable=False, default="")
