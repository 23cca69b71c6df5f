from datetime import date, datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from tradejournal.core.config import settings
from tradejournal.journal.errors import TradeNotFoundError
from tradejournal.journal.filters import TradeFilter
from tradejournal.journal.trades import TradeRecord, make_trade
from tradejournal.services.journal import journal

router = APIRouter(prefix="/api/trades", tags=["trades"])

class TradeIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    date: date
    ticker: str = Field(..., min_length=1, max_length=20)
    strategy: Optional[str] = Field(None, max_length=120)
    option_type: Optional[str] = Field(None, max_length=20)
    strike: Optional[float] = Field(None, ge=0)
    expiration: Optional[date] = None
    quantity: int = Field(1, ge=1)
    entry_price: Optional[float] = Field(None, ge=0)
    exit_price: Optional[float] = Field(None, ge=0)
    premium: float = 0.0
    fees: Optional[float] = None  # omitted -> default brokerage fee
    delta: Optional[float] = None
    gamma: Optional[float] = None
    theta: Optional[float] = None
    vega: Optional[float] = None
    notes: str = ""

    def to_record(self) -> TradeRecord:
        return make_trade(**self.model_dump(), default_fee=settings.default_fee)

class TradeOut(BaseModel):
    id: int
    date: date
    ticker: str
    strategy: str
    option_type: Optional[str] = None
    strike: Optional[float] = None
    expiration: Optional[date] = None
    quantity: int
    entry_price: Optional[float] = None
    exit_price: Optional[float] = None
    premium: float
    fees: float
    net_pl: float
    outcome: Literal["Win", "Loss"]
    delta: Optional[float] = None
    gamma: Optional[float] = None
    theta: Optional[float] = None
    vega: Optional[float] = None
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, t: TradeRecord) -> "TradeOut":
        return cls(**t.to_dict())

class TradeMutation(BaseModel):
    trade: TradeOut
    current_balance: float
    warning: Optional[str] = None

def trade_filter(
    ticker: Optional[str] = None,
    strategy: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> TradeFilter:
    if date_from and date_to and date_from > date_to:
        raise HTTPException(status_code=400, detail="date_from must be <= date_to")
    return TradeFilter(ticker=ticker, strategy=strategy, date_from=date_from, date_to=date_to)

def _mutation(t: TradeRecord) -> TradeMutation:
    return TradeMutation(
        trade=TradeOut.from_record(t),
        current_balance=journal.state.portfolio.current_balance,
        warning=journal.warning,
    )

@router.get("", response_model=List[TradeOut])
def list_trades(flt: TradeFilter = Depends(trade_filter), limit: int = 500, offset: int = 0):
    if limit < 1 or limit > 5000:
        raise HTTPException(status_code=400, detail="limit must be 1..5000")
    if offset < 0:
        raise HTTPException(status_code=400, detail="offset must be >= 0")

    trades = journal.list_trades(flt)
    return [TradeOut.from_record(t) for t in trades[offset:offset + limit]]

@router.post("", response_model=TradeMutation, status_code=201)
def create_trade(req: TradeIn):
    try:
        trade = journal.add_trade(req.to_record())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _mutation(trade)

@router.get("/{trade_id}", response_model=TradeOut)
def get_trade(trade_id: int):
    try:
        return TradeOut.from_record(journal.get_trade(trade_id))
    except TradeNotFoundError:
        raise HTTPException(status_code=404, detail="not found")

@router.put("/{trade_id}", response_model=TradeMutation)
def update_trade(trade_id: int, req: TradeIn):
    try:
        trade = journal.edit_trade(trade_id, req.to_record())
    except TradeNotFoundError:
        raise HTTPException(status_code=404, detail="not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _mutation(trade)

@router.delete("/{trade_id}", response_model=TradeMutation)
def delete_trade(trade_id: int):
    try:
        trade = journal.delete_trade(trade_id)
    except TradeNotFoundError:
        raise HTTPException(status_code=404, detail="not found")
    return _mutation(trade)
