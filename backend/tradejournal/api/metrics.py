from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tradejournal.api.trades import trade_filter
from tradejournal.journal.filters import TradeFilter
from tradejournal.journal.metrics import Rollup, by_month, by_strategy, by_ticker
from tradejournal.services.journal import journal

router = APIRouter(prefix="/api/metrics", tags=["metrics"])

class MetricsResponse(BaseModel):
    total_trades: int
    total_wins: int
    total_losses: int
    total_pl: float
    win_rate: float
    average_win: float
    average_loss: float
    largest_win: float
    largest_loss: float
    profit_factor: float

class RollupRow(BaseModel):
    key: str
    trades: int
    wins: int
    losses: int
    total_pl: float
    win_rate: float

class RollupsResponse(BaseModel):
    strategy: List[RollupRow]
    ticker: List[RollupRow]
    month: List[RollupRow]

def _rows(items: List[Rollup]) -> List[RollupRow]:
    return [RollupRow(**r.__dict__) for r in items]

@router.get("", response_model=MetricsResponse)
def metrics(flt: TradeFilter = Depends(trade_filter)):
    return MetricsResponse(**journal.metrics(flt).__dict__)

@router.get("/rollups", response_model=RollupsResponse)
def rollups(flt: TradeFilter = Depends(trade_filter)):
    trades = journal.list_trades(flt)
    return RollupsResponse(
        strategy=_rows(by_strategy(trades)),
        ticker=_rows(by_ticker(trades)),
        month=_rows(by_month(trades)),
    )
