from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tradejournal.api.trades import trade_filter
from tradejournal.journal.charts import Series, equity_curve, monthly_pl, pl_by_strategy, pl_by_ticker, win_loss_split
from tradejournal.journal.filters import TradeFilter
from tradejournal.services.journal import journal

router = APIRouter(prefix="/api/charts", tags=["charts"])

class SeriesOut(BaseModel):
    labels: List[str]
    values: List[float]

class ChartsResponse(BaseModel):
    equity: SeriesOut
    by_strategy: SeriesOut
    by_ticker: SeriesOut
    monthly: SeriesOut
    win_loss: SeriesOut

def _out(s: Series) -> SeriesOut:
    return SeriesOut(labels=s.labels, values=s.values)

@router.get("", response_model=ChartsResponse)
def charts(flt: TradeFilter = Depends(trade_filter)):
    trades = journal.list_trades(flt)
    start = journal.state.portfolio.starting_capital
    return ChartsResponse(
        equity=_out(equity_curve(trades, start)),
        by_strategy=_out(pl_by_strategy(trades)),
        by_ticker=_out(pl_by_ticker(trades)),
        monthly=_out(monthly_pl(trades)),
        win_loss=_out(win_loss_split(trades)),
    )
