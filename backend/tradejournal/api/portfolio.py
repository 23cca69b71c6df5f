from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from tradejournal.services.journal import journal

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])

class PortfolioSettingsRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    starting_capital: float
    current_balance: Optional[float] = None  # omitted -> keep the running balance

class AdjustmentRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    amount: float
    reason: str = Field("manual adjustment", min_length=1, max_length=200)

class PortfolioResponse(BaseModel):
    starting_capital: float
    current_balance: float
    adjustments: float
    last_updated: Optional[datetime] = None
    total_return: float
    return_percentage: float
    max_drawdown: float
    max_balance: float
    sharpe_ratio: float
    trading_days: int
    warning: Optional[str] = None

def _response() -> PortfolioResponse:
    p = journal.state.portfolio
    m = journal.portfolio_metrics()
    return PortfolioResponse(
        starting_capital=p.starting_capital,
        current_balance=p.current_balance,
        adjustments=p.adjustments,
        last_updated=p.last_updated,
        total_return=m.total_return,
        return_percentage=m.return_percentage,
        max_drawdown=m.max_drawdown,
        max_balance=m.max_balance,
        sharpe_ratio=m.sharpe_ratio,
        trading_days=m.trading_days,
        warning=journal.warning,
    )

@router.get("", response_model=PortfolioResponse)
def get_portfolio():
    return _response()

@router.put("/settings", response_model=PortfolioResponse)
def update_settings(req: PortfolioSettingsRequest):
    balance = req.current_balance
    if balance is None:
        balance = journal.state.portfolio.current_balance
    try:
        journal.update_settings(req.starting_capital, balance)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _response()

@router.post("/adjustments", response_model=PortfolioResponse)
def adjust(req: AdjustmentRequest):
    try:
        journal.adjust_balance(req.amount, req.reason)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _response()
