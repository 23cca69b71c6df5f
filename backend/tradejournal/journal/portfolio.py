import math
import statistics
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

@dataclass(frozen=True)
class BalancePoint:
    at: datetime
    balance: float
    reason: str = ""

@dataclass(frozen=True)
class PortfolioMetrics:
    starting_capital: float
    current_balance: float
    total_return: float
    return_percentage: float
    max_drawdown: float
    max_balance: float
    sharpe_ratio: float
    trading_days: int

def total_return(starting_capital: float, current_balance: float) -> float:
    return current_balance - starting_capital

def return_percentage(starting_capital: float, current_balance: float) -> float:
    if starting_capital <= 0:
        return 0.0
    return (current_balance - starting_capital) / starting_capital

def max_drawdown(balances: Sequence[float], starting_peak: Optional[float] = None) -> float:
    """
    Largest peak-to-trough decline as a fraction of the running peak.

    The running peak starts at `starting_peak` (or the first balance). Points
    under a non-positive peak are ignored, so a zero starting capital cannot
    divide by zero.
    """
    if not balances:
        return 0.0
    peak = balances[0] if starting_peak is None else starting_peak
    worst = 0.0
    for b in balances:
        if b > peak:
            peak = b
        if peak > 0:
            worst = max(worst, (peak - b) / peak)
    return worst

def period_returns(balances: Sequence[float]) -> List[float]:
    out: List[float] = []
    for prev, cur in zip(balances, balances[1:]):
        if prev == 0:
            continue
        out.append((cur - prev) / prev)
    return out

def sharpe_ratio(balances: Sequence[float], periods_per_year: int = 252) -> float:
    """Simplified annualized Sharpe: mean / stdev of period returns, risk-free = 0."""
    rets = period_returns(balances)
    if len(rets) < 2:
        return 0.0
    sd = statistics.stdev(rets)
    if sd == 0:
        return 0.0
    return statistics.fmean(rets) / sd * math.sqrt(periods_per_year)

def balance_series(starting_capital: float, current_balance: float, history: Iterable[BalancePoint] = ()) -> List[float]:
    series = [starting_capital] + [p.balance for p in history]
    if series[-1] != current_balance:
        series.append(current_balance)
    return series

def calculate_portfolio_metrics(
    starting_capital: float,
    current_balance: float,
    history: Sequence[BalancePoint] = (),
    periods_per_year: int = 252,
) -> PortfolioMetrics:
    series = balance_series(starting_capital, current_balance, history)
    return PortfolioMetrics(
        starting_capital=starting_capital,
        current_balance=current_balance,
        total_return=total_return(starting_capital, current_balance),
        return_percentage=return_percentage(starting_capital, current_balance),
        max_drawdown=max_drawdown(series),
        max_balance=max(series),
        sharpe_ratio=sharpe_ratio(series, periods_per_year),
        trading_days=len({p.at.date() for p in history}),
    )
