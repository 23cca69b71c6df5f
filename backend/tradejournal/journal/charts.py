from dataclasses import dataclass
from typing import Dict, Iterable, List

from tradejournal.journal.metrics import Rollup, by_month, by_strategy, by_ticker
from tradejournal.journal.trades import TradeRecord, is_win

@dataclass(frozen=True)
class Series:
    labels: List[str]
    values: List[float]

def equity_curve(trades: Iterable[TradeRecord], starting_capital: float = 0.0) -> Series:
    """Running balance per trade date, oldest first; same-day trades are summed."""
    daily: Dict[str, float] = {}
    for t in sorted(trades, key=lambda t: t.date):
        day = t.date.isoformat()
        daily[day] = daily.get(day, 0.0) + t.net_pl

    labels: List[str] = []
    values: List[float] = []
    run = starting_capital
    for day, pl in daily.items():
        run += pl
        labels.append(day)
        values.append(round(run, 2))
    return Series(labels=labels, values=values)

def _rollup_series(rows: List[Rollup]) -> Series:
    return Series(labels=[r.key for r in rows], values=[round(r.total_pl, 2) for r in rows])

def pl_by_strategy(trades: Iterable[TradeRecord]) -> Series:
    return _rollup_series(by_strategy(trades))

def pl_by_ticker(trades: Iterable[TradeRecord]) -> Series:
    return _rollup_series(by_ticker(trades))

def monthly_pl(trades: Iterable[TradeRecord]) -> Series:
    return _rollup_series(by_month(trades))

def win_loss_split(trades: Iterable[TradeRecord]) -> Series:
    wins = losses = 0
    for t in trades:
        if is_win(t):
            wins += 1
        else:
            losses += 1
    return Series(labels=["Win", "Loss"], values=[wins, losses])
