from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List

from tradejournal.journal.trades import TradeRecord, is_win

PROFIT_FACTOR_SENTINEL = 999.0

@dataclass(frozen=True)
class TradeMetrics:
    total_trades: int = 0
    total_wins: int = 0
    total_losses: int = 0
    total_pl: float = 0.0
    win_rate: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    profit_factor: float = 0.0

@dataclass(frozen=True)
class Rollup:
    key: str
    trades: int
    wins: int
    losses: int
    total_pl: float
    win_rate: float

def profit_factor(gross_wins: float, gross_losses: float, sentinel: float = PROFIT_FACTOR_SENTINEL) -> float:
    """
    gross_wins / |gross_losses|.

    With no losing P&L the ratio is undefined; return `sentinel` when there
    is something won and 0.0 when there is not.
    """
    if gross_losses == 0:
        return sentinel if gross_wins > 0 else 0.0
    return gross_wins / abs(gross_losses)

def calculate_metrics(trades: Iterable[TradeRecord], sentinel: float = PROFIT_FACTOR_SENTINEL) -> TradeMetrics:
    trades = list(trades)
    if not trades:
        return TradeMetrics()

    wins = [t.net_pl for t in trades if is_win(t)]
    losses = [t.net_pl for t in trades if not is_win(t)]
    gross_wins = sum(wins)
    gross_losses = sum(losses)
    pls = [t.net_pl for t in trades]

    return TradeMetrics(
        total_trades=len(trades),
        total_wins=len(wins),
        total_losses=len(losses),
        total_pl=sum(pls),
        win_rate=len(wins) / len(trades),
        average_win=gross_wins / len(wins) if wins else 0.0,
        average_loss=gross_losses / len(losses) if losses else 0.0,
        largest_win=max(pls),
        largest_loss=min(pls),
        profit_factor=profit_factor(gross_wins, gross_losses, sentinel),
    )

def rollup(trades: Iterable[TradeRecord], key: Callable[[TradeRecord], str]) -> List[Rollup]:
    groups: Dict[str, List[TradeRecord]] = {}
    for t in trades:
        groups.setdefault(key(t), []).append(t)

    out: List[Rollup] = []
    for k in sorted(groups):
        items = groups[k]
        wins = sum(1 for t in items if is_win(t))
        out.append(
            Rollup(
                key=k,
                trades=len(items),
                wins=wins,
                losses=len(items) - wins,
                total_pl=sum(t.net_pl for t in items),
                win_rate=wins / len(items),
            )
        )
    return out

def by_strategy(trades: Iterable[TradeRecord]) -> List[Rollup]:
    return rollup(trades, lambda t: t.strategy)

def by_ticker(trades: Iterable[TradeRecord]) -> List[Rollup]:
    return rollup(trades, lambda t: t.ticker)

def by_month(trades: Iterable[TradeRecord]) -> List[Rollup]:
    return rollup(trades, lambda t: f"{t.date.year:04d}-{t.date.month:02d}")
