from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from tradejournal.journal.trades import TradeRecord

@dataclass(frozen=True)
class TradeFilter:
    ticker: Optional[str] = None
    strategy: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def is_empty(self) -> bool:
        return not (self.ticker or self.strategy or self.date_from or self.date_to)

def matches(trade: TradeRecord, flt: TradeFilter) -> bool:
    if flt.ticker and trade.ticker.upper() != flt.ticker.strip().upper():
        return False
    if flt.strategy and trade.strategy != flt.strategy.strip():
        return False
    if flt.date_from and trade.date < flt.date_from:
        return False
    if flt.date_to and trade.date > flt.date_to:
        return False
    return True

def apply_filters(trades: Iterable[TradeRecord], flt: Optional[TradeFilter]) -> List[TradeRecord]:
    """Subset of `trades` (order kept) that the table and the metrics both read."""
    if flt is None or flt.is_empty():
        return list(trades)
    return [t for t in trades if matches(t, flt)]

def sort_for_display(trades: Iterable[TradeRecord]) -> List[TradeRecord]:
    # newest first; ties broken by id so freshly added rows lead
    return sorted(trades, key=lambda t: (t.date, t.id or 0), reverse=True)
