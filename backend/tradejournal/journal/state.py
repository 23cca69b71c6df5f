"""
Journal state and the single dispatch point that moves it forward.

Every user action is an intent; `dispatch(state, intent)` returns a new
`JournalState` and leaves the old one untouched. The portfolio balance moves
by the P&L delta of each trade change so that

    current_balance == starting_capital + sum(net_pl) + adjustments

holds after every transition.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Literal, Optional, Sequence, Tuple, Union

from tradejournal.journal.errors import TradeNotFoundError, TradeValidationError
from tradejournal.journal.filters import TradeFilter, apply_filters, sort_for_display
from tradejournal.journal.metrics import PROFIT_FACTOR_SENTINEL, TradeMetrics, calculate_metrics
from tradejournal.journal.portfolio import BalancePoint, PortfolioMetrics, calculate_portfolio_metrics
from tradejournal.journal.trades import TradeRecord, utc_now

ImportMode = Literal["append", "replace"]

@dataclass(frozen=True)
class PortfolioSnapshot:
    starting_capital: float = 0.0
    current_balance: float = 0.0
    adjustments: float = 0.0
    last_updated: Optional[datetime] = None

@dataclass(frozen=True)
class JournalState:
    trades: Tuple[TradeRecord, ...] = ()
    portfolio: PortfolioSnapshot = field(default_factory=PortfolioSnapshot)
    history: Tuple[BalancePoint, ...] = ()
    filters: TradeFilter = field(default_factory=TradeFilter)

    def get(self, trade_id: int) -> TradeRecord:
        for t in self.trades:
            if t.id == trade_id:
                return t
        raise TradeNotFoundError(trade_id)

    def next_id(self) -> int:
        return max((t.id or 0 for t in self.trades), default=0) + 1

    def balance_gap(self) -> float:
        """Distance from the balance invariant; 0.0 when consistent."""
        p = self.portfolio
        expected = p.starting_capital + sum(t.net_pl for t in self.trades) + p.adjustments
        return p.current_balance - expected

# -------------------------
# intents
# -------------------------

@dataclass(frozen=True)
class AddTrade:
    trade: TradeRecord
    at: datetime = field(default_factory=utc_now)

@dataclass(frozen=True)
class EditTrade:
    trade_id: int
    trade: TradeRecord
    at: datetime = field(default_factory=utc_now)

@dataclass(frozen=True)
class DeleteTrade:
    trade_id: int
    at: datetime = field(default_factory=utc_now)

@dataclass(frozen=True)
class ImportTrades:
    trades: Tuple[TradeRecord, ...]
    mode: ImportMode = "append"
    at: datetime = field(default_factory=utc_now)

@dataclass(frozen=True)
class AdjustBalance:
    amount: float
    reason: str = "manual adjustment"
    at: datetime = field(default_factory=utc_now)

@dataclass(frozen=True)
class UpdatePortfolioSettings:
    starting_capital: float
    current_balance: float
    at: datetime = field(default_factory=utc_now)

@dataclass(frozen=True)
class SetFilter:
    filters: TradeFilter

@dataclass(frozen=True)
class RestoreBackup:
    trades: Tuple[TradeRecord, ...]
    portfolio: PortfolioSnapshot
    history: Tuple[BalancePoint, ...] = ()

Intent = Union[
    AddTrade, EditTrade, DeleteTrade, ImportTrades, AdjustBalance,
    UpdatePortfolioSettings, SetFilter, RestoreBackup,
]

# -------------------------
# transitions
# -------------------------

def _move_balance(state: JournalState, delta: float, at: datetime, reason: str, adjustment: float = 0.0) -> JournalState:
    p = state.portfolio
    portfolio = replace(
        p,
        current_balance=p.current_balance + delta,
        adjustments=p.adjustments + adjustment,
        last_updated=at,
    )
    history = state.history
    if delta != 0:
        history = history + (BalancePoint(at=at, balance=portfolio.current_balance, reason=reason),)
    return replace(state, portfolio=portfolio, history=history)

def _assign_ids(state: JournalState, trades: Sequence[TradeRecord]) -> List[TradeRecord]:
    next_id = state.next_id()
    taken = {t.id for t in state.trades}
    out: List[TradeRecord] = []
    for t in trades:
        if t.id is None or t.id in taken:
            t = t.with_id(next_id)
        taken.add(t.id)
        next_id = max(next_id, t.id) + 1
        out.append(t)
    return out

def _add(state: JournalState, intent: AddTrade) -> JournalState:
    (trade,) = _assign_ids(state, [intent.trade])
    state = replace(state, trades=state.trades + (trade,))
    return _move_balance(state, trade.net_pl, intent.at, f"add trade {trade.id}")

def _edit(state: JournalState, intent: EditTrade) -> JournalState:
    old = state.get(intent.trade_id)
    new = replace(intent.trade, id=old.id, created_at=old.created_at, updated_at=intent.at)
    trades = tuple(new if t.id == old.id else t for t in state.trades)
    state = replace(state, trades=trades)
    return _move_balance(state, new.net_pl - old.net_pl, intent.at, f"edit trade {old.id}")

def _delete(state: JournalState, intent: DeleteTrade) -> JournalState:
    old = state.get(intent.trade_id)
    trades = tuple(t for t in state.trades if t.id != old.id)
    state = replace(state, trades=trades)
    return _move_balance(state, -old.net_pl, intent.at, f"delete trade {old.id}")

def _import(state: JournalState, intent: ImportTrades) -> JournalState:
    if intent.mode not in ("append", "replace"):
        raise TradeValidationError(f"unknown import mode '{intent.mode}'")

    removed = 0.0
    if intent.mode == "replace":
        removed = sum(t.net_pl for t in state.trades)
        state = replace(state, trades=())

    added = _assign_ids(state, intent.trades)
    state = replace(state, trades=state.trades + tuple(added))
    delta = sum(t.net_pl for t in added) - removed
    return _move_balance(state, delta, intent.at, f"import {len(added)} trades ({intent.mode})")

def _adjust(state: JournalState, intent: AdjustBalance) -> JournalState:
    if intent.amount == 0:
        raise TradeValidationError("adjustment amount must be non-zero")
    return _move_balance(state, intent.amount, intent.at, intent.reason, adjustment=intent.amount)

def _settings(state: JournalState, intent: UpdatePortfolioSettings) -> JournalState:
    if not intent.starting_capital:
        raise TradeValidationError("Please enter a starting capital amount")

    pl = sum(t.net_pl for t in state.trades)
    portfolio = PortfolioSnapshot(
        starting_capital=float(intent.starting_capital),
        current_balance=float(intent.current_balance),
        # whatever the trades do not explain is a manual adjustment
        adjustments=float(intent.current_balance) - float(intent.starting_capital) - pl,
        last_updated=intent.at,
    )
    history = state.history
    if portfolio.current_balance != state.portfolio.current_balance:
        history = history + (BalancePoint(at=intent.at, balance=portfolio.current_balance, reason="settings"),)
    return replace(state, portfolio=portfolio, history=history)

def _restore(state: JournalState, intent: RestoreBackup) -> JournalState:
    trades = _assign_ids(JournalState(), intent.trades)
    return replace(state, trades=tuple(trades), portfolio=intent.portfolio, history=tuple(intent.history))

def dispatch(state: JournalState, intent: Intent) -> JournalState:
    if isinstance(intent, AddTrade):
        return _add(state, intent)
    if isinstance(intent, EditTrade):
        return _edit(state, intent)
    if isinstance(intent, DeleteTrade):
        return _delete(state, intent)
    if isinstance(intent, ImportTrades):
        return _import(state, intent)
    if isinstance(intent, AdjustBalance):
        return _adjust(state, intent)
    if isinstance(intent, UpdatePortfolioSettings):
        return _settings(state, intent)
    if isinstance(intent, SetFilter):
        return replace(state, filters=intent.filters)
    if isinstance(intent, RestoreBackup):
        return _restore(state, intent)
    raise TypeError(f"unsupported intent: {type(intent).__name__}")

# -------------------------
# views
# -------------------------

def filtered_trades(state: JournalState, flt: Optional[TradeFilter] = None) -> List[TradeRecord]:
    return sort_for_display(apply_filters(state.trades, flt if flt is not None else state.filters))

def metrics_for(
    state: JournalState,
    flt: Optional[TradeFilter] = None,
    sentinel: float = PROFIT_FACTOR_SENTINEL,
) -> TradeMetrics:
    return calculate_metrics(filtered_trades(state, flt), sentinel)

def portfolio_metrics_for(state: JournalState, periods_per_year: int = 252) -> PortfolioMetrics:
    p = state.portfolio
    return calculate_portfolio_metrics(p.starting_capital, p.current_balance, state.history, periods_per_year)
