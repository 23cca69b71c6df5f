import threading
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from tradejournal.core.config import settings
from tradejournal.core.logging import get_logger
from tradejournal.db.database import SessionLocal, init_db
from tradejournal.journal.backup import Backup
from tradejournal.journal.csv_io import ImportResult, parse_trades_csv
from tradejournal.journal.errors import TradeValidationError
from tradejournal.journal.filters import TradeFilter
from tradejournal.journal.metrics import TradeMetrics
from tradejournal.journal.portfolio import BalancePoint, PortfolioMetrics
from tradejournal.journal.state import (
    AddTrade,
    AdjustBalance,
    DeleteTrade,
    EditTrade,
    ImportMode,
    ImportTrades,
    Intent,
    JournalState,
    PortfolioSnapshot,
    RestoreBackup,
    UpdatePortfolioSettings,
    dispatch,
    filtered_trades,
    metrics_for,
    portfolio_metrics_for,
)
from tradejournal.journal.trades import TradeRecord
from tradejournal.models.portfolio import SETTINGS_ID, PortfolioHistory, PortfolioSettings
from tradejournal.models.trade import Trade

logger = get_logger(__name__)

_TRADE_COLUMNS = [c.name for c in Trade.__table__.columns]

def _aware(dt: Optional[datetime]) -> Optional[datetime]:
    # sqlite hands back naive datetimes
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt

def _record_from_row(row: Trade) -> TradeRecord:
    values = {c: getattr(row, c) for c in _TRADE_COLUMNS}
    values["created_at"] = _aware(values["created_at"])
    values["updated_at"] = _aware(values["updated_at"])
    return TradeRecord(**values)

def _row_from_record(trade: TradeRecord) -> Trade:
    d = trade.to_dict()
    return Trade(**{c: d[c] for c in _TRADE_COLUMNS})

class JournalService:
    """
    Owns the in-memory JournalState and mirrors every transition to the
    database. Writes go through one lock, so a read always sees the last
    completed write.

    When the database fails the service logs it, keeps the new state in
    memory and stops writing (degraded mode) until `reload()` succeeds.
    """

    def __init__(self, session_factory=SessionLocal):
        self._session_factory = session_factory
        self._lock = threading.RLock()
        self._state: Optional[JournalState] = None
        self._pending: Optional[ImportResult] = None
        self.degraded = False
        self.last_error: Optional[str] = None

    # -------------------------
    # loading
    # -------------------------

    @property
    def state(self) -> JournalState:
        with self._lock:
            if self._state is None:
                self._state = self._load()
            return self._state

    @property
    def warning(self) -> Optional[str]:
        if not self.degraded:
            return None
        return f"storage unavailable, changes are kept in memory only ({self.last_error})"

    def reload(self) -> JournalState:
        with self._lock:
            self.degraded = False
            self.last_error = None
            self._pending = None
            self._state = self._load()
            return self._state

    def _load(self) -> JournalState:
        try:
            init_db()
            with self._session_factory() as db:
                trades = tuple(_record_from_row(r) for r in db.query(Trade).order_by(Trade.id.asc()).all())
                row = db.get(PortfolioSettings, SETTINGS_ID)
                history = tuple(
                    BalancePoint(at=_aware(h.at), balance=h.balance, reason=h.reason)
                    for h in db.query(PortfolioHistory).order_by(PortfolioHistory.at.asc(), PortfolioHistory.id.asc()).all()
                )
        except SQLAlchemyError as e:
            self._degrade(e)
            return JournalState()

        portfolio = PortfolioSnapshot()
        if row is not None:
            portfolio = PortfolioSnapshot(
                starting_capital=row.starting_capital,
                current_balance=row.current_balance,
                adjustments=row.adjustments,
                last_updated=_aware(row.last_updated),
            )
        else:
            logger.info("No portfolio settings found, starting from zero")

        logger.info(f"Loaded {len(trades)} trades, {len(history)} balance snapshots")
        return JournalState(trades=trades, portfolio=portfolio, history=history)

    def _degrade(self, err: Exception) -> None:
        self.degraded = True
        self.last_error = str(err).splitlines()[0] if str(err) else type(err).__name__
        logger.error(f"Storage failure, continuing in memory: {self.last_error}", exc_info=True)

    # -------------------------
    # writing
    # -------------------------

    def _commit(self, intent: Intent) -> JournalState:
        with self._lock:
            old = self.state
            new = dispatch(old, intent)
            if not self.degraded:
                try:
                    self._persist(old, new)
                except SQLAlchemyError as e:
                    self._degrade(e)
            self._state = new
            return new

    def _persist(self, old: JournalState, new: JournalState) -> None:
        before = {t.id: t for t in old.trades}
        after = {t.id: t for t in new.trades}

        with self._session_factory() as db:
            try:
                for trade_id in before.keys() - after.keys():
                    db.query(Trade).filter(Trade.id == trade_id).delete()
                for trade_id, trade in after.items():
                    if before.get(trade_id) != trade:
                        db.merge(_row_from_record(trade))

                p = new.portfolio
                db.merge(
                    PortfolioSettings(
                        id=SETTINGS_ID,
                        starting_capital=p.starting_capital,
                        current_balance=p.current_balance,
                        adjustments=p.adjustments,
                        last_updated=p.last_updated,
                    )
                )

                appended = new.history[len(old.history):]
                if new.history[:len(old.history)] != old.history:
                    db.query(PortfolioHistory).delete()
                    appended = new.history
                for h in appended:
                    db.add(PortfolioHistory(at=h.at, balance=h.balance, reason=h.reason))

                db.commit()
            except SQLAlchemyError:
                db.rollback()
                raise

    # -------------------------
    # trades
    # -------------------------

    def list_trades(self, flt: Optional[TradeFilter] = None) -> List[TradeRecord]:
        return filtered_trades(self.state, flt)

    def get_trade(self, trade_id: int) -> TradeRecord:
        return self.state.get(trade_id)

    def add_trade(self, trade: TradeRecord) -> TradeRecord:
        with self._lock:
            new = self._commit(AddTrade(trade))
            return new.trades[-1]

    def edit_trade(self, trade_id: int, trade: TradeRecord) -> TradeRecord:
        with self._lock:
            new = self._commit(EditTrade(trade_id, trade))
            return new.get(trade_id)

    def delete_trade(self, trade_id: int) -> TradeRecord:
        with self._lock:
            old = self.state.get(trade_id)
            self._commit(DeleteTrade(trade_id))
            return old

    # -------------------------
    # metrics / portfolio
    # -------------------------

    def metrics(self, flt: Optional[TradeFilter] = None) -> TradeMetrics:
        return metrics_for(self.state, flt, settings.profit_factor_sentinel)

    def portfolio_metrics(self) -> PortfolioMetrics:
        return portfolio_metrics_for(self.state, settings.periods_per_year)

    def update_settings(self, starting_capital: float, current_balance: float) -> PortfolioSnapshot:
        return self._commit(UpdatePortfolioSettings(starting_capital, current_balance)).portfolio

    def adjust_balance(self, amount: float, reason: str = "manual adjustment") -> PortfolioSnapshot:
        return self._commit(AdjustBalance(amount, reason)).portfolio

    # -------------------------
    # csv import (preview, then commit)
    # -------------------------

    def preview_import(self, text: str) -> ImportResult:
        result = parse_trades_csv(text, default_fee=settings.default_fee)
        with self._lock:
            self._pending = result
        return result

    def commit_import(self, mode: ImportMode = "append") -> List[TradeRecord]:
        with self._lock:
            if not self._pending or not self._pending.trades:
                raise TradeValidationError("No data to import")
            batch = tuple(self._pending.trades)
            before = {t.id for t in self.state.trades} if mode == "append" else set()
            new = self._commit(ImportTrades(batch, mode))
            self._pending = None
            added = [t for t in new.trades if t.id not in before]
            logger.info(f"Imported {len(added)} trades ({mode}), P&L {sum(t.net_pl for t in added):.2f}")
            return added

    def restore(self, backup: Backup) -> JournalState:
        return self._commit(RestoreBackup(backup.trades, backup.portfolio, backup.history))

journal = JournalService()
