from sqlalchemy.exc import SQLAlchemyError

from tradejournal.db.database import SessionLocal
from tradejournal.services.journal import JournalService

class _FlakySessions:
    """Session factory that starts failing after `ok` sessions."""

    def __init__(self, ok: int):
        self.ok = ok

    def __call__(self):
        if self.ok <= 0:
            raise SQLAlchemyError("database is locked")
        self.ok -= 1
        return SessionLocal()

def test_persisted_changes_survive_reload(client, trade_factory):
    svc = JournalService()
    svc.update_settings(1_000.0, 1_000.0)
    added = svc.add_trade(trade_factory(net_pl=-50.0, ticker="tsla"))

    fresh = JournalService()
    assert [t.ticker for t in fresh.list_trades()] == ["TSLA"]
    assert fresh.get_trade(added.id).net_pl == -50.0
    assert fresh.state.portfolio.current_balance == 950.0
    assert fresh.state.balance_gap() == 0.0

    fresh.delete_trade(added.id)
    assert JournalService().state.portfolio.current_balance == 1_000.0

def test_storage_failure_degrades_to_memory(client, trade_factory):
    svc = JournalService(session_factory=_FlakySessions(ok=1))
    assert svc.state.trades == ()
    assert svc.warning is None

    trade = svc.add_trade(trade_factory(net_pl=12.0))

    assert svc.degraded
    assert "database is locked" in svc.warning
    # in-memory state still reflects the write
    assert svc.get_trade(trade.id).net_pl == 12.0
    assert svc.state.portfolio.current_balance == 12.0

    svc.add_trade(trade_factory(net_pl=3.0))
    assert len(svc.list_trades()) == 2

def test_unreadable_store_starts_empty(client):
    svc = JournalService(session_factory=_FlakySessions(ok=0))
    assert svc.state.trades == ()
    assert svc.degraded
