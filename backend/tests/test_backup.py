import json

import pytest

from tradejournal.journal.backup import FORMAT_VERSION, build_backup, parse_backup
from tradejournal.journal.errors import BackupFormatError
from tradejournal.journal.state import AddTrade, JournalState, UpdatePortfolioSettings, dispatch

def _state(trade_factory):
    state = dispatch(JournalState(), UpdatePortfolioSettings(5_000.0, 5_000.0))
    state = dispatch(state, AddTrade(trade_factory(net_pl=42.0, notes="first")))
    return dispatch(state, AddTrade(trade_factory(net_pl=-12.5, strike=410.0)))

def test_backup_round_trip(trade_factory):
    state = _state(trade_factory)
    doc = build_backup(state, notes=[{"body": "size down on Fridays", "done": False}], action_items=[{"body": "review theta", "done": True}])

    # must survive real JSON serialization
    restored = parse_backup(json.loads(json.dumps(doc)))

    assert doc["format_version"] == FORMAT_VERSION
    assert restored.trades == state.trades
    assert restored.portfolio == state.portfolio
    assert restored.history == state.history
    assert restored.notes[0]["body"] == "size down on Fridays"
    assert restored.action_items[0]["done"] is True

def test_unknown_version_rejected():
    with pytest.raises(BackupFormatError):
        parse_backup({"format_version": 99, "trades": []})

def test_invalid_trade_rejected():
    with pytest.raises(BackupFormatError):
        parse_backup({"format_version": FORMAT_VERSION, "trades": [{"date": "2024-01-01", "ticker": ""}]})

def _doc(**kw):
    doc = {"format_version": FORMAT_VERSION, "portfolio": {"starting_capital": 1000.0, "current_balance": 1000.0}, "trades": []}
    doc.update(kw)
    return doc

@pytest.mark.parametrize("notes", [[5], [None], [{"body": 7}], "just text", {"body": "x"}])
def test_malformed_notes_rejected(notes):
    with pytest.raises(BackupFormatError):
        parse_backup(_doc(notes=notes))
    with pytest.raises(BackupFormatError):
        parse_backup(_doc(action_items=notes))

def test_notes_normalized():
    backup = parse_backup(_doc(notes=["  plain string  ", {"body": "object", "done": 1}, {"body": "   "}]))
    assert [n["body"] for n in backup.notes] == ["plain string", "object"]
    assert backup.notes[0]["done"] is False
    assert backup.notes[1]["done"] is True

@pytest.mark.parametrize("bad", [
    {"quantity": "abc"},
    {"strike": "five"},
    {"net_pl": "nan"},
    {"premium": [1]},
    {"ticker": None},
])
def test_trade_field_errors_are_format_errors(bad):
    trade = {"date": "2024-01-02", "ticker": "SPY", "premium": 10.0, **bad}
    with pytest.raises(BackupFormatError):
        parse_backup(_doc(trades=[trade]))

def test_numeric_strings_in_trades_are_coerced():
    trade = {"date": "2024-01-02", "ticker": "SPY", "strike": "5", "quantity": "3", "premium": "10", "fees": "0"}
    (t,) = parse_backup(_doc(trades=[trade])).trades
    assert t.strike == 5.0
    assert t.quantity == 3
    assert t.net_pl == 10.0

def test_non_finite_portfolio_rejected():
    with pytest.raises(BackupFormatError):
        parse_backup(_doc(portfolio={"starting_capital": "nan", "current_balance": 0}))
    with pytest.raises(BackupFormatError):
        parse_backup(_doc(trades=5))
