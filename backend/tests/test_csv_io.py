from dataclasses import replace
from datetime import date, datetime, timezone

import pytest

from tradejournal.journal.csv_io import (
    export_trades_csv,
    normalize_header,
    parse_number,
    parse_trades_csv,
    tokenize,
)
from tradejournal.journal.errors import CsvImportError
from tradejournal.journal.trades import DEFAULT_FEE

def test_header_normalization():
    assert normalize_header("  Entry Price ") == "entry_price"
    assert normalize_header('"Option Type"') == "option_type"
    assert normalize_header("Net P&L") == "net_pl"
    assert normalize_header("Net P/L") == "net_pl"
    assert normalize_header("SYMBOL") == "ticker"

def test_tokenizer_respects_quotes():
    rows = tokenize('date,ticker,notes\n2024-01-02,SPY,"rolled, then closed ""early"""\n')
    assert rows[1] == ["2024-01-02", "SPY", 'rolled, then closed "early"']

def test_parse_number_broker_formats():
    assert parse_number("$1,250.50") == 1250.5
    assert parse_number("(12.00)") == -12.0
    assert parse_number("") is None
    with pytest.raises(ValueError):
        parse_number("abc")
    for raw in ("nan", "inf", "-inf", "(inf)"):
        with pytest.raises(ValueError):
            parse_number(raw)

def test_import_applies_defaults_and_uppercases():
    text = "Date,Ticker,Strategy,Premium\n2024-02-01,tsla,,125\n"
    result = parse_trades_csv(text)

    assert result.skipped == 0
    (t,) = result.trades
    assert t.ticker == "TSLA"
    assert t.quantity == 1
    assert t.fees == DEFAULT_FEE
    assert t.strategy == "Unknown"
    assert t.net_pl == pytest.approx(125 + DEFAULT_FEE)
    assert t.outcome == "Win"

def test_import_uses_supplied_net_pl_and_derives_outcome():
    text = "date,ticker,net_pl\n01/05/2024,spy,-40\n"
    (t,) = parse_trades_csv(text).trades
    assert t.date == date(2024, 1, 5)
    assert t.net_pl == -40.0
    assert t.outcome == "Loss"

def test_row_without_ticker_is_skipped():
    text = "date,ticker,premium\n2024-01-02,SPY,10\n2024-01-03,,20\n2024-01-04,QQQ,30\n"
    result = parse_trades_csv(text)
    assert [t.ticker for t in result.trades] == ["SPY", "QQQ"]
    assert result.skipped == 1
    assert result.errors[0].line == 3

def test_missing_ticker_column_skips_every_row():
    result = parse_trades_csv("date,premium\n2024-01-02,10\n")
    assert result.trades == []
    assert result.skipped == 1

def test_bad_cells_skip_row_without_aborting_batch():
    text = "date,ticker,strike\nnot-a-date,SPY,1\n2024-01-03,SPY,abc\n2024-01-04,SPY,450\n"
    result = parse_trades_csv(text)
    assert result.skipped == 2
    assert result.trades[0].strike == 450.0

def test_blank_lines_are_ignored():
    result = parse_trades_csv("date,ticker\n\n2024-01-02,SPY\n\n")
    assert len(result.trades) == 1
    assert result.skipped == 0

def test_empty_or_header_only_is_an_error():
    with pytest.raises(CsvImportError):
        parse_trades_csv("")
    with pytest.raises(CsvImportError):
        parse_trades_csv("date,ticker\n")

def test_export_then_reimport_round_trips(trade_factory):
    originals = [
        trade_factory(id=1, ticker="SPY", option_type="put", strike=450.0, expiration=date(2024, 2, 16),
                      quantity=2, entry_price=3.1, exit_price=1.05, premium=0.0, fees=-1.3,
                      delta=-0.31, theta=0.045, notes='closed early, "good" fill'),
        trade_factory(id=4, ticker="IWM", premium=12.0, notes="line one\nline two\n"),
        trade_factory(id=5, ticker="DIA", premium=-3.0, notes="  indented, trailing  "),
        trade_factory(id=2, ticker="AAPL", strategy="Covered Call", premium=85.0, date=date(2024, 1, 20)),
        trade_factory(id=3, ticker="QQQ", premium=-120.0, fees=0.0),
    ]
    text = export_trades_csv(originals)
    result = parse_trades_csv(text)

    assert result.skipped == 0
    assert result.trades == [replace(t, id=None) for t in originals]

def test_export_column_order(trade_factory):
    header = export_trades_csv([trade_factory()]).splitlines()[0]
    assert header.startswith("date,ticker,strategy,option_type,strike,expiration,quantity,entry_price,exit_price")
    assert header.endswith("notes,created_at,updated_at")

def test_non_finite_cells_skip_the_row():
    text = "date,ticker,net_pl\n2024-01-02,SPY,nan\n2024-01-03,QQQ,-5\n2024-01-04,IWM,inf\n"
    result = parse_trades_csv(text)

    assert result.skipped == 2
    assert [e.line for e in result.errors] == [2, 4]
    assert [t.net_pl for t in result.trades] == [-5.0]

def test_whitespace_only_row_is_blank():
    result = parse_trades_csv("date,ticker,premium\n  ,  ,  \n2024-01-02, spy ,10\n")
    assert result.skipped == 0
    assert [t.ticker for t in result.trades] == ["SPY"]

def test_import_timestamps_default_to_now():
    now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    text = "date,ticker,premium,created_at\n2024-01-02,SPY,10,\n2024-01-03,QQQ,5,2024-01-03T09:30:00+00:00\n"
    first, second = parse_trades_csv(text, now=now).trades

    assert first.created_at == now
    assert first.updated_at == now
    assert second.created_at == datetime(2024, 1, 3, 9, 30, tzinfo=timezone.utc)
