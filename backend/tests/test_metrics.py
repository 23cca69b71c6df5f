import math

import pytest

from tradejournal.journal.metrics import (
    PROFIT_FACTOR_SENTINEL,
    TradeMetrics,
    by_month,
    by_strategy,
    calculate_metrics,
    profit_factor,
)

def test_empty_input_is_all_zero():
    assert calculate_metrics([]) == TradeMetrics()

def test_aggregates(trade_factory):
    trades = [
        trade_factory(net_pl=100.0),
        trade_factory(net_pl=50.0),
        trade_factory(net_pl=-30.0),
        trade_factory(net_pl=-20.0),
    ]
    m = calculate_metrics(trades)

    assert m.total_trades == 4
    assert m.total_wins == 2
    assert m.total_losses == 2
    assert m.total_pl == pytest.approx(sum(t.net_pl for t in trades))
    assert m.win_rate == 0.5
    assert m.average_win == pytest.approx(75.0)
    assert m.average_loss == pytest.approx(-25.0)
    assert m.largest_win == 100.0
    assert m.largest_loss == -30.0
    assert m.profit_factor == pytest.approx(3.0)

def test_zero_pl_counts_as_win(trade_factory):
    m = calculate_metrics([trade_factory(net_pl=0.0), trade_factory(net_pl=-10.0)])
    assert m.total_wins == 1
    assert m.total_losses == 1

def test_profit_factor_sentinel_without_losses(trade_factory):
    m = calculate_metrics([trade_factory(net_pl=10.0), trade_factory(net_pl=5.0)])
    assert m.profit_factor == PROFIT_FACTOR_SENTINEL
    assert math.isfinite(m.profit_factor)
    assert m.win_rate == 1.0

def test_profit_factor_zero_when_nothing_won_or_lost():
    assert profit_factor(0.0, 0.0) == 0.0
    assert profit_factor(0.0, -10.0) == 0.0

def test_rollups(trade_factory):
    from datetime import date

    trades = [
        trade_factory(net_pl=10.0, strategy="Wheel", date=date(2024, 1, 3)),
        trade_factory(net_pl=-4.0, strategy="Wheel", date=date(2024, 2, 9)),
        trade_factory(net_pl=7.0, strategy="Covered Call", date=date(2024, 2, 20)),
    ]
    rows = {r.key: r for r in by_strategy(trades)}
    assert list(rows) == ["Covered Call", "Wheel"]
    assert rows["Wheel"].trades == 2
    assert rows["Wheel"].total_pl == pytest.approx(6.0)
    assert rows["Wheel"].win_rate == 0.5

    months = by_month(trades)
    assert [r.key for r in months] == ["2024-01", "2024-02"]
    assert months[1].total_pl == pytest.approx(3.0)
