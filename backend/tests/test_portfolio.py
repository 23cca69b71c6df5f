from datetime import datetime, timezone

import pytest

from tradejournal.journal.portfolio import (
    BalancePoint,
    calculate_portfolio_metrics,
    max_drawdown,
    return_percentage,
    sharpe_ratio,
)

def test_max_drawdown_example():
    assert max_drawdown([100, 120, 90, 130]) == pytest.approx(0.25)

def test_max_drawdown_with_starting_peak():
    assert max_drawdown([90, 95], starting_peak=100) == pytest.approx(0.10)

def test_max_drawdown_monotonic_and_empty():
    assert max_drawdown([100, 110, 120]) == 0.0
    assert max_drawdown([]) == 0.0

def test_zero_starting_capital_does_not_divide():
    assert return_percentage(0.0, 500.0) == 0.0
    assert max_drawdown([0.0, 0.0, -10.0]) == 0.0
    m = calculate_portfolio_metrics(0.0, 0.0)
    assert m.return_percentage == 0.0
    assert m.sharpe_ratio == 0.0

def test_sharpe_needs_variation():
    assert sharpe_ratio([100, 110]) == 0.0
    assert sharpe_ratio([100, 110, 121]) == 0.0  # constant 10% returns
    assert sharpe_ratio([100, 110, 105, 120]) > 0

def test_portfolio_metrics_from_history():
    at = lambda d: datetime(2024, 1, d, tzinfo=timezone.utc)
    history = [BalancePoint(at(2), 1200.0), BalancePoint(at(3), 900.0), BalancePoint(at(3), 1300.0)]
    m = calculate_portfolio_metrics(1000.0, 1300.0, history)

    assert m.total_return == 300.0
    assert m.return_percentage == pytest.approx(0.3)
    assert m.max_drawdown == pytest.approx(0.25)
    assert m.max_balance == 1300.0
    assert m.trading_days == 2
