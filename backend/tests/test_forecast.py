from datetime import date
from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[2]))

from backend.app.analytics.forecast import (  # noqa: E402
    ForecastPoint,
    calculate_moving_average,
    generate_forecast,
    summarize_forecast,
)
from backend.app.analytics.monthly import PeriodMetrics, aggregate_by_month  # noqa: E402
from backend.app.norma.normalize import Transaction  # noqa: E402


def _pm(month: str, label: str, income: float, expense: float) -> PeriodMetrics:
    return PeriodMetrics(month=month, period=label, income=income, expense=expense, balance=income - expense)


HISTORY = [
    _pm("2024-01", "Jan 2024", 1000.0, 400.0),
    _pm("2024-02", "Feb 2024", 1300.0, 500.0),
    _pm("2024-03", "Mar 2024", 1600.0, 900.0),
]


def test_moving_average_uses_trailing_window():
    assert calculate_moving_average([]) == 0.0
    assert calculate_moving_average([10.0]) == 10.0
    assert calculate_moving_average([10.0, 20.0]) == 15.0
    assert calculate_moving_average([100.0, 1.0, 2.0, 3.0]) == 2.0


def test_short_history_is_returned_unchanged():
    history = HISTORY[:2]

    out = generate_forecast(history, 3)

    assert len(out) == 2
    assert [p.period for p in out] == ["Jan 2024", "Feb 2024"]
    assert all(p.predicted is None for p in out)
    assert [(p.income, p.expense) for p in out] == [(1000.0, 400.0), (1300.0, 500.0)]


def test_appends_horizon_points_after_untouched_history():
    out = generate_forecast(HISTORY, 4)

    assert len(out) == len(HISTORY) + 4
    for original, point in zip(HISTORY, out):
        assert point.period == original.period
        assert point.income == original.income
        assert point.expense == original.expense
        assert point.predicted is None
    assert all(p.predicted is True for p in out[3:])
    assert [p.period for p in out[3:]] == ["Apr 2024", "May 2024", "Jun 2024", "Jul 2024"]


def test_synthesized_values_feed_back_into_window():
    out = generate_forecast(HISTORY, 3)
    apr, may, jun = out[3:]

    # Apr: mean(1000, 1300, 1600)
    assert apr.income == 1300.0
    # May: mean(1300, 1600, 1300)
    assert may.income == 1400.0
    # Jun: mean(1600, 1300, 1400)
    assert jun.income == pytest.approx(1433.33)
    # expenses: mean(400, 500, 900) = 600, then mean(500, 900, 600)
    assert apr.expense == 600.0
    assert may.expense == pytest.approx(666.67)


def test_constant_history_forecasts_constant():
    history = [_pm(f"2024-0{i}", f"M{i}", 750.0, 0.0) for i in range(1, 6)]

    out = generate_forecast(history, 6)

    assert all(p.income == 750.0 for p in out[5:])


def test_labels_roll_over_year_end():
    history = [
        _pm("2024-10", "Oct 2024", 1.0, 1.0),
        _pm("2024-11", "Nov 2024", 1.0, 1.0),
        _pm("2024-12", "Dec 2024", 1.0, 1.0),
    ]

    out = generate_forecast(history, 2)

    assert [p.period for p in out[3:]] == ["Jan 2025", "Feb 2025"]
    assert [p.month for p in out[3:]] == ["2025-01", "2025-02"]


def test_accepts_label_only_mappings():
    history = [
        {"name": "Jan 2024", "income": 10, "expense": 5},
        {"name": "Feb 2024", "income": 20, "expense": 5},
        {"name": "Mar 2024", "income": 30, "expense": 5},
    ]

    out = generate_forecast(history, 1)

    assert out[-1] == ForecastPoint(month="2024-04", period="Apr 2024", income=20.0, expense=5.0, predicted=True)


def test_zero_horizon_and_negative_horizon():
    assert len(generate_forecast(HISTORY, 0)) == 3
    with pytest.raises(ValueError):
        generate_forecast(HISTORY, -1)


def test_end_to_end_flat_income():
    txns = [
        Transaction(date=date(2024, 1, 15), amount=1000.0, type="income"),
        Transaction(date=date(2024, 2, 15), amount=1000.0, type="income"),
        Transaction(date=date(2024, 3, 15), amount=1000.0, type="income"),
    ]
    monthly = aggregate_by_month(txns)
    assert [m.income for m in monthly] == [1000.0, 1000.0, 1000.0]

    out = generate_forecast(monthly, 2)

    assert [(p.period, p.income, p.predicted) for p in out[3:]] == [
        ("Apr 2024", 1000.0, True),
        ("May 2024", 1000.0, True),
    ]


def test_summarize_forecast_totals():
    txns = [
        Transaction(date=date(2024, 1, 1), amount=500.0, type="income"),
        Transaction(date=date(2024, 1, 2), amount=-200.0, type="expense"),
    ]
    forecast = generate_forecast(HISTORY, 1)

    summary = summarize_forecast(txns, forecast)

    assert summary["total_income"] == 500.0
    assert summary["total_expense"] == 200.0
    assert summary["net_profit"] == 300.0
    assert summary["forecast_income"] == 1300.0
    assert summary["forecast_expense"] == 600.0
    assert summary["forecast_net"] == 700.0


def test_malformed_month_key_degrades_to_history():
    history = [{"month": "2024-13", "income": 1, "expense": 1}] * 3

    result = generate_forecast(history, 1)

    assert len(result) == 3
    assert all(p.month is None and p.predicted is None for p in result)


def test_malformed_month_key_falls_back_to_label():
    history = [
        {"month": "24/01", "period": "Jan 2024", "income": 10, "expense": 5},
        {"month": "bad", "period": "Feb 2024", "income": 10, "expense": 5},
        {"month": "2024-00", "period": "Mar 2024", "income": 10, "expense": 5},
    ]

    result = generate_forecast(history, 1)

    assert [p.month for p in result] == ["2024-01", "2024-02", "2024-03", "2024-04"]
    assert result[-1].period == "Apr 2024"
