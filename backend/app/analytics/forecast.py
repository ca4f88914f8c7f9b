from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from backend.app.norma.normalize import normalize_amount

from .monthly import (
    PeriodMetrics,
    TxnLike,
    _parse_month,
    get_field,
    month_key_from_label,
    month_label,
    next_month_key,
)

logger = logging.getLogger(__name__)

MIN_HISTORY = 3
WINDOW = 3


@dataclass(frozen=True)
class ForecastPoint:
    month: Optional[str]  # "YYYY-MM"; None only if the source label was unparseable
    period: str
    income: float
    expense: float
    predicted: Optional[bool] = None


HistoryLike = Union[PeriodMetrics, ForecastPoint, Mapping[str, Any]]


def calculate_moving_average(values: Sequence[float], periods: int = WINDOW) -> float:
    if not values:
        return 0.0
    window = list(values)[-periods:]
    return sum(window) / len(window)


def to_forecast_point(item: HistoryLike) -> ForecastPoint:
    """
    Lift a history row into a ForecastPoint without changing its values.

    Mappings may use "period" or "name" for the label; "month" is derived
    from the label when absent or malformed.
    """
    if isinstance(item, ForecastPoint):
        return item

    label = get_field(item, "period") or get_field(item, "name") or ""
    key = get_field(item, "month")
    if key is None or _parse_month(str(key)) is None:
        key = month_key_from_label(str(label))
    if not label and key:
        label = month_label(key)

    return ForecastPoint(
        month=key,
        period=str(label),
        income=normalize_amount(get_field(item, "income")),
        expense=normalize_amount(get_field(item, "expense")),
        predicted=get_field(item, "predicted"),
    )


def generate_forecast(history: Sequence[HistoryLike], horizon: int = 3) -> List[ForecastPoint]:
    """
    Extend monthly history by `horizon` months using a trailing 3-month
    moving average of income and expense.

    Each synthesized month is fed back into the window, so the projection
    settles toward the recent average instead of following a slope.

    With fewer than 3 months of history there is nothing to average over;
    the history comes back as-is.
    """
    if horizon < 0:
        raise ValueError(f"horizon must be >= 0, got {horizon}")

    points = [to_forecast_point(h) for h in history]
    if len(points) < MIN_HISTORY:
        logger.warning(
            "Forecast needs %d months of history, got %d; returning history only",
            MIN_HISTORY,
            len(points),
        )
        return points

    income_history = [p.income for p in points]
    expense_history = [p.expense for p in points]

    last_key = points[-1].month
    if last_key is None or _parse_month(last_key) is None:
        logger.warning("Cannot infer month from period label %r; returning history only", points[-1].period)
        return points

    forecast: List[ForecastPoint] = []
    for i in range(1, horizon + 1):
        key = next_month_key(last_key, i)

        predicted_income = calculate_moving_average(income_history[-WINDOW:])
        predicted_expense = calculate_moving_average(expense_history[-WINDOW:])

        forecast.append(
            ForecastPoint(
                month=key,
                period=month_label(key),
                income=round(predicted_income, 2),
                expense=round(predicted_expense, 2),
                predicted=True,
            )
        )

        # unrounded values go back into the window
        income_history.append(predicted_income)
        expense_history.append(predicted_expense)

    return points + forecast


def summarize_forecast(
    transactions: Iterable[TxnLike],
    forecast: Sequence[ForecastPoint],
) -> Dict[str, float]:
    """
    Headline totals: actuals from the raw transactions, projections from
    the predicted points only.
    """
    total_income = 0.0
    total_expense = 0.0
    for txn in transactions:
        amount = normalize_amount(get_field(txn, "amount"))
        if get_field(txn, "type") == "income":
            total_income += amount
        elif get_field(txn, "type") == "expense":
            total_expense += abs(amount)

    predicted = [p for p in forecast if p.predicted]
    forecast_income = sum(p.income for p in predicted)
    forecast_expense = sum(p.expense for p in predicted)

    return {
        "total_income": round(total_income, 2),
        "total_expense": round(total_expense, 2),
        "net_profit": round(total_income - total_expense, 2),
        "forecast_income": round(forecast_income, 2),
        "forecast_expense": round(forecast_expense, 2),
        "forecast_net": round(forecast_income - forecast_expense, 2),
    }
