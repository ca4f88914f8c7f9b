# backend/app/clarity/anomalies.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Literal, Mapping, Optional, Sequence, Union

from backend.app.analytics.forecast import ForecastPoint, to_forecast_point
from backend.app.analytics.monthly import PeriodMetrics, TxnLike, aggregate_by_month

AlertKind = Literal["revenue_drop", "expense_spike", "balance_warning"]
Severity = Literal["low", "medium", "high"]

REVENUE_DROP_THRESHOLD = 0.20
REVENUE_DROP_MEDIUM = 0.30
REVENUE_DROP_HIGH = 0.50

EXPENSE_SPIKE_THRESHOLD = 0.30
EXPENSE_SPIKE_MEDIUM = 0.40
EXPENSE_SPIKE_HIGH = 0.50

MIN_BALANCE_THRESHOLD = 0.0
BALANCE_MEDIUM = -1000.0
BALANCE_HIGH = -5000.0

RECOMMENDATIONS = {
    "revenue_drop": "Review recent sales activity and follow up on overdue invoices.",
    "expense_spike": "Check the month's largest outflows for one-off or duplicate charges.",
    "balance_warning": "Delay noncritical outflows or accelerate collections before the projected shortfall.",
}


@dataclass(frozen=True)
class AnomalyAlert:
    kind: AlertKind
    message: str
    severity: Severity
    detected_at: datetime
    recommendation: Optional[str] = None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _alert(kind: AlertKind, message: str, severity: Severity, now: datetime) -> AnomalyAlert:
    return AnomalyAlert(
        kind=kind,
        message=message,
        severity=severity,
        detected_at=now,
        recommendation=RECOMMENDATIONS.get(kind),
    )


def detect_revenue_drops(metrics: Sequence[PeriodMetrics], now: datetime) -> List[AnomalyAlert]:
    alerts: List[AnomalyAlert] = []

    for prev, curr in zip(metrics, metrics[1:]):
        if prev.income == 0:
            continue
        drop = (prev.income - curr.income) / prev.income
        if drop < REVENUE_DROP_THRESHOLD:
            continue

        severity: Severity = "low"
        if drop >= REVENUE_DROP_HIGH:
            severity = "high"
        elif drop >= REVENUE_DROP_MEDIUM:
            severity = "medium"

        alerts.append(
            _alert("revenue_drop", f"Revenue dropped by {drop * 100:.1f}% in {curr.period}", severity, now)
        )

    return alerts


def detect_expense_spikes(metrics: Sequence[PeriodMetrics], now: datetime) -> List[AnomalyAlert]:
    alerts: List[AnomalyAlert] = []

    for prev, curr in zip(metrics, metrics[1:]):
        if prev.expense == 0:
            continue
        spike = (curr.expense - prev.expense) / prev.expense
        if spike < EXPENSE_SPIKE_THRESHOLD:
            continue

        severity: Severity = "low"
        if spike >= EXPENSE_SPIKE_HIGH:
            severity = "high"
        elif spike >= EXPENSE_SPIKE_MEDIUM:
            severity = "medium"

        alerts.append(
            _alert("expense_spike", f"Expenses increased by {spike * 100:.1f}% in {curr.period}", severity, now)
        )

    return alerts


def check_balance_projections(forecast: Sequence[ForecastPoint], now: datetime) -> List[AnomalyAlert]:
    alerts: List[AnomalyAlert] = []

    for point in forecast:
        projected = point.income - point.expense
        if projected >= MIN_BALANCE_THRESHOLD:
            continue

        severity: Severity = "low"
        if projected < BALANCE_HIGH:
            severity = "high"
        elif projected < BALANCE_MEDIUM:
            severity = "medium"

        alerts.append(
            _alert(
                "balance_warning",
                f"Projected negative balance of ${abs(projected):,.2f} in {point.period}",
                severity,
                now,
            )
        )

    return alerts


def detect_anomalies(
    transactions: Iterable[TxnLike],
    forecast: Sequence[Union[ForecastPoint, PeriodMetrics, Mapping[str, Any]]],
    now: Optional[datetime] = None,
) -> List[AnomalyAlert]:
    """
    Run the three alert rules and concatenate their output in a fixed order:
    revenue drops, expense spikes, balance warnings.

    Trend rules look at monthly rollups of `transactions`; the balance rule
    looks at `forecast` as given. Rules never suppress each other, so one
    month can carry several alerts.
    """
    now = now or utcnow()
    metrics = aggregate_by_month(transactions)
    points = [to_forecast_point(p) for p in forecast]

    alerts: List[AnomalyAlert] = []
    alerts.extend(detect_revenue_drops(metrics, now))
    alerts.extend(detect_expense_spikes(metrics, now))
    alerts.extend(check_balance_projections(points, now))
    return alerts
