"""
Monthly rollups.

Groups transactions into calendar-month buckets. Buckets are keyed by
"YYYY-MM" (sortable, locale independent); the "Jun 2024" label is for
display only and is never used for ordering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from backend.app.norma.normalize import Transaction, normalize_amount, parse_date

logger = logging.getLogger(__name__)

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

TxnLike = Union[Transaction, Mapping[str, Any]]


@dataclass(frozen=True)
class PeriodMetrics:
    """
    Invariants:
    - income is the signed sum of income amounts
    - expense >= 0 (stored as magnitude)
    - balance = income - expense
    """
    month: str  # "YYYY-MM"
    period: str  # "Jun 2024"
    income: float
    expense: float
    balance: float


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def _parse_month(key: str) -> Optional[tuple[int, int]]:
    # expects "YYYY-MM"
    try:
        y, m = key.split("-")
        year, month = int(y), int(m)
    except (AttributeError, ValueError):
        return None
    if not 1 <= month <= 12:
        return None
    return year, month


def month_label(key: str) -> str:
    parsed = _parse_month(key)
    if parsed is None:
        raise ValueError(f"invalid month key: {key!r}")
    year, month = parsed
    return f"{MONTH_ABBR[month - 1]} {year}"


def next_month_key(key: str, step: int = 1) -> str:
    parsed = _parse_month(key)
    if parsed is None:
        raise ValueError(f"invalid month key: {key!r}")
    year, month = parsed
    idx = year * 12 + (month - 1) + step
    return f"{idx // 12:04d}-{idx % 12 + 1:02d}"


def month_key_from_label(label: str) -> Optional[str]:
    """
    "Jun 2024" / "June 2024" -> "2024-06". None if unrecognized.
    """
    parts = (label or "").strip().split()
    if len(parts) != 2:
        return None
    name, year = parts
    abbr = name[:3].title()
    if abbr not in MONTH_ABBR or not year.isdigit():
        return None
    return f"{int(year):04d}-{MONTH_ABBR.index(abbr) + 1:02d}"


def get_field(txn: TxnLike, name: str, default: Any = None) -> Any:
    if isinstance(txn, Mapping):
        return txn.get(name, default)
    return getattr(txn, name, default)


def _txn_date(txn: TxnLike) -> Optional[date]:
    return parse_date(get_field(txn, "date"))


def aggregate_by_month(transactions: Iterable[TxnLike]) -> List[PeriodMetrics]:
    """
    Roll transactions up into one PeriodMetrics per calendar month present.

    - income sums amounts as given; expense sums absolute amounts, so both
      sign conventions for expenses produce the same totals
    - non-numeric amounts count as 0.0
    - rows without a usable date cannot be bucketed and are skipped
    """
    monthly: Dict[str, Dict[str, float]] = {}
    skipped = 0

    for txn in transactions:
        d = _txn_date(txn)
        if d is None:
            skipped += 1
            continue

        key = month_key(d)
        bucket = monthly.setdefault(key, {"income": 0.0, "expense": 0.0})

        amount = normalize_amount(get_field(txn, "amount"))
        if get_field(txn, "type") == "income":
            bucket["income"] += amount
        elif get_field(txn, "type") == "expense":
            bucket["expense"] += abs(amount)

    if skipped:
        logger.debug("aggregate_by_month skipped %d transactions without a date", skipped)

    return [
        PeriodMetrics(
            month=key,
            period=month_label(key),
            income=monthly[key]["income"],
            expense=monthly[key]["expense"],
            balance=monthly[key]["income"] - monthly[key]["expense"],
        )
        for key in sorted(monthly.keys())
    ]
