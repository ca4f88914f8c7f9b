# backend/app/clarity/benchmarks.py
"""
Industry benchmarks and cost optimization hints.

Compares each expense category's share of total income with a static
industry table and turns the variances into plain-language recommendations.
Deterministic: same transactions + profile -> same output.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List

from backend.app.analytics.monthly import TxnLike, get_field, month_key
from backend.app.norma.normalize import DEFAULT_CATEGORY, normalize_amount, parse_date

DEFAULT_BENCHMARK_RATIO = 0.15
RECURRING_MIN_MONTHS = 3
OVER_BENCHMARK_PP = 5.0
PRIORITY_FOCUS_PP = 10.0
SUBSCRIPTION_KEYWORDS = ("software", "subscription")

# Share of total income spent per category.
INDUSTRY_BENCHMARKS: Dict[str, Dict[str, float]] = {
    "SaaS": {
        "software": 0.15,
        "marketing": 0.25,
        "r&d": 0.15,
        "sales": 0.20,
        "operations": 0.15,
        "infrastructure": 0.10,
    },
    "Technology": {
        "software": 0.12,
        "marketing": 0.20,
        "r&d": 0.18,
        "sales": 0.22,
        "operations": 0.15,
        "infrastructure": 0.13,
    },
}

GENERAL_RECOMMENDATIONS = (
    "Consider renegotiating vendor contracts for better terms, especially for high-spend categories.",
    "Implement automated expense tracking and regular reviews to identify ongoing cost-saving opportunities.",
    "Set up spend alerts for categories exceeding industry benchmarks to maintain better cost control.",
)


@dataclass(frozen=True)
class BusinessProfile:
    type: str = "SaaS"
    industry: str = "Technology"


@dataclass(frozen=True)
class Benchmark:
    category: str
    actual: float  # percent of total income
    average: float  # industry percent
    difference: float  # percentage points, positive = over benchmark


@dataclass(frozen=True)
class RecurringExpense:
    category: str
    months: int
    monthly_avg: float


def industry_average(profile: BusinessProfile, category: str) -> float:
    return INDUSTRY_BENCHMARKS.get(profile.type, {}).get(category) or DEFAULT_BENCHMARK_RATIO


def _category(txn: TxnLike) -> str:
    return str(get_field(txn, "category") or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY


def compute_benchmarks(transactions: Iterable[TxnLike], profile: BusinessProfile) -> List[Benchmark]:
    txns = list(transactions)

    total_income = sum(
        normalize_amount(get_field(t, "amount")) for t in txns if get_field(t, "type") == "income"
    )
    if total_income <= 0:
        return []

    spend: Dict[str, float] = {}
    for t in txns:
        if get_field(t, "type") != "expense":
            continue
        key = _category(t).lower()
        spend[key] = spend.get(key, 0.0) + abs(normalize_amount(get_field(t, "amount")))

    benchmarks: List[Benchmark] = []
    for category, amount in spend.items():
        avg = industry_average(profile, category)
        actual = amount / total_income
        benchmarks.append(
            Benchmark(
                category=category,
                actual=actual * 100,
                average=avg * 100,
                difference=(actual - avg) * 100,
            )
        )

    # highest variance first, either direction
    benchmarks.sort(key=lambda b: abs(b.difference), reverse=True)
    return benchmarks


def find_recurring_expenses(transactions: Iterable[TxnLike]) -> List[RecurringExpense]:
    """
    Expense categories with spend in at least RECURRING_MIN_MONTHS distinct
    calendar months. monthly_avg is averaged over the months with spend.
    """
    by_category: Dict[str, Dict[str, float]] = {}

    for t in transactions:
        if get_field(t, "type") != "expense":
            continue
        d = parse_date(get_field(t, "date"))
        if d is None:
            continue
        months = by_category.setdefault(_category(t), {})
        key = month_key(d)
        months[key] = months.get(key, 0.0) + abs(normalize_amount(get_field(t, "amount")))

    out: List[RecurringExpense] = []
    for category, months in by_category.items():
        active = [amt for amt in months.values() if amt > 0]
        if len(active) >= RECURRING_MIN_MONTHS:
            out.append(
                RecurringExpense(
                    category=category,
                    months=len(active),
                    monthly_avg=sum(active) / len(active),
                )
            )
    return out


def generate_recommendations(transactions: Iterable[TxnLike], profile: BusinessProfile) -> List[str]:
    txns = list(transactions)
    benchmarks = compute_benchmarks(txns, profile)
    recurring = find_recurring_expenses(txns)
    recommendations: List[str] = []

    for b in benchmarks:
        if b.difference > OVER_BENCHMARK_PP:
            recommendations.append(
                f"Your {b.category} spend is {b.difference:.1f}% above industry average for "
                f"{profile.type} companies. Consider optimizing this expense category."
            )

    subscriptions = [
        r for r in recurring if any(k in r.category.lower() for k in SUBSCRIPTION_KEYWORDS)
    ]
    if subscriptions:
        total_monthly = sum(r.monthly_avg for r in subscriptions)
        recommendations.append(
            f"You have {len(subscriptions)} recurring software/subscription expenses totaling "
            f"${total_monthly:,.2f}/month. Review these subscriptions for unused or redundant services."
        )

    if benchmarks and benchmarks[0].difference > PRIORITY_FOCUS_PP:
        top = benchmarks[0]
        recommendations.append(
            f"Priority Focus: {top.category} spending shows the highest variance "
            f"({top.difference:.1f}% above average). Consider immediate cost optimization in this area."
        )

    recommendations.extend(GENERAL_RECOMMENDATIONS)
    return recommendations
