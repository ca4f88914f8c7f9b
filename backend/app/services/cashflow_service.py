from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
import logging
from typing import Any, Dict, List, Optional, Sequence

from backend.app.analytics.forecast import generate_forecast, summarize_forecast
from backend.app.analytics.monthly import aggregate_by_month
from backend.app.clarity.anomalies import detect_anomalies, utcnow
from backend.app.clarity.benchmarks import BusinessProfile, compute_benchmarks, generate_recommendations
from backend.app.norma.ingest import PREVIEW_ROWS, parse_csv_text
from backend.app.norma.normalize import Transaction, detect_duplicates


logger = logging.getLogger(__name__)


def _round_money(x: float) -> float:
    return round(float(x), 2)


def serialize_transaction(t: Transaction) -> Dict[str, Any]:
    return {
        "date": t.date.isoformat() if t.date else None,
        "amount": t.amount,
        "type": t.type,
        "category": t.category,
        "description": t.description,
    }


def build_dashboard(
    transactions: Sequence[Transaction],
    profile: BusinessProfile,
    horizon: int = 3,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    One pass over the core: monthly rollup -> forecast -> alerts, plus
    benchmarks and recommendations for the same transactions.
    """
    now = now or utcnow()

    monthly = aggregate_by_month(transactions)
    forecast = generate_forecast(monthly, horizon)
    alerts = detect_anomalies(transactions, forecast, now=now)
    benchmarks = compute_benchmarks(transactions, profile)
    recommendations = generate_recommendations(transactions, profile)

    if len(monthly) < 3:
        logger.warning(
            "Dashboard built without a forecast: %d month(s) of history",
            len(monthly),
        )

    logger.info(
        "Dashboard built txns=%d months=%d alerts=%d benchmarks=%d",
        len(transactions),
        len(monthly),
        len(alerts),
        len(benchmarks),
    )

    return {
        "monthly": [asdict(m) for m in monthly],
        "forecast": [asdict(p) for p in forecast],
        "alerts": [asdict(a) for a in alerts],
        "benchmarks": [
            {
                "category": b.category,
                "actual": _round_money(b.actual),
                "average": _round_money(b.average),
                "difference": _round_money(b.difference),
            }
            for b in benchmarks
        ],
        "recommendations": recommendations,
        "summary": summarize_forecast(transactions, forecast),
        "meta": {
            "txn_count": len(transactions),
            "months_covered": len(monthly),
            "horizon": horizon,
            "profile": asdict(profile),
            "generated_at": now,
        },
    }


def ingest_csv(text: str, dedupe: bool = True) -> Dict[str, Any]:
    """
    Parse an uploaded CSV. Raises ValueError when nothing usable is found.
    """
    result = parse_csv_text(text)
    transactions: List[Transaction] = result.transactions
    duplicates: List[Transaction] = []

    if dedupe:
        report = detect_duplicates(transactions)
        transactions, duplicates = report.unique, report.duplicates
        if duplicates:
            logger.warning("CSV ingest dropped %d duplicate transactions", len(duplicates))

    logger.info(
        "CSV ingested rows=%d skipped=%d duplicates=%d",
        len(transactions),
        len(result.errors),
        len(duplicates),
    )

    return {
        "transactions": [serialize_transaction(t) for t in transactions],
        "preview": [serialize_transaction(t) for t in transactions[:PREVIEW_ROWS]],
        "errors": list(result.errors),
        "duplicates": [serialize_transaction(t) for t in duplicates],
    }
