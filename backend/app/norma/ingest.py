"""
Norma - CSV ingest layer.

Responsibility:
- Read CSV text (uploaded) or a CSV file from disk
- Parse rows into Transaction records via normalize.coerce_transaction

Design notes:
- This is intentionally the "IO edge" of the pipeline.
- Everything after this should be pure functions where possible.
- Header matching is forgiving: case-insensitive and substring based, so
  "Transaction Date" and "Amount (USD)" both resolve.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .normalize import Transaction, coerce_transaction, parse_date

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("date", "amount")
OPTIONAL_COLUMNS = ("type", "category", "description")
PREVIEW_ROWS = 5


@dataclass(frozen=True)
class ParseResult:
    transactions: List[Transaction]
    preview: List[Transaction]
    errors: List[str] = field(default_factory=list)


def _resolve_columns(headers: Sequence[str]) -> Dict[str, str]:
    """
    Map canonical column name -> actual header.

    Exact matches beat substring matches so a file with both "date" and
    "posted date" uses "date".
    """
    lowered = [(h, h.strip().lower()) for h in headers if h is not None]
    resolved: Dict[str, str] = {}
    for canonical in REQUIRED_COLUMNS + OPTIONAL_COLUMNS:
        exact = next((h for h, low in lowered if low == canonical), None)
        if exact is not None:
            resolved[canonical] = exact
            continue
        partial = next((h for h, low in lowered if canonical in low), None)
        if partial is not None:
            resolved[canonical] = partial
    return resolved


def _parse_row(row: Mapping[str, Optional[str]], columns: Dict[str, str], line_no: int) -> Transaction:
    """
    Parse a single CSV row into a Transaction.

    Raises ValueError with a useful message including line number.
    """
    raw = {canonical: (row.get(header) or "").strip() for canonical, header in columns.items()}

    if not raw.get("amount"):
        raise ValueError(f"CSV parse error on line {line_no}: amount is required")
    if parse_date(raw.get("date")) is None:
        raise ValueError(f"CSV parse error on line {line_no}: unrecognized date {raw.get('date')!r}")

    return coerce_transaction(raw)


def _parse_rows(reader: csv.DictReader) -> ParseResult:
    headers = tuple(h.strip() for h in (reader.fieldnames or []) if h is not None)
    if not headers:
        raise ValueError("No headers found in the CSV. Expected headers: date, amount, category")

    columns = _resolve_columns(headers)
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        raise ValueError(
            f"CSV missing required columns {missing}. "
            f"Found columns: {list(headers)}"
        )

    items: List[Transaction] = []
    errors: List[str] = []

    for row in reader:
        if row is None or all((v or "").strip() == "" for v in row.values() if isinstance(v, str)):
            continue
        # physical line where the record ends; quoted fields may span lines
        line_no = reader.line_num
        try:
            items.append(_parse_row({(k or "").strip(): v for k, v in row.items()}, columns, line_no))
        except ValueError as e:
            errors.append(str(e))

    if not items:
        detail = "; ".join(errors[:5]) if errors else "file has no data rows"
        raise ValueError(f"No valid transactions found in CSV ({detail})")

    if errors:
        logger.warning("CSV ingest skipped %d of %d rows", len(errors), len(errors) + len(items))

    items.sort(key=lambda t: t.date)
    return ParseResult(transactions=items, preview=items[:PREVIEW_ROWS], errors=errors)


def parse_csv_text(text: str) -> ParseResult:
    """
    Parse CSV content that is already in memory (e.g. an upload body).

    Raises:
        ValueError: for missing columns, or when no row could be parsed
    """
    reader = csv.DictReader(io.StringIO((text or "").lstrip("\ufeff")))
    return _parse_rows(reader)


def load_csv(path: Path) -> ParseResult:
    """
    Load transactions from a CSV file.

    Required columns:
    - date (ISO or one of normalize.DATE_FORMATS)
    - amount

    Optional columns:
    - type (income/expense/credit/debit; inferred from sign when absent)
    - category
    - description

    Raises:
        FileNotFoundError: if the CSV path doesn't exist
        ValueError: for missing columns, or when no row could be parsed
    """
    with path.open("r", newline="", encoding="utf-8-sig") as f:
        return _parse_rows(csv.DictReader(f))


def transactions_from_rows(rows: Iterable[Mapping[str, object]]) -> List[Transaction]:
    """Coerce already-structured rows (JSON bodies) without the CSV checks."""
    return [coerce_transaction(r) for r in rows]
