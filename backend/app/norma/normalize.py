"""
Norma - normalization layer.

Responsibility:
- Define the canonical Transaction record used by analytics and clarity.
- Turn loose values (strings from CSV cells, JSON numbers, dates in many
  formats) into that record.
- Apply lightweight, explainable rules:
  - type taken from an explicit column, else inferred from the sign of amount
  - expense amounts stored as magnitudes
  - category suggested from description keywords when missing

Design notes:
- This module must be PURE:
  - no file IO
  - no network calls
  - no global state mutation
- Bad values coerce (amount -> 0.0, date -> None) instead of raising;
  callers decide whether a row is usable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple

# -------------------------
# Types
# -------------------------

TxnType = Literal["income", "expense"]

DEFAULT_CATEGORY = "Uncategorized"


# -------------------------
# Core record
# -------------------------

@dataclass(frozen=True)
class Transaction:
    """
    Invariants (when built through coerce_transaction):
    - date is a real datetime.date
    - expense amounts are magnitudes; income keeps its sign (refunds are negative)
    - category is never blank
    """
    date: Optional[date]
    amount: float
    type: TxnType
    category: str = DEFAULT_CATEGORY
    description: str = ""


@dataclass(frozen=True)
class DuplicateReport:
    unique: List[Transaction]
    duplicates: List[Transaction]


# -------------------------
# Amounts
# -------------------------

_AMOUNT_STRIP = re.compile(r"[^0-9.\-]")


def normalize_amount(value: Any) -> float:
    """
    Coerce an amount cell into a float.

    Supports:
    - 1234.56 / "1234.56"
    - "$1,234.56", "EUR 25,000", " -59.99 "
    - "(12.50)" accounting negatives

    Anything unparsable becomes 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        f = float(value)
        return f if f == f else 0.0  # NaN

    s = str(value).strip()
    if not s:
        return 0.0

    negative = s.startswith("(") and s.endswith(")")
    cleaned = _AMOUNT_STRIP.sub("", s)
    if cleaned in ("", "-", ".", "-."):
        return 0.0
    try:
        f = float(cleaned)
    except ValueError:
        return 0.0
    return -abs(f) if negative else f


# -------------------------
# Dates
# -------------------------

DATE_FORMATS: Tuple[str, ...] = (
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%m-%d-%Y",
    "%d-%m-%Y",
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%m.%d.%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)

_QUARTER = re.compile(r"Q([1-4])\s*(\d{4})", re.IGNORECASE)


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date cell using ISO first, then DATE_FORMATS in order.

    US month-first formats win over day-first ones for ambiguous input
    like "03/04/2024". Quarter notation ("Q3 2023") maps to the first day
    of the quarter.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    s = str(value).strip()
    if not s:
        return None

    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue

    m = _QUARTER.search(s)
    if m:
        quarter, year = int(m.group(1)), int(m.group(2))
        return date(year, (quarter - 1) * 3 + 1, 1)

    return None


# -------------------------
# Categories
# -------------------------

CATEGORY_KEYWORDS: Sequence[Tuple[str, Sequence[str]]] = (
    ("Sales", ("revenue", "sales", "income", "payment received")),
    ("Salary", ("salary", "wage", "payroll")),
    ("Consulting", ("consulting", "service fee", "professional service")),
    ("Office Supplies", ("office", "supplies", "stationery")),
    ("Rent", ("rent", "lease", "property")),
    ("Utilities", ("utility", "electricity", "water", "gas", "internet")),
    ("Insurance", ("insurance", "coverage", "policy")),
    ("Marketing", ("marketing", "advertising", "promotion")),
    ("Travel", ("travel", "flight", "hotel", "transportation")),
    ("Software", ("software", "subscription", "license")),
    ("Hardware", ("hardware", "equipment", "device")),
    ("Maintenance", ("maintenance", "repair", "service")),
    ("Training", ("training", "education", "workshop")),
    ("Legal", ("legal", "attorney", "lawyer")),
    ("Banking", ("bank", "fee", "charge", "interest")),
)


def suggest_category(description: str, amount: float) -> str:
    """
    First keyword hit wins (table order matters: "service fee" is Consulting,
    not Banking). Falls back on the sign of amount.
    """
    desc = (description or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(k in desc for k in keywords):
            return category
    return "Sales" if amount > 0 else "Miscellaneous"


# -------------------------
# Type
# -------------------------

_TYPE_ALIASES: Dict[str, TxnType] = {
    "income": "income",
    "inflow": "income",
    "credit": "income",
    "revenue": "income",
    "expense": "expense",
    "outflow": "expense",
    "debit": "expense",
    "cost": "expense",
}


def normalize_type(raw: Any, amount: float) -> TxnType:
    key = str(raw or "").strip().lower()
    if key in _TYPE_ALIASES:
        return _TYPE_ALIASES[key]
    return "income" if amount >= 0 else "expense"


def coerce_transaction(row: Mapping[str, Any]) -> Transaction:
    """
    Build a Transaction from a loose mapping (CSV row, JSON body, ...).

    Does not raise: a row with no usable date yields date=None.
    """
    amount = normalize_amount(row.get("amount"))
    txn_type = normalize_type(row.get("type"), amount)
    description = str(row.get("description") or "").strip()

    category = str(row.get("category") or "").strip()
    if not category:
        category = suggest_category(description, amount) if description else DEFAULT_CATEGORY

    return Transaction(
        date=parse_date(row.get("date")),
        amount=abs(amount) if txn_type == "expense" else amount,
        type=txn_type,
        category=category,
        description=description,
    )


# -------------------------
# Duplicates
# -------------------------

def detect_duplicates(transactions: Sequence[Transaction]) -> DuplicateReport:
    """
    Same (date, amount, description) counts as a duplicate; first one wins.
    """
    seen = set()
    unique: List[Transaction] = []
    duplicates: List[Transaction] = []

    for t in transactions:
        key = (t.date, t.amount, t.description or "")
        if key in seen:
            duplicates.append(t)
        else:
            seen.add(key)
            unique.append(t)

    return DuplicateReport(unique=unique, duplicates=duplicates)
