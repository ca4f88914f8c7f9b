from datetime import date, datetime
from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[2]))

from backend.app.norma.normalize import (  # noqa: E402
    Transaction,
    coerce_transaction,
    detect_duplicates,
    normalize_amount,
    parse_date,
    suggest_category,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        (12.5, 12.5),
        (-3, -3.0),
        ("1234.56", 1234.56),
        ("$1,234.56", 1234.56),
        (" -59.99 ", -59.99),
        ("EUR 25,000", 25000.0),
        ("(12.50)", -12.5),
        ("", 0.0),
        ("n/a", 0.0),
        (None, 0.0),
        (float("nan"), 0.0),
    ],
)
def test_normalize_amount(raw, expected):
    assert normalize_amount(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2024-06-03", date(2024, 6, 3)),
        ("2024-06-03T10:00:00Z", date(2024, 6, 3)),
        ("06/03/2024", date(2024, 6, 3)),
        ("25/12/2024", date(2024, 12, 25)),
        ("03.06.2024", date(2024, 6, 3)),
        ("June 03, 2024", date(2024, 6, 3)),
        ("3 Jun 2024", date(2024, 6, 3)),
        ("Q3 2023", date(2023, 7, 1)),
        (datetime(2024, 1, 2, 3, 4), date(2024, 1, 2)),
        (date(2024, 1, 2), date(2024, 1, 2)),
        ("someday", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_date(raw, expected):
    assert parse_date(raw) == expected


def test_suggest_category_keywords_and_fallback():
    assert suggest_category("Monthly SOFTWARE license", -50) == "Software"
    assert suggest_category("Consulting service fee", 900) == "Consulting"
    assert suggest_category("Wire from ACME", 900) == "Sales"
    assert suggest_category("Wire to ACME", -900) == "Miscellaneous"


def test_coerce_transaction_infers_type_from_sign_and_stores_magnitude():
    txn = coerce_transaction({"date": "2024-02-01", "amount": "-45.00", "description": "Monthly rent"})

    assert txn == Transaction(
        date=date(2024, 2, 1),
        amount=45.0,
        type="expense",
        category="Rent",
        description="Monthly rent",
    )


def test_coerce_transaction_explicit_type_wins():
    txn = coerce_transaction({"date": "2024-02-01", "amount": "45", "type": "Debit", "category": "Travel"})

    assert txn.type == "expense"
    assert txn.amount == 45.0
    assert txn.category == "Travel"


def test_coerce_transaction_tolerates_garbage():
    txn = coerce_transaction({"date": "??", "amount": "abc"})

    assert txn.date is None
    assert txn.amount == 0.0
    assert txn.type == "income"
    assert txn.category == "Uncategorized"


def test_detect_duplicates_first_occurrence_wins():
    a = Transaction(date=date(2024, 1, 1), amount=10.0, type="expense", description="Coffee")
    b = Transaction(date=date(2024, 1, 1), amount=10.0, type="expense", description="Coffee", category="Meals")
    c = Transaction(date=date(2024, 1, 2), amount=10.0, type="expense", description="Coffee")

    report = detect_duplicates([a, b, c])

    assert report.unique == [a, c]
    assert report.duplicates == [b]


def test_coerce_transaction_keeps_sign_of_income_refunds():
    refund = coerce_transaction({"date": "2024-01-20", "amount": "-200", "type": "income", "category": "Sales"})
    expense = coerce_transaction({"date": "2024-01-20", "amount": "-200", "type": "expense", "category": "Rent"})

    assert refund.type == "income"
    assert refund.amount == -200.0
    assert expense.amount == 200.0
