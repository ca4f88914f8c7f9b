# tools/generate_demo_csv.py
from __future__ import annotations

import argparse
import csv
import random
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

Row = Tuple[str, str, float, str, str]  # date, description, amount, type, category


@dataclass(frozen=True)
class Category:
    name: str
    min_amt: float
    max_amt: float
    type: str  # "income" | "expense"


CATEGORIES: List[Category] = [
    Category("Sales", 1200, 9000, "income"),
    Category("Operations", 900, 2400, "expense"),
    Category("Infrastructure", 80, 450, "expense"),
    Category("Software", 25, 300, "expense"),
    Category("Marketing", 50, 800, "expense"),
    Category("R&D", 100, 900, "expense"),
]

DESCRIPTIONS = {
    "Sales": ["Client payment", "Invoice paid", "Project deposit", "Retainer payment"],
    "Operations": ["Office rent", "Utilities", "Insurance premium"],
    "Infrastructure": ["Hosting", "Cloud services"],
    "Software": ["Software subscription", "License renewal"],
    "Marketing": ["Ads spend", "Conference sponsorship"],
    "R&D": ["Prototype materials", "Contractor sprint"],
}


def month_multiplier(m: int) -> float:
    """
    Simple seasonality curve.
    - Q4 stronger
    - summer a bit softer
    """
    if m in (11, 12):
        return 1.25
    if m in (1, 2):
        return 0.95
    if m in (6, 7):
        return 0.90
    return 1.00


def daterange(start: date, end: date) -> Iterator[date]:
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


def _by_name(name: str) -> Category:
    return next(c for c in CATEGORIES if c.name == name)


def choose_amount(rng: random.Random, cat: Category, mult: float) -> float:
    return round(rng.uniform(cat.min_amt, cat.max_amt) * mult, 2)


def write_csv(path: Path, rows: List[Row]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["date", "description", "amount", "type", "category"])
        for r in rows:
            w.writerow(r)


def generate(
    start: date,
    end: date,
    seed: int = 7,
    bad_months: Optional[List[str]] = None,  # e.g. ["2025-11", "2026-02"]
) -> List[Row]:
    """
    Deterministic demo ledger. Bad months get weaker sales and heavier
    spend so the anomaly rules have something to find.
    """
    rng = random.Random(seed)
    bad_months = bad_months or []

    rows: List[Row] = []
    sales = _by_name("Sales")
    variable = [c for c in CATEGORIES if c.type == "expense" and c.name != "Operations"]

    for d in daterange(start, end):
        mk = f"{d.year:04d}-{d.month:02d}"
        mult = month_multiplier(d.month)

        inflow_mult = mult * (0.60 if mk in bad_months else 1.0)
        spend_mult = mult * (1.40 if mk in bad_months else 1.0)

        # fixed costs on the 1st
        if d.day == 1:
            ops = _by_name("Operations")
            rows.append((d.isoformat(), "Office rent", choose_amount(rng, ops, spend_mult), ops.type, ops.name))
            sw = _by_name("Software")
            rows.append((d.isoformat(), "Software subscription", choose_amount(rng, sw, 1.0), sw.type, sw.name))

        # 0-2 vendor charges a day
        for _ in range(rng.randint(0, 2)):
            cat = rng.choice(variable)
            rows.append((d.isoformat(), rng.choice(DESCRIPTIONS[cat.name]), choose_amount(rng, cat, spend_mult), cat.type, cat.name))

        # client payments, weekdays only
        if d.weekday() < 5 and rng.random() < 0.35:
            rows.append((d.isoformat(), rng.choice(DESCRIPTIONS[sales.name]), choose_amount(rng, sales, inflow_mult), sales.type, sales.name))

    # Shuffle for realism then sort by date (stable)
    rng.shuffle(rows)
    rows.sort(key=lambda r: r[0])
    return rows


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Write a deterministic demo transactions CSV.")
    parser.add_argument("--out", type=Path, default=Path("demo_transactions.csv"))
    parser.add_argument("--start", type=date.fromisoformat, default=date(2025, 1, 1))
    parser.add_argument("--end", type=date.fromisoformat, default=date(2025, 12, 31))
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--bad-month", action="append", dest="bad_months", default=None)
    args = parser.parse_args(argv)

    rows = generate(args.start, args.end, seed=args.seed, bad_months=args.bad_months or ["2025-08"])
    write_csv(args.out, rows)
    print(f"Wrote {len(rows)} rows to {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
