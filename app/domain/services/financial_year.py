# app/domain/services/financial_year.py
"""Indian financial year (April to March) helpers and document numbering."""

from __future__ import annotations

import re
from datetime import date

from app.domain.errors import InvalidInputError

FY_REGEX = re.compile(r"^(\d{4})-(\d{4})$")
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def fy_start_year(today: date) -> int:
    return today.year if today.month >= 4 else today.year - 1


def current_financial_year(today: date | None = None) -> str:
    start = fy_start_year(today or date.today())
    return f"{start}-{start + 1}"


def parse_financial_year(financial_year: str) -> int:
    """Validate ``"YYYY-YYYY"`` and return the start year."""
    m = FY_REGEX.match((financial_year or "").strip())
    if not m:
        raise InvalidInputError(f"Financial year must look like 2025-2026, got {financial_year!r}")
    start, end = int(m.group(1)), int(m.group(2))
    if end != start + 1:
        raise InvalidInputError(f"Financial year {financial_year} must span consecutive years")
    return start


def financial_year_bounds(financial_year: str) -> tuple[date, date]:
    start = parse_financial_year(financial_year)
    return date(start, 4, 1), date(start + 1, 3, 31)


def financial_year_months(financial_year: str) -> list[dict]:
    start = parse_financial_year(financial_year)
    months = []
    for i in range(12):
        month = (i + 3) % 12 + 1
        year = start if month >= 4 else start + 1
        months.append({"month": month, "year": year, "label": f"{MONTH_NAMES[month - 1]} {year}"})
    return months


def generate_invoice_number(prefix: str, counter: int, today: date | None = None) -> str:
    """``INV-2025-0007``"""
    year = (today or date.today()).year
    return f"{prefix}-{year}-{counter:04d}"


def generate_invoice_number_with_fy(prefix: str, counter: int, today: date | None = None) -> str:
    """``INV-25-26/0007``"""
    start = fy_start_year(today or date.today())
    fy = f"{str(start)[-2:]}-{str(start + 1)[-2:]}"
    return f"{prefix}-{fy}/{counter:04d}"
