# app/domain/services/amount_in_words.py
"""Rupee amounts in words, Indian numbering (Crore / Lakh / Thousand)."""

from __future__ import annotations

from typing import Any

from app.domain.errors import InvalidInputError
from app.domain.money import ZERO, money, to_decimal

ONES = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
TEENS = ["Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
         "Seventeen", "Eighteen", "Nineteen"]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

# (divisor, name), largest first
INDIAN_UNITS = [(10_000_000, "Crore"), (100_000, "Lakh"), (1_000, "Thousand")]


def _below_thousand(n: int) -> str:
    if n == 0:
        return ""
    if n < 10:
        return ONES[n]
    if n < 20:
        return TEENS[n - 10]
    if n < 100:
        return TENS[n // 10] + (" " + ONES[n % 10] if n % 10 else "")
    rest = n % 100
    return ONES[n // 100] + " Hundred" + (" " + _below_thousand(rest) if rest else "")


def integer_in_words(n: int) -> str:
    """``125000`` -> ``"One Lakh Twenty Five Thousand"``.  Empty for 0."""
    parts = []
    for divisor, name in INDIAN_UNITS:
        if n >= divisor:
            count, n = divmod(n, divisor)
            # counts of 1000 crore and above nest, e.g. "One Thousand Crore"
            head = integer_in_words(count) if count >= 1000 else _below_thousand(count)
            parts.append(f"{head} {name}")
    if n:
        parts.append(_below_thousand(n))
    return " ".join(parts)


def amount_in_words(amount: Any) -> str:
    value = money(to_decimal(amount, "amount"))
    if value < ZERO:
        raise InvalidInputError("amount must not be negative")
    if value == ZERO:
        return "Zero Rupees Only"

    rupees = int(value)
    paise = int((value - rupees) * 100)

    words = (integer_in_words(rupees) or "Zero") + " Rupees"
    if paise:
        words += " and " + _below_thousand(paise) + " Paise"
    return words + " Only"
