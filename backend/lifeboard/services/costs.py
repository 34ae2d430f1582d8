"""Conversion of subscription costs into a monthly figure in the base currency."""

import math
import re
from decimal import Decimal

from lifeboard.config import settings

MONTHS_PER_CYCLE: dict[str, int] = {
    "monthly": 1,
    "quarterly": 3,
    "yearly": 12,
}

_NON_NUMERIC = re.compile(r"[^\d.\-]")


def normalize_currency(value: str | None, default: str | None = None) -> str:
    """Upper-case a currency code; blank values fall back to ``default`` (the base currency)."""
    code = (value or "").strip().upper()
    if not code:
        return (default or settings.BASE_CURRENCY).upper()
    return code


def parse_cost(value: object) -> float:
    """Coerce a stored cost into a non-negative float.

    Strings are stripped of everything but digits, ``.`` and ``-`` before
    parsing. Anything that still does not parse, is not finite or is negative
    counts as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        cleaned = _NON_NUMERIC.sub("", str(value))
        try:
            number = float(cleaned)
        except ValueError:
            return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def to_base(amount: float, currency: str | None, rates: dict[str, float], base: str | None = None) -> float:
    """Convert ``amount`` of ``currency`` into the base currency; unknown codes convert 1:1."""
    code = normalize_currency(currency, base)
    return amount * rates.get(code, 1.0)


def to_monthly_base(
    cost: object,
    currency: str | None,
    billing_cycle: str | None,
    rates: dict[str, float],
    base: str | None = None,
) -> float:
    cost_in_base = to_base(parse_cost(cost), currency, rates, base)
    return cost_in_base / MONTHS_PER_CYCLE.get(billing_cycle or "monthly", 1)
