"""
Values -- Amount coercion and currency-code normalization.

Responsibility:
    Turns caller-supplied amounts (Decimal, int, str, float) into Decimal and
    normalizes ISO-style currency codes. Every monetary comparison in the
    kernel runs on Decimal, never float.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Failure modes:
    - ValueError when an amount cannot be converted to a finite Decimal.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")

# Two-decimal quantum used when deriving amounts (e.g. FX conversion)
CENT = Decimal("0.01")


def to_amount(value: Any) -> Decimal:
    """
    Convert a caller-supplied amount to Decimal.

    Floats go through ``str()`` so 100.001 becomes Decimal("100.001") rather
    than its binary expansion. ``None`` means an absent side and maps to zero.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


def normalize_code(code: Any) -> str:
    """Trim and uppercase a currency code. Non-strings normalize to ''."""
    if not isinstance(code, str):
        return ""
    return code.strip().upper()


def is_currency_code(code: str) -> bool:
    """True iff ``code`` is exactly three ASCII letters."""
    return len(code) == 3 and code.isascii() and code.isalpha()
