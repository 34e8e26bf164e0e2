"""
FX policy -- Decides whether a transaction needs a foreign-exchange rate.

Rate acquisition is not done here. The caller's rate collaborator supplies
the rate; this module only validates it and defaults it to 1.0 when none
was supplied.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from gl_kernel.domain.dtos import FxPolicyResult
from gl_kernel.domain.values import ZERO, is_currency_code, normalize_code, to_amount
from gl_kernel.exceptions import InvalidCurrencyCodeError, InvalidExchangeRateError

DEFAULT_EXCHANGE_RATE = Decimal("1.0")


def normalize_currency_code(code: Any, field: str = "journal") -> str:
    """
    Trim and uppercase ``code``.

    Raises:
        InvalidCurrencyCodeError: If the result is not exactly 3 letters.
    """
    normalized = normalize_code(code)
    if not is_currency_code(normalized):
        raise InvalidCurrencyCodeError(code, field)
    return normalized


def validate_fx_policy(
    base_currency: Any,
    transaction_currency: Any,
    exchange_rate: Decimal | None = None,
) -> FxPolicyResult:
    """
    Resolve the FX requirement for a transaction.

    Postconditions:
        - requires_fx_rate is True iff the normalized codes differ.
        - exchange_rate is 1.0 for same-currency transactions and when no
          rate was supplied.

    Raises:
        InvalidCurrencyCodeError: Either code is not 3 letters.
        InvalidExchangeRateError: A supplied rate is zero or negative.
    """
    base = normalize_currency_code(base_currency, "base")
    transaction = normalize_currency_code(transaction_currency, "transaction")
    requires_fx_rate = base != transaction

    rate = DEFAULT_EXCHANGE_RATE
    if requires_fx_rate and exchange_rate is not None:
        rate = to_amount(exchange_rate)
        if rate <= ZERO:
            raise InvalidExchangeRateError(base, transaction, rate)

    return FxPolicyResult(
        requires_fx_rate=requires_fx_rate,
        base_currency=base,
        transaction_currency=transaction,
        exchange_rate=rate,
    )
