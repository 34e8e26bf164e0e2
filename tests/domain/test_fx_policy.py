"""FX policy resolution."""

from decimal import Decimal

import pytest

from gl_kernel.domain.fx_policy import (
    DEFAULT_EXCHANGE_RATE,
    normalize_currency_code,
    validate_fx_policy,
)
from gl_kernel.exceptions import InvalidCurrencyCodeError, InvalidExchangeRateError


class TestValidateFxPolicy:
    def test_same_currency(self):
        result = validate_fx_policy("MYR", "MYR")
        assert result.requires_fx_rate is False
        assert result.exchange_rate == Decimal("1.0")

    def test_foreign_currency_requires_rate(self):
        result = validate_fx_policy("MYR", "USD")
        assert result.requires_fx_rate is True
        assert result.base_currency == "MYR"
        assert result.transaction_currency == "USD"
        assert result.exchange_rate == DEFAULT_EXCHANGE_RATE

    def test_codes_normalized(self):
        result = validate_fx_policy(" myr", "Myr ")
        assert result.requires_fx_rate is False
        assert result.base_currency == "MYR"

    def test_supplied_rate_used(self):
        result = validate_fx_policy("MYR", "USD", Decimal("4.7250"))
        assert result.exchange_rate == Decimal("4.7250")

    def test_supplied_rate_ignored_for_same_currency(self):
        assert validate_fx_policy("MYR", "MYR", Decimal("3")).exchange_rate == Decimal("1.0")

    @pytest.mark.parametrize("rate", [Decimal("0"), Decimal("-4.5")])
    def test_non_positive_rate_rejected(self, rate):
        with pytest.raises(InvalidExchangeRateError) as exc_info:
            validate_fx_policy("MYR", "USD", rate)
        assert exc_info.value.details["transaction_currency"] == "USD"

    @pytest.mark.parametrize("base,txn,field", [
        ("MY", "USD", "base"),
        ("MYR", "USDX", "transaction"),
        ("MYR", "", "transaction"),
        ("MYR", None, "transaction"),
    ])
    def test_invalid_codes_rejected(self, base, txn, field):
        with pytest.raises(InvalidCurrencyCodeError) as exc_info:
            validate_fx_policy(base, txn)
        assert exc_info.value.field == field

    def test_to_dict(self):
        assert validate_fx_policy("MYR", "SGD", "3.45").to_dict() == {
            "requires_fx_rate": True,
            "base_currency": "MYR",
            "transaction_currency": "SGD",
            "exchange_rate": "3.45",
        }


class TestNormalizeCurrencyCode:
    def test_normalizes(self):
        assert normalize_currency_code(" eur ") == "EUR"

    def test_rejects_digits(self):
        with pytest.raises(InvalidCurrencyCodeError) as exc_info:
            normalize_currency_code("123")
        assert exc_info.value.field == "journal"
