"""
Exchange Calculation Tests - Unit Tests for the Quote Logic

Covers both trade scenarios, the LBP denomination of profit, box attribution
and the vault deltas a quote implies.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- exbook.domain.exchange (quote, Quote)
- exbook.domain.models (ExchangeRates)
- exbook.domain.errors (InvalidCurrencyError)
"""
import pytest  # Testing framework for writing and running tests

from exbook.domain.errors import InvalidAmountError, InvalidCurrencyError  # Raised for bad input
from exbook.domain.exchange import quote  # Function under test
from exbook.domain.models import ExchangeRates  # Rates input

RATES = ExchangeRates(buy_rate=98000, sell_rate=100000)


class TestUsdInput:
    def test_customer_pays_usd_receives_lbp(self):
        q = quote("usd", 500.0, RATES)

        assert q.result == 49_000_000
        assert q.profit == 1_000_000
        assert q.rate == 98000
        assert q.from_currency == "USD"
        assert q.to_currency == "LBP"
        assert q.to_my_box is True
        assert q.description == "Customer gives 500 USD, gets 49000000 LBP"

    def test_box_increment_and_vault_delta(self):
        q = quote("usd", 500.0, RATES)

        assert q.box_increment == 49_000_000
        assert q.vault_delta == (-49_000_000, 500)

    def test_currency_code_is_case_insensitive(self):
        assert quote("USD", 1.0, RATES).input_currency == "usd"

    def test_fractional_amount_description(self):
        q = quote("usd", 12.5, RATES)
        assert q.description == "Customer gives 12.5 USD, gets 1225000 LBP"


class TestLbpInput:
    def test_customer_pays_lbp_receives_usd(self):
        q = quote("lbp", 50_000_000.0, RATES)

        assert q.result == 500
        # USD paid out times the LBP/USD spread gives LBP
        assert q.profit == 1_000_000
        assert q.rate == 100000
        assert q.from_currency == "LBP"
        assert q.to_currency == "USD"
        assert q.to_my_box is False
        assert q.description == "Customer gives 50000000 LBP, gets 500.00 USD"

    def test_box_increment_and_vault_delta(self):
        q = quote("lbp", 50_000_000.0, RATES)

        assert q.box_increment == 50_000_000
        assert q.vault_delta == (50_000_000, -500)


class TestAttributionRules:
    def test_attribution_ignores_rate_direction(self):
        inverted = ExchangeRates(buy_rate=100000, sell_rate=98000)

        assert quote("usd", 10.0, inverted).to_my_box is True
        assert quote("lbp", 1_000_000.0, inverted).to_my_box is False

    def test_inverted_rates_give_negative_profit(self):
        inverted = ExchangeRates(buy_rate=100000, sell_rate=98000)
        assert quote("usd", 10.0, inverted).profit == -20000

    def test_to_transaction_copies_fields(self):
        t = quote("lbp", 1_000_000.0, RATES).to_transaction(timestamp=123)

        assert t.timestamp == 123
        assert t.amount == 1_000_000
        assert t.result == 10
        assert t.to_my_box is False


class TestInvalidCurrency:
    def test_unknown_currency_raises(self):
        with pytest.raises(InvalidCurrencyError):
            quote("eur", 10.0, RATES)


class TestOverflow:
    def test_usd_result_too_large(self):
        with pytest.raises(InvalidAmountError):
            quote("usd", 1e305, RATES)

    def test_lbp_result_too_large(self):
        with pytest.raises(InvalidAmountError):
            quote("lbp", 1e300, ExchangeRates(buy_rate=1e-20, sell_rate=1e-10))
