"""
test_core_types.py - Unit tests for core data structures

Tests:
- Coin and Balance: creation, validation, immutability
- TokenDefinition: rate normalisation, bounds, leg-local fees
- TransferRequest: leg validation, totals, request_id
- Arithmetic: ceil_div, apply_rate, to_rate
"""

import pytest
from decimal import Decimal
from fractions import Fraction

from multisend import (
    Coin, Balance, TokenDefinition, TransferRequest, MultiSend,
    balance, token, ceil_div, apply_rate, to_rate,
)


class TestCoin:
    """Tests for Coin creation and validation."""

    def test_create_valid_coin(self):
        coin = Coin("denom1", 1000)
        assert coin.denom == "denom1"
        assert coin.amount == 1000

    def test_negative_amount_allowed(self):
        """Deltas carry negative amounts."""
        assert Coin("denom1", -1200).amount == -1200

    def test_empty_denom_raises(self):
        with pytest.raises(ValueError, match="denom cannot be empty"):
            Coin("  ", 1)

    def test_float_amount_raises(self):
        with pytest.raises(ValueError, match="must be int"):
            Coin("denom1", 1.5)

    def test_bool_amount_raises(self):
        with pytest.raises(ValueError, match="must be int"):
            Coin("denom1", True)

    def test_amount_beyond_64_bits(self):
        coin = Coin("denom1", 2**100)
        assert coin.amount == 1267650600228229401496703205376

    def test_coin_is_frozen(self):
        coin = Coin("denom1", 1)
        with pytest.raises(AttributeError):
            coin.amount = 2


class TestBalance:
    """Tests for Balance records."""

    def test_list_coins_frozen_to_tuple(self):
        record = Balance("account1", [Coin("denom1", 5)])
        assert record.coins == (Coin("denom1", 5),)

    def test_duplicate_denom_raises(self):
        with pytest.raises(ValueError, match="Duplicate denom denom1"):
            Balance("account1", [Coin("denom1", 5), Coin("denom1", 6)])

    def test_empty_address_raises(self):
        with pytest.raises(ValueError, match="address cannot be empty"):
            Balance("", ())

    def test_non_coin_entry_raises(self):
        with pytest.raises(ValueError, match="must be Coin"):
            Balance("account1", [("denom1", 5)])

    def test_amount_of_missing_denom_is_zero(self):
        record = balance("account1", {"denom1": 5})
        assert record.amount_of("denom1") == 5
        assert record.amount_of("denom2") == 0

    def test_factory_preserves_order(self):
        record = balance("account1", {"b": 1, "a": 2})
        assert record.denoms() == ["b", "a"]
        assert record.as_dict() == {"b": 1, "a": 2}

    def test_factory_without_coins(self):
        assert balance("account1").coins == ()

    def test_balances_compare_by_value(self):
        assert balance("x", {"d": 1}) == Balance("x", (Coin("d", 1),))

    def test_repr_contains_fields(self):
        text = repr(balance("account1", {"denom1": -1200}))
        assert "account1" in text
        assert "-1200 denom1" in text


class TestRates:
    """Tests for to_rate() normalisation."""

    @pytest.mark.parametrize("value, expected", [
        ("0.08", Fraction(2, 25)),
        ("8/100", Fraction(2, 25)),
        (Decimal("0.12"), Fraction(3, 25)),
        (0.08, Fraction(2, 25)),
        (1, Fraction(1)),
        (0, Fraction(0)),
        (Fraction(1, 3), Fraction(1, 3)),
    ])
    def test_exact_conversion(self, value, expected):
        assert to_rate(value) == expected

    @pytest.mark.parametrize("value", ["1.01", -0.01, Fraction(-1, 2), 2])
    def test_out_of_range_raises(self, value):
        with pytest.raises(ValueError, match="between"):
            to_rate(value)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), Decimal("NaN")])
    def test_non_finite_raises(self, value):
        with pytest.raises(ValueError, match="finite"):
            to_rate(value)

    def test_bool_raises(self):
        with pytest.raises(ValueError, match="bool"):
            to_rate(True)

    def test_unsupported_type_raises(self):
        with pytest.raises(ValueError, match="unsupported"):
            to_rate([0.1])


class TestArithmetic:
    """Tests for integer ceiling helpers."""

    @pytest.mark.parametrize("numerator, denominator, expected", [
        (0, 5, 0),
        (10, 5, 2),
        (11, 5, 3),
        (1, 100, 1),
        (-7, 2, -3),
    ])
    def test_ceil_div(self, numerator, denominator, expected):
        assert ceil_div(numerator, denominator) == expected

    def test_ceil_div_rejects_non_positive_denominator(self):
        with pytest.raises(ValueError, match="positive"):
            ceil_div(1, 0)

    def test_apply_rate_rounds_up(self):
        assert apply_rate(1000, Fraction(2, 25)) == 80
        assert apply_rate(1, Fraction(1, 100)) == 1
        assert apply_rate(75, Fraction(1, 10)) == 8
        assert apply_rate(0, Fraction(1, 2)) == 0

    def test_apply_rate_large_amount(self):
        assert apply_rate(10**30, Fraction(2, 25)) == 8 * 10**28
        assert apply_rate(10**30 + 1, Fraction(2, 25)) == 8 * 10**28 + 1


class TestTokenDefinition:
    """Tests for TokenDefinition creation and leg-local fees."""

    def test_rates_normalised(self):
        definition = TokenDefinition("denom1", "issuer", "0.08", 0.12)
        assert definition.burn_rate == Fraction(2, 25)
        assert definition.commission_rate == Fraction(3, 25)

    def test_defaults_are_fee_free(self):
        definition = TokenDefinition("denom1", "issuer")
        assert definition.leg_fees("account1", 1000) == (0, 0)

    def test_empty_issuer_raises(self):
        with pytest.raises(ValueError, match="issuer cannot be empty"):
            TokenDefinition("denom1", "")

    def test_rate_above_one_raises(self):
        with pytest.raises(ValueError, match="between"):
            token("denom1", "issuer", burn_rate="1.5")

    def test_leg_fees_round_up(self):
        definition = token("denom1", "issuer", burn_rate="0.08", commission_rate="0.12")
        assert definition.leg_fees("account1", 1000) == (80, 120)
        assert definition.leg_fees("account1", 1) == (1, 1)

    def test_issuer_pays_no_leg_fees(self):
        definition = token("denom1", "issuer", burn_rate="1", commission_rate="1")
        assert definition.is_issuer("issuer")
        assert definition.leg_fees("issuer", 1000) == (0, 0)


class TestTransferRequest:
    """Tests for TransferRequest creation."""

    def test_lists_frozen_to_tuples(self, sample_request):
        assert isinstance(sample_request.inputs, tuple)
        assert isinstance(sample_request.outputs, tuple)

    def test_negative_leg_amount_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            TransferRequest(
                inputs=[balance("account1", {"denom1": -5})],
                outputs=[balance("account2", {"denom1": -5})],
            )

    def test_non_balance_leg_raises(self):
        with pytest.raises(ValueError, match="must be Balance"):
            TransferRequest(inputs=[Coin("denom1", 1)], outputs=[])

    def test_denoms_first_seen_order(self, sample_request):
        assert sample_request.denoms() == ["denom1", "denom2"]

    def test_totals(self, sample_request):
        assert sample_request.input_totals() == {"denom1": 1000, "denom2": 1000}
        assert sample_request.output_totals() == {"denom1": 1000, "denom2": 1000}

    def test_request_id_is_deterministic(self, sample_request):
        again = TransferRequest(
            inputs=[
                balance("account1", {"denom1": 1000}),
                balance("account2", {"denom2": 1000}),
            ],
            outputs=[balance("account_recipient", {"denom1": 1000, "denom2": 1000})],
        )
        assert again.request_id == sample_request.request_id
        assert len(sample_request.request_id) == 16

    def test_request_id_depends_on_content(self, sample_request):
        other = TransferRequest(
            inputs=[balance("account1", {"denom1": 999})],
            outputs=[balance("account_recipient", {"denom1": 999})],
        )
        assert other.request_id != sample_request.request_id

    def test_request_id_depends_on_leg_order(self):
        a = balance("a", {"d": 1})
        b = balance("b", {"d": 1})
        out = [balance("c", {"d": 2})]
        assert (TransferRequest([a, b], out).request_id
                != TransferRequest([b, a], out).request_id)

    def test_multisend_alias(self):
        assert MultiSend is TransferRequest
