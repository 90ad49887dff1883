from backend.lib.tnb_bill_core.rounding import rounding_adjustment, fractional_cents
import pytest


@pytest.mark.parametrize("amount, expected_amount, expected_description", [
    (10.00, 0.0, "0.00"),
    (10.05, 0.0, "0.00"),
    (10.01, -0.01, "-0.01"),
    (10.02, -0.02, "-0.02"),
    (10.03, 0.02, "+0.02"),
    (10.04, 0.01, "+0.01"),
    (10.06, -0.01, "-0.01"),
    (10.07, -0.02, "-0.02"),
    (10.08, 0.02, "+0.02"),
    (10.09, 0.01, "+0.01"),
])
def test_last_digit_rules(amount, expected_amount, expected_description):
    adj = rounding_adjustment(amount)
    assert adj.amount == pytest.approx(expected_amount)
    assert adj.description == expected_description


def test_tens_digit_is_ignored():
    # 13 cents -> last digit 3 -> towards 15
    adj = rounding_adjustment(10097.13)
    assert adj.amount == pytest.approx(0.02)
    assert adj.description == "+0.02"
    assert rounding_adjustment(0.13) == rounding_adjustment(0.03)
    assert rounding_adjustment(0.98) == rounding_adjustment(0.08)


def test_cents_round_half_up():
    assert fractional_cents(0.125) == 13
    assert fractional_cents(0.994) == 99
    # 99.6 cents rounds to a whole unit, no adjustment
    assert fractional_cents(0.996) == 100
    assert rounding_adjustment(0.996).amount == 0


def test_float_noise_does_not_shift_cents():
    assert fractional_cents(0.1 + 0.2) == 30
    assert rounding_adjustment(0.1 + 0.2).amount == 0


def test_adjustment_range_and_integer_invariance():
    for cents in range(100):
        base = rounding_adjustment(cents / 100)
        assert -0.02 <= base.amount <= 0.05
        for whole in (1, 57, 1000):
            assert rounding_adjustment(whole + cents / 100) == base


def test_negative_amounts_use_fraction_above_floor():
    # -1.97 is 3 cents above -2
    assert rounding_adjustment(-1.97) == rounding_adjustment(0.03)


def test_adjusted_amount_is_clean():
    for cents in range(100):
        amount = 5 + cents / 100
        adjusted = amount + rounding_adjustment(amount).amount
        assert fractional_cents(adjusted) % 5 == 0
        assert rounding_adjustment(adjusted).amount == 0
