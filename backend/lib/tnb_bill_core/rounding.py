from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP

from .models import RoundingAdjustment

NO_ADJUSTMENT = RoundingAdjustment(amount=0.0, description="0.00")


def fractional_cents(amount: float) -> int:
    """
    Cents part of amount, 0-100, rounded half-up.

    Uses floor so that negative amounts behave like positive ones
    (-1.97 -> 3 cents), i.e. the result never depends on the whole part.
    """
    # str() gives the shortest repr, which keeps 0.1 + 0.2 at 30 cents
    value = Decimal(str(amount))
    fraction = value - value.to_integral_value(rounding=ROUND_FLOOR)
    return int((fraction * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def rounding_adjustment(amount: float) -> RoundingAdjustment:
    """
    Adjustment that snaps amount to a total ending in 0 or 5 sen.

    Only the last digit of the cents is considered:
      0, 5    -> no adjustment
      1, 2    -> round down
      3 .. 7  -> towards the 5
      8, 9    -> round up to the next 10

    Descriptions of non-zero adjustments carry the sign of the amount
    ("+0.02", "-0.01"); a zero adjustment is "0.00".
    """
    last_digit = fractional_cents(amount) % 10

    if last_digit in (0, 5):
        return NO_ADJUSTMENT

    if last_digit in (1, 2):
        return RoundingAdjustment(amount=-last_digit / 100, description=f"-0.0{last_digit}")

    if last_digit <= 7:
        adjustment = (5 - last_digit) / 100
    else:
        adjustment = (10 - last_digit) / 100

    return RoundingAdjustment(amount=adjustment, description=f"{adjustment:+.2f}")
