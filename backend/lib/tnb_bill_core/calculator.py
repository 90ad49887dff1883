from typing import Optional

from .models import RateTable, UsageInput, ChargeBreakdown, MEDIUM_VOLTAGE_TOU
from .rounding import rounding_adjustment
from ..logger import get_logger

logger = get_logger(__name__)


class ChargeCalculator:
    def __init__(self, rates: Optional[RateTable] = None):
        """
        rates: tariff used for every bill computed by this calculator,
        defaults to the Medium Voltage TOU table
        """
        self.rates = rates or MEDIUM_VOLTAGE_TOU

    def fuel_rate(self, usage: UsageInput) -> float:
        """AFA rate for this bill: the per-call rate, else the table default."""
        if usage.fuel_adjustment_rate is None:
            return self.rates.fuel_adjustment
        return usage.fuel_adjustment_rate

    def compute(self, usage: UsageInput) -> ChargeBreakdown:
        """
        Itemise the charges for one month of usage.

        Amounts are left unrounded; only the grand total is snapped to
        0/5 sen through the rounding adjustment.
        """
        rates = self.rates

        peak_amount = usage.peak_usage * rates.peak_energy
        off_peak_amount = usage.off_peak_usage * rates.off_peak_energy
        capacity_amount = usage.max_demand * rates.capacity
        network_amount = usage.max_demand * rates.network
        retail_amount = rates.retail

        # retail and AFA are outside the rebate base
        base_charges = peak_amount + off_peak_amount + capacity_amount + network_amount
        rebate_amount = base_charges * rates.rebate

        fuel_amount = usage.total_usage * self.fuel_rate(usage)

        current_month_charge = base_charges - rebate_amount + fuel_amount + retail_amount

        # KWTBB = (peak + off-peak + capacity + network - discount) x surcharge
        discount = base_charges * rates.rebate
        surcharge_amount = (base_charges - discount) * rates.surcharge

        subtotal = current_month_charge + surcharge_amount
        rounding = rounding_adjustment(subtotal)
        grand_total = subtotal + rounding.amount

        logger.debug(
            "subtotal=%s adjustment=%s grand_total=%s", subtotal, rounding.amount, grand_total
        )

        return ChargeBreakdown(
            peak_energy_amount=peak_amount,
            off_peak_energy_amount=off_peak_amount,
            fuel_adjustment_amount=fuel_amount,
            capacity_amount=capacity_amount,
            network_amount=network_amount,
            retail_amount=retail_amount,
            rebate_amount=rebate_amount,
            current_month_charge=current_month_charge,
            surcharge_amount=surcharge_amount,
            subtotal=subtotal,
            rounding=rounding,
            grand_total=grand_total,
        )


def compute_charges(usage: UsageInput, rates: RateTable) -> ChargeBreakdown:
    return ChargeCalculator(rates).compute(usage)
