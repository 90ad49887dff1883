from dataclasses import dataclass, asdict
from typing import Optional


@dataclass(frozen=True)
class RateTable:
    """
    Tariff rates for one bill calculation. Energy rates are RM/kWh,
    capacity/network are RM/kW of maximum demand, retail is RM/month and
    rebate/surcharge are fractions (0.10 == 10%).
    """
    peak_energy: float
    off_peak_energy: float
    capacity: float
    network: float
    retail: float
    rebate: float
    surcharge: float
    fuel_adjustment: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


# Medium Voltage TOU
MEDIUM_VOLTAGE_TOU = RateTable(
    peak_energy=0.3132,
    off_peak_energy=0.2723,
    capacity=30.19,
    network=66.87,
    retail=200.00,
    rebate=0.10,
    surcharge=0.016,
    fuel_adjustment=0.00,
)


@dataclass(frozen=True)
class UsageInput:
    peak_usage: float = 0.0
    off_peak_usage: float = 0.0
    total_usage: float = 0.0
    max_demand: float = 0.0
    # overrides RateTable.fuel_adjustment when set
    fuel_adjustment_rate: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class RoundingAdjustment:
    amount: float
    description: str


@dataclass(frozen=True)
class ChargeBreakdown:
    peak_energy_amount: float
    off_peak_energy_amount: float
    fuel_adjustment_amount: float
    capacity_amount: float
    network_amount: float
    retail_amount: float
    rebate_amount: float
    current_month_charge: float
    surcharge_amount: float
    subtotal: float
    rounding: RoundingAdjustment
    grand_total: float

    def to_dict(self) -> dict:
        # asdict recurses into the nested RoundingAdjustment
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ChargeBreakdown":
        values = dict(data)
        values["rounding"] = RoundingAdjustment(**values["rounding"])
        return cls(**values)
