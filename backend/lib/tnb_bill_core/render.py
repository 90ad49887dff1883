from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Union

from .models import ChargeBreakdown, UsageInput

DateLike = Union[date, str, None]

# display order and labels for the printed bill
BILL_LINES = [
    ("peak_energy_amount", "Tenaga Puncak (Peak)"),
    ("off_peak_energy_amount", "Tenaga Luar Puncak (Off-Peak)"),
    ("fuel_adjustment_amount", "AFA"),
    ("capacity_amount", "Caj Kapasiti"),
    ("network_amount", "Caj Rangkaian"),
    ("retail_amount", "Caj Peruncitan"),
    ("rebate_amount", "Diskaun TNB"),
    ("current_month_charge", "Caj Semasa"),
    ("surcharge_amount", "KWTBB"),
    ("rounding_amount", "Pelarasan Pembundaran"),
    ("grand_total", "Jumlah Perlu Dibayar"),
]


def format_money(value: float) -> str:
    """2 decimal places, half-up, no thousands separator."""
    return str(Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def format_breakdown(breakdown: ChargeBreakdown) -> Dict[str, str]:
    """
    Display strings for every line of the bill.
    The rebate is shown as a negative amount.
    """
    return {
        "peak_energy_amount": format_money(breakdown.peak_energy_amount),
        "off_peak_energy_amount": format_money(breakdown.off_peak_energy_amount),
        "fuel_adjustment_amount": format_money(breakdown.fuel_adjustment_amount),
        "capacity_amount": format_money(breakdown.capacity_amount),
        "network_amount": format_money(breakdown.network_amount),
        "retail_amount": format_money(breakdown.retail_amount),
        "rebate_amount": f"-{format_money(breakdown.rebate_amount)}",
        "current_month_charge": format_money(breakdown.current_month_charge),
        "surcharge_amount": format_money(breakdown.surcharge_amount),
        "rounding_description": breakdown.rounding.description,
        "rounding_amount": format_money(breakdown.rounding.amount),
        "grand_total": format_money(breakdown.grand_total),
    }


def format_usage(usage: UsageInput) -> Dict[str, str]:
    return {
        "peak_usage": format_money(usage.peak_usage),
        "off_peak_usage": format_money(usage.off_peak_usage),
        "total_usage": format_money(usage.total_usage),
        "max_demand": format_money(usage.max_demand),
    }


def _to_date(value: DateLike) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def billing_period_days(start: DateLike, end: DateLike) -> int:
    """
    Days in the billing period, counting both the start and end date.
    Returns 0 when either date is missing or invalid.
    """
    start_date, end_date = _to_date(start), _to_date(end)
    if start_date is None or end_date is None:
        return 0
    return abs((end_date - start_date).days) + 1


def period_label(start: DateLike, end: DateLike) -> str:
    return f"({billing_period_days(start, end)} Hari)"


def print_header(account_number: str, start: DateLike, end: DateLike) -> str:
    """
    Account and period lines printed at the top of a bill, e.g.
    NO. AKAUN: 220001234567
    TEMPOH BIL: 01.07.2025 - 31.07.2025 (31 Hari)
    """
    account = account_number or "Belum diisi"
    start_date, end_date = _to_date(start), _to_date(end)
    if start_date and end_date:
        period = (
            f"{start_date.strftime('%d.%m.%Y')} - {end_date.strftime('%d.%m.%Y')} "
            f"{period_label(start_date, end_date)}"
        )
    else:
        period = "Belum dipilih"
    return f"NO. AKAUN: {account}\nTEMPOH BIL: {period}"


def render_bill_text(breakdown: ChargeBreakdown, width: int = 44) -> str:
    """Plain-text charge table, one line per item."""
    display = format_breakdown(breakdown)
    lines = []
    for key, label in BILL_LINES:
        amount = display[key]
        if key == "rounding_amount":
            label = f"{label} ({display['rounding_description']})"
        if key == "grand_total":
            lines.append("-" * width)
        lines.append(f"{label:<{width - 12}}{amount:>12}")
    return "\n".join(lines)
