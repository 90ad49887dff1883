import csv
import math
from dataclasses import dataclass
from io import StringIO
from typing import Any, List, Mapping

from .models import UsageInput

# form field name -> accepted aliases, first match wins
USAGE_FIELDS = {
    "peak_usage": ("peakUsage", "peak_usage"),
    "off_peak_usage": ("offPeakUsage", "off_peak_usage"),
    "total_usage": ("totalUsage", "total_usage"),
    "max_demand": ("maxDemand", "max_demand"),
    "fuel_adjustment_rate": ("afaRate", "afa_rate", "fuel_adjustment_rate"),
}


@dataclass
class UsageRow:
    account_number: str
    usage: UsageInput


def coerce_amount(value: Any) -> float:
    """
    Turn a raw input value into a non-negative float.

    Anything that is missing, not numeric, infinite/NaN or negative
    becomes 0.0. Strings may carry whitespace and thousands separators.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def _first_present(mapping: Mapping[str, Any], keys) -> Any:
    for key in keys:
        if key in mapping:
            return mapping[key]
    return None


def usage_from_mapping(mapping: Mapping[str, Any]) -> UsageInput:
    """
    Build a UsageInput from form/query/JSON data, e.g.
    {"peakUsage": "100", "offPeakUsage": "50", "maxDemand": "10", "totalUsage": "150", "afaRate": "0"}

    A missing or blank AFA rate is left as None so the rate table default
    applies; any other invalid AFA value is 0 like the usage fields.
    """
    values = {}
    for field, keys in USAGE_FIELDS.items():
        raw = _first_present(mapping, keys)
        if field == "fuel_adjustment_rate" and (raw is None or str(raw).strip() == ""):
            values[field] = None
        else:
            values[field] = coerce_amount(raw)
    return UsageInput(**values)


def parse_usage_csv(csv_text: str) -> List[UsageRow]:
    """
    Parse CSV text with header:
    account_number,peak_usage,off_peak_usage,total_usage,max_demand[,afa_rate]
    """
    f = StringIO(csv_text.strip())
    reader = csv.DictReader(f)
    rows = []
    for row in reader:
        account_number = (row.get('account_number') or '').strip()
        if not account_number:
            raise ValueError(f"Missing account_number in row: {row}")
        rows.append(UsageRow(account_number=account_number, usage=usage_from_mapping(row)))
    return rows
