"""
=============================================================================
BILL STORE - Saved bills, keyed by bill id
=============================================================================
A saved bill is the calculation result plus the tenant/account details that
were on the form when it was calculated.

Saving is an upsert:
- If a bill with the same id exists, it is replaced
- Otherwise the bill is added

Two backends share the same interface (save / get / list / delete):
- LocalBillStore:    a JSON array in a local file (default)
- DynamoDBBillStore: see backend/lib/dynamodb_service.py

Example record:
{
    "id": "bill-1755062400000-3fa2c1",
    "tenant_name": "Kedai Runcit Ali",
    "account_number": "220001234567",
    "period_start": "2025-07-01",
    "period_end": "2025-07-31",
    "peak_usage": 100.0,
    ...
    "breakdown": {...},
    "total_amount": 1128.6,
    "timestamp": "2025-08-13T05:20:00+00:00"
}
=============================================================================
"""
import json
import time
import uuid
from dataclasses import dataclass, field, asdict, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from backend.lib.logger import get_logger
from backend.lib.tnb_bill_core.models import ChargeBreakdown, UsageInput
from backend.lib.tnb_bill_core.render import format_money

logger = get_logger(__name__)

# Metadata copied from the request onto the saved bill
METADATA_FIELDS = {
    "tenant_name": ("tenantName", "tenant_name"),
    "premise_address": ("premiseAddress", "premise_address"),
    "bill_date": ("billDate", "bill_date"),
    "period_start": ("periodStart", "period_start"),
    "period_end": ("periodEnd", "period_end"),
    "account_number": ("accountNumber", "account_number"),
    "meter_number": ("meterNumber", "meter_number"),
}


@dataclass
class BillRecord:
    id: str
    tenant_name: str = ""
    premise_address: str = ""
    bill_date: str = ""
    period_start: str = ""
    period_end: str = ""
    account_number: str = ""
    meter_number: str = ""
    peak_usage: float = 0.0
    off_peak_usage: float = 0.0
    total_usage: float = 0.0
    max_demand: float = 0.0
    afa_rate: float = 0.0
    breakdown: Dict[str, Any] = field(default_factory=dict)
    total_amount: float = 0.0
    timestamp: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BillRecord":
        # Unknown keys are dropped so old files keep loading
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def generate_bill_id() -> str:
    """bill-<epoch milliseconds>-<random suffix>"""
    return f"bill-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def extract_metadata(data: Mapping[str, Any]) -> Dict[str, str]:
    """Pick the tenant/account fields out of form or JSON data (camelCase or snake_case)."""
    metadata = {}
    for name, keys in METADATA_FIELDS.items():
        value = ""
        for key in keys:
            if data.get(key):
                value = str(data[key]).strip()
                break
        metadata[name] = value
    return metadata


def build_bill_record(metadata: Mapping[str, str], usage: UsageInput,
                      breakdown: ChargeBreakdown, bill_id: Optional[str] = None,
                      afa_rate: Optional[float] = None) -> BillRecord:
    """
    Combine form metadata, usage and the calculated breakdown into a record.
    A new id is generated unless bill_id is given.

    afa_rate is the rate the bill was calculated with (see
    ChargeCalculator.fuel_rate); without it the per-call rate on usage is saved.
    """
    if afa_rate is None:
        afa_rate = usage.fuel_adjustment_rate or 0.0
    return BillRecord(
        id=bill_id or generate_bill_id(),
        peak_usage=usage.peak_usage,
        off_peak_usage=usage.off_peak_usage,
        total_usage=usage.total_usage,
        max_demand=usage.max_demand,
        afa_rate=afa_rate,
        breakdown=breakdown.to_dict(),
        total_amount=float(format_money(breakdown.grand_total)),
        timestamp=datetime.now(timezone.utc).isoformat(),
        **{k: metadata.get(k, "") for k in METADATA_FIELDS},
    )


class LocalBillStore:
    """
    Bills kept as a JSON array in a single file.

    Not safe for concurrent writers; meant for local runs and tests.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                bills = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Could not read bills from %s: %s", self.path, e)
            return []
        if not isinstance(bills, list):
            logger.warning("Bills file %s does not hold a list, starting a new one", self.path)
            return []

        records = [b for b in bills if isinstance(b, dict)]
        if len(records) != len(bills):
            logger.warning("Skipping %d malformed entries in %s", len(bills) - len(records), self.path)
        return records

    def _write(self, bills: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(bills, f, indent=2)

    def save(self, record: BillRecord) -> BillRecord:
        bills = self._load()
        data = record.to_dict()

        for i, existing in enumerate(bills):
            if existing.get("id") == record.id:
                bills[i] = data
                logger.info("Updated existing bill with ID: %s", record.id)
                break
        else:
            bills.append(data)
            logger.info("Added new bill with ID: %s", record.id)

        self._write(bills)
        logger.debug("Saved %d bills to %s", len(bills), self.path)
        return record

    def get(self, bill_id: str) -> Optional[BillRecord]:
        for data in self._load():
            if data.get("id") == bill_id:
                return BillRecord.from_dict(data)
        return None

    def list(self) -> List[BillRecord]:
        return [BillRecord.from_dict(d) for d in self._load() if d.get("id")]

    def delete(self, bill_id: str) -> bool:
        bills = self._load()
        remaining = [b for b in bills if b.get("id") != bill_id]
        if len(remaining) == len(bills):
            return False
        self._write(remaining)
        logger.info("Deleted bill with ID: %s", bill_id)
        return True
