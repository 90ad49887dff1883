from backend.lib.bill_store import (
    BillRecord, LocalBillStore, build_bill_record, extract_metadata, generate_bill_id,
)
from backend.lib.tnb_bill_core.models import UsageInput, MEDIUM_VOLTAGE_TOU
from backend.lib.tnb_bill_core.calculator import compute_charges
import json


def make_record(bill_id=None, peak=100.0, account="220001234567"):
    usage = UsageInput(peak_usage=peak, off_peak_usage=50, total_usage=150, max_demand=10)
    breakdown = compute_charges(usage, MEDIUM_VOLTAGE_TOU)
    metadata = {"tenant_name": "Kedai Runcit Ali", "account_number": account,
                "period_start": "2025-07-01", "period_end": "2025-07-31"}
    return build_bill_record(metadata, usage, breakdown, bill_id=bill_id)


def test_build_bill_record():
    record = make_record()
    assert record.id.startswith("bill-")
    assert record.tenant_name == "Kedai Runcit Ali"
    assert record.meter_number == ""
    assert record.afa_rate == 0.0
    assert record.total_amount == 1128.6
    assert record.breakdown["rounding"]["description"] == "-0.01"
    assert record.timestamp

    assert make_record(bill_id="bill-1").id == "bill-1"


def test_generated_ids_are_unique():
    assert len({generate_bill_id() for _ in range(50)}) == 50


def test_extract_metadata_accepts_form_names():
    metadata = extract_metadata({"tenantName": " Ali ", "account_number": "22", "billDate": ""})
    assert metadata["tenant_name"] == "Ali"
    assert metadata["account_number"] == "22"
    assert metadata["bill_date"] == ""
    assert set(metadata) == {"tenant_name", "premise_address", "bill_date", "period_start",
                             "period_end", "account_number", "meter_number"}


def test_from_dict_ignores_unknown_keys():
    record = BillRecord.from_dict({"id": "bill-1", "legacy": True, "total_amount": 5.0})
    assert record.id == "bill-1"
    assert record.total_amount == 5.0


def test_local_store_upsert(tmp_path):
    store = LocalBillStore(tmp_path / "data" / "bills.json")
    assert store.list() == []

    first = store.save(make_record(bill_id="bill-1"))
    store.save(make_record(bill_id="bill-2", account="220001234568"))
    assert [b.id for b in store.list()] == ["bill-1", "bill-2"]
    assert store.get("bill-1") == first

    # same id replaces the saved bill in place
    store.save(make_record(bill_id="bill-1", peak=0))
    bills = store.list()
    assert [b.id for b in bills] == ["bill-1", "bill-2"]
    assert store.get("bill-1").peak_usage == 0

    assert store.get("missing") is None


def test_local_store_delete(tmp_path):
    store = LocalBillStore(tmp_path / "bills.json")
    store.save(make_record(bill_id="bill-1"))
    assert store.delete("bill-1") is True
    assert store.delete("bill-1") is False
    assert store.list() == []


def test_local_store_recovers_from_bad_file(tmp_path):
    path = tmp_path / "bills.json"
    path.write_text("{not json")
    store = LocalBillStore(path)
    assert store.list() == []

    path.write_text(json.dumps({"id": "bill-1"}))
    assert store.list() == []

    store.save(make_record(bill_id="bill-9"))
    assert [b["id"] for b in json.loads(path.read_text())] == ["bill-9"]


def test_local_store_skips_entries_that_are_not_bills(tmp_path):
    path = tmp_path / "bills.json"
    path.write_text(json.dumps(["junk", None, {"id": "bill-1"}, 7]))
    store = LocalBillStore(path)

    assert [b.id for b in store.list()] == ["bill-1"]
    assert store.get("bill-1") is not None

    store.save(make_record(bill_id="bill-2"))
    assert [b.id for b in store.list()] == ["bill-1", "bill-2"]
    assert [b["id"] for b in json.loads(path.read_text())] == ["bill-1", "bill-2"]

    assert store.delete("bill-1") is True
    assert store.delete("missing") is False
    assert [b.id for b in store.list()] == ["bill-2"]
