from backend.lambda_handlers import calculate_bill, get_bill
from backend.lib.bill_store import BillRecord
from unittest.mock import MagicMock
import base64
import json
import pytest


@pytest.fixture
def store(monkeypatch):
    store = MagicMock()
    monkeypatch.setattr(calculate_bill, "_store", store)
    return store


def body_of(result):
    return json.loads(result["body"])


def test_calculate_from_json_body():
    event = {"body": json.dumps({"peakUsage": 100, "offPeakUsage": 50,
                                 "totalUsage": 150, "maxDemand": 10})}
    result = calculate_bill.lambda_handler(event, None)
    assert result["statusCode"] == 200
    assert result["headers"]["Content-Type"] == "application/json"
    body = body_of(result)
    assert body["display"]["grand_total"] == "1128.60"
    assert "bill" not in body


def test_calculate_from_query_string():
    event = {"queryStringParameters": {"maxDemand": "1"}}
    body = body_of(calculate_bill.lambda_handler(event, None))
    assert body["usage"]["max_demand"] == 1.0


def test_calculate_base64_form_body():
    raw = base64.b64encode(b"peakUsage=10&afaRate=oops").decode()
    body = body_of(calculate_bill.lambda_handler({"body": raw, "isBase64Encoded": True}, None))
    assert body["usage"]["peak_usage"] == 10.0
    assert body["usage"]["fuel_adjustment_rate"] == 0.0


def test_calculate_and_save(store):
    event = {"body": json.dumps({"peakUsage": 100, "accountNumber": "220001234567",
                                 "id": "bill-1", "save": "true"})}
    result = calculate_bill.lambda_handler(event, None)
    assert result["statusCode"] == 200
    saved = store.save.call_args.args[0]
    assert saved.id == "bill-1"
    assert body_of(result)["bill"]["account_number"] == "220001234567"


def test_save_failure(store):
    store.save.return_value = None
    event = {"body": json.dumps({"save": "true"})}
    result = calculate_bill.lambda_handler(event, None)
    assert result["statusCode"] == 500


def test_get_bill(store):
    store.get.return_value = BillRecord(id="bill-1", total_amount=200.0)
    result = get_bill.lambda_handler({"pathParameters": {"id": "bill-1"}}, None)
    assert result["statusCode"] == 200
    assert body_of(result)["total_amount"] == 200.0

    store.get.return_value = None
    result = get_bill.lambda_handler({"queryStringParameters": {"id": "bill-2"}}, None)
    assert result["statusCode"] == 404


def test_list_bills(store):
    store.list.return_value = [BillRecord(id="bill-1"), BillRecord(id="bill-2")]
    body = body_of(get_bill.lambda_handler({}, None))
    assert body["count"] == 2


def test_get_bill_error(store):
    store.list.side_effect = RuntimeError("table gone")
    result = get_bill.lambda_handler({}, None)
    assert result["statusCode"] == 500
    assert body_of(result)["error"] == "table gone"


def test_fuel_adjustment_setting(store, monkeypatch):
    monkeypatch.setenv("RATE_FUEL_ADJUSTMENT", "0.02")
    event = {"body": json.dumps({"totalUsage": 150, "save": "true"})}
    body = body_of(calculate_bill.lambda_handler(event, None))
    assert body["breakdown"]["fuel_adjustment_amount"] == pytest.approx(3.0)
    assert store.save.call_args.args[0].afa_rate == 0.02
