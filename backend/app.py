"""
=============================================================================
TENANT ELECTRICITY BILL - MAIN FLASK APPLICATION
=============================================================================
REST API around the bill calculator for Medium Voltage TOU tenants.

It provides endpoints for:
- Calculating a bill from peak/off-peak usage and maximum demand
- Saving bills (with tenant and account details) and reading them back
- A printable plain-text version of a saved bill
- Sending a notification (SNS) when a bill is saved

Storage:
- Local JSON file (default), or
- DynamoDB when BILL_STORE=dynamodb

How to run:
    python -m backend.app

Then try:
    curl -X POST http://127.0.0.1:5000/calculate \
         -H 'Content-Type: application/json' \
         -d '{"peakUsage": 100, "offPeakUsage": 50, "totalUsage": 150, "maxDemand": 10}'
=============================================================================
"""

# =============================================================================
# IMPORTS
# =============================================================================

from flask import Flask, request, jsonify, Response

# Settings loads the .env file, so import it before anything reads os.environ
from backend.lib import settings
from backend.lib.logger import get_logger

from backend.lib.bill_store import LocalBillStore, build_bill_record, extract_metadata
from backend.lib.tnb_bill_core.calculator import ChargeCalculator
from backend.lib.tnb_bill_core.io import usage_from_mapping
from backend.lib.tnb_bill_core.render import (
    format_breakdown,
    format_usage,
    print_header,
    period_label,
    render_bill_text,
)
from backend.lib.tnb_bill_core.models import ChargeBreakdown, UsageInput

logger = get_logger(__name__)

# =============================================================================
# RATES
# =============================================================================
# Built once at startup; the RateTable is immutable so every request
# shares the same calculator.
RATES = settings.rates_from_env()
calculator = ChargeCalculator(RATES)

# =============================================================================
# BILL STORE
# =============================================================================
# DynamoDB when requested, local JSON file otherwise (or if DynamoDB fails)

USE_DYNAMODB = settings.BILL_STORE == 'dynamodb'
bill_store = None

if USE_DYNAMODB:
    try:
        from backend.lib.dynamodb_service import DynamoDBBillStore
        bill_store = DynamoDBBillStore(settings.DYNAMODB_BILLS_TABLE)
        bill_store.create_table_if_not_exists()
        logger.info("DynamoDB bill store enabled")
    except Exception as e:
        logger.warning("DynamoDB initialization failed: %s. Using local storage.", e)
        bill_store = None
        USE_DYNAMODB = False

if bill_store is None:
    bill_store = LocalBillStore(settings.BILLS_FILE)

# -----------------------------------------------------------------------------
# SNS - optional "bill saved" notification
# -----------------------------------------------------------------------------
USE_SNS = settings.USE_SNS
sns_service = None

if USE_SNS:
    try:
        from backend.lib.sns_service import SNSService
        sns_service = SNSService()
        if not sns_service.topic_arn:
            sns_service.create_topic_if_not_exists()
        logger.info("SNS notifications enabled")
    except Exception as e:
        logger.warning("SNS initialization failed: %s. Notifications disabled.", e)
        USE_SNS = False

# =============================================================================
# FLASK APPLICATION
# =============================================================================

app = Flask(__name__)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def request_data() -> dict:
    """
    Merge query string, form fields and JSON body into one dict.

    Later sources win: query < form < JSON. A JSON body that is not an
    object is ignored.
    """
    data = dict(request.args.items())
    data.update(request.form.items())
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        data.update(body)
    return data


def calculation_payload(usage: UsageInput, breakdown) -> dict:
    """Raw numbers for clients that do their own formatting, display strings for the rest."""
    return {
        "usage": usage.to_dict(),
        "usage_display": format_usage(usage),
        "breakdown": breakdown.to_dict(),
        "display": format_breakdown(breakdown),
        "currency": "RM",
    }


# =============================================================================
# API ROUTES - CALCULATION
# =============================================================================

@app.route("/rates", methods=["GET"])
def rates():
    """Return the tariff rates used for every calculation."""
    return jsonify(RATES.to_dict())


@app.route("/calculate", methods=["POST"])
def calculate():
    """
    Calculate a bill without saving it.

    Request Body (JSON or form):
        {
            "peakUsage": 100,
            "offPeakUsage": 50,
            "totalUsage": 150,
            "maxDemand": 10,
            "afaRate": 0
        }

    Missing or invalid numbers are treated as 0, so this endpoint never
    rejects input.
    """
    usage = usage_from_mapping(request_data())
    breakdown = calculator.compute(usage)
    return jsonify(calculation_payload(usage, breakdown))


# =============================================================================
# API ROUTES - SAVED BILLS
# =============================================================================

@app.route("/bills", methods=["POST"])
def save_bill():
    """
    Calculate a bill and save it together with the tenant details.

    Request Body (JSON or form): the usage fields of /calculate plus
        tenantName, premiseAddress, billDate, periodStart, periodEnd,
        accountNumber, meterNumber
    and optionally "id" to replace a previously saved bill.

    HTTP Status Codes:
        201: Created / replaced
        500: The store could not save the bill
    """
    data = request_data()
    usage = usage_from_mapping(data)
    breakdown = calculator.compute(usage)

    record = build_bill_record(extract_metadata(data), usage, breakdown, bill_id=data.get("id"),
                               afa_rate=calculator.fuel_rate(usage))

    if bill_store.save(record) is None:
        return jsonify({"error": "Failed to save bill"}), 500

    response = calculation_payload(usage, breakdown)
    response["bill"] = record.to_dict()
    response["period_label"] = period_label(record.period_start, record.period_end)

    # Let other components know about the new/updated bill
    if USE_SNS and sns_service:
        response["notified"] = sns_service.send_bill_saved(record)

    return jsonify(response), 201


@app.route("/bills", methods=["GET"])
def list_bills():
    """
    List saved bills.

    Query Parameters:
        account_number (optional): only bills for this account
    """
    account_number = request.args.get("account_number")
    bills = bill_store.list()
    if account_number:
        bills = [b for b in bills if b.account_number == account_number]
    return jsonify({"bills": [b.to_dict() for b in bills], "count": len(bills)})


@app.route("/bills/<bill_id>", methods=["GET"])
def get_bill(bill_id):
    record = bill_store.get(bill_id)
    if record is None:
        return jsonify({"error": f"Bill {bill_id} not found"}), 404
    return jsonify(record.to_dict())


@app.route("/bills/<bill_id>", methods=["DELETE"])
def delete_bill(bill_id):
    if not bill_store.delete(bill_id):
        return jsonify({"error": f"Bill {bill_id} not found"}), 404
    return jsonify({"deleted": bill_id})


@app.route("/bills/<bill_id>/print", methods=["GET"])
def print_bill(bill_id):
    """
    Plain-text version of a saved bill: account/period header followed by
    the charge table. Uses the charges saved with the bill; older records
    without a breakdown are recalculated with the current rates.
    """
    record = bill_store.get(bill_id)
    if record is None:
        return jsonify({"error": f"Bill {bill_id} not found"}), 404

    if record.breakdown:
        breakdown = ChargeBreakdown.from_dict(record.breakdown)
    else:
        breakdown = calculator.compute(UsageInput(
            peak_usage=record.peak_usage,
            off_peak_usage=record.off_peak_usage,
            total_usage=record.total_usage,
            max_demand=record.max_demand,
            fuel_adjustment_rate=record.afa_rate,
        ))

    lines = []
    if record.tenant_name:
        lines.append(record.tenant_name)
    if record.premise_address:
        lines.append(record.premise_address)
    lines.append(print_header(record.account_number, record.period_start, record.period_end))
    lines.append("")
    lines.append(render_bill_text(breakdown))

    return Response("\n".join(lines) + "\n", mimetype="text/plain")


# =============================================================================
# API ROUTES - STATUS
# =============================================================================

@app.route("/store/status", methods=["GET"])
def store_status():
    """Which store is in use, for debugging and health checks."""
    return jsonify({
        "dynamodb_enabled": USE_DYNAMODB,
        "store": type(bill_store).__name__,
        "sns_enabled": USE_SNS,
    })


# =============================================================================
# RUN THE SERVER
# =============================================================================

if __name__ == "__main__":
    # debug=True: auto-reload and interactive debugger, never in production
    app.run(debug=True)
