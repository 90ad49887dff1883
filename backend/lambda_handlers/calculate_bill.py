# backend/lambda_handlers/calculate_bill.py
"""
Lambda function to calculate (and optionally save) a tenant electricity bill
Triggered by API Gateway
"""
import json
import os
import base64
from urllib.parse import parse_qsl

from backend.lib.bill_store import build_bill_record, extract_metadata
from backend.lib.logger import get_logger
from backend.lib.settings import rates_from_env
from backend.lib.tnb_bill_core.calculator import ChargeCalculator
from backend.lib.tnb_bill_core.io import usage_from_mapping
from backend.lib.tnb_bill_core.render import format_breakdown

logger = get_logger(__name__)

TABLE_NAME = os.getenv('DYNAMODB_BILLS_TABLE', 'ElectricityBills')

# Created on first save so plain calculations need no AWS setup
_store = None


def get_store():
    global _store
    if _store is None:
        from backend.lib.dynamodb_service import DynamoDBBillStore
        _store = DynamoDBBillStore(TABLE_NAME)
    return _store


def lambda_handler(event, context):
    """
    Calculate a bill.

    Inputs come from the JSON body (POST) or the query string (GET):
    - peakUsage, offPeakUsage, totalUsage, maxDemand, afaRate (invalid -> 0)
    - tenantName, accountNumber, periodStart, periodEnd, ... (saved with the bill)
    - id: optional, replaces an existing saved bill
    - save: 'true' to store the bill in DynamoDB
    """
    logger.info("Received event: %s", json.dumps(event, default=str))

    try:
        data = dict(event.get('queryStringParameters') or {})
        data.update(parse_body(event))

        usage = usage_from_mapping(data)
        calculator = ChargeCalculator(rates_from_env())
        breakdown = calculator.compute(usage)

        body = {
            'usage': usage.to_dict(),
            'breakdown': breakdown.to_dict(),
            'display': format_breakdown(breakdown),
            'currency': 'RM'
        }

        if str(data.get('save', '')).lower() == 'true':
            record = build_bill_record(
                extract_metadata(data), usage, breakdown, bill_id=data.get('id'),
                afa_rate=calculator.fuel_rate(usage)
            )
            if get_store().save(record) is None:
                return response(500, {'error': 'Failed to save bill'})
            body['bill'] = record.to_dict()

        return response(200, body)

    except Exception as e:
        logger.exception("Error calculating bill")
        return response(500, {'error': str(e)})


def parse_body(event) -> dict:
    """JSON or form-encoded API Gateway body as a dict (empty if absent)."""
    raw = event.get('body')
    if not raw:
        return {}
    if event.get('isBase64Encoded'):
        raw = base64.b64decode(raw).decode('utf-8')
    try:
        parsed = json.loads(raw)
    except ValueError:
        parsed = dict(parse_qsl(raw))
    return parsed if isinstance(parsed, dict) else {}


def response(status_code: int, body: dict) -> dict:
    """Create API Gateway response."""
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'application/json',
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Methods': 'GET,POST,OPTIONS',
            'Access-Control-Allow-Headers': 'Content-Type'
        },
        'body': json.dumps(body)
    }
