# backend/lambda_handlers/get_bill.py
"""
Lambda function to fetch saved bills
Triggered by API Gateway
"""
import json

from backend.lambda_handlers.calculate_bill import get_store, response
from backend.lib.logger import get_logger

logger = get_logger(__name__)


def lambda_handler(event, context):
    """
    Get one saved bill, or all of them.

    Query parameters / path parameters:
    - id: Optional, the bill id. Without it every saved bill is returned.
    """
    logger.info("Received event: %s", json.dumps(event, default=str))

    try:
        params = event.get('queryStringParameters') or {}
        path_params = event.get('pathParameters') or {}
        bill_id = path_params.get('id') or params.get('id')

        store = get_store()

        if not bill_id:
            bills = [b.to_dict() for b in store.list()]
            return response(200, {'bills': bills, 'count': len(bills)})

        record = store.get(bill_id)
        if record is None:
            return response(404, {'error': f'Bill {bill_id} not found'})
        return response(200, record.to_dict())

    except Exception as e:
        logger.exception("Error fetching bill")
        return response(500, {'error': str(e)})
