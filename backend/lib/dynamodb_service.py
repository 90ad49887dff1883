"""
=============================================================================
DYNAMODB SERVICE - Saved bills in Amazon DynamoDB
=============================================================================
Same interface as LocalBillStore (save / get / list / delete), backed by a
DynamoDB table so several app instances and the Lambda handler can share
the saved bills.

Table Schema:
-------------
Table: ElectricityBills
- id (String) - Partition Key - e.g. "bill-1755062400000-3fa2c1"
- every other BillRecord field stored as a plain attribute
- breakdown (Map) - the calculated ChargeBreakdown

DynamoDB does not accept Python floats, so numbers are converted to
Decimal on the way in (via str() to keep the printed value) and back to
float on the way out.

put_item on an existing id replaces the whole item, which gives us the
upsert behaviour for free.
=============================================================================
"""

# boto3 - AWS SDK for Python
import boto3

# ClientError - Exception class for AWS API errors
from botocore.exceptions import ClientError

import os
from decimal import Decimal
from typing import Any, List, Optional

from backend.lib.bill_store import BillRecord
from backend.lib.logger import get_logger

logger = get_logger(__name__)


def to_dynamo(value: Any) -> Any:
    """Recursively replace floats with Decimal."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamo(v) for v in value]
    return value


def from_dynamo(value: Any) -> Any:
    """Recursively replace Decimal with float."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    return value


class DynamoDBBillStore:
    """
    Saved bills in a DynamoDB table keyed on the bill id.

    Usage:
        store = DynamoDBBillStore()
        store.create_table_if_not_exists()
        store.save(record)
    """

    def __init__(self, table_name: str = None, dynamodb=None):
        """
        Args:
            table_name: Optional custom table name. If not provided,
                        uses DYNAMODB_BILLS_TABLE from environment or default.
            dynamodb:   Optional boto3 DynamoDB resource (handy for tests).
        """
        self.table_name = table_name or os.getenv('DYNAMODB_BILLS_TABLE', 'ElectricityBills')
        self.region = os.getenv('AWS_REGION', 'us-east-1')

        if dynamodb is None:
            # Session token is only set for temporary credentials
            session_token = os.getenv('AWS_SESSION_TOKEN')
            dynamodb = boto3.resource(
                'dynamodb',
                region_name=self.region,
                aws_access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
                aws_secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY'),
                aws_session_token=session_token if session_token else None
            )
        self.dynamodb = dynamodb
        self.table = self.dynamodb.Table(self.table_name)

    def create_table_if_not_exists(self) -> bool:
        """
        Create the bills table if it doesn't exist.

        Uses on-demand billing (PAY_PER_REQUEST), so no capacity
        planning is needed.

        Returns:
            bool: True if table exists or was created successfully
        """
        client = self.dynamodb.meta.client
        try:
            client.describe_table(TableName=self.table_name)
            logger.info("DynamoDB table '%s' exists", self.table_name)
            return True

        except ClientError as e:
            if e.response['Error']['Code'] != 'ResourceNotFoundException':
                logger.error("Error checking table: %s", e)
                return False

        try:
            table = self.dynamodb.create_table(
                TableName=self.table_name,
                KeySchema=[
                    {'AttributeName': 'id', 'KeyType': 'HASH'}  # Partition key
                ],
                AttributeDefinitions=[
                    {'AttributeName': 'id', 'AttributeType': 'S'}
                ],
                BillingMode='PAY_PER_REQUEST'
            )
            # Wait for table to be fully created
            table.wait_until_exists()
            self.table = table
            logger.info("Created DynamoDB table '%s'", self.table_name)
            return True

        except ClientError as e:
            logger.error("Failed to create table: %s", e)
            return False

    def save(self, record: BillRecord) -> Optional[BillRecord]:
        """
        Insert or replace a bill.

        Returns:
            The saved record, or None if the write failed
        """
        try:
            self.table.put_item(Item=to_dynamo(record.to_dict()))
            logger.info("Saved bill with ID: %s", record.id)
            return record

        except ClientError as e:
            logger.error("Failed to save bill %s: %s", record.id, e)
            return None

    def get(self, bill_id: str) -> Optional[BillRecord]:
        try:
            response = self.table.get_item(Key={'id': bill_id})
        except ClientError as e:
            logger.error("Failed to get bill %s: %s", bill_id, e)
            return None

        item = response.get('Item')
        if not item:
            return None
        return BillRecord.from_dict(from_dynamo(item))

    def list(self) -> List[BillRecord]:
        """
        All saved bills.

        Uses Scan, which reads the whole table. Fine for a handful of
        tenants; a GSI on account_number would be needed for more.
        """
        try:
            response = self.table.scan()
            items = response.get('Items', [])

            # Handle pagination (max 1MB per scan page)
            while 'LastEvaluatedKey' in response:
                response = self.table.scan(ExclusiveStartKey=response['LastEvaluatedKey'])
                items.extend(response.get('Items', []))

        except ClientError as e:
            logger.error("Failed to list bills: %s", e)
            return []

        return [BillRecord.from_dict(from_dynamo(item)) for item in items]

    def delete(self, bill_id: str) -> bool:
        """
        Delete a bill.

        Returns:
            bool: True if a bill was deleted
        """
        try:
            response = self.table.delete_item(
                Key={'id': bill_id},
                ReturnValues='ALL_OLD'
            )
        except ClientError as e:
            logger.error("Failed to delete bill %s: %s", bill_id, e)
            return False

        return 'Attributes' in response
