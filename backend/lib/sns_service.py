"""
=============================================================================
SNS SERVICE - "Bill saved" notifications via Amazon SNS
=============================================================================
Whenever a bill is saved, a short summary is published to an SNS topic so
that other parts of the system (tenant list, email subscribers, ...) can
pick up the change.

Flow:
-----
[Flask app / Lambda] --save--> [Bill store]
        |
        +--publish--> [SNS Topic] --> [Email subscriber]
                                 --> [SQS / Lambda subscriber]

Environment Variables Used:
- SNS_TOPIC_ARN:  ARN of an existing topic
- SNS_TOPIC_NAME: Name used to create/find the topic (default BillNotifications)
- AWS_REGION and the usual AWS credential variables
=============================================================================
"""

import boto3
from botocore.exceptions import ClientError

import json
import os
from typing import Optional

from backend.lib.bill_store import BillRecord
from backend.lib.logger import get_logger

logger = get_logger(__name__)


class SNSService:
    """
    Publishes bill notifications to an SNS topic.

    Usage:
        sns = SNSService()
        sns.create_topic_if_not_exists()
        sns.send_bill_saved(record)
    """

    def __init__(self, topic_arn: str = None, sns_client=None):
        self.topic_arn = topic_arn or os.getenv('SNS_TOPIC_ARN')
        self.topic_name = os.getenv('SNS_TOPIC_NAME', 'BillNotifications')
        self.region = os.getenv('AWS_REGION', 'us-east-1')

        if sns_client is None:
            session_token = os.getenv('AWS_SESSION_TOKEN')
            sns_client = boto3.client(
                'sns',
                region_name=self.region,
                aws_access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
                aws_secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY'),
                aws_session_token=session_token if session_token else None
            )
        self.sns_client = sns_client

    def create_topic_if_not_exists(self) -> Optional[str]:
        """
        Create the topic (create_topic is idempotent and returns the
        existing ARN if the topic is already there).

        Returns:
            str: The topic ARN, or None if creation failed
        """
        try:
            response = self.sns_client.create_topic(Name=self.topic_name)
            self.topic_arn = response['TopicArn']
            logger.info("SNS topic ready: %s", self.topic_arn)
            return self.topic_arn

        except ClientError as e:
            logger.error("Failed to create SNS topic: %s", e)
            return None

    def send_alert(self, subject: str, message: str) -> bool:
        """
        Publish a message to the topic.

        Args:
            subject: Email subject line (max 100 characters)
            message: The message body

        Returns:
            bool: True if message was published successfully
        """
        if not self.topic_arn:
            logger.warning("No topic ARN configured")
            return False

        try:
            self.sns_client.publish(
                TopicArn=self.topic_arn,
                Subject=subject[:100],
                Message=message
            )
            return True

        except ClientError as e:
            logger.error("Failed to send alert: %s", e)
            return False

    def send_bill_saved(self, record: BillRecord) -> bool:
        """
        Announce a saved bill. The body is JSON so machine subscribers can
        parse it; email subscribers see it as text.
        """
        subject = f"Bill saved - {record.tenant_name or record.account_number or record.id}"
        message = json.dumps({
            "event": "billSaved",
            "bill_id": record.id,
            "tenant_name": record.tenant_name,
            "account_number": record.account_number,
            "period_start": record.period_start,
            "period_end": record.period_end,
            "total_amount": record.total_amount,
            "timestamp": record.timestamp,
        })
        return self.send_alert(subject, message)
