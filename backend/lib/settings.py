"""
=============================================================================
SETTINGS - Runtime configuration from environment variables
=============================================================================
Values are read from the process environment, after loading a local .env
file (python-dotenv) if one exists.

Rate overrides (fall back to the Medium Voltage TOU table):
    RATE_PEAK_ENERGY, RATE_OFF_PEAK_ENERGY, RATE_CAPACITY, RATE_NETWORK,
    RATE_RETAIL, RATE_REBATE, RATE_SURCHARGE, RATE_FUEL_ADJUSTMENT

Storage / services:
    BILL_STORE            'local' (default) or 'dynamodb'
    BILLS_FILE            path of the local JSON store
    DYNAMODB_BILLS_TABLE  DynamoDB table name
    USE_SNS               'true' to publish a message when a bill is saved
=============================================================================
"""
import os
from dataclasses import fields, replace

from dotenv import load_dotenv

from backend.lib.logger import get_logger
from backend.lib.tnb_bill_core.models import RateTable, MEDIUM_VOLTAGE_TOU

# Load .env before anything reads the environment
load_dotenv()

logger = get_logger(__name__)

BILL_STORE = os.getenv('BILL_STORE', 'local').lower()
BILLS_FILE = os.getenv('BILLS_FILE', 'backend/data/bills.json')
DYNAMODB_BILLS_TABLE = os.getenv('DYNAMODB_BILLS_TABLE', 'ElectricityBills')
USE_SNS = os.getenv('USE_SNS', 'false').lower() == 'true'


def rates_from_env(base: RateTable = MEDIUM_VOLTAGE_TOU) -> RateTable:
    """
    Build the rate table, applying any RATE_<FIELD> overrides to base.

    An override that is not a number is ignored with a warning.
    """
    overrides = {}
    for field in fields(RateTable):
        env_name = f"RATE_{field.name.upper()}"
        raw = os.getenv(env_name)
        if raw is None or raw.strip() == '':
            continue
        try:
            overrides[field.name] = float(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r: not a number", env_name, raw)
    return replace(base, **overrides)
