# backend/run_local.py
"""
Calculate bills for every row of a usage CSV and print them.

    python -m backend.run_local tests/sample_usage.csv
"""
from backend.lib.settings import rates_from_env
from backend.lib.tnb_bill_core.calculator import ChargeCalculator
from backend.lib.tnb_bill_core.io import parse_usage_csv
from backend.lib.tnb_bill_core.render import render_bill_text
import sys
from pathlib import Path


def main(csv_path) -> int:
    text = Path(csv_path).read_text()
    try:
        rows = parse_usage_csv(text)
    except ValueError as e:
        print(f"Invalid usage file {csv_path}: {e}", file=sys.stderr)
        return 1

    calculator = ChargeCalculator(rates_from_env())
    print(f"Calculated {len(rows)} bills:")
    for row in rows:
        breakdown = calculator.compute(row.usage)
        print()
        print(f"NO. AKAUN: {row.account_number}")
        print(render_bill_text(breakdown))
    return 0


if __name__ == "__main__":
    csv = sys.argv[1] if len(sys.argv) > 1 else "tests/sample_usage.csv"
    sys.exit(main(csv))
