#!/usr/bin/env python
"""
Price a quotation from a line-item CSV.

Usage:
    python scripts/price_quotation.py items.csv
    python scripts/price_quotation.py items.csv --commission 15 --overprice 10 --vat 15
    python scripts/price_quotation.py items.csv --capacity-kwp 10.5 --out breakdown.csv
"""
import argparse
import json
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from quote_pricing.exceptions import PricingError
from quote_pricing.logging_config import configure_logging
from quote_pricing.services.config_loader import load_pricing_config
from quote_pricing.services.export import (
    load_line_items_csv, breakdown_frame, summary_frame, export_breakdown_csv,
)
from quote_pricing.services.submission import build_submission_payload
from quote_pricing.services.validation import validate_quotation


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Quotation pricing breakdown")
    parser.add_argument('items_csv', type=Path, help="CSV with quantity and unit_price columns")
    parser.add_argument('--commission', type=float, default=None, help="Commission percent (default from settings)")
    parser.add_argument('--overprice', type=float, default=None, help="Overprice percent (default from settings)")
    parser.add_argument('--vat', type=float, default=None, help="VAT rate percent (default from settings)")
    parser.add_argument('--capacity-kwp', type=float, default=None, help="System capacity, prints the submission payload")
    parser.add_argument('--out', type=Path, default=None, help="Write the rounded breakdown CSV here")
    parser.add_argument('--no-validate', action='store_true', help="Skip input validation")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    configure_logging()

    if not args.items_csv.exists():
        print(f"ERROR: {args.items_csv} not found")
        return 1

    config = load_pricing_config({
        'platform_commission_percent': args.commission,
        'platform_overprice_percent': args.overprice,
        'vat_rate': args.vat,
    })
    items = load_line_items_csv(args.items_csv)

    try:
        if not args.no_validate:
            validate_quotation(config, items)

        print("=" * 60)
        print("LINE ITEMS")
        print("=" * 60)
        print(breakdown_frame(config, items).to_string(index=False))
        print()
        print("=" * 60)
        print("SUMMARY")
        print("=" * 60)
        print(summary_frame(config, items).to_string(index=False))

        if args.capacity_kwp is not None:
            payload = build_submission_payload(config, items, args.capacity_kwp)
            print()
            print(json.dumps(payload, indent=2, ensure_ascii=False))
    except PricingError as e:
        print("\n❌ INVALID QUOTATION")
        for error in e.errors:
            print(f"  ERROR: {error}")
        return 1

    if args.out:
        export_breakdown_csv(config, items, args.out)
        print(f"\nBreakdown written to {args.out}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
