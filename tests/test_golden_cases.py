"""
Golden test cases for quotation pricing regression testing.
These tests capture the expected figures of the pricing engine and
should fail if pricing logic changes unexpectedly.
"""
import csv
import os
import sys
import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from quote_pricing.engine import PricingEngine, PricingConfig, LineItem

FIGURES = [
    'total_price', 'commission', 'overprice', 'user_price', 'vendor_net_price',
    'amount_before_vat', 'vat_amount', 'final_payable',
]


@pytest.fixture(scope="module")
def engine():
    """Create a single engine instance for all tests."""
    return PricingEngine()


def load_golden_cases():
    """Load golden test cases from CSV."""
    cases_path = os.path.join(os.path.dirname(__file__), 'golden_cases.csv')
    
    cases = []
    with open(cases_path, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        for row in reader:
            cases.append(row)
    
    return cases


def parse_items(text: str) -> list[LineItem]:
    """Parse '24x400;1x4500' into line items."""
    items = []
    for i, part in enumerate(filter(None, text.split(';')), start=1):
        qty, price = part.split('x')
        items.append(LineItem(quantity=float(qty), unit_price=float(price), serial_number=i))
    return items


@pytest.mark.parametrize("case", load_golden_cases(), ids=lambda c: c['case'])
def test_golden_case(engine, case):
    """Test that quotation totals match the expected golden case."""
    config = PricingConfig(
        commission_percent=float(case['commission_percent']),
        overprice_percent=float(case['overprice_percent']),
        vat_rate=float(case['vat_rate']),
    )
    items = parse_items(case['items'])
    
    totals = engine.compute_quotation_totals(config, items)
    
    assert totals.item_count == len(items)
    for figure in FIGURES:
        expected = float(case[figure])
        actual = getattr(totals, figure)
        assert actual == pytest.approx(expected, abs=1e-6), \
            f"{figure} mismatch for {case['case']}: expected {expected}, got {actual}"


def test_golden_single_line_breakdown(engine):
    """Test that the first golden case holds at line level too."""
    config = PricingConfig(commission_percent=15, overprice_percent=10, vat_rate=15)
    line = engine.compute_line_item_totals(config, LineItem(quantity=24, unit_price=400))
    
    assert line.total_price == 9600
    assert line.commission == 1440
    assert line.overprice == 960
    assert line.user_price == 10560
    assert line.vendor_net_price == 8160
