"""Engine subpackage - core quotation pricing logic."""
from .pricing_engine import PricingEngine, compute_line_item_totals, compute_quotation_totals
from .models import PricingConfig, LineItem, LineItemTotals, QuotationTotals, renumber_line_items

__all__ = [
    'PricingEngine', 'compute_line_item_totals', 'compute_quotation_totals',
    'PricingConfig', 'LineItem', 'LineItemTotals', 'QuotationTotals', 'renumber_line_items',
]
