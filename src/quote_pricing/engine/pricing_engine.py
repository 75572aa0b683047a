"""
Pricing Engine - Core quotation pricing and commission calculation.

Converts a contractor-entered price list into:
- what the contractor charges (total price)
- what the platform adds (overprice)
- what the end customer pays (user price)
- what the contractor is paid out (vendor net, VAT, final payable)

The engine is pure arithmetic. It does not validate, round, fetch
configuration or persist anything; see services/ for those concerns.
"""
from typing import Iterable, Optional

from ..logging_config import get_logger
from .models import PricingConfig, LineItem, LineItemTotals, QuotationTotals

logger = get_logger(__name__)


class PricingEngine:
    """
    Stateless calculator shared by every call site that shows money figures.

    Line resolution order (fixed, never reordered):
    1. total_price = quantity * unit_price
    2. commission = total_price * commission_percent / 100
    3. overprice = total_price * overprice_percent / 100
    4. user_price = total_price + overprice
    5. vendor_net_price = total_price - commission
    """

    def compute_line_item_totals(self, config: PricingConfig, item: LineItem) -> LineItemTotals:
        """Calculate the breakdown of a single line item."""
        total_price = item.quantity * item.unit_price
        commission = total_price * config.commission_percent / 100
        overprice = total_price * config.overprice_percent / 100
        user_price = total_price + overprice
        vendor_net_price = total_price - commission

        return LineItemTotals(
            total_price=total_price,
            commission=commission,
            overprice=overprice,
            user_price=user_price,
            vendor_net_price=vendor_net_price,
        )

    def breakdown(self, config: PricingConfig, items: Iterable[LineItem]) -> list[tuple[LineItem, LineItemTotals]]:
        """Pair every item with its totals, preserving input order."""
        return [(item, self.compute_line_item_totals(config, item)) for item in items]

    def compute_quotation_totals(
        self,
        config: PricingConfig,
        items: Iterable[LineItem],
        lines: Optional[list[LineItemTotals]] = None,
    ) -> QuotationTotals:
        """
        Aggregate a quotation.

        Args:
            config: Pricing configuration snapshot
            items: Line items, possibly empty
            lines: Already computed per-line totals for `items` (skips recomputation)

        Returns:
            QuotationTotals; all zeros for an empty quotation
        """
        if lines is None:
            lines = [self.compute_line_item_totals(config, item) for item in items]

        total_price = 0.0
        commission = 0.0
        overprice = 0.0
        user_price = 0.0
        vendor_net_price = 0.0

        # Summed in input order
        for line in lines:
            total_price += line.total_price
            commission += line.commission
            overprice += line.overprice
            user_price += line.user_price
            vendor_net_price += line.vendor_net_price

        # Derived from the aggregated fields, not a second aggregation
        amount_before_vat = total_price - commission
        vat_amount = amount_before_vat * config.vat_rate / 100
        final_payable = amount_before_vat + vat_amount

        totals = QuotationTotals(
            total_price=total_price,
            commission=commission,
            overprice=overprice,
            user_price=user_price,
            vendor_net_price=vendor_net_price,
            amount_before_vat=amount_before_vat,
            vat_amount=vat_amount,
            final_payable=final_payable,
            item_count=len(lines),
        )

        logger.debug(
            "Computed quotation totals for %d items: total=%s commission=%s final_payable=%s",
            totals.item_count, total_price, commission, final_payable,
        )
        return totals


_default_engine = PricingEngine()


def compute_line_item_totals(config: PricingConfig, item: LineItem) -> LineItemTotals:
    """Module-level shortcut for PricingEngine.compute_line_item_totals."""
    return _default_engine.compute_line_item_totals(config, item)


def compute_quotation_totals(config: PricingConfig, items: Iterable[LineItem]) -> QuotationTotals:
    """Module-level shortcut for PricingEngine.compute_quotation_totals."""
    return _default_engine.compute_quotation_totals(config, items)
