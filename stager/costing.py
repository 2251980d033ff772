"""
Final product list with a cost summary for the selected furniture.
"""

import logging
from typing import Dict, List

from stager.config import TAX_RATE
from stager.models.catalog import CatalogCategory
from stager.models.design import ProductLine, ProductList, SelectedProduct

logger = logging.getLogger(__name__)


def _money(amount: float) -> float:
    return round(amount, 2)


def summarize_products(products: List[SelectedProduct], tax_rate: float = TAX_RATE) -> ProductList:
    """
    Price each line, group subtotals by resolved catalog category and add tax.

    itemCount and the average are per product line, not per unit.
    """
    lines = []
    breakdown: Dict[str, float] = {}
    total = 0.0

    for product in products:
        subtotal = product.price * product.quantity
        category = CatalogCategory.from_text(product.category or product.name).value
        total += subtotal
        breakdown[category] = breakdown.get(category, 0.0) + subtotal
        lines.append(ProductLine(
            productId=product.productId,
            name=product.name,
            category=category,
            price=product.price,
            quantity=product.quantity,
            subtotal=_money(subtotal)
        ))

    tax = total * tax_rate
    logger.info(f"Product list: {len(lines)} lines, total {total:.2f}")

    return ProductList(
        products=lines,
        totalCost=_money(total),
        costBreakdown={category: _money(amount) for category, amount in breakdown.items()},
        itemCount=len(lines),
        averageItemCost=_money(total / len(lines)) if lines else 0.0,
        taxEstimate=_money(tax),
        finalTotal=_money(total + tax)
    )
