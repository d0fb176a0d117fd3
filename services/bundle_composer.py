"""
Bundle Composer
Line items and pricing strategy of a bundle-shaped product.

Pricing strategies:
- fixed:      one admin-set total (bundle_price)
- sum:        sum of item unit prices x quantity, resolved by the catalog
- discounted: the sum minus bundle_discount_percent
"""
from typing import List, Any, Optional, Mapping
import logging

from schemas.product_schemas import BundleItem, BUNDLE_PRICING_STRATEGIES

logger = logging.getLogger(__name__)


def effective_item_price(item: BundleItem, price_lookup: Optional[Mapping[str, float]] = None) -> Optional[float]:
    """priceOverride if set, else the referenced product's own price (None if unknown)."""
    if item.price_override is not None:
        return item.price_override
    if price_lookup and item.product_id in price_lookup:
        return float(price_lookup[item.product_id])
    return None


def bundle_items_total(items: List[BundleItem], price_lookup: Optional[Mapping[str, float]] = None) -> Optional[float]:
    """Sum of effective unit price x quantity; None when any price is unknown."""
    total = 0.0
    for item in items:
        unit = effective_item_price(item, price_lookup)
        if unit is None:
            return None
        total += unit * item.quantity
    return total


def apply_discount_percent(total: float, percent: float) -> float:
    return total * (100 - percent) / 100


class BundleComposer:
    """Holds bundle line items (unique by product_id) and the pricing strategy."""

    def __init__(
        self,
        items: Optional[List[BundleItem]] = None,
        pricing: Optional[str] = None,
        bundle_price: Optional[float] = None,
        discount_percent: Optional[float] = None,
    ):
        self.items: List[BundleItem] = items if items is not None else []
        self.pricing = pricing
        self.bundle_price = bundle_price
        self.discount_percent = discount_percent

    def find_item(self, product_id: str) -> Optional[BundleItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def add_item(self, product_id: str, quantity: int = 1,
                 price_override: Optional[float] = None,
                 product_name: Optional[str] = None) -> bool:
        if not product_id or quantity < 1:
            return False
        if price_override is not None and price_override < 0:
            return False
        if self.find_item(product_id) is not None:
            logger.debug(f"Bundle already contains product {product_id}")
            return False
        self.items.append(BundleItem(
            product_id=product_id,
            quantity=quantity,
            price_override=price_override,
            product_name=product_name,
        ))
        return True

    def remove_item(self, product_id: str) -> bool:
        before = len(self.items)
        self.items = [item for item in self.items if item.product_id != product_id]
        return len(self.items) != before

    def update_item(self, product_id: str, field_name: str, value: Any) -> bool:
        item = self.find_item(product_id)
        if item is None:
            return False
        if field_name == "quantity":
            if not isinstance(value, int) or value < 1:
                return False
            item.quantity = value
            return True
        if field_name == "price_override":
            if value is not None and value < 0:
                return False
            item.price_override = value
            return True
        return False

    def set_pricing(self, strategy: Optional[str]) -> bool:
        if strategy is not None and strategy not in BUNDLE_PRICING_STRATEGIES:
            return False
        self.pricing = strategy
        return True

    def set_bundle_price(self, price: Optional[float]) -> bool:
        if price is not None and price < 0:
            return False
        self.bundle_price = price
        return True

    def set_discount_percent(self, percent: Optional[float]) -> bool:
        if percent is not None and not 0 <= percent <= 100:
            return False
        self.discount_percent = percent
        return True

    def items_total(self, price_lookup: Optional[Mapping[str, float]] = None) -> Optional[float]:
        return bundle_items_total(self.items, price_lookup)
