"""
Stock status for the active selection (product-level or per-variant inventory).
"""
from typing import Optional, Literal
import logging

from schemas.product_schemas import InventoryLevels, ProductConfig, VariableProduct
import settings

logger = logging.getLogger(__name__)

StockStatus = Literal["in_stock", "low_stock", "out_of_stock", "backorder"]

STOCK_STATUS_LABELS = {
    "in_stock": "In stock",
    "low_stock": "Low stock",
    "out_of_stock": "Out of stock",
    "backorder": "Available on backorder",
}


def get_stock_status(
    track_inventory: bool,
    stock_quantity: int,
    low_stock_threshold: Optional[int] = None,
    allow_backorder: bool = False,
) -> StockStatus:
    if not track_inventory:
        return "in_stock"
    if stock_quantity <= 0:
        return "backorder" if allow_backorder else "out_of_stock"
    threshold = low_stock_threshold if low_stock_threshold is not None else settings.LOW_STOCK_DEFAULT_THRESHOLD
    if stock_quantity <= threshold:
        return "low_stock"
    return "in_stock"


def get_stock_status_label(status: StockStatus) -> str:
    return STOCK_STATUS_LABELS[status]


def selection_stock_status(product: ProductConfig, variant_index: Optional[int] = None) -> StockStatus:
    """Variable products track stock per variant; the others per product."""
    if isinstance(product, VariableProduct):
        variant = None
        if variant_index is not None and 0 <= variant_index < len(product.variants):
            variant = product.variants[variant_index]
        return get_stock_status(
            product.track_inventory,
            (variant.stock_quantity or 0) if variant else 0,
            variant.low_stock_threshold if variant else None,
            bool(variant.allow_backorder) if variant else False,
        )

    inventory: InventoryLevels = product.inventory
    return get_stock_status(
        inventory.track_inventory,
        inventory.stock_quantity,
        inventory.low_stock_threshold,
        inventory.allow_backorder,
    )
