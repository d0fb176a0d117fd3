"""
Price Resolver
Pure derivations over a shape-narrowed product:

- canonical price: the single number persisted to the catalog
- display price: a label, or a "From <min>" range for variable products
- purchase selection: unit price, resolved quantity and line total

Nothing here mutates its input, so calling it on every keystroke is safe and
repeated calls on the same product return identical results. Rounding happens
only in format_price.
"""
from typing import List, Dict, Any, Optional, Mapping
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
import logging

from schemas.product_schemas import (
    BundleProduct,
    ProductConfig,
    SimpleProduct,
    Variant,
    VariableProduct,
    VolumeTier,
)
from services.bundle_composer import apply_discount_percent, bundle_items_total
from services.volume_tiers import find_buy_one_tier, pack_unit_price
import settings

logger = logging.getLogger(__name__)

NO_PRICE_LABEL = "-"
SUM_OF_ITEMS_LABEL = "Sum of items"


@dataclass
class PurchaseSelection:
    """Resolved line for one purchase choice."""
    unit_price: float
    quantity: int
    line_total: float
    variant_index: Optional[int] = None
    pack: Optional[VolumeTier] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unitPrice": self.unit_price,
            "quantity": self.quantity,
            "lineTotal": self.line_total,
            "variantIndex": self.variant_index,
            "packMinQuantity": self.pack.min_quantity if self.pack else None,
        }


# =============================================================================
# FORMATTING
# =============================================================================

def round_price(amount: float) -> Decimal:
    quantum = Decimal(1).scaleb(-settings.PRICE_DECIMALS)
    return Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)


def format_price(amount: float, currency: Optional[str] = None) -> str:
    code = settings.sanitize_currency(currency)
    symbol = settings.CURRENCY_SYMBOLS.get(code, f"{code} ")
    return f"{symbol}{round_price(amount)}"


# =============================================================================
# VARIANTS
# =============================================================================

def effective_variant_price(variant: Variant) -> float:
    """Buy-1 pack price when the variant has packs and one exists, else its price."""
    if variant.volume_tiers:
        buy_one = find_buy_one_tier(variant.volume_tiers)
        if buy_one is not None:
            return buy_one.price
    return variant.price


def synced_variants(variants: List[Variant]) -> List[Variant]:
    """Copies whose price/compare-at come from their Buy-1 pack where present."""
    synced = []
    for variant in variants:
        copy = variant.copy()
        buy_one = find_buy_one_tier(copy.volume_tiers) if copy.volume_tiers else None
        if buy_one is not None:
            copy.price = buy_one.price
            copy.compare_at_price = buy_one.compare_at_price
        synced.append(copy)
    return synced


def min_variant_price(variants: List[Variant]) -> Optional[float]:
    if not variants:
        return None
    return min(effective_variant_price(v) for v in variants)


# =============================================================================
# CANONICAL PRICE
# =============================================================================

def bundle_canonical_price(product: BundleProduct, price_lookup: Optional[Mapping[str, float]] = None) -> float:
    if product.pricing == "fixed":
        # Unset is a data-entry omission, not an error
        return product.bundle_price if product.bundle_price is not None else 0.0
    if product.pricing == "discounted" and product.discount_percent is not None:
        total = bundle_items_total(product.items, price_lookup)
        if total is None:
            logger.debug("Discounted bundle has items without a known price; deferring")
            return 0.0
        return apply_discount_percent(total, product.discount_percent)
    # sum (or no strategy): resolved by the catalog
    return 0.0


def canonical_price(product: ProductConfig, price_lookup: Optional[Mapping[str, float]] = None) -> float:
    """The single price persisted for the product."""
    if isinstance(product, SimpleProduct):
        # Packs are layered on top of the base price, never replace it
        return product.price
    if isinstance(product, VariableProduct):
        lowest = min_variant_price(product.variants)
        return lowest if lowest is not None else 0.0
    if isinstance(product, BundleProduct):
        return bundle_canonical_price(product, price_lookup)
    raise TypeError(f"Unsupported product config: {type(product).__name__}")


def is_orderable(product: ProductConfig) -> bool:
    if isinstance(product, VariableProduct):
        return bool(product.variants)
    return True


# =============================================================================
# PURCHASE SELECTION
# =============================================================================

def available_packs(product: ProductConfig, variant_index: Optional[int] = None) -> List[VolumeTier]:
    """Packs offered for the selection: the variant's own, or the simple product's."""
    if isinstance(product, VariableProduct):
        variant = _variant_at(product, variant_index)
        return variant.volume_tiers if variant is not None else []
    if isinstance(product, SimpleProduct):
        return product.volume_tiers
    return []


def _variant_at(product: VariableProduct, variant_index: Optional[int]) -> Optional[Variant]:
    if variant_index is None or not 0 <= variant_index < len(product.variants):
        return None
    return product.variants[variant_index]


def _pack_at(packs: List[VolumeTier], pack_index: Optional[int]) -> Optional[VolumeTier]:
    if pack_index is None or not 0 <= pack_index < len(packs):
        return None
    return packs[pack_index]


def base_unit_price(product: ProductConfig, variant_index: Optional[int] = None,
                    price_lookup: Optional[Mapping[str, float]] = None) -> float:
    """Unit price without a pack selected."""
    if isinstance(product, VariableProduct):
        variant = _variant_at(product, variant_index)
        if variant is not None:
            return effective_variant_price(variant)
        return canonical_price(product)
    if isinstance(product, BundleProduct):
        # bundle_price is only meaningful under the fixed strategy
        return canonical_price(product, price_lookup)
    return product.price


def resolve_selection(
    product: ProductConfig,
    variant_index: Optional[int] = None,
    pack_index: Optional[int] = None,
    quantity: int = 1,
    price_lookup: Optional[Mapping[str, float]] = None,
) -> PurchaseSelection:
    """Unit price, purchase quantity and line total for one choice.

    With a pack selected, quantity counts packs: the resolved quantity is
    pack size x quantity and the unit price is the pack total / pack size.
    """
    pack = _pack_at(available_packs(product, variant_index), pack_index)
    if pack is not None:
        unit_price = pack_unit_price(pack)
        resolved_quantity = pack.pack_size * quantity
    else:
        unit_price = base_unit_price(product, variant_index, price_lookup)
        resolved_quantity = quantity

    if isinstance(product, VariableProduct) and _variant_at(product, variant_index) is None:
        variant_index = None

    return PurchaseSelection(
        unit_price=unit_price,
        quantity=resolved_quantity,
        line_total=unit_price * resolved_quantity,
        variant_index=variant_index,
        pack=pack,
    )


# =============================================================================
# DISPLAY
# =============================================================================

def display_price(
    product: ProductConfig,
    variant_index: Optional[int] = None,
    pack_index: Optional[int] = None,
    price_lookup: Optional[Mapping[str, float]] = None,
) -> str:
    """Price label for previews and summaries."""
    currency = product.currency
    if isinstance(product, SimpleProduct):
        return format_price(product.price, currency)

    if isinstance(product, VariableProduct):
        pack = _pack_at(available_packs(product, variant_index), pack_index)
        if pack is not None:
            return format_price(pack.price, currency)
        lowest = min_variant_price(product.variants)
        if lowest is None:
            return NO_PRICE_LABEL
        return f"From {format_price(lowest, currency)}"

    if product.pricing == "fixed" and product.bundle_price is not None:
        return format_price(product.bundle_price, currency)
    if product.pricing == "discounted" and product.discount_percent is not None:
        total = bundle_items_total(product.items, price_lookup)
        if total is not None:
            return format_price(apply_discount_percent(total, product.discount_percent), currency)
    return SUM_OF_ITEMS_LABEL


def price_summary(
    product: ProductConfig,
    variant_index: Optional[int] = None,
    pack_index: Optional[int] = None,
    quantity: int = 1,
    price_lookup: Optional[Mapping[str, float]] = None,
) -> Dict[str, Any]:
    """Everything a preview needs in one pure call."""
    selection = resolve_selection(product, variant_index, pack_index, quantity, price_lookup)
    return {
        "productType": product.product_type,
        "canonicalPrice": canonical_price(product, price_lookup),
        "displayPrice": display_price(product, variant_index, pack_index, price_lookup),
        "orderable": is_orderable(product),
        "selection": selection.to_dict(),
    }
