"""
Product Configuration Schemas
=============================

Canonical data structures for the variant & bundle pricing engine.

Two layers live here:

1. Wire format (TypedDict): camelCase dicts exchanged with the catalog API.
2. Engine state (dataclasses): snake_case records mutated by an edit session.

PRODUCT SHAPES:
---------------
- simple:   one base price, optional product-level packs (volume tiers)
- variable: option axes + variant matrix, packs attached per variant
- bundle:   several products sold as one under a pricing strategy

A ProductDraft carries the fields of every shape at once so that switching
shape and back loses nothing. ProductDraft.narrow() returns the shape-specific
record (SimpleProduct | VariableProduct | BundleProduct) that pricing and
submission work from; fields of inactive shapes are not reachable there.
"""

from typing import List, Dict, Any, Optional, Tuple, TypedDict, Literal, Union, Mapping
from dataclasses import dataclass, field, replace
import logging

from settings import sanitize_currency

logger = logging.getLogger(__name__)


ProductShape = Literal["simple", "variable", "bundle"]
BundlePricingStrategy = Literal["fixed", "sum", "discounted"]
TierBadge = Literal["most_popular", "best_seller", "super_saver"]
VariantBadge = Literal["most_popular"]

PRODUCT_SHAPES: Tuple[str, ...] = ("simple", "variable", "bundle")
BUNDLE_PRICING_STRATEGIES: Tuple[str, ...] = ("fixed", "sum", "discounted")
TIER_BADGES: Tuple[str, ...] = ("most_popular", "best_seller", "super_saver")
VARIANT_BADGES: Tuple[str, ...] = ("most_popular",)


# =============================================================================
# WIRE FORMAT (TypedDict)
# =============================================================================

class VolumeTierDict(TypedDict, total=False):
    """Pack as stored by the catalog."""
    minQuantity: int                 # Units in the pack
    maxQuantity: Optional[int]       # Always equal to minQuantity in practice
    price: float                     # TOTAL price for minQuantity units
    compareAtPrice: Optional[float]  # Strikethrough total
    label: Optional[str]             # Badge: most_popular | best_seller | super_saver


class OptionAxisDict(TypedDict, total=False):
    name: str
    values: List[str]


class VariantDict(TypedDict, total=False):
    """One sellable combination of option values."""
    optionValues: List[str]      # One value per axis, in axis order
    sku: str
    price: float
    compareAtPrice: Optional[float]
    label: Optional[str]         # Badge: most_popular
    volumeTiers: List[VolumeTierDict]
    stockQuantity: int
    lowStockThreshold: Optional[int]
    allowBackorder: bool


class BundleItemDict(TypedDict, total=False):
    productId: str
    quantity: int
    priceOverride: Optional[float]
    productName: str             # Display only


class ProductPayloadDict(TypedDict, total=False):
    """Product snapshot as exchanged with the catalog (engine-relevant keys)."""
    productType: str
    price: float
    compareAtPrice: Optional[float]
    currency: str
    options: List[OptionAxisDict]
    variants: List[VariantDict]
    volumeTiers: List[VolumeTierDict]
    bundleItems: List[BundleItemDict]
    bundlePricing: Optional[str]
    bundlePrice: Optional[float]
    bundleDiscountPercent: Optional[float]
    trackInventory: bool
    stockQuantity: int
    lowStockThreshold: Optional[int]
    allowBackorder: bool


# Keys the engine owns; everything else in a snapshot is passed through untouched.
ENGINE_KEYS: Tuple[str, ...] = tuple(ProductPayloadDict.__annotations__.keys())


# =============================================================================
# PARSING HELPERS
# =============================================================================

def _float_or_none(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _int_or_none(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _badge_or_none(value: Any, allowed: Tuple[str, ...]) -> Optional[str]:
    if value in allowed:
        return value
    if value not in (None, "", "__none__"):
        logger.warning(f"Dropping unknown badge: {value!r}")
    return None


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


# =============================================================================
# ENGINE STATE (dataclasses)
# =============================================================================

@dataclass
class VolumeTier:
    """A pack: the total price for buying min_quantity units at once."""
    min_quantity: int = 1
    max_quantity: Optional[int] = None
    price: float = 0.0
    compare_at_price: Optional[float] = None
    badge: Optional[str] = None

    @property
    def is_buy_one(self) -> bool:
        return self.min_quantity == 1 and (self.max_quantity is None or self.max_quantity == 1)

    @property
    def pack_size(self) -> int:
        """min_quantity guarded against zero for division."""
        return self.min_quantity if self.min_quantity > 0 else 1

    def copy(self) -> "VolumeTier":
        return replace(self)

    def to_dict(self) -> VolumeTierDict:
        return _drop_none({
            "minQuantity": self.min_quantity,
            "maxQuantity": self.max_quantity,
            "price": self.price,
            "compareAtPrice": self.compare_at_price,
            "label": self.badge,
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VolumeTier":
        min_quantity = int(data.get("minQuantity", 1) or 0)
        max_quantity = _int_or_none(data.get("maxQuantity"))
        return cls(
            min_quantity=min_quantity,
            max_quantity=max_quantity,
            price=float(data.get("price", 0) or 0),
            compare_at_price=_float_or_none(data.get("compareAtPrice")),
            badge=_badge_or_none(data.get("label"), TIER_BADGES),
        )


@dataclass
class OptionAxis:
    """A named dimension of variation with ordered, unique values."""
    name: str
    values: List[str] = field(default_factory=list)

    def copy(self) -> "OptionAxis":
        return OptionAxis(name=self.name, values=list(self.values))

    def to_dict(self) -> OptionAxisDict:
        return {"name": self.name, "values": list(self.values)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OptionAxis":
        values: List[str] = []
        for raw in data.get("values") or []:
            value = str(raw).strip()
            if value and value not in values:
                values.append(value)
        return cls(name=str(data.get("name", "")).strip(), values=values)


@dataclass
class Variant:
    """One row of the variant matrix.

    option_values is an immutable tuple keyed by axis position; axis mutations
    re-project it rather than editing it in place.
    """
    option_values: Tuple[str, ...]
    price: float = 0.0
    sku: Optional[str] = None
    compare_at_price: Optional[float] = None
    badge: Optional[str] = None
    volume_tiers: List[VolumeTier] = field(default_factory=list)
    stock_quantity: Optional[int] = None
    low_stock_threshold: Optional[int] = None
    allow_backorder: Optional[bool] = None

    def replicate(self, option_values: Tuple[str, ...]) -> "Variant":
        """Copy every field onto a new combination; tiers are never shared."""
        return replace(
            self,
            option_values=tuple(option_values),
            volume_tiers=[tier.copy() for tier in self.volume_tiers],
        )

    def copy(self) -> "Variant":
        return self.replicate(self.option_values)

    def to_dict(self) -> VariantDict:
        data: Dict[str, Any] = {
            "optionValues": list(self.option_values),
            "price": self.price,
            "sku": self.sku,
            "compareAtPrice": self.compare_at_price,
            "label": self.badge,
            "volumeTiers": [tier.to_dict() for tier in self.volume_tiers],
            "stockQuantity": self.stock_quantity,
            "lowStockThreshold": self.low_stock_threshold,
            "allowBackorder": self.allow_backorder,
        }
        return _drop_none(data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Variant":
        return cls(
            option_values=tuple(str(v).strip() for v in data.get("optionValues") or []),
            price=float(data.get("price", 0) or 0),
            sku=data.get("sku") or None,
            compare_at_price=_float_or_none(data.get("compareAtPrice")),
            badge=_badge_or_none(data.get("label"), VARIANT_BADGES),
            volume_tiers=[VolumeTier.from_dict(t) for t in data.get("volumeTiers") or []],
            stock_quantity=_int_or_none(data.get("stockQuantity")),
            low_stock_threshold=_int_or_none(data.get("lowStockThreshold")),
            allow_backorder=data.get("allowBackorder"),
        )


@dataclass
class BundleItem:
    """A product included in a bundle."""
    product_id: str
    quantity: int = 1
    price_override: Optional[float] = None
    product_name: Optional[str] = None

    def copy(self) -> "BundleItem":
        return replace(self)

    def to_dict(self) -> BundleItemDict:
        return _drop_none({
            "productId": self.product_id,
            "quantity": self.quantity,
            "priceOverride": self.price_override,
            "productName": self.product_name,
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BundleItem":
        return cls(
            product_id=str(data.get("productId", "")),
            quantity=int(data.get("quantity", 1) or 1),
            price_override=_float_or_none(data.get("priceOverride")),
            product_name=data.get("productName") or None,
        )


@dataclass
class InventoryLevels:
    """Product-level inventory (simple and bundle shapes)."""
    track_inventory: bool = True
    stock_quantity: int = 0
    low_stock_threshold: Optional[int] = None
    allow_backorder: bool = False


# =============================================================================
# SHAPE-NARROWED PRODUCTS
# =============================================================================

@dataclass
class SimpleProduct:
    price: float
    compare_at_price: Optional[float] = None
    volume_tiers: List[VolumeTier] = field(default_factory=list)
    inventory: InventoryLevels = field(default_factory=InventoryLevels)
    currency: str = field(default_factory=lambda: sanitize_currency(None))

    @property
    def product_type(self) -> str:
        return "simple"


@dataclass
class VariableProduct:
    options: List[OptionAxis] = field(default_factory=list)
    variants: List[Variant] = field(default_factory=list)
    track_inventory: bool = True
    currency: str = field(default_factory=lambda: sanitize_currency(None))

    @property
    def product_type(self) -> str:
        return "variable"


@dataclass
class BundleProduct:
    items: List[BundleItem] = field(default_factory=list)
    pricing: Optional[str] = None
    bundle_price: Optional[float] = None
    discount_percent: Optional[float] = None
    compare_at_price: Optional[float] = None
    inventory: InventoryLevels = field(default_factory=InventoryLevels)
    currency: str = field(default_factory=lambda: sanitize_currency(None))

    @property
    def product_type(self) -> str:
        return "bundle"


ProductConfig = Union[SimpleProduct, VariableProduct, BundleProduct]


# =============================================================================
# EDIT-SESSION AGGREGATE
# =============================================================================

@dataclass
class ProductDraft:
    """Everything an edit session owns, for all shapes at once.

    attributes holds catalog fields the engine does not interpret
    (name, slug, sku, status, description, tags, ...).
    """
    product_type: str = "simple"
    price: float = 0.0
    compare_at_price: Optional[float] = None
    currency: str = field(default_factory=lambda: sanitize_currency(None))
    options: List[OptionAxis] = field(default_factory=list)
    variants: List[Variant] = field(default_factory=list)
    volume_tiers: List[VolumeTier] = field(default_factory=list)
    bundle_items: List[BundleItem] = field(default_factory=list)
    bundle_pricing: Optional[str] = None
    bundle_price: Optional[float] = None
    bundle_discount_percent: Optional[float] = None
    track_inventory: bool = True
    stock_quantity: int = 0
    low_stock_threshold: Optional[int] = None
    allow_backorder: bool = False
    attributes: Dict[str, Any] = field(default_factory=dict)

    def copy(self) -> "ProductDraft":
        return replace(
            self,
            options=[axis.copy() for axis in self.options],
            variants=[variant.copy() for variant in self.variants],
            volume_tiers=[tier.copy() for tier in self.volume_tiers],
            bundle_items=[item.copy() for item in self.bundle_items],
            attributes=dict(self.attributes),
        )

    @property
    def inventory(self) -> InventoryLevels:
        return InventoryLevels(
            track_inventory=self.track_inventory,
            stock_quantity=self.stock_quantity,
            low_stock_threshold=self.low_stock_threshold,
            allow_backorder=self.allow_backorder,
        )

    def narrow(self) -> ProductConfig:
        """Return a detached, shape-specific view of the active shape."""
        if self.product_type == "variable":
            return VariableProduct(
                options=[axis.copy() for axis in self.options],
                variants=[variant.copy() for variant in self.variants],
                track_inventory=self.track_inventory,
                currency=self.currency,
            )
        if self.product_type == "bundle":
            return BundleProduct(
                items=[item.copy() for item in self.bundle_items],
                pricing=self.bundle_pricing,
                bundle_price=self.bundle_price,
                discount_percent=self.bundle_discount_percent,
                compare_at_price=self.compare_at_price,
                inventory=self.inventory,
                currency=self.currency,
            )
        return SimpleProduct(
            price=self.price,
            compare_at_price=self.compare_at_price,
            volume_tiers=[tier.copy() for tier in self.volume_tiers],
            inventory=self.inventory,
            currency=self.currency,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Full snapshot including inactive-shape structures."""
        return {
            **self.attributes,
            "productType": self.product_type,
            "price": self.price,
            "compareAtPrice": self.compare_at_price,
            "currency": self.currency,
            "options": [axis.to_dict() for axis in self.options],
            "variants": [variant.to_dict() for variant in self.variants],
            "volumeTiers": [tier.to_dict() for tier in self.volume_tiers],
            "bundleItems": [item.to_dict() for item in self.bundle_items],
            "bundlePricing": self.bundle_pricing,
            "bundlePrice": self.bundle_price,
            "bundleDiscountPercent": self.bundle_discount_percent,
            "trackInventory": self.track_inventory,
            "stockQuantity": self.stock_quantity,
            "lowStockThreshold": self.low_stock_threshold,
            "allowBackorder": self.allow_backorder,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProductDraft":
        product_type = data.get("productType") or "simple"
        if product_type not in PRODUCT_SHAPES:
            logger.warning(f"Unknown productType {product_type!r}, treating as simple")
            product_type = "simple"

        bundle_pricing = data.get("bundlePricing")
        if bundle_pricing not in BUNDLE_PRICING_STRATEGIES:
            bundle_pricing = None

        track_inventory = data.get("trackInventory")
        return cls(
            product_type=product_type,
            price=float(data.get("price", 0) or 0),
            compare_at_price=_float_or_none(data.get("compareAtPrice")),
            currency=sanitize_currency(data.get("currency")),
            options=[OptionAxis.from_dict(o) for o in data.get("options") or []],
            variants=[Variant.from_dict(v) for v in data.get("variants") or []],
            volume_tiers=[VolumeTier.from_dict(t) for t in data.get("volumeTiers") or []],
            bundle_items=[BundleItem.from_dict(b) for b in data.get("bundleItems") or []],
            bundle_pricing=bundle_pricing,
            bundle_price=_float_or_none(data.get("bundlePrice")),
            bundle_discount_percent=_float_or_none(data.get("bundleDiscountPercent")),
            track_inventory=True if track_inventory is None else bool(track_inventory),
            stock_quantity=int(data.get("stockQuantity", 0) or 0),
            low_stock_threshold=_int_or_none(data.get("lowStockThreshold")),
            allow_backorder=bool(data.get("allowBackorder", False)),
            attributes={k: v for k, v in data.items() if k not in ENGINE_KEYS},
        )
