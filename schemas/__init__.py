"""
Product Configuration Schemas Package
Provides the wire format and engine data structures for product shapes.
"""

from .product_schemas import (
    # Enumerations
    ProductShape,
    BundlePricingStrategy,
    PRODUCT_SHAPES,
    BUNDLE_PRICING_STRATEGIES,
    TIER_BADGES,
    VARIANT_BADGES,

    # Wire format
    VolumeTierDict,
    OptionAxisDict,
    VariantDict,
    BundleItemDict,
    ProductPayloadDict,

    # Engine state
    VolumeTier,
    OptionAxis,
    Variant,
    BundleItem,
    InventoryLevels,
    ProductDraft,

    # Shape-narrowed products
    SimpleProduct,
    VariableProduct,
    BundleProduct,
    ProductConfig,
)
