"""
Catalog Payload Layer
Converts between catalog product snapshots and the engine's ProductDraft.

Inbound (seed):
- product-level packs are kept only for simple products
- legacy variable products that stored packs on the product, with no packs on
  any variant, get a copy of those packs on every variant

Outbound (submit):
- price is overwritten with the canonical price
- variable: each variant's price/compareAtPrice come from its Buy-1 pack
- fields of inactive shapes and unset optional values are omitted
"""
from typing import Dict, Any, Optional, Mapping
import logging

from schemas.product_schemas import (
    BundleProduct,
    ProductDraft,
    SimpleProduct,
    VariableProduct,
)
from services.price_resolver import canonical_price, synced_variants
from services.slugify import normalize_slug

logger = logging.getLogger(__name__)


def draft_from_catalog(payload: Optional[Mapping[str, Any]]) -> ProductDraft:
    """Seed a draft from a persisted product (or defaults for a new one)."""
    if not payload:
        return ProductDraft()

    draft = ProductDraft.from_dict(payload)

    if (
        draft.product_type == "variable"
        and draft.variants
        and draft.volume_tiers
        and all(not variant.volume_tiers for variant in draft.variants)
    ):
        logger.info(
            f"Migrating {len(draft.volume_tiers)} product-level pack(s) "
            f"onto {len(draft.variants)} variant(s)"
        )
        for variant in draft.variants:
            variant.volume_tiers = [tier.copy() for tier in draft.volume_tiers]

    if draft.product_type != "simple":
        draft.volume_tiers = []

    return draft


def _clean_attributes(attributes: Mapping[str, Any]) -> Dict[str, Any]:
    cleaned = {}
    for key, value in attributes.items():
        if key == "slug":
            continue
        if value is None or value == "":
            continue
        cleaned[key] = value
    return cleaned


def build_submission_payload(
    draft: ProductDraft,
    price_lookup: Optional[Mapping[str, float]] = None,
    slug_manually_edited: bool = False,
) -> Dict[str, Any]:
    """The payload handed to the catalog on submit."""
    config = draft.narrow()

    payload: Dict[str, Any] = _clean_attributes(draft.attributes)
    payload["productType"] = config.product_type
    payload["currency"] = config.currency

    slug = draft.attributes.get("slug")
    if slug_manually_edited and slug:
        payload["slug"] = normalize_slug(str(slug))

    if draft.compare_at_price is not None:
        payload["compareAtPrice"] = draft.compare_at_price

    if isinstance(config, VariableProduct):
        config.variants = synced_variants(config.variants)
        payload["options"] = [axis.to_dict() for axis in config.options]
        payload["variants"] = [variant.to_dict() for variant in config.variants]
    elif isinstance(config, BundleProduct):
        payload["bundleItems"] = [
            {key: value for key, value in item.to_dict().items() if key != "productName"}
            for item in config.items
        ]
        if config.pricing is not None:
            payload["bundlePricing"] = config.pricing
        if config.bundle_price is not None:
            payload["bundlePrice"] = config.bundle_price
        if config.discount_percent is not None:
            payload["bundleDiscountPercent"] = config.discount_percent
    elif isinstance(config, SimpleProduct):
        payload["volumeTiers"] = [tier.to_dict() for tier in config.volume_tiers]

    payload["price"] = canonical_price(config, price_lookup)
    payload["trackInventory"] = draft.track_inventory

    if not isinstance(config, VariableProduct):
        inventory = config.inventory
        payload["stockQuantity"] = inventory.stock_quantity
        if inventory.low_stock_threshold is not None:
            payload["lowStockThreshold"] = inventory.low_stock_threshold
        payload["allowBackorder"] = inventory.allow_backorder

    return payload
