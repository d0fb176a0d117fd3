"""
Product Edit Session
The one owner of a product's configuration while it is being edited.

The session is seeded from a catalog snapshot (or defaults), mutated only
through its methods, and hands a detached snapshot or submit payload to the
caller. It is single-writer and synchronous; cancelling an edit simply means
dropping the session.

Removing an option value deletes variants irreversibly, so it is a two-step
operation: request_value_removal() reports the exact number of variants that
will go, confirm_value_removal() performs it. Any other applied mutation in
between discards the pending request.
"""
from typing import List, Dict, Any, Optional, Mapping
import logging

from schemas.product_schemas import ProductDraft, ProductConfig, PRODUCT_SHAPES, VariableProduct
from services.bundle_composer import BundleComposer
from services.catalog_payload import build_submission_payload, draft_from_catalog
from services.option_axes import OptionAxisSet
from services.price_resolver import available_packs, price_summary
from services.stock_status import get_stock_status_label, selection_stock_status
from services.variant_matrix import ValueRemovalImpact, VariantMatrix
from services.volume_tiers import (
    VolumeTierSet,
    copy_tiers_from_variant,
    copyable_sources,
    pack_advisories,
    pack_label,
    pack_savings,
    pack_unit_price,
)
from settings import sanitize_currency

logger = logging.getLogger(__name__)

# Product-level scalar fields editable through update_field
PRODUCT_SCALAR_FIELDS = (
    "price",
    "compare_at_price",
    "currency",
    "track_inventory",
    "stock_quantity",
    "low_stock_threshold",
    "allow_backorder",
)


class ConfirmationRequiredError(RuntimeError):
    """Raised when a destructive removal is confirmed without a pending request."""


class ProductEditSession:
    """Edit session over one product's variants, packs and bundle."""

    def __init__(self, draft: Optional[ProductDraft] = None):
        seed = draft.copy() if draft is not None else ProductDraft()
        self._seed = seed.to_dict()

        working = seed.copy()
        self._draft = working
        self.matrix = VariantMatrix(axes=working.options, variants=working.variants)
        self.axes = OptionAxisSet(self.matrix)
        self.product_tiers = VolumeTierSet(working.volume_tiers)
        self.bundle = BundleComposer(
            items=working.bundle_items,
            pricing=working.bundle_pricing,
            bundle_price=working.bundle_price,
            discount_percent=working.bundle_discount_percent,
        )
        self._pending_removal: Optional[ValueRemovalImpact] = None

    @classmethod
    def from_catalog(cls, payload: Optional[Mapping[str, Any]] = None) -> "ProductEditSession":
        return cls(draft_from_catalog(payload))

    def _track(self, applied: bool) -> bool:
        if applied:
            self._pending_removal = None
        return applied

    # ---- shape & product fields ----

    @property
    def product_type(self) -> str:
        return self._draft.product_type

    def set_product_type(self, shape: str) -> bool:
        """Switch shape; structures of the other shapes are kept for switching back."""
        if shape not in PRODUCT_SHAPES:
            return False
        self._draft.product_type = shape
        return self._track(True)

    def update_field(self, field_name: str, value: Any) -> bool:
        if field_name not in PRODUCT_SCALAR_FIELDS:
            return False
        if field_name in ("price", "compare_at_price") and value is not None and value < 0:
            return False
        if field_name == "price" and value is None:
            return False
        if field_name == "currency":
            value = sanitize_currency(value)
        setattr(self._draft, field_name, value)
        return self._track(True)

    def set_attribute(self, key: str, value: Any) -> bool:
        """Catalog fields the engine passes through (name, slug, sku, ...)."""
        if not key:
            return False
        self._draft.attributes[key] = value
        return self._track(True)

    # ---- axes & variants ----

    def add_axis(self, name: str, raw_values_csv: str) -> bool:
        return self._track(self.axes.add_axis(name, raw_values_csv))

    def reorder_axis(self, index: int, direction: str) -> bool:
        return self._track(self.axes.reorder_axis(index, direction))

    def remove_axis(self, index: int) -> bool:
        return self._track(self.axes.remove_axis(index))

    def add_value_to_axis(self, axis_index: int, value: str) -> bool:
        return self._track(self.matrix.add_value_to_axis(axis_index, value))

    def rename_value_in_axis(self, axis_index: int, value_index: int, value: str) -> bool:
        return self._track(self.matrix.rename_value_in_axis(axis_index, value_index, value))

    def request_value_removal(self, axis_index: int, value_index: int) -> Optional[ValueRemovalImpact]:
        """Stage a value removal and report how many variants it deletes."""
        impact = self.matrix.removal_impact(axis_index, value_index)
        self._pending_removal = impact
        return impact

    @property
    def pending_removal(self) -> Optional[ValueRemovalImpact]:
        return self._pending_removal

    def cancel_value_removal(self) -> None:
        self._pending_removal = None

    def confirm_value_removal(self) -> bool:
        pending = self._pending_removal
        if pending is None:
            raise ConfirmationRequiredError("No value removal is awaiting confirmation")
        self._pending_removal = None
        return self.matrix.remove_value_from_axis(pending.axis_index, pending.value_index)

    def update_variant_field(self, variant_index: int, field_name: str, value: Any) -> bool:
        return self._track(self.matrix.update_variant_field(variant_index, field_name, value))

    # ---- packs ----

    def add_product_tier(self) -> bool:
        self.product_tiers.add_tier()
        return self._track(True)

    def update_product_tier(self, tier_index: int, field_name: str, value: Any) -> bool:
        return self._track(self.product_tiers.update_tier(tier_index, field_name, value))

    def remove_product_tier(self, tier_index: int) -> bool:
        return self._track(self.product_tiers.remove_tier(tier_index))

    def variant_tiers(self, variant_index: int) -> Optional[VolumeTierSet]:
        if not 0 <= variant_index < len(self.matrix.variants):
            return None
        return VolumeTierSet(self.matrix.variants[variant_index].volume_tiers)

    def add_variant_tier(self, variant_index: int) -> bool:
        tiers = self.variant_tiers(variant_index)
        if tiers is None:
            return False
        tiers.add_tier()
        return self._track(True)

    def update_variant_tier(self, variant_index: int, tier_index: int, field_name: str, value: Any) -> bool:
        tiers = self.variant_tiers(variant_index)
        if tiers is None:
            return False
        return self._track(tiers.update_tier(tier_index, field_name, value))

    def remove_variant_tier(self, variant_index: int, tier_index: int) -> bool:
        tiers = self.variant_tiers(variant_index)
        if tiers is None:
            return False
        return self._track(tiers.remove_tier(tier_index))

    def copyable_sources(self, target_index: int) -> List[int]:
        """Copy sources to offer; empty when the target already has packs."""
        if not 0 <= target_index < len(self.matrix.variants):
            return []
        if self.matrix.variants[target_index].volume_tiers:
            return []
        return copyable_sources(self.matrix.variants, target_index)

    def copy_tiers_from_variant(self, target_index: int, source_index: int) -> bool:
        return self._track(copy_tiers_from_variant(self.matrix.variants, target_index, source_index))

    # ---- bundle ----

    def add_bundle_item(self, product_id: str, quantity: int = 1,
                        price_override: Optional[float] = None,
                        product_name: Optional[str] = None) -> bool:
        return self._track(self.bundle.add_item(product_id, quantity, price_override, product_name))

    def remove_bundle_item(self, product_id: str) -> bool:
        return self._track(self.bundle.remove_item(product_id))

    def update_bundle_item(self, product_id: str, field_name: str, value: Any) -> bool:
        return self._track(self.bundle.update_item(product_id, field_name, value))

    def set_bundle_pricing(self, strategy: Optional[str]) -> bool:
        return self._track(self.bundle.set_pricing(strategy))

    def set_bundle_price(self, price: Optional[float]) -> bool:
        return self._track(self.bundle.set_bundle_price(price))

    def set_bundle_discount_percent(self, percent: Optional[float]) -> bool:
        return self._track(self.bundle.set_discount_percent(percent))

    # ---- read side ----

    def snapshot(self) -> ProductDraft:
        """Detached copy of the whole aggregate."""
        draft = self._draft.copy()
        draft.options = [axis.copy() for axis in self.matrix.axes]
        draft.variants = [variant.copy() for variant in self.matrix.variants]
        draft.volume_tiers = [tier.copy() for tier in self.product_tiers.tiers]
        draft.bundle_items = [item.copy() for item in self.bundle.items]
        draft.bundle_pricing = self.bundle.pricing
        draft.bundle_price = self.bundle.bundle_price
        draft.bundle_discount_percent = self.bundle.discount_percent
        return draft

    def narrowed(self) -> ProductConfig:
        return self.snapshot().narrow()

    @property
    def is_dirty(self) -> bool:
        return self.snapshot().to_dict() != self._seed

    def pack_advisories(self) -> Dict[str, Any]:
        """Advisories for the packs of the active shape, keyed by owner."""
        config = self.narrowed()
        if isinstance(config, VariableProduct):
            return {
                "variants": {
                    index: [a.to_dict() for a in pack_advisories(variant.volume_tiers)]
                    for index, variant in enumerate(config.variants)
                    if pack_advisories(variant.volume_tiers)
                }
            }
        return {"product": [a.to_dict() for a in pack_advisories(available_packs(config))]}

    def preview(
        self,
        variant_index: Optional[int] = None,
        pack_index: Optional[int] = None,
        quantity: int = 1,
        price_lookup: Optional[Mapping[str, float]] = None,
    ) -> Dict[str, Any]:
        return build_preview(self.narrowed(), variant_index, pack_index, quantity, price_lookup)

    def submission_payload(
        self,
        price_lookup: Optional[Mapping[str, float]] = None,
        slug_manually_edited: bool = False,
    ) -> Dict[str, Any]:
        return build_submission_payload(self.snapshot(), price_lookup, slug_manually_edited)


def build_preview(
    config: ProductConfig,
    variant_index: Optional[int] = None,
    pack_index: Optional[int] = None,
    quantity: int = 1,
    price_lookup: Optional[Mapping[str, float]] = None,
) -> Dict[str, Any]:
    """Price summary, pack cards, advisories and stock status for a selection."""
    summary = price_summary(config, variant_index, pack_index, quantity, price_lookup)
    packs = available_packs(config, variant_index)
    status = selection_stock_status(config, variant_index)
    summary["packs"] = [
        {
            "label": pack_label(tier),
            "minQuantity": tier.min_quantity,
            "price": tier.price,
            "unitPrice": pack_unit_price(tier),
            "savings": pack_savings(tier),
            "badge": tier.badge,
        }
        for tier in packs
    ]
    summary["advisories"] = [a.to_dict() for a in pack_advisories(packs)]
    summary["stockStatus"] = status
    summary["stockLabel"] = get_stock_status_label(status)
    return summary
