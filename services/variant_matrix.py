"""
Variant Matrix
Keeps one variant row per unique combination of option-axis values.

Rows are flat tuples keyed by axis position. Every axis or value mutation is
an explicit re-projection over all rows, after which the matrix invariant
holds again:

- every variant tuple has len(axes) entries, in axis order
- no two variants share the same tuple

Rejected mutations are silent no-ops: methods return False and leave the
matrix untouched.
"""
from typing import List, Dict, Any, Optional, Tuple, Set
from dataclasses import dataclass
from itertools import product as cartesian_product
import logging

from schemas.product_schemas import OptionAxis, Variant, VolumeTier, VARIANT_BADGES

logger = logging.getLogger(__name__)

# Fields settable through update_variant_field
VARIANT_SCALAR_FIELDS: Tuple[str, ...] = (
    "sku",
    "price",
    "compare_at_price",
    "badge",
    "volume_tiers",
    "stock_quantity",
    "low_stock_threshold",
    "allow_backorder",
)

# Derived from the Buy-1 pack while a variant has packs
TIER_DERIVED_FIELDS: Tuple[str, ...] = ("price", "compare_at_price")


@dataclass
class ValueRemovalImpact:
    """What removing one option value would delete."""
    axis_index: int
    value_index: int
    axis_name: str
    value: str
    variant_count: int
    removes_axis: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "axisIndex": self.axis_index,
            "valueIndex": self.value_index,
            "axisName": self.axis_name,
            "value": self.value,
            "variantCount": self.variant_count,
            "removesAxis": self.removes_axis,
        }


def _without(values: Tuple[str, ...], index: int) -> Tuple[str, ...]:
    return values[:index] + values[index + 1:]


def _dedupe(variants: List[Variant]) -> List[Variant]:
    """First occurrence of each tuple wins."""
    seen: Set[Tuple[str, ...]] = set()
    kept = []
    for variant in variants:
        if variant.option_values in seen:
            continue
        seen.add(variant.option_values)
        kept.append(variant)
    return kept


class VariantMatrix:
    """Owns the option axes and the variant rows derived from them."""

    def __init__(self, axes: Optional[List[OptionAxis]] = None,
                 variants: Optional[List[Variant]] = None):
        self.axes: List[OptionAxis] = axes if axes is not None else []
        self.variants: List[Variant] = variants if variants is not None else []

    # ---- invariant ----

    def is_consistent(self) -> bool:
        width = len(self.axes)
        keys = [variant.option_values for variant in self.variants]
        if any(len(key) != width for key in keys) or len(keys) != len(set(keys)):
            return False
        return all(
            value in self.axes[position].values
            for key in keys
            for position, value in enumerate(key)
        )

    def find_variant(self, option_values: Tuple[str, ...]) -> Optional[int]:
        target = tuple(option_values)
        for index, variant in enumerate(self.variants):
            if variant.option_values == target:
                return index
        return None

    # ---- axis-level re-projection (driven by OptionAxisSet) ----

    def expand(self, values: List[str]) -> None:
        """Grow the matrix by the values of a newly appended last axis."""
        if not self.variants:
            # Nothing to replicate: enumerate every axis from scratch
            self.variants = [
                Variant(option_values=tuple(combo))
                for combo in cartesian_product(*(axis.values for axis in self.axes))
            ]
            return

        self.variants = [
            variant.replicate(variant.option_values + (value,))
            for variant in self.variants
            for value in values
        ]

    def swap_positions(self, first: int, second: int) -> None:
        """Swap two tuple positions on every row, in lockstep with the axes."""
        def swapped(values: Tuple[str, ...]) -> Tuple[str, ...]:
            items = list(values)
            items[first], items[second] = items[second], items[first]
            return tuple(items)

        self.variants = [
            variant.replicate(swapped(variant.option_values)) for variant in self.variants
        ]

    def project_out(self, index: int) -> List[Variant]:
        """Rows with position `index` dropped, deduplicated by the reduced tuple."""
        if len(self.axes) <= 1:
            return []
        reduced = [
            variant.replicate(_without(variant.option_values, index))
            for variant in self.variants
        ]
        return _dedupe(reduced)

    def drop_axis(self, index: int) -> None:
        self.variants = self.project_out(index)
        self.axes.pop(index)

    # ---- value-level mutations ----

    def add_value_to_axis(self, axis_index: int, new_value: str) -> bool:
        """Append a value and synthesize one variant per distinct slice."""
        if not 0 <= axis_index < len(self.axes):
            return False
        trimmed = (new_value or "").strip()
        axis = self.axes[axis_index]
        if not trimmed or trimmed in axis.values:
            logger.debug(f"Rejected value {new_value!r} for axis {axis.name!r}")
            return False

        axis.values.append(trimmed)

        existing = {variant.option_values for variant in self.variants}
        seen_slices: Set[Tuple[str, ...]] = set()
        synthesized = []
        for variant in self.variants:
            other = _without(variant.option_values, axis_index)
            if other in seen_slices:
                continue
            seen_slices.add(other)
            combo = other[:axis_index] + (trimmed,) + other[axis_index:]
            if combo in existing:
                continue
            synthesized.append(variant.replicate(combo))

        self.variants.extend(synthesized)
        return True

    def rename_value_in_axis(self, axis_index: int, value_index: int, new_value: str) -> bool:
        """Pure rename: rows keep their position and every other field."""
        if not 0 <= axis_index < len(self.axes):
            return False
        axis = self.axes[axis_index]
        if not 0 <= value_index < len(axis.values):
            return False
        trimmed = (new_value or "").strip()
        old_value = axis.values[value_index]
        if not trimmed or trimmed == old_value or trimmed in axis.values:
            logger.debug(f"Rejected rename {old_value!r} -> {new_value!r} on axis {axis.name!r}")
            return False

        axis.values[value_index] = trimmed
        for index, variant in enumerate(self.variants):
            if variant.option_values[axis_index] == old_value:
                values = list(variant.option_values)
                values[axis_index] = trimmed
                self.variants[index] = variant.replicate(tuple(values))
        return True

    def removal_impact(self, axis_index: int, value_index: int) -> Optional[ValueRemovalImpact]:
        """Exact number of variants remove_value_from_axis would delete."""
        if not 0 <= axis_index < len(self.axes):
            return None
        axis = self.axes[axis_index]
        if not 0 <= value_index < len(axis.values):
            return None

        value = axis.values[value_index]
        removes_axis = len(axis.values) == 1
        if removes_axis:
            remaining = len(self.project_out(axis_index))
            count = len(self.variants) - remaining
        else:
            count = sum(1 for v in self.variants if v.option_values[axis_index] == value)

        return ValueRemovalImpact(
            axis_index=axis_index,
            value_index=value_index,
            axis_name=axis.name,
            value=value,
            variant_count=count,
            removes_axis=removes_axis,
        )

    def remove_value_from_axis(self, axis_index: int, value_index: int) -> bool:
        """Destructive: deletes every variant built on the value."""
        impact = self.removal_impact(axis_index, value_index)
        if impact is None:
            return False

        if impact.removes_axis:
            self.drop_axis(axis_index)
        else:
            self.axes[axis_index].values.pop(value_index)
            self.variants = [
                v for v in self.variants if v.option_values[axis_index] != impact.value
            ]

        logger.info(
            f"Removed value {impact.value!r} from axis {impact.axis_name!r}; "
            f"deleted {impact.variant_count} variant(s)"
        )
        return True

    # ---- per-variant fields ----

    def update_variant_field(self, variant_index: int, field_name: str, value: Any) -> bool:
        """Scalar setter. Price fields of a variant with packs are read-only."""
        if not 0 <= variant_index < len(self.variants):
            return False
        if field_name not in VARIANT_SCALAR_FIELDS:
            logger.debug(f"Rejected update of unknown variant field {field_name!r}")
            return False

        variant = self.variants[variant_index]
        if field_name in TIER_DERIVED_FIELDS and variant.volume_tiers:
            return False
        if field_name == "price" and (value is None or value < 0):
            return False
        if field_name == "compare_at_price" and value is not None and value < 0:
            return False
        if field_name == "badge" and value is not None and value not in VARIANT_BADGES:
            return False
        if field_name == "volume_tiers":
            value = [tier.copy() for tier in (value or []) if isinstance(tier, VolumeTier)]

        setattr(variant, field_name, value)
        return True
