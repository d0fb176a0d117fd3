"""
Volume Tiers (packs)
Quantity-based price breaks: "Buy 1", "Pack of 3", "Pack of 6", ...

A pack's price is the TOTAL for min_quantity units, not a unit price. Packs
represent one fixed purchase quantity, so max_quantity tracks min_quantity.
"""
from typing import List, Dict, Any, Optional
from dataclasses import dataclass
import logging

from schemas.product_schemas import Variant, VolumeTier, TIER_BADGES

logger = logging.getLogger(__name__)

TIER_FIELDS = ("min_quantity", "max_quantity", "price", "compare_at_price", "badge")


@dataclass
class PackAdvisory:
    """A pack priced above buying the same number of singles."""
    tier_index: int
    min_quantity: int
    pack_price: float
    singles_price: float

    @property
    def message(self) -> str:
        return (
            f"Pack of {self.min_quantity} at {self.pack_price:.2f} is more than "
            f"{self.min_quantity}x Buy 1 ({self.singles_price:.2f})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tierIndex": self.tier_index,
            "minQuantity": self.min_quantity,
            "packPrice": self.pack_price,
            "singlesPrice": self.singles_price,
            "message": self.message,
        }


def find_buy_one_tier(tiers: List[VolumeTier]) -> Optional[VolumeTier]:
    """The pack for exactly one unit, if any."""
    for tier in tiers:
        if tier.is_buy_one:
            return tier
    return None


def next_pack_quantity(tiers: List[VolumeTier]) -> int:
    if not tiers:
        return 1
    last = tiers[-1]
    upper = last.max_quantity if last.max_quantity is not None else last.min_quantity
    return upper + 1


def pack_unit_price(tier: VolumeTier) -> float:
    """Unrounded per-unit price of a pack."""
    return tier.price / tier.pack_size


def pack_savings(tier: VolumeTier) -> float:
    if tier.compare_at_price is not None and tier.compare_at_price > tier.price:
        return tier.compare_at_price - tier.price
    return 0.0


def pack_label(tier: VolumeTier) -> str:
    return "Buy 1" if tier.min_quantity == 1 else f"Pack of {tier.min_quantity}"


def pack_advisories(tiers: List[VolumeTier]) -> List[PackAdvisory]:
    """Flag packs more expensive than the equivalent number of singles.

    Advisory only: nothing here blocks saving.
    """
    buy_one = find_buy_one_tier(tiers)
    if buy_one is None:
        return []

    advisories = []
    for index, tier in enumerate(tiers):
        if tier.min_quantity <= 1:
            continue
        singles = buy_one.price * tier.min_quantity
        if tier.price > singles:
            advisories.append(PackAdvisory(
                tier_index=index,
                min_quantity=tier.min_quantity,
                pack_price=tier.price,
                singles_price=singles,
            ))
    return advisories


class VolumeTierSet:
    """Edits one pack list in place (a simple product's or one variant's)."""

    def __init__(self, tiers: Optional[List[VolumeTier]] = None):
        self.tiers: List[VolumeTier] = tiers if tiers is not None else []

    def __len__(self) -> int:
        return len(self.tiers)

    @property
    def buy_one(self) -> Optional[VolumeTier]:
        return find_buy_one_tier(self.tiers)

    def add_tier(self) -> VolumeTier:
        quantity = next_pack_quantity(self.tiers)
        tier = VolumeTier(min_quantity=quantity, max_quantity=quantity, price=0.0)
        self.tiers.append(tier)
        return tier

    def update_tier(self, index: int, field_name: str, value: Any) -> bool:
        if not 0 <= index < len(self.tiers) or field_name not in TIER_FIELDS:
            return False
        tier = self.tiers[index]

        if field_name in ("min_quantity", "max_quantity"):
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                return False
            # Single-quantity packs: min and max move together
            tier.min_quantity = value
            tier.max_quantity = value
            return True

        if field_name == "price":
            if value is None or value < 0:
                return False
        elif field_name == "compare_at_price":
            if value is not None and value < 0:
                return False
        elif field_name == "badge":
            if value is not None and value not in TIER_BADGES:
                return False

        setattr(tier, field_name, value)
        return True

    def remove_tier(self, index: int) -> bool:
        """Plain removal; remaining quantities are left as entered."""
        if not 0 <= index < len(self.tiers):
            return False
        self.tiers.pop(index)
        return True

    def advisories(self) -> List[PackAdvisory]:
        return pack_advisories(self.tiers)


def copyable_sources(variants: List[Variant], target_index: int) -> List[int]:
    """Variants whose packs may be offered as a copy source for the target."""
    return [
        index for index, variant in enumerate(variants)
        if index != target_index and variant.volume_tiers
    ]


def copy_tiers_from_variant(variants: List[Variant], target_index: int, source_index: int) -> bool:
    """Deep-copy a variant's packs onto another variant that has none."""
    if not 0 <= target_index < len(variants) or not 0 <= source_index < len(variants):
        return False
    if target_index == source_index:
        return False
    source, target = variants[source_index], variants[target_index]
    if not source.volume_tiers or target.volume_tiers:
        return False

    target.volume_tiers = [tier.copy() for tier in source.volume_tiers]
    return True
