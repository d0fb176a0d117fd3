"""
Option Axis Set
Ordered option axes (e.g. Size, Flavor) of a variable product.

Axis storage belongs to the VariantMatrix so that every axis mutation and the
matching re-projection of variant rows happen in one place.
"""
from typing import List, Optional
import logging

from schemas.product_schemas import OptionAxis
from services.variant_matrix import VariantMatrix

logger = logging.getLogger(__name__)


def parse_axis_values(raw_values_csv: Optional[str]) -> List[str]:
    """Split a comma-separated string into trimmed, non-empty, unique values."""
    values: List[str] = []
    for chunk in (raw_values_csv or "").split(","):
        value = chunk.strip()
        if value and value not in values:
            values.append(value)
    return values


class OptionAxisSet:
    """Axis-level operations over a VariantMatrix."""

    def __init__(self, matrix: Optional[VariantMatrix] = None):
        self.matrix = matrix if matrix is not None else VariantMatrix()

    @property
    def axes(self) -> List[OptionAxis]:
        return self.matrix.axes

    def axis_names(self) -> List[str]:
        return [axis.name for axis in self.axes]

    def add_axis(self, name: str, raw_values_csv: str) -> bool:
        """Append an axis and expand the matrix by its values."""
        trimmed = (name or "").strip()
        values = parse_axis_values(raw_values_csv)
        if not trimmed or not values:
            logger.debug(f"Rejected axis {name!r} with values {raw_values_csv!r}")
            return False

        self.axes.append(OptionAxis(name=trimmed, values=values))
        self.matrix.expand(values)
        logger.info(
            f"Added axis {trimmed!r} ({len(values)} values); "
            f"matrix now has {len(self.matrix.variants)} variant(s)"
        )
        return True

    def reorder_axis(self, index: int, direction: str) -> bool:
        """Swap an axis with its neighbour ("up" or "down")."""
        if direction not in ("up", "down"):
            return False
        new_index = index - 1 if direction == "up" else index + 1
        if not 0 <= index < len(self.axes) or not 0 <= new_index < len(self.axes):
            return False

        self.axes[index], self.axes[new_index] = self.axes[new_index], self.axes[index]
        self.matrix.swap_positions(index, new_index)
        return True

    def remove_axis(self, index: int) -> bool:
        if not 0 <= index < len(self.axes):
            return False
        name = self.axes[index].name
        before = len(self.matrix.variants)
        self.matrix.drop_axis(index)
        logger.info(
            f"Removed axis {name!r}; variants {before} -> {len(self.matrix.variants)}"
        )
        return True
