import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from schemas.product_schemas import VolumeTier
from services.option_axes import OptionAxisSet, parse_axis_values
from services.variant_matrix import VariantMatrix


def _size_axis_set():
    axis_set = OptionAxisSet()
    assert axis_set.add_axis("Size", "250g, 500g, 1kg")
    return axis_set


def test_parse_axis_values_trims_dedupes_and_drops_empty():
    assert parse_axis_values(" 250g, 500g,,250g , 1kg ,") == ["250g", "500g", "1kg"]
    assert parse_axis_values("") == []
    assert parse_axis_values(None) == []


def test_add_first_axis_seeds_one_variant_per_value():
    axis_set = _size_axis_set()

    variants = axis_set.matrix.variants
    assert [v.option_values for v in variants] == [("250g",), ("500g",), ("1kg",)]
    assert all(v.price == 0 for v in variants)
    assert axis_set.axis_names() == ["Size"]


def test_add_axis_rejects_empty_name_or_values():
    axis_set = _size_axis_set()

    assert axis_set.add_axis("   ", "a,b") is False
    assert axis_set.add_axis("Flavor", " , ,") is False
    assert axis_set.axis_names() == ["Size"]
    assert len(axis_set.matrix.variants) == 3


def test_add_second_axis_multiplies_and_copies_fields():
    axis_set = _size_axis_set()
    matrix = axis_set.matrix
    matrix.update_variant_field(0, "price", 10.0)
    matrix.update_variant_field(0, "sku", "CF-250")
    matrix.variants[1].volume_tiers = [VolumeTier(min_quantity=1, max_quantity=1, price=18.0)]

    assert axis_set.add_axis("Flavor", "Vanilla, Chocolate")

    assert len(matrix.variants) == 3 * 2
    assert [v.option_values for v in matrix.variants[:2]] == [
        ("250g", "Vanilla"),
        ("250g", "Chocolate"),
    ]
    assert all(v.price == 10.0 and v.sku == "CF-250" for v in matrix.variants[:2])
    first, second = matrix.variants[2], matrix.variants[3]
    assert first.volume_tiers == second.volume_tiers
    assert first.volume_tiers is not second.volume_tiers
    assert first.volume_tiers[0] is not second.volume_tiers[0]
    assert matrix.is_consistent()


def test_add_axis_with_axes_but_no_variants_enumerates_every_axis():
    matrix = VariantMatrix()
    axis_set = OptionAxisSet(matrix)
    axis_set.add_axis("Size", "S,M")
    matrix.variants = []

    axis_set.add_axis("Color", "Red,Blue")

    assert sorted(v.option_values for v in matrix.variants) == [
        ("M", "Blue"), ("M", "Red"), ("S", "Blue"), ("S", "Red"),
    ]


def test_reorder_axis_permutes_tuples_in_lockstep():
    axis_set = _size_axis_set()
    axis_set.add_axis("Flavor", "Vanilla, Chocolate")
    axis_set.matrix.update_variant_field(1, "price", 12.0)

    assert axis_set.reorder_axis(1, "up")

    assert axis_set.axis_names() == ["Flavor", "Size"]
    assert axis_set.matrix.variants[1].option_values == ("Chocolate", "250g")
    assert axis_set.matrix.variants[1].price == 12.0
    assert axis_set.matrix.is_consistent()


def test_reorder_axis_out_of_range_is_noop():
    axis_set = _size_axis_set()
    axis_set.add_axis("Flavor", "Vanilla")
    before = [v.option_values for v in axis_set.matrix.variants]

    assert axis_set.reorder_axis(0, "up") is False
    assert axis_set.reorder_axis(1, "down") is False
    assert axis_set.reorder_axis(0, "sideways") is False
    assert [v.option_values for v in axis_set.matrix.variants] == before


def test_remove_axis_dedupes_first_occurrence_wins():
    axis_set = _size_axis_set()
    axis_set.add_axis("Flavor", "Vanilla, Chocolate")
    matrix = axis_set.matrix
    matrix.update_variant_field(0, "price", 10.0)   # 250g / Vanilla
    matrix.update_variant_field(1, "price", 99.0)   # 250g / Chocolate

    assert axis_set.remove_axis(1)

    assert axis_set.axis_names() == ["Size"]
    assert [v.option_values for v in matrix.variants] == [("250g",), ("500g",), ("1kg",)]
    assert matrix.variants[0].price == 10.0


def test_remove_last_axis_empties_variants():
    axis_set = _size_axis_set()

    assert axis_set.remove_axis(0)

    assert axis_set.axes == []
    assert axis_set.matrix.variants == []
    assert axis_set.remove_axis(0) is False
