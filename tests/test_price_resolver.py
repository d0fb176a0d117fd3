import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from schemas.product_schemas import (
    BundleItem,
    BundleProduct,
    SimpleProduct,
    Variant,
    VariableProduct,
    VolumeTier,
)
from services.price_resolver import (
    NO_PRICE_LABEL,
    SUM_OF_ITEMS_LABEL,
    canonical_price,
    display_price,
    effective_variant_price,
    format_price,
    is_orderable,
    price_summary,
    resolve_selection,
    synced_variants,
)


def _tier(quantity, price, compare_at=None):
    return VolumeTier(min_quantity=quantity, max_quantity=quantity, price=price,
                      compare_at_price=compare_at)


def _variable(*variants):
    return VariableProduct(variants=list(variants), currency="USD")


# =============================================================================
# CANONICAL PRICE
# =============================================================================

class TestCanonicalPrice:

    def test_variable_uses_cheapest_variant(self):
        product = _variable(
            Variant(option_values=("S",), price=10.0),
            Variant(option_values=("M",), price=18.0),
        )
        assert canonical_price(product) == 10.0

    def test_variable_prefers_buy_one_pack_price(self):
        product = _variable(
            Variant(option_values=("S",), price=10.0, volume_tiers=[_tier(1, 9.0), _tier(3, 25.0)]),
            Variant(option_values=("M",), price=18.0),
        )
        assert canonical_price(product) == 9.0

    def test_variable_without_buy_one_pack_keeps_price(self):
        product = _variable(Variant(option_values=("S",), price=10.0, volume_tiers=[_tier(3, 25.0)]))
        assert effective_variant_price(product.variants[0]) == 10.0
        assert canonical_price(product) == 10.0

    def test_empty_variable_is_not_orderable(self):
        product = _variable()
        assert canonical_price(product) == 0.0
        assert is_orderable(product) is False
        assert display_price(product) == NO_PRICE_LABEL

    def test_simple_ignores_packs(self):
        product = SimpleProduct(price=12.0, volume_tiers=[_tier(1, 9.0)])
        assert canonical_price(product) == 12.0
        assert is_orderable(product) is True

    def test_bundle_discounted(self):
        product = BundleProduct(
            items=[BundleItem(product_id="a", quantity=2), BundleItem(product_id="b", price_override=30.0)],
            pricing="discounted",
            discount_percent=20,
        )
        assert canonical_price(product, {"a": 35.0}) == 80.0

    def test_bundle_discounted_with_unknown_price_defers(self):
        product = BundleProduct(items=[BundleItem(product_id="a")], pricing="discounted", discount_percent=20)
        assert canonical_price(product, {}) == 0.0

    def test_bundle_fixed_unset_and_sum(self):
        assert canonical_price(BundleProduct(pricing="fixed")) == 0.0
        assert canonical_price(BundleProduct(pricing="fixed", bundle_price=49.0)) == 49.0
        assert canonical_price(BundleProduct(pricing="sum", bundle_price=49.0)) == 0.0
        assert canonical_price(BundleProduct(pricing=None)) == 0.0


def test_synced_variants_copy_buy_one_fields_without_mutation():
    variant = Variant(option_values=("S",), price=10.0, compare_at_price=None,
                      volume_tiers=[_tier(1, 9.0, compare_at=11.0)])

    synced = synced_variants([variant])

    assert (synced[0].price, synced[0].compare_at_price) == (9.0, 11.0)
    assert (variant.price, variant.compare_at_price) == (10.0, None)


# =============================================================================
# SELECTION
# =============================================================================

class TestResolveSelection:

    def test_pack_selection_counts_packs(self):
        product = SimpleProduct(price=10.0, volume_tiers=[_tier(1, 10.0), _tier(3, 24.0)])

        selection = resolve_selection(product, pack_index=1, quantity=2)

        assert selection.unit_price == 8.0
        assert selection.quantity == 6
        assert selection.line_total == 48.0

    def test_variant_without_pack_uses_effective_price(self):
        product = _variable(
            Variant(option_values=("S",), price=10.0, volume_tiers=[_tier(1, 9.0)]),
            Variant(option_values=("M",), price=18.0),
        )

        assert resolve_selection(product, variant_index=0, quantity=3).line_total == 27.0
        assert resolve_selection(product, variant_index=1).unit_price == 18.0

    def test_unknown_variant_falls_back_to_canonical(self):
        product = _variable(Variant(option_values=("S",), price=10.0), Variant(option_values=("M",), price=18.0))

        selection = resolve_selection(product, variant_index=5, quantity=1)

        assert selection.unit_price == 10.0
        assert selection.variant_index is None

    def test_zero_quantity_pack_is_guarded(self):
        product = SimpleProduct(price=10.0, volume_tiers=[VolumeTier(min_quantity=0, price=12.0)])

        selection = resolve_selection(product, pack_index=0, quantity=2)

        assert selection.unit_price == 12.0
        assert selection.quantity == 2

    def test_fixed_bundle_unit_price(self):
        product = BundleProduct(pricing="fixed", bundle_price=49.0)
        assert resolve_selection(product, quantity=2).line_total == 98.0

    def test_bundle_price_ignored_after_switching_to_discounted(self):
        product = BundleProduct(
            items=[BundleItem(product_id="a", quantity=2, price_override=50.0)],
            pricing="discounted",
            bundle_price=60.0,
            discount_percent=20,
            currency="USD",
        )

        selection = resolve_selection(product)

        assert canonical_price(product) == 80.0
        assert display_price(product) == "$80.00"
        assert selection.unit_price == 80.0
        assert selection.line_total == 80.0


# =============================================================================
# DISPLAY
# =============================================================================

class TestDisplay:

    def test_variable_from_label(self):
        product = _variable(Variant(option_values=("S",), price=10.0), Variant(option_values=("M",), price=18.0))
        assert display_price(product) == "From $10.00"

    def test_variable_pack_label(self):
        product = _variable(Variant(option_values=("S",), price=10.0, volume_tiers=[_tier(1, 10.0), _tier(3, 24.0)]))
        assert display_price(product, variant_index=0, pack_index=1) == "$24.00"

    def test_bundle_labels(self):
        assert display_price(BundleProduct(pricing="sum", currency="USD")) == SUM_OF_ITEMS_LABEL
        assert display_price(BundleProduct(pricing="fixed", bundle_price=49.0, currency="EUR")) == "€49.00"

    def test_format_price_rounds_half_up(self):
        assert format_price(10.005, "USD") == "$10.01"
        assert format_price(5, "JPY") == "JPY 5.00"
        assert format_price(3.5, "gbp") == "£3.50"


def test_price_summary_is_pure_and_idempotent():
    product = _variable(
        Variant(option_values=("S",), price=10.0, volume_tiers=[_tier(1, 9.0), _tier(3, 24.0)]),
        Variant(option_values=("M",), price=18.0),
    )
    before = [v.copy() for v in product.variants]

    first = price_summary(product, variant_index=0, pack_index=1, quantity=2)
    second = price_summary(product, variant_index=0, pack_index=1, quantity=2)

    assert first == second
    assert product.variants == before
    assert first["canonicalPrice"] == 9.0
    assert first["selection"]["quantity"] == 6
    assert first["selection"]["lineTotal"] == 48.0
    assert first["orderable"] is True
