import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from schemas.product_schemas import InventoryLevels, SimpleProduct, Variant, VariableProduct
from services.slugify import normalize_slug, slugify
from services.stock_status import get_stock_status, get_stock_status_label, selection_stock_status


class TestGetStockStatus:

    def test_untracked_is_always_in_stock(self):
        assert get_stock_status(False, 0) == "in_stock"

    def test_out_of_stock_and_backorder(self):
        assert get_stock_status(True, 0) == "out_of_stock"
        assert get_stock_status(True, -2, allow_backorder=True) == "backorder"

    def test_low_stock_uses_threshold(self):
        assert get_stock_status(True, 3, low_stock_threshold=3) == "low_stock"
        assert get_stock_status(True, 4, low_stock_threshold=3) == "in_stock"

    def test_default_threshold(self):
        assert get_stock_status(True, 5) == "low_stock"
        assert get_stock_status(True, 6) == "in_stock"

    def test_labels(self):
        assert get_stock_status_label("backorder") == "Available on backorder"


def test_variable_selection_reads_variant_inventory():
    product = VariableProduct(
        variants=[
            Variant(option_values=("S",), stock_quantity=0, allow_backorder=True),
            Variant(option_values=("M",), stock_quantity=40),
        ],
    )

    assert selection_stock_status(product, 0) == "backorder"
    assert selection_stock_status(product, 1) == "in_stock"
    assert selection_stock_status(product, None) == "out_of_stock"


def test_simple_selection_reads_product_inventory():
    product = SimpleProduct(price=10.0, inventory=InventoryLevels(stock_quantity=2, low_stock_threshold=3))
    assert selection_stock_status(product) == "low_stock"


class TestSlugify:

    def test_slugify(self):
        assert slugify("  Cold Brew -- Coffee!! ") == "cold-brew-coffee"
        assert slugify("snake_case name") == "snake-case-name"
        assert slugify("") == ""

    def test_normalize_slug_keeps_something_usable(self):
        assert normalize_slug("My Product") == "my-product"
        assert normalize_slug("!!!") == "---"
