import sys
from pathlib import Path

from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from main import app

client = TestClient(app)


VARIABLE_PRODUCT = {
    "name": "Cold Brew",
    "productType": "variable",
    "currency": "USD",
    "options": [{"name": "Size", "values": ["S", "M"]}],
    "variants": [
        {
            "optionValues": ["S"],
            "price": 10.0,
            "stockQuantity": 20,
            "volumeTiers": [
                {"minQuantity": 1, "maxQuantity": 1, "price": 9.0},
                {"minQuantity": 3, "maxQuantity": 3, "price": 24.0, "compareAtPrice": 27.0},
            ],
        },
        {"optionValues": ["M"], "price": 18.0, "stockQuantity": 0, "allowBackorder": True},
    ],
}


def test_health():
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert "X-Request-Id" in response.headers


def test_preview_with_pack_selection():
    response = client.post("/api/product-config/preview", json={
        "product": VARIABLE_PRODUCT,
        "variantIndex": 0,
        "packIndex": 1,
        "quantity": 2,
    })

    assert response.status_code == 200
    body = response.json()
    assert body["productType"] == "variable"
    assert body["canonicalPrice"] == 9.0
    assert body["displayPrice"] == "$24.00"
    assert body["selection"]["unitPrice"] == 8.0
    assert body["selection"]["quantity"] == 6
    assert body["selection"]["lineTotal"] == 48.0
    assert body["packs"][1]["label"] == "Pack of 3"
    assert body["packs"][1]["savings"] == 3.0
    assert body["stockStatus"] == "in_stock"


def test_preview_backorder_variant():
    response = client.post("/api/product-config/preview", json={
        "product": VARIABLE_PRODUCT,
        "variantIndex": 1,
    })

    body = response.json()
    assert body["displayPrice"] == "From $9.00"
    assert body["stockStatus"] == "backorder"
    assert body["stockLabel"] == "Available on backorder"


def test_preview_rejects_bad_quantity():
    response = client.post("/api/product-config/preview", json={
        "product": VARIABLE_PRODUCT,
        "quantity": 0,
    })

    assert response.status_code == 422
    assert response.json()["error"] == "Validation failed"


def test_submission_payload():
    response = client.post("/api/product-config/submission", json={
        "product": VARIABLE_PRODUCT,
    })

    assert response.status_code == 200
    body = response.json()
    assert body["price"] == 9.0
    assert body["name"] == "Cold Brew"
    assert body["variants"][0]["price"] == 9.0
    assert "volumeTiers" not in body
    assert "bundleItems" not in body


def test_submission_for_discounted_bundle():
    response = client.post("/api/product-config/submission", json={
        "product": {
            "productType": "bundle",
            "bundleItems": [{"productId": "a", "quantity": 2}, {"productId": "b", "priceOverride": 30.0}],
            "bundlePricing": "discounted",
            "bundleDiscountPercent": 20,
        },
        "productPrices": {"a": 35.0},
    })

    assert response.status_code == 200
    assert response.json()["price"] == 80.0


def test_removal_impact():
    response = client.post("/api/product-config/removal-impact", json={
        "product": VARIABLE_PRODUCT,
        "axisIndex": 0,
        "valueIndex": 1,
    })

    assert response.status_code == 200
    assert response.json() == {
        "axisIndex": 0,
        "valueIndex": 1,
        "axisName": "Size",
        "value": "M",
        "variantCount": 1,
        "removesAxis": False,
    }


def test_removal_impact_unknown_value():
    response = client.post("/api/product-config/removal-impact", json={
        "product": VARIABLE_PRODUCT,
        "axisIndex": 3,
        "valueIndex": 0,
    })

    assert response.status_code == 404
    assert response.json() == {"error": "Option value not found"}


def test_variants_not_matching_options_are_rejected():
    product = {
        "productType": "variable",
        "options": [{"name": "Size", "values": ["S", "M"]}, {"name": "Color", "values": ["Red"]}],
        "variants": [{"optionValues": ["S"], "price": 10.0}],
    }

    for path, extra in (
        ("/api/product-config/removal-impact", {"axisIndex": 1, "valueIndex": 0}),
        ("/api/product-config/preview", {}),
        ("/api/product-config/submission", {}),
    ):
        response = client.post(path, json={"product": product, **extra})

        assert response.status_code == 422
        assert response.json() == {"error": "Variants do not match the product options"}
