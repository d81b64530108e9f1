import pytest

from storefront.errors import EmptyCart, InvalidProduct
from storefront.orders import catalog
from storefront.orders.cart import clamp_quantity, normalize, price_lines
from storefront.orders.models import CartLine, ProductCatalogEntry


def test_catalog_prices_are_net_cents():
    assert catalog.lookup("coin").unit_price_net_minor == 166000
    assert catalog.lookup("cash").unit_price_net_minor == 189000
    assert catalog.lookup(" coin ").display_name == "Münzzähler"
    assert catalog.lookup("unknown") is None
    assert catalog.lookup(None) is None

def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        catalog.PRODUCT_CATALOG["free"] = None

def test_catalog_entry_requires_positive_price():
    with pytest.raises(ValueError):
        ProductCatalogEntry(code="free", display_name="Gratis", unit_price_net_minor=0)

@pytest.mark.parametrize("raw,expected", [
    (0, 1), (-5, 1), ("abc", 1), (1000, 50), (None, 1),
    (2, 2), ("3", 3), (2.9, 2), (float("nan"), 1), (float("inf"), 1), (50, 50),
    (10**400, 50), (-10**400, 1), (str(10**400), 1), (True, 1),
])
def test_clamp_quantity(raw, expected):
    assert clamp_quantity(raw) == expected

def test_array_cart_drops_unknown_codes():
    lines = normalize([
        {"productOption": "coin", "quantity": 2},
        {"productOption": "gold", "quantity": 1},
        {"productOption": " cash ", "quantity": 1000},
    ])
    assert lines == [CartLine("coin", 2), CartLine("cash", 50)]

def test_array_cart_accepts_product_code_key():
    assert normalize([{"productCode": "cash"}]) == [CartLine("cash", 1)]

def test_array_cart_with_only_unknown_codes_is_empty():
    with pytest.raises(EmptyCart) as exc:
        normalize([{"productOption": "gold"}, {"quantity": 3}])
    assert exc.value.error == "No valid cart items"

def test_single_item_unknown_code_is_rejected():
    with pytest.raises(InvalidProduct) as exc:
        normalize(None, {"productOption": "gold", "quantity": 1})
    assert exc.value.status_code == 400
    assert exc.value.error == "Invalid productOption"

def test_single_item_missing_code_is_rejected():
    with pytest.raises(InvalidProduct):
        normalize([], {"productOption": None})

def test_single_item_path_used_when_cart_empty():
    assert normalize([], {"productOption": "coin", "quantity": "0"}) == [CartLine("coin", 1)]

def test_normalize_is_idempotent():
    once = normalize([{"productOption": "coin", "quantity": 70}, {"productOption": "cash", "quantity": -2}])
    assert normalize(once) == once

def test_price_lines_uses_catalog_prices():
    priced = price_lines([CartLine("coin", 2), CartLine("cash", 1)], "19")
    assert [p.unit_price_net_minor for p in priced] == [166000, 189000]
    assert priced[0].line_gross_minor == 395080
    assert priced[1].line_gross_minor == 224910

def test_array_cart_merges_duplicate_codes():
    lines = normalize([
        {"productOption": "coin", "quantity": 2},
        {"productOption": "cash", "quantity": 1},
        {"productOption": "coin", "quantity": 3},
        {"productOption": " cash ", "quantity": 40},
        {"productOption": "cash", "quantity": 40},
    ])
    assert lines == [CartLine("coin", 5), CartLine("cash", 50)]
