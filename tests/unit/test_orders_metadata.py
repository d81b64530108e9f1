import json
from decimal import Decimal

from storefront.orders.cart import price_lines
from storefront.orders.metadata import MAX_METADATA_BYTES, extract_order_metadata, make_metadata, metadata_size
from storefront.orders.models import CartLine, Customer, ShippingAddress
from storefront.orders.money import sum_totals


def _resource(metadata, status="paid"):
    return {
        "id": "tr_abc123",
        "status": status,
        "amount": {"currency": "EUR", "value": "3950.80"},
        "metadata": metadata,
    }

FULL_META = {
    "reference": "BP-0000000001",
    "customer": {"firstName": "Erika", "lastName": "Mustermann", "email": "erika@example.com"},
    "items": [{"productOption": "coin", "quantity": 2, "lineGross": "3950.80"}],
    "vatRate": "19.00",
    "totalNet": "3320.00",
    "totalVat": "630.80",
    "totalGross": "3950.80",
}


def test_extract_full_metadata():
    order = extract_order_metadata(_resource(FULL_META), "tr_abc123")
    assert order.transaction_id == "tr_abc123"
    assert order.status == "paid"
    assert order.email == "erika@example.com"
    assert order.full_name == "Erika Mustermann"
    assert order.amount_label == "3950.80 EUR"
    assert order.reference == "BP-0000000001"
    assert order.items[0]["quantity"] == 2
    assert (order.total_net, order.total_vat, order.total_gross) == ("3320.00", "630.80", "3950.80")

def test_extract_metadata_sent_as_json_string():
    order = extract_order_metadata(_resource(json.dumps(FULL_META)), "tr_abc123")
    assert order.email == "erika@example.com"

def test_extract_legacy_flat_metadata():
    legacy = {"email": "old@example.com", "productOption": "cash", "net": "1890.00", "gross": "2249.10"}
    order = extract_order_metadata(_resource(legacy), "tr_abc123")
    assert order.email == "old@example.com"
    assert order.items == [{"productOption": "cash", "quantity": 1}]
    assert order.total_net == "1890.00"
    assert order.total_gross == "2249.10"

def test_extract_tolerates_missing_or_invalid_metadata():
    for meta in (None, "not-json", [1, 2], {"customer": "oops", "items": "oops"}):
        order = extract_order_metadata(_resource(meta), "tr_abc123")
        assert order.email == ""
        assert order.full_name == ""
        assert order.transaction_id == "tr_abc123"

def test_amount_label_without_amount():
    order = extract_order_metadata({"metadata": {}}, "ord_xyz")
    assert order.transaction_id == "ord_xyz"
    assert order.amount_label == "-"

def test_make_metadata_items_stay_compact():
    lines = price_lines([CartLine("coin", 9), CartLine("cash", 6)], Decimal("19"))
    meta = make_metadata(
        reference="BP-0000000001",
        customer=Customer(first_name="Erika", last_name="Mustermann", email="erika@example.com"),
        address=ShippingAddress(street_and_number="Friedrichstraße 123", postal_code="10117", city="Berlin"),
        order_lines=lines,
        totals=sum_totals(lines),
        vat_rate_percent=Decimal("19"),
    )
    assert set(meta["items"][0]) == {"productOption", "quantity", "lineNet", "lineGross", "vatAmount"}
    assert meta["customer"]["city"] == "Berlin"
    assert metadata_size(meta) < MAX_METADATA_BYTES
    assert metadata_size(meta) == len(json.dumps(meta, ensure_ascii=False, separators=(",", ":")).encode("utf-8"))
