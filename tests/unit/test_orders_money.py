from decimal import Decimal

import pytest

from storefront.errors import InvalidInput, InvalidVatRate
from storefront.orders.money import (
    format_vat_rate,
    gross_from_net,
    parse_vat_rate,
    price_line,
    sum_totals,
    to_decimal_string,
)


def test_price_line_coin_times_two_at_19_percent():
    line = price_line(166000, 2, 19, product_code="coin")
    assert line.line_net_minor == 332000
    assert line.line_gross_minor == 395080
    assert line.vat_amount_minor == 63080
    assert to_decimal_string(line.line_gross_minor) == "3950.80"

def test_vat_is_always_gross_minus_net():
    for unit, qty, rate in [(1, 1, 19), (333, 3, 7), (999, 7, "19.5"), (150, 1, 0), (1234, 50, 30)]:
        line = price_line(unit, qty, rate)
        assert line.vat_amount_minor == line.line_gross_minor - line.line_net_minor
        assert line.line_gross_minor >= line.line_net_minor

def test_gross_rounds_half_up():
    # 150 * 1.07 = 160.5 => 161 (pas d'arrondi bancaire)
    assert gross_from_net(150, Decimal("7")) == 161
    # 50 * 1.19 = 59.5 => 60
    assert gross_from_net(50, Decimal("19")) == 60
    assert gross_from_net(100, Decimal("0")) == 100

def test_totals_are_sum_of_rounded_lines():
    lines = [price_line(50, 1, 19), price_line(50, 1, 19)]
    totals = sum_totals(lines)
    # chaque ligne arrondie à 60: total 120 (et non round(100 * 1.19) = 119)
    assert totals.net_minor == 100
    assert totals.gross_minor == 120
    assert totals.vat_minor == 20

def test_sum_totals_empty():
    totals = sum_totals([])
    assert (totals.net_minor, totals.gross_minor, totals.vat_minor) == (0, 0, 0)

@pytest.mark.parametrize("value,expected", [
    (None, Decimal("19")),
    ("", Decimal("19")),
    (7, Decimal("7")),
    ("7", Decimal("7")),
    (" 19 ", Decimal("19")),
    (0, Decimal("0")),
    (30, Decimal("30")),
    (7.5, Decimal("7.5")),
    ("19.37", Decimal("19.37")),
    ("19.370", Decimal("19.37")),
])
def test_parse_vat_rate_accepts(value, expected):
    assert parse_vat_rate(value) == expected

@pytest.mark.parametrize("value", [-1, 30.01, "abc", "NaN", "Infinity", True, [19], "19.375", "19.999"])
def test_parse_vat_rate_rejects(value):
    with pytest.raises(InvalidVatRate) as exc:
        parse_vat_rate(value)
    assert exc.value.status_code == 400
    assert exc.value.error == "Invalid vatRate"

def test_parse_vat_rate_uses_given_default():
    assert parse_vat_rate(None, default="7") == Decimal("7")

def test_price_line_rejects_non_positive_inputs():
    with pytest.raises(InvalidInput):
        price_line(0, 1, 19)
    with pytest.raises(InvalidInput):
        price_line(100, 0, 19)

def test_decimal_string_formatting():
    assert to_decimal_string(1660) == "16.60"
    assert to_decimal_string(5) == "0.05"
    assert to_decimal_string(0) == "0.00"
    assert format_vat_rate(Decimal("19")) == "19.00"
