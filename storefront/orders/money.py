"""
Arithmétique monétaire pure (pas de HTTP, pas de Mollie).
Montants en centimes (int) jusqu'à la sérialisation unique vers la chaîne décimale du fournisseur.
- brut = arrondi half-up de net * (1 + taux/100)
- TVA = brut - net (jamais calculée indépendamment)
- totaux = somme des lignes déjà arrondies
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

from storefront.errors import InvalidInput, InvalidVatRate
from storefront.orders.models import OrderLine, Totals

VAT_RATE_MIN = Decimal("0")
VAT_RATE_MAX = Decimal("30")
_CENT = Decimal("1")
_TWO_PLACES = Decimal("0.01")


def parse_vat_rate(value: Any, default: Any = "19") -> Decimal:
    """
    Convertit un taux de TVA (nombre ou chaîne) en Decimal borné à [0, 30].
    - None / "" => default
    - bool, NaN, infini, hors bornes, plus de 2 décimales => InvalidVatRate
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        value = default
    if isinstance(value, bool):
        raise InvalidVatRate(details=f"vatRate={value!r}")
    try:
        rate = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidVatRate(details=f"vatRate={value!r}")
    if not rate.is_finite() or rate < VAT_RATE_MIN or rate > VAT_RATE_MAX:
        raise InvalidVatRate(details=f"vatRate={value!r} (attendu entre 0 et 30)")
    if rate != rate.quantize(_TWO_PLACES):
        raise InvalidVatRate(details=f"vatRate={value!r} (2 décimales au plus)")
    return rate


def gross_from_net(net_minor: int, vat_rate_percent: Decimal) -> int:
    gross = Decimal(net_minor) * (Decimal(100) + vat_rate_percent) / Decimal(100)
    return int(gross.quantize(_CENT, rounding=ROUND_HALF_UP))


def price_line(
    unit_price_net_minor: int,
    quantity: int,
    vat_rate_percent: Any,
    product_code: str = "",
) -> OrderLine:
    rate = parse_vat_rate(vat_rate_percent)
    if unit_price_net_minor <= 0:
        raise InvalidInput("Invalid unit price", details=f"unit_price_net_minor={unit_price_net_minor}")
    if quantity < 1:
        raise InvalidInput("Invalid quantity", details=f"quantity={quantity}")
    net = unit_price_net_minor * quantity
    gross = gross_from_net(net, rate)
    return OrderLine(
        product_code=product_code,
        quantity=quantity,
        unit_price_net_minor=unit_price_net_minor,
        line_net_minor=net,
        line_gross_minor=gross,
        vat_amount_minor=gross - net,
        vat_rate_percent=rate,
    )


def sum_totals(lines: Iterable[OrderLine]) -> Totals:
    net = 0
    gross = 0
    for line in lines:
        net += line.line_net_minor
        gross += line.line_gross_minor
    return Totals(net_minor=net, gross_minor=gross)


def to_decimal_string(minor: int) -> str:
    """1660 -> "16.60" (format attendu par Mollie pour amount.value)."""
    return str((Decimal(minor) / 100).quantize(_TWO_PLACES))


def format_vat_rate(rate: Decimal) -> str:
    return str(rate.quantize(_TWO_PLACES))
