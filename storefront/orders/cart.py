"""
Logique panier pure (pas de Mollie, pas de HTTP).
"""
import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional

from storefront.errors import EmptyCart, InvalidProduct
from storefront.orders import catalog
from storefront.orders.models import CartLine, CartSelection, OrderLine, checkout_selection
from storefront.orders.money import parse_vat_rate, price_line

logger = logging.getLogger(__name__)

MIN_QUANTITY = 1
MAX_QUANTITY = 50

# module storefront.orders.cart
def clamp_quantity(value: Any) -> int:
    """
    Borne une quantité à l'intervalle entier [1, 50].
    - non numérique / non fini / absent => 1
    - décimal => partie entière inférieure
    - entier hors bornes (même très grand) => borne la plus proche
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return min(max(value, MIN_QUANTITY), MAX_QUANTITY)
    try:
        n = float(value)
    except (TypeError, ValueError, OverflowError):
        return MIN_QUANTITY
    if not math.isfinite(n):
        return MIN_QUANTITY
    return min(max(math.floor(n), MIN_QUANTITY), MAX_QUANTITY)

def _item_code(item: Any) -> str:
    if isinstance(item, CartLine):
        return item.product_code
    if isinstance(item, Mapping):
        return str(item.get("productOption") or item.get("productCode") or "").strip()
    return ""

def _item_quantity(item: Any) -> Any:
    if isinstance(item, CartLine):
        return item.quantity
    if isinstance(item, Mapping):
        return item.get("quantity")
    return None

def normalize(raw_cart: Any, fallback_single: Optional[Mapping[str, Any]] = None) -> List[CartLine]:
    """
    Normalise un panier client en lignes canoniques [CartLine(code, qty)].
    - Panier (liste non vide): codes inconnus ignorés silencieusement, quantités bornées.
    - Article unique: code inconnu => InvalidProduct (400).
    - Codes en double fusionnés (quantités additionnées puis re-bornées).
    - EmptyCart si aucune ligne valide ne reste.
    """
    selection = checkout_selection(raw_cart, fallback_single)
    quantities: Dict[str, int] = {}

    if isinstance(selection, CartSelection):
        for item in selection.items:
            code = _item_code(item)
            if not code or catalog.lookup(code) is None:
                logger.warning("orders.cart dropped unknown productOption=%r", code)
                continue
            quantities[code] = quantities.get(code, 0) + clamp_quantity(_item_quantity(item))
    else:
        code = str(selection.product_code or "").strip()
        if not code or catalog.lookup(code) is None:
            raise InvalidProduct(details=f"productOption={code!r}" if code else None)
        quantities[code] = clamp_quantity(selection.quantity)

    if not quantities:
        raise EmptyCart()
    return [CartLine(product_code=code, quantity=clamp_quantity(qty)) for code, qty in quantities.items()]

def price_lines(lines: Iterable[CartLine], vat_rate_percent: Any) -> List[OrderLine]:
    """Calcule les OrderLine à partir du catalogue (jamais des montants envoyés par le client)."""
    rate = parse_vat_rate(vat_rate_percent)
    priced: List[OrderLine] = []
    for line in lines:
        entry = catalog.lookup(line.product_code)
        if entry is None:
            raise InvalidProduct(details=f"productOption={line.product_code!r}")
        priced.append(price_line(entry.unit_price_net_minor, line.quantity, rate, product_code=entry.code))
    return priced
