"""
Rendu texte déterministe des emails (admin / client) à partir de la commande reconstituée.
"""
from typing import Iterable, List, Optional

from storefront.orders.metadata import RecoveredOrder

# Libellés affichés dans les emails; doivent rester alignés sur PRODUCT_CATALOG
PRODUCT_LABELS = {
    "coin": "Münzzähler",
    "cash": "Münz & Scheinzähler",
}

DUPLICATE_HINT = (
    "Hinweis: Mollie kann Webhooks mehrfach senden. "
    "Ohne Duplikatsperre (SEEN_TRANSACTIONS_REDIS_URL) sind doppelte Mails möglich."
)


def product_label(code: str, fallback: Optional[str] = None) -> str:
    return PRODUCT_LABELS.get(code) or fallback or code or "-"


def _item_lines(order: RecoveredOrder) -> List[str]:
    lines = []
    for item in order.items:
        code = str(item.get("productOption") or "")
        label = product_label(code, item.get("name"))
        qty = item.get("quantity") or 1
        gross = item.get("lineGross")
        suffix = f" = {gross} EUR brutto" if gross else ""
        lines.append(f"- {qty} x {label}{suffix}")
    return lines or ["- (keine Positionen in den Metadaten)"]


def _products_summary(order: RecoveredOrder) -> str:
    labels = [product_label(str(it.get("productOption") or ""), it.get("name")) for it in order.items]
    return ", ".join(labels) or "-"


def _join(parts: Iterable[Optional[str]]) -> str:
    return "\n".join(p for p in parts if p is not None)


def admin_subject(order: RecoveredOrder, env_label: str) -> str:
    return f"✅ Zahlung eingegangen ({env_label}): {_products_summary(order)} ({order.amount_label})"


def render_admin_body(order: RecoveredOrder, env_label: str, dedup_enabled: bool = False) -> str:
    address = order.customer
    address_line = None
    if address.get("streetAndNumber") or address.get("city"):
        address_line = (
            f"Adresse: {address.get('streetAndNumber') or ''}, "
            f"{address.get('postalCode') or ''} {address.get('city') or ''} {address.get('country') or ''}"
        ).rstrip()
    return _join([
        "Zahlung ist eingegangen.",
        "",
        f"ENV: {env_label}",
        f"Transaktions-ID: {order.transaction_id}",
        f"Referenz: {order.reference}" if order.reference else None,
        f"Status: {order.status}",
        f"Betrag: {order.amount_label}",
        f"Netto: {order.total_net} EUR" if order.total_net else None,
        f"MwSt ({order.vat_rate} %): {order.total_vat} EUR" if order.total_vat else None,
        f"Brutto: {order.total_gross} EUR" if order.total_gross else None,
        "",
        "Positionen:",
        *_item_lines(order),
        "",
        f"Kunde: {order.full_name or '-'}",
        f"Kunden-E-Mail: {order.email or '-'}",
        address_line,
        None if dedup_enabled else "",
        None if dedup_enabled else DUPLICATE_HINT,
    ])


def customer_subject(order: RecoveredOrder) -> str:
    ref = order.reference or order.transaction_id
    return f"Deine Bestellung bei Boxplanet ({ref})"


def render_customer_body(order: RecoveredOrder) -> str:
    greeting = f"Hallo {order.customer.get('firstName')}," if order.customer.get("firstName") else "Hallo,"
    return _join([
        greeting,
        "",
        "vielen Dank für deine Bestellung. Deine Zahlung ist bei uns eingegangen.",
        "",
        f"Bestellnummer: {order.reference or order.transaction_id}",
        "",
        *_item_lines(order),
        "",
        f"Netto: {order.total_net} EUR" if order.total_net else None,
        f"MwSt ({order.vat_rate} %): {order.total_vat} EUR" if order.total_vat else None,
        f"Gesamt (brutto): {order.total_gross or order.amount_value} EUR",
        "",
        "Wir melden uns, sobald deine Bestellung versendet wird.",
        "",
        "Dein Boxplanet-Team",
    ])
