"""
Sérialisation/désérialisation des métadonnées Mollie.
Mollie renvoie `metadata` tel quel à chaque lecture: c'est ce qui permet au webhook
de retrouver le contenu de la commande sans base de données locale.
"""
import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from storefront.orders.models import Customer, OrderLine, ShippingAddress, Totals
from storefront.orders.money import format_vat_rate, to_decimal_string

logger = logging.getLogger(__name__)

# Mollie refuse une metadata de plus de ~1 Ko (JSON encodé)
MAX_METADATA_BYTES = 1024

def metadata_size(metadata: Dict[str, Any]) -> int:
    return len(json.dumps(metadata, ensure_ascii=False, separators=(",", ":")).encode("utf-8"))

# module storefront.orders.metadata
def make_metadata(
    *,
    reference: str,
    customer: Customer,
    address: Optional[ShippingAddress],
    order_lines: Sequence[OrderLine],
    totals: Totals,
    vat_rate_percent: Decimal,
) -> Dict[str, Any]:
    """
    Construit le payload metadata attaché à la requête Mollie.
    - customer: identité + adresse éventuelle
    - items: détail par ligne (net, brut, TVA) en chaînes décimales; le libellé se relit au catalogue
    - totalNet / totalVat / totalGross: totaux calculés côté serveur
    """
    customer_meta: Dict[str, Any] = {
        "firstName": customer.first_name,
        "lastName": customer.last_name,
        "email": customer.email,
    }
    if address is not None:
        customer_meta.update({
            "streetAndNumber": address.street_and_number,
            "postalCode": address.postal_code,
            "city": address.city,
            "country": address.country,
        })
    items = []
    for line in order_lines:
        items.append({
            "productOption": line.product_code,
            "quantity": line.quantity,
            "lineNet": to_decimal_string(line.line_net_minor),
            "lineGross": to_decimal_string(line.line_gross_minor),
            "vatAmount": to_decimal_string(line.vat_amount_minor),
        })
    return {
        "reference": reference,
        "customer": customer_meta,
        "items": items,
        "vatRate": format_vat_rate(vat_rate_percent),
        "totalNet": to_decimal_string(totals.net_minor),
        "totalVat": to_decimal_string(totals.vat_minor),
        "totalGross": to_decimal_string(totals.gross_minor),
    }


@dataclass
class RecoveredOrder:
    """Commande reconstituée depuis une ressource Mollie (payment ou order)."""
    transaction_id: str
    status: str = ""
    amount_value: str = ""
    amount_currency: str = ""
    reference: str = ""
    customer: Dict[str, Any] = field(default_factory=dict)
    items: List[Dict[str, Any]] = field(default_factory=list)
    vat_rate: str = ""
    total_net: str = ""
    total_vat: str = ""
    total_gross: str = ""

    @property
    def email(self) -> str:
        return str(self.customer.get("email") or "").strip()

    @property
    def full_name(self) -> str:
        parts = [self.customer.get("firstName"), self.customer.get("lastName")]
        return " ".join(str(p).strip() for p in parts if p).strip()

    @property
    def amount_label(self) -> str:
        if not self.amount_value:
            return "-"
        return f"{self.amount_value} {self.amount_currency}".strip()


def _load_metadata(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str) and raw:
        try:
            loaded = json.loads(raw)
        except ValueError:
            logger.warning("orders.metadata bad JSON metadata=%r", raw[:200])
            return {}
        return loaded if isinstance(loaded, dict) else {}
    return {}


def extract_order_metadata(resource: Dict[str, Any], transaction_id: str) -> RecoveredOrder:
    """
    Extrait la commande depuis une ressource Mollie lue par id.
    - Tolérant aux erreurs: metadata absente/invalide => champs vides.
    - Compat ancienne forme à plat (email, productOption, net, gross).
    """
    meta = _load_metadata((resource or {}).get("metadata"))
    amount = (resource or {}).get("amount") or {}

    customer = meta.get("customer") if isinstance(meta.get("customer"), dict) else {}
    customer = dict(customer)
    if not customer.get("email") and meta.get("email"):
        customer["email"] = meta.get("email")

    items = [it for it in (meta.get("items") or []) if isinstance(it, dict)]
    if not items and meta.get("productOption"):
        items = [{"productOption": meta.get("productOption"), "quantity": meta.get("quantity") or 1}]

    return RecoveredOrder(
        transaction_id=str((resource or {}).get("id") or transaction_id),
        status=str((resource or {}).get("status") or ""),
        amount_value=str(amount.get("value") or ""),
        amount_currency=str(amount.get("currency") or ""),
        reference=str(meta.get("reference") or ""),
        customer=customer,
        items=items,
        vat_rate=str(meta.get("vatRate") or ""),
        total_net=str(meta.get("totalNet") or meta.get("net") or ""),
        total_vat=str(meta.get("totalVat") or ""),
        total_gross=str(meta.get("totalGross") or meta.get("gross") or ""),
    )
