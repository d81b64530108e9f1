"""
Catalogue produits côté serveur (prix NET en centimes).
Seule source de vérité pour les prix: tout prix envoyé par le client est ignoré.
"""
from types import MappingProxyType
from typing import Any, Mapping, Optional

from storefront.orders.models import ProductCatalogEntry

PRODUCT_CATALOG: Mapping[str, ProductCatalogEntry] = MappingProxyType({
    "coin": ProductCatalogEntry(code="coin", display_name="Münzzähler", unit_price_net_minor=1660 * 100),
    "cash": ProductCatalogEntry(code="cash", display_name="Münz & Scheinzähler", unit_price_net_minor=1890 * 100),
})


def lookup(code: Any) -> Optional[ProductCatalogEntry]:
    """Retourne l'entrée du catalogue pour un code (espaces ignorés), None si inconnu."""
    return PRODUCT_CATALOG.get(str(code or "").strip())
