"""
Types du domaine commandes.
- Dataclasses immuables pour les données dérivées côté serveur (catalogue, lignes, requête).
- Schéma pydantic pour le corps JSON entrant (non fiable), validé à la frontière.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class ProductCatalogEntry:
    code: str
    display_name: str
    unit_price_net_minor: int

    def __post_init__(self):
        if self.unit_price_net_minor <= 0:
            raise ValueError(f"unit_price_net_minor doit être > 0 (code={self.code})")


@dataclass(frozen=True)
class CartLine:
    """Ligne canonique {produit, quantité} issue de la normalisation du panier."""
    product_code: str
    quantity: int


@dataclass(frozen=True)
class OrderLine:
    product_code: str
    quantity: int
    unit_price_net_minor: int
    line_net_minor: int
    line_gross_minor: int
    vat_amount_minor: int
    vat_rate_percent: Decimal


@dataclass(frozen=True)
class Totals:
    net_minor: int
    gross_minor: int

    @property
    def vat_minor(self) -> int:
        return self.gross_minor - self.net_minor


@dataclass(frozen=True)
class Customer:
    first_name: str
    last_name: str
    email: str


@dataclass(frozen=True)
class ShippingAddress:
    street_and_number: str = ""
    postal_code: str = ""
    city: str = ""
    country: str = "DE"

    @property
    def is_complete(self) -> bool:
        return all([self.street_and_number, self.postal_code, self.city, self.country])


class CheckoutType(str, Enum):
    # "payment": montant unique; "order": lignes détaillées (paiement différé/échelonné)
    PAYMENT = "payment"
    ORDER = "order"


@dataclass(frozen=True)
class OrderRequest:
    checkout_type: CheckoutType
    reference: str
    customer: Customer
    address: Optional[ShippingAddress]
    order_lines: Tuple[OrderLine, ...]
    total_net_minor: int
    total_gross_minor: int
    vat_rate_percent: Decimal
    redirect_url: str
    webhook_url: str
    description: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_vat_minor(self) -> int:
        return self.total_gross_minor - self.total_net_minor


# --- Sélection du panier: union étiquetée "article unique" / "panier" ---

@dataclass(frozen=True)
class SingleItemSelection:
    product_code: Any
    quantity: Any


@dataclass(frozen=True)
class CartSelection:
    items: Tuple[Any, ...]


Selection = Union[SingleItemSelection, CartSelection]


def checkout_selection(raw_cart: Any, fallback_single: Optional[Mapping[str, Any]]) -> Selection:
    """
    Choisit la forme d'entrée:
    - panier non vide (liste) => CartSelection
    - sinon => SingleItemSelection (compat checkout article unique)
    """
    if isinstance(raw_cart, (list, tuple)) and len(raw_cart) > 0:
        return CartSelection(items=tuple(raw_cart))
    single = fallback_single or {}
    return SingleItemSelection(
        product_code=single.get("productOption", single.get("productCode")),
        quantity=single.get("quantity"),
    )


class CreateOrderIn(BaseModel):
    """Corps JSON de POST /api/create-order. Les prix éventuels envoyés par le client sont ignorés."""
    model_config = ConfigDict(extra="ignore")

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    streetAndNumber: Optional[str] = None
    postalCode: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = "DE"
    productOption: Any = None
    quantity: Any = None
    cart: Optional[List[Dict[str, Any]]] = None
    vatRate: Any = None
    checkoutType: CheckoutType = CheckoutType.PAYMENT

    def customer(self) -> Customer:
        return Customer(
            first_name=(self.firstName or "").strip(),
            last_name=(self.lastName or "").strip(),
            email=(self.email or "").strip(),
        )

    def address(self) -> ShippingAddress:
        return ShippingAddress(
            street_and_number=(self.streetAndNumber or "").strip(),
            postal_code=(self.postalCode or "").strip(),
            city=(self.city or "").strip(),
            country=(self.country or "DE").strip().upper() or "DE",
        )
