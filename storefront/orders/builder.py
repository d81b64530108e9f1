"""
Construction de la requête fournisseur (Mollie) à partir des lignes calculées.
Deux variantes:
- "payment": montant brut unique (checkout simple)
- "order": lignes détaillées + adresses (exigé par les moyens de paiement différé/échelonné)
Le montant envoyé au fournisseur est toujours le total BRUT; le net n'est transmis qu'en metadata.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from storefront.errors import EmptyCart, InvalidInput, MissingCustomerFields
from storefront.orders import catalog
from storefront.orders.metadata import MAX_METADATA_BYTES, make_metadata, metadata_size
from storefront.orders.models import CheckoutType, Customer, OrderLine, OrderRequest, ShippingAddress
from storefront.orders.money import format_vat_rate, sum_totals, to_decimal_string

CURRENCY = "EUR"

def require_customer(customer: Customer) -> None:
    if not (customer.first_name and customer.last_name and customer.email):
        raise MissingCustomerFields()

def new_reference() -> str:
    return f"BP-{uuid4().hex[:10].upper()}"

def build(
    customer: Customer,
    address: Optional[ShippingAddress],
    order_lines: Sequence[OrderLine],
    vat_rate_percent: Decimal,
    *,
    checkout_type: CheckoutType = CheckoutType.PAYMENT,
    redirect_url: str,
    webhook_url: str,
    description: str,
    reference: Optional[str] = None,
) -> OrderRequest:
    """
    Agrège les lignes en OrderRequest.
    - Totaux = somme des lignes (jamais recalculés depuis le panier brut)
    - MissingCustomerFields si prénom/nom/email absents (et adresse complète pour "order")
    - metadata = détail complet pour la réconciliation par webhook (InvalidInput au-delà de 1 Ko)
    """
    require_customer(customer)
    if checkout_type is CheckoutType.ORDER and (address is None or not address.is_complete):
        raise MissingCustomerFields(details="address required for itemized orders")
    if not order_lines:
        raise EmptyCart()

    totals = sum_totals(order_lines)
    if totals.gross_minor <= 0:
        raise InvalidInput("Invalid total amount")

    reference = reference or new_reference()
    metadata = make_metadata(
        reference=reference,
        customer=customer,
        address=address,
        order_lines=order_lines,
        totals=totals,
        vat_rate_percent=vat_rate_percent,
    )
    if metadata_size(metadata) > MAX_METADATA_BYTES:
        raise InvalidInput("Order metadata too large", details=f"max {MAX_METADATA_BYTES} bytes")
    return OrderRequest(
        checkout_type=checkout_type,
        reference=reference,
        customer=customer,
        address=address,
        order_lines=tuple(order_lines),
        total_net_minor=totals.net_minor,
        total_gross_minor=totals.gross_minor,
        vat_rate_percent=vat_rate_percent,
        redirect_url=redirect_url,
        webhook_url=webhook_url,
        description=description,
        metadata=metadata,
    )

def money(minor: int) -> Dict[str, str]:
    return {"currency": CURRENCY, "value": to_decimal_string(minor)}

def provider_lines(request: OrderRequest) -> List[Dict[str, Any]]:
    """
    Lignes Mollie Orders: name/quantity/unitPrice/totalAmount/vatRate/vatAmount.
    unitPrice est le prix unitaire BRUT arrondi au centime supérieur; l'écart éventuel part en
    discountAmount pour que unitPrice * quantity - discountAmount == totalAmount.
    """
    lines: List[Dict[str, Any]] = []
    for line in request.order_lines:
        entry = catalog.lookup(line.product_code)
        unit_gross = -(-line.line_gross_minor // line.quantity)
        discount = unit_gross * line.quantity - line.line_gross_minor
        payload = {
            "type": "physical",
            "sku": line.product_code,
            "name": entry.display_name if entry else line.product_code,
            "quantity": line.quantity,
            "unitPrice": money(unit_gross),
            "totalAmount": money(line.line_gross_minor),
            "vatRate": format_vat_rate(line.vat_rate_percent),
            "vatAmount": money(line.vat_amount_minor),
        }
        if discount:
            payload["discountAmount"] = money(discount)
        lines.append(payload)
    return lines

def provider_address(request: OrderRequest) -> Dict[str, str]:
    address = request.address or ShippingAddress()
    return {
        "givenName": request.customer.first_name,
        "familyName": request.customer.last_name,
        "email": request.customer.email,
        "streetAndNumber": address.street_and_number,
        "postalCode": address.postal_code,
        "city": address.city,
        "country": address.country,
    }
