"""
Cas d'usage 'orders': orchestre panier, TVA, construction de requête et appel Mollie.
"""
import logging
from typing import Any, Dict

from storefront.config import Settings
from storefront.errors import ConfigurationMissing, ProviderRequestFailed
from storefront.orders import builder, cart
from storefront.orders.models import CheckoutType, CreateOrderIn, OrderRequest
from storefront.orders.money import parse_vat_rate, to_decimal_string
from storefront.payments.mollie_client import MollieClient, checkout_url

logger = logging.getLogger(__name__)


def prepare_order_request(payload: CreateOrderIn, settings: Settings) -> OrderRequest:
    """
    Transforme le corps validé en OrderRequest (sans effet de bord).
    Ordre des contrôles: champs client, taux de TVA, panier, puis construction.
    """
    customer = payload.customer()
    builder.require_customer(customer)
    vat_rate = parse_vat_rate(payload.vatRate, default=settings.default_vat_rate)
    lines = cart.normalize(
        payload.cart,
        {"productOption": payload.productOption, "quantity": payload.quantity},
    )
    order_lines = cart.price_lines(lines, vat_rate)
    return builder.build(
        customer,
        payload.address(),
        order_lines,
        vat_rate,
        checkout_type=payload.checkoutType,
        redirect_url=settings.redirect_url,
        webhook_url=settings.webhook_url,
        description=settings.payment_description,
    )


async def submit_order_request(request: OrderRequest, mollie: MollieClient, settings: Settings) -> Dict[str, Any]:
    amount = builder.money(request.total_gross_minor)
    if request.checkout_type is CheckoutType.ORDER:
        address = builder.provider_address(request)
        return await mollie.create_order(
            amount=amount,
            lines=builder.provider_lines(request),
            billing_address=address,
            shipping_address=address,
            redirect_url=request.redirect_url,
            webhook_url=request.webhook_url,
            metadata=request.metadata,
            order_number=request.reference,
            locale=settings.order_locale,
        )
    return await mollie.create_payment(
        amount=amount,
        description=request.description,
        redirect_url=request.redirect_url,
        webhook_url=request.webhook_url,
        metadata=request.metadata,
    )


async def create_checkout(payload: CreateOrderIn, *, settings: Settings, mollie: MollieClient) -> Dict[str, Any]:
    """
    Crée le paiement (ou la commande) Mollie et renvoie l'URL de checkout.
    Réponse: clés compatibles avec les différents fronts (checkoutUrl/url/paymentUrl).
    """
    if not settings.mollie_api_key:
        raise ConfigurationMissing("Missing MOLLIE_API_KEY")

    request = prepare_order_request(payload, settings)
    resource = await submit_order_request(request, mollie, settings)

    url = checkout_url(resource)
    if not url:
        raise ProviderRequestFailed(details="No checkoutUrl returned by Mollie")

    id_key = "orderId" if request.checkout_type is CheckoutType.ORDER else "paymentId"
    logger.info(
        "orders.create ok type=%s %s=%s reference=%s total_gross=%s lines=%s",
        request.checkout_type.value, id_key, resource.get("id"), request.reference,
        request.total_gross_minor, len(request.order_lines),
    )
    return {
        "ok": True,
        "checkoutUrl": url,
        "url": url,
        "paymentUrl": url,
        id_key: resource.get("id"),
        "amount": resource.get("amount"),
        "totalNet": to_decimal_string(request.total_net_minor),
        "totalGross": to_decimal_string(request.total_gross_minor),
    }
