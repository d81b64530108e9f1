import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from storefront.config import Settings, get_settings
from storefront.errors import CheckoutError, InvalidInput
from storefront.orders import service as orders_service
from storefront.orders.models import CreateOrderIn
from storefront.payments.mollie_client import MollieClient, get_mollie_client
from storefront.utils.rate_limit import optional_rate_limit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Orders API"])

async def _read_json_body(request: Request) -> Dict[str, Any]:
    # Certains clients envoient le JSON en text/plain: on parse le body brut, {} si illisible
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw.decode("utf-8"))
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}

# module storefront.orders.views
@router.post("/create-order", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_order(
    request: Request,
    settings: Settings = Depends(get_settings),
    mollie: MollieClient = Depends(get_mollie_client),
):
    """
    Crée un paiement (ou une commande détaillée) Mollie à partir du panier.
    - Entrée JSON: {firstName, lastName, email, adresse?, productOption?, quantity?, cart?, vatRate?, checkoutType?}
    - Prix et totaux recalculés côté serveur depuis le catalogue
    - 200 {checkoutUrl, paymentId|orderId, totalNet, totalGross}
    - 400 {error} si saisie invalide, 500 {error, details} si config/fournisseur en échec
    """
    body = await _read_json_body(request)
    logger.info("orders.create received keys=%s", sorted(body.keys()))
    try:
        payload = CreateOrderIn.model_validate(body)
    except ValidationError as e:
        details = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise InvalidInput("Invalid request body", details=details)

    try:
        result = await orders_service.create_checkout(payload, settings=settings, mollie=mollie)
    except CheckoutError as e:
        logger.warning("orders.create rejected status=%s error=%s details=%s", e.status_code, e.error, e.details)
        raise
    except Exception as e:
        logger.exception("Erreur create_order")
        raise CheckoutError(details=str(e))
    return JSONResponse(result)
