import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from storefront.config import Settings, get_settings
from storefront.notifications.resend_client import ResendClient, get_resend_client
from storefront.payments.mollie_client import MollieClient, get_mollie_client
from storefront.reconciliation import service as reconciliation
from storefront.reconciliation.seen import SeenTransactions

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Webhooks"])

def get_seen_transactions(request: Request) -> Optional[SeenTransactions]:
    """Registre de déduplication initialisé par le lifespan (None si non configuré)."""
    return getattr(request.app.state, "seen_transactions", None)

# module storefront.reconciliation.views
@router.post("/mollie-webhook", include_in_schema=False)
async def mollie_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    mollie: MollieClient = Depends(get_mollie_client),
    mailer: ResendClient = Depends(get_resend_client),
    seen: Optional[SeenTransactions] = Depends(get_seen_transactions),
):
    """
    Webhook Mollie (payments et orders).
    - Corps x-www-form-urlencoded: id=tr_xxx ou id=ord_xxx (jamais cru pour le statut)
    - Relit la ressource chez Mollie, n'envoie les emails que si paid/completed
    - Réponse: toujours 200 sans corps (sinon Mollie relivre le webhook)
    """
    try:
        transaction_id = reconciliation.parse_webhook_body(await request.body())
        outcome = await reconciliation.reconcile(
            transaction_id, settings=settings, mollie=mollie, mailer=mailer, seen=seen
        )
        logger.info(
            "reconciliation.webhook result=%s reason=%s id=%s sent=%s",
            outcome.result, outcome.reason, outcome.transaction_id, outcome.sent_count,
        )
    except Exception:
        logger.exception("Erreur mollie_webhook")
    return Response(status_code=200)
