"""
Réconciliation webhook Mollie.

Le corps du webhook ne contient qu'un identifiant (form-encoded `id`); il n'est
jamais cru pour le statut ou le montant. L'état fait foi uniquement après une
lecture authentifiée chez Mollie:

    Received(id)
      -> lecture impossible / id mal formé  -> IGNORED   (aucun email)
      -> statut en cours (open, authorized…) -> PENDING  (aucun email)
      -> statut paid / completed            -> CONFIRMED (email admin, puis client)

Chaque branche se termine par un 200 côté vue: Mollie relivre sur toute autre réponse.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import parse_qs

from redis.exceptions import RedisError

from storefront.config import Settings
from storefront.errors import ConfigurationMissing, ProviderRequestFailed
from storefront.notifications import service as notifications
from storefront.notifications.service import DispatchResult
from storefront.notifications.resend_client import ResendClient
from storefront.orders.metadata import extract_order_metadata
from storefront.payments.mollie_client import MollieClient
from storefront.reconciliation.seen import SeenTransactions
from storefront.reconciliation.status import ReconciliationClass, ResourceKind, classify, resource_kind

logger = logging.getLogger(__name__)

IGNORED = "ignored"
PENDING = "pending"
CONFIRMED = "confirmed"
DUPLICATE = "duplicate"


@dataclass
class ReconciliationOutcome:
    transaction_id: Optional[str]
    result: str
    reason: str = ""
    classification: Optional[ReconciliationClass] = None
    notifications: List[DispatchResult] = field(default_factory=list)

    @property
    def sent_count(self) -> int:
        return sum(1 for r in self.notifications if r.sent)


def parse_webhook_body(raw: bytes) -> Optional[str]:
    """Extrait `id` d'un corps x-www-form-urlencoded; None si absent."""
    try:
        params = parse_qs(raw.decode("utf-8", errors="replace"))
    except ValueError:
        return None
    values = params.get("id") or []
    value = values[0].strip() if values else ""
    return value or None


async def fetch_resource(mollie: MollieClient, transaction_id: str, kind: ResourceKind) -> dict:
    if kind is ResourceKind.ORDER:
        return await mollie.get_order(transaction_id)
    return await mollie.get_payment(transaction_id)


async def reconcile(
    transaction_id: Optional[str],
    *,
    settings: Settings,
    mollie: MollieClient,
    mailer: ResendClient,
    seen: Optional[SeenTransactions] = None,
) -> ReconciliationOutcome:
    if not settings.mollie_api_key:
        logger.warning("reconciliation.webhook missing Mollie key live=%s", settings.live_mode)
        return ReconciliationOutcome(transaction_id, IGNORED, "missing-provider-key")

    if not settings.email_configured:
        logger.warning("reconciliation.webhook missing email settings=%s", ",".join(settings.missing_email_settings()))
        return ReconciliationOutcome(transaction_id, IGNORED, "missing-email-config")

    if not transaction_id:
        return ReconciliationOutcome(None, IGNORED, "missing-id", ReconciliationClass.NOT_FOUND)

    kind = resource_kind(transaction_id)
    if kind is None:
        return ReconciliationOutcome(transaction_id, IGNORED, "unrecognized-id", ReconciliationClass.NOT_FOUND)

    try:
        resource = await fetch_resource(mollie, transaction_id, kind)
    except (ProviderRequestFailed, ConfigurationMissing) as e:
        logger.warning("reconciliation.webhook lookup failed id=%s details=%s", transaction_id, e.details)
        return ReconciliationOutcome(transaction_id, IGNORED, "lookup-failed", ReconciliationClass.NOT_FOUND)

    status = resource.get("status")
    classification = classify(status)
    if classification is not ReconciliationClass.CONFIRMED:
        return ReconciliationOutcome(transaction_id, PENDING, f"status={status}", classification)

    if seen is not None:
        try:
            first_time = await seen.add(transaction_id)
        except RedisError:
            # Registre indisponible: on retombe sur l'at-least-once
            logger.exception("reconciliation.webhook seen-store unavailable id=%s", transaction_id)
            first_time = True
        if not first_time:
            return ReconciliationOutcome(transaction_id, DUPLICATE, "already-confirmed", classification)

    order = extract_order_metadata(resource, transaction_id)
    intents = notifications.build_intents(order, settings, dedup_enabled=seen is not None)
    results = await notifications.dispatch_all(intents, mailer, settings.from_email)
    return ReconciliationOutcome(transaction_id, CONFIRMED, f"status={status}", classification, results)
