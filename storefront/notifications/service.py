"""
Dispatcher de notifications.
- Un appel Resend par intention; admin puis client, séquentiellement.
- Un échec côté client n'annule pas l'email admin déjà envoyé.
- Les échecs sont journalisés et jamais propagés (le webhook répond toujours 200).
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from storefront.config import Settings
from storefront.errors import NotificationFailed
from storefront.notifications import templates
from storefront.notifications.resend_client import ResendClient
from storefront.orders.metadata import RecoveredOrder

logger = logging.getLogger(__name__)


class Audience(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


@dataclass(frozen=True)
class NotificationIntent:
    audience: Audience
    recipients: Tuple[str, ...]
    subject: str
    body: str


@dataclass(frozen=True)
class DispatchResult:
    audience: Audience
    sent: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


def is_plausible_email(value: str) -> bool:
    return "@" in (value or "")


def build_intents(order: RecoveredOrder, settings: Settings, dedup_enabled: bool = False) -> List[NotificationIntent]:
    """Intention admin toujours; intention client seulement si l'email récupéré contient '@'."""
    intents = [
        NotificationIntent(
            audience=Audience.ADMIN,
            recipients=tuple(settings.notify_emails),
            subject=templates.admin_subject(order, settings.env_label),
            body=templates.render_admin_body(order, settings.env_label, dedup_enabled=dedup_enabled),
        )
    ]
    if is_plausible_email(order.email):
        intents.append(
            NotificationIntent(
                audience=Audience.CUSTOMER,
                recipients=(order.email,),
                subject=templates.customer_subject(order),
                body=templates.render_customer_body(order),
            )
        )
    return intents


async def send(intent: NotificationIntent, mailer: ResendClient, sender: str) -> DispatchResult:
    try:
        data = await mailer.send_email(sender=sender, to=intent.recipients, subject=intent.subject, text=intent.body)
    except NotificationFailed as e:
        logger.error(
            "notifications.send failed audience=%s status=%s error=%s body=%s",
            intent.audience.value, e.status, e, e.body,
        )
        return DispatchResult(audience=intent.audience, sent=False, error=str(e))
    logger.info("notifications.send ok audience=%s id=%s", intent.audience.value, data.get("id"))
    return DispatchResult(audience=intent.audience, sent=True, message_id=data.get("id"))


async def dispatch_all(intents: Sequence[NotificationIntent], mailer: ResendClient, sender: str) -> List[DispatchResult]:
    results = []
    for intent in intents:
        results.append(await send(intent, mailer, sender))
    return results
