"""
Classification des statuts Mollie et espace de noms des identifiants.
- "tr_..." => ressource payment, "ord_..." => ressource order
- paid / completed => CONFIRMED; tout autre statut connu => PENDING
"""
import re
from enum import Enum
from typing import Optional


class ResourceKind(str, Enum):
    PAYMENT = "payment"
    ORDER = "order"


class ReconciliationClass(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    NOT_FOUND = "not_found"


CONFIRMED_STATUSES = frozenset({"paid", "completed"})

_ID_PATTERN = re.compile(r"^(tr|ord)_[A-Za-z0-9]+$")
_PREFIX_KINDS = {"tr": ResourceKind.PAYMENT, "ord": ResourceKind.ORDER}


def resource_kind(transaction_id: Optional[str]) -> Optional[ResourceKind]:
    """Type de ressource déduit du préfixe; None si id absent ou mal formé."""
    match = _ID_PATTERN.match(transaction_id or "")
    if not match:
        return None
    return _PREFIX_KINDS[match.group(1)]


def classify(status: Optional[str]) -> ReconciliationClass:
    if (status or "").strip().lower() in CONFIRMED_STATUSES:
        return ReconciliationClass.CONFIRMED
    return ReconciliationClass.PENDING
