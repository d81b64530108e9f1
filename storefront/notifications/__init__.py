"""
Module 'notifications': rendu et envoi des emails admin/client via Resend.
"""

from .resend_client import ResendClient, get_resend_client
from .service import Audience, DispatchResult, NotificationIntent, build_intents, dispatch_all, send

__all__ = [
    "ResendClient",
    "get_resend_client",
    "Audience",
    "DispatchResult",
    "NotificationIntent",
    "build_intents",
    "dispatch_all",
    "send",
]
