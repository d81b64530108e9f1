"""
Adaptateur Resend (email transactionnel): POST /emails avec Authorization Bearer.
"""
import logging
from typing import Any, Dict, Optional, Sequence

import httpx
from fastapi import Depends

from storefront.config import Settings, get_settings
from storefront.errors import NotificationFailed

logger = logging.getLogger(__name__)

class ResendClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.resend.com",
        timeout: float = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ResendClient":
        return cls(
            settings.resend_api_key,
            base_url=settings.resend_api_base,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    async def send_email(self, *, sender: str, to: Sequence[str], subject: str, text: str) -> Dict[str, Any]:
        """Envoie un email texte. Retour: {"id": "..."}; NotificationFailed sinon."""
        if not self.api_key:
            raise NotificationFailed("Missing RESEND_API_KEY")
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        payload = {"from": sender, "to": list(to), "subject": subject, "text": text}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, headers=headers, timeout=self.timeout, transport=self.transport
            ) as client:
                resp = await client.post("/emails", json=payload)
        except httpx.HTTPError as e:
            raise NotificationFailed(f"Resend unreachable: {e}")

        try:
            data = resp.json()
        except ValueError:
            data = {"raw": resp.text[:500]}
        if not resp.is_success:
            raise NotificationFailed("Resend error", status=resp.status_code, body=data)
        return data if isinstance(data, dict) else {}


def get_resend_client(settings: Settings = Depends(get_settings)) -> ResendClient:
    return ResendClient.from_settings(settings)
