"""
Adaptateur Mollie: centralise les appels REST et l'authentification (Bearer live/test).
- create_payment / create_order: création côté checkout
- get_payment / get_order: lecture authentifiée de l'état (seule source de vérité pour le webhook)
Toute réponse non-succès ou erreur réseau devient ProviderRequestFailed.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx
from fastapi import Depends

from storefront.config import Settings, get_settings
from storefront.errors import ConfigurationMissing, ProviderRequestFailed

logger = logging.getLogger(__name__)

# module storefront.payments.mollie_client
class MollieClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.mollie.com/v2",
        timeout: float = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "MollieClient":
        return cls(
            settings.mollie_api_key,
            base_url=settings.mollie_api_base,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigurationMissing("Missing MOLLIE_API_KEY")
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, headers=headers, timeout=self.timeout, transport=self.transport
            ) as client:
                resp = await client.request(method, path, json=payload)
        except httpx.HTTPError as e:
            logger.error("mollie.request failed method=%s path=%s error=%s", method, path, e)
            raise ProviderRequestFailed(details=f"Mollie unreachable: {e}")

        try:
            data = resp.json()
        except ValueError:
            data = {"detail": resp.text[:500]}
        if not resp.is_success:
            detail = data.get("detail") if isinstance(data, dict) else None
            logger.error("mollie.request error status=%s path=%s body=%s", resp.status_code, path, data)
            raise ProviderRequestFailed(details=detail or data, provider_status=resp.status_code)
        return data if isinstance(data, dict) else {}

    async def create_payment(
        self,
        *,
        amount: Dict[str, str],
        description: str,
        redirect_url: str,
        webhook_url: str,
        metadata: Dict[str, Any],
    ) -> Dict[str, Any]:
        """POST /payments. Retour: ressource payment (id "tr_...", _links.checkout.href)."""
        return await self._request("POST", "/payments", {
            "amount": amount,
            "description": description,
            "redirectUrl": redirect_url,
            "webhookUrl": webhook_url,
            "metadata": metadata,
        })

    async def create_order(
        self,
        *,
        amount: Dict[str, str],
        lines: List[Dict[str, Any]],
        billing_address: Dict[str, str],
        shipping_address: Dict[str, str],
        redirect_url: str,
        webhook_url: str,
        metadata: Dict[str, Any],
        order_number: str,
        locale: str = "de_DE",
    ) -> Dict[str, Any]:
        """POST /orders. Retour: ressource order (id "ord_...", _links.checkout.href)."""
        return await self._request("POST", "/orders", {
            "amount": amount,
            "orderNumber": order_number,
            "lines": lines,
            "billingAddress": billing_address,
            "shippingAddress": shipping_address,
            "redirectUrl": redirect_url,
            "webhookUrl": webhook_url,
            "locale": locale,
            "metadata": metadata,
        })

    async def get_payment(self, payment_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/payments/{payment_id}")

    async def get_order(self, order_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/orders/{order_id}")


def checkout_url(resource: Dict[str, Any]) -> Optional[str]:
    links = (resource or {}).get("_links") or {}
    return ((links.get("checkout") or {}).get("href")) or None


def get_mollie_client(settings: Settings = Depends(get_settings)) -> MollieClient:
    """Dépendance FastAPI (surchargée en tests avec un transport httpx.MockTransport)."""
    return MollieClient.from_settings(settings)
