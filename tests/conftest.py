import json
import os
from typing import Any, Dict, Generator, List, Optional

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

# Pas de redis pendant les tests: à positionner avant l'import de l'app
os.environ["DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS"] = "1"
os.environ.pop("LOCAL_RATE_LIMIT_FALLBACK", None)
os.environ.pop("USE_FAKE_REDIS_FOR_TESTS", None)
os.environ.pop("SEEN_TRANSACTIONS_REDIS_URL", None)

from storefront.app import app as fastapi_app
from storefront.config import Settings, get_settings
from storefront.notifications.resend_client import ResendClient, get_resend_client
from storefront.payments.mollie_client import MollieClient, get_mollie_client
from storefront.reconciliation.views import get_seen_transactions

MOLLIE_BASE = "https://api.mollie.test/v2"
RESEND_BASE = "https://api.resend.test"
CHECKOUT_HREF = "https://www.mollie.com/checkout/select-method/test"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakeMollie:
    """
    Faux Mollie derrière httpx.MockTransport.
    - POST /payments, POST /orders: crée une ressource "open" avec lien de checkout
    - GET /payments/{id}, GET /orders/{id}: renvoie self.resources[id] (404 sinon)
    - fail_status: force une réponse d'erreur pour toutes les requêtes
    """
    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.resources: Dict[str, Dict[str, Any]] = {}
        self.fail_status: Optional[int] = None
        self.checkout_href: Optional[str] = CHECKOUT_HREF

    def body(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index].content or b"{}")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status:
            return httpx.Response(self.fail_status, json={"status": self.fail_status, "detail": "mollie says no"})

        path = request.url.path.split("/v2", 1)[-1]
        if request.method == "POST" and path in ("/payments", "/orders"):
            payload = json.loads(request.content or b"{}")
            resource_id = "tr_test123" if path == "/payments" else "ord_test123"
            resource = {
                "id": resource_id,
                "status": "open" if path == "/payments" else "created",
                "amount": payload.get("amount"),
                "metadata": payload.get("metadata"),
                "_links": {"checkout": {"href": self.checkout_href}} if self.checkout_href else {},
            }
            self.resources[resource_id] = resource
            return httpx.Response(201, json=resource)

        if request.method == "GET":
            resource_id = path.rsplit("/", 1)[-1]
            if resource_id in self.resources:
                return httpx.Response(200, json=self.resources[resource_id])
            return httpx.Response(404, json={"status": 404, "title": "Not Found", "detail": "No resource"})

        return httpx.Response(405, json={"status": 405})


class FakeResend:
    """Faux Resend: enregistre les emails; fail_for = destinataires dont l'envoi échoue (422)."""
    def __init__(self):
        self.sent: List[Dict[str, Any]] = []
        self.fail_for: set = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content or b"{}")
        if set(payload.get("to") or []) & self.fail_for:
            return httpx.Response(422, json={"name": "validation_error", "message": "invalid recipient"})
        self.sent.append(payload)
        return httpx.Response(200, json={"id": f"email_{len(self.sent)}"})


class MemorySeenTransactions:
    def __init__(self):
        self.ids = set()

    async def add(self, transaction_id: str) -> bool:
        if transaction_id in self.ids:
            return False
        self.ids.add(transaction_id)
        return True


@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture
def settings() -> Settings:
    return Settings(
        mollie_test_key="test_dummy_key",
        mollie_api_base=MOLLIE_BASE,
        resend_api_key="re_dummy_key",
        resend_api_base=RESEND_BASE,
        from_email="shop@example.com",
        notify_emails=("admin@example.com",),
    )

@pytest.fixture
def fake_mollie() -> FakeMollie:
    return FakeMollie()

@pytest.fixture
def fake_resend() -> FakeResend:
    return FakeResend()

@pytest.fixture
def mollie_client(settings, fake_mollie) -> MollieClient:
    return MollieClient.from_settings(settings, transport=httpx.MockTransport(fake_mollie.handler))

@pytest.fixture
def resend_client(settings, fake_resend) -> ResendClient:
    return ResendClient.from_settings(settings, transport=httpx.MockTransport(fake_resend.handler))

@pytest.fixture
def client(app, settings, fake_mollie, fake_resend) -> Generator[TestClient, None, None]:
    def _mollie(s: Settings = Depends(get_settings)) -> MollieClient:
        return MollieClient.from_settings(s, transport=httpx.MockTransport(fake_mollie.handler))

    def _resend(s: Settings = Depends(get_settings)) -> ResendClient:
        return ResendClient.from_settings(s, transport=httpx.MockTransport(fake_resend.handler))

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_mollie_client] = _mollie
    app.dependency_overrides[get_resend_client] = _resend
    app.dependency_overrides[get_seen_transactions] = lambda: None
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()

@pytest.fixture
def order_body() -> Dict[str, Any]:
    return {
        "firstName": "Erika",
        "lastName": "Mustermann",
        "email": "erika@example.com",
        "productOption": "coin",
        "quantity": 2,
    }

@pytest.fixture
def memory_seen() -> MemorySeenTransactions:
    return MemorySeenTransactions()
