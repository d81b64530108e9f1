from fastapi import FastAPI

from storefront.app_setup import lifespan
from storefront.config import Settings


def test_seen_transactions_disabled_without_url(monkeypatch):
    monkeypatch.delenv("USE_FAKE_REDIS_FOR_TESTS", raising=False)
    monkeypatch.setattr(lifespan, "get_settings", lambda: Settings())
    app = FastAPI()

    assert lifespan.init_seen_transactions(app) is None
    assert app.state.seen_transactions is None

def test_seen_transactions_bad_url_degrades_to_none(monkeypatch):
    monkeypatch.delenv("USE_FAKE_REDIS_FOR_TESTS", raising=False)
    monkeypatch.setattr(
        lifespan, "get_settings", lambda: Settings(seen_transactions_redis_url="not-a-redis-url")
    )
    app = FastAPI()

    assert lifespan.init_seen_transactions(app) is None
    assert app.state.seen_transactions is None

def test_seen_transactions_uses_fakeredis_in_tests(monkeypatch):
    monkeypatch.setenv("USE_FAKE_REDIS_FOR_TESTS", "1")
    monkeypatch.setattr(lifespan, "get_settings", lambda: Settings())
    app = FastAPI()

    store = lifespan.init_seen_transactions(app)
    assert store is not None
    assert app.state.seen_transactions is store
