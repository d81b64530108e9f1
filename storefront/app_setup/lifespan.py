"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis).
- Initialise le registre de déduplication des webhooks (SeenTransactions) si configuré.
- Variables d’environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement le rate limiting (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l’init échoue
  - SEEN_TRANSACTIONS_REDIS_URL: active la déduplication des webhooks confirmés
"""
import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter
import redis.asyncio as aioredis

from storefront.config import get_settings
from storefront.reconciliation.seen import RedisSeenTransactions

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except ImportError:
    FakeRedis = None

logger = logging.getLogger("uvicorn.error")

def _make_redis(url: str):
    if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
        if not FakeRedis:
            raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
        return FakeRedis(decode_responses=True)
    return aioredis.from_url(url, encoding="utf-8", decode_responses=True)

async def init_rate_limiter(app: FastAPI) -> None:
    """
    Configure le rate limiting et gère les fallbacks.
    - En cas d’échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    """
    try:
        if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
            app.state.rate_limit_enabled = False
            logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
            return
        r = _make_redis(os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0"))
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning(f"Rate limiting falling back to local in-memory due to init error: {e}")
        else:
            app.state.rate_limit_enabled = False
            logger.warning(f"Rate limiting disabled due to init error: {e}")

def init_seen_transactions(app: FastAPI):
    """
    Registre de déduplication: redis si SEEN_TRANSACTIONS_REDIS_URL (ou fakeredis en tests),
    sinon None => comportement at-least-once (emails possiblement en double).
    - URL invalide: journalisée, dédup désactivée (l'app démarre quand même).
    """
    settings = get_settings()
    use_fake = os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1"
    if not settings.seen_transactions_redis_url and not use_fake:
        app.state.seen_transactions = None
        logger.info("Webhook dedup disabled (at-least-once notifications)")
        return None
    try:
        store = RedisSeenTransactions(
            _make_redis(settings.seen_transactions_redis_url),
            ttl_seconds=settings.seen_transactions_ttl_seconds,
        )
    except Exception as e:
        app.state.seen_transactions = None
        logger.warning(f"Webhook dedup disabled due to init error: {e}")
        return None
    app.state.seen_transactions = store
    logger.info("Webhook dedup enabled")
    return store

@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_rate_limiter(app)
    store = init_seen_transactions(app)
    yield
    if store is not None:
        await store.close()
