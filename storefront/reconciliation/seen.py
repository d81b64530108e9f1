"""
Registre des transactions déjà confirmées (déduplication des webhooks).

Mollie peut livrer plusieurs fois le même webhook. Sans ce registre, chaque
livraison confirmée renvoie les emails (at-least-once assumé). Avec redis,
`add()` utilise SET NX: seule la première livraison obtient True.
"""
from typing import Optional, Protocol


class SeenTransactions(Protocol):
    async def add(self, transaction_id: str) -> bool:
        """True si l'id n'avait jamais été vu (insertion effectuée)."""
        ...


class RedisSeenTransactions:
    def __init__(self, redis, ttl_seconds: Optional[int] = 30 * 24 * 3600, prefix: str = "storefront:seen:"):
        self.redis = redis
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    def _key(self, transaction_id: str) -> str:
        return f"{self.prefix}{transaction_id}"

    async def add(self, transaction_id: str) -> bool:
        created = await self.redis.set(self._key(transaction_id), "1", nx=True, ex=self.ttl_seconds or None)
        return bool(created)

    async def close(self) -> None:
        close = getattr(self.redis, "aclose", None) or getattr(self.redis, "close", None)
        if close is not None:
            await close()
