import asyncio

from fakeredis.aioredis import FakeRedis

from storefront.reconciliation.seen import RedisSeenTransactions


def test_add_returns_true_only_once():
    async def scenario():
        store = RedisSeenTransactions(FakeRedis(decode_responses=True), ttl_seconds=60)
        first = await store.add("tr_abc123")
        second = await store.add("tr_abc123")
        other = await store.add("ord_xyz")
        ttl = await store.redis.ttl("storefront:seen:tr_abc123")
        await store.close()
        return first, second, other, ttl

    first, second, other, ttl = asyncio.run(scenario())
    assert first is True
    assert second is False
    assert other is True
    assert 0 < ttl <= 60

def test_add_without_ttl_keeps_key():
    async def scenario():
        store = RedisSeenTransactions(FakeRedis(decode_responses=True), ttl_seconds=None, prefix="t:")
        await store.add("tr_1")
        ttl = await store.redis.ttl("t:tr_1")
        await store.close()
        return ttl

    assert asyncio.run(scenario()) == -1
