import uuid

import pytest

from cream_router.config import IdempotencyConfig
from cream_router.errors import ConfigError, IdempotencyLockFailedError
from cream_router.idempotency import (
    IdempotencyGuard,
    IdempotencyOutcome,
    InMemoryIdempotencyStore,
)


def make_guard(store=None):
    return IdempotencyGuard(store or InMemoryIdempotencyStore(), IdempotencyConfig(lock_ttl_secs=300))


@pytest.mark.asyncio
async def test_first_acquire_succeeds():
    guard = make_guard()
    result = await guard.acquire("idem_001", uuid.uuid4())
    assert result == IdempotencyOutcome()
    assert result.acquired


@pytest.mark.asyncio
async def test_second_acquire_returns_existing():
    guard = make_guard()
    pid1, pid2 = uuid.uuid4(), uuid.uuid4()
    await guard.acquire("idem_002", pid1)
    result = await guard.acquire("idem_002", pid2)
    assert not result.acquired
    assert result.existing_payment_id == pid1


@pytest.mark.asyncio
async def test_release_then_reacquire():
    guard = make_guard()
    pid1, pid2 = uuid.uuid4(), uuid.uuid4()
    await guard.acquire("idem_003", pid1)
    await guard.release("idem_003", pid1)
    result = await guard.acquire("idem_003", pid2)
    assert result == IdempotencyOutcome()


@pytest.mark.asyncio
async def test_release_skips_if_not_owner():
    guard = make_guard()
    pid1, pid2, pid3 = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    await guard.acquire("idem_ownership", pid1)
    await guard.release("idem_ownership", pid2)
    result = await guard.acquire("idem_ownership", pid3)
    assert result == IdempotencyOutcome(pid1)


@pytest.mark.asyncio
async def test_complete_persists_payment():
    guard = make_guard()
    pid = uuid.uuid4()
    await guard.acquire("idem_004", pid)
    await guard.complete("idem_004", pid)
    result = await guard.acquire("idem_004", uuid.uuid4())
    assert result == IdempotencyOutcome(pid)


@pytest.mark.asyncio
async def test_complete_by_non_owner_leaves_lock_unchanged():
    guard = make_guard()
    owner, other = uuid.uuid4(), uuid.uuid4()
    await guard.acquire("idem_005", owner)
    await guard.complete("idem_005", other)
    result = await guard.acquire("idem_005", uuid.uuid4())
    assert result.existing_payment_id == owner


def test_idempotency_guard_rejects_zero_ttl():
    with pytest.raises(ConfigError, match="lock_ttl_secs"):
        IdempotencyGuard(InMemoryIdempotencyStore(), IdempotencyConfig(lock_ttl_secs=0))


@pytest.mark.asyncio
async def test_different_keys_do_not_conflict():
    guard = make_guard()
    r1 = await guard.acquire("idem_a", uuid.uuid4())
    r2 = await guard.acquire("idem_b", uuid.uuid4())
    assert r1 == IdempotencyOutcome()
    assert r2 == IdempotencyOutcome()


@pytest.mark.asyncio
async def test_lock_is_stored_under_prefixed_key():
    store = InMemoryIdempotencyStore()
    guard = make_guard(store)
    pid = uuid.uuid4()
    await guard.acquire("idem_prefix", pid)
    assert await store.try_set("cream:idemp:idem_prefix", "x", 300) == str(pid)


@pytest.mark.asyncio
async def test_corrupt_stored_value_raises():
    store = InMemoryIdempotencyStore()
    await store.try_set("cream:idemp:idem_bad", "not-a-uuid", 300)
    guard = make_guard(store)
    with pytest.raises(IdempotencyLockFailedError, match="corrupt idempotency value"):
        await guard.acquire("idem_bad", uuid.uuid4())


@pytest.mark.asyncio
async def test_store_try_set_returns_existing_value():
    store = InMemoryIdempotencyStore()
    assert await store.try_set("k", "v1", 10) is None
    assert await store.try_set("k", "v2", 10) == "v1"


@pytest.mark.asyncio
async def test_store_delete_if_matches():
    store = InMemoryIdempotencyStore()
    await store.try_set("k", "v1", 10)
    assert await store.delete_if_matches("k", "other") is False
    assert await store.delete_if_matches("k", "v1") is True
    assert await store.delete_if_matches("k", "v1") is False
    assert await store.try_set("k", "v2", 10) is None


@pytest.mark.asyncio
async def test_store_set_if_matches():
    store = InMemoryIdempotencyStore()
    assert await store.set_if_matches("k", "v1", "v2", 10) is False
    await store.try_set("k", "v1", 10)
    assert await store.set_if_matches("k", "nope", "v3", 10) is False
    assert await store.set_if_matches("k", "v1", "v2", 10) is True
    assert await store.try_set("k", "v9", 10) == "v2"