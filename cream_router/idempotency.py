"""Idempotency locks that keep a payment from being made twice."""

from __future__ import annotations

import abc
import logging
import threading
import uuid
from dataclasses import dataclass

from .config import IdempotencyConfig
from .errors import IdempotencyLockFailedError

logger = logging.getLogger(__name__)

_KEY_PREFIX = "cream:idemp:"


def _store_key(key: str) -> str:
    return f"{_KEY_PREFIX}{key}"


@dataclass(frozen=True)
class IdempotencyOutcome:
    """Result of trying to acquire an idempotency lock.

    ``existing_payment_id`` is None when the lock was acquired, and otherwise
    holds the payment that already owns the key.
    """

    existing_payment_id: uuid.UUID | None = None

    @property
    def acquired(self) -> bool:
        """True when this attempt is the first for its key."""
        return self.existing_payment_id is None


class IdempotencyStore(abc.ABC):
    """Persistent store for idempotency locks."""

    @abc.abstractmethod
    async def try_set(self, key: str, payment_id: str, ttl_secs: int) -> str | None:
        """Set the key if absent.

        Return None if the key was set, or the value already stored under it.
        """

    @abc.abstractmethod
    async def delete_if_matches(self, key: str, expected_value: str) -> bool:
        """Delete the key only if it holds ``expected_value``; return whether it was deleted."""

    @abc.abstractmethod
    async def set_if_matches(
        self, key: str, expected_value: str, new_value: str, ttl_secs: int
    ) -> bool:
        """Overwrite the key only if it holds ``expected_value``; return whether it was updated."""


class InMemoryIdempotencyStore(IdempotencyStore):
    """A process-local store; TTLs are ignored."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    async def try_set(self, key: str, payment_id: str, ttl_secs: int) -> str | None:
        with self._lock:
            existing = self._data.get(key)
            if existing is not None:
                return existing
            self._data[key] = payment_id
            return None

    async def delete_if_matches(self, key: str, expected_value: str) -> bool:
        with self._lock:
            if self._data.get(key) == expected_value:
                del self._data[key]
                return True
            return False

    async def set_if_matches(
        self, key: str, expected_value: str, new_value: str, ttl_secs: int
    ) -> bool:
        with self._lock:
            if self._data.get(key) == expected_value:
                self._data[key] = new_value
                return True
            return False


class IdempotencyGuard:
    """Guards payment processing with a lock keyed on the idempotency key."""

    def __init__(self, store: IdempotencyStore, config: IdempotencyConfig) -> None:
        config.validate()
        self._store = store
        self._config = config

    def __repr__(self) -> str:
        return f"IdempotencyGuard(config={self._config!r})"

    @property
    def config(self) -> IdempotencyConfig:
        """The settings this guard was built with."""
        return self._config

    async def acquire(self, key: str, payment_id: uuid.UUID) -> IdempotencyOutcome:
        """Try to take the lock for ``key`` on behalf of ``payment_id``.

        Raises IdempotencyLockFailedError if the stored value is not a payment id.
        """
        existing = await self._store.try_set(
            _store_key(key), str(payment_id), self._config.lock_ttl_secs
        )
        if existing is None:
            logger.debug("idempotency lock acquired for key %s", key)
            return IdempotencyOutcome()

        try:
            existing_id = uuid.UUID(existing)
        except ValueError as exc:
            raise IdempotencyLockFailedError(f"corrupt idempotency value: {exc}") from exc
        logger.debug(
            "idempotency conflict for key %s: payment %s already exists", key, existing
        )
        return IdempotencyOutcome(existing_id)

    async def release(self, key: str, payment_id: uuid.UUID) -> None:
        """Release the lock, but only if ``payment_id`` still owns it."""
        deleted = await self._store.delete_if_matches(_store_key(key), str(payment_id))
        if deleted:
            logger.debug("idempotency lock released for key %s", key)
        else:
            logger.warning(
                "idempotency release skipped for key %s: lock not owned by payment %s",
                key,
                payment_id,
            )

    async def complete(self, key: str, payment_id: uuid.UUID) -> None:
        """Mark the payment completed, refreshing the TTL if ``payment_id`` owns the lock."""
        value = str(payment_id)
        updated = await self._store.set_if_matches(
            _store_key(key), value, value, self._config.lock_ttl_secs
        )
        if updated:
            logger.debug("idempotency entry completed for key %s", key)
        else:
            logger.warning(
                "idempotency complete skipped for key %s: lock not owned by payment %s",
                key,
                payment_id,
            )