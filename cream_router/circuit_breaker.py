"""Per-provider circuit breaker: closed, open, half-open."""

from __future__ import annotations

import logging
import time

from .breaker_store import CircuitBreakerStore
from .config import CircuitBreakerConfig
from .models import CircuitState

logger = logging.getLogger(__name__)


def _now() -> int:
    return int(time.time())


class CircuitBreaker:
    """Trips a provider open when its error rate is too high.

    Closed: healthy, accepting traffic. Open: traffic rejected until the
    cooldown expires. Half-open: a limited number of trial requests decide
    whether the breaker closes again or re-opens.
    """

    def __init__(self, store: CircuitBreakerStore, config: CircuitBreakerConfig) -> None:
        config.validate()
        self._store = store
        self._config = config

    def __repr__(self) -> str:
        return f"CircuitBreaker(config={self._config!r}, ...)"

    @property
    def config(self) -> CircuitBreakerConfig:
        """The settings this breaker was built with."""
        return self._config

    async def _open(self, provider_id: str) -> None:
        await self._store.set_state(provider_id, CircuitState.OPEN)
        await self._store.set_opened_at(provider_id, _now())

    async def record_success(self, provider_id: str) -> None:
        """Record a successful provider call."""
        await self._store.record_event(provider_id, True)

        if await self._store.get_state(provider_id) is CircuitState.HALF_OPEN:
            successes = await self._store.increment_half_open_success_count(provider_id)
            if successes >= self._config.half_open_max_requests:
                logger.info(
                    "circuit breaker closing for %s: all %d half-open requests succeeded",
                    provider_id,
                    successes,
                )
                await self._store.reset(provider_id)

    async def record_failure(self, provider_id: str) -> None:
        """Record a failed provider call, tripping the breaker when warranted."""
        await self._store.record_event(provider_id, False)

        state = await self._store.get_state(provider_id)
        if state is CircuitState.CLOSED:
            error_rate = await self._store.get_error_rate(
                provider_id, self._config.window_secs
            )
            if error_rate >= self._config.error_threshold:
                logger.warning(
                    "circuit breaker tripped for %s: error rate %.3f >= threshold %.3f",
                    provider_id,
                    error_rate,
                    self._config.error_threshold,
                )
                await self._open(provider_id)
        elif state is CircuitState.HALF_OPEN:
            logger.warning(
                "circuit breaker re-opening for %s: failure during half-open", provider_id
            )
            await self._open(provider_id)

    async def state(self, provider_id: str) -> CircuitState:
        """Return the current circuit state of a provider."""
        return await self._store.get_state(provider_id)

    async def is_allowed(self, provider_id: str) -> bool:
        """Tell whether a request may go to the provider now.

        An open breaker whose cooldown has passed moves to half-open and lets
        this request through; a half-open breaker admits at most
        ``half_open_max_requests`` requests.
        """
        state = await self._store.get_state(provider_id)

        if state is CircuitState.CLOSED:
            return True

        if state is CircuitState.OPEN:
            opened_at = await self._store.get_opened_at(provider_id)
            now = _now()
            # An opened_at in the future (clock skew) never counts as cooled down.
            if (
                opened_at is not None
                and now >= opened_at
                and now - opened_at >= self._config.cooldown_secs
            ):
                logger.info(
                    "circuit breaker for %s moving to half-open after cooldown", provider_id
                )
                await self._store.set_state(provider_id, CircuitState.HALF_OPEN)
                await self._store.reset_half_open_count(provider_id)
                await self._store.increment_half_open_count(provider_id)
                return True
            return False

        # Increment first, then check, so concurrent callers cannot all pass.
        count = await self._store.increment_half_open_count(provider_id)
        return count <= self._config.half_open_max_requests

    async def reset(self, provider_id: str) -> None:
        """Force the provider's breaker back to closed."""
        logger.info("circuit breaker for %s manually reset to closed", provider_id)
        await self._store.reset(provider_id)