"""Storage of circuit breaker state, behind an abstract interface."""

from __future__ import annotations

import abc
import threading
import time
from dataclasses import dataclass, field

from .models import CircuitState

_COUNTER_MAX = 2**32 - 1


def _now() -> int:
    return int(time.time())


def _saturating_increment(value: int) -> int:
    return min(value + 1, _COUNTER_MAX)


class CircuitBreakerStore(abc.ABC):
    """Persistent store for per-provider circuit breaker state."""

    @abc.abstractmethod
    async def record_event(self, provider_id: str, success: bool) -> None:
        """Record a success or failure event for a provider."""

    @abc.abstractmethod
    async def get_error_rate(self, provider_id: str, window_secs: int) -> float:
        """Return the fraction of failed events within the rolling window."""

    @abc.abstractmethod
    async def get_state(self, provider_id: str) -> CircuitState:
        """Return the current circuit state."""

    @abc.abstractmethod
    async def set_state(self, provider_id: str, state: CircuitState) -> None:
        """Set the circuit state."""

    @abc.abstractmethod
    async def get_opened_at(self, provider_id: str) -> int | None:
        """Return the Unix time at which the breaker opened, if any."""

    @abc.abstractmethod
    async def set_opened_at(self, provider_id: str, timestamp: int) -> None:
        """Set the Unix time at which the breaker opened."""

    @abc.abstractmethod
    async def get_half_open_count(self, provider_id: str) -> int:
        """Return the number of requests let through while half-open."""

    @abc.abstractmethod
    async def increment_half_open_count(self, provider_id: str) -> int:
        """Increment the half-open request count and return the new value."""

    @abc.abstractmethod
    async def get_half_open_success_count(self, provider_id: str) -> int:
        """Return the number of successes recorded while half-open."""

    @abc.abstractmethod
    async def increment_half_open_success_count(self, provider_id: str) -> int:
        """Increment the half-open success count and return the new value."""

    @abc.abstractmethod
    async def reset_half_open_count(self, provider_id: str) -> None:
        """Zero the half-open request and success counters."""

    @abc.abstractmethod
    async def reset(self, provider_id: str) -> None:
        """Return the provider's breaker to closed with cleared counters."""


@dataclass
class _Event:
    timestamp: int
    success: bool


@dataclass
class _ProviderState:
    events: list[_Event] = field(default_factory=list)
    state: CircuitState | None = None
    opened_at: int | None = None
    half_open_count: int = 0
    half_open_success_count: int = 0


class InMemoryCircuitBreakerStore(CircuitBreakerStore):
    """A process-local store, suitable for tests and single instances."""

    def __init__(self) -> None:
        self._data: dict[str, _ProviderState] = {}
        self._lock = threading.Lock()

    def _entry(self, provider_id: str) -> _ProviderState:
        return self._data.setdefault(provider_id, _ProviderState())

    async def record_event(self, provider_id: str, success: bool) -> None:
        with self._lock:
            self._entry(provider_id).events.append(_Event(_now(), success))

    async def get_error_rate(self, provider_id: str, window_secs: int) -> float:
        with self._lock:
            entry = self._data.get(provider_id)
            if entry is None:
                return 0.0
            cutoff = _now() - window_secs
            recent = [event for event in entry.events if event.timestamp >= cutoff]
        if not recent:
            return 0.0
        failures = sum(1 for event in recent if not event.success)
        return failures / len(recent)

    async def get_state(self, provider_id: str) -> CircuitState:
        with self._lock:
            entry = self._data.get(provider_id)
            if entry is None or entry.state is None:
                return CircuitState.CLOSED
            return entry.state

    async def set_state(self, provider_id: str, state: CircuitState) -> None:
        with self._lock:
            self._entry(provider_id).state = state

    async def get_opened_at(self, provider_id: str) -> int | None:
        with self._lock:
            entry = self._data.get(provider_id)
            return None if entry is None else entry.opened_at

    async def set_opened_at(self, provider_id: str, timestamp: int) -> None:
        with self._lock:
            self._entry(provider_id).opened_at = timestamp

    async def get_half_open_count(self, provider_id: str) -> int:
        with self._lock:
            entry = self._data.get(provider_id)
            return 0 if entry is None else entry.half_open_count

    async def increment_half_open_count(self, provider_id: str) -> int:
        with self._lock:
            entry = self._entry(provider_id)
            entry.half_open_count = _saturating_increment(entry.half_open_count)
            return entry.half_open_count

    async def get_half_open_success_count(self, provider_id: str) -> int:
        with self._lock:
            entry = self._data.get(provider_id)
            return 0 if entry is None else entry.half_open_success_count

    async def increment_half_open_success_count(self, provider_id: str) -> int:
        with self._lock:
            entry = self._entry(provider_id)
            entry.half_open_success_count = _saturating_increment(
                entry.half_open_success_count
            )
            return entry.half_open_success_count

    async def reset_half_open_count(self, provider_id: str) -> None:
        with self._lock:
            entry = self._entry(provider_id)
            entry.half_open_count = 0
            entry.half_open_success_count = 0

    async def reset(self, provider_id: str) -> None:
        with self._lock:
            entry = self._entry(provider_id)
            entry.state = CircuitState.CLOSED
            entry.opened_at = None
            entry.half_open_count = 0
            entry.half_open_success_count = 0