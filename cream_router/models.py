"""Domain types the router reads and produces."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal


def _as_decimal(value: Decimal | str | int) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


class CircuitState(enum.Enum):
    """State of a provider's circuit breaker."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class RailPreference(enum.Enum):
    """Payment rail; AUTO lets the router choose."""

    AUTO = "auto"
    CARD = "card"
    SWIFT = "swift"
    STABLECOIN = "stablecoin"


class Currency(enum.Enum):
    """Currencies a payment may be made in."""

    USD = "USD"
    SGD = "SGD"


@dataclass(frozen=True)
class ProviderHealth:
    """A health snapshot of one provider."""

    provider_id: str
    is_healthy: bool = True
    error_rate_5m: float = 0.0
    p50_latency_ms: int = 0
    p99_latency_ms: int = 0
    last_checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    circuit_state: CircuitState = CircuitState.CLOSED


@dataclass(frozen=True)
class PaymentRequest:
    """The parts of a payment request that routing depends on."""

    amount: Decimal
    currency: Currency
    preferred_rail: RailPreference = RailPreference.AUTO
    idempotency_key: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _as_decimal(self.amount))


@dataclass(frozen=True)
class AgentProfile:
    """The parts of an agent's spending profile that routing depends on.

    An empty ``allowed_rails`` means every rail is allowed.
    """

    name: str = ""
    allowed_rails: tuple[RailPreference, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_rails", tuple(self.allowed_rails))


@dataclass(frozen=True)
class RoutingCandidate:
    """One scored provider together with the rail it would use."""

    provider_id: str
    rail: RailPreference
    estimated_fee: Decimal
    estimated_latency_ms: int
    score: float


@dataclass(frozen=True)
class RoutingDecision:
    """Ranked candidates and the one selected."""

    candidates: tuple[RoutingCandidate, ...]
    selected: str
    selected_rail: RailPreference
    reason: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "candidates", tuple(self.candidates))