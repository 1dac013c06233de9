"""Configuration for scoring, circuit breaking and idempotency."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .errors import ConfigError


@dataclass
class ScoringWeights:
    """Weights for the multi-factor provider score.

    Each weight must be finite and non-negative. They need not sum to 1.0;
    only their relative sizes matter.
    """

    cost: float = 0.3
    speed: float = 0.2
    health: float = 0.3
    preference: float = 0.2

    def validate(self) -> None:
        """Raise ConfigError unless every weight is finite, non-negative, and one is non-zero."""
        fields = {
            "cost": self.cost,
            "speed": self.speed,
            "health": self.health,
            "preference": self.preference,
        }
        for name, value in fields.items():
            if not math.isfinite(value) or value < 0.0:
                raise ConfigError(
                    f"scoring weight '{name}' must be finite and non-negative, got {value}"
                )
        if sum(fields.values()) == 0.0:
            raise ConfigError("at least one scoring weight must be non-zero")


@dataclass
class CircuitBreakerConfig:
    """Settings for the per-provider circuit breaker."""

    error_threshold: float = 0.5
    window_secs: int = 300
    cooldown_secs: int = 60
    half_open_max_requests: int = 3

    def validate(self) -> None:
        """Raise ConfigError if any setting is out of range."""
        if not math.isfinite(self.error_threshold) or not 0.0 <= self.error_threshold <= 1.0:
            raise ConfigError(
                f"error_threshold must be in [0.0, 1.0], got {self.error_threshold}"
            )
        if self.window_secs <= 0:
            raise ConfigError("window_secs must be > 0")
        # A zero cooldown is valid: the next request moves the breaker to half-open.
        if self.cooldown_secs < 0:
            raise ConfigError("cooldown_secs must be >= 0")
        if self.half_open_max_requests <= 0:
            raise ConfigError("half_open_max_requests must be > 0")


@dataclass
class IdempotencyConfig:
    """Settings for the idempotency lock."""

    lock_ttl_secs: int = 300

    def validate(self) -> None:
        """Raise ConfigError if the lock TTL is not positive."""
        if self.lock_ttl_secs <= 0:
            raise ConfigError(
                "lock_ttl_secs must be > 0 — a zero TTL would either never expire "
                "(permanent payment block) or expire instantly (no idempotency protection)"
            )


@dataclass
class RouterConfig:
    """Top-level configuration for the routing engine."""

    scoring: ScoringWeights = field(default_factory=ScoringWeights)
    circuit_breaker: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)
    idempotency: IdempotencyConfig = field(default_factory=IdempotencyConfig)