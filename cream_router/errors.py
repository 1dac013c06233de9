"""Exceptions raised by the routing engine."""

from __future__ import annotations


class RoutingError(Exception):
    """Base class for every error raised during routing and provider selection."""


class NoViableProviderError(RoutingError):
    """No provider passed the viability filters; the payment cannot be dispatched."""

    def __init__(self) -> None:
        super().__init__("no viable provider found for this payment")


class AllProvidersExhaustedError(RoutingError):
    """Providers were available but every one of them failed during execution."""

    def __init__(self) -> None:
        super().__init__("all providers exhausted after failover attempts")


class IdempotencyConflictError(RoutingError):
    """A payment already exists for the given idempotency key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"idempotency conflict: payment already exists for key {key}")


class IdempotencyLockFailedError(RoutingError):
    """The idempotency lock could not be acquired or held a corrupt value."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"idempotency lock failed: {message}")


class StoreError(RoutingError):
    """The backing state store failed or could not be reached."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"store error: {message}")


class ProviderFailureError(RoutingError):
    """A payment provider reported an error during execution."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"provider error: {message}")


class ConfigError(RoutingError):
    """Invalid configuration: weights, thresholds, TTLs and the like."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"configuration error: {message}")