"""Circuit breakers, idempotency guards, routing configuration and domain types for payment dispatch."""

__version__ = "0.1.0"