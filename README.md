# cream-router

Building blocks for routing payments to providers: per-provider circuit
breakers that stop traffic to failing providers, an idempotency guard that
keeps a payment from being made twice across retries and failovers, the
configuration objects for both, and the domain types a router works with.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `cream_router.errors`: `RoutingError` and its subclasses
  `NoViableProviderError`, `AllProvidersExhaustedError`,
  `IdempotencyConflictError`, `IdempotencyLockFailedError`, `StoreError`,
  `ProviderFailureError` and `ConfigError`.
- `cream_router.config`: the dataclasses `ScoringWeights`,
  `CircuitBreakerConfig`, `IdempotencyConfig` and `RouterConfig`. Each of the
  first three has a `validate()` method that raises `ConfigError` on bad
  values. Examples are negative or non-finite weights, all weights zero, an
  error threshold outside `[0.0, 1.0]`, a zero window, a zero half-open limit
  or a zero lock TTL.
- `cream_router.models`: the enums `CircuitState`, `RailPreference` and
  `Currency`, and the frozen dataclasses `ProviderHealth`, `PaymentRequest`,
  `AgentProfile`, `RoutingCandidate` and `RoutingDecision`.
- `cream_router.breaker_store`: the abstract `CircuitBreakerStore` and
  `InMemoryCircuitBreakerStore`. The in-memory store keeps events, state,
  the time the breaker opened and the half-open counters for each provider.
- `cream_router.circuit_breaker`: `CircuitBreaker`, with `record_success`,
  `record_failure`, `state`, `is_allowed` and `reset`. It moves each breaker
  through Closed → Open → HalfOpen:
  - A failure while closed opens the breaker if the error rate within
    `window_secs` reaches `error_threshold`.
  - An open breaker admits a request, and moves to half-open, once
    `cooldown_secs` have passed. An opening time in the future never counts
    as cooled down.
  - While half-open, at most `half_open_max_requests` requests get through.
  - While half-open, one failure re-opens the breaker. That many successes
    close it.
- `cream_router.idempotency`: the abstract `IdempotencyStore`,
  `InMemoryIdempotencyStore`, and `IdempotencyGuard` with `acquire`,
  `release` and `complete`. `acquire` returns an `IdempotencyOutcome`:
  - When this attempt is the first for the key, its `acquired` is true.
  - Otherwise, `existing_payment_id` holds the payment that already owns the
    key.

  `release` and `complete` act only when the given payment still owns the
  lock. A stored value that is not a UUID raises `IdempotencyLockFailedError`.

All store, breaker and guard methods are coroutines. Configuration objects
and models are plain synchronous code.

## Example

```python
import asyncio
import uuid

from cream_router.breaker_store import InMemoryCircuitBreakerStore
from cream_router.circuit_breaker import CircuitBreaker
from cream_router.config import CircuitBreakerConfig, IdempotencyConfig
from cream_router.idempotency import IdempotencyGuard, InMemoryIdempotencyStore
from cream_router.models import CircuitState


async def main():
    breaker = CircuitBreaker(InMemoryCircuitBreakerStore(), CircuitBreakerConfig())
    for _ in range(5):
        await breaker.record_failure("stripe")
    assert await breaker.state("stripe") == CircuitState.OPEN
    assert not await breaker.is_allowed("stripe")
    await breaker.reset("stripe")
    assert await breaker.is_allowed("stripe")

    guard = IdempotencyGuard(InMemoryIdempotencyStore(), IdempotencyConfig())
    first, second = uuid.uuid4(), uuid.uuid4()
    assert (await guard.acquire("idem_001", first)).acquired
    outcome = await guard.acquire("idem_001", second)
    assert outcome.existing_payment_id == first


asyncio.run(main())
```

## What this package does not do

- It does not score providers or choose a route. `ScoringWeights`,
  `RoutingCandidate` and `RoutingDecision` are defined, but nothing here
  computes scores or builds a decision from them.
- It does not fetch provider health. `ProviderHealth` is only a data type.
- The only stores provided keep state in process memory. The in-memory
  idempotency store ignores TTLs. Breaker state and locks shared between
  processes or servers need your own subclass of `CircuitBreakerStore` or
  `IdempotencyStore`.
- It makes no payments and talks to no payment provider.
- It has no command-line interface or server.