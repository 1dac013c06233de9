import dataclasses
from decimal import Decimal

import pytest

from cream_router.models import (
    AgentProfile,
    CircuitState,
    Currency,
    PaymentRequest,
    ProviderHealth,
    RailPreference,
    RoutingCandidate,
    RoutingDecision,
)


@pytest.mark.parametrize("enum_cls", [CircuitState, RailPreference, Currency])
def test_enum_value_round_trip(enum_cls):
    for member in enum_cls:
        assert enum_cls(member.value) is member


def test_currency_values_are_iso_codes():
    assert Currency("SGD") is Currency.SGD
    assert Currency("USD") is Currency.USD


def test_provider_health_defaults_to_closed_circuit():
    health = ProviderHealth(provider_id="stripe", error_rate_5m=0.01, p50_latency_ms=150)
    assert health.circuit_state is CircuitState.CLOSED
    assert health.is_healthy is True
    assert health.last_checked_at.tzinfo is not None and health.provider_id == "stripe"


def test_provider_health_replace_keeps_other_fields():
    health = ProviderHealth(provider_id="stripe", error_rate_5m=0.01, p50_latency_ms=150)
    opened = dataclasses.replace(health, circuit_state=CircuitState.OPEN)
    assert opened.circuit_state is CircuitState.OPEN
    assert opened.p50_latency_ms == health.p50_latency_ms
    assert health.circuit_state is CircuitState.CLOSED


def test_payment_request_converts_amount_to_decimal():
    req = PaymentRequest(amount="100.00", currency=Currency.SGD)
    assert req.amount == Decimal("100.00")
    assert req.preferred_rail is RailPreference.AUTO


def test_payment_request_keeps_decimal_amount():
    amount = Decimal("12.34")
    req = PaymentRequest(amount=amount, currency=Currency.USD, idempotency_key="idem_test")
    assert req.amount is amount
    assert req.idempotency_key == "idem_test"


def test_payment_request_is_frozen():
    req = PaymentRequest(amount=Decimal("1"), currency=Currency.USD)
    with pytest.raises(dataclasses.FrozenInstanceError):
        req.amount = Decimal("2")


def test_agent_profile_rails_become_tuple():
    rails = [RailPreference.CARD, RailPreference.SWIFT]
    profile = AgentProfile(name="test-profile", allowed_rails=rails)
    assert profile.allowed_rails == tuple(rails)
    rails.append(RailPreference.STABLECOIN)
    assert len(profile.allowed_rails) == 2


def test_agent_profile_defaults_allow_all_rails():
    profile = AgentProfile()
    assert profile.allowed_rails == ()


def test_routing_decision_candidates_become_tuple():
    candidate = RoutingCandidate(
        provider_id="stripe",
        rail=RailPreference.CARD,
        estimated_fee=Decimal("3.20"),
        estimated_latency_ms=150,
        score=0.5,
    )
    decision = RoutingDecision(
        candidates=[candidate],
        selected="stripe",
        selected_rail=RailPreference.CARD,
        reason="only_viable_provider",
    )
    assert decision.candidates == (candidate,)
    assert decision.candidates[0].provider_id == decision.selected