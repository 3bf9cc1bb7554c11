"""Tests for agentpass.registry.store."""

from __future__ import annotations

import itertools
import threading
from datetime import datetime, timedelta, timezone

import pytest

from agentpass.errors import AgentPassError, AgentValidationError
from agentpass.registry.models import AgentCapability, AgentRegistration, Currency, Pricing
from agentpass.registry.store import (
    AgentRegistry,
    ReputationPolicy,
    SequentialIdGenerator,
)


class FakeClock:
    """Returns a strictly increasing timestamp on each call."""

    def __init__(self) -> None:
        self.start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        self._ticks = itertools.count()

    def __call__(self) -> datetime:
        return self.start + timedelta(seconds=next(self._ticks))


def _registration(**overrides) -> AgentRegistration:
    data = dict(name="Scout", description="test agent", version="1.0.0")
    data.update(overrides)
    return AgentRegistration(**data)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def registry(clock):
    return AgentRegistry(clock=clock)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

class TestRegisterAgent:
    def test_returns_unique_ids(self, registry):
        ids = {registry.register_agent(_registration()) for _ in range(50)}
        assert len(ids) == 50
        assert len(registry) == 50

    def test_fresh_profile_statistics(self, registry):
        agent_id = registry.register_agent(_registration())
        profile = registry.get_agent(agent_id)
        assert profile.id == agent_id
        assert profile.tasks_completed == 0
        assert profile.success_rate == 100.0
        assert profile.reputation == 0
        assert profile.created_at == profile.last_active

    def test_same_name_creates_new_record(self, registry):
        a = registry.register_agent(_registration(name="Twin"))
        b = registry.register_agent(_registration(name="Twin"))
        assert a != b
        assert len(registry) == 2

    @pytest.mark.parametrize("field", ["name", "version"])
    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty_required_field_rejected(self, registry, field, value):
        with pytest.raises(AgentValidationError):
            registry.register_agent(_registration(**{field: value}))
        assert len(registry) == 0

    def test_validation_error_is_value_error(self, registry):
        with pytest.raises(ValueError):
            registry.register_agent(_registration(name=""))

    def test_reputation_clamped_on_registration(self, registry):
        high = registry.register_agent(_registration(reputation=250))
        low = registry.register_agent(_registration(reputation=-5))
        assert registry.get_agent(high).reputation == 100
        assert registry.get_agent(low).reputation == 0

    def test_duplicate_capabilities_dropped(self, registry):
        agent_id = registry.register_agent(
            _registration(
                capabilities=[
                    AgentCapability("X", "first"),
                    AgentCapability("Y"),
                    AgentCapability("X", "second"),
                ]
            )
        )
        caps = registry.get_agent(agent_id).capabilities
        assert [c.name for c in caps] == ["X", "Y"]
        assert caps[0].description == "first"

    def test_seeded_history(self, registry):
        agent_id = registry.register_agent(
            _registration(tasks_completed=4, success_rate=75.0)
        )
        registry.record_task(agent_id, "t", "Price Monitor", False)
        profile = registry.get_agent(agent_id)
        assert profile.tasks_completed == 5
        assert profile.success_rate == pytest.approx(60.0)

    def test_reused_id_rejected(self, clock):
        registry = AgentRegistry(id_generator=lambda: "fixed", clock=clock)
        registry.register_agent(_registration())
        with pytest.raises(AgentPassError):
            registry.register_agent(_registration())
        assert len(registry) == 1


class TestSequentialIdGenerator:
    def test_ids_are_ordered(self):
        gen = SequentialIdGenerator(prefix="sap")
        first, second = gen(), gen()
        assert first.startswith("sap_000001_")
        assert second.startswith("sap_000002_")


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

class TestGetAgent:
    def test_missing_returns_none(self, registry):
        assert registry.get_agent("nope") is None

    def test_returns_snapshot(self, registry):
        agent_id = registry.register_agent(
            _registration(capabilities=[AgentCapability("X")])
        )
        snapshot = registry.get_agent(agent_id)
        snapshot.reputation = 99
        snapshot.capabilities[0].enabled = False
        fresh = registry.get_agent(agent_id)
        assert fresh.reputation == 0
        assert fresh.capabilities[0].enabled is True

    def test_contains_and_iter(self, registry):
        agent_id = registry.register_agent(_registration())
        assert agent_id in registry
        assert [p.id for p in registry] == [agent_id]


# ---------------------------------------------------------------------------
# Task recording
# ---------------------------------------------------------------------------

class TestRecordTask:
    def test_success_updates_stats(self, registry):
        agent_id = registry.register_agent(_registration())
        before = registry.get_agent(agent_id)
        registry.record_task(agent_id, "check balance", "Balance Checker", True)
        after = registry.get_agent(agent_id)
        assert after.tasks_completed == 1
        assert after.success_rate == 100.0
        assert after.reputation == 1
        assert after.last_active > before.last_active
        assert after.created_at == before.created_at

    def test_failure_penalty(self, registry):
        agent_id = registry.register_agent(_registration(reputation=50))
        registry.record_task(agent_id, "check balance", "Balance Checker", False)
        profile = registry.get_agent(agent_id)
        assert profile.reputation == 48
        assert profile.success_rate == 0.0

    def test_failure_clamped_at_zero(self, registry):
        agent_id = registry.register_agent(_registration(reputation=1))
        registry.record_task(agent_id, "x", "Network Status", False)
        assert registry.get_agent(agent_id).reputation == 0

    def test_success_clamped_at_hundred(self, registry):
        agent_id = registry.register_agent(_registration(reputation=100))
        registry.record_task(agent_id, "x", "Network Status", True)
        assert registry.get_agent(agent_id).reputation == 100

    @pytest.mark.parametrize(
        "outcomes",
        [
            [True, False, True, True],
            [False] * 60,
            [True] * 150,
            [True, False] * 40 + [False] * 7,
        ],
    )
    def test_success_rate_matches_history(self, registry, outcomes):
        agent_id = registry.register_agent(_registration())
        for success in outcomes:
            registry.record_task(agent_id, "t", "Price Monitor", success)
            profile = registry.get_agent(agent_id)
            assert 0 <= profile.reputation <= 100
        n = sum(outcomes)
        profile = registry.get_agent(agent_id)
        assert profile.tasks_completed == len(outcomes)
        assert profile.success_rate == pytest.approx(100.0 * n / len(outcomes))

    def test_unknown_agent_is_noop(self, registry):
        agent_id = registry.register_agent(_registration())
        before = registry.get_agent(agent_id)
        registry.record_task("ghost", "x", "Balance Checker", True)
        assert len(registry) == 1
        assert registry.get_agent(agent_id) == before

    def test_clock_failure_swallowed(self):
        calls = {"n": 0}

        def flaky_clock():
            calls["n"] += 1
            if calls["n"] > 1:
                raise RuntimeError("clock broke")
            return datetime(2025, 1, 1, tzinfo=timezone.utc)

        registry = AgentRegistry(clock=flaky_clock)
        agent_id = registry.register_agent(_registration())
        registry.record_task(agent_id, "x", "Balance Checker", True)
        assert registry.get_agent(agent_id).tasks_completed == 0

    def test_custom_policy(self, clock):
        registry = AgentRegistry(
            clock=clock, policy=ReputationPolicy(success_delta=5, failure_penalty=10)
        )
        agent_id = registry.register_agent(_registration(reputation=20))
        registry.record_task(agent_id, "x", "Balance Checker", True)
        registry.record_task(agent_id, "x", "Balance Checker", False)
        assert registry.get_agent(agent_id).reputation == 15

    def test_concurrent_recording_is_consistent(self, registry):
        agent_id = registry.register_agent(_registration(reputation=50))

        def worker(success: bool) -> None:
            for _ in range(200):
                registry.record_task(agent_id, "t", "Price Monitor", success)

        threads = [threading.Thread(target=worker, args=(i % 2 == 0,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        profile = registry.get_agent(agent_id)
        assert profile.tasks_completed == 1600
        assert profile.success_rate == pytest.approx(50.0)
        assert 0 <= profile.reputation <= 100


class TestReputationPolicy:
    def test_defaults(self):
        policy = ReputationPolicy()
        assert policy.success_delta == 1
        assert policy.failure_penalty == 2

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            ReputationPolicy(failure_penalty=-1)


# ---------------------------------------------------------------------------
# Profile mutations
# ---------------------------------------------------------------------------

class TestProfileMutations:
    def test_add_capability_rejects_duplicates(self, registry):
        agent_id = registry.register_agent(_registration())
        assert registry.add_capability(agent_id, AgentCapability("X")) is True
        assert registry.add_capability(agent_id, AgentCapability("X")) is False
        assert len(registry.get_agent(agent_id).capabilities) == 1

    def test_mutations_on_unknown_agent(self, registry):
        assert registry.add_capability("ghost", AgentCapability("X")) is False
        assert registry.set_capability_enabled("ghost", "X", False) is False
        assert registry.set_pricing("ghost", Pricing(1.0, Currency.SOL)) is False
        assert registry.update_description("ghost", "new") is False

    def test_set_pricing(self, registry):
        agent_id = registry.register_agent(_registration())
        registry.set_pricing(agent_id, Pricing(0.5, Currency.USDC))
        pricing = registry.get_agent(agent_id).pricing
        assert pricing.price_per_task == 0.5
        assert pricing.currency is Currency.USDC

    def test_set_pricing_stores_copy(self, registry):
        agent_id = registry.register_agent(_registration())
        pricing = Pricing(0.5, Currency.USDC)
        registry.set_pricing(agent_id, pricing)

        pricing.price_per_task = 99.0

        assert registry.get_agent(agent_id).pricing.price_per_task == 0.5

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            Pricing(-1.0, Currency.SOL)
