"""Tests for node execution, conditions, payloads and the policy gate."""

import random

import pytest

from applet_engine.core.applet_registry import AppletDefinition, AppletRegistry
from applet_engine.core.conditions import ConditionEvaluator
from applet_engine.core.delays import DelayStrategy, FixedDelayStrategy, RandomDelayStrategy
from applet_engine.core.exceptions import AppletRegistryError, PolicyBlockedError
from applet_engine.core.metrics import MetricsSample, RandomMetricsSource, ScriptedMetricsSource, StaticMetricsSource
from applet_engine.core.node_executor import NodeExecutor
from applet_engine.core.payloads import PayloadFactory
from applet_engine.core.policy_gate import POLICY_NODE_ID, PolicyGate
from applet_engine.models.core import (
    AppletCategory, BridgeConfig, Chain, NodeCondition, NodeExecutionStatus, ProtocolStatus,
    WorkflowNode, utc_now
)

from conftest import make_node


class RecordingDelay(DelayStrategy):
    """Delay strategy that records calls instead of sleeping long."""

    def __init__(self):
        self.calls = 0

    def next_delay_ms(self) -> float:
        self.calls += 1
        return 0.0


class TestConditionEvaluator:
    """Test cases for ConditionEvaluator."""

    @pytest.mark.parametrize("condition,expected", [
        ({"type": "dsi_below", "value": 470}, True),
        ({"type": "dsi_below", "value": 460}, False),
        ({"type": "dsi_above", "value": 460}, True),
        ({"type": "dsi_above", "value": 470}, False),
        ({"type": "price_below", "value": 1.01}, True),
        ({"type": "price_below", "value": 0.99}, False),
        ({"type": "price_above", "value": 0.99}, True),
        ({"type": "price_above", "value": 1.05}, False),
    ])
    def test_thresholds(self, condition, expected):
        evaluator = ConditionEvaluator(StaticMetricsSource(reserve_ratio=465.0, price=1.0))
        assert evaluator.evaluate(NodeCondition(**condition)) is expected

    def test_missing_threshold_uses_default(self):
        """dsi_below defaults to 400 and price_above to 1.05."""
        evaluator = ConditionEvaluator(StaticMetricsSource(reserve_ratio=390.0, price=1.06))
        assert evaluator.evaluate(NodeCondition(type="dsi_below")) is True
        assert evaluator.evaluate(NodeCondition(type="price_above")) is True
        assert NodeCondition(type="price_below").threshold == 0.95
        assert NodeCondition(type="dsi_above").threshold == 500

    def test_unconditional_does_not_sample(self):
        source = ScriptedMetricsSource([])
        evaluator = ConditionEvaluator(source)

        assert evaluator.evaluate(None) is True
        assert evaluator.evaluate(NodeCondition(type="always")) is True

    def test_each_evaluation_samples_fresh_metrics(self):
        source = ScriptedMetricsSource([
            MetricsSample(reserve_ratio=390.0, price=1.0),
            MetricsSample(reserve_ratio=480.0, price=1.0),
        ])
        evaluator = ConditionEvaluator(source)
        condition = NodeCondition(type="dsi_below", value=400)

        assert evaluator.evaluate(condition) is True
        assert evaluator.evaluate(condition) is False

    def test_random_source_stays_in_band(self):
        source = RandomMetricsSource(rng=random.Random(3))
        for _ in range(200):
            sample = source.sample()
            assert 420 <= sample.reserve_ratio <= 520
            assert 0.98 <= sample.price <= 1.02


class TestDelayStrategies:
    """Test cases for latency simulation."""

    def test_random_delay_within_bounds(self):
        strategy = RandomDelayStrategy(300, 1000, rng=random.Random(11))
        for _ in range(100):
            assert 300 <= strategy.next_delay_ms() <= 1000

    def test_invalid_ranges_rejected(self):
        with pytest.raises(ValueError):
            RandomDelayStrategy(500, 100)
        with pytest.raises(ValueError):
            FixedDelayStrategy(-1)

    @pytest.mark.asyncio
    async def test_wait_returns_delay(self):
        assert await FixedDelayStrategy(1).wait() == 1


class TestNodeExecutor:
    """Test cases for NodeExecutor."""

    @pytest.fixture
    def delay(self):
        return RecordingDelay()

    @pytest.fixture
    def executor(self, registry, delay):
        return NodeExecutor(
            registry=registry,
            condition_evaluator=ConditionEvaluator(StaticMetricsSource(reserve_ratio=465.0, price=1.0)),
            payload_factory=PayloadFactory(rng=random.Random(5)),
            delay_strategy=delay,
        )

    @pytest.mark.asyncio
    async def test_success_record(self, executor, delay):
        record = await executor.execute(make_node("eye", "djed_monitor", name="My Monitor"))

        assert record.status == NodeExecutionStatus.SUCCESS
        assert record.node_name == "Djed Eye"
        assert record.error is None
        assert {"reserveRatio", "djedSupply", "reserveBalance", "status", "timestamp"} <= set(record.output)
        assert record.start_time <= record.end_time
        assert delay.calls == 1

    @pytest.mark.asyncio
    async def test_skipped_record_has_no_output(self, executor, delay):
        node = make_node("arb", "djed_arbitrage", condition={"type": "price_above", "value": 1.05})
        record = await executor.execute(node)

        assert record.status == NodeExecutionStatus.SKIPPED
        assert record.output is None
        assert delay.calls == 1

    @pytest.mark.asyncio
    async def test_unknown_type_falls_back(self, executor):
        record = await executor.execute(WorkflowNode(id="x", type="not_an_applet"))

        assert record.status == NodeExecutionStatus.SUCCESS
        assert record.node_name == "not_an_applet"
        assert record.output["status"] == "executed"
        assert "timestamp" in record.output

    @pytest.mark.asyncio
    async def test_payload_failure_is_contained(self, registry):
        class BrokenPayloads(PayloadFactory):
            def build(self, category, node, chain=Chain.WEILCHAIN):
                raise ValueError("bad payload")

        executor = NodeExecutor(registry=registry, payload_factory=BrokenPayloads(),
                                delay_strategy=FixedDelayStrategy(0))
        record = await executor.execute(make_node("eye"))

        assert record.status == NodeExecutionStatus.FAILED
        assert "bad payload" in record.error
        assert record.output is None


class TestPayloadFactory:
    """Test cases for category payload shapes."""

    @pytest.fixture
    def factory(self):
        return PayloadFactory(rng=random.Random(9))

    @pytest.mark.parametrize("category,keys", [
        (AppletCategory.MONITORING, {"reserveRatio", "djedSupply", "reserveBalance", "status"}),
        (AppletCategory.SIMULATION, {"scenario", "projectedRatio", "risk", "recommendation"}),
        (AppletCategory.SECURITY, {"threatLevel", "stressTestResult", "vulnerabilities"}),
        (AppletCategory.LEDGER, {"transactions", "volume", "largestTx"}),
        (AppletCategory.ARBITRAGE, {"opportunities", "bestSpread", "potentialProfit"}),
        (AppletCategory.WALLET, {"chain", "nativeToken", "balance"}),
    ])
    def test_category_shapes(self, factory, category, keys):
        payload = factory.build(category, make_node("n"))
        assert set(payload) == keys | {"timestamp"}

    def test_bridge_uses_node_config(self, factory):
        node = make_node("tp", "teleport_bridge", bridge_config=BridgeConfig(
            source_chain=Chain.ETHEREUM, destination_chain=Chain.SOLANA,
            source_token="USDC", destination_token="USDC",
        ))
        payload = factory.build(AppletCategory.BRIDGE, node)

        assert payload["sourceChain"] == "ethereum"
        assert payload["destinationChain"] == "solana"
        assert payload["bridgeStatus"] == "completed"

    def test_wallet_uses_chain_token(self, factory):
        payload = factory.build(AppletCategory.WALLET, make_node("w", "sol_wallet"), Chain.SOLANA)
        assert payload["nativeToken"] == "SOL"
        assert payload["balance"].endswith("SOL")

    def test_unknown_category_is_minimal(self, factory):
        assert set(factory.build(None, make_node("n"))) == {"status", "timestamp"}


class TestAppletRegistry:
    """Test cases for AppletRegistry."""

    def test_builtin_applets(self, registry):
        applets = registry.list_applets()
        assert len(applets) == 8
        assert applets["djed_sentinel"] == "Sentinel One"
        assert registry.get_definition("djed_ledger").category == AppletCategory.LEDGER

    def test_duplicate_registration_rejected(self, registry):
        with pytest.raises(AppletRegistryError):
            registry.register(AppletDefinition(type="djed_monitor", name="Copy", category=AppletCategory.MONITORING))

        assert registry.get_definition("djed_monitor").name == "Djed Eye"

    def test_custom_registry(self):
        registry = AppletRegistry([
            AppletDefinition(type="gas_watch", name="Gas Watch", category=AppletCategory.MONITORING),
        ])
        assert "gas_watch" in registry
        assert "djed_monitor" not in registry

    def test_resolve_chain(self, registry):
        assert registry.resolve_chain(make_node("a", "eth_wallet")) == Chain.ETHEREUM
        assert registry.resolve_chain(make_node("b", "eth_wallet", chain=Chain.SOLANA)) == Chain.SOLANA
        assert registry.resolve_chain(make_node("c", "unknown_kind")) == Chain.WEILCHAIN


class TestPolicyGate:
    """Test cases for PolicyGate."""

    def test_critical_raises(self):
        with pytest.raises(PolicyBlockedError) as exc_info:
            PolicyGate().check(ProtocolStatus.CRITICAL, workflow_id="wf")

        assert exc_info.value.context["workflow_id"] == "wf"
        assert exc_info.value.to_dict()["category"] == "policy"

    @pytest.mark.parametrize("status", [ProtocolStatus.CRITICAL, "critical", " CRITICAL ", "Critical\n"])
    def test_critical_spellings_are_blocked(self, status):
        with pytest.raises(PolicyBlockedError):
            PolicyGate().check(status)

    @pytest.mark.parametrize("status", [ProtocolStatus.OPTIMAL, "OPTIMAL", None, "degraded"])
    def test_non_critical_passes(self, status):
        PolicyGate().check(status)

    def test_blocked_record(self):
        gate = PolicyGate()
        started = utc_now()
        try:
            gate.check("critical")
        except PolicyBlockedError as e:
            record = gate.blocked_record(e, started)

        assert record.node_id == POLICY_NODE_ID
        assert record.status == NodeExecutionStatus.FAILED
        assert record.start_time == started
        assert record.error.startswith("[BLOCKED]")
