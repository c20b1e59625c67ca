"""Mock output payloads produced by applet nodes, keyed by applet category."""

import random
from typing import Any, Callable, Dict, Optional

from ..models.core import AppletCategory, Chain, WorkflowNode, utc_now

NATIVE_TOKENS: Dict[Chain, str] = {
    Chain.ETHEREUM: "ETH",
    Chain.WEILCHAIN: "WEIL",
    Chain.SOLANA: "SOL",
}


class PayloadFactory:
    """Builds the output payload for a successfully executed node."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._generators: Dict[AppletCategory, Callable[[WorkflowNode, Chain], Dict[str, Any]]] = {
            AppletCategory.MONITORING: self._monitoring,
            AppletCategory.SIMULATION: self._simulation,
            AppletCategory.SECURITY: self._security,
            AppletCategory.LEDGER: self._ledger,
            AppletCategory.ARBITRAGE: self._arbitrage,
            AppletCategory.BRIDGE: self._bridge,
            AppletCategory.WALLET: self._wallet,
        }

    def build(
        self,
        category: Optional[AppletCategory],
        node: WorkflowNode,
        chain: Chain = Chain.WEILCHAIN
    ) -> Dict[str, Any]:
        """
        Build a payload for the given category.

        Unrecognized or missing categories yield a minimal
        ``{"status": "executed", "timestamp": ...}`` payload.
        """
        generator = self._generators.get(category) if category is not None else None
        if generator is None:
            return {"status": "executed", "timestamp": self._timestamp()}

        payload = generator(node, chain)
        payload["timestamp"] = self._timestamp()
        return payload

    @staticmethod
    def _timestamp() -> str:
        return utc_now().isoformat()

    def _monitoring(self, node: WorkflowNode, chain: Chain) -> Dict[str, Any]:
        return {
            "reserveRatio": 465 + self._rng.random() * 50,
            "djedSupply": "1,234,567",
            "reserveBalance": "5,678,901",
            "status": "OPTIMAL",
        }

    def _simulation(self, node: WorkflowNode, chain: Chain) -> Dict[str, Any]:
        return {
            "scenario": "Price Shock -10%",
            "projectedRatio": 420,
            "risk": "MEDIUM",
            "recommendation": "Increase reserves by 5%",
        }

    def _security(self, node: WorkflowNode, chain: Chain) -> Dict[str, Any]:
        return {
            "threatLevel": "CRITICAL" if self._rng.random() > 0.7 else "NORMAL",
            "stressTestResult": "PASSED",
            "vulnerabilities": self._rng.randrange(3),
        }

    def _ledger(self, node: WorkflowNode, chain: Chain) -> Dict[str, Any]:
        return {
            "transactions": self._rng.randrange(50) + 10,
            "volume": f"{self._rng.random() * 1000:.2f} ADA",
            "largestTx": f"{self._rng.random() * 100:.2f} ADA",
        }

    def _arbitrage(self, node: WorkflowNode, chain: Chain) -> Dict[str, Any]:
        return {
            "opportunities": self._rng.randrange(5),
            "bestSpread": f"{self._rng.random() * 2:.2f}%",
            "potentialProfit": f"{self._rng.random() * 50:.2f} ADA",
        }

    def _bridge(self, node: WorkflowNode, chain: Chain) -> Dict[str, Any]:
        config = node.bridge_config
        if config is None:
            return {
                "sourceChain": chain.value,
                "destinationChain": chain.value,
                "estimatedTime": 0,
                "fee": 0.0,
                "bridgeStatus": "completed",
            }
        return {
            "sourceChain": config.source_chain.value,
            "destinationChain": config.destination_chain.value,
            "sourceToken": config.source_token,
            "destinationToken": config.destination_token,
            "estimatedTime": config.estimated_time,
            "fee": config.fee,
            "bridgeStatus": "completed",
        }

    def _wallet(self, node: WorkflowNode, chain: Chain) -> Dict[str, Any]:
        token = NATIVE_TOKENS.get(chain, "WEIL")
        return {
            "chain": chain.value,
            "nativeToken": token,
            "balance": f"{self._rng.random() * 10:.4f} {token}",
        }
