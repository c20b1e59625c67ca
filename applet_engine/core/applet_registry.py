"""Applet Registry: static definitions for the applet kinds a node may reference."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from ..models.core import AppletCategory, AppletType, Chain, OutputType, WorkflowNode
from .exceptions import AppletRegistryError
from .logging import get_logger

logger = get_logger(__name__)


class AppletDefinition(BaseModel):
    """Read-only description of an applet kind."""
    type: str = Field(..., description="Applet kind identifier")
    name: str = Field(..., description="Display name")
    category: AppletCategory = Field(..., description="Category that selects the output payload shape")
    description: str = Field("", description="What the applet does")
    output_type: OutputType = Field(OutputType.DATA, description="Kind of output emitted")
    default_chain: Chain = Field(Chain.WEILCHAIN, description="Chain the applet runs on by default")


DEFAULT_APPLET_DEFINITIONS: List[AppletDefinition] = [
    AppletDefinition(
        type=AppletType.DJED_MONITOR.value,
        name="Djed Eye",
        category=AppletCategory.MONITORING,
        description="Monitors protocol metrics and reserve ratios",
    ),
    AppletDefinition(
        type=AppletType.DJED_SIM.value,
        name="Chrono-Sim",
        category=AppletCategory.SIMULATION,
        description="Simulates time-based scenarios",
    ),
    AppletDefinition(
        type=AppletType.DJED_SENTINEL.value,
        name="Sentinel One",
        category=AppletCategory.SECURITY,
        description="Performs stress tests and risk analysis",
        output_type=OutputType.ALERT,
    ),
    AppletDefinition(
        type=AppletType.DJED_LEDGER.value,
        name="Djed Ledger",
        category=AppletCategory.LEDGER,
        description="Tracks on-chain transactions",
        output_type=OutputType.TRANSACTION,
    ),
    AppletDefinition(
        type=AppletType.DJED_ARBITRAGE.value,
        name="Arb-Hunter",
        category=AppletCategory.ARBITRAGE,
        description="Detects arbitrage opportunities",
    ),
    AppletDefinition(
        type=AppletType.TELEPORT_BRIDGE.value,
        name="Teleporter",
        category=AppletCategory.BRIDGE,
        description="Cross-chain bridge for asset transfers",
        output_type=OutputType.BRIDGE,
    ),
    AppletDefinition(
        type=AppletType.ETH_WALLET.value,
        name="ETH Vault",
        category=AppletCategory.WALLET,
        description="Ethereum wallet operations and DeFi access",
        output_type=OutputType.TRANSACTION,
        default_chain=Chain.ETHEREUM,
    ),
    AppletDefinition(
        type=AppletType.SOL_WALLET.value,
        name="SOL Vault",
        category=AppletCategory.WALLET,
        description="Solana wallet operations and DeFi access",
        output_type=OutputType.TRANSACTION,
        default_chain=Chain.SOLANA,
    ),
]


class AppletRegistry:
    """Registry mapping applet kinds to their static definitions."""

    def __init__(self, definitions: Optional[List[AppletDefinition]] = None):
        """Initialize the registry.

        Args:
            definitions: Definitions to load. Defaults to the built-in applets.
        """
        self._definitions: Dict[str, AppletDefinition] = {}
        for definition in DEFAULT_APPLET_DEFINITIONS if definitions is None else definitions:
            self.register(definition)

    def register(self, definition: AppletDefinition) -> None:
        """Register an applet definition.

        Raises:
            AppletRegistryError: If the applet type is blank or already registered
        """
        applet_type = definition.type.strip() if definition.type else ""
        if not applet_type:
            raise AppletRegistryError("Applet type cannot be empty", operation="register")

        if applet_type in self._definitions:
            raise AppletRegistryError(
                f"Applet '{applet_type}' is already registered",
                applet_type=applet_type,
                operation="register"
            )

        self._definitions[applet_type] = definition
        logger.debug(f"Registered applet '{applet_type}' ({definition.name})")

    def get_definition(self, applet_type: str) -> Optional[AppletDefinition]:
        """Return the definition for an applet type, or None if unknown."""
        return self._definitions.get(applet_type)

    def resolve(self, node: WorkflowNode) -> Optional[AppletDefinition]:
        """Resolve a node's applet definition, logging unknown types instead of failing."""
        definition = self.get_definition(node.type)
        if definition is None:
            logger.warning(f"Unknown applet type '{node.type}' on node {node.id}; using fallback output")
        return definition

    def resolve_chain(self, node: WorkflowNode) -> Chain:
        """Chain a node operates on: its override, else the applet default, else WeilChain."""
        if node.chain is not None:
            return node.chain
        definition = self.get_definition(node.type)
        return definition.default_chain if definition else Chain.WEILCHAIN

    def list_applets(self) -> Dict[str, str]:
        """List registered applets as a type -> display name mapping."""
        return {applet_type: definition.name for applet_type, definition in self._definitions.items()}

    def __contains__(self, applet_type: str) -> bool:
        return applet_type in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)
