"""
Core Units
==========

Meta-transaction forwarder, timelock, the TAI decision engine and the
protocol tokens.
"""

from ..actions import GrantRole, InitializePhase
from ..models import ConstructorParam as P
from ..models import DeploymentUnit, ParamType

MIN_DELAY = 86400  # 1 day
BASE_RESONANCE = 70
AUSD_MAX_SUPPLY = 1_000_000_000 * 10 ** 6  # 1B, 6 decimals

MINIMAL_FORWARDER = DeploymentUnit(
    name="MinimalForwarder",
    contract="MinimalForwarder",
    output_key="ERC2771_FORWARDER_ADDRESS",
    section="ERC2771 Forwarder",
)

TIMELOCK_CONTROLLER = DeploymentUnit(
    name="TimelockControllerWrapper",
    contract="TimelockControllerWrapper",
    output_key="TAI_TIMELOCK_CONTROLLER_ADDRESS",
    section="Timelock Controller",
    params=[
        P.literal("minDelay", MIN_DELAY, type=ParamType.INTEGER),
        P.deployer("proposers", many=True),
        P.deployer("executors", many=True),
        P.deployer("admin"),
        P.literal("jurisdiction", "Global"),
        P.store("forwarder", "ERC2771_FORWARDER_ADDRESS"),
    ],
)

# The deployer acts as a temporary DAO until governance is handed over
TAI_AI = DeploymentUnit(
    name="TaiAIContract",
    contract="TaiAIContract",
    output_key="TAI_AI_CONTRACT_ADDRESS",
    section="Tai AI Contract",
    params=[
        P.deployer("dao"),
        P.literal("baseResonance", BASE_RESONANCE, type=ParamType.INTEGER),
    ],
)

TAI_COIN = DeploymentUnit(
    name="TaiCoinInstance",
    contract="TaiCoinInstance",
    output_key="TAI_COIN",
    section="TaiCoin",
    actions=[
        InitializePhase(
            "setTaiAI",
            args=[P.store("taiAI", "TAI_AI_CONTRACT_ADDRESS")],
            done_when="taiAI",
            expect=P.store("linkedTaiAI", "TAI_AI_CONTRACT_ADDRESS"),
        ),
        GrantRole("MINTER_ROLE"),
    ],
)

ADVANCED_USD = DeploymentUnit(
    name="AdvancedUSDStablecoin",
    contract="AdvancedUSDStablecoin",
    output_key="ADVANCED_USD_ADDRESS",
    section="Advanced USD Stablecoin",
    params=[
        P.literal("name", "AdvancedUSDStablecoin"),
        P.literal("symbol", "AUSD"),
        P.literal("maxSupply", AUSD_MAX_SUPPLY, type=ParamType.INTEGER),
        P.store("taiAI", "TAI_AI_CONTRACT_ADDRESS"),
        P.external("dao", "DAO_ADDRESS"),
    ],
    actions=[
        GrantRole("MINTER_ROLE"),
        GrantRole("ANONYMOUS_MINTER_ROLE"),
        GrantRole("PAUSER_ROLE"),
    ],
)

TAI_ACTIVATED_USD = DeploymentUnit(
    name="TaiActivatedUSD",
    contract="TaiActivatedUSD",
    output_key="TAI_ACTIVATED_USD_ADDRESS",
    section="Tai Activated USD",
)

UNITS = [
    MINIMAL_FORWARDER,
    TIMELOCK_CONTROLLER,
    TAI_AI,
    TAI_COIN,
    ADVANCED_USD,
    TAI_ACTIVATED_USD,
]
