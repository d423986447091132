"""
Governance Units
================
"""

from ..models import ConstructorParam as P
from ..models import DeploymentUnit, ParamType

MINTING_RATE = 1000
COLLATERAL_RATIO = 5000

# The deployer stands in as gas relayer until a relayer is set by governance
TAI_DAO = DeploymentUnit(
    name="TaiDAO",
    contract="TaiDAO",
    output_key="TAI_DAO_ADDRESS",
    section="Tai DAO",
    params=[
        P.store("taiToken", "TAI_COIN"),
        P.literal("mintingRate", MINTING_RATE, type=ParamType.INTEGER),
        P.literal("collateralRatio", COLLATERAL_RATIO, type=ParamType.INTEGER),
        P.external("crossChainEndpoint", "LZ_ENDPOINT_MAINNET"),
        P.deployer("gasRelayer"),
        P.store("aiContract", "TAI_AI_CONTRACT_ADDRESS"),
        P.external("dao", "DAO_ADDRESS"),
        P.store("forwarder", "ERC2771_FORWARDER_ADDRESS"),
    ],
)

TAI_COUNCIL = DeploymentUnit(
    name="TaiCouncil",
    contract="TaiCouncil",
    output_key="TAI_COUNCIL_ADDRESS",
    section="Tai Council",
    params=[
        P.external("dao", "DAO_ADDRESS"),
        P.store("forwarder", "ERC2771_FORWARDER_ADDRESS"),
    ],
    chain_ids=frozenset({1}),
)

UNITS = [
    TAI_DAO,
    TAI_COUNCIL,
]
