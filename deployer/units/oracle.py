"""
Oracle Units
============

Peg oracles and the oracle manager.
"""

from ..actions import InitializePhase
from ..models import ConstructorParam as P
from ..models import DeploymentUnit

MAINNET = frozenset({1})

ARWEAVE_LINK = "https://arweave.net/VqP1qRPaQYVL9591AJ2xIdKUY5DWPMBvQ9giEpDIPDo"

BOOTSTRAP_PEG_ORACLE = DeploymentUnit(
    name="BootstrapPegOracle",
    contract="BootstrapPegOracle",
    output_key="BOOTSTRAP_PEG_ORACLE_ADDRESS",
    section="Bootstrap Peg Oracle",
)

TAI_PEG_ORACLE = DeploymentUnit(
    name="TaiPegOracleInstance",
    contract="TaiPegOracleInstance",
    output_key="TAI_PEG_ORACLE_ADDRESS",
    section="TaiPegOracle",
    params=[
        P.external("endpoint", "LAYER_ZERO_ENDPOINT"),
        P.store("trustedForwarder", "ERC2771_FORWARDER_ADDRESS"),
        P.store("governor", "TAI_TIMELOCK_CONTROLLER_ADDRESS"),
        P.literal("arweaveLink", ARWEAVE_LINK),
        P.literal("arweaveTitle", "The Return"),
        P.store("taiCoin", "TAI_COIN"),
        P.external("canonicalUsd", "CANONICAL_USD"),
        P.store("tai", "TAI_AI_CONTRACT_ADDRESS"),
    ],
    actions=[
        InitializePhase(
            "initializePhase1",
            args=[
                P.store("taiCoin", "TAI_COIN"),
                P.external("canonicalUsd", "CANONICAL_USD"),
                P.store("tai", "TAI_AI_CONTRACT_ADDRESS"),
            ],
            done_when="phase1Initialized",
        ),
    ],
    gas_multiplier=1.3,
    gas_fallback=2_000_000,
    chain_ids=MAINNET,
)

TAI_ORACLE_MANAGER = DeploymentUnit(
    name="TaiOracleManager",
    contract="TaiOracleManager",
    output_key="TAI_ORACLE_MANAGER_ADDRESS",
    section="Tai Oracle Manager",
    params=[
        P.external("dao", "DAO_ADDRESS"),
        P.store("forwarder", "ERC2771_FORWARDER_ADDRESS"),
    ],
)

UNITS = [
    BOOTSTRAP_PEG_ORACLE,
    TAI_PEG_ORACLE,
    TAI_ORACLE_MANAGER,
]
