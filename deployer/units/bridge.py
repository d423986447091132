"""
Bridge Units
============

Cross-chain routing, state mirroring and the bridge vaults.

TaiBridgeVault takes the addresses of most of the system as one
`vaultParams` struct, so it is deployed last. Entries that no registered
unit produces (airdrop claim, gasless activators, redemption vault,
resonance activation) must already be recorded in the config store.
"""

from ..actions import InitializePhase
from ..models import ConstructorParam as P
from ..models import DeploymentUnit

MAINNET = frozenset({1})

TAI_CHAIN_ROUTER = DeploymentUnit(
    name="TaiChainRouter",
    contract="TaiChainRouter",
    output_key="TAI_CHAIN_ROUTER",
    section="Tai Chain Router",
    params=[
        P.external("lzEndpoint", "LAYER_ZERO_ENDPOINT"),
        P.store("vault", "TAI_VAULT_ADDRESS"),
        P.external("dao", "DAO_ADDRESS"),
        P.store("forwarder", "ERC2771_FORWARDER_ADDRESS"),
    ],
)

TAI_CROSS_CHAIN_STATE_MIRROR = DeploymentUnit(
    name="TaiCrossChainStateMirror",
    contract="TaiCrossChainStateMirror",
    output_key="TAI_CROSS_CHAIN_STATE_MIRROR",
    section="Tai Cross Chain State Mirror",
    params=[P.deployer("owner")],
)

TAI_INTUITION_BRIDGE = DeploymentUnit(
    name="TaiIntuitionBridge",
    contract="TaiIntuitionBridge",
    output_key="TAI_INTUITION_BRIDGE_ADDRESS",
    section="Tai Intuition Bridge",
    params=[
        P.external("dao", "DAO_ADDRESS"),
        P.store("forwarder", "ERC2771_FORWARDER_ADDRESS"),
    ],
)

# Deployed with the deployer in control, then handed to the final governor
TAI_BRIDGE_VAULT_LZ = DeploymentUnit(
    name="TaiBridgeVaultLZ",
    contract="TaiBridgeVaultLZ",
    output_key="TAI_BRIDGE_VAULT_LZ_ADDRESS",
    section="TaiBridgeVaultLZ",
    params=[
        P.external("lzEndpoint", "LZ_ENDPOINT_MAINNET"),
        P.store("forwarder", "ERC2771_FORWARDER_ADDRESS"),
    ],
    actions=[
        InitializePhase(
            "initialize",
            args=[P.external("governor", "TAI_GOVERNOR_ADDRESS")],
            done_when="initialized",
        ),
    ],
    chain_ids=MAINNET,
)


def _vault_param(name, key, source=P.store):
    return source(name, key, group="vaultParams")


TAI_BRIDGE_VAULT = DeploymentUnit(
    name="TaiBridgeVault",
    contract="contracts/funding/TaiBridgeVaults/contracts/TaiBridgeVault.sol:TaiBridgeVault",
    output_key="TAI_BRIDGE_VAULT_ADDRESS",
    section="TaiBridgeVault",
    params=[
        _vault_param("tai", "TAI_COIN"),
        _vault_param("ai", "TAI_AI_CONTRACT_ADDRESS"),
        _vault_param("merkleClaim", "TAI_MERKLE_CORE_ADDRESS"),
        _vault_param("governor", "TAI_GOVERNOR_ADDRESS", P.external),
        _vault_param("timelock", "TAI_TIMELOCK_CONTROLLER_ADDRESS"),
        _vault_param("dao", "DAO_ADDRESS", P.external),
        _vault_param("layerZeroEndpoint", "LAYER_ZERO_ENDPOINT", P.external),
        _vault_param("pegOracle", "TAI_PEG_ORACLE_ADDRESS"),
        _vault_param("vaultMerkle", "TAI_VAULT_MERKLE_ADDRESS"),
        _vault_param("airdropClaim", "TAI_AIRDROP_CLAIM_ADDRESS"),
        _vault_param("coinSwap", "TAI_COIN_SWAP_ADDRESS"),
        _vault_param("mintByResonance", "MINT_BY_RESONANCE_ADDRESS"),
        _vault_param("gaslessActivator", "GASLESS_MERKLE_ACTIVATOR_ADDRESS"),
        _vault_param("gaslessActivatorLZ", "GASLESS_MERKLE_ACTIVATOR_LZ"),
        _vault_param("chainRouter", "TAI_CHAIN_ROUTER"),
        _vault_param("crossChainMirror", "TAI_CROSS_CHAIN_STATE_MIRROR"),
        _vault_param("intuitionBridge", "TAI_INTUITION_BRIDGE_ADDRESS"),
        _vault_param("vault", "TAI_VAULT_ADDRESS"),
        _vault_param("phaseII", "TAI_VAULT_PHASE_II_ADDRESS"),
        _vault_param("redemptionVault", "TAI_COIN_REDEMPTION_VAULT_ADDRESS"),
        _vault_param("merkleCore", "TAI_MERKLE_CORE_ADDRESS"),
        _vault_param("advancedUSD", "ADVANCED_USD_ADDRESS"),
        _vault_param("activatedUSD", "TAI_ACTIVATED_USD_ADDRESS"),
        _vault_param("resonanceActivation", "TAI_RESONANCE_ACTIVATION_ADDRESS"),
        _vault_param("vaultLpAdapter", "TAI_VAULT_LP_ADAPTER_ADDRESS"),
        P.literal("targetCurrency", "USD"),
        P.store("trustedForwarder", "ERC2771_FORWARDER_ADDRESS"),
    ],
    chain_ids=MAINNET,
)

UNITS = [
    TAI_CHAIN_ROUTER,
    TAI_CROSS_CHAIN_STATE_MIRROR,
    TAI_INTUITION_BRIDGE,
    TAI_BRIDGE_VAULT_LZ,
    TAI_BRIDGE_VAULT,
]
