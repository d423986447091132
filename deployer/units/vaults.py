"""
Vault Units
===========

Liquidity adapter, vaults, merkle claims, swap, staking and resonance minting.
"""

from ..actions import GrantRole, InitializePhase, TransferOwnership
from ..models import ConstructorParam as P
from ..models import DeploymentUnit, ParamType

DUMMY_LP = DeploymentUnit(
    name="DummyLP",
    contract="DummyLP",
    output_key="DUMMY_LP_ADDRESS",
    section="DummyLP",
)

# Bootstrapped against the dummy LP; the real pair is registered once it exists
TAI_VAULT_LP_ADAPTER = DeploymentUnit(
    name="TaiVaultLiquidityAdapter",
    contract="TaiVaultLiquidityAdapter",
    output_key="TAI_VAULT_LP_ADAPTER_ADDRESS",
    section="TaiVault Liquidity Adapter",
    params=[P.store("lp", "DUMMY_LP_ADDRESS")],
    actions=[
        InitializePhase(
            "registerLP",
            args=[P.external("lpToken", "LP_TOKEN_ADDRESS")],
            done_when="lpToken",
            expect=P.external("registeredLP", "LP_TOKEN_ADDRESS"),
        ),
    ],
)

TAI_VAULT = DeploymentUnit(
    name="TaiVault",
    contract="TaiVault",
    output_key="TAI_VAULT_ADDRESS",
    section="TaiVault",
    params=[
        P.external("collateralToken", "LP_TOKEN_ADDRESS"),
        P.store("taiCoin", "TAI_COIN"),
        P.store("oracle", "BOOTSTRAP_PEG_ORACLE_ADDRESS"),
        P.store("taiAI", "TAI_AI_CONTRACT_ADDRESS"),
        P.store("forwarder", "ERC2771_FORWARDER_ADDRESS"),
    ],
)

TAI_VAULT_PHASE_II = DeploymentUnit(
    name="TaiVaultPhaseII",
    contract="TaiVaultPhaseII",
    output_key="TAI_VAULT_PHASE_II_ADDRESS",
    section="TaiVault Phase II",
    params=[
        P.store("forwarder", "ERC2771_FORWARDER_ADDRESS"),
        P.store("taiCoin", "TAI_COIN"),
        P.deployer("gasRelayer"),
        P.external("lzEndpoint", "LAYER_ZERO_ENDPOINT"),
        P.store("taiAI", "TAI_AI_CONTRACT_ADDRESS"),
    ],
    actions=[TransferOwnership(P.external("dao", "DAO_ADDRESS"))],
)

TAI_VAULT_MERKLE_CLAIM = DeploymentUnit(
    name="TaiVaultMerkleClaimV1",
    contract="TaiVaultMerkleClaimV1",
    output_key="TAI_VAULT_MERKLE_ADDRESS",
    section="TaiVault Merkle Claim",
    params=[
        P.store("forwarder", "ERC2771_FORWARDER_ADDRESS"),
        P.store("oracle", "TAI_PEG_ORACLE_ADDRESS"),
        P.external("governor", "DAO_ADDRESS"),
        P.store("taiAI", "TAI_AI_CONTRACT_ADDRESS"),
    ],
    gas_multiplier=1.2,
    gas_fallback=2_000_000,
    chain_ids=frozenset({1, 11155111}),
)

TAI_MERKLE_CLAIM_CORE = DeploymentUnit(
    name="TaiMerkleClaimCore",
    contract="TaiMerkleClaimCore",
    output_key="TAI_MERKLE_CORE_ADDRESS",
    section="TaiMerkleClaimCore",
    params=[
        P.external("merkleRoot", "TAI_MERKLE_ROOT", type=ParamType.BYTES),
        P.store("tai", "TAI_AI_CONTRACT_ADDRESS"),
        P.store("forwarder", "ERC2771_FORWARDER_ADDRESS"),
    ],
    actions=[TransferOwnership(P.external("governor", "GOVERNOR"))],
)

# The swap mints TaiCoin, so it needs MINTER_ROLE on the coin contract
TAI_COIN_SWAP = DeploymentUnit(
    name="TaiCoinSwapV1",
    contract="TaiCoinSwapV1",
    output_key="TAI_COIN_SWAP_ADDRESS",
    section="TaiCoinSwap",
    params=[
        P.store("trustedForwarder", "ERC2771_FORWARDER_ADDRESS"),
        P.external("usd", "CANONICAL_USD"),
        P.store("tai", "TAI_COIN"),
        P.store("oracle", "TAI_PEG_ORACLE_ADDRESS"),
        P.store("vault", "TAI_VAULT_MERKLE_ADDRESS"),
        P.external("governor", "DAO_ADDRESS"),
        P.store("taiAI", "TAI_AI_CONTRACT_ADDRESS"),
    ],
    actions=[
        GrantRole(
            "MINTER_ROLE",
            grantee=P.deployed("swap"),
            target=P.store("taiCoin", "TAI_COIN"),
        ),
    ],
    chain_ids=frozenset({1}),
)

TAI_STAKING_ENGINE = DeploymentUnit(
    name="TaiStakingEngine",
    contract="TaiStakingEngine",
    output_key="TAI_STAKING_ENGINE_ADDRESS",
    section="Tai Staking Engine",
    params=[P.store("taiCoin", "TAI_COIN")],
)

TAI_MINT_BY_RESONANCE = DeploymentUnit(
    name="TaiMintByResonance",
    contract="TaiMintByResonance",
    output_key="MINT_BY_RESONANCE_ADDRESS",
    section="Mint By Resonance",
    params=[
        P.store("taiCoin", "TAI_COIN"),
        P.external("dao", "DAO_ADDRESS"),
        P.store("aiContract", "TAI_AI_CONTRACT_ADDRESS"),
    ],
)

UNITS = [
    DUMMY_LP,
    TAI_VAULT_LP_ADAPTER,
    TAI_VAULT,
    TAI_VAULT_PHASE_II,
    TAI_VAULT_MERKLE_CLAIM,
    TAI_MERKLE_CLAIM_CORE,
    TAI_COIN_SWAP,
    TAI_STAKING_ENGINE,
    TAI_MINT_BY_RESONANCE,
]
