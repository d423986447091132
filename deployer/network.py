"""
Network identity and the allow-list guard that runs before anything else.
"""

import logging
from typing import Iterable, Optional, Set

from .errors import UnsafeNetworkError
from .models import NetworkProfile

logger = logging.getLogger(__name__)

KNOWN_NETWORKS = {
    1: "mainnet",
    11155111: "sepolia",
    31337: "hardhat",
}


def network_name(chain_id: int) -> str:
    return KNOWN_NETWORKS.get(chain_id, f"chain-{chain_id}")


def parse_chain_ids(value: Optional[str]) -> Set[int]:
    """Parses '1, sepolia, 31337' into chain ids."""
    by_name = {name: chain_id for chain_id, name in KNOWN_NETWORKS.items()}
    chain_ids = set()
    for item in (value or "").split(","):
        item = item.strip().lower()
        if not item:
            continue
        if item in by_name:
            chain_ids.add(by_name[item])
            continue
        try:
            chain_ids.add(int(item, 0))
        except ValueError:
            raise ValueError(f"Unknown network '{item}'") from None
    return chain_ids


def detect_profile(w3, production_chain_ids: Iterable[int]) -> NetworkProfile:
    """Reads the chain id from the connected node; evaluated once per run."""
    chain_id = int(w3.eth.chain_id)
    profile = NetworkProfile(
        chain_id=chain_id,
        name=network_name(chain_id),
        is_production=chain_id in set(production_chain_ids),
    )
    logger.info(f"Connected network: {profile.name} (chainId {chain_id})")
    if profile.is_production:
        logger.warning(f"{profile.name} is a PRODUCTION network")
    return profile


class NetworkGuard:
    """Rejects any network that is not explicitly allow-listed."""

    def __init__(self, allow_list: Iterable[int]):
        self.allow_list = frozenset(allow_list)

    def validate(self, profile: NetworkProfile, allow_list: Optional[Iterable[int]] = None) -> None:
        allowed = self.allow_list if allow_list is None else frozenset(allow_list)
        if profile.chain_id not in allowed:
            if profile.is_production:
                logger.error(f"Production network {profile.name} is not in the allow-list")
            raise UnsafeNetworkError(profile.chain_id, profile.name, allowed)
