"""
Tai Deployment Units
====================

Static descriptors for every Tai module, grouped by domain:
- core: forwarder, timelock, TAI decision engine, tokens
- oracle: peg oracles and oracle manager
- governance: DAO and council
- vaults: vaults, merkle claims, swap, staking
- bridge: routers, mirrors and bridge vaults
"""

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from ..models import DeploymentUnit
from . import bridge, core, governance, oracle, vaults

REGISTRY: Dict[str, DeploymentUnit] = OrderedDict(
    (unit.name, unit)
    for module in (core, oracle, governance, vaults, bridge)
    for unit in module.UNITS
)


def get_units(names: Optional[Iterable[str]] = None) -> List[DeploymentUnit]:
    """Registered units by name, or all of them in registry order."""
    if names is None:
        return list(REGISTRY.values())
    names = list(names)
    unknown = [name for name in names if name not in REGISTRY]
    if unknown:
        raise KeyError(f"Unknown deployment unit(s): {', '.join(unknown)}")
    return [REGISTRY[name] for name in names]


__all__ = ["REGISTRY", "get_units"]
