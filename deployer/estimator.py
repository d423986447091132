"""
Gas budgets: simulated estimate times a safety multiplier, or a fixed
per-unit fallback when the simulation itself fails.
"""

import logging
from typing import Callable

from .artifacts import build_constructor
from .errors import GasEstimationFallback
from .models import DeploymentUnit, ResolvedParams, ResourceBudget

logger = logging.getLogger(__name__)

DEFAULT_ACTION_MULTIPLIER = 1.2
DEFAULT_ACTION_FALLBACK = 500_000


def scale_estimate(estimated: int, multiplier: float) -> int:
    if multiplier <= 1.0:
        raise ValueError(f"gas multiplier must be greater than 1, got {multiplier}")
    return int(estimated * multiplier)


class GasEstimator:
    def __init__(self, w3, artifacts, sender_address: str):
        self.w3 = w3
        self.artifacts = artifacts
        self.sender_address = sender_address

    def estimate(self, unit: DeploymentUnit, resolved: ResolvedParams) -> ResourceBudget:
        """Budget for the unit's creation transaction."""
        factory = self.artifacts.factory(self.w3, unit.contract)
        constructor = build_constructor(factory, resolved.args, unit.name)
        return self.budget(
            lambda: constructor.estimate_gas({"from": self.sender_address}),
            label=unit.name,
            multiplier=unit.gas_multiplier,
            fallback=unit.gas_fallback,
        )

    def estimate_call(
        self,
        call,
        label: str,
        multiplier: float = DEFAULT_ACTION_MULTIPLIER,
        fallback: int = DEFAULT_ACTION_FALLBACK,
    ) -> ResourceBudget:
        """Budget for a wiring call on an already deployed contract."""
        return self.budget(
            lambda: call.estimate_gas({"from": self.sender_address}),
            label=label,
            multiplier=multiplier,
            fallback=fallback,
        )

    def budget(self, simulate: Callable[[], int], label: str, multiplier: float, fallback: int) -> ResourceBudget:
        try:
            estimated = int(simulate())
        except Exception as e:
            warning = GasEstimationFallback(label, fallback, e)
            logger.warning(str(warning))
            return ResourceBudget(gas=fallback, multiplier=multiplier, fallback=warning)

        gas = scale_estimate(estimated, multiplier)
        logger.info(f"{label}: estimated gas {estimated:,} -> budget {gas:,} (x{multiplier})")
        return ResourceBudget(gas=gas, estimated=estimated, multiplier=multiplier)
