#!/usr/bin/env python3
"""
Tests for gas budgets and the estimation fallback
"""

from unittest.mock import MagicMock

import pytest
from web3 import Web3

from deployer.artifacts import ArtifactLoader
from deployer.conftest import ADDR_A, DEPLOYER, write_artifact
from deployer.errors import DeploymentError, GasEstimationFallback
from deployer.estimator import GasEstimator, scale_estimate
from deployer.models import ConstructorParam as P
from deployer.models import DeploymentUnit
from deployer.resolver import ParameterResolver


class TestScaleEstimate:

    def test_scaled(self):
        assert scale_estimate(1000, 1.5) == 1500
        assert scale_estimate(1001, 1.5) == 1501

    def test_multiplier_must_exceed_one(self):
        with pytest.raises(ValueError):
            scale_estimate(1000, 1.0)
        with pytest.raises(ValueError):
            scale_estimate(1000, 0.9)


class TestGasEstimator:
    """Budgets for creation and wiring transactions"""

    def setup_method(self):
        self.w3 = MagicMock()
        self.artifacts = MagicMock()
        self.factory = self.artifacts.factory.return_value
        self.estimator = GasEstimator(self.w3, self.artifacts, DEPLOYER)
        self.unit = DeploymentUnit(
            name="Vault",
            contract="Vault",
            output_key="VAULT_ADDRESS",
            params=[P.store("a", "A_ADDRESS")],
            gas_multiplier=1.25,
            gas_fallback=2_000_000,
        )
        self.resolved = ParameterResolver().resolve(self.unit.params, {"A_ADDRESS": ADDR_A}, {})

    def test_estimate_is_scaled(self):
        """The simulated estimate is multiplied, never used raw"""
        self.factory.constructor.return_value.estimate_gas.return_value = 200_000
        budget = self.estimator.estimate(self.unit, self.resolved)

        self.factory.constructor.assert_called_once_with(ADDR_A)
        self.factory.constructor.return_value.estimate_gas.assert_called_once_with({"from": DEPLOYER})
        assert budget.gas == 250_000
        assert budget.estimated == 200_000
        assert not budget.used_fallback

    def test_fallback_on_failure(self):
        """A failed simulation yields the unit's fallback constant"""
        self.factory.constructor.return_value.estimate_gas.side_effect = ValueError("execution reverted")
        budget = self.estimator.estimate(self.unit, self.resolved)

        assert budget.gas == 2_000_000
        assert budget.estimated is None
        assert isinstance(budget.fallback, GasEstimationFallback)
        assert "Vault" in str(budget.fallback)

    def test_budget_is_scaled_or_fallback(self):
        """Every budget is either above the estimate or exactly the fallback"""
        for estimate in (100, 21_000, 1_234_567):
            budget = self.estimator.budget(lambda: estimate, "x", multiplier=1.25, fallback=99)
            assert budget.gas > estimate
        budget = self.estimator.budget(MagicMock(side_effect=RuntimeError("rpc down")), "x", 1.25, 99)
        assert budget.gas == 99

    def test_estimate_call(self):
        """Wiring calls use their own multiplier and fallback"""
        call = MagicMock()
        call.estimate_gas.return_value = 40_000
        budget = self.estimator.estimate_call(call, "Vault:grantRole", multiplier=1.5, fallback=500_000)
        assert budget.gas == 60_000

        call.estimate_gas.side_effect = ValueError("reverted")
        budget = self.estimator.estimate_call(call, "Vault:grantRole", multiplier=1.5, fallback=500_000)
        assert budget.gas == 500_000

    def test_unencodable_constructor_arguments(self, tmp_path):
        """Arguments the real ABI rejects fail with the unit name, before any estimate"""
        write_artifact(tmp_path, "Vault")
        estimator = GasEstimator(Web3(), ArtifactLoader(tmp_path), DEPLOYER)
        unit = DeploymentUnit(
            name="Vault",
            contract="Vault",
            output_key="VAULT_ADDRESS",
            params=[P.literal("name", "Vault"), P.literal("symbol", "V")],
        )
        resolved = ParameterResolver().resolve(unit.params, {}, {})

        with pytest.raises(DeploymentError) as exc:
            estimator.estimate(unit, resolved)
        assert exc.value.unit == "Vault"


if __name__ == "__main__":
    pytest.main([__file__])
