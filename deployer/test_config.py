#!/usr/bin/env python3
"""
Tests for run settings
"""

import pytest

from deployer.config import DeployerSettings


class TestDeployerSettings:

    def test_defaults(self):
        """An empty environment gives a local-only configuration"""
        settings = DeployerSettings.from_env({})
        assert settings.allowed_chain_ids == {31337}
        assert settings.production_chain_ids == {1}
        assert settings.store_path == "deployments.env"
        assert settings.confirmations == 1
        assert settings.gas_price_gwei is None
        assert settings.halt_on_partial is False
        assert settings.resume_wiring is True
        assert settings.units == []
        assert settings.private_key is None

    def test_values_from_environment(self):
        settings = DeployerSettings.from_env({
            "RPC_URL": "https://rpc.example",
            "DEPLOYER_PRIVATE_KEY": "0x" + "1" * 64,
            "ALLOWED_CHAIN_IDS": "mainnet, sepolia",
            "CONFIRMATIONS": "3",
            "CONFIRMATION_TIMEOUT": "600",
            "GAS_PRICE_GWEI": "25",
            "HALT_ON_PARTIAL": "yes",
            "RESUME_WIRING": "false",
            "DEPLOY_UNITS": "TaiDAO, TaiVault,",
            "DRY_RUN": "1",
            "SMTP_PORT": "465",
        })
        assert settings.rpc_url == "https://rpc.example"
        assert settings.allowed_chain_ids == {1, 11155111}
        assert settings.confirmations == 3
        assert settings.confirmation_timeout == 600.0
        assert settings.gas_price_gwei == 25
        assert settings.halt_on_partial is True
        assert settings.resume_wiring is False
        assert settings.units == ["TaiDAO", "TaiVault"]
        assert settings.dry_run is True
        assert settings.smtp_port == 465

    def test_private_key_not_in_repr(self):
        settings = DeployerSettings.from_env({"DEPLOYER_PRIVATE_KEY": "0xsecret"})
        assert "0xsecret" not in repr(settings)

    @pytest.mark.parametrize("name,value", [
        ("HALT_ON_PARTIAL", "maybe"),
        ("CONFIRMATIONS", "0"),
        ("CONFIRMATIONS", "two"),
        ("CONFIRMATION_TIMEOUT", "-1"),
        ("ALLOWED_CHAIN_IDS", "mainnet,nowhere"),
    ])
    def test_bad_values(self, name, value):
        """Invalid settings are reported with the variable name"""
        with pytest.raises(ValueError, match=name):
            DeployerSettings.from_env({name: value})


if __name__ == "__main__":
    pytest.main([__file__])
