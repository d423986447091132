"""
Shared fixtures: a file-backed config store and an orchestrator whose
chain-facing stages (estimator, executor, actions runner, artifacts) are mocks.
"""

import json
from unittest.mock import MagicMock

import pytest

from deployer.actions import ActionReport
from deployer.models import DeploymentRecord, NetworkProfile, ResourceBudget
from deployer.network import NetworkGuard
from deployer.orchestrator import Orchestrator
from deployer.persistence import PersistenceWriter, RecordWriter
from deployer.resolver import ParameterResolver
from deployer.store import ConfigStore

# Digit-only addresses are their own checksum form
DEPLOYER = "0x" + "1" * 40
ADDR_A = "0x" + "2" * 40
ADDR_B = "0x" + "3" * 40
ADDR_C = "0x" + "4" * 40
ADDR_D = "0x" + "5" * 40

HARDHAT = NetworkProfile(chain_id=31337, name="hardhat")

# Constructor taking a single `owner` address
OWNER_CONSTRUCTOR_ABI = [
    {
        "inputs": [{"internalType": "address", "name": "owner", "type": "address"}],
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
]


def write_artifact(root, name, abi=OWNER_CONSTRUCTOR_ABI, bytecode="0x6080604052"):
    """Writes a Hardhat-style artifact at <root>/contracts/<name>.sol/<name>.json."""
    path = root / "contracts" / f"{name}.sol" / f"{name}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"contractName": name, "abi": abi, "bytecode": bytecode}))
    return path


def make_record(unit, address, network=HARDHAT):
    return DeploymentRecord(
        unit=unit,
        address=address,
        deployer=DEPLOYER,
        network=network.name,
        chain_id=network.chain_id,
        tx_hash="0x" + "ab" * 32,
        block_number=1,
        block_hash="0x" + "cd" * 32,
        timestamp="2024-01-01T00:00:00+00:00",
        gas_used=21000,
        gas_limit=100000,
    )


@pytest.fixture
def store(tmp_path):
    return ConfigStore(tmp_path / "deployments.env")


@pytest.fixture
def profile():
    return HARDHAT


@pytest.fixture
def stages():
    """Mocked chain-facing stages; `addresses` maps unit name to the address it deploys at."""
    estimator = MagicMock()
    estimator.estimate.return_value = ResourceBudget(gas=100000, estimated=80000, multiplier=1.25)

    addresses = {}
    executor = MagicMock()
    executor.deploy.side_effect = lambda unit, resolved, budget: make_record(unit.name, addresses[unit.name])

    runner = MagicMock()
    runner.run.side_effect = lambda deployed, actions: ActionReport(unit=deployed.unit.name)

    return {
        "estimator": estimator,
        "executor": executor,
        "runner": runner,
        "artifacts": MagicMock(),
        "addresses": addresses,
    }


@pytest.fixture
def make_orchestrator(store, stages, tmp_path):
    def factory(allow_list=(31337,), external=None, **kwargs):
        return Orchestrator(
            store=store,
            guard=NetworkGuard(allow_list),
            resolver=ParameterResolver(),
            estimator=stages["estimator"],
            executor=stages["executor"],
            runner=kwargs.pop("runner", stages["runner"]),
            artifacts=stages["artifacts"],
            writer=PersistenceWriter(),
            records=RecordWriter(tmp_path / "records"),
            external=external or {},
            deployer=DEPLOYER,
            **kwargs,
        )
    return factory
