"""
Loads compiled Hardhat artifacts (ABI + bytecode) for contract factories.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from web3.exceptions import Web3ValidationError

from .errors import ArtifactNotFoundError, DeploymentError

logger = logging.getLogger(__name__)


class ArtifactLoader:
    """
    Finds `<Contract>.json` under a Hardhat `artifacts/` tree.

    Contracts can be given by name ("TaiVault") or fully qualified
    ("contracts/vaults/TaiVault.sol:TaiVault") when a name is ambiguous.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self._cache: Dict[str, Dict[str, Any]] = {}

    def find(self, contract: str) -> Path:
        if ":" in contract:
            source, name = contract.rsplit(":", 1)
            path = self.root / source / f"{name}.json"
            if not path.exists():
                raise ArtifactNotFoundError(f"No artifact for {contract} at {path}")
            return path

        candidates = sorted(
            path for path in self.root.rglob(f"{contract}.json")
            if not path.name.endswith(".dbg.json")
        )
        if not candidates:
            raise ArtifactNotFoundError(f"No artifact named {contract}.json under {self.root}")
        if len(candidates) > 1:
            found = ", ".join(str(path.relative_to(self.root)) for path in candidates)
            raise ArtifactNotFoundError(
                f"Ambiguous contract name {contract}: {found}; use the fully qualified name"
            )
        return candidates[0]

    def load(self, contract: str) -> Dict[str, Any]:
        if contract not in self._cache:
            path = self.find(contract)
            try:
                with open(path, "r") as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                raise ArtifactNotFoundError(f"Artifact {path} could not be read: {e}") from e
            if not isinstance(data, dict):
                raise ArtifactNotFoundError(f"Artifact {path} is not a JSON object")
            bytecode = data.get("bytecode") or "0x"
            if "abi" not in data:
                raise ArtifactNotFoundError(f"Artifact {path} has no ABI")
            self._cache[contract] = {"abi": data["abi"], "bytecode": bytecode, "path": path}
            logger.debug(f"Loaded artifact {contract} from {path}")
        return self._cache[contract]

    def check(self, contract: str) -> None:
        """Raises unless the artifact exists and can be deployed."""
        artifact = self.load(contract)
        if artifact["bytecode"] in ("", "0x"):
            raise ArtifactNotFoundError(
                f"Artifact {contract} has no bytecode (abstract contract or interface)"
            )

    def factory(self, w3, contract: str):
        self.check(contract)
        artifact = self.load(contract)
        return w3.eth.contract(abi=artifact["abi"], bytecode=artifact["bytecode"])

    def bind(self, w3, contract: str, address: str):
        artifact = self.load(contract)
        return w3.eth.contract(address=address, abi=artifact["abi"])


def build_constructor(factory, args, unit: str):
    """
    Encodes constructor arguments against the factory's ABI.

    A wrong argument count, a value of the wrong type or a struct with the
    wrong field names raises DeploymentError for `unit`.
    """
    try:
        return factory.constructor(*args)
    except (Web3ValidationError, TypeError, ValueError) as e:
        raise DeploymentError(f"Could not encode constructor arguments: {e}", unit) from e
