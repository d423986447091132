"""
Submits a unit's creation transaction and turns the receipt into a DeploymentRecord.
"""

import logging
from datetime import datetime, timezone

from web3 import Web3
from web3.exceptions import Web3ValidationError

from .artifacts import build_constructor
from .errors import DeploymentError, DeploymentRevertedError, MinedUnconfirmedError
from .models import DeploymentRecord, DeploymentUnit, NetworkProfile, ResolvedParams, ResourceBudget

logger = logging.getLogger(__name__)


class DeploymentExecutor:
    def __init__(self, sender, artifacts, network: NetworkProfile):
        self.sender = sender
        self.artifacts = artifacts
        self.network = network

    @property
    def w3(self):
        return self.sender.w3

    def deploy(self, unit: DeploymentUnit, resolved: ResolvedParams, budget: ResourceBudget) -> DeploymentRecord:
        factory = self.artifacts.factory(self.w3, unit.contract)
        constructor = build_constructor(factory, resolved.args, unit.name)
        try:
            tx = constructor.build_transaction(self.sender.base_transaction(budget.gas))
        except (Web3ValidationError, TypeError, ValueError) as e:
            raise DeploymentError(f"Could not build the creation transaction: {e}", unit.name) from e

        logger.info(f"Deploying {unit.name} ({unit.contract}) with gas limit {budget.gas:,}")
        try:
            receipt = self.sender.send(tx, unit.name)
        except MinedUnconfirmedError as e:
            if e.address:
                e.address = Web3.to_checksum_address(e.address)
                logger.error(f"❌ {unit.name} was created at {e.address} but is not confirmed")
            raise

        address = receipt.get("contractAddress")
        if not address:
            raise DeploymentRevertedError(
                "receipt has no contract address", unit=unit.name, tx_hash=Web3.to_hex(receipt["transactionHash"])
            )

        record = DeploymentRecord(
            unit=unit.name,
            address=Web3.to_checksum_address(address),
            deployer=self.sender.address,
            network=self.network.name,
            chain_id=self.network.chain_id,
            tx_hash=Web3.to_hex(receipt["transactionHash"]),
            block_number=receipt["blockNumber"],
            block_hash=Web3.to_hex(receipt["blockHash"]),
            timestamp=self._block_time(receipt["blockNumber"]),
            gas_used=receipt.get("gasUsed"),
            gas_limit=budget.gas,
        )
        logger.info(f"✅ {unit.name} deployed at {record.address}")
        return record

    def _block_time(self, block_number: int) -> str:
        # The contract already exists at this point; a failed block lookup must not lose it.
        try:
            seconds = self.w3.eth.get_block(block_number)["timestamp"]
        except Exception as e:
            logger.warning(f"Could not read block {block_number} timestamp, using local time: {e}")
            return datetime.now(timezone.utc).isoformat()
        return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()
