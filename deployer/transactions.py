"""
Signs, broadcasts and confirms transactions for the single deployer identity.
"""

import logging
import time
from typing import Any, Dict, Optional

from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from .errors import ConfirmationTimeoutError, DeploymentRevertedError, MinedUnconfirmedError

logger = logging.getLogger(__name__)

REPLAY_FIELDS = ("from", "to", "data", "value", "gas")


class TransactionSender:
    """
    Transactions from one account are nonce-ordered, so a sender sends one
    transaction at a time and waits for it before building the next.
    """

    def __init__(
        self,
        w3: Web3,
        account: Any,
        confirmations: int = 1,
        timeout: float = 300,
        poll_latency: float = 2.0,
        gas_price: Optional[int] = None,
    ):
        if confirmations < 1:
            raise ValueError("confirmations must be at least 1")
        self.w3 = w3
        self.account = account
        self.confirmations = confirmations
        self.timeout = timeout
        self.poll_latency = poll_latency
        self.gas_price = gas_price

    @property
    def address(self) -> str:
        return self.account.address

    def base_transaction(self, gas: int) -> Dict[str, Any]:
        return {
            "from": self.address,
            "nonce": self.w3.eth.get_transaction_count(self.address, "pending"),
            "gas": gas,
            "gasPrice": self.gas_price if self.gas_price is not None else self.w3.eth.gas_price,
            "chainId": self.w3.eth.chain_id,
        }

    def send(self, tx: Dict[str, Any], label: str):
        """
        Signs and broadcasts `tx`, then waits for the configured confirmation depth.

        Returns the receipt. Raises DeploymentRevertedError when the node rejects
        the transaction or it is mined with status 0, ConfirmationTimeoutError
        when no receipt arrives in time, and MinedUnconfirmedError (which keeps
        the receipt) when the depth wait fails after the receipt is in.
        """
        signed = self.account.sign_transaction(tx)
        try:
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except ContractLogicError as e:
            raise DeploymentRevertedError(e.message or str(e), unit=label) from e
        except (Web3Exception, ValueError) as e:
            raise DeploymentRevertedError(f"rejected by node: {e}", unit=label) from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(f"{label}: transaction sent {tx_hash_hex}")
        receipt = self.wait(tx_hash, label)

        if receipt["status"] != 1:
            reason = self.revert_reason(tx, receipt)
            logger.error(f"{label}: transaction {tx_hash_hex} reverted: {reason}")
            raise DeploymentRevertedError(reason, unit=label, tx_hash=tx_hash_hex)

        logger.info(f"{label}: confirmed in block {receipt['blockNumber']}")
        return receipt

    def wait(self, tx_hash, label: str):
        tx_hash_hex = Web3.to_hex(tx_hash)
        deadline = time.monotonic() + self.timeout
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.timeout, poll_latency=self.poll_latency
            )
        except TimeExhausted:
            logger.error(f"{label}: no receipt for {tx_hash_hex} after {self.timeout:g}s")
            raise ConfirmationTimeoutError(tx_hash_hex, self.timeout, unit=label) from None

        # the inclusion block counts as the first confirmation
        if self.confirmations == 1:
            return receipt

        while True:
            try:
                depth = self.w3.eth.block_number - receipt["blockNumber"] + 1
            except (Web3Exception, OSError) as e:
                error = MinedUnconfirmedError(
                    tx_hash_hex, receipt, f"could not read the block number: {e}", self.timeout, unit=label
                )
                logger.error(f"{label}: {error}")
                raise error from e
            if depth >= self.confirmations:
                return receipt
            if time.monotonic() >= deadline:
                error = MinedUnconfirmedError(
                    tx_hash_hex, receipt, f"not {self.confirmations} blocks deep after {self.timeout:g}s",
                    self.timeout, unit=label,
                )
                logger.error(f"{label}: {error}")
                raise error
            time.sleep(self.poll_latency)

    def revert_reason(self, tx: Dict[str, Any], receipt) -> str:
        """Replays the transaction at its block to recover the revert message."""
        call = {field: tx[field] for field in REPLAY_FIELDS if field in tx}
        try:
            self.w3.eth.call(call, receipt["blockNumber"])
        except ContractLogicError as e:
            return e.message or str(e)
        except Exception as e:
            logger.debug(f"Could not replay reverted transaction: {e}")
            return "execution reverted (reason unavailable)"
        return "execution reverted without a reason"
