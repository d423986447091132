"""
Failure and warning types raised or reported by the deployment pipeline.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional


class DeploymentError(Exception):
    """Base class for pipeline failures."""

    fatal = True

    def __init__(self, message: str, unit: Optional[str] = None):
        super().__init__(message)
        self.unit = unit

    def __str__(self):
        message = super().__str__()
        if self.unit:
            return f"[{self.unit}] {message}"
        return message


class IssueKind(str, Enum):
    MISSING = "missing"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ParamIssue:
    """One offending parameter inside an aggregated ValidationError."""
    name: str
    key: str
    kind: IssueKind
    reason: str

    def __str__(self):
        if self.name == self.key:
            return f"{self.key} ({self.kind.value}): {self.reason}"
        return f"{self.name} <- {self.key} ({self.kind.value}): {self.reason}"


class ValidationError(DeploymentError):
    """Every missing or malformed parameter of a unit, collected in one error."""

    def __init__(self, issues: Iterable[ParamIssue], unit: Optional[str] = None):
        self.issues: List[ParamIssue] = list(issues)
        details = "; ".join(str(issue) for issue in self.issues)
        super().__init__(f"{len(self.issues)} invalid parameter(s): {details}", unit)

    @property
    def keys(self) -> List[str]:
        return [issue.key for issue in self.issues]

    @property
    def missing(self) -> List[ParamIssue]:
        return [issue for issue in self.issues if issue.kind is IssueKind.MISSING]

    @property
    def malformed(self) -> List[ParamIssue]:
        return [issue for issue in self.issues if issue.kind is IssueKind.MALFORMED]


class UnsafeNetworkError(DeploymentError):
    def __init__(self, chain_id: int, name: str, allowed: Iterable[int], unit: Optional[str] = None):
        self.chain_id = chain_id
        self.network = name
        self.allowed = sorted(allowed)
        super().__init__(
            f"Unsafe network {name} (chainId {chain_id}); allowed chain ids: {self.allowed or 'none'}",
            unit,
        )


class ArtifactNotFoundError(DeploymentError):
    pass


class DependencyCycleError(DeploymentError):
    pass


class DeploymentRevertedError(DeploymentError):
    def __init__(self, reason: str, unit: Optional[str] = None, tx_hash: Optional[str] = None):
        self.reason = reason
        self.tx_hash = tx_hash
        suffix = f" (tx {tx_hash})" if tx_hash else ""
        super().__init__(f"Transaction reverted: {reason}{suffix}", unit)


class ConfirmationTimeoutError(DeploymentError):
    """The wait for confirmation ran out; the broadcast transaction may still land."""

    def __init__(self, tx_hash: str, timeout: float, unit: Optional[str] = None):
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(
            f"Transaction {tx_hash} not confirmed within {timeout:g}s; "
            "it may still be mined, reconcile manually before rerunning",
            unit,
        )


class MinedUnconfirmedError(ConfirmationTimeoutError):
    """
    The transaction is mined with status 1 but its confirmation depth could
    not be established. `address` is the created contract, if any.
    """

    def __init__(self, tx_hash: str, receipt: Any, reason: str, timeout: float = 0, unit: Optional[str] = None):
        self.tx_hash = tx_hash
        self.timeout = timeout
        self.receipt = receipt
        self.reason = reason
        self.address = receipt.get("contractAddress")
        created = f"; created contract {self.address}" if self.address else ""
        DeploymentError.__init__(
            self,
            f"Transaction {tx_hash} mined in block {receipt['blockNumber']} but not confirmed: {reason}{created}",
            unit,
        )


class PartialDeploymentError(DeploymentError):
    """The unit is deployed and recorded but its wiring stopped at a failed action."""

    fatal = False

    def __init__(self, unit: str, address: str, report: Any, record: Any = None):
        self.address = address
        self.report = report
        self.record = record
        failed = report.failed
        detail = f"{failed.label} failed: {failed.reason}" if failed else "wiring incomplete"
        super().__init__(f"Deployed at {address} but post-deploy wiring stopped; {detail}", unit)

    @property
    def failed_action(self) -> Optional[str]:
        return self.report.failed.label if self.report.failed else None


class DeploymentWarning(UserWarning):
    """Non-fatal condition attached to a unit outcome."""


class GasEstimationFallback(DeploymentWarning):
    def __init__(self, label: str, fallback: int, cause: BaseException):
        self.label = label
        self.fallback = fallback
        self.cause = cause
        super().__init__(f"Gas estimation failed for {label}, using fallback {fallback:,}: {cause}")


class PersistenceConflictError(DeploymentWarning):
    def __init__(self, key: str, existing: Optional[str], attempted: str):
        self.key = key
        self.existing = existing
        self.attempted = attempted
        super().__init__(
            f"{key} already exists in config store ({existing}); not overwriting with {attempted}. "
            "Update manually if needed."
        )
