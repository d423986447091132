"""
Post-deployment wiring: role grants, ownership transfers and phased
initialization, executed strictly in order against a deployed unit.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from web3 import Web3

from .estimator import DEFAULT_ACTION_FALLBACK, DEFAULT_ACTION_MULTIPLIER
from .models import ConstructorParam, DeploymentRecord, DeploymentUnit, ResolvedParams
from .validation import same_address

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_ROLE = b"\x00" * 32

ACCESS_CONTROL_ABI = [
    {
        "inputs": [
            {"internalType": "bytes32", "name": "role", "type": "bytes32"},
            {"internalType": "address", "name": "account", "type": "address"},
        ],
        "name": "hasRole",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "bytes32", "name": "role", "type": "bytes32"},
            {"internalType": "address", "name": "account", "type": "address"},
        ],
        "name": "grantRole",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

OWNABLE_ABI = [
    {
        "inputs": [],
        "name": "owner",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "address", "name": "newOwner", "type": "address"}],
        "name": "transferOwnership",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


def role_id(role: str) -> bytes:
    """MINTER_ROLE -> keccak256("MINTER_ROLE"); 0x-prefixed 32-byte hex is taken as-is."""
    if role == "DEFAULT_ADMIN_ROLE":
        return DEFAULT_ADMIN_ROLE
    if role.startswith("0x") and len(role) == 66:
        return Web3.to_bytes(hexstr=role)
    return bytes(Web3.keccak(text=role))


class ActionStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"
    NOT_ATTEMPTED = "not_attempted"


@dataclass
class ActionOutcome:
    index: int
    label: str
    status: ActionStatus
    reason: Optional[str] = None
    tx_hash: Optional[str] = None


@dataclass
class ActionReport:
    unit: str
    outcomes: List[ActionOutcome] = field(default_factory=list)

    def _with(self, status):
        return [outcome for outcome in self.outcomes if outcome.status is status]

    @property
    def completed(self) -> List[ActionOutcome]:
        return self._with(ActionStatus.COMPLETED)

    @property
    def skipped(self) -> List[ActionOutcome]:
        return self._with(ActionStatus.SKIPPED)

    @property
    def not_attempted(self) -> List[ActionOutcome]:
        return self._with(ActionStatus.NOT_ATTEMPTED)

    @property
    def failed(self) -> Optional[ActionOutcome]:
        failures = self._with(ActionStatus.FAILED)
        return failures[0] if failures else None

    @property
    def ok(self) -> bool:
        return self.failed is None and not self.not_attempted

    def summary(self) -> str:
        return (
            f"{self.unit}: {len(self.completed)} completed, {len(self.skipped)} skipped, "
            f"{len(self._with(ActionStatus.FAILED))} failed, {len(self.not_attempted)} not attempted"
        )


@dataclass
class DeployedUnit:
    """A unit that exists on-chain, with its action params bound."""
    unit: DeploymentUnit
    address: str
    contract: Any
    bindings: List[ResolvedParams]
    record: Optional[DeploymentRecord] = None


@dataclass
class ActionContext:
    w3: Any
    deployed: DeployedUnit
    values: ResolvedParams

    def at(self, address: str, abi):
        return self.w3.eth.contract(address=address, abi=abi)


class PostDeployAction:
    """Base class for wiring steps; subclasses are dataclasses."""

    gas_multiplier: float = DEFAULT_ACTION_MULTIPLIER
    gas_fallback: int = DEFAULT_ACTION_FALLBACK

    @property
    def label(self) -> str:
        raise NotImplementedError

    def params(self) -> List[ConstructorParam]:
        return []

    def is_satisfied(self, ctx: ActionContext) -> bool:
        """Idempotency predicate, evaluated against current chain state."""
        raise NotImplementedError

    def call(self, ctx: ActionContext):
        """The contract function call to transact."""
        raise NotImplementedError

    def _check_names(self):
        names = [param.name for param in self.params()]
        if len(names) != len(set(names)):
            raise ValueError(f"{self.label}: action parameter names must be unique, got {names}")


@dataclass
class GrantRole(PostDeployAction):
    """
    Grants `role` to `grantee` on `target` (the deployed unit itself when no
    target is given). Skipped when hasRole already returns true.
    """
    role: str
    grantee: ConstructorParam = field(default_factory=lambda: ConstructorParam.deployer("grantee"))
    target: Optional[ConstructorParam] = None

    def __post_init__(self):
        self._check_names()

    @property
    def label(self) -> str:
        return f"grantRole({self.role})"

    def params(self) -> List[ConstructorParam]:
        params = [self.grantee]
        if self.target is not None:
            params.append(self.target)
        return params

    def _contract(self, ctx: ActionContext):
        address = ctx.values[self.target.name] if self.target is not None else ctx.deployed.address
        return ctx.at(address, ACCESS_CONTROL_ABI)

    def is_satisfied(self, ctx: ActionContext) -> bool:
        grantee = ctx.values[self.grantee.name]
        return bool(self._contract(ctx).functions.hasRole(role_id(self.role), grantee).call())

    def call(self, ctx: ActionContext):
        grantee = ctx.values[self.grantee.name]
        return self._contract(ctx).functions.grantRole(role_id(self.role), grantee)


@dataclass
class TransferOwnership(PostDeployAction):
    """Skipped when owner() already is the new owner."""
    new_owner: ConstructorParam

    @property
    def label(self) -> str:
        return "transferOwnership"

    def params(self) -> List[ConstructorParam]:
        return [self.new_owner]

    def is_satisfied(self, ctx: ActionContext) -> bool:
        contract = ctx.at(ctx.deployed.address, OWNABLE_ABI)
        return same_address(contract.functions.owner().call(), ctx.values[self.new_owner.name])

    def call(self, ctx: ActionContext):
        contract = ctx.at(ctx.deployed.address, OWNABLE_ABI)
        return contract.functions.transferOwnership(ctx.values[self.new_owner.name])


@dataclass
class InitializePhase(PostDeployAction):
    """
    Calls `function(*args)` on the deployed unit.

    `done_when` names a view function on the unit: the phase counts as done
    when it returns a truthy value, or a value equal to `expect` when given.
    Without `done_when` the phase is always executed.
    """
    function: str
    args: List[ConstructorParam] = field(default_factory=list)
    done_when: Optional[str] = None
    expect: Optional[ConstructorParam] = None
    gas_fallback: int = DEFAULT_ACTION_FALLBACK

    def __post_init__(self):
        if self.expect is not None and self.done_when is None:
            raise ValueError(f"{self.function}: expect requires done_when")
        self._check_names()

    @property
    def label(self) -> str:
        return self.function

    def params(self) -> List[ConstructorParam]:
        params = list(self.args)
        if self.expect is not None:
            params.append(self.expect)
        return params

    def is_satisfied(self, ctx: ActionContext) -> bool:
        if self.done_when is None:
            return False
        current = getattr(ctx.deployed.contract.functions, self.done_when)().call()
        if self.expect is None:
            return bool(current)
        expected = ctx.values[self.expect.name]
        if isinstance(expected, str) and isinstance(current, str):
            return same_address(current, expected)
        return current == expected

    def call(self, ctx: ActionContext):
        args = [ctx.values[param.name] for param in self.args]
        return getattr(ctx.deployed.contract.functions, self.function)(*args)


class PostDeployActionsRunner:
    """Runs actions in declared order and stops at the first failure."""

    def __init__(self, sender, estimator):
        self.sender = sender
        self.estimator = estimator

    def run(self, deployed: DeployedUnit, actions: List[PostDeployAction]) -> ActionReport:
        name = deployed.unit.name
        report = ActionReport(unit=name)
        stopped = False

        for index, action in enumerate(actions):
            label = f"{name}:{action.label}"
            if stopped:
                report.outcomes.append(ActionOutcome(index, action.label, ActionStatus.NOT_ATTEMPTED))
                continue

            ctx = ActionContext(w3=self.sender.w3, deployed=deployed, values=deployed.bindings[index])
            try:
                if action.is_satisfied(ctx):
                    logger.info(f"{label}: already satisfied, skipping")
                    report.outcomes.append(ActionOutcome(index, action.label, ActionStatus.SKIPPED))
                    continue

                call = action.call(ctx)
                budget = self.estimator.estimate_call(
                    call, label, multiplier=action.gas_multiplier, fallback=action.gas_fallback
                )
                tx = call.build_transaction(self.sender.base_transaction(budget.gas))
                receipt = self.sender.send(tx, label)
            except Exception as e:
                logger.error(f"{label} failed: {e}")
                report.outcomes.append(ActionOutcome(index, action.label, ActionStatus.FAILED, reason=str(e)))
                stopped = True
                continue

            tx_hash = Web3.to_hex(receipt["transactionHash"])
            logger.info(f"✅ {label} completed ({tx_hash})")
            report.outcomes.append(ActionOutcome(index, action.label, ActionStatus.COMPLETED, tx_hash=tx_hash))

        logger.info(report.summary())
        return report
