"""
Per-unit pipeline and whole-system runs.

    NetworkGuard.validate -> Resolver.resolve -> Estimator.estimate
        -> Executor.deploy -> PersistenceWriter.append -> ActionsRunner.run

Guard, resolver and executor failures are fatal: the run halts and no
downstream unit is attempted. A post-deploy failure leaves the unit deployed
and recorded; it is reported as a PartialDeploymentError and, unless
`halt_on_partial` is set, the run moves on to the next unit.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional

from .actions import ActionOutcome, ActionReport, ActionStatus, DeployedUnit
from .errors import (
    DependencyCycleError,
    DeploymentError,
    DeploymentWarning,
    IssueKind,
    MinedUnconfirmedError,
    ParamIssue,
    PartialDeploymentError,
    ValidationError,
)
from .models import DeploymentRecord, DeploymentUnit, NetworkProfile, ResourceBudget
from .persistence import PersistenceWriter, WriteResult
from .validation import coerce_address

logger = logging.getLogger(__name__)


class UnitStatus(str, Enum):
    DEPLOYED = "deployed"
    PARTIAL = "partial"
    ALREADY_DEPLOYED = "already_deployed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class UnitOutcome:
    unit: str
    status: UnitStatus
    address: Optional[str] = None
    record: Optional[DeploymentRecord] = None
    budget: Optional[ResourceBudget] = None
    write: Optional[WriteResult] = None
    report: Optional[ActionReport] = None
    error: Optional[DeploymentError] = None
    warnings: List[DeploymentWarning] = field(default_factory=list)


@dataclass
class RunReport:
    network: NetworkProfile
    outcomes: List[UnitOutcome] = field(default_factory=list)
    halted: bool = False
    error: Optional[DeploymentError] = None
    not_attempted: List[str] = field(default_factory=list)

    def outcome(self, unit: str) -> Optional[UnitOutcome]:
        for outcome in self.outcomes:
            if outcome.unit == unit:
                return outcome
        return None

    @property
    def records(self) -> List[DeploymentRecord]:
        return [outcome.record for outcome in self.outcomes if outcome.record is not None]

    @property
    def partial(self) -> List[PartialDeploymentError]:
        return [
            outcome.error for outcome in self.outcomes
            if outcome.status is UnitStatus.PARTIAL and outcome.error is not None
        ]

    @property
    def ok(self) -> bool:
        return not self.halted and not self.partial

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def summary(self) -> str:
        lines = [f"--- Deployment summary ({self.network.name}, chainId {self.network.chain_id}) ---"]
        for outcome in self.outcomes:
            line = f"{outcome.unit}: {outcome.status.value}"
            if outcome.address:
                line += f" at {outcome.address}"
            if outcome.error is not None:
                line += f" ({outcome.error})"
            lines.append(line)
        if self.not_attempted:
            lines.append(f"Not attempted: {', '.join(self.not_attempted)}")
        if self.halted:
            lines.append(f"Run HALTED: {self.error}")
        return "\n".join(lines)


class PlanStatus(str, Enum):
    DEPLOY = "deploy"
    RECORDED = "recorded"
    SKIPPED = "skipped"
    INVALID = "invalid"


@dataclass
class PlanEntry:
    unit: str
    status: PlanStatus
    pending: List[str] = field(default_factory=list)
    error: Optional[DeploymentError] = None


@dataclass
class PlanReport:
    network: NetworkProfile
    entries: List[PlanEntry] = field(default_factory=list)
    error: Optional[DeploymentError] = None

    @property
    def errors(self) -> List[DeploymentError]:
        errors = [self.error] if self.error is not None else []
        errors.extend(entry.error for entry in self.entries if entry.error is not None)
        return errors

    @property
    def ok(self) -> bool:
        return not self.errors


def order_units(units: Iterable[DeploymentUnit]) -> List[DeploymentUnit]:
    """
    Producers before consumers, otherwise keeping the given order.

    A unit depends on another when it reads a config store key that the
    other unit produces. Keys nobody in `units` produces are expected to be
    in the store already.
    """
    units = list(units)
    producers: Dict[str, DeploymentUnit] = {}
    names = set()
    for unit in units:
        if unit.name in names:
            raise DependencyCycleError(f"Unit {unit.name} is listed twice")
        names.add(unit.name)
        other = producers.get(unit.output_key)
        if other is not None:
            raise DependencyCycleError(f"{other.name} and {unit.name} both produce {unit.output_key}")
        producers[unit.output_key] = unit

    requires = {
        unit.name: {producers[key].name for key in unit.dependencies if key in producers}
        for unit in units
    }

    ordered: List[DeploymentUnit] = []
    placed = set()
    remaining = list(units)
    while remaining:
        ready = next((unit for unit in remaining if requires[unit.name] <= placed), None)
        if ready is None:
            raise DependencyCycleError(
                f"Dependency cycle among: {', '.join(unit.name for unit in remaining)}"
            )
        ordered.append(ready)
        placed.add(ready.name)
        remaining.remove(ready)
    return ordered


class Orchestrator:
    def __init__(
        self,
        store,
        guard,
        resolver,
        estimator,
        executor,
        runner,
        artifacts,
        writer: Optional[PersistenceWriter] = None,
        records=None,
        external: Optional[Mapping[str, str]] = None,
        deployer: Optional[str] = None,
        halt_on_partial: bool = False,
        resume_wiring: bool = True,
    ):
        self.store = store
        self.guard = guard
        self.resolver = resolver
        self.estimator = estimator
        self.executor = executor
        self.runner = runner
        self.artifacts = artifacts
        self.writer = writer or PersistenceWriter()
        self.records = records
        self.external = dict(external or {})
        self.deployer = deployer
        self.halt_on_partial = halt_on_partial
        self.resume_wiring = resume_wiring

    def run(self, units: Iterable[DeploymentUnit], profile: NetworkProfile) -> RunReport:
        """Deploys `units` in dependency order, halting at the first fatal failure."""
        report = RunReport(network=profile)
        try:
            self.guard.validate(profile)
            ordered = order_units(units)
        except DeploymentError as e:
            logger.error(f"❌ Run aborted before any transaction: {e}")
            report.halted = True
            report.error = e
            return report

        logger.info(f"Deployment order: {' -> '.join(unit.name for unit in ordered)}")
        for position, unit in enumerate(ordered):
            outcome = self.run_unit(unit, profile)
            report.outcomes.append(outcome)

            halt = outcome.status is UnitStatus.FAILED or (
                outcome.status is UnitStatus.PARTIAL and self.halt_on_partial
            )
            if halt:
                report.halted = True
                report.error = outcome.error
                report.not_attempted = [later.name for later in ordered[position + 1:]]
                logger.error(f"❌ Halting run at {unit.name}: {outcome.error}")
                break

        logger.info(report.summary())
        return report

    def run_unit(self, unit: DeploymentUnit, profile: NetworkProfile) -> UnitOutcome:
        try:
            return self._run_unit(unit, profile)
        except DeploymentError as e:
            if e.unit is None:
                e.unit = unit.name
            logger.error(f"❌ {unit.name} failed: {e}")
            address = e.address if isinstance(e, MinedUnconfirmedError) else None
            return UnitOutcome(unit.name, UnitStatus.FAILED, address=address, error=e)

    def _run_unit(self, unit: DeploymentUnit, profile: NetworkProfile) -> UnitOutcome:
        self.guard.validate(profile)
        if not unit.runs_on(profile.chain_id):
            logger.warning(f"⚠️ {unit.name} only deploys on chain ids {sorted(unit.chain_ids)}; skipping on {profile.name}")
            return UnitOutcome(unit.name, UnitStatus.SKIPPED)

        snapshot = self.store.snapshot()
        if unit.output_key in snapshot:
            return self._already_deployed(unit, snapshot)

        logger.info(f"🚀 {unit.name}: resolving {len(unit.params)} parameter(s)")
        self.artifacts.check(unit.contract)
        resolved = self.resolver.resolve_unit(unit, snapshot, self.external, deployer=self.deployer)
        budget = self.estimator.estimate(unit, resolved.constructor)
        try:
            record = self.executor.deploy(unit, resolved.constructor, budget)
        except MinedUnconfirmedError as e:
            # Mined contracts are recorded even when the run halts on them.
            if e.address:
                self.writer.append(self.store, unit.output_key, e.address, section=unit.section)
            raise

        # The unit exists on-chain from here on; wiring problems only make it partial.
        outcome = UnitOutcome(unit.name, UnitStatus.DEPLOYED, address=record.address, record=record, budget=budget)
        if budget.fallback is not None:
            outcome.warnings.append(budget.fallback)

        outcome.write = self.writer.append(self.store, unit.output_key, record.address, section=unit.section)
        if outcome.write is WriteResult.SKIPPED:
            outcome.warnings.append(self.writer.conflicts[-1])
        if self.records is not None:
            self.records.write(record)

        if unit.actions:
            self._wire(unit, record.address, outcome, record)
        return outcome

    def _already_deployed(self, unit: DeploymentUnit, snapshot: Mapping[str, str]) -> UnitOutcome:
        try:
            address = coerce_address(snapshot[unit.output_key])
        except ValueError as e:
            raise ValidationError(
                [ParamIssue(unit.output_key, unit.output_key, IssueKind.MALFORMED, str(e))], unit.name
            ) from None

        logger.info(f"{unit.name} already recorded as {unit.output_key}={address}; not redeploying")
        outcome = UnitOutcome(unit.name, UnitStatus.ALREADY_DEPLOYED, address=address)
        if self.resume_wiring and unit.actions:
            self._wire(unit, address, outcome)
        return outcome

    def _wire(self, unit: DeploymentUnit, address: str, outcome: UnitOutcome, record=None) -> None:
        try:
            bindings = self.resolver.resolve_actions(
                unit, self.store.snapshot(), self.external, deployer=self.deployer, deployed=address
            )
            contract = self.artifacts.bind(self.executor.w3, unit.contract, address)
        except DeploymentError as e:
            outcome.report = self._unstarted_report(unit, str(e))
        else:
            deployed = DeployedUnit(unit=unit, address=address, contract=contract, bindings=bindings, record=record)
            outcome.report = self.runner.run(deployed, unit.actions)

        if not outcome.report.ok:
            outcome.status = UnitStatus.PARTIAL
            outcome.error = PartialDeploymentError(unit.name, address, outcome.report, record=record)
            logger.error(f"⚠️ {outcome.error}")

    @staticmethod
    def _unstarted_report(unit: DeploymentUnit, reason: str) -> ActionReport:
        report = ActionReport(unit=unit.name)
        for index, action in enumerate(unit.actions):
            if index == 0:
                report.outcomes.append(ActionOutcome(index, action.label, ActionStatus.FAILED, reason=reason))
            else:
                report.outcomes.append(ActionOutcome(index, action.label, ActionStatus.NOT_ATTEMPTED))
        logger.error(f"{unit.name}: wiring could not start: {reason}")
        return report

    def plan(self, units: Iterable[DeploymentUnit], profile: NetworkProfile) -> PlanReport:
        """
        Validates a whole run without sending anything: network, ordering,
        artifacts and every unit's parameters, with the outputs of earlier
        planned units treated as pending.
        """
        plan = PlanReport(network=profile)
        try:
            self.guard.validate(profile)
            ordered = order_units(units)
        except DeploymentError as e:
            plan.error = e
            return plan

        snapshot = self.store.snapshot()
        pending = set()
        for unit in ordered:
            if not unit.runs_on(profile.chain_id):
                plan.entries.append(PlanEntry(unit.name, PlanStatus.SKIPPED))
                continue
            if unit.output_key in snapshot:
                plan.entries.append(PlanEntry(unit.name, PlanStatus.RECORDED))
                continue
            try:
                self.artifacts.check(unit.contract)
                resolved = self.resolver.resolve_unit(
                    unit, snapshot, self.external, deployer=self.deployer, pending=pending
                )
            except DeploymentError as e:
                plan.entries.append(PlanEntry(unit.name, PlanStatus.INVALID, error=e))
                continue
            plan.entries.append(PlanEntry(unit.name, PlanStatus.DEPLOY, pending=resolved.constructor.pending))
            pending.add(unit.output_key)

        for entry in plan.entries:
            if entry.error is not None:
                logger.error(f"Plan: {entry.unit} invalid: {entry.error}")
            else:
                logger.info(f"Plan: {entry.unit} -> {entry.status.value}")
        return plan
