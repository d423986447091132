"""
Resolves a unit's declared parameters against the config store, external
inputs and constants, collecting every problem before anything is broadcast.
"""

import logging
from collections import OrderedDict
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .errors import IssueKind, ParamIssue, ValidationError
from .models import ConstructorParam, DeploymentUnit, ParamSource, Pending, ResolvedParams, ResolvedUnit
from .validation import coerce, coerce_many, is_blank

logger = logging.getLogger(__name__)


class _Missing(Exception):
    pass


class ParameterResolver:

    def resolve(
        self,
        params: Iterable[ConstructorParam],
        store: Mapping[str, str],
        external: Mapping[str, str],
        deployer: Optional[str] = None,
        deployed: Optional[str] = None,
        pending: Iterable[str] = (),
        unit: Optional[str] = None,
        prefix: str = "",
    ) -> ResolvedParams:
        """
        Resolves params in declaration order.

        Args:
            params: Declared parameters
            store: Config store snapshot
            external: Required external inputs (environment)
            deployer: Signing address, for `deployer` params
            deployed: The unit's produced address, for `self` params
            pending: Store keys that a planned earlier unit will produce
            unit: Unit name attached to the error
            prefix: Prepended to param names in reported issues

        Returns:
            ResolvedParams holding every value

        Raises:
            ValidationError listing every missing or malformed parameter
        """
        resolved, issues = self._collect(params, store, external, deployer, deployed, set(pending), prefix)
        if issues:
            raise ValidationError(issues, unit)
        return resolved

    def resolve_unit(
        self,
        unit: DeploymentUnit,
        store: Mapping[str, str],
        external: Mapping[str, str],
        deployer: Optional[str] = None,
        deployed: Optional[str] = None,
        pending: Iterable[str] = (),
    ) -> ResolvedUnit:
        """Constructor and action params of a unit, validated together."""
        pending = set(pending)
        constructor, issues = self._collect(unit.params, store, external, deployer, deployed, pending, "")
        actions, action_issues = self._collect_actions(unit, store, external, deployer, deployed, pending)
        issues.extend(action_issues)
        if issues:
            logger.error(f"{unit.name}: {len(issues)} invalid parameter(s)")
            raise ValidationError(issues, unit.name)
        return ResolvedUnit(constructor=constructor, actions=actions)

    def resolve_actions(
        self,
        unit: DeploymentUnit,
        store: Mapping[str, str],
        external: Mapping[str, str],
        deployer: Optional[str] = None,
        deployed: Optional[str] = None,
    ) -> List[ResolvedParams]:
        """Action params only, for wiring a unit that is already deployed."""
        actions, issues = self._collect_actions(unit, store, external, deployer, deployed, set())
        if issues:
            logger.error(f"{unit.name}: {len(issues)} invalid action parameter(s)")
            raise ValidationError(issues, unit.name)
        return actions

    def _collect_actions(self, unit, store, external, deployer, deployed, pending):
        actions: List[ResolvedParams] = []
        issues: List[ParamIssue] = []
        for index, action in enumerate(unit.actions):
            prefix = f"actions[{index}].{action.label}."
            values, action_issues = self._collect(
                action.params(), store, external, deployer, deployed, pending, prefix
            )
            actions.append(values)
            issues.extend(action_issues)
        return actions, issues

    def _collect(
        self, params, store, external, deployer, deployed, pending, prefix
    ) -> Tuple[ResolvedParams, List[ParamIssue]]:
        resolved = ResolvedParams(values=OrderedDict())
        issues: List[ParamIssue] = []
        for param in params:
            name = prefix + param.name
            try:
                value = self._resolve_one(param, store, external, deployer, deployed, pending)
            except _Missing as e:
                issues.append(ParamIssue(name, param.lookup_key, IssueKind.MISSING, str(e)))
                continue
            except ValueError as e:
                issues.append(ParamIssue(name, param.lookup_key, IssueKind.MALFORMED, str(e)))
                continue
            resolved.values[param.name] = value
            resolved.groups[param.name] = param.group
        return resolved, issues

    def _resolve_one(self, param, store, external, deployer, deployed, pending) -> Any:
        source = param.source
        if source is ParamSource.LITERAL:
            return param.value

        if source is ParamSource.DEPLOYER:
            if deployer is None:
                raise _Missing("deployer address is not known")
            raw = deployer
        elif source is ParamSource.SELF:
            if deployed is None:
                return Pending(param.lookup_key)
            raw = deployed
        elif source is ParamSource.STORE:
            key = param.lookup_key
            raw = store.get(key)
            if is_blank(raw):
                if key in pending:
                    return Pending(key)
                raise _Missing(f"{key} is not recorded in the config store")
        elif source is ParamSource.EXTERNAL:
            key = param.lookup_key
            raw = external.get(key)
            if is_blank(raw):
                raise _Missing(f"required external input {key} is not set")
        else:
            raise ValueError(f"unsupported parameter source {source!r}")

        if param.many:
            if source is ParamSource.DEPLOYER or source is ParamSource.SELF:
                return [coerce(param.type, raw)]
            return coerce_many(param.type, raw)
        return coerce(param.type, raw)
