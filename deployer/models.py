"""
Deployment unit descriptors and the records produced by a run.
"""

from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Optional, Set

if TYPE_CHECKING:
    from .actions import PostDeployAction


class ParamType(str, Enum):
    ADDRESS = "address"
    INTEGER = "integer"
    STRING = "string"
    BYTES = "bytes"


class ParamSource(str, Enum):
    EXTERNAL = "requiredExternal"
    STORE = "configStoreKey"
    LITERAL = "literalConstant"
    DEPLOYER = "deployer"
    SELF = "self"


@dataclass(frozen=True)
class ConstructorParam:
    """
    A single typed input of a unit.

    Args:
        name: Argument label, unique within its unit
        type: Declared type checked for external and store values
        source: Where the value comes from
        key: Store key or external input name (defaults to name)
        value: Constant for literal params
        many: Value is a comma-separated list of `type`
        group: Consecutive params sharing a group are passed as one struct
    """
    name: str
    type: ParamType = ParamType.ADDRESS
    source: ParamSource = ParamSource.STORE
    key: Optional[str] = None
    value: Any = None
    many: bool = False
    group: Optional[str] = None

    @property
    def lookup_key(self) -> str:
        return self.key or self.name

    @classmethod
    def store(cls, name, key=None, type=ParamType.ADDRESS, **kwargs):
        return cls(name, type, ParamSource.STORE, key=key, **kwargs)

    @classmethod
    def external(cls, name, key=None, type=ParamType.ADDRESS, **kwargs):
        return cls(name, type, ParamSource.EXTERNAL, key=key, **kwargs)

    @classmethod
    def literal(cls, name, value, type=ParamType.STRING, **kwargs):
        return cls(name, type, ParamSource.LITERAL, value=value, **kwargs)

    @classmethod
    def deployer(cls, name="deployer", **kwargs):
        return cls(name, ParamType.ADDRESS, ParamSource.DEPLOYER, **kwargs)

    @classmethod
    def deployed(cls, name="self"):
        return cls(name, ParamType.ADDRESS, ParamSource.SELF)


@dataclass
class DeploymentUnit:
    """Static descriptor of one module deployment."""
    name: str
    contract: str
    output_key: str
    params: List[ConstructorParam] = field(default_factory=list)
    actions: List["PostDeployAction"] = field(default_factory=list)
    section: Optional[str] = None
    gas_multiplier: float = 1.3
    gas_fallback: int = 3_000_000
    chain_ids: Optional[FrozenSet[int]] = None

    def __post_init__(self):
        if self.gas_multiplier <= 1.0:
            raise ValueError(f"{self.name}: gas multiplier must be greater than 1, got {self.gas_multiplier}")
        if self.gas_fallback <= 0:
            raise ValueError(f"{self.name}: gas fallback must be positive, got {self.gas_fallback}")
        names = [param.name for param in self.params]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"{self.name}: duplicate parameter names {duplicates}")
        if any(param.source is ParamSource.SELF for param in self.params):
            raise ValueError(f"{self.name}: constructor params cannot reference the unit's own address")
        if self.section is None:
            self.section = self.name
        if self.chain_ids is not None:
            self.chain_ids = frozenset(self.chain_ids)

    @property
    def dependencies(self) -> Set[str]:
        """Config store keys read by the constructor or by any action."""
        params = list(self.params)
        for action in self.actions:
            params.extend(action.params())
        return {param.lookup_key for param in params if param.source is ParamSource.STORE}

    def runs_on(self, chain_id: int) -> bool:
        return self.chain_ids is None or chain_id in self.chain_ids


class Pending:
    """Placeholder for a value that only exists once an earlier step has run."""

    def __init__(self, key: str):
        self.key = key

    def __repr__(self):
        return f"<pending {self.key}>"

    def __eq__(self, other):
        return isinstance(other, Pending) and other.key == self.key

    def __hash__(self):
        return hash(("pending", self.key))


@dataclass
class ResolvedParams:
    """Validated values in declaration order."""
    values: "OrderedDict[str, Any]" = field(default_factory=OrderedDict)
    groups: Dict[str, Optional[str]] = field(default_factory=dict)

    def __getitem__(self, name):
        return self.values[name]

    def __contains__(self, name):
        return name in self.values

    @property
    def args(self) -> List[Any]:
        """Positional arguments, grouped params folded into one struct each."""
        args: List[Any] = []
        current_group = None
        for name, value in self.values.items():
            group = self.groups.get(name)
            if group is None:
                current_group = None
                args.append(value)
            elif group == current_group:
                args[-1][name] = value
            else:
                current_group = group
                args.append({name: value})
        return args

    @property
    def pending(self) -> List[str]:
        return [name for name, value in self.values.items() if isinstance(value, Pending)]


@dataclass
class ResolvedUnit:
    constructor: ResolvedParams
    actions: List[ResolvedParams] = field(default_factory=list)


@dataclass(frozen=True)
class NetworkProfile:
    chain_id: int
    name: str
    is_production: bool = False


@dataclass(frozen=True)
class ResourceBudget:
    gas: int
    estimated: Optional[int] = None
    multiplier: float = 1.0
    fallback: Optional[Exception] = None

    @property
    def used_fallback(self) -> bool:
        return self.fallback is not None


@dataclass(frozen=True)
class DeploymentRecord:
    unit: str
    address: str
    deployer: str
    network: str
    chain_id: int
    tx_hash: str
    block_number: int
    block_hash: str
    timestamp: str
    gas_used: Optional[int] = None
    gas_limit: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
