"""
Domain models shared by every stage of the engine.
Defines environments, application tiers, node specs and the
per-environment override lookup.
"""
from typing import Dict, Any, Optional, Mapping, TypeVar, Tuple, Iterator
from dataclasses import dataclass, replace
from enum import Enum


T = TypeVar("T")


class EnvironmentKind(str, Enum):
    """Deployment environment."""
    DEV = "dev"
    TEST = "test"
    STAGE = "stage"
    PROD = "prod"
    DR = "dr"

    @property
    def display_name(self) -> str:
        return ENVIRONMENT_DISPLAY_NAMES[self]

    @property
    def is_production_like(self) -> bool:
        """Prod and DR share production defaults wherever a fallback applies."""
        return self in (EnvironmentKind.PROD, EnvironmentKind.DR)


ENVIRONMENT_DISPLAY_NAMES: Dict[EnvironmentKind, str] = {
    EnvironmentKind.DEV: "Development",
    EnvironmentKind.TEST: "Test",
    EnvironmentKind.STAGE: "Staging",
    EnvironmentKind.PROD: "Production",
    EnvironmentKind.DR: "Disaster Recovery",
}

# Canonical processing order for results
ENVIRONMENT_ORDER = [
    EnvironmentKind.DEV,
    EnvironmentKind.TEST,
    EnvironmentKind.STAGE,
    EnvironmentKind.PROD,
    EnvironmentKind.DR,
]


class AppTier(str, Enum):
    """Application size tier."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XLARGE = "xlarge"


class NodeClass(str, Enum):
    """Role a node plays inside a cluster."""
    CONTROL_PLANE = "control_plane"
    INFRA = "infra"
    WORKER = "worker"


class SpecMetric(str, Enum):
    CPU = "cpu"
    RAM_GB = "ram_gb"
    DISK_GB = "disk_gb"


def resolve_for_environment(
    overrides: Optional[Mapping[EnvironmentKind, T]],
    environment: EnvironmentKind,
    prod_value: T,
    nonprod_value: T
) -> T:
    """
    Resolve a per-environment value with the production-like fallback rule.

    Args:
        overrides: Optional mapping of explicit per-environment values
        environment: Environment being resolved
        prod_value: Value used for production-like environments without an override
        nonprod_value: Value used for every other environment without an override

    Returns:
        The override when present, otherwise the Prod/NonProd fallback
    """
    if overrides and environment in overrides:
        return overrides[environment]
    return prod_value if environment.is_production_like else nonprod_value


@dataclass(frozen=True)
class NodeSpec:
    """CPU/RAM/disk of a single node."""
    cpu: float
    ram_gb: float
    disk_gb: float = 100

    @property
    def is_zero(self) -> bool:
        return self.cpu == 0 and self.ram_gb == 0 and self.disk_gb == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "cpu": self.cpu,
            "ram_gb": self.ram_gb,
            "disk_gb": self.disk_gb,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NodeSpec":
        return cls(
            cpu=data.get("cpu", 0),
            ram_gb=data.get("ram_gb", 0),
            disk_gb=data.get("disk_gb", 100),
        )


# Sentinel for node classes a platform does not run (e.g. no infra nodes)
ZERO_SPEC = NodeSpec(0, 0, 0)


@dataclass(frozen=True)
class AppTierCounts:
    """Number of applications per size tier."""
    small: int = 0
    medium: int = 0
    large: int = 0
    xlarge: int = 0

    def __post_init__(self):
        for tier in AppTier:
            if getattr(self, tier.value) < 0:
                raise ValueError(f"App count for tier '{tier.value}' must be non-negative")

    @property
    def total(self) -> int:
        return self.small + self.medium + self.large + self.xlarge

    def count(self, tier: AppTier) -> int:
        return getattr(self, tier.value)

    def items(self) -> Iterator[Tuple[AppTier, int]]:
        for tier in AppTier:
            yield tier, self.count(tier)

    def clone(self) -> "AppTierCounts":
        """Independent copy for derived per-environment configurations."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {tier.value: count for tier, count in self.items()}
        result["total"] = self.total
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AppTierCounts":
        return cls(**{tier.value: int(data.get(tier.value, 0)) for tier in AppTier})


class EnvironmentSpecTable:
    """
    Node spec overrides keyed by (environment, node class, metric).

    A node class only has an override for an environment once all three
    metrics are present; partial entries fall back as a whole.
    """

    def __init__(self, values: Optional[Dict[Tuple[EnvironmentKind, NodeClass, SpecMetric], float]] = None):
        self._values: Dict[Tuple[EnvironmentKind, NodeClass, SpecMetric], float] = dict(values or {})

    def get(
        self,
        environment: EnvironmentKind,
        node_class: NodeClass,
        metric: SpecMetric,
        default: Optional[float] = None
    ) -> Optional[float]:
        return self._values.get((environment, node_class, metric), default)

    def set(self, environment: EnvironmentKind, node_class: NodeClass, metric: SpecMetric, value: float) -> None:
        if value < 0:
            raise ValueError(f"{metric.value} for {environment.value}/{node_class.value} must be non-negative")
        self._values[(environment, node_class, metric)] = value

    def set_node_spec(self, environment: EnvironmentKind, node_class: NodeClass, spec: NodeSpec) -> None:
        self.set(environment, node_class, SpecMetric.CPU, spec.cpu)
        self.set(environment, node_class, SpecMetric.RAM_GB, spec.ram_gb)
        self.set(environment, node_class, SpecMetric.DISK_GB, spec.disk_gb)

    def node_spec(self, environment: EnvironmentKind, node_class: NodeClass) -> Optional[NodeSpec]:
        metrics = [self.get(environment, node_class, metric) for metric in SpecMetric]
        if any(value is None for value in metrics):
            return None
        return NodeSpec(*metrics)

    def overrides_for(self, node_class: NodeClass) -> Dict[EnvironmentKind, NodeSpec]:
        """All complete overrides for one node class, ready for resolve_for_environment."""
        result = {}
        for environment in EnvironmentKind:
            spec = self.node_spec(environment, node_class)
            if spec is not None:
                result[environment] = spec
        return result

    def clone(self) -> "EnvironmentSpecTable":
        return EnvironmentSpecTable(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to nested dictionary {env: {node_class: {metric: value}}}."""
        result: Dict[str, Any] = {}
        for (environment, node_class, metric), value in self._values.items():
            result.setdefault(environment.value, {}).setdefault(node_class.value, {})[metric.value] = value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EnvironmentSpecTable":
        table = cls()
        for env_key, classes in data.items():
            for class_key, metrics in classes.items():
                for metric_key, value in metrics.items():
                    table.set(EnvironmentKind(env_key), NodeClass(class_key), SpecMetric(metric_key), value)
        return table
