"""
Domain models for container-platform sizing.
Defines the sizing input, policy and per-environment results.
"""
from typing import List, Dict, Any, Optional, Tuple
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import copy

from infrasizing.core.config import CalculatorSettings
from infrasizing.domain.environments import (
    EnvironmentKind,
    AppTierCounts,
    NodeSpec,
    EnvironmentSpecTable,
    ENVIRONMENT_ORDER,
    resolve_for_environment,
)
from infrasizing.domain.hadr_models import HADRConfig, HAPattern


class ClusterMode(str, Enum):
    MULTI_CLUSTER = "multi_cluster"
    SHARED_CLUSTER = "shared_cluster"
    PER_ENVIRONMENT = "per_environment"


def _default_replicas() -> Dict[EnvironmentKind, int]:
    return {
        EnvironmentKind.DEV: 1,
        EnvironmentKind.TEST: 1,
        EnvironmentKind.STAGE: 2,
        EnvironmentKind.PROD: 3,
        EnvironmentKind.DR: 3,
    }


def _default_headroom() -> Dict[EnvironmentKind, float]:
    return {
        EnvironmentKind.DEV: 33.0,
        EnvironmentKind.TEST: 33.0,
        EnvironmentKind.STAGE: 0.0,
        EnvironmentKind.PROD: 37.5,
        EnvironmentKind.DR: 37.5,
    }


def _clamp(value: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, value))


@dataclass(frozen=True)
class PolicySettings:
    """Replica, headroom, overcommit and reserve policy."""
    replicas: Dict[EnvironmentKind, int] = field(default_factory=_default_replicas)
    headroom_percent: Dict[EnvironmentKind, float] = field(default_factory=_default_headroom)
    headroom_enabled: bool = True
    prod_cpu_overcommit: float = 1.0
    prod_ram_overcommit: float = 1.0
    nonprod_cpu_overcommit: float = 1.0
    nonprod_ram_overcommit: float = 1.0
    system_reserve_percent: float = 15.0

    def __post_init__(self):
        if not 0 <= self.system_reserve_percent < 100:
            raise ValueError("system_reserve_percent must be in [0, 100)")

    def replicas_for(self, environment: EnvironmentKind, settings: CalculatorSettings) -> int:
        fallback = _default_replicas()[environment]
        value = self.replicas.get(environment, fallback)
        return int(_clamp(value, (settings.min_replicas, settings.max_replicas)))

    def headroom_for(self, environment: EnvironmentKind) -> float:
        """Effective headroom percentage; forced to 0 when headroom is disabled."""
        if not self.headroom_enabled:
            return 0.0
        return _clamp(self.headroom_percent.get(environment, 0.0), (0.0, 100.0))

    def overcommit_for(self, environment: EnvironmentKind, settings: CalculatorSettings) -> Tuple[float, float]:
        """(cpu, ram) overcommit ratios for the environment's Prod/NonProd class."""
        if environment.is_production_like:
            cpu, ram = self.prod_cpu_overcommit, self.prod_ram_overcommit
        else:
            cpu, ram = self.nonprod_cpu_overcommit, self.nonprod_ram_overcommit
        return (
            _clamp(cpu, settings.cpu_overcommit_bounds),
            _clamp(ram, settings.ram_overcommit_bounds),
        )

    @property
    def reserve_factor(self) -> float:
        return 1 - self.system_reserve_percent / 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "replicas": {env.value: count for env, count in self.replicas.items()},
            "headroom_percent": {env.value: pct for env, pct in self.headroom_percent.items()},
            "headroom_enabled": self.headroom_enabled,
            "prod_cpu_overcommit": self.prod_cpu_overcommit,
            "prod_ram_overcommit": self.prod_ram_overcommit,
            "nonprod_cpu_overcommit": self.nonprod_cpu_overcommit,
            "nonprod_ram_overcommit": self.nonprod_ram_overcommit,
            "system_reserve_percent": self.system_reserve_percent,
        }


@dataclass
class SizingInput:
    """Validated configuration for a container-platform sizing run."""
    distribution: str
    technology: str = "java"
    cluster_mode: ClusterMode = ClusterMode.MULTI_CLUSTER
    # Environment sized as its own cluster in per-environment mode
    selected_environment: EnvironmentKind = EnvironmentKind.PROD
    enabled_environments: List[EnvironmentKind] = field(
        default_factory=lambda: [EnvironmentKind.DEV, EnvironmentKind.TEST,
                                 EnvironmentKind.STAGE, EnvironmentKind.PROD]
    )
    prod_apps: Optional[AppTierCounts] = None
    nonprod_apps: Optional[AppTierCounts] = None
    environment_apps: Dict[EnvironmentKind, AppTierCounts] = field(default_factory=dict)
    policy: PolicySettings = field(default_factory=PolicySettings)
    ha_pattern: HAPattern = HAPattern.NONE
    hadr: HADRConfig = field(default_factory=HADRConfig)
    environment_hadr: Dict[EnvironmentKind, HADRConfig] = field(default_factory=dict)
    custom_node_specs: Optional[EnvironmentSpecTable] = None

    def apps_for(self, environment: EnvironmentKind) -> AppTierCounts:
        """App counts for an environment; missing sources resolve to zero apps."""
        empty = AppTierCounts()
        counts = resolve_for_environment(
            self.environment_apps,
            environment,
            self.prod_apps or empty,
            self.nonprod_apps or empty,
        )
        return counts.clone()

    def hadr_for(self, environment: EnvironmentKind) -> HADRConfig:
        return resolve_for_environment(self.environment_hadr, environment, self.hadr, self.hadr)

    def ordered_environments(self) -> List[EnvironmentKind]:
        enabled = set(self.enabled_environments)
        return [env for env in ENVIRONMENT_ORDER if env in enabled]

    def clone(self) -> "SizingInput":
        """Deep, independent copy; results never alias the caller's input."""
        return copy.deepcopy(self)


@dataclass(frozen=True)
class NodeGroup:
    """A priced unit: `count` nodes of one spec in one environment."""
    environment: str
    node_class: str
    spec: NodeSpec
    count: int


@dataclass
class EnvironmentResult:
    """Node and resource breakdown for one environment (or the shared cluster)."""
    environment: str
    environment_name: str
    is_prod: bool
    apps: int
    replicas: int
    pods: int
    masters: int
    infra: int
    workers: int
    etcd: int
    dr_nodes: int
    availability_zones: int
    dr_cost_multiplier: float
    hadr_summary: str
    managed_control_plane: bool
    # Control-plane nodes run by the provider; informational, never billed or totalled
    managed_control_plane_nodes: int
    master_spec: NodeSpec
    infra_spec: NodeSpec
    worker_spec: NodeSpec
    total_nodes: int
    total_cpu: float
    total_ram_gb: float
    total_disk_gb: float
    # Posture the environment was sized with; cloud pricing derives its HA/DR uplift from it
    hadr: HADRConfig = field(default_factory=HADRConfig)

    @property
    def total_nodes_with_dr(self) -> int:
        return self.total_nodes + self.dr_nodes

    def node_groups(self) -> List[NodeGroup]:
        """
        Billable node groups. Managed control planes are billed by the
        provider's control-plane rate instead, and DR capacity is priced
        through the HA/DR multiplier.
        """
        groups = []
        if self.masters:
            groups.append(NodeGroup(self.environment, "control_plane", self.master_spec, self.masters))
        if self.etcd:
            groups.append(NodeGroup(self.environment, "etcd", self.master_spec, self.etcd))
        if self.infra:
            groups.append(NodeGroup(self.environment, "infra", self.infra_spec, self.infra))
        if self.workers:
            groups.append(NodeGroup(self.environment, "worker", self.worker_spec, self.workers))
        return groups

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "environment": self.environment,
            "environment_name": self.environment_name,
            "is_prod": self.is_prod,
            "apps": self.apps,
            "replicas": self.replicas,
            "pods": self.pods,
            "masters": self.masters,
            "infra": self.infra,
            "workers": self.workers,
            "etcd": self.etcd,
            "dr_nodes": self.dr_nodes,
            "availability_zones": self.availability_zones,
            "dr_cost_multiplier": round(self.dr_cost_multiplier, 4),
            "hadr_summary": self.hadr_summary,
            "hadr": self.hadr.to_dict(),
            "managed_control_plane": self.managed_control_plane,
            "managed_control_plane_nodes": self.managed_control_plane_nodes,
            "node_specs": {
                "control_plane": self.master_spec.to_dict(),
                "infra": self.infra_spec.to_dict(),
                "worker": self.worker_spec.to_dict(),
            },
            "total_nodes": self.total_nodes,
            "total_nodes_with_dr": self.total_nodes_with_dr,
            "total_cpu": round(self.total_cpu, 2),
            "total_ram_gb": round(self.total_ram_gb, 2),
            "total_disk_gb": round(self.total_disk_gb, 2),
        }


@dataclass
class GrandTotal:
    """Sum of environment totals."""
    total_nodes: int = 0
    masters: int = 0
    infra: int = 0
    workers: int = 0
    etcd: int = 0
    dr_nodes: int = 0
    total_apps: int = 0
    total_pods: int = 0
    total_cpu: float = 0.0
    total_ram_gb: float = 0.0
    total_disk_gb: float = 0.0

    @classmethod
    def from_results(cls, results: List[EnvironmentResult]) -> "GrandTotal":
        return cls(
            total_nodes=sum(r.total_nodes for r in results),
            masters=sum(r.masters for r in results),
            infra=sum(r.infra for r in results),
            workers=sum(r.workers for r in results),
            etcd=sum(r.etcd for r in results),
            dr_nodes=sum(r.dr_nodes for r in results),
            total_apps=sum(r.apps for r in results),
            total_pods=sum(r.pods for r in results),
            total_cpu=sum(r.total_cpu for r in results),
            total_ram_gb=sum(r.total_ram_gb for r in results),
            total_disk_gb=sum(r.total_disk_gb for r in results),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_nodes": self.total_nodes,
            "masters": self.masters,
            "infra": self.infra,
            "workers": self.workers,
            "etcd": self.etcd,
            "dr_nodes": self.dr_nodes,
            "total_apps": self.total_apps,
            "total_pods": self.total_pods,
            "total_cpu": round(self.total_cpu, 2),
            "total_ram_gb": round(self.total_ram_gb, 2),
            "total_disk_gb": round(self.total_disk_gb, 2),
        }


@dataclass
class SizingResult:
    """Complete output of a container-platform sizing run."""
    environments: List[EnvironmentResult]
    grand_total: GrandTotal
    distribution: str
    technology: str
    cluster_mode: ClusterMode
    calculated_at: datetime

    @property
    def cluster_count(self) -> int:
        return len(self.environments)

    def environment(self, name: str) -> Optional[EnvironmentResult]:
        for result in self.environments:
            if result.environment == name:
                return result
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "distribution": self.distribution,
            "technology": self.technology,
            "cluster_mode": self.cluster_mode.value,
            "calculated_at": self.calculated_at.isoformat(),
            "environments": [result.to_dict() for result in self.environments],
            "grand_total": self.grand_total.to_dict(),
        }
