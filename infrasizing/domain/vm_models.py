"""
Domain models for virtual-machine fleet sizing.
"""
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import copy

from infrasizing.domain.environments import EnvironmentKind, AppTier, NodeSpec, ENVIRONMENT_ORDER
from infrasizing.domain.hadr_models import HADRConfig, HAPattern, DRPattern
from infrasizing.domain.sizing_models import NodeGroup


class ServerRole(str, Enum):
    WEB = "web"
    APP = "app"
    DATABASE = "database"
    CACHE = "cache"
    MESSAGE_QUEUE = "message_queue"
    SEARCH = "search"
    STORAGE = "storage"
    MONITORING = "monitoring"
    BASTION = "bastion"


SERVER_ROLE_NAMES: Dict[ServerRole, str] = {
    ServerRole.WEB: "Web Server",
    ServerRole.APP: "Application Server",
    ServerRole.DATABASE: "Database Server",
    ServerRole.CACHE: "Cache Server",
    ServerRole.MESSAGE_QUEUE: "Message Queue",
    ServerRole.SEARCH: "Search Server",
    ServerRole.STORAGE: "Storage Server",
    ServerRole.MONITORING: "Monitoring Server",
    ServerRole.BASTION: "Bastion Host",
}


@dataclass
class VMRoleConfig:
    """One server role inside an environment."""
    role: ServerRole
    tier: AppTier = AppTier.MEDIUM
    instance_count: int = 1
    disk_gb: int = 100
    custom_cpu: Optional[int] = None
    custom_ram_gb: Optional[int] = None
    name: Optional[str] = None


@dataclass
class VMEnvironmentConfig:
    enabled: bool = True
    roles: List[VMRoleConfig] = field(default_factory=list)
    ha_pattern: HAPattern = HAPattern.NONE
    dr_pattern: DRPattern = DRPattern.NONE
    load_balancer: str = "none"
    storage_gb: int = 0


@dataclass
class VMSizingInput:
    """Validated configuration for a VM fleet sizing run."""
    technology: str = "java"
    environments: Dict[EnvironmentKind, VMEnvironmentConfig] = field(default_factory=dict)
    system_overhead_percent: float = 15.0

    def ordered_environments(self) -> List[EnvironmentKind]:
        return [
            env for env in ENVIRONMENT_ORDER
            if env in self.environments and self.environments[env].enabled
        ]

    def clone(self) -> "VMSizingInput":
        return copy.deepcopy(self)


@dataclass
class VMRoleResult:
    role: ServerRole
    role_name: str
    tier: AppTier
    base_instances: int
    total_instances: int
    cpu_per_instance: int
    ram_per_instance: int
    disk_per_instance: int

    @property
    def total_cpu(self) -> int:
        return self.total_instances * self.cpu_per_instance

    @property
    def total_ram_gb(self) -> int:
        return self.total_instances * self.ram_per_instance

    @property
    def total_disk_gb(self) -> int:
        return self.total_instances * self.disk_per_instance

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "role": self.role.value,
            "role_name": self.role_name,
            "tier": self.tier.value,
            "base_instances": self.base_instances,
            "total_instances": self.total_instances,
            "cpu_per_instance": self.cpu_per_instance,
            "ram_per_instance": self.ram_per_instance,
            "disk_per_instance": self.disk_per_instance,
            "total_cpu": self.total_cpu,
            "total_ram_gb": self.total_ram_gb,
            "total_disk_gb": self.total_disk_gb,
        }


@dataclass
class VMEnvironmentResult:
    environment: str
    environment_name: str
    is_prod: bool
    ha_pattern: HAPattern
    dr_pattern: DRPattern
    roles: List[VMRoleResult]
    load_balancer_vms: int
    load_balancer_spec: NodeSpec
    storage_gb: int
    # VM fleets carry no cluster posture; an explicit pricing override still applies
    hadr: Optional[HADRConfig] = None

    @property
    def total_nodes(self) -> int:
        return sum(r.total_instances for r in self.roles) + self.load_balancer_vms

    @property
    def total_cpu(self) -> float:
        return sum(r.total_cpu for r in self.roles) + self.load_balancer_vms * self.load_balancer_spec.cpu

    @property
    def total_ram_gb(self) -> float:
        return sum(r.total_ram_gb for r in self.roles) + self.load_balancer_vms * self.load_balancer_spec.ram_gb

    @property
    def total_disk_gb(self) -> float:
        return sum(r.total_disk_gb for r in self.roles) + self.storage_gb

    def node_groups(self) -> List[NodeGroup]:
        groups = [
            NodeGroup(
                self.environment,
                role.role.value,
                NodeSpec(role.cpu_per_instance, role.ram_per_instance, role.disk_per_instance),
                role.total_instances,
            )
            for role in self.roles
            if role.total_instances
        ]
        if self.load_balancer_vms:
            groups.append(NodeGroup(self.environment, "load_balancer", self.load_balancer_spec, self.load_balancer_vms))
        return groups

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "environment": self.environment,
            "environment_name": self.environment_name,
            "is_prod": self.is_prod,
            "ha_pattern": self.ha_pattern.value,
            "dr_pattern": self.dr_pattern.value,
            "roles": [role.to_dict() for role in self.roles],
            "load_balancer_vms": self.load_balancer_vms,
            "storage_gb": self.storage_gb,
            "total_vms": self.total_nodes,
            "total_cpu": self.total_cpu,
            "total_ram_gb": self.total_ram_gb,
            "total_disk_gb": self.total_disk_gb,
        }


@dataclass
class VMGrandTotal:
    total_nodes: int = 0
    total_cpu: float = 0
    total_ram_gb: float = 0
    total_disk_gb: float = 0
    load_balancer_vms: int = 0

    @classmethod
    def from_results(cls, results: List[VMEnvironmentResult]) -> "VMGrandTotal":
        return cls(
            total_nodes=sum(r.total_nodes for r in results),
            total_cpu=sum(r.total_cpu for r in results),
            total_ram_gb=sum(r.total_ram_gb for r in results),
            total_disk_gb=sum(r.total_disk_gb for r in results),
            load_balancer_vms=sum(r.load_balancer_vms for r in results),
        )

    @property
    def total_apps(self) -> int:
        # VMs stand in for applications when projecting growth
        return self.total_nodes

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_vms": self.total_nodes,
            "total_cpu": self.total_cpu,
            "total_ram_gb": self.total_ram_gb,
            "total_disk_gb": self.total_disk_gb,
            "load_balancer_vms": self.load_balancer_vms,
        }


@dataclass
class VMSizingResult:
    environments: List[VMEnvironmentResult]
    grand_total: VMGrandTotal
    technology: str
    calculated_at: datetime
    distribution: Optional[str] = None

    @property
    def cluster_count(self) -> int:
        # VM fleets carry no managed control planes
        return 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "technology": self.technology,
            "calculated_at": self.calculated_at.isoformat(),
            "environments": [result.to_dict() for result in self.environments],
            "grand_total": self.grand_total.to_dict(),
        }
