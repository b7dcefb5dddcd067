"""
Domain models for cluster high availability and disaster recovery posture.
"""
from typing import Dict, Any, Optional, Mapping, List
from dataclasses import dataclass
from enum import Enum


class ControlPlaneHA(str, Enum):
    MANAGED = "managed"
    SINGLE = "single"
    STACKED_HA = "stacked_ha"
    EXTERNAL_ETCD = "external_etcd"


class NodeDistribution(str, Enum):
    SINGLE_AZ = "single_az"
    DUAL_AZ = "dual_az"
    MULTI_AZ = "multi_az"
    MULTI_REGION = "multi_region"


class DRPattern(str, Enum):
    NONE = "none"
    BACKUP_RESTORE = "backup_restore"
    WARM_STANDBY = "warm_standby"
    HOT_STANDBY = "hot_standby"
    ACTIVE_ACTIVE = "active_active"


class BackupStrategy(str, Enum):
    NONE = "none"
    VELERO = "velero"
    KASTEN = "kasten"
    PORTWORX = "portworx"
    CLOUD_NATIVE = "cloud_native"


class HAPattern(str, Enum):
    """Workload redundancy pattern, used as a replica/instance multiplier."""
    NONE = "none"
    ACTIVE_ACTIVE = "active_active"
    ACTIVE_PASSIVE = "active_passive"
    N_PLUS_1 = "n_plus_1"
    N_PLUS_2 = "n_plus_2"


DR_PATTERN_LABELS: Dict[DRPattern, str] = {
    DRPattern.BACKUP_RESTORE: "Backup/Restore DR",
    DRPattern.WARM_STANDBY: "Warm Standby DR",
    DRPattern.HOT_STANDBY: "Hot Standby DR",
    DRPattern.ACTIVE_ACTIVE: "Active-Active DR",
}


@dataclass(frozen=True)
class HADRConfig:
    """HA/DR posture of one cluster."""
    control_plane_ha: ControlPlaneHA = ControlPlaneHA.MANAGED
    control_plane_nodes: int = 3
    node_distribution: NodeDistribution = NodeDistribution.MULTI_AZ
    availability_zones: int = 3
    dr_pattern: DRPattern = DRPattern.NONE
    dr_region: Optional[str] = None
    rto_minutes: Optional[int] = None
    rpo_minutes: Optional[int] = None
    backup_strategy: BackupStrategy = BackupStrategy.NONE
    backup_frequency_hours: int = 24
    backup_retention_days: int = 30

    def __post_init__(self):
        if self.control_plane_nodes < 1:
            raise ValueError("control_plane_nodes must be at least 1")
        if self.availability_zones < 1:
            raise ValueError("availability_zones must be at least 1")

    @property
    def has_control_plane_ha(self) -> bool:
        return self.control_plane_ha in (ControlPlaneHA.STACKED_HA, ControlPlaneHA.EXTERNAL_ETCD)

    @property
    def etcd_nodes(self) -> int:
        """Dedicated etcd nodes; only external etcd runs them apart from the control plane."""
        if self.control_plane_ha == ControlPlaneHA.EXTERNAL_ETCD:
            return self.control_plane_nodes
        return 0

    def summary(self) -> str:
        """Short human-readable description of the posture."""
        parts: List[str] = []
        if self.has_control_plane_ha:
            parts.append(f"CP HA ({self.control_plane_nodes} nodes)")
        if self.node_distribution == NodeDistribution.MULTI_REGION:
            parts.append("Multi-Region")
        elif self.node_distribution != NodeDistribution.SINGLE_AZ:
            parts.append(f"{self.availability_zones} AZs")
        if self.dr_pattern != DRPattern.NONE:
            parts.append(DR_PATTERN_LABELS[self.dr_pattern])
        if self.backup_strategy != BackupStrategy.NONE:
            parts.append(f"Backup ({self.backup_strategy.value})")
        return " • ".join(parts) if parts else "Basic (no HA/DR)"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "control_plane_ha": self.control_plane_ha.value,
            "control_plane_nodes": self.control_plane_nodes,
            "node_distribution": self.node_distribution.value,
            "availability_zones": self.availability_zones,
            "dr_pattern": self.dr_pattern.value,
            "dr_region": self.dr_region,
            "rto_minutes": self.rto_minutes,
            "rpo_minutes": self.rpo_minutes,
            "backup_strategy": self.backup_strategy.value,
            "backup_frequency_hours": self.backup_frequency_hours,
            "backup_retention_days": self.backup_retention_days,
            "summary": self.summary(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HADRConfig":
        return cls(
            control_plane_ha=ControlPlaneHA(data.get("control_plane_ha", ControlPlaneHA.MANAGED.value)),
            control_plane_nodes=int(data.get("control_plane_nodes", 3)),
            node_distribution=NodeDistribution(data.get("node_distribution", NodeDistribution.MULTI_AZ.value)),
            availability_zones=int(data.get("availability_zones", 3)),
            dr_pattern=DRPattern(data.get("dr_pattern", DRPattern.NONE.value)),
            dr_region=data.get("dr_region"),
            rto_minutes=data.get("rto_minutes"),
            rpo_minutes=data.get("rpo_minutes"),
            backup_strategy=BackupStrategy(data.get("backup_strategy", BackupStrategy.NONE.value)),
            backup_frequency_hours=int(data.get("backup_frequency_hours", 24)),
            backup_retention_days=int(data.get("backup_retention_days", 30)),
        )
