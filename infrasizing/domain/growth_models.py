"""
Domain models for multi-year growth projection.
"""
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class GrowthPattern(str, Enum):
    LINEAR = "linear"
    COMPOUND = "compound"


class WarningType(str, Enum):
    NODE_LIMIT = "node_limit"
    POD_LIMIT = "pod_limit"
    CPU_CAPACITY = "cpu_capacity"
    MEMORY_CAPACITY = "memory_capacity"
    STORAGE_CAPACITY = "storage_capacity"
    COST_THRESHOLD = "cost_threshold"


class WarningSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class RecommendationType(str, Enum):
    UPGRADE_NODE_SIZE = "upgrade_node_size"
    ADD_WORKER_NODES = "add_worker_nodes"
    SPLIT_CLUSTER = "split_cluster"
    ADD_CLUSTER = "add_cluster"
    ENABLE_AUTOSCALING = "enable_autoscaling"
    OPTIMIZE_RESOURCES = "optimize_resources"
    CONSIDER_MANAGED_SERVICE = "consider_managed_service"


@dataclass(frozen=True)
class GrowthLimits:
    """Explicit capacity limits; None falls back to the distribution's cluster limits or is skipped."""
    max_nodes: Optional[int] = None
    max_pods: Optional[int] = None
    cpu_capacity: Optional[float] = None
    ram_capacity_gb: Optional[float] = None
    storage_capacity_gb: Optional[float] = None
    monthly_cost_threshold: Optional[float] = None


@dataclass(frozen=True)
class GrowthSettings:
    """Growth policy."""
    annual_growth_rate: float = 20.0
    projection_years: int = 3
    pattern: GrowthPattern = GrowthPattern.LINEAR
    include_cost_projections: bool = True
    show_limit_warnings: bool = True
    annual_cost_inflation: float = 0.0
    warning_threshold_percent: float = 75.0
    critical_threshold_percent: float = 90.0
    limits: GrowthLimits = field(default_factory=GrowthLimits)

    def __post_init__(self):
        if not 1 <= self.projection_years <= 5:
            raise ValueError("projection_years must be between 1 and 5")
        if self.annual_growth_rate < 0:
            raise ValueError("annual_growth_rate must be non-negative")
        if self.warning_threshold_percent > self.critical_threshold_percent:
            raise ValueError("warning threshold must not exceed critical threshold")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "annual_growth_rate": self.annual_growth_rate,
            "projection_years": self.projection_years,
            "pattern": self.pattern.value,
            "include_cost_projections": self.include_cost_projections,
            "show_limit_warnings": self.show_limit_warnings,
            "annual_cost_inflation": self.annual_cost_inflation,
        }


@dataclass
class EnvironmentProjection:
    """One environment's share of a projection point."""
    environment: str
    apps: int
    nodes: int
    cpu: float
    ram_gb: float
    monthly_cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment,
            "apps": self.apps,
            "nodes": self.nodes,
            "cpu": round(self.cpu, 2),
            "ram_gb": round(self.ram_gb, 2),
            "monthly_cost": round(self.monthly_cost, 2),
        }


@dataclass
class ProjectionPoint:
    """Projected footprint for one year (year 0 is the baseline)."""
    year: int
    apps: int
    nodes: int
    pods: int
    cpu: float
    ram_gb: float
    storage_gb: float
    monthly_cost: float
    growth_from_previous: float
    cumulative_growth: float
    environments: List[EnvironmentProjection] = field(default_factory=list)

    @property
    def label(self) -> str:
        return "Current" if self.year == 0 else f"Year {self.year}"

    @property
    def yearly_cost(self) -> float:
        return self.monthly_cost * 12

    def environment(self, name: str) -> Optional[EnvironmentProjection]:
        for projection in self.environments:
            if projection.environment == name:
                return projection
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "year": self.year,
            "label": self.label,
            "apps": self.apps,
            "nodes": self.nodes,
            "pods": self.pods,
            "cpu": round(self.cpu, 2),
            "ram_gb": round(self.ram_gb, 2),
            "storage_gb": round(self.storage_gb, 2),
            "monthly_cost": round(self.monthly_cost, 2),
            "yearly_cost": round(self.yearly_cost, 2),
            "growth_from_previous": round(self.growth_from_previous, 2),
            "cumulative_growth": round(self.cumulative_growth, 2),
            "environments": [projection.to_dict() for projection in self.environments],
        }


@dataclass
class ClusterLimitWarning:
    type: WarningType
    severity: WarningSeverity
    year_triggered: int
    current_value: float
    projected_value: float
    limit: float
    message: str

    @property
    def percentage_of_limit(self) -> float:
        return self.projected_value / self.limit * 100 if self.limit else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "year_triggered": self.year_triggered,
            "current_value": self.current_value,
            "projected_value": self.projected_value,
            "limit": self.limit,
            "percentage_of_limit": round(self.percentage_of_limit, 1),
            "message": self.message,
        }


@dataclass
class ScalingRecommendation:
    type: RecommendationType
    priority: int  # 1 is most urgent
    recommended_year: int
    estimated_cost_impact: float  # positive = cost increase, negative = savings
    description: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "priority": self.priority,
            "recommended_year": self.recommended_year,
            "estimated_cost_impact": round(self.estimated_cost_impact, 2),
            "description": self.description,
        }


@dataclass
class ProjectionSummary:
    total_app_growth: int
    percentage_app_growth: float
    total_node_growth: int
    percentage_node_growth: float
    total_cost_over_period: float
    average_yearly_cost: float
    cost_increase: float
    percentage_cost_increase: float
    major_scaling_year: Optional[int]
    warning_count: int
    critical_warning_count: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_app_growth": self.total_app_growth,
            "percentage_app_growth": round(self.percentage_app_growth, 2),
            "total_node_growth": self.total_node_growth,
            "percentage_node_growth": round(self.percentage_node_growth, 2),
            "total_cost_over_period": round(self.total_cost_over_period, 2),
            "average_yearly_cost": round(self.average_yearly_cost, 2),
            "cost_increase": round(self.cost_increase, 2),
            "percentage_cost_increase": round(self.percentage_cost_increase, 2),
            "major_scaling_year": self.major_scaling_year,
            "warning_count": self.warning_count,
            "critical_warning_count": self.critical_warning_count,
        }


@dataclass
class GrowthProjection:
    settings: GrowthSettings
    baseline: ProjectionPoint
    points: List[ProjectionPoint]
    warnings: List[ClusterLimitWarning]
    recommendations: List[ScalingRecommendation]
    summary: ProjectionSummary
    generated_at: datetime
    distribution: Optional[str] = None

    def point(self, year: int) -> Optional[ProjectionPoint]:
        if year == 0:
            return self.baseline
        for point in self.points:
            if point.year == year:
                return point
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "settings": self.settings.to_dict(),
            "distribution": self.distribution,
            "generated_at": self.generated_at.isoformat(),
            "baseline": self.baseline.to_dict(),
            "points": [point.to_dict() for point in self.points],
            "warnings": [warning.to_dict() for warning in self.warnings],
            "recommendations": [rec.to_dict() for rec in self.recommendations],
            "summary": self.summary.to_dict(),
        }
