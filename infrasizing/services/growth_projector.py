"""
Growth projector service.
Scales a baseline sizing (and optionally its cost estimate) over a
multi-year horizon, flags approaching capacity limits and proposes
scaling actions.
"""
from typing import Dict, List, Optional, Tuple, Union
from datetime import datetime
import logging
import math

from infrasizing.core.config import config
from infrasizing.domain.cost_models import CostEstimate
from infrasizing.domain.growth_models import (
    GrowthPattern,
    GrowthSettings,
    GrowthProjection,
    EnvironmentProjection,
    ProjectionPoint,
    ProjectionSummary,
    ClusterLimitWarning,
    ScalingRecommendation,
    RecommendationType,
    WarningSeverity,
    WarningType,
)
from infrasizing.domain.sizing_models import SizingResult
from infrasizing.domain.vm_models import VMSizingResult
from infrasizing.pricing.distributions import get_cluster_limits


logger = logging.getLogger(__name__)

AnySizingResult = Union[SizingResult, VMSizingResult]

# Lightweight distributions that outgrow their design envelope at these node counts
MANAGED_SERVICE_NODE_THRESHOLDS: Dict[str, int] = {
    "k3s": 200,
    "microk8s": 100,
}

OPTIMIZATION_SAVINGS_RATIO = 0.15

_WARNING_LABELS: Dict[WarningType, Tuple[str, str]] = {
    WarningType.NODE_LIMIT: ("Node count", "cluster node limit"),
    WarningType.POD_LIMIT: ("Pod count", "cluster pod limit"),
    WarningType.CPU_CAPACITY: ("CPU demand", "CPU capacity"),
    WarningType.MEMORY_CAPACITY: ("Memory demand", "memory capacity"),
    WarningType.STORAGE_CAPACITY: ("Storage demand", "storage capacity"),
    WarningType.COST_THRESHOLD: ("Monthly cost", "cost threshold"),
}


class GrowthProjectorError(Exception):
    """Raised when a projection cannot be produced for the given input."""
    pass


def _round_up(value: float) -> int:
    # Absorb float noise such as 12.000000000000002 before rounding up
    return math.ceil(round(value, 9))


def growth_factor(rate_percent: float, pattern: GrowthPattern, year: int) -> float:
    """
    Multiplier applied to a baseline value after `year` years.

    Linear growth adds rate% of the baseline every year; compound growth
    applies rate% to the previous year's value.
    """
    rate = rate_percent / 100
    if pattern == GrowthPattern.COMPOUND:
        return (1 + rate) ** year
    return 1 + rate * year


def year_to_limit(
    current: float,
    limit: float,
    rate_percent: float,
    pattern: GrowthPattern,
    max_years: int = 10
) -> Optional[int]:
    """
    First year in which a growing value reaches a limit.

    Args:
        current: Baseline value
        limit: Limit to reach
        rate_percent: Annual growth rate in percent
        pattern: Growth pattern
        max_years: Horizon to search

    Returns:
        0 if the value is already at or over the limit, the first year it
        reaches the limit, or None if it does not within the horizon
    """
    if current >= limit:
        return 0
    if rate_percent <= 0 or current <= 0:
        return None
    for year in range(1, max_years + 1):
        if current * growth_factor(rate_percent, pattern, year) >= limit:
            return year
    return None


class GrowthProjector:
    """Projects sizing and cost growth year by year."""

    def project(
        self,
        baseline_sizing: AnySizingResult,
        growth_settings: GrowthSettings,
        baseline_cost: Optional[CostEstimate] = None,
        distribution: Optional[str] = None
    ) -> GrowthProjection:
        """
        Project a baseline footprint over the settings' horizon.

        Args:
            baseline_sizing: Result from SizingCalculator.compute or compute_vm
            growth_settings: Growth policy
            baseline_cost: Estimate of the baseline; projected cost keeps its
                per-node ratio
            distribution: Distribution key for cluster limits; defaults to
                the sizing result's own distribution

        Returns:
            GrowthProjection with points for years 1..projection_years

        Raises:
            GrowthProjectorError: If the baseline type is unsupported or the
                horizon exceeds the configured maximum
        """
        if not isinstance(baseline_sizing, (SizingResult, VMSizingResult)):
            raise GrowthProjectorError(
                f"Unsupported baseline type: {type(baseline_sizing).__name__}"
            )
        if growth_settings.projection_years > config.MAX_PROJECTION_YEARS:
            raise GrowthProjectorError(
                f"projection_years ({growth_settings.projection_years}) exceeds "
                f"the configured maximum of {config.MAX_PROJECTION_YEARS}"
            )

        distribution = distribution or baseline_sizing.distribution
        cost_per_node = baseline_cost.cost_per_node if baseline_cost else 0.0
        if baseline_cost is not None and growth_settings.include_cost_projections and cost_per_node == 0:
            logger.warning("Baseline cost has no nodes to scale from; projected costs will be 0")

        baseline = self._baseline_point(baseline_sizing, baseline_cost, growth_settings)
        points = self._project_points(baseline, cost_per_node, growth_settings)

        warnings = []
        if growth_settings.show_limit_warnings:
            warnings = self.check_limits(baseline, points, growth_settings, distribution)

        summary = self.summarize(baseline, points, warnings)
        recommendations = self.recommend(baseline, points, warnings, summary, growth_settings,
                                         distribution, cost_per_node)

        logger.info(
            "Projected %d year(s) at %.1f%% %s growth: %d -> %d nodes, %d warning(s), %d recommendation(s)",
            growth_settings.projection_years,
            growth_settings.annual_growth_rate,
            growth_settings.pattern.value,
            baseline.nodes,
            points[-1].nodes,
            len(warnings),
            len(recommendations),
        )
        return GrowthProjection(
            settings=growth_settings,
            baseline=baseline,
            points=points,
            warnings=warnings,
            recommendations=recommendations,
            summary=summary,
            generated_at=datetime.utcnow(),
            distribution=distribution,
        )

    @staticmethod
    def _baseline_point(
        sizing: AnySizingResult,
        cost: Optional[CostEstimate],
        settings: GrowthSettings
    ) -> ProjectionPoint:
        total = sizing.grand_total
        is_container = isinstance(sizing, SizingResult)
        pods = total.total_pods if is_container else 0
        priced = cost is not None and settings.include_cost_projections
        monthly_cost = cost.monthly_total if priced else 0.0
        environment_costs = {env.environment: env.monthly_cost for env in cost.environment_costs} if priced else {}
        environments = [
            EnvironmentProjection(
                environment=env.environment,
                apps=env.apps if is_container else 0,
                nodes=env.total_nodes,
                cpu=env.total_cpu,
                ram_gb=env.total_ram_gb,
                monthly_cost=environment_costs.get(env.environment, 0.0),
            )
            for env in sizing.environments
        ]
        return ProjectionPoint(
            year=0,
            apps=total.total_apps,
            nodes=total.total_nodes,
            pods=pods,
            cpu=total.total_cpu,
            ram_gb=total.total_ram_gb,
            storage_gb=total.total_disk_gb,
            monthly_cost=monthly_cost,
            growth_from_previous=0.0,
            cumulative_growth=0.0,
            environments=environments,
        )

    @staticmethod
    def _project_points(
        baseline: ProjectionPoint,
        cost_per_node: float,
        settings: GrowthSettings
    ) -> List[ProjectionPoint]:
        points = []
        previous_apps = float(baseline.apps)
        for year in range(1, settings.projection_years + 1):
            factor = growth_factor(settings.annual_growth_rate, settings.pattern, year)
            apps = baseline.apps * factor
            nodes = _round_up(baseline.nodes * factor)

            inflation = (1 + settings.annual_cost_inflation / 100) ** year
            monthly_cost = 0.0
            if settings.include_cost_projections:
                monthly_cost = nodes * cost_per_node * inflation

            points.append(ProjectionPoint(
                year=year,
                apps=_round_up(apps),
                nodes=nodes,
                pods=_round_up(baseline.pods * factor),
                cpu=baseline.cpu * factor,
                ram_gb=baseline.ram_gb * factor,
                storage_gb=baseline.storage_gb * factor,
                monthly_cost=monthly_cost,
                growth_from_previous=(apps - previous_apps) / previous_apps * 100 if previous_apps else 0.0,
                cumulative_growth=(apps - baseline.apps) / baseline.apps * 100 if baseline.apps else 0.0,
                environments=[
                    GrowthProjector._project_environment(env, factor, inflation, settings)
                    for env in baseline.environments
                ],
            ))
            previous_apps = apps
        return points

    @staticmethod
    def _project_environment(
        baseline: EnvironmentProjection,
        factor: float,
        inflation: float,
        settings: GrowthSettings
    ) -> EnvironmentProjection:
        """Scale one environment; its cost keeps the environment's own per-node ratio."""
        nodes = _round_up(baseline.nodes * factor)
        monthly_cost = 0.0
        if settings.include_cost_projections:
            if baseline.nodes:
                monthly_cost = nodes * (baseline.monthly_cost / baseline.nodes) * inflation
            else:
                monthly_cost = baseline.monthly_cost * factor * inflation
        return EnvironmentProjection(
            environment=baseline.environment,
            apps=_round_up(baseline.apps * factor),
            nodes=nodes,
            cpu=baseline.cpu * factor,
            ram_gb=baseline.ram_gb * factor,
            monthly_cost=monthly_cost,
        )

    @staticmethod
    def resolve_limits(settings: GrowthSettings, distribution: Optional[str]) -> Dict[WarningType, float]:
        """
        Limits to check, keyed by warning type.

        Explicit limits win; node and pod limits fall back to the
        distribution's cluster limits when a distribution is known.
        """
        explicit = settings.limits
        limits: Dict[WarningType, Optional[float]] = {
            WarningType.NODE_LIMIT: explicit.max_nodes,
            WarningType.POD_LIMIT: explicit.max_pods,
            WarningType.CPU_CAPACITY: explicit.cpu_capacity,
            WarningType.MEMORY_CAPACITY: explicit.ram_capacity_gb,
            WarningType.STORAGE_CAPACITY: explicit.storage_capacity_gb,
            WarningType.COST_THRESHOLD: explicit.monthly_cost_threshold,
        }
        if distribution:
            cluster_limits = get_cluster_limits(distribution)
            if limits[WarningType.NODE_LIMIT] is None:
                limits[WarningType.NODE_LIMIT] = cluster_limits.max_nodes
            if limits[WarningType.POD_LIMIT] is None:
                limits[WarningType.POD_LIMIT] = cluster_limits.max_total_pods
        return {kind: value for kind, value in limits.items() if value}

    def check_limits(
        self,
        baseline: ProjectionPoint,
        points: List[ProjectionPoint],
        settings: GrowthSettings,
        distribution: Optional[str]
    ) -> List[ClusterLimitWarning]:
        """
        One warning per (year, limit) pair whose projected value crosses a threshold.

        Returns:
            Warnings ordered by year, then by limit type
        """
        limits = self.resolve_limits(settings, distribution)
        warnings = []
        for point in points:
            for kind, limit in limits.items():
                current = self._metric(baseline, kind)
                projected = self._metric(point, kind)
                percentage = projected / limit * 100
                if percentage >= settings.critical_threshold_percent:
                    severity = WarningSeverity.CRITICAL
                elif percentage >= settings.warning_threshold_percent:
                    severity = WarningSeverity.WARNING
                else:
                    continue

                subject, limit_name = _WARNING_LABELS[kind]
                warnings.append(ClusterLimitWarning(
                    type=kind,
                    severity=severity,
                    year_triggered=point.year,
                    current_value=current,
                    projected_value=projected,
                    limit=limit,
                    message=(
                        f"{subject} ({projected:,.0f}) will reach {percentage:.0f}% "
                        f"of the {limit_name} ({limit:,.0f}) by Year {point.year}"
                    ),
                ))
        return warnings

    @staticmethod
    def _metric(point: ProjectionPoint, kind: WarningType) -> float:
        return {
            WarningType.NODE_LIMIT: point.nodes,
            WarningType.POD_LIMIT: point.pods,
            WarningType.CPU_CAPACITY: point.cpu,
            WarningType.MEMORY_CAPACITY: point.ram_gb,
            WarningType.STORAGE_CAPACITY: point.storage_gb,
            WarningType.COST_THRESHOLD: point.monthly_cost,
        }[kind]

    @staticmethod
    def summarize(
        baseline: ProjectionPoint,
        points: List[ProjectionPoint],
        warnings: List[ClusterLimitWarning]
    ) -> ProjectionSummary:
        final = points[-1] if points else baseline
        total_cost = baseline.yearly_cost + sum(point.yearly_cost for point in points)
        average_yearly = sum(point.yearly_cost for point in points) / len(points) if points else baseline.yearly_cost
        cost_increase = final.yearly_cost - baseline.yearly_cost

        critical = [w for w in warnings if w.severity == WarningSeverity.CRITICAL]
        major_scaling_year = min(w.year_triggered for w in critical) if critical else None

        return ProjectionSummary(
            total_app_growth=final.apps - baseline.apps,
            percentage_app_growth=(final.apps - baseline.apps) / baseline.apps * 100 if baseline.apps else 0.0,
            total_node_growth=final.nodes - baseline.nodes,
            percentage_node_growth=(final.nodes - baseline.nodes) / baseline.nodes * 100 if baseline.nodes else 0.0,
            total_cost_over_period=total_cost,
            average_yearly_cost=average_yearly,
            cost_increase=cost_increase,
            percentage_cost_increase=cost_increase / baseline.yearly_cost * 100 if baseline.yearly_cost else 0.0,
            major_scaling_year=major_scaling_year,
            warning_count=len(warnings),
            critical_warning_count=len(critical),
        )

    def recommend(
        self,
        baseline: ProjectionPoint,
        points: List[ProjectionPoint],
        warnings: List[ClusterLimitWarning],
        summary: ProjectionSummary,
        settings: GrowthSettings,
        distribution: Optional[str],
        cost_per_node: float = 0.0
    ) -> List[ScalingRecommendation]:
        """
        Rule-based scaling recommendations.

        Returns:
            Recommendations sorted by priority, then by recommended year
        """
        final = points[-1] if points else baseline
        recommendations = []

        def first(kind: WarningType, severity: Optional[WarningSeverity] = None) -> Optional[ClusterLimitWarning]:
            matches = [w for w in warnings if w.type == kind and (severity is None or w.severity == severity)]
            return min(matches, key=lambda w: w.year_triggered) if matches else None

        if final.cumulative_growth > 100:
            recommendations.append(ScalingRecommendation(
                type=RecommendationType.ENABLE_AUTOSCALING,
                priority=1,
                recommended_year=1,
                estimated_cost_impact=0.0,
                description=(
                    f"With {final.cumulative_growth:.0f}% projected growth, enable cluster autoscaling "
                    "to follow demand instead of provisioning for the peak."
                ),
            ))

        node_warning = first(WarningType.NODE_LIMIT)
        if node_warning is not None:
            point = self._point_for(points, node_warning.year_triggered)
            added_nodes = point.nodes - baseline.nodes
            recommendations.append(ScalingRecommendation(
                type=RecommendationType.ADD_WORKER_NODES,
                priority=2,
                recommended_year=max(1, node_warning.year_triggered - 1),
                estimated_cost_impact=added_nodes * cost_per_node * 12,
                description=(
                    f"Plan capacity for {added_nodes} additional node(s) before Year "
                    f"{node_warning.year_triggered}, when the cluster reaches "
                    f"{node_warning.percentage_of_limit:.0f}% of its node limit."
                ),
            ))

        capacity_years = {
            w.year_triggered for w in warnings
            if w.type in (WarningType.CPU_CAPACITY, WarningType.MEMORY_CAPACITY)
        }
        if len(capacity_years) >= 2 or summary.percentage_node_growth > 50:
            if len(capacity_years) >= 2:
                reason = f"CPU or memory capacity is exceeded in {len(capacity_years)} projected years."
            else:
                reason = f"Node count will grow by {summary.percentage_node_growth:.0f}%."
            recommendations.append(ScalingRecommendation(
                type=RecommendationType.UPGRADE_NODE_SIZE,
                priority=2,
                recommended_year=max(1, settings.projection_years // 2),
                estimated_cost_impact=0.0,
                description=f"{reason} Larger nodes may be more cost-effective than adding more small ones.",
            ))

        critical_nodes = first(WarningType.NODE_LIMIT, WarningSeverity.CRITICAL)
        if critical_nodes is not None:
            recommendations.append(ScalingRecommendation(
                type=RecommendationType.SPLIT_CLUSTER,
                priority=1,
                recommended_year=max(1, critical_nodes.year_triggered - 1),
                estimated_cost_impact=self._control_plane_overhead(cost_per_node),
                description=(
                    f"Node limits will be approached by Year {critical_nodes.year_triggered}. "
                    "Plan to split workloads across multiple clusters."
                ),
            ))

        critical_pods = first(WarningType.POD_LIMIT, WarningSeverity.CRITICAL)
        if critical_pods is not None:
            recommendations.append(ScalingRecommendation(
                type=RecommendationType.ADD_CLUSTER,
                priority=1,
                recommended_year=max(1, critical_pods.year_triggered - 1),
                estimated_cost_impact=self._control_plane_overhead(cost_per_node),
                description=(
                    f"Pod count will reach {critical_pods.percentage_of_limit:.0f}% of the cluster pod "
                    f"limit by Year {critical_pods.year_triggered}. Add a cluster for new workloads."
                ),
            ))

        if summary.percentage_cost_increase > 75:
            recommendations.append(ScalingRecommendation(
                type=RecommendationType.OPTIMIZE_RESOURCES,
                priority=2,
                recommended_year=1,
                estimated_cost_impact=-summary.total_cost_over_period * OPTIMIZATION_SAVINGS_RATIO,
                description=(
                    f"Costs are projected to increase by {summary.percentage_cost_increase:.0f}%. "
                    "Review reserved capacity, spot instances and right-sizing."
                ),
            ))

        threshold = MANAGED_SERVICE_NODE_THRESHOLDS.get((distribution or "").lower())
        if threshold is not None and final.nodes > threshold:
            recommendations.append(ScalingRecommendation(
                type=RecommendationType.CONSIDER_MANAGED_SERVICE,
                priority=2,
                recommended_year=1,
                estimated_cost_impact=0.0,
                description=(
                    f"{distribution} is designed for small deployments and the projection reaches "
                    f"{final.nodes} nodes. Consider a managed or enterprise distribution."
                ),
            ))

        recommendations.sort(key=lambda rec: (rec.priority, rec.recommended_year))
        return recommendations

    @staticmethod
    def _point_for(points: List[ProjectionPoint], year: int) -> ProjectionPoint:
        for point in points:
            if point.year == year:
                return point
        raise GrowthProjectorError(f"No projection point for year {year}")

    @staticmethod
    def _control_plane_overhead(cost_per_node: float) -> float:
        """Yearly cost of one extra three-node control plane."""
        return 3 * cost_per_node * 12
