"""
Sizing calculator service.
Converts application counts and sizing policy into per-environment node
counts and resource totals for container platforms and VM fleets.
"""
from typing import List, Optional
from dataclasses import dataclass
from datetime import datetime
import logging
import math

from infrasizing.core.config import CalculatorSettings, DEFAULT_CALCULATOR_SETTINGS
from infrasizing.domain.environments import EnvironmentKind, NodeClass, NodeSpec, ZERO_SPEC
from infrasizing.domain.errors import ConfigurationError, PolicyViolation
from infrasizing.domain.hadr_models import HADRConfig, ControlPlaneHA, DRPattern, NodeDistribution
from infrasizing.domain.sizing_models import (
    SizingInput,
    SizingResult,
    EnvironmentResult,
    GrandTotal,
    ClusterMode,
)
from infrasizing.domain.vm_models import (
    VMSizingInput,
    VMSizingResult,
    VMEnvironmentConfig,
    VMEnvironmentResult,
    VMRoleConfig,
    VMRoleResult,
    VMGrandTotal,
    SERVER_ROLE_NAMES,
)
from infrasizing.pricing.distributions import DistributionProfile, get_distribution
from infrasizing.pricing.resource_specs import get_pod_spec, get_vm_role_spec
from infrasizing.services.hadr_cost_model import HADRCostModel


logger = logging.getLogger(__name__)

SHARED_CLUSTER_LABEL = "shared"


def _ceil(value: float) -> int:
    # Absorb float noise such as 3.0000000000000004 before rounding up
    return math.ceil(round(value, 9))


@dataclass
class _Demand:
    """Workload placed on one cluster."""
    apps: int = 0
    pods: int = 0
    cpu: float = 0.0
    ram_gb: float = 0.0

    def __add__(self, other: "_Demand") -> "_Demand":
        return _Demand(
            self.apps + other.apps,
            self.pods + other.pods,
            self.cpu + other.cpu,
            self.ram_gb + other.ram_gb,
        )


class SizingCalculator:
    """Stateless sizing engine; every call works on a private copy of its input."""

    def __init__(
        self,
        settings: Optional[CalculatorSettings] = None,
        hadr_model: Optional[HADRCostModel] = None
    ):
        """
        Initialize the calculator.

        Args:
            settings: Sizing constants (defaults when None)
            hadr_model: HA/DR multiplier model (creates new if None)
        """
        self.settings = settings or DEFAULT_CALCULATOR_SETTINGS
        self.hadr_model = hadr_model or HADRCostModel()

    def compute(self, sizing_input: SizingInput) -> SizingResult:
        """
        Size every enabled environment.

        Args:
            sizing_input: Validated sizing configuration

        Returns:
            SizingResult with one EnvironmentResult per cluster and the grand total

        Raises:
            ConfigurationError: If Prod is not enabled, or a lookup is missing
            PolicyViolation: If a computed node count is negative
        """
        config = sizing_input.clone()
        environments = config.ordered_environments()
        if EnvironmentKind.PROD not in environments:
            raise ConfigurationError("Production environment must be enabled", lookup="enabled_environments")

        profile = get_distribution(config.distribution)

        if config.cluster_mode == ClusterMode.SHARED_CLUSTER:
            results = [self._size_shared_cluster(config, profile, environments)]
        elif config.cluster_mode == ClusterMode.PER_ENVIRONMENT:
            results = [self._size_selected_environment(config, profile, environments)]
        else:
            results = [
                self._size_cluster(
                    label=env.value,
                    name=env.display_name,
                    spec_environment=env,
                    workload_environment=env,
                    demand=self._demand_for(config, env),
                    config=config,
                    profile=profile,
                    hadr=config.hadr_for(env),
                )
                for env in environments
            ]

        grand_total = GrandTotal.from_results(results)
        logger.info(
            "Sized %s (%s): %d cluster(s), %d nodes, %.1f vCPU, %.1f GB RAM",
            profile.key,
            config.cluster_mode.value,
            len(results),
            grand_total.total_nodes,
            grand_total.total_cpu,
            grand_total.total_ram_gb,
        )
        return SizingResult(
            environments=results,
            grand_total=grand_total,
            distribution=profile.key,
            technology=config.technology,
            cluster_mode=config.cluster_mode,
            calculated_at=datetime.utcnow(),
        )

    def _demand_for(
        self,
        config: SizingInput,
        environment: EnvironmentKind,
        replica_environment: Optional[EnvironmentKind] = None
    ) -> _Demand:
        """
        Pods and pod resources of one environment, before headroom.

        Replicas follow `replica_environment` when given, so a shared cluster
        can run every namespace at the Prod replica count.
        """
        apps = config.apps_for(environment)
        replicas = config.policy.replicas_for(replica_environment or environment, self.settings)
        ha_multiplier = self.settings.ha_multiplier(config.ha_pattern)

        cpu = 0.0
        ram = 0.0
        for tier, count in apps.items():
            if count == 0:
                continue
            pod_cpu, pod_ram = get_pod_spec(config.technology, tier)
            cpu += count * replicas * ha_multiplier * pod_cpu
            ram += count * replicas * ha_multiplier * pod_ram

        pods = _ceil(apps.total * replicas * ha_multiplier)
        return _Demand(apps=apps.total, pods=pods, cpu=cpu, ram_gb=ram)

    def _size_shared_cluster(
        self,
        config: SizingInput,
        profile: DistributionProfile,
        environments: List[EnvironmentKind]
    ) -> EnvironmentResult:
        """
        One production-spec cluster carrying every enabled environment's workload.

        Every namespace runs at the Prod replica count and the cluster takes
        the Prod headroom and overcommit.
        """
        demand = _Demand()
        for env in environments:
            demand = demand + self._demand_for(config, env, replica_environment=EnvironmentKind.PROD)
        return self._size_cluster(
            label=SHARED_CLUSTER_LABEL,
            name="Shared Cluster",
            spec_environment=EnvironmentKind.PROD,
            workload_environment=EnvironmentKind.PROD,
            demand=demand,
            config=config,
            profile=profile,
            hadr=config.hadr_for(EnvironmentKind.PROD),
        )

    def _size_selected_environment(
        self,
        config: SizingInput,
        profile: DistributionProfile,
        environments: List[EnvironmentKind]
    ) -> EnvironmentResult:
        """
        A single cluster for the selected environment's workload.

        The cluster uses Prod node specs and overcommit; replicas, headroom
        and the infra node rule follow the selected environment.

        Raises:
            ConfigurationError: If the selected environment is not enabled
        """
        selected = config.selected_environment
        if selected not in environments:
            raise ConfigurationError(
                f"Selected environment '{selected.value}' is not enabled",
                lookup="selected_environment",
                environment=selected.value,
            )
        return self._size_cluster(
            label=selected.value,
            name=f"{selected.display_name} Cluster",
            spec_environment=EnvironmentKind.PROD,
            workload_environment=selected,
            demand=self._demand_for(config, selected),
            config=config,
            profile=profile,
            hadr=config.hadr_for(selected),
        )

    def _size_cluster(
        self,
        label: str,
        name: str,
        spec_environment: EnvironmentKind,
        workload_environment: EnvironmentKind,
        demand: _Demand,
        config: SizingInput,
        profile: DistributionProfile,
        hadr: HADRConfig
    ) -> EnvironmentResult:
        custom = config.custom_node_specs
        worker_spec = profile.node_spec(spec_environment, NodeClass.WORKER, custom)
        master_spec = profile.node_spec(spec_environment, NodeClass.CONTROL_PLANE, custom)
        infra_spec = (
            profile.node_spec(spec_environment, NodeClass.INFRA, custom)
            if profile.has_infra_nodes else ZERO_SPEC
        )

        workers = self.worker_count(
            demand.cpu, demand.ram_gb, worker_spec, config, workload_environment,
            overcommit_environment=spec_environment,
        )
        infra = self.infra_count(demand.apps, profile, workload_environment)
        control_plane_nodes = self.control_plane_count(hadr, workers)

        if profile.has_managed_control_plane:
            masters, etcd, managed_nodes = 0, 0, control_plane_nodes
        else:
            masters, etcd, managed_nodes = control_plane_nodes, hadr.etcd_nodes, 0

        dr_nodes = self.dr_node_count(hadr.dr_pattern, workers)

        for field_name, value in (("masters", masters), ("infra", infra), ("workers", workers),
                                  ("etcd", etcd), ("dr_nodes", dr_nodes)):
            if value < 0:
                raise PolicyViolation(f"Negative {field_name} count ({value})", invariant="node_count_non_negative",
                                      environment=label)

        total_nodes = masters + infra + workers + etcd
        total_cpu = (masters + etcd) * master_spec.cpu + infra * infra_spec.cpu + workers * worker_spec.cpu
        total_ram = (masters + etcd) * master_spec.ram_gb + infra * infra_spec.ram_gb + workers * worker_spec.ram_gb
        total_disk = (masters + etcd) * master_spec.disk_gb + infra * infra_spec.disk_gb + workers * worker_spec.disk_gb

        zones = 1 if hadr.node_distribution == NodeDistribution.SINGLE_AZ else hadr.availability_zones

        logger.debug(
            "%s: apps=%d pods=%d masters=%d infra=%d workers=%d etcd=%d dr=%d",
            label, demand.apps, demand.pods, masters, infra, workers, etcd, dr_nodes,
        )
        return EnvironmentResult(
            environment=label,
            environment_name=name,
            is_prod=workload_environment.is_production_like,
            apps=demand.apps,
            replicas=config.policy.replicas_for(workload_environment, self.settings),
            pods=demand.pods,
            masters=masters,
            infra=infra,
            workers=workers,
            etcd=etcd,
            dr_nodes=dr_nodes,
            availability_zones=zones,
            dr_cost_multiplier=self.hadr_model.multiplier(hadr),
            hadr_summary=hadr.summary(),
            managed_control_plane=profile.has_managed_control_plane,
            managed_control_plane_nodes=managed_nodes,
            master_spec=master_spec,
            infra_spec=infra_spec,
            worker_spec=worker_spec,
            total_nodes=total_nodes,
            total_cpu=total_cpu,
            total_ram_gb=total_ram,
            total_disk_gb=total_disk,
            hadr=hadr,
        )

    def worker_count(
        self,
        cpu_demand: float,
        ram_demand: float,
        worker_spec: NodeSpec,
        config: SizingInput,
        environment: EnvironmentKind,
        overcommit_environment: Optional[EnvironmentKind] = None
    ) -> int:
        """
        Worker nodes needed for the pod demand.

        Demand is inflated by the environment's headroom, node capacity is
        reduced by the system reserve and stretched by overcommit (taken from
        `overcommit_environment` when given); the larger of the CPU and RAM
        node counts wins, floored at the minimum worker count.
        """
        if worker_spec.cpu <= 0 or worker_spec.ram_gb <= 0:
            raise ConfigurationError(
                "Worker node spec must have positive CPU and RAM",
                lookup="worker_spec",
                environment=environment.value,
            )
        policy = config.policy
        headroom_factor = 1 + policy.headroom_for(environment) / 100
        cpu_overcommit, ram_overcommit = policy.overcommit_for(overcommit_environment or environment, self.settings)

        cpu_per_node = worker_spec.cpu * policy.reserve_factor * cpu_overcommit
        ram_per_node = worker_spec.ram_gb * policy.reserve_factor * ram_overcommit

        by_cpu = _ceil(cpu_demand * headroom_factor / cpu_per_node)
        by_ram = _ceil(ram_demand * headroom_factor / ram_per_node)
        return max(by_cpu, by_ram, self.settings.min_workers)

    def infra_count(self, apps: int, profile: DistributionProfile, environment: EnvironmentKind) -> int:
        """Infra nodes (routers, registry, monitoring) for distributions that run them."""
        if not profile.has_infra_nodes:
            return 0
        settings = self.settings
        infra = max(settings.min_infra, _ceil(apps / settings.apps_per_infra))
        if environment.is_production_like and apps >= settings.large_deployment_threshold:
            infra = max(infra, settings.min_prod_infra_large)
        return min(infra, settings.max_infra)

    def control_plane_count(self, hadr: HADRConfig, workers: int) -> int:
        if hadr.control_plane_ha == ControlPlaneHA.SINGLE:
            count = 1
        else:
            count = hadr.control_plane_nodes
        if workers > self.settings.large_cluster_worker_threshold:
            count = max(count, self.settings.large_cluster_control_plane_nodes)
        return count

    def dr_node_count(self, pattern: DRPattern, workers: int) -> int:
        """Nodes kept running at the recovery site."""
        if pattern == DRPattern.WARM_STANDBY:
            return _ceil(workers * self.settings.warm_standby_fraction)
        if pattern == DRPattern.HOT_STANDBY:
            return _ceil(workers * self.settings.hot_standby_fraction)
        if pattern == DRPattern.ACTIVE_ACTIVE:
            return workers
        # None and BackupRestore keep no running capacity
        return 0

    def compute_vm(self, vm_input: VMSizingInput) -> VMSizingResult:
        """
        Size a VM fleet.

        Args:
            vm_input: Validated VM sizing configuration

        Returns:
            VMSizingResult with per-environment role breakdowns and grand total

        Raises:
            ConfigurationError: If Prod is not configured, or a role has no spec
        """
        config = vm_input.clone()
        environments = config.ordered_environments()
        if EnvironmentKind.PROD not in environments:
            raise ConfigurationError("Production environment must be enabled", lookup="vm_environments")

        results = [
            self._size_vm_environment(env, config.environments[env], config)
            for env in environments
        ]
        grand_total = VMGrandTotal.from_results(results)
        logger.info(
            "Sized VM fleet: %d environment(s), %d VMs, %.0f vCPU, %.0f GB RAM",
            len(results),
            grand_total.total_nodes,
            grand_total.total_cpu,
            grand_total.total_ram_gb,
        )
        return VMSizingResult(
            environments=results,
            grand_total=grand_total,
            technology=config.technology,
            calculated_at=datetime.utcnow(),
        )

    def _size_vm_environment(
        self,
        environment: EnvironmentKind,
        env_config: VMEnvironmentConfig,
        config: VMSizingInput
    ) -> VMEnvironmentResult:
        ha_multiplier = self.settings.ha_multiplier(env_config.ha_pattern)
        roles = [
            self._size_vm_role(role, ha_multiplier, config.technology, config.system_overhead_percent)
            for role in env_config.roles
        ]
        lb_vms, lb_cpu, lb_ram = self.settings.load_balancer_specs(env_config.load_balancer)
        return VMEnvironmentResult(
            environment=environment.value,
            environment_name=environment.display_name,
            is_prod=environment.is_production_like,
            ha_pattern=env_config.ha_pattern,
            dr_pattern=env_config.dr_pattern,
            roles=roles,
            load_balancer_vms=lb_vms,
            load_balancer_spec=NodeSpec(lb_cpu, lb_ram, 0),
            storage_gb=env_config.storage_gb,
        )

    def _size_vm_role(
        self,
        role_config: VMRoleConfig,
        ha_multiplier: float,
        technology: str,
        overhead_percent: float
    ) -> VMRoleResult:
        base_cpu, base_ram = get_vm_role_spec(
            role_config.role, role_config.tier, technology, self.settings.vm_high_memory_multiplier
        )
        cpu = role_config.custom_cpu if role_config.custom_cpu is not None else base_cpu
        ram = role_config.custom_ram_gb if role_config.custom_ram_gb is not None else base_ram

        overhead = 1 + overhead_percent / 100
        return VMRoleResult(
            role=role_config.role,
            role_name=role_config.name or SERVER_ROLE_NAMES[role_config.role],
            tier=role_config.tier,
            base_instances=role_config.instance_count,
            total_instances=_ceil(role_config.instance_count * ha_multiplier),
            cpu_per_instance=_ceil(cpu * overhead),
            ram_per_instance=_ceil(ram * overhead),
            disk_per_instance=role_config.disk_gb,
        )
