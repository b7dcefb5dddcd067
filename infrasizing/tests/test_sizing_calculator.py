"""
Tests for container-platform and VM sizing.
"""

import pytest
from dataclasses import replace
from unittest.mock import patch

from infrasizing.core.config import CalculatorSettings
from infrasizing.domain.environments import EnvironmentKind, AppTierCounts, NodeSpec
from infrasizing.domain.errors import ConfigurationError
from infrasizing.domain.hadr_models import HADRConfig, ControlPlaneHA, DRPattern, HAPattern
from infrasizing.domain.sizing_models import SizingInput, ClusterMode
from infrasizing.pricing.distributions import get_distribution
from infrasizing.services.sizing_calculator import SizingCalculator


def _assert_totals_identity(result):
    for env in result.environments:
        assert env.total_nodes == env.masters + env.infra + env.workers + env.etcd
    assert result.grand_total.total_nodes == sum(env.total_nodes for env in result.environments)


class TestKubernetesScenario:
    """Vanilla Kubernetes, Prod only, 10 small + 5 medium Java apps on 16/64 workers."""

    def test_pods(self, calculator, prod_only_kubernetes_input):
        prod = calculator.compute(prod_only_kubernetes_input).environment("prod")
        assert prod.pods == 45
        assert prod.replicas == 3

    def test_node_counts(self, calculator, prod_only_kubernetes_input):
        prod = calculator.compute(prod_only_kubernetes_input).environment("prod")
        # 30 vCPU / (16 x 0.85) -> 3 nodes; 60 GB / (64 x 0.85) -> 2 nodes; floor 3
        assert prod.workers == 3
        assert prod.infra == 0
        assert prod.etcd == 0
        assert prod.masters == 3

    def test_cpu_total_is_masters_plus_workers(self, calculator, prod_only_kubernetes_input):
        prod = calculator.compute(prod_only_kubernetes_input).environment("prod")
        masters_cpu = prod.masters * prod.master_spec.cpu
        workers_cpu = prod.workers * prod.worker_spec.cpu
        assert prod.total_cpu == pytest.approx(masters_cpu + workers_cpu)
        assert prod.worker_spec == NodeSpec(16, 64, 100)

    def test_totals_identity(self, calculator, prod_only_kubernetes_input):
        _assert_totals_identity(calculator.compute(prod_only_kubernetes_input))

    def test_input_is_not_mutated(self, calculator, prod_only_kubernetes_input):
        before = prod_only_kubernetes_input.prod_apps
        calculator.compute(prod_only_kubernetes_input)
        assert prod_only_kubernetes_input.prod_apps == before
        assert prod_only_kubernetes_input.prod_apps is before


class TestOpenShift:

    def test_large_prod_deployment_gets_more_infra(self, calculator):
        sizing_input = SizingInput(
            distribution="openshift",
            enabled_environments=[EnvironmentKind.PROD],
            prod_apps=AppTierCounts(small=60),
        )
        prod = calculator.compute(sizing_input).environment("prod")
        assert prod.infra >= 5

    def test_small_deployment_keeps_minimum_infra(self, calculator):
        sizing_input = SizingInput(
            distribution="openshift",
            enabled_environments=[EnvironmentKind.PROD],
            prod_apps=AppTierCounts(small=10),
        )
        assert calculator.compute(sizing_input).environment("prod").infra == 3

    def test_every_enabled_environment_sized(self, calculator, openshift_input):
        result = calculator.compute(openshift_input)
        assert [env.environment for env in result.environments] == ["dev", "test", "stage", "prod"]
        assert result.environment("dev").apps == 20
        assert result.environment("prod").apps == 55
        _assert_totals_identity(result)


class TestManagedControlPlane:

    def test_masters_excluded_from_totals(self, calculator):
        sizing_input = SizingInput(
            distribution="eks",
            enabled_environments=[EnvironmentKind.PROD],
            prod_apps=AppTierCounts(medium=10),
        )
        prod = calculator.compute(sizing_input).environment("prod")
        assert prod.managed_control_plane
        assert prod.masters == 0
        assert prod.etcd == 0
        assert prod.managed_control_plane_nodes == 3
        assert prod.total_nodes == prod.workers


class TestControlPlaneAndDR:

    def test_single_control_plane(self, calculator, prod_only_kubernetes_input):
        sizing_input = replace(prod_only_kubernetes_input,
                               hadr=HADRConfig(control_plane_ha=ControlPlaneHA.SINGLE))
        assert calculator.compute(sizing_input).environment("prod").masters == 1

    def test_external_etcd_adds_etcd_nodes(self, calculator, prod_only_kubernetes_input):
        sizing_input = replace(prod_only_kubernetes_input, hadr=HADRConfig(
            control_plane_ha=ControlPlaneHA.EXTERNAL_ETCD, control_plane_nodes=3,
        ))
        prod = calculator.compute(sizing_input).environment("prod")
        assert prod.etcd == 3
        assert prod.total_nodes == prod.masters + prod.workers + 3

    def test_large_cluster_gets_five_control_plane_nodes(self, calculator):
        assert calculator.control_plane_count(HADRConfig(), workers=101) == 5
        assert calculator.control_plane_count(HADRConfig(), workers=100) == 3

    @pytest.mark.parametrize("pattern,expected", [
        (DRPattern.NONE, 0),
        (DRPattern.BACKUP_RESTORE, 0),
        (DRPattern.WARM_STANDBY, 3),
        (DRPattern.HOT_STANDBY, 9),
        (DRPattern.ACTIVE_ACTIVE, 10),
    ])
    def test_dr_nodes(self, calculator, pattern, expected):
        assert calculator.dr_node_count(pattern, workers=10) == expected

    def test_dr_nodes_reported_outside_total(self, calculator, prod_only_kubernetes_input):
        sizing_input = replace(prod_only_kubernetes_input,
                               hadr=HADRConfig(dr_pattern=DRPattern.ACTIVE_ACTIVE))
        prod = calculator.compute(sizing_input).environment("prod")
        assert prod.dr_nodes == prod.workers
        assert prod.total_nodes_with_dr == prod.total_nodes + prod.dr_nodes

    def test_environment_hadr_override(self, calculator, openshift_input):
        sizing_input = replace(openshift_input, environment_hadr={
            EnvironmentKind.DEV: HADRConfig(control_plane_ha=ControlPlaneHA.SINGLE),
        })
        result = calculator.compute(sizing_input)
        assert result.environment("dev").masters == 1
        assert result.environment("prod").masters == 3


class TestMonotonicity:

    def _workers(self, calculator, base, **changes):
        sizing_input = replace(base, **changes)
        return calculator.compute(sizing_input).environment("prod").workers

    def test_non_decreasing_in_app_count(self, calculator, prod_only_kubernetes_input):
        counts = [
            self._workers(calculator, prod_only_kubernetes_input, prod_apps=AppTierCounts(medium=apps))
            for apps in (0, 10, 50, 100, 400)
        ]
        assert counts == sorted(counts)

    def test_non_decreasing_in_headroom(self, calculator, prod_only_kubernetes_input):
        counts = []
        for headroom in (0.0, 25.0, 50.0, 100.0):
            policy = replace(prod_only_kubernetes_input.policy,
                             headroom_percent={EnvironmentKind.PROD: headroom})
            counts.append(self._workers(calculator, prod_only_kubernetes_input,
                                        prod_apps=AppTierCounts(large=50), policy=policy))
        assert counts == sorted(counts)

    def test_non_increasing_in_overcommit(self, calculator, prod_only_kubernetes_input):
        counts = []
        for ratio in (1.0, 1.5, 2.0, 4.0):
            policy = replace(prod_only_kubernetes_input.policy,
                             prod_cpu_overcommit=ratio, prod_ram_overcommit=ratio)
            counts.append(self._workers(calculator, prod_only_kubernetes_input,
                                        prod_apps=AppTierCounts(large=50), policy=policy))
        assert counts == sorted(counts, reverse=True)

    def test_disabled_headroom_ignores_percentages(self, calculator, prod_only_kubernetes_input):
        policy = replace(prod_only_kubernetes_input.policy, headroom_enabled=False,
                         headroom_percent={EnvironmentKind.PROD: 100.0})
        with_flag_off = self._workers(calculator, prod_only_kubernetes_input,
                                      prod_apps=AppTierCounts(large=50), policy=policy)
        baseline = self._workers(calculator, prod_only_kubernetes_input, prod_apps=AppTierCounts(large=50))
        assert with_flag_off == baseline


class TestWorkerFloor:

    def test_zero_apps_still_get_minimum_workers(self, calculator, prod_only_kubernetes_input):
        sizing_input = replace(prod_only_kubernetes_input, prod_apps=None)
        prod = calculator.compute(sizing_input).environment("prod")
        assert prod.apps == 0
        assert prod.workers == 3

    def test_custom_minimum(self, prod_only_kubernetes_input):
        calculator = SizingCalculator(CalculatorSettings(min_workers=5))
        assert calculator.compute(prod_only_kubernetes_input).environment("prod").workers == 5


class TestErrors:

    def test_prod_must_be_enabled(self, calculator, prod_only_kubernetes_input):
        sizing_input = replace(prod_only_kubernetes_input, enabled_environments=[EnvironmentKind.DEV])
        with pytest.raises(ConfigurationError):
            calculator.compute(sizing_input)

    def test_missing_worker_spec_raises(self, calculator):
        broken = replace(get_distribution("kubernetes"), prod_worker=None)
        sizing_input = SizingInput(
            distribution="kubernetes",
            enabled_environments=[EnvironmentKind.PROD],
            prod_apps=AppTierCounts(small=1),
        )
        with patch("infrasizing.services.sizing_calculator.get_distribution", return_value=broken):
            with pytest.raises(ConfigurationError) as exc_info:
                calculator.compute(sizing_input)
        assert exc_info.value.environment == "prod"

    def test_unknown_technology_raises(self, calculator, prod_only_kubernetes_input):
        with pytest.raises(ConfigurationError):
            calculator.compute(replace(prod_only_kubernetes_input, technology="fortran"))

    def test_zero_cpu_worker_spec_raises(self, calculator, prod_only_kubernetes_input):
        with pytest.raises(ConfigurationError):
            calculator.worker_count(10, 10, NodeSpec(0, 64), prod_only_kubernetes_input, EnvironmentKind.PROD)


class TestSharedCluster:

    def test_one_cluster_carries_all_workload(self, calculator, openshift_input):
        shared = calculator.compute(replace(openshift_input, cluster_mode=ClusterMode.SHARED_CLUSTER))
        separate = calculator.compute(openshift_input)

        assert shared.cluster_count == 1
        assert shared.environments[0].environment == "shared"
        assert shared.environments[0].apps == sum(env.apps for env in separate.environments)
        # every namespace runs at the Prod replica count
        assert shared.environments[0].replicas == 3
        assert shared.environments[0].pods == sum(env.apps * 3 for env in separate.environments)
        assert shared.environments[0].pods > sum(env.pods for env in separate.environments)
        _assert_totals_identity(shared)

    def test_shared_cluster_uses_prod_specs(self, calculator, openshift_input):
        shared = calculator.compute(replace(openshift_input, cluster_mode=ClusterMode.SHARED_CLUSTER))
        assert shared.environments[0].worker_spec == get_distribution("openshift").prod_worker


class TestPerEnvironmentMode:

    def test_sizes_only_the_selected_environment(self, calculator, openshift_input):
        result = calculator.compute(replace(
            openshift_input,
            cluster_mode=ClusterMode.PER_ENVIRONMENT,
            selected_environment=EnvironmentKind.DEV,
        ))

        assert result.cluster_count == 1
        dev = result.environments[0]
        assert dev.environment == "dev"
        assert dev.environment_name == "Dev Cluster"
        assert dev.apps == openshift_input.nonprod_apps.total
        assert dev.replicas == 1
        assert not dev.is_prod
        _assert_totals_identity(result)

    def test_selected_environment_uses_prod_specs(self, calculator, openshift_input):
        dev = calculator.compute(replace(
            openshift_input,
            cluster_mode=ClusterMode.PER_ENVIRONMENT,
            selected_environment=EnvironmentKind.DEV,
        )).environments[0]
        assert dev.worker_spec == get_distribution("openshift").prod_worker

    def test_defaults_to_prod(self, calculator, openshift_input):
        result = calculator.compute(replace(openshift_input, cluster_mode=ClusterMode.PER_ENVIRONMENT))
        multi = calculator.compute(openshift_input)

        assert result.cluster_count == 1
        assert result.environments[0].environment == "prod"
        assert result.environments[0].workers == multi.environment("prod").workers

    def test_disabled_selection_raises(self, calculator, openshift_input):
        config = replace(
            openshift_input,
            cluster_mode=ClusterMode.PER_ENVIRONMENT,
            enabled_environments=[EnvironmentKind.DEV, EnvironmentKind.PROD],
            selected_environment=EnvironmentKind.STAGE,
        )
        with pytest.raises(ConfigurationError):
            calculator.compute(config)


class TestHAPattern:

    def test_ha_pattern_multiplies_pods(self, calculator, prod_only_kubernetes_input):
        base = calculator.compute(prod_only_kubernetes_input).environment("prod").pods
        doubled = calculator.compute(
            replace(prod_only_kubernetes_input, ha_pattern=HAPattern.ACTIVE_ACTIVE)
        ).environment("prod").pods
        assert doubled == base * 2

    def test_replicas_clamped(self, calculator, prod_only_kubernetes_input):
        policy = replace(prod_only_kubernetes_input.policy, replicas={EnvironmentKind.PROD: 50})
        prod = calculator.compute(replace(prod_only_kubernetes_input, policy=policy)).environment("prod")
        assert prod.replicas == 10


class TestVMSizing:

    def test_instance_counts_with_ha(self, calculator, vm_input):
        result = calculator.compute_vm(vm_input)
        prod = next(env for env in result.environments if env.environment == "prod")
        assert [role.total_instances for role in prod.roles] == [4, 6, 2]
        assert prod.load_balancer_vms == 2
        assert prod.total_nodes == 14

    def test_overhead_rounds_up(self, calculator, vm_input):
        result = calculator.compute_vm(vm_input)
        web = result.environments[-1].roles[0]
        # medium web (4 vCPU, 8 GB) plus 15% overhead
        assert web.cpu_per_instance == 5
        assert web.ram_per_instance == 10

    def test_grand_total(self, calculator, vm_input):
        result = calculator.compute_vm(vm_input)
        assert result.grand_total.total_nodes == 15
        assert result.grand_total.total_nodes == sum(env.total_nodes for env in result.environments)

    def test_prod_required(self, calculator, vm_input):
        vm_input.environments[EnvironmentKind.PROD].enabled = False
        with pytest.raises(ConfigurationError):
            calculator.compute_vm(vm_input)
