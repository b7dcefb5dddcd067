"""
Tests for the cost estimator service.
"""

import pytest

from infrasizing.domain.cost_models import (
    CloudContext,
    CostCategory,
    EnvironmentLicensedContext,
    LicensedPlatformContext,
    OnPremContext,
    PricingType,
)
from infrasizing.domain.environments import EnvironmentKind, NodeSpec
from infrasizing.domain.errors import ConfigurationError
from infrasizing.domain.hadr_models import HADRConfig, NodeDistribution
from infrasizing.domain.licensing_models import (
    Discount,
    DiscountScope,
    DiscountType,
    EnvironmentLicensedConfig,
    EnvironmentLicensedDeployment,
    LicensedPlatformConfig,
    PlatformDeployment,
    ResourcePackTier,
)
from infrasizing.pricing.cloud_providers import get_provider_pricing
from infrasizing.pricing.environment_licensed import DEFAULT_ENVIRONMENT_LICENSED_PRICING
from infrasizing.pricing.licensed_platform import DEFAULT_LICENSED_PLATFORM_PRICING
from infrasizing.services.cost_estimator import (
    CostEstimator,
    CostEstimatorError,
    CONTROL_PLANE_ITEM,
    HADR_UPLIFT_ITEM,
    calculate_discount,
    _empty_categories,
    _finalize_breakdown,
)
from infrasizing.services.hadr_cost_model import HADRCostModel


BASIC_HADR = HADRConfig(node_distribution=NodeDistribution.SINGLE_AZ, availability_zones=1)


@pytest.fixture
def estimator():
    return CostEstimator()


@pytest.fixture
def kubernetes_sizing(calculator, prod_only_kubernetes_input):
    return calculator.compute(prod_only_kubernetes_input)


@pytest.fixture
def openshift_sizing(calculator, openshift_input):
    return calculator.compute(openshift_input)


def _line_items(estimate, category):
    return estimate.category(category).line_items


def _uplift_items(estimate):
    return [item for item in _line_items(estimate, CostCategory.COMPUTE)
            if item.description.startswith(HADR_UPLIFT_ITEM)]


def _base_compute(estimate):
    return sum(item.total for item in _line_items(estimate, CostCategory.COMPUTE)
               if not item.description.startswith(HADR_UPLIFT_ITEM))


class TestTotals:

    def test_tco_identities(self, estimator, kubernetes_sizing):
        estimate = estimator.estimate(kubernetes_sizing, CloudContext(provider="aws"))

        assert estimate.monthly_total > 0
        assert estimate.yearly_total == pytest.approx(estimate.monthly_total * 12)
        assert estimate.three_year_tco == pytest.approx(estimate.yearly_total * 3)
        assert estimate.five_year_tco == pytest.approx(estimate.yearly_total * 5)

    def test_monthly_total_is_sum_of_categories(self, estimator, openshift_sizing):
        estimate = estimator.estimate(openshift_sizing, CloudContext(provider="gcp"))
        assert estimate.monthly_total == pytest.approx(sum(entry.monthly for entry in estimate.breakdown))

    def test_category_percentages_sum_to_100(self, estimator, openshift_sizing):
        estimate = estimator.estimate(openshift_sizing, CloudContext(provider="azure", support_plan="business"))
        assert sum(entry.percentage for entry in estimate.breakdown) == pytest.approx(100.0)

    def test_zero_total_has_zero_percentages(self):
        breakdown = _finalize_breakdown(_empty_categories())
        assert [entry.percentage for entry in breakdown] == [0.0] * len(CostCategory)

    def test_breakdown_lists_every_category_in_order(self, estimator, kubernetes_sizing):
        estimate = estimator.estimate(kubernetes_sizing, CloudContext(provider="aws"))
        assert [entry.category for entry in estimate.breakdown] == list(CostCategory)


class TestEnvironmentAllocation:

    def test_percentages_sum_to_100(self, estimator, openshift_sizing):
        estimate = estimator.estimate(openshift_sizing, CloudContext(provider="aws"))
        assert sum(env.percentage for env in estimate.environment_costs) == pytest.approx(100.0)
        assert sum(env.monthly_cost for env in estimate.environment_costs) == pytest.approx(estimate.monthly_total)

    def test_default_split_follows_node_share(self, estimator, openshift_sizing):
        estimate = estimator.estimate(openshift_sizing, CloudContext(provider="aws"))
        total_nodes = openshift_sizing.grand_total.total_nodes
        prod = next(env for env in estimate.environment_costs if env.environment == "prod")
        assert prod.percentage == pytest.approx(openshift_sizing.environment("prod").total_nodes / total_nodes * 100)

    def test_custom_weights(self, estimator, openshift_sizing):
        weights = {"dev": 1, "test": 0, "stage": 0, "prod": 3}
        estimate = estimator.estimate(openshift_sizing, CloudContext(provider="aws"), environment_weights=weights)
        shares = {env.environment: env.percentage for env in estimate.environment_costs}
        assert shares["prod"] == pytest.approx(75.0)
        assert shares["dev"] == pytest.approx(25.0)
        assert shares["test"] == 0.0


class TestCloudPricing:

    def test_unknown_instance_type_uses_vcpu_equivalent(self):
        aws = get_provider_pricing("aws")
        assert aws.instance_hourly_rate("x9.mega") == pytest.approx(aws.cpu_per_hour * 4)

    def test_oversize_spec_priced_per_resource(self):
        aws = get_provider_pricing("aws")
        name, rate = aws.node_hourly_rate(NodeSpec(96, 768))
        assert name.startswith("custom-")
        assert rate == pytest.approx(96 * aws.cpu_per_hour + 768 * aws.ram_gb_per_hour)

    def test_unknown_provider_falls_back_to_aws(self, estimator, kubernetes_sizing):
        estimate = estimator.estimate(kubernetes_sizing, CloudContext(provider="nimbus"))
        assert estimate.provider == "aws"
        assert estimate.region == "us-east-1"
        assert any("nimbus" in assumption for assumption in estimate.assumptions)

    def test_known_provider_has_no_fallback_note(self, estimator, kubernetes_sizing):
        estimate = estimator.estimate(kubernetes_sizing, CloudContext(provider="Scaleway"))
        assert estimate.provider == "scaleway"
        assert not any("No price table" in assumption for assumption in estimate.assumptions)

    @pytest.mark.parametrize("provider", [
        "alibaba", "civo", "exoscale", "huawei", "ibm", "ovh", "scaleway", "tencent", "vultr",
    ])
    def test_regional_and_budget_providers(self, estimator, kubernetes_sizing, provider):
        pricing = get_provider_pricing(provider)
        estimate = estimator.estimate(kubernetes_sizing, CloudContext(provider=provider))

        assert estimate.provider == provider
        assert estimate.region == pricing.default_region
        assert estimate.category(CostCategory.COMPUTE).monthly > 0

    def test_international_region_uplift(self, estimator, kubernetes_sizing):
        domestic = estimator.estimate(kubernetes_sizing, CloudContext(provider="alibaba"))
        international = estimator.estimate(kubernetes_sizing, CloudContext(provider="alibaba", region="eu-central-1"))
        assert international.category(CostCategory.COMPUTE).monthly == pytest.approx(
            domestic.category(CostCategory.COMPUTE).monthly * 1.1
        )

    def test_unknown_support_plan_raises(self, estimator, kubernetes_sizing):
        with pytest.raises(ConfigurationError):
            estimator.estimate(kubernetes_sizing, CloudContext(provider="aws", support_plan="platinum"))

    def test_support_is_percentage_of_other_categories(self, estimator, kubernetes_sizing):
        estimate = estimator.estimate(kubernetes_sizing, CloudContext(provider="aws", support_plan="enterprise"))
        others = sum(entry.monthly for entry in estimate.breakdown if entry.category != CostCategory.SUPPORT)
        assert estimate.category(CostCategory.SUPPORT).monthly == pytest.approx(others * 0.15)

    def test_reserved_pricing_is_cheaper(self, estimator, kubernetes_sizing):
        on_demand = estimator.estimate(kubernetes_sizing, CloudContext(provider="aws"))
        reserved = estimator.estimate(
            kubernetes_sizing, CloudContext(provider="aws", pricing_type=PricingType.RESERVED_3YR)
        )
        assert reserved.monthly_total < on_demand.monthly_total

    def test_managed_control_plane_billed_per_cluster(self, estimator, calculator, prod_only_kubernetes_input):
        prod_only_kubernetes_input.distribution = "eks"
        sizing = calculator.compute(prod_only_kubernetes_input)
        estimate = estimator.estimate(sizing, CloudContext(provider="aws"))

        control_plane = [item for item in _line_items(estimate, CostCategory.COMPUTE)
                         if item.description == CONTROL_PLANE_ITEM]
        assert len(control_plane) == 1
        assert control_plane[0].unit_price == pytest.approx(0.10 * 730)

    def test_self_managed_control_plane_has_no_cluster_fee(self, estimator, kubernetes_sizing):
        estimate = estimator.estimate(kubernetes_sizing, CloudContext(provider="aws"))
        descriptions = [item.description for item in _line_items(estimate, CostCategory.COMPUTE)]
        assert CONTROL_PLANE_ITEM not in descriptions

    def test_managed_control_plane_uses_ha_rate_for_multi_az(self, estimator, calculator,
                                                              prod_only_kubernetes_input):
        prod_only_kubernetes_input.distribution = "aks"
        multi_az = estimator.estimate(calculator.compute(prod_only_kubernetes_input), CloudContext(provider="azure"))

        prod_only_kubernetes_input.hadr = BASIC_HADR
        single_az = estimator.estimate(calculator.compute(prod_only_kubernetes_input), CloudContext(provider="azure"))

        def control_plane_price(estimate):
            return next(item.unit_price for item in _line_items(estimate, CostCategory.COMPUTE)
                        if item.description == CONTROL_PLANE_ITEM)

        assert control_plane_price(multi_az) == pytest.approx(0.10 * 730)
        assert control_plane_price(single_az) == 0.0


class TestHADRPricing:

    def test_sized_posture_is_priced(self, estimator, calculator, prod_only_kubernetes_input, warm_standby_hadr):
        prod_only_kubernetes_input.hadr = warm_standby_hadr
        sizing = calculator.compute(prod_only_kubernetes_input)
        estimate = estimator.estimate(sizing, CloudContext(provider="aws"))

        expected = HADRCostModel().multiplier(warm_standby_hadr, get_provider_pricing("aws"))
        assert expected > 1.0
        assert estimate.hadr_multiplier == pytest.approx(expected)

        uplift = _uplift_items(estimate)
        assert len(uplift) == 1
        assert uplift[0].environment == "prod"
        assert estimate.category(CostCategory.COMPUTE).monthly == pytest.approx(_base_compute(estimate) * expected)

    def test_basic_posture_has_no_uplift(self, estimator, calculator, prod_only_kubernetes_input):
        prod_only_kubernetes_input.hadr = BASIC_HADR
        estimate = estimator.estimate(calculator.compute(prod_only_kubernetes_input), CloudContext(provider="aws"))

        assert estimate.hadr_multiplier == 1.0
        assert _uplift_items(estimate) == []

    def test_context_posture_overrides_sized_posture(self, estimator, calculator, prod_only_kubernetes_input,
                                                      warm_standby_hadr):
        prod_only_kubernetes_input.hadr = warm_standby_hadr
        sizing = calculator.compute(prod_only_kubernetes_input)
        estimate = estimator.estimate(sizing, CloudContext(provider="aws", hadr=BASIC_HADR))

        assert estimate.hadr_multiplier == 1.0
        assert _uplift_items(estimate) == []

    def test_per_environment_postures(self, estimator, calculator, openshift_input, warm_standby_hadr):
        openshift_input.hadr = BASIC_HADR
        openshift_input.environment_hadr = {EnvironmentKind.PROD: warm_standby_hadr}
        sizing = calculator.compute(openshift_input)
        estimate = estimator.estimate(sizing, CloudContext(provider="aws"))

        multipliers = {cost.environment: cost.hadr_multiplier for cost in estimate.environment_costs}
        assert multipliers["prod"] > 1.0
        assert multipliers["dev"] == multipliers["test"] == multipliers["stage"] == 1.0
        assert [item.environment for item in _uplift_items(estimate)] == ["prod"]
        # Blended over the whole footprint, so below the Prod-only multiplier
        assert 1.0 < estimate.hadr_multiplier < multipliers["prod"]

    def test_uplift_excludes_storage(self, estimator, kubernetes_sizing, warm_standby_hadr):
        plain = estimator.estimate(kubernetes_sizing, CloudContext(provider="aws", hadr=BASIC_HADR))
        resilient = estimator.estimate(kubernetes_sizing, CloudContext(provider="aws", hadr=warm_standby_hadr))

        assert resilient.category(CostCategory.COMPUTE).monthly > plain.category(CostCategory.COMPUTE).monthly
        assert resilient.category(CostCategory.STORAGE).monthly == pytest.approx(
            plain.category(CostCategory.STORAGE).monthly
        )

    def test_openshift_subscription_is_licensed_per_node(self, estimator, openshift_sizing):
        estimate = estimator.estimate(openshift_sizing, CloudContext(provider="aws"))
        license_total = estimate.category(CostCategory.LICENSE).monthly
        assert license_total == pytest.approx(openshift_sizing.grand_total.total_nodes * 2500 / 12)

    def test_vm_fleet_estimate(self, estimator, calculator, vm_input):
        sizing = calculator.compute_vm(vm_input)
        estimate = estimator.estimate(sizing, CloudContext(provider="azure"))
        assert estimate.monthly_total > 0
        assert estimate.category(CostCategory.LICENSE).monthly == 0
        assert estimate.total_nodes == 15


class TestOnPrem:

    def test_estimate(self, estimator, openshift_sizing):
        estimate = estimator.estimate(openshift_sizing, OnPremContext())
        assert estimate.provider == "on_prem"
        assert estimate.category(CostCategory.COMPUTE).monthly > 0
        assert estimate.category(CostCategory.SUPPORT).monthly > 0
        assert estimate.category(CostCategory.STORAGE).monthly > 0

    def test_missing_cost_basis_raises(self, estimator, kubernetes_sizing):
        with pytest.raises(ConfigurationError) as exc_info:
            estimator.estimate(kubernetes_sizing, OnPremContext(pricing=None))
        assert exc_info.value.lookup == "on_prem_pricing"


class TestCompare:

    def test_sorted_cheapest_first(self, estimator, kubernetes_sizing):
        comparison = estimator.compare(kubernetes_sizing, [
            CloudContext(provider="aws"),
            CloudContext(provider="hetzner"),
            CloudContext(provider="azure"),
            OnPremContext(),
        ])
        totals = [estimate.monthly_total for estimate in comparison.estimates]
        assert totals == sorted(totals)
        assert comparison.cheapest is comparison.estimates[0]
        assert comparison.monthly_savings == pytest.approx(totals[-1] - totals[0])
        assert comparison.insights

    def test_single_context_has_no_insights(self, estimator, kubernetes_sizing):
        comparison = estimator.compare(kubernetes_sizing, [CloudContext(provider="gcp")])
        assert comparison.insights == []


class TestDiscount:

    def test_fixed_discount_capped_at_scope(self):
        discount = Discount(type=DiscountType.FIXED, scope=DiscountScope.LICENSE_ONLY, value=100000)
        assert calculate_discount(discount, 50000, 20000, 10000) == 50000

    def test_percentage_of_total(self):
        discount = Discount(type=DiscountType.PERCENTAGE, scope=DiscountScope.TOTAL, value=10)
        assert calculate_discount(discount, 50000, 20000, 10000) == pytest.approx(8000)

    def test_percentage_above_100_rejected(self):
        with pytest.raises(ValueError):
            Discount(type=DiscountType.PERCENTAGE, scope=DiscountScope.TOTAL, value=120)


class TestLicensedPlatform:

    def test_ao_packs_and_edition(self, estimator):
        quote = estimator.price_licensed_platform(LicensedPlatformConfig(application_objects=1000))
        assert quote.ao_packs == 7
        assert quote.license_subtotal == pytest.approx(7 * 36300.0)

    def test_internal_users_above_allowance(self, estimator):
        quote = estimator.price_licensed_platform(LicensedPlatformConfig(internal_users=350))
        # 250 billable users -> 3 packs in the first band
        assert quote.license_items["Internal users (+250)"] == pytest.approx(3 * 6000.0)

    def test_unknown_add_on_raises(self, estimator):
        with pytest.raises(ConfigurationError):
            estimator.price_licensed_platform(LicensedPlatformConfig(add_ons={"quantum_cache": 1}))

    def test_sentry_includes_high_availability(self, estimator):
        quote = estimator.price_licensed_platform(
            LicensedPlatformConfig(add_ons={"sentry": 1, "high_availability": 1})
        )
        assert "sentry (x1)" in quote.add_on_items
        assert "high_availability (x1)" not in quote.add_on_items
        assert quote.warnings

    def test_cloud_only_add_on_ignored_when_self_managed(self, estimator):
        quote = estimator.price_licensed_platform(LicensedPlatformConfig(
            deployment=PlatformDeployment.SELF_MANAGED, add_ons={"log_streaming": 1},
        ))
        assert quote.add_on_items == {}
        assert len(quote.warnings) == 1

    def test_unknown_success_plan_raises(self, estimator):
        with pytest.raises(ConfigurationError):
            estimator.price_licensed_platform(LicensedPlatformConfig(success_plan="diamond"))

    def test_fixed_discount_never_exceeds_license(self, estimator):
        quote = estimator.price_licensed_platform(LicensedPlatformConfig(
            discount=Discount(type=DiscountType.FIXED, scope=DiscountScope.LICENSE_ONLY, value=10 ** 7),
        ))
        assert quote.discount_amount == pytest.approx(quote.license_subtotal)
        assert quote.total_per_year >= 0

    def test_estimate_with_services_discount(self, estimator, kubernetes_sizing):
        platform = LicensedPlatformConfig(
            success_plan="essential",
            discount=Discount(type=DiscountType.PERCENTAGE, scope=DiscountScope.SERVICES_ONLY, value=20),
        )
        estimate = estimator.estimate(kubernetes_sizing, LicensedPlatformContext(config=platform))

        support_items = _line_items(estimate, CostCategory.SUPPORT)
        discount_items = [item for item in support_items if item.description.startswith("Discount")]
        assert len(discount_items) == 1
        assert discount_items[0].total == pytest.approx(-30250.0 * 0.2 / 12)
        assert estimate.monthly_total == pytest.approx(estimate.licensed_platform_quote.total_per_month)

    def test_self_managed_includes_infrastructure(self, estimator, kubernetes_sizing):
        platform = LicensedPlatformConfig(deployment=PlatformDeployment.SELF_MANAGED)
        context = LicensedPlatformContext(config=platform, infrastructure=CloudContext(provider="aws"))
        estimate = estimator.estimate(kubernetes_sizing, context)

        assert estimate.provider == "aws"
        assert estimate.licensed_platform_quote.infrastructure_per_year > 0
        assert estimate.category(CostCategory.COMPUTE).monthly > 0

    def test_default_price_list(self, estimator, kubernetes_sizing):
        context = LicensedPlatformContext(config=LicensedPlatformConfig())
        assert context.pricing is None

        estimate = estimator.estimate(kubernetes_sizing, context)
        quote = estimate.licensed_platform_quote
        assert quote.license_items["Edition (includes 1 AO pack)"] == DEFAULT_LICENSED_PLATFORM_PRICING.edition_base_price


class TestEnvironmentLicensedPlatform:

    @pytest.mark.parametrize("environments,expected", [
        (3, 0.0),
        (10, 7 * 552.0),
        (60, 50 * 552.0 + 7 * 408.0),
        (200, 50 * 552.0 + 50 * 408.0 + 50 * 240.0),
    ])
    def test_kubernetes_environment_bands(self, estimator, environments, expected):
        quote = estimator.price_environment_licensed_platform(
            EnvironmentLicensedConfig(environments=environments)
        )
        assert quote.deployment_subtotal == pytest.approx(6360.0 + expected)

    def test_user_blocks(self, estimator):
        quote = estimator.price_environment_licensed_platform(
            EnvironmentLicensedConfig(internal_users=250, external_users=300000)
        )
        assert quote.license_items["Internal users (250)"] == pytest.approx(3 * 40800.0)
        assert quote.license_items["External users (300000)"] == pytest.approx(2 * 60000.0)

    def test_volume_discount_covers_licenses_only(self, estimator):
        quote = estimator.price_environment_licensed_platform(
            EnvironmentLicensedConfig(environments=10, customer_enablement=True)
        )
        assert quote.discount_percent == 10.0
        assert quote.discount_amount == pytest.approx((65400.0 + 40800.0) * 0.1)

    def test_volume_discount_can_be_disabled(self, estimator):
        quote = estimator.price_environment_licensed_platform(EnvironmentLicensedConfig(volume_discount=False))
        assert quote.discount_amount == 0.0

    def test_saas_resource_packs(self, estimator):
        quote = estimator.price_environment_licensed_platform(EnvironmentLicensedConfig(
            deployment=EnvironmentLicensedDeployment.SAAS,
            resource_pack_tier=ResourcePackTier.PREMIUM,
            resource_pack_size="m",
            resource_pack_quantity=2,
            additional_database_storage_gb=150,
        ))
        assert quote.deployment_items["2x premium M resource pack"] == pytest.approx(2 * 3096.0)
        assert quote.deployment_items["Additional database storage (200 GB)"] == pytest.approx(2 * 246.0)
        assert quote.cloud_tokens == 120

    def test_pack_missing_from_tier_raises(self, estimator):
        with pytest.raises(ConfigurationError):
            estimator.price_environment_licensed_platform(EnvironmentLicensedConfig(
                deployment=EnvironmentLicensedDeployment.SAAS,
                resource_pack_tier=ResourcePackTier.PREMIUM_PLUS,
                resource_pack_size="S",
            ))

    def test_azure_additional_environments(self, estimator):
        quote = estimator.price_environment_licensed_platform(EnvironmentLicensedConfig(
            deployment=EnvironmentLicensedDeployment.AZURE, environments=5,
        ))
        assert quote.deployment_subtotal == pytest.approx(6612.0 + 2 * 722.40)
        assert quote.cloud_tokens == 28

    def test_server_per_app(self, estimator):
        quote = estimator.price_environment_licensed_platform(EnvironmentLicensedConfig(
            deployment=EnvironmentLicensedDeployment.SERVER, unlimited_apps=False, apps=3,
        ))
        assert quote.deployment_subtotal == pytest.approx(3 * 6612.0)

    def test_dedicated_cloud(self, estimator):
        quote = estimator.price_environment_licensed_platform(
            EnvironmentLicensedConfig(deployment=EnvironmentLicensedDeployment.DEDICATED)
        )
        assert quote.deployment_items == {"Dedicated cloud": 368100.0}

    def test_unsupported_kubernetes_provider_warns(self, estimator):
        quote = estimator.price_environment_licensed_platform(EnvironmentLicensedConfig(kubernetes_provider="k3s"))
        assert any("k3s" in warning for warning in quote.warnings)

    def test_genai_add_ons(self, estimator):
        quote = estimator.price_environment_licensed_platform(
            EnvironmentLicensedConfig(genai_pack="m", genai_knowledge_base=True)
        )
        assert quote.add_ons_subtotal == pytest.approx(3715.20 + 2476.80)
        assert quote.cloud_tokens == 72 + 48

    def test_unknown_genai_pack_raises(self, estimator):
        with pytest.raises(ConfigurationError):
            estimator.price_environment_licensed_platform(EnvironmentLicensedConfig(genai_pack="XL"))

    def test_negative_environments_rejected(self):
        with pytest.raises(ValueError):
            EnvironmentLicensedConfig(environments=-1)

    def test_recommend_resource_pack(self):
        pack = DEFAULT_ENVIRONMENT_LICENSED_PRICING.recommend_resource_pack("standard", memory_gb=6, vcpu=1.5)
        assert pack.size == "L"
        assert DEFAULT_ENVIRONMENT_LICENSED_PRICING.recommend_resource_pack("standard", 512, 1) is None

    def test_kubernetes_estimate_includes_infrastructure(self, estimator, kubernetes_sizing):
        context = EnvironmentLicensedContext(
            config=EnvironmentLicensedConfig(environments=5),
            infrastructure=CloudContext(provider="aws"),
        )
        estimate = estimator.estimate(kubernetes_sizing, context)

        quote = estimate.environment_licensed_quote
        assert estimate.provider == "aws"
        assert quote.infrastructure_per_year > 0
        assert estimate.category(CostCategory.COMPUTE).monthly > 0
        assert estimate.monthly_total == pytest.approx(quote.total_per_month)

    def test_saas_ignores_infrastructure(self, estimator, kubernetes_sizing):
        context = EnvironmentLicensedContext(
            config=EnvironmentLicensedConfig(deployment=EnvironmentLicensedDeployment.SAAS, resource_pack_size="S"),
            infrastructure=CloudContext(provider="aws"),
        )
        estimate = estimator.estimate(kubernetes_sizing, context)

        assert estimate.provider == "environment_licensed_platform"
        assert estimate.environment_licensed_quote.infrastructure_per_year == 0.0
        assert estimate.category(CostCategory.COMPUTE).monthly == 0.0
        assert any("infrastructure context ignored" in warning for warning in estimate.assumptions)


class TestUnsupportedContext:

    def test_raises(self, estimator, kubernetes_sizing):
        with pytest.raises(CostEstimatorError):
            estimator.estimate(kubernetes_sizing, object())
