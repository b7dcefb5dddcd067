"""
Cost estimator service.
Prices a sizing result on-premises, on a cloud provider, or as a
licensed low-code platform subscription (pack-licensed or environment-licensed).
"""
from typing import Dict, List, Optional, Union, Sequence, Tuple
from datetime import datetime
import logging
import math

from infrasizing.core.config import config
from infrasizing.domain.cost_models import (
    CostEstimate,
    CostBreakdown,
    CostCategory,
    CostComparison,
    CostLineItem,
    EnvironmentCost,
    PricingType,
    OnPremContext,
    CloudContext,
    LicensedPlatformContext,
    EnvironmentLicensedContext,
)
from infrasizing.domain.errors import ConfigurationError
from infrasizing.domain.hadr_models import NodeDistribution
from infrasizing.domain.licensing_models import (
    Discount,
    DiscountScope,
    DiscountType,
    EnvironmentLicensedConfig,
    EnvironmentLicensedDeployment,
    EnvironmentLicensedQuote,
    LicensedPlatformConfig,
    LicensedPlatformQuote,
    PlatformDeployment,
)
from infrasizing.domain.sizing_models import SizingResult
from infrasizing.domain.vm_models import VMSizingResult
from infrasizing.pricing.cloud_providers import (
    get_provider_pricing,
    SUPPORT_PLAN_PERCENT,
    RESERVED_DISCOUNT,
)
from infrasizing.pricing.distributions import DISTRIBUTIONS, DistributionProfile
from infrasizing.pricing.environment_licensed import (
    EnvironmentLicensedPricing,
    DEFAULT_ENVIRONMENT_LICENSED_PRICING,
)
from infrasizing.pricing.licensed_platform import LicensedPlatformPricing, DEFAULT_LICENSED_PLATFORM_PRICING
from infrasizing.pricing.tiered import resolve_tier, resolve_pack_count, graduated_pack_cost
from infrasizing.services.hadr_cost_model import HADRCostModel


logger = logging.getLogger(__name__)

AnySizingResult = Union[SizingResult, VMSizingResult]
PricingContext = Union[OnPremContext, CloudContext, LicensedPlatformContext, EnvironmentLicensedContext]

CONTROL_PLANE_ITEM = "Managed control plane"
HADR_UPLIFT_ITEM = "HA/DR uplift"


class CostEstimatorError(Exception):
    """Raised when a pricing context cannot be handled."""
    pass


def calculate_discount(discount: Discount, license_subtotal: float, add_ons_subtotal: float,
                       services_subtotal: float) -> float:
    """
    Discount amount for a scope.

    A percentage applies to the scope's subtotal; a fixed amount is capped
    at that subtotal so a scope never goes negative.
    """
    scope_amount = {
        DiscountScope.TOTAL: license_subtotal + add_ons_subtotal + services_subtotal,
        DiscountScope.LICENSE_ONLY: license_subtotal,
        DiscountScope.ADD_ONS_ONLY: add_ons_subtotal,
        DiscountScope.SERVICES_ONLY: services_subtotal,
    }[discount.scope]
    if discount.type == DiscountType.PERCENTAGE:
        return scope_amount * discount.value / 100
    return min(discount.value, scope_amount)


def _finalize_breakdown(categories: Dict[CostCategory, CostBreakdown]) -> List[CostBreakdown]:
    """Set category percentages of the grand total (0 when the total is 0)."""
    grand_total = sum(entry.monthly for entry in categories.values())
    for entry in categories.values():
        entry.percentage = entry.monthly / grand_total * 100 if grand_total > 0 else 0.0
    return [categories[category] for category in CostCategory]


def _empty_categories() -> Dict[CostCategory, CostBreakdown]:
    return {category: CostBreakdown(category=category, monthly=0.0) for category in CostCategory}


def _add_item(categories: Dict[CostCategory, CostBreakdown], category: CostCategory, item: CostLineItem) -> None:
    entry = categories[category]
    entry.line_items.append(item)
    entry.monthly += item.total


class CostEstimator:
    """Service for pricing sizing results."""

    def __init__(self, hadr_model: Optional[HADRCostModel] = None, currency: Optional[str] = None,
                 hours_per_month: Optional[int] = None):
        """
        Initialize cost estimator.

        Args:
            hadr_model: HA/DR multiplier model (creates new if None)
            currency: Display currency (defaults to configured currency)
            hours_per_month: Billing hours per month (defaults to 730)
        """
        self.hadr_model = hadr_model or HADRCostModel()
        self.currency = currency or config.CURRENCY
        self.hours_per_month = hours_per_month or config.HOURS_PER_MONTH

    def estimate(
        self,
        sizing_result: AnySizingResult,
        context: PricingContext,
        environment_weights: Optional[Dict[str, float]] = None
    ) -> CostEstimate:
        """
        Price a sizing result.

        Args:
            sizing_result: Container-platform or VM sizing result
            context: On-prem, cloud or licensed-platform pricing context
            environment_weights: Optional weighting for the per-environment split
                (defaults to each environment's node count)

        Returns:
            CostEstimate with category and per-environment breakdowns

        Raises:
            ConfigurationError: If the context lacks a required pricing table
            CostEstimatorError: If the context kind is not supported
        """
        if isinstance(context, CloudContext):
            estimate = self._estimate_cloud(sizing_result, context, environment_weights)
        elif isinstance(context, OnPremContext):
            estimate = self._estimate_on_prem(sizing_result, context, environment_weights)
        elif isinstance(context, LicensedPlatformContext):
            estimate = self._estimate_licensed_platform(sizing_result, context, environment_weights)
        elif isinstance(context, EnvironmentLicensedContext):
            estimate = self._estimate_environment_licensed(sizing_result, context, environment_weights)
        else:
            raise CostEstimatorError(f"Unsupported pricing context: {type(context).__name__}")

        logger.info(
            "Estimated %s/%s: %.2f %s per month",
            estimate.provider,
            estimate.region,
            estimate.monthly_total,
            estimate.currency,
        )
        return estimate

    def compare(self, sizing_result: AnySizingResult, contexts: Sequence[PricingContext]) -> CostComparison:
        """
        Price the same footprint under several contexts.

        Returns:
            CostComparison with estimates sorted cheapest first and textual insights
        """
        estimates = sorted(
            (self.estimate(sizing_result, context) for context in contexts),
            key=lambda estimate: estimate.monthly_total,
        )
        return CostComparison(estimates=estimates, insights=self._comparison_insights(estimates))

    def _comparison_insights(self, estimates: List[CostEstimate]) -> List[str]:
        if len(estimates) < 2:
            return []
        cheapest, most_expensive = estimates[0], estimates[-1]
        insights = [f"{cheapest.provider} is the lowest-cost option at {cheapest.monthly_total:,.2f} "
                    f"{cheapest.currency}/month"]
        savings = most_expensive.monthly_total - cheapest.monthly_total
        if most_expensive.monthly_total > 0:
            percent = savings / most_expensive.monthly_total * 100
            insights.append(
                f"Choosing {cheapest.provider} over {most_expensive.provider} saves "
                f"{savings * 12:,.2f} {cheapest.currency}/year ({percent:.0f}%)"
            )
        free_control_plane = [
            estimate.provider for estimate in estimates
            if estimate.monthly_total > 0 and not any(
                item.description == CONTROL_PLANE_ITEM and item.unit_price > 0
                for entry in estimate.breakdown for item in entry.line_items
            )
        ]
        if free_control_plane:
            insights.append(f"No control-plane charge with: {', '.join(free_control_plane)}")
        return insights

    def _resolve_distribution(self, sizing_result: AnySizingResult, override: Optional[str]) -> Optional[DistributionProfile]:
        key = override or sizing_result.distribution
        if not key:
            return None
        return DISTRIBUTIONS.get(key.lower())

    def _estimate_cloud(
        self,
        sizing_result: AnySizingResult,
        context: CloudContext,
        environment_weights: Optional[Dict[str, float]]
    ) -> CostEstimate:
        provider = get_provider_pricing(context.provider)
        region = context.region or provider.default_region
        regional = provider.regional_multiplier(region)
        profile = self._resolve_distribution(sizing_result, context.distribution)
        hours = self.hours_per_month
        compute_discount = RESERVED_DISCOUNT[context.pricing_type.value]
        categories = _empty_categories()
        assumptions = [f"{hours} hours/month", f"Prices for {provider.key} region {region}"]
        if provider.key != context.provider.lower():
            assumptions.append(
                f"No price table for provider '{context.provider}'; priced with {provider.key} list prices"
            )
        if compute_discount:
            assumptions.append(f"{context.pricing_type.value}: {compute_discount * 100:.0f}% off compute")

        # Compute
        managed_control_plane = profile is not None and profile.has_managed_control_plane
        environment_multipliers: Dict[str, float] = {}
        base_compute = 0.0
        total_uplift = 0.0
        for env in sizing_result.environments:
            hadr = context.hadr or env.hadr
            env_items = []
            for group in env.node_groups():
                instance_name, hourly = provider.node_hourly_rate(group.spec, region)
                env_items.append(CostLineItem(
                    description=f"{group.node_class} nodes ({instance_name})",
                    quantity=group.count,
                    unit="node-month",
                    unit_price=hourly * hours * (1 - compute_discount),
                    environment=env.environment,
                ))
            if managed_control_plane:
                high_availability = hadr is not None and hadr.node_distribution != NodeDistribution.SINGLE_AZ
                env_items.append(CostLineItem(
                    description=CONTROL_PLANE_ITEM,
                    quantity=1,
                    unit="cluster-month",
                    unit_price=provider.control_plane_hourly(high_availability) * hours,
                    environment=env.environment,
                ))
            for item in env_items:
                _add_item(categories, CostCategory.COMPUTE, item)

            if hadr is None:
                continue
            multiplier = self.hadr_model.multiplier(hadr, provider)
            environment_multipliers[env.environment] = multiplier
            env_compute = sum(item.total for item in env_items)
            base_compute += env_compute
            uplift = env_compute * (multiplier - 1)
            total_uplift += uplift
            if uplift > 0:
                _add_item(categories, CostCategory.COMPUTE, CostLineItem(
                    description=f"{HADR_UPLIFT_ITEM} ({hadr.summary()})",
                    quantity=1,
                    unit="month",
                    unit_price=uplift,
                    environment=env.environment,
                ))

        hadr_multiplier = 1.0
        if environment_multipliers:
            if base_compute > 0:
                hadr_multiplier = (base_compute + total_uplift) / base_compute
            else:
                hadr_multiplier = max(environment_multipliers.values())
            assumptions.append(
                "HA/DR multiplier applied to compute and control plane: " + ", ".join(
                    f"{name} {value:.2f}" for name, value in environment_multipliers.items()
                )
            )

        clusters = sizing_result.cluster_count

        # Storage
        for env in sizing_result.environments:
            if env.total_disk_gb > 0:
                _add_item(categories, CostCategory.STORAGE, CostLineItem(
                    description="Block storage (SSD)",
                    quantity=env.total_disk_gb,
                    unit="GB-month",
                    unit_price=provider.storage_ssd_per_gb_month * regional,
                    environment=env.environment,
                ))
        if clusters and context.registry_gb_per_cluster > 0:
            _add_item(categories, CostCategory.STORAGE, CostLineItem(
                description="Container registry",
                quantity=context.registry_gb_per_cluster * clusters,
                unit="GB-month",
                unit_price=provider.registry_per_gb_month * regional,
            ))

        # Network
        if context.egress_gb_per_month > 0:
            _add_item(categories, CostCategory.NETWORK, CostLineItem(
                description="Internet egress",
                quantity=context.egress_gb_per_month,
                unit="GB",
                unit_price=provider.egress_per_gb,
            ))
        if clusters and context.load_balancers_per_cluster > 0:
            _add_item(categories, CostCategory.NETWORK, CostLineItem(
                description="Load balancers",
                quantity=context.load_balancers_per_cluster * clusters,
                unit="lb-month",
                unit_price=provider.load_balancer_per_hour * hours,
            ))
        if clusters and context.nat_gateways_per_cluster > 0:
            _add_item(categories, CostCategory.NETWORK, CostLineItem(
                description="NAT gateways",
                quantity=context.nat_gateways_per_cluster * clusters,
                unit="gateway-month",
                unit_price=provider.nat_gateway_per_hour * hours,
            ))

        # License
        self._add_distribution_license(categories, sizing_result, profile)

        # Support
        support_percent = SUPPORT_PLAN_PERCENT.get(context.support_plan.lower())
        if support_percent is None:
            raise ConfigurationError(f"Unknown support plan '{context.support_plan}'", lookup="support_plans")
        if support_percent > 0:
            subtotal = sum(categories[c].monthly for c in CostCategory if c != CostCategory.SUPPORT)
            _add_item(categories, CostCategory.SUPPORT, CostLineItem(
                description=f"{context.support_plan.title()} support ({support_percent:g}%)",
                quantity=1,
                unit="month",
                unit_price=subtotal * support_percent / 100,
            ))

        return self._build_estimate(
            provider=provider.key,
            region=region,
            pricing_type=context.pricing_type,
            categories=categories,
            sizing_result=sizing_result,
            environment_weights=environment_weights,
            hadr_multiplier=hadr_multiplier,
            assumptions=assumptions,
            environment_multipliers=environment_multipliers,
        )

    def _add_distribution_license(
        self,
        categories: Dict[CostCategory, CostBreakdown],
        sizing_result: AnySizingResult,
        profile: Optional[DistributionProfile]
    ) -> None:
        if profile is None or not isinstance(sizing_result, SizingResult):
            return
        for env in sizing_result.environments:
            if profile.license_per_node_year > 0 and env.total_nodes > 0:
                _add_item(categories, CostCategory.LICENSE, CostLineItem(
                    description=f"{profile.name} subscription",
                    quantity=env.total_nodes,
                    unit="node-month",
                    unit_price=profile.license_per_node_year / 12,
                    environment=env.environment,
                ))
            if profile.license_per_core_year > 0 and env.total_cpu > 0:
                _add_item(categories, CostCategory.LICENSE, CostLineItem(
                    description=f"{profile.name} subscription",
                    quantity=env.total_cpu,
                    unit="core-month",
                    unit_price=profile.license_per_core_year / 12,
                    environment=env.environment,
                ))

    def _estimate_on_prem(
        self,
        sizing_result: AnySizingResult,
        context: OnPremContext,
        environment_weights: Optional[Dict[str, float]]
    ) -> CostEstimate:
        pricing = context.pricing
        if pricing is None:
            raise ConfigurationError("On-premises estimate requires a cost basis", lookup="on_prem_pricing")

        total = sizing_result.grand_total
        months = pricing.amortization_months
        servers = math.ceil(total.total_cpu / pricing.cores_per_server) if total.total_cpu > 0 else 0
        categories = _empty_categories()

        # Hardware
        if servers:
            _add_item(categories, CostCategory.COMPUTE, CostLineItem(
                description=f"Servers ({pricing.cores_per_server} cores, {pricing.hardware_refresh_years}-year refresh)",
                quantity=servers,
                unit="server-month",
                unit_price=pricing.server_cost / months,
            ))
            _add_item(categories, CostCategory.COMPUTE, CostLineItem(
                description=f"Hardware maintenance ({pricing.maintenance_percent:g}%/year)",
                quantity=servers,
                unit="server-month",
                unit_price=pricing.server_cost * pricing.maintenance_percent / 100 / 12,
            ))
        if total.total_cpu > 0:
            _add_item(categories, CostCategory.COMPUTE, CostLineItem(
                description="CPU cores",
                quantity=total.total_cpu,
                unit="core-month",
                unit_price=pricing.per_cpu_core / months,
            ))
        if total.total_ram_gb > 0:
            _add_item(categories, CostCategory.COMPUTE, CostLineItem(
                description="Memory",
                quantity=total.total_ram_gb,
                unit="GB-month",
                unit_price=pricing.per_gb_ram / months,
            ))

        # Data center
        if servers:
            power_kw_month = servers * pricing.watts_per_server * self.hours_per_month / 1000
            power_cost = power_kw_month * pricing.per_kwh * pricing.pue
            _add_item(categories, CostCategory.COMPUTE, CostLineItem(
                description="Data center: rack space",
                quantity=servers * pricing.rack_units_per_server,
                unit="U-month",
                unit_price=pricing.per_rack_unit_month,
            ))
            _add_item(categories, CostCategory.COMPUTE, CostLineItem(
                description=f"Data center: power (PUE {pricing.pue:g})",
                quantity=1,
                unit="month",
                unit_price=power_cost,
            ))
            _add_item(categories, CostCategory.COMPUTE, CostLineItem(
                description="Data center: cooling",
                quantity=1,
                unit="month",
                unit_price=power_cost * pricing.cooling_percent_of_power / 100,
            ))

        # Storage
        if total.total_disk_gb > 0:
            _add_item(categories, CostCategory.STORAGE, CostLineItem(
                description="SSD storage",
                quantity=total.total_disk_gb / 1000,
                unit="TB-month",
                unit_price=pricing.per_tb_ssd / months,
            ))

        # Labor
        if total.total_nodes > 0:
            engineers = max(1, math.ceil(total.total_nodes / pricing.nodes_per_engineer))
            _add_item(categories, CostCategory.SUPPORT, CostLineItem(
                description="DevOps engineers",
                quantity=engineers,
                unit="FTE-month",
                unit_price=pricing.devops_engineer_month,
            ))
            _add_item(categories, CostCategory.SUPPORT, CostLineItem(
                description="System administrators",
                quantity=max(1.0, engineers * 0.5),
                unit="FTE-month",
                unit_price=pricing.sysadmin_month,
            ))
            if pricing.include_dba:
                _add_item(categories, CostCategory.SUPPORT, CostLineItem(
                    description="Database administrator",
                    quantity=1,
                    unit="FTE-month",
                    unit_price=pricing.dba_month,
                ))

        # License
        profile = self._resolve_distribution(sizing_result, context.distribution)
        self._add_distribution_license(categories, sizing_result, profile)

        return self._build_estimate(
            provider="on_prem",
            region="on_prem",
            pricing_type=PricingType.ON_DEMAND,
            categories=categories,
            sizing_result=sizing_result,
            environment_weights=environment_weights,
            hadr_multiplier=1.0,
            assumptions=[
                f"{servers} server(s) of {pricing.cores_per_server} cores",
                f"Hardware amortized over {pricing.hardware_refresh_years} years",
            ],
        )

    def price_licensed_platform(
        self,
        platform_config: LicensedPlatformConfig,
        pricing: Optional[LicensedPlatformPricing] = None
    ) -> LicensedPlatformQuote:
        """
        Yearly quote for the pack-licensed platform.

        Args:
            platform_config: Licensed capacity, users, add-ons and services
            pricing: Price list (defaults when None)

        Returns:
            LicensedPlatformQuote itemized by license, add-ons and services

        Raises:
            ConfigurationError: If an add-on, services region or success plan has no price
        """
        pricing = pricing or DEFAULT_LICENSED_PLATFORM_PRICING
        ao_packs = resolve_pack_count(platform_config.application_objects, pricing.ao_pack_size)
        quote = LicensedPlatformQuote(ao_packs=ao_packs)

        # License
        quote.license_items["Edition (includes 1 AO pack)"] = pricing.edition_base_price
        if ao_packs > 1:
            quote.license_items[f"Additional AO packs ({ao_packs - 1})"] = (ao_packs - 1) * pricing.ao_pack_price
        if platform_config.unlimited_users:
            quote.license_items[f"Unlimited users ({ao_packs} AO packs)"] = (
                pricing.unlimited_users_per_ao_pack * ao_packs
            )
        else:
            billable_internal = max(0, platform_config.internal_users - pricing.internal_users_included)
            if billable_internal:
                quote.license_items[f"Internal users (+{billable_internal})"] = graduated_pack_cost(
                    billable_internal, pricing.internal_user_bands, pricing.internal_user_pack_size
                )
            if platform_config.external_users > 0:
                quote.license_items[f"External users ({platform_config.external_users})"] = graduated_pack_cost(
                    platform_config.external_users, pricing.external_user_bands, pricing.external_user_pack_size
                )

        # Add-ons
        if platform_config.app_shield:
            if platform_config.app_shield_user_volume is not None:
                volume = platform_config.app_shield_user_volume
            elif platform_config.unlimited_users:
                volume = pricing.default_unlimited_user_volume
            else:
                volume = platform_config.internal_users + platform_config.external_users
            quote.add_on_items[f"AppShield ({volume} users)"] = resolve_tier(pricing.app_shield_tiers, volume)

        is_cloud = platform_config.deployment == PlatformDeployment.CLOUD
        requested = {key: qty for key, qty in platform_config.add_ons.items() if qty > 0}
        if "sentry" in requested and "high_availability" in requested:
            quote.warnings.append("High availability is included in Sentry and was not charged separately")
            del requested["high_availability"]
        for key, quantity in requested.items():
            if not is_cloud and key in pricing.cloud_only_add_ons:
                quote.warnings.append(f"'{key}' is only available for cloud deployments and was ignored")
                logger.warning("Ignoring cloud-only add-on %s for self-managed deployment", key)
                continue
            if is_cloud and key in pricing.self_managed_only_add_ons:
                quote.warnings.append(f"'{key}' is only available for self-managed deployments and was ignored")
                logger.warning("Ignoring self-managed add-on %s for cloud deployment", key)
                continue
            if key in pricing.per_pack_add_ons:
                quote.add_on_items[f"{key} (x{quantity})"] = pricing.per_pack_add_ons[key] * ao_packs * quantity
            elif key in pricing.flat_add_ons:
                quote.add_on_items[f"{key} (x{quantity})"] = pricing.flat_add_ons[key] * quantity
            else:
                raise ConfigurationError(f"No price for add-on '{key}'", lookup="licensed_platform.add_ons")

        # Services
        wants_services = (
            platform_config.success_plan or platform_config.expert_days or platform_config.training_sessions
        )
        if wants_services:
            rates = pricing.services_by_region.get(platform_config.services_region)
            if rates is None:
                raise ConfigurationError(
                    f"No services rates for region '{platform_config.services_region}'",
                    lookup="licensed_platform.services_by_region",
                )
            if platform_config.success_plan:
                plan = platform_config.success_plan.lower()
                if plan not in rates:
                    raise ConfigurationError(f"Unknown success plan '{platform_config.success_plan}'",
                                             lookup="licensed_platform.success_plans")
                quote.service_items[f"Success plan ({plan})"] = rates[plan]
            if platform_config.expert_days:
                quote.service_items[f"Expert days ({platform_config.expert_days})"] = (
                    rates["expert_day"] * platform_config.expert_days
                )
            if platform_config.training_sessions:
                quote.service_items[f"Training sessions ({platform_config.training_sessions})"] = (
                    rates["training_session"] * platform_config.training_sessions
                )

        # Discount
        discount = platform_config.discount
        if discount is not None and discount.value > 0:
            quote.discount_amount = calculate_discount(
                discount, quote.license_subtotal, quote.add_ons_subtotal, quote.services_subtotal
            )
            quote.discount_description = discount.describe()

        return quote

    def _estimate_licensed_platform(
        self,
        sizing_result: AnySizingResult,
        context: LicensedPlatformContext,
        environment_weights: Optional[Dict[str, float]]
    ) -> CostEstimate:
        quote = self.price_licensed_platform(context.config, context.pricing)

        categories = _empty_categories()
        provider, region, pricing_type = "licensed_platform", "global", PricingType.ON_DEMAND
        hadr_multiplier = 1.0
        environment_multipliers: Dict[str, float] = {}
        if context.infrastructure is not None:
            if context.config.deployment == PlatformDeployment.SELF_MANAGED:
                infra = self._fold_infrastructure(categories, sizing_result, context.infrastructure,
                                                  environment_weights)
                quote.infrastructure_per_year = infra.monthly_total * 12
                provider, region = infra.provider, infra.region
                pricing_type, hadr_multiplier = infra.pricing_type, infra.hadr_multiplier
                environment_multipliers = {cost.environment: cost.hadr_multiplier for cost in infra.environment_costs}
            else:
                quote.warnings.append("Cloud deployments include infrastructure; infrastructure context ignored")

        for description, yearly in list(quote.license_items.items()) + list(quote.add_on_items.items()):
            _add_item(categories, CostCategory.LICENSE, CostLineItem(
                description=description, quantity=1, unit="month", unit_price=yearly / 12,
            ))
        for description, yearly in quote.service_items.items():
            _add_item(categories, CostCategory.SUPPORT, CostLineItem(
                description=description, quantity=1, unit="month", unit_price=yearly / 12,
            ))

        if quote.discount_amount > 0:
            license_part, services_part = self._split_discount(quote, context.config.discount)
            if license_part:
                _add_item(categories, CostCategory.LICENSE, CostLineItem(
                    description=f"Discount: {quote.discount_description}",
                    quantity=1, unit="month", unit_price=-license_part / 12,
                ))
            if services_part:
                _add_item(categories, CostCategory.SUPPORT, CostLineItem(
                    description=f"Discount: {quote.discount_description}",
                    quantity=1, unit="month", unit_price=-services_part / 12,
                ))

        estimate = self._build_estimate(
            provider=provider,
            region=region,
            pricing_type=pricing_type,
            categories=categories,
            sizing_result=sizing_result,
            environment_weights=environment_weights,
            hadr_multiplier=hadr_multiplier,
            assumptions=[f"{quote.ao_packs} AO pack(s)"] + quote.warnings,
            environment_multipliers=environment_multipliers,
        )
        estimate.licensed_platform_quote = quote
        return estimate

    def _fold_infrastructure(
        self,
        categories: Dict[CostCategory, CostBreakdown],
        sizing_result: AnySizingResult,
        infrastructure: CloudContext,
        environment_weights: Optional[Dict[str, float]]
    ) -> CostEstimate:
        """Price self-managed infrastructure and add its line items to `categories`."""
        infra = self._estimate_cloud(sizing_result, infrastructure, environment_weights)
        for entry in infra.breakdown:
            for item in entry.line_items:
                _add_item(categories, entry.category, item)
        return infra

    def price_environment_licensed_platform(
        self,
        platform_config: EnvironmentLicensedConfig,
        pricing: Optional[EnvironmentLicensedPricing] = None
    ) -> EnvironmentLicensedQuote:
        """
        Yearly quote for the environment-licensed platform.

        Vendor-cloud deployments pay per resource pack, Kubernetes and Azure
        deployments pay a base package plus every environment beyond the
        included ones, and server or partner-cloud deployments pay per app
        or a flat unlimited-app fee.

        Args:
            platform_config: Deployment target, capacity, users and add-ons
            pricing: Price list (defaults when None)

        Returns:
            EnvironmentLicensedQuote itemized by license, deployment, add-ons and services

        Raises:
            ConfigurationError: If a resource pack or GenAI pack has no price
        """
        pricing = pricing or DEFAULT_ENVIRONMENT_LICENSED_PRICING
        deployment = platform_config.deployment
        quote = EnvironmentLicensedQuote(deployment=deployment.value)

        quote.license_items["Platform license (unlimited apps)"] = pricing.platform_license
        internal_blocks = math.ceil(platform_config.internal_users / pricing.internal_user_block_size)
        if internal_blocks:
            quote.license_items[f"Internal users ({platform_config.internal_users})"] = (
                internal_blocks * pricing.internal_users_per_block
            )
        external_blocks = math.ceil(platform_config.external_users / pricing.external_user_block_size)
        if external_blocks:
            quote.license_items[f"External users ({platform_config.external_users})"] = (
                external_blocks * pricing.external_users_per_block
            )

        if deployment == EnvironmentLicensedDeployment.DEDICATED:
            quote.deployment_items["Dedicated cloud"] = pricing.dedicated_cloud
        elif deployment == EnvironmentLicensedDeployment.SAAS:
            self._price_resource_packs(quote, platform_config, pricing)
        elif deployment == EnvironmentLicensedDeployment.AZURE:
            quote.deployment_items["Azure base package"] = pricing.azure_base
            additional = max(0, platform_config.environments - pricing.azure_environments_included)
            if additional:
                quote.deployment_items[f"Additional environments ({additional})"] = (
                    additional * pricing.azure_additional_environment
                )
                quote.cloud_tokens += additional * pricing.azure_additional_environment_tokens
            quote.details = f"{pricing.azure_environments_included} included + {additional} additional"
        elif deployment == EnvironmentLicensedDeployment.KUBERNETES:
            provider = platform_config.kubernetes_provider.lower()
            if provider not in pricing.supported_kubernetes_providers:
                quote.warnings.append(f"'{provider}' is not an officially supported provider; manual setup required")
                logger.warning("Environment-licensed platform on unsupported Kubernetes provider %s", provider)
            quote.deployment_items["Kubernetes base package"] = pricing.kubernetes_base
            additional = max(0, platform_config.environments - pricing.kubernetes_environments_included)
            if additional:
                quote.deployment_items[f"Additional environments ({additional})"] = graduated_pack_cost(
                    additional, pricing.kubernetes_environment_bands, 1
                )
            quote.details = f"{pricing.kubernetes_environments_included} included + {additional} additional"
        else:
            key = deployment.value
            if platform_config.unlimited_apps:
                quote.deployment_items["Unlimited applications"] = pricing.unlimited_app_prices[key]
            else:
                quote.deployment_items[f"Applications ({platform_config.apps})"] = (
                    pricing.per_app_prices[key] * platform_config.apps
                )

        if platform_config.genai_pack:
            size = platform_config.genai_pack.upper()
            if size not in pricing.genai_packs:
                raise ConfigurationError(f"Unknown GenAI pack '{platform_config.genai_pack}'",
                                         lookup="environment_licensed.genai_packs")
            price, tokens = pricing.genai_packs[size]
            quote.add_on_items[f"GenAI model pack ({size})"] = price
            quote.cloud_tokens += tokens
        if platform_config.genai_knowledge_base:
            quote.add_on_items["GenAI knowledge base"] = pricing.genai_knowledge_base
            quote.cloud_tokens += pricing.genai_knowledge_base_tokens

        if platform_config.customer_enablement:
            quote.service_items["Customer enablement"] = pricing.customer_enablement

        if platform_config.volume_discount and pricing.volume_discount_percent > 0:
            quote.discount_percent = pricing.volume_discount_percent
            quote.discount_amount = quote.license_subtotal * pricing.volume_discount_percent / 100

        return quote

    @staticmethod
    def _price_resource_packs(
        quote: EnvironmentLicensedQuote,
        platform_config: EnvironmentLicensedConfig,
        pricing: EnvironmentLicensedPricing
    ) -> None:
        if platform_config.resource_pack_size:
            tier = platform_config.resource_pack_tier.value
            pack = pricing.resource_pack(tier, platform_config.resource_pack_size)
            if pack is None:
                raise ConfigurationError(
                    f"No {tier} resource pack of size '{platform_config.resource_pack_size}'",
                    lookup="environment_licensed.resource_packs",
                )
            quantity = platform_config.resource_pack_quantity
            quote.deployment_items[f"{quantity}x {tier} {pack.size} resource pack"] = pack.price_per_year * quantity
            quote.cloud_tokens += pack.cloud_tokens * quantity
            quote.details = f"{quantity}x {tier} {pack.describe()}"
        else:
            quote.warnings.append("No resource pack selected; runtime capacity not priced")

        if platform_config.additional_file_storage_gb > 0:
            blocks = math.ceil(platform_config.additional_file_storage_gb / 100)
            quote.deployment_items[f"Additional file storage ({blocks * 100} GB)"] = (
                blocks * pricing.additional_file_storage_per_100gb
            )
        if platform_config.additional_database_storage_gb > 0:
            blocks = math.ceil(platform_config.additional_database_storage_gb / 100)
            quote.deployment_items[f"Additional database storage ({blocks * 100} GB)"] = (
                blocks * pricing.additional_database_storage_per_100gb
            )

    def _estimate_environment_licensed(
        self,
        sizing_result: AnySizingResult,
        context: EnvironmentLicensedContext,
        environment_weights: Optional[Dict[str, float]]
    ) -> CostEstimate:
        quote = self.price_environment_licensed_platform(context.config, context.pricing)

        categories = _empty_categories()
        provider, region, pricing_type = "environment_licensed_platform", "global", PricingType.ON_DEMAND
        hadr_multiplier = 1.0
        environment_multipliers: Dict[str, float] = {}
        if context.infrastructure is not None:
            if context.config.deployment.runs_on_own_infrastructure:
                infra = self._fold_infrastructure(categories, sizing_result, context.infrastructure,
                                                  environment_weights)
                quote.infrastructure_per_year = infra.monthly_total * 12
                provider, region = infra.provider, infra.region
                pricing_type, hadr_multiplier = infra.pricing_type, infra.hadr_multiplier
                environment_multipliers = {cost.environment: cost.hadr_multiplier for cost in infra.environment_costs}
            else:
                quote.warnings.append(
                    f"{context.config.deployment.value} deployments include infrastructure; "
                    "infrastructure context ignored"
                )

        license_items = (
            list(quote.license_items.items())
            + list(quote.deployment_items.items())
            + list(quote.add_on_items.items())
        )
        for description, yearly in license_items:
            _add_item(categories, CostCategory.LICENSE, CostLineItem(
                description=description, quantity=1, unit="month", unit_price=yearly / 12,
            ))
        for description, yearly in quote.service_items.items():
            _add_item(categories, CostCategory.SUPPORT, CostLineItem(
                description=description, quantity=1, unit="month", unit_price=yearly / 12,
            ))
        if quote.discount_amount > 0:
            _add_item(categories, CostCategory.LICENSE, CostLineItem(
                description=f"Discount: {quote.discount_percent:g}% volume discount on licenses",
                quantity=1, unit="month", unit_price=-quote.discount_amount / 12,
            ))

        assumptions = [f"Deployment: {quote.deployment}"]
        if quote.details:
            assumptions.append(quote.details)
        estimate = self._build_estimate(
            provider=provider,
            region=region,
            pricing_type=pricing_type,
            categories=categories,
            sizing_result=sizing_result,
            environment_weights=environment_weights,
            hadr_multiplier=hadr_multiplier,
            assumptions=assumptions + quote.warnings,
            environment_multipliers=environment_multipliers,
        )
        estimate.environment_licensed_quote = quote
        return estimate

    @staticmethod
    def _split_discount(quote: LicensedPlatformQuote, discount: Discount) -> Tuple[float, float]:
        """Split the discount into (license + add-ons, services) parts."""
        amount = quote.discount_amount
        if discount.scope == DiscountScope.SERVICES_ONLY:
            return 0.0, amount
        if discount.scope != DiscountScope.TOTAL:
            return amount, 0.0
        licensed = quote.license_subtotal + quote.add_ons_subtotal
        total = licensed + quote.services_subtotal
        if total <= 0:
            return 0.0, 0.0
        return amount * licensed / total, amount * quote.services_subtotal / total

    def _build_estimate(
        self,
        provider: str,
        region: str,
        pricing_type: PricingType,
        categories: Dict[CostCategory, CostBreakdown],
        sizing_result: AnySizingResult,
        environment_weights: Optional[Dict[str, float]],
        hadr_multiplier: float,
        assumptions: List[str],
        environment_multipliers: Optional[Dict[str, float]] = None
    ) -> CostEstimate:
        breakdown = _finalize_breakdown(categories)
        monthly_total = sum(entry.monthly for entry in breakdown)
        return CostEstimate(
            provider=provider,
            region=region,
            pricing_type=pricing_type,
            currency=self.currency,
            monthly_total=monthly_total,
            breakdown=breakdown,
            environment_costs=self._allocate_environments(
                monthly_total, sizing_result, environment_weights, environment_multipliers
            ),
            calculated_at=datetime.utcnow(),
            hadr_multiplier=hadr_multiplier,
            assumptions=assumptions,
        )

    @staticmethod
    def _allocate_environments(
        monthly_total: float,
        sizing_result: AnySizingResult,
        weights: Optional[Dict[str, float]],
        multipliers: Optional[Dict[str, float]] = None
    ) -> List[EnvironmentCost]:
        """Split the monthly total by node share, or by caller-supplied weights."""
        environments = sizing_result.environments
        if not environments:
            return []
        if weights:
            shares = [max(0.0, weights.get(env.environment, 0.0)) for env in environments]
        else:
            shares = [float(env.total_nodes) for env in environments]
        total_share = sum(shares)
        if total_share <= 0:
            shares = [1.0] * len(environments)
            total_share = float(len(environments))

        return [
            EnvironmentCost(
                environment=env.environment,
                monthly_cost=monthly_total * share / total_share,
                percentage=share / total_share * 100,
                nodes=env.total_nodes,
                cpu=env.total_cpu,
                ram_gb=env.total_ram_gb,
                disk_gb=env.total_disk_gb,
                hadr_multiplier=(multipliers or {}).get(env.environment, 1.0),
            )
            for env, share in zip(environments, shares)
        ]
