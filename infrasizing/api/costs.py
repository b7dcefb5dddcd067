"""
API routes for cost estimation and comparison.
"""
from typing import Dict, Any, List, Optional, Union
from dataclasses import replace
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
import logging

from infrasizing.api.sizing import (
    K8sSizingRequest,
    VMSizingRequest,
    run_k8s_sizing,
    run_vm_sizing,
)
from infrasizing.core.config import config
from infrasizing.domain.cost_models import (
    CloudContext,
    OnPremContext,
    LicensedPlatformContext,
    EnvironmentLicensedContext,
    PricingType,
)
from infrasizing.domain.errors import ConfigurationError, PolicyViolation
from infrasizing.domain.hadr_models import HADRConfig
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
from infrasizing.domain.sizing_models import SizingResult
from infrasizing.domain.vm_models import VMSizingResult
from infrasizing.pricing.on_prem import OnPremPricing
from infrasizing.services.cost_estimator import CostEstimator, CostEstimatorError


logger = logging.getLogger(__name__)
router = APIRouter()


class CloudPricingRequest(BaseModel):
    """Cloud pricing context."""
    provider: str = Field(
        default_factory=lambda: config.DEFAULT_PROVIDER,
        description="Provider key, e.g. 'aws', 'azure', 'gcp'"
    )
    region: Optional[str] = Field(None, description="Region code (provider default when omitted)")
    pricing_type: PricingType = PricingType.ON_DEMAND
    distribution: Optional[str] = Field(None, description="Distribution override for licensing")
    hadr: Optional[Dict[str, Any]] = Field(
        None, description="HA/DR posture overriding the one each environment was sized with"
    )
    support_plan: str = "basic"
    egress_gb_per_month: float = Field(default=0.0, ge=0)
    load_balancers_per_cluster: int = Field(default=1, ge=0)
    nat_gateways_per_cluster: int = Field(default=0, ge=0)
    registry_gb_per_cluster: float = Field(default=50.0, ge=0)


class OnPremPricingRequest(BaseModel):
    """On-premises pricing context; overrides replace individual cost assumptions."""
    overrides: Dict[str, Any] = Field(default_factory=dict)
    distribution: Optional[str] = None


class CostEstimateRequest(BaseModel):
    """Request model for a single cost estimate."""
    sizing: Optional[K8sSizingRequest] = None
    vm_sizing: Optional[VMSizingRequest] = None
    cloud: Optional[CloudPricingRequest] = None
    on_prem: Optional[OnPremPricingRequest] = None
    environment_weights: Optional[Dict[str, float]] = None


class CostCompareRequest(BaseModel):
    """Request model for comparing pricing contexts on one footprint."""
    sizing: Optional[K8sSizingRequest] = None
    vm_sizing: Optional[VMSizingRequest] = None
    clouds: List[CloudPricingRequest] = Field(default_factory=list)
    on_prem: Optional[OnPremPricingRequest] = None


class DiscountRequest(BaseModel):
    type: DiscountType
    scope: DiscountScope = DiscountScope.TOTAL
    value: float = Field(..., ge=0)
    notes: Optional[str] = None


class LicensedPlatformRequest(BaseModel):
    """Request model for a licensed low-code platform quote."""
    application_objects: int = Field(default=150, ge=0)
    deployment: PlatformDeployment = PlatformDeployment.CLOUD
    internal_users: int = Field(default=100, ge=0)
    external_users: int = Field(default=0, ge=0)
    unlimited_users: bool = False
    app_shield: bool = False
    app_shield_user_volume: Optional[int] = Field(None, ge=0)
    add_ons: Dict[str, int] = Field(default_factory=dict)
    services_region: str = "americas"
    success_plan: Optional[str] = None
    expert_days: int = Field(default=0, ge=0)
    training_sessions: int = Field(default=0, ge=0)
    discount: Optional[DiscountRequest] = None
    sizing: Optional[K8sSizingRequest] = Field(None, description="Footprint for a full estimate")
    infrastructure: Optional[CloudPricingRequest] = Field(
        None, description="Cloud infrastructure for self-managed deployments"
    )


class EnvironmentLicensedRequest(BaseModel):
    """Request model for an environment-licensed low-code platform quote."""
    deployment: EnvironmentLicensedDeployment = EnvironmentLicensedDeployment.KUBERNETES
    resource_pack_tier: ResourcePackTier = ResourcePackTier.STANDARD
    resource_pack_size: Optional[str] = Field(None, description="Pack size for SaaS, e.g. 'M' or '2XL'")
    resource_pack_quantity: int = Field(default=1, ge=1)
    additional_file_storage_gb: float = Field(default=0.0, ge=0)
    additional_database_storage_gb: float = Field(default=0.0, ge=0)
    kubernetes_provider: str = "eks"
    environments: int = Field(default=3, ge=0)
    unlimited_apps: bool = True
    apps: int = Field(default=1, ge=1)
    internal_users: int = Field(default=100, ge=0)
    external_users: int = Field(default=0, ge=0)
    genai_pack: Optional[str] = None
    genai_knowledge_base: bool = False
    customer_enablement: bool = False
    volume_discount: bool = True
    sizing: Optional[K8sSizingRequest] = Field(None, description="Container footprint for a full estimate")
    vm_sizing: Optional[VMSizingRequest] = Field(None, description="VM footprint for a full estimate")
    infrastructure: Optional[CloudPricingRequest] = Field(
        None, description="Cloud infrastructure for Kubernetes or server deployments"
    )


def resolve_sizing(
    sizing: Optional[K8sSizingRequest],
    vm_sizing: Optional[VMSizingRequest]
) -> Union[SizingResult, VMSizingResult]:
    """Run exactly one of the two sizing requests."""
    if (sizing is None) == (vm_sizing is None):
        raise HTTPException(
            status_code=400,
            detail="Exactly one of 'sizing' or 'vm_sizing' is required"
        )
    if sizing is not None:
        return run_k8s_sizing(sizing)
    return run_vm_sizing(vm_sizing)


def build_cloud_context(request: CloudPricingRequest) -> CloudContext:
    region = request.region
    if region is None and request.provider == config.DEFAULT_PROVIDER:
        region = config.DEFAULT_REGION
    return CloudContext(
        provider=request.provider,
        region=region,
        pricing_type=request.pricing_type,
        distribution=request.distribution,
        hadr=HADRConfig.from_dict(request.hadr) if request.hadr else None,
        support_plan=request.support_plan,
        egress_gb_per_month=request.egress_gb_per_month,
        load_balancers_per_cluster=request.load_balancers_per_cluster,
        nat_gateways_per_cluster=request.nat_gateways_per_cluster,
        registry_gb_per_cluster=request.registry_gb_per_cluster,
    )


def build_on_prem_context(request: OnPremPricingRequest) -> OnPremContext:
    """
    Build an on-prem context from default assumptions plus overrides.

    Raises:
        ValueError: If an override names an unknown assumption or breaks a bound
    """
    try:
        pricing = replace(OnPremPricing(), **request.overrides)
    except TypeError as error:
        raise ValueError(f"Unknown on-prem pricing field: {str(error)}") from error
    return OnPremContext(pricing=pricing, distribution=request.distribution)


def build_environment_licensed_config(request: EnvironmentLicensedRequest) -> EnvironmentLicensedConfig:
    return EnvironmentLicensedConfig(
        deployment=request.deployment,
        resource_pack_tier=request.resource_pack_tier,
        resource_pack_size=request.resource_pack_size,
        resource_pack_quantity=request.resource_pack_quantity,
        additional_file_storage_gb=request.additional_file_storage_gb,
        additional_database_storage_gb=request.additional_database_storage_gb,
        kubernetes_provider=request.kubernetes_provider,
        environments=request.environments,
        unlimited_apps=request.unlimited_apps,
        apps=request.apps,
        internal_users=request.internal_users,
        external_users=request.external_users,
        genai_pack=request.genai_pack,
        genai_knowledge_base=request.genai_knowledge_base,
        customer_enablement=request.customer_enablement,
        volume_discount=request.volume_discount,
    )


def build_licensed_platform_config(request: LicensedPlatformRequest) -> LicensedPlatformConfig:
    discount = None
    if request.discount is not None:
        discount = Discount(
            type=request.discount.type,
            scope=request.discount.scope,
            value=request.discount.value,
            notes=request.discount.notes,
        )
    return LicensedPlatformConfig(
        application_objects=request.application_objects,
        deployment=request.deployment,
        internal_users=request.internal_users,
        external_users=request.external_users,
        unlimited_users=request.unlimited_users,
        app_shield=request.app_shield,
        app_shield_user_volume=request.app_shield_user_volume,
        add_ons=dict(request.add_ons),
        services_region=request.services_region,
        success_plan=request.success_plan,
        expert_days=request.expert_days,
        training_sessions=request.training_sessions,
        discount=discount,
    )


@router.post("/api/costs/estimate")
async def estimate_costs(estimate_request: CostEstimateRequest) -> Dict[str, Any]:
    """
    Size a footprint and price it on a cloud provider or on-premises.

    Args:
        estimate_request: Sizing request plus exactly one pricing context

    Returns:
        JSON response with the sizing result and cost estimate

    Raises:
        HTTPException: 400 for invalid input, 422 for missing pricing
                       lookups, 500 for invariant violations
    """
    if (estimate_request.cloud is None) == (estimate_request.on_prem is None):
        raise HTTPException(
            status_code=400,
            detail="Exactly one of 'cloud' or 'on_prem' is required"
        )

    sizing_result = resolve_sizing(estimate_request.sizing, estimate_request.vm_sizing)
    try:
        if estimate_request.cloud is not None:
            context = build_cloud_context(estimate_request.cloud)
        else:
            context = build_on_prem_context(estimate_request.on_prem)
        estimate = CostEstimator().estimate(
            sizing_result,
            context,
            environment_weights=estimate_request.environment_weights
        )
    except ConfigurationError as error:
        logger.warning("Cost configuration error: %s", error)
        raise HTTPException(status_code=422, detail=str(error)) from error
    except PolicyViolation as error:
        logger.error("Cost policy violation: %s", error)
        raise HTTPException(status_code=500, detail=str(error)) from error
    except (CostEstimatorError, ValueError) as error:
        raise HTTPException(
            status_code=400,
            detail=f"Failed to estimate costs: {str(error)}"
        ) from error

    return {
        "status": "ok",
        "sizing": sizing_result.to_dict(),
        "estimate": estimate.to_dict()
    }


@router.post("/api/costs/compare")
async def compare_costs(compare_request: CostCompareRequest) -> Dict[str, Any]:
    """
    Price one footprint under several clouds and, optionally, on-premises.

    Returns:
        JSON response with estimates sorted cheapest first and insights
    """
    if not compare_request.clouds and compare_request.on_prem is None:
        raise HTTPException(
            status_code=400,
            detail="At least one pricing context is required"
        )

    sizing_result = resolve_sizing(compare_request.sizing, compare_request.vm_sizing)
    try:
        contexts = [build_cloud_context(cloud) for cloud in compare_request.clouds]
        if compare_request.on_prem is not None:
            contexts.append(build_on_prem_context(compare_request.on_prem))
        comparison = CostEstimator().compare(sizing_result, contexts)
    except ConfigurationError as error:
        logger.warning("Cost comparison configuration error: %s", error)
        raise HTTPException(status_code=422, detail=str(error)) from error
    except PolicyViolation as error:
        logger.error("Cost comparison policy violation: %s", error)
        raise HTTPException(status_code=500, detail=str(error)) from error
    except (CostEstimatorError, ValueError) as error:
        raise HTTPException(
            status_code=400,
            detail=f"Failed to compare costs: {str(error)}"
        ) from error

    return {
        "status": "ok",
        "comparison": comparison.to_dict()
    }


@router.post("/api/costs/licensed-platform")
async def quote_licensed_platform(quote_request: LicensedPlatformRequest) -> Dict[str, Any]:
    """
    Quote a licensed low-code platform subscription.

    Without a sizing block only the yearly quote is returned; with one, the
    quote is folded into a full cost estimate of that footprint.
    """
    try:
        platform_config = build_licensed_platform_config(quote_request)
        estimator = CostEstimator()
        if quote_request.sizing is None:
            quote = estimator.price_licensed_platform(platform_config)
            return {
                "status": "ok",
                "quote": quote.to_dict()
            }

        sizing_result = run_k8s_sizing(quote_request.sizing)
        infrastructure = None
        if quote_request.infrastructure is not None:
            infrastructure = build_cloud_context(quote_request.infrastructure)
        estimate = estimator.estimate(
            sizing_result,
            LicensedPlatformContext(config=platform_config, infrastructure=infrastructure)
        )
    except ConfigurationError as error:
        logger.warning("Licensed platform configuration error: %s", error)
        raise HTTPException(status_code=422, detail=str(error)) from error
    except (CostEstimatorError, ValueError) as error:
        raise HTTPException(
            status_code=400,
            detail=f"Failed to quote licensed platform: {str(error)}"
        ) from error

    return {
        "status": "ok",
        "quote": estimate.licensed_platform_quote.to_dict(),
        "estimate": estimate.to_dict()
    }


@router.post("/api/costs/environment-licensed-platform")
async def quote_environment_licensed_platform(quote_request: EnvironmentLicensedRequest) -> Dict[str, Any]:
    """
    Quote an environment-licensed low-code platform subscription.

    Without a sizing block only the yearly quote is returned; with one, the
    quote is folded into a full cost estimate of that footprint.
    """
    wants_estimate = quote_request.sizing is not None or quote_request.vm_sizing is not None
    try:
        platform_config = build_environment_licensed_config(quote_request)
        estimator = CostEstimator()
        if not wants_estimate:
            quote = estimator.price_environment_licensed_platform(platform_config)
            return {
                "status": "ok",
                "quote": quote.to_dict()
            }

        sizing_result = resolve_sizing(quote_request.sizing, quote_request.vm_sizing)
        infrastructure = None
        if quote_request.infrastructure is not None:
            infrastructure = build_cloud_context(quote_request.infrastructure)
        estimate = estimator.estimate(
            sizing_result,
            EnvironmentLicensedContext(config=platform_config, infrastructure=infrastructure)
        )
    except ConfigurationError as error:
        logger.warning("Environment-licensed platform configuration error: %s", error)
        raise HTTPException(status_code=422, detail=str(error)) from error
    except (CostEstimatorError, ValueError) as error:
        raise HTTPException(
            status_code=400,
            detail=f"Failed to quote environment-licensed platform: {str(error)}"
        ) from error

    return {
        "status": "ok",
        "quote": estimate.environment_licensed_quote.to_dict(),
        "estimate": estimate.to_dict()
    }
