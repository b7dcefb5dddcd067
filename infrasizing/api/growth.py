"""
API routes for multi-year growth projection.
"""
from typing import Dict, Any, Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
import logging

from infrasizing.api.costs import (
    CloudPricingRequest,
    OnPremPricingRequest,
    build_cloud_context,
    build_on_prem_context,
    resolve_sizing,
)
from infrasizing.api.sizing import K8sSizingRequest, VMSizingRequest
from infrasizing.domain.errors import ConfigurationError
from infrasizing.domain.growth_models import GrowthLimits, GrowthPattern, GrowthSettings
from infrasizing.services.cost_estimator import CostEstimator, CostEstimatorError
from infrasizing.services.growth_projector import GrowthProjector, GrowthProjectorError


logger = logging.getLogger(__name__)
router = APIRouter()


class GrowthLimitsRequest(BaseModel):
    """Explicit capacity limits; node and pod limits default to the distribution's."""
    max_nodes: Optional[int] = Field(None, gt=0)
    max_pods: Optional[int] = Field(None, gt=0)
    cpu_capacity: Optional[float] = Field(None, gt=0)
    ram_capacity_gb: Optional[float] = Field(None, gt=0)
    storage_capacity_gb: Optional[float] = Field(None, gt=0)
    monthly_cost_threshold: Optional[float] = Field(None, gt=0)


class GrowthSettingsRequest(BaseModel):
    annual_growth_rate: float = Field(default=20.0, ge=0, description="Annual growth in percent")
    projection_years: int = Field(default=3, ge=1, le=5)
    pattern: GrowthPattern = GrowthPattern.LINEAR
    include_cost_projections: bool = True
    show_limit_warnings: bool = True
    annual_cost_inflation: float = Field(default=0.0, ge=0)
    warning_threshold_percent: float = Field(default=75.0, gt=0)
    critical_threshold_percent: float = Field(default=90.0, gt=0)
    limits: GrowthLimitsRequest = Field(default_factory=GrowthLimitsRequest)


class GrowthProjectionRequest(BaseModel):
    """Request model for growth projection."""
    sizing: Optional[K8sSizingRequest] = None
    vm_sizing: Optional[VMSizingRequest] = None
    growth: GrowthSettingsRequest = Field(default_factory=GrowthSettingsRequest)
    cloud: Optional[CloudPricingRequest] = Field(None, description="Prices the baseline for cost projections")
    on_prem: Optional[OnPremPricingRequest] = None


def build_growth_settings(request: GrowthSettingsRequest) -> GrowthSettings:
    limits = request.limits
    return GrowthSettings(
        annual_growth_rate=request.annual_growth_rate,
        projection_years=request.projection_years,
        pattern=request.pattern,
        include_cost_projections=request.include_cost_projections,
        show_limit_warnings=request.show_limit_warnings,
        annual_cost_inflation=request.annual_cost_inflation,
        warning_threshold_percent=request.warning_threshold_percent,
        critical_threshold_percent=request.critical_threshold_percent,
        limits=GrowthLimits(
            max_nodes=limits.max_nodes,
            max_pods=limits.max_pods,
            cpu_capacity=limits.cpu_capacity,
            ram_capacity_gb=limits.ram_capacity_gb,
            storage_capacity_gb=limits.storage_capacity_gb,
            monthly_cost_threshold=limits.monthly_cost_threshold,
        ),
    )


@router.post("/api/growth/project")
async def project_growth(projection_request: GrowthProjectionRequest) -> Dict[str, Any]:
    """
    Size a footprint, optionally price it, and project it forward.

    Args:
        projection_request: Sizing request, growth policy and an optional
            pricing context for cost projections

    Returns:
        JSON response with the baseline sizing, optional baseline estimate
        and the growth projection
    """
    if projection_request.cloud is not None and projection_request.on_prem is not None:
        raise HTTPException(
            status_code=400,
            detail="At most one of 'cloud' or 'on_prem' may be given"
        )

    sizing_result = resolve_sizing(projection_request.sizing, projection_request.vm_sizing)
    try:
        settings = build_growth_settings(projection_request.growth)

        baseline_cost = None
        if projection_request.cloud is not None:
            baseline_cost = CostEstimator().estimate(sizing_result, build_cloud_context(projection_request.cloud))
        elif projection_request.on_prem is not None:
            baseline_cost = CostEstimator().estimate(sizing_result, build_on_prem_context(projection_request.on_prem))

        projection = GrowthProjector().project(sizing_result, settings, baseline_cost=baseline_cost)
    except ConfigurationError as error:
        logger.warning("Growth configuration error: %s", error)
        raise HTTPException(status_code=422, detail=str(error)) from error
    except (GrowthProjectorError, CostEstimatorError, ValueError) as error:
        raise HTTPException(
            status_code=400,
            detail=f"Failed to project growth: {str(error)}"
        ) from error

    return {
        "status": "ok",
        "sizing": sizing_result.to_dict(),
        "baseline_estimate": baseline_cost.to_dict() if baseline_cost else None,
        "projection": projection.to_dict()
    }
