"""
API routes for container-platform and VM sizing.
"""
from typing import Dict, Any, List, Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
import logging

from infrasizing.domain.environments import EnvironmentKind, AppTier, AppTierCounts, EnvironmentSpecTable
from infrasizing.domain.errors import ConfigurationError, PolicyViolation
from infrasizing.domain.hadr_models import HADRConfig, HAPattern, DRPattern
from infrasizing.domain.sizing_models import SizingInput, SizingResult, PolicySettings, ClusterMode
from infrasizing.domain.vm_models import (
    VMSizingInput,
    VMSizingResult,
    VMEnvironmentConfig,
    VMRoleConfig,
    ServerRole,
)
from infrasizing.services.sizing_calculator import SizingCalculator


logger = logging.getLogger(__name__)
router = APIRouter()


class AppCountsRequest(BaseModel):
    """Application counts per size tier."""
    small: int = Field(default=0, ge=0)
    medium: int = Field(default=0, ge=0)
    large: int = Field(default=0, ge=0)
    xlarge: int = Field(default=0, ge=0)


class PolicyRequest(BaseModel):
    """Replica, headroom and overcommit policy; omitted environments keep their defaults."""
    replicas: Dict[EnvironmentKind, int] = Field(default_factory=dict)
    headroom_percent: Dict[EnvironmentKind, float] = Field(default_factory=dict)
    headroom_enabled: bool = True
    prod_cpu_overcommit: float = Field(default=1.0, gt=0)
    prod_ram_overcommit: float = Field(default=1.0, gt=0)
    nonprod_cpu_overcommit: float = Field(default=1.0, gt=0)
    nonprod_ram_overcommit: float = Field(default=1.0, gt=0)
    system_reserve_percent: float = Field(default=15.0, ge=0, lt=100)


class K8sSizingRequest(BaseModel):
    """Request model for container-platform sizing."""
    distribution: str = Field(..., description="Distribution key, e.g. 'openshift' or 'eks'")
    technology: str = Field(default="java", description="Application technology")
    cluster_mode: ClusterMode = ClusterMode.MULTI_CLUSTER
    selected_environment: EnvironmentKind = Field(
        default=EnvironmentKind.PROD, description="Environment sized in per_environment cluster mode"
    )
    enabled_environments: List[EnvironmentKind] = Field(
        default_factory=lambda: [EnvironmentKind.DEV, EnvironmentKind.TEST,
                                 EnvironmentKind.STAGE, EnvironmentKind.PROD]
    )
    prod_apps: Optional[AppCountsRequest] = Field(None, description="Fallback counts for Prod and DR")
    nonprod_apps: Optional[AppCountsRequest] = Field(None, description="Fallback counts for Dev, Test and Stage")
    environment_apps: Dict[EnvironmentKind, AppCountsRequest] = Field(default_factory=dict)
    policy: PolicyRequest = Field(default_factory=PolicyRequest)
    ha_pattern: HAPattern = HAPattern.NONE
    hadr: Optional[Dict[str, Any]] = Field(None, description="HA/DR configuration")
    environment_hadr: Dict[EnvironmentKind, Dict[str, Any]] = Field(default_factory=dict)
    custom_node_specs: Optional[Dict[str, Dict[str, Dict[str, float]]]] = Field(
        None, description="Node spec overrides as {environment: {node_class: {cpu, ram_gb, disk_gb}}}"
    )


class VMRoleRequest(BaseModel):
    role: ServerRole
    tier: AppTier = AppTier.MEDIUM
    instance_count: int = Field(default=1, ge=0)
    disk_gb: int = Field(default=100, ge=0)
    custom_cpu: Optional[int] = Field(None, gt=0)
    custom_ram_gb: Optional[int] = Field(None, gt=0)
    name: Optional[str] = None


class VMEnvironmentRequest(BaseModel):
    enabled: bool = True
    roles: List[VMRoleRequest] = Field(default_factory=list)
    ha_pattern: HAPattern = HAPattern.NONE
    dr_pattern: DRPattern = DRPattern.NONE
    load_balancer: str = "none"
    storage_gb: int = Field(default=0, ge=0)


class VMSizingRequest(BaseModel):
    """Request model for VM fleet sizing."""
    technology: str = "java"
    environments: Dict[EnvironmentKind, VMEnvironmentRequest] = Field(...)
    system_overhead_percent: float = Field(default=15.0, ge=0, lt=100)


def _app_counts(request: Optional[AppCountsRequest]) -> Optional[AppTierCounts]:
    if request is None:
        return None
    return AppTierCounts(
        small=request.small,
        medium=request.medium,
        large=request.large,
        xlarge=request.xlarge,
    )


def build_sizing_input(request: K8sSizingRequest) -> SizingInput:
    """
    Translate a sizing request into engine input.

    Raises:
        ValueError: If a nested HA/DR or node spec block is invalid
    """
    defaults = PolicySettings()
    replicas = dict(defaults.replicas)
    replicas.update(request.policy.replicas)
    headroom = dict(defaults.headroom_percent)
    headroom.update(request.policy.headroom_percent)

    policy = PolicySettings(
        replicas=replicas,
        headroom_percent=headroom,
        headroom_enabled=request.policy.headroom_enabled,
        prod_cpu_overcommit=request.policy.prod_cpu_overcommit,
        prod_ram_overcommit=request.policy.prod_ram_overcommit,
        nonprod_cpu_overcommit=request.policy.nonprod_cpu_overcommit,
        nonprod_ram_overcommit=request.policy.nonprod_ram_overcommit,
        system_reserve_percent=request.policy.system_reserve_percent,
    )

    custom_specs = None
    if request.custom_node_specs:
        custom_specs = EnvironmentSpecTable.from_dict(request.custom_node_specs)

    return SizingInput(
        distribution=request.distribution,
        technology=request.technology,
        cluster_mode=request.cluster_mode,
        selected_environment=request.selected_environment,
        enabled_environments=list(request.enabled_environments),
        prod_apps=_app_counts(request.prod_apps),
        nonprod_apps=_app_counts(request.nonprod_apps),
        environment_apps={env: _app_counts(counts) for env, counts in request.environment_apps.items()},
        policy=policy,
        ha_pattern=request.ha_pattern,
        hadr=HADRConfig.from_dict(request.hadr) if request.hadr else HADRConfig(),
        environment_hadr={env: HADRConfig.from_dict(data) for env, data in request.environment_hadr.items()},
        custom_node_specs=custom_specs,
    )


def build_vm_sizing_input(request: VMSizingRequest) -> VMSizingInput:
    """Translate a VM sizing request into engine input."""
    environments = {}
    for env, env_request in request.environments.items():
        environments[env] = VMEnvironmentConfig(
            enabled=env_request.enabled,
            roles=[
                VMRoleConfig(
                    role=role.role,
                    tier=role.tier,
                    instance_count=role.instance_count,
                    disk_gb=role.disk_gb,
                    custom_cpu=role.custom_cpu,
                    custom_ram_gb=role.custom_ram_gb,
                    name=role.name,
                )
                for role in env_request.roles
            ],
            ha_pattern=env_request.ha_pattern,
            dr_pattern=env_request.dr_pattern,
            load_balancer=env_request.load_balancer,
            storage_gb=env_request.storage_gb,
        )
    return VMSizingInput(
        technology=request.technology,
        environments=environments,
        system_overhead_percent=request.system_overhead_percent,
    )


def run_k8s_sizing(request: K8sSizingRequest) -> SizingResult:
    """Size a container platform, translating engine failures into HTTP errors."""
    try:
        return SizingCalculator().compute(build_sizing_input(request))
    except ConfigurationError as error:
        logger.warning("Sizing configuration error: %s", error)
        raise HTTPException(status_code=422, detail=str(error)) from error
    except PolicyViolation as error:
        logger.error("Sizing policy violation: %s", error)
        raise HTTPException(status_code=500, detail=str(error)) from error
    except ValueError as error:
        raise HTTPException(status_code=400, detail=f"Invalid sizing input: {str(error)}") from error


def run_vm_sizing(request: VMSizingRequest) -> VMSizingResult:
    """Size a VM fleet, translating engine failures into HTTP errors."""
    try:
        return SizingCalculator().compute_vm(build_vm_sizing_input(request))
    except ConfigurationError as error:
        logger.warning("VM sizing configuration error: %s", error)
        raise HTTPException(status_code=422, detail=str(error)) from error
    except PolicyViolation as error:
        logger.error("VM sizing policy violation: %s", error)
        raise HTTPException(status_code=500, detail=str(error)) from error
    except ValueError as error:
        raise HTTPException(status_code=400, detail=f"Invalid VM sizing input: {str(error)}") from error


@router.post("/api/sizing/k8s")
async def size_k8s(sizing_request: K8sSizingRequest) -> Dict[str, Any]:
    """
    Size a container platform across the enabled environments.

    Args:
        sizing_request: Distribution, application counts and policy

    Returns:
        JSON response with per-environment results and the grand total

    Raises:
        HTTPException: 422 for missing lookups, 400 for invalid input,
                       500 for invariant violations
    """
    result = run_k8s_sizing(sizing_request)
    return {
        "status": "ok",
        "sizing": result.to_dict()
    }


@router.post("/api/sizing/vm")
async def size_vm(sizing_request: VMSizingRequest) -> Dict[str, Any]:
    """
    Size a VM fleet per environment and server role.

    Args:
        sizing_request: Technology and per-environment role configuration

    Returns:
        JSON response with per-environment results and the grand total
    """
    result = run_vm_sizing(sizing_request)
    return {
        "status": "ok",
        "sizing": result.to_dict()
    }
