"""
Shared pytest fixtures for infrasizing tests.
"""

import sys
import os
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

# Set minimal environment variables for testing
os.environ.setdefault('INFRASIZING_LOG_LEVEL', 'INFO')
os.environ.setdefault('INFRASIZING_CURRENCY', 'USD')

import pytest
from fastapi.testclient import TestClient
from infrasizing.main import app
from infrasizing.core.config import DEFAULT_CALCULATOR_SETTINGS
from infrasizing.domain.environments import (
    EnvironmentKind,
    AppTier,
    AppTierCounts,
    NodeClass,
    NodeSpec,
    EnvironmentSpecTable,
)
from infrasizing.domain.hadr_models import HADRConfig, ControlPlaneHA, NodeDistribution, DRPattern, HAPattern
from infrasizing.domain.sizing_models import SizingInput, PolicySettings
from infrasizing.domain.vm_models import VMSizingInput, VMEnvironmentConfig, VMRoleConfig, ServerRole
from infrasizing.services.sizing_calculator import SizingCalculator


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def settings():
    """Default calculator settings."""
    return DEFAULT_CALCULATOR_SETTINGS


@pytest.fixture
def calculator(settings):
    return SizingCalculator(settings)


@pytest.fixture
def flat_policy():
    """Three Prod replicas, no headroom, no overcommit."""
    return PolicySettings(
        replicas={
            EnvironmentKind.DEV: 1,
            EnvironmentKind.TEST: 1,
            EnvironmentKind.STAGE: 2,
            EnvironmentKind.PROD: 3,
            EnvironmentKind.DR: 3,
        },
        headroom_percent={env: 0.0 for env in EnvironmentKind},
    )


@pytest.fixture
def prod_only_kubernetes_input(flat_policy):
    """Vanilla Kubernetes, Prod only, 10 small + 5 medium Java apps, 16/64 workers."""
    custom_specs = EnvironmentSpecTable()
    custom_specs.set_node_spec(EnvironmentKind.PROD, NodeClass.WORKER, NodeSpec(16, 64, 100))
    return SizingInput(
        distribution="kubernetes",
        technology="java",
        enabled_environments=[EnvironmentKind.PROD],
        prod_apps=AppTierCounts(small=10, medium=5),
        policy=flat_policy,
        custom_node_specs=custom_specs,
    )


@pytest.fixture
def openshift_input():
    """OpenShift across all non-DR environments with separate Prod and NonProd counts."""
    return SizingInput(
        distribution="openshift",
        technology="java",
        prod_apps=AppTierCounts(small=20, medium=20, large=10, xlarge=5),
        nonprod_apps=AppTierCounts(small=10, medium=10),
    )


@pytest.fixture
def warm_standby_hadr():
    return HADRConfig(
        control_plane_ha=ControlPlaneHA.STACKED_HA,
        control_plane_nodes=5,
        node_distribution=NodeDistribution.MULTI_AZ,
        availability_zones=3,
        dr_pattern=DRPattern.WARM_STANDBY,
    )


@pytest.fixture
def vm_input():
    """Prod VM fleet with web, app and database tiers behind an HA load balancer pair."""
    return VMSizingInput(
        technology="dotnet",
        environments={
            EnvironmentKind.PROD: VMEnvironmentConfig(
                roles=[
                    VMRoleConfig(role=ServerRole.WEB, tier=AppTier.MEDIUM, instance_count=2),
                    VMRoleConfig(role=ServerRole.APP, tier=AppTier.LARGE, instance_count=3),
                    VMRoleConfig(role=ServerRole.DATABASE, tier=AppTier.LARGE, instance_count=1, disk_gb=500),
                ],
                ha_pattern=HAPattern.ACTIVE_PASSIVE,
                load_balancer="ha_pair",
            ),
            EnvironmentKind.DEV: VMEnvironmentConfig(
                roles=[VMRoleConfig(role=ServerRole.APP, tier=AppTier.SMALL, instance_count=1)],
            ),
        },
    )


@pytest.fixture
def k8s_request_payload():
    """Minimal JSON body for POST /api/sizing/k8s."""
    return {
        "distribution": "eks",
        "technology": "java",
        "enabled_environments": ["dev", "prod"],
        "prod_apps": {"small": 10, "medium": 5},
        "nonprod_apps": {"small": 5},
    }
