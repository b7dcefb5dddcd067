"""
Platform distribution catalogue.
Node specs, management flags, licensing and cluster limits per distribution.
"""
from typing import Dict, Optional, List, Any, Tuple
from dataclasses import dataclass, field

from infrasizing.domain.environments import (
    EnvironmentKind,
    NodeClass,
    NodeSpec,
    EnvironmentSpecTable,
    ZERO_SPEC,
    resolve_for_environment,
)
from infrasizing.domain.errors import ConfigurationError


@dataclass(frozen=True)
class ClusterLimits:
    max_nodes: int = 2000
    max_pods_per_node: int = 110
    max_total_pods: int = 150000

    def to_dict(self) -> Dict[str, int]:
        return {
            "max_nodes": self.max_nodes,
            "max_pods_per_node": self.max_pods_per_node,
            "max_total_pods": self.max_total_pods,
        }


DEFAULT_CLUSTER_LIMITS = ClusterLimits()


@dataclass(frozen=True)
class DistributionProfile:
    """Sizing-relevant description of a platform distribution."""
    key: str
    name: str
    vendor: str
    prod_control_plane: Optional[NodeSpec]
    nonprod_control_plane: Optional[NodeSpec]
    prod_worker: Optional[NodeSpec]
    nonprod_worker: Optional[NodeSpec]
    prod_infra: Optional[NodeSpec] = ZERO_SPEC
    nonprod_infra: Optional[NodeSpec] = ZERO_SPEC
    has_infra_nodes: bool = False
    has_managed_control_plane: bool = False
    cloud_provider: Optional[str] = None
    license_per_node_year: float = 0.0
    license_per_core_year: float = 0.0
    limits: ClusterLimits = DEFAULT_CLUSTER_LIMITS
    control_plane_overrides: Dict[EnvironmentKind, NodeSpec] = field(default_factory=dict)
    worker_overrides: Dict[EnvironmentKind, NodeSpec] = field(default_factory=dict)
    infra_overrides: Dict[EnvironmentKind, NodeSpec] = field(default_factory=dict)

    def _pair(self, node_class: NodeClass) -> Tuple[Optional[NodeSpec], Optional[NodeSpec], Dict[EnvironmentKind, NodeSpec]]:
        if node_class == NodeClass.CONTROL_PLANE:
            return self.prod_control_plane, self.nonprod_control_plane, self.control_plane_overrides
        if node_class == NodeClass.INFRA:
            return self.prod_infra, self.nonprod_infra, self.infra_overrides
        return self.prod_worker, self.nonprod_worker, self.worker_overrides

    def node_spec(
        self,
        environment: EnvironmentKind,
        node_class: NodeClass,
        custom_specs: Optional[EnvironmentSpecTable] = None
    ) -> NodeSpec:
        """
        Resolve the node spec for an environment.

        Caller-supplied custom specs win over the distribution's own
        per-environment overrides, which win over the Prod/NonProd pair.

        Raises:
            ConfigurationError: If no spec exists for the node class
        """
        prod_spec, nonprod_spec, overrides = self._pair(node_class)
        merged = dict(overrides)
        if custom_specs is not None:
            merged.update(custom_specs.overrides_for(node_class))
        spec = resolve_for_environment(merged, environment, prod_spec, nonprod_spec)
        if spec is None:
            raise ConfigurationError(
                f"Distribution '{self.key}' has no {node_class.value} node spec",
                lookup=f"{self.key}.{node_class.value}",
                environment=environment.value,
            )
        return spec

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        def spec(value: Optional[NodeSpec]) -> Optional[Dict[str, Any]]:
            return value.to_dict() if value is not None else None

        return {
            "key": self.key,
            "name": self.name,
            "vendor": self.vendor,
            "has_infra_nodes": self.has_infra_nodes,
            "has_managed_control_plane": self.has_managed_control_plane,
            "cloud_provider": self.cloud_provider,
            "node_specs": {
                "prod": {
                    "control_plane": spec(self.prod_control_plane),
                    "worker": spec(self.prod_worker),
                    "infra": spec(self.prod_infra),
                },
                "nonprod": {
                    "control_plane": spec(self.nonprod_control_plane),
                    "worker": spec(self.nonprod_worker),
                    "infra": spec(self.nonprod_infra),
                },
            },
            "limits": self.limits.to_dict(),
        }


# Shared spec sets
_OPENSHIFT_CP = (NodeSpec(8, 32, 200), NodeSpec(8, 32, 100))
_OPENSHIFT_WORKER = (NodeSpec(16, 64, 200), NodeSpec(8, 32, 100))
_OPENSHIFT_INFRA = (NodeSpec(8, 32, 500), NodeSpec(8, 32, 200))
_K8S_CP = (NodeSpec(4, 16, 100), NodeSpec(2, 8, 50))
_K8S_WORKER = (NodeSpec(8, 32, 100), NodeSpec(4, 16, 50))
_LIGHT_CP = (NodeSpec(2, 4, 50), NodeSpec(1, 2, 25))
_LIGHT_WORKER = (NodeSpec(4, 8, 50), NodeSpec(2, 4, 25))
_SMALL_CLOUD_WORKER = (NodeSpec(4, 16, 100), NodeSpec(2, 8, 50))
_MANAGED_CP = (ZERO_SPEC, ZERO_SPEC)


def _openshift(key: str, name: str, managed: bool, provider: Optional[str], limits: ClusterLimits,
               license_per_node: float = 0.0) -> DistributionProfile:
    control_plane = _MANAGED_CP if managed else _OPENSHIFT_CP
    return DistributionProfile(
        key=key,
        name=name,
        vendor="Red Hat",
        prod_control_plane=control_plane[0],
        nonprod_control_plane=control_plane[1],
        prod_worker=_OPENSHIFT_WORKER[0],
        nonprod_worker=_OPENSHIFT_WORKER[1],
        prod_infra=_OPENSHIFT_INFRA[0],
        nonprod_infra=_OPENSHIFT_INFRA[1],
        has_infra_nodes=True,
        has_managed_control_plane=managed,
        cloud_provider=provider,
        license_per_node_year=license_per_node,
        limits=limits,
    )


def _self_managed(key: str, name: str, vendor: str, control_plane, worker, limits: ClusterLimits,
                  license_per_node: float = 0.0, license_per_core: float = 0.0,
                  provider: Optional[str] = None) -> DistributionProfile:
    return DistributionProfile(
        key=key,
        name=name,
        vendor=vendor,
        prod_control_plane=control_plane[0],
        nonprod_control_plane=control_plane[1],
        prod_worker=worker[0],
        nonprod_worker=worker[1],
        cloud_provider=provider,
        license_per_node_year=license_per_node,
        license_per_core_year=license_per_core,
        limits=limits,
    )


def _managed(key: str, name: str, vendor: str, provider: str, worker, limits: ClusterLimits) -> DistributionProfile:
    return DistributionProfile(
        key=key,
        name=name,
        vendor=vendor,
        prod_control_plane=_MANAGED_CP[0],
        nonprod_control_plane=_MANAGED_CP[1],
        prod_worker=worker[0],
        nonprod_worker=worker[1],
        has_managed_control_plane=True,
        cloud_provider=provider,
        limits=limits,
    )


DISTRIBUTIONS: Dict[str, DistributionProfile] = {
    profile.key: profile
    for profile in [
        _openshift("openshift", "Red Hat OpenShift", False, None,
                   ClusterLimits(2000, 250, 150000), license_per_node=2500.0),
        _openshift("rosa", "Red Hat OpenShift on AWS", True, "aws", ClusterLimits(5000, 250, 150000)),
        _openshift("aro", "Azure Red Hat OpenShift", True, "azure", ClusterLimits(5000, 250, 150000)),
        _openshift("openshift_dedicated", "OpenShift Dedicated", True, "gcp", ClusterLimits(2000, 250, 150000)),
        _self_managed("kubernetes", "Kubernetes (vanilla)", "CNCF", _K8S_CP, _K8S_WORKER,
                      ClusterLimits(5000, 110, 150000)),
        _self_managed("rancher", "Rancher", "SUSE", _K8S_CP, _K8S_WORKER,
                      ClusterLimits(2000, 110, 150000), license_per_node=1000.0),
        _self_managed("rke2", "RKE2", "SUSE", _K8S_CP, _K8S_WORKER, ClusterLimits(2000, 110, 150000)),
        _self_managed("charmed", "Charmed Kubernetes", "Canonical", _K8S_CP, _K8S_WORKER,
                      ClusterLimits(1000, 110, 100000), license_per_node=500.0),
        _self_managed("tanzu", "VMware Tanzu", "Broadcom", _K8S_CP, _K8S_WORKER,
                      ClusterLimits(2000, 110, 150000), license_per_core=1500.0),
        _self_managed("k3s", "K3s", "SUSE", _LIGHT_CP, _LIGHT_WORKER, ClusterLimits(500, 110, 50000)),
        _self_managed("microk8s", "MicroK8s", "Canonical", _LIGHT_CP, _LIGHT_WORKER,
                      ClusterLimits(200, 110, 20000)),
        _self_managed("hetzner_k8s", "Hetzner Kubernetes", "Hetzner", _LIGHT_CP, _SMALL_CLOUD_WORKER,
                      ClusterLimits(2000, 110, 150000), provider="hetzner"),
        _managed("eks", "Amazon EKS", "AWS", "aws", _K8S_WORKER, ClusterLimits(5000, 110, 150000)),
        _managed("aks", "Azure AKS", "Microsoft", "azure", _K8S_WORKER, ClusterLimits(5000, 250, 200000)),
        _managed("gke", "Google GKE", "Google", "gcp", _K8S_WORKER, ClusterLimits(15000, 110, 200000)),
        _managed("oke", "Oracle OKE", "Oracle", "oci", _K8S_WORKER, ClusterLimits(2000, 110, 150000)),
        _managed("doks", "DigitalOcean Kubernetes", "DigitalOcean", "digitalocean", _SMALL_CLOUD_WORKER,
                 ClusterLimits(1000, 110, 110000)),
        _managed("lke", "Linode Kubernetes Engine", "Akamai", "linode", _SMALL_CLOUD_WORKER,
                 ClusterLimits(1000, 110, 110000)),
    ]
}


def get_distribution(key: str) -> DistributionProfile:
    """
    Get a distribution profile by key.

    Raises:
        ConfigurationError: If the distribution is not in the catalogue
    """
    profile = DISTRIBUTIONS.get(key.lower())
    if profile is None:
        raise ConfigurationError(f"Unknown distribution '{key}'", lookup="distributions")
    return profile


def get_cluster_limits(key: Optional[str]) -> ClusterLimits:
    """Cluster limits for a distribution, or the generic defaults."""
    if key and key.lower() in DISTRIBUTIONS:
        return DISTRIBUTIONS[key.lower()].limits
    return DEFAULT_CLUSTER_LIMITS


def list_distributions() -> List[Dict[str, Any]]:
    return [profile.to_dict() for profile in DISTRIBUTIONS.values()]
