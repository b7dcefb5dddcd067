"""
Static cloud provider price tables.
Public list prices (USD, on-demand, base region) for compute, storage,
network and managed control planes.
"""
from typing import Dict, Optional, List, Tuple, Any
from dataclasses import dataclass, field
import logging

from infrasizing.domain.environments import NodeSpec
from infrasizing.pricing.regions import get_regional_multiplier, get_provider_regions


logger = logging.getLogger(__name__)

# Hourly rate of an unknown instance type, in vCPU-hours of the provider
UNKNOWN_INSTANCE_VCPU_EQUIVALENT = 4

# Support plan as a percentage of the infrastructure subtotal
SUPPORT_PLAN_PERCENT: Dict[str, float] = {
    "basic": 0.0,
    "developer": 3.0,
    "business": 10.0,
    "enterprise": 15.0,
}

# Discount on compute for committed-use pricing
RESERVED_DISCOUNT: Dict[str, float] = {
    "on_demand": 0.0,
    "reserved_1yr": 0.30,
    "reserved_3yr": 0.50,
}


@dataclass(frozen=True)
class InstanceType:
    name: str
    cpu: int
    ram_gb: int
    hourly: float


@dataclass(frozen=True)
class ProviderPricing:
    """Price table of one cloud provider in its base region."""
    key: str
    name: str
    default_region: str
    cpu_per_hour: float
    ram_gb_per_hour: float
    control_plane_per_hour: float
    storage_ssd_per_gb_month: float
    registry_per_gb_month: float
    egress_per_gb: float
    load_balancer_per_hour: float
    nat_gateway_per_hour: float
    # Cross-AZ transfer uplift per additional zone, as a fraction of compute
    cross_az_rate: float
    instances: Tuple[InstanceType, ...] = field(default_factory=tuple)
    control_plane_ha_per_hour: Optional[float] = None

    def regional_multiplier(self, region: Optional[str]) -> float:
        region = region or self.default_region
        multiplier = get_regional_multiplier(self.key, region)
        if multiplier is None:
            logger.warning("Unknown %s region %s, using base region prices", self.key, region)
            return 1.0
        return multiplier

    def instance_hourly_rate(self, instance_type: str, region: Optional[str] = None) -> float:
        """
        Hourly rate of a named instance type.

        Unknown instance types resolve to the price of a 4 vCPU equivalent.
        """
        multiplier = self.regional_multiplier(region)
        for instance in self.instances:
            if instance.name == instance_type:
                return instance.hourly * multiplier
        logger.warning(
            "Unknown %s instance type %s, using %d vCPU equivalent rate",
            self.key,
            instance_type,
            UNKNOWN_INSTANCE_VCPU_EQUIVALENT,
        )
        return self.cpu_per_hour * UNKNOWN_INSTANCE_VCPU_EQUIVALENT * multiplier

    def select_instance(self, spec: NodeSpec) -> Optional[InstanceType]:
        """Cheapest instance type covering the spec's vCPU and RAM, if any."""
        candidates = [
            instance for instance in self.instances
            if instance.cpu >= spec.cpu and instance.ram_gb >= spec.ram_gb
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda instance: (instance.hourly, instance.cpu))

    def node_hourly_rate(self, spec: NodeSpec, region: Optional[str] = None) -> Tuple[str, float]:
        """
        Instance type label and hourly rate for a node spec.

        Specs larger than every listed instance are priced per vCPU and GB of RAM.
        """
        instance = self.select_instance(spec)
        if instance is not None:
            return instance.name, self.instance_hourly_rate(instance.name, region)
        multiplier = self.regional_multiplier(region)
        rate = (spec.cpu * self.cpu_per_hour + spec.ram_gb * self.ram_gb_per_hour) * multiplier
        return f"custom-{spec.cpu:g}vcpu-{spec.ram_gb:g}gb", rate

    def control_plane_hourly(self, high_availability: bool = False) -> float:
        if high_availability and self.control_plane_ha_per_hour is not None:
            return self.control_plane_ha_per_hour
        return self.control_plane_per_hour

    def cross_az_multiplier(self, availability_zones: int) -> float:
        """Additive HA/DR term for spreading nodes over the given number of zones."""
        return self.cross_az_rate * max(0, availability_zones - 1)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "key": self.key,
            "name": self.name,
            "default_region": self.default_region,
            "regions": get_provider_regions(self.key),
            "control_plane_per_hour": self.control_plane_per_hour,
            "storage_ssd_per_gb_month": self.storage_ssd_per_gb_month,
            "instances": [
                {"name": i.name, "cpu": i.cpu, "ram_gb": i.ram_gb, "hourly": i.hourly}
                for i in self.instances
            ],
        }


def _instances(*rows: Tuple[str, int, int, float]) -> Tuple[InstanceType, ...]:
    return tuple(InstanceType(*row) for row in rows)


PROVIDERS: Dict[str, ProviderPricing] = {
    "aws": ProviderPricing(
        key="aws",
        name="Amazon Web Services",
        default_region="us-east-1",
        cpu_per_hour=0.048,
        ram_gb_per_hour=0.006,
        control_plane_per_hour=0.10,  # EKS flat rate
        storage_ssd_per_gb_month=0.08,  # gp3
        registry_per_gb_month=0.10,
        egress_per_gb=0.09,
        load_balancer_per_hour=0.0225,
        nat_gateway_per_hour=0.045,
        cross_az_rate=0.015,
        instances=_instances(
            ("t3.medium", 2, 4, 0.0416),
            ("t3.large", 2, 8, 0.0832),
            ("m6i.large", 2, 8, 0.096),
            ("c6i.xlarge", 4, 8, 0.17),
            ("m6i.xlarge", 4, 16, 0.192),
            ("r6i.xlarge", 4, 32, 0.252),
            ("m6i.2xlarge", 8, 32, 0.384),
            ("r6i.2xlarge", 8, 64, 0.504),
            ("m6i.4xlarge", 16, 64, 0.768),
            ("m6i.8xlarge", 32, 128, 1.536),
        ),
    ),
    "azure": ProviderPricing(
        key="azure",
        name="Microsoft Azure",
        default_region="eastus",
        cpu_per_hour=0.048,
        ram_gb_per_hour=0.006,
        control_plane_per_hour=0.0,  # AKS free tier
        control_plane_ha_per_hour=0.10,  # AKS standard tier (uptime SLA)
        storage_ssd_per_gb_month=0.075,
        registry_per_gb_month=0.10,
        egress_per_gb=0.087,
        load_balancer_per_hour=0.025,
        nat_gateway_per_hour=0.045,
        cross_az_rate=0.0,  # cross-AZ transfer is free
        instances=_instances(
            ("Standard_B2ms", 2, 8, 0.0832),
            ("Standard_D2s_v5", 2, 8, 0.096),
            ("Standard_F4s_v2", 4, 8, 0.169),
            ("Standard_D4s_v5", 4, 16, 0.192),
            ("Standard_E4s_v5", 4, 32, 0.252),
            ("Standard_D8s_v5", 8, 32, 0.384),
            ("Standard_D16s_v5", 16, 64, 0.768),
            ("Standard_D32s_v5", 32, 128, 1.536),
        ),
    ),
    "gcp": ProviderPricing(
        key="gcp",
        name="Google Cloud",
        default_region="us-central1",
        cpu_per_hour=0.0335,
        ram_gb_per_hour=0.0045,
        control_plane_per_hour=0.10,  # GKE cluster management fee
        storage_ssd_per_gb_month=0.17,
        registry_per_gb_month=0.10,
        egress_per_gb=0.12,
        load_balancer_per_hour=0.025,
        nat_gateway_per_hour=0.044,
        cross_az_rate=0.015,
        instances=_instances(
            ("e2-medium", 2, 4, 0.0335),
            ("e2-standard-2", 2, 8, 0.067),
            ("e2-standard-4", 4, 16, 0.134),
            ("n2-highmem-4", 4, 32, 0.262),
            ("e2-standard-8", 8, 32, 0.268),
            ("e2-standard-16", 16, 64, 0.536),
            ("e2-standard-32", 32, 128, 1.072),
        ),
    ),
    "oci": ProviderPricing(
        key="oci",
        name="Oracle Cloud Infrastructure",
        default_region="us-ashburn-1",
        cpu_per_hour=0.025,
        ram_gb_per_hour=0.0015,
        control_plane_per_hour=0.10,  # OKE enhanced cluster
        storage_ssd_per_gb_month=0.0425,
        registry_per_gb_month=0.0255,
        egress_per_gb=0.0085,
        load_balancer_per_hour=0.0113,
        nat_gateway_per_hour=0.0,
        cross_az_rate=0.0,
        instances=_instances(
            ("VM.Standard.E5.Flex-2x16", 2, 16, 0.074),
            ("VM.Standard.E5.Flex-4x32", 4, 32, 0.148),
            ("VM.Standard.E5.Flex-8x64", 8, 64, 0.296),
            ("VM.Standard.E5.Flex-16x128", 16, 128, 0.592),
            ("VM.Standard.E5.Flex-32x256", 32, 256, 1.184),
        ),
    ),
    "digitalocean": ProviderPricing(
        key="digitalocean",
        name="DigitalOcean",
        default_region="nyc1",
        cpu_per_hour=0.018,
        ram_gb_per_hour=0.003,
        control_plane_per_hour=0.0,  # DOKS free control plane
        control_plane_ha_per_hour=0.06,
        storage_ssd_per_gb_month=0.10,
        registry_per_gb_month=0.02,
        egress_per_gb=0.01,
        load_balancer_per_hour=0.015,
        nat_gateway_per_hour=0.0,
        cross_az_rate=0.01,
        instances=_instances(
            ("s-2vcpu-4gb", 2, 4, 0.030),
            ("s-4vcpu-8gb", 4, 8, 0.065),
            ("g-2vcpu-8gb", 2, 8, 0.091),
            ("m-2vcpu-16gb", 2, 16, 0.126),
            ("g-4vcpu-16gb", 4, 16, 0.182),
            ("g-8vcpu-32gb", 8, 32, 0.364),
            ("g-16vcpu-64gb", 16, 64, 0.728),
        ),
    ),
    "linode": ProviderPricing(
        key="linode",
        name="Akamai Linode",
        default_region="us-east",
        cpu_per_hour=0.018,
        ram_gb_per_hour=0.0045,
        control_plane_per_hour=0.0,
        control_plane_ha_per_hour=0.09,
        storage_ssd_per_gb_month=0.10,
        registry_per_gb_month=0.02,
        egress_per_gb=0.005,
        load_balancer_per_hour=0.015,
        nat_gateway_per_hour=0.0,
        cross_az_rate=0.01,
        instances=_instances(
            ("g6-standard-2", 2, 4, 0.036),
            ("g6-standard-4", 4, 8, 0.072),
            ("g6-standard-6", 6, 16, 0.144),
            ("g6-standard-8", 8, 32, 0.288),
            ("g6-standard-16", 16, 64, 0.576),
            ("g6-standard-32", 32, 128, 1.152),
        ),
    ),
    "hetzner": ProviderPricing(
        key="hetzner",
        name="Hetzner Cloud",
        default_region="fsn1",
        cpu_per_hour=0.004,
        ram_gb_per_hour=0.001,
        control_plane_per_hour=0.0,
        storage_ssd_per_gb_month=0.052,
        registry_per_gb_month=0.02,
        egress_per_gb=0.001,
        load_balancer_per_hour=0.009,
        nat_gateway_per_hour=0.0,
        cross_az_rate=0.01,
        instances=_instances(
            ("cx22", 2, 4, 0.006),
            ("cx32", 4, 8, 0.011),
            ("cx42", 8, 16, 0.026),
            ("ccx33", 8, 32, 0.09),
            ("cx52", 16, 32, 0.05),
            ("ccx43", 16, 64, 0.18),
            ("ccx53", 32, 128, 0.36),
        ),
    ),
    "alibaba": ProviderPricing(
        key="alibaba",
        name="Alibaba Cloud",
        default_region="cn-hangzhou",
        cpu_per_hour=0.04,
        ram_gb_per_hour=0.005,
        control_plane_per_hour=0.0,  # ACK basic
        control_plane_ha_per_hour=0.10,  # ACK Pro
        storage_ssd_per_gb_month=0.08,
        registry_per_gb_month=0.08,
        egress_per_gb=0.12,
        load_balancer_per_hour=0.02,
        nat_gateway_per_hour=0.04,
        cross_az_rate=0.01,
        instances=_instances(
            ("ecs.g6.large", 2, 8, 0.096),
            ("ecs.c6.xlarge", 4, 8, 0.17),
            ("ecs.g6.xlarge", 4, 16, 0.192),
            ("ecs.r6.xlarge", 4, 32, 0.25),
            ("ecs.g6.2xlarge", 8, 32, 0.384),
        ),
    ),
    "huawei": ProviderPricing(
        key="huawei",
        name="Huawei Cloud",
        default_region="cn-north-4",
        cpu_per_hour=0.038,
        ram_gb_per_hour=0.005,
        control_plane_per_hour=0.0,  # CCE basic
        control_plane_ha_per_hour=0.09,
        storage_ssd_per_gb_month=0.08,
        registry_per_gb_month=0.06,
        egress_per_gb=0.10,
        load_balancer_per_hour=0.02,
        nat_gateway_per_hour=0.04,
        cross_az_rate=0.01,
        instances=_instances(
            ("s6.medium.2", 1, 2, 0.05),
            ("s6.large.2", 2, 4, 0.08),
            ("c6.xlarge.2", 4, 8, 0.14),
            ("s6.xlarge.2", 4, 8, 0.16),
            ("m6.xlarge.8", 4, 32, 0.24),
            ("s6.2xlarge.2", 8, 16, 0.32),
        ),
    ),
    "tencent": ProviderPricing(
        key="tencent",
        name="Tencent Cloud",
        default_region="ap-guangzhou",
        cpu_per_hour=0.035,
        ram_gb_per_hour=0.005,
        control_plane_per_hour=0.0,  # TKE basic
        control_plane_ha_per_hour=0.08,
        storage_ssd_per_gb_month=0.07,
        registry_per_gb_month=0.05,
        egress_per_gb=0.08,
        load_balancer_per_hour=0.02,
        nat_gateway_per_hour=0.03,
        cross_az_rate=0.01,
        instances=_instances(
            ("S5.MEDIUM4", 2, 4, 0.06),
            ("S5.MEDIUM8", 2, 8, 0.08),
            ("S5.LARGE8", 4, 8, 0.12),
            ("S5.LARGE16", 4, 16, 0.16),
            ("S5.2XLARGE16", 8, 16, 0.24),
            ("S5.2XLARGE32", 8, 32, 0.32),
        ),
    ),
    "ibm": ProviderPricing(
        key="ibm",
        name="IBM Cloud",
        default_region="us-south",
        cpu_per_hour=0.05,
        ram_gb_per_hour=0.007,
        control_plane_per_hour=0.0,  # IKS master is free
        storage_ssd_per_gb_month=0.10,
        registry_per_gb_month=0.10,
        egress_per_gb=0.09,
        load_balancer_per_hour=0.025,
        nat_gateway_per_hour=0.045,
        cross_az_rate=0.015,
        instances=_instances(
            ("cx2-4x8", 4, 8, 0.17),
            ("bx2-4x16", 4, 16, 0.192),
            ("mx2-4x32", 4, 32, 0.25),
            ("bx2-8x32", 8, 32, 0.384),
            ("bx2-16x64", 16, 64, 0.768),
        ),
    ),
    "vultr": ProviderPricing(
        key="vultr",
        name="Vultr",
        default_region="ewr",
        cpu_per_hour=0.012,
        ram_gb_per_hour=0.003,
        control_plane_per_hour=0.0,  # VKE free control plane
        storage_ssd_per_gb_month=0.10,
        registry_per_gb_month=0.0,
        egress_per_gb=0.01,
        load_balancer_per_hour=0.015,
        nat_gateway_per_hour=0.0,
        cross_az_rate=0.01,
        instances=_instances(
            ("vc2-1c-2gb", 1, 2, 0.015),
            ("vc2-2c-4gb", 2, 4, 0.030),
            ("vhf-2c-4gb", 2, 4, 0.036),
            ("vc2-4c-8gb", 4, 8, 0.060),
            ("vhf-4c-8gb", 4, 8, 0.071),
            ("vc2-6c-16gb", 6, 16, 0.119),
            ("vc2-8c-32gb", 8, 32, 0.238),
            ("vhf-8c-32gb", 8, 32, 0.286),
        ),
    ),
    "civo": ProviderPricing(
        key="civo",
        name="Civo",
        default_region="lon1",
        cpu_per_hour=0.0075,
        ram_gb_per_hour=0.0025,
        control_plane_per_hour=0.0,  # K3s control plane is free
        storage_ssd_per_gb_month=0.10,
        registry_per_gb_month=0.0,
        egress_per_gb=0.01,
        load_balancer_per_hour=0.015,
        nat_gateway_per_hour=0.0,
        cross_az_rate=0.01,
        instances=_instances(
            ("g4s.xsmall", 1, 1, 0.0075),
            ("g4s.small", 1, 2, 0.015),
            ("g4s.medium", 2, 4, 0.030),
            ("g4s.large", 4, 8, 0.060),
            ("g4s.xlarge", 6, 16, 0.119),
            ("g4s.2xlarge", 8, 32, 0.238),
        ),
    ),
    "exoscale": ProviderPricing(
        key="exoscale",
        name="Exoscale",
        default_region="ch-gva-2",
        cpu_per_hour=0.012,
        ram_gb_per_hour=0.003,
        control_plane_per_hour=0.0,  # SKS starter
        storage_ssd_per_gb_month=0.08,
        registry_per_gb_month=0.02,
        egress_per_gb=0.02,
        load_balancer_per_hour=0.015,
        nat_gateway_per_hour=0.0,
        cross_az_rate=0.01,
        instances=_instances(
            ("tiny", 1, 1, 0.015),
            ("small", 2, 2, 0.023),
            ("medium", 2, 4, 0.046),
            ("large", 4, 8, 0.069),
            ("extra-large", 4, 16, 0.115),
            ("huge", 8, 32, 0.231),
            ("mega", 12, 64, 0.462),
            ("titan", 16, 128, 0.923),
        ),
    ),
    "ovh": ProviderPricing(
        key="ovh",
        name="OVHcloud",
        default_region="gra",
        cpu_per_hour=0.010,
        ram_gb_per_hour=0.003,
        control_plane_per_hour=0.0,
        storage_ssd_per_gb_month=0.04,
        registry_per_gb_month=0.02,
        egress_per_gb=0.01,
        load_balancer_per_hour=0.012,
        nat_gateway_per_hour=0.0,
        cross_az_rate=0.01,
        instances=_instances(
            ("b2-7", 2, 7, 0.026),
            ("c2-7", 2, 7, 0.032),
            ("b2-15", 4, 15, 0.052),
            ("c2-15", 4, 15, 0.064),
            ("r2-30", 2, 30, 0.070),
            ("b2-30", 8, 30, 0.104),
            ("r2-60", 4, 60, 0.140),
            ("b2-60", 16, 60, 0.208),
        ),
    ),
    "scaleway": ProviderPricing(
        key="scaleway",
        name="Scaleway",
        default_region="fr-par",
        cpu_per_hour=0.008,
        ram_gb_per_hour=0.002,
        control_plane_per_hour=0.0,  # Kapsule free control plane
        storage_ssd_per_gb_month=0.08,
        registry_per_gb_month=0.02,
        egress_per_gb=0.01,
        load_balancer_per_hour=0.012,
        nat_gateway_per_hour=0.01,
        cross_az_rate=0.01,
        instances=_instances(
            ("DEV1-S", 2, 2, 0.007),
            ("DEV1-M", 3, 4, 0.015),
            ("DEV1-L", 4, 8, 0.030),
            ("GP1-XS", 4, 16, 0.024),
            ("GP1-S", 8, 32, 0.048),
            ("GP1-M", 16, 64, 0.096),
            ("GP1-L", 32, 128, 0.192),
        ),
    ),
}

# Used for provider keys that have no table of their own
GENERIC_PROVIDER = "aws"


def get_provider_pricing(provider: str) -> ProviderPricing:
    """
    Get the price table of a provider.

    Unknown provider keys resolve to the generic (AWS list price) table;
    callers compare the returned key with the requested one to report it.
    """
    pricing = PROVIDERS.get(provider.lower())
    if pricing is None:
        logger.warning("No price table for provider %s, using %s list prices", provider, GENERIC_PROVIDER)
        return PROVIDERS[GENERIC_PROVIDER]
    return pricing


def list_providers() -> List[Dict[str, Any]]:
    return [pricing.to_dict() for pricing in PROVIDERS.values()]
