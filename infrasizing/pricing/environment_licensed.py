"""
Price list of the environment-licensed low-code platform.

The platform is licensed per deployment target: resource packs on the
vendor cloud, a base package plus per-environment fees on Kubernetes or
the vendor-managed Azure service, and per-app or unlimited-app fees on
servers and partner clouds. All amounts are USD per year.
"""
from typing import Dict, List, Optional, FrozenSet
from dataclasses import dataclass, field

from infrasizing.pricing.tiered import TierTable


@dataclass(frozen=True)
class ResourcePackSpec:
    """Runtime and database capacity of one vendor-cloud resource pack."""
    size: str
    memory_gb: float
    vcpu: float
    db_memory_gb: float
    db_vcpu: int
    db_storage_gb: float
    file_storage_gb: float
    price_per_year: float
    cloud_tokens: int
    uptime_sla: float = 99.5
    has_fallback: bool = False
    has_multi_region_failover: bool = False

    def describe(self) -> str:
        return f"{self.size} ({self.memory_gb:g}GB RAM, {self.vcpu:g} vCPU, {self.db_storage_gb:g}GB DB)"


# (size, memory, vcpu, db memory, db vcpu, db storage, file storage)
_PACK_SHAPES = {
    "XS": (1, 0.25, 1, 2, 5, 10),
    "S": (2, 0.5, 2, 2, 10, 20),
    "M": (4, 1, 4, 2, 20, 40),
    "L": (8, 2, 8, 2, 40, 80),
    "XL": (16, 4, 16, 4, 80, 160),
    "2XL": (32, 8, 32, 4, 160, 320),
    "XXL": (32, 8, 32, 4, 160, 320),
    "3XL": (64, 16, 64, 8, 320, 640),
    "4XL": (128, 32, 128, 16, 640, 1280),
    "4XL-5XLDB": (128, 32, 256, 32, 1280, 1280),
}


def _packs(prices: Dict[str, tuple], **features) -> Dict[str, ResourcePackSpec]:
    packs = {}
    for size, (price, tokens) in prices.items():
        memory, vcpu, db_memory, db_vcpu, db_storage, file_storage = _PACK_SHAPES[size]
        packs[size] = ResourcePackSpec(
            size=size,
            memory_gb=memory,
            vcpu=vcpu,
            db_memory_gb=db_memory,
            db_vcpu=db_vcpu,
            db_storage_gb=db_storage,
            file_storage_gb=file_storage,
            price_per_year=price,
            cloud_tokens=tokens,
            **features
        )
    return packs


def _resource_packs() -> Dict[str, Dict[str, ResourcePackSpec]]:
    standard = _packs({
        "XS": (516.0, 10), "S": (1032.0, 20), "M": (2064.0, 40), "L": (4128.0, 80),
        "XL": (8256.0, 160), "2XL": (16512.0, 320), "3XL": (33024.0, 640),
        "4XL": (66048.0, 1280), "4XL-5XLDB": (115584.0, 2240),
    })
    premium = _packs({
        "S": (1548.0, 30), "M": (3096.0, 60), "L": (6192.0, 120), "XL": (12384.0, 240),
        "2XL": (24768.0, 480), "3XL": (49536.0, 960), "4XL": (99072.0, 1920),
        "4XL-5XLDB": (173376.0, 3360),
    }, uptime_sla=99.95, has_fallback=True)
    premium_plus = _packs({
        "XL": (20640.0, 400), "XXL": (41280.0, 800), "3XL": (82560.0, 1600),
        "4XL": (165120.0, 3200), "4XL-5XLDB": (288960.0, 5600),
    }, uptime_sla=99.95, has_fallback=True, has_multi_region_failover=True)
    # Premium Plus 4XL-5XLDB ships with a 4XL-sized database memory
    premium_plus["4XL-5XLDB"] = ResourcePackSpec(
        size="4XL-5XLDB", memory_gb=128, vcpu=32, db_memory_gb=128, db_vcpu=32, db_storage_gb=1280,
        file_storage_gb=1280, price_per_year=288960.0, cloud_tokens=5600, uptime_sla=99.95,
        has_fallback=True, has_multi_region_failover=True,
    )
    return {"standard": standard, "premium": premium, "premium_plus": premium_plus}


def _kubernetes_environment_bands() -> TierTable:
    # (cumulative additional environments upper bound, price per environment)
    return [(50, 552.0), (100, 408.0), (150, 240.0), (None, 0.0)]


def _per_app_prices() -> Dict[str, float]:
    return {"server": 6612.0, "stackit": 6612.0, "sap_btp": 6612.0}


def _unlimited_app_prices() -> Dict[str, float]:
    return {"server": 33060.0, "stackit": 33060.0, "sap_btp": 33060.0}


def _genai_packs() -> Dict[str, tuple]:
    # size -> (price per year, cloud tokens)
    return {"S": (1857.60, 36), "M": (3715.20, 72), "L": (7430.40, 144)}


@dataclass(frozen=True)
class EnvironmentLicensedPricing:
    """Yearly price list; base packages include their first environments."""
    platform_license: float = 65400.0
    internal_users_per_block: float = 40800.0
    internal_user_block_size: int = 100
    external_users_per_block: float = 60000.0
    external_user_block_size: int = 250000
    volume_discount_percent: float = 10.0
    resource_packs: Dict[str, Dict[str, ResourcePackSpec]] = field(default_factory=_resource_packs)
    additional_file_storage_per_100gb: float = 123.0
    additional_database_storage_per_100gb: float = 246.0
    dedicated_cloud: float = 368100.0
    azure_base: float = 6612.0
    azure_environments_included: int = 3
    azure_additional_environment: float = 722.40
    azure_additional_environment_tokens: int = 14
    kubernetes_base: float = 6360.0
    kubernetes_environments_included: int = 3
    kubernetes_environment_bands: TierTable = field(default_factory=_kubernetes_environment_bands)
    per_app_prices: Dict[str, float] = field(default_factory=_per_app_prices)
    unlimited_app_prices: Dict[str, float] = field(default_factory=_unlimited_app_prices)
    genai_packs: Dict[str, tuple] = field(default_factory=_genai_packs)
    genai_knowledge_base: float = 2476.80
    genai_knowledge_base_tokens: int = 48
    customer_enablement: float = 45000.0
    supported_kubernetes_providers: FrozenSet[str] = frozenset({"eks", "aks", "gke", "openshift"})

    def resource_pack(self, tier: str, size: str) -> Optional[ResourcePackSpec]:
        return self.resource_packs.get(tier, {}).get(size.upper())

    def recommend_resource_pack(self, tier: str, memory_gb: float, vcpu: float,
                                db_storage_gb: float = 0.0) -> Optional[ResourcePackSpec]:
        """
        Cheapest pack of a tier that covers the runtime and database demand.

        Returns:
            The matching ResourcePackSpec, or None when no pack is large enough
        """
        candidates: List[ResourcePackSpec] = [
            pack for pack in self.resource_packs.get(tier, {}).values()
            if pack.memory_gb >= memory_gb and pack.vcpu >= vcpu and pack.db_storage_gb >= db_storage_gb
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda pack: pack.price_per_year)


DEFAULT_ENVIRONMENT_LICENSED_PRICING = EnvironmentLicensedPricing()
