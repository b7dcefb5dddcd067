"""
Domain models for licensed low-code platform quotes and discounts.
"""
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from enum import Enum


class PlatformDeployment(str, Enum):
    CLOUD = "cloud"
    SELF_MANAGED = "self_managed"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountScope(str, Enum):
    TOTAL = "total"
    LICENSE_ONLY = "license_only"
    ADD_ONS_ONLY = "add_ons_only"
    SERVICES_ONLY = "services_only"


@dataclass(frozen=True)
class Discount:
    """A negotiated discount: a percentage of, or fixed amount off, one scope."""
    type: DiscountType
    scope: DiscountScope
    value: float
    notes: Optional[str] = None

    def __post_init__(self):
        if self.value < 0:
            raise ValueError("Discount value must be non-negative")
        if self.type == DiscountType.PERCENTAGE and self.value > 100:
            raise ValueError("Percentage discount cannot exceed 100")

    def describe(self) -> str:
        if self.type == DiscountType.PERCENTAGE:
            text = f"{self.value:g}% discount on {self.scope.value}"
        else:
            text = f"${self.value:,.0f} discount on {self.scope.value}"
        if self.notes:
            text += f" ({self.notes})"
        return text


@dataclass
class LicensedPlatformConfig:
    """What the customer licenses on the low-code platform."""
    application_objects: int = 150
    deployment: PlatformDeployment = PlatformDeployment.CLOUD
    internal_users: int = 100
    external_users: int = 0
    unlimited_users: bool = False
    app_shield: bool = False
    app_shield_user_volume: Optional[int] = None
    # add-on key -> quantity (per-pack add-ons multiply by AO packs, flat ones do not)
    add_ons: Dict[str, int] = field(default_factory=dict)
    services_region: str = "americas"
    success_plan: Optional[str] = None
    expert_days: int = 0
    training_sessions: int = 0
    discount: Optional[Discount] = None


@dataclass
class LicensedPlatformQuote:
    """Yearly quote, itemized per subtotal."""
    ao_packs: int
    license_items: Dict[str, float] = field(default_factory=dict)
    add_on_items: Dict[str, float] = field(default_factory=dict)
    service_items: Dict[str, float] = field(default_factory=dict)
    infrastructure_per_year: float = 0.0
    discount_amount: float = 0.0
    discount_description: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def license_subtotal(self) -> float:
        return sum(self.license_items.values())

    @property
    def add_ons_subtotal(self) -> float:
        return sum(self.add_on_items.values())

    @property
    def services_subtotal(self) -> float:
        return sum(self.service_items.values())

    @property
    def total_per_year(self) -> float:
        return (
            self.license_subtotal
            + self.add_ons_subtotal
            + self.services_subtotal
            + self.infrastructure_per_year
            - self.discount_amount
        )

    @property
    def total_per_month(self) -> float:
        return self.total_per_year / 12

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "ao_packs": self.ao_packs,
            "license_items": {k: round(v, 2) for k, v in self.license_items.items()},
            "add_on_items": {k: round(v, 2) for k, v in self.add_on_items.items()},
            "service_items": {k: round(v, 2) for k, v in self.service_items.items()},
            "license_subtotal": round(self.license_subtotal, 2),
            "add_ons_subtotal": round(self.add_ons_subtotal, 2),
            "services_subtotal": round(self.services_subtotal, 2),
            "infrastructure_per_year": round(self.infrastructure_per_year, 2),
            "discount_amount": round(self.discount_amount, 2),
            "discount_description": self.discount_description,
            "total_per_year": round(self.total_per_year, 2),
            "total_per_month": round(self.total_per_month, 2),
            "warnings": self.warnings,
        }


class EnvironmentLicensedDeployment(str, Enum):
    """Where the environment-licensed platform runs."""
    SAAS = "saas"
    DEDICATED = "dedicated"
    AZURE = "azure"
    KUBERNETES = "kubernetes"
    SERVER = "server"
    STACKIT = "stackit"
    SAP_BTP = "sap_btp"

    @property
    def runs_on_own_infrastructure(self) -> bool:
        return self in (
            EnvironmentLicensedDeployment.KUBERNETES,
            EnvironmentLicensedDeployment.SERVER,
        )


class ResourcePackTier(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    PREMIUM_PLUS = "premium_plus"


@dataclass
class EnvironmentLicensedConfig:
    """What the customer licenses on the environment-licensed platform."""
    deployment: EnvironmentLicensedDeployment = EnvironmentLicensedDeployment.KUBERNETES
    # vendor cloud (SaaS) capacity
    resource_pack_tier: ResourcePackTier = ResourcePackTier.STANDARD
    resource_pack_size: Optional[str] = None
    resource_pack_quantity: int = 1
    additional_file_storage_gb: float = 0.0
    additional_database_storage_gb: float = 0.0
    # Kubernetes and Azure
    kubernetes_provider: str = "eks"
    environments: int = 3
    # server and partner clouds
    unlimited_apps: bool = True
    apps: int = 1
    internal_users: int = 100
    external_users: int = 0
    genai_pack: Optional[str] = None
    genai_knowledge_base: bool = False
    customer_enablement: bool = False
    volume_discount: bool = True

    def __post_init__(self):
        if self.environments < 0:
            raise ValueError("environments must be non-negative")
        if self.resource_pack_quantity < 1:
            raise ValueError("resource_pack_quantity must be at least 1")
        if self.apps < 1:
            raise ValueError("apps must be at least 1")


@dataclass
class EnvironmentLicensedQuote:
    """Yearly quote; the volume discount covers platform and user licenses only."""
    deployment: str
    license_items: Dict[str, float] = field(default_factory=dict)
    deployment_items: Dict[str, float] = field(default_factory=dict)
    add_on_items: Dict[str, float] = field(default_factory=dict)
    service_items: Dict[str, float] = field(default_factory=dict)
    cloud_tokens: int = 0
    infrastructure_per_year: float = 0.0
    discount_percent: float = 0.0
    discount_amount: float = 0.0
    details: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def license_subtotal(self) -> float:
        return sum(self.license_items.values())

    @property
    def deployment_subtotal(self) -> float:
        return sum(self.deployment_items.values())

    @property
    def add_ons_subtotal(self) -> float:
        return sum(self.add_on_items.values())

    @property
    def services_subtotal(self) -> float:
        return sum(self.service_items.values())

    @property
    def total_per_year(self) -> float:
        return (
            self.license_subtotal
            + self.deployment_subtotal
            + self.add_ons_subtotal
            + self.services_subtotal
            + self.infrastructure_per_year
            - self.discount_amount
        )

    @property
    def total_per_month(self) -> float:
        return self.total_per_year / 12

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deployment": self.deployment,
            "license_items": {k: round(v, 2) for k, v in self.license_items.items()},
            "deployment_items": {k: round(v, 2) for k, v in self.deployment_items.items()},
            "add_on_items": {k: round(v, 2) for k, v in self.add_on_items.items()},
            "service_items": {k: round(v, 2) for k, v in self.service_items.items()},
            "license_subtotal": round(self.license_subtotal, 2),
            "deployment_subtotal": round(self.deployment_subtotal, 2),
            "add_ons_subtotal": round(self.add_ons_subtotal, 2),
            "services_subtotal": round(self.services_subtotal, 2),
            "cloud_tokens": self.cloud_tokens,
            "infrastructure_per_year": round(self.infrastructure_per_year, 2),
            "discount_percent": self.discount_percent,
            "discount_amount": round(self.discount_amount, 2),
            "details": self.details,
            "total_per_year": round(self.total_per_year, 2),
            "total_per_month": round(self.total_per_month, 2),
            "total_three_year": round(self.total_per_year * 3, 2),
            "warnings": self.warnings,
        }
