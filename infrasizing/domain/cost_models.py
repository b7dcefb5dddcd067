"""
Domain models for cost estimation.
Defines pricing contexts, cost breakdowns and the cost estimate.
"""
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from infrasizing.domain.hadr_models import HADRConfig
from infrasizing.domain.licensing_models import (
    LicensedPlatformConfig,
    LicensedPlatformQuote,
    EnvironmentLicensedConfig,
    EnvironmentLicensedQuote,
)
from infrasizing.pricing.on_prem import OnPremPricing
from infrasizing.pricing.licensed_platform import LicensedPlatformPricing
from infrasizing.pricing.environment_licensed import EnvironmentLicensedPricing


class CostCategory(str, Enum):
    COMPUTE = "compute"
    STORAGE = "storage"
    NETWORK = "network"
    LICENSE = "license"
    SUPPORT = "support"


class PricingType(str, Enum):
    ON_DEMAND = "on_demand"
    RESERVED_1YR = "reserved_1yr"
    RESERVED_3YR = "reserved_3yr"


@dataclass
class OnPremContext:
    """Price the sized footprint on owned hardware."""
    pricing: Optional[OnPremPricing] = field(default_factory=OnPremPricing)
    distribution: Optional[str] = None


@dataclass
class CloudContext:
    """Price the sized footprint on one cloud provider."""
    provider: str
    region: Optional[str] = None
    pricing_type: PricingType = PricingType.ON_DEMAND
    distribution: Optional[str] = None
    # Overrides the posture each environment was sized with
    hadr: Optional[HADRConfig] = None
    support_plan: str = "basic"
    egress_gb_per_month: float = 0.0
    load_balancers_per_cluster: int = 1
    nat_gateways_per_cluster: int = 0
    registry_gb_per_cluster: float = 50.0


@dataclass
class LicensedPlatformContext:
    """Price a low-code platform subscription, optionally with cloud infrastructure."""
    config: LicensedPlatformConfig
    pricing: Optional[LicensedPlatformPricing] = None
    infrastructure: Optional[CloudContext] = None


@dataclass
class EnvironmentLicensedContext:
    """Price an environment-licensed platform subscription, optionally with cloud infrastructure."""
    config: EnvironmentLicensedConfig
    pricing: Optional[EnvironmentLicensedPricing] = None
    infrastructure: Optional[CloudContext] = None


@dataclass
class CostLineItem:
    """A single priced quantity."""
    description: str
    quantity: float
    unit: str  # e.g., "node-month", "GB-month", "pack-year"
    unit_price: float
    environment: Optional[str] = None

    @property
    def total(self) -> float:
        return self.quantity * self.unit_price

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "description": self.description,
            "quantity": round(self.quantity, 4),
            "unit": self.unit,
            "unit_price": round(self.unit_price, 4),
            "total": round(self.total, 2),
            "environment": self.environment,
        }


@dataclass
class CostBreakdown:
    """Monthly cost of one category."""
    category: CostCategory
    monthly: float
    percentage: float = 0.0
    line_items: List[CostLineItem] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        sorted_items = sorted(self.line_items, key=lambda x: x.total, reverse=True)
        return {
            "category": self.category.value,
            "monthly": round(self.monthly, 2),
            "percentage": round(self.percentage, 2),
            "description": self.description,
            "line_items": [item.to_dict() for item in sorted_items],
        }


@dataclass
class EnvironmentCost:
    """An environment's share of the monthly cost."""
    environment: str
    monthly_cost: float
    percentage: float
    nodes: int
    cpu: float
    ram_gb: float
    disk_gb: float
    hadr_multiplier: float = 1.0

    @property
    def cost_per_node(self) -> float:
        if self.nodes == 0:
            return 0.0
        return self.monthly_cost / self.nodes

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "environment": self.environment,
            "monthly_cost": round(self.monthly_cost, 2),
            "percentage": round(self.percentage, 2),
            "nodes": self.nodes,
            "cpu": self.cpu,
            "ram_gb": self.ram_gb,
            "disk_gb": self.disk_gb,
            "hadr_multiplier": round(self.hadr_multiplier, 4),
            "cost_per_node": round(self.cost_per_node, 2),
        }


@dataclass
class CostEstimate:
    """Represents a complete cost estimate."""
    provider: str
    region: str
    pricing_type: PricingType
    currency: str
    monthly_total: float
    breakdown: List[CostBreakdown]
    environment_costs: List[EnvironmentCost]
    calculated_at: datetime
    hadr_multiplier: float = 1.0
    assumptions: List[str] = field(default_factory=list)
    licensed_platform_quote: Optional[LicensedPlatformQuote] = None
    environment_licensed_quote: Optional[EnvironmentLicensedQuote] = None

    @property
    def yearly_total(self) -> float:
        return self.monthly_total * 12

    @property
    def three_year_tco(self) -> float:
        return self.yearly_total * 3

    @property
    def five_year_tco(self) -> float:
        return self.yearly_total * 5

    @property
    def total_nodes(self) -> int:
        return sum(env.nodes for env in self.environment_costs)

    @property
    def cost_per_node(self) -> float:
        """Average monthly cost per node, 0 for an empty footprint."""
        nodes = self.total_nodes
        return self.monthly_total / nodes if nodes else 0.0

    def category(self, category: CostCategory) -> Optional[CostBreakdown]:
        for entry in self.breakdown:
            if entry.category == category:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "provider": self.provider,
            "region": self.region,
            "pricing_type": self.pricing_type.value,
            "currency": self.currency,
            "monthly_total": round(self.monthly_total, 2),
            "yearly_total": round(self.yearly_total, 2),
            "three_year_tco": round(self.three_year_tco, 2),
            "five_year_tco": round(self.five_year_tco, 2),
            "hadr_multiplier": round(self.hadr_multiplier, 4),
            "calculated_at": self.calculated_at.isoformat(),
            "breakdown": [entry.to_dict() for entry in self.breakdown],
            "environment_costs": [env.to_dict() for env in self.environment_costs],
            "assumptions": self.assumptions,
        }
        if self.licensed_platform_quote is not None:
            result["licensed_platform_quote"] = self.licensed_platform_quote.to_dict()
        if self.environment_licensed_quote is not None:
            result["environment_licensed_quote"] = self.environment_licensed_quote.to_dict()
        return result


@dataclass
class CostComparison:
    """Several estimates of the same footprint, cheapest first."""
    estimates: List[CostEstimate]
    insights: List[str]

    @property
    def cheapest(self) -> Optional[CostEstimate]:
        return self.estimates[0] if self.estimates else None

    @property
    def most_expensive(self) -> Optional[CostEstimate]:
        return self.estimates[-1] if self.estimates else None

    @property
    def monthly_savings(self) -> float:
        if not self.estimates:
            return 0.0
        return self.most_expensive.monthly_total - self.cheapest.monthly_total

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "estimates": [estimate.to_dict() for estimate in self.estimates],
            "cheapest": self.cheapest.provider if self.cheapest else None,
            "most_expensive": self.most_expensive.provider if self.most_expensive else None,
            "monthly_savings": round(self.monthly_savings, 2),
            "yearly_savings": round(self.monthly_savings * 12, 2),
            "insights": self.insights,
        }
