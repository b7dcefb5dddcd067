"""
Price list of the pack-licensed low-code platform.
All amounts are USD per year.
"""
from typing import Dict, FrozenSet
from dataclasses import dataclass, field

from infrasizing.pricing.tiered import TierTable


def _internal_user_bands() -> TierTable:
    # (cumulative billable users upper bound, price per pack of 100)
    return [(1000, 6000.0), (5000, 4500.0), (None, 3000.0)]


def _external_user_bands() -> TierTable:
    # (cumulative users upper bound, price per pack of 1000)
    return [(10000, 4840.0), (100000, 3630.0), (None, 2420.0)]


def _app_shield_tiers() -> TierTable:
    # (user volume upper bound, flat yearly price)
    return [
        (10000, 18150.0),
        (50000, 32670.0),
        (100000, 54450.0),
        (500000, 108900.0),
        (None, 181500.0),
    ]


def _per_pack_add_ons() -> Dict[str, float]:
    return {
        "support_24x7_premium": 3630.0,
        "non_production_env": 3630.0,
        "load_test_env": 6050.0,
        "environment_pack": 9680.0,
        "high_availability": 12100.0,
        "sentry": 24200.0,
        "disaster_recovery": 12100.0,
    }


def _flat_add_ons() -> Dict[str, float]:
    return {
        "log_streaming": 7260.0,
        "database_replica": 96800.0,
    }


def _services_by_region() -> Dict[str, Dict[str, float]]:
    return {
        "americas": {"essential": 30250.0, "premier": 60500.0, "expert_day": 2640.0, "training_session": 3820.0},
        "europe": {"essential": 27500.0, "premier": 55000.0, "expert_day": 2400.0, "training_session": 3470.0},
        "asia_pacific": {"essential": 24750.0, "premier": 49500.0, "expert_day": 2160.0, "training_session": 3120.0},
        "middle_east_africa": {"essential": 26400.0, "premier": 52800.0, "expert_day": 2300.0, "training_session": 3330.0},
    }


@dataclass(frozen=True)
class LicensedPlatformPricing:
    """Yearly price list; the edition includes the first capacity pack."""
    edition_base_price: float = 36300.0
    ao_pack_size: int = 150
    ao_pack_price: float = 36300.0
    internal_users_included: int = 100
    internal_user_pack_size: int = 100
    internal_user_bands: TierTable = field(default_factory=_internal_user_bands)
    external_user_pack_size: int = 1000
    external_user_bands: TierTable = field(default_factory=_external_user_bands)
    unlimited_users_per_ao_pack: float = 60500.0
    default_unlimited_user_volume: int = 10000
    app_shield_tiers: TierTable = field(default_factory=_app_shield_tiers)
    per_pack_add_ons: Dict[str, float] = field(default_factory=_per_pack_add_ons)
    flat_add_ons: Dict[str, float] = field(default_factory=_flat_add_ons)
    services_by_region: Dict[str, Dict[str, float]] = field(default_factory=_services_by_region)
    cloud_only_add_ons: FrozenSet[str] = frozenset(
        {"high_availability", "sentry", "load_test_env", "log_streaming", "database_replica"}
    )
    self_managed_only_add_ons: FrozenSet[str] = frozenset({"disaster_recovery"})


DEFAULT_LICENSED_PLATFORM_PRICING = LicensedPlatformPricing()
