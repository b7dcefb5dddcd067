"""
Configuration module.
Process settings are loaded from environment variables; calculator
constants are an immutable snapshot passed explicitly into the engine.
"""
import os
from typing import Dict, Tuple
from dataclasses import dataclass, field

from infrasizing.domain.hadr_models import HAPattern


class Config:
    """Application configuration loaded from environment variables."""

    # Logging
    LOG_LEVEL: str = os.getenv("INFRASIZING_LOG_LEVEL", "INFO").upper()

    # Pricing defaults
    CURRENCY: str = os.getenv("INFRASIZING_CURRENCY", "USD")
    DEFAULT_PROVIDER: str = os.getenv("INFRASIZING_DEFAULT_PROVIDER", "aws")
    DEFAULT_REGION: str = os.getenv("INFRASIZING_DEFAULT_REGION", "us-east-1")
    HOURS_PER_MONTH: int = 730  # Standard assumption: 24/7 operation

    # Growth projection
    MAX_PROJECTION_YEARS: int = int(os.getenv("INFRASIZING_MAX_PROJECTION_YEARS", "5"))

    # Request limits
    MAX_REQUEST_BODY_BYTES: int = int(os.getenv("INFRASIZING_MAX_REQUEST_BODY_BYTES", "262144"))

    @classmethod
    def validate(cls) -> None:
        """
        Validates configuration values.

        Raises:
            ValueError: If any configuration value is missing or invalid.
        """
        if cls.LOG_LEVEL not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"INFRASIZING_LOG_LEVEL is invalid (got: {cls.LOG_LEVEL})")
        if len(cls.CURRENCY) != 3:
            raise ValueError(f"INFRASIZING_CURRENCY must be an ISO 4217 code (got: {cls.CURRENCY})")
        if not cls.DEFAULT_PROVIDER:
            raise ValueError("INFRASIZING_DEFAULT_PROVIDER is required")
        if not 1 <= cls.MAX_PROJECTION_YEARS <= 10:
            raise ValueError(
                f"INFRASIZING_MAX_PROJECTION_YEARS must be between 1 and 10 (got: {cls.MAX_PROJECTION_YEARS})"
            )
        if cls.MAX_REQUEST_BODY_BYTES <= 0:
            raise ValueError("INFRASIZING_MAX_REQUEST_BODY_BYTES must be positive")


config = Config()


def _default_ha_multipliers() -> Dict[HAPattern, float]:
    return {
        HAPattern.NONE: 1.0,
        HAPattern.ACTIVE_ACTIVE: 2.0,
        HAPattern.ACTIVE_PASSIVE: 2.0,
        HAPattern.N_PLUS_1: 1.5,
        HAPattern.N_PLUS_2: 1.67,
    }


def _default_load_balancers() -> Dict[str, Tuple[int, int, int]]:
    # option -> (vms, cpu per vm, ram GB per vm)
    return {
        "none": (0, 0, 0),
        "single": (1, 2, 4),
        "ha_pair": (2, 2, 4),
    }


@dataclass(frozen=True)
class CalculatorSettings:
    """
    Sizing constants shared by the calculators.

    Build a variant with dataclasses.replace; instances are never mutated.
    """
    min_workers: int = 3
    apps_per_infra: int = 25
    min_infra: int = 3
    max_infra: int = 10
    large_deployment_threshold: int = 50
    min_prod_infra_large: int = 5
    large_cluster_worker_threshold: int = 100
    default_control_plane_nodes: int = 3
    large_cluster_control_plane_nodes: int = 5
    min_replicas: int = 1
    max_replicas: int = 10
    cpu_overcommit_bounds: Tuple[float, float] = (1.0, 10.0)
    ram_overcommit_bounds: Tuple[float, float] = (1.0, 4.0)
    # Fraction of primary workers kept running at the DR site
    warm_standby_fraction: float = 0.3
    hot_standby_fraction: float = 0.9
    vm_high_memory_multiplier: float = 1.5
    ha_pattern_multipliers: Dict[HAPattern, float] = field(default_factory=_default_ha_multipliers)
    load_balancers: Dict[str, Tuple[int, int, int]] = field(default_factory=_default_load_balancers)

    def ha_multiplier(self, pattern: HAPattern) -> float:
        return self.ha_pattern_multipliers.get(pattern, 1.0)

    def load_balancer_specs(self, option: str) -> Tuple[int, int, int]:
        return self.load_balancers.get(option, (0, 0, 0))


DEFAULT_CALCULATOR_SETTINGS = CalculatorSettings()
