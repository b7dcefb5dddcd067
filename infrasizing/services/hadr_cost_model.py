"""
HA/DR cost multiplier.
Each HA/DR choice contributes an additive uplift over baseline compute cost.
"""
from typing import Dict, Optional

from infrasizing.domain.hadr_models import (
    HADRConfig,
    ControlPlaneHA,
    NodeDistribution,
    DRPattern,
    BackupStrategy,
)
from infrasizing.pricing.cloud_providers import ProviderPricing


DISTRIBUTION_UPLIFT: Dict[NodeDistribution, float] = {
    NodeDistribution.SINGLE_AZ: 0.0,
    NodeDistribution.DUAL_AZ: 0.02,
    NodeDistribution.MULTI_AZ: 0.03,
    NodeDistribution.MULTI_REGION: 0.20,
}

# Inter-region transfer on top of the provider's cross-AZ rate
MULTI_REGION_SURCHARGE = 0.17

DR_UPLIFT: Dict[DRPattern, float] = {
    DRPattern.NONE: 0.0,
    DRPattern.BACKUP_RESTORE: 0.08,
    DRPattern.WARM_STANDBY: 0.40,
    DRPattern.HOT_STANDBY: 0.90,
    DRPattern.ACTIVE_ACTIVE: 1.10,
}

BACKUP_UPLIFT: Dict[BackupStrategy, float] = {
    BackupStrategy.NONE: 0.0,
    BackupStrategy.VELERO: 0.02,
    BackupStrategy.KASTEN: 0.05,
    BackupStrategy.PORTWORX: 0.08,
    BackupStrategy.CLOUD_NATIVE: 0.03,
}


class HADRCostModel:
    """Computes the dimensionless HA/DR cost multiplier (always >= 1.0)."""

    @staticmethod
    def control_plane_term(config: HADRConfig) -> float:
        extra_nodes = config.control_plane_nodes - 1
        if config.control_plane_ha == ControlPlaneHA.STACKED_HA:
            return 0.10 * extra_nodes
        if config.control_plane_ha == ControlPlaneHA.EXTERNAL_ETCD:
            return 0.12 * extra_nodes + 0.15
        return 0.0

    @staticmethod
    def distribution_term(config: HADRConfig, provider: Optional[ProviderPricing] = None) -> float:
        if provider is None:
            return DISTRIBUTION_UPLIFT[config.node_distribution]
        if config.node_distribution == NodeDistribution.SINGLE_AZ:
            return 0.0
        term = provider.cross_az_multiplier(config.availability_zones)
        if config.node_distribution == NodeDistribution.MULTI_REGION:
            term += MULTI_REGION_SURCHARGE
        return term

    @staticmethod
    def recovery_term(config: HADRConfig) -> float:
        """DR pattern uplift; backup strategy only counts when no DR pattern is set."""
        if config.dr_pattern != DRPattern.NONE:
            return DR_UPLIFT[config.dr_pattern]
        return BACKUP_UPLIFT[config.backup_strategy]

    def multiplier(self, config: HADRConfig, provider: Optional[ProviderPricing] = None) -> float:
        """
        Cost multiplier for an HA/DR configuration.

        Args:
            config: HA/DR configuration
            provider: Optional provider price table; when given, the AZ term
                uses the provider's cross-AZ rate plus a flat multi-region surcharge

        Returns:
            1.0 plus the sum of all uplift terms
        """
        total = 1.0
        total += self.control_plane_term(config)
        total += self.distribution_term(config, provider)
        total += self.recovery_term(config)
        return max(1.0, total)
