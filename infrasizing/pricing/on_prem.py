"""
On-premises cost basis.
"""
from typing import Dict, Any
from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class OnPremPricing:
    """Cost assumptions for self-hosted hardware."""
    # Hardware
    server_cost: float = 15000.0
    cores_per_server: int = 64
    per_cpu_core: float = 200.0
    per_gb_ram: float = 15.0
    per_tb_ssd: float = 200.0
    hardware_refresh_years: int = 4
    maintenance_percent: float = 10.0

    # Data center
    rack_units_per_server: int = 2
    per_rack_unit_month: float = 100.0
    watts_per_server: float = 500.0
    per_kwh: float = 0.12
    pue: float = 1.6
    cooling_percent_of_power: float = 40.0

    # Labor (monthly, fully loaded)
    nodes_per_engineer: int = 50
    devops_engineer_month: float = 12000.0
    sysadmin_month: float = 8000.0
    include_dba: bool = False
    dba_month: float = 10000.0

    def __post_init__(self):
        if self.hardware_refresh_years <= 0:
            raise ValueError("hardware_refresh_years must be positive")
        if self.cores_per_server <= 0:
            raise ValueError("cores_per_server must be positive")
        if self.nodes_per_engineer <= 0:
            raise ValueError("nodes_per_engineer must be positive")

    @property
    def amortization_months(self) -> int:
        return self.hardware_refresh_years * 12

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
