"""
Static resource specs per technology and per VM server role.
"""
from typing import Dict, Tuple, List

from infrasizing.domain.environments import AppTier
from infrasizing.domain.errors import ConfigurationError
from infrasizing.domain.vm_models import ServerRole


# Per-pod (vCPU, RAM GB) by technology and application tier
TECHNOLOGY_POD_SPECS: Dict[str, Dict[AppTier, Tuple[float, float]]] = {
    "dotnet": {
        AppTier.SMALL: (0.25, 0.5),
        AppTier.MEDIUM: (0.5, 1.0),
        AppTier.LARGE: (1.0, 2.0),
        AppTier.XLARGE: (2.0, 4.0),
    },
    "java": {
        AppTier.SMALL: (0.5, 1.0),
        AppTier.MEDIUM: (1.0, 2.0),
        AppTier.LARGE: (2.0, 4.0),
        AppTier.XLARGE: (4.0, 8.0),
    },
    "nodejs": {
        AppTier.SMALL: (0.25, 1.0),
        AppTier.MEDIUM: (0.5, 1.0),
        AppTier.LARGE: (1.0, 2.0),
        AppTier.XLARGE: (2.0, 4.0),
    },
    "python": {
        AppTier.SMALL: (0.25, 1.0),
        AppTier.MEDIUM: (0.5, 1.0),
        AppTier.LARGE: (1.0, 2.0),
        AppTier.XLARGE: (2.0, 4.0),
    },
    "go": {
        AppTier.SMALL: (0.25, 0.5),
        AppTier.MEDIUM: (0.5, 1.0),
        AppTier.LARGE: (1.0, 2.0),
        AppTier.XLARGE: (2.0, 4.0),
    },
    "mendix": {
        AppTier.SMALL: (0.5, 1.0),
        AppTier.MEDIUM: (1.0, 2.0),
        AppTier.LARGE: (2.0, 4.0),
        AppTier.XLARGE: (4.0, 8.0),
    },
    "outsystems": {
        AppTier.SMALL: (0.5, 1.0),
        AppTier.MEDIUM: (1.0, 2.0),
        AppTier.LARGE: (2.0, 4.0),
        AppTier.XLARGE: (4.0, 8.0),
    },
}

TECHNOLOGY_NAMES: Dict[str, str] = {
    "dotnet": ".NET",
    "java": "Java",
    "nodejs": "Node.js",
    "python": "Python",
    "go": "Go",
    "mendix": "Mendix",
    "outsystems": "OutSystems",
}

# Technologies whose VMs get the high-memory multiplier
HIGH_MEMORY_TECHNOLOGIES = frozenset({"java", "mendix", "outsystems"})


def _tiers(small, medium, large, xlarge) -> Dict[AppTier, Tuple[int, int]]:
    return {
        AppTier.SMALL: small,
        AppTier.MEDIUM: medium,
        AppTier.LARGE: large,
        AppTier.XLARGE: xlarge,
    }


# Per-VM (vCPU, RAM GB) by server role and tier
VM_ROLE_SPECS: Dict[ServerRole, Dict[AppTier, Tuple[int, int]]] = {
    ServerRole.WEB: _tiers((2, 4), (4, 8), (8, 16), (16, 32)),
    ServerRole.APP: _tiers((2, 4), (4, 8), (8, 16), (16, 32)),
    ServerRole.DATABASE: _tiers((4, 16), (8, 32), (16, 64), (32, 128)),
    ServerRole.CACHE: _tiers((2, 8), (4, 16), (8, 32), (16, 64)),
    ServerRole.MESSAGE_QUEUE: _tiers((2, 4), (4, 8), (8, 16), (16, 32)),
    ServerRole.SEARCH: _tiers((4, 16), (8, 32), (16, 64), (32, 128)),
    ServerRole.STORAGE: _tiers((2, 4), (4, 8), (8, 16), (16, 32)),
    ServerRole.MONITORING: _tiers((2, 4), (4, 8), (8, 16), (16, 32)),
    ServerRole.BASTION: _tiers((2, 4), (2, 4), (2, 4), (2, 4)),
}


def get_pod_spec(technology: str, tier: AppTier) -> Tuple[float, float]:
    """
    Get per-pod (vCPU, RAM GB) for a technology and tier.

    Raises:
        ConfigurationError: If the technology is not in the table
    """
    specs = TECHNOLOGY_POD_SPECS.get(technology.lower())
    if specs is None:
        raise ConfigurationError(f"Unknown technology '{technology}'", lookup="technology_pod_specs")
    return specs[tier]


def get_vm_role_spec(role: ServerRole, tier: AppTier, technology: str, high_memory_multiplier: float) -> Tuple[int, int]:
    """
    Get per-VM (vCPU, RAM GB) for a server role, widening RAM for memory-heavy technologies.

    Raises:
        ConfigurationError: If the role has no spec table
    """
    specs = VM_ROLE_SPECS.get(role)
    if specs is None:
        raise ConfigurationError(f"No VM spec for role '{role}'", lookup="vm_role_specs")
    cpu, ram = specs[tier]
    if technology.lower() in HIGH_MEMORY_TECHNOLOGIES:
        ram = int(ram * high_memory_multiplier)
    return cpu, ram


def list_technologies() -> List[Dict[str, object]]:
    return [
        {
            "key": key,
            "name": TECHNOLOGY_NAMES[key],
            "tiers": {tier.value: {"cpu": cpu, "ram_gb": ram} for tier, (cpu, ram) in tiers.items()},
        }
        for key, tiers in TECHNOLOGY_POD_SPECS.items()
    ]
