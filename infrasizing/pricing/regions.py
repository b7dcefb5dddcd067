"""
Cloud region catalogue.
Maps provider region codes to display names and to the price multiplier
applied on top of each provider's base (cheapest region) rates.
"""
from typing import Dict, Optional, List, Tuple


# region code -> (display name, price multiplier)
AWS_REGIONS: Dict[str, Tuple[str, float]] = {
    # US
    "us-east-1": ("US East (N. Virginia)", 1.0),
    "us-east-2": ("US East (Ohio)", 1.0),
    "us-west-1": ("US West (N. California)", 1.1),
    "us-west-2": ("US West (Oregon)", 1.0),

    # Europe
    "eu-west-1": ("Europe (Ireland)", 1.05),
    "eu-west-2": ("Europe (London)", 1.08),
    "eu-west-3": ("Europe (Paris)", 1.08),
    "eu-central-1": ("Europe (Frankfurt)", 1.05),

    # Asia Pacific
    "ap-south-1": ("Asia Pacific (Mumbai)", 0.95),
    "ap-southeast-1": ("Asia Pacific (Singapore)", 1.1),
    "ap-southeast-2": ("Asia Pacific (Sydney)", 1.1),
    "ap-northeast-1": ("Asia Pacific (Tokyo)", 1.15),

    # Middle East / South America
    "me-south-1": ("Middle East (Bahrain)", 1.2),
    "me-central-1": ("Middle East (UAE)", 1.2),
    "sa-east-1": ("South America (Sao Paulo)", 1.25),
}

AZURE_REGIONS: Dict[str, Tuple[str, float]] = {
    "eastus": ("East US", 1.0),
    "eastus2": ("East US 2", 1.0),
    "westus2": ("West US 2", 1.0),
    "westeurope": ("West Europe", 1.08),
    "northeurope": ("North Europe", 1.05),
    "uksouth": ("UK South", 1.08),
    "germanywestcentral": ("Germany West Central", 1.1),
    "uaenorth": ("UAE North", 1.2),
    "southeastasia": ("Southeast Asia", 1.1),
    "japaneast": ("Japan East", 1.15),
    "centralindia": ("Central India", 0.95),
}

GCP_REGIONS: Dict[str, Tuple[str, float]] = {
    "us-central1": ("Iowa", 1.0),
    "us-east1": ("South Carolina", 1.0),
    "us-west1": ("Oregon", 1.0),
    "europe-west1": ("Belgium", 1.06),
    "europe-west3": ("Frankfurt", 1.12),
    "europe-west2": ("London", 1.12),
    "asia-southeast1": ("Singapore", 1.1),
    "asia-northeast1": ("Tokyo", 1.15),
    "me-central1": ("Doha", 1.2),
}

# Mainland China list prices; international regions carry a 10% uplift
ALIBABA_REGIONS: Dict[str, Tuple[str, float]] = {
    "cn-hangzhou": ("China (Hangzhou)", 1.0),
    "cn-shanghai": ("China (Shanghai)", 1.0),
    "ap-southeast-1": ("Singapore", 1.1),
    "us-west-1": ("US (Silicon Valley)", 1.1),
    "eu-central-1": ("Germany (Frankfurt)", 1.1),
    "me-east-1": ("UAE (Dubai)", 1.1),
}

HUAWEI_REGIONS: Dict[str, Tuple[str, float]] = {
    "cn-north-4": ("Beijing 4", 1.0),
    "cn-east-3": ("Shanghai 1", 1.0),
    "ap-southeast-1": ("Hong Kong", 1.1),
    "ap-southeast-3": ("Singapore", 1.1),
    "me-east-1": ("Riyadh", 1.1),
}

TENCENT_REGIONS: Dict[str, Tuple[str, float]] = {
    "ap-guangzhou": ("Guangzhou", 1.0),
    "ap-shanghai": ("Shanghai", 1.0),
    "ap-beijing": ("Beijing", 1.0),
    "ap-singapore": ("Singapore", 1.1),
    "eu-frankfurt": ("Frankfurt", 1.1),
    "na-ashburn": ("Virginia", 1.1),
}

SINGLE_PRICE_REGIONS: Dict[str, Dict[str, Tuple[str, float]]] = {
    "digitalocean": {
        "nyc1": ("New York 1", 1.0),
        "sfo3": ("San Francisco 3", 1.0),
        "ams3": ("Amsterdam 3", 1.0),
        "fra1": ("Frankfurt 1", 1.0),
        "sgp1": ("Singapore 1", 1.0),
    },
    "oci": {
        "us-ashburn-1": ("US East (Ashburn)", 1.0),
        "eu-frankfurt-1": ("Germany Central (Frankfurt)", 1.0),
        "me-dubai-1": ("UAE East (Dubai)", 1.0),
    },
    "linode": {
        "us-east": ("Newark, NJ", 1.0),
        "eu-central": ("Frankfurt", 1.0),
        "ap-south": ("Singapore", 1.0),
    },
    "hetzner": {
        "fsn1": ("Falkenstein", 1.0),
        "nbg1": ("Nuremberg", 1.0),
        "hel1": ("Helsinki", 1.0),
        "ash": ("Ashburn, VA", 1.2),
    },
    "ibm": {
        "us-south": ("Dallas", 1.0),
        "us-east": ("Washington DC", 1.0),
        "eu-de": ("Frankfurt", 1.0),
        "eu-gb": ("London", 1.0),
        "jp-tok": ("Tokyo", 1.0),
        "au-syd": ("Sydney", 1.0),
    },
    "vultr": {
        "ewr": ("New Jersey", 1.0),
        "dfw": ("Dallas", 1.0),
        "lax": ("Los Angeles", 1.0),
        "lhr": ("London", 1.0),
        "fra": ("Frankfurt", 1.0),
        "sgp": ("Singapore", 1.0),
        "nrt": ("Tokyo", 1.0),
    },
    "civo": {
        "lon1": ("London", 1.0),
        "nyc1": ("New York", 1.0),
        "fra1": ("Frankfurt", 1.0),
        "phx1": ("Phoenix", 1.0),
    },
    "exoscale": {
        "ch-gva-2": ("Geneva", 1.0),
        "ch-dk-2": ("Zurich", 1.0),
        "de-fra-1": ("Frankfurt", 1.0),
        "de-muc-1": ("Munich", 1.0),
        "at-vie-1": ("Vienna", 1.0),
        "bg-sof-1": ("Sofia", 1.0),
    },
    "ovh": {
        "gra": ("Gravelines", 1.0),
        "sbg": ("Strasbourg", 1.0),
        "de1": ("Frankfurt", 1.0),
        "uk1": ("London", 1.0),
        "bhs": ("Beauharnois", 1.0),
    },
    "scaleway": {
        "fr-par": ("Paris", 1.0),
        "nl-ams": ("Amsterdam", 1.0),
        "pl-waw": ("Warsaw", 1.0),
    },
}

PROVIDER_REGIONS: Dict[str, Dict[str, Tuple[str, float]]] = {
    "aws": AWS_REGIONS,
    "azure": AZURE_REGIONS,
    "gcp": GCP_REGIONS,
    "alibaba": ALIBABA_REGIONS,
    "huawei": HUAWEI_REGIONS,
    "tencent": TENCENT_REGIONS,
    **SINGLE_PRICE_REGIONS,
}


def get_region_display_name(provider: str, region_code: str) -> Optional[str]:
    """
    Get the display name of a provider region.

    Args:
        provider: Provider key (e.g., 'aws')
        region_code: Region code (e.g., 'eu-west-1')

    Returns:
        Display name (e.g., 'Europe (Ireland)'), or None if not found
    """
    entry = PROVIDER_REGIONS.get(provider, {}).get(region_code)
    return entry[0] if entry else None


def get_regional_multiplier(provider: str, region_code: str) -> Optional[float]:
    """
    Get the price multiplier of a provider region.

    Returns:
        Multiplier relative to the provider's base region, or None if the region is unknown
    """
    entry = PROVIDER_REGIONS.get(provider, {}).get(region_code)
    return entry[1] if entry else None


def get_provider_regions(provider: str) -> List[str]:
    """
    Get all supported region codes of a provider.

    Returns:
        List of region codes
    """
    return list(PROVIDER_REGIONS.get(provider, {}).keys())
