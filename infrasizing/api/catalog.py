"""
API routes exposing the built-in catalogues.
"""
from typing import Dict, Any
from fastapi import APIRouter
import logging

from infrasizing.pricing.cloud_providers import list_providers
from infrasizing.pricing.distributions import list_distributions
from infrasizing.pricing.resource_specs import list_technologies


logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/catalog/distributions")
async def get_distributions() -> Dict[str, Any]:
    """Distribution profiles with node specs, licensing and cluster limits."""
    return {
        "status": "ok",
        "distributions": list_distributions()
    }


@router.get("/api/catalog/technologies")
async def get_technologies() -> Dict[str, Any]:
    """Per-technology pod resource specs by application tier."""
    return {
        "status": "ok",
        "technologies": list_technologies()
    }


@router.get("/api/catalog/providers")
async def get_providers() -> Dict[str, Any]:
    """Cloud provider price tables and their known regions."""
    return {
        "status": "ok",
        "providers": list_providers()
    }
