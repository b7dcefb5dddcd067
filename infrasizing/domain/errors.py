"""
Error taxonomy for the sizing, pricing and growth engine.
Graceful-degradation paths (unknown instance type, value above the top
pricing tier) are not errors and never raise.
"""
from typing import Optional


class SizingEngineError(Exception):
    """Base class for all engine failures."""
    pass


class ConfigurationError(SizingEngineError):
    """Raised when a required lookup is absent and no documented fallback exists."""

    def __init__(self, message: str, lookup: str, environment: Optional[str] = None):
        self.lookup = lookup
        self.environment = environment
        context = f"lookup={lookup}"
        if environment:
            context += f", environment={environment}"
        super().__init__(f"{message} ({context})")


class PolicyViolation(SizingEngineError):
    """Raised when a computed intermediate breaks a hard invariant."""

    def __init__(self, message: str, invariant: str, environment: Optional[str] = None):
        self.invariant = invariant
        self.environment = environment
        context = f"invariant={invariant}"
        if environment:
            context += f", environment={environment}"
        super().__init__(f"{message} ({context})")
