# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - automation.py: Automation request/result schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

from .automation import (
    AutomationResult,
    ClientInfo,
    ClientRequest,
    ProductLookupResult,
    ProvisionResult,
)

__all__ = [
    "AutomationResult",
    "ClientInfo",
    "ClientRequest",
    "ProductLookupResult",
    "ProvisionResult",
]
