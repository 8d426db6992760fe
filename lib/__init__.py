# =============================================================================
# lib/ - Standalone Client Modules
# =============================================================================
# This package contains clients for external systems:
# - monday_client.py: Monday.com GraphQL wrapper (board item lookups)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.monday_client import (
    BoardColumnValue,
    BoardItem,
    BoardPharmacy,
    MondayClient,
    select_product_column,
)

__all__ = [
    "BoardColumnValue",
    "BoardItem",
    "BoardPharmacy",
    "MondayClient",
    "select_product_column",
]
