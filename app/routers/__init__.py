# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check and Monday.com connectivity endpoints
# - automation.py: Folder automation and board lookup endpoints
# - configuration.py: Non-sensitive configuration endpoint
#
# Each router is mounted in main.py.
# =============================================================================

from . import health
from . import automation
from . import configuration

__all__ = [
    "health",
    "automation",
    "configuration",
]
