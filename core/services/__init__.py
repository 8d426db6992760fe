# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .provisioner import FolderProvisioner
from .automation_service import AutomationService, validate_client_request

__all__ = [
    "FolderProvisioner",
    "AutomationService",
    "validate_client_request",
]
