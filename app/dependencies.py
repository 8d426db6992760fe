# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# The instances live on app.state; they are built once in app.main.create_app
# from the frozen Settings. Tests replace them via app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings
from core.catalog import ProductCatalog
from core.services.automation_service import AutomationService
from lib.monday_client import MondayClient


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with."""
    return request.app.state.settings


def get_catalog(request: Request) -> ProductCatalog:
    """Product catalog shared by every component."""
    return request.app.state.catalog


def get_board_client(request: Request) -> MondayClient:
    """Monday.com client (one per app, shared connection pool)."""
    return request.app.state.board_client


def get_automation_service(request: Request) -> AutomationService:
    """Automation orchestrator wired with the app's collaborators."""
    return request.app.state.automation_service


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
CatalogDep = Annotated[ProductCatalog, Depends(get_catalog)]
BoardClientDep = Annotated[MondayClient, Depends(get_board_client)]
AutomationServiceDep = Annotated[AutomationService, Depends(get_automation_service)]
