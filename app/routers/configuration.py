# =============================================================================
# app/routers/configuration.py - Configuration Endpoint
# =============================================================================
# Exposes the non-sensitive part of the configuration (no token, no board id).
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import CatalogDep, SettingsDep
from app.exceptions import now_iso

router = APIRouter()


class ServerInfo(BaseModel):
    porta: int
    ambiente: str


class ConfigResponse(BaseModel):
    """Products, owners and folder segments in use."""
    status: str
    produtos_validos: list[str]
    responsaveis: dict[str, str]
    caminhos_produtos: dict[str, str]
    servidor: ServerInfo
    timestamp: str


@router.get("/config", response_model=ConfigResponse)
async def get_configuration(settings: SettingsDep, catalog: CatalogDep):
    """Return the product configuration and server info."""
    return ConfigResponse(
        status="ok",
        produtos_validos=list(catalog.valid_products),
        responsaveis=dict(catalog.responsibles),
        caminhos_produtos=dict(catalog.product_folders),
        servidor=ServerInfo(porta=settings.API_PORT, ambiente=settings.ENVIRONMENT),
        timestamp=now_iso(),
    )
