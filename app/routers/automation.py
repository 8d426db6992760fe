# =============================================================================
# app/routers/automation.py - Folder Automation Endpoints
# =============================================================================
# Handles the automation itself and the board lookups around it:
# - POST /automatizar: product lookup + folder/template provisioning
# - GET /produto/{id}: product and responsible party of a client
# - GET /farmacias: items on the board carrying a product label
#
# Handlers are plain functions: the board client is synchronous, so FastAPI
# runs them in its threadpool.
# =============================================================================

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Path, Query
from pydantic import BaseModel

from app.dependencies import AutomationServiceDep, BoardClientDep
from app.exceptions import InvalidInputError, InvalidProductError, NotFoundError, now_iso
from core.models.automation import AutomationResult, ProductLookupResult
from lib.monday_client import BoardPharmacy

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Body of every error response."""
    status: str = "erro"
    erro: str
    codigo: str
    timestamp: str


class PharmacyListResponse(BaseModel):
    """Items found for a product label."""
    status: str
    produto: str
    total: int
    farmacias: list[BoardPharmacy]
    timestamp: str


ERROR_DOCS = {
    400: {"model": ErrorResponse, "description": "Invalid input or product"},
    403: {"model": ErrorResponse, "description": "No permission on the target folder"},
    404: {"model": ErrorResponse, "description": "Demand not found on the board"},
    500: {"model": ErrorResponse, "description": "Internal error"},
    503: {"model": ErrorResponse, "description": "Monday.com unreachable"},
}


def _parse_client_id(raw: str) -> int:
    """Parse a path client id, refusing anything but a positive integer."""
    client_id = int(raw) if raw.isascii() and raw.isdigit() else 0
    if client_id <= 0:
        raise InvalidInputError("ID do cliente inválido", code="ID_INVALIDO", details={"id": raw})
    return client_id


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/automatizar", response_model=AutomationResult, responses=ERROR_DOCS)
def run_automation(
    service: AutomationServiceDep,
    payload: Annotated[
        Any,
        Body(examples=[{"id_cliente": 12345, "nome_farmacia": "Farmácia Exemplo"}]),
    ] = None,
):
    """
    Run the folder automation for a client.

    1. Looks up the client's product on Monday.com (by id, then by pharmacy name)
    2. Creates {base}/{product folder}/{id_cliente} if missing
    3. Copies the template as Fluxo_Cliente_{id_cliente}.vsdx if missing
    4. Returns the responsible party for the product

    Running it twice for the same client is harmless.
    """
    return service.run(payload)


@router.get("/produto/{client_id}", response_model=ProductLookupResult, responses=ERROR_DOCS)
def get_product(
    client_id: Annotated[str, Path(description="Client ID (positive integer)")],
    service: AutomationServiceDep,
):
    """
    Get the product and responsible party of a client.

    Looks up by client id only (no fallback) and touches no folder.
    """
    parsed_id = _parse_client_id(client_id)
    try:
        return service.lookup_product(parsed_id)
    except NotFoundError as e:
        e.code = "PRODUTO_NAO_ENCONTRADO"
        raise
    except InvalidProductError as e:
        logger.warning(f"Client {parsed_id} has a product outside the catalog: {e.product}")
        raise


@router.get("/farmacias", response_model=PharmacyListResponse, responses=ERROR_DOCS)
def list_pharmacies(
    board_client: BoardClientDep,
    produto: Annotated[str, Query(min_length=1, description="Product label to match")] = "BOT",
):
    """
    List board items whose product column equals a label.

    Defaults to "BOT". Only the first page of the board is read.
    """
    pharmacies = board_client.list_items_by_product(produto)
    return PharmacyListResponse(
        status="ok",
        produto=produto,
        total=len(pharmacies),
        farmacias=pharmacies,
        timestamp=now_iso(),
    )
