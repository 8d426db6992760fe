# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers:
# - /health: the API process itself
# - /test-monday: whether the configured token reaches Monday.com
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import BoardClientDep
from app.exceptions import now_iso

router = APIRouter()

SERVICE_NAME = "monday-api-automation"
DEVELOPER = "Nathan Silva - Fagron Tech"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    service: str
    developer: str


class MondayConnectionResponse(BaseModel):
    """Monday.com connectivity check."""
    status: str
    monday_conectado: bool
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="ok",
        timestamp=now_iso(),
        service=SERVICE_NAME,
        developer=DEVELOPER,
    )


@router.get("/test-monday", response_model=MondayConnectionResponse)
def test_monday_connection(board_client: BoardClientDep):
    """
    Check the connection with Monday.com.

    Runs a minimal identity query with the configured token.
    Never fails: an unusable board API is reported as monday_conectado=false.
    """
    connected = board_client.check_connection()
    return MondayConnectionResponse(
        status="ok" if connected else "erro",
        monday_conectado=connected,
        timestamp=now_iso(),
    )
