# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Monday folder automation API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main
# =============================================================================

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import ConfigurationError, Settings, get_settings
from app.exceptions import (
    AutomationError,
    automation_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.logging_config import configure_logging
from app.routers import automation, configuration, health
from core.catalog import ProductCatalog
from core.services.automation_service import AutomationService
from core.services.provisioner import FolderProvisioner
from lib.monday_client import MondayClient

logger = logging.getLogger(__name__)

API_DESCRIPTION = """
## Monday.com Folder Automation

Creates the onboarding folder of a client right after the sale is recorded
on the Monday.com board.

### How It Works

1. **Find the product** - the demand is looked up on the board by client id,
   then by pharmacy name
2. **Create the folder** - `{base}/{product folder}/{id_cliente}`
3. **Copy the template** - `Fluxo_Cliente_{id_cliente}.vsdx`
4. **Return the owner** - responsible party for the product

### Quick Start

```bash
curl -X POST http://localhost:3000/automatizar \\
  -H "Content-Type: application/json" \\
  -d '{"id_cliente": 12345, "nome_farmacia": "Farmácia Exemplo"}'
```
"""


def create_app(
    settings: Settings | None = None,
    board_client: MondayClient | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Settings are loaded once and every collaborator is built here and stored
    on app.state, so route handlers never read configuration themselves.

    Args:
        settings: Settings to use (loaded from the environment when omitted)
        board_client: Monday.com client to use (built from settings when omitted)
    """
    settings = settings or get_settings()
    configure_logging(settings)

    catalog = ProductCatalog.from_settings(settings)
    board_client = board_client or MondayClient.from_settings(settings, catalog)
    provisioner = FolderProvisioner(catalog)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        - Startup: log the configuration in use
        - Shutdown: close the Monday.com HTTP client
        """
        logger.info(f"Starting Monday API Automation in {settings.ENVIRONMENT} mode")
        logger.info(f"Products: {', '.join(catalog.valid_products)}")
        logger.info(f"Base path: {catalog.resolved_base_path}")

        yield

        logger.info("Shutting down Monday API Automation")
        board_client.close()

    app = FastAPI(
        title="Monday API Automation",
        description=API_DESCRIPTION,
        version="1.0.0",
        docs_url="/api-docs",
        redoc_url=None,
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "Automation",
                "description": "Folder automation and board lookups",
            },
            {
                "name": "Health",
                "description": "API health and Monday.com connectivity",
            },
            {
                "name": "Config",
                "description": "Non-sensitive configuration",
            },
        ],
    )

    app.state.settings = settings
    app.state.catalog = catalog
    app.state.board_client = board_client
    app.state.automation_service = AutomationService(board_client, provisioner, catalog)

    # =========================================================================
    # Middleware
    # =========================================================================

    # CORS middleware - open outside production
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    app.add_exception_handler(AutomationError, automation_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # =========================================================================
    # Routers
    # =========================================================================

    app.include_router(automation.router, tags=["Automation"])
    app.include_router(health.router, tags=["Health"])
    app.include_router(configuration.router, tags=["Config"])

    return app


def main() -> None:
    """Run the API with uvicorn, failing fast on missing configuration."""
    import uvicorn

    try:
        settings = get_settings()
    except ConfigurationError as e:
        print(f"Erro ao inicializar a aplicação: {e}", file=sys.stderr)
        sys.exit(1)

    uvicorn.run(create_app(settings), host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    main()
else:
    app = create_app()
