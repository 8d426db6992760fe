# =============================================================================
# app/exceptions.py - Error Taxonomy and Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
#
# Every domain failure is an AutomationError tagged with an ErrorKind.
# Board and filesystem failures are raised where they happen; the HTTP layer
# is the only place that turns a kind into a status code, through the
# ERROR_RESPONSES lookup table below.
# =============================================================================

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Categories of failure understood by the HTTP layer."""
    INVALID_INPUT = "invalid_input"
    INVALID_PRODUCT = "invalid_product"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CONNECTION_ERROR = "connection_error"
    PERMISSION_DENIED = "permission_denied"
    DISK_FULL = "disk_full"
    INVALID_PATH = "invalid_path"
    TEMPLATE_MISSING = "template_missing"
    BOARD_ERROR = "board_error"
    INTERNAL = "internal"


INTERNAL_ERROR_RESPONSE = (500, "ERRO_INTERNO")

# kind -> (HTTP status, response code); kinds not listed map to INTERNAL_ERROR_RESPONSE
ERROR_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.NOT_FOUND: (404, "DEMANDA_NAO_ENCONTRADA"),
    ErrorKind.INVALID_INPUT: (400, "DADOS_INVALIDOS"),
    ErrorKind.INVALID_PRODUCT: (400, "PRODUTO_INVALIDO"),
    ErrorKind.CONNECTION_ERROR: (503, "ERRO_CONEXAO"),
    ErrorKind.PERMISSION_DENIED: (403, "ERRO_PERMISSAO"),
}


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class AutomationError(Exception):
    """
    Base exception for the automation service.

    All custom exceptions inherit from this class and carry:
    - kind: the ErrorKind used for status mapping
    - message: human-readable message (returned as "erro")
    - code: optional response code overriding the kind's default
    - details: structured context (client id, product, paths...)
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return ERROR_RESPONSES.get(self.kind, INTERNAL_ERROR_RESPONSE)[0]

    @property
    def response_code(self) -> str:
        if self.code:
            return self.code
        return ERROR_RESPONSES.get(self.kind, INTERNAL_ERROR_RESPONSE)[1]

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        return {
            "status": "erro",
            "erro": self.message,
            "codigo": self.response_code,
            "timestamp": now_iso(),
        }


# =============================================================================
# Input Exceptions
# =============================================================================

class InvalidInputError(AutomationError):
    """Raised when the request body or a path parameter is malformed."""
    kind = ErrorKind.INVALID_INPUT


class InvalidProductError(AutomationError):
    """Raised when a product label is outside the configured product set."""
    kind = ErrorKind.INVALID_PRODUCT

    def __init__(self, product: str, valid_products: tuple[str, ...] = (), code: str | None = None):
        message = f'Produto inválido: "{product}"'
        if valid_products:
            message += f". Produtos válidos: {', '.join(valid_products)}"
        super().__init__(message, code=code, details={"produto": product})
        self.product = product


class NotFoundError(AutomationError):
    """Raised when no board item matches or no responsible party is configured."""
    kind = ErrorKind.NOT_FOUND


# =============================================================================
# Board Exceptions
# =============================================================================

class UnauthorizedError(AutomationError):
    """Raised when Monday.com rejects the API token."""
    kind = ErrorKind.UNAUTHORIZED


class BoardConnectionError(AutomationError):
    """Raised when Monday.com cannot be reached (network failure or timeout)."""
    kind = ErrorKind.CONNECTION_ERROR


class BoardQueryError(AutomationError):
    """Raised when Monday.com answers with an error that is not auth related."""
    kind = ErrorKind.BOARD_ERROR


class ProductLookupError(AutomationError):
    """
    Raised when both the lookup by client id and the lookup by name failed.

    Carries both underlying errors. Its kind is the shared kind when both
    agree, NOT_FOUND when either one is a miss, otherwise the primary's kind.
    """

    def __init__(self, primary: AutomationError, fallback: AutomationError):
        super().__init__(
            "Não foi possível encontrar o produto. "
            f"Erro principal: {primary.message}. Erro fallback: {fallback.message}",
            details={"erro_principal": primary.message, "erro_fallback": fallback.message},
        )
        self.primary = primary
        self.fallback = fallback
        if primary.kind == fallback.kind:
            self.kind = primary.kind
        elif ErrorKind.NOT_FOUND in (primary.kind, fallback.kind):
            self.kind = ErrorKind.NOT_FOUND
        else:
            self.kind = primary.kind


# =============================================================================
# Filesystem Exceptions
# =============================================================================

class PermissionDeniedError(AutomationError):
    """Raised when the process may not write to the target path."""
    kind = ErrorKind.PERMISSION_DENIED


class DiskFullError(AutomationError):
    """Raised when there is no space left for the folder or the copy."""
    kind = ErrorKind.DISK_FULL


class InvalidPathError(AutomationError):
    """Raised when the destination path cannot be used as a folder."""
    kind = ErrorKind.INVALID_PATH


class TemplateMissingError(AutomationError):
    """Raised when the template file does not exist."""
    kind = ErrorKind.TEMPLATE_MISSING

    def __init__(self, template_path: str):
        super().__init__(
            f"Arquivo modelo não encontrado: {template_path}",
            details={"arquivo_modelo": template_path},
        )


class ProvisioningError(AutomationError):
    """Raised for filesystem failures without a more specific kind."""
    kind = ErrorKind.INTERNAL


# =============================================================================
# Exception Handlers
# =============================================================================

async def automation_exception_handler(
    request: Request,
    exc: AutomationError
) -> JSONResponse:
    """
    Convert AutomationError to JSON response.

    Returns structured error with:
    - status: always "erro"
    - erro: Human-readable message
    - codigo: Machine-readable error code
    - timestamp
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request parsing/validation errors raised by FastAPI.

    Malformed bodies are reported like any other invalid input.
    """
    logger.warning(f"Request validation failed on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=400,
        content={
            "status": "erro",
            "erro": "Dados da requisição inválidos",
            "codigo": "DADOS_INVALIDOS",
            "timestamp": now_iso(),
        }
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """Handle framework HTTP errors, including unmatched routes."""
    if exc.status_code == 404:
        message, code = "Rota não encontrada", "ROTA_NAO_ENCONTRADA"
    else:
        message, code = str(exc.detail), "ERRO_HTTP"
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": "erro",
            "erro": message,
            "codigo": code,
            "timestamp": now_iso(),
        },
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions without leaking internals."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "status": "erro",
            "erro": "Erro interno do servidor",
            "codigo": "ERRO_INTERNO",
            "timestamp": now_iso(),
        }
    )
