# =============================================================================
# core/models/automation.py - Automation Schemas
# =============================================================================
# These models define the contract of the folder automation:
# - ClientRequest: Input of POST /automatizar (id_cliente + nome_farmacia)
# - ProvisionResult: Folder and file produced for a client
# - AutomationResult: Everything returned after a successful run
#
# None of these are persisted. Each request builds and discards its own.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


class ClientRequest(BaseModel):
    """
    Input for one automation run.

    id_cliente must be a JSON number (strings like "123" are refused, as are
    booleans) greater than zero. nome_farmacia must contain something other
    than whitespace; it is stored trimmed.

    Example:
        {
            "id_cliente": 12345,
            "nome_farmacia": "Farmácia Exemplo"
        }
    """

    model_config = ConfigDict(frozen=True)

    id_cliente: StrictInt = Field(
        ...,
        gt=0,
        description="Client ID, a positive integer"
    )

    nome_farmacia: str = Field(
        ...,
        description="Pharmacy name, used as fallback lookup on the board"
    )

    @field_validator("nome_farmacia")
    @classmethod
    def strip_and_require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError('Campo "nome_farmacia" deve ser uma string não vazia')
        return value


class ProvisionResult(BaseModel):
    """Folder and template copy present on disk after provisioning."""

    model_config = ConfigDict(frozen=True)

    folder_path: str = Field(..., description="Client folder")
    file_path: str = Field(..., description="Template copy inside the folder")


class ClientInfo(BaseModel):
    """Client echo included in the automation response."""
    id: int
    nome_farmacia: str


class AutomationResult(BaseModel):
    """
    Result of a successful automation run.

    Returned by POST /automatizar.

    Example:
        {
            "status": "ok",
            "produto": "Fórmula Certa",
            "pasta": "/tmp/#FCERTA EXTENSÃO/12345",
            "arquivo_modelo": "/tmp/#FCERTA EXTENSÃO/12345/Fluxo_Cliente_12345.vsdx",
            "responsavel": "Pedro.Ribeiro@fagrontech.com.br",
            "cliente": {"id": 12345, "nome_farmacia": "Farmácia X"},
            "timestamp": "2024-01-15T10:30:00+00:00"
        }
    """

    status: str = Field(default="ok")
    produto: str = Field(..., description="Product found on the board")
    pasta: str = Field(..., description="Client folder")
    arquivo_modelo: str = Field(..., description="Template copy")
    responsavel: str = Field(..., description="Responsible party email")
    cliente: ClientInfo
    timestamp: str


class ProductLookupResult(BaseModel):
    """Returned by GET /produto/{id}."""
    status: str = Field(default="ok")
    id_cliente: int
    produto: str
    responsavel: str
    timestamp: str
