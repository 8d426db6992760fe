# =============================================================================
# core/services/automation_service.py - Folder Automation Business Logic
# =============================================================================
# Orchestrates one automation request:
#   1. Validate the body (id_cliente, nome_farmacia)
#   2. Resolve the product on Monday.com: by client id, then once by name
#   3. Provision the client folder and template copy
#   4. Resolve the responsible party for the product
#   5. Assemble the result
#
# Nothing is kept between requests. Errors are raised as AutomationError
# subclasses and mapped to HTTP responses by app.exceptions.
# =============================================================================

import logging
from typing import Any

from pydantic import ValidationError

from app.exceptions import AutomationError, InvalidInputError, ProductLookupError, now_iso
from core.catalog import ProductCatalog
from core.models.automation import (
    AutomationResult,
    ClientInfo,
    ClientRequest,
    ProductLookupResult,
)
from core.services.provisioner import FolderProvisioner
from lib.monday_client import MondayClient

logger = logging.getLogger(__name__)

_FIELD_MESSAGES = {
    "id_cliente": 'Campo "id_cliente" deve ser um número positivo',
    "nome_farmacia": 'Campo "nome_farmacia" deve ser uma string não vazia',
}


def validate_client_request(payload: Any) -> ClientRequest:
    """
    Validate a raw request body into a ClientRequest.

    Raises:
        InvalidInputError: With one message per offending field
    """
    if not isinstance(payload, dict):
        raise InvalidInputError("Corpo da requisição deve ser um objeto JSON")

    try:
        return ClientRequest.model_validate(payload)
    except ValidationError as e:
        messages = []
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else ""
            if err["type"] == "missing":
                message = f'Campo "{field}" é obrigatório'
            else:
                message = _FIELD_MESSAGES.get(field, err["msg"])
            if message not in messages:
                messages.append(message)
        raise InvalidInputError("; ".join(messages), details={"campos": messages}) from e


class AutomationService:
    """
    Service for the folder automation.

    Collaborators are passed in, so tests can swap the board client or the
    provisioner for fakes.
    """

    def __init__(
        self,
        board_client: MondayClient,
        provisioner: FolderProvisioner,
        catalog: ProductCatalog,
    ):
        self.board_client = board_client
        self.provisioner = provisioner
        self.catalog = catalog

    def resolve_product(self, client_id: int, pharmacy_name: str) -> str:
        """
        Find the product by client id, falling back once to the pharmacy name.

        Raises:
            ProductLookupError: If both lookups fail; carries both messages
        """
        try:
            return self.board_client.find_product_by_client_id(client_id)
        except AutomationError as primary:
            logger.warning(
                f"Lookup by client id {client_id} failed ({primary.message}), "
                f"trying pharmacy name '{pharmacy_name}'"
            )
            try:
                return self.board_client.find_product_by_name(pharmacy_name)
            except AutomationError as fallback:
                raise ProductLookupError(primary, fallback) from fallback

    def run(self, payload: Any) -> AutomationResult:
        """
        Run the whole automation for a raw request body.

        Raises:
            AutomationError: Any failure, already logged with its context
        """
        try:
            request = validate_client_request(payload)
        except InvalidInputError as e:
            logger.warning(f"Input validation failed: {e.message} (body={payload!r})")
            raise

        client_id = request.id_cliente
        pharmacy_name = request.nome_farmacia
        logger.info(f"Processing started: client_id={client_id}, pharmacy='{pharmacy_name}'")

        product = None
        try:
            product = self.resolve_product(client_id, pharmacy_name)
            provisioned = self.provisioner.provision(product, client_id)
            responsible = self.catalog.responsible_for(product)
        except AutomationError as e:
            logger.error(
                f"Automation failed: {e.message} "
                f"(kind={e.kind.value}, client_id={client_id}, product={product})"
            )
            raise

        result = AutomationResult(
            produto=product,
            pasta=provisioned.folder_path,
            arquivo_modelo=provisioned.file_path,
            responsavel=responsible,
            cliente=ClientInfo(id=client_id, nome_farmacia=pharmacy_name),
            timestamp=now_iso(),
        )
        logger.info(f"Processing finished: {result.model_dump()}")
        return result

    def lookup_product(self, client_id: int) -> ProductLookupResult:
        """Product and responsible party for a client id (no fallback, no I/O on disk)."""
        product = self.board_client.find_product_by_client_id(client_id)
        return ProductLookupResult(
            id_cliente=client_id,
            produto=product,
            responsavel=self.catalog.responsible_for(product),
            timestamp=now_iso(),
        )
