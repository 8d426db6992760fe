# =============================================================================
# lib/monday_client.py - Monday.com GraphQL Client
# =============================================================================
# This module provides a typed wrapper for the Monday.com board queries the
# automation needs:
# - Product of a demand, looked up by the client-id text column
# - Product of a demand, looked up by item name (pharmacy name)
# - Items carrying a given product label (e.g. every "BOT" pharmacy)
# - A minimal identity query used as connection check
#
# Every call is a single stateless POST. Failures are classified into the
# error kinds from app.exceptions and never retried here.
#
# Usage:
#   from lib.monday_client import MondayClient
#   client = MondayClient.from_settings(settings, catalog)
#   product = client.find_product_by_client_id(12345)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from app.config import Settings
from app.exceptions import (
    AutomationError,
    BoardConnectionError,
    BoardQueryError,
    InvalidProductError,
    NotFoundError,
    UnauthorizedError,
)
from core.catalog import ProductCatalog

# Set up logging for this module
logger = logging.getLogger(__name__)


# =============================================================================
# GraphQL Documents
# =============================================================================
# Filters travel as variables so names with quotes cannot break the query.

ITEM_FIELDS = """
        items {
          id
          name
          column_values {
            id
            text
            value
            column {
              title
            }
          }
        }
"""

ITEMS_BY_RULE_QUERY = """
query GetItemsByRule($boardIds: [ID!], $queryParams: ItemsQuery) {
  boards(ids: $boardIds) {
    items_page(query_params: $queryParams) {%s    }
  }
}
""" % ITEM_FIELDS

ALL_ITEMS_QUERY = """
query GetAllItems($boardIds: [ID!], $limit: Int) {
  boards(ids: $boardIds) {
    items_page(limit: $limit) {%s    }
  }
}
""" % ITEM_FIELDS

ME_QUERY = """
query {
  me {
    id
    name
  }
}
"""

# Column ids used as product column when no title mentions "produto"
PRODUCT_COLUMN_IDS = ("dropdown", "status")
PRODUCT_TITLE_KEYWORD = "produto"

# Largest page Monday.com serves in one items_page call
MAX_PAGE_SIZE = 500

AUTH_ERROR_MARKERS = ("not authenticated", "unauthorized", "unauthenticated", "invalid token")


# =============================================================================
# Board Models
# =============================================================================

class BoardColumnValue(BaseModel):
    """One column value of a board item."""
    id: str
    title: str = ""
    text: str | None = None


class BoardItem(BaseModel):
    """
    A board item as returned by items_page.

    Read-only and never cached: every lookup fetches it again.
    """
    id: str
    name: str
    column_values: list[BoardColumnValue] = Field(default_factory=list)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> BoardItem:
        """Flatten the API shape ({column: {title}}) into BoardColumnValue."""
        columns = []
        for col in payload.get("column_values") or []:
            column_meta = col.get("column") or {}
            columns.append(
                BoardColumnValue(
                    id=str(col.get("id", "")),
                    title=column_meta.get("title") or "",
                    text=col.get("text"),
                )
            )
        return cls(
            id=str(payload.get("id", "")),
            name=payload.get("name") or "",
            column_values=columns,
        )


class BoardPharmacy(BaseModel):
    """An item listed by product label."""
    id: str
    elemento: str = Field(..., description="Item name (e.g. '2707 - BOULEVARD PHARMA')")
    produto: str


def select_product_column(item: BoardItem) -> BoardColumnValue | None:
    """
    Pick the column holding the product of an item.

    First column whose title contains "produto" (case-insensitive) or whose
    id is "dropdown" or "status". Returns None when nothing matches.
    """
    for col in item.column_values:
        if PRODUCT_TITLE_KEYWORD in col.title.lower() or col.id in PRODUCT_COLUMN_IDS:
            return col
    return None


class MondayClient:
    """
    Client for the Monday.com board holding onboarding demands.

    One instance is created at startup and shared; it keeps no state between
    calls apart from the underlying HTTP connection pool.

    Example:
        client = MondayClient(
            api_url="https://api.monday.com/v2",
            api_token="...",
            board_id="123456789",
            catalog=catalog,
        )
        client.find_product_by_name("Farmácia Exemplo")  # "Phusion"
    """

    def __init__(
        self,
        api_url: str,
        api_token: str,
        board_id: str,
        catalog: ProductCatalog,
        api_version: str = "2023-10",
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ):
        self.api_url = api_url
        self.board_id = str(board_id)
        self.catalog = catalog
        self._headers = {
            "Authorization": api_token,
            "API-Version": api_version,
            "Content-Type": "application/json",
        }
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        catalog: ProductCatalog,
        http_client: httpx.Client | None = None,
    ) -> MondayClient:
        return cls(
            api_url=settings.MONDAY_API_URL,
            api_token=settings.MONDAY_API_TOKEN,
            board_id=settings.MONDAY_BOARD_ID,
            catalog=catalog,
            api_version=settings.MONDAY_API_VERSION,
            timeout=settings.MONDAY_TIMEOUT_SECONDS,
            http_client=http_client,
        )

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        POST a GraphQL document and return its "data" member.

        Raises:
            BoardConnectionError: Network failure or timeout
            UnauthorizedError: Token rejected (HTTP 401/403 or auth GraphQL error)
            BoardQueryError: Any other HTTP or GraphQL error
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            response = self._http.post(self.api_url, json=payload, headers=self._headers)
        except httpx.TimeoutException as e:
            raise BoardConnectionError(
                "Tempo esgotado na conexão com Monday.com",
                details={"error": str(e)},
            ) from e
        except httpx.TransportError as e:
            raise BoardConnectionError(
                "Erro de conexão com Monday.com. Verifique sua internet",
                details={"error": str(e)},
            ) from e

        if response.status_code in (401, 403):
            raise UnauthorizedError(
                "Token do Monday.com inválido ou expirado",
                details={"http_status": response.status_code},
            )
        if response.status_code >= 400:
            raise BoardQueryError(
                f"Monday.com respondeu com erro ({response.status_code}): {response.text[:200]}",
                details={"http_status": response.status_code},
            )

        try:
            body = response.json()
        except ValueError as e:
            raise BoardQueryError("Resposta inválida do Monday.com (JSON malformado)") from e

        errors = body.get("errors") or []
        if body.get("error_message"):
            errors = [*errors, {"message": body["error_message"]}]
        if errors:
            message = "; ".join(str(err.get("message", err)) for err in errors)
            if any(marker in message.lower() for marker in AUTH_ERROR_MARKERS):
                raise UnauthorizedError(
                    "Token do Monday.com inválido ou expirado",
                    details={"errors": message},
                )
            raise BoardQueryError(
                f"Erro na consulta ao Monday.com: {message}",
                details={"errors": message},
            )

        return body.get("data") or {}

    # -------------------------------------------------------------------------
    # Item Lookup
    # -------------------------------------------------------------------------

    def _boards(self, data: dict[str, Any]) -> list[dict[str, Any]]:
        boards = data.get("boards") or []
        if not boards:
            raise NotFoundError(
                f"Board {self.board_id} não encontrado",
                details={"board_id": self.board_id},
            )
        return boards

    def _parse_item(self, payload: Any) -> BoardItem:
        """Build a BoardItem, reporting an unexpected payload shape as a query error."""
        try:
            return BoardItem.from_api(payload)
        except (AttributeError, TypeError, ValidationError) as e:
            raise BoardQueryError(
                "Resposta inesperada do Monday.com (item malformado)",
                details={"board_id": self.board_id},
            ) from e

    def _first_item(self, rule: dict[str, Any], not_found_message: str) -> BoardItem:
        """Run an items_page query with a single rule and return the first item."""
        data = self._execute(
            ITEMS_BY_RULE_QUERY,
            {"boardIds": [self.board_id], "queryParams": {"rules": [rule]}},
        )
        items = (self._boards(data)[0].get("items_page") or {}).get("items") or []
        if not items:
            raise NotFoundError(not_found_message)
        return self._parse_item(items[0])

    def _extract_product(self, item: BoardItem, subject: str) -> str:
        """Read and validate the product label of an item."""
        column = select_product_column(item)
        if column is None or not column.text or not column.text.strip():
            raise NotFoundError(
                f'Campo "Produto" não encontrado ou vazio para {subject}',
                details={"item_id": item.id},
            )
        product = column.text.strip()
        if not self.catalog.is_valid_product(product):
            raise InvalidProductError(product, self.catalog.valid_products)
        return product

    def find_product_by_client_id(self, client_id: int) -> str:
        """
        Find the product of the demand whose client-id text column equals client_id.

        Only the first matching item is used.

        Returns:
            Product label, one of the catalog products

        Raises:
            NotFoundError: Board missing, no item, or empty product column
            InvalidProductError: Product label outside the catalog
            UnauthorizedError / BoardConnectionError / BoardQueryError: API failure
        """
        try:
            item = self._first_item(
                {"column_id": "text", "compare_value": [str(client_id)]},
                f"Demanda não encontrada para o cliente ID: {client_id}",
            )
            product = self._extract_product(item, f"o cliente ID: {client_id}")
        except AutomationError as e:
            logger.error(
                f"Monday lookup by client id failed: {e.message} "
                f"(operation=find_product_by_client_id, client_id={client_id})"
            )
            raise

        logger.info(f"Monday lookup: client {client_id} -> product '{product}'")
        return product

    def find_product_by_name(self, pharmacy_name: str) -> str:
        """
        Find the product of the demand whose item name equals pharmacy_name.

        Same column rule and failures as find_product_by_client_id.
        """
        try:
            item = self._first_item(
                {"column_id": "name", "compare_value": [pharmacy_name]},
                f"Demanda não encontrada para a farmácia: {pharmacy_name}",
            )
            product = self._extract_product(item, f"a farmácia: {pharmacy_name}")
        except AutomationError as e:
            logger.error(
                f"Monday lookup by name failed: {e.message} "
                f"(operation=find_product_by_name, pharmacy_name={pharmacy_name!r})"
            )
            raise

        logger.info(f"Monday lookup: pharmacy '{pharmacy_name}' -> product '{product}'")
        return product

    def list_items_by_product(self, product: str, limit: int = MAX_PAGE_SIZE) -> list[BoardPharmacy]:
        """
        List the items whose product column text equals product.

        Reads only the first page of the board. The label is not checked
        against the catalog, so labels like "BOT" can be listed.
        """
        try:
            data = self._execute(
                ALL_ITEMS_QUERY,
                {"boardIds": [self.board_id], "limit": min(limit, MAX_PAGE_SIZE)},
            )
            items = (self._boards(data)[0].get("items_page") or {}).get("items") or []
        except AutomationError as e:
            logger.error(
                f"Monday listing failed: {e.message} "
                f"(operation=list_items_by_product, product={product!r})"
            )
            raise

        matches = []
        for raw in items:
            item = self._parse_item(raw)
            column = select_product_column(item)
            if column is not None and column.text and column.text.strip() == product:
                matches.append(BoardPharmacy(id=item.id, elemento=item.name, produto=column.text.strip()))

        logger.info(f"Monday listing: {len(matches)} items with product '{product}'")
        return matches

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def check_connection(self) -> bool:
        """
        Check that the token can reach Monday.com.

        Never raises: any failure is logged and reported as False.
        """
        try:
            self._execute(ME_QUERY)
            return True
        except Exception as e:
            logger.error(f"Monday connection check failed: {e}")
            return False
