# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides a fake Monday.com API served through httpx.MockTransport
# - Provides settings/catalog fixtures rooted in tmp_path
# =============================================================================

import json
import os
import tempfile

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.main which builds the app immediately

os.environ.setdefault("MONDAY_API_TOKEN", "test-monday-token")
os.environ.setdefault("MONDAY_BOARD_ID", "123456789")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("BASE_USER_PATH", os.path.join(tempfile.gettempdir(), "monday-automation-tests"))
os.environ.setdefault("MODEL_FILE_PATH", os.path.join(tempfile.gettempdir(), "monday-automation-tests", "modelo.vsdx"))

import httpx
import pytest

from app.config import Settings
from core.catalog import ProductCatalog
from lib.monday_client import MondayClient

TEMPLATE_BYTES = b"PK\x03\x04 fake visio template"


# =============================================================================
# Fake Monday.com API
# =============================================================================

def board_item(
    product: str | None = "Fórmula Certa",
    name: str = "12345 - FARMACIA X",
    client_id: str = "12345",
    title: str = "Produto",
    column_id: str = "dropdown7",
    item_id: str = "987",
) -> dict:
    """Board item in the shape returned by items_page."""
    return {
        "id": item_id,
        "name": name,
        "column_values": [
            {"id": "text", "text": client_id, "value": None, "column": {"title": "ID Cliente"}},
            {"id": column_id, "text": product, "value": None, "column": {"title": title}},
        ],
    }


class FakeMondayAPI:
    """
    httpx.MockTransport handler imitating the Monday.com GraphQL endpoint.

    Items are keyed by the compare value of the rule used in the query.
    Every decoded request body is kept in `requests`.
    """

    def __init__(
        self,
        by_client_id: dict[str, list[dict]] | None = None,
        by_name: dict[str, list[dict]] | None = None,
        all_items: list[dict] | None = None,
        board_exists: bool = True,
    ):
        self.by_client_id = by_client_id or {}
        self.by_name = by_name or {}
        self.all_items = all_items or []
        self.board_exists = board_exists
        self.requests: list[dict] = []
        self.headers: list[httpx.Headers] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        self.headers.append(request.headers)
        query = body["query"]
        variables = body.get("variables") or {}

        if "GetItemsByRule" not in query and "GetAllItems" not in query:
            return httpx.Response(200, json={"data": {"me": {"id": "1", "name": "Automation"}}})

        if not self.board_exists:
            return httpx.Response(200, json={"data": {"boards": []}})

        if "GetItemsByRule" in query:
            rule = variables["queryParams"]["rules"][0]
            value = rule["compare_value"][0]
            source = self.by_client_id if rule["column_id"] == "text" else self.by_name
            items = source.get(value, [])
        else:
            items = self.all_items

        return httpx.Response(200, json={"data": {"boards": [{"items_page": {"items": items}}]}})

    @property
    def lookups(self) -> list[tuple[str, str]]:
        """(column_id, compare_value) of every rule query received."""
        result = []
        for body in self.requests:
            params = (body.get("variables") or {}).get("queryParams")
            if params:
                rule = params["rules"][0]
                result.append((rule["column_id"], rule["compare_value"][0]))
        return result


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def template_file(tmp_path):
    """Template file with known content."""
    path = tmp_path / "templates" / "Modelo Fluxo.vsdx"
    path.parent.mkdir(parents=True)
    path.write_bytes(TEMPLATE_BYTES)
    return path


@pytest.fixture
def base_path(tmp_path):
    """Root folder for product folders (not created up front)."""
    return tmp_path / "OneDrive"


@pytest.fixture
def settings(base_path, template_file):
    """Settings pointing at tmp_path, ignoring any .env file."""
    return Settings(
        MONDAY_API_TOKEN="test-monday-token",
        MONDAY_BOARD_ID="123456789",
        BASE_USER_PATH=str(base_path),
        MODEL_FILE_PATH=str(template_file),
        _env_file=None,
    )


@pytest.fixture
def catalog(settings):
    """Catalog with the default products."""
    return ProductCatalog.from_settings(settings)


@pytest.fixture
def fake_monday():
    """Empty fake board; tests fill by_client_id / by_name / all_items."""
    return FakeMondayAPI()


@pytest.fixture
def monday_client(settings, catalog, fake_monday):
    """MondayClient talking to the fake board."""
    http_client = httpx.Client(transport=httpx.MockTransport(fake_monday))
    client = MondayClient.from_settings(settings, catalog, http_client=http_client)
    yield client
    http_client.close()
