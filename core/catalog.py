# =============================================================================
# core/catalog.py - Product Catalog
# =============================================================================
# Immutable view of the product configuration:
# - which product labels are valid
# - the folder segment each product uses
# - the responsible party (email) for each product
# - the base path and template file used when provisioning
#
# Built once from Settings at startup and handed to every component that
# needs it, so no component reads configuration on its own.
# =============================================================================

from __future__ import annotations

import getpass
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from app.config import Settings
from app.exceptions import InvalidProductError, NotFoundError

USER_PLACEHOLDER = "{User}"
TEMPLATE_FILE_PREFIX = "Fluxo_Cliente_"
DEFAULT_TEMPLATE_EXTENSION = ".vsdx"


@dataclass(frozen=True)
class ProductCatalog:
    """
    Product set plus the paths and owners attached to each product.

    The folder and responsible maps are keyed by the same product labels;
    Settings refuses to load when they differ.

    Example:
        catalog = ProductCatalog.from_settings(settings)
        catalog.folder_path("Phusion", 42)
        # "/tmp/#PHUSION EXTENSÃO/42"
    """

    base_path: str
    template_path: str
    product_folders: Mapping[str, str] = field(default_factory=dict)
    responsibles: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the maps so the catalog cannot drift after startup
        object.__setattr__(self, "product_folders", MappingProxyType(dict(self.product_folders)))
        object.__setattr__(self, "responsibles", MappingProxyType(dict(self.responsibles)))

    @classmethod
    def from_settings(cls, settings: Settings) -> ProductCatalog:
        """Build the catalog from application settings."""
        return cls(
            base_path=settings.BASE_USER_PATH,
            template_path=settings.MODEL_FILE_PATH,
            product_folders=settings.PRODUCT_FOLDERS,
            responsibles=settings.PRODUCT_RESPONSIBLES,
        )

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    @property
    def valid_products(self) -> tuple[str, ...]:
        """Product labels in configuration order."""
        return tuple(self.product_folders)

    def is_valid_product(self, product: str | None) -> bool:
        return product in self.product_folders

    def ensure_valid_product(self, product: str) -> str:
        """Return the product unchanged, or raise InvalidProductError."""
        if not self.is_valid_product(product):
            raise InvalidProductError(product, self.valid_products)
        return product

    def responsible_for(self, product: str) -> str:
        """
        Get the responsible party for a product.

        Raises:
            NotFoundError: If the product has no configured owner
        """
        responsible = self.responsibles.get(product)
        if not responsible:
            raise NotFoundError(
                f"Responsável não encontrado para o produto: {product}",
                details={"produto": product},
            )
        return responsible

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------

    @property
    def resolved_base_path(self) -> str:
        """Base path with the {User} placeholder replaced by the OS user name."""
        if USER_PLACEHOLDER in self.base_path:
            return self.base_path.replace(USER_PLACEHOLDER, getpass.getuser())
        return self.base_path

    def folder_path(self, product: str, client_id: int) -> str:
        """
        Build the folder path for a client: {base}/{product segment}/{client id}.

        Pure: the same inputs always give the same path.

        Raises:
            InvalidProductError: If the product has no folder segment
        """
        segment = self.product_folders.get(product)
        if not segment:
            raise InvalidProductError(product, self.valid_products)
        return os.path.join(self.resolved_base_path, segment, str(client_id))

    @property
    def template_extension(self) -> str:
        extension = os.path.splitext(self.template_path)[1]
        return extension or DEFAULT_TEMPLATE_EXTENSION

    def template_file_name(self, client_id: int) -> str:
        """Name of the template copy inside a client folder."""
        return f"{TEMPLATE_FILE_PREFIX}{client_id}{self.template_extension}"
