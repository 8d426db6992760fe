# =============================================================================
# core/services/provisioner.py - Client Folder Provisioning
# =============================================================================
# Creates the per-client folder and drops a copy of the template file in it.
# Both steps are idempotent: an existing folder or copy is left untouched.
#
# OS errors never escape raw; they are translated into the filesystem error
# kinds from app.exceptions.
# =============================================================================

import errno
import logging
import os
import shutil
from pathlib import Path

from app.exceptions import (
    AutomationError,
    DiskFullError,
    InvalidPathError,
    PermissionDeniedError,
    ProvisioningError,
    TemplateMissingError,
)
from core.catalog import ProductCatalog
from core.models.automation import ProvisionResult

logger = logging.getLogger(__name__)

_PERMISSION_ERRNOS = {errno.EACCES, errno.EPERM}
_DISK_FULL_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}
_INVALID_PATH_ERRNOS = {errno.ENOTDIR, errno.ENAMETOOLONG, errno.EINVAL, errno.EEXIST}


def translate_os_error(
    error: OSError,
    action: str,
    details: dict,
    template_path: str | None = None,
) -> AutomationError:
    """
    Map an OSError to the matching domain error.

    Args:
        error: The error raised by the filesystem call
        action: What was being done, used in the message ("criar pasta")
        details: Context attached to the domain error
        template_path: Set when the template itself is gone, so ENOENT reads
            as a missing template instead of a missing destination
    """
    code = error.errno
    if code in _PERMISSION_ERRNOS:
        return PermissionDeniedError(
            f"Sem permissão para {action}. Verifique as permissões.",
            details=details,
        )
    if code in _DISK_FULL_ERRNOS:
        return DiskFullError(
            f"Espaço insuficiente em disco para {action}.",
            details=details,
        )
    if code == errno.ENOENT and template_path is not None:
        return TemplateMissingError(template_path)
    if code in _INVALID_PATH_ERRNOS or code == errno.ENOENT:
        return InvalidPathError(
            f"Caminho inválido para {action}.",
            details=details,
        )
    return ProvisioningError(f"Erro ao {action}: {error}", details=details)


class FolderProvisioner:
    """
    Service creating client folders and template copies.

    Example:
        provisioner = FolderProvisioner(catalog)
        result = provisioner.provision("Phusion", 42)
        result.folder_path  # "/tmp/#PHUSION EXTENSÃO/42"
        result.file_path    # "/tmp/#PHUSION EXTENSÃO/42/Fluxo_Cliente_42.vsdx"
    """

    def __init__(self, catalog: ProductCatalog):
        self.catalog = catalog

    def ensure_client_folder(self, product: str, client_id: int) -> str:
        """
        Make sure the client folder exists, creating missing parents.

        Returns:
            Folder path (unchanged when it already existed)

        Raises:
            InvalidProductError: If the product has no folder segment
            PermissionDeniedError / DiskFullError / InvalidPathError / ProvisioningError
        """
        folder_path = self.catalog.folder_path(product, client_id)
        folder = Path(folder_path)
        details = {"produto": product, "id_cliente": client_id, "pasta": folder_path}

        try:
            if folder.is_dir():
                logger.info(f"Folder already exists: {folder_path} (product={product})")
                return folder_path
            if folder.exists():
                raise InvalidPathError(
                    "Caminho inválido para criar a pasta: já existe um arquivo com esse nome.",
                    details=details,
                )
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = translate_os_error(e, "criar a pasta", details)
            logger.error(f"Folder creation failed: {error.message} ({details}): {e}")
            raise error from e
        except AutomationError as e:
            logger.error(f"Folder creation failed: {e.message} ({details})")
            raise

        logger.info(f"Folder created: {folder_path} (product={product})")
        return folder_path

    def copy_template(self, folder_path: str, client_id: int) -> str:
        """
        Copy the template file into the client folder.

        The copy is named Fluxo_Cliente_{client_id} plus the template's
        extension. An existing copy is kept as is.

        Returns:
            Path of the copy

        Raises:
            TemplateMissingError: If the template file does not exist
            PermissionDeniedError / DiskFullError / InvalidPathError / ProvisioningError
        """
        source = Path(self.catalog.template_path)
        destination = Path(folder_path) / self.catalog.template_file_name(client_id)
        partial = destination.with_name(f".{destination.name}.partial")
        details = {"id_cliente": client_id, "pasta": folder_path, "destino": str(destination)}

        try:
            if not source.is_file():
                raise TemplateMissingError(str(source))
            if destination.exists():
                logger.info(f"Template copy already exists: {destination}")
                return str(destination)
            # Only a complete copy ever gets the final name
            shutil.copyfile(source, partial)
            os.replace(partial, destination)
        except OSError as e:
            self._discard(partial)
            template_path = None if source.is_file() else str(source)
            error = translate_os_error(
                e, "copiar o arquivo modelo", details, template_path=template_path
            )
            logger.error(f"Template copy failed: {error.message} ({details}): {e}")
            raise error from e
        except AutomationError as e:
            logger.error(f"Template copy failed: {e.message} ({details})")
            raise

        logger.info(f"Template copied: {source} -> {destination}")
        return str(destination)

    def _discard(self, partial: Path) -> None:
        """Remove a partial copy left by a failed copy."""
        try:
            partial.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove partial copy {partial}: {e}")

    def provision(self, product: str, client_id: int) -> ProvisionResult:
        """
        Validate the product, then ensure the folder and the template copy.

        The product is checked before any filesystem access.
        """
        self.catalog.ensure_valid_product(product)
        folder_path = self.ensure_client_folder(product, client_id)
        file_path = self.copy_template(folder_path, client_id)
        return ProvisionResult(folder_path=folder_path, file_path=file_path)
