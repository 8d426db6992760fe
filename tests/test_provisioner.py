# =============================================================================
# tests/test_provisioner.py - Tests for Folder Provisioning
# =============================================================================

import errno
from pathlib import Path
from unittest.mock import patch

import pytest

from app.exceptions import (
    DiskFullError,
    InvalidPathError,
    InvalidProductError,
    PermissionDeniedError,
    ProvisioningError,
    TemplateMissingError,
)
from core.catalog import ProductCatalog
from core.services.provisioner import FolderProvisioner, translate_os_error
from tests.conftest import TEMPLATE_BYTES


@pytest.fixture
def provisioner(catalog):
    return FolderProvisioner(catalog)


# =============================================================================
# ensure_client_folder
# =============================================================================

class TestEnsureClientFolder:
    """Tests for ensure_client_folder."""

    def test_creates_folder_with_parents(self, provisioner, base_path):
        folder = provisioner.ensure_client_folder("Fórmula Certa", 12345)

        assert folder == str(base_path / "#FCERTA EXTENSÃO" / "12345")
        assert Path(folder).is_dir()

    def test_existing_folder_is_kept(self, provisioner):
        folder = Path(provisioner.ensure_client_folder("Phusion", 1))
        (folder / "notes.txt").write_text("keep me")

        again = provisioner.ensure_client_folder("Phusion", 1)

        assert again == str(folder)
        assert (folder / "notes.txt").read_text() == "keep me"

    def test_unknown_product(self, provisioner, base_path):
        with pytest.raises(InvalidProductError):
            provisioner.ensure_client_folder("BOT", 1)

        assert not base_path.exists()

    def test_file_in_the_way(self, provisioner, base_path):
        blocker = base_path / "#PHUSION EXTENSÃO" / "5"
        blocker.parent.mkdir(parents=True)
        blocker.write_text("not a folder")

        with pytest.raises(InvalidPathError):
            provisioner.ensure_client_folder("Phusion", 5)

    def test_permission_error_is_translated(self, provisioner):
        with patch.object(Path, "mkdir", side_effect=PermissionError(errno.EACCES, "Permission denied")):
            with pytest.raises(PermissionDeniedError):
                provisioner.ensure_client_folder("Phusion", 1)

    def test_disk_full_is_translated(self, provisioner):
        with patch.object(Path, "mkdir", side_effect=OSError(errno.ENOSPC, "No space left on device")):
            with pytest.raises(DiskFullError):
                provisioner.ensure_client_folder("Phusion", 1)


# =============================================================================
# copy_template
# =============================================================================

class TestCopyTemplate:
    """Tests for copy_template."""

    def test_copies_bytes(self, provisioner, tmp_path):
        folder = tmp_path / "client"
        folder.mkdir()

        copied = provisioner.copy_template(str(folder), 12345)

        assert copied == str(folder / "Fluxo_Cliente_12345.vsdx")
        assert Path(copied).read_bytes() == TEMPLATE_BYTES

    def test_existing_copy_is_not_overwritten(self, provisioner, tmp_path):
        folder = tmp_path / "client"
        folder.mkdir()
        existing = folder / "Fluxo_Cliente_7.vsdx"
        existing.write_bytes(b"edited by the team")

        copied = provisioner.copy_template(str(folder), 7)

        assert copied == str(existing)
        assert existing.read_bytes() == b"edited by the team"

    def test_missing_template(self, settings, tmp_path):
        catalog = ProductCatalog(
            base_path=settings.BASE_USER_PATH,
            template_path=str(tmp_path / "nope.vsdx"),
            product_folders=settings.PRODUCT_FOLDERS,
            responsibles=settings.PRODUCT_RESPONSIBLES,
        )

        with pytest.raises(TemplateMissingError, match="nope.vsdx"):
            FolderProvisioner(catalog).copy_template(str(tmp_path), 1)

    def test_permission_error_is_translated(self, provisioner, tmp_path):
        with patch(
            "core.services.provisioner.shutil.copyfile",
            side_effect=PermissionError(errno.EACCES, "Permission denied"),
        ):
            with pytest.raises(PermissionDeniedError):
                provisioner.copy_template(str(tmp_path), 1)

    def test_missing_folder_is_an_invalid_path(self, provisioner, tmp_path):
        """ENOENT on the destination is a path problem while the template is present."""
        with pytest.raises(InvalidPathError):
            provisioner.copy_template(str(tmp_path / "does-not-exist"), 1)

    def test_template_vanishing_during_copy(self, provisioner, template_file, tmp_path):
        def vanish(src, dst):
            template_file.unlink()
            raise FileNotFoundError(errno.ENOENT, "No such file or directory")

        with patch("core.services.provisioner.shutil.copyfile", side_effect=vanish):
            with pytest.raises(TemplateMissingError):
                provisioner.copy_template(str(tmp_path), 1)

    def test_failed_copy_leaves_no_file(self, provisioner, tmp_path):
        folder = tmp_path / "client"
        folder.mkdir()

        def partial_write(src, dst):
            Path(dst).write_bytes(TEMPLATE_BYTES[:4])
            raise OSError(errno.ENOSPC, "No space left on device")

        with patch("core.services.provisioner.shutil.copyfile", side_effect=partial_write):
            with pytest.raises(DiskFullError):
                provisioner.copy_template(str(folder), 9)

        assert list(folder.iterdir()) == []


# =============================================================================
# provision
# =============================================================================

class TestProvision:
    """Tests for the composed provision step."""

    def test_creates_folder_and_copy(self, provisioner, base_path):
        result = provisioner.provision("Fórmula Certa", 12345)

        assert result.folder_path == str(base_path / "#FCERTA EXTENSÃO" / "12345")
        assert result.file_path == str(base_path / "#FCERTA EXTENSÃO" / "12345" / "Fluxo_Cliente_12345.vsdx")
        assert Path(result.file_path).read_bytes() == TEMPLATE_BYTES

    def test_retry_after_partial_copy_gets_full_template(self, provisioner):
        def partial_write(src, dst):
            Path(dst).write_bytes(TEMPLATE_BYTES[:4])
            raise OSError(errno.ENOSPC, "No space left on device")

        with patch("core.services.provisioner.shutil.copyfile", side_effect=partial_write):
            with pytest.raises(DiskFullError):
                provisioner.provision("Phusion", 42)

        result = provisioner.provision("Phusion", 42)

        assert Path(result.file_path).read_bytes() == TEMPLATE_BYTES

    def test_second_run_writes_nothing(self, provisioner):
        first = provisioner.provision("Phusion", 42)

        with patch.object(Path, "mkdir") as mkdir, \
                patch("core.services.provisioner.shutil.copyfile") as copyfile:
            second = provisioner.provision("Phusion", 42)

        assert second == first
        mkdir.assert_not_called()
        copyfile.assert_not_called()

    def test_invalid_product_before_any_io(self, provisioner):
        with patch.object(Path, "mkdir") as mkdir, \
                patch.object(Path, "exists") as exists, \
                patch("core.services.provisioner.shutil.copyfile") as copyfile:
            with pytest.raises(InvalidProductError):
                provisioner.provision("BOT", 1)

        mkdir.assert_not_called()
        exists.assert_not_called()
        copyfile.assert_not_called()


# =============================================================================
# translate_os_error
# =============================================================================

class TestTranslateOsError:
    """Tests for OSError translation."""

    @pytest.mark.parametrize(
        "code, expected",
        [
            (errno.EACCES, PermissionDeniedError),
            (errno.EPERM, PermissionDeniedError),
            (errno.ENOSPC, DiskFullError),
            (errno.ENOTDIR, InvalidPathError),
            (errno.ENAMETOOLONG, InvalidPathError),
            (errno.EIO, ProvisioningError),
        ],
    )
    def test_translation(self, code, expected):
        error = translate_os_error(OSError(code, "boom"), "criar a pasta", {"id_cliente": 1})

        assert isinstance(error, expected)
        assert error.details == {"id_cliente": 1}

    def test_enoent_without_template_is_invalid_path(self):
        error = translate_os_error(OSError(errno.ENOENT, "missing"), "criar a pasta", {})

        assert isinstance(error, InvalidPathError)

    def test_enoent_with_template(self):
        error = translate_os_error(
            OSError(errno.ENOENT, "missing"), "copiar", {}, template_path="/srv/modelo.vsdx"
        )

        assert isinstance(error, TemplateMissingError)
