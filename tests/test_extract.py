"""
Tests for relpackager.io.extract module.

Tests asset extraction including:
- Zip archives (with permission bits)
- Tar archives
- Bare executables (copied as-is)
- Path traversal protection
- Corrupt archives
"""

from __future__ import annotations

import io
import os
from pathlib import Path
import tarfile
import zipfile

import pytest

from relpackager.exceptions import PackagingError
from relpackager.io import extract_archive, is_archive


class TestIsArchive:
    """Tests for archive detection by extension."""

    @pytest.mark.parametrize(
        "name", ["a.zip", "a.ZIP", "a.tar", "a.tar.gz", "a.tgz", "a.tar.xz", "a.tar.bz2"]
    )
    def test_archives(self, name):
        assert is_archive(Path(name))

    @pytest.mark.parametrize("name", ["tool", "tool.exe", "a.gz", "a.zip.sig"])
    def test_not_archives(self, name):
        assert not is_archive(Path(name))


class TestExtractZip:
    """Tests for zip extraction."""

    def test_extracts_members(self, tmp_test_dir, zip_bytes):
        archive = tmp_test_dir / "tool.zip"
        archive.write_bytes(zip_bytes({"tool/README": b"docs", "tool/bin/gh": b"bin"}))
        destination = tmp_test_dir / "out"

        result = extract_archive(archive, destination)

        assert result == destination.resolve()
        assert (destination / "tool" / "README").read_bytes() == b"docs"
        assert (destination / "tool" / "bin" / "gh").read_bytes() == b"bin"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_restores_executable_bit(self, tmp_test_dir, zip_bytes):
        archive = tmp_test_dir / "tool.zip"
        archive.write_bytes(zip_bytes({"gh": b"bin"}, modes={"gh": 0o755}))

        extract_archive(archive, tmp_test_dir / "out")

        assert os.access(tmp_test_dir / "out" / "gh", os.X_OK)

    def test_rejects_path_traversal(self, tmp_test_dir, zip_bytes):
        archive = tmp_test_dir / "evil.zip"
        archive.write_bytes(zip_bytes({"../evil.sh": b"x"}))

        with pytest.raises(PackagingError, match="escapes destination"):
            extract_archive(archive, tmp_test_dir / "out")

        assert not (tmp_test_dir / "evil.sh").exists()

    def test_corrupt_zip_raises(self, tmp_test_dir):
        archive = tmp_test_dir / "broken.zip"
        archive.write_bytes(b"not a zip file")

        with pytest.raises(PackagingError, match="Failed to extract"):
            extract_archive(archive, tmp_test_dir / "out")


class TestExtractTar:
    """Tests for tar extraction."""

    def test_extracts_tar_gz(self, tmp_test_dir, tar_bytes):
        archive = tmp_test_dir / "tool.tar.gz"
        archive.write_bytes(tar_bytes({"tool/gh": b"binary"}))

        extract_archive(archive, tmp_test_dir / "out")

        assert (tmp_test_dir / "out" / "tool" / "gh").read_bytes() == b"binary"

    def test_rejects_path_traversal(self, tmp_test_dir, tar_bytes):
        archive = tmp_test_dir / "evil.tgz"
        archive.write_bytes(tar_bytes({"../../evil.sh": b"x"}))

        with pytest.raises(PackagingError, match="escapes destination"):
            extract_archive(archive, tmp_test_dir / "out")

    def test_rejects_escaping_symlink(self, tmp_test_dir):
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as tf:
            link = tarfile.TarInfo("link")
            link.type = tarfile.SYMTYPE
            link.linkname = "../../etc/passwd"
            tf.addfile(link)
        archive = tmp_test_dir / "evil.tar"
        archive.write_bytes(buffer.getvalue())

        with pytest.raises(PackagingError, match="escapes destination"):
            extract_archive(archive, tmp_test_dir / "out")

    def test_corrupt_tar_raises(self, tmp_test_dir):
        archive = tmp_test_dir / "broken.tar.gz"
        archive.write_bytes(b"not a tarball")

        with pytest.raises(PackagingError):
            extract_archive(archive, tmp_test_dir / "out")


class TestBareFile:
    """Tests for assets that are not archives."""

    def test_copies_file(self, tmp_test_dir):
        asset = tmp_test_dir / "gh-linux-amd64"
        asset.write_bytes(b"\x7fELF")

        extract_archive(asset, tmp_test_dir / "out")

        assert (tmp_test_dir / "out" / "gh-linux-amd64").read_bytes() == b"\x7fELF"
        assert asset.exists()

    def test_zip_detection_uses_extension_not_content(self, tmp_test_dir):
        """Test that a zip without .zip extension is copied, not unpacked."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("inner", b"x")
        asset = tmp_test_dir / "payload.bin"
        asset.write_bytes(buffer.getvalue())

        extract_archive(asset, tmp_test_dir / "out")

        assert (tmp_test_dir / "out" / "payload.bin").exists()
        assert not (tmp_test_dir / "out" / "inner").exists()
