"""
Tests for relpackager.core module.

Tests orchestration including:
- should_abort semantics for every operation mode
- update_binary (download, wipe, unpack, manifest bin entries)
- update_package (normalize, compare, bump, binaries)
- get_latest_release and get_executable
"""

from __future__ import annotations

import json
from pathlib import Path
import tempfile

import pytest

from relpackager.config import UpdateOperation, UpdateOptions
from relpackager.core import (
    get_executable,
    get_latest_release,
    should_abort,
    update_binary,
    update_package,
)
from relpackager.exceptions import ConfigError, NetworkError
from relpackager.logging import set_global_logger

LATEST = "https://github.com/cli/cli/releases/latest"


def _tag_url(tag: str) -> str:
    return f"https://github.com/cli/cli/releases/tag/{tag}"


def _asset_url(tag: str) -> str:
    return f"https://example.com/cli/cli/{tag}/tool.zip"


def _mock_release(requests_mock, tag: str, asset: bytes | None = None) -> None:
    requests_mock.get(LATEST, status_code=302, headers={"Location": _tag_url(tag)})
    requests_mock.get(_tag_url(tag), text="release page")
    if asset is not None:
        requests_mock.get(_asset_url(tag), content=asset)


def _read_manifest(package_dir: Path) -> dict:
    return json.loads((package_dir / "manifest.json").read_text(encoding="utf-8"))


class RecordingLogger:
    """Logger collecting messages for assertions."""

    def __init__(self):
        self.messages: list[str] = []
        self.warnings: list[str] = []

    def step(self, step, total, message):
        pass

    def warning(self, message):
        self.warnings.append(message)

    def verbose(self, prefix, message):
        self.messages.append(message)

    def debug(self, prefix, message):
        pass


@pytest.fixture
def recorder() -> RecordingLogger:
    logger = RecordingLogger()
    set_global_logger(logger)
    return logger


@pytest.fixture
def private_tempdir(tmp_test_dir, monkeypatch) -> Path:
    """Route tempfile.mkdtemp into a folder the test can inspect."""
    folder = tmp_test_dir / "tmp"
    folder.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(folder))
    return folder


class TestShouldAbort:
    """Tests for the abort decision of an update step."""

    def test_current_aborts(self, recorder):
        assert should_abort(True, UpdateOperation.DEFAULT, "Up to date", "Outdated", "x")
        assert recorder.messages == ["Up to date (x)."]

    def test_current_is_forced(self, recorder):
        assert not should_abort(True, UpdateOperation.FORCE, "Up to date", "Outdated", "x")
        assert recorder.messages == ["Up to date (x), forcing update anyway."]

    def test_current_in_check_only_aborts(self, recorder):
        assert should_abort(True, UpdateOperation.CHECK_ONLY, "Up to date", "Outdated")
        assert recorder.warnings == []

    def test_outdated_continues(self, recorder):
        assert not should_abort(False, UpdateOperation.DEFAULT, "Up to date", "Outdated", "x")
        assert not should_abort(False, UpdateOperation.FORCE, "Up to date", "Outdated", "x")
        assert recorder.warnings == []

    def test_outdated_in_check_only_warns_and_aborts(self, recorder):
        assert should_abort(False, UpdateOperation.CHECK_ONLY, "Up to date", "Outdated", "x")
        assert recorder.warnings == ["Outdated (x)"]

    def test_default_detail(self, recorder):
        should_abort(False, UpdateOperation.DEFAULT, "Up to date", "Outdated", "  ")
        assert recorder.messages == ["Outdated (condition evaluates to [False])"]


class TestUpdateBinary:
    """Tests for update_binary."""

    def test_downloads_latest_release(
        self, package_dir, zip_bytes, requests_mock, private_tempdir
    ):
        _mock_release(requests_mock, "v2.62.0", zip_bytes({"bin/gh": b"gh"}))

        result = update_binary(UpdateOptions(package_path=package_dir))

        bin_path = package_dir.resolve() / "bin" / "v2.62.0"
        assert result.version == "v2.62.0"
        assert result.bin_path == bin_path
        assert result.updated
        assert result.status == "updated"
        assert result.download_url == _asset_url("v2.62.0")
        assert len(result.sha256) == 64
        assert (bin_path / "bin" / "gh").read_bytes() == b"gh"
        assert result.executables == {"gh": "./bin/v2.62.0/bin/gh"}
        assert _read_manifest(package_dir)["bin"] == {"gh": "./bin/v2.62.0/bin/gh"}
        assert list(private_tempdir.iterdir()) == []

    def test_previous_versions_are_removed(self, package_dir, zip_bytes, requests_mock):
        old = package_dir / "bin" / "v1.0.0"
        old.mkdir(parents=True)
        (old / "gh").write_bytes(b"old")
        _mock_release(requests_mock, "v2.0.0", zip_bytes({"bin/gh": b"new"}))

        update_binary(UpdateOptions(package_path=package_dir))

        assert not old.exists()
        assert (package_dir / "bin" / "v2.0.0" / "bin" / "gh").exists()

    def test_existing_folder_is_up_to_date(self, package_dir, requests_mock):
        (package_dir / "bin" / "v1.0.0").mkdir(parents=True)

        result = update_binary(UpdateOptions(package_path=package_dir), "v1.0.0")

        assert not result.updated
        assert result.status == "up-to-date"
        assert not requests_mock.called
        assert "bin" not in _read_manifest(package_dir)

    def test_check_only_reports_outdated(self, package_dir, requests_mock, recorder):
        options = UpdateOptions(
            operation=UpdateOperation.CHECK_ONLY, package_path=package_dir
        )

        result = update_binary(options, "v1.0.0")

        assert result.status == "outdated"
        assert not result.updated
        assert not (package_dir / "bin").exists()
        assert len(recorder.warnings) == 1
        assert "Binaries need to be updated" in recorder.warnings[0]

    def test_force_reinstalls(self, package_dir, zip_bytes, requests_mock):
        (package_dir / "bin" / "v1.0.0").mkdir(parents=True)
        requests_mock.get(_asset_url("v1.0.0"), content=zip_bytes({"bin/gh": b"gh"}))
        options = UpdateOptions(operation=UpdateOperation.FORCE, package_path=package_dir)

        result = update_binary(options, "v1.0.0")

        assert result.updated
        assert result.status == "forced"
        assert (package_dir / "bin" / "v1.0.0" / "bin" / "gh").exists()

    def test_plugin_without_download(self, package_dir, requests_mock):
        """Test that post_process still runs when nothing is downloaded."""
        seen = {}

        class LocalPlugin:
            def download_url(self, repository, version):
                return None

            def post_process(self, repository, version, folder):
                seen["folder"] = folder
                return {"tool": folder / "tool"}

        result = update_binary(UpdateOptions(package_path=package_dir), "v3", LocalPlugin())

        assert result.download_url is None
        assert result.sha256 is None
        assert seen["folder"] == package_dir.resolve() / "bin" / "v3"
        assert _read_manifest(package_dir)["bin"] == {"tool": "./bin/v3/tool"}
        assert not requests_mock.called

    def test_async_hooks_are_awaited(self, package_dir, requests_mock):
        class AsyncPlugin:
            async def download_url(self, repository, version):
                return f"https://example.com/{repository.name}-{version}.zip"

            async def process_binary(self, file, folder):
                (folder / "tool").write_bytes(file.read_bytes())

            async def post_process(self, repository, version, folder):
                return {"tool": folder / "tool"}

        requests_mock.get("https://example.com/cli-v3.zip", content=b"asset")

        result = update_binary(UpdateOptions(package_path=package_dir), "v3", AsyncPlugin())

        assert result.download_url == "https://example.com/cli-v3.zip"
        assert (package_dir / "bin" / "v3" / "tool").read_bytes() == b"asset"
        assert _read_manifest(package_dir)["bin"] == {"tool": "./bin/v3/tool"}

    def test_async_plugin_without_download(self, package_dir, requests_mock):
        class AsyncPlugin:
            async def download_url(self, repository, version):
                return None

            async def post_process(self, repository, version, folder):
                return {}

        result = update_binary(UpdateOptions(package_path=package_dir), "v3", AsyncPlugin())

        assert result.download_url is None
        assert result.executables == {}
        assert not requests_mock.called

    def test_tag_with_slash_is_one_folder(self, package_dir, requests_mock):
        class LocalPlugin:
            def download_url(self, repository, version):
                return None

            def post_process(self, repository, version, folder):
                return {}

        result = update_binary(
            UpdateOptions(package_path=package_dir), "release/1.0", LocalPlugin()
        )

        assert result.version == "release/1.0"
        assert result.bin_path == package_dir.resolve() / "bin" / "release_1.0"

    @pytest.mark.parametrize("tag", ["..", "."])
    def test_unusable_tag_raises(self, package_dir, tag):
        with pytest.raises(ConfigError, match="folder name"):
            update_binary(UpdateOptions(package_path=package_dir), tag)

    def test_no_entries_leaves_manifest_alone(self, package_dir, zip_bytes, requests_mock):
        class NoBinaries:
            def post_process(self, repository, version, folder):
                return {}

        requests_mock.get(_asset_url("v1"), content=zip_bytes({"x": b"x"}))
        before = (package_dir / "manifest.json").read_text(encoding="utf-8")

        result = update_binary(UpdateOptions(package_path=package_dir), "v1", NoBinaries())

        assert result.executables == {}
        assert (package_dir / "manifest.json").read_text(encoding="utf-8") == before

    def test_download_failure_keeps_binaries(
        self, package_dir, requests_mock, private_tempdir
    ):
        old = package_dir / "bin" / "v1.0.0"
        old.mkdir(parents=True)
        requests_mock.get(_asset_url("v2.0.0"), status_code=404)

        with pytest.raises(NetworkError):
            update_binary(UpdateOptions(package_path=package_dir), "v2.0.0")

        assert old.exists()
        assert list(private_tempdir.iterdir()) == []

    def test_bin_dir_outside_package_raises(self, package_dir, create_yaml_file):
        create_yaml_file("pkg/relpack.yaml", {"repository": "github:cli/cli", "bin_dir": ".."})

        with pytest.raises(ConfigError, match="bin_dir"):
            update_binary(UpdateOptions(package_path=package_dir), "v1")


class TestUpdatePackage:
    """Tests for update_package."""

    def test_updates_version_and_binaries(self, package_dir, zip_bytes, requests_mock):
        _mock_release(requests_mock, "2.62.0", zip_bytes({"bin/gh": b"gh"}))

        result = update_package(UpdateOptions(package_path=package_dir))

        manifest = _read_manifest(package_dir)
        assert result.updated
        assert result.status == "updated"
        assert result.tag == "2.62.0"
        assert result.latest_version == "2.62.0"
        assert result.current_version == "2.0.0"
        assert result.binary is not None and result.binary.version == "2.62.0"
        assert manifest["version"] == "2.62.0"
        assert manifest["bin"] == {"gh": "./bin/2.62.0/bin/gh"}
        assert manifest["description"] == "Wraps the GitHub CLI"

    def test_tag_is_normalized(self, package_dir, zip_bytes, requests_mock):
        _mock_release(requests_mock, "2.62.1.4", zip_bytes({"bin/gh": b"gh"}))

        result = update_package(UpdateOptions(package_path=package_dir))

        assert result.latest_version == "2.62.1-4"
        assert _read_manifest(package_dir)["version"] == "2.62.1-4"
        assert (package_dir / "bin" / "2.62.1.4").is_dir()

    def test_plugin_override_normalizes(self, package_dir, zip_bytes, requests_mock):
        class StripV:
            async def normalize_version(self, version, builtin):
                return builtin(version.lstrip("v"))

        _mock_release(requests_mock, "v2.62.0", zip_bytes({"bin/gh": b"gh"}))

        result = update_package(UpdateOptions(package_path=package_dir), StripV())

        assert result.latest_version == "2.62.0"
        assert result.binary.bin_path.name == "v2.62.0"

    def test_up_to_date(self, package_dir, requests_mock):
        _mock_release(requests_mock, "2.0.0")

        result = update_package(UpdateOptions(package_path=package_dir))

        assert not result.updated
        assert result.status == "up-to-date"
        assert result.binary is None

    def test_older_release_is_not_a_downgrade(self, package_dir, requests_mock):
        _mock_release(requests_mock, "1.9.0")

        result = update_package(UpdateOptions(package_path=package_dir))

        assert not result.updated
        assert _read_manifest(package_dir)["version"] == "2.0.0"

    def test_check_only(self, package_dir, requests_mock, recorder):
        _mock_release(requests_mock, "3.0.0")
        options = UpdateOptions(
            operation=UpdateOperation.CHECK_ONLY, package_path=package_dir
        )

        result = update_package(options)

        assert result.status == "outdated"
        assert _read_manifest(package_dir)["version"] == "2.0.0"
        assert "latest version is [3.0.0]" in recorder.warnings[0]

    def test_force_when_current(self, package_dir, zip_bytes, requests_mock):
        _mock_release(requests_mock, "2.0.0", zip_bytes({"bin/gh": b"gh"}))
        options = UpdateOptions(operation=UpdateOperation.FORCE, package_path=package_dir)

        result = update_package(options)

        assert result.updated
        assert result.status == "forced"
        assert result.binary.status == "updated"

    def test_missing_current_version(self, package_dir, zip_bytes, requests_mock, create_manifest):
        create_manifest({"name": "gh-wrapper"}, "pkg/manifest.json")
        _mock_release(requests_mock, "0.1.0", zip_bytes({"bin/gh": b"gh"}))

        result = update_package(UpdateOptions(package_path=package_dir))

        assert result.current_version is None
        assert _read_manifest(package_dir)["version"] == "0.1.0"

    def test_invalid_override_output_raises(self, package_dir, requests_mock):
        async def broken(version, builtin):
            return "latest"

        class Plugin:
            normalize_version = staticmethod(broken)

        _mock_release(requests_mock, "2.62.0")

        with pytest.raises(ConfigError, match="invalid version 'latest'"):
            update_package(UpdateOptions(package_path=package_dir), Plugin())


class TestLatestRelease:
    """Tests for get_latest_release."""

    def test_builtin_normalization(self, requests_mock):
        _mock_release(requests_mock, "v2.62.0")

        info = get_latest_release("github:cli/cli")

        assert info.repository == "github:cli/cli"
        assert info.tag == "v2.62.0"
        assert info.version == "0.0.0-v2.62.0"
        assert info.url == _tag_url("v2.62.0")

    def test_with_override(self, requests_mock):
        async def strip_v(version, builtin):
            return builtin(version.lstrip("v"))

        _mock_release(requests_mock, "v2.62")

        assert get_latest_release("github:cli/cli", strip_v).version == "2.62.0"

    def test_invalid_repository(self):
        with pytest.raises(ConfigError):
            get_latest_release("cli/cli")


class TestGetExecutable:
    """Tests for get_executable."""

    def test_relative_entry(self, create_manifest, tmp_test_dir):
        create_manifest({"bin": {"gh": "./bin/v1/gh"}}, "pkg/manifest.json")

        path = get_executable("gh", UpdateOptions(package_path=tmp_test_dir / "pkg"))

        assert path == (tmp_test_dir / "pkg" / "bin" / "v1" / "gh").resolve()

    def test_platform_entry(self, create_manifest, tmp_test_dir):
        create_manifest(
            {"bin": {"gh": {"win32": "gh.exe", "linux": "gh"}}}, "pkg/manifest.json"
        )
        options = UpdateOptions(package_path=tmp_test_dir / "pkg")

        assert get_executable("gh", options, "win32-x64").name == "gh.exe"
        assert get_executable("gh", options, "linux-arm64").name == "gh"
        assert get_executable("gh", options, "darwin-arm64") is None

    def test_absolute_entry(self, create_manifest, tmp_test_dir):
        target = (tmp_test_dir / "elsewhere" / "gh").resolve()
        create_manifest({"bin": {"gh": str(target)}}, "pkg/manifest.json")

        assert get_executable("gh", UpdateOptions(package_path=tmp_test_dir / "pkg")) == target

    def test_missing_entries(self, create_manifest, tmp_test_dir):
        create_manifest({"name": "x"}, "pkg/manifest.json")
        options = UpdateOptions(package_path=tmp_test_dir / "pkg")

        assert get_executable("gh", options) is None

    def test_missing_manifest_raises(self, tmp_test_dir):
        with pytest.raises(ConfigError, match="could not be found"):
            get_executable("gh", UpdateOptions(package_path=tmp_test_dir))
