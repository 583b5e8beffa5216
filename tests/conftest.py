"""
Pytest configuration and shared fixtures for relpackager tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

import io
import json
from pathlib import Path
import tarfile
from typing import Any
import zipfile

import pytest
import yaml

from relpackager.logging import SilentLogger, set_global_logger


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Reset the global logger after each test (the CLI replaces it)."""
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def sample_manifest_data() -> dict[str, Any]:
    """Provide a minimal manifest of a wrapping package."""
    return {
        "name": "gh-wrapper",
        "version": "2.0.0",
        "description": "Wraps the GitHub CLI",
    }


@pytest.fixture
def sample_recipe_data() -> dict[str, Any]:
    """Provide a recipe pointing at a GitHub repository."""
    return {
        "repository": "github:cli/cli",
        "download_url": "https://example.com/{owner}/{name}/{version}/tool.zip",
        "executables": {"gh": "bin/gh"},
    }


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("test.yaml", {"key": "value"})
    """

    def _create(filename: str, data: Any) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def create_manifest(tmp_test_dir: Path):
    """
    Factory fixture for creating manifest files.

    Usage:
        manifest_path = create_manifest({"name": "x"}, "pkg/manifest.json")
    """

    def _create(data: dict[str, Any], filename: str = "manifest.json") -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        return path

    return _create


@pytest.fixture
def package_dir(
    tmp_test_dir: Path,
    create_manifest,
    create_yaml_file,
    sample_manifest_data: dict[str, Any],
    sample_recipe_data: dict[str, Any],
) -> Path:
    """Provide a wrapping package folder with manifest.json and relpack.yaml."""
    create_manifest(sample_manifest_data, "pkg/manifest.json")
    create_yaml_file("pkg/relpack.yaml", sample_recipe_data)
    return tmp_test_dir / "pkg"


@pytest.fixture
def zip_bytes():
    """
    Factory fixture building an in-memory zip archive.

    Usage:
        data = zip_bytes({"bin/gh": b"#!/bin/sh\\n"}, modes={"bin/gh": 0o755})
    """

    def _build(files: dict[str, bytes], modes: dict[str, int] | None = None) -> bytes:
        modes = modes or {}
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            for name, content in files.items():
                info = zipfile.ZipInfo(name)
                info.external_attr = (modes.get(name, 0o644) & 0o777) << 16
                zf.writestr(info, content)
        return buffer.getvalue()

    return _build


@pytest.fixture
def tar_bytes():
    """Factory fixture building an in-memory .tar.gz archive."""

    def _build(files: dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
            for name, content in files.items():
                info = tarfile.TarInfo(name)
                info.size = len(content)
                info.mode = 0o755
                tf.addfile(info, io.BytesIO(content))
        return buffer.getvalue()

    return _build
