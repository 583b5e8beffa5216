"""
Default release plugin for relpackager.

Used for every hook a package's own plugin does not provide. It is driven
entirely by the recipe:

    download_url: "https://github.com/{owner}/{name}/releases/download/{version}/tool-{platform}.tar.gz"
    executables:
      tool:
        linux-x64: "tool"
        win32-x64: "tool.exe"

Without a download_url template the source archive of the tag is fetched.
Without executables no 'bin' entries are produced.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from relpackager.discovery.github_release import GITHUB_BASE_URL, Repository
from relpackager.exceptions import ConfigError, PackagingError
from relpackager.io import extract_archive
from relpackager.logging import get_global_logger
from relpackager.manifest import platform_label, resolve_executable

DEFAULT_DOWNLOAD_URL = GITHUB_BASE_URL + "/{owner}/{name}/archive/refs/tags/{version}.zip"


class DefaultPlugin:
    """Recipe-driven implementation of every plugin hook except
    normalize_version."""

    def __init__(self, config: dict[str, Any] | None = None, label: str | None = None):
        self.config = config or {}
        self.label = label or platform_label()

    def download_url(self, repository: Repository, version: str) -> str | None:
        template = self.config.get("download_url") or DEFAULT_DOWNLOAD_URL
        try:
            return str(template).format(
                owner=repository.owner,
                name=repository.name,
                version=version,
                platform=self.label,
            )
        except (KeyError, IndexError, ValueError) as err:
            raise ConfigError(f"Invalid download_url template {template!r}: {err}") from err

    def process_binary(self, file: Path, folder: Path) -> None:
        extract_archive(file, folder)

    def post_process(
        self, repository: Repository, version: str, folder: Path
    ) -> dict[str, Path | str]:
        executables = self.config.get("executables") or {}
        if not isinstance(executables, dict):
            raise ConfigError("'executables' must be a mapping of names to paths.")

        logger = get_global_logger()
        entries: dict[str, Path | str] = {}
        for name, entry in executables.items():
            relative = resolve_executable(entry, self.label)
            if relative is None:
                logger.verbose("PLUGIN", f"No executable {name!r} for {self.label}")
                continue
            target = folder / relative
            if not target.exists():
                raise PackagingError(
                    f"Executable {name!r} not found in release {version}: {target}"
                )
            entries[name] = target
        return entries
