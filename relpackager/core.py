# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Core orchestration for relpackager.

This module provides the high-level functions that keep a wrapping package
in sync with the latest GitHub release of the tool it wraps.

Update Flow:

- **update_package**: Resolve the latest release tag, normalize it into a
    SemVer version, compare it with the manifest 'version' and, when newer,
    write the new version and refresh the binaries.
- **update_binary**: Make sure bin/<tag> holds the binaries of a release.
    The asset is downloaded into a temporary folder, the bin folder is
    wiped, and the plugin unpacks the asset. The executables the plugin
    reports are written to the manifest 'bin' mapping.

Operation Modes (UpdateOperation):

- DEFAULT: Update only what is outdated.
- CHECK_ONLY: Report what is outdated (as a warning) without touching
    anything.
- FORCE: Update even if everything is current.

Design Principles:

- Each function has a single, clear responsibility
- Functions return structured data (dataclasses) for easy testing and extension
- Error handling uses exceptions; CLI layer formats for user display
- Plugins are passed explicitly or named in the recipe; never cached globally

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from relpackager.config import UpdateOperation, UpdateOptions
        from relpackager.core import update_package

        result = update_package(
            UpdateOptions(
                operation=UpdateOperation.CHECK_ONLY,
                package_path=Path("wrappers/gh"),
            )
        )
        print(result.status, result.latest_version)
        ```

"""

from __future__ import annotations

from pathlib import Path
import re
import shutil
import tempfile
from typing import Any

from relpackager.config import (
    PackageContext,
    UpdateOperation,
    UpdateOptions,
    load_package,
)
from relpackager.config.loader import DEFAULT_MANIFEST_FILE
from relpackager.discovery import (
    Repository,
    get_latest_release_tag,
    get_latest_release_url,
    parse_repository,
    tag_from_release_url,
)
from relpackager.exceptions import ConfigError
from relpackager.io import download_file
from relpackager.logging import get_global_logger
from relpackager.manifest import (
    load_manifest,
    resolve_executable,
    save_manifest,
    set_bin_entries,
)
from relpackager.plugins import call_hook, resolve_plugin
from relpackager.results import BinaryResult, PackageResult, ReleaseInfo
from relpackager.versioning import Override, get_normalized_version_sync, is_newer


def should_abort(
    condition: bool,
    operation: UpdateOperation,
    true_text: str,
    false_text: str,
    detail: str | None = None,
) -> bool:
    """Decide whether an update step stops here, and report why.

    Args:
        condition: True if the item is already current.
        operation: The operation mode to consider.
        true_text: Text reported when condition is True.
        false_text: Text reported when condition is False.
        detail: Details appended in parentheses (defaults to the value of
            condition).

    Returns:
        True if the caller should stop: the item is current (unless forced),
        or it is outdated in check-only mode.

    """
    logger = get_global_logger()
    if not detail or not detail.strip():
        detail = f"condition evaluates to [{condition}]"

    if condition:
        msg = f"{true_text} ({detail})"
        if operation is UpdateOperation.FORCE:
            logger.verbose("UPDATE", f"{msg}, forcing update anyway.")
            return False
        logger.verbose("UPDATE", f"{msg}.")
        return True

    msg = f"{false_text} ({detail})"
    if operation is UpdateOperation.CHECK_ONLY:
        logger.warning(msg)
        return True
    logger.verbose("UPDATE", msg)
    return False


def _status(condition: bool, operation: UpdateOperation) -> str:
    if condition:
        return "forced" if operation is UpdateOperation.FORCE else "up-to-date"
    return "outdated" if operation is UpdateOperation.CHECK_ONLY else "updated"


def _check_bin_dir(context: PackageContext) -> Path:
    bin_dir = context.bin_dir.resolve()
    if bin_dir == context.package_dir or context.package_dir not in bin_dir.parents:
        raise ConfigError(
            f"bin_dir must be a subfolder of the package folder, got {bin_dir}"
        )
    return bin_dir


def _folder_name(tag: str) -> str:
    """Map a release tag to one path component ('a/b' -> 'a_b')."""
    name = re.sub(r"[/\\]", "_", tag.strip())
    if name in ("", ".", ".."):
        raise ConfigError(f"Release tag {tag!r} cannot be used as a folder name.")
    return name


def update_binary(
    options: UpdateOptions | None = None,
    version: str | None = None,
    plugin: Any = None,
) -> BinaryResult:
    """Update the binaries the package wraps.

    Args:
        options: Where the package lives and what to do. Defaults to the
            current working directory and UpdateOperation.DEFAULT.
        version: Release tag to install. Defaults to the latest release.
        plugin: Plugin object overriding the recipe's plugin.

    Returns:
        A BinaryResult describing what happened.

    Raises:
        ConfigError: On configuration, repository or plugin problems.
        NetworkError: If the release cannot be resolved or downloaded.
        PackagingError: If unpacking or writing the manifest fails.

    """
    logger = get_global_logger()
    options = options or UpdateOptions()

    logger.step(1, 4, "Loading package...")
    context = load_package(options)
    resolved = resolve_plugin(plugin, context)
    bin_dir = _check_bin_dir(context)

    logger.step(2, 4, "Resolving release...")
    if not version:
        version = get_latest_release_tag(context.repository)
    bin_path = bin_dir / _folder_name(version)

    exists = bin_path.exists()
    if should_abort(
        exists,
        options.operation,
        "Binaries are up to date",
        "Binaries need to be updated",
        f"binary folder '{bin_path}'",
    ):
        return BinaryResult(
            version=version,
            bin_path=bin_path,
            updated=False,
            status=_status(exists, options.operation),
        )

    logger.step(3, 4, "Downloading release asset...")
    url = call_hook(resolved.download_url, context.repository, version)
    sha256 = None
    if url and str(url).strip():
        prefix = re.sub(r"[^\w.-]", "_", f"_temp_relpack-{context.name}-")
        temp_dir = Path(tempfile.mkdtemp(prefix=prefix))
        try:
            file_path, sha256, _ = download_file(str(url), temp_dir)

            if bin_dir.exists():
                logger.verbose("FILE", f"Removing previous binaries: {bin_dir}")
                shutil.rmtree(bin_dir)
            bin_path.mkdir(parents=True, exist_ok=True)

            call_hook(resolved.process_binary, file_path, bin_path)
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)
            logger.debug("FILE", f"Deleted temporary download folder {temp_dir}")
    else:
        url = None
        logger.verbose("UPDATE", "No downloads required.")

    logger.step(4, 4, "Updating manifest...")
    entries = (
        call_hook(resolved.post_process, context.repository, version, bin_path) or {}
    )
    written: dict[str, str] = {}
    if entries:
        set_bin_entries(context.manifest, entries, context.manifest_path.parent)
        save_manifest(context.manifest, context.manifest_path)
        written = {name: context.manifest["bin"][name] for name in entries}
        logger.verbose(
            "MANIFEST", f"Updated binaries in manifest: {context.manifest_path}"
        )
    else:
        logger.verbose("MANIFEST", "No binaries need to be updated.")

    return BinaryResult(
        version=version,
        bin_path=bin_path,
        updated=True,
        download_url=url,
        sha256=sha256,
        executables=written,
        status=_status(exists, options.operation),
    )


def update_package(
    options: UpdateOptions | None = None,
    plugin: Any = None,
) -> PackageResult:
    """Update the package to the latest release of the wrapped repository.

    Steps
      1) Resolve the latest release tag.
      2) Normalize it (plugin override first, built-in algorithm otherwise).
      3) Compare with the manifest 'version'.
      4) Write the new version and update the binaries.

    Args:
        options: Where the package lives and what to do.
        plugin: Plugin object overriding the recipe's plugin.

    Returns:
        A PackageResult describing what happened.

    Raises:
        ConfigError: On configuration problems, or if a plugin override
            returns a version that is not valid SemVer.
        NetworkError: If the release cannot be resolved or downloaded.
        PackagingError: If unpacking or writing the manifest fails.

    """
    logger = get_global_logger()
    options = options or UpdateOptions()

    context = load_package(options)
    resolved = resolve_plugin(plugin, context)

    tag = get_latest_release_tag(context.repository)
    latest = get_normalized_version_sync(tag, resolved.normalize_version)
    logger.verbose("UPDATE", f"Latest release {tag} normalizes to {latest}")

    current = context.manifest.get("version")
    current = current if isinstance(current, str) else None
    try:
        need_update = is_newer(latest, current)
    except ValueError as err:
        raise ConfigError(
            f"Plugin {resolved.name!r} returned an invalid version {latest!r}: {err}"
        ) from err

    if should_abort(
        not need_update,
        options.operation,
        "Package is up to date",
        "Package needs update",
        f"current version is [{current}], latest version is [{latest}]",
    ):
        return PackageResult(
            tag=tag,
            latest_version=latest,
            current_version=current,
            updated=False,
            status=_status(not need_update, options.operation),
        )

    context.manifest["version"] = latest
    save_manifest(context.manifest, context.manifest_path)
    logger.verbose(
        "MANIFEST", f"Updated version in manifest: {context.manifest_path}"
    )

    binary = update_binary(options, tag, plugin)

    return PackageResult(
        tag=tag,
        latest_version=latest,
        current_version=current,
        updated=True,
        binary=binary,
        status=_status(not need_update, options.operation),
    )


def get_latest_release(
    repository: str | Repository,
    override: Override | None = None,
) -> ReleaseInfo:
    """Resolve and normalize the latest release of a repository.

    Args:
        repository: "github:owner/name" notation or a Repository.
        override: Optional version override (see relpackager.versioning).

    Returns:
        ReleaseInfo with the raw tag and its normalized version.

    """
    if not isinstance(repository, Repository):
        repository = parse_repository(repository)
    url = get_latest_release_url(repository.owner, repository.name)
    tag = tag_from_release_url(url)
    return ReleaseInfo(
        repository=str(repository),
        tag=tag,
        version=get_normalized_version_sync(tag, override),
        url=url,
    )


def get_executable(
    name: str,
    options: UpdateOptions | None = None,
    label: str | None = None,
) -> Path | None:
    """Return the absolute path of an executable recorded in the manifest.

    Only the manifest is read; the package needs no recipe for this.

    Args:
        name: Binary name (key of the manifest 'bin' mapping).
        options: Where the package lives.
        label: Platform label for per-platform entries. Defaults to the
            running platform.

    Returns:
        The absolute path, or None if the manifest has no such entry.

    Raises:
        ConfigError: If the manifest cannot be found or parsed.

    """
    options = options or UpdateOptions()
    package_dir = Path(options.package_path or Path.cwd()).resolve()
    manifest_path = package_dir / (options.manifest_file or DEFAULT_MANIFEST_FILE)
    manifest = load_manifest(manifest_path)

    bin_map = manifest.get("bin")
    if not isinstance(bin_map, dict):
        return None

    relative = resolve_executable(bin_map.get(name), label)
    if not relative:
        return None
    path = Path(relative)
    if not path.is_absolute():
        path = (manifest_path.parent / path).resolve()
    return path
