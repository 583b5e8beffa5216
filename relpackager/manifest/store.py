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

"""Manifest persistence and executable lookup for relpackager.

The manifest is the JSON package descriptor of the wrapping package. Two
fields are owned by relpackager:

- version: the normalized version of the wrapped release
- bin: binary name -> path of the executable, relative to the manifest

Every other field is preserved untouched.

Bin entries in the config may be platform-specific. A platform label is
"<system>-<arch>" using the names Node.js popularized (win32, darwin,
linux / x64, arm64, ia32, arm), e.g. "linux-x64".

Example:
    Update bin entries:
        ```python
        from pathlib import Path
        from relpackager.manifest import load_manifest, save_manifest, set_bin_entries

        path = Path("manifest.json")
        manifest = load_manifest(path)
        set_bin_entries(manifest, {"tool": Path("bin/1.2.3/tool")}, path.parent)
        save_manifest(manifest, path)
        ```

"""

from __future__ import annotations

import json
import os
from pathlib import Path
import platform
from typing import Any

from relpackager.exceptions import ConfigError, PackagingError

_SYSTEM_LABELS = {
    "windows": "win32",
    "darwin": "darwin",
    "linux": "linux",
    "freebsd": "freebsd",
}

_MACHINE_LABELS = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "armv7l": "arm",
    "armv6l": "arm",
}


def load_manifest(manifest_file: Path) -> dict[str, Any]:
    """Load the manifest JSON file.

    Args:
        manifest_file: Path to the manifest.

    Returns:
        Parsed manifest dictionary.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or its top
            level is not an object.

    """
    if not manifest_file.exists():
        raise ConfigError(f"Manifest file {str(manifest_file)!r} could not be found.")
    try:
        with open(manifest_file, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as err:
        raise ConfigError(f"Invalid JSON in manifest {manifest_file}: {err}") from err
    if not isinstance(data, dict):
        raise ConfigError(f"Manifest must contain a JSON object: {manifest_file}")
    return data


def save_manifest(manifest: dict[str, Any], manifest_file: Path) -> None:
    """Save the manifest with pretty-printing.

    Writes to a temporary sibling first and renames it into place, so an
    interrupted run never leaves a truncated manifest behind. Key order is
    kept as loaded (package descriptors are edited by hand too).

    Raises:
        PackagingError: If the file cannot be written.

    Note:
        - Uses 2-space indentation for readability
        - Adds trailing newline for git compatibility

    """
    tmp = manifest_file.with_name(manifest_file.name + ".tmp")
    try:
        manifest_file.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=2, ensure_ascii=False)
            f.write("\n")
        tmp.replace(manifest_file)
    except OSError as err:
        raise PackagingError(f"Failed to write manifest {manifest_file}: {err}") from err


def relative_bin_path(target: Path, manifest_dir: Path) -> str:
    """Express target relative to the manifest directory, POSIX style.

    Paths on another drive cannot be made relative and stay absolute.
    """
    try:
        rel = os.path.relpath(target, manifest_dir)
    except ValueError:
        return Path(target).as_posix()
    return "./" + rel.replace("\\", "/")


def set_bin_entries(
    manifest: dict[str, Any],
    entries: dict[str, Path | str],
    manifest_dir: Path,
) -> None:
    """Record executables in the manifest 'bin' mapping (in place)."""
    bin_map = manifest.get("bin")
    if not isinstance(bin_map, dict):
        bin_map = {}
        manifest["bin"] = bin_map
    for name, target in entries.items():
        bin_map[name] = relative_bin_path(Path(target), manifest_dir)


def platform_label(system: str | None = None, machine: str | None = None) -> str:
    """Return the platform label of the running (or given) platform.

    Example:
        >>> platform_label("Linux", "x86_64")
        'linux-x64'
        >>> platform_label("Windows", "AMD64")
        'win32-x64'
    """
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()
    return f"{_SYSTEM_LABELS.get(system, system)}-{_MACHINE_LABELS.get(machine, machine)}"


def resolve_executable(entry: Any, label: str | None = None) -> str | None:
    """Pick the path for a platform from a bin entry.

    An entry is either a plain path string (same on every platform) or a
    mapping keyed by platform label. Lookup order for a mapping: exact
    label ("linux-x64"), system only ("linux"), then "default".

    Returns:
        The path string, or None if nothing matches.

    """
    if isinstance(entry, str):
        return entry or None
    if not isinstance(entry, dict):
        return None

    label = label or platform_label()
    system = label.split("-", 1)[0]
    for key in (label, system, "default"):
        value = entry.get(key)
        if isinstance(value, str) and value:
            return value
    return None
