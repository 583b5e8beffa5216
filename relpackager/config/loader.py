"""
Configuration loading and merging for relpackager.

A wrapping package is described by two files living side by side:

1. **Manifest** (manifest.json by default)
   - The JSON package descriptor consumed by the wrapping package
   - relpackager writes its 'version' and 'bin' fields

2. **Recipe** (relpack.yaml by default)
   - Which repository to wrap and how to turn its release into binaries
   - If absent, a 'relpack' object inside the manifest is used instead

Optional defaults shared by several packages can live in a
defaults/relpack.yaml found by walking upward from the recipe directory.

Merge Behavior
--------------
The loader performs deep merging with "last wins" semantics:
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

Recipe Keys
-----------
    repository: "github:owner/name"      # Required
    plugin: "my_pkg.plugin:github"       # Optional: module:attr or path/to/file.py
    manifest: "manifest.json"            # Optional: manifest file name
    bin_dir: "bin"                       # Optional: folder receiving binaries
    download_url: "https://.../{version}/tool-{version}.tar.gz"   # Optional
    executables:                         # Optional: name -> path in version folder
      tool:
        linux-x64: "tool-linux-amd64/tool"
        win32: "tool.exe"

Error Handling
--------------
- ConfigError: Missing files, YAML parse errors, invalid structure, missing
  repository
- All errors are chained with "from err" for better debugging

Example:
    >>> from pathlib import Path
    >>> from relpackager.config import UpdateOptions, load_package
    >>> ctx = load_package(UpdateOptions(package_path=Path("wrappers/gh")))
    >>> ctx.repository
    Repository(owner='cli', name='cli')
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from relpackager.discovery.github_release import Repository, parse_repository
from relpackager.exceptions import ConfigError
from relpackager.logging import get_global_logger
from relpackager.manifest import load_manifest

DEFAULT_CONFIG_FILE = "relpack.yaml"
DEFAULT_MANIFEST_FILE = "manifest.json"
DEFAULT_BIN_DIR = "bin"
MANIFEST_CONFIG_KEY = "relpack"

# -------------------------------
# Data types
# -------------------------------


class UpdateOperation(Enum):
    """Valid update operations."""

    DEFAULT = "default"
    """Update items as needed."""
    CHECK_ONLY = "checkonly"
    """Check if updates are needed without changing anything; warns if so."""
    FORCE = "force"
    """Update items, even if unnecessary."""


@dataclass(frozen=True)
class UpdateOptions:
    """Options describing where the wrapping package lives and what to do.

    Attributes:
        operation: The operation mode.
        package_path: Folder containing the manifest. Defaults to the
            current working directory.
        config_file: Recipe file name or path, relative to package_path.
        manifest_file: Manifest file name or path, relative to
            package_path. Overrides the recipe's 'manifest' key.

    """

    operation: UpdateOperation = UpdateOperation.DEFAULT
    package_path: Path | None = None
    config_file: str | Path = DEFAULT_CONFIG_FILE
    manifest_file: str | Path | None = None


@dataclass(frozen=True)
class PackageContext:
    """Everything resolved about one wrapping package.

    Attributes:
        package_dir: Absolute folder of the package.
        config: Effective (merged) recipe configuration.
        config_path: Recipe file, or None if the manifest carried the config.
        manifest_path: Absolute path of the manifest file.
        manifest: Parsed manifest (mutable; written back by the caller).
        repository: Repository to take releases from.

    """

    package_dir: Path
    config: dict[str, Any]
    config_path: Path | None
    manifest_path: Path
    manifest: dict[str, Any]
    repository: Repository

    @property
    def bin_dir(self) -> Path:
        return self.package_dir / str(self.config.get("bin_dir") or DEFAULT_BIN_DIR)

    @property
    def name(self) -> str:
        return str(self.manifest.get("name") or self.repository.name)


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """Load a YAML file and return the parsed Python object.

    Raises:
        ConfigError: When the file does not exist, is invalid YAML, or is
            empty.
    """
    if not p.exists():
        raise ConfigError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


def _find_defaults_file(start_dir: Path) -> Path | None:
    """Walk upward from start_dir looking for defaults/relpack.yaml."""
    for parent in [start_dir] + list(start_dir.parents):
        candidate = parent / "defaults" / DEFAULT_CONFIG_FILE
        if candidate.exists():
            return candidate
    return None


def _print_yaml_content(data: dict[str, Any]) -> None:
    """Dump merged content through the debug logger."""
    logger = get_global_logger()
    yaml_str = yaml.dump(data, default_flow_style=False, sort_keys=False)
    for line in yaml_str.split("\n"):
        if line.strip():
            logger.debug("CONFIG", line)


# -------------------------------
# Public API
# -------------------------------


def load_effective_config(
    recipe: Path | dict[str, Any],
    *,
    search_dir: Path | None = None,
) -> dict[str, Any]:
    """Load a recipe and merge it on top of shared defaults.

    Args:
        recipe: Path to the recipe YAML, or an already parsed recipe (the
            'relpack' object of a manifest).
        search_dir: Where to start looking for defaults. Defaults to the
            recipe's directory; required when recipe is a dict.

    Returns:
        The merged configuration dict.

    Raises:
        ConfigError: On missing files, YAML parse errors, or a top level
            that is not a mapping.
    """
    logger = get_global_logger()

    if isinstance(recipe, Path):
        recipe_path = recipe.resolve()
        logger.verbose("CONFIG", f"Loading recipe: {recipe_path}")
        recipe_obj = _load_yaml_file(recipe_path)
        search_dir = search_dir or recipe_path.parent
    else:
        recipe_obj = recipe

    if not isinstance(recipe_obj, dict):
        raise ConfigError(f"top-level recipe must be a mapping (dict): {recipe}")

    merged: dict[str, Any] = {}
    defaults_path = _find_defaults_file(search_dir) if search_dir else None
    if defaults_path:
        logger.verbose("CONFIG", f"Loading defaults: {defaults_path}")
        defaults = _load_yaml_file(defaults_path)
        if not isinstance(defaults, dict):
            raise ConfigError(f"top-level YAML must be a mapping (dict): {defaults_path}")
        merged = _deep_merge_dicts(merged, defaults)

    merged = _deep_merge_dicts(merged, recipe_obj)
    logger.verbose(
        "CONFIG", f"Final config has keys: {', '.join(merged.keys()) or '(none)'}"
    )
    _print_yaml_content(merged)
    return merged


def _resolve(base: Path, value: str | Path) -> Path:
    p = Path(value)
    return p if p.is_absolute() else (base / p).resolve()


def load_package(options: UpdateOptions | None = None) -> PackageContext:
    """Resolve the manifest, recipe and repository of a wrapping package.

    Steps
      1) Resolve the package folder (options.package_path or cwd).
      2) Load the recipe (relpack.yaml) merged with defaults; fall back to
         the manifest's 'relpack' object if there is no recipe file.
      3) Load the manifest (options.manifest_file > recipe 'manifest' >
         manifest.json).
      4) Parse the repository notation.

    Raises:
        ConfigError: If the manifest is missing, no configuration is found,
            or the repository is missing or malformed.
    """
    options = options or UpdateOptions()
    if not isinstance(options.operation, UpdateOperation):
        raise ConfigError(f"Invalid update operation: {options.operation!r}")

    package_dir = Path(options.package_path or Path.cwd()).resolve()
    config_path: Path | None = _resolve(package_dir, options.config_file)

    if config_path.exists():
        config = load_effective_config(config_path)
        manifest_name = options.manifest_file or config.get("manifest")
        manifest_path = _resolve(package_dir, manifest_name or DEFAULT_MANIFEST_FILE)
        manifest = load_manifest(manifest_path)
    else:
        manifest_path = _resolve(
            package_dir, options.manifest_file or DEFAULT_MANIFEST_FILE
        )
        manifest = load_manifest(manifest_path)
        embedded = manifest.get(MANIFEST_CONFIG_KEY)
        if not isinstance(embedded, dict):
            raise ConfigError(
                f"No recipe {config_path.name!r} found and there is no "
                f"{MANIFEST_CONFIG_KEY!r} object in {manifest_path}."
            )
        get_global_logger().verbose(
            "CONFIG", f"Using {MANIFEST_CONFIG_KEY!r} object from {manifest_path.name}"
        )
        config = load_effective_config(embedded, search_dir=package_dir)
        config_path = None

    repository = parse_repository(config.get("repository"))

    return PackageContext(
        package_dir=package_dir,
        config=config,
        config_path=config_path,
        manifest_path=manifest_path,
        manifest=manifest,
        repository=repository,
    )
