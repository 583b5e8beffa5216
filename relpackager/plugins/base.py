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

"""Release plugin protocol and loading for relpackager.

A plugin customizes how a release becomes binaries inside the wrapping
package. It is any object (or module) exposing some of these hooks:

- download_url(repository, version): URL of the asset to fetch, or None
  to skip downloading
- process_binary(file, folder): Turn the downloaded file into the contents
  of the version folder
- post_process(repository, version, folder): Return a mapping of binary
  names to executable paths for the manifest 'bin' field
- normalize_version(version, builtin): Async override of the version
  normalization engine

Every hook is optional and may be a plain or an async method. Missing
hooks are taken from DefaultPlugin, except normalize_version, which simply
stays unset so the built-in algorithm runs.

Design Philosophy:
    - Plugins are Protocol-shaped (structural subtyping, not inheritance)
    - Plugins are passed explicitly; there is no process-wide plugin cache
    - A plugin can be named in the recipe as "module:attribute" or as a
      path to a .py file

Example:
    A plugin file next to the recipe:
        ```python
        # plugin.py
        class Plugin:
            def download_url(self, repository, version):
                return (
                    f"https://github.com/{repository.owner}/{repository.name}"
                    f"/releases/download/{version}/tool-linux-amd64.tar.gz"
                )

            async def normalize_version(self, version, builtin):
                return builtin(version.lstrip("v"))

        plugin = Plugin()
        ```

    And in relpack.yaml:
        ```yaml
        repository: "github:owner/tool"
        plugin: "plugin.py"
        ```

"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import importlib
import importlib.util
import inspect
from pathlib import Path
import sys
from typing import TYPE_CHECKING, Any, Protocol

from relpackager.discovery.github_release import Repository
from relpackager.exceptions import ConfigError
from relpackager.logging import get_global_logger
from relpackager.versioning import VersionOverride

from .default import DefaultPlugin

if TYPE_CHECKING:
    from relpackager.config import PackageContext

DEFAULT_PLUGIN_ATTRIBUTE = "plugin"

# -------------------------------
# Plugin Protocol
# -------------------------------


class ReleasePlugin(Protocol):
    """Protocol for release plugins.

    Implementations may provide any subset of these methods. See the module
    docstring for what each hook is expected to do.
    """

    def download_url(self, repository: Repository, version: str) -> str | None:
        ...

    def process_binary(self, file: Path, folder: Path) -> None:
        ...

    def post_process(
        self, repository: Repository, version: str, folder: Path
    ) -> dict[str, Path | str]:
        ...


@dataclass(frozen=True)
class ResolvedPlugin:
    """A plugin with every hook filled in.

    Attributes:
        name: Human readable origin of the plugin (for logging).
        download_url: Hook returning the asset URL (or None).
        process_binary: Hook unpacking the asset into a folder.
        post_process: Hook returning binary name to path entries.
        normalize_version: Version override, or None for the built-in
            algorithm.

    """

    name: str
    download_url: Callable[[Repository, str], str | None]
    process_binary: Callable[[Path, Path], None]
    post_process: Callable[[Repository, str, Path], dict[str, Path | str]]
    normalize_version: VersionOverride | None = None


async def _wait_for(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def call_hook(hook: Callable[..., Any], *args: Any) -> Any:
    """Call a plugin hook and return its result.

    Async hooks are run to completion on a fresh event loop, so this must
    not be called from inside a running event loop.
    """
    result = hook(*args)
    if inspect.isawaitable(result):
        result = asyncio.run(_wait_for(result))
    return result


# -------------------------------
# Loading
# -------------------------------


def _split_spec(spec: str) -> tuple[str, str | None, bool]:
    """Split a plugin spec into (target, attribute, is_file)."""
    if spec.endswith(".py"):
        return spec, None, True
    target, sep, attribute = spec.rpartition(":")
    if sep and target.endswith(".py"):
        return target, attribute or None, True
    if sep and target and "/" not in attribute and "\\" not in attribute:
        return target, attribute or None, False
    return spec, None, False


def _import_file(path: Path) -> Any:
    if not path.is_file():
        raise ConfigError(f"Plugin file {path} could not be found.")

    module_name = f"relpack_plugin_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ConfigError(f"Plugin file {path} cannot be imported.")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as err:
        sys.modules.pop(module_name, None)
        raise ConfigError(f"Failed to load plugin {path}: {err}") from err
    return module


def load_plugin(spec: str, base_dir: Path | None = None) -> Any:
    """Import a plugin named by a recipe.

    Args:
        spec: "package.module:attribute", "package.module", a path to a .py
            file, or "path/to/file.py:attribute". File paths are resolved
            against base_dir.
        base_dir: Folder relative file paths are resolved against. Defaults
            to the current working directory.

    Returns:
        The named attribute, or the module's 'plugin' attribute when no
        attribute is given, or the module itself if it has no such
        attribute. Classes are instantiated.

    Raises:
        ConfigError: If the module or attribute cannot be loaded.

    """
    logger = get_global_logger()
    if not isinstance(spec, str) or not spec.strip():
        raise ConfigError(f"Invalid plugin specification {spec!r}.")

    target, attribute, is_file = _split_spec(spec.strip())

    if is_file:
        path = Path(target)
        if not path.is_absolute():
            path = (base_dir or Path.cwd()) / path
        logger.verbose("PLUGIN", f"Loading plugin file: {path}")
        module = _import_file(path.resolve())
    else:
        logger.verbose("PLUGIN", f"Importing plugin module: {target}")
        try:
            module = importlib.import_module(target)
        except ImportError as err:
            raise ConfigError(f"Failed to import plugin module {target!r}: {err}") from err

    if attribute is not None:
        if not hasattr(module, attribute):
            raise ConfigError(f"Plugin {target!r} has no attribute {attribute!r}.")
        plugin = getattr(module, attribute)
    else:
        plugin = getattr(module, DEFAULT_PLUGIN_ATTRIBUTE, module)

    if isinstance(plugin, type):
        plugin = plugin()
    return plugin


def resolve_plugin(plugin: Any, context: PackageContext) -> ResolvedPlugin:
    """Combine a plugin with the default plugin for a package.

    Precedence: the explicit plugin argument, then the recipe's 'plugin'
    key, then DefaultPlugin alone.

    Args:
        plugin: Plugin object (or None).
        context: The resolved package.

    Returns:
        A ResolvedPlugin whose hooks fall back to DefaultPlugin.

    Raises:
        ConfigError: If the recipe names a plugin that cannot be loaded.

    """
    logger = get_global_logger()
    default = DefaultPlugin(context.config)

    name = "default"
    if plugin is None and context.config.get("plugin"):
        spec = context.config["plugin"]
        base_dir = (
            context.config_path.parent if context.config_path else context.package_dir
        )
        plugin = load_plugin(spec, base_dir)
        name = str(spec)
    elif plugin is not None:
        name = getattr(plugin, "__name__", type(plugin).__name__)

    def hook(attribute: str) -> Callable[..., Any]:
        method = getattr(plugin, attribute, None) if plugin is not None else None
        if callable(method):
            logger.debug("PLUGIN", f"{attribute}: provided by {name}")
            return method
        return getattr(default, attribute)

    override = None
    if plugin is not None and callable(getattr(plugin, "normalize_version", None)):
        override = plugin
        logger.debug("PLUGIN", f"normalize_version: provided by {name}")

    logger.verbose("PLUGIN", f"Using plugin: {name}")
    return ResolvedPlugin(
        name=name,
        download_url=hook("download_url"),
        process_binary=hook("process_binary"),
        post_process=hook("post_process"),
        normalize_version=override,
    )
