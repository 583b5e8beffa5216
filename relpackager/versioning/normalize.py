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

"""Normalization of arbitrary version strings into SemVer 2.0.0.

This module is format-agnostic: it does NOT download or read files, and it
does not log. It turns whatever an upstream project uses as a release tag
into MAJOR.MINOR.PATCH[-prerelease][+build].

Algorithm:
    1. Input that is already valid SemVer is returned unchanged.
    2. Otherwise it is parsed into release/prerelease/build sections.
    3. A numeric release is cut or padded to three components; components
       beyond the third become a "-" suffix on the release.
    4. A non-numeric release becomes a "-" suffix on 0.0.0.
    5. The real prerelease and build metadata are appended after that.

Only the common case (1-3 numeric components plus dot-separated
qualifiers) is guaranteed to keep its upstream precedence. Everything else
is syntactically valid but may sort differently than upstream intends.
Projects with such schemes can plug in a VersionOverride.

Example:
    Built-in normalization:
        ```python
        from relpackager.versioning import synthesize

        synthesize("1.2")            # '1.2.0'
        synthesize("1.2.3.4")        # '1.2.3-4'
        synthesize("release 7")      # '0.0.0-release.7'
        ```

    Post-processing the built-in result:
        ```python
        import asyncio
        from relpackager.versioning import get_normalized_version

        class StripLeadingV:
            async def normalize_version(self, version, builtin):
                return builtin(version.removeprefix("v"))

        asyncio.run(get_normalized_version("v2.0", StripLeadingV()))  # '2.0.0'
        ```
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Protocol, Union

import semver

from relpackager.exceptions import EmptyVersionError, InvalidInputError

from .parser import parse_version
from .sections import join_parts

BuiltinSynthesizer = Callable[[str], str]


class VersionOverride(Protocol):
    """Strategy that replaces or wraps the built-in normalization.

    The built-in synthesizer is handed in so implementations can delegate
    to it or post-process its output. Whatever is returned is used as-is;
    it is not validated again.
    """

    async def normalize_version(
        self, version: str, builtin: BuiltinSynthesizer
    ) -> str:
        ...


OverrideFunction = Callable[[str, BuiltinSynthesizer], Union[Awaitable[str], str]]
Override = Union[VersionOverride, OverrideFunction]


def _require_version(version: object) -> None:
    if not isinstance(version, str):
        raise InvalidInputError(f"Parameter 'version' ({version!r}) is not a string.")
    if not version.strip():
        raise EmptyVersionError("Parameter 'version' is empty.")


def is_strict_version(version: str) -> bool:
    """Return True if version is valid SemVer 2.0.0 exactly as given."""
    # The grammar's "$" also matches before a final newline.
    return version == version.strip() and semver.Version.is_valid(version)


def synthesize(version: str) -> str:
    """Normalize a version string with the built-in algorithm.

    Args:
        version: Version string in any format.

    Returns:
        A valid SemVer 2.0.0 string.

    Raises:
        InvalidInputError: If version is not a str.
        EmptyVersionError: If version is empty or whitespace-only.

    Example:
        >>> synthesize("1")
        '1.0.0'
        >>> synthesize("1.2.3.4-beta")
        '1.2.3-4-beta'
        >>> synthesize("arbitrary text")
        '0.0.0-arbitrary.text'
    """
    _require_version(version)
    if is_strict_version(version):
        return version

    parsed = parse_version(version)
    release = parsed.release
    head = release[:3]

    # An empty release cannot be padded into a valid core version.
    if release and all(isinstance(part, int) for part in head):
        result = join_parts(head) + ".0" * (3 - len(head))
        if len(release) > 3:
            result += "-" + join_parts(release[3:])
    else:
        result = "0.0.0"
        if release:
            result += "-" + join_parts(release)

    if parsed.prerelease:
        result += "-" + join_parts(parsed.prerelease)
    if parsed.build_metadata:
        result += "+" + join_parts(parsed.build_metadata)
    return result


async def get_normalized_version(
    raw_version: str,
    override: Override | None = None,
) -> str:
    """Normalize a version, letting an optional override take over.

    Args:
        raw_version: Version string in any format (e.g., a release tag).
        override: Object with a normalize_version(version, builtin) method,
            or a callable with the same signature. Either may be async.
            When omitted, the built-in synthesize() is used.

    Returns:
        The normalized version string.

    Raises:
        InvalidInputError: If raw_version is not a str.
        EmptyVersionError: If raw_version is empty or whitespace-only.
    """
    _require_version(raw_version)
    if override is None:
        return synthesize(raw_version)

    hook = getattr(override, "normalize_version", override)
    result = hook(raw_version, synthesize)
    if inspect.isawaitable(result):
        result = await result
    return result


def get_normalized_version_sync(
    raw_version: str,
    override: Override | None = None,
) -> str:
    """Blocking variant of get_normalized_version().

    Must not be called from inside a running event loop.
    """
    return asyncio.run(get_normalized_version(raw_version, override))
