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

"""Parsing of raw version strings into release/prerelease/build sections.

Only the FIRST "-" separates release from prerelease, and only the FIRST
"+" after it separates prerelease from build metadata. Any later "-" stays
part of its section, and any later "+" is sanitized into a dot by the
tokenizer.
"""

from __future__ import annotations

from dataclasses import dataclass

from relpackager.exceptions import InvalidInputError

from .sections import SectionPart, tokenize


@dataclass(frozen=True)
class Version:
    """Parsed representation of an arbitrary version string.

    Attributes:
        release: Leading section parts (e.g., (1, 2, 3)).
        prerelease: Parts after the first "-", empty if there is none.
        build_metadata: Parts after the first "+" that follows the
            prerelease delimiter, empty if there is none.

    """

    release: tuple[SectionPart, ...]
    prerelease: tuple[SectionPart, ...] = ()
    build_metadata: tuple[SectionPart, ...] = ()


def parse_version(raw: str) -> Version:
    """Split a raw version string into its three tokenized sections.

    Blank strings are accepted here; rejecting them is up to the caller.

    Args:
        raw: Version string in any format (e.g., "1.2.3.4-beta+exp.sha").

    Returns:
        The parsed Version.

    Raises:
        InvalidInputError: If raw is not a str.

    Example:
        >>> parse_version("1.2-rc-1+build+7")
        Version(release=(1, 2), prerelease=('rc-1',), build_metadata=('build', 7))
    """
    if not isinstance(raw, str):
        raise InvalidInputError(f"Parameter 'version' ({raw!r}) is not a string.")

    release_part, dash, remainder = raw.partition("-")
    release = tokenize(release_part)

    if not dash:
        return Version(release=release)

    prerelease_part, plus, build_part = remainder.partition("+")
    return Version(
        release=release,
        prerelease=tokenize(prerelease_part),
        build_metadata=tokenize(build_part) if plus else (),
    )
