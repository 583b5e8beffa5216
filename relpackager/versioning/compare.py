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

"""Precedence checks between normalized versions."""

from __future__ import annotations

import semver


def compare_versions(a: str, b: str) -> int:
    """Compare two SemVer strings.

    Returns -1 if a < b, 0 if equal, 1 if a > b. Build metadata does not
    take part in the ordering.

    Raises:
        ValueError: If either string is not valid SemVer.
    """
    return semver.Version.parse(a).compare(b)


def is_newer(remote: str, current: str | None) -> bool:
    """Decide if 'remote' should be considered newer than 'current'.

    A missing or unparsable current version is always outdated, so the
    package gets (re)written with a valid one.
    """
    if not current or not semver.Version.is_valid(current):
        return True
    return compare_versions(remote, current) > 0
