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

"""Public API return types for relpackager.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pathlib import Path
        from relpackager.config import UpdateOptions
        from relpackager.core import update_package

        result = update_package(UpdateOptions(package_path=Path("wrappers/gh")))
        print(result.latest_version)  # Attribute access, not dict access
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like Version or Repository) stay next to their related logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class BinaryResult:
    """Result from updating the binaries of a package.

    Attributes:
        version: Release tag the binaries belong to.
        bin_path: Folder holding the binaries (bin/<version>).
        updated: True if anything was downloaded or rewritten.
        download_url: URL the asset was fetched from, if any.
        sha256: SHA-256 of the downloaded asset, if any.
        executables: Binary name to manifest path entries written.
        status: "updated", "up-to-date", "outdated" (check-only) or
            "forced".
    """

    version: str
    bin_path: Path
    updated: bool
    download_url: str | None = None
    sha256: str | None = None
    executables: dict[str, str] = field(default_factory=dict)
    status: str = "updated"


@dataclass(frozen=True)
class PackageResult:
    """Result from updating a package to the latest release.

    Attributes:
        tag: Latest release tag as published.
        latest_version: Normalized version of the tag.
        current_version: Manifest version before the update (may be None).
        updated: True if the manifest version was rewritten.
        binary: Result of the binary update, if one ran.
        status: "updated", "up-to-date", "outdated" (check-only) or
            "forced".
    """

    tag: str
    latest_version: str
    current_version: str | None
    updated: bool
    binary: BinaryResult | None = None
    status: str = "updated"


@dataclass(frozen=True)
class ReleaseInfo:
    """Latest release of a repository.

    Attributes:
        repository: Repository in "github:owner/name" notation.
        tag: Release tag as published.
        version: Normalized version of the tag.
        url: Release page URL.
    """

    repository: str
    tag: str
    version: str
    url: str
