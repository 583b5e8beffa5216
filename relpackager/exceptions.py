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

"""Exception hierarchy for relpackager.

This module defines a custom exception hierarchy that allows library users
to distinguish between different types of errors:

- ConfigError: Configuration-related errors (YAML parse, missing fields,
  repository notation, plugin loading, missing manifest)
- NetworkError: Release discovery and download errors
- PackagingError: Archive extraction and manifest write errors
- InvalidInputError: A version argument that is not text
- EmptyVersionError: A version string that is empty or whitespace-only

All exceptions inherit from RelPackError, allowing users to catch all
relpackager errors with a single except clause if needed.

Example:
    Catching version errors:
        ```python
        from relpackager.exceptions import EmptyVersionError
        from relpackager.versioning import synthesize

        try:
            synthesize("   ")
        except EmptyVersionError as e:
            print(f"Nothing to normalize: {e}")
        ```

    Catching all relpackager errors:
        ```python
        from relpackager.exceptions import RelPackError

        try:
            update_package(UpdateOptions(package_path=Path(".")))
        except RelPackError as e:
            print(f"relpack error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "RelPackError",
    "ConfigError",
    "NetworkError",
    "PackagingError",
    "InvalidInputError",
    "EmptyVersionError",
]


class RelPackError(Exception):
    """Base exception for all relpackager errors.

    All relpackager-specific exceptions inherit from this class, allowing
    users to catch all of them with a single except clause if needed.
    """

    pass


class ConfigError(RelPackError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, invalid structure)
    - Missing or invalid configuration fields
    - Repository notation other than "github:owner/name"
    - Plugin modules that cannot be imported or lack the expected object
    - Missing manifest files
    """

    pass


class NetworkError(RelPackError):
    """Raised for network/download-related errors.

    This exception is raised when there are problems with:

    - Resolving the latest release of a repository
    - Download failures (HTTP errors, connection timeouts)
    - Checksum mismatches of downloaded assets
    """

    pass


class PackagingError(RelPackError):
    """Raised for packaging-related errors.

    This exception is raised when there are problems with:

    - Extracting downloaded release archives
    - Writing the manifest file
    """

    pass


class InvalidInputError(RelPackError):
    """Raised when a version argument is not a string."""

    pass


class EmptyVersionError(RelPackError):
    """Raised when a version string is empty or whitespace-only."""

    pass
