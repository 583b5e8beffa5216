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

"""
relpackager: wrap GitHub release binaries in a versioned package.

relpackager keeps a wrapping package (a folder with a JSON manifest) in
sync with the releases of a GitHub repository. It resolves the latest
release, turns its tag into a valid Semantic Versioning 2.0.0 version,
downloads and unpacks the release asset, and records the executables in
the manifest.

Key Features:
  - Version normalization of arbitrary tags ("2024.05", "1.2.3.4",
    "nightly build 7") into SemVer, with a pluggable async override
  - Latest-release discovery through GitHub's releases/latest redirect
  - Robust downloads (retries, atomic writes, SHA-256)
  - Zip and tar extraction with path traversal protection
  - Per-platform executable mapping
  - Plugins for custom download URLs, unpacking and versioning

Quick Start
-----------
Normalize a version:

    $ relpack normalize 1.2.3.4
    1.2.3-4

Update a wrapping package:

    $ relpack update-package --path wrappers/gh

For full CLI documentation:

    $ relpack --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    High-level orchestration functions.
config : package
    YAML recipe loading and merging.
discovery : package
    Latest-release discovery on GitHub.
versioning : package
    Version normalization and comparison.
io : package
    Download and extraction of release assets.
manifest : package
    Manifest read/write and executable lookup.
plugins : package
    Release plugin protocol, default plugin and loading.

Public API
----------
The primary interface is the CLI, but key functions are exported for
programmatic use:

    from relpackager.core import update_package, update_binary, get_executable
    from relpackager.versioning import get_normalized_version, synthesize
    from relpackager.config import UpdateOperation, UpdateOptions

For more details, see the individual module docstrings.
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Wrap GitHub release binaries in a versioned package"

# Re-export commonly used functions for convenience
from relpackager.config import UpdateOperation, UpdateOptions
from relpackager.core import (
    get_executable,
    get_latest_release,
    update_binary,
    update_package,
)
from relpackager.versioning import (
    get_normalized_version,
    get_normalized_version_sync,
    synthesize,
)

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "UpdateOperation",
    "UpdateOptions",
    "get_executable",
    "get_latest_release",
    "get_normalized_version",
    "get_normalized_version_sync",
    "synthesize",
    "update_binary",
    "update_package",
]
