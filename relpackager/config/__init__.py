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

"""Configuration loading and management for relpackager.

Configuration is layered:

  - Shared defaults (defaults/relpack.yaml, searched upward)
  - Package recipe (relpack.yaml next to the manifest, or the manifest's
    'relpack' object)

Public API:

- UpdateOperation / UpdateOptions: What to do and where the package lives
- PackageContext: Resolved manifest, recipe and repository
- load_effective_config: Load and merge configuration for a recipe
- load_package: Resolve everything for a package folder

"""

from .loader import (
    PackageContext,
    UpdateOperation,
    UpdateOptions,
    load_effective_config,
    load_package,
)

__all__ = [
    "PackageContext",
    "UpdateOperation",
    "UpdateOptions",
    "load_effective_config",
    "load_package",
]
