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

"""Manifest (package descriptor) handling for relpackager.

Public API:

- load_manifest / save_manifest: JSON read and atomic write
- set_bin_entries: Record executables relative to the manifest
- platform_label / resolve_executable: Per-platform executable lookup

"""

from .store import (
    load_manifest,
    platform_label,
    relative_bin_path,
    resolve_executable,
    save_manifest,
    set_bin_entries,
)

__all__ = [
    "load_manifest",
    "platform_label",
    "relative_bin_path",
    "resolve_executable",
    "save_manifest",
    "set_bin_entries",
]
