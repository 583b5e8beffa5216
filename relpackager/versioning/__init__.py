"""
Version normalization utilities for relpackager.

This package turns arbitrary upstream version strings (release tags such as
"2024.05", "v1.2.3.4" or "nightly build 7") into valid Semantic Versioning
2.0.0 expressions suitable for a package manifest, and compares them.

Modules
-------
sections : module
    Sanitizer and section tokenizer.
parser : module
    Splits a raw version into release, prerelease and build sections.
normalize : module
    Built-in synthesizer plus the pluggable async override hook.
compare : module
    Precedence checks between normalized versions (via semver).

Public API
----------
Version : dataclass
    Parsed release/prerelease/build sections.
sanitize, tokenize : functions
    Section-level helpers.
parse_version : function
    Parse a raw version string.
synthesize : function
    Built-in normalization (sync).
get_normalized_version : coroutine function
    Normalization honoring an optional VersionOverride.
is_newer : function
    Check if a remote version is newer than the current one.

Examples
--------
    >>> from relpackager.versioning import synthesize
    >>> synthesize("1.2")
    '1.2.0'
    >>> synthesize("1.2.3.a.b.c")
    '1.2.3-a.b.c'
    >>> synthesize("1.2.3-alpha+build")
    '1.2.3-alpha+build'
"""

from .compare import compare_versions, is_newer
from .normalize import (
    Override,
    VersionOverride,
    get_normalized_version,
    get_normalized_version_sync,
    is_strict_version,
    synthesize,
)
from .parser import Version, parse_version
from .sections import SectionPart, sanitize, tokenize

__all__ = [
    "Override",
    "SectionPart",
    "Version",
    "VersionOverride",
    "compare_versions",
    "get_normalized_version",
    "get_normalized_version_sync",
    "is_newer",
    "is_strict_version",
    "parse_version",
    "sanitize",
    "synthesize",
    "tokenize",
]
