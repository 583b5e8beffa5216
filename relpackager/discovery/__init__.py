"""
Release discovery for relpackager.

Modules:

github_release : module
    Latest-release resolution through GitHub's releases/latest redirect.

Public API:

Repository : dataclass
    Owner/name pair of a GitHub repository.
parse_repository : function
    Parse "github:owner/name" notation.
get_latest_release_url : function
    Resolve the URL of the latest release.
tag_from_release_url : function
    Extract the tag name from a release URL.
get_latest_release_tag : function
    Resolve the tag name of the latest release.

"""

from .github_release import (
    Repository,
    get_latest_release_tag,
    get_latest_release_url,
    parse_repository,
    tag_from_release_url,
)

__all__ = [
    "Repository",
    "get_latest_release_tag",
    "get_latest_release_url",
    "parse_repository",
    "tag_from_release_url",
]
