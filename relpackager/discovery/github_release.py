"""
GitHub latest-release discovery for relpackager.

Resolves the tag of the latest published release of a repository WITHOUT
using the REST API: GitHub answers GET /{owner}/{name}/releases/latest with
a redirect to /{owner}/{name}/releases/tag/{tag}, so the tag is the rest
of the final URL. This needs no token and is not subject to the
API rate limit of 60 requests per hour.

Repository Notation:

    repository: "github:owner/name"

Only the "github" host prefix is supported (case-insensitive).

Workflow:
    1. GET https://github.com/{owner}/{name}/releases/latest (follow redirects)
    2. If the final URL equals the request URL, there is no such repository
       or it has no releases
    3. Everything after /releases/tag/ in the final URL is the tag name

Error Handling:
    - ConfigError: Repository notation is malformed
    - NetworkError: Request failures, unknown repository, no releases
    - Errors are chained with 'from err' for better debugging

Example:
    From Python:

        from relpackager.discovery import get_latest_release_tag, parse_repository

        repo = parse_repository("github:cli/cli")
        tag = get_latest_release_tag(repo)
        print(tag)  # e.g. "v2.62.0"
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import unquote, urlparse

import requests

from relpackager.exceptions import ConfigError, NetworkError
from relpackager.logging import get_global_logger

GITHUB_BASE_URL = "https://github.com"


@dataclass(frozen=True)
class Repository:
    """A GitHub repository.

    Attributes:
        owner: Account hosting the repository (e.g., "cli").
        name: Repository name (e.g., "cli").

    """

    owner: str
    name: str

    def __str__(self) -> str:
        return f"github:{self.owner}/{self.name}"


def parse_repository(spec: str) -> Repository:
    """Parse the short repository notation "github:owner/name".

    Raises:
        ConfigError: If spec is not a string, lacks the "github" prefix, or
            has no owner/name pair.

    Example:
        >>> parse_repository("github:cli/cli")
        Repository(owner='cli', name='cli')
    """
    if not isinstance(spec, str) or not spec.strip():
        raise ConfigError("There is no 'repository' specified in the configuration.")

    host, sep, path = spec.strip().partition(":")
    if not sep or host.lower() != "github":
        raise ConfigError(
            f"Repository {spec!r} is expected to be in short notation and to "
            f"start with 'github:'."
        )

    owner, slash, name = path.partition("/")
    if not slash or not owner or not name or "/" in name:
        raise ConfigError(f"Invalid repository specification {spec!r}.")
    return Repository(owner=owner, name=name)


def get_latest_release_url(
    owner: str,
    name: str,
    *,
    session: requests.Session | None = None,
    timeout: int = 30,
) -> str:
    """Resolve the URL of the latest release of a repository.

    Args:
        owner: The GitHub account hosting the repository.
        name: The repository name.
        session: Optional session to reuse (e.g., one with retries).
        timeout: Per-request timeout in seconds.

    Returns:
        The final URL after redirects, e.g.
            "https://github.com/cli/cli/releases/tag/v2.62.0".

    Raises:
        NetworkError: If the request fails or the repository has no release.

    """
    logger = get_global_logger()
    uri = f"{GITHUB_BASE_URL}/{owner}/{name}/releases/latest"
    logger.verbose("DISCOVERY", f"Resolving latest release: {uri}")

    http = session or requests
    try:
        response = http.get(uri, allow_redirects=True, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.HTTPError as err:
        if response.status_code == 404:
            raise NetworkError(
                f"The requested repository {name!r} from owner {owner!r} "
                f"could not be found."
            ) from err
        raise NetworkError(
            f"GitHub request failed: {response.status_code} {response.reason}"
        ) from err
    except requests.exceptions.RequestException as err:
        raise NetworkError(f"Failed to resolve latest release: {err}") from err

    url = response.url
    for hist in response.history:
        logger.debug(
            "HTTP",
            f"Redirect {hist.status_code} -> {hist.headers.get('Location', 'unknown')}",
        )

    # Without a release GitHub answers in place or redirects to /releases.
    if url.rstrip("/") == uri or "/releases/tag/" not in urlparse(url).path:
        raise NetworkError(
            f"The requested repository {name!r} from owner {owner!r} "
            f"has no published release."
        )

    logger.verbose("DISCOVERY", f"Latest release URL: {url}")
    return url


def tag_from_release_url(url: str) -> str:
    """Return the tag name encoded in a release URL.

    Example:
        >>> tag_from_release_url("https://github.com/o/r/releases/tag/v1.0")
        'v1.0'
    """
    # Tags may contain slashes ("release/1.0"), so keep the whole remainder.
    _, sep, tag = urlparse(url).path.partition("/releases/tag/")
    tag = unquote(tag.rstrip("/"))
    if not sep or not tag:
        raise NetworkError(f"Cannot determine release tag from URL {url!r}")
    return tag


def get_latest_release_tag(
    repository: Repository, *, session: requests.Session | None = None
) -> str:
    """Resolve the tag name of the latest release of a repository."""
    url = get_latest_release_url(repository.owner, repository.name, session=session)
    tag = tag_from_release_url(url)
    get_global_logger().verbose("DISCOVERY", f"Release tag: {tag}")
    return tag
