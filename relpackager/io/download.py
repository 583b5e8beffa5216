"""
Robust HTTP(S) download of release assets for relpackager.

Key Features:

- **Retry Logic with Exponential Backoff** - Automatically retries on transient failures (429, 500, 502, 503, 504) with exponential backoff. Configurable via urllib3.util.Retry.
- **Atomic Writes** - Downloads to temporary .part files with atomic rename on success to prevent partial files.
- **Integrity Verification** - SHA-256 hashing during download with optional checksum validation. Corrupted files are automatically removed.
- **Smart Filename Detection** - Respects Content-Disposition headers, falls back to the final URL path after redirects (GitHub asset URLs redirect to a CDN).

Example:
    >>> from pathlib import Path
    >>> from relpackager.io import download_file
    >>> path, sha256, headers = download_file(
    ...     "https://github.com/cli/cli/archive/v2.62.0.zip",
    ...     Path("./tmp"),
    ... )

Notes:
- User-Agent identifies relpackager to help with debugging/support
- All HTTP errors are chained for better debugging
- Timeouts are per-request, not total download time
"""

from __future__ import annotations

import hashlib
from pathlib import Path
import time
from urllib.parse import unquote, urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from relpackager.exceptions import NetworkError
from relpackager.logging import get_global_logger

# Stream size per chunk (1 MiB). Tune up/down if needed.
DEFAULT_CHUNK = 1024 * 1024

USER_AGENT = "relpack/0.1 (+https://pypi.org/project/release-packager/)"


def _filename_from_cd(content_disposition: str) -> str | None:
    """
    Extract a filename from a Content-Disposition header if present.

    Example header:
      'attachment; filename="tool-1.2.3.zip"'
    """
    if not content_disposition:
        return None
    parts = [s.strip() for s in content_disposition.split(";")]
    for part in parts:
        if part.lower().startswith("filename="):
            value = part.split("=", 1)[1].strip().strip('"')
            # Never let a header pick a directory for us.
            return Path(value).name or None
    return None


def _filename_from_url(url: str) -> str:
    """
    Derive a filename from the URL path. Fallback to a generic name if empty.
    """
    name = Path(unquote(urlparse(url).path)).name
    return name or "download.bin"


def make_session() -> requests.Session:
    """
    Create a requests.Session with sane retry/backoff defaults.

    - Retries on common transient status codes.
    - Applies exponential backoff.
    - Sets a helpful User-Agent to avoid being blocked.
    """
    s = requests.Session()
    retries = Retry(
        total=5,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update({"User-Agent": USER_AGENT})
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def download_file(
    url: str,
    destination_folder: Path,
    *,
    expected_sha256: str | None = None,
    timeout: int = 60,
) -> tuple[Path, str, dict]:
    """Download a URL to destination_folder.

    Follows redirects and retries transient failures. Writes to <filename>.part
    then renames to <filename> on success (atomic). Validates checksum if
    expected_sha256 is set.

    Args:
        url: Source URL.
        destination_folder: Folder to save into (created if missing).
        expected_sha256: Optional known SHA-256 (hex). If set and mismatched,
            the file is removed and NetworkError is raised.
        timeout: Per-request timeout (seconds).

    Returns:
        A tuple (file_path, sha256_hex, headers_dict).

    Raises:
        NetworkError: For request failures, non-2xx responses (after
            retries) and checksum mismatches.
    """
    logger = get_global_logger()

    destination_folder = Path(destination_folder)
    destination_folder.mkdir(parents=True, exist_ok=True)

    logger.verbose("HTTP", f"GET {url}")

    with make_session() as session:
        try:
            resp = session.get(url, stream=True, allow_redirects=True, timeout=timeout)
        except requests.RequestException as err:
            raise NetworkError(f"Request failed for {url}: {err}") from err

        for hist in resp.history:
            logger.debug(
                "HTTP",
                f"Redirect {hist.status_code} -> {hist.headers.get('Location', 'unknown')}",
            )

        try:
            resp.raise_for_status()
        except requests.HTTPError as err:
            resp.close()
            raise NetworkError(f"download failed for {url}: {err}") from err

        logger.verbose("HTTP", f"Response: {resp.status_code} {resp.reason}")

        # Content-Disposition beats URL when naming the file.
        cd_name = _filename_from_cd(resp.headers.get("Content-Disposition", ""))
        filename = cd_name or _filename_from_url(resp.url)
        target = destination_folder / filename

        total_size = int(resp.headers.get("Content-Length", "0") or 0)
        if total_size:
            logger.verbose(
                "HTTP",
                f"Content-Length: {total_size} ({total_size / (1024 * 1024):.1f} MB)",
            )

        tmp = target.with_suffix(target.suffix + ".part")
        logger.verbose("FILE", f"Downloading to: {tmp}")

        sha = hashlib.sha256()
        downloaded = 0
        last_percent = -1
        started_at = time.time()

        try:
            with tmp.open("wb") as f:
                for chunk in resp.iter_content(chunk_size=DEFAULT_CHUNK):
                    if not chunk:
                        continue
                    f.write(chunk)
                    sha.update(chunk)
                    downloaded += len(chunk)

                    if total_size:
                        pct = int(downloaded * 100 / total_size)
                        if pct != last_percent and pct % 10 == 0:
                            logger.debug("HTTP", f"download progress: {pct}%")
                            last_percent = pct
        except requests.RequestException as err:
            tmp.unlink(missing_ok=True)
            raise NetworkError(f"download interrupted for {url}: {err}") from err
        finally:
            resp.close()

    digest = sha.hexdigest()
    logger.verbose("FILE", f"SHA-256: {digest} (computed during download)")

    if expected_sha256 and digest.lower() != expected_sha256.lower():
        tmp.unlink(missing_ok=True)
        raise NetworkError(
            f"sha256 mismatch for {filename}: got {digest}, expected {expected_sha256}"
        )

    logger.verbose("FILE", f"Atomic rename: {tmp.name} -> {target.name}")
    tmp.replace(target)

    elapsed = time.time() - started_at
    logger.verbose("FILE", f"Download complete: {target} in {elapsed:.1f}s")

    return target, digest, dict(resp.headers)
