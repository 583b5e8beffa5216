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

"""Extraction of downloaded release assets.

Supported formats:
- .zip (zipfile; unix permission bits are restored so executables stay
  executable)
- .tar, .tar.gz/.tgz, .tar.bz2/.tbz2, .tar.xz/.txz (tarfile)

Any other file is treated as a bare executable and copied into the
destination unchanged. Archive members resolving outside the destination
are rejected.
"""

from __future__ import annotations

from pathlib import Path
import shutil
import tarfile
import zipfile

from relpackager.exceptions import PackagingError
from relpackager.logging import get_global_logger

_TAR_SUFFIXES = (
    ".tar",
    ".tar.gz",
    ".tgz",
    ".tar.bz2",
    ".tbz2",
    ".tar.xz",
    ".txz",
)


def _ensure_inside(destination: Path, member: str) -> None:
    target = (destination / member).resolve()
    if target != destination and destination not in target.parents:
        raise PackagingError(f"Archive member escapes destination: {member!r}")


def _extract_zip(archive: Path, destination: Path) -> None:
    with zipfile.ZipFile(archive, "r") as zf:
        for info in zf.infolist():
            _ensure_inside(destination, info.filename)
        for info in zf.infolist():
            extracted = Path(zf.extract(info, destination))
            mode = (info.external_attr >> 16) & 0o777
            if mode and not info.is_dir():
                extracted.chmod(mode)


def _extract_tar(archive: Path, destination: Path) -> None:
    with tarfile.open(archive, "r:*") as tf:
        members = tf.getmembers()
        for member in members:
            _ensure_inside(destination, member.name)
            if member.issym():
                link = Path(member.name).parent / member.linkname
                _ensure_inside(destination, str(link))
            elif member.islnk():
                _ensure_inside(destination, member.linkname)
        if hasattr(tarfile, "data_filter"):
            tf.extractall(destination, members=members, filter="data")
        else:
            tf.extractall(destination, members=members)


def is_archive(path: Path) -> bool:
    """Return True if path has a supported archive extension."""
    name = path.name.lower()
    return name.endswith(".zip") or name.endswith(_TAR_SUFFIXES)


def extract_archive(archive: Path, destination: Path) -> Path:
    """Unpack a release asset into destination.

    Args:
        archive: Downloaded file.
        destination: Folder to unpack into (created if missing).

    Returns:
        The destination folder.

    Raises:
        PackagingError: If the archive is corrupt or unsafe, or copying fails.

    """
    logger = get_global_logger()
    destination = destination.resolve()
    destination.mkdir(parents=True, exist_ok=True)

    name = archive.name.lower()
    try:
        if name.endswith(".zip"):
            logger.verbose("FILE", f"Unzipping {archive.name} to {destination}")
            _extract_zip(archive, destination)
        elif name.endswith(_TAR_SUFFIXES):
            logger.verbose("FILE", f"Untarring {archive.name} to {destination}")
            _extract_tar(archive, destination)
        else:
            logger.verbose("FILE", f"Copying {archive.name} to {destination}")
            shutil.copy2(archive, destination / archive.name)
    except (zipfile.BadZipFile, tarfile.TarError) as err:
        raise PackagingError(f"Failed to extract archive {archive}: {err}") from err
    except OSError as err:
        raise PackagingError(f"Failed to unpack {archive}: {err}") from err

    logger.verbose("FILE", f"Successfully completed writing to {destination}")
    return destination
