"""Input/Output operations for relpackager.

Modules:

download : module
    HTTP(S) file download with retries, atomic writes, and checksums.
extract : module
    Unpacking of zip and tar release assets.

Public API:

download_file : function
    Download a file from a URL with robustness and reproducibility.
make_session : function
    requests.Session with retry/backoff defaults.
extract_archive : function
    Unpack (or copy) a release asset into a folder.

Example:
    from pathlib import Path
    from relpackager.io import download_file, extract_archive

    file_path, sha256, headers = download_file(
        url="https://example.com/tool-1.2.3.zip",
        destination_folder=Path("./tmp"),
    )
    extract_archive(file_path, Path("./bin/1.2.3"))

"""

from .download import download_file, make_session
from .extract import extract_archive, is_archive

__all__ = ["download_file", "extract_archive", "is_archive", "make_session"]
