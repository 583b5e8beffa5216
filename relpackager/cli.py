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

"""Command-line interface for relpackager.

This module provides the main CLI entry point for the relpack tool, offering
commands to normalize versions and to keep a wrapping package in sync with
the releases of a GitHub repository.

Commands:

    normalize: Normalize version strings into SemVer
    latest: Show the latest release of a repository
    update-binary: Download the binaries of a release into the package
    update-package: Bump the package to the latest release
    executable: Print the path of an executable recorded in the manifest

Example:
    Normalize a tag:
        ```bash
        $ relpack normalize 2024.05.1.3
        2024.5.1-3
        ```

    Check whether a package is outdated (exit code 1 if so):
        ```bash
        $ relpack update-package --path wrappers/gh --check-only
        ```

    Update with progress output:
        ```bash
        $ relpack update-package --path wrappers/gh --verbose
        ```

Exit Codes:

- 0: Success
- 1: Error, or an outstanding update in --check-only mode

Note:
    The CLI uses argparse for command parsing.
    Each command has its own handler function (cmd_<command>).
    Verbose mode shows full tracebacks on errors for debugging.
    Debug mode implies verbose mode and shows detailed configuration dumps.

"""

from __future__ import annotations

import argparse
from importlib.metadata import version
from pathlib import Path
import sys
import traceback

from relpackager.config import UpdateOperation, UpdateOptions
from relpackager.core import (
    get_executable,
    get_latest_release,
    update_binary,
    update_package,
)
from relpackager.exceptions import RelPackError
from relpackager.logging import get_logger, set_global_logger
from relpackager.versioning import synthesize


def _configure_logger(args: argparse.Namespace) -> None:
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)


def _report_error(err: Exception, args: argparse.Namespace) -> int:
    print(f"Error: {err}")
    if args.verbose or args.debug:
        traceback.print_exc()
    return 1


def _options(args: argparse.Namespace) -> UpdateOptions:
    if args.check_only:
        operation = UpdateOperation.CHECK_ONLY
    elif args.force:
        operation = UpdateOperation.FORCE
    else:
        operation = UpdateOperation.DEFAULT

    return UpdateOptions(
        operation=operation,
        package_path=Path(args.path),
        config_file=args.config,
        manifest_file=args.manifest,
    )


def cmd_normalize(args: argparse.Namespace) -> int:
    """Handler for 'relpack normalize' command.

    Prints one normalized version per input, in input order.

    Returns:
        Exit code (0 for success, 1 if any input is blank).

    """
    _configure_logger(args)

    try:
        normalized = [synthesize(raw) for raw in args.versions]
    except RelPackError as err:
        return _report_error(err, args)

    for version in normalized:
        print(version)
    return 0


def cmd_latest(args: argparse.Namespace) -> int:
    """Handler for 'relpack latest' command.

    Resolves the latest release of a repository given in "github:owner/name"
    notation and shows its tag and normalized version.

    """
    _configure_logger(args)

    try:
        result = get_latest_release(args.repository)
    except RelPackError as err:
        return _report_error(err, args)

    print("=" * 70)
    print("LATEST RELEASE")
    print("=" * 70)
    print(f"Repository:      {result.repository}")
    print(f"Tag:             {result.tag}")
    print(f"Version:         {result.version}")
    print(f"Release URL:     {result.url}")
    print("=" * 70)

    return 0


def cmd_update_binary(args: argparse.Namespace) -> int:
    """Handler for 'relpack update-binary' command.

    Downloads the binaries of a release (latest unless --tag is given)
    into bin/<version> and records the executables in the manifest.

    Returns:
        Exit code (0 for success, 1 for failure or an outstanding update in
        check-only mode).

    """
    _configure_logger(args)
    options = _options(args)

    print(f"Updating binaries of package: {Path(args.path).resolve()}")
    print()

    try:
        result = update_binary(options, args.release_version)
    except RelPackError as err:
        return _report_error(err, args)

    print("=" * 70)
    print("BINARY RESULTS")
    print("=" * 70)
    print(f"Version:         {result.version}")
    print(f"Binary Folder:   {result.bin_path}")
    if result.download_url:
        print(f"Download URL:    {result.download_url}")
    if result.sha256:
        print(f"SHA-256:         {result.sha256}")
    for name, path in result.executables.items():
        print(f"Executable:      {name} -> {path}")
    print(f"Status:          {result.status}")
    print("=" * 70)

    if result.status == "outdated":
        print()
        print("[OUTDATED] Binaries need to be updated.")
        return 1
    return 0


def cmd_update_package(args: argparse.Namespace) -> int:
    """Handler for 'relpack update-package' command.

    Compares the manifest version with the latest release and, if the
    release is newer (or --force is given), writes the new version and
    updates the binaries.

    Returns:
        Exit code (0 for success, 1 for failure or an outstanding update in
        check-only mode).

    """
    _configure_logger(args)
    options = _options(args)

    print(f"Updating package: {Path(args.path).resolve()}")
    print()

    try:
        result = update_package(options)
    except RelPackError as err:
        return _report_error(err, args)

    print("=" * 70)
    print("PACKAGE RESULTS")
    print("=" * 70)
    print(f"Release Tag:     {result.tag}")
    print(f"Latest Version:  {result.latest_version}")
    print(f"Current Version: {result.current_version or '(none)'}")
    if result.binary is not None:
        print(f"Binary Folder:   {result.binary.bin_path}")
    print(f"Status:          {result.status}")
    print("=" * 70)

    if result.status == "outdated":
        print()
        print("[OUTDATED] Package needs update.")
        return 1
    if result.updated:
        print()
        print(f"[SUCCESS] Package updated to {result.latest_version}!")
    return 0


def cmd_executable(args: argparse.Namespace) -> int:
    """Handler for 'relpack executable' command.

    Prints the absolute path of an executable from the manifest 'bin'
    mapping, or fails if there is no such entry.

    """
    _configure_logger(args)
    options = _options(args)

    try:
        path = get_executable(args.name, options)
    except RelPackError as err:
        return _report_error(err, args)

    if path is None:
        print(f"Error: No executable named {args.name!r} in the manifest.")
        return 1
    print(path)
    return 0


def _add_logging_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def _add_package_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--path",
        default=".",
        help="Folder of the wrapping package (default: current directory)",
    )
    parser.add_argument(
        "--config",
        default="relpack.yaml",
        help="Recipe file, relative to --path (default: relpack.yaml)",
    )
    parser.add_argument(
        "--manifest",
        default=None,
        help="Manifest file, relative to --path (default: from recipe or manifest.json)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--check-only",
        action="store_true",
        help="Only report whether an update is needed (exit code 1 if so)",
    )
    mode.add_argument(
        "--force",
        action="store_true",
        help="Update even if everything is up to date",
    )


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the relpack CLI.

    This function is registered as the 'relpack' console script in pyproject.toml.
    """
    parser = argparse.ArgumentParser(
        prog="relpack",
        description="relpack - wrap GitHub release binaries in a versioned package",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"relpack {version('release-packager')}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'normalize' command
    parser_normalize = subparsers.add_parser(
        "normalize",
        help="Normalize version strings into SemVer",
        description="Turn arbitrary version strings into valid Semantic Versioning 2.0.0.",
    )
    parser_normalize.add_argument(
        "versions",
        nargs="+",
        metavar="VERSION",
        help="Version string(s) to normalize",
    )
    _add_logging_flags(parser_normalize)
    parser_normalize.set_defaults(func=cmd_normalize)

    # 'latest' command
    parser_latest = subparsers.add_parser(
        "latest",
        help="Show the latest release of a GitHub repository",
        description="Resolve the latest release tag of a repository and normalize it.",
    )
    parser_latest.add_argument(
        "repository",
        help='Repository in short notation, e.g. "github:cli/cli"',
    )
    _add_logging_flags(parser_latest)
    parser_latest.set_defaults(func=cmd_latest)

    # 'update-binary' command
    parser_binary = subparsers.add_parser(
        "update-binary",
        help="Download release binaries into the package",
        description="Download and unpack the binaries of a release into bin/<version>.",
    )
    parser_binary.add_argument(
        "--tag",
        dest="release_version",
        default=None,
        help="Release tag to install (default: latest release)",
    )
    _add_package_flags(parser_binary)
    _add_logging_flags(parser_binary)
    parser_binary.set_defaults(func=cmd_update_binary)

    # 'update-package' command
    parser_package = subparsers.add_parser(
        "update-package",
        help="Bump the package to the latest release",
        description="Update the manifest version and binaries to the latest release.",
    )
    _add_package_flags(parser_package)
    _add_logging_flags(parser_package)
    parser_package.set_defaults(func=cmd_update_package)

    # 'executable' command
    parser_executable = subparsers.add_parser(
        "executable",
        help="Print the path of an executable recorded in the manifest",
        description="Resolve a manifest 'bin' entry to an absolute path.",
    )
    parser_executable.add_argument(
        "name",
        help="Binary name as recorded in the manifest",
    )
    _add_package_flags(parser_executable)
    _add_logging_flags(parser_executable)
    parser_executable.set_defaults(func=cmd_executable)

    # Parse and dispatch
    args = parser.parse_args(argv)

    # Call the appropriate command handler
    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
