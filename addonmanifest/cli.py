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

"""Command-line interface for addonmanifest.

This module provides the main CLI entry point for the addon-manifest tool,
offering commands to validate addon definitions and to generate the addon
manifest.

Commands:

    validate: Validate addon definitions (no network access)
    generate: Update every addon's releases and write the manifest

Example:
    Validate the addons directory:
        ```bash
        $ addon-manifest validate --addons-path addons
        ```

    Generate the manifest in place:
        ```bash
        $ addon-manifest generate --manifest-path manifest.json \\
              --loader-repository gw2-addon-loader/loader-core
        ```

    Print the manifest to stdout (progress goes to stderr):
        ```bash
        $ addon-manifest generate > manifest.json
        ```

GitHub Actions:

When run as an action step, the ``INPUT_ADDONS_PATH``, ``INPUT_MANIFEST_PATH``,
``INPUT_LOADER_REPOSITORY`` and ``INPUT_TOKEN`` environment variables provide
defaults for the matching options, and warnings/errors are emitted as
workflow annotations when ``GITHUB_ACTIONS`` is ``true``.

Exit Codes:

- 0: Success (individual addons may still have failed to update)
- 1: Error (invalid definitions, invalid manifest, missing directory)

Note:
    The CLI uses argparse for command parsing.
    Each command has its own handler function (cmd_<command>).
    Verbose mode shows full tracebacks on errors for debugging.

"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
import sys

from addonmanifest import __version__
from addonmanifest.core import generate_manifest
from addonmanifest.exceptions import AddonManifestError
from addonmanifest.logging import get_logger, set_global_logger
from addonmanifest.manifest import dump_manifest
from addonmanifest.validation import validate_addons
from addonmanifest.versioning.exports import WinedumpExportCheck


def _env_default(name: str, fallback: str | None = None) -> str | None:
    """Return a GitHub Actions input from the environment, or ``fallback``."""
    value = os.environ.get(f"INPUT_{name}", "").strip()
    return value or fallback


def _annotations_enabled() -> bool:
    return os.environ.get("GITHUB_ACTIONS", "").lower() == "true"


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'addon-manifest validate' command.

    Validates every addon definition without making network calls. This is
    useful for quick feedback when adding an addon and as a pull request
    check.

    Args:
        args: Parsed command-line arguments containing
            addons path and verbose flag.

    Returns:
        Exit code (0 if all definitions are valid, 1 otherwise).

    """
    # Configure global logger
    logger = get_logger(verbose=args.verbose, annotations=_annotations_enabled())
    set_global_logger(logger)

    addons_path = Path(args.addons_path).resolve()

    print(f"Validating addons: {addons_path}")
    print()

    result = validate_addons(addons_path, verbose=args.verbose)

    # Display results
    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Addons Path: {result.addons_path}")
    print(f"Status:      {result.status.upper()}")
    print(f"Definitions: {result.addon_count}")
    print()

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()

    print("=" * 70)

    if result.status == "valid":
        print()
        print("[SUCCESS] Addon definitions are valid!")
        return 0
    else:
        print()
        print(f"[FAILED] Validation failed with {len(result.errors)} error(s).")
        return 1


def cmd_generate(args: argparse.Namespace) -> int:
    """Handler for 'addon-manifest generate' command.

    Loads the addon definitions, merges the previous manifest, updates every
    addon's releases (and the loader's, if configured) and writes the new
    manifest. Without a manifest path the manifest is printed to stdout and
    all other output goes to stderr.

    Args:
        args: Parsed command-line arguments containing
            addons path, manifest path, loader repository, token and flags.

    Returns:
        Exit code (0 for success, 1 for fatal errors).

    Note:
        Addons that fail to update are reported but do not change the exit
        code; they keep their previous releases in the manifest.

    """
    manifest_path = Path(args.manifest_path).resolve() if args.manifest_path else None
    out = sys.stdout if manifest_path is not None else sys.stderr

    # Configure global logger
    logger = get_logger(
        verbose=args.verbose,
        debug=args.debug,
        stream=out,
        annotations=_annotations_enabled(),
    )
    set_global_logger(logger)

    addons_path = Path(args.addons_path).resolve()
    export_check = WinedumpExportCheck(args.winedump) if args.winedump else None

    print(f"Generating manifest from: {addons_path}", file=out)
    print(file=out)

    try:
        result = generate_manifest(
            addons_path,
            manifest_path,
            args.loader_repository,
            token=args.token,
            export_check=export_check,
        )
    except (AddonManifestError, OSError) as err:
        print(f"Error: {err}", file=out)
        if args.verbose or args.debug:
            import traceback

            traceback.print_exc()
        return 1

    if manifest_path is None:
        print(dump_manifest(result.manifest))

    # Display results
    print("=" * 70, file=out)
    print("MANIFEST RESULTS", file=out)
    print("=" * 70, file=out)
    print(f"Addons:          {len(result.manifest.addons)}", file=out)
    print(f"Removed:         {', '.join(result.removed) or '-'}", file=out)
    print(f"Failed:          {', '.join(result.failed) or '-'}", file=out)
    print(f"Manifest:        {result.manifest_path or '(stdout)'}", file=out)
    print("=" * 70, file=out)
    print(file=out)
    if result.failed:
        print(
            f"[DONE] Manifest generated, {len(result.failed)} update(s) failed.",
            file=out,
        )
    else:
        print("[SUCCESS] Manifest generated successfully!", file=out)

    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the addon-manifest CLI.

    This function is registered as the 'addon-manifest' console script in
    pyproject.toml.
    """
    parser = argparse.ArgumentParser(
        prog="addon-manifest",
        description="Generate the addon manifest for the GW2 addon loader",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"addon-manifest {__version__}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate addon definitions (no network access)",
        description="Check every addon definition for syntax and configuration errors without making network calls.",
    )
    parser_validate.add_argument(
        "--addons-path",
        default=_env_default("ADDONS_PATH", "addons"),
        help="Directory of addon definition files (default: addons)",
    )
    parser_validate.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show validation progress and details",
    )
    parser_validate.set_defaults(func=cmd_validate)

    # 'generate' command
    parser_generate = subparsers.add_parser(
        "generate",
        help="Update releases and write the addon manifest",
        description="Resolve the current releases of every addon (and the loader) and write the manifest.",
    )
    parser_generate.add_argument(
        "--addons-path",
        default=_env_default("ADDONS_PATH", "addons"),
        help="Directory of addon definition files (default: addons)",
    )
    parser_generate.add_argument(
        "--manifest-path",
        default=_env_default("MANIFEST_PATH"),
        help="Manifest file to update (default: print to stdout)",
    )
    parser_generate.add_argument(
        "--loader-repository",
        default=_env_default("LOADER_REPOSITORY"),
        help="GitHub repository of the loader as owner/repo (default: keep previous)",
    )
    parser_generate.add_argument(
        "--token",
        default=_env_default("TOKEN"),
        help="GitHub token (default: $GITHUB_TOKEN)",
    )
    parser_generate.add_argument(
        "--winedump",
        nargs="?",
        const="winedump",
        default=None,
        metavar="PATH",
        help="Check archive DLL exports with winedump instead of the built-in reader",
    )
    parser_generate.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser_generate.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    parser_generate.set_defaults(func=cmd_generate)

    # Parse and dispatch
    args = parser.parse_args(argv)

    # Call the appropriate command handler
    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
