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

"""Addon definition validation module.

This module provides validation functions for checking addon definitions
without making network calls or downloading files. This is useful for quick
feedback when adding an addon and in CI pipelines that gate pull requests
against the addons directory.

Validation Checks:

- YAML or TOML syntax is valid
- Required sections present (package, host)
- package.id and package.name are non-empty strings
- Optional package fields are strings
- host names exactly one known host kind
- Host-specific configuration is valid (delegated to the resolver)
- Package ids are unique across the directory

Example:
    Validate an addons directory and handle results:
        ```python
        from pathlib import Path
        from addonmanifest.validation import validate_addons

        result = validate_addons(Path("addons"))
        if result.status == "valid":
            print(f"{result.addon_count} addon definition(s) are valid")
        else:
            for error in result.errors:
                print(f"Error: {error}")
        ```

"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from addonmanifest.config.loader import addon_definition_files, load_definition_file
from addonmanifest.discovery import get_resolver
from addonmanifest.exceptions import ConfigError
from addonmanifest.manifest.schema import HOST_TYPES, Package
from addonmanifest.results import ValidationResult

__all__ = ["validate_addon_definition", "validate_addons"]

_KNOWN_SECTIONS = ("package", "host")


def validate_addon_definition(definition: Any) -> tuple[list[str], list[str]]:
    """Validate one parsed addon definition.

    Does NOT:

    - Make network calls
    - Verify URLs are accessible
    - Check that releases can be found

    Args:
        definition: The parsed definition document.

    Returns:
        A tuple (errors, warnings) of message lists.

    Example:
        Validate a definition:
            ```python
            errors, warnings = validate_addon_definition(
                {"package": {"id": "x", "name": "X"}, "host": {"github": {"url": "o/r"}}}
            )
            assert errors == []
            ```

    """
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(definition, dict):
        return ["Addon definition must be a YAML mapping"], warnings

    for key in definition:
        if key not in _KNOWN_SECTIONS:
            warnings.append(f"Unknown top-level field ignored: {key}")

    # package
    package = definition.get("package")
    if package is None:
        errors.append("Missing required field: package")
    elif not isinstance(package, dict):
        errors.append("Field 'package' must be a mapping")
    else:
        for field in ("id", "name"):
            if field not in package:
                errors.append(f"Missing required field: package.{field}")
            elif not isinstance(package[field], str):
                errors.append(f"Field 'package.{field}' must be a string")
            elif not package[field].strip():
                errors.append(f"Field 'package.{field}' cannot be empty")
        for field in Package._OPTIONAL:
            if package.get(field) is not None and not isinstance(package[field], str):
                errors.append(f"Field 'package.{field}' must be a string")
        for key in package:
            if key not in ("id", "name", *Package._OPTIONAL):
                warnings.append(f"Unknown field ignored: package.{key}")

    # host
    host = definition.get("host")
    if host is None:
        errors.append("Missing required field: host")
        return errors, warnings
    if not isinstance(host, dict):
        errors.append("Field 'host' must be a mapping")
        return errors, warnings

    kinds = list(host)
    if len(kinds) != 1:
        errors.append(
            f"Field 'host' must contain exactly one of: {', '.join(HOST_TYPES)}"
        )
        return errors, warnings

    kind = kinds[0]
    try:
        resolver = get_resolver(kind)
    except ConfigError as err:
        errors.append(f"host: {err}")
        return errors, warnings

    errors.extend(resolver.validate_config(host[kind]))
    return errors, warnings


def validate_addons(addons_path: Path, verbose: bool = False) -> ValidationResult:
    """Validate every addon definition in a directory.

    All files are checked and every error is collected before returning, so
    one run reports everything that needs fixing.

    Args:
        addons_path: Directory containing the addon definition files.
        verbose: If True, print validation progress.
            Default is False.

    Returns:
        Validation status, errors, warnings, number of definitions checked
            and the directory path.

    """
    errors: list[str] = []
    warnings: list[str] = []

    if verbose:
        print(f"Validating addons: {addons_path}")

    if not addons_path.is_dir():
        errors.append(f"Addon directory does not exist: {addons_path}")
        return ValidationResult(
            status="invalid",
            errors=errors,
            warnings=warnings,
            addon_count=0,
            addons_path=str(addons_path),
        )

    files = addon_definition_files(addons_path)
    seen: dict[str, Path] = {}

    for file_path in files:
        try:
            definition = load_definition_file(file_path)
        except ConfigError as err:
            errors.append(str(err))
            continue

        file_errors, file_warnings = validate_addon_definition(definition)
        errors.extend(f"{file_path.name}: {e}" for e in file_errors)
        warnings.extend(f"{file_path.name}: {w}" for w in file_warnings)

        addon_id = package_id(definition)
        if addon_id:
            if addon_id in seen:
                errors.append(
                    f"{file_path.name}: Duplicate package id {addon_id!r} "
                    f"(already defined in {seen[addon_id].name})"
                )
            else:
                seen[addon_id] = file_path

        if verbose and not file_errors:
            print(f"  [OK] {file_path.name}")

    if not files:
        warnings.append(f"No addon definitions found in {addons_path}")

    status = "valid" if len(errors) == 0 else "invalid"

    if verbose:
        if status == "valid":
            print("  [OK] Addon definitions are valid!")
        else:
            print(f"  [ERROR] Found {len(errors)} error(s)")

    return ValidationResult(
        status=status,
        errors=errors,
        warnings=warnings,
        addon_count=len(files),
        addons_path=str(addons_path),
    )


def package_id(definition: Any) -> str | None:
    """Return ``package.id`` of a parsed definition if it is a usable string."""
    if not isinstance(definition, dict):
        return None
    package = definition.get("package")
    if not isinstance(package, dict):
        return None
    addon_id = package.get("id")
    if isinstance(addon_id, str) and addon_id.strip():
        return addon_id
    return None
