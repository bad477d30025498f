"""
Addon definition loading for addonmanifest.

Each addon is described by one YAML or TOML file in the addons directory.
This module finds those files, parses them, validates them and turns them
into ``Addon`` records. Release state is not part of a definition; it comes
from the previous manifest and is merged in by the reconciler.

Both formats describe the same document:

    [package]
    id = "gw2radial"
    name = "GW2Radial"

    [host.github]
    url = "Friendly0Fire/GW2Radial"

File Selection
--------------
  - Only direct children of the addons directory are read
  - Only files ending in ``.yaml``, ``.yml`` or ``.toml`` are considered
  - Files are processed in sorted name order so runs are reproducible

Validation
----------
Every file is validated before any of them is used:
  - Each error is reported through the logger with the file attached
  - Duplicate package ids across files are errors
  - After all files are checked, any error fails the load with ConfigError

Functions
---------
load_addons : function
    Load and validate every addon definition in a directory (main API).
addon_definition_files : function
    List the definition files of a directory in processing order.
load_definition_file : function
    Parse one definition file by suffix, translating parse errors into
    ConfigError.
load_yaml_file : function
    Parse one YAML file.
load_toml_file : function
    Parse one TOML file.

Examples
--------
Basic usage:

    >>> from pathlib import Path
    >>> from addonmanifest.config import load_addons
    >>> for definition in load_addons(Path("addons")):
    ...     print(definition.addon.id, definition.path.name)
    gw2radial gw2radial.yaml

Notes
-----
- A missing addons directory is a ConfigError, not an empty catalog
- Empty definition files are reported as errors
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import tomllib
from typing import Any

import yaml

from addonmanifest.exceptions import ConfigError
from addonmanifest.manifest.schema import Addon

DEFINITION_SUFFIXES = (".yaml", ".yml", ".toml")

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class AddonDefinition:
    """An addon parsed from its definition file."""

    addon: Addon
    path: Path


# -------------------------------
# File helpers
# -------------------------------


def addon_definition_files(addons_path: Path) -> list[Path]:
    """Return the definition files directly inside ``addons_path``, sorted by name."""
    return sorted(
        p
        for p in addons_path.iterdir()
        if p.is_file() and p.suffix.lower() in DEFINITION_SUFFIXES
    )


def load_yaml_file(p: Path) -> Any:
    """
    Load a YAML file and return the parsed Python object.

    Raises:
      ConfigError - for unreadable files, invalid YAML or empty files
    """
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"{p.name}: Invalid YAML syntax: {err}") from err
    except OSError as err:
        raise ConfigError(f"{p.name}: Failed to read file: {err}") from err
    if data is None:
        raise ConfigError(f"{p.name}: YAML file is empty")
    return data


def load_toml_file(p: Path) -> dict[str, Any]:
    """
    Load a TOML file and return the parsed table.

    Raises:
      ConfigError - for unreadable files, invalid TOML or empty files
    """
    try:
        with p.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as err:
        raise ConfigError(f"{p.name}: Invalid TOML syntax: {err}") from err
    except OSError as err:
        raise ConfigError(f"{p.name}: Failed to read file: {err}") from err
    if not data:
        raise ConfigError(f"{p.name}: TOML file is empty")
    return data


def load_definition_file(p: Path) -> Any:
    """Load one addon definition, picking the parser from the file suffix."""
    if p.suffix.lower() == ".toml":
        return load_toml_file(p)
    return load_yaml_file(p)


# -------------------------------
# Public API
# -------------------------------


def load_addons(addons_path: Path) -> list[AddonDefinition]:
    """
    Load every addon definition in ``addons_path``.

    All files are validated before failing so that every problem is reported
    in one run.

    Args:
        addons_path: Directory containing the addon definition files.

    Returns:
        The parsed definitions in file order.

    Raises:
        ConfigError: If the directory does not exist, or if any definition
            is invalid (after every error has been reported).
    """
    from addonmanifest.logging import get_global_logger
    from addonmanifest.validation import package_id, validate_addon_definition

    logger = get_global_logger()

    if not addons_path.is_dir():
        raise ConfigError(f"Addon directory does not exist: {addons_path}")

    definitions: list[AddonDefinition] = []
    seen: dict[str, Path] = {}
    failed = False

    for file_path in addon_definition_files(addons_path):
        logger.debug("CONFIG", f"Reading {file_path}")
        try:
            data = load_definition_file(file_path)
        except ConfigError as err:
            logger.error(str(err), file=str(file_path))
            failed = True
            continue

        errors, warnings = validate_addon_definition(data)
        for warning in warnings:
            logger.verbose("CONFIG", f"{file_path.name}: {warning}")

        addon_id = package_id(data)
        if addon_id is not None and addon_id in seen:
            errors.append(
                f"Duplicate package id {addon_id!r} "
                f"(already defined in {seen[addon_id].name})"
            )

        if not errors:
            try:
                addon = Addon.from_dict(data, file_path.name)
            except ValueError as err:
                errors.append(str(err))

        if errors:
            failed = True
            for message in errors:
                logger.error(f"{file_path.name}: {message}", file=str(file_path))
            continue

        seen[addon.id] = file_path
        definitions.append(AddonDefinition(addon=addon, path=file_path))

    if failed:
        raise ConfigError("Validation of some addons failed")

    logger.verbose("CONFIG", f"Loaded {len(definitions)} addon definition(s)")
    return definitions
