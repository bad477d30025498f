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

"""Manifest persistence for addonmanifest.

The manifest written by the previous run is the only state kept between
runs. It is read before any network activity so that a corrupt manifest
fails the run before anything is downloaded.

Accepted Formats:

- Current: an object ``{"version": 1, "data": {"addons": [...], "loader": {...}}}``
- Legacy: a bare array of addons (written by early releases, no loader)

Anything else is rejected with InvalidManifestError; the run never silently
starts from an empty manifest when a file exists but cannot be understood.

Example:
    ```python
    from pathlib import Path
    from addonmanifest.manifest import read_manifest, write_manifest

    manifest = read_manifest(Path("manifest.json"))
    write_manifest(manifest, Path("manifest.json"))
    ```
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from addonmanifest.exceptions import InvalidManifestError

from .schema import MANIFEST_VERSION, Addon, Manifest, ReleaseInfo


def read_manifest(manifest_path: Path) -> Manifest:
    """Read and validate a manifest file.

    Args:
        manifest_path: Path of the manifest JSON file.

    Returns:
        The parsed manifest. Legacy array manifests yield an empty loader.

    Raises:
        InvalidManifestError: If the file is not valid JSON or does not match
            either accepted format.
        OSError: If the file cannot be read.
    """
    from addonmanifest.logging import get_global_logger

    logger = get_global_logger()

    with open(manifest_path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as err:
            raise InvalidManifestError(
                f"Invalid manifest {manifest_path}: {err}"
            ) from err

    try:
        manifest = manifest_from_data(data)
    except ValueError as err:
        raise InvalidManifestError(f"Invalid manifest {manifest_path}: {err}") from err

    logger.verbose(
        "MANIFEST",
        f"Loaded {len(manifest.addons)} addon(s) from {manifest_path}",
    )
    return manifest


def manifest_from_data(data: Any) -> Manifest:
    """Build a Manifest from decoded JSON.

    Raises:
        InvalidManifestError: If the top-level shape is not recognized.
        ValueError: If an element inside a recognized shape is malformed.
    """
    if isinstance(data, list):
        return Manifest(addons=_addons_from_list(data, "addons"))

    if isinstance(data, dict) and "version" in data:
        if data["version"] != MANIFEST_VERSION:
            raise InvalidManifestError(
                f"Unsupported manifest version: {data['version']!r}"
            )
        body = data.get("data")
        if not isinstance(body, dict):
            raise ValueError("data must be an object")
        addons = body.get("addons", [])
        if not isinstance(addons, list):
            raise ValueError("data.addons must be an array")
        return Manifest(
            addons=_addons_from_list(addons, "data.addons"),
            loader=ReleaseInfo.from_dict(body.get("loader") or {}, "data.loader"),
        )

    raise InvalidManifestError("Invalid manifest")


def _addons_from_list(items: list[Any], where: str) -> tuple[Addon, ...]:
    return tuple(
        Addon.from_dict(item, f"{where}[{index}]") for index, item in enumerate(items)
    )


def dump_manifest(manifest: Manifest) -> str:
    """Serialize a manifest to pretty-printed JSON (2-space indent)."""
    return json.dumps(manifest.to_dict(), indent=2)


def write_manifest(manifest: Manifest, manifest_path: Path) -> None:
    """Write a manifest to disk.

    Creates parent directories if needed.

    Args:
        manifest: Manifest to write.
        manifest_path: Destination path.

    Raises:
        OSError: If the file cannot be written.
    """
    manifest_path.parent.mkdir(parents=True, exist_ok=True)

    with open(manifest_path, "w", encoding="utf-8") as f:
        f.write(dump_manifest(manifest))
        f.write("\n")  # Trailing newline for git
