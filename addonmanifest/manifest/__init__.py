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

"""Manifest records and persistence for addonmanifest.

The manifest is the catalog consumed by the game-side addon manager: every
known addon with its package information, host, observed product names and
the current stable and prerelease downloads, plus the loader's releases.

Public API:

- Manifest, Addon, Package, Release, ReleaseInfo: typed records
- GithubHost, StandaloneHost: host configurations (tagged by ``kind``)
- read_manifest: Load and validate a previous manifest
- write_manifest: Write a manifest with 2-space indentation

Example:
    from pathlib import Path
    from addonmanifest.manifest import read_manifest

    manifest = read_manifest(Path("manifest.json"))
    for addon in manifest.addons:
        print(addon.id, addon.release and addon.release.version_str)

"""

from .schema import (
    MANIFEST_VERSION,
    Addon,
    GithubHost,
    Manifest,
    Package,
    Release,
    ReleaseInfo,
    StandaloneHost,
    add_addon_name,
)
from .store import dump_manifest, read_manifest, write_manifest

__all__ = [
    "MANIFEST_VERSION",
    "Addon",
    "GithubHost",
    "Manifest",
    "Package",
    "Release",
    "ReleaseInfo",
    "StandaloneHost",
    "add_addon_name",
    "dump_manifest",
    "read_manifest",
    "write_manifest",
]
