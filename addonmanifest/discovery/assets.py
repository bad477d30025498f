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

"""Suffix dispatch from downloaded assets to release extraction."""

from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import urlparse

from addonmanifest.manifest.schema import Release
from addonmanifest.versioning.archive import release_from_archive
from addonmanifest.versioning.dll import release_from_dll
from addonmanifest.versioning.exports import ExportCheck

SUPPORTED_SUFFIXES = (".dll", ".zip")


def asset_suffix(name_or_url: str) -> str:
    """Return the lower-cased file suffix of a file name or URL path.

    Query strings and fragments of URLs are ignored.
    """
    path = urlparse(name_or_url).path if "://" in name_or_url else name_or_url
    return PurePosixPath(path).suffix.lower()


def is_supported_asset(name_or_url: str) -> bool:
    return asset_suffix(name_or_url) in SUPPORTED_SUFFIXES


def release_from_asset(
    name_or_url: str,
    content: bytes,
    id: str,
    download_url: str,
    export_check: ExportCheck,
) -> Release | None:
    """Create a Release from a downloaded asset, chosen by its suffix.

    ``.dll`` assets are parsed directly, ``.zip`` assets are searched for the
    addon DLL. Any other suffix returns None so that callers can decide
    whether that is an error (standalone hosts) or a skip (GitHub assets).
    """
    suffix = asset_suffix(name_or_url)
    if suffix == ".dll":
        return release_from_dll(content, id, download_url)
    if suffix == ".zip":
        return release_from_archive(content, id, download_url, export_check)
    return None
