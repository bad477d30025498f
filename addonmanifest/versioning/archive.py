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

"""Release extraction from zip archives.

Addons are sometimes shipped as a zip containing the addon DLL and helper
DLLs. The archive is opened in memory and its ``.dll`` entries are tried in
archive order. Each candidate is written to its own temporary directory,
checked with an export predicate, and removed again before the next
candidate is looked at. Entries that cannot be read are skipped. The first
candidate that passes is parsed with release_from_dll; later entries are
never examined.

Example:
    Locate the addon inside an archive:

        from addonmanifest.versioning.archive import release_from_archive
        from addonmanifest.versioning.exports import has_addon_exports

        release = release_from_archive(
            content,
            id="abc123",
            download_url="https://example.com/addon.zip",
            export_check=has_addon_exports,
        )
"""

from __future__ import annotations

import io
from pathlib import Path, PurePosixPath
import tempfile
import zipfile
import zlib

from addonmanifest.exceptions import NoValidAssetInArchiveError
from addonmanifest.manifest.schema import Release
from addonmanifest.versioning.dll import release_from_dll
from addonmanifest.versioning.exports import ExportCheck, has_addon_exports

BINARY_SUFFIX = ".dll"

# Raised by ZipFile.read for entries it cannot decode
_UNREADABLE_ENTRY = (
    zipfile.BadZipFile,
    RuntimeError,
    NotImplementedError,
    OSError,
    zlib.error,
)


def release_from_archive(
    content: bytes,
    id: str,
    download_url: str,
    export_check: ExportCheck = has_addon_exports,
) -> Release:
    """Create a Release from the first valid DLL inside a zip archive.

    Args:
        content: Raw bytes of the zip archive.
        id: Content identity to store on the release.
        download_url: Download URL to store on the release.
        export_check: Predicate called with the path of a temporary copy of
            each candidate; returns True for the addon DLL.

    Returns:
        The release of the first candidate accepted by ``export_check``.

    Raises:
        NoValidAssetInArchiveError: If the bytes are not a zip archive or no
            candidate passes ``export_check``.
        BinaryMetadataError: If the accepted candidate lacks version
            metadata.
    """
    from addonmanifest.logging import get_global_logger

    logger = get_global_logger()

    try:
        archive = zipfile.ZipFile(io.BytesIO(content))
    except zipfile.BadZipFile as err:
        raise NoValidAssetInArchiveError(f"Not a valid zip archive: {err}") from err

    with archive:
        candidates = [
            info
            for info in archive.infolist()
            if not info.is_dir() and info.filename.lower().endswith(BINARY_SUFFIX)
        ]
        logger.verbose("ARCHIVE", f"Found {len(candidates)} candidate binaries")

        for info in candidates:
            try:
                data = archive.read(info)
            except _UNREADABLE_ENTRY as err:
                logger.verbose("ARCHIVE", f"Skipping {info.filename}: {err}")
                continue
            if _passes_check(info.filename, data, export_check):
                logger.verbose("ARCHIVE", f"Using {info.filename}")
                return release_from_dll(data, id, download_url)
            logger.debug("ARCHIVE", f"Skipping {info.filename}: no addon entry point")

    raise NoValidAssetInArchiveError("No valid release assets found in archive")


def _passes_check(name: str, data: bytes, export_check: ExportCheck) -> bool:
    """Write one candidate to a scoped temporary file and run the check.

    The temporary directory is removed when this function returns, whether
    the check passed, failed or raised.
    """
    from addonmanifest.logging import get_global_logger

    with tempfile.TemporaryDirectory(prefix="addonmanifest-") as tmp:
        path = Path(tmp) / PurePosixPath(name).name
        path.write_bytes(data)
        try:
            return bool(export_check(path))
        except Exception as err:
            get_global_logger().debug("ARCHIVE", f"Check failed for {name}: {err}")
            return False
