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

"""Release extraction from addon DLLs.

This module turns the raw bytes of an addon DLL into a Release by reading
the version-information resource embedded in the binary.

Extraction Rules:

1. The VS_VERSIONINFO resource must exist (NoVersionResourceError).
2. The file version (dwFileVersionMS/LS) is used; if it is all zero the
   product version (dwProductVersionMS/LS) is used instead. If both are
   zero, NoVersionFoundError is raised.
3. From the first string table:
    - name: ProductName, else FileDescription (NoNameFoundError if neither)
    - version_str: FileVersion, else ProductVersion, else the dotted version

Example:
    Extract a release from a downloaded DLL:

        from addonmanifest.versioning.dll import release_from_dll

        release = release_from_dll(
            content,
            id="1234567",
            download_url="https://example.com/addon.dll",
        )
        print(f"{release.name} {release.version_str}")

Note:
    Identical input bytes always produce an identical release; ``id`` and
    ``download_url`` are passed through unchanged.
"""

from __future__ import annotations

from addonmanifest.exceptions import (
    NoNameFoundError,
    NoVersionFoundError,
    NoVersionResourceError,
)
from addonmanifest.manifest.schema import Release
from addonmanifest.versioning.keys import (
    format_version,
    is_empty_version,
    version_from_words,
)
from addonmanifest.versioning.pe import PEImage

NAME_KEYS = ("ProductName", "FileDescription")
VERSION_KEYS = ("FileVersion", "ProductVersion")


def release_from_dll(content: bytes, id: str, download_url: str) -> Release:
    """Create a Release from the bytes of a DLL.

    Args:
        content: Raw bytes of the PE image.
        id: Content identity to store on the release.
        download_url: Download URL to store on the release.

    Returns:
        The release described by the binary's version resource.

    Raises:
        NoVersionResourceError: If the bytes are not a PE image or carry no
            version-information resource.
        NoVersionFoundError: If file and product version are both all zero.
        NoNameFoundError: If no string table provides a product name.
    """
    from addonmanifest.logging import get_global_logger

    logger = get_global_logger()

    try:
        image = PEImage(content)
    except ValueError as err:
        raise NoVersionResourceError(f"Not a valid PE image: {err}") from err

    info = image.version_info()
    if info is None or info.fixed is None:
        raise NoVersionResourceError("No version information resource found")

    fixed = info.fixed
    version = version_from_words(fixed.file_version_ms, fixed.file_version_ls)
    if is_empty_version(version):
        logger.debug("PE", "File version is empty, using product version")
        version = version_from_words(
            fixed.product_version_ms, fixed.product_version_ls
        )
    if is_empty_version(version):
        raise NoVersionFoundError("Binary has neither a file nor a product version")

    strings = info.strings
    name = next((strings[key] for key in NAME_KEYS if key in strings), None)
    if name is None:
        raise NoNameFoundError("Binary has neither ProductName nor FileDescription")

    version_str = next(
        (strings[key] for key in VERSION_KEYS if key in strings),
        format_version(version),
    )

    logger.verbose("PE", f"Found {name} {version_str} ({format_version(version)})")

    return Release(
        id=id,
        name=name,
        version=version,
        version_str=version_str,
        download_url=download_url,
    )
