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

"""Exception hierarchy for addonmanifest.

This module defines a custom exception hierarchy that allows library users
to distinguish between different types of errors:

- ConfigError: Addon definitions or prior manifest cannot be interpreted
- NetworkError: A fetch failed (non-success status, timeout, connection)
- ReleaseError: A downloaded asset could not be turned into a release

All exceptions inherit from AddonManifestError, allowing users to catch all
errors with a single except clause if needed.

Example:
    Catching specific error types:
        ```python
        from addonmanifest.core import generate_manifest
        from addonmanifest.exceptions import ConfigError, InvalidManifestError

        try:
            result = generate_manifest(Path("addons"), Path("manifest.json"))
        except InvalidManifestError as e:
            print(f"Manifest is corrupt: {e}")
        except ConfigError as e:
            print(f"Addon definitions are invalid: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "AddonManifestError",
    "ConfigError",
    "InvalidManifestError",
    "NetworkError",
    "FetchFailedError",
    "ReleaseError",
    "UnsupportedAssetTypeError",
    "NoValidAssetInArchiveError",
    "NoValidReleaseAssetError",
    "BinaryMetadataError",
    "NoVersionResourceError",
    "NoVersionFoundError",
    "NoNameFoundError",
]


class AddonManifestError(Exception):
    """Base exception for all addonmanifest errors."""

    pass


class ConfigError(AddonManifestError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML or TOML parsing of addon definition files
    - Missing or invalid addon definition fields
    - Duplicate addon ids
    - Unknown host kinds
    """

    pass


class InvalidManifestError(ConfigError):
    """Raised when a prior manifest exists but has an unrecognized shape.

    A prior manifest must be either a bare list of addons (legacy format) or
    a versioned record (``{"version": 1, "data": {...}}``). Anything else,
    including invalid JSON, raises this error before any network activity.
    """

    pass


class NetworkError(AddonManifestError):
    """Raised for network-related errors."""

    pass


class FetchFailedError(NetworkError):
    """Raised when a fetch returns a non-success status or times out.

    Attributes:
        url: The URL that was requested.
        status_code: HTTP status code, or None if no response was received.
    """

    def __init__(self, message: str, url: str, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ReleaseError(AddonManifestError):
    """Raised when a release cannot be created from downloaded content."""

    pass


class UnsupportedAssetTypeError(ReleaseError):
    """Raised when a standalone download URL has an unrecognized suffix."""

    pass


class NoValidAssetInArchiveError(ReleaseError):
    """Raised when no binary inside an archive passes the validity check."""

    pass


class NoValidReleaseAssetError(ReleaseError):
    """Raised when no asset of a GitHub release yields a parseable release."""

    pass


class BinaryMetadataError(ReleaseError):
    """Base class for binaries that lack the required embedded metadata."""

    pass


class NoVersionResourceError(BinaryMetadataError):
    """Raised when the binary has no version-information resource.

    Also raised for byte strings that are not a PE image at all, or whose
    headers are truncated.
    """

    pass


class NoVersionFoundError(BinaryMetadataError):
    """Raised when both the file and product version are all zero."""

    pass


class NoNameFoundError(BinaryMetadataError):
    """Raised when the string table has neither ProductName nor FileDescription."""

    pass
