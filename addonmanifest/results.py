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

"""Public API return types for addonmanifest.

This module defines dataclasses for return values from public API functions.
All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pathlib import Path
        from addonmanifest.core import generate_manifest

        result = generate_manifest(Path("addons"), Path("manifest.json"))
        print(len(result.manifest.addons))
        print(result.failed)  # ids of addons that failed to update
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like Release and Addon) live in addonmanifest.manifest.schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from addonmanifest.exceptions import AddonManifestError
from addonmanifest.manifest.schema import Manifest, ReleaseInfo


@dataclass(frozen=True)
class ResolveResult:
    """Result from resolving the release channels of one source.

    Attributes:
        releases: The stable and prerelease release after this pass. A
            channel that failed keeps its previous value.
        errors: Failures of individual channels. Empty when every channel
            resolved (including "no change").
    """

    releases: ReleaseInfo
    errors: tuple[AddonManifestError, ...] = ()


@dataclass(frozen=True)
class GenerateResult:
    """Result from generating the manifest.

    Attributes:
        manifest: The generated manifest.
        manifest_path: Where the manifest was written, or None.
        removed: Ids of addons dropped because their definition is gone.
        failed: Ids of addons (or "loader") that reported an error.
    """

    manifest: Manifest
    manifest_path: Path | None = None
    removed: tuple[str, ...] = field(default_factory=tuple)
    failed: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating the addon definitions.

    Attributes:
        status: Validation status ("valid" or "invalid").
        errors: List of error messages (empty if valid).
        warnings: List of warning messages.
        addon_count: Number of addon definition files checked.
        addons_path: String path to the validated directory.
    """

    status: str
    errors: list[str]
    warnings: list[str]
    addon_count: int
    addons_path: str
