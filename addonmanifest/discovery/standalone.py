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

"""Standalone host resolver for addonmanifest.

This resolver handles addons served from fixed URLs on an arbitrary web
server. Each channel is described by two URLs:

- version_url: a small document whose content changes with every build
  (a version string, a changelog, a JSON blob; the content is opaque)
- url: the addon binary (``.dll``) or an archive containing it (``.zip``)

Change Detection:

- The version document is fetched and hashed with SHA-256; the hex digest
  is the release id.
- If the id equals the recorded release id, nothing is downloaded and the
  recorded release is returned unchanged.
- Otherwise the binary is downloaded and its embedded version read. The new
  release replaces the recorded one only if its version is strictly
  greater; a changed document with a same-or-lower version keeps the
  recorded release.

Channels:

- The stable channel is always resolved.
- The prerelease channel is resolved only when both prerelease URLs are
  configured and a stable release exists. The prerelease is kept only if it
  is strictly newer than the stable release; otherwise it is dropped.

Addon Definition:
    ```yaml
    host:
      standalone:
        url: "https://example.com/addon.dll"                  # Required
        version_url: "https://example.com/version.txt"        # Required
        prerelease_url: "https://example.com/beta/addon.dll"  # Optional
        prerelease_version_url: "https://example.com/beta/version.txt"
    ```

Error Handling:

- FetchFailedError: version document not 200, binary not 2xx, timeout
- UnsupportedAssetTypeError: final binary URL is neither .dll nor .zip
- BinaryMetadataError / NoValidAssetInArchiveError: from extraction

A failure in one channel is recorded in the result and does not stop the
other channel from being attempted.
"""

from __future__ import annotations

import hashlib
from typing import Any

from addonmanifest.exceptions import AddonManifestError, UnsupportedAssetTypeError
from addonmanifest.io import fetch
from addonmanifest.manifest.schema import Release, ReleaseInfo, StandaloneHost
from addonmanifest.results import ResolveResult
from addonmanifest.versioning.keys import format_version, is_greater

from .assets import release_from_asset
from .base import ResolveContext, register_resolver


class StandaloneResolver:
    """Resolver for addons hosted on fixed URLs.

    Configuration example:
        host:
          standalone:
            url: "https://example.com/addon.dll"
            version_url: "https://example.com/version.txt"
    """

    def resolve(
        self, existing: ReleaseInfo, host: StandaloneHost, context: ResolveContext
    ) -> ResolveResult:
        """Resolve the stable and (optional) prerelease channel.

        Args:
            existing: Releases recorded by the previous run.
            host: Standalone host configuration.
            context: Shared collaborators.

        Returns:
            The resolved releases and any per-channel failures. A failed
            channel keeps its recorded release.
        """
        from addonmanifest.logging import get_global_logger

        logger = get_global_logger()
        errors: list[AddonManifestError] = []

        release = existing.release
        try:
            release = self.resolve_channel(
                existing.release, host.version_url, host.url, context
            )
        except AddonManifestError as err:
            errors.append(err)

        prerelease = None
        if host.has_prerelease and release is not None:
            candidate = existing.prerelease
            try:
                candidate = self.resolve_channel(
                    existing.prerelease,
                    host.prerelease_version_url,  # type: ignore[arg-type]
                    host.prerelease_url,  # type: ignore[arg-type]
                    context,
                )
            except AddonManifestError as err:
                errors.append(err)

            if candidate is not None and is_greater(candidate.version, release.version):
                prerelease = candidate
            elif candidate is not None:
                logger.verbose(
                    "STANDALONE",
                    f"Dropping prerelease {format_version(candidate.version)}: "
                    f"not newer than release {format_version(release.version)}",
                )

        return ResolveResult(
            releases=ReleaseInfo(release=release, prerelease=prerelease),
            errors=tuple(errors),
        )

    def resolve_channel(
        self,
        old_release: Release | None,
        version_url: str,
        url: str,
        context: ResolveContext,
    ) -> Release | None:
        """Resolve one channel.

        Args:
            old_release: Release recorded for this channel, if any.
            version_url: URL of the version document.
            url: URL of the binary or archive.
            context: Shared collaborators.

        Returns:
            The new release if it is newer, otherwise ``old_release``.

        Raises:
            FetchFailedError: If a fetch fails.
            UnsupportedAssetTypeError: If the binary URL has no supported
                suffix.
        """
        from addonmanifest.logging import get_global_logger

        logger = get_global_logger()

        version_doc = fetch(context.session, version_url, expected_status=200)
        id = hashlib.sha256(version_doc.content).hexdigest()

        if old_release is not None and old_release.id == id:
            logger.verbose("STANDALONE", f"Unchanged: {version_url}")
            return old_release

        logger.verbose("STANDALONE", f"Version document changed, downloading {url}")
        asset = fetch(context.session, url)
        release = release_from_asset(
            asset.url, asset.content, id, asset.url, context.export_check
        )
        if release is None:
            raise UnsupportedAssetTypeError(
                f"Host url has unsupported file type: {asset.url}"
            )

        if old_release is None or is_greater(release.version, old_release.version):
            return release

        logger.verbose(
            "STANDALONE",
            f"Downloaded version {format_version(release.version)} is not newer "
            f"than {format_version(old_release.version)}, keeping recorded release",
        )
        return old_release

    def validate_config(self, host_config: dict[str, Any]) -> list[str]:
        """Validate standalone host configuration.

        Checks for required fields and correct types without making network
        calls.

        Args:
            host_config: The ``host.standalone`` mapping.

        Returns:
            List of error messages (empty if valid).
        """
        errors = []
        if not isinstance(host_config, dict):
            return ["host.standalone must be a mapping"]

        for key in ("url", "version_url"):
            if key not in host_config:
                errors.append(f"Missing required field: host.standalone.{key}")
            elif not isinstance(host_config[key], str) or not host_config[key].strip():
                errors.append(f"host.standalone.{key} must be a non-empty string")

        for key in ("prerelease_url", "prerelease_version_url"):
            if key in host_config and not isinstance(host_config[key], str):
                errors.append(f"host.standalone.{key} must be a string")

        if ("prerelease_url" in host_config) != (
            "prerelease_version_url" in host_config
        ):
            errors.append(
                "host.standalone.prerelease_url and "
                "host.standalone.prerelease_version_url must be set together"
            )

        return errors


# Register this resolver when the module is imported
register_resolver(StandaloneHost.kind, StandaloneResolver)
