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

"""GitHub releases resolver for addonmanifest.

This resolver handles addons (and the loader) published as assets of GitHub
releases. It talks to the GitHub REST API directly over the shared requests
session.

Release Selection:

- The stable channel follows ``/releases/latest``. GitHub never reports a
  draft or prerelease there, so a stable release is found even when the
  newest 100 releases are all prereleases. If the repository has no latest
  release (404), the stable channel is empty.
- The prerelease channel is the first non-draft prerelease in the release
  listing (newest first) that appears before the latest stable release. If
  the walk reaches the latest stable release first, there is no prerelease.
- A prerelease whose version is not greater than the stable version is
  dropped.

Change Detection:

The release id recorded in the manifest is the GitHub asset id, and
``asset_index`` remembers which asset it came from. If the asset at that
index still has the same id, the release is unchanged and nothing is
downloaded. Otherwise the assets are tried in order; the first ``.dll`` or
``.zip`` asset that yields a release wins. Other asset types are skipped
without being downloaded.

Addon Definition:
    ```yaml
    host:
      github:
        url: "owner/repository"    # Required
    ```

Authentication:

The token (see addonmanifest.auth) is sent as a Bearer token. Unauthenticated
requests are limited to 60 per hour per IP, which is rarely enough for a
full manifest run.

Error Handling:

- FetchFailedError: listing releases or downloading an asset failed
- NetworkError: the API returned something that is not JSON release data
- NoValidReleaseAssetError: no asset of the release yields a valid release
"""

from __future__ import annotations

from dataclasses import replace
import json
from typing import Any

from addonmanifest.exceptions import (
    AddonManifestError,
    FetchFailedError,
    NetworkError,
    NoValidReleaseAssetError,
)
from addonmanifest.io import fetch
from addonmanifest.manifest.schema import GithubHost, Release, ReleaseInfo
from addonmanifest.results import ResolveResult
from addonmanifest.versioning.keys import format_version, is_greater

from .assets import is_supported_asset, release_from_asset
from .base import ResolveContext, register_resolver

API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
PER_PAGE = 100


class GithubResolver:
    """Resolver for GitHub release assets.

    Configuration example:
        host:
          github:
            url: "owner/repository"
    """

    def resolve(
        self, existing: ReleaseInfo, host: GithubHost, context: ResolveContext
    ) -> ResolveResult:
        """Resolve the latest stable release and the newest prerelease.

        Args:
            existing: Releases recorded by the previous run.
            host: GitHub host configuration.
            context: Shared collaborators.

        Returns:
            The resolved releases and any per-channel failures.

        Raises:
            FetchFailedError: If the release listing cannot be fetched.
            NetworkError: If the listing is not a JSON array of releases.
        """
        from addonmanifest.logging import get_global_logger

        logger = get_global_logger()
        errors: list[AddonManifestError] = []

        logger.verbose("GITHUB", f"Repository: {host.url}")
        releases = self._get_json(
            context, f"/repos/{host.url}/releases?per_page={PER_PAGE}"
        )
        if not isinstance(releases, list) or not all(
            isinstance(entry, dict) for entry in releases
        ):
            raise NetworkError(f"Unexpected release listing for {host.url}")

        latest = None
        try:
            latest = self._get_json(context, f"/repos/{host.url}/releases/latest")
        except FetchFailedError as err:
            logger.verbose("GITHUB", f"Could not find latest release: {err}")
        if latest is not None and not isinstance(latest, dict):
            raise NetworkError(f"Unexpected latest release for {host.url}")

        release = None
        if latest is not None:
            try:
                release = self.find_and_create_release(
                    existing.release, latest, host, context
                )
            except AddonManifestError as err:
                errors.append(err)
                release = existing.release

        prerelease = None
        latest_id = latest.get("id") if latest else None
        for entry in releases:
            if entry.get("prerelease") and not entry.get("draft"):
                logger.verbose(
                    "GITHUB", f"Found prerelease: {entry.get('tag_name', entry.get('id'))}"
                )
                try:
                    prerelease = self.find_and_create_release(
                        existing.prerelease, entry, host, context
                    )
                except AddonManifestError as err:
                    errors.append(err)
                    prerelease = existing.prerelease
                break
            if latest_id is not None and entry.get("id") == latest_id:
                break

        if (
            prerelease is not None
            and release is not None
            and not is_greater(prerelease.version, release.version)
        ):
            logger.verbose(
                "GITHUB",
                f"Dropping prerelease {format_version(prerelease.version)}: "
                f"not newer than release {format_version(release.version)}",
            )
            prerelease = None

        return ResolveResult(
            releases=ReleaseInfo(release=release, prerelease=prerelease),
            errors=tuple(errors),
        )

    def find_and_create_release(
        self,
        old_release: Release | None,
        github_release: dict[str, Any],
        host: GithubHost,
        context: ResolveContext,
    ) -> Release | None:
        """Create a release from the assets of a GitHub release.

        Args:
            old_release: Release recorded for this channel, if any.
            github_release: GitHub API release object.
            host: GitHub host configuration.
            context: Shared collaborators.

        Returns:
            ``old_release`` if the recorded asset is unchanged or the new
            version is not greater, otherwise the new release.

        Raises:
            NoValidReleaseAssetError: If no asset yields a release.
            FetchFailedError: If an asset download fails.
        """
        from addonmanifest.logging import get_global_logger

        logger = get_global_logger()
        assets = github_release.get("assets") or []
        if not isinstance(assets, list) or not all(
            isinstance(asset, dict) and "id" in asset for asset in assets
        ):
            raise NetworkError("Unexpected asset list in GitHub release")

        if not _asset_changed(old_release, assets):
            logger.verbose("GITHUB", f"Asset unchanged: {old_release.id}")  # type: ignore[union-attr]
            return old_release

        for index, asset in enumerate(assets):
            name = str(asset.get("name") or "")
            if not is_supported_asset(name):
                logger.debug("GITHUB", f"Skipping asset {name}")
                continue

            logger.verbose("GITHUB", f"Downloading asset {name}")
            downloaded = fetch(
                context.session,
                f"{API_URL}/repos/{host.url}/releases/assets/{asset['id']}",
                headers={
                    **_api_headers(context.token),
                    "Accept": "application/octet-stream",
                },
            )
            release = release_from_asset(
                name,
                downloaded.content,
                str(asset["id"]),
                asset.get("browser_download_url", ""),
                context.export_check,
            )
            if release is None:
                continue

            release = replace(release, asset_index=index)
            if old_release is None or is_greater(release.version, old_release.version):
                return release
            logger.verbose(
                "GITHUB",
                f"Asset version {format_version(release.version)} is not newer "
                f"than {format_version(old_release.version)}",
            )
            return old_release

        raise NoValidReleaseAssetError("No valid release asset found")

    def _get_json(self, context: ResolveContext, path: str) -> Any:
        url = f"{API_URL}{path}"
        result = fetch(context.session, url, headers=_api_headers(context.token))
        try:
            return json.loads(result.content)
        except ValueError as err:
            raise NetworkError(f"Invalid JSON from GitHub API ({url}): {err}") from err

    def validate_config(self, host_config: dict[str, Any]) -> list[str]:
        """Validate GitHub host configuration.

        Checks for required fields and correct format without making network
        calls.

        Args:
            host_config: The ``host.github`` mapping.

        Returns:
            List of error messages (empty if valid).
        """
        errors = []
        if not isinstance(host_config, dict):
            return ["host.github must be a mapping"]

        if "url" not in host_config:
            errors.append("Missing required field: host.github.url")
        else:
            url = host_config["url"]
            if not isinstance(url, str):
                errors.append("host.github.url must be a string")
            elif url.count("/") != 1 or not all(url.split("/")):
                errors.append(
                    f"Invalid host.github.url format: {url!r}. "
                    f"Expected 'owner/repository'"
                )

        return errors


def _api_headers(token: str | None) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": API_VERSION,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _asset_changed(release: Release | None, assets: list[dict[str, Any]]) -> bool:
    if release is None or release.asset_index is None:
        return True
    if not 0 <= release.asset_index < len(assets):
        return True
    return str(assets[release.asset_index].get("id")) != release.id


# Register this resolver when the module is imported
register_resolver(GithubHost.kind, GithubResolver)
