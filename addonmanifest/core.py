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

"""Core orchestration for addonmanifest.

This module provides the high-level function that turns a directory of addon
definitions plus the previous manifest into the next manifest.

Run Outline:

1. Load and validate every addon definition (fatal on any error).
2. Read the previous manifest, if one exists (fatal if it is invalid). This
   happens before any network request.
3. Merge: carry release, prerelease and known addon names over from the
   previous manifest; warn about addons whose definition is gone.
4. Resolve each addon's releases with the resolver for its host kind.
5. Resolve the loader's releases, if a loader repository is configured.
6. Write the manifest (or return it for printing).

Failure Isolation:

- A failing addon is reported (title = package name, file = definition
  file) and keeps the releases of the previous manifest.
- A failing channel of an addon is reported the same way; the other channel
  is still updated.
- A failing loader update is reported and keeps its previous releases.

None of these fail the run. Only definition errors, an invalid previous
manifest and a missing addons directory are fatal.

Design Principles:

- Addons are processed strictly one after another, in definition order
- Records are immutable; every update builds new records
- Error handling uses exceptions; CLI layer formats for user display

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from addonmanifest.core import generate_manifest

        result = generate_manifest(
            addons_path=Path("addons"),
            manifest_path=Path("manifest.json"),
            loader_repo="gw2-addon-loader/loader-core",
        )

        print(f"Addons: {len(result.manifest.addons)}")
        print(f"Failed: {', '.join(result.failed) or 'none'}")
        ```

"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import requests

from addonmanifest.auth import get_github_token
from addonmanifest.config import AddonDefinition, load_addons
from addonmanifest.discovery import ResolveContext, get_resolver
from addonmanifest.discovery.github import GithubResolver
from addonmanifest.exceptions import AddonManifestError, ConfigError
from addonmanifest.io import make_session
from addonmanifest.logging import get_global_logger
from addonmanifest.manifest import (
    Addon,
    GithubHost,
    Manifest,
    ReleaseInfo,
    add_addon_name,
    read_manifest,
    write_manifest,
)
from addonmanifest.results import GenerateResult
from addonmanifest.versioning.exports import ExportCheck, has_addon_exports

LOADER_ID = "loader"


def merge_previous(
    definitions: list[AddonDefinition], previous: Manifest | None
) -> tuple[list[AddonDefinition], tuple[str, ...]]:
    """Carry release state of the previous manifest over to the definitions.

    Args:
        definitions: Freshly loaded addon definitions.
        previous: The previous manifest, or None on the first run.

    Returns:
        The definitions with release, prerelease and addon_names copied
            from the matching previous addon, and the ids of previous addons
            that no longer have a definition (in previous-manifest order).

    """
    logger = get_global_logger()
    if previous is None:
        return definitions, ()

    by_id = {d.addon.id: i for i, d in enumerate(definitions)}
    merged = list(definitions)
    removed = []

    for old in previous.addons:
        index = by_id.get(old.id)
        if index is None:
            logger.warning(f"Addon {old.id} was removed from manifest!")
            removed.append(old.id)
            continue
        current = merged[index]
        merged[index] = replace(
            current,
            addon=replace(
                current.addon,
                release=old.release,
                prerelease=old.prerelease,
                addon_names=old.addon_names,
            ),
        )

    return merged, tuple(removed)


def update_addon(
    definition: AddonDefinition, context: ResolveContext
) -> tuple[Addon, list[AddonManifestError]]:
    """Resolve the releases of one addon.

    Returns:
        The updated addon and the channel errors reported by its resolver.

    Raises:
        AddonManifestError: If the resolver could not attempt either channel.
        requests.RequestException: On transport errors not already wrapped.
    """
    addon = definition.addon
    resolver = get_resolver(addon.host.kind)
    result = resolver.resolve(addon.releases, addon.host, context)

    release = result.releases.release
    prerelease = result.releases.prerelease
    names = addon.addon_names
    if release is not None:
        names = add_addon_name(names, release.name)
    if prerelease is not None:
        names = add_addon_name(names, prerelease.name)

    updated = replace(addon, release=release, prerelease=prerelease, addon_names=names)
    return updated, list(result.errors)


def update_loader(
    existing: ReleaseInfo, host: GithubHost, context: ResolveContext
) -> tuple[ReleaseInfo, list[Exception]]:
    """Resolve the loader's releases, keeping ``existing`` on failure."""
    try:
        result = GithubResolver().resolve(existing, host, context)
    except (AddonManifestError, requests.RequestException) as err:
        return existing, [err]
    return result.releases, list(result.errors)


def generate_manifest(
    addons_path: Path,
    manifest_path: Path | None = None,
    loader_repo: str | None = None,
    *,
    token: str | None = None,
    export_check: ExportCheck | None = None,
    session: requests.Session | None = None,
) -> GenerateResult:
    """Generate the next manifest from addon definitions and the previous one.

    This is the main entry point for the 'addon-manifest generate' command.

    Args:
        addons_path: Directory of addon definition files.
        manifest_path: Manifest file to read the previous state from and to
            write the result to. If None, nothing is read or written and the
            caller prints the returned manifest.
        loader_repo: GitHub repository ("owner/repo") of the loader. If
            None, the loader releases of the previous manifest are kept.
        token: GitHub token. If None, the environment is consulted.
        export_check: Predicate selecting the addon DLL inside archives.
            Default is the built-in export table check.
        session: HTTP session to use. A new one is created (and closed) if
            not given.

    Returns:
        The generated manifest, where it was written, and the ids of
            removed and failed addons.

    Raises:
        ConfigError: If the addons directory is missing, any definition is
            invalid, or loader_repo is not "owner/repo".
        InvalidManifestError: If the previous manifest cannot be parsed.
        OSError: If the manifest cannot be written.

    Example:
        Print the manifest instead of writing it:
            ```python
            from pathlib import Path
            from addonmanifest.manifest import dump_manifest

            result = generate_manifest(Path("addons"))
            print(dump_manifest(result.manifest))
            ```

    """
    logger = get_global_logger()

    # 1. Load and validate addon definitions
    logger.step(1, 5, "Loading addon definitions...")
    definitions = load_addons(addons_path)

    loader_host = None
    if loader_repo:
        try:
            loader_host = GithubHost.from_dict({"url": loader_repo}, "loader_repository")
        except ValueError as err:
            raise ConfigError(str(err)) from err

    # 2. Read the previous manifest before touching the network
    logger.step(2, 5, "Reading previous manifest...")
    previous = None
    if manifest_path is not None and manifest_path.exists():
        previous = read_manifest(manifest_path)
    else:
        logger.verbose("MANIFEST", "No previous manifest, starting empty")

    definitions, removed = merge_previous(definitions, previous)

    own_session = session is None
    if session is None:
        session = make_session()
    context = ResolveContext(
        session=session,
        token=get_github_token(token),
        export_check=export_check or has_addon_exports,
    )

    failed: list[str] = []
    addons: list[Addon] = []
    try:
        # 3. Update addons one by one
        logger.step(3, 5, f"Updating {len(definitions)} addon(s)...")
        for definition in definitions:
            addon = definition.addon
            logger.verbose("UPDATE", f"{addon.id} ({addon.host.kind})")
            try:
                updated, errors = update_addon(definition, context)
            except (AddonManifestError, requests.RequestException) as err:
                updated, errors = addon, [err]

            for err in errors:
                logger.error(
                    f"Addon {addon.name} failed to update: {err}",
                    title=addon.name,
                    file=str(definition.path),
                )
            if errors:
                failed.append(addon.id)
            addons.append(updated)

        # 4. Update loader
        logger.step(4, 5, "Updating loader...")
        loader = previous.loader if previous is not None else ReleaseInfo()
        if loader_host is not None:
            loader, errors = update_loader(loader, loader_host, context)
            for err in errors:
                logger.error(f"Loader failed to update: {err}", title="Loader")
            if errors:
                failed.append(LOADER_ID)
        else:
            logger.verbose("LOADER", "No loader repository configured")
    finally:
        if own_session:
            session.close()

    manifest = Manifest(addons=tuple(addons), loader=loader)

    # 5. Write manifest
    logger.step(5, 5, "Writing manifest...")
    if manifest_path is not None:
        write_manifest(manifest, manifest_path)
        logger.verbose("MANIFEST", f"Wrote {manifest_path}")

    return GenerateResult(
        manifest=manifest,
        manifest_path=manifest_path,
        removed=removed,
        failed=tuple(failed),
    )
