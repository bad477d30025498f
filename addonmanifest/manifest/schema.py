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

"""Typed records for addon definitions and the manifest.

All records are frozen dataclasses. A release pass never mutates an addon
in place: resolvers return new ReleaseInfo values and the reconciler builds
new Addon records with ``dataclasses.replace``.

Manifest JSON shape (version 1):

    {
      "version": 1,
      "data": {
        "addons": [
          {
            "package": {"id": "...", "name": "...", ...},
            "host": {"github": {"url": "owner/repo"}},
            "addon_names": ["..."],
            "release": {
              "id": "...", "name": "...", "version": [1, 2, 3, 4],
              "version_str": "1.2.3.4", "download_url": "...",
              "asset_index": 0
            },
            "prerelease": {...}
          }
        ],
        "loader": {"release": {...}, "prerelease": {...}}
      }
    }

Absent releases are omitted from the JSON rather than written as null.

Parsing helpers raise ValueError on malformed input; callers turn that into
ConfigError (addon definitions) or InvalidManifestError (prior manifest).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from addonmanifest.versioning.keys import Version, is_empty_version

MANIFEST_VERSION = 1


def _require_str(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{where}.{key} must be a non-empty string")
    return value


def _optional_str(data: dict[str, Any], key: str, where: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{where}.{key} must be a string")
    return value


def _require_dict(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{where} must be a mapping")
    return value


# -------------------------------
# Releases
# -------------------------------


@dataclass(frozen=True)
class Release:
    """A resolved, addressable build of an addon binary.

    Attributes:
        id: Content identity used for change detection only. A SHA-256 of
            the version document for standalone hosts, the asset id for
            GitHub hosts.
        name: Product name read from the binary.
        version: 4-component version read from the binary, never all zero.
        version_str: Display version (FileVersion, ProductVersion, or the
            dotted version).
        download_url: Direct download location.
        asset_index: Position of the asset in its GitHub release, if any.
    """

    id: str
    name: str
    version: Version
    version_str: str
    download_url: str
    asset_index: int | None = None

    def __post_init__(self) -> None:
        if len(self.version) != 4:
            raise ValueError(f"version must have 4 components, got {self.version!r}")
        if is_empty_version(self.version):
            raise ValueError("version must not be all zero")

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "version": list(self.version),
            "version_str": self.version_str,
            "download_url": self.download_url,
        }
        if self.asset_index is not None:
            out["asset_index"] = self.asset_index
        return out

    @classmethod
    def from_dict(cls, data: Any, where: str = "release") -> Release:
        data = _require_dict(data, where)
        version = data.get("version")
        if (
            not isinstance(version, list)
            or len(version) != 4
            or not all(
                isinstance(v, int) and not isinstance(v, bool) and 0 <= v <= 0xFFFF
                for v in version
            )
        ):
            raise ValueError(f"{where}.version must be a list of 4 integers")
        asset_index = data.get("asset_index")
        if asset_index is not None and (
            not isinstance(asset_index, int) or isinstance(asset_index, bool)
        ):
            raise ValueError(f"{where}.asset_index must be an integer")
        return cls(
            id=_require_str(data, "id", where),
            name=_require_str(data, "name", where),
            version=tuple(version),  # type: ignore[arg-type]
            version_str=_require_str(data, "version_str", where),
            download_url=_require_str(data, "download_url", where),
            asset_index=asset_index,
        )


@dataclass(frozen=True)
class ReleaseInfo:
    """The stable and prerelease channel of one source."""

    release: Release | None = None
    prerelease: Release | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.release is not None:
            out["release"] = self.release.to_dict()
        if self.prerelease is not None:
            out["prerelease"] = self.prerelease.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any, where: str = "loader") -> ReleaseInfo:
        data = _require_dict(data, where)
        return cls(
            release=_optional_release(data, "release", where),
            prerelease=_optional_release(data, "prerelease", where),
        )


def _optional_release(data: dict[str, Any], key: str, where: str) -> Release | None:
    if data.get(key) is None:
        return None
    return Release.from_dict(data[key], f"{where}.{key}")


# -------------------------------
# Hosts (tagged by ``kind``)
# -------------------------------


@dataclass(frozen=True)
class GithubHost:
    """Addon published as GitHub release assets.

    Attributes:
        url: Repository in "owner/repo" form.
    """

    kind: ClassVar[str] = "github"

    url: str

    @property
    def owner(self) -> str:
        return self.url.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.url.split("/", 1)[1]

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url}

    @classmethod
    def from_dict(cls, data: Any, where: str = "host.github") -> GithubHost:
        data = _require_dict(data, where)
        url = _require_str(data, "url", where)
        if url.count("/") != 1 or not all(url.split("/")):
            raise ValueError(f"{where}.url must be in format 'owner/repo', got {url!r}")
        return cls(url=url)


@dataclass(frozen=True)
class StandaloneHost:
    """Addon served from fixed URLs on an arbitrary HTTP host.

    Attributes:
        url: URL of the binary (``.dll``) or archive (``.zip``).
        version_url: URL whose content changes whenever a new build is out.
        prerelease_url: Optional binary URL of the prerelease channel.
        prerelease_version_url: Optional version URL of the prerelease channel.
    """

    kind: ClassVar[str] = "standalone"

    url: str
    version_url: str
    prerelease_url: str | None = None
    prerelease_version_url: str | None = None

    @property
    def has_prerelease(self) -> bool:
        return bool(self.prerelease_url and self.prerelease_version_url)

    def to_dict(self) -> dict[str, Any]:
        out = {"url": self.url, "version_url": self.version_url}
        if self.prerelease_url is not None:
            out["prerelease_url"] = self.prerelease_url
        if self.prerelease_version_url is not None:
            out["prerelease_version_url"] = self.prerelease_version_url
        return out

    @classmethod
    def from_dict(cls, data: Any, where: str = "host.standalone") -> StandaloneHost:
        data = _require_dict(data, where)
        prerelease_url = _optional_str(data, "prerelease_url", where)
        prerelease_version_url = _optional_str(data, "prerelease_version_url", where)
        if (prerelease_url is None) != (prerelease_version_url is None):
            raise ValueError(
                f"{where}: prerelease_url and prerelease_version_url must be set together"
            )
        return cls(
            url=_require_str(data, "url", where),
            version_url=_require_str(data, "version_url", where),
            prerelease_url=prerelease_url,
            prerelease_version_url=prerelease_version_url,
        )


Host = GithubHost | StandaloneHost

HOST_TYPES: dict[str, type[GithubHost] | type[StandaloneHost]] = {
    GithubHost.kind: GithubHost,
    StandaloneHost.kind: StandaloneHost,
}


def host_from_dict(data: Any, where: str = "host") -> Host:
    """Parse a host mapping with exactly one kind key (``github``/``standalone``)."""
    data = _require_dict(data, where)
    kinds = [key for key in data if key in HOST_TYPES]
    unknown = [key for key in data if key not in HOST_TYPES]
    if unknown:
        raise ValueError(
            f"{where}: unknown host kind {unknown[0]!r}. "
            f"Available: {', '.join(HOST_TYPES)}"
        )
    if len(kinds) != 1:
        raise ValueError(f"{where} must contain exactly one of: {', '.join(HOST_TYPES)}")
    kind = kinds[0]
    return HOST_TYPES[kind].from_dict(data[kind], f"{where}.{kind}")


def host_to_dict(host: Host) -> dict[str, Any]:
    return {host.kind: host.to_dict()}


# -------------------------------
# Addons
# -------------------------------


@dataclass(frozen=True)
class Package:
    """Identity and display information of an addon."""

    id: str
    name: str
    description: str | None = None
    tooltip: str | None = None
    website: str | None = None
    developer: str | None = None

    _OPTIONAL: ClassVar[tuple[str, ...]] = (
        "description",
        "tooltip",
        "website",
        "developer",
    )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "name": self.name}
        for key in self._OPTIONAL:
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: Any, where: str = "package") -> Package:
        data = _require_dict(data, where)
        return cls(
            id=_require_str(data, "id", where),
            name=_require_str(data, "name", where),
            **{key: _optional_str(data, key, where) for key in cls._OPTIONAL},
        )


@dataclass(frozen=True)
class Addon:
    """An addon definition plus the release state tracked for it.

    Attributes:
        package: Identity and display information.
        host: Where releases are published (GithubHost or StandaloneHost).
        release: Latest known stable release.
        prerelease: Latest known prerelease (always newer than release).
        addon_names: Every product name observed, in first-seen order.
    """

    package: Package
    host: Host
    release: Release | None = None
    prerelease: Release | None = None
    addon_names: tuple[str, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return self.package.id

    @property
    def name(self) -> str:
        return self.package.name

    @property
    def releases(self) -> ReleaseInfo:
        return ReleaseInfo(release=self.release, prerelease=self.prerelease)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "package": self.package.to_dict(),
            "host": host_to_dict(self.host),
            "addon_names": list(self.addon_names),
        }
        if self.release is not None:
            out["release"] = self.release.to_dict()
        if self.prerelease is not None:
            out["prerelease"] = self.prerelease.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any, where: str = "addon") -> Addon:
        data = _require_dict(data, where)
        names = data.get("addon_names") or []
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ValueError(f"{where}.addon_names must be a list of strings")
        return cls(
            package=Package.from_dict(data.get("package"), f"{where}.package"),
            host=host_from_dict(data.get("host"), f"{where}.host"),
            release=_optional_release(data, "release", where),
            prerelease=_optional_release(data, "prerelease", where),
            addon_names=tuple(dict.fromkeys(names)),
        )


def add_addon_name(names: tuple[str, ...], name: str) -> tuple[str, ...]:
    """Return ``names`` with ``name`` appended unless it is already present."""
    if name in names:
        return names
    return (*names, name)


# -------------------------------
# Manifest
# -------------------------------


@dataclass(frozen=True)
class Manifest:
    """The generated catalog of all addons and the loader."""

    addons: tuple[Addon, ...] = ()
    loader: ReleaseInfo = field(default_factory=ReleaseInfo)
    version: int = MANIFEST_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "data": {
                "addons": [addon.to_dict() for addon in self.addons],
                "loader": self.loader.to_dict(),
            },
        }
