"""
Tests for addonmanifest.manifest module.

Tests manifest records and persistence including:
- Record validation (versions, hosts)
- JSON shape of releases and addons
- Reading current and legacy manifests
- Rejecting invalid manifests
"""

from __future__ import annotations

import json

import pytest

from addonmanifest.exceptions import InvalidManifestError
from addonmanifest.manifest import (
    Addon,
    GithubHost,
    Manifest,
    Package,
    Release,
    ReleaseInfo,
    StandaloneHost,
    add_addon_name,
    read_manifest,
    write_manifest,
)
from addonmanifest.manifest.schema import host_from_dict


def sample_release(**overrides) -> Release:
    fields = {
        "id": "123",
        "name": "Radial",
        "version": (1, 2, 3, 4),
        "version_str": "1.2.3.4",
        "download_url": "https://example.com/radial.dll",
    }
    fields.update(overrides)
    return Release(**fields)


def sample_addon(**overrides) -> Addon:
    fields = {
        "package": Package(id="radial", name="Radial"),
        "host": GithubHost(url="owner/radial"),
    }
    fields.update(overrides)
    return Addon(**fields)


class TestRelease:
    """Tests for the Release record."""

    def test_rejects_empty_version(self):
        with pytest.raises(ValueError, match="all zero"):
            sample_release(version=(0, 0, 0, 0))

    def test_rejects_short_version(self):
        with pytest.raises(ValueError):
            sample_release(version=(1, 2, 3))

    def test_to_dict_omits_missing_asset_index(self):
        data = sample_release().to_dict()
        assert "asset_index" not in data
        assert data["version"] == [1, 2, 3, 4]

    def test_from_dict_validates_components(self):
        data = sample_release().to_dict()
        data["version"] = [1, 2, 3, 70000]
        with pytest.raises(ValueError):
            Release.from_dict(data)

    def test_from_dict_keeps_asset_index(self):
        data = sample_release(asset_index=2).to_dict()
        assert Release.from_dict(data).asset_index == 2


class TestHosts:
    """Tests for host parsing."""

    def test_github(self):
        host = host_from_dict({"github": {"url": "owner/radial"}})
        assert host == GithubHost(url="owner/radial")
        assert (host.owner, host.repo) == ("owner", "radial")

    def test_standalone(self):
        host = host_from_dict(
            {"standalone": {"url": "https://x/a.dll", "version_url": "https://x/v"}}
        )
        assert isinstance(host, StandaloneHost)
        assert not host.has_prerelease

    def test_exactly_one_kind(self):
        with pytest.raises(ValueError, match="exactly one"):
            host_from_dict(
                {
                    "github": {"url": "o/r"},
                    "standalone": {"url": "u", "version_url": "v"},
                }
            )

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="unknown host kind"):
            host_from_dict({"gitlab": {"url": "o/r"}})


class TestAddonNames:
    """Tests for addon name bookkeeping."""

    def test_appends_new_name(self):
        assert add_addon_name(("A",), "B") == ("A", "B")

    def test_ignores_known_name(self):
        assert add_addon_name(("A", "B"), "A") == ("A", "B")


class TestManifestFiles:
    """Tests for reading and writing manifest files."""

    def test_round_trip(self, tmp_test_dir):
        """Test that a written manifest reads back equal."""
        manifest = Manifest(
            addons=(
                sample_addon(
                    release=sample_release(asset_index=0),
                    prerelease=sample_release(id="456", version=(1, 3, 0, 0)),
                    addon_names=("Radial",),
                ),
            ),
            loader=ReleaseInfo(release=sample_release(id="loader", name="Loader")),
        )
        path = tmp_test_dir / "out" / "manifest.json"

        write_manifest(manifest, path)

        assert read_manifest(path) == manifest

    def test_written_format(self, tmp_test_dir):
        """Test 2-space indentation, trailing newline and JSON shape."""
        path = tmp_test_dir / "manifest.json"
        write_manifest(Manifest(addons=(sample_addon(),)), path)

        text = path.read_text(encoding="utf-8")
        data = json.loads(text)

        assert text.endswith("}\n")
        assert '\n  "version": 1' in text
        assert data["version"] == 1
        assert data["data"]["loader"] == {}
        addon = data["data"]["addons"][0]
        assert addon["host"] == {"github": {"url": "owner/radial"}}
        assert addon["addon_names"] == []
        assert "release" not in addon

    def test_legacy_array(self, tmp_test_dir):
        """Test that a bare array of addons is accepted without loader."""
        path = tmp_test_dir / "manifest.json"
        path.write_text(json.dumps([sample_addon().to_dict()]), encoding="utf-8")

        manifest = read_manifest(path)

        assert [a.id for a in manifest.addons] == ["radial"]
        assert manifest.loader == ReleaseInfo()

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            '"just a string"',
            '{"data": {"addons": []}}',
            '{"version": 2, "data": {"addons": []}}',
            '{"version": 1, "data": {"addons": [{"package": {"id": "x"}}]}}',
            '[{"package": {"id": "x", "name": "X"}, "host": {"github": {"url": "bad"}}}]',
        ],
    )
    def test_invalid(self, tmp_test_dir, content):
        path = tmp_test_dir / "manifest.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(InvalidManifestError):
            read_manifest(path)
