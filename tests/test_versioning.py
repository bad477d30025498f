"""
Tests for addonmanifest.versioning module.

Tests version handling including:
- Version ordering (is_greater)
- PE image reading (headers, version resource, exports)
- Release extraction from DLL bytes
"""

from __future__ import annotations

import pytest

from addonmanifest.exceptions import (
    BinaryMetadataError,
    NoNameFoundError,
    NoVersionFoundError,
    NoVersionResourceError,
)
from addonmanifest.versioning import format_version, is_empty_version, is_greater
from addonmanifest.versioning.dll import release_from_dll
from addonmanifest.versioning.keys import version_from_words
from addonmanifest.versioning.pe import PEImage


class TestIsGreater:
    """Tests for 4-component version ordering."""

    @pytest.mark.parametrize(
        "a, b",
        [
            ((2, 0, 0, 0), (1, 9, 9, 9)),
            ((1, 2, 0, 0), (1, 1, 65535, 65535)),
            ((1, 0, 0, 1), (1, 0, 0, 0)),
            ((0, 0, 1, 0), (0, 0, 0, 9)),
        ],
    )
    def test_greater(self, a, b):
        """Test that the first differing component decides."""
        assert is_greater(a, b)
        assert not is_greater(b, a)

    def test_equal_is_not_greater(self):
        """Test that equal versions are not greater in either direction."""
        assert not is_greater((1, 2, 3, 4), (1, 2, 3, 4))

    def test_lists_and_tuples_compare(self):
        """Test that JSON-decoded lists compare like tuples."""
        assert is_greater([1, 2, 3, 5], (1, 2, 3, 4))

    def test_at_most_one_direction(self):
        """Test that is_greater never holds both ways."""
        versions = [(0, 0, 0, 1), (1, 0, 0, 0), (1, 0, 0, 0), (0, 9, 9, 9)]
        for a in versions:
            for b in versions:
                assert not (is_greater(a, b) and is_greater(b, a))


class TestVersionHelpers:
    """Tests for version formatting and word splitting."""

    def test_format_version(self):
        assert format_version((1, 2, 3, 4)) == "1.2.3.4"

    def test_is_empty_version(self):
        assert is_empty_version((0, 0, 0, 0))
        assert not is_empty_version((0, 0, 0, 1))

    def test_version_from_words(self):
        """Test that high/low halves map to major/minor and build/revision."""
        assert version_from_words(0x00010002, 0x00030004) == (1, 2, 3, 4)
        assert version_from_words(0xFFFF0000, 0x0000FFFF) == (65535, 0, 0, 65535)


class TestPEImage:
    """Tests for the in-memory PE reader."""

    def test_rejects_non_pe(self):
        """Test that bytes without an MZ header raise ValueError."""
        with pytest.raises(ValueError, match="MZ"):
            PEImage(b"not a dll at all")

    def test_rejects_truncated(self, make_dll):
        """Test that a truncated header raises ValueError."""
        with pytest.raises(ValueError):
            PEImage(make_dll()[:0x50])

    def test_version_info(self, make_dll):
        """Test reading the fixed info and the string table."""
        image = PEImage(make_dll(version=(1, 2, 3, 4), name="Radial"))
        info = image.version_info()

        assert info is not None
        assert info.fixed is not None
        assert version_from_words(
            info.fixed.file_version_ms, info.fixed.file_version_ls
        ) == (1, 2, 3, 4)
        assert info.strings["ProductName"] == "Radial"
        assert info.strings["FileVersion"] == "1.2.3.4"
        assert list(info.string_tables) == ["040904b0"]

    def test_no_resource(self, make_dll):
        """Test that an image without resources has no version info."""
        assert PEImage(make_dll(resource=False)).version_info() is None

    def test_nested_blocks_are_bounded(self, make_nested_dll):
        """Test that block nesting below String entries is not walked."""
        info = PEImage(make_nested_dll(3000)).version_info()

        assert info is not None
        assert info.fixed is None
        assert info.string_tables == {}

    def test_export_names(self, make_dll):
        """Test that export names are read in table order."""
        image = PEImage(make_dll(exports=("get_init_addr", "helper")))
        assert image.export_names() == ["get_init_addr", "helper"]

    def test_no_exports(self, make_dll):
        assert PEImage(make_dll()).export_names() == []


class TestReleaseFromDll:
    """Tests for release extraction from DLL bytes."""

    def test_release_fields(self, make_dll):
        """Test that name, version and pass-through fields are set."""
        release = release_from_dll(
            make_dll(version=(1, 2, 3, 4), name="Radial"),
            "abc",
            "https://example.com/radial.dll",
        )

        assert release.id == "abc"
        assert release.name == "Radial"
        assert release.version == (1, 2, 3, 4)
        assert release.version_str == "1.2.3.4"
        assert release.download_url == "https://example.com/radial.dll"
        assert release.asset_index is None

    def test_deterministic(self, make_dll):
        """Test that identical bytes yield identical releases."""
        content = make_dll(version=(2, 0, 0, 7))
        assert release_from_dll(content, "x", "u") == release_from_dll(content, "x", "u")

    def test_falls_back_to_product_version(self, make_dll):
        """Test that an empty file version uses the product version."""
        content = make_dll(
            version=(0, 0, 0, 0),
            product_version=(3, 1, 0, 0),
            strings={"ProductName": "Addon"},
        )
        release = release_from_dll(content, "x", "u")
        assert release.version == (3, 1, 0, 0)
        assert release.version_str == "3.1.0.0"

    def test_version_string_prefers_file_version_string(self, make_dll):
        """Test that the FileVersion string is used verbatim."""
        content = make_dll(
            version=(1, 0, 0, 0),
            strings={"ProductName": "Addon", "FileVersion": "1.0 beta"},
        )
        assert release_from_dll(content, "x", "u").version_str == "1.0 beta"

    def test_name_falls_back_to_file_description(self, make_dll):
        content = make_dll(strings={"FileDescription": "Described Addon"})
        assert release_from_dll(content, "x", "u").name == "Described Addon"

    def test_no_version_found(self, make_dll):
        """Test that zero file and product versions raise NoVersionFoundError."""
        content = make_dll(version=(0, 0, 0, 0), strings={"ProductName": "A"})
        with pytest.raises(NoVersionFoundError):
            release_from_dll(content, "x", "u")

    def test_no_name_found(self, make_dll):
        """Test that a string table without names raises NoNameFoundError."""
        content = make_dll(strings={"CompanyName": "Somebody"})
        with pytest.raises(NoNameFoundError):
            release_from_dll(content, "x", "u")

    def test_no_string_table(self, make_dll):
        """Test that a missing StringFileInfo raises NoNameFoundError."""
        with pytest.raises(NoNameFoundError):
            release_from_dll(make_dll(strings=None), "x", "u")

    def test_no_version_resource(self, make_dll):
        with pytest.raises(NoVersionResourceError):
            release_from_dll(make_dll(resource=False), "x", "u")

    def test_missing_fixed_info(self, make_dll):
        with pytest.raises(NoVersionResourceError):
            release_from_dll(make_dll(fixed=False), "x", "u")

    def test_not_a_pe(self):
        """Test that garbage bytes raise a BinaryMetadataError."""
        with pytest.raises(BinaryMetadataError):
            release_from_dll(b"PK\x03\x04 definitely a zip", "x", "u")

    def test_version_string_falls_back_to_product_version_string(self, make_dll):
        """Test that ProductVersion is used when FileVersion is absent."""
        content = make_dll(strings={"ProductName": "A", "ProductVersion": "2.0-rc"})
        assert release_from_dll(content, "x", "u").version_str == "2.0-rc"

    def test_deeply_nested_resource(self, make_nested_dll):
        """Test that a pathologically nested resource fails like a missing one."""
        with pytest.raises(NoVersionResourceError):
            release_from_dll(make_nested_dll(3000), "x", "u")
