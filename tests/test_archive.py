"""
Tests for addonmanifest.versioning.archive and exports modules.

Tests archive handling including:
- Candidate selection by export check in archive order
- Temporary file cleanup
- Built-in and winedump export checks
"""

from __future__ import annotations

from pathlib import Path
import subprocess
from unittest.mock import patch

import pytest

from addonmanifest.exceptions import NoValidAssetInArchiveError
from addonmanifest.versioning.archive import release_from_archive
from addonmanifest.versioning.exports import WinedumpExportCheck, has_addon_exports


class RecordingCheck:
    """Export check that accepts one file name and records what it saw."""

    def __init__(self, accept: str | None):
        self.accept = accept
        self.seen: list[Path] = []

    def __call__(self, path: Path) -> bool:
        assert path.exists()
        self.seen.append(path)
        return path.name == self.accept


class TestReleaseFromArchive:
    """Tests for locating the addon DLL inside a zip archive."""

    def test_first_passing_candidate_wins(self, make_dll, make_zip):
        """Test that candidates after the accepted one are never examined."""
        content = make_zip(
            {
                "a/helper.dll": make_dll(name="Helper"),
                "readme.txt": b"text",
                "a/addon.dll": make_dll(version=(2, 0, 0, 0), name="Addon"),
                "a/other.dll": make_dll(name="Other"),
            }
        )
        check = RecordingCheck("addon.dll")

        release = release_from_archive(content, "id", "https://x/a.zip", check)

        assert release.name == "Addon"
        assert release.version == (2, 0, 0, 0)
        assert [p.name for p in check.seen] == ["helper.dll", "addon.dll"]

    def test_temporary_files_removed(self, make_dll, make_zip):
        """Test that every checked file is gone after the call."""
        content = make_zip({"one.dll": make_dll(), "two.dll": make_dll()})
        check = RecordingCheck(None)

        with pytest.raises(NoValidAssetInArchiveError):
            release_from_archive(content, "id", "u", check)

        assert len(check.seen) == 2
        assert not any(p.exists() for p in check.seen)
        assert not any(p.parent.exists() for p in check.seen)

    def test_failing_check_counts_as_invalid(self, make_dll, make_zip):
        """Test that a raising check skips the candidate."""

        def check(path: Path) -> bool:
            if path.name == "broken.dll":
                raise RuntimeError("tool crashed")
            return True

        content = make_zip({"broken.dll": b"x", "good.dll": make_dll(name="Good")})
        assert release_from_archive(content, "id", "u", check).name == "Good"

    def test_corrupt_entry_is_skipped(self, make_dll, make_zip):
        """Test that an entry failing its CRC check is not a candidate."""
        content = make_zip({"broken.dll": b"A" * 64, "good.dll": make_dll(name="Good")})
        content = content.replace(b"A" * 64, b"A" * 63 + b"B", 1)

        release = release_from_archive(content, "id", "u", lambda p: True)

        assert release.name == "Good"

    def test_only_corrupt_entries(self, make_zip):
        content = make_zip({"addon.dll": b"A" * 64})
        content = content.replace(b"A" * 64, b"A" * 63 + b"B", 1)

        with pytest.raises(NoValidAssetInArchiveError):
            release_from_archive(content, "id", "u", lambda p: True)

    def test_unsupported_compression_is_skipped(self, make_dll, make_zip):
        """Test that an entry with an unknown compression method is skipped."""
        content = bytearray(make_zip({"odd.dll": b"A" * 64, "good.dll": make_dll(name="Good")}))
        # Compression method field of the first local and central headers
        local = content.find(b"PK\x03\x04")
        central = content.find(b"PK\x01\x02")
        content[local + 8 : local + 10] = b"\x05\x00"
        content[central + 10 : central + 12] = b"\x05\x00"

        release = release_from_archive(bytes(content), "id", "u", lambda p: True)

        assert release.name == "Good"

    def test_suffix_is_case_insensitive(self, make_dll, make_zip):
        content = make_zip({"ADDON.DLL": make_dll(name="Upper")})
        assert release_from_archive(content, "id", "u", lambda p: True).name == "Upper"

    def test_no_candidates(self, make_zip):
        content = make_zip({"readme.md": b"# nothing here"})
        with pytest.raises(NoValidAssetInArchiveError, match="No valid release"):
            release_from_archive(content, "id", "u", lambda p: True)

    def test_not_a_zip(self):
        with pytest.raises(NoValidAssetInArchiveError):
            release_from_archive(b"definitely not a zip", "id", "u")

    def test_default_check_reads_exports(self, make_dll, make_zip):
        """Test the built-in check picks the DLL exporting an entry point."""
        content = make_zip(
            {
                "helper.dll": make_dll(name="Helper", exports=("Helper",)),
                "addon.dll": make_dll(name="Addon", exports=("get_init_addr",)),
            }
        )
        assert release_from_archive(content, "id", "u").name == "Addon"


class TestHasAddonExports:
    """Tests for the built-in export table check."""

    @pytest.mark.parametrize("export", ["GW2Load_GetAddonAPIVersion", "get_init_addr"])
    def test_entry_points(self, tmp_test_dir, make_dll, export):
        path = tmp_test_dir / "addon.dll"
        path.write_bytes(make_dll(exports=("Other", export)))
        assert has_addon_exports(path)

    def test_without_entry_point(self, tmp_test_dir, make_dll):
        path = tmp_test_dir / "helper.dll"
        path.write_bytes(make_dll(exports=("Other",)))
        assert not has_addon_exports(path)

    def test_unreadable(self, tmp_test_dir):
        """Test that garbage and missing files are not addons."""
        path = tmp_test_dir / "junk.dll"
        path.write_bytes(b"junk")
        assert not has_addon_exports(path)
        assert not has_addon_exports(tmp_test_dir / "missing.dll")


class TestWinedumpExportCheck:
    """Tests for the winedump subprocess backend."""

    def test_scans_output(self, tmp_test_dir):
        check = WinedumpExportCheck(executable="/usr/bin/winedump")
        completed = subprocess.CompletedProcess(
            args=[], returncode=0, stdout="  1 0x1000 get_init_addr\n", stderr=""
        )
        with patch("subprocess.run", return_value=completed) as mock_run:
            assert check(tmp_test_dir / "addon.dll")

        cmd = mock_run.call_args[0][0]
        assert cmd[:3] == ["/usr/bin/winedump", "-j", "export"]

    def test_failure_is_invalid(self, tmp_test_dir):
        """Test that a non-zero exit counts as invalid."""
        check = WinedumpExportCheck(executable="/usr/bin/winedump")
        error = subprocess.CalledProcessError(1, ["winedump"])
        with patch("subprocess.run", side_effect=error):
            assert not check(tmp_test_dir / "addon.dll")

    def test_missing_tool(self, tmp_test_dir):
        with patch("shutil.which", return_value=None):
            check = WinedumpExportCheck()
        assert not check(tmp_test_dir / "addon.dll")
