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

"""Addon entry-point checks for DLLs found inside archives.

An archive may contain helper DLLs next to the addon itself. A DLL counts as
the addon when it exports one of the loader entry points in
REQUIRED_EXPORTS.

Backends:

1. has_addon_exports: reads the PE export table in-process (default)
2. WinedumpExportCheck: runs ``winedump -j export <file>`` (from the Wine
   tools) and scans its output

Both are plain ``Callable[[Path], bool]`` values, so tests and callers can
substitute any predicate. Every failure (unreadable file, tool missing,
non-zero exit, timeout) counts as "not an addon".
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
import shutil
import subprocess

from addonmanifest.versioning.pe import PEImage

ExportCheck = Callable[[Path], bool]

REQUIRED_EXPORTS = ("GW2Load_GetAddonAPIVersion", "get_init_addr")


def has_addon_exports(file_path: Path) -> bool:
    """Return True if the DLL at ``file_path`` exports a loader entry point."""
    from addonmanifest.logging import get_global_logger

    logger = get_global_logger()
    try:
        image = PEImage(Path(file_path).read_bytes())
    except (OSError, ValueError) as err:
        logger.debug("EXPORTS", f"{Path(file_path).name}: unreadable ({err})")
        return False

    names = set(image.export_names())
    found = [name for name in REQUIRED_EXPORTS if name in names]
    logger.debug("EXPORTS", f"{Path(file_path).name}: entry points {found or 'none'}")
    return bool(found)


class WinedumpExportCheck:
    """Export check backed by the ``winedump`` binary.

    Args:
        executable: Path to winedump. Defaults to the first ``winedump`` on
            PATH.
        timeout: Seconds before the subprocess is abandoned.
    """

    def __init__(self, executable: str | None = None, timeout: int = 10) -> None:
        self.executable = executable or shutil.which("winedump")
        self.timeout = timeout

    def __call__(self, file_path: Path) -> bool:
        from addonmanifest.logging import get_global_logger

        logger = get_global_logger()
        if not self.executable:
            logger.debug("EXPORTS", "winedump not available")
            return False

        try:
            result = subprocess.run(
                [self.executable, "-j", "export", str(file_path)],
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as err:
            logger.debug("EXPORTS", f"winedump failed: {err}")
            return False

        return any(name in result.stdout for name in REQUIRED_EXPORTS)
