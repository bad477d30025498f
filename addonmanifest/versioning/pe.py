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

"""Minimal Portable Executable (PE) reader for addonmanifest.

Reads just enough of a Windows PE image (DLL/EXE) to answer two questions:

- What does the VS_VERSIONINFO resource say? (version_info)
- Which symbol names does the export table list? (export_names)

This is pure in-memory introspection with ``struct``; no external tools are
needed and no network calls are made. It is not a general PE parser: only
the headers, section table, resource directory and export directory are
read.

Layout reference (all little-endian):

- DOS header: ``MZ`` magic, ``e_lfanew`` at 0x3C points at the PE header
- PE header: ``PE\\0\\0`` + COFF file header (20 bytes)
- Optional header: magic 0x10B (PE32) or 0x20B (PE32+); data directories
  start at offset 96 (PE32) or 112 (PE32+)
- Section table: 40-byte entries right after the optional header

Example:
    Read the string table of a DLL:

        from addonmanifest.versioning.pe import PEImage

        image = PEImage(Path("addon.dll").read_bytes())
        info = image.version_info()
        print(info.strings.get("ProductName"))

Note:
    Truncated or malformed images raise ValueError; callers translate that
    into the domain error that fits their context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import struct

RT_VERSION = 16

_DIRECTORY_EXPORT = 0
_DIRECTORY_RESOURCE = 2

_PE32_MAGIC = 0x10B
_PE32_PLUS_MAGIC = 0x20B

_FIXED_FILE_INFO_SIGNATURE = 0xFEEF04BD

_HIGH_BIT = 0x80000000

# VS_VERSIONINFO -> StringFileInfo -> StringTable -> String
_MAX_BLOCK_DEPTH = 4


@dataclass(frozen=True)
class Section:
    """One entry of the section table."""

    name: str
    virtual_address: int
    virtual_size: int
    raw_offset: int
    raw_size: int

    def contains(self, rva: int) -> bool:
        size = max(self.virtual_size, self.raw_size)
        return self.virtual_address <= rva < self.virtual_address + size


@dataclass(frozen=True)
class FixedFileInfo:
    """The numeric part of VS_VERSIONINFO (VS_FIXEDFILEINFO)."""

    file_version_ms: int
    file_version_ls: int
    product_version_ms: int
    product_version_ls: int


@dataclass(frozen=True)
class VersionInfo:
    """Parsed VS_VERSIONINFO resource.

    Attributes:
        fixed: The fixed-format version block, or None if absent.
        string_tables: String tables in resource order, keyed by their
            language/codepage identifier (e.g., "040904b0").
    """

    fixed: FixedFileInfo | None
    string_tables: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def strings(self) -> dict[str, str]:
        """The first string table, or an empty mapping if there is none."""
        for table in self.string_tables.values():
            return table
        return {}


@dataclass
class _Block:
    key: str
    value_type: int
    value: bytes
    children: list[_Block]


class PEImage:
    """Read-only view over the bytes of a PE image.

    Args:
        data: Raw image bytes.

    Raises:
        ValueError: If the bytes are not a PE image or the headers are
            truncated.
    """

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.sections: list[Section] = []
        self._directories: list[tuple[int, int]] = []
        try:
            self._parse_headers()
        except struct.error as err:
            raise ValueError(f"truncated PE headers: {err}") from err

    # -------------------------------
    # Headers
    # -------------------------------

    def _parse_headers(self) -> None:
        data = self.data
        if data[:2] != b"MZ":
            raise ValueError("missing MZ signature")
        (pe_offset,) = struct.unpack_from("<I", data, 0x3C)
        if data[pe_offset : pe_offset + 4] != b"PE\0\0":
            raise ValueError("missing PE signature")

        coff = pe_offset + 4
        (section_count,) = struct.unpack_from("<H", data, coff + 2)
        (optional_size,) = struct.unpack_from("<H", data, coff + 16)

        optional = coff + 20
        (magic,) = struct.unpack_from("<H", data, optional)
        if magic == _PE32_MAGIC:
            count_offset, directories_offset = 92, 96
        elif magic == _PE32_PLUS_MAGIC:
            count_offset, directories_offset = 108, 112
        else:
            raise ValueError(f"unknown optional header magic 0x{magic:x}")

        (directory_count,) = struct.unpack_from("<I", data, optional + count_offset)
        # Never trust more directories than fit in the optional header
        fit = max(0, (optional_size - directories_offset) // 8)
        for index in range(min(directory_count, fit, 16)):
            self._directories.append(
                struct.unpack_from("<II", data, optional + directories_offset + 8 * index)
            )

        table = optional + optional_size
        for index in range(section_count):
            raw_name, vsize, vaddr, raw_size, raw_offset = struct.unpack_from(
                "<8sIIII", data, table + 40 * index
            )
            self.sections.append(
                Section(
                    name=raw_name.rstrip(b"\0").decode("ascii", errors="replace"),
                    virtual_address=vaddr,
                    virtual_size=vsize,
                    raw_offset=raw_offset,
                    raw_size=raw_size,
                )
            )

    def directory(self, index: int) -> tuple[int, int]:
        """Return (rva, size) of a data directory, (0, 0) if absent."""
        if index < len(self._directories):
            return self._directories[index]
        return 0, 0

    def rva_to_offset(self, rva: int) -> int:
        """Translate a relative virtual address into a file offset.

        Raises:
            ValueError: If no section maps the address.
        """
        for section in self.sections:
            if section.contains(rva):
                return rva - section.virtual_address + section.raw_offset
        raise ValueError(f"RVA 0x{rva:x} is outside every section")

    # -------------------------------
    # Resources
    # -------------------------------

    def resource(self, type_id: int) -> bytes | None:
        """Return the data of the first resource of a given type.

        The resource tree has three levels (type, name, language). The first
        name and the first language below ``type_id`` are used.

        Returns:
            The raw resource bytes, or None if the image has no resource
            directory or no resource of that type.
        """
        rva, size = self.directory(_DIRECTORY_RESOURCE)
        if not rva or not size:
            return None
        try:
            base = self.rva_to_offset(rva)
            entry = self._directory_entry(base, base, type_id)
            if entry is None or not entry[0]:
                return None
            entry = self._directory_entry(entry[1], base)
            if entry is None or not entry[0]:
                return None
            entry = self._directory_entry(entry[1], base)
            if entry is None or entry[0]:
                return None

            data_rva, data_size = struct.unpack_from("<II", self.data, entry[1])
            start = self.rva_to_offset(data_rva)
        except (struct.error, ValueError):
            return None
        content = self.data[start : start + data_size]
        if len(content) != data_size:
            return None
        return content

    def _directory_entry(
        self, offset: int, base: int, match_id: int | None = None
    ) -> tuple[bool, int] | None:
        """Find an entry in one IMAGE_RESOURCE_DIRECTORY.

        Returns:
            (is_subdirectory, absolute_offset) for the first entry that
            matches ``match_id`` (or the first entry at all), else None.
        """
        named, numbered = struct.unpack_from("<HH", self.data, offset + 12)
        for index in range(named + numbered):
            name, target = struct.unpack_from("<II", self.data, offset + 16 + 8 * index)
            if match_id is not None and (name & _HIGH_BIT or name != match_id):
                continue
            return bool(target & _HIGH_BIT), base + (target & ~_HIGH_BIT)
        return None

    def version_info(self) -> VersionInfo | None:
        """Parse the VS_VERSIONINFO resource, if present."""
        content = self.resource(RT_VERSION)
        if content is None:
            return None
        try:
            parsed = _parse_block(content, 0, len(content))
        except (struct.error, ValueError):
            return None
        if parsed is None:
            return None
        root = parsed[0]

        fixed = None
        if len(root.value) >= 24:
            signature, _, fv_ms, fv_ls, pv_ms, pv_ls = struct.unpack_from(
                "<6I", root.value
            )
            if signature == _FIXED_FILE_INFO_SIGNATURE:
                fixed = FixedFileInfo(fv_ms, fv_ls, pv_ms, pv_ls)

        tables: dict[str, dict[str, str]] = {}
        for child in root.children:
            if child.key != "StringFileInfo":
                continue
            for table in child.children:
                tables.setdefault(
                    table.key, {s.key: _decode_text(s.value) for s in table.children}
                )
        return VersionInfo(fixed=fixed, string_tables=tables)

    # -------------------------------
    # Exports
    # -------------------------------

    def export_names(self) -> list[str]:
        """Return the names listed in the export directory, in table order."""
        rva, size = self.directory(_DIRECTORY_EXPORT)
        if not rva or not size:
            return []
        try:
            offset = self.rva_to_offset(rva)
            name_count, names_rva = struct.unpack_from("<I4xI", self.data, offset + 24)
            names_offset = self.rva_to_offset(names_rva) if name_count else 0
            names = []
            for index in range(name_count):
                (name_rva,) = struct.unpack_from("<I", self.data, names_offset + 4 * index)
                names.append(self._ascii_z(self.rva_to_offset(name_rva)))
        except (struct.error, ValueError):
            return []
        return names

    def _ascii_z(self, offset: int) -> str:
        end = self.data.find(b"\0", offset)
        if end < 0:
            end = len(self.data)
        return self.data[offset:end].decode("ascii", errors="replace")


# -------------------------------
# VS_VERSIONINFO block walking
# -------------------------------


def _align(offset: int) -> int:
    return (offset + 3) & ~3


def _read_key(data: bytes, offset: int, end: int) -> tuple[str, int]:
    """Read a NUL-terminated UTF-16LE key; return (key, offset after NUL)."""
    pos = offset
    while pos + 1 < end:
        if data[pos] == 0 and data[pos + 1] == 0:
            return data[offset:pos].decode("utf-16-le", errors="replace"), pos + 2
        pos += 2
    raise ValueError("unterminated version block key")


def _decode_text(value: bytes) -> str:
    return value.decode("utf-16-le", errors="replace").split("\0", 1)[0]


def _parse_block(
    data: bytes, offset: int, limit: int, depth: int = 1
) -> tuple[_Block, int] | None:
    """Parse one version block (wLength, wValueLength, wType, szKey, ...).

    VS_VERSIONINFO, StringFileInfo, StringTable and String all share this
    shape. Offsets are aligned to 32 bits relative to the resource start.
    Blocks nested deeper than a String entry are not descended into.
    """
    if offset + 6 > limit:
        return None
    length, value_length, value_type = struct.unpack_from("<HHH", data, offset)
    end = offset + length
    if length < 6 or end > limit:
        return None

    key, pos = _read_key(data, offset + 6, end)
    pos = _align(pos)

    # Text values count WORDs; some linkers store a byte count instead, so clip
    size = value_length * 2 if value_type == 1 else value_length
    value = data[pos : min(pos + size, end)]
    pos = _align(pos + size)

    children = []
    while depth < _MAX_BLOCK_DEPTH and pos < end:
        child = _parse_block(data, pos, end, depth + 1)
        if child is None:
            break
        children.append(child[0])
        pos = _align(pos + child[1])
    return _Block(key, value_type, value, children), length
