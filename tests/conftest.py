"""
Pytest configuration and shared fixtures for addonmanifest tests.

This module provides reusable fixtures and test utilities used across
the test suite, most importantly factories that build minimal but valid
PE32 DLL images (with a version resource and optional export table) and
zip archives, so no real binaries are needed.
"""

from __future__ import annotations

import io
from pathlib import Path
import struct
from typing import Any
import zipfile

import pytest
import yaml

from addonmanifest.logging import SilentLogger, set_global_logger

# -------------------------------
# PE image builder
# -------------------------------

_SECTION_VA = 0x1000
_SECTION_RAW = 0x200
_FILE_ALIGN = 0x200


def _pad4(data: bytes) -> bytes:
    return data + b"\0" * (-len(data) % 4)


def _version_block(
    key: str,
    value: bytes = b"",
    value_type: int = 0,
    children: tuple[bytes, ...] = (),
    value_length: int | None = None,
) -> bytes:
    """Build one VS_VERSIONINFO-style block (header, key, value, children)."""
    if value_length is None:
        value_length = len(value) // 2 if value_type == 1 else len(value)
    header = struct.pack("<HHH", 0, value_length, value_type)
    body = _pad4(header + (key + "\0").encode("utf-16-le"))
    body += value
    for child in children:
        body = _pad4(body) + child
    body = _pad4(body)
    return struct.pack("<H", len(body)) + body[2:]


def _string_entry(key: str, text: str) -> bytes:
    return _version_block(key, (text + "\0").encode("utf-16-le"), value_type=1)


def build_version_resource(
    file_version: tuple[int, int, int, int] = (1, 0, 0, 0),
    product_version: tuple[int, int, int, int] = (0, 0, 0, 0),
    strings: dict[str, str] | None = None,
    fixed: bool = True,
) -> bytes:
    """Build a VS_VERSIONINFO resource blob."""
    fv, pv = file_version, product_version
    value = b""
    if fixed:
        value = struct.pack(
            "<13I",
            0xFEEF04BD,
            0x00010000,
            (fv[0] << 16) | fv[1],
            (fv[2] << 16) | fv[3],
            (pv[0] << 16) | pv[1],
            (pv[2] << 16) | pv[3],
            0x3F,
            0,
            0x40004,
            2,
            0,
            0,
            0,
        )

    children: tuple[bytes, ...] = ()
    if strings is not None:
        table = _version_block(
            "040904b0",
            value_type=1,
            children=tuple(_string_entry(k, v) for k, v in strings.items()),
        )
        children = (_version_block("StringFileInfo", value_type=1, children=(table,)),)

    return _version_block("VS_VERSION_INFO", value, children=children)


def build_pe(
    version_resource: bytes | None = None,
    exports: tuple[str, ...] = (),
) -> bytes:
    """Build a minimal PE32 DLL with one section holding resources/exports."""
    section = bytearray()
    resource_dir = (0, 0)
    export_dir = (0, 0)

    if version_resource is not None:
        # type (16) -> name (1) -> language (0x409) -> data entry -> blob
        section += struct.pack("<IIHHHH", 0, 0, 0, 0, 0, 1)
        section += struct.pack("<II", 16, 0x80000000 | 0x18)
        section += struct.pack("<IIHHHH", 0, 0, 0, 0, 0, 1)
        section += struct.pack("<II", 1, 0x80000000 | 0x30)
        section += struct.pack("<IIHHHH", 0, 0, 0, 0, 0, 1)
        section += struct.pack("<II", 0x409, 0x48)
        section += struct.pack("<IIII", _SECTION_VA + 0x58, len(version_resource), 0, 0)
        section += version_resource
        resource_dir = (_SECTION_VA, len(section))

    if exports:
        section += b"\0" * (-len(section) % 4)
        start = len(section)
        names_array = start + 40
        strings_start = names_array + 4 * len(exports)
        name_rvas = []
        blob = b""
        for name in exports:
            name_rvas.append(_SECTION_VA + strings_start + len(blob))
            blob += name.encode("ascii") + b"\0"
        section += struct.pack(
            "<IIHHIIIIIII",
            0,
            0,
            0,
            0,
            0,
            1,
            len(exports),
            len(exports),
            0,
            _SECTION_VA + names_array,
            0,
        )
        section += b"".join(struct.pack("<I", rva) for rva in name_rvas)
        section += blob
        export_dir = (_SECTION_VA + start, len(section) - start)

    if not section:
        section = bytearray(_FILE_ALIGN)
    section += b"\0" * (-len(section) % _FILE_ALIGN)

    image = bytearray(_SECTION_RAW)
    image[0:2] = b"MZ"
    struct.pack_into("<I", image, 0x3C, 0x40)
    image[0x40:0x44] = b"PE\0\0"
    # COFF header: i386, one section, 224-byte optional header, DLL
    struct.pack_into("<HHIIIHH", image, 0x44, 0x14C, 1, 0, 0, 0, 224, 0x2102)
    optional = 0x58
    struct.pack_into("<H", image, optional, 0x10B)
    struct.pack_into("<I", image, optional + 92, 16)
    struct.pack_into("<II", image, optional + 96, *export_dir)
    struct.pack_into("<II", image, optional + 96 + 16, *resource_dir)
    struct.pack_into(
        "<8sIIII",
        image,
        optional + 224,
        b".rsrc",
        len(section),
        _SECTION_VA,
        len(section),
        _SECTION_RAW,
    )
    return bytes(image + section)


@pytest.fixture
def make_dll():
    """
    Factory fixture for building DLL images.

    Usage:
        content = make_dll(version=(1, 2, 3, 4), name="My Addon")
        content = make_dll(exports=("get_init_addr",))
        content = make_dll(strings=None)  # no string table
    """

    def _make(
        version: tuple[int, int, int, int] = (1, 0, 0, 0),
        name: str | None = "Test Addon",
        product_version: tuple[int, int, int, int] = (0, 0, 0, 0),
        strings: dict[str, str] | None | bool = True,
        exports: tuple[str, ...] = (),
        resource: bool = True,
        fixed: bool = True,
    ) -> bytes:
        if strings is True:
            strings = {"FileVersion": ".".join(str(p) for p in version)}
            if name is not None:
                strings["ProductName"] = name
        resource_blob = (
            build_version_resource(version, product_version, strings, fixed)
            if resource
            else None
        )
        return build_pe(resource_blob, exports)

    return _make


def nested_version_blocks(depth: int) -> bytes:
    """Build ``depth`` version blocks, each the only child of the previous."""
    block = b""
    for _ in range(depth):
        block = _version_block("A", children=(block,) if block else ())
    return block


@pytest.fixture
def make_nested_dll():
    """
    Factory fixture for DLLs whose version resource nests far too deep.

    Usage:
        content = make_nested_dll(3000)
    """

    def _make(depth: int) -> bytes:
        return build_pe(nested_version_blocks(depth))

    return _make


@pytest.fixture
def make_zip():
    """
    Factory fixture for building zip archives in memory.

    Usage:
        content = make_zip({"addon/addon.dll": dll_bytes, "readme.txt": b"hi"})
    """

    def _make(entries: dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for name, data in entries.items():
                archive.writestr(name, data)
        return buffer.getvalue()

    return _make


# -------------------------------
# Addon definitions
# -------------------------------


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def addons_dir(tmp_test_dir: Path) -> Path:
    """Provide an empty addons directory."""
    path = tmp_test_dir / "addons"
    path.mkdir()
    return path


@pytest.fixture
def github_addon_data() -> dict[str, Any]:
    """Provide a GitHub-hosted addon definition."""
    return {
        "package": {
            "id": "radial",
            "name": "Radial",
            "description": "Radial menus",
            "website": "https://github.com/owner/radial",
        },
        "host": {"github": {"url": "owner/radial"}},
    }


@pytest.fixture
def standalone_addon_data() -> dict[str, Any]:
    """Provide a standalone-hosted addon definition."""
    return {
        "package": {"id": "arcdps", "name": "ArcDPS"},
        "host": {
            "standalone": {
                "url": "https://example.com/d3d11.dll",
                "version_url": "https://example.com/d3d11.dll.md5sum",
            }
        },
    }


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("addons/test.yaml", {"key": "value"})
    """

    def _create(filename: str, data: Any) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f)
        return path

    return _create


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Reset the global logger so tests never leak output settings."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())
