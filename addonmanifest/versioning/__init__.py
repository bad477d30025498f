"""
Version ordering and release extraction utilities for addonmanifest.

This package reads the version metadata embedded in addon binaries and
orders the resulting 4-component versions.

Modules
-------
keys : module
    Version ordering (is_greater) and rendering helpers.
pe : module
    Minimal PE reader: headers, sections, resources, export names.
dll : module
    Release extraction from a DLL's version-information resource.
archive : module
    Release extraction from the addon DLL inside a zip archive.
exports : module
    Entry-point checks used to pick the addon DLL inside an archive.

Public API
----------
Version : type alias
    4-tuple (major, minor, build, revision).
is_greater : function
    Strict component-wise comparison of two versions.
format_version : function
    Render a version as dotted digits.
is_empty_version : function
    True for the all-zero "no version" value.

Release extraction lives in the dll and archive modules; import them
directly (they depend on the manifest schema, which depends on keys).

Examples
--------
    >>> from addonmanifest.versioning import is_greater
    >>> is_greater((1, 2, 0, 0), (1, 1, 9, 9))
    True
    >>> is_greater((1, 2, 0, 0), (1, 2, 0, 0))
    False
"""

from .keys import Version, format_version, is_empty_version, is_greater

__all__ = [
    "Version",
    "format_version",
    "is_empty_version",
    "is_greater",
]
