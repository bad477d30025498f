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

"""Core version comparison utilities for addonmanifest.

This module is format-agnostic: it does NOT download or read files.
It only orders and renders the 4-component versions read from binaries
(major, minor, build, revision).
"""

from __future__ import annotations

from collections.abc import Sequence

Version = tuple[int, int, int, int]

EMPTY_VERSION: Version = (0, 0, 0, 0)


def is_greater(a: Sequence[int], b: Sequence[int]) -> bool:
    """Return True if version ``a`` is strictly greater than version ``b``.

    Components are compared most-significant first. The first differing
    component decides; fully equal versions are not greater.

    Example:
        ```python
        is_greater((1, 2, 0, 0), (1, 1, 9, 9))  # True
        is_greater((1, 2, 0, 0), (1, 2, 0, 0))  # False
        ```
    """
    for left, right in zip(a[:4], b[:4]):
        if left != right:
            return left > right
    return False


def is_empty_version(version: Sequence[int]) -> bool:
    """Return True if every component is zero ("no version present")."""
    return all(part == 0 for part in version)


def format_version(version: Sequence[int]) -> str:
    """Render a version as dotted digits, e.g. ``(1, 2, 3, 4)`` -> ``"1.2.3.4"``."""
    return ".".join(str(part) for part in version)


def version_from_words(most_significant: int, least_significant: int) -> Version:
    """Split two 32-bit words into a 4-component version.

    Each word contributes its high and low 16-bit halves, in that order.
    """
    return (
        (most_significant >> 16) & 0xFFFF,
        most_significant & 0xFFFF,
        (least_significant >> 16) & 0xFFFF,
        least_significant & 0xFFFF,
    )
