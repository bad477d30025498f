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

"""Addon definition loading for addonmanifest.

This module loads the per-addon YAML or TOML definitions from the addons
directory and validates them before any release is resolved:

  - One file per addon (``*.yaml``, ``*.yml`` or ``*.toml``)
  - Every file is validated and every error reported before failing
  - Package ids must be unique

Public API:

- load_addons: Load and validate every addon definition in a directory
- AddonDefinition: An Addon together with the file it was read from

Example:
    Basic usage:

        from pathlib import Path
        from addonmanifest.config import load_addons

        definitions = load_addons(Path("addons"))
        print([d.addon.id for d in definitions])

"""

from .loader import AddonDefinition, load_addons

__all__ = ["AddonDefinition", "load_addons"]
