"""
addonmanifest - Addon manifest generator for the GW2 addon loader

A Python-based CLI tool that keeps the addon manifest consumed by the game's
addon loader up to date. It reads one YAML or TOML definition per addon,
finds each addon's current stable and prerelease downloads, reads the version
and product name embedded in the addon DLL, and writes the manifest.

addonmanifest provides:
  - Declarative YAML or TOML addon definitions
  - GitHub release tracking (latest release and newest prerelease)
  - Standalone URL tracking with content-hash change detection
  - Version and product name extraction from PE version resources
  - Addon DLL detection inside zip archives by exported entry points
  - Per-addon failure isolation with GitHub Actions annotations

Quick Start
-----------
Validate addon definitions:

    $ addon-manifest validate --addons-path addons

Update the manifest in place:

    $ addon-manifest generate --manifest-path manifest.json

For full CLI documentation:

    $ addon-manifest --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    High-level orchestration (manifest generation).
config : package
    Addon definition loading from YAML or TOML.
discovery : package
    Release resolvers per host kind (github, standalone).
versioning : package
    Version ordering and PE version/export extraction.
manifest : package
    Manifest records and persistence.
io : package
    HTTP session and fetch helper.

Public API
----------
The primary interface is the CLI, but key functions are exported for
programmatic use:

    from addonmanifest.core import generate_manifest
    from addonmanifest.validation import validate_addons
    from addonmanifest.config import load_addons
    from addonmanifest.versioning import is_greater

For more details, see the individual module docstrings.

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Addon manifest generator for the GW2 addon loader"

# Re-export commonly used functions for convenience
from addonmanifest.config import load_addons
from addonmanifest.core import generate_manifest
from addonmanifest.manifest import Manifest, read_manifest, write_manifest
from addonmanifest.validation import validate_addons
from addonmanifest.versioning import is_greater

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "generate_manifest",
    "validate_addons",
    "load_addons",
    "read_manifest",
    "write_manifest",
    "Manifest",
    "is_greater",
]
