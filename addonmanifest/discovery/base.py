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

"""Release resolver protocol and registry for addonmanifest.

This module defines the foundational components for release discovery:

- ReleaseResolver protocol: Interface that all resolvers must implement
- ResolveContext: Shared collaborators passed into every resolver
- Resolver registry: Global dict mapping host kinds to implementations
- Registration and lookup functions: register_resolver() and get_resolver()

Every addon declares exactly one host kind (``github`` or ``standalone``).
The reconciler looks the resolver up by that tag; resolvers never guess the
host kind from the shape of the configuration.

Design Philosophy:
    - Resolvers are Protocol classes (structural subtyping, not inheritance)
    - Registration happens at module import time (resolvers self-register)
    - Registry is a simple dict keyed by the host's ``kind`` tag
    - Each resolver is stateless and can be instantiated on-demand

Example:
    Implementing a custom resolver:
        ```python
        from addonmanifest.discovery.base import register_resolver

        class MirrorResolver:
            def resolve(self, existing, host, context):
                ...

            def validate_config(self, host_config):
                return []

        register_resolver("mirror", MirrorResolver)
        ```
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import requests

from addonmanifest.exceptions import ConfigError
from addonmanifest.manifest.schema import Host, ReleaseInfo
from addonmanifest.results import ResolveResult
from addonmanifest.versioning.exports import ExportCheck, has_addon_exports


@dataclass(frozen=True)
class ResolveContext:
    """Collaborators shared by all resolvers during one run.

    Attributes:
        session: HTTP session for every request.
        token: Optional GitHub token, sent only to the GitHub API.
        export_check: Predicate that picks the addon DLL inside archives.
    """

    session: requests.Session
    token: str | None = None
    export_check: ExportCheck = has_addon_exports


# -------------------------------
# Resolver Protocol
# -------------------------------


class ReleaseResolver(Protocol):
    """Protocol for release resolvers.

    Each resolver must implement resolve(), which brings the stable and
    prerelease channel of one source up to date, and validate_config(),
    which checks the host configuration without network calls.
    """

    def resolve(
        self, existing: ReleaseInfo, host: Host, context: ResolveContext
    ) -> ResolveResult:
        """Resolve the current releases of a source.

        Args:
            existing: Releases recorded by the previous run.
            host: Host configuration of the matching kind.
            context: Shared collaborators (HTTP session, token, checks).

        Returns:
            The releases after this pass plus any per-channel failures.
            Unchanged channels return the existing Release unmodified.

        Raises:
            AddonManifestError: If neither channel can be attempted.
        """
        ...

    def validate_config(self, host_config: dict[str, Any]) -> list[str]:
        """Validate host configuration (no network calls).

        Returns:
            List of error messages. Empty list if configuration is valid.
        """
        ...


# -------------------------------
# Resolver Registry
# -------------------------------

_RESOLVER_REGISTRY: dict[str, type[ReleaseResolver]] = {}


def register_resolver(kind: str, resolver_class: type[ReleaseResolver]) -> None:
    """Register a resolver for a host kind.

    Registering the same kind twice overwrites the previous registration
    (allows monkey-patching for tests).

    Args:
        kind: Host kind tag as used in addon definitions (e.g., "github").
        resolver_class: The resolver class to register.
    """
    _RESOLVER_REGISTRY[kind] = resolver_class


def get_resolver(kind: str) -> ReleaseResolver:
    """Get a resolver instance for a host kind.

    Args:
        kind: Host kind tag (e.g., "standalone"). Case-sensitive.

    Returns:
        A new instance of the registered resolver.

    Raises:
        ConfigError: If no resolver is registered for the kind. The error
            message lists the available kinds.
    """
    if kind not in _RESOLVER_REGISTRY:
        available = ", ".join(_RESOLVER_REGISTRY.keys())
        raise ConfigError(
            f"Unknown host kind: {kind!r}. Available: {available or '(none)'}"
        )
    return _RESOLVER_REGISTRY[kind]()
