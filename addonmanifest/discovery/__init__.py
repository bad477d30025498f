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

"""Release discovery for addonmanifest.

This module provides the resolvers that bring the releases of an addon (or
of the loader) up to date, one per host kind.

Available Resolvers:

github : GithubResolver
    Addons published as GitHub release assets. Tracks the latest stable
    release and the newest prerelease ahead of it.
standalone : StandaloneResolver
    Addons served from fixed URLs with a separate version document whose
    hash detects new builds.

Public API:

get_resolver : function
    Get a resolver instance by host kind.
register_resolver : function
    Register a resolver for a host kind.
ResolveContext : dataclass
    HTTP session, token and export check shared by all resolvers.
ReleaseResolver : Protocol
    Interface every resolver implements.

Example:
    ```python
    from addonmanifest.discovery import ResolveContext, get_resolver
    from addonmanifest.io import make_session

    resolver = get_resolver(addon.host.kind)
    result = resolver.resolve(addon.releases, addon.host, ResolveContext(make_session()))
    ```

Note:
    Resolvers self-register when their module is imported. Importing this
    package registers both of them.
"""

from .base import ReleaseResolver, ResolveContext, get_resolver, register_resolver

# Import resolvers so they register themselves
from .github import GithubResolver  # noqa: F401
from .standalone import StandaloneResolver  # noqa: F401

__all__ = [
    "GithubResolver",
    "ReleaseResolver",
    "ResolveContext",
    "StandaloneResolver",
    "get_resolver",
    "register_resolver",
]
