"""Input/Output operations for addonmanifest.

This module provides the HTTP layer used by the release resolvers: a
requests session with retry/backoff defaults and an in-memory fetch helper
with a fixed per-request timeout.

Public API:

fetch : function
    GET a URL into memory and return its body and final URL.
FetchResult : dataclass
    Body, final URL, status and headers of a fetch.
make_session : function
    Create a requests.Session with retries and a project User-Agent.
DEFAULT_TIMEOUT : int
    Per-request timeout in seconds (10).

Example:
    from addonmanifest.io import fetch, make_session

    with make_session() as session:
        result = fetch(session, "https://example.com/version.txt")
        print(result.content)

"""

from .download import DEFAULT_TIMEOUT, FetchResult, fetch, make_session

__all__ = ["DEFAULT_TIMEOUT", "FetchResult", "fetch", "make_session"]
