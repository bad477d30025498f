"""
HTTP(S) fetching for addonmanifest.

This module provides the single HTTP entry point used by every resolver.
Bodies are read fully into memory: version documents are tiny and addon
binaries are small enough that parsing them in memory is simpler than going
through the filesystem.

Key Features:

- **Retry Logic with Exponential Backoff** - Automatically retries on transient failures (429, 500, 502, 503, 504) with exponential backoff. Configured via urllib3.util.Retry.
- **Fixed Timeout** - Every request carries its own 10 second timeout; the caller cannot widen it.
- **Final URL** - Redirects are followed and the final URL is returned, so callers can dispatch on the real file name.
- **Typed Failures** - Non-success status codes, timeouts and connection errors surface as FetchFailedError.

Example:
Fetch a version document:

    >>> from addonmanifest.io import fetch, make_session
    >>> with make_session() as session:
    ...     result = fetch(session, "https://example.com/version.txt")
    >>> result.status_code
    200

Require an exact status:

    >>> fetch(session, url, expected_status=200)

Notes:
- Timeouts are per-request, not per retry sequence
- User-Agent identifies addonmanifest to help with debugging/support
- All HTTP errors are chained for better debugging
"""

from __future__ import annotations

from dataclasses import dataclass, field

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from addonmanifest import __version__
from addonmanifest.exceptions import FetchFailedError

# Seconds per request; resolvers are not allowed to change it.
DEFAULT_TIMEOUT = 10


@dataclass(frozen=True)
class FetchResult:
    """Body and metadata of a completed fetch.

    Attributes:
        content: Response body.
        url: Final URL after redirects.
        status_code: HTTP status code.
        headers: Response headers.
    """

    content: bytes
    url: str
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)


def make_session() -> requests.Session:
    """
    Create a requests.Session with sane retry/backoff defaults.

    - Retries on common transient status codes.
    - Applies exponential backoff.
    - Sets a helpful User-Agent to avoid being blocked.
    """
    s = requests.Session()
    retries = Retry(
        total=3,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update(
        {"User-Agent": f"addonmanifest/{__version__}"},
    )
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def fetch(
    session: requests.Session,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    expected_status: int | None = None,
) -> FetchResult:
    """GET ``url`` into memory.

    Args:
        session: Session to issue the request on.
        url: Source URL.
        headers: Extra request headers.
        expected_status: If set, any other status is a failure. Otherwise
            any 2xx status is accepted.

    Returns:
        The response body, final URL, status and headers.

    Raises:
        FetchFailedError: On a rejected status code, timeout or connection
            error. The message names the status code when there is one.
    """
    from addonmanifest.logging import get_global_logger

    logger = get_global_logger()
    logger.debug("HTTP", f"GET {url}")

    try:
        resp = session.get(
            url, headers=headers, allow_redirects=True, timeout=DEFAULT_TIMEOUT
        )
    except requests.Timeout as err:
        raise FetchFailedError(
            f"Request to {url} timed out after {DEFAULT_TIMEOUT}s", url
        ) from err
    except requests.RequestException as err:
        raise FetchFailedError(f"Request to {url} failed: {err}", url) from err

    # Log redirects
    for hist in resp.history:
        logger.debug(
            "HTTP",
            f"Redirect {hist.status_code} -> {hist.headers.get('Location', 'unknown')}",
        )
    logger.debug("HTTP", f"Response: {resp.status_code} {resp.reason}")

    ok = resp.status_code == expected_status if expected_status else resp.ok
    if not ok:
        raise FetchFailedError(
            f"Response status for {url}: {resp.status_code}",
            url,
            status_code=resp.status_code,
        )

    return FetchResult(
        content=resp.content,
        url=resp.url,
        status_code=resp.status_code,
        headers=dict(resp.headers),
    )
