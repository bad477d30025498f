"""
Tests for addonmanifest.io.download module.

Tests fetch functionality including:
- Basic fetches
- Redirects and the final URL
- Status code handling
- Timeouts and connection errors
- Session defaults
"""

from __future__ import annotations

import pytest
import requests
import requests_mock

from addonmanifest import __version__
from addonmanifest.exceptions import FetchFailedError, NetworkError
from addonmanifest.io.download import DEFAULT_TIMEOUT, fetch, make_session


@pytest.fixture
def session():
    with make_session() as s:
        yield s


def test_fetch_success(session) -> None:
    """Test basic successful fetch."""
    url = "https://example.com/file.dll"
    data = b"hello world"

    with requests_mock.Mocker() as m:
        m.get(url, content=data, headers={"X-Test": "1"})
        result = fetch(session, url)

    assert result.content == data
    assert result.status_code == 200
    assert result.url == url
    assert result.headers["X-Test"] == "1"


def test_follows_redirect_and_reports_final_url(session) -> None:
    """Test that redirects are followed and the final URL is returned."""
    start = "https://example.com/latest"
    final = "https://cdn.example.com/addon.zip"

    with requests_mock.Mocker() as m:
        m.get(start, status_code=302, headers={"Location": final})
        m.get(final, content=b"abc")
        result = fetch(session, start)

    assert result.url == final
    assert result.content == b"abc"


def test_accepts_any_2xx_by_default(session) -> None:
    url = "https://example.com/file.dll"
    with requests_mock.Mocker() as m:
        m.get(url, status_code=203, content=b"x")
        assert fetch(session, url).status_code == 203


def test_expected_status_is_exact(session) -> None:
    """Test that expected_status rejects other 2xx codes."""
    url = "https://example.com/version.txt"
    with requests_mock.Mocker() as m:
        m.get(url, status_code=203, content=b"x")
        with pytest.raises(FetchFailedError) as exc_info:
            fetch(session, url, expected_status=200)

    assert exc_info.value.status_code == 203
    assert exc_info.value.url == url


@pytest.mark.parametrize("status", [404, 403])
def test_error_status_raises(session, status) -> None:
    url = "https://example.com/missing.dll"
    with requests_mock.Mocker() as m:
        m.get(url, status_code=status)
        with pytest.raises(FetchFailedError, match=str(status)):
            fetch(session, url)


def test_connection_error_raises(session) -> None:
    """Test that transport failures are wrapped without a status code."""
    url = "https://example.com/file.dll"
    with requests_mock.Mocker() as m:
        m.get(url, exc=requests.ConnectionError("refused"))
        with pytest.raises(FetchFailedError) as exc_info:
            fetch(session, url)

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value, NetworkError)


def test_timeout_raises(session) -> None:
    url = "https://example.com/slow.dll"
    with requests_mock.Mocker() as m:
        m.get(url, exc=requests.Timeout)
        with pytest.raises(FetchFailedError, match="timed out"):
            fetch(session, url)


def test_fixed_timeout_is_sent(session) -> None:
    url = "https://example.com/file.dll"
    with requests_mock.Mocker() as m:
        m.get(url, content=b"x")
        fetch(session, url)

    assert m.request_history[0].timeout == DEFAULT_TIMEOUT


def test_extra_headers_are_sent(session) -> None:
    url = "https://example.com/file.dll"
    with requests_mock.Mocker() as m:
        m.get(url, content=b"x")
        fetch(session, url, headers={"Authorization": "Bearer abc"})

    sent = m.request_history[0].headers
    assert sent["Authorization"] == "Bearer abc"
    assert sent["User-Agent"] == f"addonmanifest/{__version__}"


def test_session_retries_transient_errors() -> None:
    """Test that sessions mount adapters with retry configuration."""
    with make_session() as s:
        retries = s.get_adapter("https://example.com").max_retries

    assert retries.total == 3
    assert 503 in retries.status_forcelist
