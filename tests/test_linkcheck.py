"""Test dead link detection with a mocked HTTP session."""

import pytest
import requests
import urllib3
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from shell_explorer.bookmarks import Bookmark
from shell_explorer.categories import BookmarkCategory
from shell_explorer.linkcheck import SKIPPED, USER_AGENT, check_url_status, find_dead_links, make_session


def response(status_code, reason=None):
    return Mock(status_code=status_code, reason=reason)


def bookmark(i, url):
    return Bookmark(str(i), f"Bookmark {i}", url, None, "bookmark_bar/Bar", BookmarkCategory.OTHER)


class TestMakeSession:
    """Test session setup."""

    def test_headers_and_redirect_limit(self, test_config):
        test_config.max_redirects = 3

        session = make_session(test_config)

        assert session.headers["User-Agent"] == USER_AGENT
        assert session.max_redirects == 3


class TestCheckUrlStatus:
    """Test the status of a single URL."""

    def setup_method(self):
        self.session = MagicMock()

    def test_non_http_is_skipped(self):
        assert check_url_status("file:///tmp/x.html", self.session) == (True, SKIPPED)
        assert check_url_status("chrome://settings", self.session) == (True, SKIPPED)
        self.session.head.assert_not_called()

    def test_ok(self):
        self.session.head.return_value = response(200, "OK")

        assert check_url_status("https://example.com/", self.session, timeout=3) == (True, "200 OK")
        self.session.head.assert_called_once_with("https://example.com/", timeout=3, allow_redirects=True)

    def test_not_found(self):
        self.session.head.return_value = response(404, "Not Found")
        assert check_url_status("https://example.com/gone", self.session) == (False, "404 Not Found")

    def test_missing_reason(self):
        self.session.head.return_value = response(503)
        assert check_url_status("https://example.com/", self.session) == (False, "503")

    def test_head_not_allowed_falls_back_to_get(self):
        self.session.head.return_value = response(405, "Method Not Allowed")
        get_response = response(200, "OK")
        self.session.get.return_value = get_response

        assert check_url_status("https://example.com/", self.session) == (True, "200 OK")
        self.session.get.assert_called_once_with(
            "https://example.com/", timeout=10, allow_redirects=True, stream=True
        )
        get_response.close.assert_called_once()

    @pytest.mark.parametrize("error,expected", [
        (requests.exceptions.Timeout("read timed out"), "timeout"),
        (requests.exceptions.ConnectTimeout("connect timed out"), "timeout"),
        (requests.exceptions.TooManyRedirects("Exceeded 5 redirects."), "too many redirects"),
        (
            requests.exceptions.ConnectionError(
                "Failed to resolve 'nope.invalid' ([Errno -2] Name or service not known)"
            ),
            "DNS error",
        ),
        (requests.exceptions.ConnectionError("Connection refused"), "connection error"),
        (requests.exceptions.InvalidURL("boom"), "error: boom"),
    ])
    def test_request_errors(self, error, expected):
        self.session.head.side_effect = error
        assert check_url_status("https://example.com/", self.session) == (False, expected)

    def test_malformed_host_is_dead(self):
        self.session.head.side_effect = urllib3.exceptions.LocationParseError("a..b")

        alive, status = check_url_status("http://a..b/", self.session)

        assert not alive
        assert status.startswith("error: ")

    def test_long_error_message_is_truncated(self):
        self.session.head.side_effect = requests.exceptions.RequestException("x" * 100)

        alive, status = check_url_status("https://example.com/", self.session)

        assert not alive
        assert status == "error: " + "x" * 27 + "..."


class TestFindDeadLinks:
    """Test checking a whole bookmark list."""

    def setup_method(self):
        statuses = {
            "https://alive.example/": response(200, "OK"),
            "https://gone.example/": response(404, "Not Found"),
            "https://broken.example/": response(500, "Internal Server Error"),
        }
        self.session = MagicMock()
        self.session.head.side_effect = lambda url, **kwargs: statuses[url]

    def test_dead_links_in_input_order(self, test_config):
        bookmarks = [
            bookmark(1, "https://broken.example/"),
            bookmark(2, "https://alive.example/"),
            bookmark(3, "file:///home/me/notes.html"),
            bookmark(4, "https://gone.example/"),
        ]

        with patch("shell_explorer.linkcheck.make_session", return_value=self.session):
            dead = find_dead_links(bookmarks, test_config, verbose=True)

        assert [(d.bookmark.id, d.status) for d in dead] == [
            ("1", "500 Internal Server Error"),
            ("4", "404 Not Found"),
        ]
        assert self.session.head.call_count == 3

    def test_malformed_host_does_not_abort_batch(self, test_config):
        def head(url, **kwargs):
            if url == "http://a..b/":
                raise urllib3.exceptions.LocationParseError("a..b")
            return response(200, "OK")

        self.session.head.side_effect = head
        bookmarks = [
            bookmark(0, "ftp://x"),
            bookmark(1, "http://a..b/"),
            bookmark(2, "javascript:void(0)"),
            bookmark(3, "https://alive.example/"),
        ]

        with patch("shell_explorer.linkcheck.make_session", return_value=self.session):
            dead = find_dead_links(bookmarks, test_config)

        assert [d.bookmark.id for d in dead] == ["1"]

    def test_all_alive(self, test_config):
        bookmarks = [bookmark(1, "https://alive.example/")]

        with patch("shell_explorer.linkcheck.make_session", return_value=self.session):
            assert find_dead_links(bookmarks, test_config) == []

    def test_empty(self, test_config):
        with patch("shell_explorer.linkcheck.make_session", return_value=self.session):
            assert find_dead_links([], test_config) == []
