"""Shared fixtures: canned HTTP responses and a fake requests session."""

import threading
import time

import pytest
import requests

from stylestats.network.fetcher import Fetcher


def make_response(url, body, content_type="text/css", status=200, final_url=None):
    """
    Build a real ``requests.Response`` without touching the network.

    ``body`` may be text (sent as UTF-8) or raw bytes. The encoding is left
    to requests, derived from the headers the way its adapter does it.
    """
    response = requests.Response()
    response.status_code = status
    response.reason = "OK" if status == 200 else "Error"
    response._content = body if isinstance(body, bytes) else body.encode("utf-8")
    if content_type is not None:
        response.headers["Content-Type"] = content_type
    response.encoding = requests.utils.get_encoding_from_headers(response.headers)
    response.url = final_url or url
    return response


class FakeSession:
    """
    Stand-in for ``requests.Session``.

    ``routes`` maps a URL to a response, an exception instance, or a
    ``(delay_seconds, response)`` pair.
    """

    def __init__(self, routes):
        self.routes = routes
        self.calls = []
        self.kwargs = []
        self._lock = threading.Lock()
        self.closed = False

    def get(self, url, **kwargs):
        with self._lock:
            self.calls.append(url)
            self.kwargs.append(kwargs)
        if url not in self.routes:
            raise requests.ConnectionError(f"no route to {url}")
        route = self.routes[url]
        if isinstance(route, tuple):
            delay, route = route
            time.sleep(delay)
        if isinstance(route, Exception):
            raise route
        return route

    def close(self):
        self.closed = True


@pytest.fixture
def fake_fetcher():
    """Factory: ``fake_fetcher(routes, **request_options)`` -> (Fetcher, FakeSession)."""
    def factory(routes, **request_options):
        session = FakeSession(routes)
        return Fetcher(request_options, session=session), session
    return factory
