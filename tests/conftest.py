"""Shared fixtures: an in-memory stand-in for ``requests.Session``."""

import threading
import time

import pytest
from requests.cookies import RequestsCookieJar

from furscrape.client import Client
from furscrape.config import ClientConfig

HTML = "text/html; charset=UTF-8"


class FakeResponse:
    def __init__(self, url, status_code=200, text="", content_type=HTML, content=None):
        self.url = url
        self.status_code = status_code
        self.text = text
        self.content = content if content is not None else text.encode("utf-8")
        self.headers = {"Content-Type": content_type}


class FakeSession:
    """Serves canned responses by URL and records every request."""

    def __init__(self):
        self.headers = {}
        self.proxies = {}
        self.cookies = RequestsCookieJar()
        self.routes = {}
        self.calls = []
        self.closed = False
        self._lock = threading.Lock()

    def add(self, url, text="", status_code=200, content_type=HTML, content=None):
        self.routes[url] = FakeResponse(url, status_code, text, content_type, content)

    def request(self, method, url, data=None, headers=None, timeout=None):
        with self._lock:
            self.calls.append(
                {
                    "method": method,
                    "url": url,
                    "data": data,
                    "headers": headers or {},
                    "timeout": timeout,
                    "time": time.monotonic(),
                }
            )
        if url not in self.routes:
            return FakeResponse(url, 404, "not found")
        return self.routes[url]

    def close(self):
        self.closed = True


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return Client(ClientConfig(rate_limit=0), session=session)
