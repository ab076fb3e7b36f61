"""HTTP session, rate limiting and page parsing for the site."""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Mapping, Optional, Union
from urllib.parse import urlencode, urlparse

import requests
from bs4 import BeautifulSoup
from bs4.dammit import EncodingDetector

from .config import ClientConfig
from .errors import ContentTypeError, HTTPStatusError, NotLoggedInError, TransportError
from .handlers import MyUsernameHandler
from .journal import get_journal_content
from .models import JournalContent, SubmissionDetails
from .processor import run_handlers
from .search import Search
from .submission import get_submission_details
from .user import User

logger = logging.getLogger("furscrape")

HTML_PARSER = "html.parser"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
DEFAULT_ENCODING = "utf-8"
CHARSET_PATTERN = re.compile(r"charset=\s*[\"']?([\w.:-]+)", re.IGNORECASE)


class RateLimiter:
    """Thread-safe gate enforcing a minimum spacing between requests.

    The lock is held while sleeping, so concurrent callers queue up and leave
    one interval apart.
    """

    def __init__(self, interval: float) -> None:
        self.interval = max(float(interval), 0.0)
        self._next = 0.0
        self._lock = threading.Lock()

    def wait(self) -> float:
        """Block until the next slot is free and return its monotonic time."""
        with self._lock:
            now = time.monotonic()
            wait_for = self._next - now
            if wait_for > 0:
                time.sleep(wait_for)
                now = time.monotonic()
            self._next = now + self.interval
            return now


def parse_html(
    markup: Union[str, bytes], encoding: Optional[str] = None
) -> BeautifulSoup:
    """Parse a page; the first of any duplicated attributes wins."""
    return BeautifulSoup(
        markup, HTML_PARSER, from_encoding=encoding, on_duplicate_attribute="ignore"
    )


def response_encoding(content_type: str, body: bytes) -> str:
    """Charset from the header, else a ``<meta>`` declaration, else UTF-8.

    requests falls back to ISO-8859-1 for ``text/html`` without a charset,
    which garbles the site's UTF-8 pages.
    """
    match = CHARSET_PATTERN.search(content_type)
    if match:
        return match.group(1)
    declared = EncodingDetector.find_declared_encoding(body, is_html=True)
    return declared or DEFAULT_ENCODING


class Client:
    """A logged-in (or anonymous) session with the site.

    One client owns its own cookie jar and rate limiter, so several
    independent sessions can coexist in one process.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = self.config.user_agent
        if self.config.proxy:
            self.session.proxies.update(
                {"http": self.config.proxy, "https": self.config.proxy}
            )
        domain = urlparse(self.config.base_url).hostname or ""
        for name, value in self.config.cookies.items():
            self.session.cookies.set(name, value, domain=domain, path="/")
        self.rate_limiter = RateLimiter(self.config.rate_limit)

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def build_url(self, path: str) -> str:
        if path.startswith("https://"):
            return path
        return self.config.base_url + path

    def request(
        self,
        method: str,
        path: str,
        form: Optional[Mapping[str, str]] = None,
    ) -> requests.Response:
        """Send one request after waiting on the rate limiter.

        Anything but 200 OK raises :class:`HTTPStatusError`; nothing is retried.
        """
        url = self.build_url(path)
        headers = {}
        body = None
        if form is not None:
            logger.debug("%s parameters: %s", method, dict(form))
            headers["Content-Type"] = FORM_CONTENT_TYPE
            body = urlencode(form)

        self.rate_limiter.wait()
        logger.debug("Making request %s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                data=body,
                headers=headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(url, f"{method} failed: {exc}") from exc

        if response.status_code != 200:
            logger.error(
                "Unexpected HTTP response code %s from %s: %s",
                response.status_code,
                url,
                response.text[:200],
            )
            raise HTTPStatusError(url, response.status_code, response.text)
        return response

    def _parse(self, response: requests.Response) -> BeautifulSoup:
        content_type = response.headers.get("Content-Type", "")
        if not content_type.startswith("text/html"):
            logger.error(
                "Unexpected content-type %r from %s", content_type, response.url
            )
            raise ContentTypeError(response.url or "", content_type, response.text)
        body = response.content
        return parse_html(body, response_encoding(content_type, body))

    def get_page(self, path: str) -> BeautifulSoup:
        return self._parse(self.request("GET", path))

    def post_page(self, path: str, form: Mapping[str, str]) -> BeautifulSoup:
        return self._parse(self.request("POST", path, form=form))

    def get_bytes(self, url: str) -> bytes:
        """Fetch a file or image without checking its content type."""
        return self.request("GET", url).content

    def get_username(self) -> str:
        """Return the name of the logged-in user.

        Raises :class:`NotLoggedInError` when the page loads but shows no
        username, i.e. the cookies do not authenticate.
        """
        root = self.get_page("/search")
        handler = MyUsernameHandler()
        run_handlers(root, handler)
        if not handler.username:
            raise NotLoggedInError()
        return handler.username

    def user(self, name: str) -> User:
        return User(self, name)

    def search(self, query: str) -> Search:
        return Search(self, query)

    def get_submission_details(self, submission_id: int) -> SubmissionDetails:
        return get_submission_details(self, submission_id)

    def get_journal_content(self, journal_id: int) -> JournalContent:
        return get_journal_content(self, journal_id)
