"""Data models returned by the client."""

from __future__ import annotations

import enum
import logging
import re
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Generic, Optional, TypeVar

from .errors import TransportError

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger("furscrape")

T = TypeVar("T")

# Returned for identifiers that could not be parsed. Indistinguishable from a
# real submission numbered 0.
UNPARSED_ID = 0

SUBMISSION_ID_PATTERN = re.compile(r"^sid-(\d+)$")
PREVIEW_SIZE_PATTERN = re.compile(
    r"^https://t\.facdn\.net/(\d+)@(\d+)-(\d+)\.([a-zA-Z]+)$"
)
PREVIEW_URL_FORMAT = "https://t.facdn.net/{}@400-{}.{}"
LARGE_PREVIEW_SIZE = "400"

_UNSET = object()


class OnceCell(Generic[T]):
    """Holds a value computed at most once, even with concurrent callers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: object = _UNSET

    @property
    def is_set(self) -> bool:
        return self._value is not _UNSET

    def get_or_init(self, factory: Callable[[], T]) -> T:
        if self._value is _UNSET:
            with self._lock:
                if self._value is _UNSET:
                    # A raising factory leaves the cell empty for the next caller.
                    self._value = factory()
        return self._value  # type: ignore[return-value]


class Rating(str, enum.Enum):
    """Decency rating of a submission."""

    GENERAL = "general"
    MATURE = "mature"
    ADULT = "adult"

    @classmethod
    def parse(cls, token: object) -> Optional["Rating"]:
        """Accept ``general``, ``r-general`` or a class string containing it."""
        if not isinstance(token, str) or not token:
            return None
        for part in token.split():
            value = part[2:] if part.startswith("r-") else part
            try:
                return cls(value.lower())
            except ValueError:
                continue
        return None


def parse_submission_id(raw: str) -> int:
    """Parse ``sid-123`` into an int, ``UNPARSED_ID`` for anything else."""
    match = SUBMISSION_ID_PATTERN.match(raw.strip())
    if not match:
        logger.error("Unable to parse submission ID %r", raw)
        return UNPARSED_ID
    return int(match.group(1))


@dataclass
class JournalContent:
    """Body text and posting date of a journal entry."""

    posted: str
    body: str

    def __str__(self) -> str:
        return f"{self.posted}\n\n{self.body}"


@dataclass
class SubmissionDetails:
    """Data only available on a submission's own page."""

    client: "Client" = field(repr=False, compare=False)
    submission_id: int
    download_url: str
    description: str
    stats: str
    _download: OnceCell[bytes] = field(
        default_factory=OnceCell, init=False, repr=False, compare=False
    )

    def download(self) -> bytes:
        """Fetch the submission file; cached after the first success."""
        if not self.download_url:
            raise ValueError(f"Submission {self.submission_id} has no download link")
        return self._download.get_or_init(
            lambda: self.client.get_bytes(self.download_url)
        )


@dataclass
class Submission:
    """An artwork submission as listed on gallery-style pages."""

    client: "Client" = field(repr=False, compare=False)
    id: int
    preview_url: str
    rating: Optional[Rating]
    title: str
    user: str
    _preview: OnceCell[bytes] = field(
        default_factory=OnceCell, init=False, repr=False, compare=False
    )
    _details: OnceCell[SubmissionDetails] = field(
        default_factory=OnceCell, init=False, repr=False, compare=False
    )

    def __str__(self) -> str:
        rating = self.rating.value if self.rating else "unrated"
        return f"{self.preview_url} {self.title} by {self.user} ({rating}, {self.id})"

    @property
    def url(self) -> str:
        return f"{self.client.config.base_url}/view/{self.id}/"

    def preview_image(self) -> bytes:
        """Preview image bytes, preferring the largest thumbnail size."""
        return self._preview.get_or_init(self._fetch_preview)

    def details(self) -> SubmissionDetails:
        return self._details.get_or_init(
            lambda: self.client.get_submission_details(self.id)
        )

    def _fetch_preview(self) -> bytes:
        match = PREVIEW_SIZE_PATTERN.match(self.preview_url)
        if match:
            thumb_id, size, stamp, extension = match.groups()
            if size != LARGE_PREVIEW_SIZE:
                large_url = PREVIEW_URL_FORMAT.format(thumb_id, stamp, extension)
                try:
                    return self.client.get_bytes(large_url)
                except TransportError as exc:
                    logger.warning(
                        "Unable to retrieve large-size preview for %s (%s); "
                        "falling back to provided size",
                        self.id,
                        exc,
                    )
        else:
            logger.warning("Unable to parse preview URL %s", self.preview_url)
        return self.client.get_bytes(self.preview_url)


@dataclass
class Journal:
    """A journal entry as listed on a user's pages."""

    client: "Client" = field(repr=False, compare=False)
    id: int
    title: str
    user: str
    _content: OnceCell[JournalContent] = field(
        default_factory=OnceCell, init=False, repr=False, compare=False
    )

    def __str__(self) -> str:
        return f"{self.title} ({self.id})"

    @property
    def url(self) -> str:
        return f"{self.client.config.base_url}/journal/{self.id}/"

    def fetch_content(self) -> JournalContent:
        return self._content.get_or_init(
            lambda: self.client.get_journal_content(self.id)
        )

    def content(self) -> str:
        """Posting date and body, separated by a blank line."""
        return str(self.fetch_content())


def normalize_page(page: int) -> int:
    """Page numbers start at 1; anything lower means the first page."""
    return page if page > 0 else 1
