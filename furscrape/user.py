"""Operations on a single user's pages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Tuple
from urllib.parse import quote

from .handlers import (
    DESCRIPTIONS_PATTERN,
    GALLERY_SECTION,
    LATEST_SUBMISSIONS_SECTION,
    SUBMISSION_DATA_PATTERN,
    JournalLinkHandler,
    ScriptDataHandler,
    SubmissionSectionHandler,
)
from .journal import journals_from_links
from .models import Journal, Submission, normalize_page
from .processor import SubtreeProcessor
from .submission import merge_submissions

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger("furscrape")


class User:
    """A site user, identified by their login name."""

    def __init__(self, client: "Client", name: str) -> None:
        self.client = client
        self.name = name

    def __repr__(self) -> str:
        return f"User({self.name!r})"

    @property
    def _path_name(self) -> str:
        return quote(self.name, safe="")

    def get_recent(self) -> Tuple[List[Submission], List[Journal]]:
        """Most recent submissions and journals from the user's profile page."""
        logger.debug("Retrieving recent submissions and journals for %s", self.name)
        root = self.client.get_page(f"/user/{self._path_name}/")

        submissions = SubmissionSectionHandler(LATEST_SUBMISSIONS_SECTION)
        journals = JournalLinkHandler()
        scripts = ScriptDataHandler(SUBMISSION_DATA_PATTERN)
        SubtreeProcessor([submissions, journals, scripts]).process(root)

        subs = merge_submissions(
            self.client, submissions.figures, scripts.data, default_user=self.name
        )
        journs = journals_from_links(self.client, journals.journals, self.name)
        return subs, journs

    def get_gallery(self, page: int = 1) -> List[Submission]:
        return self._get_gallery_page("gallery", page)

    def get_scraps(self, page: int = 1) -> List[Submission]:
        return self._get_gallery_page("scraps", page)

    def get_journals(self, page: int = 1) -> List[Journal]:
        """One page of the user's journal listing."""
        page = normalize_page(page)
        logger.debug("Retrieving journals page %d for %s", page, self.name)
        root = self.client.get_page(f"/journals/{self._path_name}/{page}/")

        journals = JournalLinkHandler()
        SubtreeProcessor([journals]).process(root)
        return journals_from_links(self.client, journals.journals, self.name)

    def _get_gallery_page(self, folder: str, page: int) -> List[Submission]:
        page = normalize_page(page)
        logger.debug("Retrieving %s page %d for %s", folder, page, self.name)
        root = self.client.get_page(f"/{folder}/{self._path_name}/{page}/")

        submissions = SubmissionSectionHandler(GALLERY_SECTION)
        scripts = ScriptDataHandler(DESCRIPTIONS_PATTERN)
        SubtreeProcessor([submissions, scripts]).process(root)
        return merge_submissions(
            self.client, submissions.figures, scripts.data, default_user=self.name
        )
