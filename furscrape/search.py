"""Full-text submission search."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List

from .handlers import SEARCH_RESULTS_SECTION, SubmissionSectionHandler
from .models import Submission, normalize_page
from .processor import SubtreeProcessor
from .submission import merge_submissions

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger("furscrape")

RESULTS_PER_PAGE = 72

SEARCH_FORM_DEFAULTS: Dict[str, str] = {
    "perpage": str(RESULTS_PER_PAGE),
    "order-by": "date",
    "order-direction": "desc",
    "do_search": "Search",
    "range": "all",
    "rating-general": "on",
    "rating-mature": "on",
    "rating-adult": "on",
    "type-art": "on",
    "type-flash": "on",
    "type-photo": "on",
    "type-music": "on",
    "type-story": "on",
    "type-poetry": "on",
    "mode": "extended",
}


class Search:
    """A search query whose result pages can be fetched one at a time."""

    def __init__(self, client: "Client", query: str) -> None:
        self.client = client
        self.query = query

    def __repr__(self) -> str:
        return f"Search({self.query!r})"

    def form(self, page: int) -> Dict[str, str]:
        form = {"q": self.query, "page": str(normalize_page(page))}
        form.update(SEARCH_FORM_DEFAULTS)
        return form

    def get_page(self, page: int = 1) -> List[Submission]:
        """Results on ``page``, counted from 1."""
        logger.debug("Performing search %r, page %d", self.query, page)
        root = self.client.post_page("/search/", self.form(page))

        results = SubmissionSectionHandler(SEARCH_RESULTS_SECTION)
        SubtreeProcessor([results]).process(root)
        return merge_submissions(self.client, results.figures)
