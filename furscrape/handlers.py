"""Extraction handlers, one per piece of data pulled out of a page.

Every handler implements ``matches``/``process`` (see
:class:`furscrape.processor.TagHandler`) and keeps what it found on itself.
Section handlers run a nested processor over their own subtree and then stop
the outer walk from descending into it again.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple

from bs4.element import PageElement, Tag

from .models import Rating, parse_submission_id
from .nodes import (
    PathStep,
    absolute_url,
    check_tag_and_class,
    check_tag_and_id,
    find_attribute,
    first_text,
    follow_path,
    get_text,
    is_element,
    is_text,
    normalize_text,
)
from .processor import run_handlers

logger = logging.getLogger("furscrape")

SUBMISSION_DATA_PATTERN = re.compile(r"var submission_data = (.*}});")
DESCRIPTIONS_PATTERN = re.compile(r"var descriptions = (.*}});")
JOURNAL_HREF_PATTERN = re.compile(r"^/journal/(\d+)/$")

LATEST_SUBMISSIONS_SECTION = "gallery-latest-submissions"
GALLERY_SECTION = "gallery-gallery"
SEARCH_RESULTS_SECTION = "gallery-search-results"

DESCRIPTION_PATH: List[PathStep] = [
    ("table", 1),
    ("tbody", 0),
    ("tr", 0),
    ("td", 0),
    ("table", 0),
    ("tbody", 0),
    ("tr", 1),
    ("td", 0),
]


@dataclass
class ScriptSubmission:
    """Per-submission fields embedded in a page script."""

    rating: Optional[Rating] = None
    title: str = ""
    username: str = ""


@dataclass
class FigureRecord:
    """Everything a gallery ``<figure>`` says about one submission."""

    id: int
    raw_id: str
    rating: Optional[Rating] = None
    preview_url: str = ""
    title: str = ""
    username: str = ""


class MyUsernameHandler:
    """Finds the logged-in user's name in the page header."""

    def __init__(self) -> None:
        self.username = ""

    def matches(self, node: PageElement) -> bool:
        return check_tag_and_id(node, "a", "my-username") and bool(node.contents)

    def process(self, node: PageElement) -> bool:
        self.username = normalize_text(first_text(node))
        return False


class ScriptDataHandler:
    """Pulls the JSON object assigned to a script variable."""

    def __init__(self, pattern: Pattern[str] = SUBMISSION_DATA_PATTERN) -> None:
        self.pattern = pattern
        self.data: Dict[str, ScriptSubmission] = {}

    def matches(self, node: PageElement) -> bool:
        if not (is_element(node) and node.name == "script" and node.contents):
            return False
        text = node.contents[0]
        return is_text(text) and bool(self.pattern.search(str(text)))

    def process(self, node: PageElement) -> bool:
        match = self.pattern.search(str(node.contents[0]))
        self.data = parse_script_data(match.group(1)) if match else {}
        return False


def parse_script_data(raw: str) -> Dict[str, ScriptSubmission]:
    """Decode the embedded mapping; malformed input yields an empty dict."""
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("Unable to decode submission JSON data: %s", exc)
        return {}
    if not isinstance(decoded, dict):
        logger.error("Submission JSON data is a %s, not an object", type(decoded).__name__)
        return {}

    data: Dict[str, ScriptSubmission] = {}
    for key, entry in decoded.items():
        if not isinstance(entry, dict):
            logger.error("Ignoring malformed submission JSON entry %r", key)
            continue
        data[str(key)] = ScriptSubmission(
            rating=Rating.parse(entry.get("icon_rating")),
            title=str(entry.get("title") or ""),
            username=str(entry.get("username") or ""),
        )
    return data


class PreviewImageHandler:
    """Records the first ``<img>`` source in a figure."""

    def __init__(self) -> None:
        self.url = ""

    def matches(self, node: PageElement) -> bool:
        return not self.url and is_element(node) and node.name == "img"

    def process(self, node: PageElement) -> bool:
        self.url = absolute_url(find_attribute(node, "src"))
        return False


class CaptionLinkHandler:
    def __init__(self) -> None:
        self.title = ""
        self.username = ""

    def matches(self, node: PageElement) -> bool:
        return is_element(node) and node.name == "a"

    def process(self, node: PageElement) -> bool:
        href = find_attribute(node, "href")
        value = find_attribute(node, "title") or normalize_text(get_text(node))
        if href.startswith("/view/"):
            self.title = value
        elif href.startswith("/user/"):
            self.username = value
        return False


class CaptionHandler:
    """Reads title and artist out of a ``<figcaption>``."""

    def __init__(self) -> None:
        self.title = ""
        self.username = ""

    def matches(self, node: PageElement) -> bool:
        return is_element(node) and node.name == "figcaption"

    def process(self, node: PageElement) -> bool:
        links = CaptionLinkHandler()
        run_handlers(node, links)
        self.title = links.title
        self.username = links.username
        return False


class FigureHandler:
    """Collects one :class:`FigureRecord` per ``<figure>``."""

    def __init__(self) -> None:
        self.figures: List[FigureRecord] = []

    def matches(self, node: PageElement) -> bool:
        return is_element(node) and node.name == "figure"

    def process(self, node: PageElement) -> bool:
        raw_id = find_attribute(node, "id").strip()
        image = PreviewImageHandler()
        caption = CaptionHandler()
        run_handlers(node, image, caption)
        self.figures.append(
            FigureRecord(
                id=parse_submission_id(raw_id),
                raw_id=raw_id.replace("sid-", "", 1),
                rating=Rating.parse(find_attribute(node, "class")),
                preview_url=image.url,
                title=caption.title,
                username=caption.username,
            )
        )
        return False


class SubmissionSectionHandler:
    """Finds a gallery ``<section>`` and enumerates the figures inside it."""

    def __init__(self, section_id: str = LATEST_SUBMISSIONS_SECTION) -> None:
        self.section_id = section_id
        self.figures: List[FigureRecord] = []

    def matches(self, node: PageElement) -> bool:
        return check_tag_and_id(node, "section", self.section_id)

    def process(self, node: PageElement) -> bool:
        figures = FigureHandler()
        run_handlers(node, figures)
        self.figures.extend(figures.figures)
        return False


class JournalLinkHandler:
    """Collects ``(id, title)`` for every journal title link."""

    def __init__(self) -> None:
        self.journals: List[Tuple[int, str]] = []

    def matches(self, node: PageElement) -> bool:
        if not (is_element(node) and node.name == "a"):
            return False
        if not JOURNAL_HREF_PATTERN.match(find_attribute(node, "href")):
            return False
        if not node.contents or not is_text(node.contents[0]):
            return False
        # Comment counters and "Read more..." links share the href.
        text = str(node.contents[0])
        return not text.startswith("Comments ") and text != "Read more..."

    def process(self, node: PageElement) -> bool:
        match = JOURNAL_HREF_PATTERN.match(find_attribute(node, "href"))
        self.journals.append((int(match.group(1)), first_text(node)))
        return False


class JournalBodyHandler:
    def __init__(self) -> None:
        self.text = ""

    def matches(self, node: PageElement) -> bool:
        return check_tag_and_class(node, "div", "journal-body")

    def process(self, node: PageElement) -> bool:
        self.text = normalize_text(get_text(node))
        return True


class PopupDateHandler:
    """Records the first posting date; later ones belong to comments."""

    def __init__(self) -> None:
        self.text = ""
        self.seen = False

    def matches(self, node: PageElement) -> bool:
        return (
            not self.seen and check_tag_and_class(node, "span", "popup_date")
        )

    def process(self, node: PageElement) -> bool:
        self.seen = True
        self.text = normalize_text(first_text(node))
        return True


class DownloadLinkHandler:
    """Finds the submission's ``Download`` link."""

    def __init__(self) -> None:
        self.url = ""

    def matches(self, node: PageElement) -> bool:
        return (
            not self.url
            and is_element(node)
            and node.name == "a"
            and normalize_text(first_text(node)) == "Download"
        )

    def process(self, node: PageElement) -> bool:
        self.url = absolute_url(find_attribute(node, "href"))
        return False


class DescriptionHandler:
    """Extracts the submission description through a fixed table path.

    The description cell carries no id or class of its own, so it is reached
    from ``div#page-submission`` by position. The walk keeps descending below the
    container so handlers for the rest of the page still see it.
    """

    def __init__(self, steps: Optional[List[PathStep]] = None) -> None:
        self.steps = steps if steps is not None else DESCRIPTION_PATH
        self.text = ""

    def matches(self, node: PageElement) -> bool:
        return check_tag_and_id(node, "div", "page-submission")

    def process(self, node: PageElement) -> bool:
        target: Optional[Tag] = follow_path(node, self.steps)
        if target is None:
            logger.debug("Description cell not found below #page-submission")
            return True
        self.text = get_text(target)
        return True


class StatsHandler:
    def __init__(self) -> None:
        self.text = ""

    def matches(self, node: PageElement) -> bool:
        return check_tag_and_class(node, "td", "stats-container")

    def process(self, node: PageElement) -> bool:
        self.text = normalize_text(get_text(node))
        return False
