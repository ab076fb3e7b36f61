"""Journal page retrieval."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Tuple

from .handlers import JournalBodyHandler, PopupDateHandler
from .models import Journal, JournalContent
from .processor import SubtreeProcessor

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger("furscrape")


def journals_from_links(
    client: "Client", links: List[Tuple[int, str]], user: str
) -> List[Journal]:
    return [
        Journal(client=client, id=journal_id, title=title, user=user)
        for journal_id, title in links
    ]


def get_journal_content(client: "Client", journal_id: int) -> JournalContent:
    """Fetch ``/journal/<id>/`` and extract its body and posting date."""
    logger.debug("Retrieving journal %s", journal_id)
    root = client.get_page(f"/journal/{journal_id}/")

    body = JournalBodyHandler()
    date = PopupDateHandler()
    SubtreeProcessor([body, date]).process(root)
    return JournalContent(posted=date.text, body=body.text)
