"""Submission listing assembly and the submission page itself."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Optional

from .handlers import (
    DescriptionHandler,
    DownloadLinkHandler,
    FigureRecord,
    ScriptSubmission,
    StatsHandler,
)
from .models import Submission, SubmissionDetails
from .processor import SubtreeProcessor

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger("furscrape")


def merge_submissions(
    client: "Client",
    figures: List[FigureRecord],
    data: Optional[Dict[str, ScriptSubmission]] = None,
    default_user: str = "",
) -> List[Submission]:
    """Join figures with script data by submission id.

    Script values win over what the figure markup says; ``default_user``
    fills in the owner when neither source names one.
    """
    data = data or {}
    submissions: List[Submission] = []
    for figure in figures:
        entry = data.get(figure.raw_id)
        if entry is None:
            if data:
                logger.debug("No script data for submission %s", figure.raw_id)
            entry = ScriptSubmission()
        submissions.append(
            Submission(
                client=client,
                id=figure.id,
                preview_url=figure.preview_url,
                rating=entry.rating or figure.rating,
                title=entry.title or figure.title,
                user=entry.username or figure.username or default_user,
            )
        )
    return submissions


def get_submission_details(client: "Client", submission_id: int) -> SubmissionDetails:
    """Fetch ``/view/<id>/`` and pull out download link, description and stats."""
    logger.debug("Retrieving details for submission %s", submission_id)
    root = client.get_page(f"/view/{submission_id}/")

    stats = StatsHandler()
    download = DownloadLinkHandler()
    description = DescriptionHandler()
    SubtreeProcessor([stats, download, description]).process(root)

    if not download.url:
        logger.warning("No download link found for submission %s", submission_id)
    return SubmissionDetails(
        client=client,
        submission_id=submission_id,
        download_url=download.url,
        description=description.text,
        stats=stats.text,
    )
