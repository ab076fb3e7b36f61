"""Saving preview images and downloads to disk."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

from filetype import guess

from .errors import FurscrapeError
from .models import Submission

logger = logging.getLogger("furscrape")

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str, fallback: str = "untitled") -> str:
    """ASCII-only, filesystem-friendly version of ``value``."""
    normalized = value.encode("ascii", "ignore").decode("ascii").lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        return "jpg" if ext == "jpeg" else ext
    return None


def infer_extension(data: bytes, fallback_name: str = "") -> str:
    """Extension from the file signature, else from ``fallback_name``."""
    detected = detect_image_format(data)
    if detected:
        return detected
    kind = guess(data)
    if kind:
        return kind.extension.lower()
    suffix = Path(fallback_name.split("?", 1)[0]).suffix.lstrip(".").lower()
    return suffix or "bin"


def preview_filename(submission: Submission, data: bytes) -> str:
    slug = slugify(submission.title)[:60]
    return f"{submission.id}-{slug}.{infer_extension(data, submission.preview_url)}"


def save_previews(submissions: Iterable[Submission], output_dir: Path) -> List[Path]:
    """Fetch each submission's preview and write it below ``output_dir``.

    Failed fetches are logged and skipped.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    saved: List[Path] = []
    for submission in submissions:
        try:
            data = submission.preview_image()
        except FurscrapeError as exc:
            logger.warning("Failed to fetch preview for %s: %s", submission.id, exc)
            continue
        destination = output_dir / preview_filename(submission, data)
        try:
            destination.write_bytes(data)
        except OSError as exc:
            logger.warning("Failed to write preview %s: %s", destination, exc)
            continue
        logger.info("Saved preview to %s", destination)
        saved.append(destination)
    return saved
