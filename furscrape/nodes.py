"""Helpers for inspecting individual nodes of a parsed page."""

from __future__ import annotations

import re
from typing import Optional, Sequence, Tuple

from bs4.element import NavigableString, PageElement, PreformattedString, Tag

# Characters stripped from both ends of extracted text.
TRIM_CHARS = " \t\u00a0\r\n"

WHITESPACE_RUN_PATTERN = re.compile("[ \u00a0\t]+")

PathStep = Tuple[str, int]


def is_element(node: Optional[PageElement]) -> bool:
    return isinstance(node, Tag)


def is_text(node: Optional[PageElement]) -> bool:
    """True for character data; comments, doctypes and CDATA do not count."""
    return isinstance(node, NavigableString) and not isinstance(
        node, PreformattedString
    )


def find_attribute(node: PageElement, name: str) -> str:
    """Return the value of the attribute ``name`` or an empty string."""
    if not isinstance(node, Tag):
        return ""
    value = node.attrs.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return value


def check_tag_and_id(node: PageElement, tag: str, element_id: str) -> bool:
    return (
        is_element(node)
        and node.name == tag
        and find_attribute(node, "id") == element_id
    )


def check_tag_and_class(node: PageElement, tag: str, class_name: str) -> bool:
    return (
        is_element(node)
        and node.name == tag
        and class_name in find_attribute(node, "class")
    )


def find_child(node: PageElement, tag: str, index: int) -> Optional[Tag]:
    """Return the ``index``-th direct child element named ``tag``."""
    if not isinstance(node, Tag):
        return None
    count = 0
    for child in node.children:
        if isinstance(child, Tag) and child.name == tag:
            if count == index:
                return child
            count += 1
    return None


def follow_path(node: PageElement, steps: Sequence[PathStep]) -> Optional[Tag]:
    """Walk ``(tag, index)`` steps down from ``node``.

    Returns ``None`` as soon as a step cannot be satisfied. ``html.parser``
    does not insert implied ``tbody`` elements, so a missing ``tbody`` step
    leaves the walk on the enclosing table.
    """
    current: Optional[PageElement] = node
    for tag, index in steps:
        child = find_child(current, tag, index)
        if child is None:
            if tag == "tbody":
                continue
            return None
        current = child
    return current if isinstance(current, Tag) else None


def first_text(node: PageElement) -> str:
    """Payload of the node's first child when that child is text."""
    if not isinstance(node, Tag) or not node.contents:
        return ""
    child = node.contents[0]
    if is_text(child):
        return str(child)
    return ""


def get_text(node: PageElement) -> str:
    """Concatenate all text below ``node``, one trimmed chunk per line."""
    if not isinstance(node, Tag):
        return ""
    parts = []
    for child in node.children:
        if is_text(child):
            parts.append(str(child).strip(TRIM_CHARS) + "\n")
        if isinstance(child, Tag) and child.contents:
            parts.append(get_text(child) + "\n")
    return "".join(parts).strip(TRIM_CHARS)


def normalize_text(value: str) -> str:
    """Collapse horizontal whitespace runs and trim the ends."""
    return WHITESPACE_RUN_PATTERN.sub(" ", value).strip(TRIM_CHARS)


def absolute_url(href: str) -> str:
    """Expand protocol-relative URLs found in markup."""
    if href.startswith("//"):
        return "https:" + href
    return href
