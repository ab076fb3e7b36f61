"""Recursive tree walker that feeds nodes to extraction handlers."""

from __future__ import annotations

from typing import List, Protocol, Sequence

from bs4.element import PageElement, Tag


class TagHandler(Protocol):
    """A matcher plus processor applied to single nodes during a walk."""

    def matches(self, node: PageElement) -> bool:
        ...

    def process(self, node: PageElement) -> bool:
        """Handle ``node``; return True to keep descending into its children."""
        ...


class SubtreeProcessor:
    """Pre-order walk offering every node to the first matching handler.

    Handler order matters: at most one handler fires per node. A handler
    returning False prunes that node's children only; the walk carries on
    with the node's siblings.
    """

    def __init__(self, handlers: Sequence[TagHandler]) -> None:
        self.handlers: List[TagHandler] = list(handlers)

    def process(self, node: PageElement) -> None:
        for handler in self.handlers:
            if handler.matches(node):
                if not handler.process(node):
                    return
                break

        if isinstance(node, Tag):
            for child in list(node.children):
                self.process(child)


def run_handlers(root: PageElement, *handlers: TagHandler) -> None:
    """Run a fresh processor with ``handlers`` over ``root``."""
    SubtreeProcessor(handlers).process(root)
