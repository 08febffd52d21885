"""Ranked CSS selector resolution for listing containers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from .exceptions import StructureError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SelectorMatch:
    """The first working selector and the containers it matched."""

    selector: str
    elements: List[Tag]


def safe_select(node: Tag, selector: str) -> List[Tag]:
    """Run ``node.select`` but treat an invalid selector as matching nothing."""

    try:
        return list(node.select(selector))
    except SelectorSyntaxError as exc:
        logger.warning("Ignoring invalid selector %r: %s", selector, exc)
        return []


def safe_select_one(node: Tag, selector: str) -> Optional[Tag]:
    found = safe_select(node, selector)
    return found[0] if found else None


def resolve_selector(soup: BeautifulSoup | Tag, candidates: Sequence[str]) -> SelectorMatch:
    """Return the first candidate selector that matches at least one element.

    Candidates are tried in order and the search stops at the first hit.
    Raises :class:`StructureError` when none matches.
    """

    for selector in candidates:
        elements = safe_select(soup, selector)
        logger.debug("Selector %r matched %d element(s)", selector, len(elements))
        if elements:
            logger.info("Found %d container(s) using selector: %s", len(elements), selector)
            return SelectorMatch(selector=selector, elements=elements)
    raise StructureError(candidates)


__all__ = ["SelectorMatch", "resolve_selector", "safe_select", "safe_select_one"]
