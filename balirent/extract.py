"""Field extraction from listing containers.

Each ``extract_*`` function works on one container element and never raises
on unexpected markup: a field that cannot be found comes back as ``None``
(or the documented default) and the caller decides what to do with it.
"""

from __future__ import annotations

from typing import Optional, Sequence

from bs4 import Tag

from .heuristics import IDR_PER_USD, parse_location, parse_price, sanitize_text
from .selector import safe_select, safe_select_one

TITLE_LIMIT = 100
DESCRIPTION_LIMIT = 1000
SUMMARY_LIMIT = 500
MIN_TITLE_CHARS = 5

DEFAULT_TITLE_SELECTORS = (
    "h1",
    "h2",
    "h3",
    "h4",
    ".title",
    ".name",
    ".heading",
    ".property-title",
    ".room-title",
    ".listing-title",
    "a[title]",
    "[title]",
)
DEFAULT_PRICE_SELECTORS = (
    ".price",
    ".cost",
    ".rent",
    ".fee",
    ".amount",
    ".monthly-price",
    ".rental-price",
    '[class*="price"]',
    '[class*="cost"]',
)
DEFAULT_LOCATION_SELECTORS = (
    ".location",
    ".area",
    ".district",
    ".region",
    ".address",
    '[class*="location"]',
    '[class*="area"]',
)
DEFAULT_DESCRIPTION_SELECTORS = (
    ".description",
    ".details",
    ".summary",
    ".excerpt",
    ".content",
    ".info",
    "p",
    '[class*="description"]',
    '[class*="detail"]',
)
DEFAULT_IMAGE_SELECTORS = ("img",)


def node_text(node: Optional[Tag]) -> str:
    return node.get_text(" ", strip=True) if node is not None else ""


def extract_title(container: Tag, selectors: Sequence[str] = DEFAULT_TITLE_SELECTORS) -> Optional[str]:
    """Return the first title candidate longer than five characters.

    Falls back to the text of the nearest anchor, whatever its length, so a
    short title reaches validation instead of disappearing silently.
    """

    for selector in selectors:
        node = safe_select_one(container, selector)
        if node is None:
            continue
        text = node_text(node)
        if len(text) > MIN_TITLE_CHARS:
            return sanitize_text(text, TITLE_LIMIT)
        attr = node.get("title")
        if isinstance(attr, str) and len(attr.strip()) > MIN_TITLE_CHARS:
            return sanitize_text(attr, TITLE_LIMIT)

    anchor = container if container.name == "a" else container.find("a")
    if anchor is None:
        anchor = container.find_parent("a")
    text = node_text(anchor)
    return sanitize_text(text, TITLE_LIMIT) or None


def extract_price(
    container: Tag,
    selectors: Sequence[str] = DEFAULT_PRICE_SELECTORS,
    *,
    idr_per_usd: float = IDR_PER_USD,
) -> Optional[int]:
    """Parse the price from price-labelled elements, then from all text."""

    for selector in selectors:
        text = " ".join(node_text(node) for node in safe_select(container, selector)).strip()
        if not text:
            continue
        price = parse_price(text, idr_per_usd=idr_per_usd)
        if price is not None:
            return price
    return parse_price(node_text(container), idr_per_usd=idr_per_usd)


def extract_location(container: Tag, selectors: Sequence[str] = DEFAULT_LOCATION_SELECTORS) -> str:
    """Return the canonical location of *container*, defaulting to Bali."""

    labelled: Optional[str] = None
    for selector in selectors:
        text = node_text(safe_select_one(container, selector))
        if text:
            labelled = text
            break
    return parse_location(labelled, node_text(container))


def extract_description(
    container: Tag,
    selectors: Sequence[str] = DEFAULT_DESCRIPTION_SELECTORS,
) -> str:
    for selector in selectors:
        text = node_text(safe_select_one(container, selector))
        if 20 < len(text) < DESCRIPTION_LIMIT:
            return sanitize_text(text, DESCRIPTION_LIMIT)

    text = sanitize_text(node_text(container), DESCRIPTION_LIMIT)
    if len(text) > SUMMARY_LIMIT:
        text = text[:SUMMARY_LIMIT].rstrip() + "..."
    return text


__all__ = [
    "DEFAULT_TITLE_SELECTORS",
    "DEFAULT_PRICE_SELECTORS",
    "DEFAULT_LOCATION_SELECTORS",
    "DEFAULT_DESCRIPTION_SELECTORS",
    "DEFAULT_IMAGE_SELECTORS",
    "node_text",
    "extract_title",
    "extract_price",
    "extract_location",
    "extract_description",
]
