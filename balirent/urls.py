"""Link and image URL normalisation."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urljoin, urlsplit

from bs4 import Tag

from .selector import safe_select

logger = logging.getLogger(__name__)

_PLACEHOLDER_TOKENS = (
    "placeholder",
    "loading",
    "spinner",
    "blank.",
    "pixel.",
    "1x1.",
    "data:image",
)
_REJECTED_SCHEMES = ("javascript:", "mailto:", "tel:", "data:", "whatsapp:")
_IMAGE_ATTRS = ("src", "data-src", "data-lazy-src", "data-lazy")


def is_absolute_url(url: Optional[str]) -> bool:
    """Return True for an absolute http(s) URL with a host."""

    if not url:
        return False
    parts = urlsplit(url)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def normalize_url(href: Optional[str], base_url: str) -> Optional[str]:
    """Resolve *href* against *base_url*; None when it is not a web link."""

    if not href:
        return None
    href = href.strip()
    if not href or href.startswith("#"):
        return None
    if href.lower().startswith(_REJECTED_SCHEMES):
        return None
    if href.startswith("//"):
        href = "https:" + href

    resolved = urljoin(base_url, href)
    if not is_absolute_url(resolved):
        logger.debug("Discarding non-web link %r (base %s)", href, base_url)
        return None
    return resolved


def is_placeholder_image(url: Optional[str]) -> bool:
    if not url:
        return True
    lowered = url.lower()
    return any(token in lowered for token in _PLACEHOLDER_TOKENS)


def _image_sources(img: Tag) -> Iterable[str]:
    for attr in _IMAGE_ATTRS:
        value = img.get(attr)
        if isinstance(value, str) and value.strip():
            yield value.strip()


def collect_image_urls(
    container: Tag,
    base_url: str,
    *,
    selectors: Sequence[str] = ("img",),
    limit: int = 3,
) -> List[str]:
    """Return up to *limit* absolute, non-placeholder image URLs in *container*."""

    images: List[str] = []
    for selector in selectors:
        for img in safe_select(container, selector):
            for src in _image_sources(img):
                if is_placeholder_image(src):
                    continue
                url = normalize_url(src, base_url)
                if url and url not in images:
                    images.append(url)
                    break
            if len(images) >= limit:
                return images
        if images:
            break
    return images


def find_link(container: Tag, base_url: str, selectors: Sequence[str] = ()) -> Optional[str]:
    """Locate the listing link for *container* as an absolute URL."""

    candidates: List[Optional[str]] = []
    for selector in selectors:
        for anchor in safe_select(container, selector):
            candidates.append(anchor.get("href"))
    if container.name == "a":
        candidates.append(container.get("href"))
    first = container.find("a", href=True)
    if first is not None:
        candidates.append(first.get("href"))
    parent = container.find_parent("a", href=True)
    if parent is not None:
        candidates.append(parent.get("href"))

    for href in candidates:
        url = normalize_url(href if isinstance(href, str) else None, base_url)
        if url:
            return url
    return None


__all__ = [
    "is_absolute_url",
    "normalize_url",
    "is_placeholder_image",
    "collect_image_urls",
    "find_link",
]
