"""Configurable source adapter turning raw pages into validated listings."""

from __future__ import annotations

import logging
import re
import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, Tag

from .exceptions import ExtractionError, FetchError, SourceFailure, SourceFetchError, StructureError
from .extract import (
    DESCRIPTION_LIMIT,
    TITLE_LIMIT,
    extract_description,
    extract_location,
    extract_price,
    extract_title,
    node_text,
)
from .fetch import PageFetcher, RenderedPageFetcher
from .heuristics import (
    IDR_PER_USD,
    parse_furnished,
    parse_location,
    parse_price,
    parse_rooms,
    sanitize_text,
)
from .models import Listing, dedup_listings
from .selector import resolve_selector
from .sites import SourceConfig
from .urls import collect_image_urls, find_link, normalize_url
from .validate import validate_listing

logger = logging.getLogger(__name__)

FALLBACK_ANCHOR_LIMIT = 50
FALLBACK_MIN_TEXT = 10
_FALLBACK_KEYWORDS = re.compile(
    r"room|rent|kost|villa|house|apartment|sewa|kamar|rumah|kontrakan", re.IGNORECASE
)


@dataclass(slots=True)
class PageExtraction:
    """Listings pulled from one page plus what happened along the way."""

    page_url: str
    listings: List[Listing] = field(default_factory=list)
    selector: Optional[str] = None
    fallback_used: bool = False
    containers: int = 0
    candidates: int = 0
    skipped: int = 0
    errors: int = 0
    rejections: Counter = field(default_factory=Counter)


@dataclass(slots=True)
class SourceBatch:
    """Everything one source produced during a run."""

    source_name: str
    listings: List[Listing] = field(default_factory=list)
    pages: List[PageExtraction] = field(default_factory=list)
    pages_failed: int = 0

    @property
    def rejected(self) -> int:
        return sum(sum(page.rejections.values()) for page in self.pages)


class SourceAdapter:
    """Scrape one source as described by its :class:`SourceConfig`."""

    def __init__(
        self,
        config: SourceConfig,
        fetcher: Optional[PageFetcher] = None,
        *,
        browser: Optional[RenderedPageFetcher] = None,
        idr_per_usd: float = IDR_PER_USD,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.browser = browser
        self.idr_per_usd = idr_per_usd
        self._sleep = sleep

    @property
    def name(self) -> str:
        return self.config.display_name

    def scrape(self) -> SourceBatch:
        """Fetch every seed page and extract listings from each.

        A seed page that fails to fetch contributes nothing; if all of them
        fail the whole source fails with :class:`SourceFetchError`. The
        de-duplicated batch is cut to ``max_listings``.
        """

        batch = SourceBatch(source_name=self.name)
        scraped_at = datetime.now(timezone.utc)
        last_error: Optional[FetchError] = None

        for index, seed in enumerate(self.config.seeds):
            if index and self.config.seed_delay > 0:
                self._sleep(self.config.seed_delay)
            try:
                html = self.fetch_page(seed)
            except FetchError as exc:
                logger.warning("%s: failed to fetch %s: %s", self.name, seed, exc)
                batch.pages_failed += 1
                last_error = exc
                continue
            page = self.extract(html, seed, scraped_at=scraped_at)
            batch.pages.append(page)

        if batch.pages_failed and not batch.pages:
            raise SourceFetchError(
                self.name,
                f"all {batch.pages_failed} seed page(s) failed: {last_error}",
                cause=last_error,
            )

        unique = dedup_listings(listing for page in batch.pages for listing in page.listings)
        if len(unique) > self.config.max_listings:
            logger.debug("%s: keeping %d of %d listing(s)", self.name, self.config.max_listings, len(unique))
        batch.listings = unique[: self.config.max_listings]
        logger.info(
            "%s: %d listing(s) from %d page(s), %d rejected, %d page(s) failed",
            self.name,
            len(batch.listings),
            len(batch.pages),
            batch.rejected,
            batch.pages_failed,
        )
        return batch

    def fetch_page(self, url: str) -> str:
        if self.config.render:
            if self.browser is None:
                raise SourceFailure(self.name, "source needs a rendering session but none was provided")
            return self.browser.rendered_page(
                url,
                wait_ms=self.config.wait_ms,
                scroll_cycles=self.config.scroll_cycles,
                timeout=self.config.timeout,
                wait_selector=self.config.wait_selector,
            )
        if self.fetcher is None:
            raise SourceFailure(self.name, "no page fetcher configured")
        return self.fetcher.fetch(url, headers={"Referer": self.config.base_url}, timeout=self.config.timeout)

    def extract(
        self,
        html: str | bytes,
        page_url: str,
        *,
        scraped_at: Optional[datetime] = None,
    ) -> PageExtraction:
        """Extract validated listings from one page of markup."""

        html_text = html.decode("utf-8", errors="ignore") if isinstance(html, bytes) else html
        soup = BeautifulSoup(html_text, "lxml")
        scraped_at = scraped_at or datetime.now(timezone.utc)
        page = PageExtraction(page_url=page_url)

        try:
            match = resolve_selector(soup, self.config.selectors.container)
        except StructureError:
            logger.warning("%s: no listing containers on %s, scanning links instead", self.name, page_url)
            self._extract_fallback(soup, page, scraped_at)
        else:
            page.selector = match.selector
            self._extract_structured(match.elements, page, scraped_at)
            if not page.listings:
                logger.info(
                    "%s: selector %r gave no valid listings on %s, scanning links instead",
                    self.name,
                    match.selector,
                    page_url,
                )
                self._extract_fallback(soup, page, scraped_at)

        page.listings = dedup_listings(page.listings)
        if page.rejections:
            logger.info(
                "%s: rejected %d candidate(s) on %s (%s)",
                self.name,
                sum(page.rejections.values()),
                page_url,
                ", ".join(f"{reason}: {count}" for reason, count in sorted(page.rejections.items())),
            )
        return page

    def _extract_structured(self, containers: List[Tag], page: PageExtraction, scraped_at: datetime) -> None:
        for index, container in enumerate(containers[: self.config.max_items]):
            page.containers += 1
            if self.config.keywords and not self._mentions_keyword(container):
                page.skipped += 1
                continue
            try:
                candidate = self._listing_from_container(container, page.page_url, scraped_at)
            except ExtractionError as exc:
                logger.debug("%s: skipping container %d: %s", self.name, index, exc)
                page.skipped += 1
                continue
            except Exception:
                logger.warning(
                    "%s: error parsing container %d on %s", self.name, index, page.page_url, exc_info=True
                )
                page.errors += 1
                continue
            self._accept(candidate, page)

    def _extract_fallback(self, soup: BeautifulSoup, page: PageExtraction, scraped_at: datetime) -> None:
        page.fallback_used = True
        accepted = 0
        for anchor in soup.find_all("a", href=True, limit=FALLBACK_ANCHOR_LIMIT):
            if accepted >= self.config.fallback_limit:
                break
            text = node_text(anchor)
            if len(text) <= FALLBACK_MIN_TEXT or not _FALLBACK_KEYWORDS.search(text):
                continue
            url = normalize_url(anchor.get("href"), page.page_url)
            if url is None:
                continue
            candidate = Listing(
                title=sanitize_text(text, TITLE_LIMIT),
                price=parse_price(text, idr_per_usd=self.idr_per_usd),
                location=parse_location(None, node_text(anchor.parent) if anchor.parent else text),
                rooms=parse_rooms(text),
                furnished=parse_furnished(text),
                description=sanitize_text(text, DESCRIPTION_LIMIT),
                listing_url=url,
                source=self.config.name,
                image_urls=[],
                scraped_at=scraped_at,
            )
            if self._accept(candidate, page):
                accepted += 1

    def _listing_from_container(self, container: Tag, page_url: str, scraped_at: datetime) -> Listing:
        selectors = self.config.selectors
        link = find_link(container, page_url, selectors.link)
        if link is None:
            raise ExtractionError("no usable link")

        title = extract_title(container, selectors.title) or ""
        description = extract_description(container, selectors.description) or title
        summary = f"{title} {description}"

        return Listing(
            title=title,
            price=extract_price(container, selectors.price, idr_per_usd=self.idr_per_usd),
            location=extract_location(container, selectors.location),
            rooms=parse_rooms(summary),
            furnished=parse_furnished(summary),
            description=description,
            listing_url=link,
            source=self.config.name,
            image_urls=collect_image_urls(container, page_url, selectors=selectors.image),
            scraped_at=scraped_at,
        )

    def _accept(self, candidate: Listing, page: PageExtraction) -> bool:
        page.candidates += 1
        result = validate_listing(candidate)
        if not result:
            page.rejections.update(result.reasons)
            return False
        page.listings.append(candidate)
        return True

    def _mentions_keyword(self, container: Tag) -> bool:
        text = node_text(container).lower()
        return any(keyword in text for keyword in self.config.keywords)


__all__ = ["PageExtraction", "SourceBatch", "SourceAdapter"]
