"""High-level workflow helpers for orchestrating scraping runs."""

from __future__ import annotations

import logging
import time
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from .adapter import SourceAdapter
from .fetch import BrowserSession, HttpFetcher
from .heuristics import IDR_PER_USD
from .models import Listing, dedup_listings
from .sites import SourceConfig
from .store import ListingStore

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_DELAY = 2.0

STATUS_SUCCESS = "success"
STATUS_NO_DATA = "no_data"
STATUS_ERROR = "error"


@dataclass(slots=True)
class SourceResult:
    """Outcome of running one source adapter."""

    source_name: str
    count: int
    status: str
    duration_ms: int
    error: Optional[str] = None
    listings: List[Listing] = field(default_factory=list, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "source_name": self.source_name,
            "count": self.count,
            "status": self.status,
            "duration_ms": self.duration_ms,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(slots=True)
class RunResult:
    """Aggregated results for a full pipeline run."""

    per_source_results: List[SourceResult]

    @property
    def listings(self) -> List[Listing]:
        """All listings emitted by the run, unique by ``listing_url``."""

        return dedup_listings(
            listing for result in self.per_source_results for listing in result.listings
        )

    @property
    def total_listings(self) -> int:
        return len(self.listings)

    @property
    def errors(self) -> List[SourceResult]:
        return [result for result in self.per_source_results if result.status == STATUS_ERROR]

    @property
    def all_failed(self) -> bool:
        return bool(self.per_source_results) and len(self.errors) == len(self.per_source_results)

    def to_dict(self, *, include_listings: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "total_listings": self.total_listings,
            "per_source_results": [result.to_dict() for result in self.per_source_results],
        }
        if include_listings:
            data["listings"] = [listing.to_dict() for listing in self.listings]
        return data


class Pipeline:
    """Run source adapters one after another and persist what they produce."""

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        store: Optional[ListingStore] = None,
        *,
        delay: float = DEFAULT_SOURCE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.adapters = list(adapters)
        self.store = store
        self.delay = delay
        self._sleep = sleep

    def run_all(self) -> RunResult:
        logger.info("Starting run over %d source(s)", len(self.adapters))
        results: List[SourceResult] = []
        emitted: Set[str] = set()

        for index, adapter in enumerate(self.adapters):
            if index and self.delay > 0:
                self._sleep(self.delay)
            results.append(self._run_one(adapter, emitted))

        run = RunResult(results)
        logger.info(
            "Run complete: %d listing(s), %d of %d source(s) failed",
            run.total_listings,
            len(run.errors),
            len(results),
        )
        return run

    def _run_one(self, adapter: SourceAdapter, emitted: Set[str]) -> SourceResult:
        name = adapter.name
        logger.info("Scraping %s...", name)
        started = time.perf_counter()
        try:
            batch = adapter.scrape()
        except Exception as exc:
            logger.exception("%s failed", name)
            return SourceResult(
                source_name=name,
                count=0,
                status=STATUS_ERROR,
                duration_ms=_elapsed_ms(started),
                error=str(exc) or exc.__class__.__name__,
            )

        fresh = [listing for listing in batch.listings if listing.identity() not in emitted]
        if len(fresh) < len(batch.listings):
            logger.debug(
                "%s: %d listing(s) already emitted by an earlier source",
                name,
                len(batch.listings) - len(fresh),
            )

        if fresh and self.store is not None:
            try:
                self.store.upsert(fresh)
            except Exception as exc:
                logger.exception("%s: failed to store %d listing(s)", name, len(fresh))
                return SourceResult(
                    source_name=name,
                    count=len(batch.listings),
                    status=STATUS_ERROR,
                    duration_ms=_elapsed_ms(started),
                    error=f"store failed: {exc}",
                )

        emitted.update(listing.identity() for listing in fresh)
        duration = _elapsed_ms(started)
        if batch.listings:
            logger.info("%s: %d listing(s) (%d ms)", name, len(batch.listings), duration)
            status = STATUS_SUCCESS
        else:
            logger.warning("%s: no listings found", name)
            status = STATUS_NO_DATA
        return SourceResult(
            source_name=name,
            count=len(batch.listings),
            status=status,
            duration_ms=duration,
            listings=fresh,
        )


def run_sources(
    configs: Sequence[SourceConfig],
    store: Optional[ListingStore] = None,
    *,
    delay: float = DEFAULT_SOURCE_DELAY,
    timeout: float = 15.0,
    user_agent: Optional[str] = None,
    idr_per_usd: float = IDR_PER_USD,
) -> RunResult:
    """Build adapters for *configs* and run them with shared fetchers.

    The HTTP client and, when any source needs rendering, the browser session
    are opened here and closed when the run ends, whether it succeeds or not.
    """

    with ExitStack() as stack:
        fetcher = stack.enter_context(HttpFetcher(timeout=timeout, user_agent=user_agent))
        browser: Optional[BrowserSession] = None
        if any(config.render for config in configs):
            try:
                browser = stack.enter_context(BrowserSession(user_agent=user_agent))
            except Exception:
                logger.exception("Could not start browser session; rendered sources will fail")
        adapters = [
            SourceAdapter(config, fetcher, browser=browser, idr_per_usd=idr_per_usd)
            for config in configs
        ]
        return Pipeline(adapters, store, delay=delay).run_all()


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


__all__ = [
    "STATUS_SUCCESS",
    "STATUS_NO_DATA",
    "STATUS_ERROR",
    "SourceResult",
    "RunResult",
    "Pipeline",
    "run_sources",
]
