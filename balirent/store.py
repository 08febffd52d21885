"""Listings store contract and simple implementations."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from .models import Listing

logger = logging.getLogger(__name__)

MAX_LISTING_AGE_DAYS = 30
FRESHNESS_DAYS = 7


class ListingStore(Protocol):
    def upsert(self, listings: Sequence[Listing]) -> List[Listing]:
        """Insert or replace *listings* keyed by ``listing_url``; idempotent."""
        ...


def filter_listings(
    listings: Iterable[Listing],
    *,
    location: Optional[str] = None,
    max_price: Optional[int] = None,
    min_rooms: Optional[int] = None,
    furnished: Optional[bool] = None,
    max_age: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> List[Listing]:
    """Return the listings matching every given criterion.

    Listings with an unknown price are kept when filtering by ``max_price``.
    """

    location_key = location.strip().lower() if location and location.lower() != "any" else None
    cutoff = (now or datetime.now(timezone.utc)) - max_age if max_age is not None else None

    kept: List[Listing] = []
    for listing in listings:
        if location_key and location_key not in listing.location.lower():
            continue
        if max_price is not None and listing.price is not None and listing.price > max_price:
            continue
        if min_rooms is not None and (listing.rooms is None or listing.rooms < min_rooms):
            continue
        if furnished is not None and listing.furnished is not furnished:
            continue
        if cutoff is not None and listing.scraped_at < cutoff:
            continue
        kept.append(listing)
    return kept


class MemoryListingStore:
    """In-process store, mostly useful for tests and dry runs."""

    def __init__(self) -> None:
        self._listings: Dict[str, Listing] = {}

    def upsert(self, listings: Sequence[Listing]) -> List[Listing]:
        for listing in listings:
            self._listings[listing.identity()] = listing
        return list(listings)

    def all(self) -> List[Listing]:
        return list(self._listings.values())

    def __len__(self) -> int:
        return len(self._listings)


class JsonListingStore:
    """Listings persisted as one JSON document keyed by ``listing_url``."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, Listing]:
        if not self.path.exists():
            return {}
        raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        records = raw.get("listings", []) if isinstance(raw, dict) else raw
        listings: Dict[str, Listing] = {}
        for record in records:
            if not isinstance(record, dict):
                logger.warning("Skipping stored listing that is not an object: %r", record)
                continue
            try:
                listing = Listing.from_dict(record)
            except (KeyError, ValueError, TypeError, AttributeError) as exc:
                logger.warning("Skipping unreadable stored listing: %s", exc)
                continue
            listings[listing.identity()] = listing
        return listings

    def _save(self, listings: Dict[str, Listing]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"listings": [listing.to_dict() for listing in listings.values()]}
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def upsert(self, listings: Sequence[Listing]) -> List[Listing]:
        stored = self._load()
        for listing in listings:
            stored[listing.identity()] = listing
        self._save(stored)
        logger.info("Saved %d listing(s) to %s (%d total)", len(listings), self.path, len(stored))
        return list(listings)

    def all(self) -> List[Listing]:
        return list(self._load().values())

    def query(
        self,
        *,
        location: Optional[str] = None,
        max_price: Optional[int] = None,
        min_rooms: Optional[int] = None,
        furnished: Optional[bool] = None,
        max_age_days: Optional[int] = FRESHNESS_DAYS,
        limit: int = 20,
    ) -> List[Listing]:
        """Freshest listings matching the criteria, newest first."""

        matches = filter_listings(
            self._load().values(),
            location=location,
            max_price=max_price,
            min_rooms=min_rooms,
            furnished=furnished,
            max_age=timedelta(days=max_age_days) if max_age_days is not None else None,
        )
        matches.sort(key=lambda listing: listing.scraped_at, reverse=True)
        return matches[:limit]

    def prune(self, max_age_days: int = MAX_LISTING_AGE_DAYS) -> int:
        """Drop listings not seen for *max_age_days*; returns how many were removed."""

        stored = self._load()
        cutoff = datetime.now(timezone.utc) - timedelta(days=max_age_days)
        kept = {key: listing for key, listing in stored.items() if listing.scraped_at >= cutoff}
        removed = len(stored) - len(kept)
        if removed:
            self._save(kept)
            logger.info("Pruned %d listing(s) older than %d days from %s", removed, max_age_days, self.path)
        return removed


__all__ = [
    "MAX_LISTING_AGE_DAYS",
    "ListingStore",
    "filter_listings",
    "MemoryListingStore",
    "JsonListingStore",
]
