"""Sanity checks applied to every candidate listing before it is emitted."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .heuristics import MAX_ROOMS
from .models import Listing, Source
from .urls import is_absolute_url

MIN_TITLE_LENGTH = 5
MAX_PRICE = 100_000


@dataclass(slots=True)
class ValidationResult:
    valid: bool
    reasons: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


def validate_listing(listing: Listing) -> ValidationResult:
    """Check *listing* and return every rule it breaks."""

    reasons: List[str] = []

    title = listing.title.strip() if isinstance(listing.title, str) else ""
    if not title:
        reasons.append("missing title")
    elif len(title) < MIN_TITLE_LENGTH:
        reasons.append("title too short")

    if not listing.listing_url:
        reasons.append("missing listing_url")
    elif not is_absolute_url(listing.listing_url):
        reasons.append("malformed listing_url")

    price = listing.price
    if price is not None and (
        isinstance(price, bool) or not isinstance(price, int) or not 0 < price < MAX_PRICE
    ):
        reasons.append("price out of range")

    rooms = listing.rooms
    if rooms is not None and (
        isinstance(rooms, bool) or not isinstance(rooms, int) or not 0 <= rooms <= MAX_ROOMS
    ):
        reasons.append("rooms out of range")

    if not isinstance(listing.source, Source):
        reasons.append("missing source")

    return ValidationResult(valid=not reasons, reasons=reasons)


__all__ = ["MIN_TITLE_LENGTH", "MAX_PRICE", "ValidationResult", "validate_listing"]
