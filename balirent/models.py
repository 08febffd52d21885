"""Data models for normalised rental listings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set


class Source(str, Enum):
    """The external sites that supply listings."""

    FACEBOOK_MARKETPLACE = "Facebook Marketplace"
    FACEBOOK_GROUPS = "Facebook Groups"
    RUMAH_KOST = "Rumah Kost Bali"
    VILLA_HUB = "Bali Villa Hub"
    HOME_IMMO = "Bali Home Immo"
    RENT_ROOM_BALI = "RentRoomBali"


@dataclass(slots=True)
class Listing:
    """Representation of a single rental listing."""

    title: str
    price: Optional[int]
    location: str
    rooms: Optional[int]
    furnished: Optional[bool]
    description: str
    listing_url: str
    source: Source
    image_urls: List[str] = field(default_factory=list)
    scraped_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def identity(self) -> str:
        """Return the key used for deduplication and storage upserts."""

        return self.listing_url

    def to_dict(self) -> Dict[str, Any]:
        """Convert the listing to a JSON-serialisable dictionary."""

        return {
            "title": self.title,
            "price": int(self.price) if self.price is not None else None,
            "location": self.location,
            "rooms": int(self.rooms) if self.rooms is not None else None,
            "furnished": self.furnished,
            "description": self.description,
            "image_urls": list(self.image_urls),
            "listing_url": self.listing_url,
            "source": self.source.value,
            "scraped_at": self.scraped_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Listing":
        """Rebuild a listing from :meth:`to_dict` output."""

        scraped_at = data.get("scraped_at")
        if isinstance(scraped_at, str):
            scraped_at = datetime.fromisoformat(scraped_at)
        if scraped_at is None:
            scraped_at = datetime.now(timezone.utc)
        elif scraped_at.tzinfo is None:
            scraped_at = scraped_at.replace(tzinfo=timezone.utc)

        return cls(
            title=data["title"],
            price=data.get("price"),
            location=data.get("location") or "Bali",
            rooms=data.get("rooms"),
            furnished=data.get("furnished"),
            description=data.get("description") or "",
            listing_url=data["listing_url"],
            source=Source(data["source"]),
            image_urls=list(data.get("image_urls") or []),
            scraped_at=scraped_at,
        )


def dedup_listings(listings: Iterable[Listing]) -> List[Listing]:
    """Keep the first listing seen for each ``listing_url``, preserving order."""

    unique: List[Listing] = []
    seen: Set[str] = set()
    for listing in listings:
        key = listing.identity()
        if key in seen:
            continue
        seen.add(key)
        unique.append(listing)
    return unique
