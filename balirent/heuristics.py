"""Text processing heuristics for rental listing extraction."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple

_LOGGER = logging.getLogger(__name__)

IDR_PER_USD = 15000
"""Fixed conversion rate used when a price is quoted in rupiah."""

DEFAULT_ROOMS: Optional[int] = 1
"""Rooms reported for a listing that never mentions a room count.

Most listings on the supported sites are single rooms or one-bedroom
places, so an unspecified count is treated as one. Pass ``default=None``
to :func:`parse_rooms` to get "unknown" instead.
"""

MAX_ROOMS = 10

DEFAULT_LOCATION = "Bali"

TOWNS: Tuple[str, ...] = (
    "Canggu",
    "Seminyak",
    "Ubud",
    "Sanur",
    "Denpasar",
    "Kuta",
    "Legian",
    "Jimbaran",
    "Nusa Dua",
    "Uluwatu",
)

LOCATION_ALIASES: Dict[str, str] = {
    "echo beach": "Canggu",
    "batu bolong": "Canggu",
    "berawa": "Canggu",
    "pererenan": "Canggu",
    "petitenget": "Seminyak",
    "monkey forest": "Ubud",
    "central ubud": "Ubud",
}

_AMOUNT = r"(\d{1,3}(?:[.,]\d{3})+|\d+)"


@dataclass(frozen=True)
class PriceRule:
    """One step of the price cascade.

    ``minimum``/``maximum`` bound the raw amount in ``currency`` after the
    ``multiplier`` is applied; IDR amounts are converted to USD afterwards.
    """

    name: str
    pattern: Pattern[str]
    minimum: int
    maximum: int
    currency: str = "USD"
    multiplier: int = 1


PRICE_RULES: Tuple[PriceRule, ...] = (
    PriceRule("usd-symbol", re.compile(r"\$\s*" + _AMOUNT), 50, 20000),
    PriceRule("usd-suffix", re.compile(_AMOUNT + r"\s*USD\b", re.IGNORECASE), 50, 20000),
    PriceRule("usd-prefix", re.compile(r"\bUSD\s*" + _AMOUNT, re.IGNORECASE), 50, 20000),
    PriceRule(
        "idr-prefix",
        re.compile(r"(?:\bRp\.?|\bIDR)\s*" + _AMOUNT, re.IGNORECASE),
        500_000,
        500_000_000,
        currency="IDR",
    ),
    PriceRule(
        "idr-suffix",
        re.compile(_AMOUNT + r"\s*(?:rupiah|IDR)\b", re.IGNORECASE),
        500_000,
        500_000_000,
        currency="IDR",
    ),
    PriceRule(
        "juta",
        re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:juta|jt|million)\b", re.IGNORECASE),
        500_000,
        500_000_000,
        currency="IDR",
        multiplier=1_000_000,
    ),
    PriceRule(
        "bare-idr",
        re.compile(r"(?<![\d.,])" + _AMOUNT),
        500_001,
        500_000_000,
        currency="IDR",
    ),
    PriceRule("bare-usd", re.compile(r"(?<![\d.,])" + _AMOUNT), 100, 10000),
)

_STUDIO_PATTERN = re.compile(r"\bstudio\b", re.IGNORECASE)
_ROOM_WORDS = r"(?:bedrooms?|beds?|rooms?|br|kamar)"
_ROOM_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"(?<!\d)(\d{1,2})\s*-?\s*" + _ROOM_WORDS + r"\b", re.IGNORECASE),
    re.compile(r"\b" + _ROOM_WORDS + r"\s*:?\s*(\d{1,2})(?!\d)", re.IGNORECASE),
)

_UNFURNISHED_PATTERN = re.compile(
    r"\b(?:unfurnished|not\s+furnished|tanpa\s+perabot)\b", re.IGNORECASE
)
_FURNISHED_PATTERN = re.compile(r"\b(?:fully\s+furnished|furnished|lengkap)\b", re.IGNORECASE)
# "kosong" is also "vacant" in kost ads; only checked after the furnished words.
_EMPTY_PATTERN = re.compile(r"\bkosong\b", re.IGNORECASE)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\u200b-\u200f\ufeff]")


def _location_patterns() -> List[Tuple[Pattern[str], str]]:
    names: Dict[str, str] = {town.lower(): town for town in TOWNS}
    names.update(LOCATION_ALIASES)
    # Longer names first so "central ubud" is preferred over "ubud" at the same offset.
    ordered = sorted(names.items(), key=lambda item: len(item[0]), reverse=True)
    return [
        (re.compile(r"\b" + r"\s+".join(map(re.escape, name.split())) + r"\b", re.IGNORECASE), canonical)
        for name, canonical in ordered
    ]


_LOCATION_PATTERNS = _location_patterns()


def normalise_text(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def sanitize_text(text: Optional[str], limit: int = 1000) -> str:
    """Collapse whitespace, drop control characters and cut to *limit* chars."""

    if not text:
        return ""
    cleaned = normalise_text(_CONTROL_CHARS.sub("", text))
    if len(cleaned) > limit:
        cleaned = cleaned[:limit].rstrip()
    return cleaned


def _to_number(value: str, *, decimal: bool = False) -> Optional[float]:
    if decimal:
        # "1,5 juta" and "1.5 juta" both mean one and a half million.
        try:
            return float(value.replace(",", "."))
        except ValueError:
            return None
    digits = re.sub(r"[.,]", "", value)
    if not digits:
        return None
    return float(digits)


def parse_price(text: Optional[str], *, idr_per_usd: float = IDR_PER_USD) -> Optional[int]:
    """Return a monthly USD price found in *text*.

    :data:`PRICE_RULES` is evaluated in order and every match of a rule is
    tried before moving to the next rule; the first amount inside its rule's
    range wins. Rupiah amounts are converted with *idr_per_usd*.
    """

    if not text:
        return None

    text = text.replace("\xa0", " ")
    for rule in PRICE_RULES:
        for match in rule.pattern.finditer(text):
            amount = _to_number(match.group(1), decimal=rule.multiplier > 1)
            if amount is None:
                continue
            amount *= rule.multiplier
            if not rule.minimum <= amount <= rule.maximum:
                continue
            if rule.currency == "IDR":
                price = int(round(amount / idr_per_usd))
            else:
                price = int(amount)
            _LOGGER.debug("Parsed price %r via %s -> %s", match.group(0), rule.name, price)
            return price
    return None


def parse_rooms(text: Optional[str], default: Optional[int] = DEFAULT_ROOMS) -> Optional[int]:
    """Parse the room count from *text*; studios count as zero rooms."""

    if not text:
        return default

    if _STUDIO_PATTERN.search(text):
        return 0

    for pattern in _ROOM_PATTERNS:
        for match in pattern.finditer(text):
            rooms = int(match.group(1))
            if 0 <= rooms <= MAX_ROOMS:
                return rooms
    return default


def parse_furnished(text: Optional[str]) -> Optional[bool]:
    """Return True/False for furnished/unfurnished mentions, None if silent."""

    if not text:
        return None
    if _UNFURNISHED_PATTERN.search(text):
        return False
    if _FURNISHED_PATTERN.search(text):
        return True
    if _EMPTY_PATTERN.search(text):
        return False
    return None


def canonical_location(text: Optional[str]) -> Optional[str]:
    """Return the canonical town mentioned in *text*, or None.

    Aliases and towns are matched together; the earliest mention wins.
    """

    if not text:
        return None

    best: Optional[Tuple[int, str]] = None
    for pattern, canonical in _LOCATION_PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        if best is None or match.start() < best[0]:
            best = (match.start(), canonical)
    return best[1] if best else None


def parse_location(labelled: Optional[str], context: Optional[str] = None) -> str:
    """Resolve a location from a labelled field, then free text, then the default."""

    return canonical_location(labelled) or canonical_location(context) or DEFAULT_LOCATION


__all__ = [
    "IDR_PER_USD",
    "DEFAULT_ROOMS",
    "DEFAULT_LOCATION",
    "TOWNS",
    "LOCATION_ALIASES",
    "PriceRule",
    "PRICE_RULES",
    "sanitize_text",
    "parse_price",
    "parse_rooms",
    "parse_furnished",
    "canonical_location",
    "parse_location",
]
