"""Tests for candidate listing validation."""

from __future__ import annotations

from dataclasses import replace

import pytest

from balirent.models import Listing, Source
from balirent.validate import validate_listing


def make_listing(**overrides) -> Listing:
    listing = Listing(
        title="Cozy villa in Canggu",
        price=1200,
        location="Canggu",
        rooms=2,
        furnished=True,
        description="Two bedroom villa with pool",
        listing_url="https://example.com/villa/1",
        source=Source.VILLA_HUB,
    )
    return replace(listing, **overrides)


def test_valid_listing_passes():
    result = validate_listing(make_listing())
    assert result
    assert result.reasons == []


@pytest.mark.parametrize(
    "overrides,reason",
    [
        ({"title": "Hi"}, "title too short"),
        ({"title": "   "}, "missing title"),
        ({"listing_url": ""}, "missing listing_url"),
        ({"listing_url": "/villa/1"}, "malformed listing_url"),
        ({"price": 0}, "price out of range"),
        ({"price": 100_000}, "price out of range"),
        ({"rooms": 11}, "rooms out of range"),
        ({"source": "Craigslist"}, "missing source"),
    ],
)
def test_invalid_listing_reports_reason(overrides, reason):
    result = validate_listing(make_listing(**overrides))
    assert not result
    assert reason in result.reasons


def test_unknown_price_and_studio_are_valid():
    assert validate_listing(make_listing(price=None, rooms=0))


def test_all_reasons_are_reported():
    result = validate_listing(make_listing(title="", listing_url="nope", price=-5))
    assert result.reasons == ["missing title", "malformed listing_url", "price out of range"]
