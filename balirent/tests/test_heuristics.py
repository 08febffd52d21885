"""Unit tests for price, room, furnishing and location heuristics."""

from __future__ import annotations

import pytest

from balirent.heuristics import (
    DEFAULT_LOCATION,
    canonical_location,
    parse_furnished,
    parse_location,
    parse_price,
    parse_rooms,
    sanitize_text,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("$1,200/month", 1200),
        ("USD 900 per month", 900),
        ("750 USD monthly", 750),
        ("Rp 15,000,000 / bulan", 1000),
        ("IDR 4.500.000 per month", 300),
        ("Harga 6.000.000 rupiah", 400),
        ("7,5 juta / month", 500),
        ("8 jt", 533),
        ("Monthly rent 12000000", 800),
        ("Rent 850 per month", 850),
        ("Call for pricing", None),
        ("2 bedroom villa", None),
        ("$20", None),
        ("", None),
    ],
)
def test_parse_price(text: str, expected: int | None) -> None:
    assert parse_price(text) == expected


def test_parse_price_prefers_dollar_amount_over_rupiah() -> None:
    assert parse_price("Rp 15.000.000 or $1,100 monthly") == 1100


def test_parse_price_skips_out_of_range_matches_within_a_rule() -> None:
    # The $5 deposit note is below the USD floor; the second dollar amount is used.
    assert parse_price("$5 booking fee, rent $650") == 650


def test_parse_price_uses_given_exchange_rate() -> None:
    assert parse_price("Rp 10.000.000", idr_per_usd=16000) == 625


@pytest.mark.parametrize(
    "text,expected",
    [
        ("2 bedroom villa in Canggu", 2),
        ("3BR house", 3),
        ("Private room, 1 bed", 1),
        ("Kamar 2 with AC", 2),
        ("Bedrooms: 4", 4),
        ("Studio apartment", 0),
        ("Cozy place near the beach", 1),
        ("25 rooms boutique hotel", 1),
    ],
)
def test_parse_rooms(text: str, expected: int) -> None:
    assert parse_rooms(text) == expected


def test_parse_rooms_default_can_be_unknown() -> None:
    assert parse_rooms("Cozy place near the beach", default=None) is None
    assert parse_rooms(None, default=None) is None


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Fully furnished villa", True),
        ("Furnished room with wifi", True),
        ("Kamar lengkap dengan AC", True),
        ("Unfurnished house", False),
        ("House, not furnished", False),
        ("Rumah kosong", False),
        ("Kost fully furnished, kamar kosong mulai Juni", True),
        ("Nice villa with pool", None),
        ("", None),
    ],
)
def test_parse_furnished(text: str, expected: bool | None) -> None:
    assert parse_furnished(text) is expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Villa in Berawa, close to the beach", "Canggu"),
        ("Seminyak / Petitenget border", "Seminyak"),
        ("Loft in central Ubud", "Ubud"),
        ("Lovely nusa   dua house", "Nusa Dua"),
        ("Echo Beach surf shack", "Canggu"),
        ("Guesthouse on Batu  Bolong road", "Canggu"),
        ("Walk to Monkey\nForest", "Ubud"),
        ("Kutai Kartanegara", None),
        ("Somewhere nice", None),
    ],
)
def test_canonical_location(text: str, expected: str | None) -> None:
    assert canonical_location(text) == expected


def test_canonical_location_earliest_mention_wins() -> None:
    assert canonical_location("Sanur house, 20 minutes from Ubud") == "Sanur"


def test_parse_location_prefers_labelled_field() -> None:
    assert parse_location("Sanur", "Canggu villa") == "Sanur"
    assert parse_location("Bali", "Canggu villa") == "Canggu"
    assert parse_location(None, "Nothing to see here") == DEFAULT_LOCATION


def test_sanitize_text_strips_control_characters_and_truncates() -> None:
    assert sanitize_text("  hello\u200b   world\x07 ") == "hello world"
    assert sanitize_text("a" * 50, 10) == "a" * 10
    assert sanitize_text(None) == ""
