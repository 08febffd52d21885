"""Tests for loading source configuration YAML."""

from __future__ import annotations

import textwrap

import pytest

from balirent.exceptions import ConfigError
from balirent.models import Source
from balirent.sites import get_source, load_sources, parse_sources_yaml

SAMPLE_YAML = textwrap.dedent(
    """
    sources:
      - slug: Villa Hub
        name: Bali Villa Hub
        base_url: https://www.balivillahub.com
        seeds:
          - https://www.balivillahub.com/en/category/room-for-monthly-rent
        keywords: [" Villa ", RENT]
        selectors:
          container: [.property-item, .listing-card]
          price: [.price]
    """
)


def test_bundled_sources_cover_every_site():
    sources = load_sources()

    assert [source.slug for source in sources] == [
        "facebook-marketplace",
        "facebook-groups",
        "villa-hub",
        "rent-room-bali",
        "rumah-kost",
        "home-immo",
    ]
    assert {source.name for source in sources} == set(Source)
    assert [source.slug for source in sources if source.render] == [
        "facebook-marketplace",
        "facebook-groups",
    ]
    assert get_source("facebook-groups", sources).seed_delay == 3


def test_parse_sources_yaml_normalises_entries():
    (source,) = parse_sources_yaml(SAMPLE_YAML)

    assert source.slug == "villa-hub"
    assert source.name is Source.VILLA_HUB
    assert source.display_name == "Bali Villa Hub"
    assert source.keywords == ["villa", "rent"]
    assert source.selectors.price == [".price"]
    assert "h3" in source.selectors.title
    assert source.max_items == 20
    assert source.max_listings == 20
    assert source.seed_delay == 0
    assert not source.render


@pytest.mark.parametrize(
    "text",
    [
        "sources: [",
        "sites: []",
        "sources:\n  - slug: x\n    name: Craigslist\n    base_url: https://x.com\n    seeds: [https://x.com]\n    selectors: {container: [.a]}",
        "sources:\n  - slug: x\n    name: RentRoomBali\n    base_url: /relative\n    seeds: [https://x.com]\n    selectors: {container: [.a]}",
        "sources:\n  - slug: x\n    name: RentRoomBali\n    base_url: https://x.com\n    seeds: [https://x.com]\n    selectors: {container: []}",
    ],
)
def test_parse_sources_yaml_rejects_bad_config(text):
    with pytest.raises(ConfigError):
        parse_sources_yaml(text)


def test_parse_sources_yaml_rejects_duplicate_slugs():
    doubled = SAMPLE_YAML + SAMPLE_YAML.split("sources:\n", 1)[1]

    with pytest.raises(ConfigError, match="Duplicate"):
        parse_sources_yaml(doubled)


def test_get_source_by_slug():
    sources = parse_sources_yaml(SAMPLE_YAML)

    assert get_source("VILLA-HUB", sources).slug == "villa-hub"
    with pytest.raises(ConfigError):
        get_source("craigslist", sources)


def test_load_sources_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_sources(tmp_path / "missing.yml")
