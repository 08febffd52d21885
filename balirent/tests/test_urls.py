"""Tests for link and image URL normalisation."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from balirent.urls import collect_image_urls, find_link, is_absolute_url, normalize_url

BASE = "https://example.com/list/"


@pytest.mark.parametrize(
    "href,expected",
    [
        ("/room/12", "https://example.com/room/12"),
        ("room?id=3", "https://example.com/list/room?id=3"),
        ("//cdn.example.com/a.jpg", "https://cdn.example.com/a.jpg"),
        ("https://other.com/x", "https://other.com/x"),
        ("  /padded  ", "https://example.com/padded"),
        ("javascript:void(0)", None),
        ("mailto:owner@example.com", None),
        ("tel:+62123", None),
        ("#top", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_url(href, expected):
    assert normalize_url(href, BASE) == expected


def test_is_absolute_url():
    assert is_absolute_url("http://example.com/a")
    assert not is_absolute_url("/a")
    assert not is_absolute_url("ftp://example.com/a")
    assert not is_absolute_url(None)


def _container(html: str, selector: str = "div.card"):
    return BeautifulSoup(html, "lxml").select_one(selector)


def test_collect_image_urls_skips_placeholders_and_duplicates():
    card = _container(
        """
        <div class="card">
          <img src="/static/placeholder.gif" data-src="/img/1.jpg">
          <img src="https://cdn.example.com/2.jpg">
          <img src="https://cdn.example.com/2.jpg">
          <img data-lazy-src="/img/3.jpg">
          <img src="/img/4.jpg">
        </div>
        """
    )

    assert collect_image_urls(card, BASE) == [
        "https://example.com/img/1.jpg",
        "https://cdn.example.com/2.jpg",
        "https://example.com/img/3.jpg",
    ]


def test_collect_image_urls_empty_when_no_images():
    card = _container('<div class="card"><p>No pictures</p></div>')
    assert collect_image_urls(card, BASE) == []


def test_find_link_prefers_configured_selector():
    card = _container(
        '<div class="card"><a href="/agent">Agent</a><a class="go" href="/rooms/7">Open</a></div>'
    )

    assert find_link(card, BASE, ["a.go"]) == "https://example.com/rooms/7"
    assert find_link(card, BASE) == "https://example.com/agent"


def test_find_link_uses_enclosing_anchor():
    card = _container('<a href="/rooms/9"><span class="card">Villa</span></a>', "span.card")
    assert find_link(card, BASE) == "https://example.com/rooms/9"


def test_find_link_on_anchor_container():
    anchor = _container('<a class="card" href="/rooms/3">Room</a>', "a.card")
    assert find_link(anchor, BASE) == "https://example.com/rooms/3"


def test_find_link_none_when_only_script_links():
    card = _container('<div class="card"><a href="javascript:void(0)">Call</a></div>')
    assert find_link(card, BASE) is None
