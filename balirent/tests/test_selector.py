"""Tests for ranked container selector resolution."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from balirent.exceptions import StructureError
from balirent.selector import resolve_selector, safe_select

HTML = """
<html><body>
  <div class="b">one</div>
  <div class="b">two</div>
  <div class="a">only</div>
</body></html>
"""


def _soup() -> BeautifulSoup:
    return BeautifulSoup(HTML, "lxml")


def test_first_matching_candidate_wins_even_with_fewer_matches():
    match = resolve_selector(_soup(), [".missing", ".a", ".b"])

    assert match.selector == ".a"
    assert [el.get_text() for el in match.elements] == ["only"]


def test_invalid_selector_is_skipped():
    match = resolve_selector(_soup(), ["div[", ".b"])

    assert match.selector == ".b"
    assert len(match.elements) == 2


def test_no_match_raises_structure_error_with_candidates():
    with pytest.raises(StructureError) as excinfo:
        resolve_selector(_soup(), [".x", ".y"])

    assert excinfo.value.candidates == [".x", ".y"]


def test_safe_select_returns_empty_for_bad_selector():
    assert safe_select(_soup(), "a[href") == []
