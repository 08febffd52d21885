"""Bali rental listing scraper package."""

from .adapter import SourceAdapter
from .models import Listing, Source, dedup_listings
from .sites import SourceConfig, get_source, load_sources, parse_sources_yaml
from .store import JsonListingStore, MemoryListingStore, filter_listings
from .validate import validate_listing
from .workflow import Pipeline, RunResult, SourceResult, run_sources

__all__ = [
    "Listing",
    "Source",
    "dedup_listings",
    "SourceConfig",
    "load_sources",
    "parse_sources_yaml",
    "get_source",
    "SourceAdapter",
    "validate_listing",
    "Pipeline",
    "RunResult",
    "SourceResult",
    "run_sources",
    "JsonListingStore",
    "MemoryListingStore",
    "filter_listings",
]
