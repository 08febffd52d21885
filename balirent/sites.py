"""Loading and validation of per-source adapter configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Sequence

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .extract import (
    DEFAULT_DESCRIPTION_SELECTORS,
    DEFAULT_IMAGE_SELECTORS,
    DEFAULT_LOCATION_SELECTORS,
    DEFAULT_PRICE_SELECTORS,
    DEFAULT_TITLE_SELECTORS,
)
from .models import Source
from .urls import is_absolute_url

DEFAULT_SOURCES_PATH = Path(__file__).resolve().parent / "config" / "sources.yml"


class SelectorGroups(BaseModel):
    """Ranked CSS selector candidates for each field role."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    container: List[str] = Field(min_length=1)
    title: List[str] = Field(default_factory=lambda: list(DEFAULT_TITLE_SELECTORS))
    price: List[str] = Field(default_factory=lambda: list(DEFAULT_PRICE_SELECTORS))
    location: List[str] = Field(default_factory=lambda: list(DEFAULT_LOCATION_SELECTORS))
    description: List[str] = Field(default_factory=lambda: list(DEFAULT_DESCRIPTION_SELECTORS))
    link: List[str] = Field(default_factory=list)
    image: List[str] = Field(default_factory=lambda: list(DEFAULT_IMAGE_SELECTORS))


class SourceConfig(BaseModel):
    """Static description of one source: where to look and how to read it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    slug: str = Field(min_length=1)
    name: Source
    base_url: str
    seeds: List[str] = Field(min_length=1)
    selectors: SelectorGroups
    max_items: int = Field(default=20, ge=1)
    max_listings: int = Field(default=20, ge=1)
    fallback_limit: int = Field(default=10, ge=0)
    keywords: List[str] = Field(default_factory=list)
    render: bool = False
    wait_ms: int = Field(default=0, ge=0)
    scroll_cycles: int = Field(default=0, ge=0)
    seed_delay: float = Field(default=0.0, ge=0)
    wait_selector: Optional[str] = None
    timeout: float = Field(default=15.0, gt=0)

    @field_validator("slug")
    @classmethod
    def _normalise_slug(cls, value: str) -> str:
        return normalise_slug(value)

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        if not is_absolute_url(value):
            raise ValueError(f"base_url must be an absolute http(s) URL: {value!r}")
        return value

    @field_validator("seeds")
    @classmethod
    def _check_seeds(cls, value: List[str]) -> List[str]:
        for url in value:
            if not is_absolute_url(url):
                raise ValueError(f"seed must be an absolute http(s) URL: {url!r}")
        return value

    @field_validator("keywords")
    @classmethod
    def _lower_keywords(cls, value: List[str]) -> List[str]:
        return [keyword.strip().lower() for keyword in value if keyword.strip()]

    @property
    def display_name(self) -> str:
        return self.name.value


def normalise_slug(slug: str) -> str:
    return slug.strip().lower().replace(" ", "-")


def load_sources(path: str | Path | None = None) -> List[SourceConfig]:
    """Load source definitions from a YAML file (the bundled one by default)."""

    file_path = Path(path) if path is not None else DEFAULT_SOURCES_PATH
    try:
        text = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        text = file_path.read_text(encoding="utf-8", errors="ignore")
    except OSError as exc:
        raise ConfigError(f"Cannot read source config {file_path}: {exc}") from exc
    return parse_sources_yaml(text)


def parse_sources_yaml(text: str) -> List[SourceConfig]:
    """Parse *text* containing a ``sources`` YAML list into :class:`SourceConfig` objects."""

    try:
        data: Any = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Source config is not valid YAML: {exc}") from exc

    entries = data.get("sources") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ConfigError("Source config must contain a 'sources' list.")

    sources: List[SourceConfig] = []
    seen_slugs: set[str] = set()
    for index, entry in enumerate(entries):
        try:
            config = SourceConfig.model_validate(entry)
        except ValidationError as exc:
            label = entry.get("slug") if isinstance(entry, dict) else None
            raise ConfigError(f"Invalid source entry #{index} ({label or '?'}): {exc}") from exc
        if config.slug in seen_slugs:
            raise ConfigError(f"Duplicate source slug detected: {config.slug}")
        seen_slugs.add(config.slug)
        sources.append(config)

    return sources


def get_source(slug: str, sources: Optional[Sequence[SourceConfig]] = None) -> SourceConfig:
    """Return the configuration registered under *slug*."""

    key = normalise_slug(slug)
    for config in sources if sources is not None else load_sources():
        if config.slug == key:
            return config
    raise ConfigError(f"No source configured for slug '{slug}'")


__all__ = [
    "DEFAULT_SOURCES_PATH",
    "SelectorGroups",
    "SourceConfig",
    "normalise_slug",
    "load_sources",
    "parse_sources_yaml",
    "get_source",
]
