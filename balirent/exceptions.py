"""Exception hierarchy for the listing pipeline."""

from __future__ import annotations

from typing import Optional, Sequence


class BaliRentError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(BaliRentError):
    """Raised when source configuration or settings are malformed."""


class FetchError(BaliRentError):
    """A page could not be retrieved."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url


class FetchTimeout(FetchError):
    """The fetch did not complete within its timeout."""


class FetchStatusError(FetchError):
    """The server answered with a non-2xx status."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(url, f"HTTP {status_code}")
        self.status_code = status_code


class FetchNetworkError(FetchError):
    """Connection, DNS, TLS or browser level failure."""


class StructureError(BaliRentError):
    """No listing container selector matched the page."""

    def __init__(self, candidates: Sequence[str]) -> None:
        super().__init__(f"No container selector matched ({len(candidates)} tried)")
        self.candidates = list(candidates)


class ExtractionError(BaliRentError):
    """A single listing container could not be turned into a candidate."""


class SourceFailure(BaliRentError):
    """A whole source failed for this run."""

    def __init__(self, source: str, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.cause = cause


class SourceFetchError(SourceFailure):
    """Every seed page of a source failed to fetch."""


__all__ = [
    "BaliRentError",
    "ConfigError",
    "FetchError",
    "FetchTimeout",
    "FetchStatusError",
    "FetchNetworkError",
    "StructureError",
    "ExtractionError",
    "SourceFailure",
    "SourceFetchError",
]
