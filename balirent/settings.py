"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import ConfigError
from .heuristics import IDR_PER_USD

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)


@dataclass(slots=True)
class Settings:
    log_level: str = "INFO"
    store_path: Path = Path("output/listings.json")
    idr_per_usd: float = IDR_PER_USD
    source_delay: float = 2.0
    fetch_timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            store_path=Path(env.get("BALIRENT_STORE_PATH", "output/listings.json")),
            idr_per_usd=_positive_float(env, "BALIRENT_IDR_PER_USD", IDR_PER_USD),
            source_delay=_positive_float(env, "BALIRENT_SOURCE_DELAY", 2.0, allow_zero=True),
            fetch_timeout=_positive_float(env, "BALIRENT_FETCH_TIMEOUT", 15.0),
            user_agent=env.get("BALIRENT_USER_AGENT") or DEFAULT_USER_AGENT,
        )


def _positive_float(env: Mapping[str, str], key: str, default: float, *, allow_zero: bool = False) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from exc
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigError(f"{key} must be positive, got {raw!r}")
    return value


__all__ = ["DEFAULT_USER_AGENT", "Settings"]
