"""Page fetchers: plain HTTP via httpx and rendered pages via Playwright."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from .exceptions import FetchNetworkError, FetchStatusError, FetchTimeout
from .settings import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0

HEADERS = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9,id;q=0.8",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}

_SCROLL_SCRIPT = "window.scrollTo(0, document.body.scrollHeight)"
_SCROLL_PAUSE_MS = 2000


class PageFetcher(Protocol):
    def fetch(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        ...


class RenderedPageFetcher(Protocol):
    def rendered_page(
        self,
        url: str,
        *,
        wait_ms: int = 0,
        scroll_cycles: int = 0,
        timeout: Optional[float] = None,
        wait_selector: Optional[str] = None,
    ) -> str:
        ...


class HttpFetcher:
    """Static page fetcher backed by a shared :class:`httpx.Client`."""

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        headers = dict(HEADERS)
        if user_agent:
            headers["User-Agent"] = user_agent
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(follow_redirects=True, headers=headers)

    def fetch(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        effective = timeout if timeout is not None else self._timeout
        logger.debug("GET %s (timeout=%.1fs)", url, effective)
        try:
            response = self._client.get(url, headers=headers, timeout=effective)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FetchTimeout(url, f"Timed out after {effective:.0f}s") from exc
        except httpx.HTTPStatusError as exc:
            raise FetchStatusError(url, exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            raise FetchNetworkError(url, str(exc) or exc.__class__.__name__) from exc

        logger.debug("HTTP %s for %s (%d bytes)", response.status_code, url, len(response.content))
        return response.text

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class BrowserSession:
    """Headless Chromium session shared by the sources that need rendering.

    Use as a context manager; the browser is started on entry and always
    shut down on exit.
    """

    def __init__(self, *, timeout: float = 30.0, user_agent: Optional[str] = None) -> None:
        self._timeout = max(timeout, 1.0)
        self._user_agent = user_agent or DEFAULT_USER_AGENT
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._page: Any = None
        self._errors: Any = None

    def __enter__(self) -> "BrowserSession":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def open(self) -> None:
        from playwright import sync_api

        self._errors = sync_api
        self._playwright = sync_api.sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(
                headless=True,
                args=["--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"],
            )
            extra_headers = {k: v for k, v in HEADERS.items() if k.lower() != "user-agent"}
            self._context = self._browser.new_context(
                user_agent=self._user_agent,
                extra_http_headers=extra_headers,
                viewport={"width": 1366, "height": 768},
            )
            self._page = self._context.new_page()
        except Exception:
            self.close()
            raise
        timeout_ms = int(self._timeout * 1000)
        self._page.set_default_timeout(timeout_ms)
        self._page.set_default_navigation_timeout(timeout_ms)
        logger.debug("Browser session started")

    def rendered_page(
        self,
        url: str,
        *,
        wait_ms: int = 0,
        scroll_cycles: int = 0,
        timeout: Optional[float] = None,
        wait_selector: Optional[str] = None,
    ) -> str:
        if self._page is None:
            raise RuntimeError("BrowserSession is not open")

        timeout_ms = int((timeout if timeout is not None else self._timeout) * 1000)
        errors = self._errors
        try:
            response = self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
            if response is not None and response.status >= 400:
                raise FetchStatusError(url, response.status)
            if wait_selector:
                try:
                    self._page.wait_for_selector(wait_selector, timeout=timeout_ms)
                except errors.TimeoutError:
                    logger.debug("Selector %r never appeared on %s", wait_selector, url)
            if wait_ms:
                self._page.wait_for_timeout(wait_ms)
            for cycle in range(scroll_cycles):
                self._page.evaluate(_SCROLL_SCRIPT)
                self._page.wait_for_timeout(_SCROLL_PAUSE_MS)
                logger.debug("Scroll cycle %d/%d on %s", cycle + 1, scroll_cycles, url)
            return self._page.content()
        except errors.TimeoutError as exc:
            raise FetchTimeout(url, f"Navigation timed out after {timeout_ms} ms") from exc
        except errors.Error as exc:
            raise FetchNetworkError(url, str(exc)) from exc

    def close(self) -> None:
        try:
            if self._context is not None:
                self._context.close()
        finally:
            try:
                if self._browser is not None:
                    self._browser.close()
            finally:
                if self._playwright is not None:
                    self._playwright.stop()
                self._page = self._context = self._browser = self._playwright = None
                logger.debug("Browser session closed")


__all__ = [
    "HEADERS",
    "PageFetcher",
    "RenderedPageFetcher",
    "HttpFetcher",
    "BrowserSession",
]
