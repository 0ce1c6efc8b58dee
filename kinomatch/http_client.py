from __future__ import annotations

"""
Browser-like HTTP session for IMDb.

IMDb soft-blocks obvious bots: plain clients get a ``202 Accepted`` with an
empty body. The session therefore

  - rotates realistic user agents per request
  - sends the header set a browser navigation would send
  - keeps cookies for its lifetime (httpx.Client cookie jar)
  - sleeps a random 1-3 s before every request
  - retries a 202 exactly once after a short wait, then gives up

Everything above the transport only sees ``Transport.get_text``; tests swap
in a fake with canned HTML.
"""

import random
import time
from typing import Callable, Dict, Optional, Protocol
from urllib.parse import urlsplit

import httpx
from loguru import logger

from .config import IMDB_BASE_URL, HttpSettings

__all__ = [
    "BrowserSession",
    "SoftBlockError",
    "Transport",
    "TransportError",
    "redact_url_for_logs",
]

SOFT_BLOCK_STATUS = 202


class TransportError(RuntimeError):
    """Raised when a page could not be fetched."""


class SoftBlockError(TransportError):
    """Raised when the server kept answering 202 after the retry."""


class Transport(Protocol):
    def get_text(self, url: str) -> str: ...


def redact_url_for_logs(url: str) -> str:
    """Host part only, for log lines."""
    try:
        parsed = urlsplit(url)
    except (ValueError, AttributeError):
        return "url"
    return parsed.hostname or parsed.netloc or parsed.path or "url"


def _client_hint_brand(user_agent: str) -> str:
    if "Edg/" in user_agent:
        return '"Chromium";v="124", "Microsoft Edge";v="124", "Not-A.Brand";v="99"'
    return '"Chromium";v="124", "Google Chrome";v="124", "Not-A.Brand";v="99"'


def _client_hint_platform(user_agent: str) -> str:
    if "Macintosh" in user_agent:
        return '"macOS"'
    if "Linux" in user_agent:
        return '"Linux"'
    return '"Windows"'


def browser_headers(user_agent: str, accept_language: str, referer: str = IMDB_BASE_URL + "/") -> Dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": accept_language,
        "Referer": referer,
        "Upgrade-Insecure-Requests": "1",
        "sec-ch-ua": _client_hint_brand(user_agent),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": _client_hint_platform(user_agent),
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "same-origin",
        "Sec-Fetch-User": "?1",
    }


class BrowserSession:
    """
    One cookie-keeping session. Not shared between concurrent resolutions.
    """

    def __init__(
        self,
        settings: Optional[HttpSettings] = None,
        *,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.settings = settings or HttpSettings()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=httpx.Timeout(self.settings.read_timeout, connect=self.settings.connect_timeout),
            max_redirects=self.settings.max_redirects,
        )

    def __enter__(self) -> "BrowserSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    def _pick_user_agent(self) -> str:
        return self._rng.choice(self.settings.user_agents)

    def _polite_delay(self) -> None:
        delay = self._rng.uniform(self.settings.min_delay, self.settings.max_delay)
        if delay > 0:
            self._sleep(delay)

    def _send(self, url: str) -> httpx.Response:
        self._polite_delay()
        headers = browser_headers(self._pick_user_agent(), self.settings.accept_language)
        try:
            return self._client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            raise TransportError(f"Timeout fetching {redact_url_for_logs(url)}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request failed for {redact_url_for_logs(url)}: {type(e).__name__}") from e

    def get_text(self, url: str) -> str:
        r = self._send(url)

        if r.status_code == SOFT_BLOCK_STATUS:
            logger.warning(
                "Soft block (202) from {}; retrying once in {:.1f}s",
                redact_url_for_logs(url),
                self.settings.soft_block_wait,
            )
            self._sleep(self.settings.soft_block_wait)
            r = self._send(url)
            if r.status_code == SOFT_BLOCK_STATUS:
                raise SoftBlockError(f"HTTP 202 twice for {redact_url_for_logs(url)}")

        if not 200 <= r.status_code < 300:
            raise TransportError(f"HTTP {r.status_code} for {redact_url_for_logs(url)}")
        if len(r.content) > self.settings.max_bytes:
            raise TransportError(f"Page too large ({len(r.content)} bytes) for {redact_url_for_logs(url)}")
        return r.text
