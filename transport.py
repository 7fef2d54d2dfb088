"""HTTP transport used by the adapter to fetch raw page text."""
import asyncio
import logging
from typing import Optional, Protocol

import requests

from config import settings

logger = logging.getLogger(__name__)


class SourceFetchError(RuntimeError):
    """Raised when a page that must exist could not be fetched."""


class Transport(Protocol):
    """Fetches page text; an empty string is the only failure signal."""

    async def fetch_text(self, url: str) -> str:
        ...


class HttpTransport:
    """
    requests-based transport.

    Network errors and non-2xx responses are logged and reported as an
    empty body; this class never raises for them.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = None):
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "zh-TW,zh;q=0.9",
            "User-Agent": settings.user_agent,
        })
        self.timeout = timeout or settings.request_timeout

    def get_text(self, url: str) -> str:
        """Blocking fetch."""
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Fetch failed for {url}: {e}")
            return ""

        if not response.encoding or response.encoding.lower() == "iso-8859-1":
            response.encoding = "utf-8"

        logger.debug(f"Fetched {url} ({len(response.text)} chars)")
        return response.text

    async def fetch_text(self, url: str) -> str:
        return await asyncio.to_thread(self.get_text, url)
