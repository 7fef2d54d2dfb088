"""Shared fixtures for adapter tests."""
import pytest

from esjzone.plugin import ESJZoneAdapter
from normalizer import UrlNormalizer
from storage import MemoryStore

from html_samples import SITE, DEFAULT_COVER


class FakeTransport:
    """Serves canned pages by URL; unknown URLs come back empty like a failed fetch."""

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.requested = []

    async def fetch_text(self, url: str) -> str:
        self.requested.append(url)
        return self.pages.get(url, "")


@pytest.fixture
def urls():
    return UrlNormalizer(SITE, DEFAULT_COVER)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def adapter(transport, store, urls):
    return ESJZoneAdapter(transport, store, urls=urls)
