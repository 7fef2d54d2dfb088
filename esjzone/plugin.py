"""ESJZone adapter: the public entry points used by a reader host."""
import asyncio
import logging
from typing import List, Optional

from esjzone.comments import CommentExtractor
from esjzone.content import ContentSanitizer
from esjzone.detail import DetailExtractor
from esjzone.filters import FilterReconciler, filter_definitions, tag_url
from esjzone.gate import EsjzoneGateDetector, GateDetector
from esjzone.listing import ListExtractor
from esjzone.tags import TagVocabulary
from normalizer import UrlNormalizer
from schemas import (
    CommentEntry, FilterDefinitions, ListingEntry, ListingFilters, WorkMetadata,
)
from storage import KeyValueStore
from transport import SourceFetchError, Transport

logger = logging.getLogger(__name__)

DETAIL_FETCH_ERROR = '無法獲取小說資訊，請檢查網路'
CHAPTER_FETCH_ERROR = '無法獲取章節內容，請檢查網路'


class ESJZoneAdapter:
    """
    Site adapter for ESJZone (https://www.esjzone.cc).

    Every entry point fetches through the transport and hands the page to
    the matching extractor. An empty fetch raises SourceFetchError for
    listing, detail and chapter pages; search and comments return an empty
    list instead.

    The tag vocabulary lives in a blocking store, so every read and write
    of it runs in a worker thread.
    """

    id = 'esjzone'
    name = 'ESJZone'
    version = '2.1.0'

    def __init__(
        self,
        transport: Transport,
        store: KeyValueStore,
        urls: UrlNormalizer = None,
        detector: GateDetector = None,
    ):
        self.transport = transport
        self.urls = urls or UrlNormalizer()
        self.detector = detector or EsjzoneGateDetector()

        self.vocabulary = TagVocabulary(store)
        self.list_extractor = ListExtractor(self.urls)
        self.reconciler = FilterReconciler(transport, self.list_extractor, self.urls)
        self.detail_extractor = DetailExtractor(self.urls, self.detector)
        self.sanitizer = ContentSanitizer(self.detector)
        self.comment_extractor = CommentExtractor(self.urls)

        # Filter surface as of the last vocabulary load
        self.filters: Optional[FilterDefinitions] = None

    @property
    def site(self) -> str:
        return self.urls.site_url

    def resolve_url(self, path: str) -> str:
        return self.urls.resolve(path)

    async def refresh_filters(self) -> FilterDefinitions:
        """Reload the tag vocabulary and rebuild the filter surface from it."""
        self.filters = await asyncio.to_thread(filter_definitions, self.vocabulary)
        return self.filters

    async def popular_novels(self, page: int, filters: Optional[ListingFilters] = None) -> List[ListingEntry]:
        filters = filters or ListingFilters()
        await self.refresh_filters()
        logger.info(
            f"Listing page {page}: category={filters.category} sort={filters.sort} "
            f"tags={filters.selected_tags()}"
        )
        return await self.reconciler.fetch(page, filters)

    async def parse_novel(self, path: str) -> WorkMetadata:
        body = await self.transport.fetch_text(self.resolve_url(path))
        if body == '':
            raise SourceFetchError(DETAIL_FETCH_ERROR)

        work = self.detail_extractor.parse(body, path)
        if work.tags:
            await asyncio.to_thread(self.vocabulary.merge, work.tags)
        return work

    async def parse_chapter(self, path: str) -> str:
        body = await self.transport.fetch_text(self.resolve_url(path))
        if body == '':
            raise SourceFetchError(CHAPTER_FETCH_ERROR)
        return self.sanitizer.sanitize(body)

    async def search_novels(self, term: str, page: int) -> List[ListingEntry]:
        if not term.strip():
            return []
        body = await self.transport.fetch_text(tag_url(self.site, term, page))
        if body == '':
            return []
        return self.list_extractor.parse(body)

    async def fetch_comments(self, path: str) -> List[CommentEntry]:
        body = await self.transport.fetch_text(self.resolve_url(path))
        if body == '':
            return []
        return self.comment_extractor.parse(body)
