"""Combine tag, category and sort selections into listing fetches."""
import asyncio
import logging
from typing import List, Sequence
from urllib.parse import quote

from esjzone.listing import ListExtractor
from esjzone.tags import TagVocabulary
from normalizer import UrlNormalizer
from schemas import (
    DEFAULT_CATEGORY, DEFAULT_SORT, PUBLIC_CATEGORY,
    FilterDefinitions, FilterOption, ListingEntry, ListingFilters,
    PickerFilter, TagFilter,
)
from transport import SourceFetchError, Transport

logger = logging.getLogger(__name__)

LISTING_FETCH_ERROR = '無法獲取小說列表，請檢查網路'
LOGIN_REQUIRED_NAME = '⚠ 需要登入才能瀏覽輕小說 — 請先在 WebView 中登入'
LOGIN_PATH = '/my/login'

# Characters left alone by JavaScript's encodeURI
_ENCODE_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"

CATEGORY_OPTIONS = [
    FilterOption(label='全部小說（需登入）', value='0'),
    FilterOption(label='日本輕小說（需登入）', value='1'),
    FilterOption(label='原創小說', value='2'),
    FilterOption(label='韓國輕小說（需登入）', value='3'),
]

SORT_OPTIONS = [
    FilterOption(label='最新更新', value='1'),
    FilterOption(label='最新上架', value='2'),
    FilterOption(label='最高評分', value='3'),
    FilterOption(label='最多觀看', value='4'),
    FilterOption(label='最多文章', value='5'),
    FilterOption(label='最多討論', value='6'),
    FilterOption(label='最多收藏', value='7'),
    FilterOption(label='最多字數', value='8'),
]


def listing_url(site_url: str, category: str, sort: str, page: int) -> str:
    """Category/sort listing: /list-{category}{sort}/ then /list-{category}{sort}/{page}.html"""
    base = f"{site_url}/list-{category}{sort}/"
    return base if page == 1 else f"{base}{page}.html"


def tag_url(site_url: str, tag: str, page: int) -> str:
    base = f"{site_url}/tags/{quote(tag.strip(), safe=_ENCODE_URI_SAFE)}/"
    return base if page == 1 else f"{base}{page}.html"


def intersect_by_path(primary: Sequence[ListingEntry], *others: Sequence[ListingEntry]) -> List[ListingEntry]:
    """Entries of primary whose path appears in every other list, in primary's order."""
    allowed = [{entry.path for entry in entries} for entries in others]
    return [
        entry for entry in primary
        if all(entry.path in paths for paths in allowed)
    ]


def filter_definitions(vocabulary: TagVocabulary) -> FilterDefinitions:
    """Filter surface for the host, with tag suggestions from the vocabulary."""
    return FilterDefinitions(
        category=PickerFilter(label='分類', value=DEFAULT_CATEGORY, options=CATEGORY_OPTIONS),
        sort=PickerFilter(label='排序', value=DEFAULT_SORT, options=SORT_OPTIONS),
        tag=TagFilter(label='標籤', options=vocabulary.as_filter_options()),
    )


class FilterReconciler:
    """
    Turn ListingFilters into one or more page fetches.

    The tag endpoint knows nothing about category or sort, so those
    combinations are emulated by intersecting the tag page with the
    category/sort page of the same number. Several tags are intersected on
    page 1 only.
    """

    def __init__(self, transport: Transport, extractor: ListExtractor = None, urls: UrlNormalizer = None):
        self.transport = transport
        self.urls = urls or UrlNormalizer()
        self.extractor = extractor or ListExtractor(self.urls)

    async def fetch(self, page: int, filters: ListingFilters) -> List[ListingEntry]:
        tags = filters.selected_tags()

        if not tags:
            return await self._fetch_listing(page, filters)

        if len(tags) == 1:
            return await self._fetch_single_tag(page, tags[0], filters)

        return await self._fetch_multi_tag(page, tags, filters)

    async def fetch_page(self, url: str) -> List[ListingEntry]:
        body = await self.transport.fetch_text(url)
        if body == '':
            raise SourceFetchError(LISTING_FETCH_ERROR)
        return self.extractor.parse(body)

    def login_required_entry(self) -> ListingEntry:
        return ListingEntry(
            name=LOGIN_REQUIRED_NAME,
            path=LOGIN_PATH,
            cover=self.urls.default_cover,
        )

    async def _fetch_listing(self, page: int, filters: ListingFilters) -> List[ListingEntry]:
        url = listing_url(self.urls.site_url, filters.category, filters.sort, page)
        entries = await self.fetch_page(url)

        # Non-public categories come back empty for anonymous visitors
        if not entries and filters.category != PUBLIC_CATEGORY:
            logger.info(f"Category {filters.category} returned nothing; assuming login is required")
            return [self.login_required_entry()]

        return entries

    async def _fetch_single_tag(self, page: int, tag: str, filters: ListingFilters) -> List[ListingEntry]:
        tagged = await self.fetch_page(tag_url(self.urls.site_url, tag, page))
        if filters.has_default_order:
            return tagged

        listed = await self.fetch_page(
            listing_url(self.urls.site_url, filters.category, filters.sort, page)
        )
        combined = intersect_by_path(tagged, listed)
        logger.info(
            f"Tag '{tag}' page {page}: {len(tagged)} tagged, {len(listed)} listed, "
            f"{len(combined)} in both"
        )
        return combined

    async def _fetch_multi_tag(self, page: int, tags: List[str], filters: ListingFilters) -> List[ListingEntry]:
        if page > 1:
            logger.info(f"Multi-tag intersection only covers page 1 (requested {page})")
            return []

        urls = [tag_url(self.urls.site_url, tag, 1) for tag in tags]
        if not filters.has_default_order:
            urls.append(listing_url(self.urls.site_url, filters.category, filters.sort, 1))

        results = await asyncio.gather(*(self.fetch_page(url) for url in urls))
        combined = intersect_by_path(results[0], *results[1:])
        logger.info(f"Tags {tags}: {len(combined)} works carry all of them")
        return combined
