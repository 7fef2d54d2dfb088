"""Spider skeleton shared by whole-work downloads."""
from abc import abstractmethod
from typing import List

import scrapy
from scrapy import signals
from scrapy.exceptions import DontCloseSpider

from crawler.items import WorkItem


class BaseSpider(scrapy.Spider):
    """
    Download one work: the detail page first, then every chapter page.

    Chapters land on ``self.work_item`` as their responses arrive. A work is
    only complete once the scheduler runs dry, so the item is emitted from
    the spider_idle signal through one extra request.
    """

    name: str = "base"
    allowed_domains: list = []

    def __init__(self, url: str, *args, **kwargs):
        """
        Args:
            url: Absolute URL of the work's detail page
        """
        super().__init__(*args, **kwargs)
        self.start_urls = [url]
        self.detail_url = url

        self.work_item = WorkItem(source_url=url, chapters=[])
        self._emitted = False

    @classmethod
    def from_crawler(cls, crawler, *args, **kwargs):
        spider = super(BaseSpider, cls).from_crawler(crawler, *args, **kwargs)
        crawler.signals.connect(spider.spider_idle, signal=signals.spider_idle)
        return spider

    def parse(self, response):
        self.logger.info(f"Reading work page {response.url}")
        self.extract_work_metadata(response)

        queued = self.extract_chapter_list(response)
        self.logger.info(f"Queueing {len(queued)} chapter pages")

        for chapter in queued:
            yield scrapy.Request(
                url=chapter['url'],
                callback=self.parse_chapter,
                errback=self.handle_chapter_error,
                meta={
                    'chapter_number': chapter['number'],
                    'chapter_title': chapter['title'],
                    'chapter_path': chapter['path'],
                    'release_time': chapter.get('release_time'),
                },
            )

    @abstractmethod
    def extract_work_metadata(self, response) -> None:
        """Fill the work fields of ``self.work_item`` from the detail page."""

    @abstractmethod
    def extract_chapter_list(self, response) -> List[dict]:
        """
        Chapters to fetch.

        Returns:
            Dicts with 'number', 'title', 'path', 'url' and optionally
            'release_time'
        """

    @abstractmethod
    def parse_chapter(self, response):
        """Append one chapter dict to ``self.work_item['chapters']``."""

    def handle_chapter_error(self, failure):
        request = failure.request
        self.logger.error(
            f"Chapter {request.meta.get('chapter_number', '?')} failed "
            f"({request.url}): {failure.value}"
        )

    def spider_idle(self, spider):
        if self._emitted:
            return

        collected = len(self.work_item['chapters'])
        if not self.work_item.get('title') or not collected:
            self.logger.error(
                f"Nothing to save: title={self.work_item.get('title')!r}, chapters={collected}"
            )
            return

        self.logger.info(f"All pages fetched; sending '{self.work_item['title']}' ({collected} chapters) to pipelines")
        self.crawler.engine.crawl(
            scrapy.Request(
                url=self.detail_url,
                callback=self._emit_work,
                dont_filter=True,
                priority=1000,
            )
        )
        self._emitted = True
        raise DontCloseSpider()

    def _emit_work(self, response):
        yield self.work_item

    def closed(self, reason):
        self.logger.info(f"Spider closed: {reason} ({len(self.work_item['chapters'])} chapters)")
