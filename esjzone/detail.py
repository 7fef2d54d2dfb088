"""Parse a work's detail page into WorkMetadata."""
import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup

from esjzone.gate import EsjzoneGateDetector, GateDetector
from models import NovelStatus
from normalizer import NumberParser, TagNormalizer, UrlNormalizer
from schemas import ChapterEntry, WorkMetadata

logger = logging.getLogger(__name__)

UNTITLED = 'Untitled'
LOGIN_REQUIRED_NAME = '需要登入才能瀏覽此作品'
LOGIN_REQUIRED_SUMMARY = (
    '此作品需要登入 ESJZone 帳號才能瀏覽。\n'
    '請在 WebView 中開啟此頁面並登入後重試。\n\n'
    '操作步驟：\n'
    '1. 點擊右上角的 WebView 圖示\n'
    '2. 在網頁中登入 ESJZone 帳號\n'
    '3. 返回後重新整理此頁面'
)


class DetailExtractor:
    """
    Extract work metadata and the chapter list from a detail page.

    Metadata lines in ``ul.book-detail`` look like ``作者: name``; each
    label accepts both ASCII and full-width colons.
    """

    TITLE_SELECTOR = 'h2.text-normal'
    COVER_SELECTOR = 'div.product-gallery img'
    DETAIL_LINES_SELECTOR = 'ul.book-detail li'
    RATING_SELECTOR = 'div.d-inline.display-3'
    SUMMARY_SELECTOR = 'div.description'
    TAG_WIDGET_SELECTOR = 'section.widget-tags a.tag'
    TAG_LINK_SELECTOR = 'a.tag'
    CHAPTER_SELECTOR = '#chapterList a'

    AUTHOR_LABEL = re.compile(r'^作者[:：]\s*')
    TYPE_LABEL = re.compile(r'^類型[:：]\s*')
    WORD_COUNT_LABEL = re.compile(r'^總?字數[:：]\s*')
    UPDATE_LABEL = re.compile(r'^更新日期[:：]\s*')
    DATE_PATTERN = re.compile(r'\d{4}[-/.]\d{1,2}[-/.]\d{1,2}')
    COMPLETED_MARKER = '完結'

    def __init__(self, urls: UrlNormalizer = None, detector: GateDetector = None):
        self.urls = urls or UrlNormalizer()
        self.detector = detector or EsjzoneGateDetector()

    def parse(self, body: str, path: str) -> WorkMetadata:
        soup = BeautifulSoup(body, 'lxml')

        if self.detector.requires_login(soup, self.TITLE_SELECTOR):
            logger.info(f"Detail page {path} is behind the login wall")
            return self.login_placeholder(path)

        title_el = soup.select_one(self.TITLE_SELECTOR)
        name = title_el.get_text().strip() if title_el else ''

        cover_el = soup.select_one(self.COVER_SELECTOR)
        cover = cover_el.get('src') if cover_el else ''

        work = WorkMetadata(
            path=path,
            name=name or UNTITLED,
            cover=self.urls.cover(cover),
        )

        last_update = self._parse_detail_lines(soup, work)

        rating_el = soup.select_one(self.RATING_SELECTOR)
        if rating_el:
            work.rating = NumberParser.rating(rating_el.get_text().strip())

        summary_el = soup.select_one(self.SUMMARY_SELECTOR)
        if summary_el:
            work.summary = summary_el.get_text().strip()

        tags = self.extract_tags(soup)
        if tags:
            work.tags = tags
            work.genres = ','.join(tags)

        work.chapters = self.extract_chapters(soup)
        if last_update and work.chapters:
            # The page only shows one date, the latest chapter's
            work.chapters[0].release_time = last_update

        logger.info(f"Parsed work '{work.name}' with {len(work.chapters)} chapters and {len(tags)} tags")
        return work

    def login_placeholder(self, path: str) -> WorkMetadata:
        return WorkMetadata(
            path=path,
            name=LOGIN_REQUIRED_NAME,
            cover=self.urls.default_cover,
            summary=LOGIN_REQUIRED_SUMMARY,
            chapters=[],
        )

    def _parse_detail_lines(self, soup: BeautifulSoup, work: WorkMetadata) -> Optional[str]:
        """Fill author, status and word count; return the last-update date if shown."""
        last_update = None

        for line in soup.select(self.DETAIL_LINES_SELECTOR):
            text = line.get_text().strip()

            if self.AUTHOR_LABEL.match(text):
                link = line.find('a')
                author = link.get_text().strip() if link else ''
                work.author = author or self.AUTHOR_LABEL.sub('', text).strip() or None

            elif self.TYPE_LABEL.match(text):
                type_text = self.TYPE_LABEL.sub('', text).strip()
                if type_text:
                    work.status = (
                        NovelStatus.COMPLETED if self.COMPLETED_MARKER in type_text
                        else NovelStatus.ONGOING
                    )

            elif self.WORD_COUNT_LABEL.match(text) and work.word_count is None:
                work.word_count = NumberParser.word_count(self.WORD_COUNT_LABEL.sub('', text))

            elif self.UPDATE_LABEL.match(text) and last_update is None:
                match = self.DATE_PATTERN.search(text)
                if match:
                    last_update = match.group()

        return last_update

    def extract_tags(self, soup: BeautifulSoup) -> List[str]:
        tags = TagNormalizer.unique(a.get_text() for a in soup.select(self.TAG_WIDGET_SELECTOR))
        if tags:
            return tags

        # Fallback: any tag-styled link pointing at a tag page
        return TagNormalizer.unique(
            a.get_text() for a in soup.select(self.TAG_LINK_SELECTOR)
            if self.urls.site_path(a.get('href') or '').startswith('/tags/')
        )

    def extract_chapters(self, soup: BeautifulSoup) -> List[ChapterEntry]:
        chapters = []

        for anchor in soup.select(self.CHAPTER_SELECTOR):
            href = (anchor.get('href') or '').strip()
            if not href:
                continue

            name = (anchor.get('data-title') or '').strip() or anchor.get_text().strip()
            if not name:
                continue

            chapters.append(ChapterEntry(
                name=name,
                path=self.urls.site_path(href),
                chapter_number=len(chapters) + 1,
            ))

        return chapters
