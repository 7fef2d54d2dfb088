"""Parse the discussion section of a detail page."""
import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from normalizer import UrlNormalizer
from schemas import CommentEntry

logger = logging.getLogger(__name__)

ANONYMOUS = '匿名'


class CommentExtractor:
    """
    Extract CommentEntry records in page order.

    Reading pages have no discussion section and yield an empty list.
    """

    BLOCK_SELECTOR = '.comments .comment'
    AUTHOR_LINK_SELECTOR = '.comment-title a'
    AUTHOR_SELECTOR = '.comment-title'
    META_SELECTOR = '.comment-meta span, .comment-meta li'
    AVATAR_SELECTOR = '.comment-avatar img'
    TEXT_SELECTOR = '.comment-text'
    QUOTE_SELECTOR = 'blockquote'

    FLOOR_MARKER = re.compile(r'^(#\s*\d+|第?\s*\d+\s*[樓楼])$')

    def __init__(self, urls: UrlNormalizer = None):
        self.urls = urls or UrlNormalizer()

    def parse(self, body: str) -> List[CommentEntry]:
        soup = BeautifulSoup(body, 'lxml')
        comments = []

        for block in soup.select(self.BLOCK_SELECTOR):
            content = self.extract_content(block)
            if not content:
                continue

            comments.append(CommentEntry(
                author=self.extract_author(block),
                content=content,
                date=self.extract_date(block),
                avatar=self.extract_avatar(block),
            ))

        logger.debug(f"Parsed {len(comments)} comments")
        return comments

    def extract_author(self, block: Tag) -> str:
        for selector in (self.AUTHOR_LINK_SELECTOR, self.AUTHOR_SELECTOR):
            el = block.select_one(selector)
            if el:
                name = el.get_text().strip()
                if name:
                    return name
        return ANONYMOUS

    def extract_date(self, block: Tag) -> Optional[str]:
        for item in block.select(self.META_SELECTOR):
            text = item.get_text().strip()
            if text and not self.FLOOR_MARKER.match(text):
                return text
        return None

    def extract_avatar(self, block: Tag) -> Optional[str]:
        img = block.select_one(self.AVATAR_SELECTOR)
        if img is None:
            return None
        src = (img.get('data-src') or img.get('src') or '').strip()
        return self.urls.absolute(src) if src else None

    def extract_content(self, block: Tag) -> str:
        """Reply body, preceded by the quoted comment as '> ' lines when there is one."""
        text_el = block.select_one(self.TEXT_SELECTOR)
        if text_el is None:
            return ''

        quoted = []
        quote_el = text_el.select_one(self.QUOTE_SELECTOR) or block.select_one(self.QUOTE_SELECTOR)
        if quote_el is not None:
            quoted = self._lines(quote_el)
            quote_el.extract()

        parts = []
        if quoted:
            parts.append('\n'.join(f"> {line}" for line in quoted))
        reply = '\n'.join(self._lines(text_el))
        if reply:
            parts.append(reply)
        return '\n\n'.join(parts)

    @staticmethod
    def _lines(el: Tag) -> List[str]:
        return [line.strip() for line in el.get_text('\n').splitlines() if line.strip()]
