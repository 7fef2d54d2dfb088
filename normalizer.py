"""Shared normalization helpers: chapter markup, URLs, tags and numbers."""
import logging
import re
from typing import Iterable, Optional

import bleach
from bs4 import BeautifulSoup, Tag

from config import settings

logger = logging.getLogger(__name__)


class ContentCleaner:
    """
    Reduce sanitized chapter markup to what a downloaded chapter keeps.

    Reading pages have already lost their scripts and ad slots by the time
    they get here. What is left to strip is inline clutter the site's
    editors paste into posts, then everything outside the tag whitelist.
    """

    KEPT_TAGS = frozenset({
        'p', 'br', 'hr', 'div', 'span',
        'b', 'strong', 'i', 'em', 'u', 's', 'del',
        'h3', 'h4', 'h5', 'blockquote',
        'ul', 'ol', 'li',
        'ruby', 'rb', 'rt', 'rp',
        'img',
    })
    KEPT_ATTRIBUTES = {
        'img': ['src', 'alt'],
    }

    # Removed with their whole subtree
    DROPPED_TAGS = ['script', 'style', 'iframe', 'noscript', 'ins', 'form', 'button']
    CLUTTER = re.compile(r'\b(ads?|adsbygoogle|sponsor|share|social|banner|popup)\b', re.IGNORECASE)
    HIDDEN_STYLE = re.compile(r'display\s*:\s*none|visibility\s*:\s*hidden', re.IGNORECASE)

    EMPTY_BLOCK = re.compile(r'<(p|div|span)>(\s|&nbsp;|<br\s*/?>)*</\1>')
    BLANK_LINES = re.compile(r'\n\s*\n+')

    CJK_CHAR = re.compile(r'[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff\u3040-\u30ff\uac00-\ud7af]')
    LATIN_WORD = re.compile(r'[A-Za-z0-9]+(?:[\'’-][A-Za-z0-9]+)*')

    def clean_html(self, html: str) -> str:
        """
        Whitelist chapter markup for storage.

        Args:
            html: Chapter markup from the reading page

        Returns:
            Markup containing only KEPT_TAGS, or "" for empty input
        """
        if not html:
            return ""

        soup = BeautifulSoup(html, 'lxml')
        root = soup.body or soup

        for node in root.find_all(self.DROPPED_TAGS):
            node.decompose()

        removed = 0
        for node in root.find_all(True):
            if not node.decomposed and self._is_clutter(node):
                node.decompose()
                removed += 1
        if removed:
            logger.debug(f"Dropped {removed} clutter nodes from chapter markup")

        kept = bleach.clean(
            root.decode_contents(),
            tags=self.KEPT_TAGS,
            attributes=self.KEPT_ATTRIBUTES,
            strip=True,
        )
        kept = self.EMPTY_BLOCK.sub('', kept)
        return self.BLANK_LINES.sub('\n', kept).strip()

    def _is_clutter(self, node: Tag) -> bool:
        if self.HIDDEN_STYLE.search(node.get('style') or ''):
            return True
        marks = ' '.join(node.get('class') or []) + ' ' + (node.get('id') or '')
        return bool(self.CLUTTER.search(marks))

    def extract_text(self, html: str) -> str:
        return BeautifulSoup(html, 'lxml').get_text(separator=' ', strip=True)

    def count_words(self, html: str) -> int:
        """Each CJK character is one word; so is each run of Latin letters or digits."""
        if not html:
            return 0
        text = self.extract_text(html)
        return len(self.CJK_CHAR.findall(text)) + len(self.LATIN_WORD.findall(text))


class UrlNormalizer:
    """Resolve site links and cover images."""

    CANONICAL_SITE = "https://www.esjzone.cc"
    EMPTY_COVER_MARKER = "/assets/img/empty.jpg"

    def __init__(self, site_url: str = None, default_cover: str = None):
        self.site_url = (site_url or settings.site_url).rstrip('/')
        self.default_cover = default_cover or settings.default_cover

    def absolute(self, value: str) -> str:
        """Absolutize a site-root-relative reference; leave anything else alone."""
        if value.startswith('/') and not value.startswith('//'):
            return self.site_url + value
        return value

    def cover(self, value: Optional[str]) -> str:
        """
        Resolve a cover reference.

        Empty values and the site's empty-image marker map to the default
        cover. Already absolute and protocol-relative URLs pass through.
        """
        value = (value or '').strip()
        if not value or self.EMPTY_COVER_MARKER in value:
            return self.default_cover
        return self.absolute(value)

    def site_path(self, href: str) -> str:
        """Strip the site's own origin from an absolute link."""
        for origin in (self.site_url, self.CANONICAL_SITE):
            if href.startswith(origin):
                return href[len(origin):]
        return href

    def resolve(self, path: str) -> str:
        """Full URL for a site-relative path."""
        return self.site_url + path


class TagNormalizer:
    """Clean tag lists scraped from pages."""

    @staticmethod
    def unique(raw_tags: Iterable[str]) -> list[str]:
        """Strip, drop empties and deduplicate, keeping first appearance."""
        tags = []
        for raw in raw_tags:
            tag = (raw or '').strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags


class NumberParser:
    """Lenient parsing of numeric display fields."""

    NUMBER = re.compile(r'\d+(?:\.\d+)?')
    THOUSANDS_SEPARATORS = re.compile(r'[,，\s]')

    @classmethod
    def rating(cls, text: str) -> Optional[float]:
        """First number in the text, or None."""
        match = cls.NUMBER.search(text or '')
        if not match:
            return None
        try:
            return float(match.group())
        except ValueError:
            return None

    @classmethod
    def word_count(cls, text: str) -> Optional[int]:
        """Digits of a count like '123,456 字'; None when absent or not positive."""
        digits = re.search(r'\d+', cls.THOUSANDS_SEPARATORS.sub('', text or ''))
        if not digits:
            return None
        count = int(digits.group())
        return count if count > 0 else None
