"""Parse card-based listing pages into listing entries."""
import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from normalizer import UrlNormalizer, NumberParser
from schemas import ListingEntry

logger = logging.getLogger(__name__)


class ListExtractor:
    """
    Extract ListingEntry rows from ESJZone list, tag and search pages.

    Cards without a detail link are skipped; a path seen earlier on the same
    page is skipped as well.
    """

    CARD_SELECTOR = 'div.card.mb-30'
    LINK_SELECTOR = 'a.card-img-tiles'
    TITLE_SELECTOR = '.card-title a'
    COVER_SELECTOR = '.main-img .lazyload'
    BADGE_SELECTOR = '.product-badge, .badge, .tag-r18'

    # Checked in order; the first pattern found in any badge node wins
    BADGE_PATTERNS = (
        re.compile(r'^\s*(18\+)\s*$'),
        re.compile(r'\b(R-?18)\b', re.IGNORECASE),
        re.compile(r'(18\+)'),
    )

    RATING_ICON = re.compile(r'^icon-star')
    WORD_COUNT_ICON = re.compile(r'^icon-(file-text|book)')

    def __init__(self, urls: UrlNormalizer = None):
        self.urls = urls or UrlNormalizer()

    def parse(self, body: str) -> List[ListingEntry]:
        soup = BeautifulSoup(body, 'lxml')
        entries = []
        seen_paths = set()

        for card in soup.select(self.CARD_SELECTOR):
            link = card.select_one(self.LINK_SELECTOR)
            href = (link.get('href') or '').strip() if link else ''
            if not href:
                logger.debug("Skipping card without detail link")
                continue
            if href in seen_paths:
                continue
            seen_paths.add(href)

            title_el = card.select_one(self.TITLE_SELECTOR)
            cover_el = card.select_one(self.COVER_SELECTOR)

            entries.append(ListingEntry(
                name=title_el.get_text().strip() if title_el else '',
                path=href,
                cover=self.urls.cover(cover_el.get('data-src') if cover_el else ''),
                badge=self.extract_badge(card),
                info=self.extract_info(card),
            ))

        logger.debug(f"Parsed {len(entries)} listing entries")
        return entries

    def extract_badge(self, card: Tag) -> Optional[str]:
        texts = [node.get_text().strip() for node in card.select(self.BADGE_SELECTOR)]
        for pattern in self.BADGE_PATTERNS:
            for text in texts:
                match = pattern.search(text)
                if match:
                    return match.group(1).upper()
        return None

    def extract_info(self, card: Tag) -> Optional[str]:
        """
        Format the rating / word count columns into one display string.

        Columns are found by their icon class, not by position. A zero
        rating is the site's "not rated" card, which gets no info string.
        """
        rating = self._icon_column_text(card, self.RATING_ICON)
        words = self._icon_column_text(card, self.WORD_COUNT_ICON)

        if rating:
            value = NumberParser.rating(rating)
            if value == 0:
                return None
            if value is None:
                rating = None

        parts = []
        if rating:
            parts.append(f"評分 {rating}")
        if words:
            parts.append(f"字數 {words}")
        return ' · '.join(parts) if parts else None

    @staticmethod
    def _icon_column_text(card: Tag, icon_class: re.Pattern) -> Optional[str]:
        for icon in card.find_all('i', class_=icon_class):
            column = icon.parent
            if column is None:
                continue
            text = column.get_text().strip()
            if text:
                return text
        return None
