"""Classify fetched pages into access states (login, age, password walls)."""
from abc import ABC, abstractmethod
from typing import Sequence

from bs4 import BeautifulSoup

from models import GateState


def page_text(soup: BeautifulSoup) -> str:
    """Text of the page body, or of the whole document when there is no body."""
    body = soup.body or soup
    return body.get_text()


class GateDetector(ABC):
    """
    Base class for site-specific gate detection.

    The site answers with HTTP success for every wall, so the state has to be
    read from the page itself.
    """

    @abstractmethod
    def requires_login(self, soup: BeautifulSoup, content_selector: str) -> bool:
        """
        True when the page is a login wall.

        Args:
            soup: Parsed page
            content_selector: CSS selector of the container a normal page of
                this type always has
        """
        pass

    @abstractmethod
    def requires_age_verification(self, soup: BeautifulSoup) -> bool:
        pass

    @abstractmethod
    def is_password_protected(self, soup: BeautifulSoup) -> bool:
        pass

    def classify(self, soup: BeautifulSoup, content_selector: str) -> GateState:
        """Checks run login, age, password; the first match wins."""
        if self.requires_login(soup, content_selector):
            return GateState.LOGIN_REQUIRED
        if self.requires_age_verification(soup):
            return GateState.AGE_VERIFICATION_REQUIRED
        if self.is_password_protected(soup):
            return GateState.PASSWORD_PROTECTED
        return GateState.NORMAL


class EsjzoneGateDetector(GateDetector):
    """Marker phrases used by ESJZone's walls."""

    LOGIN_MARKERS: Sequence[str] = (
        '請先登入',
        '请先登入',
        '請登入後再訪問',
        '需要登入',
        '登入 / 註冊',
    )
    AGE_MARKERS: Sequence[str] = (
        '成人確認',
        '年齡確認',
        '未成年請勿',
        '18歲以上',
    )
    PASSWORD_MARKERS: Sequence[str] = (
        '密碼',
        '密码',
    )

    def requires_login(self, soup: BeautifulSoup, content_selector: str) -> bool:
        if soup.select_one(content_selector) is not None:
            return False
        text = page_text(soup)
        return any(marker in text for marker in self.LOGIN_MARKERS)

    def requires_age_verification(self, soup: BeautifulSoup) -> bool:
        text = page_text(soup)
        return any(marker in text for marker in self.AGE_MARKERS)

    def is_password_protected(self, soup: BeautifulSoup) -> bool:
        if soup.select_one('input[type="password"]') is not None:
            return True
        text = page_text(soup)
        return any(marker in text for marker in self.PASSWORD_MARKERS)
