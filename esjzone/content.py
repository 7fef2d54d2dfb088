"""Turn a reading page into sanitized chapter markup."""
import logging

from bs4 import BeautifulSoup

from esjzone.gate import EsjzoneGateDetector, GateDetector
from models import GateState
from schemas import ReadingContent

logger = logging.getLogger(__name__)

WALL_PLACEHOLDERS = {
    GateState.LOGIN_REQUIRED: (
        '<p style="text-align:center;color:red;font-weight:bold;">此內容需要登入才能閱讀。<br/>'
        '請點擊右上角 WebView 圖示，在網頁中登入 ESJZone 帳號後返回重試。</p>'
    ),
    GateState.AGE_VERIFICATION_REQUIRED: (
        '<p style="text-align:center;color:red;font-weight:bold;">此內容需要成人驗證。<br/>'
        '請在 WebView 中完成年齡確認後重試。</p>'
    ),
    GateState.PASSWORD_PROTECTED: (
        '<p style="text-align:center;color:red;font-weight:bold;">此章節受密碼保護，無法直接閱讀。</p>'
    ),
}
CONTENT_NOT_FOUND = '<p>無法找到章節內容。</p>'


class ContentSanitizer:
    """Extract the reading container, minus scripts, styles and ads."""

    CONTENT_SELECTOR = 'div.forum-content'
    NON_CONTENT_SELECTOR = 'script, style, .ad, ins.adsbygoogle'

    def __init__(self, detector: GateDetector = None):
        self.detector = detector or EsjzoneGateDetector()

    def extract(self, body: str) -> ReadingContent:
        soup = BeautifulSoup(body, 'lxml')

        state = self.detector.classify(soup, self.CONTENT_SELECTOR)
        if state != GateState.NORMAL:
            logger.info(f"Reading page is gated: {state.value}")
            return ReadingContent(state=state, html=WALL_PLACEHOLDERS[state])

        container = soup.select_one(self.CONTENT_SELECTOR)
        if container is None:
            logger.warning("Reading page has no content container")
            return ReadingContent(state=state, html=CONTENT_NOT_FOUND, found=False)

        for node in container.select(self.NON_CONTENT_SELECTOR):
            # Nested matches are already gone with their ancestor
            if not node.decomposed:
                node.decompose()

        return ReadingContent(state=state, html=container.decode_contents())

    def sanitize(self, body: str) -> str:
        return self.extract(body).html
