import pytest

from esjzone.detail import (
    LOGIN_REQUIRED_NAME, LOGIN_REQUIRED_SUMMARY, UNTITLED, DetailExtractor,
)
from models import NovelStatus

from html_samples import SITE, DEFAULT_COVER, chapter_link, detail_page


PATH = '/detail/1585305413.html'


class TestDetailExtractor:

    @pytest.fixture
    def extractor(self, urls):
        return DetailExtractor(urls)

    def test_metadata(self, extractor):
        work = extractor.parse(detail_page(), PATH)

        assert work.path == PATH
        assert work.name == '魔女之旅'
        assert work.cover == f'{SITE}/assets/img/covers/witch.jpg'
        assert work.author == '白石定規'
        assert work.status == NovelStatus.ONGOING
        assert work.word_count == 123456
        assert work.rating == 8.7
        assert work.summary == '旅行中的魔女伊蕾娜。'
        assert work.genres == '奇幻,旅行'
        assert work.tags == ['奇幻', '旅行']

    def test_completed_status(self, extractor):
        lines = ['<li><strong>類型：</strong> 日輕（已完結）</li>']
        work = extractor.parse(detail_page(lines=lines), PATH)
        assert work.status == NovelStatus.COMPLETED

    def test_author_without_link(self, extractor):
        lines = ['<li>作者：佚名</li>']
        work = extractor.parse(detail_page(lines=lines), PATH)
        assert work.author == '佚名'

    def test_total_word_count_label(self, extractor):
        lines = ['<li>總字數: 1，234</li>']
        work = extractor.parse(detail_page(lines=lines), PATH)
        assert work.word_count == 1234

    def test_zero_word_count_is_absent(self, extractor):
        lines = ['<li>字數: 0</li>']
        work = extractor.parse(detail_page(lines=lines), PATH)
        assert work.word_count is None

    def test_missing_optional_fields(self, extractor):
        body = detail_page(lines=[], rating=None, summary=None, widget_tags=(), cover=None)

        work = extractor.parse(body, PATH)

        assert work.name == '魔女之旅'
        assert work.cover == DEFAULT_COVER
        assert work.author is None
        assert work.rating is None
        assert work.summary is None
        assert work.genres is None
        assert work.chapters == []

    def test_empty_cover_marker(self, extractor):
        work = extractor.parse(detail_page(cover='/assets/img/empty.jpg'), PATH)
        assert work.cover == DEFAULT_COVER

    def test_chapters_numbered_in_order(self, extractor):
        chapters = [
            chapter_link(f'{SITE}/forum/1585305413/1.html', data_title='序章'),
            chapter_link('/forum/1585305413/2.html', text='第一話'),
            chapter_link(None, text='無連結'),
            chapter_link('/forum/1585305413/3.html', text=''),
            chapter_link('https://www.esjzone.cc/forum/1585305413/4.html', text='第二話'),
        ]

        work = extractor.parse(detail_page(chapters=chapters), PATH)

        assert [c.name for c in work.chapters] == ['序章', '第一話', '第二話']
        assert [c.chapter_number for c in work.chapters] == [1, 2, 3]
        assert [c.path for c in work.chapters] == [
            '/forum/1585305413/1.html',
            '/forum/1585305413/2.html',
            '/forum/1585305413/4.html',
        ]

    def test_external_chapter_link_kept(self, extractor):
        chapters = [chapter_link('https://example.com/ch1', text='外部')]
        work = extractor.parse(detail_page(chapters=chapters), PATH)
        assert work.chapters[0].path == 'https://example.com/ch1'

    def test_last_update_goes_on_first_chapter(self, extractor):
        chapters = [chapter_link('/forum/1/1.html', text='一'), chapter_link('/forum/1/2.html', text='二')]

        work = extractor.parse(detail_page(chapters=chapters), PATH)

        assert work.chapters[0].release_time == '2024-03-05'
        assert work.chapters[1].release_time is None

    def test_tag_fallback_to_tag_links(self, extractor):
        body = detail_page(
            widget_tags=(),
            loose_tags=(('異世界', '/tags/異世界/'), ('作者頁', '/author/1'), ('轉生', f'{SITE}/tags/轉生/')),
        )

        work = extractor.parse(body, PATH)

        assert work.tags == ['異世界', '轉生']

    def test_tag_containing_comma_stays_whole(self, extractor):
        work = extractor.parse(detail_page(widget_tags=('1,2', '奇幻')), PATH)

        assert work.tags == ['1,2', '奇幻']
        assert work.genres == '1,2,奇幻'

    def test_duplicate_tags_removed(self, extractor):
        work = extractor.parse(detail_page(widget_tags=('奇幻', ' 奇幻 ', '旅行')), PATH)
        assert work.tags == ['奇幻', '旅行']

    def test_login_wall(self, extractor):
        body = '<html><body><div class="container"><p>請先登入後再查看此作品</p></div></body></html>'

        work = extractor.parse(body, PATH)

        assert work.name == LOGIN_REQUIRED_NAME
        assert work.summary == LOGIN_REQUIRED_SUMMARY
        assert work.cover == DEFAULT_COVER
        assert work.chapters == []
        assert work.path == PATH

    def test_untitled_when_page_has_nothing(self, extractor):
        work = extractor.parse('<html><body><div></div></body></html>', PATH)

        assert work.name == UNTITLED
        assert work.cover == DEFAULT_COVER
        assert work.chapters == []
