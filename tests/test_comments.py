import pytest

from esjzone.comments import ANONYMOUS, CommentExtractor

from html_samples import SITE, comment_block, comments_section, detail_page, reading_page


class TestCommentExtractor:

    @pytest.fixture
    def extractor(self, urls):
        return CommentExtractor(urls)

    def parse(self, extractor, *blocks):
        return extractor.parse(detail_page(comments=comments_section(*blocks)))

    def test_basic_comment(self, extractor):
        comments = self.parse(
            extractor,
            comment_block(
                '<a href="/my/profile/1">伊蕾娜</a>',
                meta=('#3', '2024-01-02 10:00'),
                text='<p>好看！</p><p>期待更新</p>',
                avatar='/assets/img/avatar/1.png',
            ),
        )

        assert len(comments) == 1
        comment = comments[0]
        assert comment.author == '伊蕾娜'
        assert comment.content == '好看！\n期待更新'
        assert comment.date == '2024-01-02 10:00'
        assert comment.avatar == f'{SITE}/assets/img/avatar/1.png'

    def test_quoted_reply(self, extractor):
        comments = self.parse(
            extractor,
            comment_block('讀者A', text='<p>我也這麼覺得</p>', quote='<p>第一行</p><p>第二行</p>'),
        )

        assert comments[0].content == '> 第一行\n> 第二行\n\n我也這麼覺得'

    def test_author_without_link(self, extractor):
        comments = self.parse(extractor, comment_block('讀者B', text='<p>推</p>'))
        assert comments[0].author == '讀者B'

    def test_anonymous_author(self, extractor):
        comments = self.parse(extractor, comment_block('', text='<p>推</p>'))
        assert comments[0].author == ANONYMOUS

    @pytest.mark.parametrize("floor", ['#12', '第3樓', '5 楼'])
    def test_floor_markers_are_not_dates(self, extractor, floor):
        comments = self.parse(extractor, comment_block('讀者', meta=(floor,), text='<p>推</p>'))
        assert comments[0].date is None

    def test_absolute_avatar_unchanged(self, extractor):
        comments = self.parse(
            extractor,
            comment_block('讀者', text='<p>推</p>', avatar='https://cdn.example.com/a.png'),
        )
        assert comments[0].avatar == 'https://cdn.example.com/a.png'

    def test_missing_avatar(self, extractor):
        comments = self.parse(extractor, comment_block('讀者', text='<p>推</p>'))
        assert comments[0].avatar is None

    def test_empty_comments_dropped(self, extractor):
        comments = self.parse(
            extractor,
            comment_block('讀者A', text='<p>  </p>'),
            comment_block('讀者B', text='', quote='<p> </p>'),
            comment_block('讀者C', text='<p>留下</p>'),
        )

        assert [c.author for c in comments] == ['讀者C']

    def test_quote_without_reply_is_kept(self, extractor):
        comments = self.parse(extractor, comment_block('讀者B', text='', quote='<p>只有引用</p>'))

        assert len(comments) == 1
        assert comments[0].content == '> 只有引用'

    def test_page_order(self, extractor):
        comments = self.parse(
            extractor,
            comment_block('一', text='<p>1</p>'),
            comment_block('二', text='<p>2</p>'),
            comment_block('三', text='<p>3</p>'),
        )
        assert [c.author for c in comments] == ['一', '二', '三']

    def test_reading_page_has_no_comments(self, extractor):
        assert extractor.parse(reading_page('<p>正文</p>')) == []
