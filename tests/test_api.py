import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import get_sync_db, init_db
from esjzone.filters import LISTING_FETCH_ERROR, tag_url
from main import app, get_adapter
from models import NovelStatus, Work, WorkChapter

from html_samples import SITE, card, chapter_link, detail_page, listing_page, reading_page


@pytest.fixture
def client(adapter):
    app.dependency_overrides[get_adapter] = lambda: adapter
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestBrowseEndpoints:

    def test_health(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    def test_novels(self, client, transport):
        transport.pages[f'{SITE}/list-23/'] = listing_page(card('/detail/1.html', name='一', rating='9.1'))

        response = client.get('/novels', params={'category': '2', 'sort': '3'})

        assert response.status_code == 200
        data = response.json()
        assert data[0]['path'] == '/detail/1.html'
        assert data[0]['info'] == '評分 9.1'

    def test_novels_with_tags(self, client, transport):
        transport.pages[tag_url(SITE, 'a', 1)] = listing_page(card('/p1'), card('/p2'))
        transport.pages[tag_url(SITE, 'b', 1)] = listing_page(card('/p2'))

        response = client.get('/novels', params=[('tag', 'a'), ('tag', 'b')])

        assert [e['path'] for e in response.json()] == ['/p2']

    def test_novels_rejects_bad_category(self, client):
        assert client.get('/novels', params={'category': '7'}).status_code == 422

    def test_novels_upstream_failure(self, client):
        response = client.get('/novels')
        assert response.status_code == 502
        assert response.json()['detail'] == LISTING_FETCH_ERROR

    def test_query_with_checkbox_tags(self, client, transport):
        transport.pages[tag_url(SITE, '奇幻', 1)] = listing_page(card('/p1'))

        response = client.post('/novels/query', json={
            'page': 1,
            'filters': {'tags': {'kind': 'checkbox', 'value': ['奇幻']}},
        })

        assert response.status_code == 200
        assert [e['path'] for e in response.json()] == ['/p1']

    def test_search(self, client, transport):
        transport.pages[tag_url(SITE, '奇幻', 1)] = listing_page(card('/p1'))

        response = client.get('/search', params={'term': '奇幻'})

        assert [e['path'] for e in response.json()] == ['/p1']

    def test_filters_and_tags_follow_vocabulary(self, client, adapter):
        adapter.vocabulary.merge(['冒險'])

        filters = client.get('/filters').json()
        tags = client.get('/tags').json()

        assert filters['tag']['options'] == [{'label': '冒險', 'value': '冒險'}]
        assert tags == {'items': ['冒險'], 'total': 1}


class TestWorkEndpoints:

    def test_novel(self, client, transport):
        transport.pages[f'{SITE}/detail/1.html'] = detail_page(chapters=[chapter_link('/forum/1/1.html', text='一')])

        response = client.get('/novel', params={'path': '/detail/1.html'})

        assert response.status_code == 200
        data = response.json()
        assert data['name'] == '魔女之旅'
        assert data['chapters'][0]['release_time'] == '2024-03-05'

    def test_novel_requires_site_path(self, client):
        assert client.get('/novel', params={'path': 'detail/1.html'}).status_code == 422

    def test_chapter(self, client, transport):
        transport.pages[f'{SITE}/forum/1/1.html'] = reading_page('<p>正文</p>')

        response = client.get('/chapter', params={'path': '/forum/1/1.html'})

        assert response.json()['content'].strip() == '<p>正文</p>'

    def test_chapter_upstream_failure(self, client):
        assert client.get('/chapter', params={'path': '/forum/1/1.html'}).status_code == 502

    def test_comments_failure_is_empty(self, client):
        response = client.get('/comments', params={'path': '/detail/1.html'})
        assert response.status_code == 200
        assert response.json() == []


class TestLibraryEndpoints:

    @pytest.fixture
    def session_factory(self):
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        init_db(engine)
        return sessionmaker(engine, expire_on_commit=False)

    @pytest.fixture
    def library_client(self, client, session_factory):
        def override_db():
            db = session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_sync_db] = override_db
        return client

    def test_works(self, library_client, session_factory):
        db = session_factory()
        work = Work(path='/detail/1.html', title='魔女之旅', status=NovelStatus.COMPLETED, word_count=10)
        work.chapters.append(WorkChapter(chapter_number=1, title='一', path='/forum/1/1.html', content='<p>x</p>'))
        db.add(work)
        db.commit()
        db.close()

        response = library_client.get('/works')

        assert response.status_code == 200
        assert response.json() == [{
            'id': 1,
            'path': '/detail/1.html',
            'title': '魔女之旅',
            'status': 'completed',
            'word_count': 10,
            'chapter_count': 1,
        }]
