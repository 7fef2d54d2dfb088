"""Scrapy pipelines for downloaded works."""
import logging

from scrapy.exceptions import DropItem

from database import SessionLocal, init_db
from esjzone.tags import TagVocabulary
from models import Work, WorkChapter, NovelStatus
from normalizer import ContentCleaner
from storage import get_store

logger = logging.getLogger(__name__)


class ValidationPipeline:
    """Validate scraped items before processing."""

    def process_item(self, item, spider):
        """Validate that required fields are present."""
        required_fields = ['title', 'path', 'source_url']

        for field in required_fields:
            if not item.get(field):
                raise DropItem(f"Missing required field: {field}")

        if not item.get('chapters'):
            raise DropItem(f"Work has no readable chapters: {item['title']}")

        logger.info(f"Validation passed for: {item['title']}")
        return item


class NormalizationPipeline:
    """Clean chapter markup and compute word counts."""

    def __init__(self):
        self.cleaner = ContentCleaner()

    def process_item(self, item, spider):
        logger.info(f"Normalizing content for: {item['title']}")

        chapters = sorted(item['chapters'], key=lambda chapter: chapter['chapter_number'])
        total_words = 0

        for chapter in chapters:
            clean_content = self.cleaner.clean_html(chapter.get('content', ''))
            chapter['clean_content'] = clean_content

            word_count = self.cleaner.count_words(clean_content)
            chapter['word_count'] = word_count
            total_words += word_count

        item['chapters'] = chapters
        item['word_count'] = total_words

        logger.info(
            f"Normalized {item['title']}: "
            f"{len(chapters)} chapters, "
            f"{total_words} words"
        )

        return item


class TagVocabularyPipeline:
    """Feed the work's tags into the shared tag vocabulary."""

    def __init__(self, vocabulary: TagVocabulary = None):
        self.vocabulary = vocabulary

    def open_spider(self, spider):
        if self.vocabulary is None:
            self.vocabulary = TagVocabulary(get_store())

    def process_item(self, item, spider):
        added = self.vocabulary.merge(item.get('genres') or [])
        if added:
            logger.info(f"New tags from {item['title']}: {', '.join(added)}")
        return item


class DatabasePipeline:
    """Save the work and its chapters."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory
        self.db = None

    def open_spider(self, spider):
        """Open database session when spider starts."""
        if self.session_factory is None:
            init_db()
            self.session_factory = SessionLocal
        self.db = self.session_factory()
        logger.info("Database session opened")

    def close_spider(self, spider):
        """Close database session when spider closes."""
        if self.db:
            self.db.close()
            logger.info("Database session closed")

    def process_item(self, item, spider):
        """Insert or refresh the work, replacing its chapters."""
        try:
            work = self.db.query(Work).filter_by(path=item['path']).first()

            if work:
                logger.info(f"Updating existing work: {work.id}")
            else:
                logger.info(f"Creating new work: {item['title']}")
                work = Work(path=item['path'])
                self.db.add(work)

            work.title = item['title']
            work.author = item.get('author')
            work.cover = item.get('cover')
            work.status = NovelStatus(item.get('status') or NovelStatus.ONGOING.value)
            work.rating = item.get('rating')
            work.summary = item.get('summary')
            work.genres = ','.join(item.get('genres') or [])
            work.word_count = item.get('word_count', 0)

            # Fresh import of the chapter list
            work.chapters.clear()
            self.db.flush()
            for chapter_data in item['chapters']:
                work.chapters.append(WorkChapter(
                    chapter_number=chapter_data['chapter_number'],
                    title=chapter_data['chapter_title'],
                    path=chapter_data['path'],
                    release_time=chapter_data.get('release_time'),
                    content=chapter_data['clean_content'],
                    word_count=chapter_data['word_count'],
                ))

            self.db.commit()
            logger.info(f"Saved work {work.id} with {len(item['chapters'])} chapters")
            return item

        except Exception as e:
            self.db.rollback()
            logger.error(f"Database error: {e}")
            raise
