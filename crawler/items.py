"""Scrapy items for downloaded works."""
import scrapy


class ChapterItem(scrapy.Item):
    """Item representing a single chapter."""
    chapter_number = scrapy.Field()
    chapter_title = scrapy.Field()
    path = scrapy.Field()
    source_url = scrapy.Field()
    release_time = scrapy.Field()
    content = scrapy.Field()  # Sanitized reading markup
    clean_content = scrapy.Field()  # optional, for pipeline
    word_count = scrapy.Field()  # optional, for pipeline


class WorkItem(scrapy.Item):
    """Item representing a work with all its chapters."""
    title = scrapy.Field()
    path = scrapy.Field()
    source_url = scrapy.Field()
    author = scrapy.Field()
    cover = scrapy.Field()
    status = scrapy.Field()  # 'ongoing' or 'completed'
    rating = scrapy.Field()
    summary = scrapy.Field()
    genres = scrapy.Field()  # List of tag strings
    word_count = scrapy.Field()
    chapters = scrapy.Field()  # List of ChapterItem dictionaries
