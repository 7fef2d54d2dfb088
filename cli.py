"""
CLI utility for the ESJZone adapter.

Usage:
    python cli.py list [--page N] [--category C] [--sort S] [--tag T ...]
    python cli.py detail <path>             # Work metadata and chapters
    python cli.py read <path>               # Sanitized chapter markup
    python cli.py search <term> [--page N]  # Search by tag
    python cli.py comments <path>           # Discussion comments
    python cli.py tags                      # Known tags
    python cli.py download <path>           # Download a work with Scrapy
    python cli.py list-works                # Downloaded works
"""
import argparse
import asyncio
import logging
import sys

from config import settings
from database import SessionLocal, init_db
from esjzone.plugin import ESJZoneAdapter
from models import Work
from schemas import AutocompleteTagInput, ListingFilters
from storage import get_store
from transport import HttpTransport, SourceFetchError

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_adapter() -> ESJZoneAdapter:
    return ESJZoneAdapter(HttpTransport(), get_store())


def cmd_list(args):
    """List works by category, sort and tags."""
    filters = ListingFilters(
        category=args.category,
        sort=args.sort,
        tags=AutocompleteTagInput(value=args.tag or []),
    )
    entries = asyncio.run(build_adapter().popular_novels(args.page, filters))
    print_entries(entries)


def cmd_search(args):
    """Search works by tag."""
    entries = asyncio.run(build_adapter().search_novels(args.term, args.page))
    print_entries(entries)


def print_entries(entries):
    print(f"\n{'Path':<30} {'Badge':<6} {'Name':<40} {'Info':<30}")
    print("-" * 106)

    for entry in entries:
        name = entry.name[:37] + "..." if len(entry.name) > 40 else entry.name
        print(f"{entry.path:<30} {entry.badge or '':<6} {name:<40} {entry.info or '':<30}")

    print(f"\nTotal: {len(entries)} works")


def cmd_detail(args):
    """Show work metadata and chapter list."""
    work = asyncio.run(build_adapter().parse_novel(args.path))

    print(f"\n{work.name}")
    print("=" * 60)
    print(f"Author:  {work.author or '-'}")
    print(f"Status:  {work.status.value}")
    print(f"Rating:  {work.rating if work.rating is not None else '-'}")
    print(f"Words:   {work.word_count or '-'}")
    print(f"Tags:    {work.genres or '-'}")
    print(f"Cover:   {work.cover}")
    if work.summary:
        print(f"\n{work.summary}\n")

    print(f"{'#':<5} {'Chapter':<50} {'Path':<40}")
    print("-" * 95)
    for chapter in work.chapters:
        print(f"{chapter.chapter_number:<5} {chapter.name[:50]:<50} {chapter.path:<40}")
    print(f"\nTotal: {len(work.chapters)} chapters")


def cmd_read(args):
    """Print sanitized chapter markup."""
    print(asyncio.run(build_adapter().parse_chapter(args.path)))


def cmd_comments(args):
    """Print discussion comments."""
    comments = asyncio.run(build_adapter().fetch_comments(args.path))

    for comment in comments:
        print(f"\n{comment.author}  {comment.date or ''}")
        print(comment.content)

    print(f"\nTotal: {len(comments)} comments")


def cmd_tags(args):
    """List the tag vocabulary."""
    options = build_adapter().vocabulary.as_filter_options()
    for option in options:
        print(option.value)
    print(f"\nTotal: {len(options)} tags")


def cmd_download(args):
    """Download a whole work into the database."""
    from scrapy.crawler import CrawlerProcess
    from scrapy.utils.project import get_project_settings

    process = CrawlerProcess(get_project_settings())
    process.crawl('esjzone', url=args.path)
    process.start()


def cmd_list_works(args):
    """List downloaded works."""
    init_db()
    db = SessionLocal()
    try:
        works = db.query(Work).order_by(
            Work.updated_at.desc()
        ).limit(args.limit).all()

        print(f"\n{'ID':<5} {'Title':<40} {'Status':<12} {'Chapters':<10}")
        print("-" * 67)

        for work in works:
            title = work.title[:37] + "..." if len(work.title) > 40 else work.title
            print(f"{work.id:<5} {title:<40} {work.status.value:<12} {len(work.chapters):<10}")

        print(f"\nTotal: {len(works)} works")

    finally:
        db.close()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="ESJZone adapter CLI"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    list_parser = subparsers.add_parser("list", help="List works")
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--category", default="1", choices=["0", "1", "2", "3"])
    list_parser.add_argument("--sort", default="1", choices=[str(i) for i in range(1, 9)])
    list_parser.add_argument("--tag", action="append", help="Tag filter (repeatable)")
    list_parser.set_defaults(func=cmd_list)

    detail_parser = subparsers.add_parser("detail", help="Show a work")
    detail_parser.add_argument("path", help="Work path, e.g. /detail/1234567890.html")
    detail_parser.set_defaults(func=cmd_detail)

    read_parser = subparsers.add_parser("read", help="Print a chapter")
    read_parser.add_argument("path", help="Chapter path, e.g. /forum/1234567890/123456.html")
    read_parser.set_defaults(func=cmd_read)

    search_parser = subparsers.add_parser("search", help="Search works by tag")
    search_parser.add_argument("term")
    search_parser.add_argument("--page", type=int, default=1)
    search_parser.set_defaults(func=cmd_search)

    comments_parser = subparsers.add_parser("comments", help="Show comments of a work")
    comments_parser.add_argument("path")
    comments_parser.set_defaults(func=cmd_comments)

    tags_parser = subparsers.add_parser("tags", help="List known tags")
    tags_parser.set_defaults(func=cmd_tags)

    download_parser = subparsers.add_parser("download", help="Download a work")
    download_parser.add_argument("path", help="Work path or URL")
    download_parser.set_defaults(func=cmd_download)

    list_works_parser = subparsers.add_parser("list-works", help="List downloaded works")
    list_works_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum number of works to show"
    )
    list_works_parser.set_defaults(func=cmd_list_works)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except SourceFetchError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
