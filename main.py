"""FastAPI application - HTTP surface over the ESJZone adapter."""
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import List
import asyncio
import logging

from fastapi import FastAPI, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config import settings
from database import get_sync_db, init_db
from esjzone.plugin import ESJZoneAdapter
from models import Work
from schemas import (
    AutocompleteTagInput, ChapterContentResponse, CommentEntry,
    FilterDefinitions, ListingEntry, ListingFilters, ListingRequest,
    TagVocabularyResponse, WorkListItem, WorkMetadata,
    DEFAULT_CATEGORY, DEFAULT_SORT,
)
from storage import get_store
from transport import HttpTransport, SourceFetchError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Create FastAPI app
app = FastAPI(
    title="ESJZone Adapter API",
    description="Listing, detail, reading and comment extraction for ESJZone",
    version="2.1.0",
    lifespan=lifespan,
)


@lru_cache(maxsize=1)
def get_adapter() -> ESJZoneAdapter:
    """Shared adapter instance."""
    logger.info(f"Creating adapter for {settings.site_url} (storage: {settings.storage_backend})")
    return ESJZoneAdapter(HttpTransport(), get_store())


@app.exception_handler(SourceFetchError)
async def source_fetch_error_handler(request: Request, exc: SourceFetchError):
    logger.warning(f"Upstream fetch failed for {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


# ============================================================================
# Browse Endpoints
# ============================================================================

@app.get("/novels", response_model=List[ListingEntry], tags=["Browse"])
async def list_novels(
    page: int = Query(1, ge=1),
    category: str = Query(DEFAULT_CATEGORY, pattern=r"^[0-3]$"),
    sort: str = Query(DEFAULT_SORT, pattern=r"^[1-8]$"),
    tag: List[str] = Query([]),
    adapter: ESJZoneAdapter = Depends(get_adapter),
):
    """
    List works by category and sort order.

    Any number of tags may be given; with several tags only page 1 has
    results.
    """
    filters = ListingFilters(
        category=category,
        sort=sort,
        tags=AutocompleteTagInput(value=tag),
    )
    return await adapter.popular_novels(page, filters)


@app.post("/novels/query", response_model=List[ListingEntry], tags=["Browse"])
async def query_novels(
    request: ListingRequest,
    adapter: ESJZoneAdapter = Depends(get_adapter),
):
    """List works using a full filter value (any tag input kind)."""
    return await adapter.popular_novels(request.page, request.filters)


@app.get("/search", response_model=List[ListingEntry], tags=["Browse"])
async def search_novels(
    term: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    adapter: ESJZoneAdapter = Depends(get_adapter),
):
    """Search by tag name. An unreachable site yields an empty list."""
    return await adapter.search_novels(term, page)


@app.get("/filters", response_model=FilterDefinitions, tags=["Browse"])
async def get_filters(adapter: ESJZoneAdapter = Depends(get_adapter)):
    """Filter inputs, with tag suggestions from the vocabulary."""
    return await adapter.refresh_filters()


@app.get("/tags", response_model=TagVocabularyResponse, tags=["Browse"])
async def list_tags(adapter: ESJZoneAdapter = Depends(get_adapter)):
    """All tags seen so far."""
    options = await asyncio.to_thread(adapter.vocabulary.as_filter_options)
    items = [option.value for option in options]
    return TagVocabularyResponse(items=items, total=len(items))


# ============================================================================
# Work Endpoints
# ============================================================================

@app.get("/novel", response_model=WorkMetadata, tags=["Works"])
async def get_novel(
    path: str = Query(..., pattern=r"^/"),
    adapter: ESJZoneAdapter = Depends(get_adapter),
):
    """Work metadata and chapter list."""
    return await adapter.parse_novel(path)


@app.get("/chapter", response_model=ChapterContentResponse, tags=["Works"])
async def get_chapter(
    path: str = Query(..., pattern=r"^/"),
    adapter: ESJZoneAdapter = Depends(get_adapter),
):
    """Sanitized chapter markup, or a notice when the chapter is gated."""
    content = await adapter.parse_chapter(path)
    return ChapterContentResponse(path=path, content=content)


@app.get("/comments", response_model=List[CommentEntry], tags=["Works"])
async def get_comments(
    path: str = Query(..., pattern=r"^/"),
    adapter: ESJZoneAdapter = Depends(get_adapter),
):
    """Discussion comments of a work."""
    return await adapter.fetch_comments(path)


# ============================================================================
# Library Endpoints
# ============================================================================

@app.get("/works", response_model=List[WorkListItem], tags=["Library"])
def list_works(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_sync_db),
):
    """Works downloaded with the esjzone spider."""
    works = db.query(Work).order_by(Work.updated_at.desc()).limit(limit).all()
    return [
        WorkListItem(
            id=work.id,
            path=work.path,
            title=work.title,
            status=work.status,
            word_count=work.word_count,
            chapter_count=len(work.chapters),
        )
        for work in works
    ]


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "esjzone-adapter"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
