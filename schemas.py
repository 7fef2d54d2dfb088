"""Pydantic schemas for the adapter's domain model and API responses."""
from pydantic import BaseModel, Field, ConfigDict
from typing import Annotated, Literal, Optional, List, Union
from models import NovelStatus, GateState


# Filter defaults
DEFAULT_CATEGORY = "1"
DEFAULT_SORT = "1"
PUBLIC_CATEGORY = "2"
FILTER_SCHEMA_VERSION = 3


# Domain Schemas
class ListingEntry(BaseModel):
    """One row of a listing or search result."""
    name: str
    path: str = Field(..., min_length=1)
    cover: str
    badge: Optional[str] = Field(None, description="Adult-content badge, e.g. 18+ or R-18")
    info: Optional[str] = Field(None, description="Rating / word count summary")


class ChapterEntry(BaseModel):
    """Chapter of a work, numbered in document order."""
    name: str
    path: str
    chapter_number: int = Field(..., ge=1)
    release_time: Optional[str] = None


class WorkMetadata(BaseModel):
    """Full metadata of a work parsed from its detail page."""
    path: str
    name: str
    cover: str
    author: Optional[str] = None
    status: NovelStatus = NovelStatus.ONGOING
    rating: Optional[float] = None
    summary: Optional[str] = None
    genres: Optional[str] = Field(None, description="Comma-joined tag list, for display")
    tags: List[str] = Field([], description="Tags as extracted; a tag may itself contain commas")
    word_count: Optional[int] = Field(None, gt=0)
    chapters: List[ChapterEntry] = []


class CommentEntry(BaseModel):
    """A single discussion comment."""
    author: str
    content: str
    date: Optional[str] = None
    avatar: Optional[str] = None


class ReadingContent(BaseModel):
    """Result of sanitizing a reading page."""
    state: GateState
    html: str
    found: bool = True

    @property
    def readable(self) -> bool:
        return self.state == GateState.NORMAL and self.found


# Filter Schemas
class FilterOption(BaseModel):
    """Selectable option of a filter input."""
    label: str
    value: str


class TextTagInput(BaseModel):
    """Free-text tag input (one tag)."""
    kind: Literal["text"] = "text"
    value: str = ""

    def selected_tags(self) -> List[str]:
        tag = self.value.strip()
        return [tag] if tag else []


class CheckboxTagInput(BaseModel):
    """Checkbox group over a fixed tag list."""
    kind: Literal["checkbox"] = "checkbox"
    value: List[str] = []

    def selected_tags(self) -> List[str]:
        tags = []
        for raw in self.value:
            tag = raw.strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags


class AutocompleteTagInput(BaseModel):
    """Autocomplete input backed by the tag vocabulary.

    Tags that differ only in case or surrounding whitespace are the same
    selection; the first spelling wins.
    """
    kind: Literal["autocomplete"] = "autocomplete"
    value: List[str] = []

    def selected_tags(self) -> List[str]:
        tags = []
        seen = set()
        for raw in self.value:
            tag = raw.strip()
            norm = tag.lower()
            if not tag or norm in seen:
                continue
            seen.add(norm)
            tags.append(tag)
        return tags


TagInput = Annotated[
    Union[TextTagInput, CheckboxTagInput, AutocompleteTagInput],
    Field(discriminator="kind"),
]


class ListingFilters(BaseModel):
    """Filter values passed into the listing entry point."""
    version: int = FILTER_SCHEMA_VERSION
    category: str = Field(DEFAULT_CATEGORY, pattern=r"^[0-3]$")
    sort: str = Field(DEFAULT_SORT, pattern=r"^[1-8]$")
    tags: TagInput = Field(default_factory=AutocompleteTagInput)

    model_config = ConfigDict(frozen=True)

    def selected_tags(self) -> List[str]:
        return self.tags.selected_tags()

    @property
    def has_default_order(self) -> bool:
        """True when neither category nor sort differ from the defaults."""
        return self.category == DEFAULT_CATEGORY and self.sort == DEFAULT_SORT


class PickerFilter(BaseModel):
    """Single-choice picker definition."""
    label: str
    value: str
    options: List[FilterOption]
    type: Literal["picker"] = "picker"


class TagFilter(BaseModel):
    """Tag input definition with vocabulary suggestions."""
    label: str
    value: List[str] = []
    options: List[FilterOption] = []
    type: Literal["autocomplete-multi"] = "autocomplete-multi"


class FilterDefinitions(BaseModel):
    """Filter surface rendered by the host."""
    version: int = FILTER_SCHEMA_VERSION
    category: PickerFilter
    sort: PickerFilter
    tag: TagFilter


# API Schemas
class ChapterContentResponse(BaseModel):
    """Sanitized chapter content."""
    path: str
    content: str


class TagVocabularyResponse(BaseModel):
    """Known tags."""
    items: List[str]
    total: int


class WorkListItem(BaseModel):
    """Downloaded work list item."""
    id: int
    path: str
    title: str
    status: NovelStatus
    word_count: int
    chapter_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class ListingRequest(BaseModel):
    """Listing query with a full filter value."""
    page: int = Field(1, ge=1)
    filters: ListingFilters = Field(default_factory=ListingFilters)
