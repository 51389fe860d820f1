"""Data models for book input and processed chapters."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from epub_gen.core.identifiers import new_book_id

DEFAULT_AUTHOR = "anonymous"
DEFAULT_PUBLISHER = "anonymous"
DEFAULT_TOC_TITLE = "Table Of Contents"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChapterOptions(BaseModel):
    """One chapter as supplied by the caller."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: str
    title: str | None = None
    author: list[str] | None = None
    url: str | None = None
    before_toc: bool = Field(default=False, alias="beforeToc")
    exclude_from_toc: bool = Field(default=False, alias="excludeFromToc")

    @field_validator("author", mode="before")
    @classmethod
    def _single_author(cls, value: Any) -> Any:
        # A single name is accepted where a list is expected
        if isinstance(value, str):
            return [value]
        return value


class TemplateOptions(BaseModel):
    """Custom jinja2 sources for the three structural documents."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    opf: str | None = Field(default=None, alias="customOpfTemplate")
    ncx: str | None = Field(default=None, alias="customNcxTocTemplate")
    html_toc: str | None = Field(default=None, alias="customHtmlTocTemplate")


class EpubOptions(BaseModel):
    """Complete, immutable description of a book to generate.

    Built once; every optional field has a documented default. Field names
    accept both the snake_case attribute and the camelCase alias.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(min_length=1)
    content: list[ChapterOptions]
    description: str | None = None
    publisher: str = DEFAULT_PUBLISHER
    author: list[str] = Field(default_factory=lambda: [DEFAULT_AUTHOR])
    toc_title: str = Field(default=DEFAULT_TOC_TITLE, alias="tocTitle")
    append_chapter_titles: bool = Field(default=True, alias="appendChapterTitles")
    date: str = Field(default_factory=_utc_timestamp)
    lang: str = "en"
    version: Literal[2, 3] = 3
    id: str = Field(default_factory=new_book_id)
    cover: str | None = None
    css: str | None = None
    fonts: list[str] = Field(default_factory=list)
    verbose: bool = False
    proxy: str | None = None
    template: TemplateOptions | None = None
    # Resource fetching
    strict_images: bool = Field(default=False, alias="strictImages")
    image_workers: int = Field(default=4, ge=1, alias="imageWorkers")
    image_timeout: float = Field(default=10.0, gt=0, alias="imageTimeout")
    image_retries: int = Field(default=2, ge=0, alias="imageRetries")
    assets_dir: Path | None = Field(default=None, alias="assetsDir")

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Description falls back to the title
        if not data.get("description") and data.get("title"):
            data["description"] = data["title"]
        # An empty author list is as good as none
        if not data.get("author"):
            data.pop("author", None)
        return data

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _wrap_bare_fragments(cls, value: Any) -> Any:
        # Plain strings are accepted as chapters with no metadata
        if isinstance(value, (list, tuple)):
            return [{"content": item} if isinstance(item, str) else item for item in value]
        return value

    @field_validator("author", mode="before")
    @classmethod
    def _single_author(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value


class Chapter(BaseModel):
    """A chapter moving through the build pipeline.

    Created from :class:`ChapterOptions`; its content is replaced once by
    the sanitizer and once by the normalizer via ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    index: int
    content: str
    title: str | None = None
    authors: list[str] = Field(default_factory=list)
    url: str | None = None
    before_toc: bool = False
    exclude_from_toc: bool = False

    @property
    def id(self) -> str:
        return f"item_{self.index}"

    @property
    def filename(self) -> str:
        return f"content_{self.index}.xhtml"

    @property
    def manifest_id(self) -> str:
        return f"content_{self.index}_{self.id}"

    @property
    def number(self) -> int:
        """1-based chapter number used in generated labels."""
        return self.index + 1

    @property
    def display_title(self) -> str:
        return self.title or f"Chapter {self.number}"

    @classmethod
    def from_options(
        cls, index: int, options: ChapterOptions, book_authors: list[str]
    ) -> "Chapter":
        """Create the pipeline chapter for position ``index``."""
        return cls(
            index=index,
            content=options.content,
            title=options.title,
            authors=list(options.author) if options.author is not None else list(book_authors),
            url=options.url,
            before_toc=options.before_toc,
            exclude_from_toc=options.exclude_from_toc,
        )
