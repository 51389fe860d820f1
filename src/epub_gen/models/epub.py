"""Data models for an EPUB read back from disk."""

from pydantic import BaseModel, Field


class NavEntry(BaseModel):
    """Navigation entry as a reading system sees it."""

    title: str
    href: str
    level: int = 0
    children: list["NavEntry"] = Field(default_factory=list)

    @property
    def file_name(self) -> str:
        """Target document without fragment or directory."""
        return self.href.split("#", 1)[0].rsplit("/", 1)[-1]


class ContentDocument(BaseModel):
    """An XHTML document listed in the manifest."""

    id: str
    file_name: str
    heading: str | None = None
    word_count: int = 0
    has_images: bool = False


class BookMetadata(BaseModel):
    identifier: str | None = None
    title: str
    authors: list[str] = Field(default_factory=list)
    language: str | None = None
    publisher: str | None = None
    date: str | None = None


class ParsedEpub(BaseModel):
    """What an EPUB on disk declares: metadata, navigation, spine, files."""

    version: str | None = None
    metadata: BookMetadata
    navigation: list[NavEntry]
    documents: list[ContentDocument]
    spine: list[str] = Field(default_factory=list)
    image_count: int = 0

    def flat_navigation(self) -> list[NavEntry]:
        """Navigation entries in reading order, nested ones included."""
        flat: list[NavEntry] = []
        stack = list(reversed(self.navigation))
        while stack:
            entry = stack.pop()
            flat.append(entry)
            stack.extend(reversed(entry.children))
        return flat
