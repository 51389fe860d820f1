"""Data model shared by the OPF, NCX and HTML table of contents."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

XHTML_MEDIA_TYPE = "application/xhtml+xml"
NCX_MEDIA_TYPE = "application/x-dtbncx+xml"
CSS_MEDIA_TYPE = "text/css"

TOC_ID = "toc"
TOC_HREF = "toc.xhtml"
NCX_ID = "ncx"
NCX_HREF = "toc.ncx"
CSS_ID = "css"
CSS_HREF = "style.css"
COVER_ID = "image_cover"


class ChapterEntry(BaseModel):
    """Chapter descriptor as seen by the structural documents."""

    model_config = ConfigDict(frozen=True)

    index: int
    id: str
    manifest_id: str
    href: str
    title: str | None = None
    display_title: str
    authors: list[str] = Field(default_factory=list)
    url: str | None = None
    before_toc: bool = False
    exclude_from_toc: bool = False
    play_order: int | None = None  # None when excluded from the TOC


class ImageEntry(BaseModel):
    """An image referenced by chapter content."""

    model_config = ConfigDict(frozen=True)

    url: str
    id: str
    extension: str
    media_type: str

    @property
    def href(self) -> str:
        return f"images/{self.id}.{self.extension}"


class FontEntry(BaseModel):
    """An embedded font file."""

    model_config = ConfigDict(frozen=True)

    source: str
    filename: str
    media_type: str

    @property
    def href(self) -> str:
        return f"fonts/{self.filename}"


class CoverEntry(BaseModel):
    """The cover image, stored beside the package document."""

    model_config = ConfigDict(frozen=True)

    source: str
    extension: str
    media_type: str

    @property
    def id(self) -> str:
        return COVER_ID

    @property
    def href(self) -> str:
        return f"cover.{self.extension}"


class ManifestItem(BaseModel):
    """Single ``<item>`` of the OPF manifest."""

    model_config = ConfigDict(frozen=True)

    id: str
    href: str
    media_type: str
    properties: str | None = None


class SpineItem(BaseModel):
    """Single ``<itemref>`` of the OPF spine."""

    model_config = ConfigDict(frozen=True)

    idref: str


class NavPoint(BaseModel):
    """Navigation entry with its play order.

    The NCX and the HTML table of contents both iterate the same list of
    nav points, so their ordering can never disagree.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    kind: Literal["chapter", "toc"]
    play_order: int
    href: str
    label: str  # NCX label, numbered for chapters
    title: str  # HTML TOC label
    authors: list[str] = Field(default_factory=list)
    url: str | None = None


class PackageModel(BaseModel):
    """Everything the structural documents need, computed once."""

    model_config = ConfigDict(frozen=True)

    chapters: list[ChapterEntry]  # spine order
    manifest: list[ManifestItem]
    spine: list[SpineItem]
    nav_points: list[NavPoint]
    images: list[ImageEntry] = Field(default_factory=list)
    fonts: list[FontEntry] = Field(default_factory=list)
    cover: CoverEntry | None = None

    @property
    def toc_entries(self) -> list[NavPoint]:
        """Chapter nav points listed in the HTML table of contents."""
        return [point for point in self.nav_points if point.kind == "chapter"]

    @property
    def play_orders(self) -> list[int]:
        return [point.play_order for point in self.nav_points]
