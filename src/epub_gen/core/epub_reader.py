"""Read a finished EPUB back through ebooklib."""

import warnings
from pathlib import Path

import ebooklib
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from ebooklib import epub

from epub_gen.models.epub import BookMetadata, ContentDocument, NavEntry, ParsedEpub

warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)


class EpubReader:
    """Inspect an EPUB the way a reading system would load it."""

    def __init__(self, epub_path: Path):
        self.path = epub_path
        self.book = epub.read_epub(str(epub_path), options={"ignore_ncx": False})

    def parse(self) -> ParsedEpub:
        return ParsedEpub(
            version=getattr(self.book, "version", None),
            metadata=self._metadata(),
            navigation=self._navigation(self.book.toc),
            documents=self._documents(),
            spine=[idref for idref, _linear in self.book.spine],
            image_count=len(list(self.book.get_items_of_type(ebooklib.ITEM_IMAGE))),
        )

    def _first(self, name: str) -> str | None:
        values = self.book.get_metadata("DC", name)
        return values[0][0] if values else None

    def _metadata(self) -> BookMetadata:
        creators = self.book.get_metadata("DC", "creator")
        return BookMetadata(
            identifier=self._first("identifier"),
            title=self._first("title") or "Unknown Title",
            authors=[value for value, _attrs in creators],
            language=self._first("language"),
            publisher=self._first("publisher"),
            date=self._first("date"),
        )

    def _navigation(self, items: list, level: int = 0) -> list[NavEntry]:
        entries = []
        for item in items:
            # Sections with children come back as (Section, [children])
            if isinstance(item, tuple):
                section, children = item
                nested = self._navigation(children, level + 1)
            else:
                section, nested = item, []
            entries.append(
                NavEntry(
                    title=section.title or "Untitled",
                    href=section.href or "",
                    level=level,
                    children=nested,
                )
            )
        return entries

    def _documents(self) -> list[ContentDocument]:
        documents = []
        for item in self.book.get_items_of_type(ebooklib.ITEM_DOCUMENT):
            soup = BeautifulSoup(item.get_content(), "lxml")
            heading = soup.find("h1")
            body = soup.body or soup
            documents.append(
                ContentDocument(
                    id=item.get_id(),
                    file_name=item.get_name(),
                    heading=heading.get_text(strip=True) if heading else None,
                    word_count=len(body.get_text(separator=" ", strip=True).split()),
                    has_images=body.find("img") is not None,
                )
            )
        return documents
