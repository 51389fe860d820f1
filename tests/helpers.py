"""Shared helpers for the test suite."""

from __future__ import annotations

import io
import zipfile

from epub_gen.models.book import Chapter

# Opaque image payload; nothing in the pipeline decodes it
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f6d0000000049454e44ae426082"
)


def open_epub(data: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(data))


def read_entry(data: bytes, name: str) -> str:
    with open_epub(data) as archive:
        return archive.read(name).decode("utf-8")


def make_chapters(*overrides: dict) -> list[Chapter]:
    """Build pipeline chapters; each dict holds Chapter fields except index."""
    chapters = []
    for index, override in enumerate(overrides):
        fields = {"content": "<p>text</p>", **override}
        chapters.append(Chapter(index=index, **fields))
    return chapters
