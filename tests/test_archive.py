from __future__ import annotations

import zipfile

import pytest

from epub_gen.core.archive import ArchiveEntry, write_archive
from epub_gen.errors import ArchiveError
from helpers import open_epub

MIMETYPE = ArchiveEntry.text("mimetype", "application/epub+zip")


def _entries():
    return [
        ArchiveEntry.text("META-INF/container.xml", "<container/>"),
        MIMETYPE,
        ArchiveEntry.text("OEBPS/content_0.xhtml", "<html/>" * 50),
    ]


def test_mimetype_is_first_and_stored():
    data = write_archive(_entries())

    # local file header: 30 fixed bytes, then the name, then the data
    assert data[30:38] == b"mimetype"
    assert data[38:58] == b"application/epub+zip"
    with open_epub(data) as archive:
        infos = archive.infolist()
        assert infos[0].filename == "mimetype"
        assert infos[0].compress_type == zipfile.ZIP_STORED
        assert not infos[0].extra


def test_other_entries_are_deflated_in_order():
    with open_epub(write_archive(_entries())) as archive:
        infos = archive.infolist()[1:]
        assert [i.filename for i in infos] == ["META-INF/container.xml", "OEBPS/content_0.xhtml"]
        assert {i.compress_type for i in infos} == {zipfile.ZIP_DEFLATED}
        assert archive.read("OEBPS/content_0.xhtml") == b"<html/>" * 50


@pytest.mark.parametrize("entries", [[], [MIMETYPE, MIMETYPE]])
def test_exactly_one_mimetype_is_required(entries):
    with pytest.raises(ArchiveError):
        write_archive(entries)


def test_duplicate_paths_are_rejected():
    entries = _entries() + [ArchiveEntry.text("OEBPS/content_0.xhtml", "again")]
    with pytest.raises(ArchiveError, match="duplicate"):
        write_archive(entries)


def test_writes_target_file(tmp_path):
    target = tmp_path / "out" / "book.epub"
    data = write_archive(_entries(), target)
    assert target.read_bytes() == data


def test_unwritable_target_raises(tmp_path):
    with pytest.raises(ArchiveError):
        write_archive(_entries(), tmp_path)
    assert tmp_path.is_dir()
