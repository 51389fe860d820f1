"""Write EPUB entries into a zip container."""

import io
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from epub_gen.errors import ArchiveError

MIMETYPE_ENTRY = "mimetype"


@dataclass(frozen=True)
class ArchiveEntry:
    """One file of the container, addressed by its archive-relative path."""

    path: str
    data: bytes

    @classmethod
    def text(cls, path: str, content: str) -> "ArchiveEntry":
        return cls(path=path, data=content.encode("utf-8"))


def write_archive(entries: Iterable[ArchiveEntry], target: Path | None = None) -> bytes:
    """Zip ``entries`` and return the archive bytes.

    The ``mimetype`` entry is written first and stored uncompressed, as
    required for file-type sniffing; every other entry is deflated in the
    given order. When ``target`` is given the archive is also written
    there. Nothing partial is left behind on failure.

    Raises:
        ArchiveError: If the entries are invalid or the archive cannot be
            written.
    """
    entries = list(entries)
    mimetype = [e for e in entries if e.path == MIMETYPE_ENTRY]
    if len(mimetype) != 1:
        raise ArchiveError("exactly one mimetype entry is required")

    seen: set[str] = set()
    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr(
                zipfile.ZipInfo(MIMETYPE_ENTRY), mimetype[0].data, compress_type=zipfile.ZIP_STORED
            )
            seen.add(MIMETYPE_ENTRY)
            for entry in entries:
                if entry.path == MIMETYPE_ENTRY:
                    continue
                if entry.path in seen:
                    raise ArchiveError(f"duplicate archive entry: {entry.path}")
                seen.add(entry.path)
                archive.writestr(
                    entry.path,
                    entry.data,
                    compress_type=zipfile.ZIP_DEFLATED,
                    compresslevel=9,
                )
    except (OSError, ValueError, zipfile.BadZipFile) as exc:
        raise ArchiveError(str(exc)) from exc

    data = buffer.getvalue()
    if target is not None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            if target.is_file():
                target.unlink()
            raise ArchiveError(f"cannot write {target}: {exc}") from exc
    return data
