from __future__ import annotations

from pathlib import Path

import pytest

from epub_gen.models.book import EpubOptions
from helpers import PNG_BYTES


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    path = tmp_path / "pic.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def book() -> EpubOptions:
    return EpubOptions(
        title="Field Notes",
        author=["Ada Lovelace"],
        content=[{"content": "<p>one</p>"}],
        id="0b3f3f1e-1111-4222-8333-444455556666",
        date="2024-01-02T03:04:05+00:00",
    )
