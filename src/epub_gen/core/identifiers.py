"""Random identifiers for books and packaged resources."""

import uuid


def new_book_id() -> str:
    """Return a random version-4 UUID string for ``dc:identifier``."""
    return str(uuid.uuid4())


def new_resource_id() -> str:
    """Return a random id used as the file stem of a packaged image."""
    return str(uuid.uuid4())
