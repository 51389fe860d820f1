"""Errors raised while generating an EPUB."""


class EpubGenerationError(Exception):
    """Fatal failure of an EPUB build.

    Every error that aborts a build is (or is wrapped in) one of these, so
    callers only need a single ``except`` clause.
    """

    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"{stage}: {message}")


class PreconditionError(EpubGenerationError, ValueError):
    """Required book input (title or content list) is missing."""

    def __init__(self, message: str = "Title and content are both required"):
        super().__init__("options", message)


class TemplateRenderError(EpubGenerationError):
    """A structural or chapter document failed to render."""

    def __init__(self, document: str, message: str):
        self.document = document
        super().__init__("render", f"{document}: {message}")


class ImageFetchError(EpubGenerationError):
    """An image, cover or font could not be retrieved in strict mode."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__("resources", f"{source}: {message}")


class ArchiveError(EpubGenerationError):
    """Writing the zip container failed."""

    def __init__(self, message: str):
        super().__init__("archive", message)
