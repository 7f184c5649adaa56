"""Errors raised while indexing the documentation tree."""


class IndexingError(Exception):
    """Base class for failures that exclude a node from the index."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class SourceUnavailable(IndexingError):
    """Listing a directory or reading a file from the content source failed."""


class MetadataMalformed(IndexingError):
    """A metadata file exists but does not parse into the expected shape."""


class NodeIncomplete(IndexingError):
    """A directory is missing one of its required files."""
