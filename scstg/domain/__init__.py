"""Domain layer for the guide's documents."""

from .document import (
    CHAPTER_NAME_PATTERN,
    BuildResult,
    ChapterDocument,
    DocumentSource,
    Fragment,
    MetadataDocument,
)
from .content import ImageRef, PreprocessReport

__all__ = [
    "CHAPTER_NAME_PATTERN",
    "BuildResult",
    "ChapterDocument",
    "DocumentSource",
    "Fragment",
    "MetadataDocument",
    "ImageRef",
    "PreprocessReport",
]
