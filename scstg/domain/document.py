"""Domain models for the guide's source documents and build artifacts.

Provides dataclasses for chapter and metadata documents, the LaTeX
fragments rendered before the PDF pass, and the result of a build.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


# Chapter files are named 0x<hex number>-<slug>.md
CHAPTER_NAME_PATTERN = re.compile(r"^0x([0-9a-fA-F]+)(?:-(.*))?\.md$")


@dataclass(frozen=True)
class ChapterDocument:
    """A single chapter file of the guide."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def number(self) -> Optional[int]:
        """Numeric prefix of the filename (``0x0a-...`` is 10)."""
        match = CHAPTER_NAME_PATTERN.match(self.path.name)
        if match is None:
            return None
        return int(match.group(1), 16)

    @property
    def slug(self) -> str:
        match = CHAPTER_NAME_PATTERN.match(self.path.name)
        if match is None or not match.group(2):
            return self.path.stem
        return match.group(2)

    @property
    def title(self) -> str:
        """Title derived from the slug, e.g. ``Smart-Contract-Basics``."""
        return self.slug.replace("-", " ").replace("_", " ").strip()


@dataclass
class MetadataDocument:
    """The metadata file consumed by the Pandoc templates."""

    path: Path
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return str(self.fields.get("title", "") or "")

    @property
    def author(self) -> str:
        author = self.fields.get("author", "")
        if isinstance(author, list):
            return ", ".join(str(a) for a in author)
        return str(author or "")


@dataclass
class DocumentSource:
    """A source folder holding the metadata file and the chapters."""

    root: Path
    metadata: MetadataDocument
    chapters: list[ChapterDocument] = field(default_factory=list)


@dataclass(frozen=True)
class Fragment:
    """A LaTeX template and the intermediate file it renders to."""

    name: str
    template: Path
    output: Path


@dataclass
class BuildResult:
    """Artifacts written by a build run."""

    pdf: Optional[Path] = None
    epub: Optional[Path] = None

    @property
    def artifacts(self) -> list[Path]:
        return [p for p in (self.pdf, self.epub) if p is not None]
