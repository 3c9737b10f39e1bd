"""Source folder service implementation.

Locates the metadata file and chapters of a guide folder, parses the
metadata front-matter and copies the folder into the build directory.
"""

import logging
import shutil
from pathlib import Path
from typing import Any

import yaml

from ..config import BuildConfig
from ..domain import ChapterDocument, DocumentSource, MetadataDocument
from ..errors import SourceError

logger = logging.getLogger(__name__)


def parse_front_matter(text: str) -> dict[str, Any]:
    """Parse YAML metadata from a Markdown document.

    Accepts either a ``---`` fenced block at the top of the file or a file
    that is a bare YAML mapping.

    Args:
        text: The document content.

    Returns:
        The parsed mapping, empty when the document carries no metadata.

    Raises:
        SourceError: If the YAML is malformed or not a mapping.
    """
    stripped = text.lstrip("\ufeff")
    if stripped.startswith("---"):
        lines = stripped.splitlines()
        block: list[str] = []
        for line in lines[1:]:
            if line.rstrip() in ("---", "..."):
                break
            block.append(line)
        else:
            raise SourceError("Unterminated metadata block")
        payload = "\n".join(block)
    else:
        payload = stripped

    if not payload.strip():
        return {}

    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as e:
        if stripped.startswith("---"):
            raise SourceError(f"Invalid metadata: {e}") from e
        # Plain Markdown without front-matter
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        if stripped.startswith("---"):
            raise SourceError("Metadata block must be a mapping")
        return {}
    return data


class SourceService:
    """Service for reading a guide source folder."""

    def __init__(self, config: BuildConfig) -> None:
        self._config = config

    def find_chapters(self, folder: Path) -> list[ChapterDocument]:
        """List chapter files in filename order."""
        paths = sorted(
            (p for p in folder.glob(self._config.CHAPTER_GLOB) if p.is_file()),
            key=lambda p: p.name,
        )
        return [ChapterDocument(path=p) for p in paths]

    def load_metadata(self, folder: Path) -> MetadataDocument:
        """Read and parse the folder's metadata file.

        Raises:
            SourceError: If the metadata file is missing or malformed.
        """
        path = folder / self._config.METADATA_FILE
        if not path.is_file():
            raise SourceError(f"Metadata file not found: {path}")
        fields = parse_front_matter(path.read_text(encoding="utf-8"))
        return MetadataDocument(path=path, fields=fields)

    def load_source(self, folder: Path) -> DocumentSource:
        """Validate a source folder and describe its contents.

        Args:
            folder: The folder holding ``metadata.md`` and ``0x*.md`` files.

        Returns:
            A DocumentSource with metadata and sorted chapters.

        Raises:
            SourceError: If the folder, its metadata or its chapters are missing.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise SourceError(f"Source folder not found: {folder}")

        metadata = self.load_metadata(folder)
        chapters = self.find_chapters(folder)
        if not chapters:
            raise SourceError(
                f"No chapter files matching {self._config.CHAPTER_GLOB} in {folder}"
            )

        logger.debug("Found %d chapter(s) in %s", len(chapters), folder)
        return DocumentSource(root=folder, metadata=metadata, chapters=chapters)

    def prepare_build_dir(self, folder: Path, build_dir: Path) -> Path:
        """Copy the source folder into a fresh build directory.

        Any existing build directory is removed first.

        Returns:
            The build directory path.
        """
        if build_dir.exists():
            logger.debug("Removing stale build directory %s", build_dir)
            shutil.rmtree(build_dir)
        shutil.copytree(folder, build_dir)
        logger.debug("Copied %s to %s", folder, build_dir)
        return build_dir
