"""Content analysis service implementation.

Provides functionality to extract image references from chapters and
report the ones whose files are missing from the source folder.
"""

import re
from pathlib import Path
from urllib.parse import unquote

from ..domain import ChapterDocument, DocumentSource, ImageRef
from .preprocess_service import IMG_TAG_PATTERN, parse_img_attributes


class ContentService:
    """Service for analyzing chapter content."""

    # Pattern for markdown images: ![alt](path) or ![alt](path "title")
    IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(\s*<?([^)\s>]+)>?(?:\s+[\"'][^)]*[\"'])?\s*\)")

    def extract_images(self, content: str, chapter: str = "") -> list[ImageRef]:
        """Extract image references from markdown content.

        Finds both ![alt](path) and <img src="..."> references.

        Args:
            content: The markdown content to analyze.
            chapter: Name of the chapter file, stored on each reference.

        Returns:
            List of ImageRef objects, in document order.
        """
        images: list[ImageRef] = []

        for line_num, line in enumerate(content.split("\n"), start=1):
            found: list[tuple[int, ImageRef]] = []
            for match in self.IMAGE_PATTERN.finditer(line):
                found.append(
                    (
                        match.start(),
                        ImageRef(
                            alt_text=match.group(1),
                            path=match.group(2),
                            line_number=line_num,
                            chapter=chapter,
                        ),
                    )
                )
            for match in IMG_TAG_PATTERN.finditer(line):
                attrs = parse_img_attributes(match.group(1))
                if not attrs.get("src"):
                    continue
                found.append(
                    (
                        match.start(),
                        ImageRef(
                            alt_text=attrs.get("alt", ""),
                            path=attrs["src"],
                            line_number=line_num,
                            chapter=chapter,
                            is_html=True,
                        ),
                    )
                )
            images.extend(ref for _, ref in sorted(found, key=lambda item: item[0]))

        return images

    def chapter_images(self, chapter: ChapterDocument, root: Path) -> list[ImageRef]:
        """Extract and validate the images of one chapter file."""
        content = chapter.path.read_text(encoding="utf-8")
        images = self.extract_images(content, chapter.name)
        for image in images:
            if not image.is_external:
                image.exists = self._resolve_image_path(
                    image.path, chapter.path, root
                ).exists()
        return images

    def validate_images(self, source: DocumentSource) -> list[ImageRef]:
        """Validate that all referenced images exist.

        Args:
            source: The source folder to check.

        Returns:
            List of ImageRef objects for missing images only.
        """
        missing: list[ImageRef] = []
        for chapter in source.chapters:
            missing.extend(
                img for img in self.chapter_images(chapter, source.root) if not img.exists
            )
        return missing

    def _resolve_image_path(self, img_path: str, chapter_path: Path, root: Path) -> Path:
        """Resolve an image path the way Pandoc's resource path does.

        Paths are tried relative to the chapter's folder first, then
        relative to the folder above the source (Pandoc runs from there
        with ``--resource-path=.:build``).
        """
        img_path = unquote(img_path.split("#", 1)[0].split("?", 1)[0])
        if img_path.startswith("./"):
            img_path = img_path[2:]

        candidate = (chapter_path.parent / img_path).resolve()
        if candidate.exists():
            return candidate
        fallback = (root.parent / img_path).resolve()
        if fallback.exists():
            return fallback
        return candidate
