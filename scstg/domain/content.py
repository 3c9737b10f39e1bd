"""Domain models for content features.

Provides dataclasses for image references found in chapters and the
summary of rewrites applied while preparing the build folder.
"""

from dataclasses import dataclass, field


@dataclass
class ImageRef:
    """A reference to an image in chapter content."""

    alt_text: str
    path: str
    line_number: int
    chapter: str = ""
    is_html: bool = False  # <img> tag rather than ![alt](path)
    exists: bool = True  # Validated against the source folder

    @property
    def is_external(self) -> bool:
        return self.path.startswith(("http://", "https://", "//", "data:"))


@dataclass
class FileRewrite:
    """Rewrites applied to a single file."""

    comments: int = 0
    images: int = 0

    @property
    def changed(self) -> bool:
        return self.comments > 0 or self.images > 0


@dataclass
class PreprocessReport:
    """Per-file rewrite counts for a build folder."""

    files: dict[str, FileRewrite] = field(default_factory=dict)

    @property
    def comments(self) -> int:
        """Total HTML comments unwrapped."""
        return sum(f.comments for f in self.files.values())

    @property
    def images(self) -> int:
        """Total HTML images converted."""
        return sum(f.images for f in self.files.values())

    def record(self, name: str, comments: int = 0, images: int = 0) -> None:
        entry = self.files.setdefault(name, FileRewrite())
        entry.comments += comments
        entry.images += images
