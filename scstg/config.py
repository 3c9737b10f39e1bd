"""
Configuration settings for the OWASP SCSTG document build
"""

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional


@dataclass
class BuildConfig:
    """Configuration for a build run.

    Defaults reproduce the guide's historical build. Every field can be
    overridden from the environment via :meth:`from_env`.
    """

    # Positional inputs
    DEFAULT_FOLDER = "Document"
    DEFAULT_VERSION = "SNAPSHOT"

    # Fixed layout
    BUILD_DIR = "build"
    METADATA_FILE = "metadata.md"
    CHAPTER_GLOB = "0x*.md"
    OUTPUT_BASE_NAME = "OWASP_SCSTG"
    CONTAINER_WORKDIR = "/pandoc"

    # Fragments rendered from metadata before the PDF pass, in order
    FRAGMENT_TEMPLATES = [
        ("header", "latex-header.tex", "tmp_latex-header.latex"),
        ("cover", "cover.tex", "tmp_cover.latex"),
        ("first_page", "first_page.tex", "tmp_first_page.latex"),
    ]

    # PDF settings
    PDF_ENGINE = "xelatex"
    PDF_COLUMNS = 50
    HIGHLIGHT_STYLE = "tango"
    FONT_SIZE = "10pt"

    scstg_version: str = DEFAULT_VERSION
    scsvs_version: str = DEFAULT_VERSION
    image: str = "dalibo/pandocker"
    tag: str = "23.03"  # use stable-full for non-european languages
    latex_template: str = "eisvogel"
    title: Optional[str] = None
    pandoc_params: list[str] = field(default_factory=list)
    verbose: bool = False
    pandoc: Optional[str] = None
    template_dir: Path = Path("src/pandocker")
    epub_author: str = "Shashank, Pratik Lagaskar and Nehal Pillai"
    cover_image: str = "cover.png"
    source_date_epoch: Optional[str] = None

    @property
    def effective_title(self) -> str:
        """Title used for both books."""
        if self.title:
            return self.title
        return f"OWASP Smart Contract Security Testing Guide {self.scstg_version}"

    @property
    def container_image(self) -> str:
        return f"{self.image}:{self.tag}"

    @property
    def pandoc_command(self) -> Optional[list[str]]:
        """The local Pandoc command line, or None to use the container."""
        if not self.pandoc:
            return None
        return shlex.split(self.pandoc)

    @classmethod
    def from_env(
        cls,
        scstg_version: Optional[str] = None,
        scsvs_version: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "BuildConfig":
        """Build a configuration from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            scstg_version=scstg_version or cls.DEFAULT_VERSION,
            scsvs_version=scsvs_version or cls.DEFAULT_VERSION,
            image=env.get("IMG") or cls.image,
            tag=env.get("TAG") or cls.tag,
            latex_template=env.get("LATEX_TEMPLATE") or cls.latex_template,
            title=env.get("TITLE") or None,
            pandoc_params=shlex.split(env.get("PANDOC_PARAMS", "")),
            verbose=bool(env.get("VERBOSE")),
            pandoc=env.get("PANDOC") or None,
            template_dir=Path(env.get("SCSTG_TEMPLATE_DIR") or cls.template_dir),
            epub_author=env.get("EPUB_AUTHOR") or cls.epub_author,
            cover_image=env.get("EPUB_COVER_IMAGE") or cls.cover_image,
            source_date_epoch=env.get("SOURCE_DATE_EPOCH") or None,
        )
