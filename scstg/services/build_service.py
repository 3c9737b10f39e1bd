"""Build orchestration service.

Drives a complete guide build: validate the source folder, copy it into
the build directory, preprocess the chapters, render the LaTeX fragments
and produce the PDF and EPUB books.
"""

import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional

from ..config import BuildConfig
from ..domain import BuildResult, DocumentSource, Fragment, PreprocessReport
from ..errors import SourceError
from .pandoc_service import PandocRunner
from .preprocess_service import PreprocessService
from .source_service import SourceService

logger = logging.getLogger(__name__)

FORMATS = ("pdf", "epub")


class BuildService:
    """Service for building the guide's books.

    Steps run strictly in sequence. The first failure aborts the build and
    propagates; intermediate fragments are removed either way.
    """

    def __init__(
        self,
        config: BuildConfig,
        workdir: Optional[Path] = None,
        source_service: Optional[SourceService] = None,
        preprocess_service: Optional[PreprocessService] = None,
        pandoc: Optional[PandocRunner] = None,
    ) -> None:
        """Initialize the build service.

        Args:
            config: Build configuration.
            workdir: Directory builds run in (default: current directory).
            source_service: Service for reading the source folder.
            preprocess_service: Service for rewriting chapters.
            pandoc: Runner for Pandoc invocations.
        """
        self._config = config
        self._workdir = Path(workdir or Path.cwd()).resolve()
        self._source_service = source_service or SourceService(config)
        self._preprocess_service = preprocess_service or PreprocessService(config)
        self._pandoc = pandoc or PandocRunner(config, self._workdir)

    @property
    def build_dir(self) -> Path:
        return self._workdir / self._config.BUILD_DIR

    def fragments(self) -> list[Fragment]:
        """Fragments rendered before the PDF, paths relative to the workdir."""
        return [
            Fragment(
                name=name,
                template=self._config.template_dir / template,
                output=Path(output),
            )
            for name, template, output in self._config.FRAGMENT_TEMPLATES
        ]

    def output_path(self, fmt: str) -> Path:
        return Path(f"{self._config.OUTPUT_BASE_NAME}.{fmt}")

    def _resolve_folder(self, folder: Path) -> Path:
        folder = Path(folder)
        if not folder.is_absolute():
            folder = self._workdir / folder
        return folder

    def _check_templates(self) -> None:
        for fragment in self.fragments():
            if not (self._workdir / fragment.template).is_file():
                raise SourceError(f"Template not found: {fragment.template}")

    def check_source(self, folder: Path) -> DocumentSource:
        """Validate a source folder without writing anything.

        The source must not overlap the build directory, since that
        directory is deleted and recreated by every build.

        Raises:
            SourceError: If the folder is not usable.
        """
        source_folder = self._resolve_folder(folder)
        source = self._source_service.load_source(source_folder)
        resolved = source_folder.resolve()
        if resolved.is_relative_to(self.build_dir):
            raise SourceError(f"Source folder cannot be the build directory: {folder}")
        if self.build_dir.is_relative_to(resolved):
            raise SourceError(f"Source folder cannot contain the build directory: {folder}")
        return source

    def prepare(self, folder: Path) -> tuple[DocumentSource, PreprocessReport]:
        """Copy and preprocess a source folder into the build directory.

        Args:
            folder: Source folder, relative to the working directory or absolute.

        Returns:
            The source description (pointing at the build copy) and the
            preprocessing report.

        Raises:
            SourceError: If the source folder is not usable.
        """
        source = self.check_source(folder)
        self._source_service.prepare_build_dir(source.root, self.build_dir)
        report = self._preprocess_service.preprocess_build_dir(self.build_dir)
        logger.debug(
            "Preprocessed %d file(s): %d comment(s), %d image(s)",
            len(report.files),
            report.comments,
            report.images,
        )
        return self._source_service.load_source(self.build_dir), report

    def build(
        self,
        folder: Path,
        formats: Iterable[str] = FORMATS,
        keep_build: bool = False,
    ) -> BuildResult:
        """Build the requested books from a source folder.

        Args:
            folder: Source folder holding ``metadata.md`` and ``0x*.md`` files.
            formats: Any of ``pdf`` and ``epub``.
            keep_build: Leave the build directory in place afterwards.

        Returns:
            BuildResult with the paths of the written books.

        Raises:
            SourceError: If the source folder or templates are missing.
            PandocError: If a Pandoc invocation fails.
            ValueError: If an unknown format is requested.
        """
        wanted = list(dict.fromkeys(formats))
        unknown = [f for f in wanted if f not in FORMATS]
        if unknown:
            raise ValueError(f"Unknown format(s): {', '.join(unknown)}")

        # Validate before anything is written
        self.check_source(folder)
        if "pdf" in wanted:
            self._check_templates()

        result = BuildResult()
        try:
            source, _ = self.prepare(folder)
            metadata = self._relative(source.metadata.path)
            chapters = [self._relative(c.path) for c in source.chapters]

            if "pdf" in wanted:
                logger.info("Creating PDF")
                result.pdf = self._build_pdf(metadata, chapters)
            if "epub" in wanted:
                logger.info("Creating epub")
                result.epub = self._pandoc.render_epub(
                    self.output_path("epub"), metadata, chapters
                )
        finally:
            self._cleanup(keep_build)

        for artifact in result.artifacts:
            logger.info("Wrote %s", artifact)
        return BuildResult(
            pdf=self._workdir / result.pdf if result.pdf else None,
            epub=self._workdir / result.epub if result.epub else None,
        )

    def _build_pdf(self, metadata: Path, chapters: list[Path]) -> Path:
        header, *before_body = [
            self._pandoc.render_fragment(fragment, metadata)
            for fragment in self.fragments()
        ]
        return self._pandoc.render_pdf(
            self.output_path("pdf"),
            metadata,
            chapters,
            header=header,
            before_body=before_body,
        )

    def _relative(self, path: Path) -> Path:
        return Path(path).resolve().relative_to(self._workdir)

    def _cleanup(self, keep_build: bool) -> None:
        for fragment in self.fragments():
            (self._workdir / fragment.output).unlink(missing_ok=True)
        if not keep_build and self.build_dir.exists():
            shutil.rmtree(self.build_dir)
