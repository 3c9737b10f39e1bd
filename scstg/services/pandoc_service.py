"""Pandoc invocation service.

Runs Pandoc either inside the pandocker container image or through a
locally configured command, always from the build's working directory so
that relative paths resolve the same way in both modes.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Sequence

from ..config import BuildConfig
from ..domain import Fragment
from ..errors import PandocError

logger = logging.getLogger(__name__)


class PandocRunner:
    """Service for running Pandoc with the build's common parameters.

    Every call is a separate, blocking subprocess. Failures raise
    PandocError and are never retried.
    """

    def __init__(self, config: BuildConfig, workdir: Path) -> None:
        """Initialize the runner.

        Args:
            config: Build configuration.
            workdir: Directory Pandoc runs in; mounted at /pandoc in the container.
        """
        self._config = config
        self._workdir = Path(workdir).resolve()

    @property
    def workdir(self) -> Path:
        return self._workdir

    def base_command(self) -> list[str]:
        """Command prefix shared by every invocation."""
        local = self._config.pandoc_command
        if local:
            command = list(local)
        else:
            command = [
                "docker",
                "run",
                "--rm",
                "--volume",
                f"{self._workdir}:{self._config.CONTAINER_WORKDIR}",
            ]
            if self._config.source_date_epoch:
                command += ["--env", f"SOURCE_DATE_EPOCH={self._config.source_date_epoch}"]
            command.append(self._config.container_image)

        command += self._config.pandoc_params
        command += [
            f"--resource-path=.:{self._config.BUILD_DIR}",
            "--metadata",
            f"scstg_version={self._config.scstg_version}",
            "--metadata",
            f"scsvs_version={self._config.scsvs_version}",
        ]
        if self._config.verbose:
            command.append("--verbose")
        return command

    def run(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        """Run Pandoc with the given arguments.

        Args:
            args: Arguments appended to the base command.

        Returns:
            The completed process.

        Raises:
            PandocError: If the tool cannot be started or exits non-zero.
        """
        command = self.base_command() + [str(a) for a in args]
        logger.debug("Running: %s", " ".join(command))

        env = None
        if self._config.source_date_epoch:
            env = dict(os.environ, SOURCE_DATE_EPOCH=self._config.source_date_epoch)

        try:
            result = subprocess.run(
                command,
                cwd=self._workdir,
                capture_output=True,
                text=True,
                env=env,
            )
        except FileNotFoundError as e:
            raise PandocError(command, 127, str(e)) from e

        if result.stderr:
            for line in result.stderr.splitlines():
                logger.debug("pandoc: %s", line)

        if result.returncode != 0:
            raise PandocError(command, result.returncode, result.stderr)
        return result

    def render_fragment(self, fragment: Fragment, metadata: Path) -> Path:
        """Render a LaTeX fragment from the metadata file."""
        self.run(
            [
                "--output",
                fragment.output,
                "--template",
                fragment.template,
                metadata,
            ]
        )
        return fragment.output

    def render_pdf(
        self,
        output: Path,
        metadata: Path,
        chapters: Sequence[Path],
        header: Path,
        before_body: Sequence[Path],
    ) -> Path:
        """Render the PDF book.

        Args:
            output: PDF path, relative to the working directory.
            metadata: Metadata file in the build folder.
            chapters: Chapter files in the build folder, in order.
            header: Fragment included in the LaTeX preamble.
            before_body: Fragments included before the body, in order.
        """
        config = self._config
        args: list = [
            f"--template={config.latex_template}",
            f"--pdf-engine={config.PDF_ENGINE}",
            "--columns",
            str(config.PDF_COLUMNS),
            f"--highlight-style={config.HIGHLIGHT_STYLE}",
            "--metadata",
            f"title={config.effective_title}",
            "--include-in-header",
            header,
        ]
        for fragment in before_body:
            args += ["--include-before-body", fragment]
        args += [
            "--output",
            output,
            "-V",
            f"fontsize={config.FONT_SIZE}",
            metadata,
            *chapters,
        ]
        self.run(args)
        return output

    def render_epub(
        self,
        output: Path,
        metadata: Path,
        chapters: Sequence[Path],
    ) -> Path:
        """Render the EPUB book."""
        config = self._config
        self.run(
            [
                "--metadata",
                f"title={config.effective_title}",
                "--metadata",
                f"author={config.epub_author}",
                f"--epub-cover-image={config.cover_image}",
                "-o",
                output,
                metadata,
                *chapters,
            ]
        )
        return output
