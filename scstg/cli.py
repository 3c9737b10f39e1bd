"""Command-line interface for the OWASP SCSTG document build.

Provides a Click-based CLI that renders the guide to PDF and EPUB, and
helpers to prepare, preview and check a source folder.
This is the single entry point for all command-line operations.
"""

import shlex
import shutil
import sys
from dataclasses import replace
from pathlib import Path

import click

from . import __version__
from .config import BuildConfig
from .errors import PandocError, ScstgError
from .log import setup_logging
from .services import (
    FORMATS,
    BuildService,
    ContentService,
    RenderService,
    SourceService,
)


# Context keys
CONFIG_KEY = "config"
WORKDIR_KEY = "workdir"


def get_config(ctx: click.Context) -> BuildConfig:
    """Get the build configuration from click context."""
    return ctx.obj[CONFIG_KEY]


def get_workdir(ctx: click.Context) -> Path:
    return ctx.obj[WORKDIR_KEY]


def _fail(error: Exception) -> None:
    """Report a build failure and exit.

    A failing Pandoc run exits with the tool's own status; any other
    failure exits with 1.
    """
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, PandocError):
        if error.stderr:
            click.echo(error.stderr.rstrip(), err=True)
        sys.exit(error.returncode or 1)
    sys.exit(1)


@click.group()
@click.option(
    "--workdir",
    "-C",
    type=click.Path(file_okay=False),
    help="Directory to run the build in (default: current directory).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show debug output and run Pandoc verbosely (env: VERBOSE).",
)
@click.version_option(version=__version__, prog_name="scstg")
@click.pass_context
def cli(ctx: click.Context, workdir: str | None, verbose: bool) -> None:
    """OWASP Smart Contract Security Testing Guide builder.

    Renders the guide's Markdown chapters into PDF and EPUB books with
    Pandoc, running in the pandocker container unless PANDOC is set.
    """
    ctx.ensure_object(dict)
    config = BuildConfig.from_env()
    if verbose:
        config.verbose = True
    setup_logging(config.verbose)
    ctx.obj[CONFIG_KEY] = config
    ctx.obj[WORKDIR_KEY] = Path(workdir).resolve() if workdir else Path.cwd()


@cli.command()
@click.argument("folder", default=BuildConfig.DEFAULT_FOLDER, required=False)
@click.argument("scstg_version", default=BuildConfig.DEFAULT_VERSION, required=False)
@click.argument("scsvs_version", default=BuildConfig.DEFAULT_VERSION, required=False)
@click.option("--image", help="Container image (env: IMG).")
@click.option("--tag", help="Container image tag (env: TAG).")
@click.option("--latex-template", help="Pandoc LaTeX template (env: LATEX_TEMPLATE).")
@click.option("--title", help="Book title (env: TITLE).")
@click.option("--pandoc", help="Local Pandoc command instead of the container (env: PANDOC).")
@click.option(
    "--pandoc-params",
    help="Extra Pandoc arguments, shell quoted (env: PANDOC_PARAMS).",
)
@click.option(
    "--format",
    "-f",
    "formats",
    type=click.Choice(FORMATS),
    multiple=True,
    help="Output format, repeatable (default: pdf and epub).",
)
@click.option(
    "--keep-build",
    is_flag=True,
    help="Keep the preprocessed build directory.",
)
@click.pass_context
def build(
    ctx: click.Context,
    folder: str,
    scstg_version: str,
    scsvs_version: str,
    image: str | None,
    tag: str | None,
    latex_template: str | None,
    title: str | None,
    pandoc: str | None,
    pandoc_params: str | None,
    formats: tuple[str, ...],
    keep_build: bool,
) -> None:
    """Build the PDF and EPUB books.

    FOLDER holds metadata.md and the 0x*.md chapters (default: Document).
    SCSTG_VERSION and SCSVS_VERSION are passed to the templates
    (default: SNAPSHOT).
    """
    overrides = {
        key: value
        for key, value in {
            "image": image,
            "tag": tag,
            "latex_template": latex_template,
            "title": title,
            "pandoc": pandoc,
        }.items()
        if value
    }
    if pandoc_params is not None:
        overrides["pandoc_params"] = shlex.split(pandoc_params)
    config = replace(
        get_config(ctx),
        scstg_version=scstg_version,
        scsvs_version=scsvs_version,
        **overrides,
    )

    service = BuildService(config, workdir=get_workdir(ctx))
    try:
        result = service.build(
            Path(folder), formats=formats or FORMATS, keep_build=keep_build
        )
    except ScstgError as e:
        _fail(e)

    for artifact in result.artifacts:
        click.echo(f"Created {artifact}")


@cli.command()
@click.argument("folder", default=BuildConfig.DEFAULT_FOLDER, required=False)
@click.pass_context
def prepare(ctx: click.Context, folder: str) -> None:
    """Copy and preprocess FOLDER into the build directory.

    Unwraps HTML comments and converts HTML images exactly as a build
    would, then leaves the result in place for inspection.
    """
    service = BuildService(get_config(ctx), workdir=get_workdir(ctx))
    try:
        source, report = service.prepare(Path(folder))
    except ScstgError as e:
        _fail(e)

    click.echo(f"Prepared {len(source.chapters)} chapter(s) in {service.build_dir}")
    click.echo(f"  Comments unwrapped: {report.comments}")
    click.echo(f"  Images converted: {report.images}")


@cli.command()
@click.argument("folder", default=BuildConfig.DEFAULT_FOLDER, required=False)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default="OWASP_SCSTG.html",
    show_default=True,
    help="HTML file to write.",
)
@click.pass_context
def preview(ctx: click.Context, folder: str, output: str) -> None:
    """Render FOLDER to a single HTML page.

    Needs neither Pandoc nor Docker; useful for proofreading chapters.
    """
    config = get_config(ctx)
    workdir = get_workdir(ctx)
    service = BuildService(config, workdir=workdir)
    try:
        service.check_source(Path(folder))
    except ScstgError as e:
        _fail(e)

    try:
        source, _ = service.prepare(Path(folder))
        output_path = RenderService().write_preview(
            source, workdir / output, title=config.title or ""
        )
    except ScstgError as e:
        _fail(e)
    finally:
        if service.build_dir.exists():
            shutil.rmtree(service.build_dir)

    click.echo(f"Wrote preview to {output_path}")


@cli.command()
@click.argument("folder", default=BuildConfig.DEFAULT_FOLDER, required=False)
@click.pass_context
def info(ctx: click.Context, folder: str) -> None:
    """Show metadata and chapters of FOLDER."""
    config = get_config(ctx)
    try:
        source = SourceService(config).load_source(get_workdir(ctx) / folder)
    except ScstgError as e:
        _fail(e)

    metadata = source.metadata
    click.echo(f"\nTitle: {metadata.title or config.effective_title}")
    if metadata.author:
        click.echo(f"Author: {metadata.author}")
    click.echo(f"Location: {source.root}")

    click.echo(f"\nChapters ({len(source.chapters)}):")
    for chapter in source.chapters:
        number = "    " if chapter.number is None else f"{chapter.number:4}"
        click.echo(f"  {number}. {chapter.title}  ({chapter.name})")


@cli.command("check-images")
@click.argument("folder", default=BuildConfig.DEFAULT_FOLDER, required=False)
@click.pass_context
def check_images(ctx: click.Context, folder: str) -> None:
    """Report images referenced by chapters that do not exist.

    Exits with status 1 when any image is missing.
    """
    try:
        source = SourceService(get_config(ctx)).load_source(get_workdir(ctx) / folder)
    except ScstgError as e:
        _fail(e)

    missing = ContentService().validate_images(source)
    if not missing:
        click.echo("All images found.")
        return

    click.echo(f"Missing images ({len(missing)}):", err=True)
    for image in missing:
        click.echo(f"  {image.chapter}:{image.line_number}: {image.path}", err=True)
    sys.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
