"""Render service implementation.

Provides a quick HTML preview of the guide using the markdown library
with pymdown-extensions, so chapters can be proofread without Pandoc,
LaTeX or Docker.
"""

import html
import re
from pathlib import Path

import markdown
from markdown.extensions.tables import TableExtension
from markdown.extensions.toc import TocExtension

from ..domain import DocumentSource


# HTML template for the preview page
HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="{lang}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            line-height: 1.6;
            max-width: 860px;
            margin: 0 auto;
            padding: 2rem;
            color: #333;
        }}
        h1, h2, h3, h4 {{ color: #2c3e50; }}
        pre {{ background: #f5f5f5; padding: 1rem; overflow-x: auto; border-radius: 4px; }}
        code {{ background: #f5f5f5; padding: 0.2em 0.4em; border-radius: 3px; }}
        pre code {{ background: none; padding: 0; }}
        table {{ border-collapse: collapse; width: 100%; margin: 1rem 0; }}
        th, td {{ border: 1px solid #ddd; padding: 0.75rem; text-align: left; }}
        th {{ background: #f5f5f5; }}
        blockquote {{ border-left: 4px solid #ddd; margin: 0; padding-left: 1rem; color: #666; }}
        img {{ max-width: 100%; height: auto; }}
        .toc {{ background: #f9f9f9; padding: 1rem; border-radius: 4px; margin-bottom: 2rem; }}
        .toc ul {{ margin: 0.5rem 0; padding-left: 1.5rem; }}
        .pagebreak {{ break-after: page; border-top: 1px dashed #ccc; margin: 2rem 0; }}
        .highlight {{ background: #f5f5f5; }}
    </style>
</head>
<body>
    <header>
        <h1>{title}</h1>
        {byline}
    </header>
    {toc}
    {chapters}
</body>
</html>"""

# Raw LaTeX page breaks left behind by comment unwrapping
PAGEBREAK_PATTERN = re.compile(r"^[ \t]*\\(?:pagebreak|newpage)[ \t]*$", re.MULTILINE)

PAGEBREAK_HTML = '<div class="pagebreak"></div>'


class RenderService:
    """Service for rendering a prepared guide to a single HTML page.

    Uses the markdown library with pymdown-extensions for:
    - Tables
    - Fenced code with Pygments highlighting (Solidity samples)
    - Heading anchors and a table of contents
    """

    def __init__(self) -> None:
        # Prepended to heading ids so chapters combined in one page stay unique
        self._id_prefix = ""
        self._md = self._create_markdown_processor()

    def _create_markdown_processor(self) -> markdown.Markdown:
        """Create configured markdown processor with extensions."""
        return markdown.Markdown(
            extensions=[
                TableExtension(),
                TocExtension(permalink=True, slugify=self._heading_id),
                "pymdownx.superfences",
                "pymdownx.highlight",
                "pymdownx.tilde",
                "attr_list",
                "footnotes",
            ],
            extension_configs={
                "pymdownx.highlight": {"css_class": "highlight", "guess_lang": False},
            },
            output_format="html5",
        )

    def _slugify(self, value: str, separator: str = "-") -> str:
        """Convert heading text to URL-friendly slug."""
        value = re.sub(r"[^\w\s-]", "", value.lower().strip())
        return re.sub(r"[\s_-]+", separator, value).strip(separator)

    def _heading_id(self, value: str, separator: str = "-") -> str:
        slug = self._slugify(value, separator)
        if self._id_prefix:
            return f"{self._id_prefix}{separator}{slug}"
        return slug

    def render_markdown(self, content: str, id_prefix: str = "") -> tuple[str, str]:
        """Render one chapter's markdown.

        Args:
            content: The chapter's markdown.
            id_prefix: Prefix for heading ids, usually the chapter slug.

        Returns:
            The HTML body and the chapter's TOC HTML.
        """
        content = PAGEBREAK_PATTERN.sub(PAGEBREAK_HTML, content)
        self._id_prefix = id_prefix
        self._md.reset()
        try:
            body = self._md.convert(content)
        finally:
            self._id_prefix = ""
        return body, getattr(self._md, "toc", "")

    def render_source(self, source: DocumentSource, title: str = "") -> str:
        """Render all chapters of a source folder as one HTML document.

        Args:
            source: The prepared source folder.
            title: Page title (default: the metadata title).

        Returns:
            Complete HTML document string.
        """
        metadata = source.metadata
        title = title or metadata.title or "OWASP Smart Contract Security Testing Guide"

        sections = []
        tocs = []
        for chapter in source.chapters:
            content = chapter.path.read_text(encoding="utf-8")
            section_id = self._slugify(chapter.slug)
            body, toc = self.render_markdown(content, id_prefix=section_id)
            sections.append(f'<section id="{section_id}">\n{body}\n</section>')
            if toc:
                tocs.append(toc)

        toc_html = ""
        if tocs:
            toc_html = '<nav class="toc">\n<h2>Contents</h2>\n' + "\n".join(tocs) + "\n</nav>"

        byline = ""
        if metadata.author:
            byline = f"<p>by {html.escape(metadata.author)}</p>"

        return HTML_TEMPLATE.format(
            lang=html.escape(str(metadata.fields.get("lang", "en"))),
            title=html.escape(title),
            byline=byline,
            toc=toc_html,
            chapters="\n".join(sections),
        )

    def write_preview(self, source: DocumentSource, output: Path, title: str = "") -> Path:
        """Render a source folder and write the HTML preview to disk."""
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(self.render_source(source, title), encoding="utf-8")
        return output
