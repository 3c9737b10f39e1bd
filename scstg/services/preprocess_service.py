"""Chapter preprocessing before conversion.

Rewrites the copied chapters so Pandoc understands them: HTML comments
wrapping raw LaTeX (``<!-- \\pagebreak -->``) are unwrapped and HTML
``<img>`` tags become native Markdown images.
"""

import html
import logging
import re
from pathlib import Path

from ..config import BuildConfig
from ..domain import PreprocessReport

logger = logging.getLogger(__name__)


# Same match as sed 's#<!-- \(.*\) -->#\1#g': greedy, single line
HTML_COMMENT_PATTERN = re.compile(r"<!-- (.*) -->")

IMG_TAG_PATTERN = re.compile(r"<img\b([^>]*?)/?>", re.IGNORECASE)

IMG_ATTR_PATTERN = re.compile(
    r"""([a-zA-Z_:][-a-zA-Z0-9_:.]*)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+))"""
)

# Attributes carried over to Pandoc's {key="value"} syntax
SIZE_ATTRIBUTES = ("width", "height")


def unwrap_html_comments(text: str) -> tuple[str, int]:
    """Remove HTML comment delimiters, keeping the comment body.

    Args:
        text: Markdown content.

    Returns:
        The rewritten text and the number of comments unwrapped.
    """
    return HTML_COMMENT_PATTERN.subn(r"\1", text)


def parse_img_attributes(attrs: str) -> dict[str, str]:
    """Parse the attribute string of an ``<img>`` tag."""
    result: dict[str, str] = {}
    for match in IMG_ATTR_PATTERN.finditer(attrs):
        name = match.group(1).lower()
        value = next(g for g in match.groups()[1:] if g is not None)
        result[name] = html.unescape(value)
    return result


def img_to_markdown(attrs: dict[str, str]) -> str:
    """Build native Markdown image syntax from parsed tag attributes."""
    alt = attrs.get("alt", "").replace("[", "\\[").replace("]", "\\]")
    src = attrs["src"].replace(" ", "%20")
    image = f"![{alt}]({src})"

    sizes = [
        f'{name}="{attrs[name]}"' for name in SIZE_ATTRIBUTES if attrs.get(name)
    ]
    if sizes:
        image += "{" + " ".join(sizes) + "}"
    return image


def convert_html_images(text: str) -> tuple[str, int]:
    """Rewrite HTML image tags to Markdown images.

    Tags without a ``src`` attribute are left as they are.

    Returns:
        The rewritten text and the number of tags converted.
    """
    count = 0

    def replace(match: re.Match) -> str:
        nonlocal count
        attrs = parse_img_attributes(match.group(1))
        if not attrs.get("src"):
            return match.group(0)
        count += 1
        return img_to_markdown(attrs)

    return IMG_TAG_PATTERN.sub(replace, text), count


class PreprocessService:
    """Service applying the text rewrites to a build folder."""

    def __init__(self, config: BuildConfig) -> None:
        self._config = config

    def preprocess_build_dir(self, build_dir: Path) -> PreprocessReport:
        """Rewrite the Markdown files of a build folder in place.

        Comments are unwrapped in every ``*.md`` file; images are converted
        in chapter files only.

        Args:
            build_dir: The copied source folder.

        Returns:
            A PreprocessReport with per-file counts.
        """
        report = PreprocessReport()

        for path in sorted(build_dir.glob("*.md")):
            text = path.read_text(encoding="utf-8")
            text, comments = unwrap_html_comments(text)
            images = 0
            if path.match(self._config.CHAPTER_GLOB):
                text, images = convert_html_images(text)

            if comments or images:
                path.write_text(text, encoding="utf-8")
                report.record(path.name, comments=comments, images=images)
                logger.debug(
                    "%s: unwrapped %d comment(s), converted %d image(s)",
                    path.name,
                    comments,
                    images,
                )

        return report
