"""Service layer for the guide build.

Provides source discovery, chapter preprocessing, Pandoc invocation,
build orchestration and the HTML preview and image checks.
"""

from .source_service import SourceService, parse_front_matter
from .preprocess_service import (
    PreprocessService,
    convert_html_images,
    unwrap_html_comments,
)
from .pandoc_service import PandocRunner
from .build_service import BuildService, FORMATS
from .content_service import ContentService
from .render_service import RenderService

__all__ = [
    "SourceService",
    "parse_front_matter",
    "PreprocessService",
    "convert_html_images",
    "unwrap_html_comments",
    "PandocRunner",
    "BuildService",
    "FORMATS",
    "ContentService",
    "RenderService",
]
