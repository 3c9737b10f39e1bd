"""Tests for content features: image references and the HTML preview.

Tests the ContentService and RenderService.
"""

import pytest

from scstg.domain import ChapterDocument, DocumentSource, MetadataDocument
from scstg.services.content_service import ContentService
from scstg.services.render_service import RenderService


@pytest.fixture
def content_service():
    return ContentService()


@pytest.fixture
def render_service():
    return RenderService()


@pytest.fixture
def sample_source(tmp_path) -> DocumentSource:
    """Create a small prepared source folder."""
    (tmp_path / "metadata.md").write_text("title: Guide\n", encoding="utf-8")
    chapter = tmp_path / "0x03-Access-Control.md"
    chapter.write_text(
        """# Access Control

| Check | Tool |
|-------|------|
| onlyOwner | Slither |

\\pagebreak

```solidity
modifier onlyOwner() {
    require(msg.sender == owner);
    _;
}
```
""",
        encoding="utf-8",
    )
    return DocumentSource(
        root=tmp_path,
        metadata=MetadataDocument(
            path=tmp_path / "metadata.md", fields={"title": "Guide", "author": "OWASP"}
        ),
        chapters=[ChapterDocument(path=chapter)],
    )


class TestImageExtraction:
    """Tests for image extraction functionality."""

    def test_extract_markdown_images(self, content_service):
        """Test extracting simple image references."""
        content = """# Chapter

![Logo](images/logo.png)

Some text.

![Diagram](./diagrams/flow.svg "Flow")
"""
        images = content_service.extract_images(content, "0x01-A.md")

        assert len(images) == 2
        assert images[0].alt_text == "Logo"
        assert images[0].path == "images/logo.png"
        assert images[0].line_number == 3
        assert images[0].chapter == "0x01-A.md"
        assert images[1].path == "./diagrams/flow.svg"
        assert images[1].line_number == 7

    def test_extract_html_images(self, content_service):
        """Test extracting <img> tags in document order."""
        content = '<img src="b.png" alt="B"> then ![A](a.png)'

        images = content_service.extract_images(content)

        assert [i.path for i in images] == ["b.png", "a.png"]
        assert images[0].is_html is True
        assert images[0].alt_text == "B"
        assert images[1].is_html is False

    def test_external_urls(self, content_service):
        """Test that external URLs are recognized."""
        images = content_service.extract_images(
            "![External](https://example.com/image.png)\n<img src=\"//cdn.example.com/x.jpg\">"
        )

        assert all(i.is_external for i in images)

    def test_validate_missing_images(self, content_service, tmp_path):
        """Test validation of missing images."""
        (tmp_path / "images").mkdir()
        (tmp_path / "images" / "existing.png").write_bytes(b"png")
        chapter = tmp_path / "0x01-A.md"
        chapter.write_text(
            "![Exists](images/existing.png)\n"
            "![Missing](images/missing.png)\n"
            "![Remote](https://example.com/r.png)\n",
            encoding="utf-8",
        )
        source = DocumentSource(
            root=tmp_path,
            metadata=MetadataDocument(path=tmp_path / "metadata.md"),
            chapters=[ChapterDocument(path=chapter)],
        )

        missing = content_service.validate_images(source)

        assert len(missing) == 1
        assert missing[0].path == "images/missing.png"
        assert missing[0].exists is False

    def test_encoded_path_resolved(self, content_service, tmp_path):
        (tmp_path / "my image.png").write_bytes(b"png")
        chapter = tmp_path / "0x01-A.md"
        chapter.write_text("![](my%20image.png)\n", encoding="utf-8")

        images = content_service.chapter_images(ChapterDocument(path=chapter), tmp_path)

        assert images[0].exists is True


class TestRenderService:
    """Tests for the HTML preview."""

    def test_render_markdown_pagebreak(self, render_service):
        body, _ = render_service.render_markdown("Before\n\n\\pagebreak\n\nAfter")

        assert '<div class="pagebreak"></div>' in body
        assert "\\pagebreak" not in body

    def test_render_markdown_toc(self, render_service):
        _, toc = render_service.render_markdown("# Reentrancy\n\n## Checks-Effects-Interactions\n")

        assert 'href="#reentrancy"' in toc
        assert 'href="#checks-effects-interactions"' in toc

    def test_render_source(self, render_service, sample_source):
        page = render_service.render_source(sample_source)

        assert page.startswith("<!DOCTYPE html>")
        assert "<title>Guide</title>" in page
        assert "<p>by OWASP</p>" in page
        assert '<section id="access-control">' in page
        assert "<table>" in page
        assert "onlyOwner" in page
        assert '<nav class="toc">' in page

    def test_repeated_headings_get_distinct_ids(self, render_service, tmp_path):
        chapters = []
        for name, heading in (("0x05-Reentrancy.md", "Reentrancy"), ("0x06-Oracles.md", "Oracles")):
            path = tmp_path / name
            path.write_text(f"# {heading}\n\n## Remediation\n", encoding="utf-8")
            chapters.append(ChapterDocument(path=path))
        source = DocumentSource(
            root=tmp_path,
            metadata=MetadataDocument(path=tmp_path / "metadata.md"),
            chapters=chapters,
        )

        page = render_service.render_source(source)

        assert 'id="reentrancy-remediation"' in page
        assert 'id="oracles-remediation"' in page
        assert 'href="#reentrancy-remediation"' in page
        assert 'href="#oracles-remediation"' in page

    def test_render_source_title_override(self, render_service, sample_source):
        page = render_service.render_source(sample_source, title="A & B")

        assert "<title>A &amp; B</title>" in page

    def test_write_preview(self, render_service, sample_source, tmp_path):
        output = render_service.write_preview(sample_source, tmp_path / "site" / "index.html")

        assert output.exists()
        assert "Access Control" in output.read_text(encoding="utf-8")
