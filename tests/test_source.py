"""Tests for source folder discovery and metadata parsing."""

import pytest

from scstg.config import BuildConfig
from scstg.domain import ChapterDocument, MetadataDocument
from scstg.errors import SourceError
from scstg.services.source_service import SourceService, parse_front_matter


@pytest.fixture
def source_service():
    return SourceService(BuildConfig())


class TestParseFrontMatter:
    """Tests for YAML metadata parsing."""

    def test_fenced_block(self):
        fields = parse_front_matter("---\ntitle: Guide\nversion: 0.1\n---\n# Body\n")

        assert fields == {"title": "Guide", "version": 0.1}

    def test_pandoc_terminator(self):
        fields = parse_front_matter("---\ntitle: Guide\n...\n")

        assert fields["title"] == "Guide"

    def test_bare_yaml_mapping(self):
        fields = parse_front_matter("title: Guide\nauthor: OWASP\n")

        assert fields == {"title": "Guide", "author": "OWASP"}

    def test_plain_markdown_has_no_metadata(self):
        assert parse_front_matter("# Heading\n\nSome prose.\n") == {}

    def test_empty(self):
        assert parse_front_matter("") == {}
        assert parse_front_matter("---\n---\n") == {}

    def test_byte_order_mark_ignored(self):
        fields = parse_front_matter("\ufeff---\ntitle: Guide\n---\n")

        assert fields == {"title": "Guide"}

    def test_invalid_yaml_raises(self):
        with pytest.raises(SourceError, match="Invalid metadata"):
            parse_front_matter("---\ntitle: [unclosed\n---\n")

    def test_unterminated_block_raises(self):
        with pytest.raises(SourceError, match="Unterminated"):
            parse_front_matter("---\ntitle: Guide\n")

    def test_non_mapping_block_raises(self):
        with pytest.raises(SourceError, match="mapping"):
            parse_front_matter("---\n- a\n- b\n---\n")


class TestChapterDocument:
    """Tests for chapter naming conventions."""

    def test_number_and_slug(self, tmp_path):
        chapter = ChapterDocument(path=tmp_path / "0x09-Smart-Contract-Basics.md")

        assert chapter.number == 9
        assert chapter.slug == "Smart-Contract-Basics"
        assert chapter.title == "Smart Contract Basics"

    def test_hex_number(self, tmp_path):
        assert ChapterDocument(path=tmp_path / "0x0a-Tenth.md").number == 10
        assert ChapterDocument(path=tmp_path / "0x13-Gas.md").number == 19

    def test_without_slug(self, tmp_path):
        chapter = ChapterDocument(path=tmp_path / "0x01.md")

        assert chapter.number == 1
        assert chapter.slug == "0x01"

    def test_metadata_author_list(self, tmp_path):
        metadata = MetadataDocument(
            path=tmp_path / "metadata.md",
            fields={"title": "Guide", "author": ["A", "B"]},
        )

        assert metadata.title == "Guide"
        assert metadata.author == "A, B"


class TestLoadSource:
    """Tests for source folder validation."""

    def test_load_source(self, source_service, workdir):
        source = source_service.load_source(workdir / "Document")

        assert source.metadata.title == "OWASP Smart Contract Security Testing Guide"
        assert source.metadata.author == "Shashank, Pratik Lagaskar"
        assert [c.name for c in source.chapters] == [
            "0x01-Introduction.md",
            "0x02-Reentrancy.md",
        ]

    def test_chapters_sorted_by_name(self, source_service, tmp_path):
        (tmp_path / "metadata.md").write_text("title: X\n", encoding="utf-8")
        for name in ("0x10-Late.md", "0x02-Early.md", "0x09-Middle.md", "README.md"):
            (tmp_path / name).write_text("# x\n", encoding="utf-8")

        chapters = source_service.find_chapters(tmp_path)

        assert [c.name for c in chapters] == [
            "0x02-Early.md",
            "0x09-Middle.md",
            "0x10-Late.md",
        ]

    def test_missing_folder(self, source_service, tmp_path):
        with pytest.raises(SourceError, match="Source folder not found"):
            source_service.load_source(tmp_path / "nope")

    def test_missing_metadata(self, source_service, workdir):
        (workdir / "Document" / "metadata.md").unlink()

        with pytest.raises(SourceError, match="Metadata file not found"):
            source_service.load_source(workdir / "Document")

    def test_missing_chapters(self, source_service, tmp_path):
        (tmp_path / "metadata.md").write_text("title: X\n", encoding="utf-8")

        with pytest.raises(SourceError, match="No chapter files"):
            source_service.load_source(tmp_path)


class TestPrepareBuildDir:
    """Tests for copying the source folder."""

    def test_copies_tree(self, source_service, workdir):
        build = source_service.prepare_build_dir(workdir / "Document", workdir / "build")

        assert (build / "metadata.md").is_file()
        assert (build / "0x02-Reentrancy.md").is_file()
        assert (build / "images" / "reentrancy.png").read_bytes() == b"\x89PNG"

    def test_replaces_stale_build(self, source_service, workdir):
        stale = workdir / "build"
        stale.mkdir()
        (stale / "0x99-Stale.md").write_text("old", encoding="utf-8")

        source_service.prepare_build_dir(workdir / "Document", stale)

        assert not (stale / "0x99-Stale.md").exists()
        assert (stale / "0x01-Introduction.md").exists()

    def test_source_left_untouched(self, source_service, workdir):
        original = (workdir / "Document" / "0x01-Introduction.md").read_text(
            encoding="utf-8"
        )

        source_service.prepare_build_dir(workdir / "Document", workdir / "build")

        assert (workdir / "Document" / "0x01-Introduction.md").read_text(
            encoding="utf-8"
        ) == original
