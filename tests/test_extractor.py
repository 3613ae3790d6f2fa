"""Tests for the container extractor: classification, fallback, metadata."""

import base64
import logging

import pytest
from pydantic import ValidationError

from conftest import PNG_BYTES, make_zip
from mineru_convert.errors import MalformedContainer
from mineru_convert.extractor import (
    ContainerExtractor,
    ConversionResult,
    error_result,
    mime_type_for,
    page_number_from_name,
    title_from_markdown,
)
from mineru_convert.extractor.extractor import NO_CONTENT_MARKDOWN


@pytest.fixture
def extractor():
    return ContainerExtractor()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestMimeTypeFor:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("a.jpg", "image/jpeg"),
            ("a.jpeg", "image/jpeg"),
            ("a.png", "image/png"),
            ("a.gif", "image/gif"),
            ("a.webp", "image/webp"),
            ("a.bmp", "image/bmp"),
        ],
    )
    def test_known_suffixes(self, name, expected):
        assert mime_type_for(name) == expected

    def test_case_insensitive(self):
        assert mime_type_for("SCAN.PNG") == "image/png"

    def test_unknown_defaults_to_jpeg(self):
        assert mime_type_for("figure.tiff") == "image/jpeg"


class TestPageNumberFromName:
    def test_page_underscore_digits(self):
        assert page_number_from_name("images/page_12.png") == 12

    def test_page_dash_digits(self):
        assert page_number_from_name("page-3.png") == 3

    def test_digits_before_page(self):
        assert page_number_from_name("7-page.jpg") == 7

    def test_case_insensitive(self):
        assert page_number_from_name("Page_4.png") == 4

    def test_no_match_is_none_not_zero(self):
        assert page_number_from_name("cover.png") is None

    def test_digits_without_page_token(self):
        assert page_number_from_name("images/1a2b3c.jpg") is None


class TestTitleFromMarkdown:
    def test_first_top_level_heading(self):
        md = "intro line\n#   My Title  \n\n# Second\n"
        assert title_from_markdown(md) == "My Title"

    def test_subheadings_ignored(self):
        assert title_from_markdown("## Section\n### Sub") is None

    def test_empty(self):
        assert title_from_markdown("") is None

    def test_bare_hash_does_not_take_next_line(self):
        assert title_from_markdown("#\nIntro text") is None

    def test_tab_after_hash(self):
        assert title_from_markdown("#\tTabbed") == "Tabbed"


# ---------------------------------------------------------------------------
# ContainerExtractor.extract
# ---------------------------------------------------------------------------


class TestExtract:
    def test_markdown_order_preserved_and_one_image(self, extractor):
        data = make_zip([
            ("a.md", "Alpha text"),
            ("img1.png", PNG_BYTES),
            ("b.md", "Beta text"),
        ])
        result = extractor.extract(data)

        assert isinstance(result, ConversionResult)
        assert result.markdown == "Alpha text\n\nBeta text"
        assert result.markdown.index("Alpha") < result.markdown.index("Beta")
        assert len(result.images) == 1
        assert result.images[0].name == "img1.png"

    def test_image_record_fields(self, extractor):
        result = extractor.extract(make_zip([("images/page_2.png", PNG_BYTES)]))
        image = result.images[0]

        assert image.id.startswith("img_")
        assert image.name == "images/page_2.png"
        assert image.mime_type == "image/png"
        assert base64.b64decode(image.data) == PNG_BYTES
        assert image.raw_bytes == PNG_BYTES
        assert image.page_number == 2

    def test_image_ids_unique(self, extractor):
        result = extractor.extract(make_zip([
            ("a.png", PNG_BYTES),
            ("b.png", PNG_BYTES),
            ("c.jpg", PNG_BYTES),
        ]))
        ids = [img.id for img in result.images]
        assert len(set(ids)) == 3

    def test_markdown_extension_variants(self, extractor):
        result = extractor.extract(make_zip([
            ("notes.markdown", "one"),
            ("README.MD", "two"),
        ]))
        assert result.markdown == "one\n\ntwo"

    def test_directory_entries_skipped(self, extractor, sample_zip):
        result = extractor.extract(sample_zip)
        assert result.markdown.startswith("# Sample Title")
        assert len(result.images) == 1

    def test_unknown_and_json_entries_ignored(self, extractor):
        result = extractor.extract(make_zip([
            ("content_list.json", '{"a": 1}'),
            ("origin.pdf", b"%PDF-1.7"),
            ("full.md", "# Doc"),
        ]))
        assert result.markdown == "# Doc"
        assert result.images == ()

    def test_malformed_json_does_not_abort(self, extractor, caplog):
        data = make_zip([
            ("broken.json", "{not json"),
            ("full.md", "# Still here"),
        ])
        with caplog.at_level(logging.WARNING, logger="mineru_convert.extractor.extractor"):
            result = extractor.extract(data)

        assert result.markdown == "# Still here"
        assert "Failed to parse JSON broken.json" in caplog.text

    def test_undecodable_markdown_entry_skipped(self, extractor, caplog):
        data = make_zip([
            ("bad.md", b"\xff\xfe\xfa\x00"),
            ("good.md", "Readable"),
        ])
        with caplog.at_level(logging.WARNING, logger="mineru_convert.extractor.extractor"):
            result = extractor.extract(data)

        assert result.markdown == "Readable"
        assert "bad.md" in caplog.text

    def test_title_and_page_count(self, extractor):
        result = extractor.extract(make_zip([
            ("full.md", "preamble\n# Report 2024\nbody"),
            ("page_1.png", PNG_BYTES),
            ("page_5.png", PNG_BYTES),
            ("logo.png", PNG_BYTES),
        ]))
        assert result.metadata.title == "Report 2024"
        assert result.metadata.page_count == 5

    def test_page_count_floor_without_page_numbers(self, extractor):
        result = extractor.extract(make_zip([("full.md", "x"), ("logo.png", PNG_BYTES)]))
        assert result.metadata.page_count == 1

    def test_processing_timestamp_is_aware(self, extractor, sample_zip):
        result = extractor.extract(sample_zip)
        assert result.metadata.processing_timestamp.tzinfo is not None


class TestFallbackSynthesis:
    def test_images_only(self, extractor):
        result = extractor.extract(make_zip([
            ("page-3.png", PNG_BYTES),
            ("cover.png", PNG_BYTES),
        ]))

        assert result.markdown.strip()
        assert "2 image(s)" in result.markdown
        assert "## Image 1: page-3.png" in result.markdown
        assert "- Page: 3" in result.markdown
        assert "## Image 2: cover.png" in result.markdown
        assert result.metadata.page_count == 3
        assert result.images[0].page_number == 3
        assert result.images[1].page_number is None
        assert result.metadata.title == "Document Content"

    def test_whitespace_only_markdown_counts_as_empty(self, extractor):
        result = extractor.extract(make_zip([
            ("full.md", "  \n\n\t"),
            ("fig.jpg", PNG_BYTES),
        ]))
        assert "1 image(s)" in result.markdown

    def test_empty_container(self, extractor):
        result = extractor.extract(make_zip([]))

        assert result.markdown == NO_CONTENT_MARKDOWN
        assert result.images == ()
        assert result.metadata.page_count == 1

    def test_only_unknown_entries(self, extractor):
        result = extractor.extract(make_zip([("layout.json", "{}"), ("dir/", "")]))
        assert result.markdown == NO_CONTENT_MARKDOWN


class TestMalformedContainer:
    def test_not_a_zip(self, extractor):
        with pytest.raises(MalformedContainer, match="Failed to open ZIP file"):
            extractor.extract(b"definitely not a zip archive")

    def test_empty_bytes(self, extractor):
        with pytest.raises(MalformedContainer):
            extractor.extract(b"")


class TestIdempotence:
    def test_same_bytes_same_output(self, extractor, sample_zip):
        first = extractor.extract(sample_zip)
        second = extractor.extract(sample_zip)

        assert first.markdown == second.markdown
        strip_id = lambda r: [img.model_dump(exclude={"id"}) for img in r.images]  # noqa: E731
        assert strip_id(first) == strip_id(second)
        assert first.metadata.page_count == second.metadata.page_count
        assert first.metadata.title == second.metadata.title


class TestSerialization:
    def test_dump_has_exact_fields(self, extractor, sample_zip):
        dumped = extractor.extract(sample_zip).model_dump()

        assert set(dumped) == {"markdown", "images", "metadata"}
        assert set(dumped["images"][0]) == {"id", "name", "mime_type", "data", "page_number"}
        assert set(dumped["metadata"]) == {"page_count", "title", "processing_timestamp"}

    def test_result_is_frozen(self, extractor, sample_zip):
        result = extractor.extract(sample_zip)
        with pytest.raises(ValidationError):
            result.markdown = "changed"


class TestErrorResult:
    def test_error_document(self):
        result = error_result("Failed to open ZIP file: bad magic")

        assert result.markdown.startswith("# Document Processing Error")
        assert "bad magic" in result.markdown
        assert result.images == ()
        assert result.metadata.page_count == 1
        assert result.metadata.title is None
