"""Unit tests for Open Graph extraction."""

import pytest

from linkbox_ogp.models.ogp import OgpRecord
from linkbox_ogp.utils import ogp_extractor
from linkbox_ogp.utils.ogp_extractor import extract_ogp


class TestOgTags:
    """Tests for reading og:* meta tags."""

    def test_full_og_set(self, sample_og_html):
        record = extract_ogp(sample_og_html)

        assert record.title == "Example Article"
        assert record.description == "An article about examples."
        assert record.image_url == "https://example.com/cover.png"
        assert record.canonical_url == "https://example.com/article"
        assert record.site_name == "Example Site"

    def test_og_title_without_title_tag(self):
        html = '<html><head><meta property="og:title" content="Foo"></head></html>'
        record = extract_ogp(html)

        assert record.title == "Foo"
        assert record.description is None

    def test_last_duplicate_wins(self):
        html = """
        <head>
            <meta property="og:title" content="A">
            <meta property="og:title" content="B">
        </head>
        """
        assert extract_ogp(html).title == "B"

    def test_unknown_og_properties_ignored(self):
        html = '<meta property="og:type" content="article"><meta property="og:locale" content="ja_JP">'
        assert extract_ogp(html) == OgpRecord()

    def test_meta_without_content_ignored(self):
        html = '<meta property="og:image"><title>T</title>'
        record = extract_ogp(html)

        assert record.image_url is None
        assert record.title == "T"

    def test_og_in_name_attribute_used_when_property_missing(self):
        html = '<meta name="og:image" content="https://example.com/n.png">'
        assert extract_ogp(html).image_url == "https://example.com/n.png"

    def test_property_attribute_beats_name_attribute(self):
        html = """
        <meta property="og:image" content="https://example.com/p.png">
        <meta name="og:image" content="https://example.com/n.png">
        """
        assert extract_ogp(html).image_url == "https://example.com/p.png"

    def test_property_name_case_insensitive(self):
        html = '<meta property="OG:Title" content="Shouty">'
        assert extract_ogp(html).title == "Shouty"

    def test_entities_decoded(self):
        html = '<meta property="og:title" content="Tom &amp; Jerry">'
        assert extract_ogp(html).title == "Tom & Jerry"


class TestFallbacks:
    """Tests for title and description fallbacks."""

    def test_title_and_description_fallback(self, sample_plain_html):
        record = extract_ogp(sample_plain_html)

        assert record.title == "Plain Page"
        assert record.description == "Plain description"

    def test_title_only_page(self):
        record = extract_ogp("<html><head><title>Bar</title></head></html>")

        assert record.title == "Bar"
        assert record.description is None
        assert record.image_url is None

    def test_no_title_element_leaves_title_absent(self):
        record = extract_ogp("<html><body><p>hello</p></body></html>")
        assert record.title is None

    def test_empty_title_element_is_present_but_empty(self):
        assert extract_ogp("<title>   </title>").title == ""

    def test_no_fallback_for_image_url_site_name(self, sample_plain_html):
        record = extract_ogp(sample_plain_html)

        assert record.image_url is None
        assert record.canonical_url is None
        assert record.site_name is None


class TestEmptyContent:
    """An og tag with content="" is ignored and the fallbacks still apply."""

    def test_empty_og_title_falls_back_to_title_tag(self):
        html = '<title>Document Title</title><meta property="og:title" content="">'
        assert extract_ogp(html).title == "Document Title"

    def test_empty_og_description_falls_back_to_meta_description(self):
        html = '<meta name="description" content="Meta"><meta property="og:description" content="">'
        assert extract_ogp(html).description == "Meta"

    def test_empty_duplicate_does_not_erase_earlier_value(self):
        html = '<meta property="og:title" content="Kept"><meta property="og:title" content="">'
        assert extract_ogp(html).title == "Kept"

    def test_empty_og_image_stays_absent(self):
        assert extract_ogp('<meta property="og:image" content="">').image_url is None

    def test_content_kept_verbatim(self):
        html = '<meta property="og:site_name" content="  Site  ">'
        assert extract_ogp(html).site_name == "  Site  "

    def test_empty_content_ignored_by_regex_fallback(self, monkeypatch):
        def boom(*args, **kwargs):  # noqa: ARG001
            raise RuntimeError("parser exploded")

        monkeypatch.setattr(ogp_extractor, "BeautifulSoup", boom)

        html = '<title>Doc</title><meta property="og:title" content="">'
        assert extract_ogp(html).title == "Doc"


class TestRobustness:
    """Malformed and degenerate input."""

    @pytest.mark.parametrize("html", ["", None, 42])
    def test_degenerate_input_yields_empty_record(self, html):
        record = extract_ogp(html)  # type: ignore[arg-type]

        assert record == OgpRecord()
        assert record.is_empty

    def test_broken_markup(self):
        html = (
            '<html><head><meta property="og:title" content="Broken <b>page"'
            "<title>Unclosed<meta property='og:site_name' content='Site'"
            "</head><body><div><p></span>"
        )
        record = extract_ogp(html)

        assert isinstance(record, OgpRecord)

    def test_unclosed_head_still_read(self):
        html = '<meta property="og:title" content="Still here"><div><p>no closing tags'
        assert extract_ogp(html).title == "Still here"

    def test_idempotent(self, sample_og_html):
        assert extract_ogp(sample_og_html) == extract_ogp(sample_og_html)

    def test_regex_fallback_when_parser_fails(self, monkeypatch, sample_og_html):
        def boom(*args, **kwargs):  # noqa: ARG001
            raise RuntimeError("parser exploded")

        monkeypatch.setattr(ogp_extractor, "BeautifulSoup", boom)

        record = extract_ogp(sample_og_html)
        assert record.title == "Example Article"
        assert record.site_name == "Example Site"

    def test_regex_fallback_applies_title_fallback(self, monkeypatch, sample_plain_html):
        def boom(*args, **kwargs):  # noqa: ARG001
            raise RuntimeError("parser exploded")

        monkeypatch.setattr(ogp_extractor, "BeautifulSoup", boom)

        record = extract_ogp(sample_plain_html)
        assert record.title == "Plain Page"
        assert record.description == "Plain description"
