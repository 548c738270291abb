"""
Unit tests for frontmatter extraction.
"""

from quotesmith.frontmatter import extract_cover, render_frontmatter
from quotesmith.models import CoverPageData


class TestExtractCover:
    """Tests for extract_cover."""

    def test_cover_and_body_are_split(self, scenario_document):
        """Test a titled frontmatter block becomes cover data."""
        cover, body = extract_cover(scenario_document)

        assert cover is not None
        assert cover.title == "Test Quote"
        assert body == "## Summary\nHello **world**."

    def test_all_known_keys(self):
        """Test every supported key is read."""
        text = (
            "---\n"
            "title: NetSuite ERP Optimization &\n"
            "titleAccent: Shopify Integration.\n"
            "subtitle: A proposal\n"
            "clientName: Acme Industries Inc.\n"
            "clientAddress: 100 Innovation Dr\n"
            "clientCity: San Francisco, CA 94105\n"
            "---\n"
            "Body\n"
        )
        cover, body = extract_cover(text)

        assert cover.title == "NetSuite ERP Optimization &"
        assert cover.title_accent == "Shopify Integration."
        assert cover.client_name == "Acme Industries Inc."
        assert cover.client_city == "San Francisco, CA 94105"
        assert body == "Body\n"

    def test_no_frontmatter(self):
        """Test plain text passes through untouched."""
        text = "## Heading\n\nBody"
        assert extract_cover(text) == (None, text)

    def test_empty_input(self):
        assert extract_cover("") == (None, "")

    def test_missing_title_means_no_cover(self):
        """Test frontmatter without a title is ignored entirely."""
        text = "---\nsubtitle: Only a subtitle\n---\nBody"
        assert extract_cover(text) == (None, text)

    def test_title_accent_alone_is_enough(self):
        cover, body = extract_cover("---\ntitleAccent: Accent\n---\nBody")
        assert cover.title_accent == "Accent"
        assert body == "Body"

    def test_unterminated_block(self):
        """Test a block without a closing delimiter is not frontmatter."""
        text = "---\ntitle: Broken\nBody"
        assert extract_cover(text) == (None, text)

    def test_value_keeps_later_colons(self):
        cover, _ = extract_cover("---\ntitle: Phase 1: Discovery\n---\n")
        assert cover.title == "Phase 1: Discovery"

    def test_unknown_keys_and_junk_lines_ignored(self):
        cover, _ = extract_cover("---\ntitle: T\nauthor: Someone\nno separator here\n---\n")
        assert cover == CoverPageData(title="T")

    def test_body_alone_has_no_cover(self, scenario_document):
        """Test re-running extraction on the body finds nothing."""
        _, body = extract_cover(scenario_document)
        assert extract_cover(body) == (None, body)


class TestRenderFrontmatter:
    """Tests for render_frontmatter."""

    def test_round_trip(self):
        cover = CoverPageData(title="Quote", titleAccent="Accent", clientName="Acme")
        text = render_frontmatter(cover) + "Body"

        assert extract_cover(text) == (cover, "Body")

    def test_empty_fields_skipped(self):
        text = render_frontmatter(CoverPageData(title="Quote"))
        assert text == "---\ntitle: Quote\n---\n"
