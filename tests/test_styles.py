"""
Unit tests for style tokens and template resolution.
"""

import pytest
from pydantic import ValidationError

from quotesmith.models import ExportConfig, TemplateConfig
from quotesmith.styles import (
    heading_key, length_to_points, padding_to_points, page_config, primary_family,
    resolve_styles,
)


class TestLengthTokens:
    """Tests for CSS-like length conversion."""

    @pytest.mark.parametrize("token,expected", [
        ("12pt", 12.0),
        ("16px", 12.0),
        ("16", 12.0),
        ("1in", 72.0),
        ("1cm", 28.3465),
    ])
    def test_length_to_points(self, token, expected):
        assert length_to_points(token) == pytest.approx(expected)

    def test_unparseable_length_uses_default(self):
        assert length_to_points("large", 5.0) == 5.0

    def test_padding_shorthand(self):
        assert padding_to_points("48px 56px") == (36.0, 42.0, 36.0, 42.0)
        assert padding_to_points("10pt") == (10.0, 10.0, 10.0, 10.0)
        assert padding_to_points("1pt 2pt 3pt") == (1.0, 2.0, 3.0, 2.0)
        assert padding_to_points("1pt 2pt 3pt 4pt") == (1.0, 2.0, 3.0, 4.0)

    def test_primary_family(self):
        assert primary_family('"Open Sans", Arial, sans-serif') == "Open Sans"


class TestPageConfig:
    """Tests for page formats."""

    def test_portrait_and_landscape(self):
        assert page_config.size("a4") == (595.28, 841.89)
        assert page_config.size("letter", "landscape") == (792.0, 612.0)
        assert page_config.size("legal") == (612.0, 1008.0)


class TestResolveStyles:
    """Tests for resolve_styles."""

    def test_heading_sizes_descend(self, styles):
        sizes = [styles.block(heading_key(level)).size for level in (1, 2, 3)]
        assert sizes[0] > sizes[1] > sizes[2] > styles.block("paragraph").size

    def test_default_sizes_in_points(self, styles):
        assert styles.block("h1").size == pytest.approx(22)
        assert styles.block("paragraph").size == pytest.approx(11)
        assert styles.block("table_cell").size == pytest.approx(10)

    def test_base_font_size_scales_blocks(self):
        styles = resolve_styles(TemplateConfig(baseFontSize="22pt"))
        assert styles.block("paragraph").size == pytest.approx(22)
        assert styles.block("h1").size == pytest.approx(44)

    def test_color_tokens_pass_through(self):
        template = TemplateConfig(primaryColor="navy", textColor="#123")
        styles = resolve_styles(template)

        assert styles.block("h1").color == "navy"
        assert styles.block("paragraph").color == "#123"
        assert styles.block("table_header").background == "navy"

    def test_region_toggles(self):
        styles = resolve_styles(TemplateConfig(
            showFooter=False, showDate=False, showQuoteNumber=True, showValidityPeriod=False,
        ))

        assert styles.region("footer") is None
        assert not styles.has_region("header_date")
        assert not styles.has_region("header_validity")
        assert styles.has_region("header_quote_number")
        assert styles.has_region("cover")
        assert styles.has_region("showcase")

    def test_default_regions(self, styles):
        for key in ("footer", "header_date", "header_validity", "header_quote_number"):
            assert styles.has_region(key)

    def test_showcase_uses_fixed_dark_palette(self):
        styles = resolve_styles(TemplateConfig(primaryColor="#ff0000"))
        assert styles.region("showcase").background == "#0a0a0a"


class TestConfigModels:
    """Tests for template and export validation."""

    def test_template_is_frozen(self, default_template):
        with pytest.raises(ValidationError):
            default_template.company_name = "Other"

    def test_invalid_color_rejected(self):
        with pytest.raises(ValidationError):
            TemplateConfig(primaryColor="not-a-color")

    def test_validity_days_must_be_positive(self):
        with pytest.raises(ValidationError):
            TemplateConfig(validityDays=0)

    def test_export_enums_case_insensitive(self):
        export = ExportConfig(pageSize="A4", orientation="Landscape", quality="HIGH")
        assert (export.page_size, export.orientation, export.quality) == ("a4", "landscape", "high")

    def test_unknown_page_size_rejected(self):
        with pytest.raises(ValidationError):
            ExportConfig(pageSize="a5")

    def test_snake_case_names_accepted(self):
        template = TemplateConfig(company_name="Acme")
        assert template.model_dump(by_alias=True)["companyName"] == "Acme"
