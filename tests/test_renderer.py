"""
Unit tests for the PDF renderer.
"""

import io
import re

import pytest
from PIL import Image as PILImage

from quotesmith.catalog import DEFAULT_DOCUMENT
from quotesmith.frontmatter import extract_cover
from quotesmith.layout import layout_pages
from quotesmith.markdown import parse_blocks
from quotesmith.models import ExportConfig
from quotesmith.renderer import PDFRenderer, RenderError, parse_color, render_pdf
from quotesmith.typesetting import FontContext

PAGE_PATTERN = re.compile(rb"/Type /Page\b")


@pytest.fixture
def sample_pages(default_template, a4_export, fonts, case_studies, issued_on, styles):
    """Cover, body and showcase pages for the sample document."""
    cover, body = extract_cover(DEFAULT_DOCUMENT)
    return layout_pages(
        parse_blocks(body), cover, case_studies, default_template, a4_export,
        quote_number="BR-0001", issued_on=issued_on, styles=styles, fonts=fonts,
    )


class TestRenderPdf:
    """Tests for render_pdf."""

    def test_produces_pdf(self, sample_pages, styles):
        pdf = render_pdf(sample_pages, styles, fonts=FontContext(fonts_dir=""))

        assert pdf.startswith(b"%PDF")
        assert pdf.rstrip().endswith(b"%%EOF")

    def test_one_pdf_page_per_layout_page(self, sample_pages, styles):
        pdf = render_pdf(sample_pages, styles, fonts=FontContext(fonts_dir=""))
        assert len(PAGE_PATTERN.findall(pdf)) == len(sample_pages)

    def test_deterministic(self, sample_pages, styles, png_logo):
        """Test identical input yields identical bytes."""
        metadata = {"title": "Quote", "author": "BrokenRubik Inc."}
        first = render_pdf(sample_pages, styles, png_logo, fonts=FontContext(fonts_dir=""), metadata=metadata)
        second = render_pdf(sample_pages, styles, png_logo, fonts=FontContext(fonts_dir=""), metadata=metadata)

        assert first == second

    def test_undecodable_logo_falls_back(self, sample_pages, styles):
        pdf = render_pdf(sample_pages, styles, b"definitely not an image", fonts=FontContext(fonts_dir=""))
        assert pdf.startswith(b"%PDF")

    def test_oversized_logo_falls_back(self, monkeypatch, sample_pages, styles, png_logo, caplog):
        # 200x80 is more than twice this limit, which Pillow refuses outright
        monkeypatch.setattr(PILImage, "MAX_IMAGE_PIXELS", 1000)
        renderer = PDFRenderer(sample_pages, styles, png_logo, fonts=FontContext(fonts_dir=""))

        assert renderer.logo is None
        assert "Logo could not be decoded" in caplog.text
        assert renderer.render().startswith(b"%PDF")

    def test_logo_is_downsampled(self, styles, sample_pages):
        buf = io.BytesIO()
        PILImage.new("RGBA", (1000, 400), (255, 0, 0, 255)).save(buf, format="PNG")
        renderer = PDFRenderer(sample_pages, styles, buf.getvalue(), fonts=FontContext(fonts_dir=""))
        width, height = renderer.logo.getSize()

        # 40pt logo box at raster scale 2
        assert height == 80
        assert width == 200

    def test_landscape_letter(self, default_template, fonts, styles):
        export = ExportConfig(pageSize="letter", orientation="landscape")
        pages = layout_pages(parse_blocks("# Wide\n\nBody"), None, [], default_template, export,
                             styles=styles, fonts=fonts)
        pdf = render_pdf(pages, styles, fonts=fonts)

        assert b"792 612" in pdf

    def test_failure_raises_render_error(self, sample_pages, styles, monkeypatch):
        def broken(self):
            raise RuntimeError("disk full")

        monkeypatch.setattr(PDFRenderer, "render", broken)

        with pytest.raises(RenderError, match="disk full"):
            render_pdf(sample_pages, styles, fonts=FontContext(fonts_dir=""))


class TestParseColor:
    """Tests for color token conversion."""

    def test_short_hex_expands(self):
        assert parse_color("#abc").rgb() == parse_color("#aabbcc").rgb()

    def test_named_color(self):
        assert parse_color("white").rgb() == (1.0, 1.0, 1.0)
