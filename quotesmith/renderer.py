"""
PDF rendering engine using ReportLab.

Draws laid-out pages (cover, body and showcase) onto a canvas. All placement
decisions were made by the layout assembler; the renderer only re-wraps text
with the same measurer so lines land exactly where layout measured them.
Output is byte-for-byte deterministic for identical input.

License: MIT
"""

import io
import logging
from typing import Dict, List as ListType, Optional, Sequence

from PIL import Image as PILImage
from reportlab.lib.colors import Color, toColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from quotesmith.config import get_settings
from quotesmith.layout import (
    SHOWCASE_BADGE, SHOWCASE_FOOTER_HEIGHT, SHOWCASE_INDEX_BOX, SHOWCASE_INTRO,
    SHOWCASE_TITLE, BlockMeasurer,
)
from quotesmith.models import (
    CoverRegion, FooterRegion, HeaderRegion, Heading, ListBlock, Page,
    PageGeometry, Paragraph, PlacedBlock, Quote, RichText, Table,
)
from quotesmith.styles import (
    LIST_MARKERS, BlockStyle, RegionStyle, StyleMap, colors, spacing,
)
from quotesmith.typesetting import FontContext, span_font, text_width, wrap_plain

logger = logging.getLogger(__name__)


# Logo box heights in points
COVER_LOGO_HEIGHT = 40
HEADER_LOGO_HEIGHT = 28


class RenderError(Exception):
    """Raised when a PDF cannot be produced."""


def parse_color(token: str) -> Color:
    """Convert a hex or named color token to a ReportLab color."""
    value = token.strip()
    if value.startswith("#") and len(value) == 4:
        value = "#" + "".join(ch * 2 for ch in value[1:])
    return toColor(value)


class PDFRenderer:
    """
    Renders laid-out pages to PDF using ReportLab.

    Args:
        pages: Pages produced by the layout assembler
        styles: Resolved styles shared with layout
        logo_asset: Raw logo image bytes, if any
        fonts: Font context shared with layout
        metadata: Optional PDF info (title, author, subject)
    """

    def __init__(self, pages: Sequence[Page], styles: StyleMap,
                 logo_asset: Optional[bytes] = None,
                 fonts: Optional[FontContext] = None,
                 metadata: Optional[Dict[str, str]] = None):
        self.pages = list(pages)
        self.styles = styles
        self.fonts = fonts or FontContext()
        self.font_set = self.fonts.ensure_loaded(styles.page.font_family)
        self.buffer = io.BytesIO()

        first = self.pages[0].geometry if self.pages else None
        pagesize = (first.width, first.height) if first else (595.28, 841.89)
        # invariant=1 keeps timestamps and document IDs out of the file
        self.c = canvas.Canvas(self.buffer, pagesize=pagesize, invariant=1)

        metadata = metadata or {}
        if metadata.get("title"):
            self.c.setTitle(metadata["title"])
        if metadata.get("author"):
            self.c.setAuthor(metadata["author"])
        if metadata.get("subject"):
            self.c.setSubject(metadata["subject"])

        raster_scale = first.raster_scale if first else 2.0
        self.logo = self._load_logo(logo_asset, raster_scale)
        self._measurers: Dict[float, BlockMeasurer] = {}

    def render(self) -> bytes:
        """
        Render every page.

        Returns:
            PDF bytes
        """
        last_index = len(self.pages) - 1
        for idx, page in enumerate(self.pages):
            self.c.setPageSize((page.geometry.width, page.geometry.height))
            if page.kind == "cover":
                self._render_cover(page)
            elif page.kind == "showcase":
                self._render_showcase(page, is_last=(idx == last_index))
            else:
                self._render_body(page)
            self.c.showPage()

        self.c.save()
        return self.buffer.getvalue()

    # ─── Resources ────────────────────────────────────────────────────────────

    def _load_logo(self, data: Optional[bytes], raster_scale: float) -> Optional[ImageReader]:
        """Decode and downsample the logo; None when absent or undecodable."""
        if not data:
            return None
        try:
            image = PILImage.open(io.BytesIO(data))
            image.load()
        except (OSError, ValueError, PILImage.DecompressionBombError) as e:
            logger.warning(f"Logo could not be decoded: {e}")
            return None

        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA")
        target_height = int(round(COVER_LOGO_HEIGHT * raster_scale))
        if image.height > target_height:
            target_width = max(1, int(round(image.width * target_height / image.height)))
            image = image.resize((target_width, target_height), PILImage.LANCZOS)
        return ImageReader(image)

    def _measurer(self, geometry: PageGeometry) -> BlockMeasurer:
        width = geometry.content_width
        if width not in self._measurers:
            self._measurers[width] = BlockMeasurer(self.styles, self.font_set, width)
        return self._measurers[width]

    def _draw_logo(self, x: float, top: float, height: float) -> float:
        """Draw the logo (or an empty placeholder box) and return its width."""
        if self.logo is not None:
            img_width, img_height = self.logo.getSize()
            width = height * img_width / img_height
            self.c.drawImage(self.logo, x, top - height, width=width, height=height,
                             preserveAspectRatio=True, mask="auto")
            return width

        width = height * 2.5
        self.c.setStrokeColor(parse_color(colors.divider))
        self.c.setLineWidth(0.75)
        self.c.roundRect(x, top - height, width, height, 4, stroke=1, fill=0)
        return width

    def _fill_page(self, geometry: PageGeometry, color: str):
        self.c.setFillColor(parse_color(color))
        self.c.rect(0, 0, geometry.width, geometry.height, stroke=0, fill=1)

    # ─── Text ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _baseline(line_top: float, style: BlockStyle) -> float:
        return line_top - (style.line_height - style.size) / 2 - style.size * 0.78

    def _draw_spans(self, line: ListType[RichText], x: float, baseline: float,
                    style: BlockStyle, color: Optional[str] = None) -> float:
        """Draw one wrapped line of spans; returns the x after the last span."""
        fill = parse_color(color or style.color)
        for span in line:
            font_name = span_font(span, self.font_set, style.bold, style.italic)
            width = text_width(span.text, font_name, style.size)
            self.c.setFont(font_name, style.size)
            self.c.setFillColor(fill)
            self.c.drawString(x, baseline, span.text)
            if span.link:
                self.c.setStrokeColor(fill)
                self.c.setLineWidth(0.5)
                self.c.line(x, baseline - 1.5, x + width, baseline - 1.5)
                self.c.linkURL(span.link, (x, baseline - 2, x + width, baseline + style.size),
                               relative=0, thickness=0)
            x += width
        return x

    def _draw_lines(self, lines: ListType[ListType[RichText]], x: float, top: float,
                    style: BlockStyle, color: Optional[str] = None) -> float:
        """Draw stacked lines from `top`; returns the y below the last line."""
        y = top
        for line in lines:
            self._draw_spans(line, x, self._baseline(y, style), style, color)
            y -= style.line_height
        return y

    # ─── Body pages ───────────────────────────────────────────────────────────

    def _render_body(self, page: Page):
        geometry = page.geometry
        self._fill_page(geometry, self.styles.page.background)

        content_top = geometry.height - geometry.margin_top
        if page.header is not None:
            self._render_header(page.header, geometry, content_top)
            content_top -= page.header.height

        measurer = self._measurer(geometry)
        for placed in page.blocks:
            self._render_block(placed, measurer, geometry.margin_left, content_top - placed.top)

        if page.footer is not None:
            self._render_footer(page.footer, geometry)

    def _render_block(self, placed: PlacedBlock, measurer: BlockMeasurer, x: float, top: float):
        """Render a single placed block based on its type."""
        block = placed.block
        if isinstance(block, Heading):
            self._render_heading(block, measurer, x, top)
        elif isinstance(block, Paragraph):
            self._render_paragraph(placed, measurer, x, top)
        elif isinstance(block, ListBlock):
            self._render_list(placed, measurer, x, top)
        elif isinstance(block, Table):
            self._render_table(placed, measurer, x, top)
        elif isinstance(block, Quote):
            self._render_quote(placed, measurer, x, top)
        else:
            self._render_rule(measurer, x, top)

    def _slice(self, placed: PlacedBlock, measurer: BlockMeasurer):
        return placed.part or (0, measurer.part_count(placed.block))

    def _render_heading(self, heading: Heading, measurer: BlockMeasurer, x: float, top: float):
        style = measurer.style_for(heading)
        y = self._draw_lines(measurer.text_lines(heading), x, top - style.space_before, style)
        if style.border_width:
            y -= style.padding
            self.c.setStrokeColor(parse_color(style.border_color))
            self.c.setLineWidth(style.border_width)
            self.c.line(x, y, x + measurer.width, y)

    def _render_paragraph(self, placed: PlacedBlock, measurer: BlockMeasurer, x: float, top: float):
        style = measurer.style_for(placed.block)
        start, end = self._slice(placed, measurer)
        self._draw_lines(measurer.text_lines(placed.block)[start:end], x, top, style)

    def _render_quote(self, placed: PlacedBlock, measurer: BlockMeasurer, x: float, top: float):
        style = measurer.style_for(placed.block)
        start, end = self._slice(placed, measurer)
        lines = measurer.text_lines(placed.block)[start:end]

        box_top = top - style.space_before
        box_height = 2 * style.padding + len(lines) * style.line_height
        self.c.setFillColor(parse_color(style.background))
        self.c.rect(x, box_top - box_height, measurer.width, box_height, stroke=0, fill=1)
        self.c.setFillColor(parse_color(style.border_color))
        self.c.rect(x, box_top - box_height, style.border_width, box_height, stroke=0, fill=1)

        text_x = x + style.border_width + style.padding
        self._draw_lines(lines, text_x, box_top - style.padding, style)

    def _render_list(self, placed: PlacedBlock, measurer: BlockMeasurer, x: float, top: float):
        """Render list items with bullets or running numbers."""
        block = placed.block
        style = measurer.style_for(block)
        start, end = self._slice(placed, measurer)
        item_lines = measurer.item_lines(block)

        y = top
        for number in range(start, end):
            lines = item_lines[number]
            marker = f"{number + 1}." if block.ordered else LIST_MARKERS["bullet"]
            self.c.setFont(self.font_set.pick(bold=block.ordered), style.size)
            self.c.setFillColor(parse_color(style.color))
            self.c.drawString(x, self._baseline(y, style), marker)
            y = self._draw_lines(lines, x + style.indent, y, style)
            y -= style.padding

    def _render_table(self, placed: PlacedBlock, measurer: BlockMeasurer, x: float, top: float):
        """Render a table; slices repeat the header row."""
        table = placed.block
        cell_style = measurer.style_for(table)
        header_style = self.styles.block("table_header")
        start, end = self._slice(placed, measurer)
        col_width = measurer.column_width(table)

        y = top - cell_style.space_before
        height = measurer.row_height(table.headers, header_style, col_width)
        self.c.setFillColor(parse_color(header_style.background))
        self.c.rect(x, y - height, measurer.width, height, stroke=0, fill=1)
        self._render_row(table.headers, header_style, x, y, col_width, measurer)
        y -= height

        for index in range(start, end):
            row = table.rows[index]
            height = measurer.row_height(row, cell_style, col_width)
            if index % 2 == 1:
                self.c.setFillColor(parse_color(cell_style.background))
                self.c.rect(x, y - height, measurer.width, height, stroke=0, fill=1)
            self._render_row(row, cell_style, x, y, col_width, measurer)
            y -= height
            self.c.setStrokeColor(parse_color(cell_style.border_color))
            self.c.setLineWidth(cell_style.border_width)
            self.c.line(x, y, x + measurer.width, y)

    def _render_row(self, cells: ListType[ListType[RichText]], style: BlockStyle,
                    x: float, top: float, col_width: float, measurer: BlockMeasurer):
        inner = col_width - 2 * style.padding
        for col, cell in enumerate(cells):
            lines = measurer.wrap(cell, inner, style)
            self._draw_lines(lines, x + col * col_width + style.padding, top - style.padding, style)

    def _render_rule(self, measurer: BlockMeasurer, x: float, top: float):
        style = self.styles.block("rule")
        y = top - style.space_before - style.border_width / 2
        self.c.setStrokeColor(parse_color(style.border_color))
        self.c.setLineWidth(style.border_width)
        self.c.line(x, y, x + measurer.width, y)

    # ─── Regions ──────────────────────────────────────────────────────────────

    def _render_header(self, header: HeaderRegion, geometry: PageGeometry, top: float):
        region = self.styles.region("header")
        meta = self.styles.region("header_quote_number") or region
        left = geometry.margin_left
        right = geometry.width - geometry.margin_right

        text_x = left + self._draw_logo(left, top, HEADER_LOGO_HEIGHT) + 10
        self.c.setFillColor(parse_color(region.text))
        self.c.setFont(self.font_set.bold, region.title_size)
        self.c.drawString(text_x, top - region.title_size, header.company_name)
        if header.company_tagline:
            self.c.setFillColor(parse_color(region.muted))
            self.c.setFont(self.font_set.regular, region.body_size)
            self.c.drawString(text_x, top - region.title_size * 1.3 - region.body_size,
                              header.company_tagline)

        y = top - meta.body_size * 1.2
        if header.quote_number:
            self.c.setFillColor(parse_color(region.accent))
            self.c.setFont(self.font_set.bold, meta.body_size + 1.5)
            self.c.drawRightString(right, y, header.quote_number)
            y -= meta.body_size * 1.6
        self.c.setFillColor(parse_color(meta.text))
        self.c.setFont(self.font_set.regular, meta.body_size)
        if header.date:
            self.c.drawRightString(right, y, f"Date: {header.date}")
            y -= meta.body_size * 1.6
        if header.valid_until:
            self.c.drawRightString(right, y, f"Valid until: {header.valid_until}")

        border_y = top - header.height + spacing.header_gap / 2
        self.c.setStrokeColor(parse_color(region.border))
        self.c.setLineWidth(2)
        self.c.line(left, border_y, right, border_y)

    def _render_footer(self, footer: FooterRegion, geometry: PageGeometry):
        region = self.styles.region("footer")
        left = geometry.margin_left
        right = geometry.width - geometry.margin_right
        line_y = geometry.margin_bottom + footer.height

        self.c.setStrokeColor(parse_color(region.border))
        self.c.setLineWidth(1)
        self.c.line(left, line_y, right, line_y)

        baseline = line_y - spacing.footer_gap - region.body_size
        self.c.setFillColor(parse_color(region.text))
        self.c.setFont(self.font_set.regular, region.body_size)
        self.c.drawString(left, baseline, footer.contact)
        if footer.text:
            self.c.drawRightString(right, baseline, footer.text)

    # ─── Cover ────────────────────────────────────────────────────────────────

    def _render_cover(self, page: Page):
        """Render the cover: logo, badge, title block and the two info cards."""
        geometry = page.geometry
        cover: CoverRegion = page.cover
        region = self.styles.region("cover")
        left = geometry.margin_left
        right = geometry.width - geometry.margin_right
        width = geometry.content_width
        top = geometry.height - geometry.margin_top

        self._fill_page(geometry, region.background)
        self._draw_logo(left, top, COVER_LOGO_HEIGHT)
        self._draw_badge(cover.badge, right, top - 6, region)

        y = top - COVER_LOGO_HEIGHT - 80
        data = cover.data
        for text, color in ((data.title, region.text), (data.title_accent, region.accent)):
            if not text:
                continue
            self.c.setFillColor(parse_color(color))
            self.c.setFont(self.font_set.bold, region.title_size)
            for line in wrap_plain(text, width, region.title_size, self.font_set.bold):
                y -= region.title_size * 1.1
                self.c.drawString(left, y, line)
        if data.subtitle:
            y -= 16
            self.c.setFillColor(parse_color(region.muted))
            self.c.setFont(self.font_set.regular, region.body_size)
            for line in wrap_plain(data.subtitle, width * 0.8, region.body_size, self.font_set.regular):
                y -= region.body_size * 1.5
                self.c.drawString(left, y, line)

        card_width = (width - 20) / 2
        card_height = 110
        card_y = geometry.margin_bottom
        prepared_for = [
            (data.client_name or "Client Name", True),
            (data.client_address or "Address", False),
            (data.client_city or "City, State ZIP", False),
        ]
        prepared_by = [(cover.company_name, True), (cover.company_tagline, False)]
        if cover.date:
            prepared_by.append((cover.date, False))
        self._draw_card("PREPARED FOR", prepared_for, left, card_y, card_width, card_height, region)
        self._draw_card("PREPARED BY", prepared_by, left + card_width + 20, card_y,
                        card_width, card_height, region)

    def _draw_badge(self, text: str, right: float, top: float, region: RegionStyle,
                    fill: Optional[str] = None, ink: Optional[str] = None):
        size = region.label_size
        font = self.font_set.bold
        width = text_width(text, font, size) + 20
        height = size + 12
        self.c.setFillColor(parse_color(fill or region.highlight))
        self.c.roundRect(right - width, top - height, width, height, height / 2, stroke=0, fill=1)
        self.c.setFillColor(parse_color(ink or region.background))
        self.c.setFont(font, size)
        self.c.drawString(right - width + 10, top - height + 6 + size * 0.12, text)

    def _draw_card(self, label: str, rows, x: float, y: float, width: float, height: float,
                   region: RegionStyle):
        self.c.setFillColor(parse_color(region.surface))
        self.c.setStrokeColor(parse_color(region.border))
        self.c.setLineWidth(0.75)
        self.c.roundRect(x, y, width, height, 6, stroke=1, fill=1)

        pad = 16
        baseline = y + height - pad - region.label_size
        self.c.setFillColor(parse_color(region.muted))
        self.c.setFont(self.font_set.bold, region.label_size)
        self.c.drawString(x + pad, baseline, label)
        baseline -= 10

        for text, strong in rows:
            if not text:
                continue
            size = region.body_size - (0 if strong else 2)
            baseline -= size * 1.4
            self.c.setFillColor(parse_color(region.text if strong else region.muted))
            self.c.setFont(self.font_set.bold if strong else self.font_set.regular, size)
            self.c.drawString(x + pad, baseline, text)

    # ─── Showcase ─────────────────────────────────────────────────────────────

    def _render_showcase(self, page: Page, is_last: bool):
        """Render a dark showcase page with numbered case studies."""
        geometry = page.geometry
        region = self.styles.region("showcase")
        left = geometry.margin_left
        right = geometry.width - geometry.margin_right
        width = geometry.content_width
        top = geometry.height - geometry.margin_top

        self._fill_page(geometry, region.background)

        if not page.continued:
            y = top
            badge_width = text_width(SHOWCASE_BADGE, self.font_set.bold, region.label_size) + 20
            self._draw_badge(SHOWCASE_BADGE, left + badge_width, y, region,
                             fill=region.surface, ink=region.accent)
            y -= region.label_size * 1.4 + 10 + 12
            y -= region.title_size
            self.c.setFillColor(parse_color(region.text))
            self.c.setFont(self.font_set.bold, region.title_size)
            self.c.drawString(left, y, SHOWCASE_TITLE)
            y -= region.title_size * 0.2 + 8
            self.c.setFillColor(parse_color(region.muted))
            self.c.setFont(self.font_set.regular, region.body_size)
            for line in wrap_plain(SHOWCASE_INTRO, min(width, 320), region.body_size, self.font_set.regular):
                y -= region.body_size * 1.4
                self.c.drawString(left, y, line)

        text_x = left + SHOWCASE_INDEX_BOX + 12
        text_width_max = width - SHOWCASE_INDEX_BOX - 12
        summary_size = region.body_size - 2
        bottom = top
        for entry in page.entries:
            entry_top = top - entry.top - spacing.showcase_entry_gap
            self.c.setFillColor(parse_color(region.surface))
            self.c.roundRect(left, entry_top - SHOWCASE_INDEX_BOX, SHOWCASE_INDEX_BOX,
                             SHOWCASE_INDEX_BOX, 6, stroke=0, fill=1)
            self.c.setFillColor(parse_color(region.accent))
            self.c.setFont(self.font_set.bold, summary_size)
            self.c.drawCentredString(left + SHOWCASE_INDEX_BOX / 2,
                                     entry_top - SHOWCASE_INDEX_BOX / 2 - summary_size * 0.35,
                                     entry.index)

            y = entry_top
            self.c.setFillColor(parse_color(region.text))
            self.c.setFont(self.font_set.bold, region.body_size)
            for line in wrap_plain(entry.study.title, text_width_max, region.body_size, self.font_set.bold):
                y -= region.body_size * 1.3
                self.c.drawString(text_x, y + region.body_size * 0.25, line)
            y -= 3
            if entry.study.summary:
                self.c.setFillColor(parse_color(region.muted))
                self.c.setFont(self.font_set.regular, summary_size)
                for line in wrap_plain(entry.study.summary, text_width_max, summary_size, self.font_set.regular):
                    y -= summary_size * 1.4
                    self.c.drawString(text_x, y + summary_size * 0.3, line)

            bottom = top - entry.top - entry.height
            if entry.study.link:
                self.c.linkURL(entry.study.link, (left, bottom, right, top - entry.top),
                               relative=0, thickness=0)
            self.c.setStrokeColor(parse_color(region.border))
            self.c.setLineWidth(0.75)
            self.c.line(left, bottom, right, bottom)

        if is_last:
            self._render_showcase_cta(page, bottom - 24, region)
        self._render_showcase_footer(page, region)

    def _render_showcase_cta(self, page: Page, top: float, region: RegionStyle):
        left = page.geometry.margin_left
        url = f"{page.website}{get_settings().showcase_path}"
        prefix = "View all case studies at "
        baseline = top - 16 - region.body_size

        self.c.setFont(self.font_set.regular, region.body_size)
        self.c.setFillColor(parse_color(region.muted))
        self.c.drawString(left, baseline, prefix)
        x = left + text_width(prefix, self.font_set.regular, region.body_size)
        self.c.setFont(self.font_set.bold, region.body_size)
        self.c.setFillColor(parse_color(region.highlight))
        self.c.drawString(x, baseline, url)
        url_width = text_width(url, self.font_set.bold, region.body_size)
        self.c.linkURL(f"https://{url}" if "://" not in url else url,
                       (x, baseline - 2, x + url_width, baseline + region.body_size),
                       relative=0, thickness=0)

    def _render_showcase_footer(self, page: Page, region: RegionStyle):
        geometry = page.geometry
        left = geometry.margin_left
        right = geometry.width - geometry.margin_right
        line_y = geometry.margin_bottom + SHOWCASE_FOOTER_HEIGHT - 10

        self.c.setStrokeColor(parse_color(region.border))
        self.c.setLineWidth(0.75)
        self.c.line(left, line_y, right, line_y)
        self.c.setFont(self.font_set.regular, region.label_size)
        self.c.setFillColor(parse_color(region.muted))
        self.c.drawString(left, geometry.margin_bottom, page.company_name)
        self.c.drawRightString(right, geometry.margin_bottom, page.website)


def render_pdf(pages: Sequence[Page], styles: StyleMap, logo_asset: Optional[bytes] = None, *,
               fonts: Optional[FontContext] = None,
               metadata: Optional[Dict[str, str]] = None) -> bytes:
    """
    Render laid-out pages to PDF bytes.

    Args:
        pages: Pages from layout_pages
        styles: StyleMap used for layout
        logo_asset: Logo image bytes; a placeholder box is drawn when missing
        fonts: Font context shared with layout
        metadata: Optional PDF info dictionary entries

    Returns:
        PDF bytes

    Raises:
        RenderError: If the document cannot be serialized
    """
    try:
        renderer = PDFRenderer(pages, styles, logo_asset, fonts=fonts, metadata=metadata)
        return renderer.render()
    except RenderError:
        raise
    except Exception as e:
        logger.error(f"PDF rendering failed: {e}", exc_info=True)
        raise RenderError(str(e)) from e
