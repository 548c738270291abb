"""
Pagination and layout assembly.

Blocks are measured with the same fonts the renderer uses, grouped into
break-avoidance units and flowed onto pages. A unit that does not fit the
space left on a page moves whole to the next page; only a unit taller than
a full page is split, at line/item/row granularity. Layout always
terminates: an indivisible piece taller than a page is placed alone and
marked as overflowing.

License: MIT
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Dict, List as ListType, Optional, Sequence, Tuple

from quotesmith.models import (
    AvoidClass, Block, CaseStudyRef, CoverPageData, CoverRegion, ExportConfig,
    FooterRegion, HeaderRegion, Heading, ListBlock, Page, PageGeometry,
    Paragraph, PlacedBlock, Quote, RichText, Rule, ShowcaseEntry, Table,
    TemplateConfig,
)
from quotesmith.styles import (
    RASTER_SCALES, BlockStyle, StyleMap, heading_key, padding_to_points,
    page_config, resolve_styles, spacing,
)
from quotesmith.typesetting import FontContext, FontSet, wrap_plain, wrap_spans

logger = logging.getLogger(__name__)


SHOWCASE_BADGE = "PORTFOLIO"
SHOWCASE_TITLE = "Our Work Speaks"
SHOWCASE_INTRO = "Explore how we've helped businesses transform their operations."
SHOWCASE_INDEX_BOX = 28
SHOWCASE_FOOTER_HEIGHT = 30


def page_geometry(template: TemplateConfig, export: ExportConfig) -> PageGeometry:
    """Page size, orientation and margins for an export."""
    width, height = page_config.size(export.page_size, export.orientation)
    top, right, bottom, left = padding_to_points(template.page_padding)
    return PageGeometry(
        width=width,
        height=height,
        margin_top=top,
        margin_right=right,
        margin_bottom=bottom,
        margin_left=left,
        raster_scale=RASTER_SCALES[export.quality],
    )


def format_date(value: date, long_month: bool = False) -> str:
    """US-style date, e.g. 'Oct 18, 2026' or 'October 18, 2026'."""
    month = value.strftime("%B" if long_month else "%b")
    return f"{month} {value.day}, {value.year}"


def format_index(position: int, total: int) -> str:
    """Zero-padded 1-based index, at least two digits wide."""
    width = max(2, len(str(total)))
    return str(position).zfill(width)


# ─── Measurement ──────────────────────────────────────────────────────────────

class BlockMeasurer:
    """
    Measures blocks and block slices for a given content width.

    Heights include the block's own spacing so stacked blocks never overlap.
    Wrapped lines and part heights are cached per block, so measuring the
    slices of a long block costs one wrap.
    """

    def __init__(self, styles: StyleMap, fonts: FontSet, width: float):
        self.styles = styles
        self.fonts = fonts
        self.width = width
        self._cache: Dict[Tuple[str, int], Tuple[Block, object]] = {}

    def _cached(self, kind: str, block: Block, compute: Callable[[], object]):
        # The block is stored with its value so its id cannot be reused
        key = (kind, id(block))
        hit = self._cache.get(key)
        if hit is None or hit[0] is not block:
            hit = (block, compute())
            self._cache[key] = hit
        return hit[1]

    def style_for(self, block: Block) -> BlockStyle:
        if isinstance(block, Heading):
            return self.styles.block(heading_key(block.level))
        if isinstance(block, ListBlock):
            return self.styles.block("list")
        if isinstance(block, Table):
            return self.styles.block("table_cell")
        if isinstance(block, Quote):
            return self.styles.block("quote")
        if isinstance(block, Rule):
            return self.styles.block("rule")
        return self.styles.block("paragraph")

    def wrap(self, spans: ListType[RichText], width: float, style: BlockStyle) -> ListType[ListType[RichText]]:
        return wrap_spans(spans, width, style.size, self.fonts, bold=style.bold, italic=style.italic)

    def text_lines(self, block: Block) -> ListType[ListType[RichText]]:
        """Wrapped lines of a heading, paragraph or quote."""
        def compute():
            style = self.style_for(block)
            if isinstance(block, Quote):
                inner = self.width - 2 * style.padding - style.border_width
                return self.wrap(block.text, inner, style)
            return self.wrap(block.text, self.width, style)
        return self._cached("lines", block, compute)

    def item_lines(self, block: ListBlock) -> ListType[ListType[ListType[RichText]]]:
        def compute():
            style = self.style_for(block)
            return [self.wrap(item, self.width - style.indent, style) for item in block.items]
        return self._cached("items", block, compute)

    def column_width(self, block: Table) -> float:
        return self.width / block.columns

    def row_height(self, cells: ListType[ListType[RichText]], style: BlockStyle, col_width: float) -> float:
        inner = col_width - 2 * style.padding
        tallest = max(len(self.wrap(cell, inner, style)) for cell in cells)
        return tallest * style.line_height + 2 * style.padding

    def part_heights(self, block: Block) -> ListType[float]:
        """Heights of the independently placeable parts, in order."""
        def compute():
            style = self.style_for(block)
            if isinstance(block, (Paragraph, Quote)):
                return [style.line_height] * len(self.text_lines(block))
            if isinstance(block, ListBlock):
                return [len(lines) * style.line_height + style.padding for lines in self.item_lines(block)]
            if isinstance(block, Table):
                col_width = self.column_width(block)
                return [self.row_height(row, style, col_width) for row in block.rows]
            if isinstance(block, Heading):
                lines = len(self.text_lines(block))
                border = style.padding + style.border_width if style.border_width else 0
                return [style.space_before + lines * style.line_height + border + style.space_after]
            return [style.space_before + style.border_width + style.space_after]
        return self._cached("parts", block, compute)

    def overhead(self, block: Block) -> float:
        """Spacing every slice of a block carries besides its parts."""
        def compute():
            style = self.style_for(block)
            if isinstance(block, Paragraph):
                return style.space_after
            if isinstance(block, Quote):
                return style.space_before + 2 * style.padding + style.space_after
            if isinstance(block, ListBlock):
                return style.space_after
            if isinstance(block, Table):
                header_style = self.styles.block("table_header")
                header = self.row_height(block.headers, header_style, self.column_width(block))
                return style.space_before + header + style.space_after
            return 0.0
        return self._cached("overhead", block, compute)

    def part_count(self, block: Block) -> int:
        """Number of independently placeable parts."""
        return len(self.part_heights(block))

    def height(self, block: Block, part: Optional[Tuple[int, int]] = None) -> float:
        """Height of a block, or of the slice `part` of it."""
        heights = self.part_heights(block)
        start, end = part if part else (0, len(heights))
        total = self.overhead(block)
        for value in heights[start:end]:
            total += value
        return total

    def max_parts(self, block: Block, start: int, available: float) -> int:
        """How many parts from `start` fit in `available` points."""
        heights = self.part_heights(block)
        used = self.overhead(block)
        count = 0
        while start + count < len(heights) and used + heights[start + count] <= available:
            used += heights[start + count]
            count += 1
        return count


# ─── Units ────────────────────────────────────────────────────────────────────

@dataclass
class Unit:
    """A group of blocks the paginator keeps together when it can."""
    blocks: ListType[Block]
    avoid: AvoidClass


def block_avoid(block: Block) -> AvoidClass:
    """Break-avoidance class of a block standing on its own."""
    if isinstance(block, ListBlock):
        return "list"
    if isinstance(block, Table):
        return "table"
    if isinstance(block, Quote):
        return "quote"
    return "none"


def build_units(blocks: Sequence[Block]) -> ListType[Unit]:
    """
    Group blocks into break-avoidance units, preserving order.

    A heading is kept with whatever block follows it; consecutive headings
    chain into the same unit.
    """
    units: ListType[Unit] = []
    headings: ListType[Block] = []
    for block in blocks:
        if isinstance(block, Heading):
            headings.append(block)
            continue
        if headings:
            units.append(Unit(headings + [block], "heading_pair"))
            headings = []
        else:
            units.append(Unit([block], block_avoid(block)))
    if headings:
        units.append(Unit(headings, "heading_pair" if len(headings) > 1 else "none"))
    return units


# ─── Body flow ────────────────────────────────────────────────────────────────

class BodyFlow:
    """Places units onto body pages."""

    def __init__(self, measurer: BlockMeasurer, page_capacity: float, first_capacity: float):
        self.measurer = measurer
        self.page_capacity = page_capacity
        self.pages: ListType[ListType[PlacedBlock]] = [[]]
        self.capacity = first_capacity
        self.cursor = 0.0

    @property
    def remaining(self) -> float:
        return self.capacity - self.cursor

    @property
    def fresh_page_gains(self) -> bool:
        """Whether a new page would offer more room than is left here.

        False on an untouched full page; True on the first page once a
        header has taken part of it.
        """
        return self.remaining < self.page_capacity

    def new_page(self):
        self.pages.append([])
        self.capacity = self.page_capacity
        self.cursor = 0.0

    def place(self, block: Block, height: float, avoid: AvoidClass,
              part: Optional[Tuple[int, int]] = None, overflow: bool = False):
        self.pages[-1].append(PlacedBlock(
            block=block, top=self.cursor, height=height,
            avoid=avoid, part=part, overflow=overflow,
        ))
        self.cursor += height

    def add_unit(self, unit: Unit):
        heights = [self.measurer.height(block) for block in unit.blocks]
        total = sum(heights)

        if total <= self.remaining:
            for block, height in zip(unit.blocks, heights):
                self.place(block, height, unit.avoid)
            return

        if unit.avoid != "none" and total <= self.page_capacity and self.fresh_page_gains:
            self.new_page()
            for block, height in zip(unit.blocks, heights):
                self.place(block, height, unit.avoid)
            return

        if len(unit.blocks) > 1:
            # Taller than a page together; members keep their own policy
            for block in unit.blocks:
                self.add_unit(Unit([block], block_avoid(block)))
            return

        # Plain blocks and units taller than a page flow part by part
        self.flow_block(unit.blocks[0], unit.avoid)

    def flow_block(self, block: Block, avoid: AvoidClass):
        total_parts = self.measurer.part_count(block)
        whole = self.measurer.height(block)
        if whole <= self.remaining:
            self.place(block, whole, avoid)
            return

        start = 0
        while start < total_parts:
            fit = self.measurer.max_parts(block, start, self.remaining)
            if fit == 0:
                if self.fresh_page_gains:
                    self.new_page()
                    continue
                # A single part taller than a whole page
                fit = 1
                part = (start, start + 1)
                height = self.measurer.height(block, part)
                logger.warning(
                    f"{block.type} part {start} is {height:.1f}pt tall, "
                    f"page holds {self.remaining:.1f}pt; placing it overflowing"
                )
                self.place(block, height, avoid, self._part(block, part), overflow=True)
                start += fit
                if start < total_parts:
                    self.new_page()
                continue

            part = (start, start + fit)
            self.place(block, self.measurer.height(block, part), avoid, self._part(block, part))
            start += fit
            if start < total_parts:
                self.new_page()

    def _part(self, block: Block, part: Tuple[int, int]) -> Optional[Tuple[int, int]]:
        if part == (0, self.measurer.part_count(block)):
            return None
        return part


# ─── Regions ──────────────────────────────────────────────────────────────────

def build_footer(template: TemplateConfig, styles: StyleMap) -> Optional[FooterRegion]:
    region = styles.region("footer")
    if region is None:
        return None
    height = spacing.footer_gap + region.body_size * 1.4 + 1
    return FooterRegion(
        contact=f"{template.contact_email} | {template.website}",
        text=template.footer_text,
        height=height,
    )


def build_header(template: TemplateConfig, export: ExportConfig, styles: StyleMap,
                 quote_number: str, issued_on: Optional[date]) -> HeaderRegion:
    region = styles.region("header")
    number = quote_number if styles.has_region("header_quote_number") and quote_number else None
    issued = None
    valid_until = None
    if issued_on is not None:
        if styles.has_region("header_date") and export.include_date:
            issued = format_date(issued_on, long_month=True)
        if styles.has_region("header_validity"):
            valid_until = format_date(issued_on + timedelta(days=template.validity_days), long_month=True)

    company_height = region.title_size * 1.3 + (region.body_size * 1.4 if template.company_tagline else 0)
    meta_lines = sum(1 for value in (number, issued, valid_until) if value)
    meta_height = meta_lines * region.body_size * 1.6
    height = max(company_height, meta_height) + spacing.header_gap + 2
    return HeaderRegion(
        company_name=template.company_name,
        company_tagline=template.company_tagline,
        quote_number=number,
        date=issued,
        valid_until=valid_until,
        height=height,
    )


def layout_showcase(case_studies: Sequence[CaseStudyRef], styles: StyleMap, fonts: FontSet,
                    geometry: PageGeometry) -> ListType[ListType[ShowcaseEntry]]:
    """Pack case studies onto showcase pages without splitting an entry."""
    region = styles.region("showcase")
    width = geometry.content_width
    text_width = width - SHOWCASE_INDEX_BOX - 12
    summary_size = region.body_size - 2

    header_height = (region.label_size * 1.4 + 10 + 12
                     + region.title_size * 1.2 + 8
                     + len(wrap_plain(SHOWCASE_INTRO, min(width, 320), region.body_size, fonts.regular))
                     * region.body_size * 1.4 + 40)
    cta_height = 24 + 16 + region.body_size * 1.4
    capacity = geometry.content_height - SHOWCASE_FOOTER_HEIGHT - cta_height

    pages: ListType[ListType[ShowcaseEntry]] = [[]]
    cursor = header_height
    total = len(case_studies)
    for position, study in enumerate(case_studies, 1):
        title_lines = wrap_plain(study.title, text_width, region.body_size, fonts.bold)
        summary_lines = wrap_plain(study.summary, text_width, summary_size, fonts.regular) if study.summary else []
        text_height = len(title_lines) * region.body_size * 1.3 + 3 + len(summary_lines) * summary_size * 1.4
        height = max(SHOWCASE_INDEX_BOX, text_height) + 2 * spacing.showcase_entry_gap

        if cursor + height > capacity and pages[-1]:
            pages.append([])
            cursor = 0.0
        if cursor + height > capacity:
            logger.warning(f"Case study '{study.id}' is taller than a showcase page")
        pages[-1].append(ShowcaseEntry(
            index=format_index(position, total),
            study=study,
            top=cursor,
            height=height,
        ))
        cursor += height
    return pages


# ─── Entry point ──────────────────────────────────────────────────────────────

def layout_pages(blocks: Sequence[Block], cover: Optional[CoverPageData],
                 case_studies: Sequence[CaseStudyRef], template: TemplateConfig,
                 export: ExportConfig, *, quote_number: str = "",
                 issued_on: Optional[date] = None, styles: Optional[StyleMap] = None,
                 fonts: Optional[FontContext] = None) -> ListType[Page]:
    """
    Arrange cover, body blocks and showcase entries into pages.

    Args:
        blocks: Parsed content blocks in document order
        cover: Cover page data, if any
        case_studies: Showcase entries in display order
        template: Template configuration
        export: Export configuration
        quote_number: Quote number shown on the cover badge and header
        issued_on: Issue date; no dates are printed when omitted
        styles: Pre-resolved styles (resolved from template when omitted)
        fonts: Font context shared with the renderer

    Returns:
        Ordered list of pages
    """
    styles = styles or resolve_styles(template)
    fonts = fonts or FontContext()
    font_set = fonts.ensure_loaded(styles.page.font_family)
    geometry = page_geometry(template, export)

    pages: ListType[Page] = []
    has_cover = cover is not None and cover.has_title

    if has_cover:
        pages.append(Page(
            kind="cover",
            number=1,
            geometry=geometry,
            cover=CoverRegion(
                data=cover,
                badge=f"ESTIMATE #{quote_number}" if quote_number else "ESTIMATE",
                company_name=template.company_name,
                company_tagline=template.company_tagline,
                date=format_date(issued_on) if issued_on else None,
            ),
            company_name=template.company_name,
            website=template.website,
        ))

    footer = build_footer(template, styles)
    header = None if has_cover else build_header(template, export, styles, quote_number, issued_on)

    if blocks or not has_cover:
        measurer = BlockMeasurer(styles, font_set, geometry.content_width)
        capacity = geometry.content_height - (footer.height if footer else 0)
        first_capacity = capacity - (header.height if header else 0)
        flow = BodyFlow(measurer, capacity, first_capacity)
        for unit in build_units(blocks):
            flow.add_unit(unit)

        for idx, placed in enumerate(flow.pages):
            pages.append(Page(
                kind="body",
                number=len(pages) + 1,
                geometry=geometry,
                blocks=placed,
                header=header if idx == 0 else None,
                footer=footer,
                company_name=template.company_name,
                website=template.website,
            ))

    if case_studies:
        for idx, entries in enumerate(layout_showcase(case_studies, styles, font_set, geometry)):
            pages.append(Page(
                kind="showcase",
                number=len(pages) + 1,
                geometry=geometry,
                entries=entries,
                continued=idx > 0,
                company_name=template.company_name,
                website=template.website,
            ))

    logger.debug(f"Laid out {len(pages)} page(s) from {len(blocks)} block(s)")
    return pages
