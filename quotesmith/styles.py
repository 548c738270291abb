"""
Style tokens and template resolution.

Base design tokens (sizes, spacing, page formats, fixed palette) live in
dataclasses here. `resolve_styles` maps a TemplateConfig onto a StyleMap that
both the HTML preview and the PDF renderer consume, so the two stay in step.
Color and font tokens pass through untouched.

License: MIT
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from quotesmith.models import TemplateConfig


@dataclass(frozen=True)
class FontSizes:
    """Font sizes in points at an 11pt base."""
    h1: float = 22
    h2: float = 16
    h3: float = 13
    body: float = 11
    table: float = 10
    footer: float = 9
    header_company: float = 15
    header_meta: float = 8.5
    cover_title: float = 40
    cover_subtitle: float = 13
    cover_label: float = 8
    showcase_title: float = 28
    showcase_entry: float = 11


@dataclass(frozen=True)
class Spacing:
    """Spacing values in points."""
    heading_gap: float = 20
    paragraph_gap: float = 10
    list_indent: float = 16
    list_item_gap: float = 4
    block_gap: float = 12
    table_cell_padding: float = 6
    quote_padding: float = 12
    rule_gap: float = 16
    footer_gap: float = 10
    header_gap: float = 20
    showcase_entry_gap: float = 14


@dataclass(frozen=True)
class Colors:
    """Fixed palette for surfaces the template does not cover."""
    divider: str = "#e5e7eb"
    table_stripe: str = "#f9fafb"
    quote_background: str = "#f8fafc"
    table_header_text: str = "#ffffff"
    cover_card: str = "#f8fafc"
    showcase_background: str = "#0a0a0a"
    showcase_title: str = "#ffffff"
    showcase_badge: str = "#9547ff"
    showcase_surface: str = "#1a1a2e"
    showcase_muted: str = "#64748b"
    showcase_divider: str = "#1e1e2e"
    showcase_link: str = "#dff95f"


@dataclass(frozen=True)
class PageConfig:
    """Page formats in points (1 pt = 1/72 inch)."""
    a4: Tuple[float, float] = (595.28, 841.89)
    letter: Tuple[float, float] = (612.0, 792.0)
    legal: Tuple[float, float] = (612.0, 1008.0)

    def size(self, name: str, orientation: str = "portrait") -> Tuple[float, float]:
        """Width and height for a named format and orientation."""
        width, height = getattr(self, name.lower())
        if orientation == "landscape":
            return height, width
        return width, height


# Raster scale for embedded images per export quality
RASTER_SCALES: Dict[str, float] = {
    "draft": 1.5,
    "standard": 2.0,
    "high": 3.0,
}

LIST_MARKERS = {
    "bullet": "•",
}


font_sizes = FontSizes()
spacing = Spacing()
colors = Colors()
page_config = PageConfig()


# ─── Length tokens ────────────────────────────────────────────────────────────

LENGTH_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(pt|px|mm|cm|in)?\s*$", re.IGNORECASE)
UNIT_TO_POINTS = {
    "pt": 1.0,
    "px": 0.75,
    "mm": 2.83465,
    "cm": 28.3465,
    "in": 72.0,
}


def length_to_points(token: str, default: float = 0.0) -> float:
    """
    Convert a CSS-like length token to points.

    Unitless numbers are treated as pixels. Unparseable tokens yield default.
    """
    match = LENGTH_PATTERN.match(token or "")
    if not match:
        return default
    unit = (match.group(2) or "px").lower()
    return float(match.group(1)) * UNIT_TO_POINTS[unit]


def padding_to_points(token: str, default: float = 36.0) -> Tuple[float, float, float, float]:
    """Expand a CSS padding shorthand into (top, right, bottom, left) points."""
    parts = [length_to_points(part, default) for part in (token or "").split()]
    if not parts:
        return (default, default, default, default)
    if len(parts) == 1:
        return (parts[0],) * 4
    if len(parts) == 2:
        return (parts[0], parts[1], parts[0], parts[1])
    if len(parts) == 3:
        return (parts[0], parts[1], parts[2], parts[1])
    return tuple(parts[:4])


def primary_family(font_family: str) -> str:
    """First family name of a CSS font stack, unquoted."""
    first = (font_family or "").split(",")[0].strip().strip('"').strip("'")
    return first


# ─── Resolved styles ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BlockStyle:
    """Presentation attributes for one block type."""
    font_family: str
    font_size: str
    scale: float
    color: str
    leading: float = 1.5
    bold: bool = False
    italic: bool = False
    background: Optional[str] = None
    border_color: Optional[str] = None
    border_width: float = 0.0
    space_before: float = 0.0
    space_after: float = 0.0
    padding: float = 0.0
    indent: float = 0.0

    @property
    def size(self) -> float:
        """Font size in points."""
        return length_to_points(self.font_size, font_sizes.body) * self.scale

    @property
    def line_height(self) -> float:
        return self.size * self.leading


@dataclass(frozen=True)
class RegionStyle:
    """Presentation attributes for a page region."""
    font_family: str
    background: str
    text: str
    accent: str
    muted: str
    border: str
    surface: Optional[str] = None
    highlight: Optional[str] = None
    title_size: float = 0.0
    body_size: float = 0.0
    label_size: float = 0.0


@dataclass(frozen=True)
class PageStyle:
    """Page-level tokens."""
    background: str
    padding: str
    font_family: str
    base_font_size: str


@dataclass(frozen=True)
class StyleMap:
    """Resolved styles keyed by block type and page region."""
    page: PageStyle
    blocks: Mapping[str, BlockStyle] = field(default_factory=lambda: MappingProxyType({}))
    regions: Mapping[str, RegionStyle] = field(default_factory=lambda: MappingProxyType({}))

    def block(self, key: str) -> BlockStyle:
        return self.blocks[key]

    def region(self, key: str) -> Optional[RegionStyle]:
        """Region style, or None when the region is switched off."""
        return self.regions.get(key)

    def has_region(self, key: str) -> bool:
        return key in self.regions


def heading_key(level: int) -> str:
    return f"h{level}"


def resolve_styles(template: TemplateConfig) -> StyleMap:
    """
    Resolve a template into block and region styles.

    Args:
        template: Template configuration (never mutated)

    Returns:
        StyleMap shared by the preview and PDF renderers
    """
    family = template.font_family
    base = template.base_font_size
    body = font_sizes.body

    blocks = {
        "h1": BlockStyle(
            family, base, font_sizes.h1 / body, template.primary_color,
            leading=1.3, bold=True, space_before=spacing.heading_gap, space_after=14,
        ),
        "h2": BlockStyle(
            family, base, font_sizes.h2 / body, template.secondary_color,
            leading=1.3, bold=True, border_color=colors.divider, border_width=1,
            space_before=24, space_after=spacing.paragraph_gap, padding=6,
        ),
        "h3": BlockStyle(
            family, base, font_sizes.h3 / body, template.text_color,
            leading=1.3, bold=True, space_before=16, space_after=8,
        ),
        "paragraph": BlockStyle(
            family, base, 1.0, template.text_color,
            leading=1.7, space_after=spacing.paragraph_gap,
        ),
        "list": BlockStyle(
            family, base, 1.0, template.text_color,
            leading=1.6, space_after=spacing.block_gap,
            padding=spacing.list_item_gap, indent=spacing.list_indent,
        ),
        "table_header": BlockStyle(
            family, base, font_sizes.table / body, colors.table_header_text,
            leading=1.4, bold=True, background=template.primary_color,
            padding=spacing.table_cell_padding,
        ),
        "table_cell": BlockStyle(
            family, base, font_sizes.table / body, template.text_color,
            leading=1.4, background=colors.table_stripe, border_color=colors.divider,
            border_width=1, padding=spacing.table_cell_padding,
            space_before=spacing.block_gap, space_after=spacing.block_gap,
        ),
        "quote": BlockStyle(
            family, base, 1.0, template.primary_color,
            leading=1.5, bold=True, background=colors.quote_background,
            border_color=template.primary_color, border_width=3,
            space_before=spacing.block_gap, space_after=spacing.block_gap,
            padding=spacing.quote_padding,
        ),
        "rule": BlockStyle(
            family, base, 1.0, colors.divider,
            border_color=colors.divider, border_width=1,
            space_before=spacing.rule_gap, space_after=spacing.rule_gap,
        ),
    }

    regions = {
        "cover": RegionStyle(
            font_family=family,
            background=template.background_color,
            text=template.text_color,
            accent=template.accent_color,
            muted=template.muted_color,
            border=colors.divider,
            surface=colors.cover_card,
            highlight=template.primary_color,
            title_size=font_sizes.cover_title,
            body_size=font_sizes.cover_subtitle,
            label_size=font_sizes.cover_label,
        ),
        "header": RegionStyle(
            font_family=family,
            background=template.background_color,
            text=template.primary_color,
            accent=template.primary_color,
            muted=template.muted_color,
            border=template.primary_color,
            title_size=font_sizes.header_company,
            body_size=font_sizes.header_meta,
        ),
        "showcase": RegionStyle(
            font_family=family,
            background=colors.showcase_background,
            text=colors.showcase_title,
            accent=colors.showcase_badge,
            muted=colors.showcase_muted,
            border=colors.showcase_divider,
            surface=colors.showcase_surface,
            highlight=colors.showcase_link,
            title_size=font_sizes.showcase_title,
            body_size=font_sizes.showcase_entry,
            label_size=font_sizes.footer,
        ),
    }

    header_meta = RegionStyle(
        font_family=family,
        background=template.background_color,
        text=template.muted_color,
        accent=template.primary_color,
        muted=template.muted_color,
        border=template.primary_color,
        body_size=font_sizes.header_meta,
    )
    if template.show_quote_number:
        regions["header_quote_number"] = header_meta
    if template.show_date:
        regions["header_date"] = header_meta
    if template.show_validity_period:
        regions["header_validity"] = header_meta
    if template.show_footer:
        regions["footer"] = RegionStyle(
            font_family=family,
            background=template.background_color,
            text=template.muted_color,
            accent=template.muted_color,
            muted=template.muted_color,
            border=colors.divider,
            body_size=font_sizes.footer,
        )

    return StyleMap(
        page=PageStyle(
            background=template.background_color,
            padding=template.page_padding,
            font_family=family,
            base_font_size=base,
        ),
        blocks=MappingProxyType(blocks),
        regions=MappingProxyType(regions),
    )
