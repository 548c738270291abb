"""
HTML preview backend.

Renders content blocks to an HTML fragment with inline styles taken from
the same StyleMap the PDF renderer uses. Text is escaped exactly once, here.

License: MIT
"""

import html
from datetime import date
from typing import List as ListType, Optional, Sequence

from quotesmith.layout import build_footer, build_header, format_date
from quotesmith.models import (
    Block, CoverPageData, ExportConfig, Heading, ListBlock, Paragraph, Quote,
    RichText, Table, TemplateConfig,
)
from quotesmith.styles import BlockStyle, StyleMap, heading_key


def _css(**props) -> str:
    """Build an inline style attribute value; underscores become hyphens."""
    parts = [f"{key.replace('_', '-')}: {value}" for key, value in props.items() if value is not None]
    return html.escape("; ".join(parts), quote=True)


def _font_css(style: BlockStyle) -> dict:
    return {
        "font_family": style.font_family,
        "font_size": f"{style.size:g}pt",
        "line_height": f"{style.leading:g}",
        "color": style.color,
        "font_weight": "700" if style.bold else None,
        "font_style": "italic" if style.italic else None,
    }


def inline_to_html(spans: Sequence[RichText]) -> str:
    """Render spans as inline HTML."""
    out: ListType[str] = []
    for span in spans:
        if span.is_break:
            out.append("<br>")
            continue
        text = html.escape(span.text)
        if span.code:
            text = f"<code>{text}</code>"
        if span.italic:
            text = f"<em>{text}</em>"
        if span.bold:
            text = f"<strong>{text}</strong>"
        if span.link:
            text = f'<a href="{html.escape(span.link, quote=True)}">{text}</a>'
        out.append(text)
    return "".join(out)


def block_to_html(block: Block, styles: StyleMap) -> str:
    """Render one content block."""
    if isinstance(block, Heading):
        style = styles.block(heading_key(block.level))
        border = f"{style.border_width:g}pt solid {style.border_color}" if style.border_width else None
        css = _css(
            **_font_css(style),
            margin=f"{style.space_before:g}pt 0 {style.space_after:g}pt",
            padding_bottom=f"{style.padding:g}pt" if style.padding else None,
            border_bottom=border,
        )
        return f'<h{block.level} style="{css}">{inline_to_html(block.text)}</h{block.level}>'

    if isinstance(block, Paragraph):
        style = styles.block("paragraph")
        css = _css(**_font_css(style), margin=f"0 0 {style.space_after:g}pt")
        return f'<p style="{css}">{inline_to_html(block.text)}</p>'

    if isinstance(block, ListBlock):
        style = styles.block("list")
        tag = "ol" if block.ordered else "ul"
        css = _css(**_font_css(style), margin=f"0 0 {style.space_after:g}pt",
                   padding_left=f"{style.indent:g}pt")
        item_css = _css(margin_bottom=f"{style.padding:g}pt")
        items = "".join(f'<li style="{item_css}">{inline_to_html(item)}</li>' for item in block.items)
        return f'<{tag} style="{css}">{items}</{tag}>'

    if isinstance(block, Table):
        return _table_to_html(block, styles)

    if isinstance(block, Quote):
        style = styles.block("quote")
        css = _css(
            **_font_css(style),
            margin=f"{style.space_before:g}pt 0 {style.space_after:g}pt",
            padding=f"{style.padding:g}pt",
            background=style.background,
            border_left=f"{style.border_width:g}pt solid {style.border_color}",
        )
        return f'<blockquote style="{css}">{inline_to_html(block.text)}</blockquote>'

    style = styles.block("rule")
    css = _css(
        border="none",
        border_top=f"{style.border_width:g}pt solid {style.border_color}",
        margin=f"{style.space_before:g}pt 0 {style.space_after:g}pt",
    )
    return f'<hr style="{css}">'


def _table_to_html(table: Table, styles: StyleMap) -> str:
    header = styles.block("table_header")
    cell = styles.block("table_cell")
    table_css = _css(
        width="100%",
        border_collapse="collapse",
        margin=f"{cell.space_before:g}pt 0 {cell.space_after:g}pt",
    )
    th_css = _css(**_font_css(header), background=header.background,
                  padding=f"{header.padding:g}pt", text_align="left")
    head = "".join(f'<th style="{th_css}">{inline_to_html(c)}</th>' for c in table.headers)

    rows = []
    for index, row in enumerate(table.rows):
        td_css = _css(
            **_font_css(cell),
            padding=f"{cell.padding:g}pt",
            border_bottom=f"{cell.border_width:g}pt solid {cell.border_color}",
        )
        row_css = _css(background=cell.background if index % 2 == 1 else None)
        cells = "".join(f'<td style="{td_css}">{inline_to_html(c)}</td>' for c in row)
        rows.append(f'<tr style="{row_css}">{cells}</tr>')
    return (
        f'<table style="{table_css}"><thead><tr>{head}</tr></thead>'
        f'<tbody>{"".join(rows)}</tbody></table>'
    )


def _cover_to_html(cover: CoverPageData, styles: StyleMap, template: Optional[TemplateConfig],
                   quote_number: str, issued_on: Optional[date]) -> str:
    region = styles.region("cover")
    badge = f"ESTIMATE #{quote_number}" if quote_number else "ESTIMATE"
    parts = [
        f'<span class="badge" style="{_css(background=region.highlight, color=region.background)}">'
        f'{html.escape(badge)}</span>'
    ]
    title_css = _css(font_family=region.font_family, font_size=f"{region.title_size:g}pt",
                     color=region.text, margin="0")
    accent_css = _css(color=region.accent)
    title = html.escape(cover.title)
    if cover.title_accent:
        title += f'<br><span style="{accent_css}">{html.escape(cover.title_accent)}</span>'
    parts.append(f'<h1 style="{title_css}">{title}</h1>')
    if cover.subtitle:
        parts.append(f'<p style="{_css(color=region.muted)}">{html.escape(cover.subtitle)}</p>')

    client = [cover.client_name or "Client Name", cover.client_address or "Address",
              cover.client_city or "City, State ZIP"]
    parts.append(_card_html("PREPARED FOR", client, region))
    if template is not None:
        by = [template.company_name, template.company_tagline]
        if issued_on is not None:
            by.append(format_date(issued_on))
        parts.append(_card_html("PREPARED BY", by, region))

    css = _css(background=region.background, page_break_after="always")
    return f'<section class="cover" style="{css}">{"".join(parts)}</section>'


def _card_html(label: str, lines: Sequence[str], region) -> str:
    css = _css(background=region.surface, border=f"1px solid {region.border}")
    label_css = _css(color=region.muted, font_size=f"{region.label_size:g}pt")
    body = "<br>".join(html.escape(line) for line in lines if line)
    return f'<div style="{css}"><div style="{label_css}">{label}</div><div>{body}</div></div>'


def _header_to_html(template: TemplateConfig, styles: StyleMap, quote_number: str,
                    issued_on: Optional[date]) -> str:
    header = build_header(template, ExportConfig(), styles, quote_number, issued_on)
    region = styles.region("header")
    meta = []
    if header.quote_number:
        meta.append(f"<strong>{html.escape(header.quote_number)}</strong>")
    if header.date:
        meta.append(f"Date: {html.escape(header.date)}")
    if header.valid_until:
        meta.append(f"Valid until: {html.escape(header.valid_until)}")

    css = _css(border_bottom=f"2px solid {region.border}", margin_bottom="24px")
    company = (
        f'<div style="{_css(color=region.text, font_weight="700")}">{html.escape(header.company_name)}</div>'
        f'<div style="{_css(color=region.muted)}">{html.escape(header.company_tagline)}</div>'
    )
    meta_html = f'<div style="{_css(text_align="right", color=region.muted)}">{"<br>".join(meta)}</div>'
    return f'<header style="{css}">{company}{meta_html}</header>'


def _footer_to_html(template: TemplateConfig, styles: StyleMap) -> str:
    footer = build_footer(template, styles)
    if footer is None:
        return ""
    region = styles.region("footer")
    css = _css(border_top=f"1px solid {region.border}", color=region.text,
               font_size=f"{region.body_size:g}pt")
    return f'<footer style="{css}">{html.escape(footer.contact)}<br>{html.escape(footer.text)}</footer>'


def render_html(blocks: Sequence[Block], styles: StyleMap, cover: Optional[CoverPageData] = None, *,
                template: Optional[TemplateConfig] = None, quote_number: str = "",
                issued_on: Optional[date] = None) -> str:
    """
    Render blocks (and optional regions) as an HTML fragment.

    Args:
        blocks: Parsed content blocks
        styles: Resolved StyleMap
        cover: Cover data; a cover section is emitted when it has a title
        template: Template for header and footer text; regions omitted when None
        quote_number: Quote number for the badge and header
        issued_on: Issue date for the header and cover card

    Returns:
        HTML string
    """
    parts: ListType[str] = []
    has_cover = cover is not None and cover.has_title
    if has_cover:
        parts.append(_cover_to_html(cover, styles, template, quote_number, issued_on))
    elif template is not None:
        parts.append(_header_to_html(template, styles, quote_number, issued_on))

    body = "".join(block_to_html(block, styles) for block in blocks)
    page_css = _css(background=styles.page.background, font_family=styles.page.font_family,
                    padding=styles.page.padding)
    parts.append(f'<article class="content" style="{page_css}">{body}</article>')

    if template is not None:
        parts.append(_footer_to_html(template, styles))
    return "".join(parts)
