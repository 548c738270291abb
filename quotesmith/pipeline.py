"""
Export and preview pipeline.

`export_pdf` is the async boundary of the otherwise synchronous core: it
snapshots the configuration, awaits the logo, lays out pages and renders
them in a worker thread.

License: MIT
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, List as ListType, Optional, Sequence

from quotesmith.assets import load_asset
from quotesmith.frontmatter import extract_cover
from quotesmith.layout import layout_pages
from quotesmith.markdown import parse_blocks
from quotesmith.models import Block, CaseStudyRef, CoverPageData, ExportConfig, TemplateConfig
from quotesmith.preview import render_html
from quotesmith.renderer import render_pdf
from quotesmith.styles import resolve_styles
from quotesmith.typesetting import FontContext

logger = logging.getLogger(__name__)

AssetLoader = Callable[[Optional[str]], Awaitable[Optional[bytes]]]

UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\r\n]+')


def format_quote_number(prefix: str, n: int) -> str:
    """Quote number such as 'BR-0001'."""
    return f"{prefix}-{n:04d}"


def export_filename(export: ExportConfig) -> str:
    """Download filename for an export, always ending in '.pdf'."""
    name = UNSAFE_FILENAME_CHARS.sub("-", export.filename).strip(" .-")
    if name.lower().endswith(".pdf"):
        name = name[:-4]
    return f"{name or 'quote'}.pdf"


@dataclass
class ParsedDocument:
    """Frontmatter cover plus body blocks."""
    cover: Optional[CoverPageData]
    blocks: ListType[Block]


def parse_document(markdown: str) -> ParsedDocument:
    cover, body = extract_cover(markdown)
    return ParsedDocument(cover=cover, blocks=parse_blocks(body))


@dataclass
class Preview:
    html: str
    has_cover: bool


def render_preview(markdown: str, template: TemplateConfig, *, quote_number: str = "",
                   issued_on: Optional[date] = None) -> Preview:
    """Render the HTML preview for a document."""
    document = parse_document(markdown)
    styles = resolve_styles(template)
    html = render_html(
        document.blocks, styles, document.cover,
        template=template, quote_number=quote_number, issued_on=issued_on,
    )
    return Preview(html=html, has_cover=document.cover is not None and document.cover.has_title)


async def export_pdf(markdown: str, template: TemplateConfig, export: ExportConfig,
                     case_studies: Sequence[CaseStudyRef] = (), *, quote_number: str = "",
                     issued_on: Optional[date] = None, loader: AssetLoader = load_asset,
                     fonts: Optional[FontContext] = None) -> bytes:
    """
    Export a Markdown document to PDF.

    Args:
        markdown: Document text with optional frontmatter
        template: Template configuration
        export: Export configuration
        case_studies: Showcase entries in display order
        quote_number: Quote number for the cover badge and header
        issued_on: Issue date (defaults to today)
        loader: Async asset loader used for the logo
        fonts: Font context; a fresh one per export when omitted

    Returns:
        PDF bytes

    Raises:
        RenderError: If the PDF cannot be produced
    """
    # Edits made while the export runs must not leak into it
    template = template.model_copy(deep=True)
    export = export.model_copy(deep=True)
    case_studies = [study.model_copy(deep=True) for study in case_studies]
    issued_on = issued_on or date.today()
    fonts = fonts or FontContext()

    document = parse_document(markdown)
    logo = await loader(template.logo_url)
    if logo is None:
        logger.info("No logo available, a placeholder will be drawn")

    title = (document.cover.title or document.cover.title_accent) if document.cover else export.filename
    metadata = {
        "title": title,
        "author": template.company_name,
        "subject": f"Quote {quote_number}" if quote_number else "Quote",
    }

    def layout_and_render() -> bytes:
        styles = resolve_styles(template)
        pages = layout_pages(
            document.blocks, document.cover, case_studies, template, export,
            quote_number=quote_number, issued_on=issued_on, styles=styles, fonts=fonts,
        )
        pdf = render_pdf(pages, styles, logo, fonts=fonts, metadata=metadata)
        logger.info(f"Exported {export_filename(export)}: {len(pages)} page(s), {len(pdf)} bytes")
        return pdf

    # Layout and drawing are CPU bound; keep them off the event loop
    return await asyncio.to_thread(layout_and_render)
