"""
Quotesmith - Markdown quotes to branded, paginated PDF documents.

License: MIT
"""

from quotesmith.catalog import DEFAULT_CASE_STUDY_IDS, get_case_studies_by_ids
from quotesmith.frontmatter import extract_cover
from quotesmith.layout import layout_pages
from quotesmith.markdown import parse_blocks, parse_inline, to_markdown
from quotesmith.pipeline import export_filename, export_pdf, format_quote_number, render_preview
from quotesmith.preview import render_html
from quotesmith.renderer import RenderError, render_pdf
from quotesmith.styles import resolve_styles

__version__ = "1.0.0"

__all__ = [
    "DEFAULT_CASE_STUDY_IDS",
    "RenderError",
    "export_filename",
    "export_pdf",
    "extract_cover",
    "format_quote_number",
    "get_case_studies_by_ids",
    "layout_pages",
    "parse_blocks",
    "parse_inline",
    "render_html",
    "render_pdf",
    "render_preview",
    "resolve_styles",
    "to_markdown",
]
