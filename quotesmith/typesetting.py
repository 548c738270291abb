"""
Font resources and text measurement shared by layout and rendering.

A FontContext is created once per layout/render run and passed down; it
registers TrueType families on first use and falls back to the built-in
Helvetica family when files are missing.

License: MIT
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, List as ListType, Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont, TTFError

from quotesmith.config import get_settings
from quotesmith.models import RichText
from quotesmith.styles import primary_family

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontSet:
    """Registered font names for one family."""
    regular: str = "Helvetica"
    bold: str = "Helvetica-Bold"
    italic: str = "Helvetica-Oblique"
    bold_italic: str = "Helvetica-BoldOblique"
    code: str = "Courier"

    def pick(self, bold: bool = False, italic: bool = False, code: bool = False) -> str:
        """Font name for a combination of styles."""
        if code:
            return self.code
        if bold and italic:
            return self.bold_italic
        if bold:
            return self.bold
        if italic:
            return self.italic
        return self.regular


FALLBACK_FONTS = FontSet()

FONT_FILES = {
    "regular": "{family}-Regular.ttf",
    "bold": "{family}-Bold.ttf",
    "italic": "{family}-Italic.ttf",
    "bold_italic": "{family}-BoldItalic.ttf",
}


class FontContext:
    """
    Per-run font registry with idempotent loading.

    Args:
        fonts_dir: Directory holding `<Family>-<Style>.ttf` files
    """

    def __init__(self, fonts_dir: Optional[str] = None):
        self.fonts_dir = fonts_dir if fonts_dir is not None else get_settings().fonts_dir
        self._loaded: Dict[str, FontSet] = {}

    def ensure_loaded(self, font_family: str) -> FontSet:
        """
        Register a CSS font stack's first family, once.

        Returns:
            FontSet for the family, or the Helvetica fallback
        """
        family = re.sub(r"\s+", "", primary_family(font_family))
        if family in self._loaded:
            return self._loaded[family]

        font_set = self._register(family) if family else None
        if font_set is None:
            logger.info(f"Font family '{family or font_family}' not available, using Helvetica")
            font_set = FALLBACK_FONTS
        self._loaded[family] = font_set
        return font_set

    def _register(self, family: str) -> Optional[FontSet]:
        if not self.fonts_dir:
            return None

        regular_path = os.path.join(self.fonts_dir, FONT_FILES["regular"].format(family=family))
        if not os.path.exists(regular_path):
            return None

        names = {}
        registered = set(pdfmetrics.getRegisteredFontNames())
        for variant, pattern in FONT_FILES.items():
            path = os.path.join(self.fonts_dir, pattern.format(family=family))
            if not os.path.exists(path):
                path = regular_path
            font_name = f"{family}-{variant}"
            if font_name not in registered:
                try:
                    pdfmetrics.registerFont(TTFont(font_name, path))
                except TTFError as e:
                    logger.warning(f"Could not register font {path}: {e}")
                    return None
            names[variant] = font_name

        logger.info(f"Registered font family {family} from {self.fonts_dir}")
        return FontSet(
            regular=names["regular"],
            bold=names["bold"],
            italic=names["italic"],
            bold_italic=names["bold_italic"],
        )


def span_font(span: RichText, fonts: FontSet, bold: bool = False, italic: bool = False) -> str:
    """Font name for a span, with block-level bold/italic applied on top."""
    return fonts.pick(bold=span.bold or bold, italic=span.italic or italic, code=span.code)


def text_width(text: str, font_name: str, font_size: float) -> float:
    return pdfmetrics.stringWidth(text, font_name, font_size)


def wrap_spans(spans: ListType[RichText], max_width: float, font_size: float,
               fonts: FontSet, bold: bool = False, italic: bool = False) -> ListType[ListType[RichText]]:
    """
    Wrap rich text spans across lines.

    Hard-break spans always end the current line. A word wider than
    max_width is kept whole on its own line.

    Args:
        spans: Spans to wrap
        max_width: Available width in points
        font_size: Font size in points
        fonts: Font set to measure with
        bold: Block-level bold
        italic: Block-level italic

    Returns:
        Lines, each a list of spans; at least one (possibly empty) line
    """
    lines: ListType[ListType[RichText]] = []
    current_line: ListType[RichText] = []
    current_width = 0.0

    for span in spans:
        if span.is_break:
            lines.append(_trim_line(current_line))
            current_line = []
            current_width = 0.0
            continue

        parts = re.split(r"(\s+)", span.text)
        for part in parts:
            if not part:
                continue
            is_space = part.isspace()
            if is_space:
                part = " "
            token = span.model_copy(update={"text": part})
            token_width = text_width(part, span_font(token, fonts, bold, italic), font_size)

            if is_space and not current_line:
                continue

            if current_width + token_width > max_width and current_line:
                lines.append(_trim_line(current_line))
                current_line = []
                current_width = 0.0
                if is_space:
                    continue

            current_line.append(token)
            current_width += token_width

    if current_line or not lines:
        lines.append(_trim_line(current_line))
    return lines


def _trim_line(line: ListType[RichText]) -> ListType[RichText]:
    """Drop trailing whitespace tokens."""
    while line and line[-1].text.isspace():
        line = line[:-1]
    return line


def wrap_plain(text: str, max_width: float, font_size: float, font_name: str) -> ListType[str]:
    """Wrap plain text in a single font."""
    words = text.split()
    lines: ListType[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if current and text_width(candidate, font_name, font_size) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current or not lines:
        lines.append(current)
    return lines
