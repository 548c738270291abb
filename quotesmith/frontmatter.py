"""
Frontmatter extraction for quote documents.

A document may start with a block delimited by `---` lines holding
`key: value` pairs for the cover page. Anything malformed simply means
"no cover page"; this module never raises.

License: MIT
"""

import re
from typing import Optional, Tuple

from quotesmith.models import COVER_KEYS, CoverPageData


FRONTMATTER_PATTERN = re.compile(r"\A---\r?\n(.*?)\r?\n---(?:\r?\n|\Z)", re.DOTALL)


def extract_cover(text: str) -> Tuple[Optional[CoverPageData], str]:
    """
    Split a raw document into cover-page data and body text.

    Args:
        text: Raw document text

    Returns:
        Tuple of (cover data or None, body text). When no usable cover is
        found the body is the untouched original text.
    """
    if not text:
        return None, text or ""

    match = FRONTMATTER_PATTERN.match(text)
    if not match:
        return None, text

    values = {}
    for line in match.group(1).splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        if key in COVER_KEYS:
            values[COVER_KEYS[key]] = value.strip()

    cover = CoverPageData(**values)
    if not cover.has_title:
        return None, text

    return cover, text[match.end():]


def render_frontmatter(cover: CoverPageData) -> str:
    """Serialize cover data back into a frontmatter block (empty fields skipped)."""
    lines = ["---"]
    for key, field_name in COVER_KEYS.items():
        value = getattr(cover, field_name)
        if value:
            lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n"
