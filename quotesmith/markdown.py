"""
Markdown dialect parser.

Body text is first split into a flat stream of line tokens, then grouped
into content blocks in a single pass. Inline formatting (code spans, links,
emphasis) is parsed per block into RichText spans. Source text stays data
all the way through; HTML escaping belongs to the markup renderer.

Supported: `#`..`###` headings, `***`/`**`/`*` and `___`/`__`/`_` emphasis,
`---`/`***` rules, `> ` quotes, inline code, `[text](url)` links, pipe
tables, `- ` and `1. ` lists, paragraphs.

License: MIT
"""

import logging
import re
from dataclasses import dataclass, replace
from itertools import groupby
from typing import Iterable, List as ListType, Optional

from quotesmith.models import (
    Block, Heading, Paragraph, ListBlock, Table, Quote, Rule, RichText,
)

logger = logging.getLogger(__name__)


HEADING_PATTERN = re.compile(r"^(#{1,3}) (.+)$")
RULE_PATTERN = re.compile(r"^(?:---|\*\*\*)$")
QUOTE_PATTERN = re.compile(r"^> (.+)$")
TABLE_ROW_PATTERN = re.compile(r"^\|.*\|$")
TABLE_SEP_PATTERN = re.compile(r"^\|[-:\s|]*-[-:\s|]*\|$")
BULLET_PATTERN = re.compile(r"^- (.+)$")
ORDERED_PATTERN = re.compile(r"^\d+\. (.+)$")

CODE_LINK_PATTERN = re.compile(
    r"`(?P<code>[^`]+)`"
    r"|\[(?P<label>[^\]]+)\]\((?P<url>[^)]+)\)"
)

# Each pass runs over the whole line after the previous one, so a single
# marker pair can enclose a double one: *a **b** c*
EMPHASIS_PASSES = (
    (re.compile(r"\*\*\*(.+?)\*\*\*"), True, True),
    (re.compile(r"\*\*(.+?)\*\*"), True, False),
    (re.compile(r"\*(.+?)\*"), False, True),
    (re.compile(r"___(.+?)___"), True, True),
    (re.compile(r"__(.+?)__"), True, False),
    (re.compile(r"_(.+?)_"), False, True),
)

# Code characters are masked with this so markers inside code never match
CODE_MASK = "\x00"


@dataclass(frozen=True)
class LineToken:
    """One classified source line."""
    kind: str
    text: str
    level: int = 0


def tokenize(body: str) -> ListType[LineToken]:
    """
    Classify every line of the body into a token.

    Args:
        body: Markdown body text (frontmatter already removed)

    Returns:
        Flat list of line tokens in document order
    """
    tokens: ListType[LineToken] = []
    for raw in body.replace("\r\n", "\n").split("\n"):
        line = raw.rstrip()
        if not line.strip():
            tokens.append(LineToken("blank", ""))
            continue

        match = HEADING_PATTERN.match(line)
        if match:
            tokens.append(LineToken("heading", match.group(2).strip(), len(match.group(1))))
            continue
        if RULE_PATTERN.match(line):
            tokens.append(LineToken("rule", ""))
            continue
        match = QUOTE_PATTERN.match(line)
        if match:
            tokens.append(LineToken("quote", match.group(1)))
            continue
        if TABLE_SEP_PATTERN.match(line):
            tokens.append(LineToken("table_sep", line))
            continue
        if TABLE_ROW_PATTERN.match(line):
            tokens.append(LineToken("table_row", line))
            continue
        match = BULLET_PATTERN.match(line)
        if match:
            tokens.append(LineToken("bullet", match.group(1)))
            continue
        match = ORDERED_PATTERN.match(line)
        if match:
            tokens.append(LineToken("ordered", match.group(1)))
            continue
        tokens.append(LineToken("text", line))
    return tokens


def split_cells(row: str) -> ListType[str]:
    """Split a pipe-delimited row into trimmed cells, dropping the edge artifacts."""
    cells = [cell.strip() for cell in row.split("|")]
    if cells and not cells[0]:
        cells = cells[1:]
    if cells and not cells[-1]:
        cells = cells[:-1]
    return cells


def _fit_row(cells: ListType[str], width: int) -> ListType[str]:
    """Pad short rows with empty cells and truncate long ones."""
    if len(cells) < width:
        return cells + [""] * (width - len(cells))
    return cells[:width]


class BlockGrouper:
    """Single pass over line tokens producing content blocks."""

    def __init__(self, tokens: ListType[LineToken]):
        self.tokens = tokens
        self.pos = 0
        self.blocks: ListType[Block] = []
        self.paragraph: ListType[str] = []

    def group(self) -> ListType[Block]:
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            if token.kind == "text":
                self.paragraph.append(token.text)
                self.pos += 1
                continue
            if token.kind == "table_row" and self._table_ahead():
                self._flush_paragraph()
                self._take_table()
                continue
            if token.kind in ("table_row", "table_sep"):
                # Not part of a well-formed table: plain paragraph text
                self.paragraph.append(token.text)
                self.pos += 1
                continue

            self._flush_paragraph()
            if token.kind == "heading":
                self.blocks.append(Heading(level=token.level, text=parse_inline(token.text)))
                self.pos += 1
            elif token.kind == "rule":
                self.blocks.append(Rule())
                self.pos += 1
            elif token.kind == "quote":
                self._take_quote()
            elif token.kind in ("bullet", "ordered"):
                self._take_list(token.kind)
            else:
                self.pos += 1

        self._flush_paragraph()
        return self.blocks

    def _table_ahead(self) -> bool:
        ahead = self.tokens[self.pos + 1:self.pos + 3]
        return (
            len(ahead) == 2
            and ahead[0].kind == "table_sep"
            and ahead[1].kind == "table_row"
        )

    def _take_table(self):
        headers = split_cells(self.tokens[self.pos].text)
        self.pos += 2
        rows: ListType[ListType[str]] = []
        while self.pos < len(self.tokens) and self.tokens[self.pos].kind == "table_row":
            rows.append(_fit_row(split_cells(self.tokens[self.pos].text), len(headers)))
            self.pos += 1
        if not headers:
            logger.debug("Dropping table without header cells")
            return
        self.blocks.append(Table(
            headers=[parse_inline(cell) for cell in headers],
            rows=[[parse_inline(cell) for cell in row] for row in rows],
        ))

    def _take_quote(self):
        lines: ListType[str] = []
        while self.pos < len(self.tokens) and self.tokens[self.pos].kind == "quote":
            lines.append(self.tokens[self.pos].text)
            self.pos += 1
        self.blocks.append(Quote(text=_inline_lines(lines)))

    def _take_list(self, kind: str):
        items: ListType[ListType[RichText]] = []
        while self.pos < len(self.tokens) and self.tokens[self.pos].kind == kind:
            items.append(parse_inline(self.tokens[self.pos].text))
            self.pos += 1
        self.blocks.append(ListBlock(ordered=(kind == "ordered"), items=items))

    def _flush_paragraph(self):
        if self.paragraph:
            lines = [line.strip() for line in self.paragraph]
            self.blocks.append(Paragraph(text=_inline_lines(lines)))
            self.paragraph = []


def parse_blocks(body: str) -> ListType[Block]:
    """
    Parse Markdown body text into content blocks.

    Args:
        body: Markdown body text

    Returns:
        Ordered list of content blocks; empty for empty input
    """
    if not body or not body.strip():
        return []
    return BlockGrouper(tokenize(body)).group()


@dataclass(frozen=True)
class InlineChar:
    """One source character with the formatting resolved so far."""
    text: str
    bold: bool = False
    italic: bool = False
    code: bool = False
    link: Optional[str] = None

    def format_key(self):
        return self.bold, self.italic, self.code, self.link


def _inline_lines(lines: Iterable[str]) -> ListType[RichText]:
    """Parse each line inline and join them with hard line breaks."""
    spans: ListType[RichText] = []
    for idx, line in enumerate(lines):
        if idx > 0:
            spans.append(RichText(text="\n"))
        spans.extend(parse_inline(line))
    return spans


def parse_inline(text: str, bold: bool = False, italic: bool = False,
                 link: Optional[str] = None) -> ListType[RichText]:
    """
    Parse inline formatting into spans.

    Code spans and links are resolved first; emphasis is then applied in
    passes from `***` down to `_`. Unterminated markers are left as literal
    text.

    Args:
        text: Inline source text
        bold: Inherited bold state
        italic: Inherited italic state
        link: Inherited link target

    Returns:
        List of spans with adjacent identical formatting merged
    """
    chars = _scan(text, InlineChar("", bold, italic, link=link))
    for pattern, add_bold, add_italic in EMPHASIS_PASSES:
        chars = _emphasize(chars, pattern, add_bold, add_italic)

    spans = [
        RichText(text="".join(c.text for c in group), bold=b, italic=i, code=code, link=url)
        for (b, i, code, url), group in groupby(chars, key=InlineChar.format_key)
    ]
    return merge_spans(spans)


def _scan(text: str, base: InlineChar) -> ListType[InlineChar]:
    """Split text into characters, resolving code spans and link markup."""
    chars: ListType[InlineChar] = []

    def plain(segment: str):
        chars.extend(replace(base, text=ch) for ch in segment)

    last = 0
    for match in CODE_LINK_PATTERN.finditer(text):
        plain(text[last:match.start()])
        if match.group("code") is not None:
            chars.extend(replace(base, text=ch, code=True) for ch in match.group("code"))
        else:
            chars.extend(_scan(match.group("label"), replace(base, link=match.group("url").strip())))
        last = match.end()
    plain(text[last:])
    return chars


def _emphasize(chars: ListType[InlineChar], pattern, bold: bool, italic: bool) -> ListType[InlineChar]:
    """Apply one emphasis pass, dropping the matched markers."""
    source = "".join(CODE_MASK if c.code else c.text for c in chars)
    out: ListType[InlineChar] = []
    last = 0
    for match in pattern.finditer(source):
        out.extend(chars[last:match.start()])
        out.extend(
            replace(c, bold=c.bold or bold, italic=c.italic or italic)
            for c in chars[match.start(1):match.end(1)]
        )
        last = match.end()
    out.extend(chars[last:])
    return out


def merge_spans(spans: ListType[RichText]) -> ListType[RichText]:
    """Merge neighbouring spans that share formatting."""
    merged: ListType[RichText] = []
    for span in spans:
        if not span.text:
            continue
        if merged and not span.is_break and not merged[-1].is_break and merged[-1].same_format(span):
            merged[-1] = merged[-1].model_copy(update={"text": merged[-1].text + span.text})
        else:
            merged.append(span)
    return merged


# ─── Serialization back to the dialect ────────────────────────────────────────

def inline_to_markdown(spans: ListType[RichText]) -> str:
    """Serialize spans back to inline Markdown."""
    out: ListType[str] = []
    for span in spans:
        if span.is_break:
            out.append("\n")
            continue
        text = f"`{span.text}`" if span.code else span.text
        if span.bold and span.italic:
            text = f"***{text}***"
        elif span.bold:
            text = f"**{text}**"
        elif span.italic:
            text = f"*{text}*"
        if span.link:
            text = f"[{text}]({span.link})"
        out.append(text)
    return "".join(out)


def _table_row(cells: ListType[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def block_to_markdown(block: Block) -> str:
    """Serialize one block."""
    if isinstance(block, Heading):
        return "#" * block.level + " " + inline_to_markdown(block.text)
    if isinstance(block, Paragraph):
        return inline_to_markdown(block.text)
    if isinstance(block, ListBlock):
        if block.ordered:
            return "\n".join(f"{i}. {inline_to_markdown(item)}" for i, item in enumerate(block.items, 1))
        return "\n".join(f"- {inline_to_markdown(item)}" for item in block.items)
    if isinstance(block, Table):
        lines = [
            _table_row([inline_to_markdown(cell) for cell in block.headers]),
            _table_row(["---"] * block.columns),
        ]
        lines.extend(_table_row([inline_to_markdown(cell) for cell in row]) for row in block.rows)
        return "\n".join(lines)
    if isinstance(block, Quote):
        return "\n".join(f"> {line}" for line in inline_to_markdown(block.text).split("\n"))
    return "---"


def to_markdown(blocks: ListType[Block]) -> str:
    """Serialize blocks back into the Markdown dialect, one blank line apart."""
    return "\n\n".join(block_to_markdown(block) for block in blocks) + ("\n" if blocks else "")

