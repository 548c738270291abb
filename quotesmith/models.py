"""
Pydantic models for the quote document pipeline.

These models describe the cover-page metadata, the parsed content blocks,
the user-editable template and export settings, and the laid-out pages
handed to the renderers.

License: MIT
"""

import re
from typing import List as ListType, Optional, Tuple, Union, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from reportlab.lib.colors import toColor


HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class RichText(BaseModel):
    """
    Rich text span with inline formatting.

    A span whose text is exactly a newline is a hard line break.
    """
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Text content")
    bold: bool = Field(default=False, description="Bold formatting")
    italic: bool = Field(default=False, description="Italic formatting")
    code: bool = Field(default=False, description="Monospace code formatting")
    link: Optional[str] = Field(default=None, description="Link target URL")

    @property
    def is_break(self) -> bool:
        return self.text == "\n"

    def same_format(self, other: "RichText") -> bool:
        """Whether two spans carry identical formatting."""
        return (
            self.bold == other.bold
            and self.italic == other.italic
            and self.code == other.code
            and self.link == other.link
        )


def plain_text(spans: ListType[RichText]) -> str:
    """Concatenate span text, turning hard breaks into newlines."""
    return "".join(span.text for span in spans)


class CoverPageData(BaseModel):
    """Cover page metadata taken from the document frontmatter."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    title_accent: str = Field(default="", alias="titleAccent")
    subtitle: str = ""
    client_name: str = Field(default="", alias="clientName")
    client_address: str = Field(default="", alias="clientAddress")
    client_city: str = Field(default="", alias="clientCity")

    @property
    def has_title(self) -> bool:
        return bool(self.title or self.title_accent)


# Frontmatter keys in document order, mapped to model field names
COVER_KEYS = {
    "title": "title",
    "titleAccent": "title_accent",
    "subtitle": "subtitle",
    "clientName": "client_name",
    "clientAddress": "client_address",
    "clientCity": "client_city",
}


class Heading(BaseModel):
    """Heading block (H1, H2, H3)."""
    model_config = ConfigDict(frozen=True)

    type: Literal["heading"] = "heading"
    level: Literal[1, 2, 3] = Field(..., description="Heading level (1=largest)")
    text: ListType[RichText] = Field(..., description="Heading text")

    @property
    def plain_text(self) -> str:
        return plain_text(self.text)


class Paragraph(BaseModel):
    """Paragraph block."""
    model_config = ConfigDict(frozen=True)

    type: Literal["paragraph"] = "paragraph"
    text: ListType[RichText] = Field(..., description="Paragraph text")

    @property
    def plain_text(self) -> str:
        return plain_text(self.text)


class ListBlock(BaseModel):
    """Ordered or unordered list. Lists do not nest."""
    model_config = ConfigDict(frozen=True)

    type: Literal["list"] = "list"
    ordered: bool = Field(default=False, description="Numbered list")
    items: ListType[ListType[RichText]] = Field(..., min_length=1, description="List items")

    @property
    def plain_items(self) -> ListType[str]:
        return [plain_text(item) for item in self.items]


class Table(BaseModel):
    """Table block with a header row and at least one body row."""
    model_config = ConfigDict(frozen=True)

    type: Literal["table"] = "table"
    headers: ListType[ListType[RichText]] = Field(..., min_length=1, description="Header cells")
    rows: ListType[ListType[ListType[RichText]]] = Field(..., min_length=1, description="Body rows")

    @field_validator("rows")
    @classmethod
    def validate_rows(cls, v, info):
        """Ensure every body row is as wide as the header."""
        if "headers" in info.data:
            width = len(info.data["headers"])
            for row in v:
                if len(row) != width:
                    raise ValueError(f"row width must match header count ({width})")
        return v

    @property
    def columns(self) -> int:
        return len(self.headers)

    @property
    def plain_headers(self) -> ListType[str]:
        return [plain_text(cell) for cell in self.headers]

    @property
    def plain_rows(self) -> ListType[ListType[str]]:
        return [[plain_text(cell) for cell in row] for row in self.rows]


class Quote(BaseModel):
    """Blockquote; consecutive quote lines merge into one block."""
    model_config = ConfigDict(frozen=True)

    type: Literal["quote"] = "quote"
    text: ListType[RichText] = Field(..., description="Quote text")

    @property
    def plain_text(self) -> str:
        return plain_text(self.text)


class Rule(BaseModel):
    """Horizontal rule."""
    model_config = ConfigDict(frozen=True)

    type: Literal["rule"] = "rule"


# Union type for all block types
Block = Union[
    Heading,
    Paragraph,
    ListBlock,
    Table,
    Quote,
    Rule,
]


def _is_color_token(value: str) -> bool:
    if HEX_COLOR_PATTERN.match(value):
        return True
    try:
        return toColor(value) is not None
    except (ValueError, TypeError):
        return False


class TemplateConfig(BaseModel):
    """User-editable presentation template."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Company info
    company_name: str = Field(default="BrokenRubik Inc.", alias="companyName")
    company_tagline: str = Field(default="Specialized NetSuite Engineering", alias="companyTagline")
    contact_email: str = Field(default="contact@brokenrubik.co", alias="contactEmail")
    website: str = "brokenrubik.com"
    logo_url: str = Field(default="/logo.webp", alias="logoUrl")

    # Colors
    primary_color: str = Field(default="#1e293b", alias="primaryColor")
    secondary_color: str = Field(default="#334155", alias="secondaryColor")
    accent_color: str = Field(default="#64748b", alias="accentColor")
    text_color: str = Field(default="#334155", alias="textColor")
    muted_color: str = Field(default="#64748b", alias="mutedColor")
    background_color: str = Field(default="#ffffff", alias="backgroundColor")

    # Typography
    font_family: str = Field(
        default='Inter, -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif',
        alias="fontFamily",
    )
    base_font_size: str = Field(default="11pt", alias="baseFontSize")

    # Header
    show_quote_number: bool = Field(default=True, alias="showQuoteNumber")
    show_date: bool = Field(default=True, alias="showDate")
    show_validity_period: bool = Field(default=True, alias="showValidityPeriod")
    validity_days: int = Field(default=30, ge=1, alias="validityDays")
    quote_prefix: str = Field(default="BR", alias="quotePrefix")

    # Footer
    footer_text: str = Field(
        default="Thank you for considering BrokenRubik for your project.",
        alias="footerText",
    )
    show_footer: bool = Field(default=True, alias="showFooter")

    # Spacing
    page_padding: str = Field(default="48px 56px", alias="pagePadding")

    @field_validator(
        "primary_color", "secondary_color", "accent_color",
        "text_color", "muted_color", "background_color",
    )
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Colors must be hex or named color tokens."""
        if not _is_color_token(v.strip()):
            raise ValueError(f"invalid color token: {v!r}")
        return v.strip()


class ExportConfig(BaseModel):
    """PDF export settings; drives geometry and raster quality only."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    page_size: Literal["a4", "letter", "legal"] = Field(default="a4", alias="pageSize")
    orientation: Literal["portrait", "landscape"] = "portrait"
    filename: str = "quote"
    quality: Literal["draft", "standard", "high"] = "standard"
    include_date: bool = Field(default=True, alias="includeDate")

    @field_validator("page_size", "orientation", "quality", mode="before")
    @classmethod
    def lower_enums(cls, v):
        """Accept 'A4', 'Letter', 'Portrait' and friends."""
        return v.lower() if isinstance(v, str) else v


class CaseStudyRef(BaseModel):
    """Portfolio entry shown on the showcase page."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    summary: str = ""
    link: str = ""
    category: str = ""


class PageGeometry(BaseModel):
    """Page dimensions and margins in points (1 pt = 1/72 inch)."""
    model_config = ConfigDict(frozen=True)

    width: float
    height: float
    margin_top: float
    margin_right: float
    margin_bottom: float
    margin_left: float
    raster_scale: float = 2.0

    @property
    def content_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        return self.height - self.margin_top - self.margin_bottom


AvoidClass = Literal["list", "table", "quote", "heading_pair", "footer", "none"]


class PlacedBlock(BaseModel):
    """
    A content block, or a slice of one, positioned on a page.

    `part` is a half-open range over paragraph/quote lines, list items or
    table rows; None means the whole block.
    """
    model_config = ConfigDict(frozen=True)

    block: Block = Field(..., discriminator="type")
    top: float = Field(..., description="Offset from the top of the content area")
    height: float
    avoid: AvoidClass = "none"
    part: Optional[Tuple[int, int]] = None
    overflow: bool = False


class HeaderRegion(BaseModel):
    """Document header shown on the first body page when there is no cover."""
    model_config = ConfigDict(frozen=True)

    company_name: str
    company_tagline: str = ""
    quote_number: Optional[str] = None
    date: Optional[str] = None
    valid_until: Optional[str] = None
    height: float = 0.0


class FooterRegion(BaseModel):
    """Footer repeated identically at the bottom of every body page."""
    model_config = ConfigDict(frozen=True)

    contact: str
    text: str
    height: float = 0.0


class ShowcaseEntry(BaseModel):
    """One numbered case study on a showcase page."""
    model_config = ConfigDict(frozen=True)

    index: str
    study: CaseStudyRef
    top: float
    height: float


class CoverRegion(BaseModel):
    """Everything drawn on the cover page."""
    model_config = ConfigDict(frozen=True)

    data: CoverPageData
    badge: str
    company_name: str
    company_tagline: str
    date: Optional[str] = None


class Page(BaseModel):
    """A single laid-out page."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["cover", "body", "showcase"]
    number: int = Field(..., ge=1)
    geometry: PageGeometry
    blocks: ListType[PlacedBlock] = Field(default_factory=list)
    header: Optional[HeaderRegion] = None
    footer: Optional[FooterRegion] = None
    cover: Optional[CoverRegion] = None
    entries: ListType[ShowcaseEntry] = Field(default_factory=list)
    continued: bool = Field(default=False, description="Continuation of the previous showcase page")
    company_name: str = ""
    website: str = ""

    @model_validator(mode="after")
    def check_kind(self):
        """Cover pages carry cover data; body pages never do."""
        if self.kind == "cover" and self.cover is None:
            raise ValueError("cover page requires cover data")
        if self.kind != "cover" and self.cover is not None:
            raise ValueError("only cover pages carry cover data")
        return self
