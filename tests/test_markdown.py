"""
Unit tests for the Markdown dialect parser.
"""

import pytest

from quotesmith.markdown import (
    parse_blocks, parse_inline, split_cells, to_markdown, tokenize,
)
from quotesmith.models import (
    Heading, ListBlock, Paragraph, Quote, RichText, Rule, Table,
)


class TestTokenize:
    """Tests for line classification."""

    def test_line_kinds(self):
        kinds = [token.kind for token in tokenize("# H\n---\n> q\n| a |\n|---|\n- b\n1. c\ntext\n")]
        assert kinds == [
            "heading", "rule", "quote", "table_row", "table_sep",
            "bullet", "ordered", "text", "blank",
        ]

    def test_heading_level(self):
        token = tokenize("### Third")[0]
        assert (token.kind, token.level, token.text) == ("heading", 3, "Third")

    def test_split_cells_keeps_inner_empty_cells(self):
        assert split_cells("| 1 |  | 3 |") == ["1", "", "3"]


class TestParseBlocks:
    """Tests for block grouping."""

    @pytest.mark.parametrize("body", ["", "   ", "\n\n"])
    def test_empty_input(self, body):
        assert parse_blocks(body) == []

    def test_headings(self):
        blocks = parse_blocks("# One\n## Two\n### Three")
        assert [(b.level, b.plain_text) for b in blocks] == [(1, "One"), (2, "Two"), (3, "Three")]

    def test_fourth_level_is_paragraph_text(self):
        blocks = parse_blocks("#### Four")
        assert isinstance(blocks[0], Paragraph)
        assert blocks[0].plain_text == "#### Four"

    def test_list_kind_change_starts_new_list(self):
        """Test '- a\\n- b\\n1. c' yields an unordered then an ordered list."""
        blocks = parse_blocks("- a\n- b\n1. c")

        assert len(blocks) == 2
        assert isinstance(blocks[0], ListBlock) and not blocks[0].ordered
        assert blocks[0].plain_items == ["a", "b"]
        assert isinstance(blocks[1], ListBlock) and blocks[1].ordered
        assert blocks[1].plain_items == ["c"]

    def test_table(self):
        blocks = parse_blocks("| A | B |\n|---|---|\n| 1 | 2 |\n| 3 | 4 |")

        assert len(blocks) == 1
        table = blocks[0]
        assert isinstance(table, Table)
        assert table.plain_headers == ["A", "B"]
        assert table.plain_rows == [["1", "2"], ["3", "4"]]

    def test_table_without_separator_is_paragraph(self):
        blocks = parse_blocks("| A | B |\n| 1 | 2 |")

        assert len(blocks) == 1
        assert isinstance(blocks[0], Paragraph)
        assert blocks[0].plain_text == "| A | B |\n| 1 | 2 |"

    def test_table_without_body_row_is_paragraph(self):
        blocks = parse_blocks("| A |\n|---|")
        assert [type(b) for b in blocks] == [Paragraph]

    def test_short_rows_padded_long_rows_truncated(self):
        table = parse_blocks("| A | B |\n|---|---|\n| 1 |\n| 2 | 3 | 4 |")[0]
        assert table.plain_rows == [["1", ""], ["2", "3"]]

    def test_quote_lines_merge(self):
        blocks = parse_blocks("> first\n> second")

        assert len(blocks) == 1
        assert isinstance(blocks[0], Quote)
        assert blocks[0].plain_text == "first\nsecond"

    @pytest.mark.parametrize("line", ["---", "***"])
    def test_rules(self, line):
        assert parse_blocks(f"a\n\n{line}\n\nb")[1] == Rule()

    def test_heading_followed_by_text_keeps_text(self):
        blocks = parse_blocks("## Heading\ntext right below")
        assert isinstance(blocks[0], Heading)
        assert isinstance(blocks[1], Paragraph)
        assert blocks[1].plain_text == "text right below"

    def test_paragraph_lines_joined_with_breaks(self):
        paragraph = parse_blocks("first line\nsecond line")[0]
        assert paragraph.text == [
            RichText(text="first line"),
            RichText(text="\n"),
            RichText(text="second line"),
        ]

    def test_blank_line_separates_paragraphs(self):
        blocks = parse_blocks("one\n\ntwo")
        assert [b.plain_text for b in blocks] == ["one", "two"]

    def test_markup_stays_data(self):
        paragraph = parse_blocks("<b>not html</b> & more")[0]
        assert paragraph.plain_text == "<b>not html</b> & more"


class TestParseInline:
    """Tests for inline formatting."""

    def test_bold(self):
        assert parse_inline("Hello **world**.") == [
            RichText(text="Hello "),
            RichText(text="world", bold=True),
            RichText(text="."),
        ]

    def test_italic_both_markers(self):
        spans = parse_inline("*a* and _b_")
        assert spans[0] == RichText(text="a", italic=True)
        assert spans[2] == RichText(text="b", italic=True)

    def test_underscore_bold(self):
        assert parse_inline("__b__") == [RichText(text="b", bold=True)]

    def test_bold_italic(self):
        assert parse_inline("***both***") == [RichText(text="both", bold=True, italic=True)]

    def test_code_is_literal(self):
        assert parse_inline("`**x**`") == [RichText(text="**x**", code=True)]

    def test_link_with_formatted_label(self):
        assert parse_inline("[**site**](https://example.com)") == [
            RichText(text="site", bold=True, link="https://example.com"),
        ]

    def test_unterminated_marker_is_literal(self):
        assert parse_inline("**open") == [RichText(text="**open")]

    def test_nested_italic_inside_bold(self):
        spans = parse_inline("**bold *both* bold**")
        assert spans == [
            RichText(text="bold ", bold=True),
            RichText(text="both", bold=True, italic=True),
            RichText(text=" bold", bold=True),
        ]

    @pytest.mark.parametrize("text", ["*a **b** c*", "_a **b** c_"])
    def test_bold_inside_italic(self, text):
        assert parse_inline(text) == [
            RichText(text="a ", italic=True),
            RichText(text="b", bold=True, italic=True),
            RichText(text=" c", italic=True),
        ]

    def test_emphasis_spans_a_link(self):
        assert parse_inline("*see [docs](https://example.com) now*") == [
            RichText(text="see ", italic=True),
            RichText(text="docs", italic=True, link="https://example.com"),
            RichText(text=" now", italic=True),
        ]

    def test_code_inside_emphasis_keeps_markers(self):
        assert parse_inline("**run `a*b*c` now**") == [
            RichText(text="run ", bold=True),
            RichText(text="a*b*c", bold=True, code=True),
            RichText(text=" now", bold=True),
        ]


class TestToMarkdown:
    """Tests for serialization back to the dialect."""

    def test_round_trip(self, composite_document):
        blocks = parse_blocks(composite_document)
        assert parse_blocks(to_markdown(blocks)) == blocks

    def test_round_trip_covers_every_block_type(self, composite_document):
        kinds = {type(block) for block in parse_blocks(composite_document)}
        assert kinds == {Heading, Paragraph, ListBlock, Table, Quote, Rule}

    def test_empty(self):
        assert to_markdown([]) == ""
