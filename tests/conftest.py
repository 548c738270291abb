"""
Pytest configuration and shared fixtures.
"""

import io
from datetime import date

import pytest
from PIL import Image as PILImage

from quotesmith.models import CaseStudyRef, ExportConfig, TemplateConfig
from quotesmith.styles import resolve_styles
from quotesmith.typesetting import FontContext


# ============================================================================
# Sample Documents
# ============================================================================

SCENARIO_DOCUMENT = "---\ntitle: Test Quote\n---\n## Summary\nHello **world**."

COMPOSITE_DOCUMENT = """# Title

Intro with **bold**, *italic*, `code` and [a link](https://example.com).
Second line.

## Scope

- One
- Two

1. First
2. Second

| Item | Cost |
| --- | --- |
| Build | $100 |

> **Total: $100**

---

### Notes

Plain closing paragraph.
"""


# ============================================================================
# Base Fixtures
# ============================================================================


@pytest.fixture
def default_template():
    """Template with every default value."""
    return TemplateConfig()


@pytest.fixture
def a4_export():
    """A4 portrait export at standard quality."""
    return ExportConfig(pageSize="a4", orientation="portrait", quality="standard")


@pytest.fixture
def styles(default_template):
    """StyleMap resolved from the default template."""
    return resolve_styles(default_template)


@pytest.fixture
def fonts():
    """Font context without a fonts directory (built-in Helvetica)."""
    return FontContext(fonts_dir="")


@pytest.fixture
def issued_on():
    return date(2026, 10, 18)


@pytest.fixture
def scenario_document():
    return SCENARIO_DOCUMENT


@pytest.fixture
def composite_document():
    return COMPOSITE_DOCUMENT


@pytest.fixture
def case_studies():
    """Three small case studies."""
    return [
        CaseStudyRef(id=f"study-{i}", title=f"Study {i}", summary=f"Summary {i}",
                     link=f"https://example.com/{i}")
        for i in range(1, 4)
    ]


@pytest.fixture
def png_logo():
    """A real 200x80 PNG image."""
    buf = io.BytesIO()
    PILImage.new("RGB", (200, 80), (30, 41, 59)).save(buf, format="PNG")
    return buf.getvalue()
