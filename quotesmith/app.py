"""
FastAPI application for the quote export service.

Provides REST endpoints for HTML preview, PDF export, the case-study
catalog and health checks.

License: MIT
"""

import time
import logging
import unicodedata
from datetime import date
from urllib.parse import quote
from typing import Any, Dict, List as ListType, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from quotesmith.catalog import (
    CASE_STUDIES, DEFAULT_CASE_STUDY_IDS, DEFAULT_DOCUMENT, get_case_studies_by_ids,
)
from quotesmith.config import get_settings
from quotesmith.models import CaseStudyRef, ExportConfig, TemplateConfig
from quotesmith.pipeline import export_filename, export_pdf, format_quote_number, render_preview
from quotesmith.renderer import RenderError

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class QuoteRequest(BaseModel):
    """Document plus the settings needed to preview or export it."""
    model_config = ConfigDict(populate_by_name=True)

    markdown: str = Field(..., description="Markdown document with optional frontmatter")
    template: TemplateConfig = Field(default_factory=TemplateConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    case_study_ids: Optional[ListType[str]] = Field(
        default=None, alias="caseStudyIds",
        description="Showcase entries in display order; defaults apply when omitted",
    )
    quote_number: Optional[str] = Field(default=None, alias="quoteNumber")
    quote_sequence: int = Field(default=1, ge=1, alias="quoteSequence")
    issued_on: Optional[date] = Field(default=None, alias="issuedOn")

    def resolved_quote_number(self) -> str:
        if self.quote_number:
            return self.quote_number
        return format_quote_number(self.template.quote_prefix, self.quote_sequence)

    def resolved_case_studies(self) -> ListType[CaseStudyRef]:
        ids = DEFAULT_CASE_STUDY_IDS if self.case_study_ids is None else self.case_study_ids
        return get_case_studies_by_ids(ids)


class PreviewResponse(BaseModel):
    html: str
    has_cover: bool


def content_disposition(filename: str) -> str:
    """
    Attachment header for a download filename.

    Headers are Latin-1 on the wire, so the plain `filename` carries an ASCII
    fallback and `filename*` carries the UTF-8 name (RFC 5987).
    """
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = fallback.replace('"', "").replace("\\", "")
    if not fallback[:-4].strip(" .-"):
        fallback = "quote.pdf"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


# Create FastAPI app
app = FastAPI(
    title="Quotesmith API",
    version="1.0.0",
    description="Turns Markdown quotes into branded, paginated PDF documents",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing information."""
    start_time = time.time()

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} "
        f"completed in {duration:.3f}s with status {response.status_code}"
    )

    return response


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Status dictionary indicating service health
    """
    return {"status": "ok"}


@app.get("/case-studies")
async def list_case_studies(ids: Optional[str] = None) -> ListType[CaseStudyRef]:
    """
    Case-study catalog.

    Args:
        ids: Optional comma-separated ids; results follow their order

    Returns:
        Matching case studies
    """
    if ids is None:
        return CASE_STUDIES
    return get_case_studies_by_ids(part.strip() for part in ids.split(",") if part.strip())


@app.get("/defaults")
async def defaults() -> Dict[str, Any]:
    """Default template and starter document for new quotes."""
    return {
        "template": TemplateConfig().model_dump(by_alias=True),
        "markdown": DEFAULT_DOCUMENT,
        "caseStudyIds": list(DEFAULT_CASE_STUDY_IDS),
    }


@app.post("/preview")
async def preview(request: QuoteRequest) -> PreviewResponse:
    """
    Render the HTML preview of a quote.

    Returns:
        HTML fragment and whether a cover page is present
    """
    result = render_preview(
        request.markdown, request.template,
        quote_number=request.resolved_quote_number(),
        issued_on=request.issued_on or date.today(),
    )
    return PreviewResponse(html=result.html, has_cover=result.has_cover)


@app.post("/render")
async def render(request: QuoteRequest) -> Response:
    """
    Export a quote to PDF.

    Returns:
        PDF file as binary response

    Raises:
        HTTPException: 500 with a generic message when the export fails
    """
    start_time = time.time()
    try:
        pdf_bytes = await export_pdf(
            request.markdown,
            request.template,
            request.export,
            request.resolved_case_studies(),
            quote_number=request.resolved_quote_number(),
            issued_on=request.issued_on,
        )
    except RenderError as e:
        logger.error(f"Export failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Export failed")

    render_time = time.time() - start_time
    filename = export_filename(request.export)
    logger.info(f"Rendered {filename} in {render_time:.3f}s")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(filename)},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Export failed" if request.url.path == "/render" else "Internal server error"},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
