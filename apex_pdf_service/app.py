"""
APEX PDF Service - FastAPI application for deal report PDFs.

Accepts the competitive deal analysis as JSON, inlines competitor images,
renders the report to HTML and prints it to PDF using Playwright/Chromium.
Concurrency is guarded by an asyncio semaphore; requests beyond the limit
are rejected with 503 rather than queued.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from io import BytesIO
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import ValidationError

from . import __version__
from .config import validate_config_on_startup
from .exporter import html_to_pdf
from .images import resolve_competitor_images
from .models import HealthResponse, ReportRequest, missing_fields
from .render import build_report_html

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

# Validate configuration at startup
settings = validate_config_on_startup()
logging.getLogger().setLevel(settings.log_level)

app = FastAPI(
    title="APEX PDF Service",
    version=__version__,
    description="Renders APEX competitive deal reports to PDF using Playwright/Chromium"
)

if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Semaphore for rate limiting
_render_semaphore = asyncio.Semaphore(settings.max_concurrent_renders)

# Playwright readiness state
_playwright_ready = False
_playwright_error: Optional[str] = None

GENERATION_FAILED_MESSAGE = "An error occurred while generating the PDF."


def report_filename(now: Optional[datetime] = None) -> str:
    """Download filename for a report, stamped with the UTC date."""
    now = now or datetime.now(timezone.utc)
    return f"apex-report-{now.strftime('%Y-%m-%d')}.pdf"


def _error(status_code: int, message: str, details: Optional[str] = None) -> JSONResponse:
    content = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


class PayloadTooLargeError(Exception):
    """Request body is larger than MAX_PAYLOAD_BYTES."""


async def read_body_limited(request: Request, limit: int) -> bytes:
    """
    Read the request body, stopping as soon as it exceeds limit bytes.

    A declared Content-Length above the limit is rejected before any of the
    body is read; chunked bodies are counted while streaming.

    Raises:
        PayloadTooLargeError: body (declared or received) exceeds limit
    """
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > limit:
        raise PayloadTooLargeError(f"declared Content-Length {content_length}")

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise PayloadTooLargeError(f"received more than {limit} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


# ============================================================================
# Startup Event - Validate Playwright
# ============================================================================

@app.on_event("startup")
async def validate_playwright_on_startup():
    """
    Validate Playwright/Chromium is properly installed on startup.

    This ensures the service won't report as healthy if Playwright can't
    actually generate PDFs.
    """
    global _playwright_ready, _playwright_error

    if not settings.validate_playwright_on_startup:
        logger.info("Playwright startup validation disabled")
        _playwright_ready = True
        return

    logger.info("PDF Service starting - validating Playwright installation...")

    try:
        test_pdf = await html_to_pdf("<html><body><h1>Test</h1></body></html>", settings)
        if len(test_pdf) > 0:
            _playwright_ready = True
            logger.info(f"Playwright validation successful - generated {len(test_pdf)} byte test PDF")
        else:
            _playwright_error = "Test PDF generation returned empty result"
            logger.error(f"Playwright validation failed: {_playwright_error}")
    except Exception as e:
        _playwright_error = str(e)
        logger.error(f"Playwright validation failed: {_playwright_error}")
        logger.error("PDF generation will not work until this is resolved.")


# ============================================================================
# Liveness / Health
# ============================================================================

@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "APEX PDF Generator is running."


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint for container orchestration.

    Returns service status, capacity information, and Playwright readiness.
    Returns HTTP 503 if Playwright validation failed on startup.
    """
    active_renders = settings.max_concurrent_renders - _render_semaphore._value

    if not _playwright_ready:
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "active_renders": active_renders,
                "max_concurrent": settings.max_concurrent_renders,
                "playwright_ready": False,
                "playwright_error": _playwright_error,
                "message": "PDF service is unhealthy - Playwright/Chromium not available"
            }
        )

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        active_renders=active_renders,
        max_concurrent=settings.max_concurrent_renders,
        playwright_ready=True,
        playwright_error=None
    )


# ============================================================================
# PDF Generation
# ============================================================================

@app.post("/generate-pdf")
async def generate_pdf(request: Request):
    """
    Render the APEX deal report to PDF.

    Body: {finalReport, clientInfo, competitorData, clientUrl}

    Returns:
        StreamingResponse with PDF binary data

    Errors:
        400 missing/invalid report data, 413 body too large,
        503 overloaded, 500 rendering failure
    """
    logger.info("Received request to generate PDF.")

    try:
        body = await read_body_limited(request, settings.max_payload_bytes)
    except PayloadTooLargeError as e:
        logger.warning(f"Rejecting report request: {e}")
        return _error(413, f"Request body exceeds {settings.max_payload_bytes} bytes.")

    try:
        payload = json.loads(body)
    except ValueError:
        return _error(400, "Request body must be valid JSON.")

    if not isinstance(payload, dict):
        return _error(400, "Request body must be a JSON object.")

    missing = missing_fields(payload)
    if missing:
        logger.warning(f"Rejecting report request, missing fields: {', '.join(missing)}")
        return _error(400, "Missing required report data.")

    try:
        report_request = ReportRequest.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Rejecting report request with invalid structure: {e.error_count()} errors")
        return _error(400, "Invalid report data.", str(e))

    # Check capacity
    if _render_semaphore.locked():
        logger.warning("PDF service overloaded, rejecting request")
        return _error(503, "Service overloaded. Too many concurrent PDF operations.")

    async with _render_semaphore:
        try:
            logger.info(f"Processing images for {len(report_request.competitorData)} competitors...")
            competitors = await resolve_competitor_images(
                report_request.competitorData,
                timeout=settings.image_fetch_timeout,
            )

            logger.info("Generating HTML content.")
            html = build_report_html(
                report_request.finalReport,
                report_request.clientInfo,
                competitors,
                report_request.clientUrl,
            )

            pdf_bytes = await html_to_pdf(html, settings)
        except Exception as e:
            logger.exception(f"Failed to generate PDF: {e}")
            return _error(500, GENERATION_FAILED_MESSAGE, str(e))

    filename = report_filename()
    logger.info(f"PDF generated successfully. Sending {filename}")

    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )
