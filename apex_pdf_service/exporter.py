"""
HTML to PDF export using Playwright/Chromium.

Each call owns one browser: launch, one page, render, close. The browser is
closed on every exit path so failed renders never leak Chromium processes.
"""

import asyncio
import logging
from typing import Optional

from .config import ServiceSettings, get_settings

logger = logging.getLogger(__name__)

# Sandbox is disabled so Chromium can run as root inside slim containers.
# Report HTML is generated by this service, not loaded from arbitrary sites.
CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--single-process",
    "--disable-gpu",
]

PDF_FORMAT = "A4"
PDF_MARGIN = {"top": "20px", "right": "20px", "bottom": "20px", "left": "20px"}


class PDFExportError(Exception):
    """Raised when Chromium fails to launch, load the report or print it."""


async def html_to_pdf(html: str, settings: Optional[ServiceSettings] = None) -> bytes:
    """
    Render an HTML document to PDF bytes.

    Args:
        html: Complete HTML document
        settings: Service settings (timeouts, headless flag); defaults to get_settings()

    Returns:
        PDF binary data (A4, backgrounds printed, 20px margins)

    Raises:
        PDFExportError: Browser launch, page load or PDF capture failed
    """
    settings = settings or get_settings()

    # Import here to avoid loading Playwright on startup
    from playwright.async_api import Error as PlaywrightError
    from playwright.async_api import async_playwright

    async with async_playwright() as p:
        browser = None
        try:
            logger.info("Launching Chromium...")
            browser = await p.chromium.launch(
                headless=settings.playwright_headless,
                args=CHROMIUM_ARGS,
                timeout=settings.browser_launch_timeout_ms,
            )

            logger.info("Chromium launched. Opening new page.")
            page = await browser.new_page()

            logger.info("Setting page content.")
            await page.set_content(
                html,
                wait_until="networkidle",
                timeout=settings.content_timeout_ms,
            )

            logger.info("Generating PDF from page content.")
            pdf_bytes = await page.pdf(
                format=PDF_FORMAT,
                print_background=True,
                margin=PDF_MARGIN,
            )
        except asyncio.TimeoutError as e:
            raise PDFExportError("PDF rendering timed out") from e
        except PlaywrightError as e:
            raise PDFExportError(f"PDF rendering failed: {e}") from e
        finally:
            if browser is not None:
                logger.info("Closing browser.")
                try:
                    await browser.close()
                except Exception as e:
                    logger.warning(f"Failed to close browser cleanly: {e}")

    logger.info(f"PDF generated successfully ({len(pdf_bytes)} bytes)")
    return pdf_bytes
