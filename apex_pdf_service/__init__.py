"""
APEX PDF Service - renders competitive deal reports to PDF.

Converts the deal analysis JSON into a styled HTML report and prints it
with Playwright/Chromium, inlining competitor images as data URLs.
"""

__version__ = "1.0.0"
