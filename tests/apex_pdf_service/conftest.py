"""
Shared fixtures for APEX PDF service tests.

Playwright is never launched for real: tests patch
playwright.async_api.async_playwright with AsyncMock stand-ins.
"""

import os

import pytest
from unittest.mock import patch, MagicMock, AsyncMock

# Set before the app module is imported so no real browser check runs
os.environ.setdefault("VALIDATE_PLAYWRIGHT_ON_STARTUP", "false")


@pytest.fixture
def chromium():
    """
    Patch Playwright with a fake Chromium.

    Yields a namespace-like MagicMock with .launch, .browser and .page so
    tests can inject failures and assert teardown.
    """
    with patch("playwright.async_api.async_playwright") as mock_playwright:
        mock_browser = AsyncMock()
        mock_page = AsyncMock()
        mock_page.pdf = AsyncMock(return_value=b"%PDF-1.4 fake report pdf")
        mock_browser.new_page = AsyncMock(return_value=mock_page)
        mock_launch = AsyncMock(return_value=mock_browser)
        mock_playwright.return_value.__aenter__ = AsyncMock(
            return_value=MagicMock(
                chromium=MagicMock(launch=mock_launch)
            )
        )

        fake = MagicMock()
        fake.playwright = mock_playwright
        fake.launch = mock_launch
        fake.browser = mock_browser
        fake.page = mock_page
        yield fake


@pytest.fixture
def final_report():
    return {
        "recommendation": {
            "numericScore": 7,
            "rating": "Favorable",
            "summary": "Your offers are competitive but messaging lags.",
            "discounts": {"good": ["Deeper discounts than average"], "bad": []},
            "messaging": {"good": [], "bad": ["No urgency in headlines"]},
            "competitiveness": {"good": ["Broad catalog"], "bad": ["Slow shipping"]},
            "discountsScore": 8,
            "messagingScore": 5,
            "competitivenessScore": 7,
        },
        "comparison": [
            {
                "competitorName": "Acme Outfitters",
                "dealRating": "hot",
                "analysis": {"good": ["You beat them on price"], "bad": ["They run longer sales"]},
            },
            {
                "competitorName": "Bolt Gear",
                "dealRating": "frosty",
                "analysis": {"good": [], "bad": []},
            },
        ],
    }


@pytest.fixture
def competitor_data():
    return [
        {
            "name": "Acme Outfitters",
            "url": "https://acme.example",
            "logoUrl": "https://cdn.example/acme-logo.png",
            "creativeUrl": None,
            "dealType": "Sitewide Sale",
            "dealDuration": "7 days",
            "topDeals": [
                {"name": "Trail Jacket", "originalPrice": 29.99, "salePrice": 19.99, "percentDiscount": 33},
            ],
        },
        {
            "name": "Bolt Gear",
            "url": "https://bolt.example",
            "logoUrl": "https://unreachable.example/bolt-logo.png",
            "topDeals": [],
        },
    ]


@pytest.fixture
def report_payload(final_report, competitor_data):
    return {
        "finalReport": final_report,
        "clientInfo": {"name": "Client Co"},
        "competitorData": competitor_data,
        "clientUrl": "https://www.client.example/shop",
    }
