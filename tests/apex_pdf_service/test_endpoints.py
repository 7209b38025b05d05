"""
Unit tests for APEX PDF service endpoints.

Tests liveness, health check and the generate-pdf pipeline.
"""

import json
import re

import httpx
import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch, MagicMock, AsyncMock

LOGO_BYTES = b"\x89PNG\r\n\x1a\nfake-logo"


@pytest.fixture
def client():
    """Create test client for the PDF service with Playwright marked as ready."""
    import apex_pdf_service.app as app_module
    app_module._playwright_ready = True
    app_module._playwright_error = None
    from apex_pdf_service.app import app
    return TestClient(app)


@pytest.fixture
def client_playwright_unavailable():
    """Create test client with Playwright marked as unavailable."""
    import apex_pdf_service.app as app_module
    app_module._playwright_ready = False
    app_module._playwright_error = "Test: Playwright not available"
    from apex_pdf_service.app import app
    return TestClient(app)


@pytest.fixture
def image_hosts(monkeypatch):
    """Serve cdn.example logos; every other host is unreachable."""
    from apex_pdf_service import images

    requested = []
    real_client = httpx.AsyncClient

    def handler(request):
        requested.append(str(request.url))
        if request.url.host == "cdn.example":
            return httpx.Response(200, content=LOGO_BYTES, headers={"content-type": "image/png"})
        raise httpx.ConnectError("connection refused", request=request)

    def factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(images.httpx, "AsyncClient", factory)
    return requested


class TestRootEndpoint:
    """Tests for / liveness endpoint."""

    def test_root_returns_plain_text(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "APEX PDF Generator is running."


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_check_returns_correct_structure(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()

        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert data["playwright_ready"] is True
        assert 0 <= data["active_renders"] <= data["max_concurrent"]

    def test_health_check_returns_503_when_playwright_unavailable(self, client_playwright_unavailable):
        response = client_playwright_unavailable.get("/health")
        assert response.status_code == 503
        data = response.json()["detail"]
        assert data["status"] == "unhealthy"
        assert data["playwright_ready"] is False
        assert "Playwright not available" in data["playwright_error"]


class TestGeneratePDFValidation:
    """Tests for /generate-pdf request validation."""

    @pytest.mark.parametrize("field", ["finalReport", "clientInfo", "competitorData", "clientUrl"])
    def test_missing_field_returns_400(self, field, client, report_payload):
        del report_payload[field]

        response = client.post("/generate-pdf", json=report_payload)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required report data."}

    def test_blank_client_url_returns_400(self, client, report_payload):
        report_payload["clientUrl"] = "  "
        response = client.post("/generate-pdf", json=report_payload)
        assert response.status_code == 400

    @pytest.mark.parametrize("value", [False, 0])
    def test_falsy_client_info_returns_400(self, value, client, report_payload, chromium):
        report_payload["clientInfo"] = value

        response = client.post("/generate-pdf", json=report_payload)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required report data."}
        chromium.launch.assert_not_awaited()

    def test_missing_client_url_has_no_side_effects(self, client, report_payload, chromium):
        del report_payload["clientUrl"]

        with patch("apex_pdf_service.app.resolve_competitor_images", new_callable=AsyncMock) as mock_resolve:
            response = client.post("/generate-pdf", json=report_payload)

        assert response.status_code == 400
        mock_resolve.assert_not_awaited()
        chromium.launch.assert_not_awaited()

    def test_empty_competitor_list_is_accepted(self, client, report_payload, chromium):
        report_payload["competitorData"] = []
        response = client.post("/generate-pdf", json=report_payload)
        assert response.status_code == 200

    def test_invalid_json_returns_400(self, client):
        response = client.post(
            "/generate-pdf",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert "error" in response.json()

    def test_non_object_body_returns_400(self, client):
        response = client.post("/generate-pdf", json=["finalReport"])
        assert response.status_code == 400

    def test_invalid_nested_structure_returns_400(self, client, report_payload, chromium):
        report_payload["finalReport"]["recommendation"]["numericScore"] = "very good"

        response = client.post("/generate-pdf", json=report_payload)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Invalid report data."
        assert "numericScore" in data["details"]
        chromium.launch.assert_not_awaited()

    def test_oversized_body_returns_413(self, client, report_payload, monkeypatch):
        import apex_pdf_service.app as app_module
        monkeypatch.setattr(app_module.settings, "max_payload_bytes", 1024)
        report_payload["clientInfo"] = {"notes": "x" * 2048}

        response = client.post("/generate-pdf", json=report_payload)

        assert response.status_code == 413
        assert "error" in response.json()

    def test_oversized_chunked_body_returns_413(self, client, report_payload, monkeypatch, chromium):
        """A body sent without Content-Length is counted while streaming."""
        import apex_pdf_service.app as app_module
        monkeypatch.setattr(app_module.settings, "max_payload_bytes", 1024)
        report_payload["clientInfo"] = {"notes": "x" * 4096}
        encoded = json.dumps(report_payload).encode()

        def chunks():
            for start in range(0, len(encoded), 512):
                yield encoded[start:start + 512]

        response = client.post(
            "/generate-pdf",
            content=chunks(),
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 413
        assert "error" in response.json()
        chromium.launch.assert_not_awaited()

    def test_chunked_body_within_limit_is_accepted(self, client, report_payload, chromium, image_hosts):
        encoded = json.dumps(report_payload).encode()

        def chunks():
            for start in range(0, len(encoded), 256):
                yield encoded[start:start + 256]

        response = client.post(
            "/generate-pdf",
            content=chunks(),
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 200


class TestReadBodyLimited:
    """Tests for read_body_limited."""

    @staticmethod
    def _request(headers, chunks):
        consumed = []

        async def stream():
            for chunk in chunks:
                consumed.append(chunk)
                yield chunk

        request = MagicMock()
        request.headers = headers
        request.stream = stream
        return request, consumed

    @pytest.mark.asyncio
    async def test_declared_length_rejected_before_reading(self):
        from apex_pdf_service.app import PayloadTooLargeError, read_body_limited
        request, consumed = self._request({"content-length": "5000"}, [b"x" * 10])

        with pytest.raises(PayloadTooLargeError):
            await read_body_limited(request, 1024)

        assert consumed == []

    @pytest.mark.asyncio
    async def test_stream_stops_at_limit(self):
        from apex_pdf_service.app import PayloadTooLargeError, read_body_limited
        request, consumed = self._request({}, [b"a" * 600, b"b" * 600, b"c" * 600])

        with pytest.raises(PayloadTooLargeError):
            await read_body_limited(request, 1024)

        assert len(consumed) == 2

    @pytest.mark.asyncio
    async def test_body_within_limit_joined(self):
        from apex_pdf_service.app import read_body_limited
        request, _ = self._request({"content-length": "6"}, [b"abc", b"def"])

        assert await read_body_limited(request, 1024) == b"abcdef"


class TestGeneratePDFPipeline:
    """Tests for the /generate-pdf render pipeline."""

    def test_success_with_one_unreachable_logo(self, client, report_payload, chromium, image_hosts):
        response = client.post("/generate-pdf", json=report_payload)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
        assert "https://unreachable.example/bolt-logo.png" in image_hosts

        html = chromium.page.set_content.await_args.args[0]
        assert "data:image/png;base64," in html
        assert "No Logo" in html
        assert "unreachable.example" not in html

    def test_content_disposition_has_dated_filename(self, client, report_payload, chromium, image_hosts):
        response = client.post("/generate-pdf", json=report_payload)

        disposition = response.headers["content-disposition"]
        assert re.fullmatch(r'attachment; filename="apex-report-\d{4}-\d{2}-\d{2}\.pdf"', disposition)

    def test_only_matched_competitors_get_cards(self, client, report_payload, chromium, image_hosts):
        report_payload["competitorData"].append({"name": "Nobody", "url": "https://nobody.example"})

        response = client.post("/generate-pdf", json=report_payload)

        assert response.status_code == 200
        html = chromium.page.set_content.await_args.args[0]
        assert html.count("How You Compare") == 2
        assert "Nobody" in html

    def test_failure_after_launch_closes_browser(self, client, report_payload, chromium, image_hosts):
        chromium.page.set_content = AsyncMock(side_effect=RuntimeError("renderer crashed"))

        response = client.post("/generate-pdf", json=report_payload)

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "An error occurred while generating the PDF."
        assert "renderer crashed" in data["details"]
        chromium.browser.close.assert_awaited_once()

    def test_pdf_capture_timeout_returns_500(self, client, report_payload, chromium, image_hosts):
        import asyncio
        chromium.page.pdf = AsyncMock(side_effect=asyncio.TimeoutError())

        response = client.post("/generate-pdf", json=report_payload)

        assert response.status_code == 500
        assert "timed out" in response.json()["details"].lower()
        chromium.browser.close.assert_awaited_once()

    def test_render_failure_returns_500(self, client, report_payload, chromium, image_hosts):
        with patch("apex_pdf_service.app.build_report_html", side_effect=KeyError("recommendation")):
            response = client.post("/generate-pdf", json=report_payload)

        assert response.status_code == 500
        assert "recommendation" in response.json()["details"]
        chromium.launch.assert_not_awaited()


class TestConcurrencyLimits:
    """Tests for the render concurrency gate."""

    @patch("apex_pdf_service.app._render_semaphore")
    def test_generate_pdf_rejects_when_saturated(self, mock_semaphore, client, report_payload, chromium):
        mock_semaphore.locked = MagicMock(return_value=True)

        response = client.post("/generate-pdf", json=report_payload)

        assert response.status_code == 503
        assert "overloaded" in response.json()["error"].lower()
        chromium.launch.assert_not_awaited()
