"""
Tests for the edge web service endpoints.
"""

import asyncio
from datetime import date
from unittest.mock import patch

from fastapi.testclient import TestClient

from config.settings import EdgeConfig
from edge.analytics import AnalyticsCounter
from edge.app import create_app
from edge.assets import AssetResponse, AssetStore, NOT_FOUND
from edge.kv_store import MemoryKVStore

INDEX_HTML = b'<html><script>window.KEY="__RUNTIME_API_KEY__";</script></html>'


class FakeAssetStore(AssetStore):
    async def fetch(self, path):
        if path in ("/", "/index.html"):
            return AssetResponse(200, INDEX_HTML, {"content-type": "text/html; charset=utf-8"})
        if path == "/logo.png":
            return AssetResponse(200, b"\x89PNG", {"content-type": "image/png"})
        return NOT_FOUND


class BrokenAssetStore(AssetStore):
    async def fetch(self, path):
        raise OSError("disk unavailable")


class TestEdgeApp:
    """Test cases for the edge FastAPI application."""

    def setup_method(self):
        self.settings = EdgeConfig(api_key="sk-admin")
        self.store = MemoryKVStore()
        self.counter = AnalyticsCounter(self.store, today=lambda: date(2024, 5, 1))
        self.client = TestClient(create_app(
            self.settings, store=self.store, asset_store=FakeAssetStore(), counter=self.counter
        ))

    def test_track_view(self):
        response = self.client.post(
            "/api/analytics/track", json={"type": "view"},
            headers={"CF-Connecting-IP": "1.2.3.4"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        row = asyncio.run(self.counter.daily_stats(1))[0]
        assert row["views"] == 1
        assert row["unique"] == 1

    def test_track_rejects_unknown_type(self):
        response = self.client.post("/api/analytics/track", json={"type": "click"})

        assert response.status_code == 500
        assert "error" in response.json()

    def test_track_rejects_invalid_body(self):
        response = self.client.post(
            "/api/analytics/track", content=b"not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 500
        assert "error" in response.json()

    def test_admin_without_key_shows_login(self):
        response = self.client.get("/admin/stats")

        assert response.status_code == 200
        assert "Admin Access" in response.text

    def test_admin_with_wrong_key_shows_login(self):
        response = self.client.get("/admin/stats", params={"key": "wrong"})

        assert "Admin Access" in response.text
        assert "Analytics Dashboard" not in response.text

    def test_admin_with_key_shows_dashboard(self):
        self.client.post("/api/analytics/track", json={"type": "report"})

        response = self.client.get("/admin/stats", params={"key": "sk-admin"})

        assert response.status_code == 200
        assert "Analytics Dashboard" in response.text
        assert "Reports Generated" in response.text
        assert "2024-05-01" in response.text
        assert "2024-04-02" in response.text

    def test_admin_is_locked_when_no_key_configured(self):
        client = TestClient(create_app(
            EdgeConfig(api_key=None), store=MemoryKVStore(), asset_store=FakeAssetStore()
        ))

        response = client.get("/admin/stats", params={"key": ""})

        assert "Admin Access" in response.text

    def test_index_is_injected(self):
        response = self.client.get("/")

        assert response.status_code == 200
        assert "sk-admin" in response.text
        assert response.headers["cache-control"] == "no-cache, no-store, must-revalidate"

    def test_client_route_serves_index(self):
        response = self.client.get("/reports/42")

        assert response.status_code == 200
        assert "sk-admin" in response.text

    def test_binary_asset_passthrough(self):
        response = self.client.get("/logo.png")

        assert response.content == b"\x89PNG"
        assert response.headers["content-type"] == "image/png"

    def test_missing_asset_is_404(self):
        assert self.client.get("/missing.css").status_code == 404

    def test_routing_failure_is_500(self):
        client = TestClient(create_app(
            self.settings, store=MemoryKVStore(), asset_store=BrokenAssetStore()
        ))

        response = client.get("/")

        assert response.status_code == 500
        assert response.text.startswith("Internal Worker Error")

    @patch('edge.app.render_dashboard', return_value="<html>ok</html>")
    def test_dashboard_receives_thirty_rows(self, mock_render):
        self.client.get("/admin/stats", params={"key": "sk-admin"})

        rows = mock_render.call_args[0][0]
        assert len(rows) == 30
