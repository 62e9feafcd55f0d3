"""
Tests for static asset routing and runtime key injection.
"""

import asyncio

from edge.assets import AssetResponse, AssetStore, DirectoryAssetStore, NOT_FOUND
from edge.router import AssetInjectionRouter, NO_STORE, has_extension

PLACEHOLDER = "__RUNTIME_API_KEY__"
INDEX_HTML = (
    f'<html><script>window.KEY="{PLACEHOLDER}";window.BACKUP="{PLACEHOLDER}";</script></html>'
)
APP_JS = b"const k = '__RUNTIME_API_KEY__';"


class FakeAssetStore(AssetStore):
    def __init__(self, files):
        self.files = files
        self.fetched = []

    async def fetch(self, path):
        self.fetched.append(path)
        if path == "/":
            path = "/index.html"
        if path not in self.files:
            return NOT_FOUND
        content_type, body = self.files[path]
        return AssetResponse(200, body, {"content-type": content_type, "etag": '"abc"'})


def _store():
    return FakeAssetStore({
        "/index.html": ("text/html; charset=utf-8", INDEX_HTML.encode("utf-8")),
        "/assets/app.js": ("application/javascript; charset=utf-8", APP_JS),
    })


def _handle(router, path):
    return asyncio.run(router.handle(path))


class TestAssetInjectionRouter:
    """Test cases for AssetInjectionRouter."""

    def test_html_gets_every_placeholder_replaced(self):
        router = AssetInjectionRouter(_store(), secret="sk-live")

        response = _handle(router, "/")

        body = response.body.decode("utf-8")
        assert PLACEHOLDER not in body
        assert body.count("sk-live") == 2

    def test_html_is_uncacheable_without_etag(self):
        response = _handle(AssetInjectionRouter(_store(), secret="sk-live"), "/index.html")

        assert response.headers["cache-control"] == NO_STORE
        assert "etag" not in response.headers

    def test_missing_secret_injects_empty_string(self):
        response = _handle(AssetInjectionRouter(_store(), secret=None), "/")

        assert 'window.KEY=""' in response.body.decode("utf-8")

    def test_latin1_page_is_injected(self):
        page = f'<html><p>Café</p><script>window.KEY="{PLACEHOLDER}";</script></html>'
        store = FakeAssetStore({
            "/index.html": ("text/html; charset=iso-8859-1", page.encode("latin-1")),
        })

        response = _handle(AssetInjectionRouter(store, secret="sk-live"), "/")

        assert response.status == 200
        assert response.body.decode("latin-1") == page.replace(PLACEHOLDER, "sk-live")
        assert response.headers["cache-control"] == NO_STORE

    def test_client_route_falls_back_to_index(self):
        store = _store()
        response = _handle(AssetInjectionRouter(store, secret="sk-live"), "/reports/123")

        assert response.status == 200
        assert "sk-live" in response.body.decode("utf-8")
        assert store.fetched == ["/reports/123", "/index.html"]

    def test_missing_file_with_extension_stays_404(self):
        response = _handle(AssetInjectionRouter(_store(), secret="sk-live"), "/assets/missing.js")

        assert response.status == 404

    def test_non_html_passes_through_untouched(self):
        response = _handle(AssetInjectionRouter(_store(), secret="sk-live"), "/assets/app.js")

        assert response.body == APP_JS
        assert response.headers["etag"] == '"abc"'
        assert "cache-control" not in response.headers

    def test_has_extension(self):
        assert has_extension("/assets/app.js")
        assert not has_extension("/reports/123")
        assert not has_extension("/")


class TestDirectoryAssetStore:
    """Test cases for DirectoryAssetStore."""

    def test_serves_index_for_root(self, tmp_path):
        (tmp_path / "index.html").write_text("<html></html>")

        response = asyncio.run(DirectoryAssetStore(str(tmp_path)).fetch("/"))

        assert response.status == 200
        assert response.content_type.startswith("text/html")
        assert "etag" in response.headers

    def test_path_traversal_is_not_found(self, tmp_path):
        bundle = tmp_path / "dist"
        bundle.mkdir()
        (tmp_path / "secret.txt").write_text("nope")

        response = asyncio.run(DirectoryAssetStore(str(bundle)).fetch("/../secret.txt"))

        assert response.status == 404
