"""
Edge web service: static bundle, runtime key injection, analytics and the
admin dashboard.

Run with ``uvicorn edge.app:app``.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from config.settings import config_manager, EdgeConfig
from .analytics import AnalyticsCounter
from .assets import AssetStore, DirectoryAssetStore
from .dashboard import is_authorized, render_dashboard, render_login_page
from .kv_store import KVStore, JsonFileKVStore
from .router import AssetInjectionRouter

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[EdgeConfig] = None, store: Optional[KVStore] = None,
               asset_store: Optional[AssetStore] = None,
               counter: Optional[AnalyticsCounter] = None) -> FastAPI:
    """
    Build the edge application.

    Args:
        settings: Edge configuration; defaults to the environment
        store: Analytics key-value store; defaults to a JSON file store
        asset_store: Static bundle source; defaults to the assets directory
        counter: Analytics counter; defaults to one over ``store``
    """
    settings = settings or config_manager.load_edge_config()
    store = store or JsonFileKVStore(settings.kv_path)
    counter = counter or AnalyticsCounter(store)
    router = AssetInjectionRouter(
        asset_store or DirectoryAssetStore(settings.assets_dir),
        secret=settings.api_key,
        placeholder=settings.placeholder,
    )

    app = FastAPI(title="Show Marketer Edge", version="0.1.0")

    @app.post("/api/analytics/track")
    async def track(request: Request):
        try:
            body = await request.json()
            event_type = body.get("type") if isinstance(body, dict) else None
            client_ip = request.headers.get(settings.ip_header)
            return await counter.track(event_type, client_ip)
        except Exception as e:
            logger.error(f"Analytics tracking failed: {str(e)}")
            return JSONResponse({"error": str(e)}, status_code=500)

    @app.get("/admin/stats", response_class=HTMLResponse)
    async def admin_stats(key: Optional[str] = Query(default=None)):
        if not is_authorized(key, settings.api_key):
            return HTMLResponse(render_login_page(), status_code=200)
        rows = await counter.daily_stats()
        return HTMLResponse(render_dashboard(rows))

    @app.get("/{full_path:path}")
    async def serve_asset(full_path: str):
        try:
            result = await router.handle(f"/{full_path}")
        except Exception as e:
            logger.error(f"Asset routing failed for /{full_path}: {str(e)}")
            return Response(f"Internal Worker Error: {str(e)}", status_code=500)
        return Response(content=result.body, status_code=result.status, headers=result.headers)

    return app


app = create_app()
