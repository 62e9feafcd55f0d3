"""
Static asset routing with SPA fallback and runtime key injection.
"""

import logging
from pathlib import PurePosixPath
from typing import Optional

from config.settings import RUNTIME_KEY_PLACEHOLDER
from .assets import AssetResponse, AssetStore

logger = logging.getLogger(__name__)

SPA_ENTRY = "/index.html"
NO_STORE = "no-cache, no-store, must-revalidate"


def has_extension(path: str) -> bool:
    return PurePosixPath(path).suffix != ""


class AssetInjectionRouter:
    """
    Resolves requests against the asset store.

    Extension-less misses are client-side routes and get the SPA entry
    document. Every HTML response has the key placeholder replaced and is
    marked uncacheable; other responses pass through untouched.
    """

    def __init__(self, asset_store: AssetStore, secret: Optional[str] = None,
                 placeholder: str = RUNTIME_KEY_PLACEHOLDER):
        self.asset_store = asset_store
        self.secret = secret
        self.placeholder = placeholder

    def inject(self, response: AssetResponse) -> AssetResponse:
        """Substitute the secret into an HTML response and disable caching."""
        # Byte-level replace works for any ASCII-compatible page encoding
        body = response.body.replace(
            self.placeholder.encode("utf-8"), (self.secret or "").encode("utf-8")
        )
        headers = {k: v for k, v in response.headers.items() if k.lower() != "etag"}
        headers["cache-control"] = NO_STORE
        return AssetResponse(response.status, body, headers)

    async def handle(self, path: str) -> AssetResponse:
        response = await self.asset_store.fetch(path)

        if response.status == 404 and not has_extension(path):
            index = await self.asset_store.fetch(SPA_ENTRY)
            if index.status == 200:
                logger.debug(f"Serving SPA entry for client route {path}")
                response = index

        if "text/html" in response.content_type:
            return self.inject(response)
        return response
