"""
Static asset backing store for the built web bundle.
"""

import asyncio
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict


@dataclass
class AssetResponse:
    """Minimal response value passed between the asset store and the router."""
    status: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")


NOT_FOUND = AssetResponse(404, b"Not Found", {"content-type": "text/plain; charset=utf-8"})


class AssetStore:
    async def fetch(self, path: str) -> AssetResponse:
        raise NotImplementedError


class DirectoryAssetStore(AssetStore):
    """Serves files from a directory; ``/`` maps to ``index.html``."""

    def __init__(self, root: str):
        self.root = Path(root).resolve()

    def _resolve(self, path: str):
        relative = path.lstrip("/") or "index.html"
        candidate = (self.root / relative).resolve()
        # Paths escaping the bundle directory are treated as missing
        if candidate != self.root and self.root not in candidate.parents:
            return None
        if candidate.is_dir():
            candidate = candidate / "index.html"
        return candidate if candidate.is_file() else None

    def _read(self, path: str) -> AssetResponse:
        target = self._resolve(path)
        if target is None:
            return NOT_FOUND
        content_type, _ = mimetypes.guess_type(target.name)
        content_type = content_type or "application/octet-stream"
        if content_type.startswith("text/") or content_type == "application/javascript":
            content_type = f"{content_type}; charset=utf-8"
        body = target.read_bytes()
        stat = target.stat()
        return AssetResponse(200, body, {
            "content-type": content_type,
            "etag": f'"{stat.st_mtime_ns:x}-{stat.st_size:x}"',
        })

    async def fetch(self, path: str) -> AssetResponse:
        return await asyncio.to_thread(self._read, path)
