"""
Key-value stores backing the edge analytics counters.

Both stores expose the same small async interface: ``get``, ``put`` with an
optional TTL in seconds, and ``delete``. Expired entries read as missing.
"""

import asyncio
import logging
import json
import time
from pathlib import Path
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class KVStore:
    """Async key-value store interface."""

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def put(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryKVStore(KVStore):
    """In-process store, used for tests and single-process deployments."""

    def __init__(self, clock=time.time):
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return value

    async def put(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl if ttl else None
        self._data[key] = (str(value), expires_at)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKVStore(KVStore):
    """
    Store persisted as a single JSON file of ``{key: [value, expires_at]}``.

    The file is re-read and rewritten on each operation; there is no locking
    between processes.
    """

    def __init__(self, path: str, clock=time.time):
        self.path = Path(path)
        self._clock = clock

    def _load(self) -> Dict[str, list]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError) as e:
            logger.error(f"Error loading KV file {self.path}: {str(e)}")
            return {}

    def _save(self, data: Dict[str, list]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(data, f)

    def _get_sync(self, key: str) -> Optional[str]:
        data = self._load()
        entry = data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del data[key]
            self._save(data)
            return None
        return value

    def _put_sync(self, key: str, value: str, ttl: Optional[int]):
        data = self._load()
        data[key] = [str(value), self._clock() + ttl if ttl else None]
        self._save(data)

    def _delete_sync(self, key: str):
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get_sync, key)

    async def put(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        await asyncio.to_thread(self._put_sync, key, value, ttl)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete_sync, key)
