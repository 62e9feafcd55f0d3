"""
Approximate per-day analytics counters.

Counters are plain read-then-write increments with no transactional guard, so
concurrent requests can undercount. That is acceptable for these dashboard
numbers; exact counts would need an atomic increment primitive.
"""

import asyncio
import hashlib
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from .kv_store import KVStore

logger = logging.getLogger(__name__)

EVENT_TYPES = ("view", "report")
UNKNOWN_IP = "unknown"
# Visitor markers outlive their day so late-night visits still dedupe
VISITOR_TTL_SECONDS = 86400 * 2
DASHBOARD_DAYS = 30


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def hash_visitor(client_ip: Optional[str], day: str) -> str:
    """SHA-256 of the IP salted with the ISO date."""
    ip = client_ip or UNKNOWN_IP
    return hashlib.sha256(f"{ip}{day}".encode("utf-8")).hexdigest()


class AnalyticsCounter:
    """Daily event counters plus a daily unique-visitor estimate."""

    def __init__(self, store: KVStore, today: Callable[[], date] = utc_today):
        self.store = store
        self.today = today

    async def _increment(self, key: str) -> int:
        current = await self.store.get(key)
        try:
            value = int(current or 0) + 1
        except ValueError:
            logger.warning(f"Resetting non-numeric counter {key}")
            value = 1
        await self.store.put(key, str(value))
        return value

    async def track(self, event_type: str, client_ip: Optional[str] = None) -> Dict[str, bool]:
        """
        Record one event.

        Args:
            event_type: 'view' or 'report'
            client_ip: Caller IP; missing values share the 'unknown' bucket

        Returns:
            Acknowledgement ``{"success": True}``

        Raises:
            ValueError: For an unsupported event type
        """
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unsupported event type: {event_type!r}")

        day = self.today().isoformat()
        await self._increment(f"stats:{day}:{event_type}")

        if event_type == "view":
            visitor_key = f"visitor:{day}:{hash_visitor(client_ip, day)}"
            if not await self.store.get(visitor_key):
                await self.store.put(visitor_key, "1", ttl=VISITOR_TTL_SECONDS)
                await self._increment(f"stats:{day}:unique")

        return {"success": True}

    async def _day_row(self, day: str) -> Dict[str, object]:
        views, unique, reports = await asyncio.gather(
            self.store.get(f"stats:{day}:view"),
            self.store.get(f"stats:{day}:unique"),
            self.store.get(f"stats:{day}:report"),
        )
        return {
            "date": day,
            "unique": int(unique or 0),
            "views": int(views or 0),
            "reports": int(reports or 0),
        }

    async def daily_stats(self, days: int = DASHBOARD_DAYS) -> List[Dict[str, object]]:
        """Counters for the trailing ``days`` days, newest first, fetched in parallel."""
        today = self.today()
        dates = [(today - timedelta(days=offset)).isoformat() for offset in range(days)]
        return list(await asyncio.gather(*(self._day_row(day) for day in dates)))
