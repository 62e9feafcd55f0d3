"""
Fire-and-forget client for the edge analytics endpoint.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)

LOCAL_HOSTS = ("localhost", "127.0.0.1")


class AnalyticsClient:
    """Posts view/report events. Failures never reach the caller."""

    def __init__(self, base_url: Optional[str], enabled: bool = True, timeout: float = 5.0):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.enabled = enabled
        self.timeout = timeout

    def _should_track(self) -> bool:
        if not self.enabled or not self.base_url:
            return False
        return urlparse(self.base_url).hostname not in LOCAL_HOSTS

    def track_event(self, event_type: str) -> bool:
        """
        Record one event. Returns True only when the endpoint acknowledged it.
        """
        if not self._should_track():
            logger.debug(f"[Analytics-Dev] Skipped tracking '{event_type}'")
            return False

        try:
            response = requests.post(
                f"{self.base_url}/api/analytics/track",
                json={"type": event_type},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return True
        except Exception as e:
            # Analytics must never break the primary flow
            logger.warning(f"Analytics error: {str(e)}")
            return False
