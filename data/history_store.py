"""
Local history of generated reports.

The whole list is stored as one JSON blob under a fixed storage key and is
rewritten on every mutation. Single-writer usage is assumed.
"""

import logging
import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from models.data_models import HistoryItem, MarketingReport

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

STORAGE_KEY = "tv_marketing_history_v1"
MAX_ITEMS = 20


class HistoryStore:
    """
    Bounded, newest-first list of saved reports.

    Items returned by ``list`` are freshly deserialized copies; editing one
    does not change the stored history until it is passed to ``update``.
    """

    def __init__(self, storage_dir: str = ".history", storage_key: str = STORAGE_KEY,
                 max_items: int = MAX_ITEMS):
        """
        Initialize the history store.

        Args:
            storage_dir: Directory holding the persisted blob
            storage_key: Name of the blob (file stem)
            max_items: Maximum number of reports kept
        """
        self.storage_dir = Path(storage_dir)
        self.storage_key = storage_key
        self.max_items = max_items

    @property
    def path(self) -> Path:
        return self.storage_dir / f"{self.storage_key}.json"

    def _write(self, items: List[HistoryItem]):
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump([item.to_dict() for item in items], f, indent=2)

    def list(self) -> List[HistoryItem]:
        """Return saved reports, or an empty list if the blob is missing or corrupt."""
        if not self.path.exists():
            return []

        try:
            with open(self.path, 'r') as f:
                raw = json.load(f)
            if not isinstance(raw, list):
                raise ValueError("history blob is not a list")
            return [HistoryItem.from_dict(entry) for entry in raw]
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.error(f"Failed to parse history: {str(e)}")
            return []

    def save(self, report: MarketingReport) -> List[HistoryItem]:
        """Prepend ``report`` with a new id and timestamp, keeping at most ``max_items``."""
        item = HistoryItem.from_report(report, str(uuid.uuid4()), datetime.now())
        updated = [item] + self.list()
        updated = updated[:self.max_items]
        self._write(updated)
        logger.info(f"Saved report '{item.show_info.title}' to history ({len(updated)} items)")
        return updated

    def get(self, item_id: str) -> Optional[HistoryItem]:
        for item in self.list():
            if item.id == item_id:
                return item
        return None

    def update(self, item: HistoryItem) -> List[HistoryItem]:
        """Write an edited item back in place. Unknown ids leave the list unchanged."""
        history = self.list()
        updated = [item if existing.id == item.id else existing for existing in history]
        if updated != history:
            self._write(updated)
        return updated

    def delete(self, item_id: str) -> List[HistoryItem]:
        history = self.list()
        updated = [item for item in history if item.id != item_id]
        if len(updated) != len(history):
            self._write(updated)
        return updated

    def clear(self) -> List[HistoryItem]:
        if self.path.exists():
            self.path.unlink()
        return []
