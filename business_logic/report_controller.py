"""
Marketing Report Controller - Orchestrates the report workflow for the UI.

This module ties together credential checks, report generation, history
persistence and analytics so the UI deals with a single entry point.
"""

import logging
from typing import Dict, List, Optional, Any, Tuple

from models.data_models import HistoryItem, MarketingReport, ModelTier
from data.history_store import HistoryStore
from .analytics_client import AnalyticsClient
from .error_handler import error_handler, MarketerError
from .key_resolver import CredentialSelector
from .report_generator import ReportGenerator, PAID_TIERS

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class MarketingReportController:
    """
    Main controller for the report workflow.

    Generation errors are converted into user-facing messages; analytics
    failures are ignored.
    """

    def __init__(self, generator: ReportGenerator, history_store: HistoryStore,
                 credential_selector: Optional[CredentialSelector] = None,
                 analytics: Optional[AnalyticsClient] = None):
        self.generator = generator
        self.history_store = history_store
        self.credential_selector = credential_selector
        self.analytics = analytics

    def _ensure_paid_credential(self, model_tier: ModelTier):
        """Pro and thinking tiers need a selected (paid) key when a selector exists."""
        if model_tier not in PAID_TIERS or self.credential_selector is None:
            return
        if not self.credential_selector.has_selected_key():
            logger.info(f"Tier '{model_tier.value}' requires a selected key, opening selector")
            self.credential_selector.open_select_key()

    def generate_report(self, user_input: str, model_tier, input_mode, media_type,
                        report_type) -> Tuple[bool, Optional[MarketingReport], str, Optional[Dict[str, Any]]]:
        """
        Generate, persist and track a report.

        Args:
            user_input: Show/movie title or concept description
            model_tier: fast, pro or thinking
            input_mode: existing or concept
            media_type: tv or movie
            report_type: launch or awards

        Returns:
            Tuple of (success, report, status message, user_notification)
        """
        if not user_input or not user_input.strip():
            return False, None, "Please describe a show or movie first.", None

        try:
            self._ensure_paid_credential(ModelTier(model_tier))
            report = self.generator.generate(
                user_input.strip(), model_tier, input_mode, media_type, report_type
            )
        except MarketerError as e:
            error_info = error_handler.classify_error(e, "report generation")
            error_handler.log_error(error_info, "Report Generation")
            return False, None, error_info.user_message, error_handler.create_user_notification(error_info)

        history = self.history_store.save(report)
        # The saved copy carries the id used for later deletes and updates
        saved = history[0]

        if self.analytics is not None:
            self.analytics.track_event("report")

        logger.info(f"Report ready for '{saved.show_info.title}'")
        return True, saved, "Report generated.", None

    def history(self) -> List[HistoryItem]:
        return self.history_store.list()

    def delete_report(self, item_id: str) -> List[HistoryItem]:
        return self.history_store.delete(item_id)

    def clear_history(self) -> List[HistoryItem]:
        return self.history_store.clear()

    def save_report_update(self, item: HistoryItem) -> List[HistoryItem]:
        """Explicitly write an edited report (e.g. with key art attached) back to history."""
        return self.history_store.update(item)
