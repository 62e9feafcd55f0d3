"""
Main entry point for the AI Show Marketer application.

Run with ``streamlit run main.py``.
"""
import logging
import streamlit as st

from config.settings import config_manager
from data.history_store import HistoryStore
from business_logic.analytics_client import AnalyticsClient
from business_logic.chat_session import ChatSessionFactory
from business_logic.image_generator import ImageGenerator
from business_logic.key_resolver import KeyResolver
from business_logic.report_controller import MarketingReportController
from business_logic.report_generator import ReportGenerator
from ui.components import (
    ChatPanel, HistorySidebar, InputForm, ReportDisplay, StreamlitCredentialSelector,
    IN_FLIGHT, display_notification,
)

# Set up logging
logger = logging.getLogger(__name__)


def build_services():
    """Wire collaborators from configuration. Rebuilt each run so key changes apply."""
    config = config_manager.load_config()
    selector = StreamlitCredentialSelector()
    resolver = KeyResolver.from_config()

    generator = ReportGenerator(
        key_resolver=resolver,
        credential_selector=selector,
        auto_retry_on_credential_update=config.auto_retry_on_credential_update,
    )
    analytics = AnalyticsClient(config.analytics_base_url, enabled=config.analytics_enabled)
    controller = MarketingReportController(
        generator,
        HistoryStore(config.history_dir, max_items=config.history_max_items),
        credential_selector=selector,
        analytics=analytics,
    )
    return {
        "selector": selector,
        "analytics": analytics,
        "controller": controller,
        "chat_factory": ChatSessionFactory(resolver, selector),
        "image_generator": ImageGenerator(resolver, selector),
    }


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title="AI Show Marketer",
        page_icon="🎬",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    services = build_services()
    controller: MarketingReportController = services["controller"]

    # One page view per browser session
    if not st.session_state.get("view_tracked"):
        services["analytics"].track_event("view")
        st.session_state["view_tracked"] = True

    services["selector"].render()
    selected = HistorySidebar(controller).render()
    if selected is not None:
        st.session_state["current_report"] = selected
        st.session_state["current_report_id"] = selected.id

    st.title("🎬 AI Show Marketer")
    st.markdown("Audience profiles, competitor analysis, budgets and key art for your show or movie")

    form_data, submitted = InputForm().render()

    if submitted and not st.session_state.get(IN_FLIGHT):
        st.session_state[IN_FLIGHT] = True
        try:
            with st.spinner("🤖 AI is building your marketing strategy..."):
                success, report, message, notification = controller.generate_report(**form_data)
        finally:
            st.session_state[IN_FLIGHT] = False

        if success:
            st.session_state["current_report"] = report
            st.session_state["current_report_id"] = report.id
            st.success(f"✅ {message}")
        else:
            logger.error(f"Report generation error: {message}")
            display_notification(notification, message)

    report = st.session_state.get("current_report")
    if report is not None:
        ReportDisplay(controller, services["image_generator"]).render(report)
        st.divider()
        ChatPanel(services["chat_factory"]).render(report, st.session_state["current_report_id"])


if __name__ == "__main__":
    main()
