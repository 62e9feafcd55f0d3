"""
Streamlit UI components for the AI Show Marketer.
"""

import json
import logging
import streamlit as st
import pandas as pd
from typing import Any, Dict, List, Optional, Tuple

from business_logic.chat_session import ChatSessionFactory
from business_logic.error_handler import error_handler, MarketerError
from business_logic.image_generator import ImageGenerator
from business_logic.key_resolver import CredentialSelector
from business_logic.report_controller import MarketingReportController
from models.data_models import HistoryItem, MarketingReport, ReportType

logger = logging.getLogger(__name__)

SELECTED_KEY = "selected_api_key"
SHOW_SELECTOR = "show_key_selector"
IN_FLIGHT = "in_flight"


class StreamlitCredentialSelector(CredentialSelector):
    """Lets the user paste an API key into the sidebar for this session."""

    def selected_key(self) -> Optional[str]:
        key = st.session_state.get(SELECTED_KEY)
        return key.strip() if key and key.strip() else None

    def open_select_key(self) -> None:
        st.session_state[SHOW_SELECTOR] = True

    def render(self):
        """Render the key picker when requested or when no key is selected."""
        if not st.session_state.get(SHOW_SELECTOR) and self.has_selected_key():
            return
        with st.sidebar:
            st.subheader("🔑 API Key")
            st.caption("Pro and Thinking tiers need a paid OpenAI key.")
            key = st.text_input("OpenAI API key", type="password", key="api_key_input")
            if st.button("Use this key", use_container_width=True):
                st.session_state[SELECTED_KEY] = key
                st.session_state[SHOW_SELECTOR] = False
                st.rerun()


class InputForm:
    """Collects the show description and generation options."""

    MODEL_LABELS = {
        "fast": "⚡ Fast",
        "pro": "🔎 Pro (web search)",
        "thinking": "🧠 Thinking (search + deep reasoning)",
    }

    def render(self) -> Tuple[Dict[str, Any], bool]:
        with st.form("report_form"):
            user_input = st.text_area(
                "Show or movie",
                placeholder="e.g. 'Severance' or a logline for a new concept",
                height=120,
            )
            col1, col2 = st.columns(2)
            with col1:
                input_mode = st.radio(
                    "Input", ["existing", "concept"],
                    format_func=lambda v: "Existing title" if v == "existing" else "New concept",
                    horizontal=True,
                )
                media_type = st.radio(
                    "Media", ["tv", "movie"],
                    format_func=lambda v: "TV show" if v == "tv" else "Movie",
                    horizontal=True,
                )
            with col2:
                report_type = st.radio(
                    "Campaign", ["launch", "awards"],
                    format_func=lambda v: "Launch" if v == "launch" else "Awards (FYC)",
                    horizontal=True,
                )
                model_tier = st.selectbox(
                    "Model", list(self.MODEL_LABELS.keys()),
                    format_func=self.MODEL_LABELS.get,
                )
            submitted = st.form_submit_button(
                "🚀 Generate Report", type="primary",
                disabled=st.session_state.get(IN_FLIGHT, False),
                use_container_width=True,
            )

        form_data = {
            "user_input": user_input,
            "model_tier": model_tier,
            "input_mode": input_mode,
            "media_type": media_type,
            "report_type": report_type,
        }
        return form_data, submitted


class ReportDisplay:
    """Renders a report with its budget chart and key-art actions."""

    def __init__(self, controller: MarketingReportController, image_generator: ImageGenerator):
        self.controller = controller
        self.image_generator = image_generator

    def render(self, report: MarketingReport):
        info = report.show_info
        st.header(info.title)
        st.caption(f"{info.genre} · {', '.join(info.stars)}")
        st.write(info.summary)

        is_awards = report.report_type == ReportType.AWARDS
        if is_awards and report.awards_strategy:
            st.subheader("🏆 Awards Strategy")
            st.write("**Priority categories:** " + ", ".join(report.awards_strategy.priority_categories))
            st.write(report.awards_strategy.voter_narrative)

        col1, col2 = st.columns(2)
        with col1:
            st.subheader("🗳️ Voter Profile" if is_awards else "👥 Audience Profile")
            profile = report.audience_profile
            st.write(f"**Age:** {profile.age_range}")
            st.write(f"**Income:** {profile.average_income}")
            st.write(f"**Locations:** {', '.join(profile.locations)}")
            st.write(f"**Interests:** {', '.join(profile.interests)}")
        with col2:
            st.subheader("🎬 Other Contenders" if is_awards else "📺 Competitors")
            competitors = pd.DataFrame([
                {"Title": c.title, "Success": c.success, "Why": c.reason}
                for c in report.competitor_analysis
            ])
            st.dataframe(competitors, hide_index=True, use_container_width=True)

        self._render_marketing_plan(report)
        self._render_key_art(report)

        if report.grounding_urls:
            with st.expander(f"📚 Sources ({len(report.grounding_urls)})"):
                for url in report.grounding_urls:
                    st.markdown(f"- [{url}]({url})")

        st.download_button(
            "Download report (JSON)",
            json.dumps(report.to_dict(), indent=2).encode("utf-8"),
            f"{info.title.lower().replace(' ', '_')}_report.json",
            "application/json",
        )

    def _render_marketing_plan(self, report: MarketingReport):
        plan = report.marketing_plan
        st.subheader("📣 Marketing Plan")
        st.write(f"**Ad placements:** {plan.ad_placements}")
        st.write(f"**Social strategy:** {plan.social_strategy}")
        st.write(f"**Ad buy:** {plan.ad_buy_implementation}")
        if plan.cross_promotion_shows:
            st.write("**Cross-promotion:** " + ", ".join(plan.cross_promotion_shows))

        if plan.budget_breakdown:
            import plotly.express as px

            budget_df = pd.DataFrame([
                {"Category": item.category, "Percentage": item.percentage, "Tactics": item.tactics}
                for item in plan.budget_breakdown
            ])
            fig = px.pie(budget_df, values="Percentage", names="Category",
                         title="Budget Breakdown", hole=0.4)
            st.plotly_chart(fig, use_container_width=True)
            # Percentages are advisory; show the actual sum rather than assume 100
            st.caption(f"Allocated total: {report.budget_total():.0f}%")
            st.dataframe(budget_df, hide_index=True, use_container_width=True)

        if plan.marketing_events:
            st.subheader("🎟️ Events")
            for event in plan.marketing_events:
                st.write(f"**{event.title}** ({event.category}): {event.description}")

    def _render_key_art(self, report: MarketingReport):
        st.subheader("🎨 Key Art Concepts")
        columns = st.columns(max(len(report.key_art_concepts), 1))
        for index, (column, concept) in enumerate(zip(columns, report.key_art_concepts)):
            with column:
                st.markdown(f"**{concept.title}**")
                st.caption(concept.description)
                if concept.image_url:
                    st.image(concept.image_url, use_container_width=True)
                elif st.button("Generate image", key=f"keyart_{index}",
                               disabled=st.session_state.get(IN_FLIGHT, False)):
                    self._generate_key_art(report, index)

    def _generate_key_art(self, report: MarketingReport, index: int):
        concept = report.key_art_concepts[index]
        with st.spinner("🖼️ Rendering key art..."):
            try:
                concept.image_url = self.image_generator.generate_image(concept.prompt)
            except MarketerError as e:
                error_info = error_handler.classify_error(e, "key art generation")
                error_handler.log_error(error_info, "Key Art")
                st.error(f"❌ {error_info.user_message}")
                return
        if isinstance(report, HistoryItem):
            self.controller.save_report_update(report)
        st.rerun()


class ChatPanel:
    """Follow-up conversation about the displayed report."""

    def __init__(self, chat_factory: ChatSessionFactory):
        self.chat_factory = chat_factory

    def render(self, report: MarketingReport, session_key: str):
        st.subheader("💬 Ask about this strategy")
        sessions = st.session_state.setdefault("chat_sessions", {})
        session = sessions.get(session_key)
        if session is None:
            try:
                session = self.chat_factory.create_session(report)
            except MarketerError as e:
                st.error(f"Could not initialize chat session: {str(e)}")
                return
            sessions[session_key] = session

        with st.chat_message("assistant"):
            st.write(session.greeting())
        for message in session.history:
            with st.chat_message("assistant" if message.role == "model" else "user"):
                st.write(message.text)

        prompt = st.chat_input("Ask a follow-up question",
                               disabled=st.session_state.get(IN_FLIGHT, False))
        if prompt:
            with st.chat_message("user"):
                st.write(prompt)
            with st.chat_message("assistant"):
                try:
                    with st.spinner("Thinking..."):
                        st.write(session.send_message(prompt))
                except MarketerError as e:
                    st.error(f"Error: {str(e)}")


class HistorySidebar:
    """Lists saved reports with open/delete/clear actions."""

    def __init__(self, controller: MarketingReportController):
        self.controller = controller

    def render(self) -> Optional[HistoryItem]:
        """Returns the item the user chose to open, if any."""
        selected = None
        with st.sidebar:
            st.subheader("🕘 History")
            history: List[HistoryItem] = self.controller.history()
            if not history:
                st.caption("No saved reports yet.")
                return None

            for item in history:
                col1, col2 = st.columns([4, 1])
                label = item.show_info.title
                if item.created_at:
                    label += f" · {item.created_at:%b %d}"
                if col1.button(label, key=f"open_{item.id}", use_container_width=True):
                    selected = item
                if col2.button("🗑️", key=f"delete_{item.id}"):
                    self.controller.delete_report(item.id)
                    if st.session_state.get("current_report_id") == item.id:
                        st.session_state.pop("current_report", None)
                        st.session_state.pop("current_report_id", None)
                    st.rerun()

            if st.button("Clear history", use_container_width=True):
                self.controller.clear_history()
                st.session_state.pop("current_report", None)
                st.session_state.pop("current_report_id", None)
                st.rerun()
        return selected


def display_notification(notification: Optional[Dict[str, Any]], message: str):
    """Show a controller notification as an error or warning block."""
    if not notification:
        st.error(f"❌ {message}")
        return
    show = st.warning if notification["type"] == "warning" else st.error
    show(f"❌ **{notification['title']}**: {notification['message']}")
    if notification.get("action"):
        st.info(f"💡 {notification['action']}")
