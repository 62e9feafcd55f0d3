"""
Tests for the follow-up chat session factory.
"""

import json
import pytest
from unittest.mock import Mock

from business_logic.chat_session import ChatSessionFactory, CHAT_MODEL, EMPTY_REPLY
from business_logic.error_handler import AuthMissing, GenerationFailed
from business_logic.key_resolver import KeyResolver
from models.data_models import MarketingReport, MediaType, ReportType
from sample_reports import sample_report_dict


def _completion(content):
    completion = Mock()
    completion.choices = [Mock()]
    completion.choices[0].message.content = content
    return completion


class TestChatSessionFactory:
    """Test cases for ChatSessionFactory and ChatSession."""

    def setup_method(self):
        self.client = Mock()
        self.client.chat.completions.create.return_value = _completion("Lean into TikTok.")
        self.factory = ChatSessionFactory(
            key_resolver=KeyResolver(build_time_key="sk-test"),
            client_factory=Mock(return_value=self.client),
        )
        self.report = MarketingReport.from_dict(sample_report_dict())

    def test_instructions_embed_full_report(self):
        session = self.factory.create_session(self.report)

        assert "TV Marketing Executive" in session.instructions
        assert json.dumps(self.report.to_dict(), indent=2) in session.instructions

    def test_persona_follows_media_and_report_type(self):
        self.report.media_type = MediaType.MOVIE
        self.report.report_type = ReportType.AWARDS

        session = self.factory.create_session(self.report)

        assert "Film Awards Strategist" in session.instructions

    def test_send_message_keeps_history(self):
        session = self.factory.create_session(self.report)

        reply = session.send_message("Where should we spend first?")

        assert reply == "Lean into TikTok."
        assert [(m.role, m.text) for m in session.history] == [
            ("user", "Where should we spend first?"),
            ("model", "Lean into TikTok."),
        ]
        kwargs = self.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == CHAT_MODEL
        assert kwargs["messages"][0]["role"] == "system"
        assert kwargs["messages"][-1] == {"role": "user", "content": "Where should we spend first?"}

    def test_second_turn_sends_prior_turns(self):
        session = self.factory.create_session(self.report)
        session.send_message("First?")
        session.send_message("Second?")

        messages = self.client.chat.completions.create.call_args.kwargs["messages"]
        assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]

    def test_empty_reply_falls_back(self):
        self.client.chat.completions.create.return_value = _completion(None)
        session = self.factory.create_session(self.report)

        assert session.send_message("Hello?") == EMPTY_REPLY

    def test_upstream_error_raises_generation_failed(self):
        self.client.chat.completions.create.side_effect = RuntimeError("boom")
        session = self.factory.create_session(self.report)

        with pytest.raises(GenerationFailed):
            session.send_message("Hello?")
        assert session.history == []

    def test_greeting_names_show(self):
        session = self.factory.create_session(self.report)
        assert '"Neon Corridor"' in session.greeting()

    def test_missing_key_raises_auth_missing(self):
        factory = ChatSessionFactory(key_resolver=KeyResolver(), client_factory=Mock())

        with pytest.raises(AuthMissing):
            factory.create_session(self.report)
