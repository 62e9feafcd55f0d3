"""
Follow-up chat about a generated report.
"""

import logging
import json
from typing import Callable, List, Optional

from openai import OpenAI

from models.data_models import ChatMessage, MarketingReport, MediaType, ReportType
from .ai_client import get_client
from .error_handler import GenerationFailed
from .key_resolver import KeyResolver, CredentialSelector, require_credential
from .report_prompts import persona

logger = logging.getLogger(__name__)

CHAT_MODEL = "gpt-4.1"
EMPTY_REPLY = "I'm sorry, I couldn't generate a response."


class ChatSession:
    """A conversation seeded with one report. History lives here only."""

    def __init__(self, client: OpenAI, instructions: str, report: MarketingReport,
                 model: str = CHAT_MODEL):
        self.client = client
        self.instructions = instructions
        self.report = report
        self.model = model
        self.history: List[ChatMessage] = []

    def greeting(self) -> str:
        return (f'I\'ve finished the strategy for "{self.report.show_info.title}". '
                f'What would you like to discuss?')

    def _messages(self) -> List[dict]:
        messages = [{"role": "system", "content": self.instructions}]
        for message in self.history:
            role = "assistant" if message.role == "model" else "user"
            messages.append({"role": role, "content": message.text})
        return messages

    def send_message(self, text: str) -> str:
        """
        Send one user turn and return the model's reply.

        Raises:
            GenerationFailed: If the upstream call fails
        """
        self.history.append(ChatMessage(role="user", text=text))
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=self._messages(),
            )
        except Exception as e:
            logger.error(f"Chat turn failed: {str(e)}")
            self.history.pop()
            raise GenerationFailed(f"Failed to send message: {str(e)}") from e

        reply = None
        if response.choices:
            reply = response.choices[0].message.content
        reply = reply or EMPTY_REPLY

        self.history.append(ChatMessage(role="model", text=reply))
        return reply


class ChatSessionFactory:
    """Builds chat sessions whose instructions carry the full report."""

    def __init__(self, key_resolver: Optional[KeyResolver] = None,
                 credential_selector: Optional[CredentialSelector] = None,
                 client_factory: Callable[[str], OpenAI] = get_client):
        self.key_resolver = key_resolver or KeyResolver.from_config()
        self.credential_selector = credential_selector
        self.client_factory = client_factory

    @staticmethod
    def build_instructions(report: MarketingReport) -> str:
        media_type = report.media_type or MediaType.TV
        report_type = report.report_type or ReportType.LAUNCH
        context = json.dumps(report.to_dict(), indent=2)
        return f"""You are an expert {persona(media_type, report_type)}.
You have just produced the report below for "{report.show_info.title}".
Answer follow-up questions about it, refine tactics on request, and stay consistent with its data.

REPORT:
{context}"""

    def create_session(self, report: MarketingReport) -> ChatSession:
        """
        Create a chat session about ``report``.

        Raises:
            AuthMissing: If no credential resolves
        """
        api_key = require_credential(self.key_resolver, self.credential_selector)
        client = self.client_factory(api_key)
        logger.info(f"Chat session created for '{report.show_info.title}'")
        return ChatSession(client, self.build_instructions(report), report)
