"""
Marketing report generator backed by the OpenAI Responses API.

This module builds the request for a given model tier, input mode, media type
and report type, calls the model with a strict JSON schema, and validates the
result into a MarketingReport with citation URLs and provenance attached.
"""

import logging
import json
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from openai import OpenAI

from models.data_models import MarketingReport, ModelTier, InputMode, MediaType, ReportType
from .ai_client import get_client
from .error_handler import (
    AuthMissing, CredentialUpdated, GenerationFailed, MalformedResponse, is_auth_error
)
from .key_resolver import KeyResolver, CredentialSelector, require_credential
from .report_prompts import RESPONSE_FORMAT, build_system_prompt, build_user_prompt

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

FAST_MODEL = "gpt-4.1-mini"
PRO_MODEL = "gpt-5"

MODEL_BY_TIER = {
    ModelTier.FAST: FAST_MODEL,
    ModelTier.PRO: PRO_MODEL,
    ModelTier.THINKING: PRO_MODEL,
}

SEARCH_TIERS = (ModelTier.PRO, ModelTier.THINKING)
PAID_TIERS = SEARCH_TIERS

# Fixed output ceiling for the reasoning tier
THINKING_TOKEN_BUDGET = 32768


class ReportGenerator:
    """
    Generates marketing reports for shows and movies.

    The credential is resolved per call, so a key rotated through the
    credential selector takes effect on the next generation.
    """

    def __init__(self, key_resolver: Optional[KeyResolver] = None,
                 credential_selector: Optional[CredentialSelector] = None,
                 client_factory: Callable[[str], OpenAI] = get_client,
                 auto_retry_on_credential_update: bool = False):
        """
        Initialize the report generator.

        Args:
            key_resolver: Credential lookup; defaults to the configured keys
            credential_selector: Optional interactive key picker
            client_factory: Builds an OpenAI client for an API key
            auto_retry_on_credential_update: Retry once after the selector
                updates the key instead of asking the caller to resubmit
        """
        self.key_resolver = key_resolver or KeyResolver.from_config()
        self.credential_selector = credential_selector
        self.client_factory = client_factory
        self.auto_retry_on_credential_update = auto_retry_on_credential_update

    def build_request(self, user_input: str, model_tier: ModelTier, input_mode: InputMode,
                      media_type: MediaType, report_type: ReportType) -> Dict[str, Any]:
        """
        Assemble the Responses API arguments for one report.

        Args:
            user_input: Show/movie title or concept description
            model_tier: fast, pro or thinking
            input_mode: existing title or new concept
            media_type: tv or movie
            report_type: launch or awards

        Returns:
            Keyword arguments for ``client.responses.create``
        """
        request: Dict[str, Any] = {
            "model": MODEL_BY_TIER[model_tier],
            "instructions": build_system_prompt(input_mode, media_type, report_type),
            "input": build_user_prompt(user_input, input_mode, media_type, report_type),
            "text": {"format": RESPONSE_FORMAT},
        }

        if model_tier in SEARCH_TIERS:
            request["tools"] = [{"type": "web_search"}]

        if model_tier == ModelTier.THINKING:
            request["reasoning"] = {"effort": "high"}
            request["max_output_tokens"] = THINKING_TOKEN_BUDGET

        return request

    def generate(self, user_input: str, model_tier, input_mode, media_type,
                 report_type) -> MarketingReport:
        """
        Generate a marketing report.

        Raises:
            AuthMissing: No credential could be resolved
            CredentialUpdated: The key was changed interactively; resubmit
            GenerationFailed: The upstream call failed for a non-auth reason
            MalformedResponse: The upstream text is not a valid report
        """
        model_tier = ModelTier(model_tier)
        input_mode = InputMode(input_mode)
        media_type = MediaType(media_type)
        report_type = ReportType(report_type)

        return self._generate(user_input, model_tier, input_mode, media_type, report_type,
                              retry_allowed=self.auto_retry_on_credential_update)

    def _generate(self, user_input: str, model_tier: ModelTier, input_mode: InputMode,
                  media_type: MediaType, report_type: ReportType,
                  retry_allowed: bool) -> MarketingReport:
        api_key = require_credential(self.key_resolver, self.credential_selector)
        client = self.client_factory(api_key)
        request = self.build_request(user_input, model_tier, input_mode, media_type, report_type)

        logger.info(f"Generating {report_type.value} report with model {request['model']} "
                    f"({model_tier.value}, {input_mode.value}, {media_type.value})")

        try:
            response = client.responses.create(**request)
        except Exception as e:
            if not is_auth_error(e):
                logger.error(f"Report generation failed: {str(e)}")
                raise GenerationFailed(f"AI generation failed: {str(e)}") from e

            if self.credential_selector is None:
                raise AuthMissing(f"API key was rejected: {str(e)}") from e

            logger.warning("API key rejected, opening credential selector")
            self.credential_selector.open_select_key()
            if retry_allowed:
                logger.info("Retrying report generation once with the updated key")
                return self._generate(user_input, model_tier, input_mode, media_type,
                                      report_type, retry_allowed=False)
            raise CredentialUpdated() from e

        report = self._parse_report(getattr(response, "output_text", None))

        report.grounding_urls = self.extract_grounding_urls(response)
        report.model_used = model_tier
        report.media_type = media_type
        report.report_type = report_type
        report.created_at = datetime.now()

        if report_type == ReportType.LAUNCH:
            report.awards_strategy = None
        elif report.awards_strategy is None or not report.awards_strategy.priority_categories:
            logger.warning("Awards report returned without priority categories")

        logger.info(f"Generated report for '{report.show_info.title}' "
                    f"with {len(report.grounding_urls)} citations")
        return report

    def _parse_report(self, text: Optional[str]) -> MarketingReport:
        if not text:
            raise MalformedResponse("AI returned empty content")

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse AI JSON response: {text[:500]}...")
            raise MalformedResponse(f"Invalid JSON response: {str(e)}") from e

        try:
            return MarketingReport.from_dict(data)
        except (ValueError, TypeError) as e:
            logger.error(f"AI response does not match report shape ({str(e)}): {text[:500]}...")
            raise MalformedResponse(f"Unexpected report structure: {str(e)}") from e

    @staticmethod
    def extract_grounding_urls(response: Any) -> List[str]:
        """
        Collect web citation URLs from a response, deduplicated in order.

        Args:
            response: Responses API result

        Returns:
            Unique citation URLs, empty when the response has none
        """
        urls = []
        for item in getattr(response, "output", None) or []:
            if getattr(item, "type", None) != "message":
                continue
            for part in getattr(item, "content", None) or []:
                for annotation in getattr(part, "annotations", None) or []:
                    url = getattr(annotation, "url", None)
                    if getattr(annotation, "type", None) == "url_citation" and url:
                        urls.append(url)
        return list(dict.fromkeys(urls))
