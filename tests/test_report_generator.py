"""
Tests for the marketing report generator.
"""

import json
import httpx
import openai
import pytest
from unittest.mock import Mock

from business_logic.error_handler import (
    AuthMissing, CredentialUpdated, GenerationFailed, MalformedResponse
)
from business_logic.key_resolver import KeyResolver, CredentialSelector
from business_logic.report_generator import (
    ReportGenerator, FAST_MODEL, PRO_MODEL, THINKING_TOKEN_BUDGET
)
from models.data_models import MarketingReport, ModelTier, MediaType, ReportType
from sample_reports import sample_report_dict, fake_response, AWARDS_STRATEGY


def _auth_error(status=401):
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    response = httpx.Response(status, request=request)
    if status == 401:
        return openai.AuthenticationError("Incorrect API key provided", response=response, body=None)
    return openai.PermissionDeniedError("Forbidden", response=response, body=None)


class PickingSelector(CredentialSelector):
    """Selector whose dialog immediately yields a replacement key."""

    def __init__(self, replacement):
        self.replacement = replacement
        self.key = None

    def selected_key(self):
        return self.key

    def open_select_key(self):
        self.key = self.replacement


class TestReportGenerator:
    """Test cases for ReportGenerator."""

    def setup_method(self):
        self.client = Mock()
        self.client.responses.create.return_value = fake_response()
        self.client_factory = Mock(return_value=self.client)
        self.selector = Mock(spec=CredentialSelector)
        self.selector.selected_key.return_value = None
        self.generator = ReportGenerator(
            key_resolver=KeyResolver(build_time_key="sk-test"),
            client_factory=self.client_factory,
        )

    def _generate(self, tier="fast", mode="existing", media="tv", report_type="launch"):
        return self.generator.generate("Neon Corridor", tier, mode, media, report_type)

    def test_fast_tier_request(self):
        request = self.generator.build_request(
            "x", ModelTier.FAST, *self._axes("concept", "tv", "launch")
        )

        assert request["model"] == FAST_MODEL
        assert "tools" not in request
        assert "reasoning" not in request
        assert request["text"]["format"]["type"] == "json_schema"
        assert request["text"]["format"]["strict"] is True

    def test_pro_tier_enables_search(self):
        request = self.generator.build_request(
            "x", ModelTier.PRO, *self._axes("existing", "tv", "launch")
        )

        assert request["model"] == PRO_MODEL
        assert request["tools"] == [{"type": "web_search"}]
        assert "reasoning" not in request

    def test_thinking_tier_adds_reasoning_budget(self):
        request = self.generator.build_request(
            "x", ModelTier.THINKING, *self._axes("existing", "movie", "awards")
        )

        assert request["model"] == PRO_MODEL
        assert request["tools"] == [{"type": "web_search"}]
        assert request["reasoning"] == {"effort": "high"}
        assert request["max_output_tokens"] == THINKING_TOKEN_BUDGET

    def test_prompt_varies_by_mode_and_report_type(self):
        existing = self.generator.build_request(
            "x", ModelTier.FAST, *self._axes("existing", "tv", "launch")
        )
        awards = self.generator.build_request(
            "x", ModelTier.FAST, *self._axes("concept", "movie", "awards")
        )

        assert "web search" in existing["instructions"]
        assert "TV Marketing Executive" in existing["instructions"]
        assert "new concept" in awards["instructions"]
        assert "Film Awards Strategist" in awards["instructions"]
        assert "VOTERS" in awards["instructions"]
        assert "other contenders" in awards["instructions"]

    @staticmethod
    def _axes(mode, media, report_type):
        from models.data_models import InputMode
        return InputMode(mode), MediaType(media), ReportType(report_type)

    def test_generate_stamps_provenance(self):
        report = self._generate(tier="pro", media="movie")

        assert isinstance(report, MarketingReport)
        assert report.model_used == ModelTier.PRO
        assert report.media_type == MediaType.MOVIE
        assert report.report_type == ReportType.LAUNCH
        assert report.created_at is not None
        self.client_factory.assert_called_once_with("sk-test")

    def test_grounding_urls_are_deduplicated(self):
        self.client.responses.create.return_value = fake_response(
            urls=["https://a.example/1", "https://b.example/2", "https://a.example/1"]
        )

        report = self._generate(tier="pro")

        assert report.grounding_urls == ["https://a.example/1", "https://b.example/2"]

    def test_grounding_urls_empty_without_citations(self):
        report = self._generate()
        assert report.grounding_urls == []

    def test_launch_report_drops_awards_strategy(self):
        self.client.responses.create.return_value = fake_response(
            sample_report_dict(awards_strategy=AWARDS_STRATEGY)
        )

        report = self._generate(report_type="launch")

        assert report.awards_strategy is None

    def test_awards_report_keeps_awards_strategy(self):
        self.client.responses.create.return_value = fake_response(
            sample_report_dict(awards_strategy=AWARDS_STRATEGY)
        )

        report = self._generate(report_type="awards")

        assert report.report_type == ReportType.AWARDS
        assert report.awards_strategy.priority_categories

    def test_invalid_json_raises_malformed_response(self):
        self.client.responses.create.return_value = fake_response(text="{not json")

        with pytest.raises(MalformedResponse):
            self._generate()

    def test_wrong_shape_raises_malformed_response(self):
        self.client.responses.create.return_value = fake_response(text=json.dumps({"show_info": {}}))

        with pytest.raises(MalformedResponse):
            self._generate()

    def test_empty_text_raises_malformed_response(self):
        self.client.responses.create.return_value = fake_response(text="")

        with pytest.raises(MalformedResponse):
            self._generate()

    def test_upstream_error_raises_generation_failed(self):
        self.client.responses.create.side_effect = RuntimeError("model overloaded")

        with pytest.raises(GenerationFailed, match="model overloaded"):
            self._generate()

    def test_missing_key_raises_auth_missing(self):
        generator = ReportGenerator(key_resolver=KeyResolver(), client_factory=self.client_factory)

        with pytest.raises(AuthMissing):
            generator.generate("x", "fast", "existing", "tv", "launch")
        self.client_factory.assert_not_called()

    def test_auth_error_with_selector_asks_for_resubmit(self):
        self.generator.credential_selector = self.selector
        self.client.responses.create.side_effect = _auth_error(401)

        with pytest.raises(CredentialUpdated):
            self._generate()

        self.selector.open_select_key.assert_called_once()
        assert self.client.responses.create.call_count == 1

    def test_resubmit_after_credential_update_uses_selected_key(self):
        selector = PickingSelector("sk-good")
        generator = ReportGenerator(
            key_resolver=KeyResolver(build_time_key="sk-revoked"),
            credential_selector=selector,
            client_factory=self.client_factory,
        )
        self.client.responses.create.side_effect = [_auth_error(401), fake_response()]

        with pytest.raises(CredentialUpdated):
            generator.generate("Neon Corridor", "fast", "existing", "tv", "launch")
        report = generator.generate("Neon Corridor", "fast", "existing", "tv", "launch")

        assert report.show_info.title == "Neon Corridor"
        assert [c.args[0] for c in self.client_factory.call_args_list] == ["sk-revoked", "sk-good"]

    def test_auto_retry_uses_selected_key(self):
        generator = ReportGenerator(
            key_resolver=KeyResolver(build_time_key="sk-revoked"),
            credential_selector=PickingSelector("sk-good"),
            client_factory=self.client_factory,
            auto_retry_on_credential_update=True,
        )
        self.client.responses.create.side_effect = [_auth_error(403), fake_response()]

        generator.generate("Neon Corridor", "fast", "existing", "tv", "launch")

        assert self.client_factory.call_args_list[-1].args[0] == "sk-good"

    def test_auth_error_detected_from_embedded_status(self):
        self.generator.credential_selector = self.selector
        self.client.responses.create.side_effect = RuntimeError("request failed with status 403")

        with pytest.raises(CredentialUpdated):
            self._generate()

    def test_auth_error_without_selector_raises_auth_missing(self):
        self.client.responses.create.side_effect = _auth_error(403)

        with pytest.raises(AuthMissing):
            self._generate()

    def test_auto_retry_retries_exactly_once(self):
        self.generator.credential_selector = self.selector
        self.generator.auto_retry_on_credential_update = True
        self.client.responses.create.side_effect = [_auth_error(401), fake_response()]

        report = self._generate()

        assert report.show_info.title == "Neon Corridor"
        assert self.client.responses.create.call_count == 2

    def test_auto_retry_gives_up_after_second_auth_failure(self):
        self.generator.credential_selector = self.selector
        self.generator.auto_retry_on_credential_update = True
        self.client.responses.create.side_effect = [_auth_error(401), _auth_error(401)]

        with pytest.raises(CredentialUpdated):
            self._generate()
        assert self.client.responses.create.call_count == 2
