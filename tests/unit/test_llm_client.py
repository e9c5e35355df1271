"""Unit tests for the live explanation generator client"""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from payment_proxy.config import Settings, settings
from payment_proxy.domain.exceptions import ExplanationServiceError
from payment_proxy.infrastructure.clients.llm import (
    OpenAIExplanationGenerator,
    RuleBasedExplanationGenerator,
    build_explanation_generator,
)

COMPLETIONS_URL = "https://llm.test/v1/chat/completions"


def completion_response(content, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"choices": [{"message": {"role": "assistant", "content": content}}]},
        request=httpx.Request("POST", COMPLETIONS_URL),
    )


@pytest.fixture
def generator() -> OpenAIExplanationGenerator:
    return OpenAIExplanationGenerator(api_key="sk-test", base_url="https://llm.test/v1/", model="gpt-test", timeout=2.0)


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_explain_routing_returns_trimmed_content(mock_post: AsyncMock, generator, high_risk_request):
    mock_post.return_value = completion_response("  Blocked: several fraud signals.  \n")

    explanation = await generator.explain_routing(high_risk_request, 0.91, "blocked", ["large amount"])

    assert explanation == "Blocked: several fraud signals."
    url = mock_post.call_args.args[0]
    body = mock_post.call_args.kwargs["json"]
    assert url == COMPLETIONS_URL
    assert body["model"] == "gpt-test"
    assert body["max_tokens"] == 150
    assert body["messages"][0]["role"] == "system"
    assert "$1000.00 USD was blocked" in body["messages"][1]["content"]
    assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer sk-test"


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_http_error_raises_service_error(mock_post: AsyncMock, generator, low_risk_request):
    mock_post.return_value = completion_response("unused", status_code=503)

    with pytest.raises(ExplanationServiceError, match="503"):
        await generator.explain_routing(low_risk_request, 0.1, "stripe", [])


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_timeout_raises_service_error(mock_post: AsyncMock, generator, low_risk_request):
    mock_post.side_effect = httpx.ReadTimeout("timed out")

    with pytest.raises(ExplanationServiceError, match="timeout"):
        await generator.explain_routing(low_risk_request, 0.1, "stripe", [])


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_empty_completion_raises_service_error(mock_post: AsyncMock, generator, low_risk_request):
    mock_post.return_value = completion_response("   ")

    with pytest.raises(ExplanationServiceError):
        await generator.explain_routing(low_risk_request, 0.1, "stripe", [])


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_analyze_campaign_parses_json(mock_post: AsyncMock, generator):
    mock_post.return_value = completion_response(
        json.dumps({"tags": ["clean water", "kenya"], "summary": "Wells for villages in Kenya."})
    )

    analysis = await generator.analyze_campaign("Build wells in Kenya")

    assert analysis.tags == ("clean water", "kenya")
    assert analysis.summary == "Wells for villages in Kenya."
    assert mock_post.call_args.kwargs["json"]["max_tokens"] == 200


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_analyze_campaign_rejects_malformed_json(mock_post: AsyncMock, generator):
    mock_post.return_value = completion_response("Sure! Here are some tags: water, kenya")

    with pytest.raises(ExplanationServiceError, match="Malformed"):
        await generator.analyze_campaign("Build wells in Kenya")


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_analyze_campaign_rejects_wrong_shape(mock_post: AsyncMock, generator):
    mock_post.return_value = completion_response(json.dumps({"tags": [], "summary": "x"}))

    with pytest.raises(ExplanationServiceError):
        await generator.analyze_campaign("Build wells in Kenya")


def test_build_generator_selects_rule_based_when_disabled():
    config = Settings(enable_llm=False, openai_api_key="sk-test")
    assert isinstance(build_explanation_generator(config), RuleBasedExplanationGenerator)


def test_build_generator_requires_api_key():
    config = Settings(enable_llm=True, openai_api_key=None)
    assert isinstance(build_explanation_generator(config), RuleBasedExplanationGenerator)


def test_build_generator_selects_live_client():
    config = Settings(enable_llm=True, openai_api_key="sk-test", llm_model="gpt-test")
    generator = build_explanation_generator(config)

    assert isinstance(generator, OpenAIExplanationGenerator)
    assert generator.model == "gpt-test"


def test_explicit_zero_timeout_is_kept():
    generator = OpenAIExplanationGenerator(api_key="sk-test", timeout=0)
    assert generator.timeout == 0


def test_missing_timeout_uses_settings():
    generator = OpenAIExplanationGenerator(api_key="sk-test")
    assert generator.timeout == settings.llm_timeout_seconds
