"""Explanation generators: live LLM client and deterministic rule-based stub"""

from typing import List, Protocol

import httpx
from pydantic import BaseModel, Field

from payment_proxy.config import settings
from payment_proxy.domain.exceptions import ExplanationServiceError
from payment_proxy.domain.models import CampaignAnalysis, ChargeRequest

ROUTING_SYSTEM_PROMPT = (
    "You are a fraud detection system explaining payment routing decisions. "
    "Be concise, professional, and clear about the reasoning."
)
CAMPAIGN_SYSTEM_PROMPT = (
    "You are analyzing charitable campaign descriptions. Extract relevant tags and create a "
    "one-sentence summary. Respond only with valid JSON in the format: "
    '{"tags": ["tag1", "tag2"], "summary": "Summary sentence"}'
)
ROUTING_MAX_TOKENS = 150
CAMPAIGN_MAX_TOKENS = 200

SUMMARY_MAX_LENGTH = 100

CAMPAIGN_KEYWORDS = [
    (("disaster", "emergency", "earthquake"), "disaster relief"),
    (("water",), "clean water"),
    (("food", "hunger"), "food aid"),
    (("children", "kids"), "children"),
    (("education", "school"), "education"),
    (("health", "medical"), "healthcare"),
]
CAMPAIGN_LOCATIONS = ["nepal", "haiti", "syria", "ukraine", "somalia", "yemen"]
DEFAULT_CAMPAIGN_TAG = "charitable cause"


class ExplanationGenerator(Protocol):
    """Capability producing natural-language rationales"""

    async def explain_routing(
        self, request: ChargeRequest, risk_score: float, provider: str, risk_factors: List[str]
    ) -> str: ...

    async def analyze_campaign(self, description: str) -> CampaignAnalysis: ...


def risk_level(risk_score: float) -> str:
    if risk_score < 0.3:
        return "low"
    if risk_score < 0.5:
        return "moderate"
    return "high"


class RuleBasedExplanationGenerator:
    """Deterministic templates and keyword matching, no network access"""

    async def explain_routing(
        self, request: ChargeRequest, risk_score: float, provider: str, risk_factors: List[str]
    ) -> str:
        return self.routing_template(risk_score, provider, risk_factors)

    async def analyze_campaign(self, description: str) -> CampaignAnalysis:
        return self.campaign_keywords(description)

    @staticmethod
    def routing_template(risk_score: float, provider: str, risk_factors: List[str]) -> str:
        """
        Example:
            "Payment routed to PAYPAL due to moderate risk score (0.42), driven by large amount."
        """
        action = "Transaction blocked" if provider == "blocked" else f"Payment routed to {provider.upper()}"
        factors_clause = f", driven by {' and '.join(risk_factors)}" if risk_factors else ""
        return f"{action} due to {risk_level(risk_score)} risk score ({risk_score:.2f}){factors_clause}."

    @staticmethod
    def campaign_keywords(description: str) -> CampaignAnalysis:
        text = description.lower()
        tags = [tag for keywords, tag in CAMPAIGN_KEYWORDS if any(word in text for word in keywords)]
        tags.extend(location for location in CAMPAIGN_LOCATIONS if location in text)
        if not tags:
            tags.append(DEFAULT_CAMPAIGN_TAG)

        if len(description) > SUMMARY_MAX_LENGTH:
            summary = f"{description[:SUMMARY_MAX_LENGTH - 3]}..."
        else:
            summary = description

        return CampaignAnalysis(tags=tuple(tags), summary=summary)


class CampaignAnalysisPayload(BaseModel):
    """Strict shape expected from the model for campaign analysis"""

    tags: List[str] = Field(..., min_length=1)
    summary: str = Field(..., min_length=1)


class OpenAIExplanationGenerator:
    """Client for an OpenAI-compatible chat completions API"""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key or settings.openai_api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.llm_model
        self.timeout = settings.llm_timeout_seconds if timeout is None else timeout

    async def explain_routing(
        self, request: ChargeRequest, risk_score: float, provider: str, risk_factors: List[str]
    ) -> str:
        amount = f"{request.amount / 100:.2f}"
        outcome = "blocked" if provider == "blocked" else f"routed to {provider.upper()}"
        factors_text = ", ".join(risk_factors) if risk_factors else "standard transaction profile"
        prompt = (
            f"Explain why a payment of ${amount} {request.currency} was {outcome}. "
            f"Risk score: {risk_score:.2f}. Risk factors: {factors_text}. "
            "Keep explanation under 50 words."
        )
        return await self._complete(ROUTING_SYSTEM_PROMPT, prompt, ROUTING_MAX_TOKENS)

    async def analyze_campaign(self, description: str) -> CampaignAnalysis:
        """
        Ask the model for tags and a summary.

        Raises:
            ExplanationServiceError: If the completion is not the expected JSON object
        """
        prompt = (
            f'Analyze this charitable campaign: "{description}". '
            "Extract 3-5 relevant tags and create a one-sentence summary."
        )
        content = await self._complete(CAMPAIGN_SYSTEM_PROMPT, prompt, CAMPAIGN_MAX_TOKENS)
        try:
            payload = CampaignAnalysisPayload.model_validate_json(content)
        except ValueError as e:
            raise ExplanationServiceError(f"Malformed campaign analysis: {e}") from e
        return CampaignAnalysis(tags=tuple(payload.tags), summary=payload.summary)

    async def _complete(self, system_prompt: str, prompt: str, max_tokens: int) -> str:
        """
        Run a single chat completion and return the trimmed message content.

        Raises:
            ExplanationServiceError: On timeout, HTTP errors, or empty/invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={
                        "model": self.model,
                        "messages": [
                            {"role": "system", "content": system_prompt},
                            {"role": "user", "content": prompt},
                        ],
                        "max_tokens": max_tokens,
                        "temperature": 0.3,
                    },
                )
                response.raise_for_status()
                content = response.json()["choices"][0]["message"]["content"]

            except httpx.TimeoutException as e:
                raise ExplanationServiceError(f"LLM API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ExplanationServiceError(f"LLM API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ExplanationServiceError(f"LLM API unreachable: {e}") from e
            except (KeyError, IndexError, ValueError, TypeError) as e:
                raise ExplanationServiceError(f"Invalid completion payload: {e}") from e

        if not isinstance(content, str) or not content.strip():
            raise ExplanationServiceError("Empty completion")
        return content.strip()


def build_explanation_generator(config=None) -> ExplanationGenerator:
    """Live client when LLM generation is enabled and keyed, rule-based otherwise"""
    config = config or settings
    if config.enable_llm and config.openai_api_key:
        return OpenAIExplanationGenerator(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            model=config.llm_model,
            timeout=config.llm_timeout_seconds,
        )
    return RuleBasedExplanationGenerator()
