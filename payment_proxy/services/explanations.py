"""Explanation generation with time-bounded caching and rule-based fallback"""

import asyncio
import hashlib
import json
import logging
import time
from typing import Callable, List

from payment_proxy.domain.models import CampaignAnalysis, ChargeRequest
from payment_proxy.infrastructure.cache import TTLCache
from payment_proxy.infrastructure.clients.llm import ExplanationGenerator, RuleBasedExplanationGenerator
from payment_proxy.infrastructure.observability.metrics import (
    explanation_cache_counter,
    explanation_fallback_counter,
)

logger = logging.getLogger(__name__)


def make_cache_key(namespace: str, data: dict) -> str:
    """Namespaced SHA-256 key; routing and campaign entries never collide"""
    digest = hashlib.sha256(json.dumps(data, sort_keys=True).encode("utf-8")).hexdigest()
    return f"{namespace}:{digest}"


class ExplanationService:
    """
    Human-readable rationales for routing decisions and campaign analyses.

    Each operation:
    1. Looks up its namespaced cache key (lazy TTL expiry)
    2. On miss, calls the configured generator, bounded by `timeout`
    3. Caches successful generator output
    4. On any generator failure, returns the deterministic fallback (not cached)
    """

    def __init__(
        self,
        generator: ExplanationGenerator,
        cache_ttl_seconds: float = 300.0,
        timeout: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.generator = generator
        self.fallback = RuleBasedExplanationGenerator()
        self.timeout = timeout
        self.cache = TTLCache(cache_ttl_seconds, clock=clock)

    async def explain_routing(
        self, request: ChargeRequest, risk_score: float, provider: str, risk_factors: List[str]
    ) -> str:
        key = make_cache_key(
            "routing",
            {"risk_score": round(risk_score, 2), "provider": provider, "risk_factors": list(risk_factors)},
        )
        cached = self.cache.get(key)
        if cached is not None:
            explanation_cache_counter.labels(operation="routing", result="hit").inc()
            return cached
        explanation_cache_counter.labels(operation="routing", result="miss").inc()

        try:
            explanation = await asyncio.wait_for(
                self.generator.explain_routing(request, risk_score, provider, risk_factors),
                timeout=self.timeout,
            )
        except Exception as e:
            # Timeouts, transport and parse errors all degrade to the template
            logger.warning(f"Routing explanation fell back to template: {e!r}")
            explanation_fallback_counter.labels(operation="routing").inc()
            return self.fallback.routing_template(risk_score, provider, risk_factors)

        self.cache.set(key, explanation)
        return explanation

    async def analyze_campaign(self, description: str) -> CampaignAnalysis:
        key = make_cache_key("campaign", {"description": description})
        cached = self.cache.get(key)
        if cached is not None:
            explanation_cache_counter.labels(operation="campaign", result="hit").inc()
            return cached
        explanation_cache_counter.labels(operation="campaign", result="miss").inc()

        try:
            analysis = await asyncio.wait_for(self.generator.analyze_campaign(description), timeout=self.timeout)
        except Exception as e:
            logger.warning(f"Campaign analysis fell back to keyword matching: {e!r}")
            explanation_fallback_counter.labels(operation="campaign").inc()
            return self.fallback.campaign_keywords(description)

        self.cache.set(key, analysis)
        return analysis

    def clear_expired_cache(self) -> int:
        removed = self.cache.clear_expired()
        if removed:
            logger.debug(f"Evicted {removed} expired explanation cache entries")
        return removed
