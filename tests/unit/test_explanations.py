"""Unit tests for explanation generation, caching and fallback"""

from conftest import FakeGenerator
from payment_proxy.domain.models import CampaignAnalysis
from payment_proxy.infrastructure.clients.llm import RuleBasedExplanationGenerator
from payment_proxy.services.explanations import ExplanationService


async def test_identical_inputs_within_ttl_hit_cache(low_risk_request, timer):
    generator = FakeGenerator(explanation="Low risk, routed to Stripe.")
    service = ExplanationService(generator, cache_ttl_seconds=300, clock=timer)

    first = await service.explain_routing(low_risk_request, 0.12, "stripe", [])
    timer.advance(299)
    second = await service.explain_routing(low_risk_request, 0.12, "stripe", [])

    assert first == second == "Low risk, routed to Stripe."
    assert generator.routing_calls == 1


async def test_read_after_ttl_is_a_miss(low_risk_request, timer):
    generator = FakeGenerator()
    service = ExplanationService(generator, cache_ttl_seconds=300, clock=timer)

    await service.explain_routing(low_risk_request, 0.12, "stripe", [])
    timer.advance(301)
    await service.explain_routing(low_risk_request, 0.12, "stripe", [])

    assert generator.routing_calls == 2


async def test_different_inputs_do_not_share_entries(low_risk_request, timer):
    generator = FakeGenerator()
    service = ExplanationService(generator, clock=timer)

    await service.explain_routing(low_risk_request, 0.12, "stripe", [])
    await service.explain_routing(low_risk_request, 0.45, "paypal", [])
    await service.explain_routing(low_risk_request, 0.45, "paypal", ["large amount"])

    assert generator.routing_calls == 3


async def test_generator_failure_falls_back_to_template(low_risk_request, failing_generator, timer):
    service = ExplanationService(failing_generator, clock=timer)

    explanation = await service.explain_routing(low_risk_request, 0.12, "stripe", [])

    assert explanation == "Payment routed to STRIPE due to low risk score (0.12)."


async def test_fallback_is_not_cached(low_risk_request, failing_generator, timer):
    """The live generator is retried on the next call"""
    service = ExplanationService(failing_generator, clock=timer)

    await service.explain_routing(low_risk_request, 0.12, "stripe", [])
    await service.explain_routing(low_risk_request, 0.12, "stripe", [])

    assert failing_generator.routing_calls == 2
    assert len(service.cache) == 0


async def test_timeout_falls_back(high_risk_request, timer):
    generator = FakeGenerator(delay=1.0)
    service = ExplanationService(generator, timeout=0.01, clock=timer)

    explanation = await service.explain_routing(
        high_risk_request, 0.85, "blocked", ["large amount", "suspicious email domain"]
    )

    assert explanation == (
        "Transaction blocked due to high risk score (0.85), driven by large amount and suspicious email domain."
    )


async def test_unexpected_generator_error_falls_back(low_risk_request, timer):
    service = ExplanationService(FakeGenerator(error=RuntimeError("boom")), clock=timer)

    explanation = await service.explain_routing(low_risk_request, 0.4, "paypal", [])

    assert explanation == "Payment routed to PAYPAL due to moderate risk score (0.40)."


async def test_campaign_analysis_cached(timer):
    generator = FakeGenerator()
    service = ExplanationService(generator, clock=timer)

    first = await service.analyze_campaign("Books for rural schools")
    second = await service.analyze_campaign("Books for rural schools")

    assert first == second
    assert first.tags == ("education", "children")
    assert generator.campaign_calls == 1


async def test_campaign_failure_uses_keyword_fallback(failing_generator, timer):
    service = ExplanationService(failing_generator, clock=timer)

    analysis = await service.analyze_campaign("Emergency earthquake relief for children in Nepal")

    assert analysis.tags == ("disaster relief", "children", "nepal")
    assert analysis.summary == "Emergency earthquake relief for children in Nepal"


async def test_operations_use_separate_key_spaces(low_risk_request, timer):
    service = ExplanationService(FakeGenerator(), clock=timer)

    await service.explain_routing(low_risk_request, 0.12, "stripe", [])
    await service.analyze_campaign("stripe")

    assert len(service.cache) == 2


async def test_clear_expired_cache(low_risk_request, timer):
    service = ExplanationService(FakeGenerator(), cache_ttl_seconds=60, clock=timer)
    await service.explain_routing(low_risk_request, 0.12, "stripe", [])
    await service.analyze_campaign("Clean water wells")

    timer.advance(61)

    assert service.clear_expired_cache() == 2
    assert len(service.cache) == 0


def test_routing_template_risk_levels():
    template = RuleBasedExplanationGenerator.routing_template

    assert template(0.29, "stripe", []) == "Payment routed to STRIPE due to low risk score (0.29)."
    assert template(0.3, "paypal", []) == "Payment routed to PAYPAL due to moderate risk score (0.30)."
    assert template(0.5, "paypal", ["non-USD currency"]) == (
        "Payment routed to PAYPAL due to high risk score (0.50), driven by non-USD currency."
    )


def test_campaign_keywords_full_vocabulary():
    analysis = RuleBasedExplanationGenerator.campaign_keywords(
        "Hunger and clean water for kids; school and medical support in Haiti, Syria and Yemen"
    )

    assert analysis.tags == (
        "clean water",
        "food aid",
        "children",
        "education",
        "healthcare",
        "haiti",
        "syria",
        "yemen",
    )


def test_campaign_keywords_default_tag():
    analysis = RuleBasedExplanationGenerator.campaign_keywords("Support our local animal shelter")

    assert analysis == CampaignAnalysis(tags=("charitable cause",), summary="Support our local animal shelter")


def test_campaign_summary_truncation():
    exactly_100 = "a" * 100
    long_description = "b" * 150

    assert RuleBasedExplanationGenerator.campaign_keywords(exactly_100).summary == exactly_100

    summary = RuleBasedExplanationGenerator.campaign_keywords(long_description).summary
    assert len(summary) == 100
    assert summary == "b" * 97 + "..."
