"""Pytest fixtures for testing"""

import asyncio
import random
from datetime import datetime, timedelta, timezone
from typing import Generator, List

import pytest
from fastapi.testclient import TestClient

from payment_proxy.api.main import create_app
from payment_proxy.config import Settings
from payment_proxy.domain.exceptions import ExplanationServiceError
from payment_proxy.domain.models import CampaignAnalysis, ChargeRequest, FraudRules
from payment_proxy.services.gateway import PaymentGateway, build_gateway


class FixedRandom(random.Random):
    """random.Random whose random() always returns the same value"""

    def __init__(self, value: float):
        super().__init__()
        self.value = value

    def random(self) -> float:
        return self.value


class FakeClock:
    """Controllable wall clock returning timezone-aware datetimes"""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeTimer:
    """Controllable monotonic clock in seconds"""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGenerator:
    """Explanation generator double counting calls; can fail or stall"""

    def __init__(
        self,
        explanation: str = "Routed after reviewing the risk profile.",
        analysis: CampaignAnalysis | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.explanation = explanation
        self.analysis = analysis or CampaignAnalysis(tags=("education", "children"), summary="School supplies for kids.")
        self.error = error
        self.delay = delay
        self.routing_calls = 0
        self.campaign_calls = 0

    async def explain_routing(self, request, risk_score, provider, risk_factors) -> str:
        self.routing_calls += 1
        await self._maybe_fail()
        return self.explanation

    async def analyze_campaign(self, description: str) -> CampaignAnalysis:
        self.campaign_calls += 1
        await self._maybe_fail()
        return self.analysis

    async def _maybe_fail(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error


@pytest.fixture
def rules() -> FraudRules:
    """Default fraud rules used across unit tests"""
    return FraudRules(
        suspicious_domains=("test.com", "tempmail", "mailinator"),
        high_risk_amount_threshold=50_000,
        blocking_threshold=0.7,
        stripe_threshold=0.3,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def low_risk_request() -> ChargeRequest:
    return ChargeRequest(amount=500, currency="USD", source="tok_visa", email="user@gmail.com")


@pytest.fixture
def high_risk_request() -> ChargeRequest:
    return ChargeRequest(amount=100_000, currency="USD", source="tok_test", email="user@test.com")


@pytest.fixture
def failing_generator() -> FakeGenerator:
    return FakeGenerator(error=ExplanationServiceError("LLM API error: 503"))


@pytest.fixture
def test_settings() -> Settings:
    """Settings with no network, no artificial latency, and a deterministic charge outcome"""
    return Settings(
        environment="test",
        enable_llm=False,
        openai_api_key=None,
        scheduler_enabled=False,
        simulate_provider_latency=False,
        recurring_charge_success_rate=1.0,
        llm_cache_ttl_seconds=300,
    )


@pytest.fixture
def gateway(test_settings: Settings, clock: FakeClock) -> PaymentGateway:
    return build_gateway(test_settings, clock=clock)


@pytest.fixture
def client(test_settings: Settings, gateway: PaymentGateway) -> Generator[TestClient, None, None]:
    """Create FastAPI test client around an isolated gateway"""
    app = create_app(config=test_settings, gateway=gateway)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_charges() -> List[ChargeRequest]:
    """Mix of low, medium and high risk charges"""
    return [
        ChargeRequest(amount=500, currency="USD", source="tok_visa", email="alice@gmail.com"),
        ChargeRequest(amount=25_000, currency="EUR", source="tok_mastercard", email="bob@example.org"),
        ChargeRequest(amount=100_000, currency="RUB", source="tok_test", email="eve@tempmail.net"),
    ]
