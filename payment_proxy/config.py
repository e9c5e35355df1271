"""Configuration management using Pydantic Settings"""

from typing import Dict, List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from payment_proxy.domain.models import FraudRules


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "payment-proxy"
    environment: str = "development"
    log_level: str = "INFO"

    # Explanation generation (OpenAI-compatible chat completions API)
    enable_llm: bool = False
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-3.5-turbo"
    llm_timeout_seconds: float = 5.0
    llm_cache_ttl_seconds: float = 300.0

    # Fraud rules
    suspicious_domains: List[str] = [
        "test.com",
        "tempmail",
        "10minutemail",
        "guerrillamail",
        "mailinator",
        "throwaway",
    ]
    high_risk_amount_threshold: int = 50_000  # $500 in cents
    blocking_threshold: float = 0.7
    stripe_threshold: float = 0.3
    high_risk_currencies: List[str] = ["RUB", "CNY", "KRW"]
    base_currency: str = "USD"
    test_source_marker: str = "test"

    # Recurring billing
    scheduler_enabled: bool = True
    recurring_sweep_interval_seconds: float = 3600.0  # hourly
    recurring_charge_success_rate: float = 0.95

    # Provider simulation
    simulate_provider_latency: bool = True
    provider_latency_ms: Dict[str, int] = {"stripe": 100, "paypal": 150, "blocked": 50}

    def fraud_rules(self) -> FraudRules:
        """Build the immutable rule set used by the scoring engine"""
        return FraudRules(
            suspicious_domains=tuple(self.suspicious_domains),
            high_risk_amount_threshold=self.high_risk_amount_threshold,
            blocking_threshold=self.blocking_threshold,
            stripe_threshold=self.stripe_threshold,
            high_risk_currencies=frozenset(c.upper() for c in self.high_risk_currencies),
            base_currency=self.base_currency.upper(),
            test_source_marker=self.test_source_marker,
        )


settings = Settings()
