"""Risk scoring engine - core business logic for fraud-aware routing"""

import logging
import math
import random
from typing import List

from payment_proxy.domain.exceptions import RiskScoreOutOfBoundsError
from payment_proxy.domain.models import ChargeRequest, FraudRules, RiskAssessment
from payment_proxy.domain.routing import determine_provider

logger = logging.getLogger(__name__)

# Upper bound (exclusive) of the random component
JITTER_CEILING = 0.1


def calculate_amount_risk(amount: int, rules: FraudRules) -> float:
    """
    Step function over the charge amount (minor units).

    - > high_risk_amount_threshold: 0.4
    - > 10000 ($100):              0.2
    - > 1000 ($10):                0.1
    - otherwise:                   0.05
    """
    if amount > rules.high_risk_amount_threshold:
        return 0.4
    if amount > 10_000:
        return 0.2
    if amount > 1_000:
        return 0.1
    return 0.05


def has_suspicious_domain(email: str, rules: FraudRules) -> bool:
    email = email.lower()
    return any(domain.lower() in email for domain in rules.suspicious_domains)


def calculate_domain_risk(email: str, rules: FraudRules) -> float:
    return 0.3 if has_suspicious_domain(email, rules) else 0.0


def calculate_currency_risk(currency: str, rules: FraudRules) -> float:
    """High-risk currencies 0.15, other foreign currencies 0.05, base currency 0"""
    currency = currency.upper()
    if currency in rules.high_risk_currencies:
        return 0.15
    if currency != rules.base_currency:
        return 0.05
    return 0.0


def calculate_source_risk(source: str, rules: FraudRules) -> float:
    return 0.1 if rules.test_source_marker in source else 0.0


def calculate_risk_score(request: ChargeRequest, rules: FraudRules, rng: random.Random | None = None) -> float:
    """
    Calculate fraud risk score from 0.0 (lowest risk) to 1.0 (highest risk).

    Additive components:
    - jitter in [0, 0.1): irreducible real-world variance
    - amount risk (0.05 - 0.4)
    - email domain risk (0 or 0.3)
    - currency risk (0 - 0.15)
    - source token risk (0 or 0.1)

    The sum is clamped to [0, 1].

    Raises:
        RiskScoreOutOfBoundsError: If clamping still leaves an invalid value (NaN)
    """
    rng = rng or random
    score = rng.random() * JITTER_CEILING
    score += calculate_amount_risk(request.amount, rules)
    score += calculate_domain_risk(request.email, rules)
    score += calculate_currency_risk(request.currency, rules)
    score += calculate_source_risk(request.source, rules)

    clamped = min(max(score, 0.0), 1.0)
    if math.isnan(clamped) or not 0.0 <= clamped <= 1.0:
        logger.error("Risk score out of bounds", extra={"raw_score": score})
        raise RiskScoreOutOfBoundsError(f"Risk score {score!r} outside [0, 1]")
    return clamped


def get_risk_factors(request: ChargeRequest, rules: FraudRules) -> List[str]:
    """
    Qualitative labels for explanation generation.

    Recomputed from the request rather than from the numeric components so the
    labels stay stable if scoring weights change.
    """
    factors: List[str] = []

    if request.amount > rules.high_risk_amount_threshold:
        factors.append("large amount")

    if has_suspicious_domain(request.email, rules):
        factors.append("suspicious email domain")

    if request.currency.upper() != rules.base_currency:
        factors.append(f"non-{rules.base_currency} currency")

    if rules.test_source_marker in request.source:
        factors.append("test payment source")

    return factors


def assess_charge(request: ChargeRequest, rules: FraudRules, rng: random.Random | None = None) -> RiskAssessment:
    """
    Main entry point: score the charge and pick a provider.

    Returns complete RiskAssessment with score, provider and factor labels.
    """
    score = calculate_risk_score(request, rules, rng)
    provider = determine_provider(score, rules)
    risk_factors = get_risk_factors(request, rules)

    return RiskAssessment(score=score, provider=provider, risk_factors=risk_factors)
