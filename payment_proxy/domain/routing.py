"""Provider routing - maps a risk score to a payment provider"""

from payment_proxy.domain.models import FraudRules, Provider


def determine_provider(score: float, rules: FraudRules) -> Provider:
    """
    Map risk score to a provider bucket.

    - score >= blocking_threshold: blocked (checked first)
    - score <= stripe_threshold:   stripe
    - otherwise:                   paypal

    Boundary values favor the lower-risk bucket for stripe and trigger blocking
    at the blocking threshold.
    """
    if score >= rules.blocking_threshold:
        return "blocked"
    if score <= rules.stripe_threshold:
        return "stripe"
    return "paypal"
