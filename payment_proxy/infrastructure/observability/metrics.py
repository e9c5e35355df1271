"""Prometheus metrics for monitoring routing decisions, explanations, and recurring billing"""

from prometheus_client import Counter, Histogram

# Charge metrics
charge_counter = Counter(
    "payment_charge_total",
    "Total one-off charges processed",
    ["provider"],  # stripe | paypal | blocked
)

risk_score_histogram = Histogram(
    "payment_risk_score",
    "Distribution of computed risk scores",
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

# Explanation metrics
explanation_cache_counter = Counter(
    "explanation_cache_total",
    "Explanation cache lookups",
    ["operation", "result"],  # routing | campaign, hit | miss
)

explanation_fallback_counter = Counter(
    "explanation_fallback_total",
    "Explanations served by the rule-based fallback after a generator failure",
    ["operation"],
)

# Recurring billing metrics
recurring_charge_counter = Counter(
    "recurring_charge_total",
    "Recurring charge attempts",
    ["status"],  # success | failed
)

sweep_counter = Counter(
    "recurring_sweep_total",
    "Recurrence sweeps",
    ["outcome"],  # completed | skipped
)

sweep_duration_histogram = Histogram(
    "recurring_sweep_duration_seconds",
    "Recurrence sweep duration",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_charge(provider: str, risk_score: float) -> None:
    """Record routing outcome and score distribution"""
    charge_counter.labels(provider=provider).inc()
    risk_score_histogram.observe(risk_score)
