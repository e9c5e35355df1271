"""Billing interval arithmetic for recurring donations"""

from datetime import datetime, timedelta

from payment_proxy.utils.date_utils import add_months

# Average weeks per month used for MRR normalization
WEEKS_PER_MONTH = 4.33
DAYS_PER_MONTH = 30


def add_interval(moment: datetime, interval: str) -> datetime:
    """
    Next charge time one billing interval after `moment`.

    - daily:   +1 day
    - weekly:  +7 days
    - monthly: +1 calendar month (day clamped to month end)
    - yearly:  +1 calendar year (Feb 29 clamps to Feb 28)

    Raises:
        ValueError: On an unknown interval
    """
    if interval == "daily":
        return moment + timedelta(days=1)
    if interval == "weekly":
        return moment + timedelta(days=7)
    if interval == "monthly":
        return add_months(moment, 1)
    if interval == "yearly":
        return add_months(moment, 12)
    raise ValueError(f"Unknown billing interval: {interval}")


def to_monthly_amount(amount: int, interval: str) -> float:
    """
    Normalize a per-interval amount to a 30-day month.

    Example:
        1000 cents yearly -> 83.33 cents/month
    """
    if interval == "daily":
        return float(amount * DAYS_PER_MONTH)
    if interval == "weekly":
        return amount * WEEKS_PER_MONTH
    if interval == "monthly":
        return float(amount)
    if interval == "yearly":
        return amount / 12
    raise ValueError(f"Unknown billing interval: {interval}")
