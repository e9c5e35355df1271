"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ExplanationServiceError(DomainException):
    """Explanation generator timed out, failed, or returned unusable output"""

    pass


class RiskScoreOutOfBoundsError(DomainException):
    """Risk score left the [0, 1] range after clamping"""

    pass
