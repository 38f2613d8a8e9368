"""
Custom exceptions for the intelligence module.
"""


class IntelligenceException(Exception):
    """Base exception for intelligence module."""
    pass


class StoreQueryError(IntelligenceException):
    """Exception raised by signal stores when an aggregate query fails."""
    pass


class CollectorError(IntelligenceException):
    """
    Failure of one signal collector.

    Never raised to callers; carried inside a CollectorResult so the
    degradation stays visible and testable.
    """

    def __init__(self, domain: str, message: str, cause: Exception | None = None):
        super().__init__(f"{domain} collector failed: {message}")
        self.domain = domain
        self.message = message
        self.cause = cause


class CacheBackendError(IntelligenceException):
    """Exception raised by cache backends on read/write failures."""
    pass


class RuleEvaluationError(IntelligenceException):
    """Exception raised when an insight rule cannot evaluate a snapshot."""
    pass


class ConfigurationException(IntelligenceException):
    """Exception raised for configuration errors."""
    pass
