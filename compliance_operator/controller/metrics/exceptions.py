"""
Metrics-specific exceptions.

Registration errors are programmer errors and abort startup. Listener
errors are raised by the registry adapter's ``serve`` and are logged and
swallowed by ``Metrics.start``.
"""

from typing import Optional, Dict, Any

from ...exceptions import OperatorError


class MetricsError(OperatorError):
    """Base exception for metrics-related errors."""

    def __init__(
        self,
        message: str,
        metric_name: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.metric_name = metric_name
        self.original_error = original_error


class MetricRegistrationError(MetricsError):
    """Exception raised when a collector cannot be registered."""
    pass


class DuplicateRegistrationError(MetricRegistrationError):
    """Exception raised when a collector identity is registered twice."""
    pass


class ListenerFailure(MetricsError):
    """Exception raised when the metrics listener fails to start or stops abnormally."""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.address = address
