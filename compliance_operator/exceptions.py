# compliance-operator/compliance_operator/exceptions.py
"""
Exception classes for the compliance operator.

This module defines the root of the operator's exception hierarchy.
Subsystems derive their own taxonomies from ``OperatorError``.
"""

from typing import Optional, Dict, Any


class OperatorError(Exception):
    """Base exception for all operator errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(OperatorError):
    """Exception raised for configuration errors."""
    pass


class ManagerError(OperatorError):
    """Exception raised by the runnable manager."""
    pass
