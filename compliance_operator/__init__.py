# compliance-operator/compliance_operator/__init__.py
"""
Compliance Operator

Control-plane components for running compliance scans and applying
remediations. This package currently ships the controller metrics
subsystem and the runnable manager it is hosted in.

Example usage:
    from compliance_operator import Manager, Metrics, add_to_manager

    metrics = Metrics.new()
    metrics.register()

    manager = Manager()
    add_to_manager(manager, metrics)
    asyncio.run(manager.start())
"""

from .version import __version__
from .config import MetricsConfig, OperatorConfig
from .controller import ADD_TO_MANAGER_FUNCS, add_to_manager
from .controller.manager import Manager, Runnable
from .controller.metrics import Metrics, ComplianceState
from .exceptions import OperatorError, ConfigurationError, ManagerError

__title__ = "compliance-operator"
__license__ = "Apache-2.0"

__all__ = [
    "__version__",

    # Configuration
    "MetricsConfig",
    "OperatorConfig",

    # Lifecycle
    "Manager",
    "Runnable",
    "ADD_TO_MANAGER_FUNCS",
    "add_to_manager",

    # Metrics
    "Metrics",
    "ComplianceState",

    # Exceptions
    "OperatorError",
    "ConfigurationError",
    "ManagerError",
]
