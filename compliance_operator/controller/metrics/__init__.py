"""
Controller metrics for the compliance operator.

Exposes scan, remediation and suite state as Prometheus counters and
gauges on an HTTPS scrape endpoint.
"""

from .metrics import (
    Metrics,
    ControllerMetrics,
    ComplianceState,
    HANDLER_PATH,
    CONTROLLER_METRICS_SERVICE_NAME,
    CONTROLLER_METRICS_PORT,
    METRICS_ADDR_LISTEN,
    METRIC_NAMESPACE,
)
from .impl import Impl, DefaultImpl
from .exporter import TLSSettings, create_scrape_app, secure_tls_context
from .exceptions import (
    MetricsError,
    MetricRegistrationError,
    DuplicateRegistrationError,
    ListenerFailure,
)

__all__ = [
    'Metrics',
    'ControllerMetrics',
    'ComplianceState',
    'HANDLER_PATH',
    'CONTROLLER_METRICS_SERVICE_NAME',
    'CONTROLLER_METRICS_PORT',
    'METRICS_ADDR_LISTEN',
    'METRIC_NAMESPACE',

    # Registry adapter
    'Impl',
    'DefaultImpl',

    # Scrape endpoint
    'TLSSettings',
    'create_scrape_app',
    'secure_tls_context',

    # Exceptions
    'MetricsError',
    'MetricRegistrationError',
    'DuplicateRegistrationError',
    'ListenerFailure',
]
