"""
Controller metrics for the compliance operator.

This module owns the fixed set of counters and gauges describing scan,
remediation and suite state, registers them through the registry adapter
and serves them over HTTPS for an external scraper.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Optional, Union

from prometheus_client import CollectorRegistry, Counter, Gauge
from prometheus_client.registry import Collector

from ...apis.v1alpha1 import (
    ComplianceRemediationStatus,
    ComplianceScanStatus,
    ComplianceScanStatusResult,
)
from ...config import (
    DEFAULT_HANDLER_PATH,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_METRIC_NAMESPACE,
    DEFAULT_METRICS_PORT,
    DEFAULT_SERVICE_NAME,
    MetricsConfig,
)
from .exceptions import MetricRegistrationError
from .exporter import TLSSettings, create_scrape_app
from .impl import DefaultImpl, Impl

METRIC_NAMESPACE = DEFAULT_METRIC_NAMESPACE

METRIC_NAME_COMPLIANCE_SCAN_STATUS = "compliance_scan_status_total"
METRIC_NAME_COMPLIANCE_SCAN_ERROR = "compliance_scan_error_total"
METRIC_NAME_COMPLIANCE_REMEDIATION_STATUS = "compliance_remediation_status_total"
METRIC_NAME_COMPLIANCE_STATE_GAUGE = "compliance_state"

METRIC_LABEL_SCAN_RESULT = "result"
METRIC_LABEL_SCAN_NAME = "name"
METRIC_LABEL_SUITE_NAME = "name"
METRIC_LABEL_SCAN_PHASE = "phase"
METRIC_LABEL_REMEDIATION_NAME = "name"
METRIC_LABEL_REMEDIATION_STATE = "state"

HANDLER_PATH = DEFAULT_HANDLER_PATH
CONTROLLER_METRICS_SERVICE_NAME = DEFAULT_SERVICE_NAME
CONTROLLER_METRICS_PORT = DEFAULT_METRICS_PORT
METRICS_ADDR_LISTEN = DEFAULT_LISTEN_ADDRESS


class ComplianceState(IntEnum):
    """Values of the compliance_state gauge."""
    COMPLIANT = 0
    NON_COMPLIANT = 1
    INCONSISTENT = 2
    ERROR = 3


_STATE_FOR_RESULT = {
    ComplianceScanStatusResult.COMPLIANT: ComplianceState.COMPLIANT,
    ComplianceScanStatusResult.NON_COMPLIANT: ComplianceState.NON_COMPLIANT,
    ComplianceScanStatusResult.INCONSISTENT: ComplianceState.INCONSISTENT,
    ComplianceScanStatusResult.ERROR: ComplianceState.ERROR,
}


def _label_value(value: Union[str, Enum]) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


@dataclass
class ControllerMetrics:
    """The instruments exported by the controllers."""
    compliance_scan_error: Counter
    compliance_scan_status: Counter
    compliance_remediation_status: Counter
    compliance_state_gauge: Gauge

    @classmethod
    def default(cls, namespace: str = METRIC_NAMESPACE) -> 'ControllerMetrics':
        """
        Create the instruments without registering them anywhere.

        Every instrument is bound to ``registry=None`` so construction has
        no effect on the process-wide registry.
        """
        logger = logging.getLogger("compliance_operator.metrics.defaults")
        logger.info("Initializing default controller metrics")

        logger.debug("Creating compliance_scan_error")
        compliance_scan_error = Counter(
            METRIC_NAME_COMPLIANCE_SCAN_ERROR,
            "A counter for the total number of errors for a particular scan",
            [METRIC_LABEL_SCAN_NAME],
            namespace=namespace,
            registry=None
        )

        logger.debug("Creating compliance_scan_status")
        compliance_scan_status = Counter(
            METRIC_NAME_COMPLIANCE_SCAN_STATUS,
            "A counter for the total number of updates to the status of a ComplianceScan",
            [
                METRIC_LABEL_SCAN_NAME,
                METRIC_LABEL_SCAN_PHASE,
                METRIC_LABEL_SCAN_RESULT,
            ],
            namespace=namespace,
            registry=None
        )

        logger.debug("Creating compliance_remediation_status")
        compliance_remediation_status = Counter(
            METRIC_NAME_COMPLIANCE_REMEDIATION_STATUS,
            "A counter for the total number of updates to the status of a ComplianceRemediation",
            [
                METRIC_LABEL_REMEDIATION_NAME,
                METRIC_LABEL_REMEDIATION_STATE,
            ],
            namespace=namespace,
            registry=None
        )

        logger.debug("Creating compliance_state")
        compliance_state_gauge = Gauge(
            METRIC_NAME_COMPLIANCE_STATE_GAUGE,
            "A gauge for the compliance state of a ComplianceSuite. "
            "Set to 0 when COMPLIANT, 1 when NON-COMPLIANT, 2 when INCONSISTENT, and 3 when ERROR",
            [METRIC_LABEL_SUITE_NAME],
            namespace=namespace,
            registry=None
        )

        logger.info("Default controller metrics initialization complete")
        return cls(
            compliance_scan_error=compliance_scan_error,
            compliance_scan_status=compliance_scan_status,
            compliance_remediation_status=compliance_remediation_status,
            compliance_state_gauge=compliance_state_gauge,
        )

    def collectors(self) -> Dict[str, Collector]:
        """Instruments keyed by metric name, in registration order."""
        return {
            METRIC_NAME_COMPLIANCE_SCAN_ERROR: self.compliance_scan_error,
            METRIC_NAME_COMPLIANCE_SCAN_STATUS: self.compliance_scan_status,
            METRIC_NAME_COMPLIANCE_REMEDIATION_STATUS: self.compliance_remediation_status,
            METRIC_NAME_COMPLIANCE_STATE_GAUGE: self.compliance_state_gauge,
        }


class Metrics:
    """Registers, updates and serves the controller metrics."""

    def __init__(self, impl: Impl, config: Optional[MetricsConfig] = None):
        self.impl = impl
        self.config = config or MetricsConfig()
        self.logger = logging.getLogger("compliance_operator.metrics")
        self.metrics = ControllerMetrics.default(self.config.namespace)

    @classmethod
    def new(
        cls,
        config: Optional[MetricsConfig] = None,
        registry: Optional[CollectorRegistry] = None
    ) -> 'Metrics':
        """Create metrics backed by the process-wide registry unless one is given."""
        config = config or MetricsConfig()
        return cls(DefaultImpl(registry, config.shutdown_grace_seconds), config)

    def register(self) -> None:
        """
        Register every instrument with the registry adapter.

        Stops at the first failure and raises it wrapped with the offending
        metric name. Must be called exactly once, before ``start``.
        """
        for name, collector in self.metrics.collectors().items():
            self.logger.info(f"Attempting to register metric name: {name}")
            try:
                self.impl.register(collector)
            except MetricRegistrationError as e:
                self.logger.error(f"Failed to register metric: {name}")
                raise type(e)(
                    message=f"register collector for {name} metric: {e.message}",
                    metric_name=name,
                    original_error=e
                ) from e
            except Exception as e:
                self.logger.error(f"Failed to register metric: {name}")
                raise MetricRegistrationError(
                    message=f"register collector for {name} metric: {e}",
                    metric_name=name,
                    original_error=e
                ) from e
            self.logger.info(f"Successfully registered metric: {name}")

    async def start(self, shutdown: asyncio.Event) -> None:
        """
        Serve the scrape endpoint over HTTPS until ``shutdown`` is set.

        Listener failures are logged and never raised: a metrics outage
        must not stop the operator.
        """
        self.logger.info("Starting to serve controller metrics")
        try:
            app = create_scrape_app(
                self.impl.registry,
                self.config.handler_path,
                self.config.service_name
            )
            tls = TLSSettings(cert_file=self.config.cert_file, key_file=self.config.key_file)
            await self.impl.serve(self.config.listen_address, app, tls, shutdown)
        except Exception as e:
            # unhandled on purpose, we don't want to exit the operator
            self.logger.error(f"Metrics service failed: {e}", exc_info=e)

    def inc_scan_status(
        self,
        name: str,
        phase: Union[str, Enum],
        result: Union[str, Enum],
        error_message: str = ""
    ) -> None:
        """Increment the scan status counter, and the scan error counter if necessary."""
        self.metrics.compliance_scan_status.labels(
            **{
                METRIC_LABEL_SCAN_NAME: name,
                METRIC_LABEL_SCAN_PHASE: _label_value(phase),
                METRIC_LABEL_SCAN_RESULT: _label_value(result),
            }
        ).inc()
        if error_message:
            self.metrics.compliance_scan_error.labels(
                **{METRIC_LABEL_SCAN_NAME: name}
            ).inc()

    def inc_compliance_scan_status(self, name: str, status: ComplianceScanStatus) -> None:
        self.inc_scan_status(name, status.phase, status.result, status.error_message)

    def inc_remediation_status(self, name: str, application_state: Union[str, Enum]) -> None:
        """Increment the ComplianceRemediation status counter."""
        self.metrics.compliance_remediation_status.labels(
            **{
                METRIC_LABEL_REMEDIATION_NAME: name,
                METRIC_LABEL_REMEDIATION_STATE: _label_value(application_state),
            }
        ).inc()

    def inc_compliance_remediation_status(self, name: str, status: ComplianceRemediationStatus) -> None:
        self.inc_remediation_status(name, status.application_state)

    def set_compliance_state(self, name: str, state: Union[ComplianceState, int]) -> None:
        """Set the compliance_state gauge of a suite; raises ValueError for unknown states."""
        state = ComplianceState(state)
        self.metrics.compliance_state_gauge.labels(
            **{METRIC_LABEL_SUITE_NAME: name}
        ).set(int(state))

    def set_compliance_state_error(self, name: str) -> None:
        """Set the compliance_state gauge to 3."""
        self.set_compliance_state(name, ComplianceState.ERROR)

    def set_compliance_state_inconsistent(self, name: str) -> None:
        """Set the compliance_state gauge to 2."""
        self.set_compliance_state(name, ComplianceState.INCONSISTENT)

    def set_compliance_state_out_of_compliance(self, name: str) -> None:
        """Set the compliance_state gauge to 1."""
        self.set_compliance_state(name, ComplianceState.NON_COMPLIANT)

    def set_compliance_state_in_compliance(self, name: str) -> None:
        """Set the compliance_state gauge to 0."""
        self.set_compliance_state(name, ComplianceState.COMPLIANT)

    def set_compliance_state_for_result(
        self,
        name: str,
        result: Union[ComplianceScanStatusResult, str]
    ) -> bool:
        """
        Set the gauge from a suite's aggregate result.

        Results without a gauge value (NOT-AVAILABLE, NOT-APPLICABLE) leave
        the gauge untouched. Returns whether the gauge was set.
        """
        try:
            result = ComplianceScanStatusResult(result)
        except ValueError:
            self.logger.debug(f"No compliance state for result {result!r} of suite {name}")
            return False
        state = _STATE_FOR_RESULT.get(result)
        if state is None:
            return False
        self.set_compliance_state(name, state)
        return True
