"""
Compliance Metrics Example

This example wires a toy scan controller into the manager next to the
metrics reporter. The controller reports a scan moving through its
phases and the suite result derived from it.

Run with a certificate pair, for example:

    METRICS_CERT_FILE=tls.crt METRICS_KEY_FILE=tls.key \
        python examples/compliance_metrics_example.py
"""

import asyncio
import logging

from compliance_operator import ADD_TO_MANAGER_FUNCS, Manager, Metrics, add_to_manager
from compliance_operator.apis.v1alpha1 import (
    ComplianceScanStatus,
    ComplianceScanStatusPhase,
    ComplianceScanStatusResult,
)
from compliance_operator.config import MetricsConfig
from compliance_operator.log import setup_logging

logger = logging.getLogger(__name__)


class ToyScanController:
    """Walks one scan through its phases every few seconds."""

    name = "toy-scan-controller"

    def __init__(self, metrics: Metrics, scan_name: str = "ocp4-cis"):
        self.metrics = metrics
        self.scan_name = scan_name

    async def start(self, shutdown: asyncio.Event) -> None:
        phases = [
            ComplianceScanStatusPhase.PENDING,
            ComplianceScanStatusPhase.LAUNCHING,
            ComplianceScanStatusPhase.RUNNING,
            ComplianceScanStatusPhase.AGGREGATING,
            ComplianceScanStatusPhase.DONE,
        ]
        while not shutdown.is_set():
            for phase in phases:
                result = (
                    ComplianceScanStatusResult.NON_COMPLIANT
                    if phase == ComplianceScanStatusPhase.DONE
                    else ComplianceScanStatusResult.NOT_AVAILABLE
                )
                status = ComplianceScanStatus(phase=phase, result=result)
                self.metrics.inc_compliance_scan_status(self.scan_name, status)
                logger.info(f"Scan {self.scan_name} is {phase.value}")

            self.metrics.set_compliance_state_for_result("ocp4-cis-suite", ComplianceScanStatusResult.NON_COMPLIANT)
            try:
                await asyncio.wait_for(shutdown.wait(), timeout=5)
            except asyncio.TimeoutError:
                continue


def add_toy_scan_controller(manager: Manager, metrics: Metrics) -> None:
    manager.add(ToyScanController(metrics))


async def main():
    setup_logging("INFO")

    metrics = Metrics.new(MetricsConfig.from_env())
    metrics.register()

    ADD_TO_MANAGER_FUNCS.append(add_toy_scan_controller)

    manager = Manager()
    add_to_manager(manager, metrics)
    await manager.start()


if __name__ == "__main__":
    asyncio.run(main())
