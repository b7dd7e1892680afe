"""
Unit tests for wiring the metrics reporter and controllers into the manager.
"""

import asyncio

import pytest

from compliance_operator import controller
from compliance_operator.controller import add_to_manager
from compliance_operator.controller.manager import Manager
from compliance_operator.controller.metrics import Metrics


@pytest.fixture
def manager():
    return Manager(graceful_shutdown_timeout=1.0, handle_signals=False)


@pytest.fixture
def reporter(fake_impl):
    return Metrics(fake_impl)


class TestAddToManager:

    def test_metrics_added_before_controllers(self, monkeypatch, manager, reporter):
        seen = []

        def add_scan_controller(mgr, metrics):
            seen.append(("scan", list(mgr.get_status()), metrics))

        def add_remediation_controller(mgr, metrics):
            seen.append(("remediation", list(mgr.get_status()), metrics))

        monkeypatch.setattr(controller, "ADD_TO_MANAGER_FUNCS", [add_scan_controller, add_remediation_controller])

        add_to_manager(manager, reporter)

        assert [entry[0] for entry in seen] == ["scan", "remediation"]
        assert all(entry[1] == ["metrics"] for entry in seen)
        assert all(entry[2] is reporter for entry in seen)

    def test_controller_error_propagates(self, monkeypatch, manager, reporter):
        calls = []

        def broken(mgr, metrics):
            raise RuntimeError("no scheme")

        def never_called(mgr, metrics):
            calls.append(metrics)

        monkeypatch.setattr(controller, "ADD_TO_MANAGER_FUNCS", [broken, never_called])

        with pytest.raises(RuntimeError, match="no scheme"):
            add_to_manager(manager, reporter)
        assert calls == []

    @pytest.mark.asyncio
    async def test_controllers_share_the_metrics_handle(self, monkeypatch, manager, fake_impl, reporter):
        class ScanController:
            def __init__(self, metrics):
                self.metrics = metrics

            async def start(self, shutdown):
                self.metrics.inc_scan_status("scan-a", "DONE", "COMPLIANT")
                await shutdown.wait()

        controllers = []

        def add_scan_controller(mgr, metrics):
            scan_controller = ScanController(metrics)
            controllers.append(scan_controller)
            mgr.add(scan_controller, name="scan-controller")

        monkeypatch.setattr(controller, "ADD_TO_MANAGER_FUNCS", [add_scan_controller])
        reporter.register()
        add_to_manager(manager, reporter)

        task = asyncio.create_task(manager.start())
        for _ in range(100):
            if fake_impl.serve_calls:
                break
            await asyncio.sleep(0.01)
        manager.stop()
        await asyncio.wait_for(task, timeout=5)

        assert fake_impl.serve_calls
        assert fake_impl.registry.get_sample_value(
            "compliance_operator_compliance_scan_status_total",
            {"name": "scan-a", "phase": "DONE", "result": "COMPLIANT"}
        ) == 1
