"""
Unit tests for the runnable manager.
"""

import asyncio

import pytest

from compliance_operator.controller.manager import Manager, RunnableStatus
from compliance_operator.exceptions import ManagerError


class WaitingRunnable:
    """Runs until shutdown."""

    def __init__(self):
        self.started = asyncio.Event()
        self.stopped = False

    async def start(self, shutdown: asyncio.Event) -> None:
        self.started.set()
        await shutdown.wait()
        self.stopped = True


class FailingRunnable:

    async def start(self, shutdown: asyncio.Event) -> None:
        raise RuntimeError("controller crashed")


class StubbornRunnable:
    """Ignores shutdown."""

    def __init__(self):
        self.cancelled = False

    async def start(self, shutdown: asyncio.Event) -> None:
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            self.cancelled = True
            raise


@pytest.fixture
def manager():
    return Manager(graceful_shutdown_timeout=1.0, handle_signals=False)


class TestManager:
    """Test Manager lifecycle."""

    @pytest.mark.asyncio
    async def test_stop_stops_runnables(self, manager):
        first, second = WaitingRunnable(), WaitingRunnable()
        manager.add(first, name="first")
        manager.add(second, name="second")

        task = asyncio.create_task(manager.start())
        await asyncio.wait_for(first.started.wait(), timeout=5)
        await asyncio.wait_for(second.started.wait(), timeout=5)
        manager.stop()
        await asyncio.wait_for(task, timeout=5)

        assert first.stopped and second.stopped
        status = manager.get_status()
        assert status["first"]["status"] == RunnableStatus.STOPPED.value
        assert status["second"]["status"] == RunnableStatus.STOPPED.value

    @pytest.mark.asyncio
    async def test_runnable_error_stops_manager(self, manager):
        waiting = WaitingRunnable()
        manager.add(waiting, name="waiting")
        manager.add(FailingRunnable(), name="failing")

        with pytest.raises(ManagerError) as exc_info:
            await asyncio.wait_for(manager.start(), timeout=5)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert waiting.stopped
        assert manager.get_status()["failing"]["status"] == RunnableStatus.ERROR.value
        assert manager.get_status()["failing"]["error_message"] == "controller crashed"

    @pytest.mark.asyncio
    async def test_runnable_returning_early_keeps_manager_running(self, manager):
        class Quick:
            async def start(self, shutdown):
                return None

        waiting = WaitingRunnable()
        manager.add(Quick(), name="quick")
        manager.add(waiting, name="waiting")

        task = asyncio.create_task(manager.start())
        await asyncio.wait_for(waiting.started.wait(), timeout=5)
        await asyncio.sleep(0.05)
        assert not task.done()

        manager.stop()
        await asyncio.wait_for(task, timeout=5)

    @pytest.mark.asyncio
    async def test_stubborn_runnable_is_cancelled(self):
        manager = Manager(graceful_shutdown_timeout=0.1, handle_signals=False)
        stubborn = StubbornRunnable()
        manager.add(stubborn)

        manager.stop()
        await asyncio.wait_for(manager.start(), timeout=5)

        assert stubborn.cancelled

    @pytest.mark.asyncio
    async def test_cannot_start_twice(self, manager):
        manager.stop()
        await manager.start()

        with pytest.raises(ManagerError):
            await manager.start()

    @pytest.mark.asyncio
    async def test_cannot_add_after_start(self, manager):
        manager.stop()
        await manager.start()

        with pytest.raises(ManagerError):
            manager.add(WaitingRunnable())

    def test_rejects_duplicates_and_non_runnables(self, manager):
        runnable = WaitingRunnable()
        manager.add(runnable)

        with pytest.raises(ManagerError):
            manager.add(runnable)
        with pytest.raises(ManagerError):
            manager.add(object())

    def test_default_runnable_name(self, manager):
        manager.add(WaitingRunnable())
        assert "WaitingRunnable" in manager.get_status()
