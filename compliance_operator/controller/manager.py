"""
Runnable manager for the compliance operator.

This module provides the lifecycle framework that long-running components
are handed to. The manager starts every added runnable as its own task,
signals them to stop through a shared shutdown event and waits for them
to finish within a grace period.

Author: Compliance Operator
Version: 1.0.0
"""

import asyncio
import logging
import signal
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from ..exceptions import ManagerError


@runtime_checkable
class Runnable(Protocol):
    """A long-running component started by the manager."""

    async def start(self, shutdown: asyncio.Event) -> None:
        """Run until ``shutdown`` is set."""
        ...


class RunnableStatus(Enum):
    """Status of a managed runnable."""
    PENDING = "pending"
    RUNNING = "running"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass
class RunnableInfo:
    """Bookkeeping for a runnable added to the manager."""
    name: str
    runnable: Runnable
    status: RunnableStatus = RunnableStatus.PENDING
    task: Optional[asyncio.Task] = None
    error_message: Optional[str] = None
    startup_time: Optional[datetime] = None
    shutdown_time: Optional[datetime] = None


class Manager:
    """Starts runnables and stops them together."""

    def __init__(
        self,
        graceful_shutdown_timeout: float = 30.0,
        handle_signals: bool = True
    ):
        self.graceful_shutdown_timeout = graceful_shutdown_timeout
        self.handle_signals = handle_signals
        self._runnables: List[RunnableInfo] = []
        self._shutdown_event = asyncio.Event()
        self._started = False
        self._error: Optional[BaseException] = None
        self._logger = logging.getLogger("compliance_operator.manager")

    def add(self, runnable: Runnable, name: Optional[str] = None) -> None:
        """Add a runnable; it is started when the manager starts."""
        if self._started:
            raise ManagerError("Cannot add runnables to a manager that has already started")
        if not isinstance(runnable, Runnable):
            raise ManagerError(f"{runnable!r} does not implement start(shutdown)")
        if any(info.runnable is runnable for info in self._runnables):
            raise ManagerError(f"Runnable {runnable!r} is already added")

        name = name or getattr(runnable, 'name', None) or type(runnable).__name__
        self._runnables.append(RunnableInfo(name=name, runnable=runnable))
        self._logger.info(f"Added runnable: {name}")

    async def start(self) -> None:
        """
        Run every added runnable until shutdown is requested.

        Shutdown is requested by ``stop()``, by SIGINT/SIGTERM when signal
        handling is enabled, or by a runnable raising. The first runnable
        error is raised as ``ManagerError`` once all runnables have stopped.
        """
        if self._started:
            raise ManagerError("Manager is already started")
        self._started = True

        loop = asyncio.get_running_loop()
        installed = self._install_signal_handlers(loop) if self.handle_signals else []

        self._logger.info(f"Starting {len(self._runnables)} runnables")
        for info in self._runnables:
            info.task = asyncio.create_task(self._run(info), name=info.name)

        try:
            await self._shutdown_event.wait()
            self._logger.info("Stopping runnables")
            await self._wait_for_runnables()
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)

        if self._error is not None:
            raise ManagerError(
                f"Runnable failed: {self._error}",
                details={'runnables': self.get_status()}
            ) from self._error
        self._logger.info("All runnables stopped")

    def stop(self) -> None:
        """Request shutdown of all runnables."""
        if not self._shutdown_event.is_set():
            self._logger.info("Shutdown requested")
            self._shutdown_event.set()

    @property
    def shutdown_event(self) -> asyncio.Event:
        return self._shutdown_event

    def get_status(self) -> Dict[str, Dict[str, Any]]:
        return {
            info.name: {
                'status': info.status.value,
                'error_message': info.error_message,
                'startup_time': info.startup_time.isoformat() if info.startup_time else None,
                'shutdown_time': info.shutdown_time.isoformat() if info.shutdown_time else None,
            }
            for info in self._runnables
        }

    async def _run(self, info: RunnableInfo) -> None:
        info.status = RunnableStatus.RUNNING
        info.startup_time = datetime.now(timezone.utc)
        try:
            await info.runnable.start(self._shutdown_event)
            info.status = RunnableStatus.STOPPED
            self._logger.info(f"Runnable {info.name} returned")
        except asyncio.CancelledError:
            info.status = RunnableStatus.STOPPED
            raise
        except Exception as e:
            info.status = RunnableStatus.ERROR
            info.error_message = str(e)
            self._logger.error(f"Runnable {info.name} failed: {e}", exc_info=e)
            if self._error is None:
                self._error = e
            self.stop()
        finally:
            info.shutdown_time = datetime.now(timezone.utc)

    async def _wait_for_runnables(self) -> None:
        tasks = [info.task for info in self._runnables if info.task is not None]
        if not tasks:
            return

        _, pending = await asyncio.wait(tasks, timeout=self.graceful_shutdown_timeout)
        if pending:
            self._logger.warning(
                f"{len(pending)} runnables did not stop within "
                f"{self.graceful_shutdown_timeout}s, cancelling"
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> List[signal.Signals]:
        installed = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except (NotImplementedError, RuntimeError):
                self._logger.debug(f"Signal handler for {sig.name} not supported here")
                continue
            installed.append(sig)
        return installed
