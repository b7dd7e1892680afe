"""
Registry adapter for the controller metrics.

``Impl`` is the seam between the metric set and the process-wide
prometheus_client registry. Tests substitute either an ``Impl`` backed by
an isolated ``CollectorRegistry`` or a fake implementing the same protocol.
"""

import asyncio
import logging
from typing import Optional, Protocol

import uvicorn
from prometheus_client import REGISTRY, CollectorRegistry
from prometheus_client.registry import Collector

from ...config import parse_listen_address
from .exceptions import DuplicateRegistrationError, ListenerFailure
from .exporter import TLSSettings, secure_tls_context


def collector_names(collector: Collector) -> str:
    """Human readable names of the metric families a collector exposes."""
    describe = getattr(collector, 'describe', None)
    if describe is None:
        return repr(collector)
    return ",".join(family.name for family in describe())


class Impl(Protocol):
    """Operations the metrics reporter needs from its environment."""

    registry: CollectorRegistry

    def register(self, collector: Collector) -> None:
        ...

    async def serve(
        self,
        address: str,
        app,
        tls: TLSSettings,
        shutdown: asyncio.Event
    ) -> None:
        ...


class DefaultImpl:
    """Registers into a prometheus_client registry and serves with uvicorn."""

    def __init__(
        self,
        registry: Optional[CollectorRegistry] = None,
        shutdown_grace_seconds: float = 5.0
    ):
        self.registry = registry if registry is not None else REGISTRY
        self.shutdown_grace_seconds = shutdown_grace_seconds
        self.logger = logging.getLogger("compliance_operator.metrics.impl")

    def register(self, collector: Collector) -> None:
        names = collector_names(collector)
        self.logger.info(f"Attempting to register metric: {names}")
        try:
            self.registry.register(collector)
        except ValueError as e:
            # prometheus_client reports any name clash as a ValueError
            self.logger.error(f"Failed to register metric: {names}, error: {e}")
            raise DuplicateRegistrationError(
                message=f"Duplicate registration of {names}: {e}",
                metric_name=names,
                original_error=e
            ) from e
        self.logger.info(f"Successfully registered metric: {names}")

    async def serve(
        self,
        address: str,
        app,
        tls: TLSSettings,
        shutdown: asyncio.Event
    ) -> None:
        """
        Serve ``app`` over HTTPS until ``shutdown`` is set.

        Blocks for the lifetime of the listener and never restarts it.
        Raises ``ListenerFailure`` when the certificate cannot be loaded
        or the address cannot be bound.
        """
        host, port = parse_listen_address(address)
        config = uvicorn.Config(
            app,
            host=host,
            port=port,
            ssl_certfile=tls.cert_file,
            ssl_keyfile=tls.key_file,
            http="h11",
            lifespan="off",
            log_config=None,
            timeout_graceful_shutdown=self.shutdown_grace_seconds
        )

        self.logger.info(f"Starting HTTPS server on {address}")
        try:
            config.load()
        except OSError as e:
            raise ListenerFailure(
                message=f"Failed to load serving certificate {tls.cert_file}: {e}",
                address=address,
                original_error=e
            ) from e
        secure_tls_context(config.ssl, tls)

        server = uvicorn.Server(config)
        watcher = asyncio.create_task(
            self._exit_on_shutdown(server, shutdown), name="metrics-shutdown-watcher"
        )
        try:
            await server.serve()
        except SystemExit as e:
            # uvicorn exits the process when it cannot bind
            raise ListenerFailure(
                message=f"HTTPS server on {address} failed to start",
                address=address,
                original_error=e
            ) from e
        except asyncio.CancelledError:
            if server.started:
                await server.shutdown()
            raise
        finally:
            watcher.cancel()
            await asyncio.gather(watcher, return_exceptions=True)

        self.logger.info(f"HTTPS server on {address} stopped")

    @staticmethod
    async def _exit_on_shutdown(server: uvicorn.Server, shutdown: asyncio.Event) -> None:
        await shutdown.wait()
        server.should_exit = True
