"""
Command Line Interface for the compliance operator.
"""

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import LogFormat, LogLevel, MetricsConfig, OperatorConfig
from ..controller import add_to_manager
from ..controller.manager import Manager
from ..controller.metrics import Metrics, MetricRegistrationError
from ..exceptions import ManagerError
from ..log import setup_logging
from ..version import get_build_info

app = typer.Typer(
    name="compliance-operator",
    help="Compliance operator control plane",
    add_completion=False
)
console = Console()


@app.command()
def version():
    """Show version information."""
    info = get_build_info()

    table = Table(title="Compliance Operator")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Version", info["version"])
    table.add_row("Python", info["python_version"])
    table.add_row("Python compatible", "yes" if info["python_compatible"] else "no")
    console.print(table)


@app.command()
def run(
    log_level: Optional[LogLevel] = typer.Option(None, case_sensitive=False, help="Log level (defaults to $LOG_LEVEL or INFO)"),
    log_format: Optional[LogFormat] = typer.Option(None, case_sensitive=False, help="Log format (defaults to $LOG_FORMAT or text)"),
    metrics_address: Optional[str] = typer.Option(None, help="Metrics listen address, [host]:port"),
    metrics_cert: Optional[str] = typer.Option(None, help="Metrics serving certificate"),
    metrics_key: Optional[str] = typer.Option(None, help="Metrics serving private key"),
    shutdown_timeout: float = typer.Option(30.0, help="Seconds to wait for runnables on shutdown")
):
    """Run the operator until SIGINT or SIGTERM."""
    overrides = {
        'listen_address': metrics_address,
        'cert_file': metrics_cert,
        'key_file': metrics_key,
    }
    try:
        config = OperatorConfig.from_env()
        metrics_config = MetricsConfig(**{
            **config.metrics.model_dump(),
            **{k: v for k, v in overrides.items() if v is not None}
        })
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(2)

    setup_logging(log_level or config.log_level, log_format or config.log_format)
    logger = logging.getLogger("compliance_operator.cli")

    metrics = Metrics.new(metrics_config)
    try:
        metrics.register()
    except MetricRegistrationError as e:
        logger.error(f"Failed to register controller metrics: {e}")
        raise typer.Exit(1)

    manager = Manager(graceful_shutdown_timeout=shutdown_timeout)
    try:
        add_to_manager(manager, metrics)
        asyncio.run(manager.start())
    except ManagerError as e:
        logger.error(f"Manager exited with error: {e}")
        raise typer.Exit(1)


def main():
    app()


if __name__ == "__main__":
    main()
