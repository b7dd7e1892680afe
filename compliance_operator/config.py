"""
Configuration management for the compliance operator.

This module provides the configuration models for the metrics endpoint
and the operator process, including environment variable loading and
validation.
"""

import os
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigurationError

DEFAULT_METRIC_NAMESPACE = "compliance_operator"
DEFAULT_HANDLER_PATH = "/metrics-co"
DEFAULT_SERVICE_NAME = "metrics-co"
DEFAULT_METRICS_PORT = 8585
DEFAULT_LISTEN_ADDRESS = f":{DEFAULT_METRICS_PORT}"
DEFAULT_CERT_FILE = "/var/run/secrets/serving-cert/tls.crt"
DEFAULT_KEY_FILE = "/var/run/secrets/serving-cert/tls.key"


class LogLevel(str, Enum):
    """Logging levels for the operator."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""
    TEXT = "text"
    JSON = "json"


def parse_listen_address(address: str) -> Tuple[str, int]:
    """
    Split a ``[host]:port`` listen address.

    An empty host means all interfaces, so ``":8585"`` becomes
    ``("0.0.0.0", 8585)``.
    """
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ConfigurationError(
            f"Invalid listen address '{address}': expected [host]:port",
            details={'address': address}
        )
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigurationError(
            f"Invalid port in listen address '{address}'",
            details={'address': address}
        )
    if not 0 < port_number < 65536:
        raise ConfigurationError(
            f"Port out of range in listen address '{address}'",
            details={'address': address}
        )
    host = host.strip("[]") or "0.0.0.0"
    return host, port_number


class MetricsConfig(BaseModel):
    """Configuration for the controller metrics endpoint."""

    namespace: str = Field(
        default=DEFAULT_METRIC_NAMESPACE,
        description="Prefix applied to every controller metric name"
    )

    handler_path: str = Field(
        default=DEFAULT_HANDLER_PATH,
        description="Path the scrape handler is bound to"
    )

    listen_address: str = Field(
        default=DEFAULT_LISTEN_ADDRESS,
        description="Address the HTTPS listener binds, as [host]:port"
    )

    service_name: str = Field(
        default=DEFAULT_SERVICE_NAME,
        description="Name of the service fronting the metrics endpoint"
    )

    cert_file: str = Field(
        default=DEFAULT_CERT_FILE,
        description="Serving certificate, read when the listener starts"
    )

    key_file: str = Field(
        default=DEFAULT_KEY_FILE,
        description="Serving private key, read when the listener starts"
    )

    shutdown_grace_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Time allowed for in-flight scrapes on shutdown"
    )

    @field_validator('handler_path')
    @classmethod
    def validate_handler_path(cls, v):
        if not v.startswith('/'):
            raise ValueError("handler_path must start with '/'")
        return v

    @field_validator('listen_address')
    @classmethod
    def validate_listen_address(cls, v):
        try:
            parse_listen_address(v)
        except ConfigurationError as e:
            raise ValueError(e.message)
        return v

    @property
    def host(self) -> str:
        return parse_listen_address(self.listen_address)[0]

    @property
    def port(self) -> int:
        return parse_listen_address(self.listen_address)[1]

    @classmethod
    def from_env(cls) -> 'MetricsConfig':
        """
        Create configuration from environment variables.

        Example:
            os.environ['METRICS_CERT_FILE'] = '/tmp/tls.crt'
            config = MetricsConfig.from_env()
        """
        return cls(
            handler_path=os.getenv('METRICS_HANDLER_PATH', DEFAULT_HANDLER_PATH),
            listen_address=os.getenv('METRICS_LISTEN_ADDRESS', DEFAULT_LISTEN_ADDRESS),
            cert_file=os.getenv('METRICS_CERT_FILE', DEFAULT_CERT_FILE),
            key_file=os.getenv('METRICS_KEY_FILE', DEFAULT_KEY_FILE),
        )


class OperatorConfig(BaseModel):
    """Top-level operator process configuration."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Root log level")
    log_format: LogFormat = Field(default=LogFormat.TEXT, description="Log output format")
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @classmethod
    def from_env(cls) -> 'OperatorConfig':
        return cls(
            log_level=LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper()),
            log_format=LogFormat(os.getenv('LOG_FORMAT', 'text').lower()),
            metrics=MetricsConfig.from_env(),
        )
