"""
Scrape endpoint and TLS settings for the controller metrics.

The scrape endpoint is a minimal FastAPI application exposing the text
exposition format of a prometheus_client registry at a single path.
"""

import ssl
from dataclasses import dataclass, field
from typing import List

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from ...config import DEFAULT_SERVICE_NAME

# ECDHE key exchange with AEAD ciphers only; TLS 1.3 suites are not affected.
SECURE_CIPHERS = "ECDHE+AESGCM:ECDHE+CHACHA20"


@dataclass
class TLSSettings:
    """TLS parameters for the metrics listener."""
    cert_file: str
    key_file: str
    minimum_version: ssl.TLSVersion = ssl.TLSVersion.TLSv1_2
    alpn_protocols: List[str] = field(default_factory=lambda: ["http/1.1"])
    ciphers: str = SECURE_CIPHERS


def secure_tls_context(context: ssl.SSLContext, settings: TLSSettings) -> ssl.SSLContext:
    """
    Harden a server context in place.

    Raises the minimum protocol version to the configured floor, restricts
    ALPN to the configured protocols and limits the TLS 1.2 cipher list.
    """
    if context.minimum_version < settings.minimum_version:
        context.minimum_version = settings.minimum_version
    context.set_alpn_protocols(settings.alpn_protocols)
    context.set_ciphers(settings.ciphers)
    return context


def create_scrape_app(
    registry: CollectorRegistry,
    handler_path: str,
    service_name: str = DEFAULT_SERVICE_NAME
) -> FastAPI:
    """Create the ASGI app serving ``registry`` at ``handler_path``, titled after the metrics service."""
    app = FastAPI(
        title=service_name,
        docs_url=None,
        redoc_url=None,
        openapi_url=None
    )

    def scrape() -> Response:
        return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    app.add_api_route(handler_path, scrape, methods=["GET"], include_in_schema=False)
    return app
