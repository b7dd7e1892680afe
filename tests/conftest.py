"""
Shared fixtures for the compliance operator tests.
"""

import asyncio
import datetime
import ipaddress
import socket
from typing import List, Optional

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID
from prometheus_client import CollectorRegistry

from compliance_operator.config import MetricsConfig
from compliance_operator.controller.metrics import DuplicateRegistrationError, Metrics


class FakeImpl:
    """In-memory registry adapter recording every call."""

    def __init__(self, fail_on: Optional[int] = None, serve_error: Optional[Exception] = None):
        self.registry = CollectorRegistry()
        self.registered: List[object] = []
        self.fail_on = fail_on
        self.serve_error = serve_error
        self.serve_calls = []

    def register(self, collector) -> None:
        self.registered.append(collector)
        if self.fail_on is not None and len(self.registered) == self.fail_on:
            raise DuplicateRegistrationError("duplicate collector")
        self.registry.register(collector)

    async def serve(self, address, app, tls, shutdown: asyncio.Event) -> None:
        self.serve_calls.append((address, app, tls))
        if self.serve_error is not None:
            raise self.serve_error
        await shutdown.wait()


@pytest.fixture
def registry():
    """An isolated collector registry."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    """Registered metrics backed by an isolated registry."""
    m = Metrics.new(registry=registry)
    m.register()
    return m


@pytest.fixture
def fake_impl():
    return FakeImpl()


@pytest.fixture
def fake_impl_factory():
    """Build fake adapters with failure injection."""
    return FakeImpl


@pytest.fixture
def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def self_signed_cert(tmp_path):
    """Write a self-signed certificate for 127.0.0.1 and return (cert, key) paths."""
    key = ec.generate_private_key(ec.SECP256R1())
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "metrics-co")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(minutes=5))
        .not_valid_after(now + datetime.timedelta(days=1))
        .add_extension(
            x509.SubjectAlternativeName([
                x509.DNSName("localhost"),
                x509.IPAddress(ipaddress.ip_address("127.0.0.1")),
            ]),
            critical=False,
        )
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )

    cert_path = tmp_path / "tls.crt"
    key_path = tmp_path / "tls.key"
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    key_path.write_bytes(key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ))
    return str(cert_path), str(key_path)


@pytest.fixture
def missing_cert_config(tmp_path):
    return MetricsConfig(
        listen_address="127.0.0.1:18585",
        cert_file=str(tmp_path / "missing" / "tls.crt"),
        key_file=str(tmp_path / "missing" / "tls.key"),
    )
