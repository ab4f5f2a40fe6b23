from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from ocsp_loadgen.metrics import LatencySample
from ocsp_loadgen.ocsp import RequestPool, build_pool

SERIALS = [
    "00000000000000000000000000000001",
    "ff00000000000000000000000000000000a1",
    "0123456789abcdef0123456789abcdef",
]


class MemoryRecorder:
    def __init__(self) -> None:
        self.samples: list[LatencySample] = []
        self._lock = threading.Lock()

    def add(self, sample: LatencySample) -> None:
        with self._lock:
            self.samples.append(sample)


def make_ca() -> tuple[ec.EllipticCurvePrivateKey, x509.Certificate]:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "load test issuer")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    return key, cert


@pytest.fixture(scope="session")
def issuer_pair() -> tuple[ec.EllipticCurvePrivateKey, x509.Certificate]:
    return make_ca()


@pytest.fixture(scope="session")
def issuer(issuer_pair: tuple[ec.EllipticCurvePrivateKey, x509.Certificate]) -> x509.Certificate:
    return issuer_pair[1]


@pytest.fixture
def pool(issuer: x509.Certificate) -> RequestPool:
    return build_pool(SERIALS, issuer)


@pytest.fixture
def recorder() -> MemoryRecorder:
    return MemoryRecorder()
