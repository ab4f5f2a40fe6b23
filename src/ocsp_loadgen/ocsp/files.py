from __future__ import annotations

from pathlib import Path

from cryptography import x509

from ocsp_loadgen.errors import IssuerParseError

_PEM_MARKER = b"-----BEGIN"


def load_issuer(path: Path) -> x509.Certificate:
    try:
        data = path.read_bytes()
    except OSError as exc:
        msg = f"cannot read issuer certificate {path}: {exc}"
        raise IssuerParseError(msg) from exc
    try:
        if _PEM_MARKER in data:
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(data)
    except ValueError as exc:
        msg = f"cannot parse issuer certificate {path}: {exc}"
        raise IssuerParseError(msg) from exc


def load_serials(path: Path) -> list[str]:
    serials: list[str] = []
    for line in path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            serials.append(line)
    return serials
