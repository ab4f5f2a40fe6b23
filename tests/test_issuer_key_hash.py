from __future__ import annotations

from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from ocsp_loadgen.errors import IssuerParseError
from ocsp_loadgen.ocsp import hash_issuer_key, key_hash_from_spki, load_issuer
from ocsp_loadgen.ocsp.der import right_align


def test_matches_subject_key_identifier(issuer: x509.Certificate) -> None:
    ski = x509.SubjectKeyIdentifier.from_public_key(issuer.public_key())
    key_hash = hash_issuer_key(issuer)
    assert len(key_hash) == 20
    assert key_hash == ski.digest


def test_spki_garbage_is_rejected() -> None:
    with pytest.raises(IssuerParseError):
        key_hash_from_spki(b"\x30\x05\x02\x01")


def test_spki_without_bit_string_is_rejected() -> None:
    # SEQUENCE { SEQUENCE {}, INTEGER 1 }
    with pytest.raises(IssuerParseError):
        key_hash_from_spki(bytes.fromhex("30053000020101"))


def test_right_align_drops_unused_bits() -> None:
    assert right_align(bytes([4, 0xAB, 0xC0])) == bytes([0x0A, 0xBC])
    assert right_align(bytes([0, 0xAB, 0xCD])) == bytes([0xAB, 0xCD])


def test_load_issuer_pem_and_der(tmp_path: Path, issuer: x509.Certificate) -> None:
    pem = tmp_path / "issuer.pem"
    pem.write_bytes(issuer.public_bytes(serialization.Encoding.PEM))
    der = tmp_path / "issuer.der"
    der.write_bytes(issuer.public_bytes(serialization.Encoding.DER))
    assert load_issuer(pem) == issuer
    assert load_issuer(der) == issuer


def test_load_issuer_failures(tmp_path: Path) -> None:
    with pytest.raises(IssuerParseError):
        load_issuer(tmp_path / "missing.pem")
    junk = tmp_path / "junk.pem"
    junk.write_bytes(b"-----BEGIN CERTIFICATE-----\nnope\n-----END CERTIFICATE-----\n")
    with pytest.raises(IssuerParseError):
        load_issuer(junk)
