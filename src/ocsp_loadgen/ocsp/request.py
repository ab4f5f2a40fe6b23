from __future__ import annotations

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization

from ocsp_loadgen.errors import EncodingError, IssuerParseError
from ocsp_loadgen.ocsp import der

SHA1_OID = "1.3.14.3.2.26"
KEY_HASH_SIZE = 20

_SHA1_ALGORITHM = der.sequence(der.object_identifier(SHA1_OID), der.null())


def key_hash_from_spki(spki: bytes) -> bytes:
    """SHA-1 over the right-aligned subjectPublicKey bits of a DER SPKI."""
    try:
        body, end = der.expect(spki, der.TAG_SEQUENCE)
        _, after_algorithm = der.expect(body, der.TAG_SEQUENCE)
        bits, _ = der.expect(body, der.TAG_BIT_STRING, after_algorithm)
        key = der.right_align(bits)
    except der.DERError as exc:
        msg = f"cannot parse issuer public key info: {exc}"
        raise IssuerParseError(msg) from exc
    digest = hashes.Hash(hashes.SHA1())
    digest.update(key)
    return digest.finalize()


def hash_issuer_key(issuer: x509.Certificate) -> bytes:
    try:
        spki = issuer.public_key().public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except (ValueError, UnsupportedAlgorithm) as exc:
        msg = f"cannot read issuer public key: {exc}"
        raise IssuerParseError(msg) from exc
    return key_hash_from_spki(spki)


def build_request(serial: int, issuer_key_hash: bytes) -> bytes:
    """Encode a single-entry OCSPRequest (RFC 2560 section 4.1.1).

    The version is left at its DEFAULT and omitted. issuerNameHash is sent
    as an empty OCTET STRING; responders that check it will reject these
    requests.
    """
    if isinstance(serial, bool) or not isinstance(serial, int):
        msg = f"serial must be an integer, got {type(serial).__name__}"
        raise EncodingError(msg)
    if serial < 0:
        msg = f"serial must not be negative, got {serial}"
        raise EncodingError(msg)
    if len(issuer_key_hash) != KEY_HASH_SIZE:
        msg = f"issuer key hash must be {KEY_HASH_SIZE} bytes, got {len(issuer_key_hash)}"
        raise EncodingError(msg)
    cert_id = der.sequence(
        _SHA1_ALGORITHM,
        der.octet_string(b""),
        der.octet_string(bytes(issuer_key_hash)),
        der.integer(serial),
    )
    request_list = der.sequence(der.sequence(cert_id))
    tbs_request = der.sequence(request_list)
    return der.sequence(tbs_request)
