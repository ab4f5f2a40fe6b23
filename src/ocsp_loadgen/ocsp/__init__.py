from __future__ import annotations

from ocsp_loadgen.ocsp.files import load_issuer, load_serials
from ocsp_loadgen.ocsp.pool import RequestPool, build_pool, build_pool_from_key_hash, parse_serial
from ocsp_loadgen.ocsp.request import build_request, hash_issuer_key, key_hash_from_spki

__all__ = [
    "RequestPool",
    "build_pool",
    "build_pool_from_key_hash",
    "build_request",
    "hash_issuer_key",
    "key_hash_from_spki",
    "load_issuer",
    "load_serials",
    "parse_serial",
]
