from __future__ import annotations

import logging
import random
import string
from dataclasses import dataclass
from typing import Iterable

from cryptography import x509

from ocsp_loadgen.errors import EmptyPoolError, EncodingError
from ocsp_loadgen.ocsp.request import build_request, hash_issuer_key

logger = logging.getLogger(__name__)

SERIAL_HEX_LENGTHS = (32, 36)


def parse_serial(text: str) -> int:
    """Parse a serial in the canonical hex form (32 or 36 hex digits)."""
    value = text.strip()
    if len(value) not in SERIAL_HEX_LENGTHS or not all(c in string.hexdigits for c in value):
        msg = f"invalid serial number {text!r}"
        raise ValueError(msg)
    return int(value, 16)


@dataclass(frozen=True, slots=True)
class RequestPool:
    requests: tuple[bytes, ...]

    def __post_init__(self) -> None:
        if not self.requests:
            raise EmptyPoolError("No requests to send!")

    def __len__(self) -> int:
        return len(self.requests)

    def choose(self, rng: random.Random) -> bytes:
        return self.requests[rng.randrange(len(self.requests))]


def build_pool_from_key_hash(serials: Iterable[str], issuer_key_hash: bytes) -> RequestPool:
    requests: list[bytes] = []
    skipped = 0
    for raw in serials:
        try:
            requests.append(build_request(parse_serial(raw), issuer_key_hash))
        except (ValueError, EncodingError) as exc:
            skipped += 1
            logger.debug("skipping serial %r: %s", raw, exc)
    if skipped:
        logger.info("skipped %d unusable serials", skipped)
    return RequestPool(tuple(requests))


def build_pool(serials: Iterable[str], issuer: x509.Certificate) -> RequestPool:
    logger.info("warming up")
    pool = build_pool_from_key_hash(serials, hash_issuer_key(issuer))
    logger.info("finished warm up (%d requests)", len(pool))
    return pool
