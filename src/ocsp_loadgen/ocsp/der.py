"""Just enough DER to write an OCSP request and read a SubjectPublicKeyInfo.

Only definite-length, single-byte-tag, universal-class encodings are
handled; that covers everything the load generator produces or consumes.
"""
from __future__ import annotations

TAG_INTEGER = 0x02
TAG_BIT_STRING = 0x03
TAG_OCTET_STRING = 0x04
TAG_NULL = 0x05
TAG_OID = 0x06
TAG_SEQUENCE = 0x30


class DERError(ValueError):
    pass


def encode_length(length: int) -> bytes:
    if length < 0x80:
        return bytes([length])
    body = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([0x80 | len(body)]) + body


def tlv(tag: int, content: bytes) -> bytes:
    return bytes([tag]) + encode_length(len(content)) + content


def sequence(*items: bytes) -> bytes:
    return tlv(TAG_SEQUENCE, b"".join(items))


def integer(value: int) -> bytes:
    # minimal two's complement; positive values get a leading 0x00 when the
    # high bit would otherwise be set
    return tlv(TAG_INTEGER, value.to_bytes(value.bit_length() // 8 + 1, "big", signed=True))


def octet_string(value: bytes) -> bytes:
    return tlv(TAG_OCTET_STRING, value)


def null() -> bytes:
    return tlv(TAG_NULL, b"")


def object_identifier(dotted: str) -> bytes:
    arcs = [int(arc) for arc in dotted.split(".")]
    if len(arcs) < 2 or arcs[0] > 2 or (arcs[0] < 2 and arcs[1] >= 40):
        msg = f"invalid object identifier {dotted!r}"
        raise DERError(msg)
    body = bytearray()
    for arc in [arcs[0] * 40 + arcs[1], *arcs[2:]]:
        chunk = [arc & 0x7F]
        arc >>= 7
        while arc:
            chunk.append(0x80 | (arc & 0x7F))
            arc >>= 7
        body.extend(reversed(chunk))
    return tlv(TAG_OID, bytes(body))


def read_tlv(data: bytes, offset: int = 0) -> tuple[int, bytes, int]:
    """Return ``(tag, content, next_offset)`` for the element at ``offset``."""
    if offset + 2 > len(data):
        raise DERError("truncated element header")
    tag = data[offset]
    if tag & 0x1F == 0x1F:
        raise DERError("multi-byte tags are not supported")
    first = data[offset + 1]
    pos = offset + 2
    if first < 0x80:
        length = first
    else:
        n = first & 0x7F
        if n == 0:
            raise DERError("indefinite length is not allowed in DER")
        if pos + n > len(data):
            raise DERError("truncated length")
        length = int.from_bytes(data[pos : pos + n], "big")
        pos += n
    end = pos + length
    if end > len(data):
        raise DERError("element runs past end of input")
    return tag, bytes(data[pos:end]), end


def expect(data: bytes, tag: int, offset: int = 0) -> tuple[bytes, int]:
    actual, content, end = read_tlv(data, offset)
    if actual != tag:
        msg = f"expected tag 0x{tag:02x}, got 0x{actual:02x}"
        raise DERError(msg)
    return content, end


def right_align(bit_string: bytes) -> bytes:
    """Drop the unused trailing bits of a BIT STRING and shift the rest right.

    ``bit_string`` is the full content octets, leading unused-bits count
    included. The result keeps the payload length.
    """
    if not bit_string:
        raise DERError("empty bit string")
    unused = bit_string[0]
    payload = bit_string[1:]
    if unused > 7 or (unused and not payload):
        raise DERError("invalid unused-bits count")
    if unused == 0:
        return bytes(payload)
    value = int.from_bytes(payload, "big") >> unused
    return value.to_bytes(len(payload), "big")
