"""Hex-text integer encoding and size helpers used by the wire structures."""

import re
from collections.abc import Iterable

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_HEX_INT = re.compile(r"[+-]?[0-9a-fA-F]+")
_DEC_INT = re.compile(r"[+-]?[0-9]+")


def encode_int(n: int) -> bytes:
    """Encode an integer as lower-case hex text padded to two digits."""
    return f"{n:02x}".encode("ascii")


def decode_int(data: bytes) -> int:
    """Decode hex text written by encode_int; malformed text decodes to 0.

    Values outside the signed 64-bit range are clamped to it.
    """
    text = bytes(data).decode("ascii", errors="replace")
    if not _HEX_INT.fullmatch(text):
        return 0
    return max(_INT64_MIN, min(_INT64_MAX, int(text, 16)))


def array_byte_to_int(data: bytes) -> int:
    """Parse decimal text; empty input gives 0, malformed input raises ValueError."""
    if not data:
        return 0
    text = bytes(data).decode("ascii", errors="replace")
    if not _DEC_INT.fullmatch(text):
        raise ValueError(f"invalid decimal integer: {text!r}")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"integer out of range: {text!r}")
    return value


def total_length(chunks: Iterable[bytes]) -> int:
    """Return the combined length of a sequence of byte strings."""
    return sum(len(chunk) for chunk in chunks)


def var_int_serialize_size(value: int) -> int:
    """Return the number of bytes a variable-length integer occupies."""
    if value < 0xFD:
        return 1
    if value <= 0xFFFF:
        return 3
    if value <= 0xFFFFFFFF:
        return 5
    return 9