"""Constant-time comparison (RFC 4226 section 7.2)."""

from typing import Union

BytesOrText = Union[str, bytes, bytearray, memoryview]


def to_bytes(value: BytesOrText) -> bytes:
    """UTF-8 encode text; pass bytes-like values through as bytes."""
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def constant_time_equal(a: BytesOrText, b: BytesOrText) -> bool:
    """
    Compare two tokens without a secret-dependent early exit.

    A length mismatch returns False immediately: token length is fixed by
    `digits` and is public. For equal lengths every byte pair is visited
    and the XOR differences are OR-ed together.
    """
    buf_a = to_bytes(a)
    buf_b = to_bytes(b)
    if len(buf_a) != len(buf_b):
        return False

    acc = 0
    for x, y in zip(buf_a, buf_b):
        acc |= x ^ y
    return acc == 0
