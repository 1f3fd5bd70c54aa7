"""Base64 VLQ digits as used by the ``mappings`` field of a source map."""

from __future__ import annotations

from typing import Iterable, List

from .errors import VlqDecodeError

BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

# Mapping of base64 letter -> integer value.
B64 = {c: i for i, c in enumerate(BASE64_CHARS)}

VLQ_SHIFT = 5
VLQ_BASE = 1 << VLQ_SHIFT
VLQ_MASK = VLQ_BASE - 1
VLQ_CONTINUATION = VLQ_BASE


def decode(segment: str) -> List[int]:
    """Parse a string of VLQ-encoded data into a list of signed integers."""
    values: List[int] = []
    cur, shift = 0, 0
    pending = False
    for c in segment:
        try:
            digit = B64[c]
        except KeyError:
            raise VlqDecodeError(f"invalid base64 digit {c!r} in segment {segment!r}") from None
        # Each character is 6 bits: 5 of value and the high bit is the continuation.
        cur += (digit & VLQ_MASK) << shift
        shift += VLQ_SHIFT
        pending = bool(digit & VLQ_CONTINUATION)
        if not pending:
            # The low bit of the unpacked value is the sign.
            magnitude = cur >> 1
            values.append(-magnitude if cur & 1 else magnitude)
            cur, shift = 0, 0
    if pending:
        raise VlqDecodeError(f"truncated VLQ sequence in segment {segment!r}")
    return values


def encode_value(value: int) -> str:
    vlq = ((-value) << 1) + 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & VLQ_MASK
        vlq >>= VLQ_SHIFT
        if vlq:
            digit |= VLQ_CONTINUATION
        out.append(BASE64_CHARS[digit])
        if not vlq:
            return "".join(out)


def encode(values: Iterable[int]) -> str:
    return "".join(encode_value(value) for value in values)
