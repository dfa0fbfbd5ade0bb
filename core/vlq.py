from __future__ import annotations

from typing import Optional, Tuple

from core.chunks import Buffer
from core.errors import TruncatedError


def decode_vlq(buffer: Buffer, cursor: int, end: Optional[int] = None) -> Tuple[int, int]:
    """
    Decode a MIDI variable-length quantity starting at cursor.

    Reads 7 bits per byte, most significant first, while the top bit is set.
    Never reads at or beyond end (defaults to len(buffer)).
    Returns (value, bytes_consumed).
    """
    limit = len(buffer) if end is None else min(end, len(buffer))
    value = 0
    pos = cursor
    while True:
        if pos >= limit:
            raise TruncatedError("variable-length quantity runs past the end of the data", offset=cursor)
        byte = buffer[pos]
        pos += 1
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            return value, pos - cursor


def encode_vlq(value: int) -> bytes:
    if value < 0:
        raise ValueError(f"VLQ value must be non-negative, got {value}")
    out = bytearray([value & 0x7F])
    value >>= 7
    while value:
        out.insert(0, (value & 0x7F) | 0x80)
        value >>= 7
    return bytes(out)
