from __future__ import annotations

from typing import Literal, NamedTuple, Optional, Tuple

from core.chunks import Buffer
from core.errors import EventTooLargeError, MissingRunningStatusError, TruncatedError
from core.models import META_STATUS, Event
from core.vlq import decode_vlq

# Big enough for any legitimate meta text / sysex dump
DEFAULT_MAX_DATA_SIZE = 1024 * 1024

SYSEX_STATUSES = (0xF0, 0xF7)

SysexMode = Literal["scan", "length"]


class DecodedEvent(NamedTuple):
    event: Event
    consumed: int
    running_status: Optional[int]


def channel_data_length(status: int) -> int:
    """Defined number of data bytes for a channel voice/mode status."""
    if 0xC0 <= status <= 0xDF:
        return 1
    return 2


def is_end_of_track(event: Event) -> bool:
    return event.is_end_of_track


def _check_size(length: int, max_data_size: int, offset: int) -> None:
    if length > max_data_size:
        raise EventTooLargeError(
            f"event body of {length} bytes exceeds the limit of {max_data_size}",
            offset=offset,
        )


def _scan_data(
    buffer: Buffer,
    start: int,
    limit: int,
    max_data_size: int,
    cap: Optional[int] = None,
) -> int:
    """
    Advance over data bytes until one with the top bit set (left unconsumed),
    or until cap bytes were taken. Returns the end offset of the body.
    """
    pos = start
    while cap is None or pos - start < cap:
        if pos >= limit:
            raise TruncatedError("event body runs past the end of the track", offset=start)
        if buffer[pos] & 0x80:
            break
        _check_size(pos - start + 1, max_data_size, start)
        pos += 1
    return pos


def _length_prefixed(buffer: Buffer, start: int, limit: int, max_data_size: int) -> Tuple[int, int]:
    """VLQ length then exactly that many bytes. Returns (data_start, data_end)."""
    length, n = decode_vlq(buffer, start, limit)
    data_start = start + n
    _check_size(length, max_data_size, start)
    data_end = data_start + length
    if data_end > limit:
        raise TruncatedError(
            f"event declares {length} data bytes, only {limit - data_start} left in the track",
            offset=start,
        )
    return data_start, data_end


def decode_event(
    buffer: Buffer,
    cursor: int,
    running_status: Optional[int],
    *,
    end: Optional[int] = None,
    max_data_size: int = DEFAULT_MAX_DATA_SIZE,
    sysex_mode: SysexMode = "scan",
) -> DecodedEvent:
    """
    Decode one delta-time-prefixed event starting at cursor.

    Nothing at or beyond end (the owning track's limit) is read. On any error
    the exception propagates and the caller keeps its cursor: an event is
    either fully consumed or not consumed at all.
    """
    limit = len(buffer) if end is None else min(end, len(buffer))

    delta_time, vlq_len = decode_vlq(buffer, cursor, limit)
    pos = cursor + vlq_len
    if pos >= limit:
        raise TruncatedError("event has a delta-time but no status or data", offset=pos)

    first = buffer[pos]
    if first & 0x80:
        status = first
        running_status = first
        pos += 1
    elif running_status is None:
        raise MissingRunningStatusError(
            f"data byte 0x{first:02X} before any status byte in this track",
            offset=pos,
        )
    else:
        status = running_status

    meta_type: Optional[int] = None
    if status == META_STATUS:
        if pos >= limit:
            raise TruncatedError("meta event is missing its type byte", offset=pos)
        meta_type = buffer[pos]
        data_start, data_end = _length_prefixed(buffer, pos + 1, limit, max_data_size)
    elif status in SYSEX_STATUSES and sysex_mode == "length":
        data_start, data_end = _length_prefixed(buffer, pos, limit, max_data_size)
    elif status < 0xF0:
        data_start = pos
        data_end = _scan_data(buffer, pos, limit, max_data_size, cap=channel_data_length(status))
    else:
        data_start = pos
        data_end = _scan_data(buffer, pos, limit, max_data_size)

    event = Event(
        delta_time=delta_time,
        status=status,
        data=bytes(buffer[data_start:data_end]),
        meta_type=meta_type,
    )
    return DecodedEvent(event=event, consumed=data_end - cursor, running_status=running_status)
