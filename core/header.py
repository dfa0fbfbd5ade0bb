from __future__ import annotations

import logging
from typing import List

from core.chunks import Buffer, next_chunk
from core.errors import (
    BadHeaderLengthError,
    BadSignatureError,
    InvalidDivisionError,
    TruncatedError,
    WarningKind,
)
from core.models import DecodeWarning, HeaderFields

logger = logging.getLogger(__name__)

HEADER_TAG = b"MThd"
HEADER_BODY_LENGTH = 6
KNOWN_FORMATS = (0, 1, 2)


def decode_header(buffer: Buffer) -> HeaderFields:
    """
    Decode the MThd chunk that must open every SMF.

    The chunk is read through next_chunk first, so an over-long declared length
    is reported as truncation before the tag or length are looked at.
    """
    chunk = next_chunk(buffer, 0)
    if chunk is None:
        raise TruncatedError("empty buffer, no MThd chunk", offset=0)

    if chunk.tag != HEADER_TAG:
        raise BadSignatureError(
            f"MThd signature not found (got {chunk.tag_text!r}), is that a MIDI file?",
            offset=chunk.header_offset,
        )

    if chunk.length != HEADER_BODY_LENGTH:
        raise BadHeaderLengthError(
            f"MThd chunk length {chunk.length}, should be {HEADER_BODY_LENGTH}",
            offset=chunk.header_offset,
        )

    body = chunk.body(buffer)
    fmt = int.from_bytes(body[0:2], "big")
    number_of_tracks = int.from_bytes(body[2:4], "big")

    # first division byte is signed: negative means SMPTE
    first = int.from_bytes(body[4:5], "big", signed=True)
    second = body[5]

    if first >= 0:
        ppqn = int.from_bytes(body[4:6], "big")
        if ppqn == 0:
            raise InvalidDivisionError("division of 0 ticks per quarter note", offset=chunk.offset + 4)
        header = HeaderFields(format=fmt, number_of_tracks=number_of_tracks, ticks_per_quarter_note=ppqn)
    else:
        header = HeaderFields(
            format=fmt,
            number_of_tracks=number_of_tracks,
            frames_per_second=-first,
            ticks_per_frame=second,
        )

    logger.debug(
        "MThd: format=%s tracks=%s ppqn=%s fps=%s tpf=%s",
        header.format,
        header.number_of_tracks,
        header.ticks_per_quarter_note,
        header.frames_per_second,
        header.ticks_per_frame,
    )
    return header


def header_warnings(header: HeaderFields) -> List[DecodeWarning]:
    """Compatibility findings that do not stop decoding."""
    out: List[DecodeWarning] = []
    if header.format not in KNOWN_FORMATS:
        out.append(
            DecodeWarning(
                kind=WarningKind.unrecognized_format,
                message=f"format {header.format} is not one of 0, 1, 2",
            )
        )
    if header.format == 0 and header.number_of_tracks > 1:
        out.append(
            DecodeWarning(
                kind=WarningKind.multiple_tracks_in_format_0,
                message=f"number of tracks is {header.number_of_tracks}, but this is a single track file",
            )
        )
    return out
