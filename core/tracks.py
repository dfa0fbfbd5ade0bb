from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from core.chunks import Buffer, Chunk
from core.errors import SmfDecodeError, UnexpectedChunkError, WarningKind
from core.events import DEFAULT_MAX_DATA_SIZE, SysexMode, decode_event, is_end_of_track
from core.models import DecodeWarning, Event, Track

logger = logging.getLogger(__name__)

TRACK_TAG = b"MTrk"


@dataclass(frozen=True)
class TrackResult:
    track: Track
    warnings: List[DecodeWarning] = field(default_factory=list)


def decode_track(
    buffer: Buffer,
    chunk: Chunk,
    *,
    track_index: int = 0,
    max_data_size: int = DEFAULT_MAX_DATA_SIZE,
    sysex_mode: SysexMode = "scan",
) -> TrackResult:
    """
    Decode every event of one MTrk chunk.

    Stops at End-Of-Track (leftover bytes are ignored with a warning) or when
    the chunk is exhausted (warning: no End-Of-Track). Event errors propagate
    with the track index attached; the partial track is discarded.
    """
    if chunk.tag != TRACK_TAG:
        raise UnexpectedChunkError(
            f"MTrk signature not found (got {chunk.tag_text!r})",
            tag=chunk.tag,
            offset=chunk.header_offset,
            track_index=track_index,
        )

    events: List[Event] = []
    warnings: List[DecodeWarning] = []
    running_status: Optional[int] = None
    cursor = chunk.offset
    end = chunk.end
    seen_eot = False

    try:
        while cursor < end:
            event, consumed, running_status = decode_event(
                buffer,
                cursor,
                running_status,
                end=end,
                max_data_size=max_data_size,
                sysex_mode=sysex_mode,
            )
            events.append(event)
            cursor += consumed
            if is_end_of_track(event):
                seen_eot = True
                break
    except SmfDecodeError as e:
        if e.track_index is None:
            e.track_index = track_index
        raise

    if seen_eot and cursor < end:
        warnings.append(
            DecodeWarning(
                kind=WarningKind.trailing_track_data,
                message=f"{end - cursor} bytes after End Of Track ignored",
                track_index=track_index,
                offset=cursor,
            )
        )
    elif not seen_eot:
        warnings.append(
            DecodeWarning(
                kind=WarningKind.missing_end_of_track,
                message="track chunk ended without an End Of Track event",
                track_index=track_index,
                offset=end,
            )
        )

    logger.debug("track %s: %s events from %s bytes", track_index, len(events), chunk.length)
    return TrackResult(track=Track(events=tuple(events)), warnings=warnings)
