from __future__ import annotations

import logging
from typing import List, Optional

from core.chunks import CHUNK_HEADER_SIZE, Buffer, next_chunk
from core.config import Settings, UnexpectedChunkPolicy, get_settings
from core.errors import TruncatedError, UnexpectedChunkError, WarningKind
from core.header import HEADER_BODY_LENGTH, decode_header, header_warnings
from core.models import DecodeResult, DecodeWarning, Sequence, Track
from core.tracks import decode_track

logger = logging.getLogger(__name__)


class SequenceDecoder:
    """
    Top-level SMF decode: MThd, then one MTrk per declared track.

    All-or-nothing: any fatal error propagates and no partial Sequence is
    returned. Chunks after the declared track count are never visited.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()

    def decode(self, buffer: Buffer) -> DecodeResult:
        s = self.settings
        header = decode_header(buffer)
        warnings: List[DecodeWarning] = list(header_warnings(header))

        tracks: List[Track] = []
        cursor = CHUNK_HEADER_SIZE + HEADER_BODY_LENGTH
        while len(tracks) < header.number_of_tracks:
            chunk = next_chunk(buffer, cursor)
            if chunk is None:
                raise TruncatedError(
                    f"header declares {header.number_of_tracks} tracks, buffer holds {len(tracks)}",
                    offset=cursor,
                )
            cursor = chunk.end

            try:
                result = decode_track(
                    buffer,
                    chunk,
                    track_index=len(tracks),
                    max_data_size=s.max_event_data_size,
                    sysex_mode=s.sysex_mode,
                )
            except UnexpectedChunkError as e:
                if s.unexpected_chunk_policy == UnexpectedChunkPolicy.abort:
                    raise
                warnings.append(
                    DecodeWarning(
                        kind=WarningKind.skipped_chunk,
                        message=f"skipped {chunk.tag_text!r} chunk ({chunk.length} bytes)",
                        offset=e.offset,
                    )
                )
                continue

            tracks.append(result.track)
            warnings.extend(result.warnings)

        for w in warnings:
            logger.warning("%s: %s", w.kind.value, w.message)

        sequence = Sequence.from_header(header, tuple(tracks))
        logger.debug("decoded %s tracks, %s warnings", len(sequence.tracks), len(warnings))
        return DecodeResult(sequence=sequence, warnings=tuple(warnings))


def decode_smf(buffer: Buffer, settings: Optional[Settings] = None) -> DecodeResult:
    return SequenceDecoder(settings).decode(buffer)
