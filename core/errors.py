from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


# =========================
# Kinds (Frozen)
# =========================
class ErrorKind(str, Enum):
    truncated = "truncated"
    bad_signature = "bad_signature"
    bad_header_length = "bad_header_length"
    invalid_division = "invalid_division"
    missing_running_status = "missing_running_status"
    event_too_large = "event_too_large"
    unexpected_chunk = "unexpected_chunk"


class WarningKind(str, Enum):
    missing_end_of_track = "missing_end_of_track"
    trailing_track_data = "trailing_track_data"
    multiple_tracks_in_format_0 = "multiple_tracks_in_format_0"
    unrecognized_format = "unrecognized_format"
    skipped_chunk = "skipped_chunk"


# =========================
# Exceptions
# =========================
class SmfDecodeError(Exception):
    """
    Base exception for every structural decode failure.

    offset is absolute (into the caller's buffer) when known.
    track_index is filled in by the track decoder on the way up.
    """

    kind: ErrorKind = ErrorKind.truncated

    def __init__(
        self,
        message: str,
        *,
        offset: Optional[int] = None,
        track_index: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.track_index = track_index

    def __str__(self) -> str:
        parts = [self.message]
        if self.track_index is not None:
            parts.append(f"track={self.track_index}")
        if self.offset is not None:
            parts.append(f"offset={self.offset}")
        return " | ".join(parts)

    def to_detail(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "offset": self.offset,
            "track_index": self.track_index,
        }


class TruncatedError(SmfDecodeError):
    """Buffer or chunk ends before a field completes."""

    kind = ErrorKind.truncated


class BadSignatureError(SmfDecodeError):
    """First chunk is not MThd."""

    kind = ErrorKind.bad_signature


class BadHeaderLengthError(SmfDecodeError):
    kind = ErrorKind.bad_header_length


class InvalidDivisionError(SmfDecodeError):
    kind = ErrorKind.invalid_division


class MissingRunningStatusError(SmfDecodeError):
    """A data byte shows up before any status byte in the track."""

    kind = ErrorKind.missing_running_status


class EventTooLargeError(SmfDecodeError):
    kind = ErrorKind.event_too_large


class UnexpectedChunkError(SmfDecodeError):
    """A non-MTrk chunk sits where a track chunk was expected."""

    kind = ErrorKind.unexpected_chunk

    def __init__(self, message: str, *, tag: bytes, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.tag = tag
