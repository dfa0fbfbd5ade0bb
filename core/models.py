from __future__ import annotations

from typing import Any, Optional, Tuple

from pydantic import BaseModel, Field, computed_field, field_serializer, field_validator, model_validator
from pydantic.config import ConfigDict

from core.errors import WarningKind

META_STATUS = 0xFF
END_OF_TRACK = 0x2F


# =========================
# Base Model Config (Frozen)
# =========================
class _FrozenModel(BaseModel):
    """
    Decoded structures are immutable once built.
    Equality is structural, so decoding the same buffer twice compares equal.
    """
    model_config = ConfigDict(frozen=True)


# =========================
# Events / tracks
# =========================
class Event(_FrozenModel):
    """
    One timed MIDI message.

    data is the body after the status byte; for meta events it is the payload
    after the type byte and the VLQ length.
    """
    delta_time: int = Field(..., ge=0, description="Ticks since the previous event in the same track")
    status: int = Field(..., ge=0x80, le=0xFF, description="Status byte (top bit always set)")
    data: bytes = Field(default=b"", description="Event body, hex encoded in JSON")
    meta_type: Optional[int] = Field(default=None, ge=0, le=0xFF, description="Meta type, only for status 0xFF")

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, v: Any) -> Any:
        # JSON carries data as hex
        if isinstance(v, str):
            return bytes.fromhex(v)
        if isinstance(v, (bytearray, memoryview)):
            return bytes(v)
        return v

    @field_serializer("data", when_used="json")
    def _ser_data(self, v: bytes) -> str:
        return v.hex()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_meta(self) -> bool:
        return self.status == META_STATUS

    @property
    def is_end_of_track(self) -> bool:
        return self.status == META_STATUS and self.meta_type == END_OF_TRACK

    @model_validator(mode="after")
    def _validate_meta_type(self) -> "Event":
        if self.is_meta and self.meta_type is None:
            raise ValueError("meta events (status 0xFF) require meta_type")
        if not self.is_meta and self.meta_type is not None:
            raise ValueError("meta_type is only valid for status 0xFF")
        return self


class Track(_FrozenModel):
    events: Tuple[Event, ...] = Field(default=())


# =========================
# Header / sequence
# =========================
class _DivisionModel(_FrozenModel):
    """Timing division: PPQN xor (frames_per_second, ticks_per_frame)."""

    ticks_per_quarter_note: Optional[int] = Field(default=None, gt=0)
    frames_per_second: Optional[int] = Field(default=None, gt=0)
    ticks_per_frame: Optional[int] = Field(default=None, ge=0, le=0xFF)

    @property
    def is_smpte(self) -> bool:
        return self.ticks_per_quarter_note is None

    @model_validator(mode="after")
    def _validate_division(self) -> "_DivisionModel":
        has_smpte = self.frames_per_second is not None or self.ticks_per_frame is not None
        if self.ticks_per_quarter_note is not None:
            if has_smpte:
                raise ValueError("division is either ticks_per_quarter_note or SMPTE, not both")
        elif self.frames_per_second is None or self.ticks_per_frame is None:
            raise ValueError("division requires ticks_per_quarter_note or frames_per_second + ticks_per_frame")
        return self


class HeaderFields(_DivisionModel):
    format: int = Field(..., ge=0, le=0xFFFF)
    number_of_tracks: int = Field(..., ge=0, le=0xFFFF)


class Sequence(_DivisionModel):
    format: int = Field(..., ge=0, le=0xFFFF)
    declared_track_count: int = Field(..., ge=0, le=0xFFFF)
    tracks: Tuple[Track, ...] = Field(default=())

    @classmethod
    def from_header(cls, header: HeaderFields, tracks: Tuple[Track, ...]) -> "Sequence":
        return cls(
            format=header.format,
            declared_track_count=header.number_of_tracks,
            ticks_per_quarter_note=header.ticks_per_quarter_note,
            frames_per_second=header.frames_per_second,
            ticks_per_frame=header.ticks_per_frame,
            tracks=tracks,
        )


# =========================
# Decode outcome
# =========================
class DecodeWarning(_FrozenModel):
    kind: WarningKind
    message: str = Field(..., min_length=1)
    track_index: Optional[int] = Field(default=None, ge=0)
    offset: Optional[int] = Field(default=None, ge=0)


class DecodeResult(_FrozenModel):
    sequence: Sequence
    warnings: Tuple[DecodeWarning, ...] = Field(default=())
