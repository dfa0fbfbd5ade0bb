from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.errors import WarningKind
from core.models import DecodeResult, DecodeWarning, Event, HeaderFields, Sequence, Track


def _seq(**division) -> Sequence:
    return Sequence(format=1, declared_track_count=1, tracks=(Track(events=(Event(delta_time=0, status=0xFF, meta_type=0x2F),)),), **division)


def test_event_is_meta_and_end_of_track():
    eot = Event(delta_time=0, status=0xFF, meta_type=0x2F)
    assert eot.is_meta
    assert eot.is_end_of_track

    note = Event(delta_time=10, status=0x90, data=b"\x3c\x40")
    assert not note.is_meta
    assert not note.is_end_of_track


@pytest.mark.parametrize(
    "kwargs",
    [
        {"delta_time": -1, "status": 0x90},
        {"delta_time": 0, "status": 0x7F},
        {"delta_time": 0, "status": 0xFF},  # meta without type
        {"delta_time": 0, "status": 0x90, "meta_type": 0x2F},
    ],
)
def test_event_invariants(kwargs):
    with pytest.raises(ValidationError):
        Event(**kwargs)


def test_event_is_frozen():
    ev = Event(delta_time=0, status=0x90, data=b"\x3c\x40")
    with pytest.raises(ValidationError):
        ev.delta_time = 5


def test_event_json_uses_hex_data_and_round_trips():
    ev = Event(delta_time=3, status=0xF0, data=b"\x7e\x00\xff")
    dumped = ev.model_dump(mode="json")
    assert dumped["data"] == "7e00ff"
    assert dumped["is_meta"] is False
    assert Event.model_validate(dumped) == ev


def test_division_is_ppqn_xor_smpte():
    assert _seq(ticks_per_quarter_note=96).is_smpte is False
    assert _seq(frames_per_second=25, ticks_per_frame=40).is_smpte is True

    with pytest.raises(ValidationError):
        _seq()
    with pytest.raises(ValidationError):
        _seq(ticks_per_quarter_note=96, frames_per_second=25, ticks_per_frame=40)
    with pytest.raises(ValidationError):
        _seq(frames_per_second=25)
    with pytest.raises(ValidationError):
        HeaderFields(format=0, number_of_tracks=1, ticks_per_quarter_note=0)


def test_sequence_from_header():
    h = HeaderFields(format=2, number_of_tracks=3, frames_per_second=30, ticks_per_frame=80)
    seq = Sequence.from_header(h, ())
    assert seq.format == 2
    assert seq.declared_track_count == 3
    assert (seq.frames_per_second, seq.ticks_per_frame) == (30, 80)
    assert seq.tracks == ()


def test_decode_result_json_round_trip():
    res = DecodeResult(
        sequence=_seq(ticks_per_quarter_note=480),
        warnings=(DecodeWarning(kind=WarningKind.missing_end_of_track, message="no EOT", track_index=0, offset=22),),
    )
    restored = DecodeResult.model_validate_json(res.model_dump_json())
    assert restored == res
