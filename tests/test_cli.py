from __future__ import annotations

import json
from pathlib import Path

import pytest

import smfdecode.cli as cli
from core.models import DecodeResult, Event, Sequence, Track
from smfdecode.api_client import HTTPError, NetworkError

NOTE_TRACK = bytes([0x00, 0x90, 0x3C, 0x40, 0x60, 0x3C, 0x00])


@pytest.fixture
def song(tmp_path: Path, smf) -> Path:
    p = tmp_path / "song.mid"
    p.write_bytes(smf.file(NOTE_TRACK + smf.eot))
    return p


def test_inspect_prints_header_and_events(song: Path, capsys):
    rc = cli.main(["inspect", str(song)])
    assert rc == cli.EXIT_OK

    out = capsys.readouterr().out
    assert "Format: 0 (single track)" in out
    assert "Division: 96 PPQN" in out
    assert "*** Track 0: 3 events ***" in out
    assert "End Of Track" in out


def test_inspect_max_events(song: Path, capsys):
    assert cli.main(["inspect", str(song), "--max-events", "1"]) == cli.EXIT_OK
    assert "... 2 more events" in capsys.readouterr().out


def test_inspect_missing_file(tmp_path: Path, capsys):
    rc = cli.main(["inspect", str(tmp_path / "ghost.mid")])
    assert rc == cli.EXIT_BAD_ARGS
    assert "not found" in capsys.readouterr().err


def test_inspect_decode_error(tmp_path: Path, capsys):
    bad = tmp_path / "bad.mid"
    bad.write_bytes(b"RIFF\x00\x00\x00\x06" + b"\x00" * 6)
    rc = cli.main(["inspect", str(bad)])
    assert rc == cli.EXIT_DECODE_FAILED
    assert "[bad_signature]" in capsys.readouterr().err


def test_inspect_abort_policy(tmp_path: Path, smf, capsys):
    p = tmp_path / "xf.mid"
    p.write_bytes(smf.header(1, 2) + smf.track(smf.eot) + smf.chunk(b"XFIH", b"\x01") + smf.track(smf.eot))

    assert cli.main(["inspect", str(p)]) == cli.EXIT_OK
    assert cli.main(["inspect", str(p), "--policy", "abort"]) == cli.EXIT_DECODE_FAILED
    assert "[unexpected_chunk]" in capsys.readouterr().err


def test_non_positive_max_event_size_is_bad_args(song: Path):
    assert cli.main(["inspect", str(song), "--max-event-size", "0"]) == cli.EXIT_BAD_ARGS


def test_json_to_stdout(song: Path, capsys):
    assert cli.main(["json", str(song)]) == cli.EXIT_OK
    data = json.loads(capsys.readouterr().out)
    res = DecodeResult.model_validate(data)
    assert res.sequence.tracks[0].events[0].data == b"\x3c\x40"


def test_json_to_file(song: Path, tmp_path: Path, capsys):
    out = tmp_path / "nested" / "song.json"
    assert cli.main(["json", str(song), "--out", str(out)]) == cli.EXIT_OK
    assert out.exists()
    assert capsys.readouterr().out.strip() == str(out.resolve())
    assert json.loads(out.read_text(encoding="utf-8"))["sequence"]["format"] == 0


class FakeClient:
    raise_exc = None
    seen = {}

    def __init__(self, *, base_url: str, **_):
        FakeClient.seen["base_url"] = base_url

    def decode_file(self, path, *, policy=None):
        FakeClient.seen["policy"] = policy
        if FakeClient.raise_exc is not None:
            raise FakeClient.raise_exc
        eot = Event(delta_time=0, status=0xFF, meta_type=0x2F)
        return DecodeResult(
            sequence=Sequence(format=0, declared_track_count=1, ticks_per_quarter_note=480, tracks=(Track(events=(eot,)),))
        )

    def close(self):
        FakeClient.seen["closed"] = True


@pytest.fixture
def fake_client(monkeypatch):
    FakeClient.raise_exc = None
    FakeClient.seen = {}
    monkeypatch.setattr(cli, "SmfDecodeClient", FakeClient)
    return FakeClient


def test_remote_ok(song: Path, fake_client, capsys):
    rc = cli.main(["remote", str(song), "--base-url", "http://x:9", "--policy", "skip"])
    assert rc == cli.EXIT_OK
    assert fake_client.seen == {"base_url": "http://x:9", "policy": "skip", "closed": True}
    assert "Division: 480 PPQN" in capsys.readouterr().out


@pytest.mark.parametrize(
    "exc, code",
    [
        (HTTPError(422, '{"detail": {"kind": "truncated"}}'), cli.EXIT_DECODE_FAILED),
        (HTTPError(500, "boom"), cli.EXIT_NETWORK_OR_HTTP),
        (NetworkError("refused"), cli.EXIT_NETWORK_OR_HTTP),
        (ValueError("midi_path not found"), cli.EXIT_BAD_ARGS),
    ],
)
def test_remote_error_codes(song: Path, fake_client, exc, code):
    fake_client.raise_exc = exc
    assert cli.main(["remote", str(song)]) == code
    assert fake_client.seen["closed"] is True
