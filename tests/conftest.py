from __future__ import annotations

from types import SimpleNamespace

import pytest

import core.config as config_module

EOT = bytes([0x00, 0xFF, 0x2F, 0x00])

_ENV_KEYS = (
    "APP_ENV",
    "LOG_LEVEL",
    "MAX_EVENT_DATA_SIZE",
    "UNEXPECTED_CHUNK_POLICY",
    "SYSEX_MODE",
    "MAX_UPLOAD_SIZE_MB",
    "CORS_ALLOW_ORIGINS",
)


def chunk(tag: bytes, body: bytes) -> bytes:
    return tag + len(body).to_bytes(4, "big") + body


def header(fmt: int = 0, ntracks: int = 1, division: int = 96) -> bytes:
    return chunk(b"MThd", fmt.to_bytes(2, "big") + ntracks.to_bytes(2, "big") + division.to_bytes(2, "big"))


def track(body: bytes) -> bytes:
    return chunk(b"MTrk", body)


def smf_file(*bodies: bytes, fmt: int = None, division: int = 96) -> bytes:
    """Header + one MTrk per body; format 0 for one track, else 1."""
    if fmt is None:
        fmt = 0 if len(bodies) == 1 else 1
    return header(fmt, len(bodies), division) + b"".join(track(b) for b in bodies)


@pytest.fixture
def smf():
    return SimpleNamespace(chunk=chunk, header=header, track=track, file=smf_file, eot=EOT)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Settings come from env + lru_cache: start every test from defaults."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    config_module.get_settings.cache_clear()
    yield
    config_module.get_settings.cache_clear()
