"""
Human-readable rendering of decoded files.

Pure text builders; the decoder never prints. The CLI and the batch script
decide where the lines go.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from core.models import DecodeResult, Event, Sequence

META_EVENT_NAMES: Dict[int, str] = {
    0x00: "Sequence Number",
    0x01: "Text",
    0x02: "Copyright",
    0x03: "Sequence/Track Name",
    0x04: "Instrument",
    0x05: "Lyric",
    0x06: "Marker",
    0x07: "Cue Point",
    0x08: "Program Name",
    0x09: "Device (Port) Name",
    0x2F: "End Of Track",
    0x51: "Tempo",
    0x54: "SMPTE Offset",
    0x58: "Time Signature",
    0x59: "Key Signature",
    0x7F: "Proprietary Event",
}

CHANNEL_MESSAGE_NAMES: Dict[int, str] = {
    0x80: "Note Off",
    0x90: "Note On",
    0xA0: "Polyphonic Key Pressure",
    0xB0: "Control Change",
    0xC0: "Program Change",
    0xD0: "Channel Pressure",
    0xE0: "Pitch Bend",
}

# meta types whose payload is text
_TEXT_META_TYPES = range(0x01, 0x0A)


def meta_event_name(meta_type: Optional[int]) -> str:
    if meta_type is None:
        return "Unknown"
    return META_EVENT_NAMES.get(meta_type, "Unknown")


def format_name(fmt: int) -> str:
    if fmt == 0:
        return "0 (single track)"
    if fmt == 1:
        return "1 (several simultaneous tracks)"
    if fmt == 2:
        return "2 (several independent tracks)"
    return f"{fmt} (INVALID FORMAT)"


def describe_header(seq: Sequence) -> List[str]:
    lines = [
        "**** Values from MThd ****",
        f"Format: {format_name(seq.format)}",
        f"Number of tracks: {seq.declared_track_count}",
    ]
    if seq.is_smpte:
        lines.append(f"Division: {seq.frames_per_second} FPS, {seq.ticks_per_frame} ticks per frame")
    else:
        lines.append(f"Division: {seq.ticks_per_quarter_note} PPQN")
    return lines


def _hex(data: bytes, limit: int = 16) -> str:
    shown = " ".join(f"{b:02X}" for b in data[:limit])
    if len(data) > limit:
        shown += f" ... (+{len(data) - limit} bytes)"
    return shown


def describe_event(event: Event) -> str:
    head = f"time {event.delta_time}; status 0x{event.status:02X};"

    if event.is_meta:
        name = meta_event_name(event.meta_type)
        line = f"{head} meta 0x{event.meta_type:02X} {name}"
        if event.meta_type in _TEXT_META_TYPES and event.data:
            return f"{line}: {event.data.decode('latin-1')!r}"
        if event.meta_type == 0x51 and len(event.data) == 3:
            return f"{line}: {int.from_bytes(event.data, 'big')} us per quarter note"
        return f"{line} {_hex(event.data)}".rstrip()

    if event.status in (0xF0, 0xF7):
        return f"{head} SysEx {_hex(event.data)}".rstrip()

    if event.status < 0xF0:
        name = CHANNEL_MESSAGE_NAMES.get(event.status & 0xF0, "Unknown")
        channel = event.status & 0x0F
        return f"{head} {name} ch {channel} {_hex(event.data)}".rstrip()

    return f"{head} {_hex(event.data)}".rstrip()


def describe_result(result: DecodeResult, *, max_events: Optional[int] = None) -> str:
    seq = result.sequence
    lines = describe_header(seq)

    for w in result.warnings:
        where = f" (track {w.track_index})" if w.track_index is not None else ""
        lines.append(f"Warning{where}: {w.message}")

    for i, track in enumerate(seq.tracks):
        lines.append("")
        lines.append(f"*** Track {i}: {len(track.events)} events ***")
        events = track.events if max_events is None else track.events[:max_events]
        for ev in events:
            lines.append(describe_event(ev))
        hidden = len(track.events) - len(events)
        if hidden > 0:
            lines.append(f"... {hidden} more events")

    return "\n".join(lines)
