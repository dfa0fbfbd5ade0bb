"""
Batch stats: decode every MIDI file under a path and print
format / tracks / events / notes, plus a mido cross-check of event counts.

usage: python scripts/midi_count.py <file-or-dir> [--no-mido]
"""
from pathlib import Path
import sys

import mido

from core.errors import SmfDecodeError
from core.models import DecodeResult
from core.sequence import decode_smf
from core.utils import is_midi_path, load_smf_bytes


def count_notes(result: DecodeResult) -> int:
    notes = 0
    for tr in result.sequence.tracks:
        for ev in tr.events:
            # note-on with velocity > 0
            if ev.status & 0xF0 == 0x90 and len(ev.data) == 2 and ev.data[1] > 0:
                notes += 1
    return notes


def mido_event_counts(mid_path: Path) -> list:
    mid = mido.MidiFile(mid_path)
    return [len(tr) for tr in mid.tracks]


def iter_midi_files(root: Path):
    if root.is_file():
        yield root
        return
    for p in sorted(root.rglob("*")):
        if p.is_file() and is_midi_path(p):
            yield p


def report(p: Path, *, cross_check: bool = True) -> bool:
    try:
        result = decode_smf(load_smf_bytes(p))
    except SmfDecodeError as e:
        print(p.name, "FAILED", e.kind.value, str(e))
        return False

    seq = result.sequence
    counts = [len(tr.events) for tr in seq.tracks]
    division = f"{seq.frames_per_second}fps/{seq.ticks_per_frame}" if seq.is_smpte else f"ppq={seq.ticks_per_quarter_note}"
    print(p.name, f"format={seq.format}", f"tracks={len(seq.tracks)}", division, "events=", counts, "notes=", count_notes(result))
    for w in result.warnings:
        print("  warning:", w.kind.value, w.message)

    if cross_check and not seq.is_smpte:
        try:
            theirs = mido_event_counts(p)
        except (OSError, EOFError, ValueError) as e:
            print("  mido could not read it:", e)
        else:
            if theirs != counts:
                print("  mismatch vs mido:", theirs)
    return True


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__.strip())
        raise SystemExit(5)

    root = Path(sys.argv[1])
    cross = "--no-mido" not in sys.argv[2:]
    ok = all([report(p, cross_check=cross) for p in iter_midi_files(root)])
    raise SystemExit(0 if ok else 2)
