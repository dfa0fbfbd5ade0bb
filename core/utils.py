"""
Shared helpers: byte-buffer loading, directories, logging setup.
Nothing in here takes part in decoding; the decoder only sees bytes.
"""
# core/utils.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

MIDI_SUFFIXES = (".mid", ".midi", ".smf")


# ---------------------------
# Logging
# ---------------------------
def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure the root logger once (avoid duplicated handlers in reload/test).
    Later calls only adjust the level.
    """
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)


# ---------------------------
# Paths / file helpers
# ---------------------------
def ensure_dir(p: PathLike) -> Path:
    d = Path(p)
    d.mkdir(parents=True, exist_ok=True)
    return d


def is_midi_path(p: PathLike) -> bool:
    return Path(p).suffix.lower() in MIDI_SUFFIXES


def load_smf_bytes(path: PathLike, *, max_bytes: Optional[int] = None) -> bytes:
    """
    Read a whole file into memory for the decoder.

    - FileNotFoundError if the path is missing / not a file
    - ValueError if the file is larger than max_bytes
    """
    p = Path(path)
    if not p.exists() or not p.is_file():
        raise FileNotFoundError(f"midi file not found: {p}")

    size = p.stat().st_size
    if max_bytes is not None and size > max_bytes:
        raise ValueError(f"file too large: {size} bytes > {max_bytes} bytes")

    data = p.read_bytes()
    logger.debug("loaded %s (%d bytes)", p, len(data))
    return data
