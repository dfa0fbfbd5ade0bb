from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Union

from core.errors import TruncatedError

Buffer = Union[bytes, bytearray, memoryview]

CHUNK_HEADER_SIZE = 8


@dataclass(frozen=True)
class Chunk:
    """
    View of one tagged chunk inside the caller's buffer (no bytes copied).
    offset/length describe the body; end is where the next chunk starts.
    """
    tag: bytes
    header_offset: int
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def tag_text(self) -> str:
        return self.tag.decode("latin-1")

    def body(self, buffer: Buffer) -> memoryview:
        return memoryview(buffer)[self.offset : self.end]


def next_chunk(buffer: Buffer, cursor: int) -> Optional[Chunk]:
    """
    Read the chunk header at cursor.

    Returns None when cursor sits exactly at the end of the buffer (done).
    Raises TruncatedError if the header is incomplete or the declared body
    runs past the end of the buffer.
    """
    total = len(buffer)
    if cursor == total:
        return None
    if cursor < 0 or cursor + CHUNK_HEADER_SIZE > total:
        raise TruncatedError(
            f"chunk header needs {CHUNK_HEADER_SIZE} bytes, {max(total - cursor, 0)} left",
            offset=cursor,
        )

    tag = bytes(buffer[cursor : cursor + 4])
    length = int.from_bytes(buffer[cursor + 4 : cursor + CHUNK_HEADER_SIZE], "big", signed=False)
    chunk = Chunk(tag=tag, header_offset=cursor, offset=cursor + CHUNK_HEADER_SIZE, length=length)

    if chunk.end > total:
        raise TruncatedError(
            f"chunk {chunk.tag_text!r} declares {length} bytes, only {total - chunk.offset} available",
            offset=cursor,
        )
    return chunk


def iter_chunks(buffer: Buffer, cursor: int = 0) -> Iterator[Chunk]:
    while True:
        chunk = next_chunk(buffer, cursor)
        if chunk is None:
            return
        yield chunk
        cursor = chunk.end
