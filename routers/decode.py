from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile

from core.config import UnexpectedChunkPolicy, get_settings
from core.errors import SmfDecodeError
from core.models import DecodeResult
from core.sequence import SequenceDecoder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Decode"])

_READ_CHUNK_SIZE = 1024 * 1024  # 1MB


async def _read_upload(upload_file: UploadFile, *, max_bytes: int) -> bytes:
    """
    Chunked read into memory with a size limit.
    """
    buf = bytearray()
    try:
        while True:
            chunk = await upload_file.read(_READ_CHUNK_SIZE)
            if not chunk:
                break
            buf.extend(chunk)
            if len(buf) > max_bytes:
                raise HTTPException(
                    status_code=413,
                    detail=f"File too large: {len(buf)/1024/1024:.2f}MB > {max_bytes/1024/1024:.0f}MB",
                )
    finally:
        await upload_file.close()
    return bytes(buf)


@router.post(
    "/decode",
    response_model=DecodeResult,
    summary="Decode a Standard MIDI File",
)
async def decode_midi(
    file: UploadFile = File(...),
    policy: Optional[UnexpectedChunkPolicy] = Query(None, description="Override the unexpected-chunk policy"),
) -> DecodeResult:
    """
    200 -> DecodeResult (event data as hex)
    422 -> structural decode error {kind, message, offset, track_index}
    """
    s = get_settings()
    if policy is not None:
        s = s.model_copy(update={"unexpected_chunk_policy": policy})

    data = await _read_upload(file, max_bytes=s.max_upload_bytes)
    if not data:
        raise HTTPException(status_code=400, detail="Empty upload")

    try:
        result = SequenceDecoder(s).decode(data)
    except SmfDecodeError as e:
        logger.info("decode rejected %s: %s", file.filename, e)
        raise HTTPException(status_code=422, detail=e.to_detail())

    logger.info(
        "decoded %s: format=%s tracks=%s warnings=%s",
        file.filename,
        result.sequence.format,
        len(result.sequence.tracks),
        len(result.warnings),
    )
    return result
