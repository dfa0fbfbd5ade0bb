"""
Health check route.
Used by deployment / monitoring to see that the service is alive.
"""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter

from core.config import get_settings

router = APIRouter(prefix="/api/v1", tags=["Health"])


@router.get("/health")
def health() -> Dict[str, Any]:
    """
    - always returns ok=True if API is alive
    - extra diagnostics: active decoder limits / policies
    """
    s = get_settings()

    return {
        "ok": True,
        "env": s.app_env,
        "decoder": {
            "max_event_data_size": s.max_event_data_size,
            "unexpected_chunk_policy": s.unexpected_chunk_policy.value,
            "sysex_mode": s.sysex_mode,
        },
        "limits": {
            "max_upload_size_mb": s.max_upload_size_mb,
        },
    }
