# app.py
"""
SMF Decode service main entry (FastAPI)

- App Factory pattern for testing & packaging
- Dev CORS: allow localhost any port (supports credentials)
- Prod CORS: MUST specify explicit origins (no wildcard with credentials)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import get_settings
from core.utils import setup_logging
from routers.decode import router as decode_router
from routers.health import router as health_router

logger = logging.getLogger("smfdecode")


def _is_dev(app_env: str) -> bool:
    v = (app_env or "").strip().lower()
    return v in {"dev", "development", "local"}


def _parse_origins(raw: Optional[str]) -> list[str]:
    """
    Parse comma-separated origins string into list.
    Example: "https://a.com,https://b.com"
    """
    if not raw:
        return []
    parts = [p.strip() for p in raw.split(",")]
    return [p for p in parts if p]


@asynccontextmanager
async def lifespan(_: FastAPI):
    s = get_settings()
    logger.info(
        "Service starting: env=%s policy=%s sysex_mode=%s max_event_data_size=%s",
        s.app_env,
        s.unexpected_chunk_policy.value,
        s.sysex_mode,
        s.max_event_data_size,
    )
    yield
    logger.info("Service shutting down...")


def create_app() -> FastAPI:
    s = get_settings()
    setup_logging(s.log_level)

    app = FastAPI(
        title="SMF Decode",
        version="0.1.0",
        description="Standard MIDI File -> structured header / tracks / events",
        lifespan=lifespan,
    )

    # expose settings for debugging
    app.state.settings = s

    # ---- CORS ----
    if _is_dev(s.app_env):
        allow_origins: list[str] = []
        allow_origin_regex = r"http://(?:localhost|127\.0\.0\.1)(?::\d+)?"
        allow_credentials = True
    else:
        allow_origins = _parse_origins(s.cors_allow_origins)
        allow_origin_regex = None
        # no explicit origins -> credentials disabled
        allow_credentials = bool(allow_origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_origin_regex=allow_origin_regex,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---- Routers ----
    app.include_router(health_router)
    app.include_router(decode_router)

    @app.get("/", include_in_schema=False)
    def root():
        return JSONResponse(
            {
                "service": "SMF Decode",
                "status": "ok",
                "docs_url": "/docs",
            }
        )

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    _s = get_settings()
    uvicorn.run("app:app", host=_s.host, port=_s.port, reload=True)
