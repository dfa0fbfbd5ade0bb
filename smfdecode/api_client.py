from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from core.models import DecodeResult


# -----------------------------
# Exceptions (Business-level)
# -----------------------------
class SmfDecodeClientError(Exception):
    """Base exception for the API client."""


class NetworkError(SmfDecodeClientError):
    """Connection/timeout/DNS issues."""


class HTTPError(SmfDecodeClientError):
    """Non-2xx response from server."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ContractError(SmfDecodeClientError):
    """Response JSON doesn't match the expected shape."""


def _normalize_base_url(base_url: str) -> str:
    base = (base_url or "").strip()
    if not base:
        base = "http://127.0.0.1:8000"
    return base.rstrip("/")


class SmfDecodeClient:
    """
    API client:
    - GET  /api/v1/health
    - POST /api/v1/decode?policy=skip|abort   (multipart "file")
    """

    def __init__(
        self,
        *,
        base_url: str = "http://127.0.0.1:8000",
        timeout_s: float = 30.0,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = _normalize_base_url(base_url)
        self._owns_http = http is None
        self.http = http or httpx.Client(timeout=httpx.Timeout(timeout_s))

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def health(self) -> Dict[str, Any]:
        url = f"{self.base_url}/api/v1/health"
        try:
            r = self.http.get(url)
        except (httpx.TimeoutException, httpx.NetworkError, httpx.ConnectError) as e:
            raise NetworkError(str(e)) from e

        if r.status_code != 200:
            raise HTTPError(r.status_code, r.text)

        try:
            return r.json()
        except ValueError as e:
            raise ContractError(f"Invalid JSON in /health response: {e}") from e

    def decode_file(self, midi_path: Path, *, policy: Optional[str] = None) -> DecodeResult:
        midi_path = Path(midi_path)
        if not midi_path.exists() or not midi_path.is_file():
            raise ValueError(f"midi_path not found: {midi_path}")

        url = f"{self.base_url}/api/v1/decode"
        params = {"policy": policy} if policy else None

        with midi_path.open("rb") as f:
            files = {"file": (midi_path.name, f, "audio/midi")}
            try:
                r = self.http.post(url, params=params, files=files)
            except (httpx.TimeoutException, httpx.NetworkError, httpx.ConnectError) as e:
                raise NetworkError(str(e)) from e

        if r.status_code != 200:
            raise HTTPError(r.status_code, r.text)

        try:
            data = r.json()
        except ValueError as e:
            raise ContractError(f"Invalid JSON in /decode response: {e}") from e

        try:
            return DecodeResult.model_validate(data)
        except ValidationError as e:
            raise ContractError(f"/decode response violates contract: {e}") from e
