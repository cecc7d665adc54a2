from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from .config import VT_BASE_URL, Settings
from .encoding import url_id
from .errors import (
    AnalysisNotFoundError,
    ConfigError,
    MissingJobIdError,
    ProtocolViolationError,
    UpstreamHTTPError,
    UpstreamTransportError,
)
from .log import get_logger
from .models import AnalysisJob, AnalysisResponse, SubmitUrlResponse, UrlReport

logger = get_logger(__name__)


def _error_message(res: httpx.Response) -> str:
    """Best-effort message for a failed upstream response.

    Upstream errors look like {"error": {"code": ..., "message": ...}}; anything
    else falls back to the raw body, then to the status line.
    """
    try:
        body = res.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err.strip():
            return err.strip()

    text = (res.text or "").strip()
    if text:
        return text[:500]
    return f"{res.status_code} {res.reason_phrase}".strip()


class VirusTotalClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = VT_BASE_URL,
        timeout_s: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        if not api_key:
            raise ConfigError("VIRUS_TOTAL_API_KEY is required in environment variables")
        self._http = httpx.Client(
            base_url=base_url,
            timeout=timeout_s,
            transport=transport,
            headers={"accept": "application/json", "x-apikey": api_key},
        )

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.BaseTransport | None = None) -> "VirusTotalClient":
        return cls(
            settings.api_key,
            base_url=settings.base_url,
            timeout_s=settings.http_timeout_s,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "VirusTotalClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any | None:
        """Send a request; returns parsed JSON, or None on 404."""
        try:
            res = self._http.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise UpstreamTransportError(f"{method} {path} failed: {e}") from e

        if res.is_success:
            try:
                return res.json()
            except ValueError as e:
                raise ProtocolViolationError(f"{method} {path} returned a non-JSON body") from e

        if res.status_code == 404:
            return None

        message = _error_message(res)
        logger.warning("%s %s -> HTTP %s: %s", method, path, res.status_code, message)
        raise UpstreamHTTPError(res.status_code, message)

    def fetch_report(self, resource_id: str) -> UrlReport | None:
        """GET the URL report; None means the URL was never analyzed."""
        body = self._request("GET", f"/urls/{resource_id}")
        if body is None:
            return None
        try:
            return UrlReport.model_validate(body)
        except ValidationError as e:
            raise ProtocolViolationError(f"Malformed URL report: {e}") from e

    def fetch_url_report(self, url: str) -> UrlReport | None:
        return self.fetch_report(url_id(url))

    def submit_url(self, url: str) -> str:
        """Queue a fresh analysis of `url` and return the analysis (job) id."""
        body = self._request(
            "POST",
            "/urls",
            data={"url": url},
            headers={"content-type": "application/x-www-form-urlencoded"},
        )
        try:
            parsed = SubmitUrlResponse.model_validate(body or {})
        except ValidationError as e:
            raise ProtocolViolationError(f"Malformed submission response: {e}") from e
        if parsed.data is None or not parsed.data.id:
            raise MissingJobIdError()
        return parsed.data.id

    def fetch_analysis(self, job_id: str) -> AnalysisJob:
        body = self._request("GET", f"/analyses/{job_id}")
        if body is None:
            raise AnalysisNotFoundError(job_id)
        try:
            parsed = AnalysisResponse.model_validate(body)
        except ValidationError as e:
            raise ProtocolViolationError(f"Malformed analysis response: {e}") from e
        return AnalysisJob(
            id=parsed.data.id or job_id,
            status=parsed.data.attributes.status,
            date=parsed.data.attributes.date,
        )
