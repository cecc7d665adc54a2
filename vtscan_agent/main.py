from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, load_env
from .errors import (
    AnalysisTimeoutError,
    InvalidUrlError,
    ScanError,
    UpstreamHTTPError,
    UpstreamTransportError,
)
from .log import get_logger
from .models import ApiResponse, ScanRequest, ScanSummary
from .scanner import Scanner

load_env()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A missing API key fails startup, not the first request.
    scanner = Scanner.from_settings(Settings.from_env())
    app.state.scanner = scanner
    try:
        yield
    finally:
        scanner.close()


app = FastAPI(title="VirusTotal Scan Agent", version="0.1.0", lifespan=lifespan)


def _cors_allow_origins() -> list[str]:
    raw = os.getenv("VTSCAN_CORS_ORIGINS", "").strip()
    if not raw:
        return ["http://localhost:3000"]
    return [o.strip() for o in raw.split(",") if o.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_allow_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_scanner(request: Request) -> Scanner:
    return request.app.state.scanner


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ApiResponse[Any](success=False, error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error_response(422, "Invalid URL", "Please provide a valid URL")


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.post("/api/virustotal/scan", response_model=ApiResponse[ScanSummary])
def scan_endpoint(req: ScanRequest, scanner: Scanner = Depends(get_scanner)):
    logger.info("Received scan request for URL: %s", req.url)
    try:
        summary, cached = scanner.lookup(req.url)
    except InvalidUrlError as e:
        return _error_response(400, "Invalid URL", str(e))
    except UpstreamHTTPError as e:
        if e.is_auth_error:
            return _error_response(
                403,
                "Invalid or missing VirusTotal API key",
                "Please check your VIRUS_TOTAL_API_KEY configuration",
            )
        if e.is_rate_limited:
            return _error_response(
                429,
                "Rate limit exceeded",
                "Too many requests to VirusTotal API. Please try again later.",
            )
        return _error_response(500, "Scan failed", str(e))
    except AnalysisTimeoutError:
        return _error_response(
            408,
            "Analysis timeout",
            "The URL analysis took too long to complete. Please try again.",
        )
    except UpstreamTransportError as e:
        return _error_response(502, "Upstream unavailable", str(e))
    except ScanError as e:
        return _error_response(500, "Scan failed", str(e) or "An unexpected error occurred during URL scanning")

    verdict = "SAFE" if summary.safe else "UNSAFE"
    label = "URL scan completed (cached)" if cached else "URL scan completed"
    return ApiResponse[ScanSummary](success=True, data=summary, message=f"{label}: {verdict}")
