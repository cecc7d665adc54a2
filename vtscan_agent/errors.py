"""Exceptions raised by the scan core.

Nothing here is retried internally; every error reaches the caller of
``Scanner.scan`` unchanged.
"""
from __future__ import annotations


class ScanError(Exception):
    """Base class for everything a scan can fail with."""


class ConfigError(ScanError):
    pass


class InvalidUrlError(ScanError, ValueError):
    pass


class UpstreamHTTPError(ScanError):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in (401, 403)

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


class UpstreamTransportError(ScanError):
    pass


class ProtocolViolationError(ScanError):
    """Upstream answered outside its documented contract."""


class MissingJobIdError(ProtocolViolationError):
    def __init__(self):
        super().__init__("No analysis ID returned from VirusTotal.")


class AnalysisNotFoundError(ProtocolViolationError):
    def __init__(self, job_id: str):
        super().__init__(f"Analysis {job_id} not found.")
        self.job_id = job_id


class PostScanReportMissingError(ProtocolViolationError):
    def __init__(self, url: str):
        super().__init__("Final report not found after analysis.")
        self.url = url


class AnalysisTimeoutError(ScanError):
    def __init__(self, job_id: str, timeout_s: float):
        super().__init__(f"Timed out waiting for analysis {job_id} to complete after {timeout_s:g}s.")
        self.job_id = job_id
        self.timeout_s = timeout_s


class UnexpectedJobStatusError(ScanError):
    def __init__(self, job_id: str, status: str):
        super().__init__(f"Unexpected analysis status: {status}")
        self.job_id = job_id
        self.status = status
