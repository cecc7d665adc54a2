"""
Shared fixtures: a fake VirusTotal API behind httpx.MockTransport and a fake
clock, so scans run without network access or real sleeping.
"""
from __future__ import annotations

from typing import Any

import httpx
import pytest

from vtscan_agent.cache import ResultCache
from vtscan_agent.scanner import Scanner
from vtscan_agent.vt_client import VirusTotalClient

NOW_MS = 1_760_000_000_000
NOW_S = NOW_MS // 1000
DAY_S = 24 * 60 * 60


def days_ago(days: float) -> int:
    return int(NOW_S - days * DAY_S)


def url_report(**attributes: Any) -> dict[str, Any]:
    return {"data": {"id": "report-id", "type": "url", "attributes": attributes}}


def stats(harmless=0, malicious=0, suspicious=0, timeout=0, undetected=0) -> dict[str, int]:
    return {
        "harmless": harmless,
        "malicious": malicious,
        "suspicious": suspicious,
        "timeout": timeout,
        "undetected": undetected,
    }


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeUpstream:
    """Scripted stand-in for the three VirusTotal endpoints we call.

    `reports` is consumed one entry per GET /urls/{id}; None means 404.
    `statuses` is consumed one entry per GET /analyses/{id}, the last entry
    repeating forever.
    """

    def __init__(self):
        self.job_id = "u-0f1e2d-1760000000"
        self.reports: list[dict[str, Any] | None] = []
        self.statuses: list[str] = ["completed"]
        self.submit_response: httpx.Response | None = None
        self.report_error: httpx.Response | None = None
        self.analysis_response: httpx.Response | None = None
        self.requests: list[httpx.Request] = []

    def calls(self, method: str, fragment: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and fragment in r.url.path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path.endswith("/urls"):
            if self.submit_response is not None:
                return self.submit_response
            return httpx.Response(200, json={"data": {"type": "analysis", "id": self.job_id}})

        if request.method == "GET" and "/urls/" in path:
            if self.report_error is not None:
                return self.report_error
            report = self.reports.pop(0) if self.reports else None
            if report is None:
                return httpx.Response(
                    404,
                    json={"error": {"code": "NotFoundError", "message": "URL not found"}},
                )
            return httpx.Response(200, json=report)

        if request.method == "GET" and "/analyses/" in path:
            if self.analysis_response is not None:
                return self.analysis_response
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            return httpx.Response(
                200,
                json={
                    "data": {
                        "id": self.job_id,
                        "type": "analysis",
                        "attributes": {"status": status, "date": NOW_S},
                    }
                },
            )

        return httpx.Response(500, text="unexpected request")


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def vt_client(upstream):
    client = VirusTotalClient(
        "test-key",
        base_url="https://vt.test/api/v3",
        transport=httpx.MockTransport(upstream.handler),
    )
    yield client
    client.close()


@pytest.fixture
def scanner(vt_client, clock) -> Scanner:
    return Scanner(
        vt_client,
        cache=ResultCache(),
        sleep=clock.sleep,
        clock=clock,
        now_ms=lambda: NOW_MS,
    )
