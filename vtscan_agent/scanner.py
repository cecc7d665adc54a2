from __future__ import annotations

import time
from typing import Callable
from urllib.parse import urlparse

import httpx

from .cache import CachePolicy, ResultCache
from .config import Settings
from .errors import InvalidUrlError, PostScanReportMissingError, ScanError
from .log import get_logger
from .models import ScanSummary
from .poller import DEFAULT_INTERVAL_MS, DEFAULT_TIMEOUT_MS, wait_for_analysis
from .summarizer import summarize
from .vt_client import VirusTotalClient

logger = get_logger(__name__)


def validate_url(raw: str) -> str:
    """Reject anything that is not an absolute http(s) URL with a dotted host.

    The URL is returned unchanged; callers own normalization, so surrounding
    whitespace is an error rather than something to trim.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidUrlError("Please provide a URL.")
    if raw != raw.strip():
        raise InvalidUrlError("URL must not have leading or trailing whitespace.")
    try:
        parsed = urlparse(raw)
        hostname = parsed.hostname
    except ValueError:
        raise InvalidUrlError("Please provide a valid URL.")
    if parsed.scheme not in ("http", "https"):
        raise InvalidUrlError("Please use an http(s) website URL.")
    if not hostname or "." not in hostname:
        raise InvalidUrlError("Please enter a valid website domain.")
    return raw


class Scanner:
    """Runs the pre-scan lookup / submit / poll / post-scan lookup sequence.

    Every step depends on the previous one; the first failure aborts the scan
    and is re-raised as is. Only successful summaries are cached.
    """

    def __init__(
        self,
        client: VirusTotalClient,
        *,
        cache: ResultCache | None = None,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        now_ms: Callable[[], int] | None = None,
    ):
        self.client = client
        self.cache = cache
        self.interval_ms = interval_ms
        self.timeout_ms = timeout_ms
        self._sleep = sleep
        self._clock = clock
        self._now_ms = now_ms

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.BaseTransport | None = None) -> "Scanner":
        policy = CachePolicy(
            ttl_s=settings.cache_ttl_s,
            max_entries=settings.cache_max_entries,
            evict_batch=settings.cache_evict_batch,
        )
        return cls(
            VirusTotalClient.from_settings(settings, transport=transport),
            cache=ResultCache(policy),
            interval_ms=settings.poll_interval_ms,
            timeout_ms=settings.poll_timeout_ms,
        )

    def close(self) -> None:
        self.client.close()

    def scan(self, url: str) -> ScanSummary:
        summary, _ = self.lookup(url)
        return summary

    def lookup(self, url: str) -> tuple[ScanSummary, bool]:
        """Like scan(), also reporting whether the result came from the cache."""
        validate_url(url)
        if self.cache is not None:
            cached = self.cache.get(url)
            if cached is not None:
                logger.info("Using cached result for %s", url)
                return cached, True

        summary = self._run(url)
        if self.cache is not None:
            self.cache.put(url, summary)
        return summary, False

    def _run(self, url: str) -> ScanSummary:
        logger.info("Starting scan for URL: %s", url)
        try:
            pre_scan = self.client.fetch_url_report(url)
            logger.info("Initial report fetched: %s", "found" if pre_scan is not None else "not found")

            job_id = self.client.submit_url(url)
            logger.info("URL submitted for analysis: %s", job_id)

            wait_for_analysis(
                self.client.fetch_analysis,
                job_id,
                interval_ms=self.interval_ms,
                timeout_ms=self.timeout_ms,
                sleep=self._sleep,
                clock=self._clock,
            )
            logger.info("Analysis completed for: %s", job_id)

            post_scan = self.client.fetch_url_report(url)
            if post_scan is None:
                raise PostScanReportMissingError(url)

            now_ms = self._now_ms() if self._now_ms is not None else None
            summary = summarize(url, pre_scan, post_scan, now_ms=now_ms)
        except ScanError as e:
            logger.error("Error scanning URL %s: %s", url, e)
            raise

        logger.info("Scan completed for %s: %s", url, "SAFE" if summary.safe else "UNSAFE")
        return summary
