from __future__ import annotations

import time
from datetime import datetime, timezone

from .models import AnalysisStats, ScanSummary, TotalVotes, UrlReport

STALE_AFTER_MS = 30 * 24 * 60 * 60 * 1000


def to_iso(ts_sec: int | None) -> str | None:
    """Epoch seconds -> '2024-01-01T00:00:00.000Z'; missing or zero -> None."""
    if not ts_sec:
        return None
    dt = datetime.fromtimestamp(ts_sec, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def humanize_duration(ms: int | float | None) -> str:
    if ms is None or ms < 0:
        return "unknown"
    sec = int(ms // 1000)
    mins = sec // 60
    hours = mins // 60
    days = hours // 24
    months = days // 30
    if months >= 1:
        return f"{months} month{'s' if months > 1 else ''} {days % 30}d"
    if days >= 1:
        return f"{days}d {hours % 24}h"
    if hours >= 1:
        return f"{hours}h {mins % 60}m"
    if mins >= 1:
        return f"{mins}m"
    return f"{sec}s"


def is_unsafe(stats: AnalysisStats) -> bool:
    # Engine detections only; community votes never flip the verdict.
    return stats.flagged > 0


def summarize(
    url: str,
    pre_scan: UrlReport | None,
    post_scan: UrlReport,
    *,
    now_ms: int | None = None,
) -> ScanSummary:
    """Combine the report seen before the rescan with the one after it.

    Staleness and "last submitted" come from `pre_scan` (the state the user
    would have seen without rescanning). Dates, counts, stats and votes come
    from `post_scan`.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    before = pre_scan.attributes if pre_scan is not None else None
    after = post_scan.attributes

    stats = after.last_analysis_stats or AnalysisStats()
    votes = after.total_votes or TotalVotes()

    was_stale = False
    stale_age_ms = None
    submitted_ago_ms = None
    if before is not None and before.last_analysis_date:
        stale_age_ms = now_ms - before.last_analysis_date * 1000
        was_stale = stale_age_ms > STALE_AFTER_MS
    if before is not None and before.last_submission_date:
        submitted_ago_ms = now_ms - before.last_submission_date * 1000

    return ScanSummary(
        url=url,
        safe=not is_unsafe(stats),
        was_stale=was_stale,
        stale_age_human=humanize_duration(stale_age_ms) if was_stale else "fresh",
        last_submitted_ago=humanize_duration(submitted_ago_ms) if submitted_ago_ms is not None else "unknown",
        last_analysis_date=to_iso(after.last_analysis_date),
        last_submission_date=to_iso(after.last_submission_date),
        times_submitted=after.times_submitted,
        total_votes=votes,
        last_analysis_stats=stats,
    )
