from __future__ import annotations

from dataclasses import dataclass

from .models import ScanSummary


@dataclass(frozen=True)
class Notification:
    title: str
    body: str


def format_notification(summary: ScanSummary) -> Notification:
    status = "SAFE ✅" if summary.safe else "UNSAFE ❌"
    if summary.was_stale:
        stale = (
            f"Stale before rescan: YES (last checked ~{summary.stale_age_human} ago; "
            f"last submitted ~{summary.last_submitted_ago})"
        )
    else:
        stale = "Stale before rescan: NO"

    stats = summary.last_analysis_stats
    votes = summary.total_votes
    lines = [
        f"URL: {summary.url}",
        stale,
        f"Stats — harmless:{stats.harmless}  undetected:{stats.undetected}  "
        f"suspicious:{stats.suspicious}  malicious:{stats.malicious}  timeout:{stats.timeout}",
        f"Community votes — harmless:{votes.harmless}  malicious:{votes.malicious}",
    ]
    if summary.last_analysis_date:
        lines.append(f"Last analysis: {summary.last_analysis_date}")
    if summary.last_submission_date:
        lines.append(f"Last submission: {summary.last_submission_date}")

    return Notification(title=f"VirusTotal: {status}", body="\n".join(lines))
