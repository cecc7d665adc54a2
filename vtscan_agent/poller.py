from __future__ import annotations

import time
from typing import Callable

from .errors import AnalysisTimeoutError, UnexpectedJobStatusError
from .log import get_logger
from .models import AnalysisJob

logger = get_logger(__name__)

DEFAULT_INTERVAL_MS = 3000
DEFAULT_TIMEOUT_MS = 180000


def wait_for_analysis(
    fetch_status: Callable[[str], AnalysisJob],
    job_id: str,
    *,
    interval_ms: int = DEFAULT_INTERVAL_MS,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> AnalysisJob:
    """Poll `fetch_status(job_id)` until the job leaves queued/running.

    Returns the completed job as soon as it is seen, without sleeping. Any
    other terminal status raises UnexpectedJobStatusError right away; a job
    still pending once `timeout_ms` has elapsed raises AnalysisTimeoutError.
    Errors from `fetch_status` propagate untouched.
    """
    start = clock()
    attempts = 0
    while (clock() - start) * 1000 < timeout_ms:
        job = fetch_status(job_id)
        attempts += 1
        if job.completed:
            logger.debug("Analysis %s completed after %d check(s)", job_id, attempts)
            return job
        if not job.pending:
            raise UnexpectedJobStatusError(job_id, str(job.status))
        logger.debug("Analysis %s is %s, checking again in %dms", job_id, job.status or "pending", interval_ms)
        sleep(interval_ms / 1000)

    raise AnalysisTimeoutError(job_id, timeout_ms / 1000)
