"""In-memory job-state store backing the status polling endpoints."""

import logging
import uuid
from typing import Any, Dict, Optional

from cachetools import TTLCache

from ...domain.models.job import JobState

logger = logging.getLogger(__name__)


class InMemoryJobStore:
    """Keeps job states for a limited time, like a transient cache.

    Expired or unknown ids read back as an ``unknown`` state.
    """

    def __init__(self, ttl: int = 3600, maxsize: int = 1000):
        """Initialize the store.

        Args:
            ttl: Seconds a job state is kept after its last write
            maxsize: Maximum number of jobs kept
        """
        self._jobs: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)

    def create(self, job_id: Optional[str] = None) -> JobState:
        """Register a new queued job."""
        job_id = job_id or f"fact_check_{uuid.uuid4().hex}"
        state = JobState(job_id=job_id)
        self._jobs[job_id] = state
        logger.info(f"🆕 Job {job_id} queued")
        return state

    def get(self, job_id: str) -> JobState:
        """Get a job state, or an ``unknown`` state if it does not exist."""
        return self._jobs.get(job_id) or JobState.unknown(job_id)

    def update(self, job_id: str, progress: float, stage: str, message: str) -> None:
        """Record a progress update, creating the job if needed."""
        state = self._jobs.get(job_id) or JobState(job_id=job_id)
        state.mark_processing(progress, stage, message)
        # Re-assign so the TTL restarts
        self._jobs[job_id] = state

    def complete(self, job_id: str, report: Dict[str, Any]) -> None:
        """Mark a job as completed."""
        state = self._jobs.get(job_id) or JobState(job_id=job_id)
        state.mark_completed(report)
        self._jobs[job_id] = state
        logger.info(f"✅ Job {job_id} completed")

    def fail(self, job_id: str, error_message: str) -> None:
        """Mark a job as failed."""
        state = self._jobs.get(job_id) or JobState(job_id=job_id)
        state.mark_failed(error_message)
        self._jobs[job_id] = state
        logger.error(f"❌ Job {job_id} failed: {error_message}")

    def __len__(self) -> int:
        return len(self._jobs)


class JobProgressReporter:
    """Progress reporter that writes updates into a job store."""

    def __init__(self, store: InMemoryJobStore, job_id: str):
        self._store = store
        self._job_id = job_id

    def report(self, percent: float, stage: str, message: str) -> None:
        self._store.update(self._job_id, percent, stage, message)
