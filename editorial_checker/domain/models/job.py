"""Domain model for background fact-check jobs."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class JobStatus(Enum):
    """Status of a background fact-check job."""
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass
class JobState:
    """Mutable progress record polled by the editor UI."""

    job_id: str
    status: JobStatus = JobStatus.QUEUED
    progress: int = 0
    stage: str = "initializing"
    message: str = "Job queued..."
    updated_at: datetime = field(default_factory=datetime.now)

    # Set once the run finishes
    report: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @classmethod
    def unknown(cls, job_id: str) -> "JobState":
        """State returned for ids the store has never seen (or has expired)."""
        return cls(
            job_id=job_id,
            status=JobStatus.UNKNOWN,
            stage="unknown",
            message="Job not found",
        )

    @property
    def is_finished(self) -> bool:
        """Check if the job reached a terminal state."""
        return self.status in [JobStatus.COMPLETED, JobStatus.FAILED]

    def mark_processing(self, progress: float, stage: str, message: str) -> None:
        """Record a progress update."""
        self.status = JobStatus.PROCESSING
        self.progress = max(0, min(100, int(progress)))
        self.stage = stage
        self.message = message
        self.updated_at = datetime.now()

    def mark_completed(self, report: Dict[str, Any]) -> None:
        """Mark job as completed with its report."""
        self.status = JobStatus.COMPLETED
        self.progress = 100
        self.stage = "complete"
        self.message = "Fact-check completed"
        self.report = report
        self.updated_at = datetime.now()

    def mark_failed(self, error_message: str) -> None:
        """Mark job as failed with message."""
        self.status = JobStatus.FAILED
        self.progress = 0
        self.stage = "error"
        self.message = error_message
        self.error = error_message
        self.updated_at = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert job state to dictionary for API responses."""
        return {
            'job_id': self.job_id,
            'status': self.status.value,
            'progress': self.progress,
            'stage': self.stage,
            'message': self.message,
            'updated_at': self.updated_at.isoformat(),
            'report': self.report,
            'error': self.error,
        }
