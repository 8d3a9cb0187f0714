#!/usr/bin/env python3
"""
Discovery Job State - Lifecycle of a discovery job as pure transitions.

    pending -> running -> completed
                       -> failed

completed and failed are terminal. candidates_found is written once after
scrape+filter; candidates_analyzed only ever grows. Every transition
returns a new JobState and raises InvalidJobTransition on misuse.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class InvalidJobTransition(Exception):
    """Raised when a transition is not allowed from the current state."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class JobState:
    status: JobStatus = JobStatus.PENDING
    candidates_found: Optional[int] = None
    candidates_analyzed: int = 0
    error_message: Optional[str] = None
    completed_at: Optional[datetime] = None

    def _require(self, *allowed: JobStatus, action: str) -> None:
        if self.status not in allowed:
            raise InvalidJobTransition(f"Cannot {action} a {self.status.value} job")

    def start(self) -> "JobState":
        self._require(JobStatus.PENDING, action="start")
        return replace(self, status=JobStatus.RUNNING)

    def record_found(self, count: int) -> "JobState":
        self._require(JobStatus.RUNNING, action="record candidates for")
        if self.candidates_found is not None:
            raise InvalidJobTransition("candidates_found is already recorded")
        if count < 0:
            raise InvalidJobTransition("candidates_found cannot be negative")
        return replace(self, candidates_found=count)

    def record_analyzed(self) -> "JobState":
        self._require(JobStatus.RUNNING, action="record analysis for")
        return replace(self, candidates_analyzed=self.candidates_analyzed + 1)

    def complete(self, at: Optional[datetime] = None) -> "JobState":
        self._require(JobStatus.RUNNING, action="complete")
        return replace(self, status=JobStatus.COMPLETED, completed_at=at or _utcnow())

    def fail(self, message: str, at: Optional[datetime] = None) -> "JobState":
        if self.status.is_terminal:
            raise InvalidJobTransition(f"Cannot fail a {self.status.value} job")
        return replace(
            self,
            status=JobStatus.FAILED,
            error_message=message or "Unknown error",
            completed_at=at or _utcnow(),
        )
