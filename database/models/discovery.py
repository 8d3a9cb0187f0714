import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Text, Boolean, Integer, TIMESTAMP, JSON, Uuid, Index
from sqlalchemy.orm import relationship

from core.job_state import JobState, JobStatus

from .base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiscoveryJob(Base):
    """
    One discovery run: scrape, filter, score and persist candidates.

    Tracks:
    - What was searched (platforms, search type, hashtags/usernames, filters)
    - Lifecycle status (pending -> running -> completed | failed)
    - Progress counters written as checkpoints while the job runs
    """
    __tablename__ = 'discovery_job'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False)

    platforms = Column(JSON, nullable=False, default=list)
    search_type = Column(Text, nullable=False)
    search_query = Column(Text)
    hashtags = Column(JSON, nullable=False, default=list)
    filters = Column(JSON, nullable=False, default=dict)
    street_casting_mode = Column(Boolean, nullable=False, default=False)
    requested_limit = Column(Integer, nullable=False, default=50)

    status = Column(Text, nullable=False, default='pending')
    candidates_found = Column(Integer)
    candidates_analyzed = Column(Integer, nullable=False, default=0)
    error_message = Column(Text)

    # Latest Apify run started for this job, matched by the completion webhook
    apify_run_id = Column(Text)
    apify_record_source = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    completed_at = Column(TIMESTAMP(timezone=True))

    candidates = relationship("Candidate", back_populates="discovery_job", passive_deletes=True)

    __table_args__ = (
        Index('idx_discovery_job_user', 'user_id'),
        Index('idx_discovery_job_status', 'status'),
        Index('idx_discovery_job_apify_run', 'apify_run_id'),
    )

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'user_id': self.user_id,
            'platforms': list(self.platforms or []),
            'search_type': self.search_type,
            'search_query': self.search_query,
            'hashtags': list(self.hashtags or []),
            'filters': dict(self.filters or {}),
            'street_casting_mode': bool(self.street_casting_mode),
            'requested_limit': self.requested_limit,
            'status': self.status,
            'candidates_found': self.candidates_found,
            'candidates_analyzed': self.candidates_analyzed,
            'error_message': self.error_message,
            'apify_run_id': self.apify_run_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }

    def to_state(self) -> JobState:
        """The persisted lifecycle as a JobState, for resuming a job."""
        return JobState(
            status=JobStatus(self.status),
            candidates_found=self.candidates_found,
            candidates_analyzed=self.candidates_analyzed or 0,
            error_message=self.error_message,
            completed_at=self.completed_at,
        )
