import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, delete

from core.job_state import InvalidJobTransition, JobState, JobStatus
from database.models import Candidate, DiscoveryJob
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class DiscoveryJobRepository(BaseRepository):
    async def create(
        self,
        user_id: str,
        platforms: List[str],
        search_type: str,
        search_query: Optional[str] = None,
        hashtags: Optional[List[str]] = None,
        filters: Optional[Dict[str, Any]] = None,
        street_casting_mode: bool = False,
        requested_limit: int = 50,
    ) -> DiscoveryJob:
        job = DiscoveryJob(
            user_id=user_id,
            platforms=list(platforms),
            search_type=search_type,
            search_query=search_query,
            hashtags=list(hashtags or []),
            filters=dict(filters or {}),
            street_casting_mode=street_casting_mode,
            requested_limit=requested_limit,
            status=JobStatus.PENDING.value,
            candidates_analyzed=0,
        )
        self.db.add(job)
        await self.db.flush()  # Generate ID
        return job

    async def get(self, job_id: Any, user_id: Optional[str] = None) -> Optional[DiscoveryJob]:
        stmt = select(DiscoveryJob).where(DiscoveryJob.id == job_id)
        if user_id is not None:
            stmt = stmt.where(DiscoveryJob.user_id == user_id)
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def get_by_apify_run(self, run_id: str) -> Optional[DiscoveryJob]:
        stmt = select(DiscoveryJob).where(DiscoveryJob.apify_run_id == run_id)
        return (await self.db.execute(stmt)).scalars().first()

    async def record_apify_run(self, job_id: Any, run_id: str, record_source: str) -> None:
        """Remember the latest scraper run of a job; terminal jobs are left alone."""
        await self.db.execute(
            update(DiscoveryJob)
            .where(DiscoveryJob.id == job_id)
            .where(DiscoveryJob.status.in_((JobStatus.PENDING.value, JobStatus.RUNNING.value)))
            .values(apify_run_id=run_id, apify_record_source=record_source)
        )

    async def save_state(self, job_id: Any, state: JobState) -> DiscoveryJob:
        """
        Write a JobState onto the row.

        Raises:
            LookupError: Job does not exist
            InvalidJobTransition: Row is already terminal, or the write
                would lower a progress counter
        """
        job = await self.get(job_id)
        if job is None:
            raise LookupError(f"Discovery job {job_id} not found")

        current = JobStatus(job.status)
        if current.is_terminal:
            raise InvalidJobTransition(f"Discovery job {job_id} is already {current.value}")
        if state.candidates_analyzed < (job.candidates_analyzed or 0):
            raise InvalidJobTransition("candidates_analyzed cannot decrease")

        job.status = state.status.value
        job.candidates_found = state.candidates_found
        job.candidates_analyzed = state.candidates_analyzed
        job.error_message = state.error_message
        job.completed_at = state.completed_at
        await self.db.flush()
        return job

    async def delete(self, job_id: Any, user_id: str) -> bool:
        """Delete a job; its candidates survive with discovery_job_id cleared."""
        job = await self.get(job_id, user_id)
        if job is None:
            return False

        await self.db.execute(
            update(Candidate)
            .where(Candidate.discovery_job_id == job.id)
            .values(discovery_job_id=None)
        )
        await self.db.execute(delete(DiscoveryJob).where(DiscoveryJob.id == job.id))
        await self.db.flush()
        logger.info(f"Deleted discovery job {job_id}")
        return True
