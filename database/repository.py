import logging

from sqlalchemy.ext.asyncio import AsyncSession

from database.repositories import CandidateRepository, DiscoveryJobRepository

logger = logging.getLogger(__name__)


class ScoutRepository:
    """Aggregates the per-table repositories over one session."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.jobs = DiscoveryJobRepository(db)
        self.candidates = CandidateRepository(db)

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
