import contextlib
import logging
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from database.database import get_session_factory
from database.repository import ScoutRepository

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def job_uow(session_factory: Optional[async_sessionmaker] = None) -> AsyncIterator[ScoutRepository]:
    """Per-unit-of-work transaction scope.

    Yields a ScoutRepository bound to a fresh AsyncSession. Commits on
    success, rolls back on exception, always closes.

    Usage:
        async with job_uow() as repo:
            job = await repo.jobs.get(job_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        repo = ScoutRepository(session)
        yield repo
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
