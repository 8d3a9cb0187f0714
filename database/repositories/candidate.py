import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func

from core.normalizer import CanonicalProfile
from core.scorer.models import ScoreResult, StreetCastingAnalysis
from database.models import Candidate, CANDIDATE_STATUSES
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class CandidateRepository(BaseRepository):
    async def exists_by_username(self, user_id: str, username: str, platform: str) -> bool:
        """Case-insensitive check for an existing candidate of this user."""
        stmt = (
            select(Candidate.id)
            .where(
                Candidate.user_id == user_id,
                Candidate.platform == platform,
                func.lower(Candidate.handle) == username.lower(),
            )
            .limit(1)
        )
        return (await self.db.execute(stmt)).scalar_one_or_none() is not None

    async def create_from_score(
        self,
        user_id: str,
        profile: CanonicalProfile,
        result: ScoreResult,
        discovery_job_id: Optional[Any] = None,
        avatar_url: Optional[str] = None,
    ) -> Candidate:
        analysis = result.analysis
        street = analysis if isinstance(analysis, StreetCastingAnalysis) else None

        candidate = Candidate(
            user_id=user_id,
            name=profile.display_name or profile.username,
            handle=profile.username,
            platform=profile.platform.value,
            profile_url=profile.profile_url,
            avatar_url=avatar_url or profile.profile_image_url,
            bio=profile.biography,
            location=profile.location,
            email=profile.email,
            phone=profile.phone,
            external_url=profile.external_url,
            followers=profile.followers_count,
            following=profile.following_count,
            posts_count=profile.posts_count,
            engagement_rate=profile.engagement_rate,
            is_verified=profile.is_verified,
            is_business_account=profile.is_business_account,
            ai_score=result.composite_score,
            ai_analysis=analysis.model_dump(mode='json'),
            physical_potential_score=analysis.physical_potential.score,
            unsigned_probability_score=analysis.unsigned_probability.score,
            reachability_score=analysis.reachability.score,
            engagement_health_score=analysis.engagement_health.score,
            street_casting_score=street.street_casting_score if street else None,
            estimated_age=street.estimated_age if street else None,
            status='discovered',
            discovery_job_id=discovery_job_id,
        )
        self.db.add(candidate)
        await self.db.flush()
        return candidate

    async def list_for_job(self, job_id: Any, limit: int = 20) -> List[Candidate]:
        """Candidates found by a job, best score first."""
        stmt = (
            select(Candidate)
            .where(Candidate.discovery_job_id == job_id)
            .order_by(Candidate.ai_score.desc().nulls_last(), Candidate.created_at)
            .limit(limit)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def get(self, candidate_id: Any, user_id: Optional[str] = None) -> Optional[Candidate]:
        stmt = select(Candidate).where(Candidate.id == candidate_id)
        if user_id is not None:
            stmt = stmt.where(Candidate.user_id == user_id)
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def count_by_status(self, user_id: str) -> Dict[str, int]:
        """Pipeline stats: number of candidates per status (all statuses present)."""
        stmt = (
            select(Candidate.status, func.count(Candidate.id))
            .where(Candidate.user_id == user_id)
            .group_by(Candidate.status)
        )
        counts = {status: 0 for status in CANDIDATE_STATUSES}
        for status, count in (await self.db.execute(stmt)).all():
            counts[status] = count
        return counts
