import uuid

from sqlalchemy import Column, Text, Boolean, Integer, Float, TIMESTAMP, JSON, Uuid, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base
from .discovery import utcnow

CANDIDATE_STATUSES = ('discovered', 'contacted', 'responded', 'meeting', 'signed', 'rejected')


class Candidate(Base):
    """
    A scouted person in the outreach pipeline.

    Rows outlive the discovery job that found them: deleting the job only
    clears discovery_job_id.
    """
    __tablename__ = 'candidate'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False)

    name = Column(Text, nullable=False)
    handle = Column(Text, nullable=False)
    platform = Column(Text, nullable=False)
    profile_url = Column(Text)
    avatar_url = Column(Text)
    bio = Column(Text)
    location = Column(Text)
    email = Column(Text)
    phone = Column(Text)
    external_url = Column(Text)

    followers = Column(Integer, default=0)
    following = Column(Integer, default=0)
    posts_count = Column(Integer, default=0)
    engagement_rate = Column(Float, default=0.0)
    is_verified = Column(Boolean, default=False)
    is_business_account = Column(Boolean, default=False)

    ai_score = Column(Integer)
    ai_analysis = Column(JSON)
    physical_potential_score = Column(Integer)
    unsigned_probability_score = Column(Integer)
    reachability_score = Column(Integer)
    engagement_health_score = Column(Integer)
    street_casting_score = Column(Integer)
    estimated_age = Column(Float)

    status = Column(Text, nullable=False, default='discovered')
    notes = Column(Text)

    discovery_job_id = Column(Uuid, ForeignKey('discovery_job.id', ondelete='SET NULL'), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    discovery_job = relationship("DiscoveryJob", back_populates="candidates")

    __table_args__ = (
        Index('idx_candidate_user_platform_handle', 'user_id', 'platform', 'handle'),
        Index('idx_candidate_job', 'discovery_job_id'),
        Index('idx_candidate_score', 'ai_score'),
        Index('idx_candidate_status', 'status'),
    )

    def to_summary(self) -> dict:
        return {
            'id': str(self.id),
            'name': self.name,
            'handle': self.handle,
            'platform': self.platform,
            'avatar_url': self.avatar_url,
            'ai_score': self.ai_score,
            'status': self.status,
            'physical_potential_score': self.physical_potential_score,
            'unsigned_probability_score': self.unsigned_probability_score,
            'street_casting_score': self.street_casting_score,
        }
