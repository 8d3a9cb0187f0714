from .base import Base
from .discovery import DiscoveryJob
from .candidate import Candidate, CANDIDATE_STATUSES

__all__ = [
    'Base',
    'DiscoveryJob',
    'Candidate',
    'CANDIDATE_STATUSES',
]
