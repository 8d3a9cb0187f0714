from database.repositories.base import BaseRepository
from database.repositories.discovery_job import DiscoveryJobRepository
from database.repositories.candidate import CandidateRepository

__all__ = [
    'BaseRepository',
    'DiscoveryJobRepository',
    'CandidateRepository',
]
