"""Discovery request model and the sizing rules used by the orchestrator."""

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from core.config_loader import DiscoveryConfig
from core.filters.models import DiscoveryFilters
from core.normalizer import Platform


class SearchType(str, Enum):
    HASHTAG = "hashtag"
    LOCATION = "location"
    PROFILE = "profile"
    FOLLOWERS = "followers"


_SPLIT = re.compile(r"[,\s]+")


def split_terms(text: Optional[str]) -> List[str]:
    return [t for t in _SPLIT.split(text or "") if t]


def location_to_hashtag(location: str) -> str:
    """'New York' -> 'newyork'."""
    return re.sub(r"[^\w]", "", location.lower())


class DiscoveryRequest(BaseModel):
    """What a discovery job searches for."""
    platforms: List[Platform] = Field(min_length=1)
    search_type: SearchType
    hashtags: List[str] = Field(default_factory=list)
    usernames: List[str] = Field(default_factory=list)
    search_query: Optional[str] = None
    limit: int = Field(default=50, ge=1)
    street_casting_mode: bool = False
    filters: Optional[DiscoveryFilters] = None

    @model_validator(mode='after')
    def _require_sources(self):
        if not self.sources():
            raise ValueError(f"No search terms given for search_type '{self.search_type.value}'")
        # Keep platform order stable and unique
        self.platforms = list(dict.fromkeys(self.platforms))
        return self

    def sources(self) -> List[str]:
        """Hashtags or usernames the scrapers are run for."""
        if self.search_type == SearchType.HASHTAG:
            terms = self.hashtags or split_terms(self.search_query)
            return list(dict.fromkeys(t.strip().lstrip('#') for t in terms if t.strip().lstrip('#')))
        if self.search_type == SearchType.LOCATION:
            query = self.search_query or (self.hashtags[0] if self.hashtags else "")
            tag = location_to_hashtag(query)
            return [tag] if tag else []
        terms = self.usernames or split_terms(self.search_query)
        return list(dict.fromkeys(t.strip().lstrip('@') for t in terms if t.strip().lstrip('@')))


def request_from_job(job) -> DiscoveryRequest:
    """Rebuild the DiscoveryRequest a persisted job was created from."""
    search_type = SearchType(job.search_type)
    terms = list(job.hashtags or [])
    fields = dict(
        platforms=list(job.platforms or []),
        search_type=search_type,
        search_query=job.search_query,
        limit=job.requested_limit or 50,
        street_casting_mode=bool(job.street_casting_mode),
        filters=DiscoveryFilters(**job.filters) if job.filters else None,
    )
    if search_type in (SearchType.PROFILE, SearchType.FOLLOWERS):
        fields["usernames"] = terms
    else:
        fields["hashtags"] = terms
    return DiscoveryRequest(**fields)


def per_source_limit(limit: int, n_platforms: int, n_sources: int, cap: int = 30) -> int:
    """min(ceil(limit / platforms / sources), cap), at least 1."""
    share = math.ceil(limit / max(1, n_platforms) / max(1, n_sources))
    return max(1, min(share, cap))


def analysis_subset_size(n: int, config: Optional[DiscoveryConfig] = None) -> int:
    """min(n, cap, max(ceil(n * fraction), floor)); with defaults min(n, 25, max(ceil(n/2), 10))."""
    cfg = config or DiscoveryConfig()
    if n <= 0:
        return 0
    return min(n, cfg.analysis_cap, max(math.ceil(n * cfg.analysis_fraction), cfg.analysis_floor))


def describe_error(exc: BaseException) -> str:
    """Human message for a job failure, unwrapping task-group exception groups."""
    while isinstance(exc, BaseExceptionGroup) and exc.exceptions:
        exc = exc.exceptions[0]
    return str(exc) or type(exc).__name__


@dataclass
class DiscoveryOutcome:
    """Result of running one discovery job."""
    job_id: str
    success: bool
    platforms_searched: List[str] = field(default_factory=list)
    hashtags_searched: List[str] = field(default_factory=list)
    candidates_found: int = 0
    candidates_analyzed: int = 0
    street_casting_mode: bool = False
    error: Optional[str] = None
    execution_time: float = 0.0

    def to_dict(self) -> dict:
        if not self.success:
            return {'success': False, 'job_id': self.job_id, 'error': self.error}
        return {
            'success': True,
            'job_id': self.job_id,
            'platforms_searched': self.platforms_searched,
            'hashtags_searched': self.hashtags_searched,
            'candidates_found': self.candidates_found,
            'candidates_analyzed': self.candidates_analyzed,
            'street_casting_mode': self.street_casting_mode,
        }
