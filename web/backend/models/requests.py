#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional

from core.filters.models import DiscoveryFilters
from core.normalizer import Platform
from pipeline.stages import DiscoveryRequest, SearchType


class StartDiscoveryRequest(BaseModel):
    """Request to start a discovery job."""
    platforms: Literal['instagram', 'tiktok', 'both'] = Field(..., description="Platform(s) to search")
    search_type: SearchType = Field(..., description="hashtag, location, profile or followers")
    hashtags: List[str] = Field(default_factory=list, description="Hashtags for hashtag search")
    usernames: List[str] = Field(default_factory=list, description="Accounts for profile/followers search")
    search_query: Optional[str] = Field(None, description="Free-text query (location, or comma-separated terms)")
    limit: Optional[int] = Field(None, ge=1, description="Total profiles to scrape across platforms")
    street_casting_mode: bool = Field(default=False, description="Use the street-casting rubric")
    filters: Optional[DiscoveryFilters] = None

    def platform_list(self) -> List[Platform]:
        if self.platforms == 'both':
            return [Platform.INSTAGRAM, Platform.TIKTOK]
        return [Platform(self.platforms)]

    def to_discovery_request(self, default_limit: int, max_limit: int) -> DiscoveryRequest:
        """
        Raises:
            ValueError: No usable search terms for the search type
        """
        return DiscoveryRequest(
            platforms=self.platform_list(),
            search_type=self.search_type,
            hashtags=self.hashtags,
            usernames=self.usernames,
            search_query=self.search_query,
            limit=min(self.limit or default_limit, max_limit),
            street_casting_mode=self.street_casting_mode,
            filters=self.filters,
        )


class AnalyzeRequest(BaseModel):
    """Ad-hoc analysis of a single candidate, outside any discovery job."""
    name: str = Field(..., min_length=1)
    handle: Optional[str] = None
    platform: Platform = Platform.INSTAGRAM
    bio: Optional[str] = None
    followers: Optional[int] = Field(None, ge=0)
    engagement_rate: Optional[float] = Field(None, ge=0)
    location: Optional[str] = None
    avatar_url: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list, max_length=4)
    street_casting_mode: bool = False
    filters: Optional[DiscoveryFilters] = None

    @field_validator('name')
    @classmethod
    def _name_has_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class BatchAnalyzeRequest(BaseModel):
    """Several candidates scored with one rubric, in rate-limited groups."""
    candidates: List[AnalyzeRequest] = Field(..., min_length=1, max_length=50)
    street_casting_mode: bool = False
    filters: Optional[DiscoveryFilters] = None


class ApifyWebhookResource(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    status: Optional[str] = None
    default_dataset_id: Optional[str] = Field(None, alias="defaultDatasetId")


class ApifyWebhookRequest(BaseModel):
    """Apify run notification (ACTOR.RUN.* events)."""
    model_config = ConfigDict(populate_by_name=True)

    event_type: str = Field(..., alias="eventType")
    resource: ApifyWebhookResource
