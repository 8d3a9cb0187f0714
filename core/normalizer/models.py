#!/usr/bin/env python3
"""
Normalizer Models - Canonical profile representation shared by the pipeline.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


MAX_RECENT_POST_IMAGES = 5
MAX_ENGAGEMENT_POSTS = 10


class Platform(str, Enum):
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"


class RecordSource(str, Enum):
    """Tag naming the scraper output shape a raw record came from."""
    INSTAGRAM_POST = "instagram_post"          # hashtag scraper: one post, owner embedded
    INSTAGRAM_PROFILE = "instagram_profile"    # profile scraper: full profile + latestPosts
    INSTAGRAM_FOLLOWER = "instagram_follower"  # follower scraper: user stub
    TIKTOK_VIDEO = "tiktok_video"              # tiktok scraper: video with authorMeta

    @property
    def platform(self) -> Platform:
        if self.value.startswith("tiktok"):
            return Platform.TIKTOK
        return Platform.INSTAGRAM


class RecentPost(BaseModel):
    """A single recent post used for engagement and prompt context."""
    model_config = ConfigDict(frozen=True)

    id: str = ""
    url: Optional[str] = None
    image_url: Optional[str] = None
    caption: str = ""
    likes_count: int = 0
    comments_count: int = 0
    timestamp: Optional[str] = None


class CanonicalProfile(BaseModel):
    """Platform-independent candidate profile consumed by filter and scorer."""
    model_config = ConfigDict(frozen=True)

    username: str = Field(min_length=1)
    display_name: str = ""
    platform: Platform

    biography: str = ""
    location: Optional[str] = None
    external_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0
    engagement_rate: float = 0.0  # percent, 0 when unknown

    is_verified: bool = False
    is_business_account: bool = False

    profile_image_url: Optional[str] = None
    post_image_urls: List[str] = Field(default_factory=list, max_length=MAX_RECENT_POST_IMAGES)
    recent_posts: List[RecentPost] = Field(default_factory=list)

    @property
    def username_key(self) -> str:
        """Case-insensitive identity used for deduplication."""
        return self.username.lower()

    @property
    def profile_url(self) -> str:
        if self.platform == Platform.TIKTOK:
            return f"https://tiktok.com/@{self.username}"
        return f"https://instagram.com/{self.username}"
