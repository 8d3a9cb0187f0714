#!/usr/bin/env python3
"""
Filter Models - Caller-supplied discovery constraints.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator


class DiscoveryFilters(BaseModel):
    """
    Optional constraints attached to a discovery job.

    Follower, engagement and city constraints are applied by the filter stage.
    Age range and style preference only steer the street-casting prompt.
    """
    min_followers: Optional[int] = Field(default=None, ge=0)
    max_followers: Optional[int] = Field(default=None, ge=0)
    max_engagement_rate: Optional[float] = Field(default=None, ge=0)
    target_cities: List[str] = Field(default_factory=list)
    age_range: Optional[Tuple[int, int]] = None
    style_preference: Optional[str] = None

    @model_validator(mode='after')
    def _check_ranges(self):
        if (self.min_followers is not None and self.max_followers is not None
                and self.min_followers > self.max_followers):
            raise ValueError("min_followers must not exceed max_followers")
        if self.age_range is not None and self.age_range[0] > self.age_range[1]:
            raise ValueError("age_range lower bound must not exceed upper bound")
        return self
