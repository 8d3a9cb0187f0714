"""
Caller constraints - follower range, engagement ceiling, target cities.

Every constraint is applied only when the profile actually carries the
metric. Unknown values (0 followers, 0 engagement, no location) pass.
"""
import re
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from core.filters.models import DiscoveryFilters
from core.normalizer import CanonicalProfile

CITY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "new york": ("new york", "nyc", "ny", "manhattan", "brooklyn", "queens", "bronx"),
    "los angeles": ("los angeles", "la", "l.a.", "hollywood", "santa monica", "venice beach", "west hollywood"),
    "miami": ("miami", "south beach", "mia", "wynwood"),
    "chicago": ("chicago", "chi", "chitown"),
    "atlanta": ("atlanta", "atl"),
    "san francisco": ("san francisco", "sf", "bay area", "oakland"),
    "london": ("london", "ldn", "uk"),
    "paris": ("paris", "france"),
    "milan": ("milan", "milano", "italy"),
    "tokyo": ("tokyo", "japan", "東京"),
    "seoul": ("seoul", "korea", "서울"),
    "sydney": ("sydney", "australia"),
    "toronto": ("toronto", "6ix", "canada"),
    "berlin": ("berlin", "germany"),
}


SHORT_KEYWORD_LENGTH = 3


@lru_cache(maxsize=256)
def _keyword_pattern(keyword: str) -> "re.Pattern[str]":
    # Short keywords need word boundaries so "la" does not match "atlanta";
    # longer ones match as substrings ("brooklyn" in "Brooklynite")
    if len(keyword) <= SHORT_KEYWORD_LENGTH:
        return re.compile(r"(?<!\w)" + re.escape(keyword) + r"(?!\w)", re.IGNORECASE)
    return re.compile(re.escape(keyword), re.IGNORECASE)


def city_keywords(city: str) -> Tuple[str, ...]:
    """Keywords for a target city; unknown cities match their own name."""
    key = city.strip().lower()
    return CITY_KEYWORDS.get(key, (key,))


def location_matches(location: str, target_cities: List[str]) -> bool:
    for city in target_cities:
        for keyword in city_keywords(city):
            if keyword and _keyword_pattern(keyword).search(location):
                return True
    return False


def constraint_reasons(profile: CanonicalProfile, filters: Optional[DiscoveryFilters]) -> List[str]:
    """Reasons the profile fails the caller's constraints; empty when it passes."""
    if filters is None:
        return []

    reasons = []
    followers = profile.followers_count
    if followers > 0:
        if filters.min_followers is not None and followers < filters.min_followers:
            reasons.append(f"followers {followers} below {filters.min_followers}")
        if filters.max_followers is not None and followers > filters.max_followers:
            reasons.append(f"followers {followers} above {filters.max_followers}")

    if (filters.max_engagement_rate is not None and profile.engagement_rate > 0
            and profile.engagement_rate > filters.max_engagement_rate):
        reasons.append(f"engagement {profile.engagement_rate}% above {filters.max_engagement_rate}%")

    targets = [c for c in filters.target_cities if c and c.strip()]
    if targets and profile.location and profile.location.strip():
        if not location_matches(profile.location, targets):
            reasons.append(f"location '{profile.location}' outside target cities")

    return reasons
