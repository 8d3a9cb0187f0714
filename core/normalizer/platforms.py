#!/usr/bin/env python3
"""
Platform Mappers - One explicit mapping function per scraper output shape.

Each source has a field table listing, per canonical field, the raw keys that
carry it in priority order. Mappers never perform I/O and never raise for
missing data; a record without a resolvable username yields a rejection
reason instead of a profile.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.normalizer.models import (
    CanonicalProfile,
    Platform,
    RecentPost,
    RecordSource,
    MAX_RECENT_POST_IMAGES,
    MAX_ENGAGEMENT_POSTS,
)


@dataclass(frozen=True)
class NormalizeOutcome:
    """Either a profile or the reason the record was dropped."""
    profile: Optional[CanonicalProfile] = None
    reason: Optional[str] = None


FieldTable = Dict[str, Tuple[str, ...]]

INSTAGRAM_PROFILE_FIELDS: FieldTable = {
    "username": ("username",),
    "display_name": ("fullName", "username"),
    "biography": ("biography",),
    "profile_image_url": ("profilePicUrlHD", "profilePicUrl"),
    "followers_count": ("followersCount",),
    "following_count": ("followsCount", "followingCount"),
    "posts_count": ("postsCount",),
    "is_verified": ("verified", "isVerified"),
    "is_business_account": ("isBusinessAccount",),
    "external_url": ("externalUrl",),
    "email": ("businessEmail", "publicEmail"),
    "phone": ("businessPhoneNumber", "businessPhone"),
    "location": ("businessAddress", "city"),
    "posts": ("latestPosts",),
}

INSTAGRAM_POST_FIELDS: FieldTable = {
    "username": ("ownerUsername",),
    "display_name": ("ownerFullName", "ownerUsername"),
    "location": ("locationName",),
    "image_url": ("displayUrl", "imageUrl"),
    "likes_count": ("likesCount",),
    "comments_count": ("commentsCount",),
    "caption": ("caption",),
    "post_id": ("id", "shortCode"),
    "post_url": ("url",),
    "timestamp": ("timestamp",),
}

INSTAGRAM_FOLLOWER_FIELDS: FieldTable = {
    "username": ("username",),
    "display_name": ("full_name", "fullName", "username"),
    "profile_image_url": ("profile_pic_url", "profilePicUrl"),
    "is_verified": ("is_verified", "verified"),
}

TIKTOK_AUTHOR_FIELDS: FieldTable = {
    "username": ("name", "uniqueId"),
    "display_name": ("nickName", "nickname", "name"),
    "biography": ("signature",),
    "profile_image_url": ("avatar", "originalAvatarUrl"),
    "followers_count": ("fans", "followerCount"),
    "following_count": ("following", "followingCount"),
    "heart_count": ("heart", "heartCount"),
    "video_count": ("video", "videoCount"),
    "is_verified": ("verified",),
    "external_url": ("bioLink",),
}

TIKTOK_VIDEO_FIELDS: FieldTable = {
    "post_id": ("id",),
    "post_url": ("webVideoUrl",),
    "caption": ("text",),
    "likes_count": ("diggCount",),
    "comments_count": ("commentCount",),
    "timestamp": ("createTimeISO",),
}


def _pick(record: Dict[str, Any], table: FieldTable, field: str) -> Any:
    """Return the first non-empty value for ``field`` according to ``table``."""
    for key in table.get(field, ()):
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _clean_username(value: Any) -> Optional[str]:
    username = _as_str(value)
    if username is None:
        return None
    return username.lstrip("@").strip() or None


def _location_text(value: Any) -> Optional[str]:
    """Business addresses arrive as plain strings or as address objects."""
    if isinstance(value, dict):
        return _as_str(value.get("city_name") or value.get("city") or value.get("street_address"))
    return _as_str(value)


def engagement_rate(total_interactions: float, item_count: int, followers: int) -> float:
    """Average interactions per item as a percentage of followers, 2 decimals.

    Returns 0.0 whenever followers or item_count is 0 so callers never see
    NaN or infinity.
    """
    if followers <= 0 or item_count <= 0:
        return 0.0
    return round((total_interactions / item_count) / followers * 100, 2)


def _instagram_post(raw: Dict[str, Any]) -> RecentPost:
    return RecentPost(
        id=_as_str(_pick(raw, INSTAGRAM_POST_FIELDS, "post_id")) or "",
        url=_as_str(_pick(raw, INSTAGRAM_POST_FIELDS, "post_url")),
        image_url=_as_str(_pick(raw, INSTAGRAM_POST_FIELDS, "image_url")),
        caption=_as_str(_pick(raw, INSTAGRAM_POST_FIELDS, "caption")) or "",
        likes_count=max(0, _as_int(_pick(raw, INSTAGRAM_POST_FIELDS, "likes_count"))),
        comments_count=max(0, _as_int(_pick(raw, INSTAGRAM_POST_FIELDS, "comments_count"))),
        timestamp=_as_str(_pick(raw, INSTAGRAM_POST_FIELDS, "timestamp")),
    )


def _post_image_urls(posts: List[RecentPost]) -> List[str]:
    return [p.image_url for p in posts if p.image_url][:MAX_RECENT_POST_IMAGES]


def map_instagram_profile(raw: Dict[str, Any]) -> NormalizeOutcome:
    """Profile scraper output: full profile with post history."""
    username = _clean_username(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "username"))
    if not username:
        return NormalizeOutcome(reason="instagram profile without username")

    raw_posts = _pick(raw, INSTAGRAM_PROFILE_FIELDS, "posts") or []
    if not isinstance(raw_posts, list):
        raw_posts = []
    posts = [_instagram_post(p) for p in raw_posts[:MAX_ENGAGEMENT_POSTS] if isinstance(p, dict)]

    followers = max(0, _as_int(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "followers_count")))
    interactions = sum(p.likes_count + p.comments_count for p in posts)

    profile = CanonicalProfile(
        username=username,
        display_name=_as_str(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "display_name")) or username,
        platform=Platform.INSTAGRAM,
        biography=_as_str(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "biography")) or "",
        location=_location_text(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "location")),
        external_url=_as_str(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "external_url")),
        email=_as_str(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "email")),
        phone=_as_str(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "phone")),
        followers_count=followers,
        following_count=max(0, _as_int(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "following_count"))),
        posts_count=max(0, _as_int(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "posts_count"))),
        engagement_rate=engagement_rate(interactions, len(posts), followers),
        is_verified=_as_bool(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "is_verified")),
        is_business_account=_as_bool(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "is_business_account")),
        profile_image_url=_as_str(_pick(raw, INSTAGRAM_PROFILE_FIELDS, "profile_image_url")),
        post_image_urls=_post_image_urls(posts),
        recent_posts=posts,
    )
    return NormalizeOutcome(profile=profile)


def map_instagram_post(raw: Dict[str, Any]) -> NormalizeOutcome:
    """Hashtag scraper output: a post with its owner embedded.

    Only a one-post preview is derivable; follower count is unknown and stays 0.
    """
    username = _clean_username(_pick(raw, INSTAGRAM_POST_FIELDS, "username"))
    if not username:
        return NormalizeOutcome(reason="instagram post without owner username")

    post = _instagram_post(raw)
    profile = CanonicalProfile(
        username=username,
        display_name=_as_str(_pick(raw, INSTAGRAM_POST_FIELDS, "display_name")) or username,
        platform=Platform.INSTAGRAM,
        location=_as_str(_pick(raw, INSTAGRAM_POST_FIELDS, "location")),
        post_image_urls=_post_image_urls([post]),
        recent_posts=[post],
    )
    return NormalizeOutcome(profile=profile)


def map_instagram_follower(raw: Dict[str, Any]) -> NormalizeOutcome:
    username = _clean_username(_pick(raw, INSTAGRAM_FOLLOWER_FIELDS, "username"))
    if not username:
        return NormalizeOutcome(reason="follower record without username")

    profile = CanonicalProfile(
        username=username,
        display_name=_as_str(_pick(raw, INSTAGRAM_FOLLOWER_FIELDS, "display_name")) or username,
        platform=Platform.INSTAGRAM,
        is_verified=_as_bool(_pick(raw, INSTAGRAM_FOLLOWER_FIELDS, "is_verified")),
        profile_image_url=_as_str(_pick(raw, INSTAGRAM_FOLLOWER_FIELDS, "profile_image_url")),
    )
    return NormalizeOutcome(profile=profile)


def _tiktok_cover(raw: Dict[str, Any]) -> Optional[str]:
    video_meta = raw.get("videoMeta")
    if isinstance(video_meta, dict) and video_meta.get("coverUrl"):
        return _as_str(video_meta.get("coverUrl"))
    covers = raw.get("covers")
    if isinstance(covers, list) and covers:
        return _as_str(covers[0])
    return None


def map_tiktok_video(raw: Dict[str, Any]) -> NormalizeOutcome:
    """TikTok scraper output: a video with an ``authorMeta`` sub-object.

    Engagement uses the simplified account-level formula
    ``heart / video_count / fans * 100``.
    """
    author = raw.get("authorMeta")
    if not isinstance(author, dict):
        author = {}
    stats = raw.get("stats") if isinstance(raw.get("stats"), dict) else author

    username = _clean_username(_pick(author, TIKTOK_AUTHOR_FIELDS, "username") or raw.get("author"))
    if not username:
        return NormalizeOutcome(reason="tiktok record without author name")

    followers = max(0, _as_int(_pick(stats, TIKTOK_AUTHOR_FIELDS, "followers_count")))
    hearts = max(0, _as_int(_pick(stats, TIKTOK_AUTHOR_FIELDS, "heart_count")))
    videos = max(0, _as_int(_pick(stats, TIKTOK_AUTHOR_FIELDS, "video_count")))

    post = RecentPost(
        id=_as_str(_pick(raw, TIKTOK_VIDEO_FIELDS, "post_id")) or "",
        url=_as_str(_pick(raw, TIKTOK_VIDEO_FIELDS, "post_url")),
        image_url=_tiktok_cover(raw),
        caption=_as_str(_pick(raw, TIKTOK_VIDEO_FIELDS, "caption")) or "",
        likes_count=max(0, _as_int(_pick(raw, TIKTOK_VIDEO_FIELDS, "likes_count"))),
        comments_count=max(0, _as_int(_pick(raw, TIKTOK_VIDEO_FIELDS, "comments_count"))),
        timestamp=_as_str(_pick(raw, TIKTOK_VIDEO_FIELDS, "timestamp")),
    )
    has_post = bool(post.id or post.url or post.image_url)

    profile = CanonicalProfile(
        username=username,
        display_name=_as_str(_pick(author, TIKTOK_AUTHOR_FIELDS, "display_name")) or username,
        platform=Platform.TIKTOK,
        biography=_as_str(_pick(author, TIKTOK_AUTHOR_FIELDS, "biography")) or "",
        external_url=_as_str(_pick(author, TIKTOK_AUTHOR_FIELDS, "external_url")),
        followers_count=followers,
        following_count=max(0, _as_int(_pick(stats, TIKTOK_AUTHOR_FIELDS, "following_count"))),
        posts_count=videos,
        engagement_rate=engagement_rate(hearts, videos, followers),
        is_verified=_as_bool(_pick(author, TIKTOK_AUTHOR_FIELDS, "is_verified")),
        profile_image_url=_as_str(_pick(author, TIKTOK_AUTHOR_FIELDS, "profile_image_url")),
        post_image_urls=_post_image_urls([post]) if has_post else [],
        recent_posts=[post] if has_post else [],
    )
    return NormalizeOutcome(profile=profile)


MAPPERS: Dict[RecordSource, Callable[[Dict[str, Any]], NormalizeOutcome]] = {
    RecordSource.INSTAGRAM_PROFILE: map_instagram_profile,
    RecordSource.INSTAGRAM_POST: map_instagram_post,
    RecordSource.INSTAGRAM_FOLLOWER: map_instagram_follower,
    RecordSource.TIKTOK_VIDEO: map_tiktok_video,
}
