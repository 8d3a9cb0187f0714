#!/usr/bin/env python3
"""
Scoring Prompts - User prompts for the standard and street-casting rubrics.

The prompt lists the rubric weights so the model knows what matters most,
but the weighted total is always computed locally.
"""

from typing import Optional, Tuple

from core.filters.models import DiscoveryFilters
from core.normalizer import CanonicalProfile
from core.scorer.composite import STANDARD_WEIGHTS, STREET_CASTING_WEIGHTS
from core.scorer.models import ScoringMode, CONTENT_STYLES, DEVICE_QUALITIES

MAX_PROMPT_POSTS = 5
MAX_CAPTION_CHARS = 200

_DIMENSION_JSON = '{"score": <0-100>, "confidence": <0-100>, "factors": ["..."], "notes": "..."}'

STANDARD_RESPONSE_FORMAT = f"""{{
  "physical_potential": {_DIMENSION_JSON},
  "unsigned_probability": {_DIMENSION_JSON},
  "reachability": {_DIMENSION_JSON},
  "engagement_health": {_DIMENSION_JSON},
  "overall_assessment": "2-3 sentence summary",
  "strengths": ["..."],
  "potential_categories": ["High Fashion" | "Commercial" | "Fitness" | "Editorial" | "Influencer" | ...],
  "recommendations": ["..."]
}}"""

STREET_CASTING_EXTRA_FORMAT = f"""  "estimated_age": <number or null>,
  "age_confidence": <0-100>,
  "raw_potential_score": <0-100>,
  "content_authenticity_score": <0-100>,
  "content_style": "{' | '.join(CONTENT_STYLES)}",
  "device_quality": "{' | '.join(DEVICE_QUALITIES)}",
  "authenticity_signals": ["..."]"""

DIMENSION_GUIDE = """- physical_potential: bone structure, proportions, skin, photogenic quality visible in the images
- unsigned_probability: likelihood the person has no agency representation yet
- reachability: how easy it is to contact them (public email, DMs, business profile, links)
- engagement_health: whether engagement looks organic for the follower count"""

STREET_CASTING_GUIDE = """- raw_potential_score: natural, unpolished look that could be developed
- content_authenticity_score: candid, unfiltered content rather than staged shoots
- estimated_age: apparent age from the images"""


def _number(value: int) -> str:
    return f"{value:,}" if value else "Unknown"


def _weights_text(weights) -> str:
    return ", ".join(f"{name} {weight}%" for name, weight in weights.items())


def _profile_block(profile: CanonicalProfile) -> str:
    lines = [
        f"- Name: {profile.display_name or profile.username}",
        f"- Platform: {profile.platform.value}",
        f"- Handle: @{profile.username}",
        f"- Bio: {profile.biography or 'Not provided'}",
        f"- Followers: {_number(profile.followers_count)}",
        f"- Following: {_number(profile.following_count)}",
        f"- Posts: {_number(profile.posts_count)}",
        f"- Engagement Rate: {f'{profile.engagement_rate}%' if profile.engagement_rate else 'Unknown'}",
        f"- Location: {profile.location or 'Unknown'}",
        f"- Verified: {'yes' if profile.is_verified else 'no'}",
        f"- Business account: {'yes' if profile.is_business_account else 'no'}",
        f"- External link: {profile.external_url or 'None'}",
        f"- Public email: {'yes' if profile.email else 'no'}",
    ]
    posts = [p for p in profile.recent_posts[:MAX_PROMPT_POSTS] if p.caption or p.likes_count]
    if posts:
        lines.append("- Recent posts:")
        for post in posts:
            caption = post.caption.replace("\n", " ")[:MAX_CAPTION_CHARS]
            lines.append(f"  * {post.likes_count} likes, {post.comments_count} comments: {caption}")
    return "\n".join(lines)


def build_prompt(
    profile: CanonicalProfile,
    mode: ScoringMode,
    image_count: int,
    filters: Optional[DiscoveryFilters] = None,
    default_age_range: Tuple[int, int] = (18, 25),
) -> str:
    """
    Build the user prompt for one profile.

    Args:
        profile: Profile to assess
        mode: Standard or street-casting rubric
        image_count: Number of images attached (0 = text-only)
        filters: Job filters; age range and style preference steer street casting
        default_age_range: Target ages when the filters carry none
    """
    images_note = (
        f"{image_count} image(s) from the profile are attached: the first is the profile picture, "
        f"the rest are recent posts."
        if image_count else
        "No images are available; judge from the profile data only and lower physical confidence."
    )

    sections = [
        "Assess the following social media profile.",
        "",
        "Profile Information:",
        _profile_block(profile),
        "",
        images_note,
        "",
        "Dimensions:",
        DIMENSION_GUIDE,
    ]

    if mode == ScoringMode.STREET_CASTING:
        age_range = (filters.age_range if filters and filters.age_range else None) or default_age_range
        style = filters.style_preference if filters and filters.style_preference else None
        sections += [
            STREET_CASTING_GUIDE,
            "",
            f"Target age range: {age_range[0]}-{age_range[1]}",
            f"Style preference: {style or 'any'}",
            f"Rubric weights: {_weights_text(STREET_CASTING_WEIGHTS)}",
            "",
            "Respond with JSON in exactly this format:",
            STANDARD_RESPONSE_FORMAT[:-2] + ",\n" + STREET_CASTING_EXTRA_FORMAT + "\n}",
        ]
    else:
        sections += [
            "",
            f"Rubric weights: {_weights_text(STANDARD_WEIGHTS)}",
            "",
            "Respond with JSON in exactly this format:",
            STANDARD_RESPONSE_FORMAT,
        ]

    sections.append("")
    sections.append("Return ONLY valid JSON, no additional text.")
    return "\n".join(sections)
