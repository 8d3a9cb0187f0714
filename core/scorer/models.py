#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

DEFAULT_DIMENSION_SCORE = 50
DEFAULT_DIMENSION_CONFIDENCE = 20
DEFAULT_COMPOSITE_SCORE = 50

CONTENT_STYLES = ("professional", "semi-professional", "amateur", "candid")
DEVICE_QUALITIES = ("dslr", "mirrorless", "iphone", "android", "unknown")


class ScoringMode(str, Enum):
    STANDARD = "standard"
    STREET_CASTING = "street_casting"


def _clamp_percent(value) -> int:
    if value is None:
        raise ValueError("score is required")
    return max(0, min(100, int(round(float(value)))))


class DimensionScore(BaseModel):
    """One rubric dimension as judged by the model."""
    score: int = DEFAULT_DIMENSION_SCORE
    confidence: int = DEFAULT_DIMENSION_CONFIDENCE
    factors: List[str] = Field(default_factory=list)
    notes: str = ""

    @field_validator('score', 'confidence', mode='before')
    @classmethod
    def _clamp(cls, value):
        return _clamp_percent(value)

    @field_validator('notes', mode='before')
    @classmethod
    def _notes_text(cls, value):
        return "" if value is None else str(value)


class AIAnalysis(BaseModel):
    """Standard four-dimension analysis."""
    physical_potential: DimensionScore = Field(default_factory=DimensionScore)
    unsigned_probability: DimensionScore = Field(default_factory=DimensionScore)
    reachability: DimensionScore = Field(default_factory=DimensionScore)
    engagement_health: DimensionScore = Field(default_factory=DimensionScore)

    overall_assessment: str = ""
    strengths: List[str] = Field(default_factory=list)
    potential_categories: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    vision_analyzed: bool = False
    overall_score: int = DEFAULT_COMPOSITE_SCORE


class StreetCastingAnalysis(AIAnalysis):
    """Street-casting analysis: standard dimensions plus rawness, authenticity and age fit."""
    estimated_age: Optional[float] = None
    age_confidence: int = 0
    raw_potential_score: int = DEFAULT_DIMENSION_SCORE
    content_authenticity_score: int = DEFAULT_DIMENSION_SCORE
    content_style: Optional[str] = None
    device_quality: str = "unknown"
    authenticity_signals: List[str] = Field(default_factory=list)
    age_match_score: int = DEFAULT_DIMENSION_SCORE
    street_casting_score: int = DEFAULT_COMPOSITE_SCORE

    @field_validator('age_confidence', 'raw_potential_score', 'content_authenticity_score', mode='before')
    @classmethod
    def _clamp(cls, value):
        return _clamp_percent(value)

    @field_validator('estimated_age', mode='before')
    @classmethod
    def _age(cls, value):
        if value in (None, "", "unknown"):
            return None
        age = float(value)
        return age if age > 0 else None

    @field_validator('content_style', mode='before')
    @classmethod
    def _style(cls, value):
        if value is None:
            return None
        style = str(value).strip().lower().replace("_", "-")
        return style if style in CONTENT_STYLES else None

    @field_validator('device_quality', mode='before')
    @classmethod
    def _device(cls, value):
        device = str(value or "unknown").strip().lower()
        return device if device in DEVICE_QUALITIES else "unknown"


AnyAnalysis = Union[AIAnalysis, StreetCastingAnalysis]


@dataclass
class ScoreResult:
    """Composite score plus the analysis it was computed from."""
    composite_score: int
    analysis: AnyAnalysis

    @property
    def is_street_casting(self) -> bool:
        return isinstance(self.analysis, StreetCastingAnalysis)


FALLBACK_ASSESSMENT = "Unable to complete full analysis. Manual review recommended."


def default_analysis(mode: ScoringMode, vision_analyzed: bool = False) -> AnyAnalysis:
    """Uniform fallback: every dimension 50/20 and composite 50."""
    fields = dict(
        overall_assessment=FALLBACK_ASSESSMENT,
        strengths=[],
        potential_categories=[],
        recommendations=["Review profile manually"],
        vision_analyzed=vision_analyzed,
        overall_score=DEFAULT_COMPOSITE_SCORE,
    )
    if mode == ScoringMode.STREET_CASTING:
        return StreetCastingAnalysis(street_casting_score=DEFAULT_COMPOSITE_SCORE, **fields)
    return AIAnalysis(**fields)
