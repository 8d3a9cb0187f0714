#!/usr/bin/env python3
"""
Scoring Module - AI rubric scoring with deterministic composites.

Public API:
- ScoringService: Main scoring service orchestrator
- ScoreResult: Composite score plus analysis
- ScoringMode: Standard or street-casting rubric

- models.py: Data structures (DimensionScore, AIAnalysis, StreetCastingAnalysis)
- composite.py: Weighted composite formulas and age match
- prompts.py: Prompt construction
- parsing.py: Response parsing and validation
- service.py: ScoringService orchestrator
"""

from core.scorer.models import (
    AIAnalysis,
    DimensionScore,
    ScoreResult,
    ScoringMode,
    StreetCastingAnalysis,
    DEFAULT_DIMENSION_SCORE,
    DEFAULT_DIMENSION_CONFIDENCE,
)
from core.scorer.service import ScoringService

__all__ = [
    'ScoringService',
    'ScoreResult',
    'ScoringMode',
    'AIAnalysis',
    'StreetCastingAnalysis',
    'DimensionScore',
    'DEFAULT_DIMENSION_SCORE',
    'DEFAULT_DIMENSION_CONFIDENCE',
]
