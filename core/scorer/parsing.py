"""Model response parsing: fenced or bare JSON into a validated analysis."""
import json
import logging
import re
from typing import Any, Dict

from core.scorer.models import AIAnalysis, AnyAnalysis, ScoringMode, StreetCastingAnalysis

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^\s*```(?:json|JSON)?\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)

DIMENSION_KEYS = ('physical_potential', 'unsigned_probability', 'reachability', 'engagement_health')
MODEL_TOTALS = ('overall_score', 'street_casting_score', 'age_match_score', 'vision_analyzed')


def strip_code_fences(text: str) -> str:
    match = _FENCE.match(text)
    return match.group(1) if match else text.strip()


def _extract_object(text: str) -> Dict[str, Any]:
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        # Some models wrap the object in prose; take the outermost braces
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise
        data = json.loads(cleaned[start:end + 1])
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_analysis(text: str, mode: ScoringMode) -> AnyAnalysis:
    """
    Parse and validate a model response.

    Dimensions the model left out get the uniform default (50/20). A
    dimension present but malformed is a validation error, as is invalid
    JSON; callers fall back to the default analysis on any exception.

    Raises:
        ValueError: Unparseable or structurally invalid response
    """
    if not text or not text.strip():
        raise ValueError("Empty model response")

    data = _extract_object(text)

    scores = data.pop('scores', None)
    if isinstance(scores, dict):
        for key in DIMENSION_KEYS:
            data.setdefault(key, scores.get(key))

    # Nulls mean "not provided"; every field has a default
    data = {key: value for key, value in data.items() if value is not None}

    # Totals are always recomputed from the dimensions
    for key in MODEL_TOTALS:
        data.pop(key, None)

    model_cls = StreetCastingAnalysis if mode == ScoringMode.STREET_CASTING else AIAnalysis
    analysis = model_cls.model_validate(data)
    logger.debug(f"Parsed {mode.value} analysis with keys {sorted(data.keys())}")
    return analysis
