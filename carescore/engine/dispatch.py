from __future__ import annotations

"""
Instrument-keyed entry points over the per-instrument modules.

Adding an instrument means one scale module, one recommendation module and
one row in each registry below.
"""

import logging
from typing import Any, Callable, Dict, Iterable, Union

from carescore.internal_core.contracts import Instrument
from carescore.recommend.braden import BradenAnalysis, BradenContext, generate_braden_recommendations
from carescore.recommend.caprini import (
    CapriniAnalysis,
    CapriniContext,
    generate_caprini_recommendations,
)
from carescore.recommend.wells import WellsAnalysis, WellsContext, generate_wells_recommendations
from carescore.scales.braden import BradenScoreInput, calculate_risk_level, calculate_total_score
from carescore.scales.caprini import calculate_caprini_risk_level, calculate_caprini_score
from carescore.scales.wells import calculate_wells_probability, calculate_wells_score
from carescore.trend import TrendResult, analyze_trend

logger = logging.getLogger(__name__)

Selections = Union[BradenScoreInput, Iterable[str]]
AnalysisContext = Union[BradenContext, CapriniContext, WellsContext]
AnalysisResult = Union[BradenAnalysis, CapriniAnalysis, WellsAnalysis]

_SCORE_FUNCTIONS: Dict[str, Callable[[Any], int]] = {
    "braden": calculate_total_score,
    "caprini": calculate_caprini_score,
    "wells": calculate_wells_score,
}

_TIER_FUNCTIONS: Dict[str, Callable[[int], str]] = {
    "braden": calculate_risk_level,
    "caprini": calculate_caprini_risk_level,
    "wells": calculate_wells_probability,
}

_RECOMMENDATION_FUNCTIONS: Dict[str, tuple[type, Callable[[Any], Any]]] = {
    "braden": (BradenContext, generate_braden_recommendations),
    "caprini": (CapriniContext, generate_caprini_recommendations),
    "wells": (WellsContext, generate_wells_recommendations),
}


def supported_instruments() -> list[str]:
    return sorted(_SCORE_FUNCTIONS)


def _lookup(registry: Dict[str, Any], instrument: str) -> Any:
    key = (instrument or "").strip().lower()
    if key not in registry:
        raise ValueError(f"Unsupported instrument: {instrument}")
    return registry[key]


def compute_score(instrument: Instrument, selections: Selections) -> int:
    return _lookup(_SCORE_FUNCTIONS, instrument)(selections)


def classify_tier(instrument: Instrument, score: int) -> str:
    return _lookup(_TIER_FUNCTIONS, instrument)(score)


def generate_recommendations(instrument: Instrument, context: AnalysisContext) -> AnalysisResult:
    context_type, generator = _lookup(_RECOMMENDATION_FUNCTIONS, instrument)
    if not isinstance(context, context_type):
        raise TypeError(
            f"{instrument} recommendations need a {context_type.__name__}, "
            f"got {type(context).__name__}"
        )
    result = generator(context)
    logger.debug(
        "dispatch: instrument=%s recommendations=%d", instrument, len(result.recommendations)
    )
    return result


__all__ = [
    "AnalysisContext",
    "AnalysisResult",
    "Selections",
    "TrendResult",
    "analyze_trend",
    "classify_tier",
    "compute_score",
    "generate_recommendations",
    "supported_instruments",
]
