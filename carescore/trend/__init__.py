"""
Assessment trend boundary for carescore.

Design intent:
- Compare a patient's Braden history newest-versus-oldest.
- Report direction with fixed guidance text; never touch storage.
"""
from __future__ import annotations

from .analyzer import ScorePoint, TrendResult, analyze_trend

__all__ = ["ScorePoint", "TrendResult", "analyze_trend"]
