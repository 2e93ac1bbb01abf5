from __future__ import annotations

"""
Shared tier-table primitives.

Every instrument describes its tiers as an ordered table of closed score
ranges. An open lower bound on the first row and an open upper bound on the
last row keep the classifier total over every integer score.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar


@dataclass(frozen=True)
class RiskTier:
    level: str
    label: str
    description: str
    score_range: str
    lower: Optional[int]
    upper: Optional[int]

    def contains(self, score: int) -> bool:
        if self.lower is not None and score < self.lower:
            return False
        if self.upper is not None and score > self.upper:
            return False
        return True


TierT = TypeVar("TierT", bound=RiskTier)


def classify_score(tiers: Sequence[TierT], score: int) -> TierT:
    for tier in tiers:
        if tier.contains(score):
            return tier
    raise ValueError(f"Tier table has no row for score {score}")


def validate_tier_table(tiers: Sequence[RiskTier]) -> None:
    """Raise ValueError unless the rows partition the integer axis in order."""
    if not tiers:
        raise ValueError("Tier table is empty")
    if tiers[0].lower is not None:
        raise ValueError(f"First tier '{tiers[0].level}' must be open below")
    if tiers[-1].upper is not None:
        raise ValueError(f"Last tier '{tiers[-1].level}' must be open above")
    for previous, current in zip(tiers, tiers[1:]):
        if previous.upper is None or current.lower is None:
            raise ValueError(f"Inner tier bound missing near '{current.level}'")
        if current.lower != previous.upper + 1:
            raise ValueError(
                f"Tiers '{previous.level}' and '{current.level}' overlap or leave a gap"
            )
