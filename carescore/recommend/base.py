from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable, Literal

from carescore.internal_core.contracts import CareSetting

Priority = Literal["critical", "high", "medium", "low"]

PRIORITY_ORDER: dict[str, int] = {"critical": 0, "high": 1, "medium": 2, "low": 3}


@dataclass(frozen=True)
class Recommendation:
    category: str
    priority: Priority
    recommendation: str
    rationale: str
    icon: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PatientAttributes:
    """The only patient facts the rules read."""

    age: int
    care_setting: CareSetting = "hospital"


def sort_by_priority(recommendations: Iterable[Recommendation]) -> list[Recommendation]:
    # sorted() is stable, so insertion order survives within a priority.
    return sorted(recommendations, key=lambda item: PRIORITY_ORDER.get(item.priority, 99))

