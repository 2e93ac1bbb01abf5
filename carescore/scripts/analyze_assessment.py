from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from carescore.engine.dispatch import (
    analyze_trend,
    classify_tier,
    compute_score,
    generate_recommendations,
    supported_instruments,
)
from carescore.internal_core.config import CarescoreConfig, configure_logging, load_config
from carescore.internal_core.contracts import BradenScores, CareSetting
from carescore.recommend.base import PatientAttributes
from carescore.recommend.braden import BradenContext
from carescore.recommend.caprini import CapriniContext
from carescore.recommend.wells import WellsContext
from carescore.scales.braden import is_complete
from carescore.trend import ScorePoint

logger = logging.getLogger(__name__)


class PatientInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    age: int = Field(default=0, ge=0)
    care_setting: CareSetting = "hospital"


class HistoryRow(BaseModel):
    model_config = ConfigDict(extra="forbid")

    date: str
    total_score: int


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    instrument: str
    selections: Union[Dict[str, int], List[str]] = Field(default_factory=list)
    patient: Optional[PatientInput] = None
    history: List[HistoryRow] = Field(default_factory=list)


def _selected_ids(selections: Union[Dict[str, int], List[str]]) -> tuple[str, ...]:
    if isinstance(selections, dict):
        raise ValueError("Caprini and Wells selections must be a list of ids")
    return tuple(selections)


def analyze_payload(
    payload: dict[str, Any], config: Optional[CarescoreConfig] = None
) -> dict[str, Any]:
    """Score, tier and expand one assessment described by a JSON-ready dict.

    Expected keys: ``instrument``; ``selections`` (Braden sub-score mapping, or a
    list of factor/criterion ids); optional ``patient`` with ``age`` and
    ``care_setting``; optional ``history`` of ``{date, total_score}`` rows for
    the Braden trend.
    """
    cfg = config or load_config()
    # pydantic ValidationError is a ValueError.
    request = AnalyzeRequest.model_validate(payload)
    instrument = request.instrument.strip().lower()
    if instrument not in supported_instruments():
        raise ValueError(f"Unsupported instrument: {request.instrument}")
    selections = request.selections
    patient = (
        PatientAttributes(age=request.patient.age, care_setting=request.patient.care_setting)
        if request.patient is not None
        else None
    )

    if instrument == "braden":
        if not isinstance(selections, dict):
            raise ValueError("Braden selections must map subscale ids to scores")
        scores = BradenScores.model_validate(selections)
        if not is_complete(scores):
            raise ValueError("Braden selections must rate all six subscales (1 or higher)")
        total = compute_score(instrument, scores)
        context: Any = BradenContext(
            scores=scores,
            total_score=total,
            risk_level=classify_tier(instrument, total),
            patient=patient or PatientAttributes(age=0),
        )
    elif instrument == "caprini":
        ids = _selected_ids(selections)
        total = compute_score(instrument, ids)
        context = CapriniContext(ids, total, classify_tier(instrument, total), patient)
    else:
        ids = _selected_ids(selections)
        total = compute_score(instrument, ids)
        context = WellsContext(ids, total, classify_tier(instrument, total), patient)

    analysis = generate_recommendations(instrument, context)
    out: dict[str, Any] = {
        "facility_name": cfg.CARESCORE_FACILITY_NAME,
        "instrument": instrument,
        "total_score": total,
        "analysis": analysis.to_dict(),
    }
    if instrument == "braden" and request.history:
        history = [ScorePoint(date=row.date, total_score=row.total_score) for row in request.history]
        trend = analyze_trend(history)
        out["trend"] = trend.to_dict() if trend is not None else None
    return out


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Score a Braden, Caprini or Wells assessment from a JSON file and print the plan"
    )
    parser.add_argument(
        "input",
        help="Path to the assessment JSON file, or '-' to read from stdin.",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indent for the printed analysis (default: 2).",
    )
    args = parser.parse_args(argv)

    cfg = load_config()
    configure_logging(cfg)

    if args.input == "-":
        raw = sys.stdin.read()
    else:
        path = Path(args.input).expanduser()
        if not path.exists():
            raise SystemExit(f"input file not found: {path}")
        raw = path.read_text(encoding="utf-8")

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"invalid JSON input: {exc}") from exc
    if not isinstance(payload, dict):
        raise SystemExit("input JSON must be an object")

    try:
        result = analyze_payload(payload, cfg)
    except ValueError as exc:
        raise SystemExit(f"cannot analyze assessment: {exc}") from exc
    print(json.dumps(result, indent=args.indent, ensure_ascii=False))


if __name__ == "__main__":
    main()
