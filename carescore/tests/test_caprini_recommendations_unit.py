import pytest

from carescore.recommend.base import PRIORITY_ORDER, PatientAttributes
from carescore.recommend.caprini import (
    CAPRINI_ESCALATION_REASON,
    HIT_CONTRAINDICATION,
    CapriniContext,
    generate_caprini_recommendations,
    is_caprini_escalation_needed,
)
from carescore.scales.caprini import calculate_caprini_risk_level, calculate_caprini_score


def _context(*factor_ids: str) -> CapriniContext:
    total = calculate_caprini_score(factor_ids)
    return CapriniContext(
        selected_factor_ids=tuple(factor_ids),
        total_score=total,
        risk_level=calculate_caprini_risk_level(total),
        patient=PatientAttributes(age=66),
    )


def _pharmacological(analysis) -> str:
    return next(
        r.recommendation
        for r in analysis.recommendations
        if r.category == "Pharmacological Prophylaxis"
    )


def test_empty_selection_is_very_low_with_ambulation_only() -> None:
    analysis = generate_caprini_recommendations(_context())

    assert analysis.overall_risk == "veryLow"
    assert analysis.vte_incidence == "<0.5%"
    assert analysis.duration == "Until fully ambulatory"
    assert analysis.contraindications == []
    assert analysis.escalation_needed is False
    assert [r.category for r in analysis.recommendations] == [
        "Mobilization",
        "Monitoring",
        "Bleeding Risk",
    ]


@pytest.mark.parametrize(
    "factors",
    [
        ("heparin_thrombocytopenia",),  # 3 -> moderate
        ("heparin_thrombocytopenia", "malignancy"),  # 5 -> high
        ("heparin_thrombocytopenia", "stroke", "malignancy"),  # 10 -> highest
    ],
)
def test_hit_forces_contraindication_and_fondaparinux_wording(factors: tuple[str, ...]) -> None:
    analysis = generate_caprini_recommendations(_context(*factors))

    assert HIT_CONTRAINDICATION in analysis.contraindications
    text = _pharmacological(analysis)
    assert "Fondaparinux" in text
    assert "Enoxaparin" not in text
    assert "LMWH" not in text
    assert "Fondaparinux" in analysis.prophylaxis_recommendation


def test_moderate_without_hit_uses_heparin_regimen() -> None:
    analysis = generate_caprini_recommendations(_context("age_61_74", "varicose_veins"))

    assert analysis.overall_risk == "moderate"
    assert _pharmacological(analysis).startswith("Initiate LMWH")
    assert analysis.contraindications == []


def test_factor_add_ons_fire_independently_of_tier() -> None:
    analysis = generate_caprini_recommendations(
        _context("malignancy", "family_history_vte", "factor_v_leiden", "hip_pelvis_leg_fracture")
    )
    categories = [r.category for r in analysis.recommendations]

    for expected in ("Cancer-Associated VTE", "History of VTE", "Thrombophilia", "Orthopedic Surgery"):
        assert expected in categories
    orthopedic = next(r for r in analysis.recommendations if r.category == "Orthopedic Surgery")
    assert orthopedic.priority == "critical"
    assert orthopedic.icon == "bone"
    ranks = [PRIORITY_ORDER[r.priority] for r in analysis.recommendations]
    assert ranks == sorted(ranks)


def test_highest_tier_always_escalates() -> None:
    analysis = generate_caprini_recommendations(_context("stroke", "multiple_trauma"))

    assert analysis.overall_risk == "highest"
    assert analysis.escalation_needed is True
    assert analysis.escalation_reason == CAPRINI_ESCALATION_REASON
    assert analysis.duration.startswith("Extended prophylaxis: 28-35 days")


def test_high_tier_escalates_only_with_specific_factors() -> None:
    assert is_caprini_escalation_needed("high", ["stroke"]) is False
    assert is_caprini_escalation_needed("high", ["history_dvt_pe"]) is True
    assert is_caprini_escalation_needed("high", ["heparin_thrombocytopenia"]) is True
    assert is_caprini_escalation_needed("high", ["other_thrombophilia"]) is True
    assert is_caprini_escalation_needed("moderate", ["history_dvt_pe"]) is False
    assert is_caprini_escalation_needed("highest", []) is True


def test_unknown_ids_are_neutral_and_not_named() -> None:
    analysis = generate_caprini_recommendations(_context("copd", "made_up_factor"))

    assert analysis.total_score == 1
    assert analysis.primary_risk_factors == ["COPD"]


def test_generation_is_idempotent() -> None:
    ctx = _context("age_75", "malignancy", "central_venous")
    assert generate_caprini_recommendations(ctx) == generate_caprini_recommendations(ctx)
    assert generate_caprini_recommendations(ctx).to_dict()["vte_incidence"] == "~6%"
