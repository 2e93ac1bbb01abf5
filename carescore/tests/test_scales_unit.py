import pytest

from carescore.internal_core.contracts import BradenScores
from carescore.scales.base import RiskTier, classify_score, validate_tier_table
from carescore.scales.braden import (
    BRADEN_SUBSCALES,
    MAX_BRADEN_SCORE,
    MIN_BRADEN_SCORE,
    calculate_risk_level,
    calculate_total_score,
    get_subscale,
    is_complete,
)
from carescore.scales.caprini import (
    ALL_CAPRINI_FACTORS,
    calculate_caprini_risk_level,
    calculate_caprini_score,
    get_selected_factor_names,
)
from carescore.scales.wells import (
    WELLS_CRITERIA,
    calculate_wells_probability,
    calculate_wells_probability_3tier,
    calculate_wells_score,
    get_selected_criteria_names,
)


def test_braden_tables_cover_six_subscales_with_expected_ranges() -> None:
    assert [s.id for s in BRADEN_SUBSCALES] == [
        "sensory_perception",
        "moisture",
        "activity",
        "mobility",
        "nutrition",
        "friction_shear",
    ]
    assert sum(s.max_score for s in BRADEN_SUBSCALES) == MAX_BRADEN_SCORE
    assert len(BRADEN_SUBSCALES) == MIN_BRADEN_SCORE
    friction = get_subscale("friction_shear")
    assert friction is not None
    assert [o.score for o in friction.options] == [1, 2, 3]
    assert get_subscale("unknown") is None


def test_braden_total_sums_model_and_mapping_inputs() -> None:
    scores = BradenScores(
        sensory_perception=3, moisture=2, activity=4, mobility=1, nutrition=3, friction_shear=2
    )
    assert calculate_total_score(scores) == 15
    assert calculate_total_score(scores.as_mapping()) == 15
    assert calculate_total_score({"mobility": 2, "not_a_subscale": 9}) == 2


def test_braden_completeness_treats_zero_as_unset() -> None:
    assert not is_complete(BradenScores(sensory_perception=4, moisture=4))
    assert is_complete(
        BradenScores(
            sensory_perception=1, moisture=1, activity=1, mobility=1, nutrition=1, friction_shear=1
        )
    )


@pytest.mark.parametrize(
    ("score", "level"),
    [
        (6, "veryHigh"),
        (9, "veryHigh"),
        (10, "high"),
        (12, "high"),
        (13, "moderate"),
        (14, "moderate"),
        (15, "mild"),
        (18, "mild"),
        (19, "none"),
        (23, "none"),
    ],
)
def test_braden_tier_boundaries(score: int, level: str) -> None:
    assert calculate_risk_level(score) == level


def test_caprini_table_has_38_factors_with_allowed_weights() -> None:
    assert len(ALL_CAPRINI_FACTORS) == 38
    assert {f.points for f in ALL_CAPRINI_FACTORS} == {1, 2, 3, 5}
    assert {f.category for f in ALL_CAPRINI_FACTORS} <= {
        "clinical",
        "surgical",
        "medical",
        "hematologic",
    }
    assert len({f.id for f in ALL_CAPRINI_FACTORS}) == 38


def test_caprini_score_ignores_unknown_ids_and_counts_duplicates() -> None:
    assert calculate_caprini_score([]) == 0
    assert calculate_caprini_score(["age_41_60", "malignancy", "stroke"]) == 8
    assert calculate_caprini_score(["age_41_60", "nope"]) == calculate_caprini_score(["age_41_60"])
    assert calculate_caprini_score(["age_41_60", "age_41_60"]) == 2
    assert get_selected_factor_names(["nope", "copd"]) == ["COPD"]


@pytest.mark.parametrize(
    ("score", "level"),
    [
        (-1, "veryLow"),
        (0, "veryLow"),
        (1, "low"),
        (2, "low"),
        (3, "moderate"),
        (4, "moderate"),
        (5, "high"),
        (8, "high"),
        (9, "highest"),
        (40, "highest"),
    ],
)
def test_caprini_tier_boundaries(score: int, level: str) -> None:
    assert calculate_caprini_risk_level(score) == level


def test_wells_alternative_diagnosis_subtracts_two() -> None:
    assert len(WELLS_CRITERIA) == 10
    assert [c.id for c in WELLS_CRITERIA if c.points < 0] == ["alternative_diagnosis"]
    assert calculate_wells_score(["alternative_diagnosis"]) == -2
    assert calculate_wells_score(["calf_swelling", "pitting_edema", "alternative_diagnosis"]) == 0
    assert calculate_wells_score(["bogus"]) == 0
    assert get_selected_criteria_names(["bogus", "entire_leg_swollen"]) == ["Entire leg swollen"]


def test_wells_two_tier_boundary_is_at_two() -> None:
    assert calculate_wells_probability(-2) == "unlikely"
    assert calculate_wells_probability(1) == "unlikely"
    assert calculate_wells_probability(2) == "likely"
    assert calculate_wells_probability(9) == "likely"


def test_wells_three_tier_reference_model() -> None:
    assert calculate_wells_probability_3tier(0) == "low"
    assert calculate_wells_probability_3tier(1) == "moderate"
    assert calculate_wells_probability_3tier(2) == "moderate"
    assert calculate_wells_probability_3tier(3) == "high"


def test_validate_tier_table_rejects_gaps_and_closed_ends() -> None:
    closed_below = (RiskTier("a", "A", "", "", 0, 5), RiskTier("b", "B", "", "", 6, None))
    with pytest.raises(ValueError):
        validate_tier_table(closed_below)

    gap = (RiskTier("a", "A", "", "", None, 5), RiskTier("b", "B", "", "", 7, None))
    with pytest.raises(ValueError):
        validate_tier_table(gap)

    with pytest.raises(ValueError):
        validate_tier_table(())

    ok = (RiskTier("a", "A", "", "", None, 5), RiskTier("b", "B", "", "", 6, None))
    validate_tier_table(ok)
    assert classify_score(ok, -100).level == "a"
    assert classify_score(ok, 6).level == "b"
