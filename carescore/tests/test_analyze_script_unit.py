import json

import pytest

from carescore.scripts.analyze_assessment import analyze_payload, main


def test_analyze_payload_for_braden_with_history(monkeypatch) -> None:
    monkeypatch.setenv("CARESCORE_FACILITY_NAME", "North Wing")
    payload = {
        "instrument": "braden",
        "selections": {
            "sensory_perception": 1,
            "moisture": 1,
            "activity": 1,
            "mobility": 1,
            "nutrition": 1,
            "friction_shear": 1,
        },
        "patient": {"age": 90, "care_setting": "homeCare"},
        "history": [
            {"date": "2024-01-01", "total_score": 14},
            {"date": "2024-01-08", "total_score": 6},
        ],
    }
    out = analyze_payload(payload)

    assert out["facility_name"] == "North Wing"
    assert out["total_score"] == 6
    assert out["analysis"]["escalation_needed"] is True
    assert out["trend"]["trend"] == "deteriorating"


def test_analyze_payload_rejects_unknown_instrument_and_incomplete_braden() -> None:
    with pytest.raises(ValueError):
        analyze_payload({"instrument": "apgar", "selections": []})
    with pytest.raises(ValueError):
        analyze_payload({"instrument": "braden", "selections": {"mobility": 2}})


def test_main_prints_json(tmp_path, capsys) -> None:
    path = tmp_path / "wells.json"
    path.write_text(
        json.dumps({"instrument": "wells", "selections": ["calf_swelling"], "patient": {"age": 64}}),
        encoding="utf-8",
    )
    main([str(path)])
    out = json.loads(capsys.readouterr().out)

    assert out["instrument"] == "wells"
    assert out["analysis"]["probability"] == "unlikely"
    assert "trend" not in out


def test_main_exits_on_missing_file(tmp_path) -> None:
    with pytest.raises(SystemExit):
        main([str(tmp_path / "missing.json")])


def test_malformed_payload_fields_raise_value_error() -> None:
    with pytest.raises(ValueError):
        analyze_payload({"instrument": "wells", "selections": [], "patient": {"age": None}})
    with pytest.raises(ValueError):
        analyze_payload(
            {
                "instrument": "braden",
                "selections": {
                    "sensory_perception": 2,
                    "moisture": 2,
                    "activity": 2,
                    "mobility": 2,
                    "nutrition": 2,
                    "friction_shear": 2,
                },
                "history": [{"date": "2024-01-01"}],
            }
        )
    with pytest.raises(ValueError):
        analyze_payload({"instrument": "caprini", "selections": {"copd": 1}})


def test_main_reports_malformed_payload_without_traceback(tmp_path) -> None:
    path = tmp_path / "bad.json"
    path.write_text(
        json.dumps({"instrument": "wells", "selections": [], "patient": {"age": None}}),
        encoding="utf-8",
    )
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert "cannot analyze assessment" in str(excinfo.value)
