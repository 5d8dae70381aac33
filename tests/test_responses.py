import json
from pathlib import Path

import pytest

pd = pytest.importorskip("pandas")

from surveyinsights.responses import SurveyResponse, load_responses, parse_rating, partition_frame


def test_parse_rating_treats_na_and_zero_as_absent() -> None:
    assert parse_rating("na") is None
    assert parse_rating("N/A") is None
    assert parse_rating(None) is None
    assert parse_rating(float("nan")) is None
    assert parse_rating(0) is None
    assert parse_rating("4") == 4
    assert parse_rating(5.0) == 5


def test_parse_rating_rejects_out_of_scale_values() -> None:
    with pytest.raises(ValueError):
        parse_rating(6)
    with pytest.raises(ValueError):
        parse_rating(2.5)


def test_from_mapping_ignores_unknown_keys() -> None:
    response = SurveyResponse.from_mapping(
        {
            "id": 17,
            "client_type": "Citizen",
            "service_availed": "Permit",
            "created_at": "2026-10-01T10:00:00Z",
            "sqd0": "na",
            "sqd1": 4,
            "age": "34",
            "cc1": float("nan"),
            "survey_version": 3,
        }
    )
    assert response.id == "17"
    assert response.sqd0 is None
    assert response.sqd1 == 4
    assert response.age == 34
    assert response.cc1 is None
    assert response.ratings()[1] == 4


def test_from_mapping_requires_identity_fields() -> None:
    with pytest.raises(ValueError):
        SurveyResponse.from_mapping({"id": "1", "client_type": "Citizen", "created_at": "2026-10-01"})


def test_load_responses_from_csv(tmp_path: Path) -> None:
    csv_path = tmp_path / "responses.csv"
    pd.DataFrame(
        {
            "id": ["001", "002"],
            "client_type": ["Citizen", "Business"],
            "service_availed": ["Permit", "Cedula"],
            "created_at": ["2026-10-01T10:00:00", "2026-10-02T11:00:00"],
            "sqd0": [5, None],
            "suggestions": ["Faster please", None],
        }
    ).to_csv(csv_path, index=False)

    responses = load_responses(csv_path)
    assert [r.id for r in responses] == ["001", "002"]
    assert responses[0].sqd0 == 5
    assert responses[1].sqd0 is None
    assert responses[1].suggestions is None
    assert responses[0].has_feedback()


def test_load_responses_from_json(tmp_path: Path) -> None:
    json_path = tmp_path / "responses.json"
    json_path.write_text(
        json.dumps(
            [
                {
                    "id": "a",
                    "client_type": "Government",
                    "service_availed": "Permit",
                    "created_at": "2026-10-01T10:00:00",
                    "sqd0": 3,
                    "cc2": "ok",
                }
            ]
        ),
        encoding="utf-8",
    )
    responses = load_responses(json_path)
    assert responses[0].created_at == "2026-10-01T10:00:00"
    assert responses[0].cc2 == "ok"


def test_load_responses_rejects_unknown_format(tmp_path: Path) -> None:
    path = tmp_path / "responses.xlsx"
    path.write_bytes(b"")
    with pytest.raises(ValueError):
        load_responses(path)


def test_from_mapping_rejects_non_numeric_age() -> None:
    with pytest.raises(ValueError, match="Age"):
        SurveyResponse.from_mapping(
            {"id": "1", "client_type": "Citizen", "service_availed": "Permit", "created_at": "2026-10-01", "age": "thirty"}
        )


def test_partition_frame_sets_aside_unparseable_rows() -> None:
    df = pd.DataFrame(
        {
            "id": ["a", "b", "c", "d"],
            "client_type": ["Citizen"] * 4,
            "service_availed": ["Permit"] * 4,
            "created_at": ["2026-10-01T10:00:00"] * 4,
            "sqd0": [5, 9, 4, 3],
            "age": ["34", "40", "unknown", None],
        }
    )
    responses, rejected = partition_frame(df)
    assert [r.id for r in responses] == ["a", "d"]
    assert [(row.index, row.id) for row in rejected] == [(1, "b"), (2, "c")]
    assert "Rating" in rejected[0].reason
    assert "Age" in rejected[1].reason
