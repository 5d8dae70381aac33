import json
from datetime import datetime

from surveyinsights.report_model import build_report_model, response_signature, save_model_json


def test_empty_collection_builds_a_valid_model() -> None:
    model = build_report_model([], generated_at=datetime(2026, 10, 19, 8, 0))
    assert model.stats.total_responses == 0
    assert len(model.question_scores) == 9
    assert model.themes == []
    assert model.keywords == []
    assert model.client_types == []


def test_model_combines_every_analysis(make_response) -> None:
    responses = [
        make_response(sqd0=5, sqd4=2, cc1="great service, thank you", client_type="Business"),
        make_response(sqd0=3, suggestions="waiting time was long, waiting time again", client_type="Citizen"),
    ]
    model = build_report_model(responses, generated_at=datetime(2026, 10, 19))
    assert model.stats.average_satisfaction == 4.0
    assert model.question_scores[0].key == "sqd0"
    assert {t.theme for t in model.themes} == {"Positive Experience", "Service Quality", "Waiting Time"}
    assert [k.word for k in model.keywords][:2] == ["waiting", "time"]
    assert model.data_signature == response_signature(responses)


def test_keyword_limit_is_applied(make_response) -> None:
    text = " ".join("term" + "x" * i for i in range(30))
    model = build_report_model([make_response(cc1=text)], keyword_limit=15)
    assert len(model.keywords) == 15


def test_signature_changes_with_content(make_response) -> None:
    a = make_response(id="1", sqd0=5)
    b = make_response(id="1", sqd0=4)
    assert response_signature([a]) == response_signature([a])
    assert response_signature([a]) != response_signature([b])


def test_model_json_round_trips_through_disk(tmp_path, make_response) -> None:
    model = build_report_model([make_response(sqd0=4, cc1="clean room")], generated_at=datetime(2026, 10, 19))
    destination = tmp_path / "out" / "model.json"
    save_model_json(model, destination)
    payload = json.loads(destination.read_text(encoding="utf-8"))
    assert payload["stats"]["average_satisfaction_display"] == "4.00"
    assert payload["themes"] == [{"theme": "Facility Issues", "count": 1}]
    assert payload["generated_at"] == "2026-10-19T00:00:00"
    assert len(payload["question_scores"]) == 9
