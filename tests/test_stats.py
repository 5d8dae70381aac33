from surveyinsights.responses import SurveyResponse
from surveyinsights.stats import client_type_distribution, satisfaction_distribution, summary_stats


def test_summary_stats_empty_collection() -> None:
    stats = summary_stats([])
    assert stats.total_responses == 0
    assert stats.average_satisfaction == 0
    assert stats.average_satisfaction_display == "0.00"
    assert stats.feedback_rate_display == "0"
    assert stats.unique_services == 0
    assert stats.with_feedback == 0


def test_summary_stats_ignores_absent_overall_rating(make_response) -> None:
    responses = [
        make_response(sqd0=5, service_availed="Permit"),
        make_response(sqd0=4, service_availed="Permit"),
        make_response(sqd0=None, service_availed="Cedula", cc1="slow line"),
    ]
    stats = summary_stats(responses)
    assert stats.total_responses == 3
    assert stats.average_satisfaction == 4.5
    assert stats.unique_services == 2
    assert stats.with_feedback == 1
    assert stats.feedback_rate == 33.3
    assert stats.feedback_rate_display == "33.3"


def test_summary_stats_blank_feedback_does_not_count(make_response) -> None:
    responses = [make_response(suggestions="   "), make_response(cc3="Thanks!")]
    stats = summary_stats(responses)
    assert stats.with_feedback == 1
    assert stats.feedback_rate_display == "50.0"


def test_summary_stats_without_any_ratings(make_response) -> None:
    stats = summary_stats([make_response(), make_response()])
    assert stats.average_satisfaction == 0
    assert stats.average_satisfaction_display == "0.00"


def test_client_type_distribution_keeps_first_seen_order(make_response) -> None:
    responses = [
        make_response(client_type="Business"),
        make_response(client_type="Citizen"),
        make_response(client_type="Business"),
    ]
    dist = client_type_distribution(responses)
    assert [(d.label, d.count) for d in dist] == [("Business", 2), ("Citizen", 1)]


def test_satisfaction_distribution_has_fixed_buckets(make_response) -> None:
    responses = [make_response(sqd0=5), make_response(sqd0=5), make_response(sqd0=2), make_response()]
    dist = {d.label: d.count for d in satisfaction_distribution(responses)}
    assert list(dist) == ["1", "2", "3", "4", "5", "N/A"]
    assert dist["5"] == 2
    assert dist["2"] == 1
    assert dist["N/A"] == 1
    assert dist["1"] == 0


def test_satisfaction_distribution_counts_na_token_and_blank_together() -> None:
    base = {"client_type": "Citizen", "service_availed": "Permit", "created_at": "2026-10-19T09:00:00"}
    responses = [
        SurveyResponse.from_mapping({**base, "id": "1", "sqd0": "na"}),
        SurveyResponse.from_mapping({**base, "id": "2", "sqd0": ""}),
        SurveyResponse.from_mapping({**base, "id": "3"}),
        SurveyResponse.from_mapping({**base, "id": "4", "sqd0": 3}),
    ]
    dist = {d.label: d.count for d in satisfaction_distribution(responses)}
    assert dist["N/A"] == 3
    assert dist["3"] == 1
