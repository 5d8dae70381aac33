from typing import Any, Callable

import pytest

from surveyinsights.responses import SurveyResponse


@pytest.fixture
def make_response() -> Callable[..., SurveyResponse]:
    counter = {"n": 0}

    def _make(**overrides: Any) -> SurveyResponse:
        counter["n"] += 1
        values = {
            "id": f"r{counter['n']}",
            "client_type": "Citizen",
            "service_availed": "Business Permit",
            "created_at": "2026-10-19T09:30:00",
        }
        values.update(overrides)
        return SurveyResponse(**values)

    return _make
