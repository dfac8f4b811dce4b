"""
Unit tests for evaluation context construction.
"""
from datetime import datetime, timezone

import pytest

from conatus.automation.context import EvaluationContext, SystemFacts, build_context


class TestSystemFacts:
    """Unit tests for SystemFacts."""

    def test_as_dict(self, fixed_system):
        facts = fixed_system.as_dict()

        assert facts["time"] == "09:30"
        assert facts["date"] == "2025-03-18"
        assert facts["dayOfWeek"] == "tuesday"
        assert facts["hour"] == 9
        assert facts["timezone"] == "UTC"
        assert facts["weather"] == {"condition": "rain", "temperature": 11.5}

    def test_converts_to_requested_timezone(self):
        facts = SystemFacts.capture(
            tz_name="Asia/Tokyo",
            now=datetime(2025, 3, 18, 20, 0, tzinfo=timezone.utc),
        ).as_dict()

        assert facts["date"] == "2025-03-19"
        assert facts["time"] == "05:00"
        assert facts["dayOfWeek"] == "wednesday"

    def test_naive_now_treated_as_utc(self):
        facts = SystemFacts.capture(tz_name="UTC", now=datetime(2025, 3, 18, 9, 30))
        assert facts.now.tzinfo is not None

    def test_unknown_timezone(self):
        with pytest.raises(ValueError, match="Unknown timezone"):
            SystemFacts.capture(tz_name="Mars/Olympus_Mons")

    def test_missing_weather_is_empty(self):
        assert SystemFacts.capture(tz_name="UTC").as_dict()["weather"] == {}


class TestBuildContext:
    """Unit tests for build_context."""

    def test_namespaces(self, email_trigger, fixed_system):
        context = build_context(
            trigger_data=email_trigger,
            action_results={"lookup": {"found": True}},
            variables={"threshold": 3},
            system=fixed_system,
        )

        assert set(context) == {"trigger", "actions", "variables", "system"}
        assert context["trigger"]["email"]["subject"].startswith("Urgent")
        assert context["actions"]["lookup"]["found"] is True
        assert context["variables"]["threshold"] == 3
        assert context["system"]["time"] == "09:30"

    def test_defaults_are_empty(self):
        context = build_context()
        assert context["trigger"] == {}
        assert context["actions"] == {}
        assert context["variables"] == {}
        assert "dateTime" in context["system"]

    def test_dataclass_to_dict(self, fixed_system):
        context = EvaluationContext(trigger={"a": 1}, system=fixed_system).to_dict()
        assert context["trigger"] == {"a": 1}
        assert context["system"]["date"] == "2025-03-18"
