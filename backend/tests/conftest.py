"""
Pytest Configuration and Shared Fixtures for All Tests

This conftest.py provides:
- TestClient fixture for API tests
- Builders for variables, conditions and groups
- Sample expressions and evaluation contexts
- A fixed SystemFacts snapshot so time-based conditions are deterministic
- Test markers configuration
"""
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient


# =============================================================================
# Pytest Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, no HTTP)"
    )
    config.addinivalue_line(
        "markers", "api: marks tests that go through the FastAPI app"
    )


# =============================================================================
# API Test Fixtures
# =============================================================================

@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    from main import app
    return TestClient(app)


# =============================================================================
# Condition Builders
# =============================================================================

def make_variable(path, value_type=None, name=None):
    """Wire-format variable referencing a context path."""
    variable = {"id": f"var-{path}", "name": name or path, "path": path}
    if value_type:
        variable["valueType"] = value_type
    return variable


def make_condition(path, operator, value=None, second_value=None, value_type=None, name=None, id=None):
    """Wire-format leaf condition."""
    condition = {
        "id": id or f"c-{path}-{operator}",
        "variable": make_variable(path, value_type, name),
        "operator": operator,
        "value": value,
    }
    if second_value is not None:
        condition["secondValue"] = second_value
    return condition


def make_group(logical_operator, *conditions, id=None):
    """Wire-format group."""
    return {
        "id": id or f"g-{logical_operator}-{len(conditions)}",
        "logicalOperator": logical_operator,
        "conditions": list(conditions),
    }


def make_expression(root_group):
    return {"rootGroup": root_group}


@pytest.fixture
def condition_factory():
    return make_condition


@pytest.fixture
def group_factory():
    return make_group


# =============================================================================
# Sample Data
# =============================================================================

@pytest.fixture
def email_trigger():
    """Trigger payload of an incoming email."""
    return {
        "email": {
            "from": "boss@example.com",
            "subject": "Urgent: quarterly report",
            "labels": ["work", "inbox"],
            "attachments": [{"name": "report.pdf", "size": 120400}],
            "priority": "5",
            "receivedAt": "2025-03-18T08:45:00Z",
        }
    }


@pytest.fixture
def fixed_system():
    """System facts for Tuesday 2025-03-18 09:30 UTC with light rain."""
    from conatus.automation.context import SystemFacts

    return SystemFacts.capture(
        tz_name="UTC",
        weather={"condition": "rain", "temperature": 11.5},
        now=datetime(2025, 3, 18, 9, 30, tzinfo=timezone.utc),
    )


@pytest.fixture
def urgent_work_expression():
    """
    Match ALL of:
      trigger.email.subject contains "Urgent"
      Match ANY of:
        trigger.email.labels contains "work"
        trigger.email.from ends with "@example.org"
    """
    return make_expression(
        make_group(
            "and",
            make_condition("trigger.email.subject", "contains", "Urgent", value_type="string", name="Subject"),
            make_group(
                "or",
                make_condition("trigger.email.labels", "contains", "work", value_type="array", name="Labels"),
                make_condition("trigger.email.from", "endsWith", "@example.org", value_type="string", name="Sender"),
                id="g-inner",
            ),
            id="g-root",
        )
    )


@pytest.fixture
def automation_payload(urgent_work_expression):
    """Wire-format automation with conditional logic."""
    return {
        "id": "auto-1",
        "name": "Forward urgent work mail",
        "isActive": True,
        "trigger": {"type": "event", "config": {"service": "gmail", "event": "new_email"}},
        "conditionalLogic": urgent_work_expression,
        "actions": [{"type": "send", "service": "slack", "config": {"channel": "#urgent"}}],
    }
