"""
Pydantic schemas for the automation conditions API.

Defines request/response models for validating, evaluating and previewing
conditional logic, and for gating automation runs.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from conatus.automation.conditions import CamelModel, ConditionalExpression
from conatus.automation.gate import Automation


# =============================================================================
# REQUEST MODELS
# =============================================================================

class ExpressionRequest(CamelModel):
    """Request body carrying a conditional expression."""

    expression: Optional[ConditionalExpression] = Field(
        default=None,
        description="Conditional logic; omitted or empty means the automation always runs",
    )


class ValidateRequest(ExpressionRequest):
    """Request body for validating conditional logic."""

    max_nesting_level: Optional[int] = Field(
        default=None,
        ge=0,
        le=10,
        description="Override the configured nesting limit (root group is level 0)",
    )


class EvaluateRequest(ExpressionRequest):
    """Request body for evaluating conditional logic against a context."""

    context: Dict[str, Any] = Field(
        default_factory=dict,
        description="Mapping variable paths are resolved against",
    )


class ShouldRunRequest(CamelModel):
    """Request body for deciding whether a triggered automation fires."""

    automation: Automation
    trigger_data: Dict[str, Any] = Field(default_factory=dict)
    action_results: Dict[str, Any] = Field(default_factory=dict)
    variables: Dict[str, Any] = Field(default_factory=dict)
    timezone: Optional[str] = Field(
        default=None,
        description="IANA timezone for system.time and system.date; defaults to the server setting",
    )
    weather: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Current weather facts exposed as system.weather",
    )
    now: Optional[datetime] = Field(
        default=None,
        description="Evaluation instant; defaults to the current time",
    )


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class OperatorResponse(CamelModel):
    """A comparison operator and what it requires."""
    value: str
    label: str
    requires_value: bool
    requires_second_value: bool
    applicable_types: List[str]


class ValidationIssueResponse(CamelModel):
    """A problem with one field of one node."""
    node_id: str
    field: str
    message: str


class ValidationResponse(CamelModel):
    """Outcome of validating conditional logic."""
    valid: bool
    issues: List[ValidationIssueResponse] = Field(default_factory=list)


class EvaluateResponse(CamelModel):
    """Outcome of evaluating conditional logic."""
    result: bool
    expression_empty: bool


class PreviewResponse(CamelModel):
    """Readable renderings of conditional logic."""
    lines: List[str]
    code: str


class ShouldRunResponse(CamelModel):
    """Gate decision for a triggered automation."""
    should_run: bool
    reason: str
    evaluated_at: datetime
