"""
Automation conditions API routes.

Provides endpoints for:
- Listing comparison operators
- Validating conditional logic
- Evaluating conditional logic against a context
- Previewing conditional logic as text and code
- Deciding whether a triggered automation fires
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Query, Request

from conatus.automation.conditions import (
    ValueType,
    applicable_operators,
    count_conditions,
    default_expression,
)
from conatus.automation.context import SystemFacts
from conatus.automation.evaluator import evaluate_condition
from conatus.automation.exceptions import (
    ConditionException,
    NestingLimitExceededError,
    TooManyConditionsError,
)
from conatus.automation.gate import AutomationGate
from conatus.automation.preview import describe, to_code
from conatus.automation.validation import validate_expression
from conatus.core.config import settings
from conatus.core.exceptions import ConditionLogicError, ErrorCode, ValidationError
from conatus.schemas.automation import (
    EvaluateRequest,
    EvaluateResponse,
    ExpressionRequest,
    OperatorResponse,
    PreviewResponse,
    ShouldRunRequest,
    ShouldRunResponse,
    ValidateRequest,
    ValidationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _condition_error(exc: ConditionException) -> ConditionLogicError:
    """Map an engine exception onto the API error hierarchy."""
    if isinstance(exc, NestingLimitExceededError):
        code = ErrorCode.CND_NESTING_LIMIT
    elif isinstance(exc, TooManyConditionsError):
        code = ErrorCode.CND_TOO_MANY_CONDITIONS
    else:
        code = ErrorCode.CND_INVALID_EXPRESSION
    return ConditionLogicError(exc.message, code=code, details=exc.to_dict())


# ========== Conditions ==========

@router.get("/conditions/operators", response_model=List[OperatorResponse])
async def list_operators(
    value_type: Optional[ValueType] = Query(
        default=None,
        alias="valueType",
        description="Only operators applicable to this value type",
    ),
):
    """List comparison operators, optionally filtered by value type."""
    return [spec.to_dict() for spec in applicable_operators(value_type)]


@router.post("/conditions/validate", response_model=ValidationResponse)
async def validate_conditions(body: ValidateRequest):
    """
    Validate conditional logic.

    Returns every issue found rather than stopping at the first one. An
    expression without conditions is valid.
    """
    max_level = body.max_nesting_level
    if max_level is None:
        max_level = settings.condition_max_nesting_level

    result = validate_expression(
        body.expression,
        max_nesting_level=max_level,
        max_conditions=settings.condition_max_conditions,
    )
    return result.to_dict()


@router.post("/conditions/evaluate", response_model=EvaluateResponse)
async def evaluate_conditions(body: EvaluateRequest):
    """Evaluate conditional logic against the supplied context."""
    expression = body.expression or default_expression()

    total = count_conditions(expression.root_group)
    try:
        if total > settings.condition_max_conditions:
            raise TooManyConditionsError(total, settings.condition_max_conditions)
        result = evaluate_condition(
            expression,
            body.context,
            max_nesting_level=settings.condition_max_nesting_level,
        )
    except ConditionException as e:
        raise _condition_error(e) from e

    logger.info(f"[CONDITIONS] Evaluated {total} condition(s) -> {result}")
    return {"result": result, "expression_empty": expression.is_empty}


@router.post("/conditions/preview", response_model=PreviewResponse)
async def preview_conditions(body: ExpressionRequest):
    """Render conditional logic as readable lines and as code."""
    expression = body.expression or default_expression()
    if expression.is_empty:
        return {"lines": [], "code": "true"}

    return {
        "lines": describe(expression.root_group),
        "code": to_code(expression.root_group),
    }


# ========== Gate ==========

@router.post("/should-run", response_model=ShouldRunResponse)
async def should_run(body: ShouldRunRequest, request: Request):
    """Decide whether a triggered automation's actions fire."""
    try:
        system = SystemFacts.capture(tz_name=body.timezone, weather=body.weather, now=body.now)
    except ValueError as e:
        raise ValidationError(str(e), field="timezone") from e

    try:
        decision = AutomationGate().should_run(
            body.automation,
            trigger_data=body.trigger_data,
            action_results=body.action_results,
            variables=body.variables,
            system=system,
            request_id=getattr(request.state, "request_id", None),
        )
    except ConditionException as e:
        raise _condition_error(e) from e

    return {
        "should_run": decision.should_run,
        "reason": decision.reason.value,
        "evaluated_at": decision.evaluated_at,
    }
