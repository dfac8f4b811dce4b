"""
Conditional logic for automations.

This package holds the condition tree model, its evaluator, validation,
previews, the evaluation context and the gate that decides whether an
automation's actions fire.
"""
from conatus.automation.conditions import (
    ConditionalExpression,
    ConditionGroup,
    Condition,
    Variable,
    ValueType,
    Operator,
    LogicalOperator,
    OPERATORS,
    parse_expression,
)
from conatus.automation.context import SystemFacts, build_context
from conatus.automation.evaluator import evaluate_condition, evaluate_group, resolve_path
from conatus.automation.exceptions import (
    ConditionException,
    InvalidExpressionError,
    NestingLimitExceededError,
    TooManyConditionsError,
)
from conatus.automation.gate import Automation, AutomationGate, GateDecision
from conatus.automation.preview import describe, to_code
from conatus.automation.validation import ValidationResult, validate_condition, validate_expression

__all__ = [
    # Model
    "ConditionalExpression",
    "ConditionGroup",
    "Condition",
    "Variable",
    "ValueType",
    "Operator",
    "LogicalOperator",
    "OPERATORS",
    "parse_expression",
    # Context
    "SystemFacts",
    "build_context",
    # Evaluation
    "evaluate_condition",
    "evaluate_group",
    "resolve_path",
    # Exceptions
    "ConditionException",
    "InvalidExpressionError",
    "NestingLimitExceededError",
    "TooManyConditionsError",
    # Gate
    "Automation",
    "AutomationGate",
    "GateDecision",
    # Preview
    "describe",
    "to_code",
    # Validation
    "ValidationResult",
    "validate_condition",
    "validate_expression",
]
