"""
Condition Evaluator - decides whether an automation's conditions hold.

Walks the condition tree against a runtime context (trigger payload, prior
action outputs, system facts). Groups combine children with AND/OR and
short-circuit left to right; leaves resolve their variable by dot path and
apply their operator.
"""
import logging
import operator as op
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional, Union

from conatus.automation.coercion import CoercionError, coerce
from conatus.automation.conditions import (
    Condition,
    ConditionalExpression,
    ConditionGroup,
    LogicalOperator,
    Operator,
    ValueType,
    is_condition,
    iter_groups,
    parse_expression,
)
from conatus.automation.exceptions import NestingLimitExceededError

logger = logging.getLogger(__name__)

# Types whose literal operand is an element, not a value of the same type
_CONTAINER_TYPES = (ValueType.ARRAY, ValueType.OBJECT)

# JSON scalars have no path segments of their own
_SCALARS = (bool, int, float, complex)


# =============================================================================
# PATH RESOLUTION
# =============================================================================

def resolve_path(context: Any, path: str) -> Any:
    """
    Look up a dot-separated path in the context.

    Segments index into mappings by key, into lists by numeric position and
    into other objects by public attribute. ``length`` on a list or string gives
    its size. Returns None when any segment is missing.
    """
    if not path:
        return None

    value = context
    for key in path.split("."):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(key)
        elif isinstance(value, (list, tuple, str)):
            if key == "length":
                value = len(value)
            elif isinstance(value, str):
                return None
            elif key.isascii() and key.isdigit() and int(key) < len(value):
                value = value[int(key)]
            else:
                return None
        elif isinstance(value, _SCALARS) or key.startswith("_"):
            return None
        else:
            value = getattr(value, key, None)
    return value


# =============================================================================
# OPERATORS
# =============================================================================

def _strict_equals(left: Any, right: Any) -> bool:
    # Booleans are never equal to numbers
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _compare(fn: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def compare(left: Any, right: Any) -> bool:
        if left is None or right is None:
            return False
        try:
            return bool(fn(left, right))
        except TypeError:
            return False
    return compare


def _contains(container: Any, item: Any) -> bool:
    if isinstance(container, str):
        return item is not None and str(item) in container
    if isinstance(container, (list, tuple)):
        return item in container
    return False


def _not_contains(container: Any, item: Any) -> bool:
    if isinstance(container, (str, list, tuple)):
        return not _contains(container, item)
    return True


def _starts_with(value: Any, prefix: Any) -> bool:
    return isinstance(value, str) and isinstance(prefix, str) and value.startswith(prefix)


def _ends_with(value: Any, suffix: Any) -> bool:
    return isinstance(value, str) and isinstance(suffix, str) and value.endswith(suffix)


_greater_equal = _compare(op.ge)
_less_equal = _compare(op.le)

_BINARY_OPERATORS: Dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQUALS: _strict_equals,
    Operator.NOT_EQUALS: lambda left, right: not _strict_equals(left, right),
    Operator.CONTAINS: _contains,
    Operator.NOT_CONTAINS: _not_contains,
    Operator.GREATER_THAN: _compare(op.gt),
    Operator.LESS_THAN: _compare(op.lt),
    Operator.GREATER_THAN_OR_EQUAL: _greater_equal,
    Operator.LESS_THAN_OR_EQUAL: _less_equal,
    Operator.STARTS_WITH: _starts_with,
    Operator.ENDS_WITH: _ends_with,
}


def _coerce_operand(value: Any, value_type: Optional[ValueType]) -> Any:
    if value is None or value_type in _CONTAINER_TYPES:
        return value
    return coerce(value, value_type)


# =============================================================================
# EVALUATION
# =============================================================================

def evaluate_single_condition(condition: Condition, context: Dict[str, Any]) -> bool:
    """Evaluate one leaf condition against the context."""
    path = condition.variable.path
    value_type = condition.variable.value_type
    actual = resolve_path(context, path)

    if condition.operator == Operator.EXISTS:
        return actual is not None
    if condition.operator == Operator.NOT_EXISTS:
        return actual is None

    try:
        if actual is not None:
            actual = coerce(actual, value_type)
        expected = _coerce_operand(condition.value, value_type)
        second = _coerce_operand(condition.second_value, value_type)
    except CoercionError as e:
        logger.debug(f"[EVALUATOR] Condition {condition.id} on '{path}' is false: {e}")
        return False

    if condition.operator == Operator.BETWEEN:
        return _greater_equal(actual, expected) and _less_equal(actual, second)

    compare = _BINARY_OPERATORS.get(condition.operator)
    if compare is None:
        logger.warning(f"[EVALUATOR] Unknown operator '{condition.operator}' in condition {condition.id}")
        return False
    return compare(actual, expected)


def evaluate_group(group: ConditionGroup, context: Dict[str, Any]) -> bool:
    """Evaluate a group; an empty group is true."""
    if not group.conditions:
        return True

    results = (
        evaluate_single_condition(node, context) if is_condition(node)
        else evaluate_group(node, context)
        for node in group.conditions
    )

    if group.logical_operator == LogicalOperator.AND:
        return all(results)
    return any(results)


def check_nesting(group: ConditionGroup, max_nesting_level: int) -> None:
    """Raise NestingLimitExceededError for the first group nested too deep."""
    for nested, level in iter_groups(group):
        if level > max_nesting_level:
            raise NestingLimitExceededError(nested.id, level, max_nesting_level)


def evaluate_condition(
    expression: Union[ConditionalExpression, dict, None],
    context: Dict[str, Any],
    max_nesting_level: Optional[int] = None,
) -> bool:
    """
    Evaluate a conditional expression against a context.

    Args:
        expression: Parsed expression or its wire payload. None means the
            automation has no conditions.
        context: Mapping the variable paths are resolved against.
        max_nesting_level: When given, deeper trees raise
            NestingLimitExceededError instead of being evaluated.

    Returns:
        True when the automation's actions should run.
    """
    expression = parse_expression(expression)
    if expression is None or expression.root_group is None:
        return True

    if max_nesting_level is not None:
        check_nesting(expression.root_group, max_nesting_level)

    result = evaluate_group(expression.root_group, context)
    logger.debug(f"[EVALUATOR] Root group {expression.root_group.id} evaluated to {result}")
    return result
