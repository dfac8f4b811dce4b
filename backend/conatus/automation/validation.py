"""
Condition Validation - structural checks before an expression is saved or run.

Covers:
- Required variable and values per operator
- Operator applicability to the variable's value type
- Ordered ranges for ``between``
- Group nesting depth and expression size
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from conatus.automation.coercion import CoercionError, coerce
from conatus.automation.conditions import (
    Condition,
    ConditionalExpression,
    ConditionGroup,
    Operator,
    ValueType,
    count_conditions,
    get_operator_spec,
    is_condition,
)

logger = logging.getLogger(__name__)

_RANGE_TYPES = (ValueType.NUMBER, ValueType.DATE, ValueType.DATE_TIME, ValueType.TIME)


@dataclass
class ValidationIssue:
    """A problem with one field of one node in the tree."""

    node_id: str
    field: str
    message: str

    def to_dict(self) -> dict:
        return {
            "nodeId": self.node_id,
            "field": self.field,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    """Outcome of validating a condition tree."""

    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues

    def errors_for(self, node_id: str) -> Dict[str, str]:
        """Field -> message mapping for a single node."""
        return {i.field: i.message for i in self.issues if i.node_id == node_id}

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "issues": [issue.to_dict() for issue in self.issues],
        }


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def validate_condition(condition: Condition) -> Dict[str, str]:
    """
    Validate a single leaf condition.

    Returns:
        Mapping of field name to error message; empty when valid.
    """
    errors: Dict[str, str] = {}
    variable = condition.variable
    value_type = variable.value_type
    spec = get_operator_spec(condition.operator)

    if not variable.id:
        errors["variable"] = "Variable is required"

    if spec is None:
        errors["operator"] = f"Unknown operator '{condition.operator}'"
        return errors

    if not spec.applies_to(value_type):
        errors["operator"] = f"Operator is not applicable to {value_type.value} values"

    if spec.requires_value and _is_blank(condition.value):
        errors["value"] = "Value is required"

    if spec.requires_second_value and _is_blank(condition.second_value):
        errors["secondValue"] = "Second value is required"

    if value_type in _RANGE_TYPES:
        first = second = None
        try:
            if not _is_blank(condition.value):
                first = coerce(condition.value, value_type)
        except CoercionError:
            errors.setdefault("value", f"Value must be a valid {value_type.value}")
        try:
            if spec.requires_second_value and not _is_blank(condition.second_value):
                second = coerce(condition.second_value, value_type)
        except CoercionError:
            errors.setdefault("secondValue", f"Second value must be a valid {value_type.value}")

        if condition.operator == Operator.BETWEEN and first is not None and second is not None:
            if first >= second:
                errors["secondValue"] = "Second value must be greater than first value"

    return errors


def validate_group(
    group: ConditionGroup,
    level: int = 0,
    max_nesting_level: int = 2,
    result: Optional[ValidationResult] = None,
) -> ValidationResult:
    """
    Validate a group and everything below it.

    A group is valid only when every child is valid. Groups deeper than
    ``max_nesting_level`` (root is level 0) are reported on the group itself.
    """
    result = result if result is not None else ValidationResult()

    if level > max_nesting_level:
        result.issues.append(ValidationIssue(
            node_id=group.id,
            field="group",
            message=f"Groups can be nested at most {max_nesting_level} levels deep",
        ))

    for node in group.conditions:
        if is_condition(node):
            for field_name, message in validate_condition(node).items():
                result.issues.append(ValidationIssue(node.id, field_name, message))
        else:
            validate_group(node, level + 1, max_nesting_level, result)

    return result


def validate_expression(
    expression: Optional[ConditionalExpression],
    max_nesting_level: int = 2,
    max_conditions: Optional[int] = None,
) -> ValidationResult:
    """
    Validate a whole expression.

    Conditions are optional, so a missing or empty expression is valid.
    """
    if expression is None or expression.is_empty:
        return ValidationResult()

    result = validate_group(expression.root_group, max_nesting_level=max_nesting_level)

    if max_conditions is not None:
        total = count_conditions(expression.root_group)
        if total > max_conditions:
            result.issues.append(ValidationIssue(
                node_id=expression.root_group.id,
                field="conditions",
                message=f"Expression has {total} conditions, maximum is {max_conditions}",
            ))

    if not result.valid:
        logger.debug(f"[VALIDATION] {len(result.issues)} issue(s) in expression {expression.root_group.id}")
    return result
