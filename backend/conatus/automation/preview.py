"""
Condition Preview - readable renderings of a condition tree.

``describe`` produces the indented sentence view shown next to the builder
("Match ALL of: ..."); ``to_code`` produces a compact JavaScript-style
expression for users who prefer to read logic as code.
"""
import json
from typing import Any, List, Optional, Union

from conatus.automation.coercion import CoercionError, to_boolean, to_date
from conatus.automation.conditions import (
    Condition,
    ConditionGroup,
    LogicalOperator,
    Operator,
    ValueType,
    get_operator_spec,
    is_condition,
)

INDENT = "  "

_VALUELESS = (Operator.EXISTS, Operator.NOT_EXISTS)
_METHOD_OPERATORS = {
    Operator.CONTAINS: ".includes(",
    Operator.NOT_CONTAINS: ".indexOf(",
    Operator.STARTS_WITH: ".startsWith(",
    Operator.ENDS_WITH: ".endsWith(",
}
_INFIX_OPERATORS = {
    Operator.EQUALS: " === ",
    Operator.NOT_EQUALS: " !== ",
    Operator.GREATER_THAN: " > ",
    Operator.LESS_THAN: " < ",
    Operator.GREATER_THAN_OR_EQUAL: " >= ",
    Operator.LESS_THAN_OR_EQUAL: " <= ",
}


def operator_label(operator: Union[Operator, str]) -> str:
    spec = get_operator_spec(operator)
    return spec.label if spec else str(operator)


def logical_operator_text(operator: LogicalOperator) -> str:
    return "AND" if operator == LogicalOperator.AND else "OR"


def format_value(value: Any, value_type: Optional[ValueType] = None) -> str:
    """Render a literal for display."""
    if value is None:
        return ""
    if value_type == ValueType.BOOLEAN or isinstance(value, bool):
        try:
            return "true" if to_boolean(value) else "false"
        except CoercionError:
            return str(value)
    if value_type in (ValueType.DATE, ValueType.DATE_TIME):
        try:
            return to_date(value).isoformat()
        except CoercionError:
            return str(value)
    return str(value)


def _describe_condition(condition: Condition) -> str:
    variable = condition.variable
    parts = [variable.name or "Unknown variable", operator_label(condition.operator)]

    if condition.operator not in _VALUELESS:
        rendered = format_value(condition.value, variable.value_type)
        if condition.operator == Operator.BETWEEN and condition.second_value is not None:
            rendered += f" and {format_value(condition.second_value, variable.value_type)}"
        if rendered:
            parts.append(rendered)

    return " ".join(parts)


def describe(node: Union[Condition, ConditionGroup], level: int = 0) -> List[str]:
    """
    Human-readable lines for a condition or group, indented by depth.

    The group's connective (AND/OR) appears between siblings.
    """
    indent = INDENT * level

    if is_condition(node):
        return [indent + _describe_condition(node)]

    quantifier = "ALL" if node.logical_operator == LogicalOperator.AND else "ANY"
    lines = [f"{indent}Match {quantifier} of:"]
    connective = INDENT * (level + 1) + logical_operator_text(node.logical_operator)

    for index, child in enumerate(node.conditions):
        if index:
            lines.append(connective)
        lines.extend(describe(child, level + 1))

    return lines


def to_code(node: Union[Condition, ConditionGroup]) -> str:
    """JavaScript-style code string for a condition or group."""
    if not is_condition(node):
        if not node.conditions:
            return "true"
        joiner = " && " if node.logical_operator == LogicalOperator.AND else " || "
        return "(" + joiner.join(to_code(child) for child in node.conditions) + ")"

    path = node.variable.path or "unknown"
    operator = node.operator

    if operator == Operator.EXISTS:
        return f"({path} !== undefined && {path} !== null)"
    if operator == Operator.NOT_EXISTS:
        return f"({path} === undefined || {path} === null)"
    if operator == Operator.BETWEEN:
        return f"({path} >= {_js(node.value)} && {path} <= {_js(node.second_value)})"

    if operator in _METHOD_OPERATORS:
        code = f"{path}{_METHOD_OPERATORS[operator]}{_js(node.value)})"
        if operator == Operator.NOT_CONTAINS:
            code += " === -1"
        return code

    return f"{path}{_INFIX_OPERATORS.get(operator, ' === ')}{_js(node.value)}"


def _js(value: Any) -> str:
    if value is None:
        return "undefined"
    return json.dumps(value, default=str)
