"""
Condition Model - Pydantic models for automation conditional logic.

An automation's conditional logic is a tree: a root group holding leaf
conditions and nested groups, each group combining its children with AND
or OR. Leaves compare a variable (resolved by dot path from the runtime
context) against literal values.

Field names are snake_case in Python and camelCase on the wire, matching
the payloads produced by the automation workflow builder.
"""
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from conatus.automation.exceptions import InvalidExpressionError


class ValueType(str, Enum):
    """Type of value a variable holds."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    DATE_TIME = "dateTime"
    ARRAY = "array"
    OBJECT = "object"


class Operator(str, Enum):
    """Comparison applied by a leaf condition."""
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    EXISTS = "exists"
    NOT_EXISTS = "notExists"
    BETWEEN = "between"


class LogicalOperator(str, Enum):
    """How a group combines its children."""
    AND = "and"
    OR = "or"


class VariableSource(str, Enum):
    """Context namespace a variable is read from."""
    TRIGGER = "trigger"
    ACTION = "action"
    SYSTEM = "system"
    VARIABLE = "variable"


# =============================================================================
# OPERATOR CATALOGUE
# =============================================================================

_SCALAR_TYPES = (
    ValueType.STRING, ValueType.NUMBER, ValueType.BOOLEAN,
    ValueType.DATE, ValueType.TIME, ValueType.DATE_TIME,
)
_ORDERED_TYPES = (ValueType.NUMBER, ValueType.DATE, ValueType.TIME, ValueType.DATE_TIME)
_ALL_TYPES = tuple(ValueType)


@dataclass(frozen=True)
class OperatorSpec:
    """What an operator needs and which value types it applies to."""

    operator: Operator
    label: str
    requires_value: bool
    requires_second_value: bool
    applicable_types: Tuple[ValueType, ...]

    def applies_to(self, value_type: Optional[ValueType]) -> bool:
        return value_type is None or value_type in self.applicable_types

    def to_dict(self) -> dict:
        return {
            "value": self.operator.value,
            "label": self.label,
            "requiresValue": self.requires_value,
            "requiresSecondValue": self.requires_second_value,
            "applicableTypes": [t.value for t in self.applicable_types],
        }


OPERATORS: Dict[Operator, OperatorSpec] = {
    spec.operator: spec
    for spec in (
        OperatorSpec(Operator.EQUALS, "equals", True, False, _SCALAR_TYPES),
        OperatorSpec(Operator.NOT_EQUALS, "does not equal", True, False, _SCALAR_TYPES),
        OperatorSpec(Operator.CONTAINS, "contains", True, False, (ValueType.STRING, ValueType.ARRAY)),
        OperatorSpec(Operator.NOT_CONTAINS, "does not contain", True, False, (ValueType.STRING, ValueType.ARRAY)),
        OperatorSpec(Operator.GREATER_THAN, "is greater than", True, False, _ORDERED_TYPES),
        OperatorSpec(Operator.LESS_THAN, "is less than", True, False, _ORDERED_TYPES),
        OperatorSpec(Operator.GREATER_THAN_OR_EQUAL, "is greater than or equal to", True, False, _ORDERED_TYPES),
        OperatorSpec(Operator.LESS_THAN_OR_EQUAL, "is less than or equal to", True, False, _ORDERED_TYPES),
        OperatorSpec(Operator.STARTS_WITH, "starts with", True, False, (ValueType.STRING,)),
        OperatorSpec(Operator.ENDS_WITH, "ends with", True, False, (ValueType.STRING,)),
        OperatorSpec(Operator.EXISTS, "exists", False, False, _ALL_TYPES),
        OperatorSpec(Operator.NOT_EXISTS, "does not exist", False, False, _ALL_TYPES),
        OperatorSpec(Operator.BETWEEN, "is between", True, True, _ORDERED_TYPES),
    )
}


def get_operator_spec(operator: Union[Operator, str]) -> Optional[OperatorSpec]:
    """Look up an operator's spec, accepting the enum or its wire value."""
    try:
        return OPERATORS[Operator(operator)]
    except ValueError:
        return None


def applicable_operators(value_type: Optional[ValueType] = None) -> List[OperatorSpec]:
    """Operators usable with a value type; all of them when the type is unknown."""
    return [spec for spec in OPERATORS.values() if spec.applies_to(value_type)]


# =============================================================================
# TREE MODELS
# =============================================================================

def generate_id() -> str:
    """Short random identifier for conditions and groups."""
    return uuid.uuid4().hex[:13]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Variable(CamelModel):
    """A named value read from the evaluation context."""

    id: Optional[str] = None
    name: Optional[str] = None
    path: str = ""
    value_type: Optional[ValueType] = None
    source: Optional[VariableSource] = None
    description: Optional[str] = None


class Condition(CamelModel):
    """Leaf comparison of a variable against one or two literal values."""

    id: str = Field(default_factory=generate_id)
    variable: Variable = Field(default_factory=Variable)
    operator: Operator = Operator.EQUALS
    value: Any = None
    second_value: Any = None


def _node_kind(node: Any) -> str:
    # A node carrying an operator is a leaf; anything else is a group
    if isinstance(node, dict):
        return "condition" if "operator" in node else "group"
    return "condition" if isinstance(node, Condition) else "group"


ConditionNode = Annotated[
    Union[
        Annotated[Condition, Tag("condition")],
        Annotated["ConditionGroup", Tag("group")],
    ],
    Discriminator(_node_kind),
]


class ConditionGroup(CamelModel):
    """Children combined with a single logical operator."""

    id: str = Field(default_factory=generate_id)
    logical_operator: LogicalOperator = LogicalOperator.AND
    conditions: List[ConditionNode] = Field(default_factory=list)


class ConditionalExpression(CamelModel):
    """Conditional logic attached to an automation."""

    root_group: ConditionGroup = Field(default_factory=ConditionGroup)

    @property
    def is_empty(self) -> bool:
        return not self.root_group.conditions


ConditionGroup.model_rebuild()
ConditionalExpression.model_rebuild()


def is_condition(node: Union[Condition, ConditionGroup]) -> bool:
    return isinstance(node, Condition)


def default_condition() -> Condition:
    return Condition()


def default_group(logical_operator: LogicalOperator = LogicalOperator.AND) -> ConditionGroup:
    """New group seeded with one blank condition, as the builder creates it."""
    return ConditionGroup(logical_operator=logical_operator, conditions=[default_condition()])


def default_expression() -> ConditionalExpression:
    """Empty expression: an AND root group with no conditions."""
    return ConditionalExpression(root_group=ConditionGroup(logical_operator=LogicalOperator.AND))


def parse_expression(data: Any) -> Optional[ConditionalExpression]:
    """
    Build a ConditionalExpression from a wire payload.

    Accepts an expression (``{"rootGroup": ...}``), a bare group, an
    already-parsed model, or None. Raises InvalidExpressionError when the
    payload does not describe a condition tree.
    """
    if data is None or isinstance(data, ConditionalExpression):
        return data
    if isinstance(data, ConditionGroup):
        return ConditionalExpression(root_group=data)
    if not isinstance(data, dict):
        raise InvalidExpressionError(f"Expected an object, got {type(data).__name__}")

    if "rootGroup" not in data and "root_group" not in data and "conditions" in data:
        data = {"rootGroup": data}

    try:
        return ConditionalExpression.model_validate(data)
    except PydanticValidationError as e:
        errors = [
            {"loc": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg")}
            for err in e.errors()
        ]
        raise InvalidExpressionError("Invalid conditional expression", errors=errors) from e


# =============================================================================
# TREE WALKS
# =============================================================================

def iter_conditions(group: ConditionGroup) -> Iterator[Condition]:
    """Depth-first walk over every leaf condition."""
    for node in group.conditions:
        if is_condition(node):
            yield node
        else:
            yield from iter_conditions(node)


def iter_groups(group: ConditionGroup, level: int = 0) -> Iterator[Tuple[ConditionGroup, int]]:
    """Depth-first walk over groups with their nesting level (root is 0)."""
    yield group, level
    for node in group.conditions:
        if not is_condition(node):
            yield from iter_groups(node, level + 1)


def max_depth(group: ConditionGroup) -> int:
    """Nesting level of the deepest group below (and including) this one."""
    return max(level for _, level in iter_groups(group))


def count_conditions(group: ConditionGroup) -> int:
    return sum(1 for _ in iter_conditions(group))
