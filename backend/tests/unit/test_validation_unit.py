"""
Unit tests for condition validation.
"""
from conatus.automation.conditions import Condition, ConditionGroup, parse_expression
from conatus.automation.validation import (
    ValidationIssue,
    ValidationResult,
    validate_condition,
    validate_expression,
    validate_group,
)


def leaf(data):
    return Condition.model_validate(data)


class TestValidateCondition:
    """Unit tests for validate_condition."""

    def test_valid_condition(self, condition_factory):
        c = leaf(condition_factory("a", "equals", "x", value_type="string"))
        assert validate_condition(c) == {}

    def test_variable_required(self):
        c = leaf({"operator": "equals", "variable": {}, "value": "x"})
        assert validate_condition(c)["variable"] == "Variable is required"

    def test_value_required(self, condition_factory):
        c = leaf(condition_factory("a", "equals"))
        assert validate_condition(c)["value"] == "Value is required"

    def test_empty_string_counts_as_missing(self, condition_factory):
        c = leaf(condition_factory("a", "contains", ""))
        assert validate_condition(c)["value"] == "Value is required"

    def test_zero_and_false_are_values(self, condition_factory):
        assert "value" not in validate_condition(leaf(condition_factory("a", "equals", 0)))
        assert "value" not in validate_condition(leaf(condition_factory("a", "equals", False)))

    def test_exists_needs_no_value(self, condition_factory):
        c = leaf(condition_factory("a", "exists"))
        assert validate_condition(c) == {}

    def test_second_value_required_for_between(self, condition_factory):
        c = leaf(condition_factory("a", "between", 1, value_type="number"))
        assert validate_condition(c)["secondValue"] == "Second value is required"

    def test_between_range_must_increase(self, condition_factory):
        c = leaf(condition_factory("a", "between", 10, second_value=5, value_type="number"))
        assert validate_condition(c)["secondValue"] == "Second value must be greater than first value"

    def test_between_equal_bounds_rejected(self, condition_factory):
        c = leaf(condition_factory("a", "between", "5", second_value=5, value_type="number"))
        assert "secondValue" in validate_condition(c)

    def test_between_dates(self, condition_factory):
        ok = leaf(condition_factory("d", "between", "2025-01-01", second_value="2025-02-01", value_type="date"))
        bad = leaf(condition_factory("d", "between", "2025-02-01", second_value="2025-01-01", value_type="date"))
        assert validate_condition(ok) == {}
        assert "secondValue" in validate_condition(bad)

    def test_between_times(self, condition_factory):
        bad = leaf(condition_factory("t", "between", "18:00", second_value="09:00", value_type="time"))
        assert "secondValue" in validate_condition(bad)

    def test_untyped_between_skips_range_check(self, condition_factory):
        c = leaf(condition_factory("a", "between", 10, second_value=5))
        assert validate_condition(c) == {}

    def test_value_must_match_type(self, condition_factory):
        c = leaf(condition_factory("a", "greaterThan", "lots", value_type="number"))
        assert validate_condition(c)["value"] == "Value must be a valid number"

    def test_operator_must_apply_to_type(self, condition_factory):
        c = leaf(condition_factory("a", "startsWith", 3, value_type="number"))
        assert validate_condition(c)["operator"] == "Operator is not applicable to number values"


class TestValidateGroup:
    """Unit tests for validate_group."""

    def test_empty_group_valid(self):
        assert validate_group(ConditionGroup()).valid

    def test_issue_keyed_by_node(self, condition_factory, group_factory):
        group = ConditionGroup.model_validate(group_factory(
            "and",
            condition_factory("a", "equals", "x", id="ok"),
            condition_factory("b", "equals", id="missing"),
        ))
        result = validate_group(group)

        assert not result.valid
        assert result.errors_for("missing") == {"value": "Value is required"}
        assert result.errors_for("ok") == {}

    def test_invalid_child_in_nested_group(self, condition_factory, group_factory):
        group = ConditionGroup.model_validate(group_factory(
            "and",
            group_factory("or", condition_factory("b", "lessThan", id="deep")),
        ))
        result = validate_group(group)
        assert result.errors_for("deep") == {"value": "Value is required"}

    def test_nesting_limit(self, condition_factory, group_factory):
        group = ConditionGroup.model_validate(group_factory(
            "and",
            group_factory("or", group_factory("and", condition_factory("a", "exists"), id="g2"), id="g1"),
            id="g0",
        ))
        assert validate_group(group, max_nesting_level=2).valid

        result = validate_group(group, max_nesting_level=1)
        assert result.errors_for("g2") == {"group": "Groups can be nested at most 1 levels deep"}
        assert result.errors_for("g1") == {}


class TestValidateExpression:
    """Unit tests for validate_expression."""

    def test_none_is_valid(self):
        assert validate_expression(None).valid

    def test_sample_is_valid(self, urgent_work_expression):
        assert validate_expression(parse_expression(urgent_work_expression)).valid

    def test_condition_limit(self, urgent_work_expression):
        expression = parse_expression(urgent_work_expression)
        result = validate_expression(expression, max_conditions=2)

        assert not result.valid
        assert result.issues[-1].field == "conditions"
        assert result.issues[-1].node_id == "g-root"

    def test_to_dict(self):
        result = ValidationResult(issues=[ValidationIssue("n1", "value", "Value is required")])
        assert result.to_dict() == {
            "valid": False,
            "issues": [{"nodeId": "n1", "field": "value", "message": "Value is required"}],
        }
