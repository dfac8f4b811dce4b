"""
Exceptions raised by the conditional-logic engine.
"""
from typing import Optional, Dict, Any


class ConditionException(Exception):
    """Base exception for conditional-logic errors."""

    def __init__(
            self,
            message: str,
            node_id: Optional[str] = None,
            details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.node_id = node_id
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "node_id": self.node_id,
            "details": self.details
        }


class InvalidExpressionError(ConditionException):
    """Raised when a payload cannot be parsed into a condition tree."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(
            message=message,
            details={"errors": errors or []}
        )


class NestingLimitExceededError(ConditionException):
    """Raised when a condition group is nested deeper than allowed."""

    def __init__(self, group_id: str, level: int, max_level: int):
        super().__init__(
            message=f"Condition group '{group_id}' is nested at level {level}, maximum is {max_level}",
            node_id=group_id,
            details={
                "level": level,
                "max_level": max_level,
            }
        )


class TooManyConditionsError(ConditionException):
    """Raised when an expression holds more leaf conditions than allowed."""

    def __init__(self, count: int, limit: int):
        super().__init__(
            message=f"Expression has {count} conditions, maximum is {limit}",
            details={
                "count": count,
                "limit": limit,
            }
        )
