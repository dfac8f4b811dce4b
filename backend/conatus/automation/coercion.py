"""
Value coercion for typed condition variables.

Context values arrive from trigger payloads and action outputs as JSON, so
numbers may be strings and dates are ISO strings. When a variable declares
its value type, both sides of a comparison are coerced to that type first.
"""
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from conatus.automation.conditions import ValueType

_TRUE_STRINGS = {"true", "1"}
_FALSE_STRINGS = {"false", "0"}


class CoercionError(ValueError):
    """Raised when a value cannot be read as the requested type."""

    def __init__(self, value: Any, value_type: ValueType):
        super().__init__(f"Cannot coerce {value!r} to {value_type.value}")
        self.value = value
        self.value_type = value_type


def _parse_datetime(text: str) -> datetime:
    # fromisoformat only learned the trailing 'Z' in 3.11
    text = text.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_number(value: Any) -> float:
    if isinstance(value, bool):
        raise CoercionError(value, ValueType.NUMBER)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise CoercionError(value, ValueType.NUMBER) from None
    raise CoercionError(value, ValueType.NUMBER)


def to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise CoercionError(value, ValueType.BOOLEAN)


def to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
        try:
            return _parse_datetime(value).date()
        except ValueError:
            raise CoercionError(value, ValueType.DATE) from None
    raise CoercionError(value, ValueType.DATE)


def to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            return _as_utc(_parse_datetime(value))
        except ValueError:
            raise CoercionError(value, ValueType.DATE_TIME) from None
    raise CoercionError(value, ValueType.DATE_TIME)


def to_time(value: Any) -> time:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if isinstance(value, str):
        try:
            return time.fromisoformat(value.strip()).replace(tzinfo=None)
        except ValueError:
            raise CoercionError(value, ValueType.TIME) from None
    raise CoercionError(value, ValueType.TIME)


def to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise CoercionError(value, ValueType.STRING)


def to_array(value: Any) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    raise CoercionError(value, ValueType.ARRAY)


def to_object(value: Any) -> dict:
    if isinstance(value, dict):
        return value
    raise CoercionError(value, ValueType.OBJECT)


_COERCERS = {
    ValueType.STRING: to_string,
    ValueType.NUMBER: to_number,
    ValueType.BOOLEAN: to_boolean,
    ValueType.DATE: to_date,
    ValueType.TIME: to_time,
    ValueType.DATE_TIME: to_datetime,
    ValueType.ARRAY: to_array,
    ValueType.OBJECT: to_object,
}


def coerce(value: Any, value_type: Optional[ValueType]) -> Any:
    """Coerce a value to a declared type; untyped values pass through."""
    if value_type is None:
        return value
    return _COERCERS[ValueType(value_type)](value)
