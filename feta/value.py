"""Feature value types and checks on variant values."""

from __future__ import annotations

from enum import Enum
from typing import Union

FeatureValue = Union[None, int, float, bool, str]

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class ValueType(str, Enum):
    """The type that all variants of a feature share."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"

    def __str__(self) -> str:
        return self.value


_ALIASES = {
    "integer": ValueType.INTEGER,
    "int": ValueType.INTEGER,
    "float": ValueType.FLOAT,
    "boolean": ValueType.BOOLEAN,
    "bool": ValueType.BOOLEAN,
    "string": ValueType.STRING,
}


def parse_value_type(name: str) -> ValueType:
    """Return the value type for a name or one of its short aliases."""
    try:
        return _ALIASES[name]
    except (KeyError, TypeError):
        raise ValueError(f"unknown value type: {name!r}") from None


def has_type(value: FeatureValue, value_type: ValueType) -> bool:
    """Tell whether a value is of the given value type."""
    if value_type is ValueType.INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if value_type is ValueType.FLOAT:
        return isinstance(value, float)
    if value_type is ValueType.BOOLEAN:
        return isinstance(value, bool)
    if value_type is ValueType.STRING:
        return isinstance(value, str)
    return False


def check_value(value: object) -> FeatureValue:
    """Return the value if it is a valid feature value, else raise."""
    if value is None or isinstance(value, (bool, float, str)):
        return value
    if isinstance(value, int):
        if not _I64_MIN <= value <= _I64_MAX:
            raise ValueError(f"integer out of range: {value}")
        return value
    raise TypeError(f"unsupported feature value: {value!r}")