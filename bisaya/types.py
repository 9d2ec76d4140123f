"""Type definitions and helpers for Bisaya++.

This module defines the small, closed type system shared by the parser and
the interpreter. It includes the `DataType` enumeration, the static type
matching rule, default values for declared variables, and utilities for
checking and rendering runtime values.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Any, Optional


@unique
class DataType(Enum):
    """A Bisaya++ data type.

    Four types are declarable with `MUGNA` (their value is the keyword used
    in source). `TEXT` is the type of string literals, which can only be
    printed. `EMPTY` marks the placeholder produced by blank lines.
    """
    INT = 'NUMERO'
    FLOAT = 'TIPIK'
    CHAR = 'LETRA'
    BOOL = 'TINUOD'
    TEXT = 'TEXT'
    EMPTY = 'EMPTY'

    def __repr__(self) -> str:
        return self.value

    @property
    def is_numeric(self) -> bool:
        return self in (DataType.INT, DataType.FLOAT)

    @staticmethod
    def from_keyword(keyword: str) -> Optional['DataType']:
        """Return the declarable type named by `keyword`, or None."""
        return DECLARABLE_TYPES.get(keyword)


DECLARABLE_TYPES = {
    'NUMERO': DataType.INT,
    'TIPIK': DataType.FLOAT,
    'LETRA': DataType.CHAR,
    'TINUOD': DataType.BOOL,
}

TRUE_LITERAL = 'OO'
FALSE_LITERAL = 'DILI'


def types_match(a: DataType, b: DataType) -> bool:
    """Return True if values of type `a` and `b` may be combined.

    Identical types always match. INT and FLOAT form a numeric pair that
    matches in either direction; mixed arithmetic promotes to FLOAT.
    """
    if a == b:
        return True
    return a.is_numeric and b.is_numeric


def arithmetic_result(a: DataType, b: DataType) -> DataType:
    if DataType.FLOAT in (a, b):
        return DataType.FLOAT
    return DataType.INT


def default_value(data_type: DataType) -> Any:
    """Value bound to a declared variable that has no initializer."""
    if data_type == DataType.INT:
        return 0
    if data_type == DataType.FLOAT:
        return 0.0
    if data_type == DataType.CHAR:
        return ''
    if data_type == DataType.BOOL:
        return False
    if data_type == DataType.TEXT:
        return ''
    return None


def type_of(value: Any) -> DataType:
    """Return the data type of a runtime value.

    Strings of length one (or the empty default character) are CHAR;
    longer strings are TEXT.
    """
    # bool is a subclass of int; test it first
    if isinstance(value, bool):
        return DataType.BOOL
    if isinstance(value, int):
        return DataType.INT
    if isinstance(value, float):
        return DataType.FLOAT
    if isinstance(value, str):
        return DataType.CHAR if len(value) <= 1 else DataType.TEXT
    return DataType.EMPTY


def coerce_value(value: Any, data_type: DataType) -> Any:
    """Convert `value` so that it can be stored in a cell of `data_type`.

    Raises TypeError (not a Bisaya error) when the value is not compatible.
    The caller should catch it and raise a Bisaya runtime error.
    """
    actual = type_of(value)
    if not types_match(data_type, actual):
        raise TypeError(f"expected {data_type.value}, got {actual.value}")
    if data_type == DataType.INT and isinstance(value, float):
        return int(value)
    if data_type == DataType.FLOAT and not isinstance(value, float):
        return float(value)
    return value


def to_string(value: Any) -> str:
    """Render a runtime value the way `IPAKITA` prints it."""
    if isinstance(value, bool):
        return TRUE_LITERAL if value else FALSE_LITERAL
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        # whole numbers drop the fraction, everything else is the shortest round-trip form
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if value is None:
        return ''
    return str(value)
