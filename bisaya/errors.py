from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Position:
    """Line/column of a token in the source (both 1-based)."""
    line: int
    column: int

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"


class BisayaError(Exception):
    """Base exception type for every Bisaya++ lexing, parsing and runtime error."""
    name = 'BisayaError'

    def __init__(self, message: str, position: Optional[Position] = None):
        pos_info = f" at {position}" if position is not None else ''
        super().__init__(f"{self.name}: {message}{pos_info}")
        self.message = message
        self.position = position


class LexerError(BisayaError):
    name = 'LexerError'


###############################################################################
# Parse-time errors
###############################################################################


class ParseError(BisayaError):
    name = 'ParseError'


class UnexpectedTokenError(ParseError):
    name = 'UnexpectedTokenError'


class MustStartWithSugodError(ParseError):
    name = 'MustStartWithSugodError'

    def __init__(self, position: Optional[Position] = None):
        super().__init__('program must start with "SUGOD"', position)


class MustEndWithKatapusanError(ParseError):
    name = 'MustEndWithKatapusanError'

    def __init__(self, position: Optional[Position] = None):
        super().__init__('program must end with "KATAPUSAN"', position)


class IdentifierNotFoundError(ParseError):
    name = 'IdentifierNotFoundError'

    def __init__(self, identifier: str, position: Optional[Position] = None):
        super().__init__(f'identifier "{identifier}" not found', position)
        self.identifier = identifier


class IdentifierRedeclarationError(ParseError):
    name = 'IdentifierRedeclarationError'

    def __init__(self, identifier: str, position: Optional[Position] = None):
        super().__init__(f'identifier "{identifier}" has already been declared', position)
        self.identifier = identifier


class DatatypeNotFoundError(ParseError):
    name = 'DatatypeNotFoundError'

    def __init__(self, data_type: str, position: Optional[Position] = None):
        super().__init__(f'data type "{data_type}" not found', position)
        self.data_type = data_type


class DataTypeMismatchError(ParseError):
    name = 'DataTypeMismatchError'

    def __init__(self, expected: str, actual: str, position: Optional[Position] = None):
        super().__init__(f'expected type is "{expected}", got "{actual}"', position)
        self.expected = expected
        self.actual = actual


###############################################################################
# Runtime errors
###############################################################################


class InterpreterError(BisayaError):
    name = 'InterpreterError'


class UndefinedVariableError(InterpreterError):
    name = 'UndefinedVariableError'

    def __init__(self, variable: str, position: Optional[Position] = None):
        super().__init__(f'variable "{variable}" is undefined', position)
        self.variable = variable


class RuntimeTypeError(InterpreterError):
    name = 'RuntimeTypeError'


class InvalidVariableTypeError(InterpreterError):
    name = 'InvalidVariableTypeError'


class InvalidInputLengthError(InterpreterError):
    name = 'InvalidInputLengthError'


class InputExhaustedError(InterpreterError):
    name = 'InputExhaustedError'


class DivisionByZeroError(InterpreterError):
    name = 'DivisionByZeroError'

    def __init__(self, position: Optional[Position] = None):
        super().__init__('cannot divide by zero', position)
