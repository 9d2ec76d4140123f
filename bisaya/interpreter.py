"""Interpreter for the Bisaya++ language.

This module walks a `Program` AST produced by `bisaya.parser` and executes
it. The interpreter owns a flat runtime environment that survives across
`interpret` calls, so a REPL can feed it one line at a time. Output produced
by `IPAKITA` is collected in a buffer that each `interpret` call returns and
then discards. `DAWAT` reads lines through a caller-supplied function.
"""

from __future__ import annotations

import builtins
import math
import re
from typing import Any, Callable, List, Optional

from .ast import (
    Assign, Binary, Block, Empty, Expression, ForLoop, Identifier, IfStmt,
    InputStmt, LITERAL_TYPES, Node, OutputStmt, Program, Unary, VarDecl,
)
from .environment import Environment
from .errors import (
    DivisionByZeroError, InputExhaustedError, InvalidInputLengthError,
    InvalidVariableTypeError, Position, RuntimeTypeError,
)
from .parser import parse_program
from .types import DataType, FALSE_LITERAL, TRUE_LITERAL, to_string, type_of

NUMBER_PATTERN = re.compile(r'[+-]?(\d+(\.\d*)?|\.\d+)')


def truncating_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def truncating_mod(a: int, b: int) -> int:
    """Remainder that takes the sign of the dividend."""
    return a - b * truncating_div(a, b)


class Interpreter:
    """Core interpreter that executes a Bisaya++ AST."""
    def __init__(self, input_fn: Optional[Callable[[], str]] = None,
                 debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.env = Environment()
        self.input_fn = input_fn
        self.output: List[str] = []
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def interpret(self, program: Program) -> str:
        """Execute `program` and return everything it printed.

        The output buffer starts empty on every call; variables bound by
        earlier calls stay visible.
        """
        self.output = []
        self.execute_block(program.body)
        return ''.join(self.output)

    def execute_block(self, statements: List[Node]):
        # each statement list is walked by its own loop, so nested blocks
        # never disturb the position of the enclosing list
        for stmt in statements:
            self.execute(stmt)

    def execute(self, node: Node):
        if self.debug_level >= 1 and not isinstance(node, Empty):
            self.debug(f"execute {type(node).__name__}")
        if isinstance(node, VarDecl):
            for binding in node.bindings:
                value = self.evaluate(binding.initializer) if binding.initializer is not None else None
                self.env.declare(binding.name, node.decl_type, value, node.position)
                if self.debug_level >= 2:
                    self.debug(f"declare {binding.name}: {node.decl_type.value} = {self.env.get(binding.name)!r}")
            return
        if isinstance(node, InputStmt):
            self.execute_input(node)
            return
        if isinstance(node, OutputStmt):
            for item in node.items:
                self.output.append(to_string(self.evaluate(item)))
            return
        if isinstance(node, IfStmt):
            if self.test(node.condition):
                self.execute_block(node.then_block.body)
                return
            for else_if in node.else_ifs:
                if self.test(else_if.condition):
                    self.execute_block(else_if.block.body)
                    return
            if node.else_block is not None:
                self.execute_block(node.else_block.body)
            return
        if isinstance(node, ForLoop):
            self.evaluate(node.init)
            while self.test(node.condition):
                self.execute_block(node.body.body)
                self.evaluate(node.increment)
            return
        if isinstance(node, Block):
            self.execute_block(node.body)
            return
        if isinstance(node, Program):
            self.execute_block(node.body)
            return
        if isinstance(node, Expression):
            self.evaluate(node)
            return
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def test(self, condition: Expression) -> bool:
        value = self.evaluate(condition)
        if not isinstance(value, bool):
            raise RuntimeTypeError(f'condition must be {DataType.BOOL.value}, got {type_of(value).value}',
                                   condition.position)
        if self.debug_level >= 3:
            self.debug(f"condition -> {to_string(value)}")
        return value

    def execute_input(self, node: InputStmt):
        try:
            line = self.input_fn() if self.input_fn is not None else builtins.input()
        except EOFError:
            raise InputExhaustedError('no more input available', node.position)
        fields = [field.strip() for field in line.split(',')]
        if len(fields) < len(node.targets):
            raise InvalidInputLengthError(
                f'expected {len(node.targets)} input values, got {len(fields)}', node.position)
        for name, text in zip(node.targets, fields):
            cell = self.env.cell(name, node.position)
            value = self.convert_input(text, cell.data_type, node.position)
            self.env.set(name, value, node.position)
            if self.debug_level >= 2:
                self.debug(f"input {name} = {value!r}")

    def convert_input(self, text: str, data_type: DataType, position: Optional[Position]) -> Any:
        if data_type in (DataType.INT, DataType.FLOAT):
            if NUMBER_PATTERN.fullmatch(text) is None:
                raise InvalidVariableTypeError(f'invalid input {text!r} for data type {data_type.value}', position)
            number = float(text)
            if data_type == DataType.INT:
                return int(text) if text.lstrip('+-').isdigit() else int(number)
            return number
        if data_type == DataType.CHAR:
            if len(text) != 1:
                raise InvalidInputLengthError(f'invalid input length for data type {data_type.value}', position)
            return text
        if data_type == DataType.BOOL:
            if text not in (TRUE_LITERAL, FALSE_LITERAL):
                raise InvalidVariableTypeError(f'invalid input {text!r} for data type {data_type.value}', position)
            return text == TRUE_LITERAL
        raise RuntimeTypeError(f'cannot read input into data type {data_type.value}', position)

    def evaluate(self, node: Expression) -> Any:
        if isinstance(node, LITERAL_TYPES):
            return node.value
        if isinstance(node, Identifier):
            return self.env.get(node.name, node.position)
        if isinstance(node, Assign):
            value = self.evaluate(node.value)
            stored = self.env.set(node.target.name, value, node.position)
            if self.debug_level >= 2:
                self.debug(f"assign {node.target.name} = {stored!r}")
            return stored
        if isinstance(node, Binary):
            # both sides are always evaluated, so side effects in either operand happen
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            return self.apply_binary_op(node.op, left, right, node.position)
        if isinstance(node, Unary):
            operand = self.evaluate(node.operand)
            if node.op == 'DILI':
                if not isinstance(operand, bool):
                    raise RuntimeTypeError(f'DILI expects {DataType.BOOL.value}, got {type_of(operand).value}',
                                           node.position)
                return not operand
            # the parser folds signs into Binary; signed Unary nodes come from loaded trees
            if node.op in ('-', '+'):
                zero = 0.0 if isinstance(operand, float) else 0
                return self.apply_binary_op(node.op, zero, operand, node.position)
            raise RuntimeTypeError(f'unsupported unary operator {node.op}', node.position)
        if isinstance(node, Empty):
            return None
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def apply_binary_op(self, op: str, a: Any, b: Any, position: Optional[Position] = None) -> Any:
        if op in ('UG', 'O'):
            if not isinstance(a, bool) or not isinstance(b, bool):
                raise RuntimeTypeError(f'{op} expects {DataType.BOOL.value} operands', position)
            return (a and b) if op == 'UG' else (a or b)
        if op in ('==', '<>'):
            equal = a == b and type_of(a).is_numeric == type_of(b).is_numeric
            return equal if op == '==' else not equal
        if op in ('<', '>', '<=', '>='):
            if type_of(a).is_numeric != type_of(b).is_numeric or isinstance(a, bool) != isinstance(b, bool):
                raise RuntimeTypeError(f'cannot compare {type_of(a).value} and {type_of(b).value}', position)
            if op == '<':
                return a < b
            if op == '>':
                return a > b
            if op == '<=':
                return a <= b
            return a >= b
        if not type_of(a).is_numeric or not type_of(b).is_numeric:
            raise RuntimeTypeError(f'unsupported {op} for {type_of(a).value} and {type_of(b).value}', position)
        if op == '+':
            return a + b
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        if op == '/':
            if b == 0:
                raise DivisionByZeroError(position)
            if isinstance(a, float) or isinstance(b, float):
                return a / b
            return truncating_div(a, b)
        if op == '%':
            if b == 0:
                raise DivisionByZeroError(position)
            if isinstance(a, float) or isinstance(b, float):
                return math.fmod(a, b)
            return truncating_mod(a, b)
        raise RuntimeTypeError(f'unknown operator {op}', position)


def run_program(source: str, input_fn: Optional[Callable[[], str]] = None, debug_level: int = 0) -> str:
    """Convenience function to tokenize, parse and run a program; returns its output."""
    program = parse_program(source)
    interpreter = Interpreter(input_fn=input_fn, debug_level=debug_level)
    try:
        return interpreter.interpret(program)
    finally:
        interpreter.close()


def run_file(file_path: str, input_fn: Optional[Callable[[], str]] = None, debug_level: int = 0) -> str:
    """Run a Bisaya++ source file and return its output."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source, input_fn=input_fn, debug_level=debug_level)
