"""Abstract Syntax Tree (AST) definitions for the Bisaya++ language.

The AST classes defined in this module represent the structure of parsed
Bisaya++ programs. The node set is closed: the parser only builds these
classes and the interpreter dispatches over exactly these classes.

Every expression node carries the data type resolved for it by the parser.
Nodes may also carry the source position of the token that started them;
positions are informational and do not take part in equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import Position
from .types import DataType


@dataclass
class Node:
    """Base class for all AST nodes."""
    position: Optional[Position] = field(default=None, compare=False, repr=False, kw_only=True)


###############################################################################
# Expressions
###############################################################################


@dataclass
class Expression(Node):
    data_type: DataType = field(default=DataType.EMPTY, kw_only=True)


@dataclass
class Identifier(Expression):
    name: str


@dataclass
class Assign(Expression):
    target: Identifier
    value: Expression


@dataclass
class Binary(Expression):
    op: str  # '+', '-', '*', '/', '%', relational operator, 'UG' or 'O'
    left: Expression
    right: Expression


@dataclass
class Unary(Expression):
    op: str  # 'DILI', '-' or '+'
    operand: Expression


@dataclass
class IntLit(Expression):
    value: int
    data_type: DataType = field(default=DataType.INT, kw_only=True)


@dataclass
class FloatLit(Expression):
    value: float
    data_type: DataType = field(default=DataType.FLOAT, kw_only=True)


@dataclass
class CharLit(Expression):
    value: str
    data_type: DataType = field(default=DataType.CHAR, kw_only=True)


@dataclass
class TextLit(Expression):
    value: str
    data_type: DataType = field(default=DataType.TEXT, kw_only=True)


@dataclass
class BoolLit(Expression):
    value: bool
    data_type: DataType = field(default=DataType.BOOL, kw_only=True)


@dataclass
class Empty(Expression):
    """Placeholder for a blank line."""


LITERAL_TYPES = (IntLit, FloatLit, CharLit, TextLit, BoolLit)


###############################################################################
# Statements
###############################################################################


@dataclass
class Program(Node):
    body: List[Node]


@dataclass
class Block(Node):
    body: List[Node]


@dataclass
class Binding:
    name: str
    initializer: Optional[Expression] = None


@dataclass
class VarDecl(Node):
    decl_type: DataType
    bindings: List[Binding]


@dataclass
class InputStmt(Node):
    targets: List[str]


@dataclass
class OutputStmt(Node):
    items: List[Expression]


@dataclass
class ElseIf:
    condition: Expression
    block: Block


@dataclass
class IfStmt(Node):
    condition: Expression
    then_block: Block
    else_ifs: List[ElseIf] = field(default_factory=list)
    else_block: Optional[Block] = None


@dataclass
class ForLoop(Node):
    init: Expression
    condition: Expression
    increment: Expression
    body: Block

