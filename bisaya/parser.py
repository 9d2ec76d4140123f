"""Parser for the Bisaya++ language.

This module implements a recursive-descent parser that turns the token list
produced by `bisaya.lexer.tokenize` into a `Program` AST. Semantic checks are
fused into parsing: every identifier must be declared before it is used and
may be declared only once, declaration initializers must agree with the
declared type, operands must agree with their operators, and conditions
must be boolean. Every expression node leaves the parser with its resolved
data type.

Scoping is flat. `PUNDOK { ... }` groups statements for control flow but
does not open a new scope, so a single `SymbolTable` covers the whole
program (or, in REPL mode, the whole session).
"""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from .ast import (
    Assign, Binary, Binding, Block, BoolLit, CharLit, ElseIf, Empty,
    Expression, FloatLit, ForLoop, Identifier, IfStmt, InputStmt, IntLit,
    Node, OutputStmt, Program, TextLit, Unary, VarDecl,
)
from .errors import (
    DataTypeMismatchError, DatatypeNotFoundError, IdentifierNotFoundError,
    IdentifierRedeclarationError, MustEndWithKatapusanError,
    MustStartWithSugodError, UnexpectedTokenError,
)
from .lexer import Token, tokenize
from .types import DataType, TRUE_LITERAL, arithmetic_result, types_match

RELATIONAL_OPS = ['EQ', 'NEQ', 'LT', 'GT', 'LE', 'GE']
ADDITIVE_OPS = ['PLUS', 'MINUS']
MULTIPLICATIVE_OPS = ['STAR', 'SLASH', 'PERCENT']
LOGICAL_OPS = ['UG', 'O']

# Tokens that close a simple statement without being part of it
STATEMENT_CLOSERS = ['RBRACE', 'KATAPUSAN', 'EOF']


class SymbolTable:
    """Flat mapping from identifier name to declared data type."""
    def __init__(self):
        self.types: Dict[str, DataType] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.types

    def lookup(self, name: str) -> Optional[DataType]:
        return self.types.get(name)

    def declare(self, name: str, data_type: DataType):
        self.types[name] = data_type

    def snapshot(self) -> Dict[str, DataType]:
        return dict(self.types)

    def restore(self, snapshot: Dict[str, DataType]):
        self.types = dict(snapshot)


class Parser:
    """Recursive-descent parser with inline semantic checking.

    In REPL mode the `SUGOD`/`KATAPUSAN` markers are optional and the same
    instance is meant to be reused for every input line, so identifiers
    declared by earlier calls remain visible. A call that fails leaves the
    symbol table as it was before the call.
    """
    def __init__(self, repl_mode: bool = False, symbols: Optional[SymbolTable] = None):
        self.repl_mode = repl_mode
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.tokens: List[Token] = []
        self.pos = 0

    # Token helpers

    def peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def match(self, expected: Union[str, List[str]]) -> bool:
        token = self.peek()
        if isinstance(expected, list):
            return token.kind in expected
        return token.kind == expected

    def consume(self, expected: Union[str, List[str]], message: Optional[str] = None) -> Token:
        token = self.peek()
        if not self.match(expected):
            if message is None:
                wanted = ' or '.join(expected) if isinstance(expected, list) else expected
                message = f"expected {wanted}"
            raise UnexpectedTokenError(f"{message}, got {describe(token)}", token.position)
        if token.kind != 'EOF':
            self.pos += 1
        return token

    def skip_newlines(self) -> bool:
        skipped = False
        while self.match('NEWLINE'):
            self.pos += 1
            skipped = True
        return skipped

    def end_statement(self):
        if self.match('NEWLINE'):
            self.pos += 1
            return
        if self.match(STATEMENT_CLOSERS):
            return
        token = self.peek()
        raise UnexpectedTokenError(f"expected end of line, got {describe(token)}", token.position)

    # Semantic helpers

    def expect_type(self, expected: DataType, expr: Expression, token: Token):
        if expr.data_type != expected:
            raise DataTypeMismatchError(expected.value, expr.data_type.value, token.position)

    def expect_numeric(self, expr: Expression, token: Token):
        if not expr.data_type.is_numeric:
            raise DataTypeMismatchError(DataType.INT.value, expr.data_type.value, token.position)

    def expect_matching(self, left: DataType, right: DataType, token: Token):
        if not types_match(left, right):
            raise DataTypeMismatchError(left.value, right.value, token.position)

    # Program structure

    def parse(self, tokens: List[Token]) -> Program:
        self.tokens = tokens
        self.pos = 0
        saved = self.symbols.snapshot()
        try:
            return self.parse_program()
        except Exception:
            self.symbols.restore(saved)
            raise

    def parse_program(self) -> Program:
        start = self.peek()
        self.skip_newlines()
        if self.match('SUGOD'):
            start = self.consume('SUGOD')
            # the line break ending the SUGOD line is not a blank statement
            if self.match('NEWLINE'):
                self.consume('NEWLINE')
        elif not self.repl_mode:
            raise MustStartWithSugodError(self.peek().position)
        body = self.parse_statements(['KATAPUSAN', 'EOF'])
        if self.match('KATAPUSAN'):
            self.consume('KATAPUSAN')
            self.skip_newlines()
        elif not self.repl_mode:
            raise MustEndWithKatapusanError(self.peek().position)
        if not self.match('EOF'):
            token = self.peek()
            raise UnexpectedTokenError(f"expected end of input after KATAPUSAN, got {describe(token)}", token.position)
        return Program(body, position=start.position)

    def parse_statements(self, terminators: List[str]) -> List[Node]:
        statements: List[Node] = []
        while not self.match(terminators):
            if self.match('EOF'):
                token = self.peek()
                raise UnexpectedTokenError(f"unexpected end of input, expected {' or '.join(terminators)}", token.position)
            statements.append(self.parse_statement())
        return statements

    def parse_statement(self) -> Node:
        token = self.peek()
        if token.kind == 'NEWLINE':
            self.consume('NEWLINE')
            return Empty(position=token.position)
        if token.kind == 'MUGNA':
            return self.parse_var_decl()
        if token.kind == 'DAWAT':
            return self.parse_input_stmt()
        if token.kind == 'IPAKITA':
            return self.parse_output_stmt()
        if token.kind == 'KUNG':
            return self.parse_if_stmt()
        if token.kind == 'ALANG':
            return self.parse_for_loop()
        if token.kind == 'PUNDOK':
            block = self.parse_block()
            self.end_statement()
            return block
        expr = self.parse_expression()
        self.end_statement()
        return expr

    def parse_var_decl(self) -> VarDecl:
        start = self.consume('MUGNA')
        type_token = self.peek()
        if type_token.kind == 'IDENTIFIER':
            raise DatatypeNotFoundError(type_token.lexeme, type_token.position)
        self.consume('DATATYPE', 'expected data type after MUGNA')
        decl_type = DataType.from_keyword(type_token.lexeme)
        if decl_type is None:
            raise DatatypeNotFoundError(type_token.lexeme, type_token.position)
        bindings: List[Binding] = []
        while True:
            name_token = self.consume('IDENTIFIER')
            if name_token.lexeme in self.symbols:
                raise IdentifierRedeclarationError(name_token.lexeme, name_token.position)
            initializer: Optional[Expression] = None
            if self.match('ASSIGN'):
                assign_token = self.consume('ASSIGN')
                initializer = self.parse_expression()
                self.expect_matching(decl_type, initializer.data_type, assign_token)
            # registered only after the initializer so it cannot refer to itself
            self.symbols.declare(name_token.lexeme, decl_type)
            bindings.append(Binding(name_token.lexeme, initializer))
            if not self.match('COMMA'):
                break
            self.consume('COMMA')
        self.end_statement()
        return VarDecl(decl_type, bindings, position=start.position)

    def parse_input_stmt(self) -> InputStmt:
        start = self.consume('DAWAT')
        self.consume('COLON', 'expected ":" after DAWAT')
        targets: List[str] = []
        while True:
            name_token = self.consume('IDENTIFIER')
            if name_token.lexeme not in self.symbols:
                raise IdentifierNotFoundError(name_token.lexeme, name_token.position)
            targets.append(name_token.lexeme)
            if not self.match('COMMA'):
                break
            self.consume('COMMA')
        self.end_statement()
        return InputStmt(targets, position=start.position)

    def parse_output_stmt(self) -> OutputStmt:
        start = self.consume('IPAKITA')
        self.consume('COLON', 'expected ":" after IPAKITA')
        items = [self.parse_expression()]
        while self.match('AMPERSAND'):
            self.consume('AMPERSAND')
            items.append(self.parse_expression())
        self.end_statement()
        return OutputStmt(items, position=start.position)

    def parse_condition(self) -> Expression:
        self.consume('LPAR', 'expected "(" before condition')
        token = self.peek()
        condition = self.parse_expression()
        self.expect_type(DataType.BOOL, condition, token)
        self.consume('RPAR', 'expected ")" after condition')
        self.skip_newlines()
        return condition

    def parse_block(self) -> Block:
        start = self.consume('PUNDOK', 'expected PUNDOK to start code block')
        self.skip_newlines()
        self.consume('LBRACE', 'expected "{" after PUNDOK')
        if self.match('NEWLINE'):
            self.consume('NEWLINE')
        body = self.parse_statements(['RBRACE'])
        self.consume('RBRACE', 'expected "}" to close code block')
        return Block(body, position=start.position)

    def at_else_clause(self) -> bool:
        return self.match('KUNG') and self.peek(1).kind in ('DILI', 'WALA')

    def parse_if_stmt(self) -> IfStmt:
        start = self.consume('KUNG')
        condition = self.parse_condition()
        then_block = self.parse_block()
        stmt = IfStmt(condition, then_block, position=start.position)
        line_ended = self.skip_newlines()
        while self.at_else_clause():
            self.consume('KUNG')
            if self.match('DILI'):
                self.consume('DILI')
                else_if_condition = self.parse_condition()
                stmt.else_ifs.append(ElseIf(else_if_condition, self.parse_block()))
                line_ended = self.skip_newlines()
                continue
            self.consume('WALA')
            self.skip_newlines()
            stmt.else_block = self.parse_block()
            line_ended = self.skip_newlines()
            break
        if not line_ended:
            self.end_statement()
        return stmt

    def parse_for_loop(self) -> ForLoop:
        start = self.consume('ALANG')
        self.consume('SA', 'expected SA after ALANG')
        self.consume('LPAR', 'expected "(" after ALANG SA')
        init = self.parse_expression()
        self.consume('COMMA', 'expected "," after loop initializer')
        cond_token = self.peek()
        condition = self.parse_expression()
        self.expect_type(DataType.BOOL, condition, cond_token)
        self.consume('COMMA', 'expected "," after loop condition')
        increment = self.parse_expression()
        self.consume('RPAR', 'expected ")" after loop increment')
        self.skip_newlines()
        body = self.parse_block()
        self.end_statement()
        return ForLoop(init, condition, increment, body, position=start.position)

    # Expression parsing

    def parse_expression(self) -> Expression:
        return self.parse_assign()

    # assignment: logical ('=' assignment)?
    def parse_assign(self) -> Expression:
        left = self.parse_logical()
        if not self.match('ASSIGN'):
            return left
        op_token = self.consume('ASSIGN')
        if not isinstance(left, Identifier):
            raise UnexpectedTokenError("left side of assignment must be an identifier", op_token.position)
        value = self.parse_assign()
        self.expect_matching(left.data_type, value.data_type, op_token)
        return Assign(left, value, data_type=left.data_type, position=left.position)

    def parse_logical(self) -> Expression:
        node = self.parse_relational()
        while self.match(LOGICAL_OPS):
            op_token = self.consume(LOGICAL_OPS)
            right = self.parse_relational()
            self.expect_type(DataType.BOOL, node, op_token)
            self.expect_type(DataType.BOOL, right, op_token)
            node = Binary(op_token.lexeme, node, right, data_type=DataType.BOOL, position=op_token.position)
        return node

    def parse_relational(self) -> Expression:
        node = self.parse_additive()
        while self.match(RELATIONAL_OPS):
            op_token = self.consume(RELATIONAL_OPS)
            right = self.parse_additive()
            self.expect_matching(node.data_type, right.data_type, op_token)
            node = Binary(op_token.lexeme, node, right, data_type=DataType.BOOL, position=op_token.position)
        return node

    def parse_additive(self) -> Expression:
        node = self.parse_multiplicative()
        while self.match(ADDITIVE_OPS):
            op_token = self.consume(ADDITIVE_OPS)
            right = self.parse_multiplicative()
            node = self.arithmetic(op_token, node, right)
        return node

    def parse_multiplicative(self) -> Expression:
        node = self.parse_unary()
        while self.match(MULTIPLICATIVE_OPS):
            op_token = self.consume(MULTIPLICATIVE_OPS)
            right = self.parse_unary()
            node = self.arithmetic(op_token, node, right)
        return node

    def arithmetic(self, op_token: Token, left: Expression, right: Expression) -> Binary:
        self.expect_numeric(left, op_token)
        self.expect_numeric(right, op_token)
        data_type = arithmetic_result(left.data_type, right.data_type)
        return Binary(op_token.lexeme, left, right, data_type=data_type, position=op_token.position)

    def parse_unary(self) -> Expression:
        token = self.peek()
        if token.kind == 'DILI':
            self.consume('DILI')
            operand = self.parse_unary()
            self.expect_type(DataType.BOOL, operand, token)
            return Unary('DILI', operand, data_type=DataType.BOOL, position=token.position)
        if token.kind in ADDITIVE_OPS:
            self.consume(ADDITIVE_OPS)
            operand = self.parse_unary()
            self.expect_numeric(operand, token)
            # -x is evaluated as 0 - x
            if operand.data_type == DataType.FLOAT:
                zero: Expression = FloatLit(0.0, position=token.position)
            else:
                zero = IntLit(0, position=token.position)
            return Binary(token.lexeme, zero, operand, data_type=operand.data_type, position=token.position)
        return self.parse_postfix()

    def parse_postfix(self) -> Expression:
        node = self.parse_primary()
        if self.match(['INCREMENT', 'DECREMENT']):
            op_token = self.consume(['INCREMENT', 'DECREMENT'])
            if not isinstance(node, Identifier):
                raise UnexpectedTokenError(f"{op_token.lexeme} requires an identifier", op_token.position)
            self.expect_numeric(node, op_token)
            step = Binary(op_token.lexeme[0], Identifier(node.name, data_type=node.data_type, position=node.position),
                          IntLit(1, position=op_token.position), data_type=node.data_type, position=op_token.position)
            return Assign(node, step, data_type=node.data_type, position=node.position)
        return node

    def parse_primary(self) -> Expression:
        token = self.peek()
        kind = token.kind
        if kind == 'IDENTIFIER':
            self.consume('IDENTIFIER')
            data_type = self.symbols.lookup(token.lexeme)
            if data_type is None:
                raise IdentifierNotFoundError(token.lexeme, token.position)
            return Identifier(token.lexeme, data_type=data_type, position=token.position)
        if kind == 'INT_LITERAL':
            self.consume(kind)
            return IntLit(int(token.lexeme), position=token.position)
        if kind == 'FLOAT_LITERAL':
            self.consume(kind)
            return FloatLit(float(token.lexeme), position=token.position)
        if kind in ('CHAR_LITERAL', 'ESCAPED_CHAR'):
            self.consume(kind)
            return CharLit(token.lexeme, position=token.position)
        if kind == 'DOLLAR':
            self.consume(kind)
            return CharLit('\n', position=token.position)
        if kind == 'STRING':
            self.consume(kind)
            return TextLit(token.lexeme, position=token.position)
        if kind == 'BOOL_LITERAL':
            self.consume(kind)
            return BoolLit(token.lexeme == TRUE_LITERAL, position=token.position)
        if kind == 'LPAR':
            self.consume('LPAR')
            expr = self.parse_expression()
            self.consume('RPAR', 'expected ")"')
            return expr
        raise UnexpectedTokenError(f"unexpected {describe(token)} in expression", token.position)


def describe(token: Token) -> str:
    if token.kind == 'EOF':
        return 'end of input'
    if token.kind == 'NEWLINE':
        return 'end of line'
    return f"{token.kind} {token.lexeme!r}"


def parse_program(source: str, repl_mode: bool = False) -> Program:
    """Tokenize and parse Bisaya++ source code into a Program AST."""
    tokens = tokenize(source)
    return Parser(repl_mode=repl_mode).parse(tokens)
