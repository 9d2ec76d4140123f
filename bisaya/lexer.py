"""Tokenizer for the Bisaya++ language.

Terminals are declared in a Lark grammar and matched by Lark's basic lexer.
The grammar's single rule only lists the terminals so that Lark keeps all of
them; the token stream itself is consumed by the recursive-descent parser in
`bisaya.parser`, which needs newlines as tokens and performs type checking
while it parses.

Lark resolves keywords for us: a keyword literal that is also a valid
identifier is matched by IDENTIFIER and then re-typed, so `MUGNA` becomes a
MUGNA token while `MUGNAx` stays an identifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexerError, Position

BISAYA_LEXER_GRAMMAR = r"""
    start: _token*

    _token: SUGOD | KATAPUSAN | KUNG | WALA | PUNDOK | ALANG | SA
          | MUGNA | DAWAT | IPAKITA | UG | O | DILI | OO
          | NUMERO | TIPIK | LETRA | TINUOD
          | IDENTIFIER | FLOAT_LITERAL | INT_LITERAL | STRING | CHAR_LITERAL
          | ESCAPED_CHAR | DOLLAR
          | INCREMENT | DECREMENT | PLUS | MINUS | STAR | SLASH | PERCENT
          | EQ | NEQ | LE | GE | LT | GT | ASSIGN
          | LPAR | RPAR | LBRACE | RBRACE | COMMA | COLON | AMPERSAND
          | NEWLINE

    // Keywords
    SUGOD: "SUGOD"
    KATAPUSAN: "KATAPUSAN"
    KUNG: "KUNG"
    WALA: "WALA"
    PUNDOK: "PUNDOK"
    ALANG: "ALANG"
    SA: "SA"
    MUGNA: "MUGNA"
    DAWAT: "DAWAT"
    IPAKITA: "IPAKITA"
    UG: "UG"
    O: "O"
    DILI: "DILI"
    OO: "OO"
    NUMERO: "NUMERO"
    TIPIK: "TIPIK"
    LETRA: "LETRA"
    TINUOD: "TINUOD"

    // Literals
    IDENTIFIER: /[A-Za-z_][A-Za-z0-9_]*/
    FLOAT_LITERAL.2: /\d+\.\d+/
    INT_LITERAL: /\d+/
    STRING: /"[^"\n]*"/
    CHAR_LITERAL: /'[^'\n]'/
    ESCAPED_CHAR: /\[[^\n]\]/
    DOLLAR: "$"

    // Operators. `--` is only a decrement when it directly follows an
    // operand and ends the expression; anywhere else it opens a comment.
    DECREMENT.2: /(?<=[A-Za-z0-9_)])--(?=[ \t]*(?:\r?\n|,|\)|$))/
    INCREMENT: "++"
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    PERCENT: "%"
    EQ: "=="
    NEQ: "<>"
    LE: "<="
    GE: ">="
    LT: "<"
    GT: ">"
    ASSIGN: "="

    // Punctuation
    LPAR: "("
    RPAR: ")"
    LBRACE: "{"
    RBRACE: "}"
    COMMA: ","
    COLON: ":"
    AMPERSAND: "&"
    NEWLINE: /\r?\n/

    COMMENT: /--[^\n]*/
    WS: /[ \t\f\r]+/
    %ignore COMMENT
    %ignore WS
"""


BISAYA_LEXER = Lark(
    BISAYA_LEXER_GRAMMAR,
    parser='lalr',
    lexer='basic',
)


DATATYPE_KEYWORDS = {'NUMERO', 'TIPIK', 'LETRA', 'TINUOD'}
BOOLEAN_STRINGS = {'OO', 'DILI'}


@dataclass(frozen=True)
class Token:
    kind: str
    lexeme: str
    line: int
    column: int

    @property
    def position(self) -> Position:
        return Position(self.line, self.column)


def _describe_failure(char: str) -> str:
    if char == '"':
        return 'unterminated string literal'
    if char == "'":
        return 'invalid character literal'
    if char == '[':
        return 'invalid escape code'
    return f'unknown character {char!r}'


def _end_position(source: str) -> Position:
    lines = source.split('\n')
    return Position(len(lines), len(lines[-1]) + 1)


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with an EOF token.

    String literals lose their quotes; `"OO"` and `"DILI"` (and a bare `OO`)
    become BOOL_LITERAL tokens. Character literals and escape codes such as
    `[&]` keep only the character itself. The four type names share the
    DATATYPE kind.
    """
    tokens: List[Token] = []
    try:
        for tok in BISAYA_LEXER.lex(source):
            kind = tok.type
            lexeme = str(tok.value)
            if kind in DATATYPE_KEYWORDS:
                kind = 'DATATYPE'
            elif kind == 'OO':
                kind = 'BOOL_LITERAL'
            elif kind == 'STRING':
                lexeme = lexeme[1:-1]
                if lexeme in BOOLEAN_STRINGS:
                    kind = 'BOOL_LITERAL'
            elif kind in ('CHAR_LITERAL', 'ESCAPED_CHAR'):
                lexeme = lexeme[1:-1]
            tokens.append(Token(kind, lexeme, tok.line, tok.column))
    except UnexpectedCharacters as e:
        raise LexerError(_describe_failure(e.char), Position(e.line, e.column)) from e
    end = _end_position(source)
    tokens.append(Token('EOF', '', end.line, end.column))
    return tokens
