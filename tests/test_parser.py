import pytest

from bisaya.ast import (
    Assign, Binary, Binding, BoolLit, CharLit, Empty, FloatLit, ForLoop,
    Identifier, IfStmt, InputStmt, IntLit, OutputStmt, TextLit, Unary, VarDecl,
)
from bisaya.errors import (
    DataTypeMismatchError, DatatypeNotFoundError, IdentifierNotFoundError,
    IdentifierRedeclarationError, MustEndWithKatapusanError,
    MustStartWithSugodError, Position, UnexpectedTokenError,
)
from bisaya.lexer import tokenize
from bisaya.parser import Parser, parse_program
from bisaya.types import DataType

INT = DataType.INT
FLOAT = DataType.FLOAT
BOOL = DataType.BOOL


def body_of(*lines):
    return parse_program('\n'.join(['SUGOD', *lines, 'KATAPUSAN'])).body


def test_declarations():
    body = body_of('MUGNA NUMERO x = 1, y', "MUGNA LETRA c = 'a'")
    assert body == [
        VarDecl(INT, [Binding('x', IntLit(1)), Binding('y')]),
        VarDecl(DataType.CHAR, [Binding('c', CharLit('a'))]),
    ]


def test_float_declaration_accepts_int_initializer():
    body = body_of('MUGNA TIPIK f = 2')
    assert body == [VarDecl(FLOAT, [Binding('f', IntLit(2))])]


def test_blank_lines_become_empty_statements():
    body = body_of('', 'IPAKITA: 1')
    assert isinstance(body[0], Empty)
    assert body[1] == OutputStmt([IntLit(1)])


def test_output_items_are_split_on_ampersand():
    body = body_of('MUGNA NUMERO x', 'IPAKITA: "x = " & x & $')
    assert body[1] == OutputStmt([TextLit('x = '), Identifier('x', data_type=INT), CharLit('\n')])


def test_input_statement():
    body = body_of('MUGNA NUMERO a, b', 'DAWAT: a, b')
    assert body[1] == InputStmt(['a', 'b'])


def test_multiplication_binds_tighter_than_addition():
    body = body_of('IPAKITA: 1 + 2 * 3')
    expected = Binary('+', IntLit(1), Binary('*', IntLit(2), IntLit(3), data_type=INT), data_type=INT)
    assert body[0].items[0] == expected


def test_mixed_arithmetic_promotes_to_float():
    body = body_of('IPAKITA: 1 + 2.5')
    assert body[0].items[0].data_type == FLOAT


def test_relational_and_logical_types():
    body = body_of('MUGNA NUMERO a, b', 'MUGNA TINUOD t = a < b UG b <> 0')
    initializer = body[1].bindings[0].initializer
    assert initializer.op == 'UG'
    assert initializer.data_type == BOOL
    assert initializer.left.op == '<'
    assert initializer.right.op == '<>'


def test_assignment_is_right_associative():
    body = body_of('MUGNA NUMERO x, y', 'x = y = 4')
    x = Identifier('x', data_type=INT)
    y = Identifier('y', data_type=INT)
    assert body[1] == Assign(x, Assign(y, IntLit(4), data_type=INT), data_type=INT)


def test_increment_desugars_to_assignment():
    body = body_of('MUGNA NUMERO i', 'i++')
    i = Identifier('i', data_type=INT)
    assert body[1] == Assign(i, Binary('+', i, IntLit(1), data_type=INT), data_type=INT)


def test_decrement_desugars_to_assignment():
    body = body_of('MUGNA NUMERO i', 'i--')
    i = Identifier('i', data_type=INT)
    assert body[1] == Assign(i, Binary('-', i, IntLit(1), data_type=INT), data_type=INT)


def test_unary_minus_subtracts_from_zero():
    body = body_of('MUGNA TIPIK f = -1.5', 'MUGNA NUMERO n = -2')
    assert body[0].bindings[0].initializer == Binary('-', FloatLit(0.0), FloatLit(1.5), data_type=FLOAT)
    assert body[1].bindings[0].initializer == Binary('-', IntLit(0), IntLit(2), data_type=INT)


def test_dili_is_kept_as_unary_not():
    body = body_of('MUGNA TINUOD t = DILI "OO"')
    assert body[0].bindings[0].initializer == Unary('DILI', BoolLit(True), data_type=BOOL)


def test_if_else_if_else_chain():
    body = body_of(
        'MUGNA NUMERO x = 5',
        'KUNG (x > 10)',
        'PUNDOK{',
        '    IPAKITA: "big"',
        '}',
        'KUNG DILI (x > 3)',
        'PUNDOK{',
        '    IPAKITA: "medium"',
        '}',
        'KUNG WALA',
        'PUNDOK{',
        '    IPAKITA: "small"',
        '}',
    )
    stmt = body[1]
    assert isinstance(stmt, IfStmt)
    assert stmt.then_block.body == [OutputStmt([TextLit('big')])]
    assert len(stmt.else_ifs) == 1
    assert stmt.else_ifs[0].block.body == [OutputStmt([TextLit('medium')])]
    assert stmt.else_block.body == [OutputStmt([TextLit('small')])]
    assert len(body) == 2


def test_for_loop():
    body = body_of('MUGNA NUMERO i', 'ALANG SA (i = 1, i <= 3, i++)', 'PUNDOK{', '    IPAKITA: i', '}')
    loop = body[1]
    assert isinstance(loop, ForLoop)
    assert isinstance(loop.init, Assign)
    assert loop.condition.data_type == BOOL
    assert isinstance(loop.increment, Assign)
    assert loop.body.body == [OutputStmt([Identifier('i', data_type=INT)])]


def test_reparsing_gives_equal_trees():
    source = 'SUGOD\nMUGNA NUMERO x = 2 * (3 + 4)\nIPAKITA: x\nKATAPUSAN'
    assert Parser().parse(tokenize(source)) == Parser().parse(tokenize(source))


def test_missing_sugod():
    with pytest.raises(MustStartWithSugodError):
        parse_program('IPAKITA: 1\nKATAPUSAN')


def test_missing_katapusan():
    with pytest.raises(MustEndWithKatapusanError):
        parse_program('SUGOD\nIPAKITA: 1\n')


def test_code_after_katapusan():
    with pytest.raises(UnexpectedTokenError):
        parse_program('SUGOD\nKATAPUSAN\nIPAKITA: 1')


def test_undeclared_identifier_reports_position():
    with pytest.raises(IdentifierNotFoundError) as excinfo:
        parse_program('SUGOD\nIPAKITA: q\nKATAPUSAN')
    assert excinfo.value.position == Position(2, 10)
    assert str(excinfo.value) == 'IdentifierNotFoundError: identifier "q" not found at line 2, column 10'


def test_redeclaration():
    with pytest.raises(IdentifierRedeclarationError):
        parse_program('SUGOD\nMUGNA NUMERO x\nMUGNA TIPIK x\nKATAPUSAN')


def test_declaration_inside_block_is_global():
    # blocks do not open a scope, so the name stays taken afterwards
    with pytest.raises(IdentifierRedeclarationError):
        parse_program('SUGOD\nPUNDOK{\nMUGNA NUMERO x\n}\nMUGNA NUMERO x\nKATAPUSAN')


def test_later_binding_may_use_an_earlier_one():
    body = body_of('MUGNA NUMERO x = 1, y = x + 1')
    y = body[0].bindings[1]
    assert y.name == 'y'
    assert y.initializer == Binary('+', Identifier('x', data_type=INT), IntLit(1), data_type=INT)


def test_binding_cannot_refer_to_itself():
    with pytest.raises(IdentifierNotFoundError):
        parse_program('SUGOD\nMUGNA NUMERO a = a\nKATAPUSAN')


def test_unknown_data_type():
    with pytest.raises(DatatypeNotFoundError):
        parse_program('SUGOD\nMUGNA NUMBER x\nKATAPUSAN')


def test_initializer_type_mismatch():
    with pytest.raises(DataTypeMismatchError) as excinfo:
        parse_program("SUGOD\nMUGNA NUMERO x = 'a'\nKATAPUSAN")
    assert excinfo.value.message == 'expected type is "NUMERO", got "LETRA"'


def test_assignment_type_mismatch():
    with pytest.raises(DataTypeMismatchError):
        parse_program('SUGOD\nMUGNA TINUOD t\nt = 1\nKATAPUSAN')


def test_text_cannot_take_part_in_arithmetic():
    with pytest.raises(DataTypeMismatchError):
        parse_program('SUGOD\nIPAKITA: "a" + 1\nKATAPUSAN')


def test_condition_must_be_boolean():
    with pytest.raises(DataTypeMismatchError):
        parse_program('SUGOD\nKUNG (1) PUNDOK{\n}\nKATAPUSAN')


def test_if_statement_must_end_its_line():
    with pytest.raises(UnexpectedTokenError):
        body_of('MUGNA NUMERO x', 'KUNG (x == 0) PUNDOK { IPAKITA: "z" } IPAKITA: "same line"')


def test_if_and_else_may_share_a_line():
    body = body_of('MUGNA NUMERO x', 'KUNG (x == 0) PUNDOK { IPAKITA: "z" } KUNG WALA PUNDOK { IPAKITA: "n" }', 'IPAKITA: x')
    assert isinstance(body[1], IfStmt)
    assert body[1].else_block is not None
    assert isinstance(body[2], OutputStmt)


def test_assignment_target_must_be_identifier():
    with pytest.raises(UnexpectedTokenError):
        parse_program('SUGOD\n5 = 3\nKATAPUSAN')


def test_repl_mode_markers_are_optional_and_symbols_persist():
    parser = Parser(repl_mode=True)
    parser.parse(tokenize('MUGNA NUMERO x = 1'))
    program = parser.parse(tokenize('IPAKITA: x'))
    assert program.body == [OutputStmt([Identifier('x', data_type=INT)])]


def test_failed_parse_leaves_symbols_unchanged():
    parser = Parser(repl_mode=True)
    with pytest.raises(DataTypeMismatchError):
        parser.parse(tokenize('MUGNA NUMERO y = 1, z = "OO"'))
    assert 'y' not in parser.symbols
    parser.parse(tokenize('MUGNA NUMERO y = 2'))
    assert parser.symbols.lookup('y') == INT
