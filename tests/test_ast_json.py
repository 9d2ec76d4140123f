import json

import pytest

from bisaya.ast import Empty, IfStmt, VarDecl
from bisaya.ast_json import ast_from_obj, ast_to_obj
from bisaya.errors import Position
from bisaya.interpreter import Interpreter, parse_program

SOURCE = '''SUGOD
MUGNA NUMERO i, total = 0
MUGNA TIPIK ratio = 0.5
MUGNA LETRA c = 'k'
MUGNA TINUOD done = "DILI"

ALANG SA (i = 1, i <= 4, i++)
PUNDOK{
    total = total + i * -1
}
KUNG (total < 0 UG DILI done)
PUNDOK{
    IPAKITA: "negative " & total & $
}
KUNG DILI (total == 0)
PUNDOK{
    IPAKITA: "zero"
}
KUNG WALA
PUNDOK{
    IPAKITA: "positive"
}
DAWAT: c
IPAKITA: c & [!] & ratio
KATAPUSAN
'''


def test_round_trip_through_json():
    program = parse_program(SOURCE)
    text = json.dumps(ast_to_obj(program))
    restored = ast_from_obj(json.loads(text))
    assert restored == program


def test_positions_and_types_survive():
    program = parse_program(SOURCE)
    restored = ast_from_obj(json.loads(json.dumps(ast_to_obj(program))))
    decl = restored.body[0]
    assert isinstance(decl, VarDecl)
    assert decl.position == Position(2, 1)
    assert isinstance(restored.body[4], Empty)
    assert isinstance(restored.body[6], IfStmt)
    assert restored.body[6].condition.data_type.value == 'TINUOD'


def test_loaded_tree_runs_like_the_parsed_one():
    program = parse_program(SOURCE)
    restored = ast_from_obj(json.loads(json.dumps(ast_to_obj(program))))
    expected = Interpreter(input_fn=lambda: 'q').interpret(program)
    assert Interpreter(input_fn=lambda: 'q').interpret(restored) == expected
    assert expected == 'negative -10\nq!0.5'


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'WhileStmt'})
