from pathlib import Path

from bisaya.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_8_countdown():
    source = (EXAMPLES / 'program_8.bpp').read_text(encoding='utf-8')
    ast = parse_program(source)
    interp = Interpreter()
    assert interp.interpret(ast) == '5 4 3 2 1 \nliftoff'
