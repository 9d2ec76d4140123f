from pathlib import Path

from bisaya.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_9_gcd():
    source = (EXAMPLES / 'program_9.bpp').read_text(encoding='utf-8')
    ast = parse_program(source)
    interp = Interpreter()
    assert interp.interpret(ast) == 'gcd = 6'
