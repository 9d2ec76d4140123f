from pathlib import Path

from bisaya.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_10_collatz():
    source = (EXAMPLES / 'program_10.bpp').read_text(encoding='utf-8')
    ast = parse_program(source)
    interp = Interpreter()
    # 27 takes 111 steps to reach 1
    assert interp.interpret(ast) == '111'
