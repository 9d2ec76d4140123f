# Bisaya++ language package
# This package provides a parser and interpreter for the Bisaya++ language.
from .errors import BisayaError
from .interpreter import Interpreter, run_file, run_program
from .lexer import tokenize
from .parser import Parser, parse_program

__all__ = [
    'run_program',
    'run_file',
    'parse_program',
    'tokenize',
    'Parser',
    'Interpreter',
    'BisayaError',
]
