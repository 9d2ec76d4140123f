"""CLI entry point for the Bisaya++ interpreter.

Usage:
    python -m bisaya [-v|-vv|-vvv] <program_file>
    python -m bisaya [-v...] --repl
    python -m bisaya --emit-ast <program_file>
    python -m bisaya [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --repl        Start an interactive session
  --emit-ast    Parse the given program and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Callable, Optional

from .ast_json import ast_to_obj, ast_from_obj
from .errors import BisayaError
from .interpreter import Interpreter
from .lexer import tokenize
from .parser import Parser, parse_program

REPL_PROMPT = "> "
REPL_CONTINUE_PROMPT = "... "
REPL_EXIT = 'exit'


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def execute(program, debug_level: int) -> None:
    interpreter = Interpreter(debug_level=debug_level)
    try:
        output = interpreter.interpret(program)
    except BisayaError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()
    print(output, end='')


def brace_delta(line: str) -> int:
    """Net number of blocks opened by `line`; 0 when it does not lex."""
    try:
        tokens = tokenize(line)
    except BisayaError:
        return 0
    return sum(1 if t.kind == 'LBRACE' else -1 for t in tokens if t.kind in ('LBRACE', 'RBRACE'))


def repl(debug_level: int = 0, read_line: Optional[Callable[[str], str]] = None) -> None:
    """Read-eval-print loop sharing one parser and one interpreter.

    Declarations persist between entries. Lines are collected until every
    `{` has been closed, so a block can span several lines. An entry that
    fails to parse or run is reported and leaves the session state as it was.
    """
    read_line = read_line if read_line is not None else input
    parser = Parser(repl_mode=True)
    interpreter = Interpreter(input_fn=lambda: read_line(''), debug_level=debug_level)
    buffer_lines = []
    depth = 0
    try:
        while True:
            prompt = REPL_PROMPT if not buffer_lines else REPL_CONTINUE_PROMPT
            try:
                line = read_line(prompt)
            except EOFError:
                print()
                break
            if not buffer_lines and line.strip() == REPL_EXIT:
                break
            if not buffer_lines and not line.strip():
                continue
            buffer_lines.append(line)
            depth += brace_delta(line)
            if depth > 0:
                continue
            source = '\n'.join(buffer_lines)
            buffer_lines = []
            depth = 0
            saved = parser.symbols.snapshot()
            try:
                program = parser.parse(tokenize(source))
                output = interpreter.interpret(program)
            except BisayaError as e:
                # names declared by an entry that failed at run time were never bound
                parser.symbols.restore(saved)
                print(f"Error: {e}", file=sys.stderr)
                continue
            if output:
                print(output, end='' if output.endswith('\n') else '\n')
    finally:
        interpreter.close()


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(prog='bisaya', description="Bisaya++ language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--repl', action='store_true', help='start an interactive session')
    group.add_argument('--emit-ast', metavar='PROGRAM_FILE', help='emit AST JSON for the given program')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Bisaya++ program file to execute')
    args = parser.parse_args(argv)

    if args.repl:
        repl(debug_level=args.v)
        return

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        try:
            ast_program = parse_program(source)
        except BisayaError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        try:
            ast_program = ast_from_obj(json.loads(read_source(ast_path)))
        except (ValueError, KeyError, TypeError) as e:
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(1)
        execute(ast_program, args.v)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --repl/--emit-ast/--ast')
    source = read_source(Path(args.program))
    try:
        ast_program = parse_program(source)
    except BisayaError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    execute(ast_program, args.v)


if __name__ == '__main__':
    main()
