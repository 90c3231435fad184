"""CLI entry point for the KorvaqScrip interpreter.

Usage:
    python -m korvaq [-v|-vv|-vvv] <program_file>
    python -m korvaq [-v...] --emit-ast <program_file>
    python -m korvaq [-v...] --ast <ast_json_file>
    python -m korvaq [-v...]

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .kq file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a program file an interactive shell is started. Debug information
is written to `debug.txt` in the current directory when verbosity is
greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .ast_json import ast_to_obj, ast_from_obj
from .errors import KorvaqError, LexerError
from .interpreter import Interpreter
from .jsontext import to_string
from .lexer import TokenKind, Tokenizer
from .parser import parse_program
from .types import VOID

SHELL_HELP = """\
Enter KorvaqScrip statements; blocks may span several lines.
  .help    show this message
  .exit    leave the shell
State persists between entries: variables and functions stay defined."""


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def open_braces(source: str) -> int:
    """Count unclosed `{` in source; a lexical error counts as complete input."""
    depth = 0
    try:
        for token in Tokenizer(source):
            if token.kind == TokenKind.LBRACE:
                depth += 1
            elif token.kind == TokenKind.RBRACE:
                depth -= 1
    except LexerError:
        return 0
    return depth


def shell(interpreter: Interpreter) -> None:
    print("Welcome to KorvaqShell!")
    print("Type .help for help, .exit to quit")
    buffer: List[str] = []
    while True:
        try:
            line = input('... ' if buffer else '> ')
        except EOFError:
            print()
            break
        command = line.strip()
        if not buffer:
            if not command:
                continue
            if command.lower() == '.exit':
                print('Exiting...')
                break
            if command == '.help':
                print(SHELL_HELP)
                continue
        buffer.append(line)
        source = '\n'.join(buffer)
        if open_braces(source) > 0:
            continue
        buffer = []
        try:
            value = interpreter.run_source(source)
        except KorvaqError as e:
            print(f"Error: {e}", file=sys.stderr)
            continue
        if value is not None and value is not VOID:
            print(to_string(value))


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="KorvaqScrip interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='KQ_FILE', help='emit AST JSON for the given .kq file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='KorvaqScrip program file (.kq) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        try:
            ast_program = parse_program(source)
        except KorvaqError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    interpreter = Interpreter(debug_level=args.v)
    try:
        # Execute from AST JSON
        if args.ast:
            ast_path = Path(args.ast)
            source = read_source(ast_path)
            try:
                ast_program = ast_from_obj(json.loads(source))
            except (TypeError, ValueError) as e:
                print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
                sys.exit(1)
            interpreter.run(ast_program)
            return

        # No program: interactive shell
        if not args.program:
            shell(interpreter)
            return

        interpreter.run_source(read_source(Path(args.program)))
    except KorvaqError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()


if __name__ == '__main__':
    main()
