"""CLI entry point for the Plasticine BASIC interpreter.

Usage:
    python -m plasticine [-v|-vv|-vvv] <program_file>
    python -m plasticine [-v...] --emit-ast <program_file>
    python -m plasticine [-v...] --ast <ast_json_file>
    python -m plasticine --tokens <program_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given program and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file
  --tokens      Print the token stream of the given program and exit

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from .ast_json import ast_to_obj, ast_from_obj
from .errors import BasicError, ErrorKind
from .interpreter import Interpreter
from .lexer import tokenise
from .parser import parse_program
from .std.io import ConsoleIO

ERROR_LABELS = {
    ErrorKind.SYNTAX: 'Syntax error',
    ErrorKind.TYPE: 'Type error',
    ErrorKind.RUNTIME: 'Runtime error',
}


def report(error: BasicError) -> None:
    print(f"{ERROR_LABELS[error.kind]}: {error}", file=sys.stderr)


def read_source(path_arg: str) -> str:
    program_file = Path(path_arg)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    return program_file.read_text(encoding='utf-8')


def execute(ast_program, debug_level: int) -> int:
    console = ConsoleIO(colors=sys.stdout.isatty())
    interpreter = Interpreter(output=console, input=console, terminal=console, debug_level=debug_level)
    try:
        interpreter.run(ast_program)
    except BasicError as e:
        report(e)
        return 1
    finally:
        console.reset()
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Plasticine BASIC interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='PROGRAM_FILE', help='emit AST JSON for the given program')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    group.add_argument('--tokens', metavar='PROGRAM_FILE', help='print the tokens of the given program')
    parser.add_argument('program', nargs='?', help='program file (.bas) to execute')
    args = parser.parse_args(argv)

    if args.tokens:
        source = read_source(args.tokens)
        try:
            tokens = tokenise(source)
        except BasicError as e:
            report(e)
            sys.exit(1)
        for token in tokens:
            print(token)
        return

    # Emit AST mode
    if args.emit_ast:
        source = read_source(args.emit_ast)
        try:
            ast_program = parse_program(source)
        except BasicError as e:
            report(e)
            sys.exit(1)
        program_file = Path(args.emit_ast)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(ast_program), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        sys.exit(execute(ast_from_obj(data), args.v))

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast/--tokens')
    source = read_source(args.program)
    try:
        ast_program = parse_program(source)
    except BasicError as e:
        report(e)
        sys.exit(1)
    sys.exit(execute(ast_program, args.v))


if __name__ == '__main__':
    main()
