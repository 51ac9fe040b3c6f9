# Plasticine BASIC package
# This package provides a tokeniser, parser and interpreter for a line-numbered BASIC dialect.
from .errors import (
    BasicError, LexError, ParseError, BasicRuntimeError, BasicTypeError,
    GeneralRuntimeError, ErrorKind,
)
from .lexer import tokenise, Token, TokenType
from .parser import parse, parse_program
from .environment import ExecutionContext
from .interpreter import Interpreter, RunResult, run_program, run_file

__all__ = [
    'tokenise',
    'parse',
    'parse_program',
    'Interpreter',
    'ExecutionContext',
    'RunResult',
    'run_program',
    'run_file',
    'Token',
    'TokenType',
    'BasicError',
    'LexError',
    'ParseError',
    'BasicRuntimeError',
    'BasicTypeError',
    'GeneralRuntimeError',
    'ErrorKind',
]
