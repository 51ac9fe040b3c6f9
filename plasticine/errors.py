from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    SYNTAX = 'syntax'
    TYPE = 'type'
    RUNTIME = 'runtime'


class BasicError(Exception):
    """Base class for every error raised while lexing, parsing or running a program."""
    kind = ErrorKind.RUNTIME

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(message)

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"line {self.line}: {self.message}"
        return f"{self.line}:{self.column}: {self.message}"


class LexError(BasicError):
    kind = ErrorKind.SYNTAX

    def __init__(self, line: int, column: int, reason: str):
        super().__init__(reason, line, column)
        self.reason = reason


class ParseError(BasicError):
    kind = ErrorKind.SYNTAX

    def __init__(self, line: int, column: int, expected: str, found: Any):
        # found is the offending Token
        kind = getattr(getattr(found, 'kind', None), 'name', None)
        if kind == 'EOF':
            shown = 'end of input'
        elif kind == 'EOL':
            shown = 'end of line'
        else:
            shown = repr(getattr(found, 'lexeme', found))
        super().__init__(f"expected {expected}, found {shown}", line, column)
        self.expected = expected
        self.found = found


class BasicRuntimeError(BasicError):
    """Raised while a program is executing.

    ``line`` is the label of the failing statement (None if unlabelled)
    and ``index`` its position in the statement list; both are filled in
    by the interpreter.
    """
    kind = ErrorKind.RUNTIME

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message, line)
        self.index: Optional[int] = None


class BasicTypeError(BasicRuntimeError):
    kind = ErrorKind.TYPE


class GeneralRuntimeError(BasicRuntimeError):
    kind = ErrorKind.RUNTIME
