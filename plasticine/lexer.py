"""Tokeniser for Plasticine BASIC.

The character-level scan is delegated to a Lark lexer built from the
terminal grammar below (``lexer='basic'``, so the text is scanned once,
left to right, longest match first). Lark's raw tokens are then turned
into :class:`Token` objects in a single pass that

* maps words onto keywords (case-insensitively),
* splits ``REM`` remarks into a ``REM`` token and a ``COMMENT`` token,
* decides whether an integer is a ``LINE_NUMBER`` label or an ordinary
  ``NUMBER``: it is a label when it is the first token of the program or
  follows an end-of-line (or ``:``) token.

Newlines are significant: each one becomes an ``EOL`` token which the
parser uses as the statement terminator.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterable, List, Tuple

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexError


class TokenType(Enum):
    EOL = auto()
    EOF = auto()
    # literals
    NUMBER = auto()
    LINE_NUMBER = auto()
    STRING = auto()
    IDENTIFIER = auto()
    COMMENT = auto()
    # keywords
    LET = auto()
    PRINT = auto()
    PRINTLINE = auto()
    INPUT = auto()
    IF = auto()
    THEN = auto()
    ELSE = auto()
    GOTO = auto()
    GOSUB = auto()
    RETURN = auto()
    FOR = auto()
    TO = auto()
    STEP = auto()
    NEXT = auto()
    REM = auto()
    END = auto()
    STOP = auto()
    RANDOM = auto()
    SET_FOREGROUND_COLOR = auto()
    SET_BACKGROUND_COLOR = auto()
    DIM = auto()
    DEF = auto()
    FN = auto()
    SUB = auto()
    # operators
    PLUS = auto()
    MINUS = auto()
    MULTIPLY = auto()
    DIVIDE = auto()
    MODULUS = auto()
    POWER = auto()
    ASSIGN = auto()
    NOT_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    # punctuation
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    COMMA = auto()
    COLON = auto()


KEYWORDS: Dict[str, TokenType] = {
    'LET': TokenType.LET,
    'PRINT': TokenType.PRINT,
    'PRINTLINE': TokenType.PRINTLINE,
    'PRINTLN': TokenType.PRINTLINE,
    'INPUT': TokenType.INPUT,
    'IF': TokenType.IF,
    'THEN': TokenType.THEN,
    'ELSE': TokenType.ELSE,
    'GOTO': TokenType.GOTO,
    'GOSUB': TokenType.GOSUB,
    'RETURN': TokenType.RETURN,
    'FOR': TokenType.FOR,
    'TO': TokenType.TO,
    'STEP': TokenType.STEP,
    'NEXT': TokenType.NEXT,
    'REM': TokenType.REM,
    'END': TokenType.END,
    'STOP': TokenType.STOP,
    'RANDOM': TokenType.RANDOM,
    'FGCOLOR': TokenType.SET_FOREGROUND_COLOR,
    'BGCOLOR': TokenType.SET_BACKGROUND_COLOR,
    'DIM': TokenType.DIM,
    'DEF': TokenType.DEF,
    'FN': TokenType.FN,
    'SUB': TokenType.SUB,
}


@dataclass(frozen=True)
class Token:
    kind: TokenType
    lexeme: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.kind.name} {self.lexeme!r} @ {self.line}:{self.column}"


BASIC_TERMINALS = r"""
    start: _token*
    _token: NUMBER | STRING | WORD | REMARK | NEWLINE
          | PLUS | MINUS | STAR | SLASH | PERCENT | CARET
          | EQUAL | NOT_EQUAL | LESS_EQUAL | GREATER_EQUAL | LESS | GREATER
          | LPAR | RPAR | COMMA | COLON

    // REM swallows the rest of its line
    REMARK.2: /(?i:rem)(?!\w)[^\n]*/
    NUMBER: /\d+(\.\d*)?/
    STRING: /"[^"]*"/
    WORD: /[^\W\d_]\w*/
    NEWLINE: /\n/

    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    PERCENT: "%"
    CARET: "^"
    EQUAL: "="
    NOT_EQUAL: "<>"
    LESS_EQUAL: "<="
    GREATER_EQUAL: ">="
    LESS: "<"
    GREATER: ">"
    LPAR: "("
    RPAR: ")"
    COMMA: ","
    COLON: ":"

    WS: /[^\S\n]+/
    %ignore WS
"""


BASIC_LEXER = Lark(BASIC_TERMINALS, parser='lalr', lexer='basic')


SYMBOLS: Dict[str, TokenType] = {
    'PLUS': TokenType.PLUS,
    'MINUS': TokenType.MINUS,
    'STAR': TokenType.MULTIPLY,
    'SLASH': TokenType.DIVIDE,
    'PERCENT': TokenType.MODULUS,
    'CARET': TokenType.POWER,
    'EQUAL': TokenType.ASSIGN,
    'NOT_EQUAL': TokenType.NOT_EQUAL,
    'LESS_EQUAL': TokenType.LESS_EQUAL,
    'GREATER_EQUAL': TokenType.GREATER_EQUAL,
    'LESS': TokenType.LESS,
    'GREATER': TokenType.GREATER,
    'LPAR': TokenType.LEFT_PAREN,
    'RPAR': TokenType.RIGHT_PAREN,
    'COMMA': TokenType.COMMA,
    'COLON': TokenType.COLON,
}

# a bare integer after one of these is a line label
LABEL_POSITIONS = (TokenType.EOL, TokenType.COLON)


def tokenise(source: str) -> List[Token]:
    """Convert source text into a list of tokens ending with ``EOF``.

    Either the complete token list is returned or a :class:`LexError` is
    raised; no partial result escapes.
    """
    text = source.replace('\r\n', '\n')
    tokens: List[Token] = []
    try:
        for raw in BASIC_LEXER.lex(text):
            previous = tokens[-1].kind if tokens else None
            tokens.extend(_convert(raw, previous))
    except UnexpectedCharacters as e:
        if e.char == '"':
            reason = 'unterminated string literal'
        else:
            reason = f"unexpected character {e.char!r}"
        raise LexError(e.line, e.column, reason) from None
    line, column = _end_position(text)
    tokens.append(Token(TokenType.EOF, '', line, column))
    return tokens


def _convert(raw, previous) -> Iterable[Token]:
    value = str(raw)
    kind = raw.type
    if kind == 'NUMBER':
        if '.' not in value and (previous is None or previous in LABEL_POSITIONS):
            return [Token(TokenType.LINE_NUMBER, value, raw.line, raw.column)]
        return [Token(TokenType.NUMBER, value, raw.line, raw.column)]
    if kind == 'STRING':
        return [Token(TokenType.STRING, value[1:-1], raw.line, raw.column)]
    if kind == 'WORD':
        return [Token(KEYWORDS.get(value.upper(), TokenType.IDENTIFIER), value, raw.line, raw.column)]
    if kind == 'REMARK':
        result = [Token(TokenType.REM, value[:3], raw.line, raw.column)]
        rest = value[3:]
        text = rest.strip()
        if text:
            offset = 3 + len(rest) - len(rest.lstrip())
            result.append(Token(TokenType.COMMENT, text, raw.line, raw.column + offset))
        return result
    if kind == 'NEWLINE':
        return [Token(TokenType.EOL, '\n', raw.line, raw.column)]
    return [Token(SYMBOLS[kind], value, raw.line, raw.column)]


def _end_position(text: str) -> Tuple[int, int]:
    line = text.count('\n') + 1
    column = len(text) - (text.rfind('\n') + 1) + 1
    return line, column


def detokenise(tokens: Iterable[Token]) -> str:
    """Render a token stream back to source text.

    The result is not a pretty-print of the original (spacing and
    comments are normalised) but tokenising it again yields the same
    token kinds.
    """
    parts: List[str] = []
    for token in tokens:
        if token.kind is TokenType.EOF:
            break
        if token.kind is TokenType.EOL:
            parts.append('\n')
            continue
        text = f'"{token.lexeme}"' if token.kind is TokenType.STRING else token.lexeme
        if parts and parts[-1] != '\n':
            parts.append(' ')
        parts.append(text)
    return ''.join(parts)
