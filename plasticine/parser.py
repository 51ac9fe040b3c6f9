"""Parser for Plasticine BASIC.

A hand-written recursive-descent parser over the token list produced by
:mod:`plasticine.lexer`. Statements are selected by their leading
keyword; expressions are parsed by precedence climbing using
``BINARY_PRECEDENCE``. Parsing stops at the first error with a
:class:`~plasticine.errors.ParseError` carrying the position and the
offending token.

The ``parse_program`` function is the public entry point and returns a
``Program`` AST node representing the entire source file.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set, Union

from .ast import (
    Program, Statement, Expression, Let, Print, PrintLine, Input, If, Goto,
    Gosub, Return, For, Next, End, Comment, Random, SetForegroundColor,
    SetBackgroundColor, NumberLiteral, StringLiteral, VariableReference,
    BinaryExpression, UnaryExpression,
)
from .errors import ParseError
from .lexer import Token, TokenType, tokenise
from .types import resolve_color


BINARY_PRECEDENCE: Dict[TokenType, int] = {
    TokenType.POWER: 4,
    TokenType.MULTIPLY: 3,
    TokenType.DIVIDE: 3,
    TokenType.MODULUS: 3,
    TokenType.PLUS: 2,
    TokenType.MINUS: 2,
    TokenType.ASSIGN: 1,
    TokenType.NOT_EQUAL: 1,
    TokenType.LESS: 1,
    TokenType.LESS_EQUAL: 1,
    TokenType.GREATER: 1,
    TokenType.GREATER_EQUAL: 1,
}

# operand of a prefix sign binds tighter than everything except '^'
UNARY_PRECEDENCE = 3

UNSUPPORTED = (TokenType.DIM, TokenType.DEF, TokenType.FN, TokenType.SUB)

STATEMENT_END = (TokenType.EOL, TokenType.EOF)


def operator_symbol(token: Token) -> str:
    # '=' is lexed as ASSIGN; inside an expression it is equality
    if token.kind is TokenType.ASSIGN:
        return '='
    return token.lexeme


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.labels: Set[int] = set()

    def peek(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        if self.tokens:
            last = self.tokens[-1]
            return Token(TokenType.EOF, '', last.line, last.column)
        return Token(TokenType.EOF, '', 1, 1)

    def advance(self) -> Token:
        token = self.peek()
        if self.pos < len(self.tokens):
            self.pos += 1
        return token

    def match(self, expected: Union[TokenType, tuple]) -> bool:
        kinds = expected if isinstance(expected, tuple) else (expected,)
        return self.peek().kind in kinds

    def consume(self, expected: TokenType, description: Optional[str] = None) -> Token:
        token = self.peek()
        if token.kind is not expected:
            raise self.error(description or expected.name, token)
        return self.advance()

    def error(self, expected: str, token: Optional[Token] = None) -> ParseError:
        token = token or self.peek()
        return ParseError(token.line, token.column, expected, token)

    def skip_end_of_lines(self):
        while self.match(TokenType.EOL):
            self.advance()

    def parse_program(self) -> Program:
        statements: List[Statement] = []
        while True:
            self.skip_end_of_lines()
            if self.match(TokenType.EOF):
                break
            statements.append(self.parse_statement())
            if not self.match(STATEMENT_END):
                raise self.error('end of line')
        return Program(statements)

    def parse_statement(self) -> Statement:
        token = self.peek()
        line_number = None
        if token.kind in (TokenType.LINE_NUMBER, TokenType.NUMBER) and token.lexeme.isdigit():
            line_number = int(token.lexeme)
            if line_number in self.labels:
                raise self.error(f'a line number other than {line_number} (already used)', token)
            self.labels.add(line_number)
            self.advance()
        stmt = self.parse_command()
        stmt.line_number = line_number
        return stmt

    def parse_command(self) -> Statement:
        """Parse one unlabelled statement, selected by its keyword."""
        token = self.peek()
        kind = token.kind
        if kind is TokenType.LET:
            return self.parse_let()
        if kind is TokenType.PRINT:
            self.advance()
            return Print(self.parse_print_values())
        if kind is TokenType.PRINTLINE:
            self.advance()
            return PrintLine(self.parse_print_values())
        if kind is TokenType.INPUT:
            return self.parse_input()
        if kind is TokenType.IF:
            return self.parse_if()
        if kind is TokenType.GOTO:
            self.advance()
            return Goto(self.parse_target('GOTO'))
        if kind is TokenType.GOSUB:
            self.advance()
            return Gosub(self.parse_target('GOSUB'))
        if kind is TokenType.RETURN:
            self.advance()
            return Return()
        if kind is TokenType.FOR:
            return self.parse_for()
        if kind is TokenType.NEXT:
            self.advance()
            name = self.consume(TokenType.IDENTIFIER, 'variable name after NEXT')
            return Next(name.lexeme)
        if kind in (TokenType.END, TokenType.STOP):
            self.advance()
            return End()
        if kind is TokenType.REM:
            self.advance()
            text = ''
            if self.match(TokenType.COMMENT):
                text = self.advance().lexeme
            return Comment(text)
        if kind is TokenType.RANDOM:
            self.advance()
            name = self.consume(TokenType.IDENTIFIER, 'variable name after RANDOM')
            return Random(name.lexeme)
        if kind is TokenType.SET_FOREGROUND_COLOR:
            self.advance()
            return SetForegroundColor(self.parse_color('FGCOLOR'))
        if kind is TokenType.SET_BACKGROUND_COLOR:
            self.advance()
            return SetBackgroundColor(self.parse_color('BGCOLOR'))
        if kind in UNSUPPORTED:
            raise self.error(f'a supported statement ({token.lexeme.upper()} is not supported)', token)
        raise self.error('a statement', token)

    def parse_let(self) -> Let:
        self.consume(TokenType.LET)
        name = self.consume(TokenType.IDENTIFIER, 'variable name after LET')
        self.consume(TokenType.ASSIGN, "'=' after variable name")
        return Let(name.lexeme, self.parse_expression())

    def parse_print_values(self) -> List[Expression]:
        # PRINT [expr (, expr)* [,]]
        values: List[Expression] = []
        while not self.match(STATEMENT_END + (TokenType.ELSE,)):
            values.append(self.parse_expression())
            if not self.match(TokenType.COMMA):
                break
            self.advance()
        return values

    def parse_input(self) -> Input:
        self.consume(TokenType.INPUT)
        variables = [VariableReference(self.consume(TokenType.IDENTIFIER, 'variable name after INPUT').lexeme)]
        while self.match(TokenType.COMMA):
            self.advance()
            variables.append(VariableReference(self.consume(TokenType.IDENTIFIER, 'variable name after ,').lexeme))
        return Input(variables)

    def parse_if(self) -> If:
        self.consume(TokenType.IF)
        condition = self.parse_expression()
        self.consume(TokenType.THEN, 'THEN after IF condition')
        stmt = If(condition, self.parse_branch())
        if self.match(TokenType.ELSE):
            self.advance()
            # NOTE: the ELSE statement replaces the THEN statement, so an
            # IF with an ELSE runs the ELSE branch whenever the condition
            # holds and nothing otherwise. Kept for compatibility with
            # existing programs.
            stmt.then_branch = self.parse_branch()
        return stmt

    def parse_branch(self) -> Statement:
        # THEN 100 is shorthand for THEN GOTO 100
        if self.match(TokenType.NUMBER):
            return Goto(self.parse_target('THEN'))
        return self.parse_command()

    def parse_target(self, keyword: str) -> int:
        token = self.peek()
        if token.kind is not TokenType.NUMBER or not token.lexeme.isdigit():
            raise self.error(f'line number after {keyword}', token)
        self.advance()
        return int(token.lexeme)

    def parse_for(self) -> For:
        self.consume(TokenType.FOR)
        name = self.consume(TokenType.IDENTIFIER, 'variable name after FOR')
        self.consume(TokenType.ASSIGN, "'=' after variable name")
        start = self.parse_expression()
        self.consume(TokenType.TO, 'TO after start expression')
        end = self.parse_expression()
        step = None
        if self.match(TokenType.STEP):
            self.advance()
            step = self.parse_expression()
        return For(name.lexeme, start, end, step)

    def parse_color(self, keyword: str):
        token = self.consume(TokenType.IDENTIFIER, f'colour name after {keyword}')
        color = resolve_color(token.lexeme)
        if color is None:
            raise self.error('a known colour name', token)
        return color

    # Expression parsing (precedence climbing)
    def parse_expression(self, min_precedence: int = 0) -> Expression:
        left = self.parse_unary()
        while True:
            token = self.peek()
            precedence = BINARY_PRECEDENCE.get(token.kind, 0)
            if precedence == 0 or precedence <= min_precedence:
                break
            self.advance()
            right = self.parse_expression(precedence)
            left = BinaryExpression(left, operator_symbol(token), right)
        return left

    def parse_unary(self) -> Expression:
        if self.match((TokenType.MINUS, TokenType.PLUS)):
            op = self.advance()
            return UnaryExpression(op.lexeme, self.parse_expression(UNARY_PRECEDENCE))
        return self.parse_primary()

    def parse_primary(self) -> Expression:
        token = self.peek()
        if token.kind in (TokenType.NUMBER, TokenType.LINE_NUMBER):
            self.advance()
            return NumberLiteral(float(token.lexeme))
        if token.kind is TokenType.STRING:
            self.advance()
            return StringLiteral(token.lexeme)
        if token.kind is TokenType.IDENTIFIER:
            self.advance()
            return VariableReference(token.lexeme)
        if token.kind is TokenType.LEFT_PAREN:
            self.advance()
            expr = self.parse_expression()
            self.consume(TokenType.RIGHT_PAREN, "')' after expression")
            return expr
        raise self.error('an expression', token)


def parse(tokens: List[Token]) -> Program:
    parser = Parser(tokens)
    try:
        return parser.parse_program()
    except RecursionError:
        raise parser.error('an expression that is not nested too deeply') from None


def parse_program(source: str) -> Program:
    """Tokenise and parse source text into a Program."""
    return parse(tokenise(source))
