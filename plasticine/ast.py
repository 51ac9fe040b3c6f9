"""Abstract Syntax Tree (AST) definitions for Plasticine BASIC.

A parsed program is a flat list of statements; control flow is expressed
through line labels and jumps rather than nested blocks, so the only
nesting in the tree is inside expressions and the single statement held
by an ``IF``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .types import Color


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


###############################################################################
# Expressions
###############################################################################


@dataclass
class Expression(Node):
    pass


@dataclass
class NumberLiteral(Expression):
    value: float


@dataclass
class StringLiteral(Expression):
    value: str


@dataclass
class VariableReference(Expression):
    name: str


@dataclass
class BinaryExpression(Expression):
    left: Expression
    operator: str  # canonical symbol: + - * / % ^ = <> < <= > >=
    right: Expression


@dataclass
class UnaryExpression(Expression):
    operator: str  # '-' or '+'
    operand: Expression


###############################################################################
# Statements
###############################################################################


@dataclass
class Statement(Node):
    # keyword-only so subclasses can keep positional fields
    line_number: Optional[int] = field(default=None, kw_only=True)


@dataclass
class Let(Statement):
    variable_name: str
    expression: Expression


@dataclass
class Print(Statement):
    values: List[Expression] = field(default_factory=list)


@dataclass
class PrintLine(Statement):
    values: List[Expression] = field(default_factory=list)


@dataclass
class Input(Statement):
    variables: List[VariableReference] = field(default_factory=list)


@dataclass
class If(Statement):
    condition: Expression
    then_branch: Statement


@dataclass
class Goto(Statement):
    target_line: int


@dataclass
class Gosub(Statement):
    target_line: int


@dataclass
class Return(Statement):
    pass


@dataclass
class For(Statement):
    variable_name: str
    start: Expression
    end: Expression
    step: Optional[Expression] = None


@dataclass
class Next(Statement):
    variable_name: str


@dataclass
class End(Statement):
    pass


@dataclass
class Comment(Statement):
    text: str = ''


@dataclass
class Random(Statement):
    variable_name: str


@dataclass
class SetForegroundColor(Statement):
    color: Optional[Color]


@dataclass
class SetBackgroundColor(Statement):
    color: Optional[Color]


@dataclass
class Program(Node):
    statements: List[Statement] = field(default_factory=list)
