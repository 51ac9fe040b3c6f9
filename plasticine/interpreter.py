"""Interpreter for Plasticine BASIC.

This module walks the flat statement list produced by the parser. A
single program counter indexes the list; before each run every labelled
statement is entered into a label -> index map so GOTO and GOSUB can
jump. After a statement executes the counter is always incremented, so
jumps store ``target - 1``.

GOSUB return addresses live on a call stack and FOR loops on a loop
stack; both, together with the counter, belong to a ``ProgramState``
that exists only for the duration of :meth:`Interpreter.run`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, TextIO
import math

from .ast import (
    Program, Statement, Expression, Let, Print, PrintLine, Input, If, Goto,
    Gosub, Return, For, Next, End, Comment, Random, SetForegroundColor,
    SetBackgroundColor, NumberLiteral, StringLiteral, VariableReference,
    BinaryExpression, UnaryExpression,
)
from .environment import ExecutionContext
from .errors import BasicError, BasicRuntimeError, BasicTypeError, GeneralRuntimeError
from .parser import parse_program
from .std.io import ConsoleIO, SystemRandomSource, TextOutput, LineInput, Terminal, RandomSource
from .types import Value, TRUE, FALSE, to_string, type_name, values_equal, parse_number

INPUT_PROMPT = 'Enter value for {name}: '

# RANDOM stores a whole number in this range
RANDOM_LOW = 1
RANDOM_HIGH = 100

ARITHMETIC_OPERATORS = ('-', '*', '/', '%', '^')
ORDERING_OPERATORS = ('<', '<=', '>', '>=')


@dataclass
class LoopFrame:
    variable_name: str
    end_value: float
    step_value: float
    for_index: int


@dataclass
class ProgramState:
    statements: List[Statement]
    context: ExecutionContext
    line_index: Dict[int, int]
    pc: int = 0
    call_stack: List[int] = field(default_factory=list)
    loop_stack: List[LoopFrame] = field(default_factory=list)


###############################################################################
# Numeric helpers (IEEE semantics, never raise)
###############################################################################


def divide(x: float, y: float) -> float:
    if y == 0:
        if x == 0 or math.isnan(x):
            return math.nan
        return math.copysign(math.inf, x) * math.copysign(1.0, y)
    return x / y


def modulo(x: float, y: float) -> float:
    # sign follows the dividend
    try:
        return math.fmod(x, y)
    except ValueError:
        return math.nan


def _is_odd_integer(y: float) -> bool:
    return y.is_integer() and y % 2 == 1


def power(x: float, y: float) -> float:
    try:
        return math.pow(x, y)
    except OverflowError:
        return -math.inf if x < 0 and _is_odd_integer(y) else math.inf
    except ValueError:
        if x == 0 and y < 0:
            return math.copysign(math.inf, x) if _is_odd_integer(y) else math.inf
        return math.nan


###############################################################################
# Interpreter implementation
###############################################################################


class Interpreter:
    """Core interpreter that executes a Plasticine BASIC Program."""
    def __init__(self, output: Optional[TextOutput] = None, input: Optional[LineInput] = None,
                 terminal: Optional[Terminal] = None, random_source: Optional[RandomSource] = None,
                 debug_level: int = 0, debug_file: str = 'debug.txt'):
        console = None
        if output is None or input is None or terminal is None:
            console = ConsoleIO()
        self.output = output if output is not None else console
        self.input = input if input is not None else console
        self.terminal = terminal if terminal is not None else console
        self.random_source = random_source if random_source is not None else SystemRandomSource()
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp: Optional[TextIO] = None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    # Public API
    def run(self, program: Program, context: Optional[ExecutionContext] = None) -> ExecutionContext:
        if context is None:
            context = ExecutionContext()
        state = ProgramState(program.statements, context, self.build_line_index(program))
        if self.debug_level > 0 and self.debug_file:
            self.debug_fp = open(self.debug_file, 'w', encoding='utf-8')
        try:
            self.debug(f"run: {len(state.statements)} statements, {len(state.line_index)} labels")
            while state.pc < len(state.statements) and context.running:
                stmt = state.statements[state.pc]
                if self.debug_level >= 2:
                    self.debug(f"[{state.pc}] line {stmt.line_number}: {type(stmt).__name__}")
                try:
                    try:
                        self.execute(stmt, state)
                    except RecursionError:
                        raise GeneralRuntimeError('expression nested too deeply') from None
                except BasicRuntimeError as e:
                    if e.line is None:
                        e.line = stmt.line_number
                    if e.index is None:
                        e.index = state.pc
                    self.debug(f"error at [{state.pc}]: {e}")
                    raise
                state.pc += 1
            self.debug(f"finished: pc={state.pc}, running={context.running}")
        finally:
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None
        return context

    def build_line_index(self, program: Program) -> Dict[int, int]:
        line_index: Dict[int, int] = {}
        for i, stmt in enumerate(program.statements):
            if stmt.line_number is None:
                continue
            if stmt.line_number in line_index:
                raise GeneralRuntimeError(f'duplicate line number {stmt.line_number}', stmt.line_number)
            line_index[stmt.line_number] = i
        return line_index

    def jump(self, target_line: int, state: ProgramState):
        if target_line not in state.line_index:
            raise GeneralRuntimeError(f'line {target_line} does not exist')
        if self.debug_level >= 3:
            self.debug(f"jump to line {target_line}")
        # the run loop increments pc after every statement
        state.pc = state.line_index[target_line] - 1

    def execute(self, stmt: Statement, state: ProgramState):
        context = state.context
        if isinstance(stmt, Let):
            self.assign(stmt.variable_name, self.evaluate(stmt.expression, context), context)
            return
        if isinstance(stmt, (Print, PrintLine)):
            for expr in stmt.values:
                self.output.write(to_string(self.evaluate(expr, context)))
            if isinstance(stmt, PrintLine):
                self.output.write_line()
            return
        if isinstance(stmt, If):
            cond = self.evaluate(stmt.condition, context)
            truthy = self.is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {cond!r} -> {truthy}")
            if truthy:
                self.execute(stmt.then_branch, state)
            return
        if isinstance(stmt, Goto):
            self.jump(stmt.target_line, state)
            return
        if isinstance(stmt, Gosub):
            state.call_stack.append(state.pc)
            self.jump(stmt.target_line, state)
            return
        if isinstance(stmt, Return):
            if not state.call_stack:
                raise GeneralRuntimeError('RETURN without GOSUB')
            state.pc = state.call_stack.pop()
            return
        if isinstance(stmt, For):
            self.execute_for(stmt, state)
            return
        if isinstance(stmt, Next):
            self.execute_next(stmt, state)
            return
        if isinstance(stmt, Input):
            for variable in stmt.variables:
                self.output.write(INPUT_PROMPT.format(name=variable.name))
                line = self.input.read_line()
                if line is None:
                    raise GeneralRuntimeError(f"end of input while reading '{variable.name}'")
                number = parse_number(line)
                value = Value.of_text(line) if number is None else Value.of_number(number)
                self.assign(variable.name, value, context)
            return
        if isinstance(stmt, Random):
            draw = self.random_source.next_uniform()
            number = RANDOM_LOW + int(draw * (RANDOM_HIGH - RANDOM_LOW + 1))
            self.assign(stmt.variable_name, Value.of_number(number), context)
            return
        if isinstance(stmt, SetForegroundColor):
            if stmt.color is None:
                raise GeneralRuntimeError('no colour given for FGCOLOR')
            self.terminal.set_foreground_color(stmt.color)
            return
        if isinstance(stmt, SetBackgroundColor):
            if stmt.color is None:
                raise GeneralRuntimeError('no colour given for BGCOLOR')
            self.terminal.set_background_color(stmt.color)
            return
        if isinstance(stmt, End):
            context.running = False
            return
        if isinstance(stmt, Comment):
            return
        raise NotImplementedError(f"execute: unexpected node type {type(stmt)}")

    def execute_for(self, stmt: For, state: ProgramState):
        context = state.context
        start = self.require_number(self.evaluate(stmt.start, context), 'FOR start value')
        end = self.require_number(self.evaluate(stmt.end, context), 'FOR end value')
        step = 1.0
        if stmt.step is not None:
            step = self.require_number(self.evaluate(stmt.step, context), 'FOR step value')
        self.assign(stmt.variable_name, Value.of_number(start), context)
        # re-entering a loop (e.g. after jumping out of it) discards its old frame
        for i in range(len(state.loop_stack) - 1, -1, -1):
            if state.loop_stack[i].variable_name == stmt.variable_name:
                del state.loop_stack[i:]
                break
        state.loop_stack.append(LoopFrame(stmt.variable_name, end, step, state.pc))

    def execute_next(self, stmt: Next, state: ProgramState):
        if not state.loop_stack:
            raise GeneralRuntimeError(f'NEXT {stmt.variable_name} without FOR')
        frame = state.loop_stack[-1]
        if frame.variable_name != stmt.variable_name:
            raise GeneralRuntimeError(
                f'NEXT {stmt.variable_name} does not match FOR {frame.variable_name}')
        current = self.require_number(state.context.get(stmt.variable_name), 'loop variable')
        value = current + frame.step_value
        self.assign(stmt.variable_name, Value.of_number(value), state.context)
        if (frame.step_value > 0 and value <= frame.end_value) or \
                (frame.step_value < 0 and value >= frame.end_value):
            # resumes at the statement after FOR
            state.pc = frame.for_index
        else:
            state.loop_stack.pop()

    def assign(self, name: str, value: Value, context: ExecutionContext):
        context.set(name, value)
        if self.debug_level >= 3:
            self.debug(f"set {name} = {value!r}")

    def evaluate(self, node: Expression, context: ExecutionContext) -> Value:
        if isinstance(node, NumberLiteral):
            return Value.of_number(node.value)
        if isinstance(node, StringLiteral):
            return Value.of_text(node.value)
        if isinstance(node, VariableReference):
            return context.get(node.name)
        if isinstance(node, BinaryExpression):
            left = self.evaluate(node.left, context)
            right = self.evaluate(node.right, context)
            return self.apply_binary_op(node.operator, left, right)
        if isinstance(node, UnaryExpression):
            operand = self.evaluate(node.operand, context)
            if not operand.is_number:
                raise BasicTypeError(f'unary {node.operator} requires a Number, got {type_name(operand)}')
            if node.operator == '-':
                return Value.of_number(-operand.number)
            return operand
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def is_truthy(self, value: Value) -> bool:
        if value.is_number:
            return value.number != 0
        raise BasicTypeError(f'condition must be a Number, got {type_name(value)}')

    def require_number(self, value: Value, what: str) -> float:
        if not value.is_number:
            raise BasicTypeError(f'{what} must be a Number, got {type_name(value)}')
        return value.number

    def apply_binary_op(self, op: str, a: Value, b: Value) -> Value:
        if op == '+':
            # text on either side means concatenation
            if a.is_text or b.is_text:
                return Value.of_text(to_string(a) + to_string(b))
            return Value.of_number(a.number + b.number)
        if op in ARITHMETIC_OPERATORS:
            if not (a.is_number and b.is_number):
                raise BasicTypeError(f'unsupported {op} for {type_name(a)} and {type_name(b)}')
            x, y = a.number, b.number
            if op == '-':
                return Value.of_number(x - y)
            if op == '*':
                return Value.of_number(x * y)
            if op == '/':
                return Value.of_number(divide(x, y))
            if op == '%':
                return Value.of_number(modulo(x, y))
            return Value.of_number(power(x, y))
        if op in ('=', '<>'):
            eq = values_equal(a, b)
            return TRUE if (eq if op == '=' else not eq) else FALSE
        if op in ORDERING_OPERATORS:
            if not (a.is_number and b.is_number):
                raise BasicTypeError(f'comparison {op} not supported for {type_name(a)} and {type_name(b)}')
            x, y = a.number, b.number
            if op == '<':
                result = x < y
            elif op == '<=':
                result = x <= y
            elif op == '>':
                result = x > y
            else:
                result = x >= y
            return TRUE if result else FALSE
        raise GeneralRuntimeError(f'unknown operator {op}')


###############################################################################
# Entry points
###############################################################################


@dataclass
class RunResult:
    """Outcome of running source text.

    ``error`` is None on success. Otherwise ``error.kind`` tells the caller
    whether it was a syntax, type or other runtime error. ``context``
    holds the variables as they were when the run stopped.
    """
    context: ExecutionContext
    error: Optional[BasicError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_program(source: str, debug_level: int = 0, **collaborators) -> RunResult:
    """Tokenise, parse and run a program from source text.

    Keyword arguments (``output``, ``input``, ``terminal``,
    ``random_source``, ``debug_file``) are passed to :class:`Interpreter`.
    """
    context = ExecutionContext()
    try:
        ast_program = parse_program(source)
        interpreter = Interpreter(debug_level=debug_level, **collaborators)
        interpreter.run(ast_program, context)
    except BasicError as e:
        return RunResult(context, e)
    return RunResult(context)


def run_file(file_path: str, debug_level: int = 0, **collaborators) -> RunResult:
    """Read a program file and run it."""
    source = Path(file_path).read_text(encoding='utf-8')
    return run_program(source, debug_level=debug_level, **collaborators)
