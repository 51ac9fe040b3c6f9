"""Runtime values and the colour table for Plasticine BASIC.

Variables are dynamically typed: a variable holds either a number or a
piece of text. Rather than storing bare Python objects and inspecting
them with ``isinstance``, every runtime value is a :class:`Value` tagged
with a :class:`ValueKind`, and the interpreter dispatches on that tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional
import math


class ValueKind(Enum):
    NUMBER = 'Number'
    TEXT = 'Text'


@dataclass(frozen=True)
class Value:
    kind: ValueKind
    number: float = 0.0
    text: str = ''

    @staticmethod
    def of_number(number: float) -> 'Value':
        return Value(ValueKind.NUMBER, number=float(number))

    @staticmethod
    def of_text(text: str) -> 'Value':
        return Value(ValueKind.TEXT, text=text)

    @property
    def is_number(self) -> bool:
        return self.kind is ValueKind.NUMBER

    @property
    def is_text(self) -> bool:
        return self.kind is ValueKind.TEXT

    def __repr__(self) -> str:
        if self.is_number:
            return f"Number({format_number(self.number)})"
        return f"Text({self.text!r})"


TRUE = Value.of_number(1.0)
FALSE = Value.of_number(0.0)


def format_number(number: float) -> str:
    """Render a number the way PRINT shows it.

    Whole numbers drop the fractional part (``3`` rather than ``3.0``);
    everything else uses the shortest round-trip representation.
    """
    if math.isnan(number):
        return 'NaN'
    if math.isinf(number):
        return 'Infinity' if number > 0 else '-Infinity'
    if number.is_integer() and abs(number) < 1e15:
        return str(int(number))
    return repr(number)


def to_string(value: Value) -> str:
    if value.is_number:
        return format_number(value.number)
    return value.text


def type_name(value: Value) -> str:
    return value.kind.value


def values_equal(a: Value, b: Value) -> bool:
    """Structural equality; values of different kinds are never equal."""
    if a.kind is not b.kind:
        return False
    if a.is_number:
        if math.isnan(a.number) and math.isnan(b.number):
            return True
        return a.number == b.number
    return a.text == b.text


def parse_number(text: str) -> Optional[float]:
    """Return the numeric value of ``text`` or None if it is not a number."""
    # float() would accept digit separators
    if '_' in text:
        return None
    try:
        return float(text.strip())
    except ValueError:
        return None


###############################################################################
# Colours
###############################################################################


class Color(Enum):
    BLACK = 'black'
    DARK_BLUE = 'dark_blue'
    DARK_GREEN = 'dark_green'
    DARK_CYAN = 'dark_cyan'
    DARK_RED = 'dark_red'
    DARK_MAGENTA = 'dark_magenta'
    DARK_GRAY = 'dark_gray'
    GRAY = 'gray'
    BLUE = 'blue'
    GREEN = 'green'
    CYAN = 'cyan'
    RED = 'red'
    MAGENTA = 'magenta'
    YELLOW = 'yellow'
    WHITE = 'white'


# Keys are lower case with underscores removed.
COLOR_NAMES: Dict[str, Color] = {
    'red': Color.RED,
    'green': Color.GREEN,
    'blue': Color.BLUE,
    'yellow': Color.YELLOW,
    'cyan': Color.CYAN,
    'magenta': Color.MAGENTA,
    'white': Color.WHITE,
    'black': Color.BLACK,
    'gray': Color.GRAY,
    'darkred': Color.DARK_RED,
    'darkgreen': Color.DARK_GREEN,
    'darkblue': Color.DARK_BLUE,
    'darkcyan': Color.DARK_CYAN,
    'darkmagenta': Color.DARK_MAGENTA,
    'darkgray': Color.DARK_GRAY,
    # there is no light gray terminal colour
    'lightgray': Color.GRAY,
}


def resolve_color(name: str) -> Optional[Color]:
    """Look up a colour by name, ignoring case and underscores."""
    return COLOR_NAMES.get(name.replace('_', '').lower())
