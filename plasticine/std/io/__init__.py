"""I/O capabilities used by the interpreter and their console implementations.

The interpreter never touches ``sys.stdout`` or ``sys.stdin`` directly; it
talks to objects satisfying the protocols below. ``ConsoleIO`` provides
all three text/terminal capabilities for the command line, tests supply
their own recording fakes.
"""
from typing import Optional, Protocol

from plasticine.types import Color
from .console_io import ConsoleIO, SystemRandomSource


class TextOutput(Protocol):
    def write(self, text: str) -> None: ...

    def write_line(self, text: str = '') -> None: ...


class LineInput(Protocol):
    def read_line(self) -> Optional[str]:
        """Block until a line is available; None at end of input."""
        ...


class Terminal(Protocol):
    def set_foreground_color(self, color: Color) -> None: ...

    def set_background_color(self, color: Color) -> None: ...


class RandomSource(Protocol):
    def next_uniform(self) -> float:
        """Return a float in [0, 1)."""
        ...


__all__ = [
    'TextOutput',
    'LineInput',
    'Terminal',
    'RandomSource',
    'ConsoleIO',
    'SystemRandomSource',
]
