import random
import sys
from typing import Optional

from plasticine.types import Color


# ANSI SGR foreground codes; background codes are these plus 10
ANSI_FOREGROUND = {
    Color.BLACK: 30,
    Color.DARK_RED: 31,
    Color.DARK_GREEN: 32,
    Color.DARK_BLUE: 34,
    Color.DARK_MAGENTA: 35,
    Color.DARK_CYAN: 36,
    Color.GRAY: 37,
    Color.DARK_GRAY: 90,
    Color.RED: 91,
    Color.GREEN: 92,
    Color.YELLOW: 93,
    Color.BLUE: 94,
    Color.MAGENTA: 95,
    Color.CYAN: 96,
    Color.WHITE: 97,
}


class ConsoleIO:
    """Standard output, standard input and an ANSI terminal in one object.

    The streams are looked up on every call so that redirection of
    ``sys.stdout`` / ``sys.stdin`` after construction is honoured.
    """
    def __init__(self, colors: bool = True):
        self.colors = colors
        self.colors_changed = False

    def write(self, text: str):
        sys.stdout.write(text)
        sys.stdout.flush()

    def write_line(self, text: str = ''):
        self.write(text + '\n')

    def read_line(self) -> Optional[str]:
        line = sys.stdin.readline()
        if line == '':
            return None
        return line.rstrip('\r\n')

    def set_foreground_color(self, color: Color):
        self._sgr(ANSI_FOREGROUND[color])

    def set_background_color(self, color: Color):
        self._sgr(ANSI_FOREGROUND[color] + 10)

    def reset(self):
        if self.colors_changed:
            self.write('\033[0m')
            self.colors_changed = False

    def _sgr(self, code: int):
        if self.colors:
            self.write(f'\033[{code}m')
            self.colors_changed = True


class SystemRandomSource:
    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def next_uniform(self) -> float:
        return self.rng.random()
