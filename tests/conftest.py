from pathlib import Path

import pytest

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


class RecordingIO:
    """In-memory stand-in for the console: output, input and terminal."""
    def __init__(self, lines=()):
        self.pending = list(lines)
        self.out = []
        self.colors = []

    @property
    def text(self) -> str:
        return ''.join(self.out)

    def write(self, text):
        self.out.append(text)

    def write_line(self, text=''):
        self.out.append(text + '\n')

    def read_line(self):
        if not self.pending:
            return None
        return self.pending.pop(0)

    def set_foreground_color(self, color):
        self.colors.append(('fg', color))

    def set_background_color(self, color):
        self.colors.append(('bg', color))


class FixedRandom:
    def __init__(self, *draws):
        self.draws = list(draws)

    def next_uniform(self):
        return self.draws.pop(0)


@pytest.fixture
def console():
    return RecordingIO()


def read_example(name: str) -> str:
    return (EXAMPLES / name).read_text(encoding='utf-8')
