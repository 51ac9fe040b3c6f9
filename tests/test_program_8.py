from plasticine.interpreter import Interpreter
from plasticine.parser import parse_program
from plasticine.std import io as console
from plasticine.std.io import ConsoleIO
from plasticine.types import Color

from conftest import read_example


def test_program_8_console_colors(capsys):
    ast = parse_program(read_example('program_8.bas'))
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out
    assert out == '\033[91mwarning\033[44m\033[37m\n'


def test_console_exports_only_capabilities(capsys):
    assert 'ANSI_FOREGROUND' not in console.__all__
    terminal = ConsoleIO()
    terminal.set_background_color(Color.DARK_RED)
    terminal.reset()
    assert capsys.readouterr().out == '\033[41m\033[0m'
