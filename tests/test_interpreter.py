import math

import pytest

from plasticine.ast import Program, SetForegroundColor, SetBackgroundColor, Goto, End, PrintLine, NumberLiteral
from plasticine.environment import ExecutionContext
from plasticine.errors import BasicTypeError, GeneralRuntimeError, ErrorKind
from plasticine.interpreter import Interpreter, run_program
from plasticine.parser import parse_program
from plasticine.types import Color, Value

from conftest import RecordingIO, FixedRandom


def run(source, lines=(), draws=()):
    io = RecordingIO(lines)
    interp = Interpreter(output=io, input=io, terminal=io, random_source=FixedRandom(*draws))
    context = interp.run(parse_program(source))
    return io, context


def output_of(source, **kwargs):
    return run(source, **kwargs)[0].text


def test_string_plus_number_concatenates():
    assert output_of('LET x = "a" + 1\nPRINT x') == 'a1'


def test_number_plus_string_concatenates():
    assert output_of('LET x = 1 + "a"\nPRINT x') == '1a'


def test_string_minus_number_is_type_error():
    with pytest.raises(BasicTypeError) as exc:
        run('10 LET x = "a" - 1')
    err = exc.value
    assert err.kind is ErrorKind.TYPE
    assert err.line == 10
    assert err.index == 0


@pytest.mark.parametrize('source', [
    'LET x = 2 * "b"',
    'LET x = "a" / 2',
    'LET x = "a" % 2',
    'LET x = 2 ^ "a"',
    'LET x = "a" < 1',
    'LET x = "a" >= "b"',
    'LET x = -"a"',
])
def test_numeric_operators_reject_text(source):
    with pytest.raises(BasicTypeError):
        run(source)


def test_arithmetic():
    _, context = run('LET a = 7 / 2\nLET b = 7 % 3\nLET c = 2 ^ 10\nLET d = 10 - 4 * 2\nLET e = -7 % 3')
    assert context.get('a') == Value.of_number(3.5)
    assert context.get('b') == Value.of_number(1.0)
    assert context.get('c') == Value.of_number(1024.0)
    assert context.get('d') == Value.of_number(2.0)
    assert context.get('e') == Value.of_number(-1.0)


def test_division_by_zero_follows_floating_point():
    _, context = run('LET a = 1 / 0\nLET b = -1 / 0\nLET c = 0 / 0\nLET d = 5 % 0')
    assert context.get('a').number == math.inf
    assert context.get('b').number == -math.inf
    assert math.isnan(context.get('c').number)
    assert math.isnan(context.get('d').number)


def test_number_formatting():
    assert output_of('PRINT 3, " ", 2.5, " ", 0.1, " ", -4, " ", 1 / 0, " ", 0 / 0') == '3 2.5 0.1 -4 Infinity NaN'


def test_large_whole_numbers_keep_fraction():
    assert output_of('PRINT 1000000000000000, " ", 123456789012345') == '1000000000000000.0 123456789012345'


def test_power_overflow_and_domain_errors():
    source = 'PRINT 10 ^ 400, " ", (-10) ^ 401, " ", (-8) ^ 0.5, " ", 0 ^ -1'
    assert output_of(source) == 'Infinity -Infinity NaN Infinity'


def test_comparisons_yield_one_or_zero():
    assert output_of('PRINT 1 < 2, 2 < 1, 2 <= 2, 3 >= 4, 1 = 1, 1 <> 1') == '101010'


def test_equality_across_kinds():
    assert output_of('PRINT "1" = 1, "a" = "a", "a" <> 1') == '011'


def test_nan_equals_itself():
    assert output_of('LET n = 0 / 0\nPRINT n = n, n <> n') == '10'


def test_print_has_no_separator_and_printline_ends_line():
    assert output_of('PRINT "a", "b"\nPRINTLINE "c"\nPRINTLINE\nPRINT "d"') == 'abc\n\nd'


def test_undefined_variable():
    with pytest.raises(GeneralRuntimeError) as exc:
        run('10 PRINT y')
    assert "'y'" in exc.value.message
    assert exc.value.kind is ErrorKind.RUNTIME


def test_for_loop_counts_up():
    assert output_of('FOR i = 1 TO 3\nPRINT i\nNEXT i\nPRINT "done"') == '123done'


def test_for_loop_counts_down():
    assert output_of('FOR i = 3 TO 1 STEP -1\nPRINT i\nNEXT i') == '321'


def test_for_loop_with_fractional_step():
    assert output_of('FOR i = 0 TO 1 STEP 0.5\nPRINT i, ";"\nNEXT i') == '0;0.5;1;'


def test_zero_step_runs_body_once():
    assert output_of('FOR i = 1 TO 3 STEP 0\nPRINT i\nNEXT i') == '1'


def test_for_body_runs_once_even_when_range_is_empty():
    assert output_of('FOR i = 5 TO 1\nPRINT i\nNEXT i') == '5'


def test_loop_variable_after_loop():
    _, context = run('FOR i = 1 TO 3\nNEXT i')
    assert context.get('i') == Value.of_number(4.0)


def test_nested_loops():
    source = 'FOR i = 1 TO 2\nFOR j = 1 TO 3\nPRINT i * j\nNEXT j\nNEXT i'
    assert output_of(source) == '123246'


def test_for_requires_numbers():
    with pytest.raises(BasicTypeError):
        run('FOR i = "a" TO 3\nNEXT i')


def test_next_without_for():
    with pytest.raises(GeneralRuntimeError) as exc:
        run('NEXT i')
    assert 'without FOR' in exc.value.message


def test_next_with_wrong_variable():
    with pytest.raises(GeneralRuntimeError) as exc:
        run('FOR x = 1 TO 2\nNEXT y')
    assert 'NEXT y' in exc.value.message
    assert 'FOR x' in exc.value.message


def test_loop_reentered_by_goto_replaces_its_frame():
    source = ('10 LET n = 0\n'
              '20 FOR i = 1 TO 5\n'
              '30 LET n = n + 1\n'
              '40 IF n < 3 THEN 20\n'
              '50 NEXT i\n')
    _, context = run(source)
    # two abandoned passes then one full loop of five
    assert context.get('n') == Value.of_number(7.0)


def test_goto_skips_statements():
    assert output_of('10 PRINT "a"\n20 GOTO 40\n30 PRINT "b"\n40 PRINT "c"') == 'ac'


def test_goto_missing_line():
    with pytest.raises(GeneralRuntimeError) as exc:
        run('10 GOTO 99')
    assert '99' in exc.value.message
    assert exc.value.line == 10


def test_gosub_and_return():
    source = ('10 GOSUB 100\n'
              '20 PRINT "back"\n'
              '30 END\n'
              '100 PRINT "sub "\n'
              '110 RETURN\n')
    assert output_of(source) == 'sub back'


def test_nested_gosub():
    source = ('10 GOSUB 100\n'
              '20 PRINT "3"\n'
              '30 END\n'
              '100 PRINT "1"\n'
              '110 GOSUB 200\n'
              '120 RETURN\n'
              '200 PRINT "2"\n'
              '210 RETURN\n')
    assert output_of(source) == '123'


def test_return_without_gosub():
    with pytest.raises(GeneralRuntimeError) as exc:
        run('10 RETURN')
    assert 'RETURN without GOSUB' in exc.value.message


def test_gosub_missing_line():
    with pytest.raises(GeneralRuntimeError):
        run('GOSUB 500')


def test_end_stops_execution():
    io, context = run('PRINT "a"\nEND\nPRINT "b"')
    assert io.text == 'a'
    assert context.running is False


def test_falling_off_the_end():
    _, context = run('LET x = 1')
    assert context.running is True


def test_if_true_and_false():
    assert output_of('LET x = 2\nIF x = 2 THEN PRINT "yes"\nIF x = 3 THEN PRINT "no"') == 'yes'


def test_if_then_line_number_jumps():
    assert output_of('10 IF 1 THEN 30\n20 PRINT "skipped"\n30 PRINT "landed"') == 'landed'


def test_if_text_condition_is_type_error():
    with pytest.raises(BasicTypeError):
        run('IF "yes" THEN PRINT 1')


def test_if_else_runs_else_statement_when_condition_holds():
    # the ELSE statement replaces the THEN statement at parse time
    assert output_of('IF 1 = 1 THEN PRINT "then" ELSE PRINT "else"') == 'else'
    assert output_of('IF 1 = 2 THEN PRINT "then" ELSE PRINT "else"') == ''


def test_input_numbers_and_text():
    io, context = run('INPUT a, b\nPRINT a + 1, " ", b', lines=['41', 'Bob'])
    assert context.get('a') == Value.of_number(41.0)
    assert context.get('b') == Value.of_text('Bob')
    assert io.text == 'Enter value for a: Enter value for b: 42 Bob'


def test_input_end_of_input():
    with pytest.raises(GeneralRuntimeError) as exc:
        run('INPUT a')
    assert 'end of input' in exc.value.message


def test_random_draws_whole_number_in_range():
    _, context = run('RANDOM a\nRANDOM b\nRANDOM c', draws=[0.0, 0.5, 0.999999])
    assert [context.get(n).number for n in 'abc'] == [1.0, 51.0, 100.0]


def test_colors_reach_terminal():
    io, _ = run('FGCOLOR red\nBGCOLOR darkblue\nFGCOLOR lightgray')
    assert io.colors == [('fg', Color.RED), ('bg', Color.DARK_BLUE), ('fg', Color.GRAY)]


@pytest.mark.parametrize('stmt', [SetForegroundColor(None), SetBackgroundColor(None)])
def test_missing_color(stmt):
    io = RecordingIO()
    with pytest.raises(GeneralRuntimeError):
        Interpreter(output=io, input=io, terminal=io).run(Program([stmt]))


def test_duplicate_labels_in_hand_built_program():
    program = Program([End(line_number=10), End(line_number=10)])
    io = RecordingIO()
    with pytest.raises(GeneralRuntimeError):
        Interpreter(output=io, input=io, terminal=io).run(program)


def test_side_effects_before_error_are_kept():
    io = RecordingIO()
    context = ExecutionContext()
    program = parse_program('LET a = 1\nPRINT "x"\nGOTO 99')
    with pytest.raises(GeneralRuntimeError):
        Interpreter(output=io, input=io, terminal=io).run(program, context)
    assert io.text == 'x'
    assert context.get('a') == Value.of_number(1.0)


def test_caller_supplied_context():
    io = RecordingIO()
    context = ExecutionContext({'seed': Value.of_number(5.0)})
    Interpreter(output=io, input=io, terminal=io).run(parse_program('PRINT seed * 2'), context)
    assert io.text == '10'


def test_run_program_success():
    io = RecordingIO()
    result = run_program('LET x = 2\nPRINT x', output=io, input=io, terminal=io)
    assert result.ok
    assert result.context.get('x') == Value.of_number(2.0)
    assert io.text == '2'


@pytest.mark.parametrize('source, kind', [
    ('PRINT "unterminated', ErrorKind.SYNTAX),
    ('LET = 1', ErrorKind.SYNTAX),
    ('LET x = "a" * 2', ErrorKind.TYPE),
    ('GOTO 10', ErrorKind.RUNTIME),
])
def test_run_program_reports_error_kind(source, kind):
    io = RecordingIO()
    result = run_program(source, output=io, input=io, terminal=io)
    assert not result.ok
    assert result.error.kind is kind


def test_debug_trace(tmp_path):
    io = RecordingIO()
    trace = tmp_path / 'trace.txt'
    program = Program([PrintLine([NumberLiteral(1.0)], line_number=5), Goto(7, line_number=6), End(line_number=7)])
    Interpreter(output=io, input=io, terminal=io, debug_level=3, debug_file=str(trace)).run(program)
    text = trace.read_text(encoding='utf-8')
    assert 'line 5: PrintLine' in text
    assert 'jump to line 7' in text


def test_deeply_nested_expression_is_a_syntax_error():
    io = RecordingIO()
    result = run_program('LET x = ' + '(' * 400 + '1' + ')' * 400, output=io, input=io, terminal=io)
    assert result.error.kind is ErrorKind.SYNTAX
    assert 'nested too deeply' in result.error.message


def test_very_long_expression_is_a_runtime_error():
    io = RecordingIO()
    result = run_program('10 LET x = ' + ' + '.join(['1'] * 5000), output=io, input=io, terminal=io)
    assert result.error.kind is ErrorKind.RUNTIME
    assert result.error.line == 10
