"""
Interpreter tests
Evaluation semantics, scoping, control flow and runtime errors
"""

import pytest
from environment import GLOBAL_SCOPE
from interpreter import Interpreter, create_debug_interpreter, create_interpreter
from parsing import parse
from scanning import Token, scan
from syntax_tree import Block, Grouping, Literal, Print, Unary
from utilities import is_equal, is_truthy, stringify


class TestArithmetic:
  """Test arithmetic and string operators"""

  @pytest.mark.parametrize("source,expected", [
      ("6 / 3 - 1", "1"),
      ("2 + 3 * 4", "14"),
      ("(2 + 3) * 4", "20"),
      ("10 - 4 - 3", "3"),
      ("7 / 2", "3.5"),
      ("-(1 + 2)", "-3"),
      ("--4", "4"),
      ("0.1 + 0.2", "0.30000000000000004"),
  ])
  def test_arithmetic(self, run, source, expected):
    output, diagnostics = run(f"print {source};")
    assert diagnostics == []
    assert output == [expected]

  def test_string_concatenation(self, run):
    output, _ = run('print "foo" + "bar";')
    assert output == ["foobar"]

  def test_string_number_concatenation(self, run):
    output, _ = run('print "val:" + 3; print 2.5 + "x";')
    assert output == ["val:3", "2.5x"]

  def test_plus_rejects_booleans(self, run):
    _, diagnostics = run('print true + 1;')
    assert diagnostics[0]['kind'] == 'runtime'
    assert diagnostics[0]['message'].startswith("Operands must be two numbers or two strings")

  def test_arithmetic_requires_numbers(self, run):
    _, diagnostics = run('print "a" - 1;')
    assert diagnostics[0]['message'] == "Operands must be numbers."

  def test_comparison_requires_numbers(self, run):
    _, diagnostics = run('print "a" < "b";')
    assert diagnostics[0]['message'] == "Operands must be numbers."

  def test_negation_requires_number(self, run):
    _, diagnostics = run('\n\nprint -"a";')
    assert diagnostics[0]['message'] == "Operand must be a number."
    assert diagnostics[0]['line'] == 3

  def test_division_by_zero_is_runtime_error(self, run):
    output, diagnostics = run('print 1 / 0; print "after";')
    assert output == []
    assert diagnostics[0]['message'] == "Division by zero."

  def test_comparisons(self, run):
    output, _ = run("print 1 < 2; print 2 <= 2; print 3 > 4; print 3 >= 4;")
    assert output == ["true", "true", "false", "false"]


class TestEqualityAndTruthiness:
  """Test equality rules and truthiness"""

  @pytest.mark.parametrize("source,expected", [
      ("nil == nil", "true"),
      ("nil == false", "false"),
      ("1 == 1", "true"),
      ('"1" == 1', "false"),
      ('"a" == "a"', "true"),
      ("true != false", "true"),
      ("0 == false", "false"),
      ("1 == true", "false"),
  ])
  def test_equality(self, run, source, expected):
    output, _ = run(f"print {source};")
    assert output == [expected]

  @pytest.mark.parametrize("source,expected", [
      ("!nil", "true"),
      ("!false", "true"),
      ("!0", "false"),
      ('!""', "false"),
      ("!true", "false"),
  ])
  def test_truthiness(self, run, source, expected):
    output, _ = run(f"print {source};")
    assert output == [expected]

  def test_helpers(self):
    assert is_truthy(0.0)
    assert not is_truthy(None)
    assert not is_equal(1.0, True)
    assert is_equal(None, None)


class TestLogical:
  """Test short-circuit logical operators"""

  def test_and_short_circuits(self, run):
    output, diagnostics = run("print false and (1/0);")
    assert diagnostics == []
    assert output == ["false"]

  def test_or_short_circuits(self, run):
    output, diagnostics = run("print 1 or undefined_name;")
    assert diagnostics == []
    assert output == ["1"]

  def test_operand_value_is_returned(self, run):
    output, _ = run('print nil or "default"; print "x" and "y"; print nil and 1;')
    assert output == ["default", "y", "nil"]

  def test_right_side_side_effect_skipped(self, run):
    output, _ = run("var a = 1; true or (a = 2); print a;")
    assert output == ["1"]


class TestVariables:
  """Test declaration, assignment and scoping"""

  def test_declaration_and_reference(self, run):
    output, _ = run("var a = 1; var b = a + 1; print b;")
    assert output == ["2"]

  def test_uninitialized_variable_is_nil(self, run):
    output, diagnostics = run("var a; print a;")
    assert diagnostics == []
    assert output == ["nil"]

  def test_assignment_is_an_expression(self, run):
    output, _ = run("var a; var b; a = b = 3; print a; print b; print a = 4;")
    assert output == ["3", "3", "4"]

  def test_shadowing_does_not_leak(self, run):
    output, _ = run("var a = 1; { var a = 2; print a; } print a;")
    assert output == ["2", "1"]

  def test_assignment_through_nesting(self, run):
    output, _ = run("var a = 1; { a = 2; } print a;")
    assert output == ["2"]

  def test_inner_scope_sees_outer(self, run):
    output, _ = run('var a = "outer"; { { print a; } }')
    assert output == ["outer"]

  def test_block_variables_are_gone_after_block(self, run):
    output, diagnostics = run("{ var inner = 1; } print inner;")
    assert output == []
    assert diagnostics[0]['message'] == "Undefined variable 'inner'."

  def test_undefined_reference(self, run):
    _, diagnostics = run("print missing;")
    assert diagnostics[0]['kind'] == 'runtime'
    assert "missing" in diagnostics[0]['message']
    assert diagnostics[0]['line'] == 1

  def test_undefined_assignment(self, run):
    _, diagnostics = run("\nmissing = 1;")
    assert diagnostics[0]['message'] == "Undefined variable 'missing'."
    assert diagnostics[0]['line'] == 2

  def test_redeclaring_global(self, run):
    output, _ = run("var a = 1; var a = 2; print a;")
    assert output == ["2"]


class TestControlFlow:
  """Test if and while"""

  def test_if_then(self, run):
    output, _ = run('if (1 < 2) print "yes"; else print "no";')
    assert output == ["yes"]

  def test_if_else(self, run):
    output, _ = run('if (nil) print "yes"; else print "no";')
    assert output == ["no"]

  def test_if_without_else(self, run):
    output, _ = run('if (false) print "yes";')
    assert output == []

  def test_while_false_never_runs(self, run):
    output, diagnostics = run('while (false) print "never";')
    assert diagnostics == []
    assert output == []

  def test_while_loop(self, run):
    output, _ = run("var i = 0; while (i < 3) { print i; i = i + 1; }")
    assert output == ["0", "1", "2"]

  def test_fibonacci(self, run):
    source = """
    var a = 0;
    var b = 1;
    var count = 0;
    while (count < 8) {
      print a;
      var next = a + b;
      a = b;
      b = next;
      count = count + 1;
    }
    """
    output, diagnostics = run(source)
    assert diagnostics == []
    assert output == ["0", "1", "1", "2", "3", "5", "8", "13"]

  def test_error_in_loop_body_aborts(self, run):
    output, diagnostics = run('var i = 0; while (i < 5) { print i; if (i == 1) i = i + "x" - 1; i = i + 1; }')
    assert output == ["0", "1"]
    assert diagnostics[0]['kind'] == 'runtime'


class TestRuntimeErrors:
  """Test that runtime errors abort the run but not the process"""

  def test_remaining_statements_do_not_run(self, run):
    output, diagnostics = run('print "before"; print -nil; print "after";')
    assert output == ["before"]
    assert len(diagnostics) == 1

  def test_scope_restored_after_error_in_block(self):
    output = []
    interpreter = create_interpreter(output=output.append)
    error = interpreter.interpret([Block((Block((Print(Literal(None)),)),))])
    assert error is None

    tokens, _ = scan("{ { var x = 1; print -\"boom\"; } }")
    statements, _ = parse(tokens)
    error = interpreter.interpret(statements)
    assert error is not None
    assert interpreter.state['current'] == GLOBAL_SCOPE
    assert list(interpreter.state['arena']['scopes']) == [GLOBAL_SCOPE]

  def test_session_survives_runtime_error(self, run):
    interpreter = create_interpreter()
    run("var a = 1;", interpreter)
    _, diagnostics = run("print b;", interpreter)
    assert diagnostics
    output, diagnostics = run("a = a + 1; print a;", interpreter)
    assert diagnostics == []
    assert output == ["2"]

  def test_nested_blocks_within_limit(self, run):
    output, diagnostics = run("{" * 50 + "var a = 1; print a;" + "}" * 50)
    assert diagnostics == []
    assert output == ["1"]

  def test_deep_expression_is_runtime_error(self):
    expr = Unary(Token('MINUS', "-", None, 3), Literal(1.0))
    for _ in range(5000):
      expr = Grouping(expr)
    error = create_interpreter().interpret([Print(expr)])
    assert error['kind'] == 'runtime'
    assert error['message'] == "Nesting too deep."
    assert error['line'] == 3

  def test_deep_blocks_restore_scope(self):
    output = []
    interpreter = create_interpreter(output=output.append)
    statement = Print(Literal(1.0))
    for _ in range(1000):
      statement = Block((statement,))
    error = interpreter.interpret([statement])
    assert error['message'] == "Nesting too deep."
    assert interpreter.state['current'] == GLOBAL_SCOPE

    assert interpreter.interpret([Print(Literal(2.0))]) is None
    assert output == ["2"]


class TestInterpreterObject:
  """Test the interpreter object and factories"""

  def test_globals_view(self, run):
    interpreter = create_interpreter()
    run("var answer = 42;", interpreter)
    assert interpreter.globals == {"answer": 42.0}

  def test_evaluate(self):
    interpreter = Interpreter()
    assert interpreter.evaluate(Literal("x")) == "x"

  def test_default_output_is_stdout(self, capsys):
    interpreter = Interpreter()
    interpreter.interpret([Print(Literal(3.0))])
    assert capsys.readouterr().out == "3\n"

  def test_debug_interpreter_traces(self, capsys):
    interpreter = create_debug_interpreter(output=lambda text: None)
    interpreter.interpret([Block((Print(Literal(1.0)),))])
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Executing: Block" in captured.err
    assert "Executing: Print" in captured.err
    assert "Restored scope 0" in captured.err


class TestStringify:
  """Test value rendering"""

  @pytest.mark.parametrize("value,expected", [
      (None, "nil"),
      (True, "true"),
      (False, "false"),
      (3.0, "3"),
      (-0.5, "-0.5"),
      (45.67, "45.67"),
      ("text", "text"),
  ])
  def test_stringify(self, value, expected):
    assert stringify(value) == expected
