"""
Tree-walking interpreter
Evaluates expressions and executes statements against a chain of scopes;
the only mutable state is the scope arena and the current scope handle
"""

import sys
from typing import Any, Callable, Dict, List, Optional

from environment import (
  GLOBAL_SCOPE,
  assign,
  define,
  get,
  make_arena,
  pop_scope,
  push_scope,
  scope_depth
)
from error_handling import LoxRuntimeError, make_diagnostic, make_runtime_error
from syntax_tree import (
  Assign, Binary, Block, Expr, Expression, Grouping, If, Literal, Logical,
  Print, Stmt, Unary, Var, Variable, While, first_line
)
from utilities import (
  check_number_operand,
  check_number_operands,
  is_equal,
  is_number,
  is_string,
  is_truthy,
  operation_error,
  stringify
)


# ============================================================================
# INTERPRETER STATE
# ============================================================================

def make_interpreter_state(output: Optional[Callable[[str], Any]] = None, debug: bool = False) -> Dict:
  """Create interpreter state: scope arena, current scope, output sink"""
  return {
      'arena': make_arena(),
      'current': GLOBAL_SCOPE,
      'output': output or print,
      'debug': debug
  }


def trace(message: str) -> None:
  """Write a debug trace line to stderr"""
  print(message, file=sys.stderr)


# ============================================================================
# EXPRESSIONS
# ============================================================================

def evaluate(expr: Expr, state: Dict) -> Any:
  """Evaluate an expression to a runtime value"""
  match expr:
    case Literal(value=value):
      return value
    case Grouping(expression=inner):
      return evaluate(inner, state)
    case Unary():
      return eval_unary(expr, state)
    case Binary():
      return eval_binary(expr, state)
    case Logical():
      return eval_logical(expr, state)
    case Variable(name=name):
      return get(state['arena'], state['current'], name)
    case Assign(name=name, value=value_expr):
      value = evaluate(value_expr, state)
      assign(state['arena'], state['current'], name, value)
      return value
    case _:
      raise TypeError(f"Unknown expression node: {type(expr).__name__}")


def eval_unary(expr: Unary, state: Dict) -> Any:
  right = evaluate(expr.right, state)

  if expr.operator.type == 'MINUS':
    check_number_operand(expr.operator, right)
    return -right
  if expr.operator.type == 'BANG':
    return not is_truthy(right)

  raise LoxRuntimeError(expr.operator, f"Unknown unary operator '{expr.operator.lexeme}'.")


def eval_binary(expr: Binary, state: Dict) -> Any:
  left = evaluate(expr.left, state)
  right = evaluate(expr.right, state)
  operator = expr.operator
  op_type = operator.type

  if op_type == 'PLUS':
    return eval_plus(operator, left, right)
  if op_type == 'EQUAL_EQUAL':
    return is_equal(left, right)
  if op_type == 'BANG_EQUAL':
    return not is_equal(left, right)

  if op_type in NUMERIC_OPERATORS:
    check_number_operands(operator, left, right)
    if op_type == 'SLASH' and right == 0.0:
      raise LoxRuntimeError(operator, "Division by zero.")
    return NUMERIC_OPERATORS[op_type](left, right)

  raise LoxRuntimeError(operator, f"Unknown binary operator '{operator.lexeme}'.")


def eval_plus(operator, left: Any, right: Any) -> Any:
  """Add numbers, concatenate strings; a string with a number concatenates its text"""
  if is_number(left) and is_number(right):
    return left + right
  if is_string(left) and is_string(right):
    return left + right
  if is_string(left) and is_number(right):
    return left + stringify(right)
  if is_number(left) and is_string(right):
    return stringify(left) + right
  raise operation_error(operator, left, right)


NUMERIC_OPERATORS = {
    'MINUS': lambda a, b: a - b,
    'STAR': lambda a, b: a * b,
    'SLASH': lambda a, b: a / b,
    'GREATER': lambda a, b: a > b,
    'GREATER_EQUAL': lambda a, b: a >= b,
    'LESS': lambda a, b: a < b,
    'LESS_EQUAL': lambda a, b: a <= b,
}


def eval_logical(expr: Logical, state: Dict) -> Any:
  """Short-circuit; yields an operand value, not a coerced boolean"""
  left = evaluate(expr.left, state)

  if expr.operator.type == 'OR':
    if is_truthy(left):
      return left
  elif not is_truthy(left):
    return left

  return evaluate(expr.right, state)


# ============================================================================
# STATEMENTS
# ============================================================================

def execute(stmt: Stmt, state: Dict) -> None:
  """Execute one statement for its effects"""
  if state['debug']:
    trace(f"Executing: {type(stmt).__name__}")

  match stmt:
    case Expression(expression=expr):
      evaluate(expr, state)
    case Print(expression=expr):
      state['output'](stringify(evaluate(expr, state)))
    case Var(name=name, initializer=initializer):
      value = None
      if initializer is not None:
        value = evaluate(initializer, state)
      define(state['arena'], state['current'], name.lexeme, value)
    case Block(statements=statements):
      execute_block(statements, state)
    case If(condition=condition, then_branch=then_branch, else_branch=else_branch):
      if is_truthy(evaluate(condition, state)):
        execute(then_branch, state)
      elif else_branch is not None:
        execute(else_branch, state)
    case While(condition=condition, body=body):
      while is_truthy(evaluate(condition, state)):
        execute(body, state)
    case _:
      raise TypeError(f"Unknown statement node: {type(stmt).__name__}")


def execute_block(statements, state: Dict) -> None:
  """Run statements in a fresh child scope, restoring the previous scope on every exit"""
  previous = state['current']
  state['current'] = push_scope(state['arena'], previous)
  if state['debug']:
    trace(f"  Entered scope {state['current']} (depth {scope_depth(state['arena'], state['current'])})")

  try:
    for statement in statements:
      execute(statement, state)
  finally:
    handle = state['current']
    state['current'] = previous
    pop_scope(state['arena'], handle)
    if state['debug']:
      trace(f"  Restored scope {previous}")


# ============================================================================
# PROGRAM EXECUTION
# ============================================================================

def interpret(statements: List[Stmt], state: Dict) -> Optional[Dict]:
  """
  Execute statements in order.
  Returns None on success, or the diagnostic for the runtime error that
  stopped the run; later statements are not executed.
  """
  statement = None
  try:
    for statement in statements:
      execute(statement, state)
  except LoxRuntimeError as e:
    if state['debug']:
      trace(f"Runtime error at line {e.line}: {e.message}")
    return make_runtime_error(e)
  except RecursionError:
    # Blocks unwound through their finally clauses, so the scope is already restored
    line = first_line(statement)
    if state['debug']:
      trace(f"Runtime error at line {line}: nesting too deep")
    return make_diagnostic('runtime', line, "Nesting too deep.")
  return None


class Interpreter:
  """Holds state across interpret calls, so a session keeps its globals"""

  def __init__(self, output: Optional[Callable[[str], Any]] = None, debug: bool = False):
    self.debug = debug
    self.state = make_interpreter_state(output, debug)

  def interpret(self, statements: List[Stmt]) -> Optional[Dict]:
    return interpret(statements, self.state)

  def evaluate(self, expr: Expr) -> Any:
    return evaluate(expr, self.state)

  @property
  def globals(self) -> Dict[str, Any]:
    return self.state['arena']['scopes'][GLOBAL_SCOPE]['bindings']


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False, output: Optional[Callable[[str], Any]] = None) -> Interpreter:
  """Factory function returning an interpreter"""
  return Interpreter(output=output, debug=debug)


def create_debug_interpreter(output: Optional[Callable[[str], Any]] = None) -> Interpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True, output=output)
