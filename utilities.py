"""
Utilities for the interpreter
Runtime value discipline shared by evaluation and the printers
Values are plain Python objects: None (nil), bool, float and str
"""

from typing import Any

from error_handling import LoxRuntimeError


# ==================== TYPE CHECKING UTILITIES ====================

def is_number(value: Any) -> bool:
  """True for runtime numbers (bool is excluded on purpose)"""
  return type(value) is float


def is_string(value: Any) -> bool:
  return type(value) is str


def type_name(value: Any) -> str:
  """
  Name of a runtime value's type, for error messages

  Args:
    value: Runtime value

  Returns:
    One of "nil", "boolean", "number", "string"
  """
  if value is None:
    return "nil"
  if isinstance(value, bool):
    return "boolean"
  if is_number(value):
    return "number"
  if is_string(value):
    return "string"
  return type(value).__name__


# ==================== TRUTHINESS AND EQUALITY ====================

def is_truthy(value: Any) -> bool:
  """nil and false are falsey; everything else, 0 included, is truthy"""
  if value is None:
    return False
  if isinstance(value, bool):
    return value
  return True


def is_equal(left: Any, right: Any) -> bool:
  """
  Language equality

  nil equals only nil, values of different types are never equal,
  and same-type values compare by value.
  """
  if left is None and right is None:
    return True
  if left is None or right is None:
    return False
  if type(left) is not type(right):
    return False
  return left == right


# ==================== TEXT RENDERING ====================

def stringify(value: Any) -> str:
  """
  Render a runtime value the way print shows it

  Examples:
    stringify(None) -> "nil"
    stringify(3.0) -> "3"
    stringify(2.5) -> "2.5"
    stringify(True) -> "true"
  """
  if value is None:
    return "nil"
  if isinstance(value, bool):
    return "true" if value else "false"
  if is_number(value):
    text = repr(value)
    if text.endswith(".0"):
      text = text[:-2]
    return text
  return str(value)


# ==================== OPERAND CHECKS ====================

def check_number_operand(operator, operand: Any) -> None:
  """Raise unless operand is a number"""
  if is_number(operand):
    return
  raise LoxRuntimeError(operator, "Operand must be a number.")


def check_number_operands(operator, left: Any, right: Any) -> None:
  """Raise unless both operands are numbers"""
  if is_number(left) and is_number(right):
    return
  raise LoxRuntimeError(operator, "Operands must be numbers.")


def operation_error(operator, left: Any, right: Any) -> LoxRuntimeError:
  """
  Generate the error for a '+' whose operands cannot be combined

  Args:
    operator: The '+' token
    left: Left operand value
    right: Right operand value

  Returns:
    LoxRuntimeError naming both operand types
  """
  return LoxRuntimeError(
    operator,
    f"Operands must be two numbers or two strings (got {type_name(left)} and {type_name(right)})."
  )
