"""
Syntax tree printers: parenthesized prefix form, reverse Polish form,
and an indented statement tree for --parse output
"""

from syntax_tree import (
  Assign, Binary, Block, Expr, Expression, Grouping, If, Literal, Logical,
  Print, Stmt, Unary, Var, Variable, While
)
from utilities import stringify


def literal_text(value) -> str:
  if isinstance(value, str):
    return value
  return stringify(value)


def parenthesize(name: str, *exprs: Expr) -> str:
  parts = [name] + [print_ast(expr) for expr in exprs]
  return "(" + " ".join(parts) + ")"


def print_ast(expr: Expr) -> str:
  """Fully parenthesized form, e.g. (* (- 123) (group 45.67))"""
  match expr:
    case Literal(value=value):
      return literal_text(value)
    case Grouping(expression=inner):
      return parenthesize("group", inner)
    case Unary(operator=operator, right=right):
      return parenthesize(operator.lexeme, right)
    case Binary(left=left, operator=operator, right=right) | Logical(left=left, operator=operator, right=right):
      return parenthesize(operator.lexeme, left, right)
    case Variable(name=name):
      return name.lexeme
    case Assign(name=name, value=value):
      return f"(= {name.lexeme} {print_ast(value)})"
    case _:
      raise TypeError(f"Unknown expression node: {type(expr).__name__}")


def print_rpn(expr: Expr) -> str:
  """Reverse Polish form; groupings vanish, e.g. 1 2 + 4 3 - *"""
  match expr:
    case Literal(value=value):
      return literal_text(value)
    case Grouping(expression=inner):
      return print_rpn(inner)
    case Unary(operator=operator, right=right):
      return f"{print_rpn(right)} {operator.lexeme}"
    case Binary(left=left, operator=operator, right=right) | Logical(left=left, operator=operator, right=right):
      return f"{print_rpn(left)} {print_rpn(right)} {operator.lexeme}"
    case Variable(name=name):
      return name.lexeme
    case Assign(name=name, value=value):
      return f"{print_rpn(value)} {name.lexeme} ="
    case _:
      raise TypeError(f"Unknown expression node: {type(expr).__name__}")


def pretty_print_statement(stmt: Stmt, indent: int = 0) -> str:
  """Pretty print a statement tree for debugging"""
  pad = "  " * indent

  match stmt:
    case Expression(expression=expr):
      return f"{pad}Expression {print_ast(expr)}\n"
    case Print(expression=expr):
      return f"{pad}Print {print_ast(expr)}\n"
    case Var(name=name, initializer=initializer):
      if initializer is None:
        return f"{pad}Var {name.lexeme}\n"
      return f"{pad}Var {name.lexeme} = {print_ast(initializer)}\n"
    case Block(statements=statements):
      result = f"{pad}Block\n"
      for child in statements:
        result += pretty_print_statement(child, indent + 1)
      return result
    case If(condition=condition, then_branch=then_branch, else_branch=else_branch):
      result = f"{pad}If {print_ast(condition)}\n"
      result += pretty_print_statement(then_branch, indent + 1)
      if else_branch is not None:
        result += f"{pad}Else\n"
        result += pretty_print_statement(else_branch, indent + 1)
      return result
    case While(condition=condition, body=body):
      return f"{pad}While {print_ast(condition)}\n" + pretty_print_statement(body, indent + 1)
    case _:
      raise TypeError(f"Unknown statement node: {type(stmt).__name__}")
