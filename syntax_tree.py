"""
Abstract syntax tree node definitions
Every node is a frozen dataclass and owns its children exclusively
"""

from typing import Any, Optional, Tuple, Union
from dataclasses import dataclass, fields

from scanning import Token


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Grouping:
    expression: 'Expr'


@dataclass(frozen=True)
class Unary:
    operator: Token
    right: 'Expr'


@dataclass(frozen=True)
class Binary:
    left: 'Expr'
    operator: Token
    right: 'Expr'


@dataclass(frozen=True)
class Logical:
    left: 'Expr'
    operator: Token
    right: 'Expr'


@dataclass(frozen=True)
class Variable:
    name: Token


@dataclass(frozen=True)
class Assign:
    name: Token
    value: 'Expr'


Expr = Union[Literal, Grouping, Unary, Binary, Logical, Variable, Assign]


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class Expression:
    expression: Expr


@dataclass(frozen=True)
class Print:
    expression: Expr


@dataclass(frozen=True)
class Var:
    name: Token
    initializer: Optional[Expr] = None


@dataclass(frozen=True)
class Block:
    statements: Tuple['Stmt', ...]


@dataclass(frozen=True)
class If:
    condition: Expr
    then_branch: 'Stmt'
    else_branch: Optional['Stmt'] = None


@dataclass(frozen=True)
class While:
    condition: Expr
    body: 'Stmt'


Stmt = Union[Expression, Print, Var, Block, If, While]

EXPRESSION_TYPES = (Literal, Grouping, Unary, Binary, Logical, Variable, Assign)
STATEMENT_TYPES = (Expression, Print, Var, Block, If, While)


# ============================================================================
# TREE QUERIES
# ============================================================================

def first_line(node, default: int = 1) -> int:
    """
    Line of the leftmost token under node, or default if it holds none.
    Walks with an explicit stack so arbitrarily deep trees are safe.
    """
    pending = [node]
    while pending:
        current = pending.pop()
        if isinstance(current, Token):
            return current.line
        if isinstance(current, tuple):
            children = current
        elif isinstance(current, EXPRESSION_TYPES + STATEMENT_TYPES):
            children = [getattr(current, field.name) for field in fields(current)]
        else:
            continue
        pending.extend(reversed(children))
    return default
