"""
Recursive-descent parser
Builds statements from the token list; a failed production returns None,
records a diagnostic, and the declaration loop resynchronizes
"""

import sys
from typing import Dict, List, Optional, Tuple

from error_handling import make_parse_error
from scanning import Token, scan
from syntax_tree import (
    Assign, Binary, Block, Expr, Expression, Grouping, If, Literal, Logical,
    Print, Stmt, Unary, Var, Variable, While
)


# Tokens that begin a new declaration/statement; synchronization stops before them
STATEMENT_KEYWORDS = frozenset(
    ['CLASS', 'FUN', 'VAR', 'FOR', 'IF', 'WHILE', 'PRINT', 'RETURN']
)


class Parser:
    """Parser over one token list; collects diagnostics instead of raising"""

    def __init__(self, tokens: List[Token], debug: bool = False):
        self.tokens = tokens
        self.debug = debug
        self.current = 0
        self.block_depth = 0
        self.errors: List[Dict] = []

    def parse(self) -> Tuple[List[Stmt], List[Dict]]:
        statements = []
        while not self.is_at_end():
            start = self.current
            try:
                statement = self.declaration()
            except RecursionError:
                self.too_deep(start)
                statement = None
            if statement is not None:
                statements.append(statement)

        if self.debug:
            print(f"Parsed {len(statements)} statements ({len(self.errors)} errors)", file=sys.stderr)
        return statements, self.errors

    def parse_expression(self) -> Tuple[Optional[Expr], List[Dict]]:
        """Parse a single expression (used by the printers and tests)"""
        try:
            expr = self.expression()
        except RecursionError:
            self.too_deep(0)
            return None, self.errors
        if expr is not None and not self.is_at_end():
            self.error(self.peek(), "Expect end of expression.")
            expr = None
        return expr, self.errors

    # ------------------------------------------------------------------
    # Declarations and statements
    # ------------------------------------------------------------------

    def declaration(self) -> Optional[Stmt]:
        start = self.current
        if self.match('VAR'):
            statement = self.var_declaration()
        else:
            statement = self.statement()

        if statement is None:
            self.synchronize(start)
        return statement

    def var_declaration(self) -> Optional[Stmt]:
        name = self.consume('IDENTIFIER', "Expect variable name.")
        if name is None:
            return None

        initializer = None
        if self.match('EQUAL'):
            initializer = self.expression()
            if initializer is None:
                return None

        if self.consume('SEMICOLON', "Expect ';' after variable declaration.") is None:
            return None
        return Var(name, initializer)

    def statement(self) -> Optional[Stmt]:
        if self.match('PRINT'):
            return self.print_statement()
        if self.match('IF'):
            return self.if_statement()
        if self.match('WHILE'):
            return self.while_statement()
        if self.match('LEFT_BRACE'):
            body = self.block()
            return None if body is None else Block(tuple(body))
        return self.expression_statement()

    def print_statement(self) -> Optional[Stmt]:
        value = self.expression()
        if value is None:
            return None
        if self.consume('SEMICOLON', "Expect ';' after value.") is None:
            return None
        return Print(value)

    def if_statement(self) -> Optional[Stmt]:
        condition = self.parenthesized_condition("'if'", "if condition")
        if condition is None:
            return None

        then_branch = self.statement()
        if then_branch is None:
            return None

        # An else always attaches to the innermost if still being parsed
        else_branch = None
        if self.match('ELSE'):
            else_branch = self.statement()
            if else_branch is None:
                return None

        return If(condition, then_branch, else_branch)

    def while_statement(self) -> Optional[Stmt]:
        condition = self.parenthesized_condition("'while'", "condition")
        if condition is None:
            return None

        body = self.statement()
        if body is None:
            return None
        return While(condition, body)

    def parenthesized_condition(self, keyword: str, what: str) -> Optional[Expr]:
        if self.consume('LEFT_PAREN', f"Expect '(' after {keyword}.") is None:
            return None
        condition = self.expression()
        if condition is None:
            return None
        if self.consume('RIGHT_PAREN', f"Expect ')' after {what}.") is None:
            return None
        return condition

    def block(self) -> Optional[List[Stmt]]:
        statements = []
        self.block_depth += 1
        while not self.check('RIGHT_BRACE') and not self.is_at_end():
            statement = self.declaration()
            if statement is not None:
                statements.append(statement)
        self.block_depth -= 1

        if self.consume('RIGHT_BRACE', "Expect '}' after block.") is None:
            return None
        return statements

    def expression_statement(self) -> Optional[Stmt]:
        expr = self.expression()
        if expr is None:
            return None
        if self.consume('SEMICOLON', "Expect ';' after expression.") is None:
            return None
        return Expression(expr)

    # ------------------------------------------------------------------
    # Expressions, lowest precedence first
    # ------------------------------------------------------------------

    def expression(self) -> Optional[Expr]:
        return self.assignment()

    def assignment(self) -> Optional[Expr]:
        expr = self.logic_or()
        if expr is None:
            return None

        if self.match('EQUAL'):
            equals = self.previous()
            value = self.assignment()
            if value is None:
                return None

            if isinstance(expr, Variable):
                return Assign(expr.name, value)

            # Reported, but parsing carries on with the left-hand side
            self.error(equals, "Invalid assignment target.")

        return expr

    def logic_or(self) -> Optional[Expr]:
        return self.left_associative(self.logic_and, ('OR',), Logical)

    def logic_and(self) -> Optional[Expr]:
        return self.left_associative(self.equality, ('AND',), Logical)

    def equality(self) -> Optional[Expr]:
        return self.left_associative(self.comparison, ('BANG_EQUAL', 'EQUAL_EQUAL'), Binary)

    def comparison(self) -> Optional[Expr]:
        return self.left_associative(
            self.term, ('GREATER', 'GREATER_EQUAL', 'LESS', 'LESS_EQUAL'), Binary
        )

    def term(self) -> Optional[Expr]:
        return self.left_associative(self.factor, ('MINUS', 'PLUS'), Binary)

    def factor(self) -> Optional[Expr]:
        return self.left_associative(self.unary, ('SLASH', 'STAR'), Binary)

    def left_associative(self, operand, operators, node_type) -> Optional[Expr]:
        """Parse `operand (op operand)*`, wrapping to the left on each loop"""
        expr = operand()
        if expr is None:
            return None

        while self.match(*operators):
            operator = self.previous()
            right = operand()
            if right is None:
                return None
            expr = node_type(expr, operator, right)

        return expr

    def unary(self) -> Optional[Expr]:
        if self.match('BANG', 'MINUS'):
            operator = self.previous()
            right = self.unary()
            if right is None:
                return None
            return Unary(operator, right)
        return self.primary()

    def primary(self) -> Optional[Expr]:
        if self.match('FALSE'):
            return Literal(False)
        if self.match('TRUE'):
            return Literal(True)
        if self.match('NIL'):
            return Literal(None)
        if self.match('NUMBER', 'STRING'):
            return Literal(self.previous().literal)
        if self.match('IDENTIFIER'):
            return Variable(self.previous())
        if self.match('LEFT_PAREN'):
            expr = self.expression()
            if expr is None:
                return None
            if self.consume('RIGHT_PAREN', "Expect ')' after expression.") is None:
                return None
            return Grouping(expr)

        self.error(self.peek(), "Expect expression.")
        return None

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def match(self, *token_types: str) -> bool:
        for token_type in token_types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def consume(self, token_type: str, message: str) -> Optional[Token]:
        if self.check(token_type):
            return self.advance()
        self.error(self.peek(), message)
        return None

    def check(self, token_type: str) -> bool:
        if self.is_at_end():
            return False
        return self.peek().type == token_type

    def advance(self) -> Token:
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self) -> bool:
        return self.peek().type == 'EOF'

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def error(self, token: Token, message: str) -> None:
        self.errors.append(make_parse_error(token, message))

    def too_deep(self, start: int) -> None:
        """Report nesting past the interpreter stack and skip the whole top-level declaration"""
        self.error(self.peek(), "Nesting too deep.")
        self.block_depth = 0
        self.synchronize(start)

    def synchronize(self, start: int) -> None:
        """Discard tokens up to the next statement boundary"""
        if self.current == start:
            self.advance()

        while not self.is_at_end():
            if self.current > start and self.previous().type == 'SEMICOLON':
                return
            next_type = self.peek().type
            if next_type in STATEMENT_KEYWORDS:
                return
            if next_type == 'RIGHT_BRACE' and self.block_depth > 0:
                return
            self.advance()


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def parse(tokens: List[Token], debug: bool = False) -> Tuple[List[Stmt], List[Dict]]:
    """Parse tokens into (statements, diagnostics)"""
    return Parser(tokens, debug).parse()


class LoxParser:
    """Scanner and parser combined over source text"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def parse_string(self, text: str) -> Tuple[List[Stmt], List[Dict]]:
        """Scan and parse source text; diagnostics from both stages are returned"""
        tokens, scan_errors = scan(text)
        if self.debug:
            print(f"Scanned {len(tokens)} tokens ({len(scan_errors)} errors)", file=sys.stderr)
        statements, parse_errors = parse(tokens, self.debug)
        return statements, scan_errors + parse_errors

    def parse_expression(self, text: str) -> Tuple[Optional[Expr], List[Dict]]:
        tokens, scan_errors = scan(text)
        expr, parse_errors = Parser(tokens, self.debug).parse_expression()
        return expr, scan_errors + parse_errors

    def parse_file(self, filepath: str) -> Tuple[List[Stmt], List[Dict]]:
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.parse_string(content)


def create_parser(debug: bool = False) -> LoxParser:
    """Create a parser"""
    return LoxParser(debug=debug)


def create_debug_parser() -> LoxParser:
    """Create a parser with debug enabled"""
    return LoxParser(debug=True)
