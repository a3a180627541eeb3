"""
Lexical scanner
Turns source text into a flat list of tokens terminated by EOF
"""

from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass

from pyparsing import Regex, Word, alphas, alphanums, nums

from error_handling import make_scan_error


# ============================================================================
# TOKENS
# ============================================================================

SINGLE_CHAR_TOKENS = {
    '(': 'LEFT_PAREN',
    ')': 'RIGHT_PAREN',
    '{': 'LEFT_BRACE',
    '}': 'RIGHT_BRACE',
    ',': 'COMMA',
    '.': 'DOT',
    '-': 'MINUS',
    '+': 'PLUS',
    ';': 'SEMICOLON',
    '*': 'STAR',
}

# Operators that may be followed by '=' to form a two-character operator
ONE_OR_TWO_CHAR_TOKENS = {
    '!': ('BANG', 'BANG_EQUAL'),
    '=': ('EQUAL', 'EQUAL_EQUAL'),
    '<': ('LESS', 'LESS_EQUAL'),
    '>': ('GREATER', 'GREATER_EQUAL'),
}

KEYWORDS = {
    'and': 'AND',
    'class': 'CLASS',
    'else': 'ELSE',
    'false': 'FALSE',
    'for': 'FOR',
    'fun': 'FUN',
    'if': 'IF',
    'nil': 'NIL',
    'or': 'OR',
    'print': 'PRINT',
    'return': 'RETURN',
    'super': 'SUPER',
    'this': 'THIS',
    'true': 'TRUE',
    'var': 'VAR',
    'while': 'WHILE',
}

TOKEN_TYPES = frozenset(
    list(SINGLE_CHAR_TOKENS.values())
    + [kind for pair in ONE_OR_TWO_CHAR_TOKENS.values() for kind in pair]
    + list(KEYWORDS.values())
    + ['SLASH', 'IDENTIFIER', 'STRING', 'NUMBER', 'EOF']
)

WHITESPACE = ' \r\t'
IDENTIFIER_START = alphas + '_'


@dataclass(frozen=True)
class Token:
    """A scanned token; literal is set only for NUMBER and STRING"""
    type: str
    lexeme: str
    literal: Any
    line: int

    def __str__(self) -> str:
        return f"{self.type} {self.lexeme} {'nil' if self.literal is None else self.literal}"


# Lexeme patterns, anchored at the cursor (no whitespace skipping)
NUMBER_PATTERN = Regex(r"[0-9]+(\.[0-9]+)?").leave_whitespace()
IDENTIFIER_PATTERN = Word(IDENTIFIER_START, alphanums + '_').leave_whitespace()


# ============================================================================
# SCANNER
# ============================================================================

class Scanner:
    """Single-pass scanner with start/current cursors and a line counter"""

    def __init__(self, source: str):
        self.source = source
        self.tokens: List[Token] = []
        self.errors: List[Dict] = []
        self.start = 0
        self.current = 0
        self.line = 1

    def scan_tokens(self) -> Tuple[List[Token], List[Dict]]:
        """Scan the whole source; never fails, problems go to the error list"""
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token('EOF', "", None, self.line))
        return self.tokens, self.errors

    def scan_token(self) -> None:
        char = self.advance()

        if char in SINGLE_CHAR_TOKENS:
            self.add_token(SINGLE_CHAR_TOKENS[char])
        elif char in ONE_OR_TWO_CHAR_TOKENS:
            short, long = ONE_OR_TWO_CHAR_TOKENS[char]
            self.add_token(long if self.match('=') else short)
        elif char == '/':
            if self.match('/'):
                self.line_comment()
            elif self.match('*'):
                self.block_comment()
            else:
                self.add_token('SLASH')
        elif char in WHITESPACE:
            pass
        elif char == '\n':
            self.line += 1
        elif char == '"':
            self.string()
        elif char in nums:
            self.number()
        elif char in IDENTIFIER_START:
            self.identifier()
        else:
            self.error("Unexpected character.")

    # ------------------------------------------------------------------
    # Lexeme rules
    # ------------------------------------------------------------------

    def line_comment(self) -> None:
        while self.peek() != '\n' and not self.is_at_end():
            self.advance()

    def block_comment(self) -> None:
        """Skip a /* */ comment; nested openers must each be closed"""
        depth = 1
        while depth > 0:
            if self.is_at_end():
                self.error("Unterminated block comment.")
                return

            if self.peek() == '/' and self.peek_next() == '*':
                depth += 1
                self.advance()
            elif self.peek() == '*' and self.peek_next() == '/':
                depth -= 1
                self.advance()
            elif self.peek() == '\n':
                self.line += 1
            self.advance()

    def string(self) -> None:
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == '\n':
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.error("Unterminated string.")
            return

        # closing quote
        self.advance()
        self.add_token('STRING', self.source[self.start + 1:self.current - 1])

    def number(self) -> None:
        self.current = NUMBER_PATTERN.try_parse(self.source, self.start)
        self.add_token('NUMBER', float(self.source[self.start:self.current]))

    def identifier(self) -> None:
        self.current = IDENTIFIER_PATTERN.try_parse(self.source, self.start)
        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, 'IDENTIFIER'))

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def advance(self) -> str:
        char = self.source[self.current]
        self.current += 1
        return char

    def match(self, expected: str) -> bool:
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self) -> str:
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def add_token(self, token_type: str, literal: Optional[Any] = None) -> None:
        text = self.source[self.start:self.current]
        self.tokens.append(Token(token_type, text, literal, self.line))

    def error(self, message: str) -> None:
        self.errors.append(make_scan_error(self.line, message))


def scan(source: str) -> Tuple[List[Token], List[Dict]]:
    """Scan source text into (tokens, diagnostics)"""
    return Scanner(source).scan_tokens()
