"""
Diagnostics for the scanner, parser and interpreter
Scan and parse problems are plain dictionaries returned alongside results;
only evaluation raises, and the interpreter converts that into a dictionary too
"""

from typing import Dict, Iterable, List, Optional, TextIO
import sys

from termcolor import colored


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_diagnostic(kind: str, line: int, message: str, where: str = "") -> Dict:
    """Create a diagnostic record"""
    return {
        'kind': kind,
        'line': line,
        'where': where,
        'message': message
    }


def make_scan_error(line: int, message: str) -> Dict:
    """Create a scan diagnostic (no token exists for the bad input)"""
    return make_diagnostic('scan', line, message)


def make_parse_error(token, message: str) -> Dict:
    """Create a parse diagnostic located at the offending token"""
    if token.type == 'EOF':
        where = " at end"
    else:
        where = f" at '{token.lexeme}'"
    return make_diagnostic('parse', token.line, message, where)


def make_runtime_error(error: 'LoxRuntimeError') -> Dict:
    """Convert a raised runtime error into a diagnostic"""
    return make_diagnostic('runtime', error.token.line, error.message)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LoxRuntimeError(Exception):
    """Raised during evaluation; aborts the current interpret call"""
    def __init__(self, token, message: str):
        self.token = token
        self.message = message
        super().__init__(message)

    @property
    def line(self) -> int:
        return self.token.line


# ============================================================================
# FORMATTING
# ============================================================================

def format_diagnostic(diagnostic: Dict) -> str:
    """Format a diagnostic as a single report"""
    if diagnostic['kind'] == 'runtime':
        return f"{diagnostic['message']}\n[line {diagnostic['line']}]"
    return f"[line {diagnostic['line']}] Error{diagnostic['where']}: {diagnostic['message']}"


def get_context_line(source_text: str, line_num: int) -> Optional[str]:
    """Return the source line a diagnostic points at, if it exists"""
    lines = source_text.split('\n')
    if 1 <= line_num <= len(lines):
        return lines[line_num - 1]
    return None


def report(diagnostics: Iterable[Dict], stream: Optional[TextIO] = None,
           source_text: Optional[str] = None, color: bool = True) -> int:
    """Write diagnostics to stream (stderr by default); returns how many were written"""
    if stream is None:
        stream = sys.stderr

    count = 0
    for diagnostic in diagnostics:
        text = format_diagnostic(diagnostic)
        if color:
            text = colored(text, "red", attrs=["bold"])
        stream.write(text + "\n")

        if source_text is not None and diagnostic['kind'] != 'runtime':
            context = get_context_line(source_text, diagnostic['line'])
            if context is not None and context.strip():
                stream.write(f"{diagnostic['line']:4d}: {context}\n")
        count += 1

    stream.flush()
    return count


def has_errors(*diagnostic_lists: List[Dict]) -> bool:
    """True if any of the given diagnostic lists is non-empty"""
    return any(diagnostic_lists)
