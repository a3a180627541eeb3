"""
Test configuration for treelox tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter
from parsing import parse
from scanning import scan


@pytest.fixture
def run():
  """Scan, parse and interpret source; returns (printed lines, diagnostics)"""
  def run_program(source, interpreter=None):
    output = []
    if interpreter is None:
      interpreter = create_interpreter(output=output.append)
    else:
      interpreter.state['output'] = output.append

    tokens, scan_errors = scan(source)
    statements, parse_errors = parse(tokens)
    diagnostics = scan_errors + parse_errors
    if not diagnostics:
      runtime_error = interpreter.interpret(statements)
      if runtime_error is not None:
        diagnostics.append(runtime_error)
    return output, diagnostics

  return run_program
