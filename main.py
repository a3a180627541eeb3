"""
treelox - Main Entry Point
Runs a script file, or an interactive prompt, through scan -> parse -> interpret
"""

import sys
import argparse
from pathlib import Path
from typing import Dict, List, Optional, TextIO

# Readline support for history in the prompt
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import has_errors, report
from interpreter import Interpreter, create_debug_interpreter, create_interpreter
from parsing import parse
from printers import pretty_print_statement, print_rpn
from scanning import scan
from syntax_tree import Expression, Print, Stmt


VERSION = "treelox 0.1.0"

EXIT_OK = 0
EXIT_DATA_ERROR = 65     # any scan or parse error
EXIT_NO_INPUT = 66       # script could not be read
EXIT_SOFTWARE_ERROR = 70 # a runtime error stopped the script


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='treelox',
      description='Tree-walking interpreter for a small dynamically typed scripting language',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.lox            # Run a script
  %(prog)s -i                    # Interactive mode
  %(prog)s --parse script.lox    # Parse and show the statement tree
  %(prog)s --rpn script.lox      # Show expressions in reverse Polish form
  %(prog)s --debug script.lox    # Run with debug output
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the statement tree instead of running it'
  )

  parser.add_argument(
      '--rpn',
      action='store_true',
      help='Parse file and print each expression in reverse Polish form'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--no-color',
      action='store_true',
      help='Do not color diagnostics'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


# ============================================================================
# PIPELINE
# ============================================================================

def make_run_result(statements: List[Stmt], scan_errors: List[Dict],
                    parse_errors: List[Dict], runtime_error: Optional[Dict] = None) -> Dict:
  """Outcome of one pass through the pipeline"""
  return {
      'statements': statements,
      'scan_errors': scan_errors,
      'parse_errors': parse_errors,
      'runtime_error': runtime_error
  }


def run_source(source: str, interpreter: Interpreter, prompt: bool = False,
               execute: bool = True, debug: bool = False) -> Dict:
  """
  Scan, parse and (unless there were errors or execute is False) interpret source.
  In prompt mode a lone expression statement is printed instead of discarded.
  """
  tokens, scan_errors = scan(source)
  if debug:
    print(f"Scanned {len(tokens)} tokens ({len(scan_errors)} errors)", file=sys.stderr)

  statements, parse_errors = parse(tokens, debug)

  if has_errors(scan_errors, parse_errors) or not execute:
    return make_run_result(statements, scan_errors, parse_errors)

  if prompt and len(statements) == 1 and isinstance(statements[0], Expression):
    statements = [Print(statements[0].expression)]

  runtime_error = interpreter.interpret(statements)
  return make_run_result(statements, scan_errors, parse_errors, runtime_error)


def report_result(result: Dict, source: str, stream: Optional[TextIO] = None, color: bool = True) -> None:
  """Write every diagnostic of a run to stream (stderr by default)"""
  diagnostics = result['scan_errors'] + result['parse_errors']
  if result['runtime_error'] is not None:
    diagnostics.append(result['runtime_error'])
  report(diagnostics, stream, source_text=source, color=color)


def exit_status(result: Dict) -> int:
  """Map a run result to the process exit status"""
  if has_errors(result['scan_errors'], result['parse_errors']):
    return EXIT_DATA_ERROR
  if result['runtime_error'] is not None:
    return EXIT_SOFTWARE_ERROR
  return EXIT_OK


# ============================================================================
# MODES
# ============================================================================

def read_script(script_path: str) -> Optional[str]:
  """Read a script, printing a hint and returning None if it cannot be read"""
  try:
    return Path(script_path).read_text(encoding='utf-8')
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    print(f"  Hint: Make sure you have read permissions for this file")
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
  return None


def run_script_file(script_path: str, debug: bool = False, color: bool = True) -> int:
  """Run a script file; returns the exit status"""
  source = read_script(script_path)
  if source is None:
    return EXIT_NO_INPUT

  interpreter = create_debug_interpreter() if debug else create_interpreter()
  result = run_source(source, interpreter, debug=debug)
  report_result(result, source, color=color)
  return exit_status(result)


def parse_file(script_path: str, rpn: bool = False, debug: bool = False, color: bool = True) -> int:
  """Parse a script file and show its statements; returns the exit status"""
  source = read_script(script_path)
  if source is None:
    return EXIT_NO_INPUT

  result = run_source(source, create_interpreter(), execute=False, debug=debug)
  for statement in result['statements']:
    if not rpn:
      print(pretty_print_statement(statement), end='')
    elif isinstance(statement, (Expression, Print)):
      print(print_rpn(statement.expression))

  report_result(result, source, color=color)
  return exit_status(result)


def run_interactive_mode(debug: bool = False, color: bool = True) -> None:
  """Read-eval-print loop; errors are reported and the session continues"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' or press Ctrl-D to quit")
  if READLINE_AVAILABLE:
    print("Readline enabled: use up/down for history")
  if debug:
    print("Debug mode enabled")
  print()

  interpreter = create_debug_interpreter() if debug else create_interpreter()

  while True:
    try:
      line = input("> ")
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if line.strip() == "exit":
      break
    if not line.strip():
      continue

    result = run_source(line, interpreter, prompt=True, debug=debug)
    report_result(result, line, stream=sys.stdout, color=color)


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for treelox"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)
  color = not args.no_color

  if args.script and not args.interactive:
    if args.parse or args.rpn:
      sys.exit(parse_file(args.script, rpn=args.rpn, debug=args.debug, color=color))
    sys.exit(run_script_file(args.script, debug=args.debug, color=color))

  if args.script:
    arg_parser.error("a script cannot be combined with --interactive")

  run_interactive_mode(debug=args.debug, color=color)


if __name__ == "__main__":
  main()
