"""
TinyFn - Main Entry Point
A minimal expression language: numbers, booleans, let1, fn and closures
"""

import sys
import argparse
import os
from pathlib import Path
from typing import Any, Callable, List, Optional

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import ReadError, ParseError, EvalError
from reader import create_reader, create_debug_reader, pretty_print_term
from parsing import parse, pretty_print_ast
from interpreter import create_interpreter, create_debug_interpreter
from stdlib import show_value


VERSION = "TinyFn v0.1.0"


def positive_int(text: str) -> int:
  """argparse type for options that must be at least 1"""
  try:
    value = int(text)
  except ValueError:
    raise argparse.ArgumentTypeError(f"invalid int value: '{text}'")
  if value < 1:
    raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
  return value


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='tinyfn',
      description='TinyFn - a minimal expression language with closures',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.tfn               # Run every term in a script
  %(prog)s -e "(+ 1 (+ 2 3))"       # Run terms given inline
  %(prog)s -i                       # Interactive mode
  %(prog)s --read script.tfn        # Show the terms read
  %(prog)s --parse script.tfn       # Show the AST of each term
  %(prog)s --debug script.tfn       # Run with debug output
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='TinyFn script file to execute'
  )

  parser.add_argument(
      '-e', '--eval',
      metavar='TEXT',
      help='Run the terms in TEXT'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--read',
      action='store_true',
      help='Read input and show the terms (for debugging)'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Read and parse input, show the AST (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--recursion-limit',
      type=positive_int,
      metavar='N',
      help='Raise the host recursion limit for deeply nested programs'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def report_error(source: str, error: Exception) -> None:
  """Print an error from any stage with its kind"""
  if isinstance(error, ReadError):
    print(f"Read error in '{source}':\n{error}")
  elif isinstance(error, ParseError):
    print(f"Parse error in '{source}': {error.message}")
  elif isinstance(error, EvalError):
    print(f"Runtime error in '{source}' [{error.kind}]: {error.message}")
  elif isinstance(error, RecursionError):
    print(f"Runtime error in '{source}': maximum evaluation depth exceeded")
    print("  Hint: use --recursion-limit to allow deeper nesting")
  else:
    print(f"Unexpected error while processing '{source}': {error}")


def read_input(source: str, text: Optional[str], debug: bool = False) -> List[Any]:
  """Read terms from inline text or from the script at source"""
  reader = create_debug_reader() if debug else create_reader()
  if text is not None:
    return reader.read_string(text, source)
  return reader.read_file(source)


def process(source: str, text: Optional[str], action: Callable[[List[Any]], None],
            debug: bool = False) -> int:
  """
  Read input and hand the terms to action; return the exit status.

  Every failure is reported and gives status 1. Only failures outside the
  language's error families print a traceback, and only in debug mode.
  """
  try:
    action(read_input(source, text, debug))
  except Exception as e:
    report_error(source, e)
    if debug and not isinstance(e, (ReadError, ParseError, EvalError, RecursionError)):
      import traceback
      traceback.print_exc()
    return 1
  return 0


def show_terms(terms: List[Any]) -> None:
  """Print every term read"""
  print(f"Read {len(terms)} terms:")
  print("=" * 50)
  for i, term in enumerate(terms, 1):
    print(f"\nTerm {i}:")
    print(pretty_print_term(term), end="")


def make_ast_printer(debug: bool = False) -> Callable[[List[Any]], None]:
  def show_asts(terms: List[Any]) -> None:
    print(f"Parsed {len(terms)} expressions:")
    print("=" * 50)
    for i, term in enumerate(terms, 1):
      print(f"\nExpression {i}:")
      print(pretty_print_ast(parse(term, debug)), end="")
  return show_asts


def make_runner(debug: bool = False) -> Callable[[List[Any]], None]:
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  def run_terms(terms: List[Any]) -> None:
    for term in terms:
      print(f"=> {show_value(interpreter.run(term))}")
  return run_terms


def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.tinyfn_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  completions = [
      # Keywords
      "let1", "fn", "if", "#t", "#f",
      # REPL commands
      ":read", ":parse", ":help", "exit"
  ]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def print_repl_help() -> None:
  print("REPL Commands:")
  print("  :read <text>      - Show the terms read")
  print("  :parse <text>     - Show the parsed AST")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language forms:")
  print("  42, #t, #f                  - Literals")
  print("  (+ a b)                     - Addition")
  print("  (if test then else)         - Conditional (test must be #t/#f)")
  print("  (let1 (x 1) body)           - Let-binding")
  print("  (fn (x) body)               - Function of one argument")
  print("  (f a)                       - Application")


def run_interactive_mode(debug: bool = False) -> None:
  """Run TinyFn in interactive mode; each entry is an independent program"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  while True:
    try:
      code = input("tinyfn> ").strip()
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if code == "exit":
      break
    if not code:
      continue

    if code == ":help":
      print_repl_help()
    elif code.startswith(":read "):
      process("<repl>", code[len(":read "):], show_terms, debug)
    elif code.startswith(":parse "):
      process("<repl>", code[len(":parse "):], make_ast_printer(debug), debug)
    else:
      process("<repl>", code, make_runner(debug), debug)


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for TinyFn"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.recursion_limit is not None:
    sys.setrecursionlimit(args.recursion_limit)

  if args.read:
    action = show_terms
  elif args.parse:
    action = make_ast_printer(args.debug)
  else:
    action = make_runner(args.debug)

  if args.eval is not None:
    sys.exit(process("<command line>", args.eval, action, args.debug))

  elif args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)
    sys.exit(process(args.script, None, action, args.debug))

  elif args.interactive:
    run_interactive_mode(debug=args.debug)

  else:
    arg_parser.print_help()


if __name__ == "__main__":
  main()
