"""
Main Entry Point for the ctxlint CLI.

This module handles argument parsing and dispatches to the command handler
defined in `ctxlint.cli.commands`.
"""

import argparse
from typing import List, Optional

from ctxlint.cli import commands
from ctxlint import __version__


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the check handler.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 if every unit was analyzed, 1 if any unit failed,
      2 for invalid configuration).
  """
  parser = argparse.ArgumentParser(
    prog="ctxlint",
    description="ctxlint: Detects overwritten context variables",
  )
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument(
    "units",
    nargs="+",
    metavar="UNIT",
    help="Package directory, .py file or dotted module name (relative to the current directory)",
  )
  parser.add_argument(
    "--sentinel",
    default=None,
    metavar="MODULE:TYPE",
    help="Type whose variables are checked (default: from toml, else contextvars:Context)",
  )
  parser.add_argument(
    "--include-tests",
    action="store_true",
    default=None,
    help="Also analyze test_*.py / *_test.py files in package directories (Overrides config)",
  )
  parser.add_argument(
    "-v",
    "--verbose",
    action="count",
    default=0,
    help="Increase log verbosity (-v: info, -vv: debug)",
  )

  args = parser.parse_args(argv)

  return commands.handle_check(args.units, args.sentinel, args.include_tests, args.verbose)
