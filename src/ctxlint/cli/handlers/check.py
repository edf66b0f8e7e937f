"""
Check Command Handler.

Loads the configuration, then runs the overwrite analysis over every requested
unit. Diagnostics and the error summary are written to standard error.
"""

from pathlib import Path
from typing import List, Optional, TextIO

from ctxlint.config import LintConfig
from ctxlint.core.engine import LintEngine
from ctxlint.core.loader import LibCSTProvider
from ctxlint.core.reporter import Reporter
from ctxlint.utils.console import log_error, log_info, set_log_level


def handle_check(
  units: List[str],
  sentinel: Optional[str] = None,
  include_tests: Optional[bool] = None,
  verbosity: int = 0,
  sink: Optional[TextIO] = None,
  base_dir: Optional[Path] = None,
) -> int:
  """
  Analyzes the given units.

  Args:
      units: Unit identifiers, analyzed in order.
      sentinel: Override for the sentinel type (`module:Type`).
      include_tests: Override for test file inclusion.
      verbosity: CLI verbosity count.
      sink: Output stream for diagnostics (defaults to stderr).
      base_dir: Directory identifiers are relative to (defaults to the CWD).

  Returns:
      int: 0 if every unit was analyzed, 1 if any unit failed, 2 if the
      configuration is invalid. Diagnostics do not affect the exit code.
  """
  set_log_level(verbosity)
  base = base_dir or Path.cwd()

  try:
    config = LintConfig.load(sentinel=sentinel, include_tests=include_tests, search_path=base)
  except ValueError as e:
    log_error(f"Invalid configuration: {e}")
    return 2

  log_info(f"Sentinel type: {config.sentinel}")

  provider = LibCSTProvider(include_tests=config.include_tests, factories=config.factories)
  engine = LintEngine(config=config, provider=provider, reporter=Reporter(sink))
  result = engine.run(units, base_dir=base)

  log_info(f"{result.units_analyzed}/{len(units)} units analyzed, {len(result.diagnostics)} diagnostics")
  return result.exit_code
