"""
Orchestration Engine.

Drives the analysis of one or more units:

1.  **Load**: The injected `SourceUnitProvider` parses and binds the unit.
2.  **Resolve**: The sentinel type is resolved in the unit's type universe.
3.  **Match / Group / Detect**: The core pipeline turns bindings into diagnostics.
4.  **Report**: Diagnostics are written as soon as a unit completes; per-unit
    failures are collected and reported once at the end.

Units are processed sequentially in the order given. A failing unit never
prevents the remaining units from being analyzed.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ctxlint.analysis.grouper import group_occurrences
from ctxlint.analysis.matcher import match_occurrences
from ctxlint.analysis.overwrite import detect_overwrites
from ctxlint.config import LintConfig
from ctxlint.core.errors import AnalysisError, AnalysisErrors
from ctxlint.core.loader import LibCSTProvider
from ctxlint.core.model import Diagnostic, TypeRef
from ctxlint.core.provider import SourceUnit, SourceUnitProvider
from ctxlint.core.reporter import Reporter
from ctxlint.utils.console import log_debug, log_info


class RunResult(BaseModel):
  """
  Structured result of a whole run.
  """

  model_config = ConfigDict(arbitrary_types_allowed=True)

  diagnostics: List[Diagnostic] = Field(default_factory=list, description="All diagnostics, unit by unit.")
  errors: AnalysisErrors = Field(default_factory=AnalysisErrors, description="Per-unit failures.")
  units_analyzed: int = Field(default=0, description="Units that completed without error.")

  @property
  def success(self) -> bool:
    """
    True if every unit loaded and resolved the sentinel. Diagnostics do not
    count as failures.
    """
    return not self.errors

  @property
  def exit_code(self) -> int:
    return 0 if self.success else 1


def analyze_unit(unit: SourceUnit, sentinel: TypeRef) -> List[Diagnostic]:
  """
  Runs the detection pipeline over a loaded unit.

  Args:
      unit: The loaded unit.
      sentinel: The resolved sentinel type.

  Returns:
      List[Diagnostic]: Sorted diagnostics (possibly empty).
  """
  modules = [f.module for f in unit.files]
  occurrences = match_occurrences(modules, unit.bindings, sentinel)
  groups = group_occurrences(occurrences)
  log_debug(f"Unit '{unit.identifier}': {len(occurrences)} occurrences in {len(groups)} groups")
  return detect_overwrites(groups, sentinel)


class LintEngine:
  """
  Runs the analysis over a sequence of units.
  """

  def __init__(
    self,
    config: Optional[LintConfig] = None,
    provider: Optional[SourceUnitProvider] = None,
    reporter: Optional[Reporter] = None,
  ):
    """
    Initializes the Engine.

    Args:
        config: Run configuration. Loaded from pyproject.toml if None.
        provider: Source unit provider. Defaults to `LibCSTProvider`.
        reporter: Output reporter. Defaults to one writing to stderr.
    """
    self.config = config or LintConfig.load()
    self.provider = provider or LibCSTProvider(
      include_tests=self.config.include_tests,
      factories=self.config.factories,
    )
    self.reporter = reporter or Reporter()

  def check_unit(self, identifier: str, base_dir: Path) -> List[Diagnostic]:
    """
    Analyzes a single unit.

    Raises:
        AnalysisError: If the unit cannot be loaded, checked or the sentinel
            cannot be resolved.
    """
    unit = self.provider.load_unit(identifier, base_dir)
    sentinel = self.provider.resolve_type(unit, self.config.sentinel_module, self.config.sentinel_type)
    return analyze_unit(unit, sentinel)

  def run(self, identifiers: Sequence[str], base_dir: Optional[Path] = None) -> RunResult:
    """
    Analyzes every unit, reporting diagnostics as they are produced and the
    aggregated errors once at the end.

    Args:
        identifiers: Units to analyze, in order.
        base_dir: Directory identifiers are relative to. Defaults to the CWD.

    Returns:
        RunResult: Diagnostics and errors of the run.
    """
    base = base_dir or Path.cwd()
    result = RunResult()

    for identifier in identifiers:
      log_info(f"Analyzing unit '{identifier}'")
      try:
        diagnostics = self.check_unit(identifier, base)
      except AnalysisError as e:
        log_debug(f"Unit '{identifier}' failed: {e}")
        result.errors.append(e)
        continue

      self.reporter.report(diagnostics)
      result.diagnostics.extend(diagnostics)
      result.units_analyzed += 1

    self.reporter.report_errors(result.errors)
    return result
