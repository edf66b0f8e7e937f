"""
Diagnostic Reporter.

Renders diagnostics and the aggregated error summary as plain text on an
injectable sink (standard error by default)::

    [Overwrite]
    \t /path/file.py:12:5
    \t /path/file.py:14:5
"""

import sys
from typing import Iterable, Optional, TextIO

from ctxlint.core.errors import AnalysisErrors
from ctxlint.core.model import Diagnostic


class Reporter:
  """
  Writes diagnostic blocks in deterministic order.
  """

  def __init__(self, sink: Optional[TextIO] = None):
    """
    Args:
        sink: Text stream to write to. Resolved lazily to `sys.stderr` so that
            stream redirection after construction is honoured.
    """
    self._sink = sink

  @property
  def sink(self) -> TextIO:
    return self._sink if self._sink is not None else sys.stderr

  def report(self, diagnostics: Iterable[Diagnostic]) -> None:
    """
    Emits one block per diagnostic, sorted by (first position, symbol name).

    Args:
        diagnostics: Diagnostics of one unit.
    """
    for diag in sorted(diagnostics, key=lambda d: d.sort_key):
      self.sink.write(f"[{diag.kind}]\n")
      for pos in diag.positions:
        self.sink.write(f"\t {pos}\n")

  def report_errors(self, errors: AnalysisErrors) -> None:
    """
    Emits the aggregated failure summary, if any.

    Args:
        errors: Errors collected over the run.
    """
    if not errors:
      return
    self.sink.write(f"Error: {errors}\n")
    self.sink.flush()
