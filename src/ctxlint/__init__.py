"""
ctxlint Package.

A static analysis rule that flags variables of a designated *sentinel* type
(by default `contextvars.Context`) that are reassigned in a way that silently
discards the previous value.

Usage
-----

Command Line
^^^^^^^^^^^^

.. code-block:: bash

    ctxlint mypackage other/module.py
    ctxlint --sentinel myapp.context:RequestContext mypackage

Programmatic
^^^^^^^^^^^^

.. code-block:: python

    from ctxlint import LintConfig, LintEngine

    engine = LintEngine(config=LintConfig.load(sentinel="contextvars:Context"))
    result = engine.run(["mypackage"])

    if not result.success:
        print(result.errors)
"""

__version__ = "0.1.0"

from ctxlint.config import LintConfig
from ctxlint.core.engine import LintEngine, RunResult, analyze_unit
from ctxlint.core.errors import (
  AnalysisError,
  AnalysisErrors,
  LoadError,
  TypeCheckError,
  UnresolvedModuleError,
  UnresolvedTypeError,
)
from ctxlint.core.model import Diagnostic, Position

__all__ = [
  "AnalysisError",
  "AnalysisErrors",
  "Diagnostic",
  "LintConfig",
  "LintEngine",
  "LoadError",
  "Position",
  "RunResult",
  "TypeCheckError",
  "UnresolvedModuleError",
  "UnresolvedTypeError",
  "__version__",
  "analyze_unit",
]
