"""
Error Taxonomy.

Every failure that can occur while analyzing one unit derives from
`AnalysisError`. These are per-unit and recoverable: the engine records them
and continues with the remaining units, then raises a single `AnalysisErrors`
aggregate at the end of the run.
"""

from typing import Iterable, List


class AnalysisError(Exception):
  """Base class for per-unit analysis failures."""


class LoadError(AnalysisError):
  """The unit cannot be located, read or parsed."""


class TypeCheckError(AnalysisError):
  """The unit parses but fails semantic checking."""


class UnresolvedModuleError(AnalysisError):
  """The module defining the sentinel type cannot be imported."""

  def __init__(self, module: str, reason: str = ""):
    self.module = module
    self.reason = reason
    msg = f"cannot import sentinel module '{module}'"
    if reason:
      msg = f"{msg}: {reason}"
    super().__init__(msg)


class UnresolvedTypeError(AnalysisError):
  """The sentinel module exists but exposes no class of the expected name."""

  def __init__(self, module: str, type_name: str):
    self.module = module
    self.type_name = type_name
    super().__init__(f"module '{module}' has no type '{type_name}'")


class AnalysisErrors(AnalysisError):
  """
  Aggregate of per-unit failures collected over a whole run.

  Renders as a bulleted list, one error per line.
  """

  def __init__(self, errors: Iterable[Exception] = ()):
    self.errors: List[Exception] = list(errors)
    super().__init__(self._format())

  def append(self, error: Exception) -> None:
    self.errors.append(error)
    self.args = (self._format(),)

  def __bool__(self) -> bool:
    return bool(self.errors)

  def __len__(self) -> int:
    return len(self.errors)

  def __str__(self) -> str:
    return self._format()

  def _format(self) -> str:
    if len(self.errors) == 1:
      return f"1 error occurred:\n\t* {self.errors[0]}\n\n"
    points = "\n\t".join(f"* {e}" for e in self.errors)
    return f"{len(self.errors)} errors occurred:\n\t{points}\n\n"
