"""
Tests for the Error Taxonomy.
"""

from ctxlint.core.errors import (
  AnalysisError,
  AnalysisErrors,
  LoadError,
  TypeCheckError,
  UnresolvedModuleError,
  UnresolvedTypeError,
)


def test_hierarchy():
  for exc in (LoadError("x"), TypeCheckError("x"), UnresolvedModuleError("m"), UnresolvedTypeError("m", "T")):
    assert isinstance(exc, AnalysisError)


def test_unresolved_messages():
  assert str(UnresolvedModuleError("m")) == "cannot import sentinel module 'm'"
  assert str(UnresolvedModuleError("m", "boom")) == "cannot import sentinel module 'm': boom"
  assert str(UnresolvedTypeError("m", "T")) == "module 'm' has no type 'T'"


def test_aggregate_grows():
  errors = AnalysisErrors()
  assert not errors
  assert len(errors) == 0

  errors.append(LoadError("a"))
  errors.append(TypeCheckError("b"))

  assert errors
  assert len(errors) == 2
  assert str(errors) == "2 errors occurred:\n\t* a\n\t* b\n\n"
  assert errors.args == (str(errors),)
