"""
Tests for the Type Universe.

Verifies:
1. Sentinel resolution and its failure modes.
2. Interning (identity) of type descriptors.
3. Qualified name lookup and return type discovery.
"""

import contextvars
import io
import sys

import pytest
from rich.console import Console

from ctxlint.config import DEFAULT_FACTORIES
from ctxlint.core.errors import TypeCheckError, UnresolvedModuleError, UnresolvedTypeError
from ctxlint.core.universe import TypeUniverse, split_type_spec
from ctxlint.utils.console import set_console


def _annotated_factory() -> contextvars.Context:
  return contextvars.copy_context()


def _unannotated_factory():
  return contextvars.copy_context()


@pytest.fixture
def universe():
  return TypeUniverse(factories=DEFAULT_FACTORIES)


def test_resolve_type_interned(universe):
  first = universe.resolve_type("contextvars", "Context")
  second = universe.resolve_type("contextvars", "Context")

  assert first is second
  assert first is universe.type_of(contextvars.Context)
  assert first.origin is contextvars.Context


def test_universes_do_not_share_descriptors():
  a = TypeUniverse().resolve_type("contextvars", "Context")
  b = TypeUniverse().resolve_type("contextvars", "Context")
  assert a is not b


def test_unresolved_module(universe):
  with pytest.raises(UnresolvedModuleError) as excinfo:
    universe.resolve_type("ctxlint_no_such_module", "Context")
  assert excinfo.value.module == "ctxlint_no_such_module"
  assert str(excinfo.value).startswith("cannot import sentinel module 'ctxlint_no_such_module'")


@pytest.mark.parametrize("type_name", ["Missing", "copy_context"])
def test_unresolved_type(universe, type_name):
  """A missing attribute, or an attribute that is not a class."""
  with pytest.raises(UnresolvedTypeError) as excinfo:
    universe.resolve_type("contextvars", type_name)
  assert str(excinfo.value) == f"module 'contextvars' has no type '{type_name}'"


def test_resolve_from_search_path(tmp_path):
  """Sentinel modules next to the analyzed code are importable."""
  (tmp_path / "ctxlint_local_handles.py").write_text("class Handle:\n    pass\n", encoding="utf-8")
  universe = TypeUniverse(search_paths=[tmp_path])

  ref = universe.resolve_type("ctxlint_local_handles", "Handle")

  assert ref.name == "ctxlint_local_handles.Handle"
  assert str(tmp_path) not in sys.path


def test_local_type_interning(universe):
  a = universe.local_type("0:mod.py:Context", "Context")
  assert universe.local_type("0:mod.py:Context", "Context") is a
  assert universe.local_type("1:other.py:Context", "Context") is not a
  assert a is not universe.type_of(contextvars.Context)


def test_lookup(universe):
  assert universe.lookup("contextvars.Context") is contextvars.Context
  assert universe.lookup("contextvars.Context.copy") is contextvars.Context.copy
  assert universe.lookup("contextvars.no_such_attr") is None
  assert universe.lookup("ctxlint_no_such_module.thing") is None


def test_lookup_relative_names_unresolved(universe):
  assert universe.lookup(".sibling.make") is None


def test_lookup_module_raising_on_import(tmp_path):
  (tmp_path / "ctxlint_exploding_mod.py").write_text("raise RuntimeError('boom')\n", encoding="utf-8")
  universe = TypeUniverse(search_paths=[tmp_path])

  with pytest.raises(TypeCheckError, match="boom"):
    universe.lookup("ctxlint_exploding_mod.make")


def test_resolve_type_module_raising_on_import(tmp_path):
  (tmp_path / "ctxlint_raising_types.py").write_text("raise RuntimeError('boom')\n", encoding="utf-8")
  universe = TypeUniverse(search_paths=[tmp_path])

  with pytest.raises(UnresolvedModuleError, match="RuntimeError: boom"):
    universe.resolve_type("ctxlint_raising_types", "Context")


def test_return_type_class_instantiation(universe):
  assert universe.return_type(contextvars.Context) is universe.type_of(contextvars.Context)


def test_return_type_factories(universe):
  sentinel = universe.resolve_type("contextvars", "Context")
  assert universe.return_type(contextvars.copy_context) is sentinel
  assert universe.return_type(contextvars.Context.copy) is sentinel


def test_return_type_without_factories():
  assert TypeUniverse().return_type(contextvars.copy_context) is None


def test_return_type_from_annotations(universe):
  assert universe.return_type(_annotated_factory) is universe.type_of(contextvars.Context)
  assert universe.return_type(_unannotated_factory) is None


def test_unimportable_factory_skipped():
  recorder = Console(record=True, file=io.StringIO(), width=200)
  set_console(recorder)
  universe = TypeUniverse(factories={"ctxlint_no_such_module.make": "contextvars:Context"})

  assert universe.return_type(contextvars.copy_context) is None
  assert "Skipping factory 'ctxlint_no_such_module.make'" in recorder.export_text()


@pytest.mark.parametrize(
  "spec, expected",
  [
    ("contextvars:Context", ("contextvars", "Context")),
    ("contextvars.Context", ("contextvars", "Context")),
    ("a.b.c:T", ("a.b.c", "T")),
    ("a.b.T", ("a.b", "T")),
  ],
)
def test_split_type_spec(spec, expected):
  assert split_type_spec(spec) == expected


@pytest.mark.parametrize("spec", ["Context", ":Context", "contextvars:", ""])
def test_split_type_spec_invalid(spec):
  with pytest.raises(ValueError):
    split_type_spec(spec)
