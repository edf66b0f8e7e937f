"""
LibCST Source Unit Provider.

Loads a unit (a package directory, a single module file, or a dotted module
name relative to the base directory), parses each file with libcst, runs a
semantic check through the standard `symtable` module, and builds the binding
table from libcst scope metadata and the `TypeBinder` results.

Files of a package are ordered by name; their position in that order is the
file index used for program ordering.
"""

import symtable
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import libcst as cst
from libcst.metadata import (
  Assignment,
  ByteSpanPositionProvider,
  ImportAssignment,
  MetadataWrapper,
  PositionProvider,
  ScopeProvider,
)

from ctxlint.core.binder import TypeBinder, symbol_for
from ctxlint.core.errors import LoadError, TypeCheckError
from ctxlint.core.model import Binding, Position, Symbol, TypeRef
from ctxlint.core.provider import SourceFile, SourceUnit
from ctxlint.core.universe import TypeUniverse
from ctxlint.utils.console import log_debug


def is_test_file(path: Path) -> bool:
  """Returns True for `test_*.py` and `*_test.py` files."""
  return path.name.startswith("test_") or path.stem.endswith("_test")


def display_name(path: Path, base_dir: Path) -> str:
  """Renders a path relative to the base directory when possible."""
  try:
    return str(path.resolve().relative_to(base_dir.resolve()))
  except ValueError:
    return str(path)


def _binding_name(node: cst.CSTNode) -> Optional[cst.Name]:
  """Extracts the identifier node of a variable binding site."""
  if isinstance(node, cst.Name):
    return node
  if isinstance(node, cst.Param):
    return node.name
  return None


class LibCSTProvider:
  """
  Default `SourceUnitProvider` implementation for Python sources.
  """

  def __init__(self, include_tests: bool = False, factories: Optional[Mapping[str, str]] = None):
    """
    Initializes the provider.

    Args:
        include_tests: If True, test files inside package directories are analyzed.
        factories: Return types for callables without annotations, passed to
            every unit's `TypeUniverse`.
    """
    self.include_tests = include_tests
    self.factories = dict(factories or {})

  # --- Locating ---

  def locate(self, identifier: str, base_dir: Path) -> List[Path]:
    """
    Resolves a unit identifier to its ordered list of source files.

    Args:
        identifier: A directory, a `.py` file, or a dotted module name.
        base_dir: Directory relative identifiers are resolved against.

    Returns:
        List[Path]: Source files sorted by name.

    Raises:
        LoadError: If nothing matches or the package has no sources.
    """
    candidates = [Path(identifier) if Path(identifier).is_absolute() else base_dir / identifier]
    if identifier.replace(".", "").replace("_", "").isalnum():
      dotted = base_dir / Path(*identifier.split("."))
      candidates += [dotted, dotted.with_name(dotted.name + ".py")]

    for candidate in candidates:
      if candidate.is_dir():
        files = sorted(p for p in candidate.glob("*.py") if p.is_file())
        if not self.include_tests:
          files = [p for p in files if not is_test_file(p)]
        if not files:
          raise LoadError(f"no Python source files in {candidate}")
        return files
      if candidate.is_file() and candidate.suffix == ".py":
        return [candidate]

    raise LoadError(f"cannot find unit '{identifier}' in {base_dir}")

  # --- Provider Protocol ---

  def load_unit(self, identifier: str, base_dir: Path) -> SourceUnit:
    """
    Locates, parses, checks and binds one unit.

    Raises:
        LoadError: If the unit cannot be located, read or parsed.
        TypeCheckError: If a file fails semantic checking.
    """
    paths = self.locate(identifier, base_dir)
    universe = TypeUniverse(search_paths=[base_dir.resolve()], factories=self.factories)
    unit = SourceUnit(identifier=identifier, universe=universe)

    for index, path in enumerate(paths):
      name = display_name(path, base_dir)
      source = self._read(path, name)
      module = self._parse(source, name)
      self._check(source, path, name)

      wrapper = MetadataWrapper(module)
      self._bind(wrapper, index, name, unit)
      unit.files.append(SourceFile(index=index, path=path, display_name=name, module=wrapper.module))

    log_debug(f"Loaded unit '{identifier}': {len(unit.files)} files, {len(unit.bindings)} bindings")
    return unit

  def resolve_type(self, unit: SourceUnit, module: str, type_name: str) -> TypeRef:
    """Resolves the sentinel in the unit's own universe."""
    return unit.universe.resolve_type(module, type_name)

  # --- Stages ---

  def _read(self, path: Path, name: str) -> str:
    try:
      return path.read_text("utf-8")
    except (OSError, UnicodeDecodeError) as e:
      raise LoadError(f"{name}: {e}") from e

  def _parse(self, source: str, name: str) -> cst.Module:
    try:
      return cst.parse_module(source)
    except cst.ParserSyntaxError as e:
      raise LoadError(f"{name}:{e.editor_line}:{e.editor_column}: {e.message}") from e

  def _check(self, source: str, path: Path, name: str) -> None:
    try:
      symtable.symtable(source, str(path), "exec")
    except SyntaxError as e:
      raise TypeCheckError(f"{name}:{e.lineno}: {e.msg}") from e

  def _bind(self, wrapper: MetadataWrapper, index: int, name: str, unit: SourceUnit) -> None:
    binder = TypeBinder(unit.universe, file_key=f"{index}:{name}")
    wrapper.visit(binder)

    scopes = {s for s in wrapper.resolve(ScopeProvider).values() if s is not None}
    spans = wrapper.resolve(ByteSpanPositionProvider)
    ranges = wrapper.resolve(PositionProvider)

    def position(node: cst.CSTNode) -> Position:
      start = ranges[node].start
      return Position(index, spans[node].start, name, start.line, start.column + 1)

    # Binding sites: parameters and assignment targets
    sites: List[Tuple[Symbol, cst.Name, Position]] = []
    for scope in scopes:
      for assignment in scope.assignments:
        if not isinstance(assignment, Assignment) or isinstance(assignment, ImportAssignment):
          continue
        node = _binding_name(assignment.node)
        if node is None:
          continue
        symbol = Symbol(assignment.scope, assignment.name)
        sites.append((symbol, node, position(node)))

    declared_at: Dict[Symbol, Position] = {}
    for symbol, _, pos in sites:
      if symbol not in declared_at or pos < declared_at[symbol]:
        declared_at[symbol] = pos

    for symbol, node, pos in sites:
      binding = Binding(symbol, binder.symbol_types.get(symbol), pos, is_definition=pos == declared_at[symbol])
      unit.bindings.record(node, binding)

    # References
    for scope in scopes:
      for access in scope.accesses:
        node = access.node
        if not isinstance(node, cst.Name):
          continue
        symbol = symbol_for(access.scope, node.value)
        if symbol is None:
          continue
        unit.bindings.record(node, Binding(symbol, binder.symbol_types.get(symbol), position(node)))
