"""
Source Unit Provider Interface.

The detection engine never parses or type-checks code itself. It consumes a
`SourceUnit` produced by a `SourceUnitProvider`: the parsed files of one unit
plus a `BindingTable` resolving every identifier node to its symbol, type and
position. The libcst-backed implementation lives in `ctxlint.core.loader`;
tests inject their own providers.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Tuple

import libcst as cst

from ctxlint.core.model import Binding, TypeRef
from ctxlint.core.universe import TypeUniverse


class BindingTable:
  """
  Maps identifier nodes (by identity) to their `Binding`.
  """

  def __init__(self) -> None:
    self._bindings: Dict[cst.CSTNode, Binding] = {}

  def record(self, node: cst.CSTNode, binding: Binding) -> None:
    """
    Associates an identifier node with its binding.

    Args:
        node: The `cst.Name` node.
        binding: The resolved binding.
    """
    self._bindings[node] = binding

  def get(self, node: cst.CSTNode) -> Optional[Binding]:
    """Returns the binding for a node, or None for non-binding references."""
    return self._bindings.get(node)

  def __len__(self) -> int:
    return len(self._bindings)

  def __iter__(self) -> Iterator[Tuple[cst.CSTNode, Binding]]:
    return iter(self._bindings.items())


@dataclass(frozen=True)
class SourceFile:
  """One parsed file of a unit."""

  index: int
  path: Path
  display_name: str
  module: cst.Module


@dataclass
class SourceUnit:
  """
  One analyzed unit: its files in provider-assigned order, their bindings, and
  the type universe the bindings were resolved against.
  """

  identifier: str
  files: List[SourceFile] = field(default_factory=list)
  bindings: BindingTable = field(default_factory=BindingTable)
  universe: TypeUniverse = field(default_factory=TypeUniverse)


class SourceUnitProvider(Protocol):
  """
  Protocol for loading units and resolving the sentinel type.
  """

  def load_unit(self, identifier: str, base_dir: Path) -> SourceUnit:
    """
    Locates, parses and binds one unit.

    Raises:
        LoadError: If the unit cannot be located or parsed.
        TypeCheckError: If the unit fails semantic checking.
    """
    ...

  def resolve_type(self, unit: SourceUnit, module: str, type_name: str) -> TypeRef:
    """
    Resolves the sentinel type in the unit's type universe.

    Raises:
        UnresolvedModuleError: If the module cannot be imported.
        UnresolvedTypeError: If the module lacks the type.
    """
    ...
