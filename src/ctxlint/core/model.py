"""
Analysis Data Model.

Immutable records passed between the pipeline stages:

1.  **Position**: A point in a unit's program order (file index, byte offset),
    carrying display coordinates for reporting.
2.  **TypeRef**: An opaque type descriptor compared by identity.
3.  **Symbol**: A declared variable, keyed by (scope, name).
4.  **Binding / Occurrence**: Resolved identifier references.
5.  **SymbolGroup / Diagnostic**: Grouped occurrences and reported hazards.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

DISCARD_NAME = "_"
"""The blank identifier. Never grouped or reported."""

OVERWRITE = "Overwrite"
"""Diagnostic kind emitted by the overwrite detector."""


@dataclass(frozen=True, order=True)
class Position:
  """
  A location in program order.

  Only `file_index` and `offset` take part in equality and ordering, so
  positions from different files of one unit compare by the provider-assigned
  file index rather than by file name.
  """

  file_index: int
  offset: int
  filename: str = field(default="", compare=False)
  line: int = field(default=0, compare=False)
  column: int = field(default=0, compare=False)

  def __str__(self) -> str:
    return f"{self.filename}:{self.line}:{self.column}"


@dataclass(frozen=True, eq=False)
class TypeRef:
  """
  Resolved type descriptor.

  Instances are interned by a `TypeUniverse`; two references denote the same
  type iff they are the same object. `name` is informational only.
  """

  name: str
  origin: Any = None
  """The runtime class, or None for classes defined inside an analyzed file."""

  def __str__(self) -> str:
    return self.name


def identical(a: Optional[TypeRef], b: Optional[TypeRef]) -> bool:
  """Type identity. Unknown types are never identical to anything."""
  return a is not None and a is b


@dataclass(frozen=True)
class Symbol:
  """
  Identity of a declared variable.

  `scope` is compared by identity, so equally named variables in different
  functions are distinct symbols.
  """

  scope: Any
  name: str

  @property
  def is_discard(self) -> bool:
    return self.name == DISCARD_NAME


@dataclass(frozen=True)
class Binding:
  """Binding-table entry for a single identifier node."""

  symbol: Optional[Symbol]
  type_ref: Optional[TypeRef]
  position: Position
  is_definition: bool = False


@dataclass(frozen=True)
class Occurrence:
  """A sentinel-typed identifier reference."""

  symbol: Symbol
  type_ref: TypeRef
  position: Position
  is_assign_target: bool = False
  is_definition: bool = False


@dataclass(frozen=True)
class SymbolGroup:
  """All sentinel-typed occurrences of one symbol, in program order."""

  symbol: Symbol
  occurrences: Tuple[Occurrence, ...]

  @property
  def first_pos(self) -> Position:
    return min(o.position for o in self.occurrences)


@dataclass(frozen=True)
class Diagnostic:
  """A reported hazard for one symbol group."""

  symbol: Symbol
  positions: Tuple[Position, ...]
  first_pos: Position
  kind: str = OVERWRITE

  @property
  def sort_key(self) -> Tuple[Position, str]:
    return (self.first_pos, self.symbol.name)
