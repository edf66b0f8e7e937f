"""
Occurrence Matching.

Traverses a module and collects every identifier whose resolved type is the
sentinel type. Two predicates drive the match:

1.  `is_sentinel(type_ref)`: type identity against the sentinel descriptor.
2.  Whether the identifier is the target of an assignment statement
    (`=`, annotated `=`, `op=`, `:=`), including tuple/list unpacking.

Every `Name` node is visited (parameters, targets and loads alike); nodes
without a binding (attribute names, keywords, definitions) are ignored.
"""

from typing import Callable, Iterable, List, Optional, Set

import libcst as cst

from ctxlint.core.model import Occurrence, TypeRef, identical
from ctxlint.core.provider import BindingTable


class OccurrenceMatcher(cst.CSTVisitor):
  """
  Collects sentinel-typed occurrences from one or more modules.
  """

  def __init__(self, bindings: BindingTable, is_sentinel: Callable[[Optional[TypeRef]], bool]):
    """
    Initializes the matcher.

    Args:
        bindings: Binding table of the unit.
        is_sentinel: Type predicate.
    """
    self.bindings = bindings
    self.is_sentinel = is_sentinel
    self.occurrences: List[Occurrence] = []
    self._targets: Set[cst.Name] = set()

  # --- Assignment Targets ---

  def visit_AssignTarget(self, node: cst.AssignTarget) -> None:
    self._mark_target(node.target)

  def visit_AnnAssign(self, node: cst.AnnAssign) -> None:
    if node.value is not None:
      self._mark_target(node.target)

  def visit_AugAssign(self, node: cst.AugAssign) -> None:
    self._mark_target(node.target)

  def visit_NamedExpr(self, node: cst.NamedExpr) -> None:
    self._mark_target(node.target)

  def _mark_target(self, target: cst.BaseExpression) -> None:
    """
    Records the plain names bound by a target expression.
    Recurses for tuple unpacking; attribute and subscript targets bind no name.
    """
    if isinstance(target, cst.Name):
      self._targets.add(target)
    elif isinstance(target, (cst.Tuple, cst.List)):
      for element in target.elements:
        self._mark_target(element.value)

  # --- Identifiers ---

  def visit_Name(self, node: cst.Name) -> None:
    binding = self.bindings.get(node)
    if binding is None or binding.symbol is None:
      return
    if not self.is_sentinel(binding.type_ref):
      return
    self.occurrences.append(
      Occurrence(
        symbol=binding.symbol,
        type_ref=binding.type_ref,
        position=binding.position,
        is_assign_target=node in self._targets,
        is_definition=binding.is_definition,
      )
    )


def match_occurrences(modules: Iterable[cst.Module], bindings: BindingTable, sentinel: TypeRef) -> List[Occurrence]:
  """
  Finds all occurrences typed as the sentinel, in program order.

  Args:
      modules: Parsed modules of the unit, in file index order.
      bindings: Binding table covering those modules.
      sentinel: The sentinel type descriptor.

  Returns:
      List[Occurrence]: Sorted by position.
  """
  matcher = OccurrenceMatcher(bindings, lambda ref: identical(ref, sentinel))
  for module in modules:
    module.visit(matcher)
  return sorted(matcher.occurrences, key=lambda o: o.position)
