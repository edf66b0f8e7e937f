"""
Type Binding Analysis.

This module provides a static analysis pass that assigns a type to every variable
symbol of a module, so that later stages can ask "is this identifier a Context?"
by type identity rather than by its lexical name.

The `TypeBinder` visitor tracks:
1.  **Declarations**: Parameter and annotated-assignment annotations.
2.  **Assignments**: Propagating types from RHS to LHS for undeclared symbols
    (the first assignment decides, like a static checker's inference).
3.  **Calls**: Return types of local functions, imported callables, configured
    factories, class instantiation and methods of typed receivers.
4.  **Aliases**: Module level `Ctx = contextvars.Context` style type aliases.

Scopes and qualified names come from libcst's `ScopeProvider` and
`QualifiedNameProvider`; runtime names are resolved through the unit's
`TypeUniverse`.
"""

from typing import Dict, List, Optional, Set

import libcst as cst
from libcst.metadata import (
  Assignment,
  QualifiedName,
  QualifiedNameProvider,
  QualifiedNameSource,
  Scope,
  ScopeProvider,
)

from ctxlint.core.model import Symbol, TypeRef
from ctxlint.core.universe import TypeUniverse


def symbol_for(scope: Optional[Scope], name: str) -> Optional[Symbol]:
  """
  Resolves a name visible from a scope to the symbol it refers to.

  Args:
      scope: The scope the name appears in.
      name: Variable identifier.

  Returns:
      The Symbol keyed by the scope owning the assignment, or None for
      builtins and undefined names.
  """
  if scope is None or name not in scope:
    return None
  for assignment in scope[name]:
    if isinstance(assignment, Assignment):
      return Symbol(assignment.scope, name)
  return None


class _DefinitionCollector(cst.CSTVisitor):
  """Collects every class and function definition of a module."""

  def __init__(self) -> None:
    self.classes: List[cst.ClassDef] = []
    self.functions: List[cst.FunctionDef] = []

  def visit_ClassDef(self, node: cst.ClassDef) -> None:
    self.classes.append(node)

  def visit_FunctionDef(self, node: cst.FunctionDef) -> None:
    self.functions.append(node)


class TypeBinder(cst.CSTVisitor):
  """
  Static Analysis pass populating `symbol_types`.

  Runs post-order logic (via leave methods) to propagate expression types
  bottom-up. Must be run through a `MetadataWrapper`.
  """

  METADATA_DEPENDENCIES = (ScopeProvider, QualifiedNameProvider)

  def __init__(self, universe: TypeUniverse, file_key: str):
    """
    Initializes the binder.

    Args:
        universe: Type universe of the unit being analyzed.
        file_key: Unique key of the file, used to intern local classes.
    """
    super().__init__()
    self.universe = universe
    self.file_key = file_key
    self.symbol_types: Dict[Symbol, TypeRef] = {}
    self._declared: Set[Symbol] = set()
    self._node_types: Dict[cst.CSTNode, TypeRef] = {}
    self._local_classes: Dict[str, TypeRef] = {}
    self._local_returns: Dict[str, cst.BaseExpression] = {}
    self._aliases: Dict[str, TypeRef] = {}

  def get_type(self, node: cst.CSTNode) -> Optional[TypeRef]:
    """
    Retrieves the inferred instance type of an expression node.

    Args:
        node: The CST node to inspect.

    Returns:
        The TypeRef or None.
    """
    return self._node_types.get(node)

  # --- Definitions ---

  def visit_Module(self, node: cst.Module) -> None:
    """
    Registers local classes and function return annotations up front, so calls
    inside function bodies may precede the definition they refer to.
    """
    collector = _DefinitionCollector()
    node.visit(collector)

    for class_def in collector.classes:
      for qname in self._qualified_names(class_def):
        key = f"{self.file_key}:{qname.name}"
        self._local_classes[qname.name] = self.universe.local_type(key, qname.name)

    for func in collector.functions:
      if func.returns is None:
        continue
      for qname in self._qualified_names(func):
        self._local_returns[qname.name] = func.returns.annotation

  # --- Declarations ---

  def visit_Param(self, node: cst.Param) -> None:
    """Declares annotated parameters."""
    if node.annotation:
      ref = self._annotation_type(node.annotation.annotation)
      if ref is not None:
        self._declare(node.name, ref)

  def leave_AnnAssign(self, node: cst.AnnAssign) -> None:
    """
    Declares annotated variables.
    `ctx: Context = ...` -> ctx is Context regardless of the value.
    """
    if not isinstance(node.target, cst.Name):
      return
    ref = self._annotation_type(node.annotation.annotation)
    if ref is not None:
      self._declare(node.target, ref)

  # --- Assignments ---

  def leave_Assign(self, node: cst.Assign) -> None:
    """
    Propagate type from RHS to LHS.
    ctx = derive(ctx) -> ctx is Context.
    """
    alias = self._class_alias(node.value)
    rhs_type = self._node_types.get(node.value)

    for target in node.targets:
      self._bind_target(target.target, node.value, rhs_type, alias)

  def leave_NamedExpr(self, node: cst.NamedExpr) -> None:
    """Walrus assignment: `(ctx := derive(ctx))`."""
    ref = self._node_types.get(node.value)
    if ref is None:
      return
    if isinstance(node.target, cst.Name):
      self._infer(node.target, ref)
    self._node_types[node] = ref

  def _bind_target(
    self,
    target: cst.BaseExpression,
    value: cst.BaseExpression,
    rhs_type: Optional[TypeRef],
    alias: Optional[TypeRef],
  ) -> None:
    if isinstance(target, cst.Name):
      if alias is not None:
        for qname in self._qualified_names(target):
          self._aliases[qname.name] = alias
      elif rhs_type is not None:
        self._infer(target, rhs_type)
      return

    # a, b = x, y -> pairwise
    if isinstance(target, (cst.Tuple, cst.List)) and isinstance(value, (cst.Tuple, cst.List)):
      if len(target.elements) != len(value.elements):
        return
      for t_el, v_el in zip(target.elements, value.elements):
        if isinstance(t_el, cst.StarredElement) or isinstance(v_el, cst.StarredElement):
          return
        self._bind_target(t_el.value, v_el.value, self._node_types.get(v_el.value), None)

  # --- Expressions ---

  def leave_Name(self, node: cst.Name) -> None:
    """Look up the variable's symbol type."""
    symbol = self._symbol_of(node)
    if symbol is None:
      return
    ref = self.symbol_types.get(symbol)
    if ref is not None:
      self._node_types[node] = ref

  def leave_Call(self, node: cst.Call) -> None:
    """Infer the return type of a call."""
    ref = self._call_type(node)
    if ref is not None:
      self._node_types[node] = ref

  def leave_Await(self, node: cst.Await) -> None:
    """`await make()` has the declared return type of `make`."""
    ref = self._node_types.get(node.expression)
    if ref is not None:
      self._node_types[node] = ref

  def leave_IfExp(self, node: cst.IfExp) -> None:
    """`a if c else b` is typed only when both branches agree."""
    t1 = self._node_types.get(node.body)
    t2 = self._node_types.get(node.orelse)
    if t1 is not None and t1 is t2:
      self._node_types[node] = t1

  def _call_type(self, node: cst.Call) -> Optional[TypeRef]:
    func = node.func

    # Method on a typed receiver: ctx.copy()
    if isinstance(func, cst.Attribute):
      receiver = self._node_types.get(func.value)
      if receiver is not None:
        return self._method_type(receiver, func.attr.value)

    for qname in self._qualified_names(func):
      if qname.source == QualifiedNameSource.LOCAL:
        ref = self._local_classes.get(qname.name) or self._aliases.get(qname.name)
        if ref is not None:
          return ref
        returns = self._local_returns.get(qname.name)
        if returns is not None:
          return self._annotation_type(returns)
      else:
        obj = self.universe.lookup(qname.name)
        if obj is not None:
          ref = self.universe.return_type(obj)
          if ref is not None:
            return ref
    return None

  def _method_type(self, receiver: TypeRef, method: str) -> Optional[TypeRef]:
    if receiver.origin is not None:
      attr = getattr(receiver.origin, method, None)
      if attr is None:
        return None
      return self.universe.return_type(attr)

    # Class defined in this file
    if self._local_classes.get(receiver.name) is receiver:
      returns = self._local_returns.get(f"{receiver.name}.{method}")
      if returns is not None:
        return self._annotation_type(returns)
    return None

  # --- Resolution Helpers ---

  def _annotation_type(self, expr: cst.BaseExpression) -> Optional[TypeRef]:
    """
    Resolves an annotation expression to the instance type it denotes.
    String annotations and subscripted generics are not resolved.
    """
    if not isinstance(expr, (cst.Name, cst.Attribute)):
      return None
    for qname in self._qualified_names(expr):
      ref = self._class_ref(qname)
      if ref is not None:
        return ref
    return None

  def _class_alias(self, value: cst.BaseExpression) -> Optional[TypeRef]:
    """Returns the type when `value` names a class rather than an instance."""
    if not isinstance(value, (cst.Name, cst.Attribute)):
      return None
    for qname in self._qualified_names(value):
      ref = self._class_ref(qname)
      if ref is not None:
        return ref
    return None

  def _class_ref(self, qname: QualifiedName) -> Optional[TypeRef]:
    if qname.source == QualifiedNameSource.LOCAL:
      return self._local_classes.get(qname.name) or self._aliases.get(qname.name)
    obj = self.universe.lookup(qname.name)
    if isinstance(obj, type):
      return self.universe.type_of(obj)
    return None

  def _qualified_names(self, node: cst.CSTNode) -> List[QualifiedName]:
    qnames = self.get_metadata(QualifiedNameProvider, node, set())
    return sorted(qnames, key=lambda q: (q.name, q.source.value))

  def _symbol_of(self, node: cst.Name) -> Optional[Symbol]:
    scope = self.get_metadata(ScopeProvider, node, None)
    return symbol_for(scope, node.value)

  def _declare(self, node: cst.Name, ref: TypeRef) -> None:
    symbol = self._symbol_of(node)
    if symbol is None or symbol in self._declared:
      return
    self.symbol_types[symbol] = ref
    self._declared.add(symbol)

  def _infer(self, node: cst.Name, ref: TypeRef) -> None:
    symbol = self._symbol_of(node)
    if symbol is None or symbol in self.symbol_types:
      return
    self.symbol_types[symbol] = ref
