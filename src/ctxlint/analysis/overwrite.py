"""
Overwrite Detection.

Decides, per symbol group, whether the sentinel-typed variable is overwritten
in a way that discards its previous value:

- **Multiple overwrites**: two or more assignment events. Every event is reported.
- **Late overwrite**: exactly one assignment event, positioned after the
  symbol's first occurrence. That event is reported.

Anything else (no events, or a single event that is itself the first
occurrence) is clean. Ordering is pure source position; no liveness analysis is
attempted, so `ctx = derive(ctx)` counts as an overwrite.
"""

from typing import Iterable, List, Optional

from ctxlint.core.model import Diagnostic, Occurrence, SymbolGroup, TypeRef, identical


def assignment_events(group: SymbolGroup, sentinel: TypeRef) -> List[Occurrence]:
  """
  Selects the occurrences that reassign the symbol.

  A declaring binding (parameter or first assignment) introduces the symbol and
  is not an event.

  Returns:
      List[Occurrence]: Events in program order.
  """
  return [
    occ
    for occ in group.occurrences
    if occ.is_assign_target and not occ.is_definition and identical(occ.type_ref, sentinel)
  ]


def check_group(group: SymbolGroup, sentinel: TypeRef) -> Optional[Diagnostic]:
  """
  Applies the overwrite rules to one group.

  Returns:
      Diagnostic or None when the group is clean.
  """
  events = assignment_events(group, sentinel)
  first_pos = group.first_pos

  if len(events) >= 2:
    positions = tuple(e.position for e in events)
  elif len(events) == 1 and events[0].position > first_pos:
    positions = (events[0].position,)
  else:
    return None

  return Diagnostic(symbol=group.symbol, positions=positions, first_pos=first_pos)


def detect_overwrites(groups: Iterable[SymbolGroup], sentinel: TypeRef) -> List[Diagnostic]:
  """
  Runs `check_group` over every group.

  Returns:
      List[Diagnostic]: Sorted by (first position, symbol name).
  """
  diagnostics = []
  for group in groups:
    if group.symbol.is_discard:
      continue
    diag = check_group(group, sentinel)
    if diag is not None:
      diagnostics.append(diag)
  diagnostics.sort(key=lambda d: d.sort_key)
  return diagnostics
