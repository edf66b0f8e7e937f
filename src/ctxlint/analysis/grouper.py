"""
Symbol Grouping.

Partitions sentinel-typed occurrences by symbol identity (scope, name). The
discard name `_` never forms a group.
"""

from typing import Dict, Iterable, List

from ctxlint.core.model import Occurrence, Symbol, SymbolGroup


def group_occurrences(occurrences: Iterable[Occurrence]) -> List[SymbolGroup]:
  """
  Builds one group per symbol.

  Args:
      occurrences: Matched occurrences, any order.

  Returns:
      List[SymbolGroup]: Groups sorted by (first position, name), each holding
      its occurrences in program order.
  """
  buckets: Dict[Symbol, List[Occurrence]] = {}
  for occ in occurrences:
    if occ.symbol.is_discard:
      continue
    buckets.setdefault(occ.symbol, []).append(occ)

  groups = [
    SymbolGroup(symbol=symbol, occurrences=tuple(sorted(occs, key=lambda o: o.position)))
    for symbol, occs in buckets.items()
  ]
  groups.sort(key=lambda g: (g.first_pos, g.symbol.name))
  return groups
