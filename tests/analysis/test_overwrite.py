"""
Tests for the Overwrite Detector.

Covers:
1.  Multiple overwrites: every event reported.
2.  Late overwrite: a single event after the first occurrence.
3.  Clean groups: no events, or the only event is the first occurrence.
"""

from ctxlint.analysis.overwrite import assignment_events, check_group, detect_overwrites
from ctxlint.core.model import Occurrence, Position, Symbol, SymbolGroup, TypeRef

SENTINEL = TypeRef(name="Context")
OTHER = TypeRef(name="Context")


def occ(offset, assign=False, definition=False, type_ref=SENTINEL, name="ctx", scope="f"):
  return Occurrence(
    symbol=Symbol(scope, name),
    type_ref=type_ref,
    position=Position(0, offset),
    is_assign_target=assign,
    is_definition=definition,
  )


def group(*occurrences):
  return SymbolGroup(symbol=occurrences[0].symbol, occurrences=tuple(occurrences))


def test_rule_a_two_reassignments_after_parameter():
  """
  Scenario: def f(ctx): ctx = derive(ctx); ctx = derive(ctx)
  Expectation: Both reassignments, not the parameter.
  """
  g = group(
    occ(0, definition=True),
    occ(10, assign=True),
    occ(18),
    occ(30, assign=True),
    occ(38),
  )
  diag = check_group(g, SENTINEL)

  assert diag is not None
  assert diag.kind == "Overwrite"
  assert [p.offset for p in diag.positions] == [10, 30]
  assert diag.first_pos == Position(0, 0)


def test_rule_a_reports_every_event_in_order():
  g = group(occ(0, definition=True), occ(5, assign=True), occ(9, assign=True), occ(14, assign=True))
  diag = check_group(g, SENTINEL)
  assert [p.offset for p in diag.positions] == [5, 9, 14]


def test_rule_a_when_declaring_assignment_is_first():
  """
  Scenario: ctx = new(); ctx = a(); ctx = b()
  Expectation: The declaring assignment is not an event; the two later ones are.
  """
  g = group(occ(0, assign=True, definition=True), occ(20, assign=True), occ(40, assign=True))
  diag = check_group(g, SENTINEL)
  assert [p.offset for p in diag.positions] == [20, 40]


def test_rule_b_single_late_overwrite():
  """
  Scenario: ctx = new(); use(ctx); ctx = new()
  Expectation: Exactly the later reassignment.
  """
  g = group(occ(0, assign=True, definition=True), occ(12), occ(30, assign=True))
  diag = check_group(g, SENTINEL)
  assert [p.offset for p in diag.positions] == [30]


def test_single_event_at_first_pos_is_clean():
  """
  An event that is itself the first occurrence introduces nothing to discard.
  """
  g = group(occ(0, assign=True), occ(8))
  assert check_group(g, SENTINEL) is None


def test_no_events_is_clean():
  g = group(occ(0, definition=True), occ(10), occ(20))
  assert check_group(g, SENTINEL) is None


def test_events_require_identical_type():
  g = group(occ(0, definition=True), occ(10, assign=True, type_ref=OTHER), occ(20, assign=True, type_ref=OTHER))
  assert assignment_events(g, SENTINEL) == []
  assert check_group(g, SENTINEL) is None


def test_self_derived_reassignment_is_flagged():
  """
  Scenario: def f(ctx): ctx = derive(ctx)
  Expectation: Flagged. Reading the old value on the right hand side does not exempt it.
  """
  g = group(occ(0, definition=True), occ(10, assign=True), occ(22))
  diag = check_group(g, SENTINEL)
  assert [p.offset for p in diag.positions] == [10]


def test_detect_skips_discard_and_sorts():
  groups = [
    group(occ(50, definition=True, name="late"), occ(60, assign=True, name="late")),
    group(occ(0, definition=True, name="_"), occ(5, assign=True, name="_"), occ(7, assign=True, name="_")),
    group(occ(10, definition=True, name="early"), occ(20, assign=True, name="early")),
  ]
  diagnostics = detect_overwrites(groups, SENTINEL)
  assert [d.symbol.name for d in diagnostics] == ["early", "late"]


def test_detect_tie_break_by_name():
  groups = [
    group(occ(0, definition=True, name="b", scope="x"), occ(9, assign=True, name="b", scope="x")),
    group(occ(0, definition=True, name="a", scope="y"), occ(9, assign=True, name="a", scope="y")),
  ]
  diagnostics = detect_overwrites(groups, SENTINEL)
  assert [d.symbol.name for d in diagnostics] == ["a", "b"]
