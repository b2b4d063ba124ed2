"""Compile-time match plans."""

from .plan import MatchPlan, TypeTest, VariableSlot, NestedSlot, DiscardSlot
