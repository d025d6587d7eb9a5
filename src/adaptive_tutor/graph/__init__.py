"""LangGraph-native learning cycle.

Public API
----------
build_learning_cycle_graph
    Build and compile the plan -> lesson -> quiz -> evaluate -> adapt -> replan graph.
CycleState
    The TypedDict state flowing through the graph.

Edge functions:
    route_entry, route_after_quiz
"""

from adaptive_tutor.graph.edges import route_after_quiz, route_entry
from adaptive_tutor.graph.graph import build_learning_cycle_graph
from adaptive_tutor.graph.state import CycleState

__all__ = [
    "build_learning_cycle_graph",
    "CycleState",
    "route_after_quiz",
    "route_entry",
]
