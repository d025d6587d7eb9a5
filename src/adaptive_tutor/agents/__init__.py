"""Agent layer: the cycle orchestrator and its result types.

Re-exports public types for convenient top-level access::

    from adaptive_tutor.agents import (
        CycleOrchestrator,
        QuizReadyResult,
        EvaluationCompleteResult,
    )
"""

from adaptive_tutor.agents.cycle import (
    CycleOrchestrator,
    CycleResult,
    EvaluationCompleteResult,
    QuizReadyResult,
)

__all__ = [
    "CycleOrchestrator",
    "CycleResult",
    "EvaluationCompleteResult",
    "QuizReadyResult",
]
