"""Planning results as a tagged union.

``PlanResult`` is one of:

* :class:`SubtopicStringResult` -- the plan *is* the next subtopic.
* :class:`CurriculumResult` -- the full five-step planning output.
* :class:`SubtopicMapResult` -- only the subtopic map (first pass of a cycle).

:func:`extract_next_subtopic` resolves the subtopic to teach next with a
fixed precedence: string, then curriculum (subtopic, else title), then
subtopic map (name, else id).  Loosely shaped mappings produced by older
callers are accepted through :func:`coerce_plan`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from .values import CurriculumEntry, Subtopic, WeaknessAnalysis


@dataclass(frozen=True)
class SubtopicStringResult:
    """A plan that names the next subtopic directly."""

    subtopic: str

    def to_dict(self) -> dict[str, Any]:
        return {"subtopic": self.subtopic}


@dataclass(frozen=True)
class SubtopicMapResult:
    """A plan carrying only the subject's subtopic map."""

    subject: str
    subtopic_map: tuple[Subtopic, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "subtopicMap": [s.to_dict() for s in self.subtopic_map],
            "usedFinalTest": False,
        }


@dataclass(frozen=True)
class CurriculumResult:
    """Output of all five planning sub-calls."""

    subject: str
    subtopic_map: tuple[Subtopic, ...]
    weakness_analysis: WeaknessAnalysis
    draft: tuple[CurriculumEntry, ...]
    optimized: tuple[CurriculumEntry, ...]
    curriculum: tuple[CurriculumEntry, ...]
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "subtopicMap": [s.to_dict() for s in self.subtopic_map],
            "weaknessAnalysis": self.weakness_analysis.to_dict(),
            "curriculum": [c.to_dict() for c in self.curriculum],
            "notes": self.notes,
            "usedFinalTest": True,
        }


PlanResult = Union[SubtopicStringResult, CurriculumResult, SubtopicMapResult]


# -- per-variant extraction --------------------------------------------------


def _from_string(plan: SubtopicStringResult) -> str | None:
    return plan.subtopic or None


def _from_curriculum(plan: CurriculumResult) -> str | None:
    if plan.curriculum:
        return plan.curriculum[0].label or None
    return _from_subtopic_map(plan.subtopic_map)


def _from_subtopic_map(subtopics: tuple[Subtopic, ...]) -> str | None:
    if subtopics:
        return subtopics[0].label or None
    return None


def coerce_plan(plan: Any) -> PlanResult | None:
    """Turn a string or loosely shaped mapping into a :data:`PlanResult`.

    Mappings are inspected for ``curriculum``, ``subtopicMap`` and
    ``subtopics`` keys in that order.  Returns ``None`` when nothing usable
    is present.
    """
    if plan is None:
        return None
    if isinstance(plan, (SubtopicStringResult, CurriculumResult, SubtopicMapResult)):
        return plan
    if isinstance(plan, str):
        return SubtopicStringResult(subtopic=plan)
    if not isinstance(plan, Mapping):
        return None

    subject = str(plan.get("subject") or "")
    curriculum = _entries(plan.get("curriculum"))
    if curriculum:
        return CurriculumResult(
            subject=subject,
            subtopic_map=_subtopics(plan.get("subtopicMap") or plan.get("subtopics")),
            weakness_analysis=WeaknessAnalysis(),
            draft=(),
            optimized=(),
            curriculum=curriculum,
            notes=str(plan.get("notes") or ""),
        )
    for key in ("subtopicMap", "subtopics"):
        subtopics = _subtopics(plan.get(key))
        if subtopics:
            return SubtopicMapResult(subject=subject, subtopic_map=subtopics)
    return None


def _subtopics(raw: Any) -> tuple[Subtopic, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    return tuple(Subtopic.from_dict(s) for s in raw if isinstance(s, Mapping))


def _entries(raw: Any) -> tuple[CurriculumEntry, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    return tuple(CurriculumEntry.from_dict(c) for c in raw if isinstance(c, Mapping))


def extract_next_subtopic(plan: Any) -> str | None:
    """Resolve the subtopic to teach next, or ``None`` when nothing is usable."""
    resolved = coerce_plan(plan)
    if isinstance(resolved, SubtopicStringResult):
        return _from_string(resolved)
    if isinstance(resolved, CurriculumResult):
        return _from_curriculum(resolved)
    if isinstance(resolved, SubtopicMapResult):
        return _from_subtopic_map(resolved.subtopic_map)
    return None


def plan_to_dict(plan: PlanResult | None) -> Any:
    if plan is None:
        return None
    return plan.to_dict()
