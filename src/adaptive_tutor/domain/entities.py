"""Domain entities for the adaptive tutor.

``UserModel`` is the single piece of shared mutable state threaded through a
learning cycle.  It is owned by the caller; the pipeline mutates
``mastery`` (once, after evaluation) and ``generated_subtopics`` (on every
planning pass) in place and never discards it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .enums import Level
from .values import Subtopic


def mean_mastery(mastery: Mapping[str, float], concepts: Sequence[str]) -> float:
    """Mean of *mastery* over *concepts*; unknown concepts count as 0.0."""
    if not concepts:
        return 0.0
    return sum(mastery.get(c, 0.0) for c in concepts) / len(concepts)


@dataclass
class UserModel:
    """The learner: chosen topic, declared level, and per-concept mastery."""

    topic: str
    level: Level = Level.BEGINNER
    user_id: str = ""
    mastery: dict[str, float] = field(default_factory=dict)
    history: dict[str, Any] = field(default_factory=dict)
    generated_subtopics: tuple[Subtopic, ...] | None = None

    def __post_init__(self) -> None:
        if isinstance(self.level, str):
            self.level = Level(self.level.lower())
        if self.mastery is None:
            self.mastery = {}
        if self.history is None:
            self.history = {}

    def mastery_for(self, concepts: tuple[str, ...] | list[str]) -> float:
        """Mean mastery over *concepts*; unknown concepts count as 0.0."""
        return mean_mastery(self.mastery, concepts)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "userId": self.user_id,
            "topic": self.topic,
            "level": self.level.value,
            "mastery": dict(self.mastery),
            "history": dict(self.history),
        }
        if self.generated_subtopics is not None:
            d["generatedSubtopics"] = [s.to_dict() for s in self.generated_subtopics]
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UserModel:
        subtopics = data.get("generatedSubtopics")
        return cls(
            topic=str(data.get("topic") or ""),
            level=Level(str(data.get("level") or "beginner").lower()),
            user_id=str(data.get("userId") or data.get("user_id") or ""),
            mastery={str(k): float(v) for k, v in (data.get("mastery") or {}).items()},
            history=dict(data.get("history") or {}),
            generated_subtopics=(
                tuple(Subtopic.from_dict(s) for s in subtopics)
                if subtopics is not None
                else None
            ),
        )
