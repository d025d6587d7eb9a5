"""Progress persistence collaborator.

The pipeline does not design a storage engine; it talks to a
:class:`ProgressStore` through a handful of opaque operations:

* read / write mastery per (user, topic)
* append-only quiz-attempt log
* append-only session (adaptation decision) log

:class:`InMemoryProgressStore` is the thread-safe reference implementation
used by tests, the CLI, and single-process deployments.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Protocol, runtime_checkable

from adaptive_tutor.domain.enums import Difficulty
from adaptive_tutor.domain.values import Problem, QuizAttempt, SessionRecord


@runtime_checkable
class ProgressStore(Protocol):
    """Operations the orchestrator and learning agent rely on."""

    def get_mastery(self, user_id: str, topic: str) -> dict[str, float]: ...

    def set_mastery(self, user_id: str, topic: str, mastery: dict[str, float]) -> None: ...

    def append_quiz_attempt(self, attempt: QuizAttempt) -> None: ...

    def recent_attempts(self, user_id: str, topic: str, limit: int = 5) -> list[QuizAttempt]: ...

    def append_session(self, session: SessionRecord) -> None: ...

    def sessions(self, user_id: str, topic: str | None = None) -> list[SessionRecord]: ...


class InMemoryProgressStore:
    """Thread-safe in-memory :class:`ProgressStore`.

    Attempt and session logs are append-only; mastery is last-write-wins per
    (user, topic).
    """

    def __init__(self) -> None:
        self._mastery: dict[tuple[str, str], dict[str, float]] = {}
        self._attempts: list[QuizAttempt] = []
        self._sessions: list[SessionRecord] = []
        self._lock = threading.Lock()

    # -- mastery --------------------------------------------------------------

    def get_mastery(self, user_id: str, topic: str) -> dict[str, float]:
        with self._lock:
            return dict(self._mastery.get((user_id, topic), {}))

    def set_mastery(self, user_id: str, topic: str, mastery: dict[str, float]) -> None:
        with self._lock:
            self._mastery[(user_id, topic)] = dict(mastery)

    # -- logs -----------------------------------------------------------------

    def append_quiz_attempt(self, attempt: QuizAttempt) -> None:
        with self._lock:
            self._attempts.append(attempt)

    def recent_attempts(self, user_id: str, topic: str, limit: int = 5) -> list[QuizAttempt]:
        """Most recent attempts first."""
        with self._lock:
            matching = [
                a for a in self._attempts if a.user_id == user_id and a.topic == topic
            ]
        matching.sort(key=lambda a: a.timestamp, reverse=True)
        return matching[:limit]

    def append_session(self, session: SessionRecord) -> None:
        with self._lock:
            self._sessions.append(session)

    def sessions(self, user_id: str, topic: str | None = None) -> list[SessionRecord]:
        with self._lock:
            return [
                s for s in self._sessions
                if s.user_id == user_id and (topic is None or s.topic == topic)
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._attempts) + len(self._sessions)

    # -- serialization --------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                "mastery": [
                    {"user_id": u, "topic": t, "mastery": dict(m)}
                    for (u, t), m in self._mastery.items()
                ],
                "attempts": [
                    {
                        "user_id": a.user_id,
                        "topic": a.topic,
                        "quiz_id": a.quiz_id,
                        "score": a.score,
                        "correct_answers": a.correct_answers,
                        "total_questions": a.total_questions,
                        "answers": list(a.answers),
                        "timestamp": a.timestamp,
                    }
                    for a in self._attempts
                ],
                "sessions": [
                    {
                        "session_id": s.session_id,
                        "user_id": s.user_id,
                        "topic": s.topic,
                        "decision": s.decision,
                        "feedback": s.feedback,
                        "follow_up_problems": [p.to_dict() for p in s.follow_up_problems],
                        "rationale": s.rationale,
                        "timestamp": s.timestamp,
                    }
                    for s in self._sessions
                ],
            }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InMemoryProgressStore:
        store = cls()
        for m in data.get("mastery", []):
            store._mastery[(m["user_id"], m["topic"])] = dict(m.get("mastery", {}))
        for a in data.get("attempts", []):
            store._attempts.append(
                QuizAttempt(
                    user_id=a["user_id"],
                    topic=a["topic"],
                    quiz_id=a.get("quiz_id", ""),
                    score=a.get("score", 0.0),
                    correct_answers=a.get("correct_answers", 0),
                    total_questions=a.get("total_questions", 0),
                    answers=tuple(a.get("answers", ())),
                    timestamp=a.get("timestamp", 0.0),
                )
            )
        for s in data.get("sessions", []):
            store._sessions.append(
                SessionRecord(
                    user_id=s["user_id"],
                    topic=s["topic"],
                    decision=s.get("decision", ""),
                    feedback=s.get("feedback", ""),
                    follow_up_problems=tuple(
                        Problem(
                            problem=p.get("problem", ""),
                            topic=p.get("topic", ""),
                            difficulty=Difficulty(p.get("difficulty", "medium")),
                            hint=p.get("hint"),
                        )
                        for p in s.get("follow_up_problems", [])
                    ),
                    rationale=s.get("rationale", ""),
                    session_id=s.get("session_id", ""),
                    timestamp=s.get("timestamp", 0.0),
                )
            )
        return store

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> InMemoryProgressStore:
        return cls.from_dict(json.loads(json_str))
