from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Lesson:
    title: str = ""
    is_completed: bool = False


@dataclass(frozen=True, slots=True)
class Quiz:
    title: str = ""
    completed_at: datetime | None = None
    score: float | None = None  # 0-100

    @property
    def is_completed(self) -> bool:
        # A quiz only counts once it has both a completion time and a score.
        return self.completed_at is not None and self.score is not None


@dataclass(frozen=True, slots=True)
class Course:
    """Read-only snapshot of a course document at request time."""

    id: str
    title: str = ""
    lessons: tuple[Lesson, ...] = ()
    quizzes: tuple[Quiz, ...] = ()
    progress: float | None = None  # 0-100, authoritative when present
    topics: tuple[str, ...] = ()
    created_at: datetime | None = None
    last_accessed: datetime | None = None

    @property
    def completed_lesson_count(self) -> int:
        return sum(1 for lesson in self.lessons if lesson.is_completed)

    @property
    def completed_quizzes(self) -> list[Quiz]:
        return [quiz for quiz in self.quizzes if quiz.is_completed]
