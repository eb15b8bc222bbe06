from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.models.course import Course


@dataclass(frozen=True, slots=True)
class LearnerSnapshot:
    """Read-only view of a learner and their populated course lists.

    enrolled_courses: courses joined through the catalog
    courses: courses the learner generated themselves

    The streak fields are persisted state owned by the storage layer.
    Analytics only reads them and reports a projected streak.
    """

    user_id: str
    enrolled_courses: tuple[Course, ...] = ()
    courses: tuple[Course, ...] = ()
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: datetime | None = None

    @property
    def all_courses(self) -> list[Course]:
        # No dedup: catalog enrollment pushes a course into both lists and
        # every downstream count is defined against the doubled set.
        return [*self.enrolled_courses, *self.courses]
