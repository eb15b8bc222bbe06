"""Achievement rules.

Each badge is one row in ACHIEVEMENT_RULES: which Overview metric it
reads, the minimum value for the badge to appear at all, and whether
progress scales with the metric or is a flat 100.

Rules are evaluated in table order. A rule below its threshold is left
out of the result entirely (it is not reported at 0%).

There is no stored unlock history, so every badge that qualifies is
stamped as unlocked at evaluation time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from app.models.analytics import Achievement, CourseProgressEntry, Overview
from app.services.temporal import as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AchievementRule:
    id: str
    name: str
    description: str
    icon: str
    metric: Callable[[Overview], float]
    threshold: float
    scaled: bool = True

    def qualifies(self, overview: Overview) -> bool:
        return self.metric(overview) >= self.threshold

    def progress(self, overview: Overview) -> float:
        """Percent toward the threshold, capped at 100, 2 decimal places."""
        if not self.scaled:
            return 100.0
        value = self.metric(overview) / self.threshold * 100
        return round(min(100.0, value), 2)


ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule(
        id="early-bird",
        name="🐦 Early Bird",
        description="Completed 5+ lessons",
        icon="🐦",
        metric=lambda o: o.total_lessons_completed,
        threshold=5,
    ),
    AchievementRule(
        id="starter",
        name="🎓 Course Starter",
        description="Enrolled in 1 course",
        icon="🎓",
        metric=lambda o: o.total_courses_enrolled,
        threshold=1,
        scaled=False,
    ),
    AchievementRule(
        id="learner",
        name="📚 Learner",
        description="Enrolled in 3+ courses",
        icon="📚",
        metric=lambda o: o.total_courses_enrolled,
        threshold=3,
    ),
    AchievementRule(
        id="completer",
        name="✅ Course Completer",
        description="Completed 1 course",
        icon="✅",
        metric=lambda o: o.total_courses_completed,
        threshold=1,
        scaled=False,
    ),
    AchievementRule(
        id="quiz-master",
        name="⭐ Quiz Master",
        description="Average quiz score above 80%",
        icon="⭐",
        metric=lambda o: o.average_quiz_score,
        threshold=80,
        scaled=False,
    ),
    AchievementRule(
        id="on-fire",
        name="🔥 On Fire",
        description="7 day study streak",
        icon="🔥",
        metric=lambda o: o.current_streak,
        threshold=7,
    ),
    AchievementRule(
        id="warrior",
        name="⚔️ Study Warrior",
        description="100+ hours of study",
        icon="⚔️",
        metric=lambda o: o.total_study_time,
        threshold=6000,  # 100 hours in minutes
    ),
)


def evaluate_achievements(
    overview: Overview,
    course_progress: Sequence[CourseProgressEntry],
    *,
    now: datetime | None = None,
    rules: Sequence[AchievementRule] = ACHIEVEMENT_RULES,
) -> list[Achievement]:
    """Return every badge whose rule currently qualifies, in rule order.

    course_progress is accepted for per-course rules; none of the
    current rules read it.
    """
    try:
        unlocked_at = as_utc(now or datetime.now(UTC)).isoformat()
        return [
            Achievement(
                id=rule.id,
                name=rule.name,
                description=rule.description,
                icon=rule.icon,
                progress=rule.progress(overview),
                unlocked_date=unlocked_at,
            )
            for rule in rules
            if rule.qualifies(overview)
        ]
    except Exception:
        logger.exception("Achievement evaluation failed")
        return []
